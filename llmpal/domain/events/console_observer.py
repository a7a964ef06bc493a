"""Console observer for CLI integration."""

import click


class ConsoleRunObserver:
    """Status and warnings to stderr, the explanation to stdout."""

    def on_status(self, message: str) -> None:
        click.echo(message, err=True)

    def on_warning(self, message: str) -> None:
        click.echo(f"Warning: {message}", err=True)

    def on_explanation(self, text: str) -> None:
        click.echo(text)
