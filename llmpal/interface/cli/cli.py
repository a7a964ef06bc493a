import logging
import sys
from pathlib import Path

import click
from pydantic import BaseModel

from llmpal.application.config_loader import load_config
from llmpal.application.config_models import resolve_api_key, resolve_model_profile
from llmpal.application.run_orchestrator import RunOrchestrator, RunRequest
from llmpal.domain.errors import LlmpalError, SafetyViolation, StorageError
from llmpal.domain.events.console_observer import ConsoleRunObserver
from llmpal.domain.events.observer import CollectingRunObserver
from llmpal.domain.providers.http_chat_provider import HttpChatProvider
from llmpal.interface.cli.output_models import RunOutput
from llmpal.interface.cli.spinner import spinner

logger = logging.getLogger(__name__)

EXAMPLES = """\b
Examples:
  llmpal -f src/main.py 'Generate unit tests'
  llmpal -f src/main.py -f src/config.py -o README.md 'Create a README.md file'
  llmpal -f src/main.py 'Explain what this code is doing'
  llmpal -o src/countries.json 'Create a JSON file with a list of G20 countries. Fields: name, code.'
"""

_log_handler: logging.Handler | None = None


def _configure_logging(verbose: bool, trace: bool) -> None:
    """Route llmpal debug output to stderr.

    --verbose opens the `llmpal` logger (prompts, raw reply); --trace opens
    `llmpal.trace` (request and response JSON). Each works without the other.
    """
    global _log_handler
    root = logging.getLogger("llmpal")
    if _log_handler is not None:
        root.removeHandler(_log_handler)

    _log_handler = logging.StreamHandler(sys.stderr)
    _log_handler.setFormatter(logging.Formatter("::%(levelname)s:: %(message)s"))
    root.addHandler(_log_handler)
    root.propagate = False
    root.setLevel(logging.DEBUG if verbose else logging.WARNING)
    logging.getLogger("llmpal.trace").setLevel(logging.DEBUG if trace else logging.WARNING)


def _json_emit(model: BaseModel) -> None:
    # Single-line JSON, omit None fields.
    click.echo(model.model_dump_json(exclude_none=True), nl=True)


@click.command(
    help="Send an instruction and files to an LLM and apply the files it returns.",
    epilog=EXAMPLES,
)
@click.option(
    "-f",
    "--file",
    "files",
    multiple=True,
    metavar="FILE",
    help="Input files to work with. They will be sent to the LLM, and might be modified.",
)
@click.option("-v", "--verbose", is_flag=True, help="Logs LLM prompt and response to stderr.")
@click.option(
    "-o",
    "--output",
    metavar="OUTPUT",
    help="Path to output file. The LLM will be allowed to write to it.",
)
@click.option("--trace", is_flag=True, help="Logs the full JSON sent and received during API calls to stderr.")
@click.option(
    "-m",
    "--model",
    metavar="MODEL",
    help="Use a different model configured in the .llmpal config file.",
)
@click.option("--json", "json_output", is_flag=True, help="Emit machine-readable JSON on stdout.")
@click.argument("instruction", metavar="INSTRUCTIONS")
def cli(
    files: tuple[str, ...],
    verbose: bool,
    output: str | None,
    trace: bool,
    model: str | None,
    json_output: bool,
    instruction: str,
) -> None:
    _configure_logging(verbose, trace)

    observer = CollectingRunObserver() if json_output else ConsoleRunObserver()

    try:
        config = load_config(project_root=Path.cwd())
        profile = resolve_model_profile(config, model)
        api_key = resolve_api_key(profile)

        provider = HttpChatProvider(
            api_url=profile.endpoint,
            api_key=api_key,
            response_timeout=profile.response_timeout,
        )
        orchestrator = RunOrchestrator(
            profile=profile,
            provider=provider,
            rules=list(config.rules),
            observer=observer,
        )
        if not json_output:
            orchestrator.progress = spinner

        result = orchestrator.run(RunRequest(instruction=instruction, files=list(files), output_path=output))
    except LlmpalError as e:
        logger.debug(f"Run failed: {type(e).__name__}")
        if json_output:
            _json_emit(
                RunOutput(
                    exit_code=1,
                    error=str(e),
                    explanation="\n".join(observer.explanations) or None,
                    files=e.written if isinstance(e, StorageError) else [],
                    warnings=list(observer.warnings),
                    quarantine_path=e.quarantine_path if isinstance(e, SafetyViolation) else None,
                )
            )
            raise click.exceptions.Exit(1)
        raise click.ClickException(str(e)) from e

    if json_output:
        _json_emit(
            RunOutput(
                exit_code=0,
                explanation=result.explanation or None,
                files=result.files_written,
                trailing=result.trailing or None,
                warnings=list(observer.warnings),
                usage=result.cost,
            )
        )


def main() -> None:
    cli(prog_name="llmpal")


if __name__ == "__main__":
    main()
