"""Domain-level exceptions for llmpal.

Every error is terminal for a run: the CLI reports the message and exits
non-zero. None of them is retried.
"""


class LlmpalError(Exception):
    """Base class for all run-terminating errors."""

    def __init__(self, message: str, *, path: str | None = None) -> None:
        super().__init__(message)
        self.message = message
        self.path = path

    def __str__(self) -> str:
        return self.message


class ConfigurationError(LlmpalError):
    """Raised when configuration is unreadable or no credential can be resolved."""

    pass


class SerializeError(LlmpalError):
    """Raised when the request body cannot be serialized to JSON."""

    def __str__(self) -> str:
        return f"Failed to serialize JSON: {self.message}"


class TransportError(LlmpalError):
    """Raised when the request fails to send, returns non-2xx, or is not JSON."""

    def __init__(self, message: str, *, status_code: int | None = None, body: str | None = None) -> None:
        super().__init__(message)
        self.status_code = status_code
        self.body = body


class FormatError(LlmpalError):
    """Raised when the reply lacks an expected field or ends inside a file section."""

    pass


class SafetyViolation(LlmpalError):
    """Raised when the model proposes a write outside the allow-list.

    `path` names the offending file; `quarantine_path` is where the raw reply
    was dumped, or None if the dump itself could not be written.
    """

    def __init__(self, path: str, *, quarantine_path: str | None = None) -> None:
        super().__init__(f"attempting to write to disallowed file: {path}", path=path)
        self.quarantine_path = quarantine_path


class StorageError(LlmpalError):
    """Raised when an input file cannot be read or an approved file cannot be written.

    `written` lists the files already written before a failed write; they
    stay on disk.
    """

    def __init__(self, message: str, *, path: str | None = None, written: list[str] | None = None) -> None:
        super().__init__(message, path=path)
        self.written = list(written) if written else []
