import logging
import time
from collections.abc import Iterable
from pathlib import Path

from llmpal.domain.constants import QUARANTINE_PREFIX, QUARANTINE_SUFFIX
from llmpal.domain.errors import StorageError
from llmpal.domain.events.observer import NullRunObserver, RunObserver
from llmpal.domain.models.parsed_reply import FileSection

logger = logging.getLogger(__name__)


def read_input_files(paths: Iterable[str], output_path: str | None = None) -> dict[str, str]:
    """
    Read every input file that will be embedded in the user prompt.

    The output path is skipped: it may not exist yet and its content is
    never sent.

    Returns:
        dict mapping path -> content, in input order, line endings untouched

    Raises:
        StorageError: On the first file that cannot be read
    """
    contents: dict[str, str] = {}
    for path in paths:
        if output_path is not None and path == output_path:
            continue
        try:
            with open(path, encoding="utf-8", newline="") as f:
                contents[path] = f.read()
        except (OSError, UnicodeDecodeError) as e:
            raise StorageError(f"cannot read file '{path}': {e}", path=path) from e
    return contents


def quarantine_reply(raw_reply: str, directory: Path | None = None) -> Path:
    """
    Dump a rejected raw reply to `dump_<millis>.log`.

    The identifier is the current Unix time in milliseconds, bumped until no
    file of that name exists, so dumps never overwrite each other.

    Raises:
        OSError: If the dump cannot be written
    """
    directory = directory if directory is not None else Path(".")
    stamp = time.time_ns() // 1_000_000
    while True:
        candidate = directory / f"{QUARANTINE_PREFIX}{stamp}{QUARANTINE_SUFFIX}"
        try:
            with open(candidate, "x", encoding="utf-8", newline="") as f:
                f.write(raw_reply)
            return candidate
        except FileExistsError:
            stamp += 1


class Materializer:
    """Surfaces the explanation, then writes approved files in order.

    There is no transaction across files: if a write fails, files already
    written stay written. The all-or-nothing check is the PathGuard, which
    must run before this.
    """

    def __init__(self, observer: RunObserver | None = None) -> None:
        self.observer = observer or NullRunObserver()

    def apply(self, explanation: str, files: Iterable[FileSection]) -> list[str]:
        """
        Emit the explanation once and write each file, overwriting.

        Args:
            explanation: Model explanation; skipped when empty
            files: Approved sections in emission order; a repeated path is
                written again, so its last body wins

        Returns:
            Paths written, in write order

        Raises:
            StorageError: On the first write failure, carrying the paths
                written before it
        """
        if explanation:
            self.observer.on_explanation(explanation)

        written: list[str] = []
        for section in files:
            try:
                write_file(section.path, section.content)
            except StorageError as e:
                raise StorageError(e.message, path=e.path, written=written) from e
            written.append(section.path)
        return written


def write_file(path: str, content: str) -> None:
    """Write content exactly as given, creating parent directories.

    Raises:
        StorageError: If the directory or file cannot be written
    """
    file_path = Path(path)
    try:
        file_path.parent.mkdir(parents=True, exist_ok=True)
        with open(file_path, "w", encoding="utf-8", newline="") as f:
            f.write(content)
    except (OSError, UnicodeEncodeError) as e:
        raise StorageError(f"writing file '{path}': {e}", path=path) from e
    logger.debug(f"Wrote {len(content)} characters to {path}")
