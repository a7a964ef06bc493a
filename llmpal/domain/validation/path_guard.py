"""
Allow-list enforcement for model-proposed writes.

Provides:
- Expansion of user inputs (files and directories) into the input file list
- The fixed AllowedFileSet for the run
- The PathGuard check applied to a parsed reply before anything is written

Paths are compared as exact strings. There is no normalization, no
canonicalization and no prefix logic: `./a.txt` and `a.txt` are different
paths, and only the spelling the user typed (or the directory listing
produced) is allowed.
"""

import os
from collections.abc import Iterable, Iterator
from dataclasses import dataclass, field

from llmpal.domain.errors import SafetyViolation, StorageError
from llmpal.domain.models.parsed_reply import FileSection


@dataclass(frozen=True)
class AllowedFileSet:
    """Exact set of paths the model may write, fixed before any request.

    `ordered` keeps first-seen order so the system prompt lists paths
    deterministically; membership uses the frozen set.
    """

    ordered: tuple[str, ...] = ()
    members: frozenset[str] = field(init=False, repr=False, compare=False)

    def __post_init__(self) -> None:
        object.__setattr__(self, "members", frozenset(self.ordered))

    @classmethod
    def of(cls, paths: Iterable[str]) -> "AllowedFileSet":
        return cls(tuple(dict.fromkeys(paths)))

    def __contains__(self, path: object) -> bool:
        return path in self.members

    def __iter__(self) -> Iterator[str]:
        return iter(self.ordered)

    def __len__(self) -> int:
        return len(self.ordered)


def list_directory_files(directory: str) -> list[str]:
    """
    List the regular files directly inside a directory.

    Subdirectories are skipped, not descended into. Entries are joined onto
    the directory spelling the user gave and sorted for a stable order.

    Raises:
        StorageError: If the directory cannot be read
    """
    try:
        names = sorted(os.listdir(directory))
    except OSError as e:
        raise StorageError(f"Cannot read directory '{directory}': {e}", path=directory) from e

    entries = []
    for name in names:
        entry = os.path.join(directory, name)
        if os.path.isdir(entry):
            continue
        entries.append(entry)
    return entries


def expand_inputs(files: Iterable[str], output_path: str | None) -> tuple[list[str], AllowedFileSet]:
    """
    Expand user inputs into the input file list and the allow-list.

    Args:
        files: Paths given on the command line, files or directories
        output_path: Optional single output file the model may create

    Returns:
        (input_files, allowed) where input_files keeps command-line order
        and allowed additionally contains output_path

    Raises:
        StorageError: If a listed directory cannot be read
    """
    input_files: list[str] = []
    for path in files:
        if os.path.isdir(path):
            input_files.extend(list_directory_files(path))
        else:
            input_files.append(path)

    allowed = list(input_files)
    if output_path is not None:
        allowed.append(output_path)

    return list(dict.fromkeys(input_files)), AllowedFileSet.of(allowed)


class PathGuard:
    """Checks every parsed file path against the allow-list."""

    def __init__(self, allowed: AllowedFileSet) -> None:
        self.allowed = allowed

    def find_violation(self, files: Iterable[FileSection]) -> str | None:
        """Return the first path not in the allow-list, or None if all match."""
        for section in files:
            if section.path not in self.allowed:
                return section.path
        return None

    def check(self, files: Iterable[FileSection]) -> None:
        """
        Raise on the first disallowed path.

        The whole batch is rejected; callers must not write any file from it.

        Raises:
            SafetyViolation: Naming the first offending path
        """
        offending = self.find_violation(files)
        if offending is not None:
            raise SafetyViolation(offending)
