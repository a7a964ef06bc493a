"""Sentinel scanner for model replies.

The reply is free-form text with three kinds of delimited regions:

    <think> ... </think>                       discarded
    === EXPLAIN START === ... === EXPLAIN END ===   explanation
    === <path> === START === ... === <path> === END ===   file body

The scanner is a single forward pass over lines. Each line is classified by
its trimmed form, then fed to a small state machine. Region bodies keep the
untrimmed line. Anything outside a region is collected as trailing text.

A file-close marker is matched regardless of the path it names, so a file
body cannot contain a line that is itself a close marker.
"""

import logging
from dataclasses import dataclass
from enum import Enum

from llmpal.domain.errors import FormatError
from llmpal.domain.models.parsed_reply import FileSection, ParsedReply

logger = logging.getLogger(__name__)

THINK_OPEN = "<think>"
THINK_CLOSE = "</think>"
EXPLAIN_OPEN = "=== EXPLAIN START ==="
EXPLAIN_CLOSE = "=== EXPLAIN END ==="
FILE_PREFIX = "=== "
FILE_OPEN_SUFFIX = " === START ==="
FILE_CLOSE_SUFFIX = " === END ==="


class ParserState(str, Enum):
    NORMAL = "normal"
    IN_THINK = "in_think"
    IN_EXPLAIN = "in_explain"
    IN_FILE = "in_file"


class LineKind(str, Enum):
    """Classification of a single line, in precedence order."""

    THINK_OPEN = "think_open"
    THINK_CLOSE = "think_close"
    EXPLAIN_OPEN = "explain_open"
    EXPLAIN_CLOSE = "explain_close"
    FILE_OPEN = "file_open"
    FILE_CLOSE = "file_close"
    TEXT = "text"


@dataclass(frozen=True, slots=True)
class ClassifiedLine:
    kind: LineKind
    path: str | None = None


def _between(line: str, suffix: str) -> str | None:
    # The prefix and suffix must not overlap.
    if len(line) < len(FILE_PREFIX) + len(suffix):
        return None
    if line.startswith(FILE_PREFIX) and line.endswith(suffix):
        return line[len(FILE_PREFIX) : len(line) - len(suffix)]
    return None


def classify_line(line: str) -> ClassifiedLine:
    """Classify a line by its trimmed form.

    The file-open path is everything between the two delimiters, taken
    literally with no unescaping.
    """
    trimmed = line.strip()

    if trimmed.startswith(THINK_OPEN):
        return ClassifiedLine(LineKind.THINK_OPEN)
    if trimmed.startswith(THINK_CLOSE):
        return ClassifiedLine(LineKind.THINK_CLOSE)
    if trimmed == EXPLAIN_OPEN:
        return ClassifiedLine(LineKind.EXPLAIN_OPEN)
    if trimmed == EXPLAIN_CLOSE:
        return ClassifiedLine(LineKind.EXPLAIN_CLOSE)

    path = _between(trimmed, FILE_OPEN_SUFFIX)
    if path is not None:
        return ClassifiedLine(LineKind.FILE_OPEN, path)
    if _between(trimmed, FILE_CLOSE_SUFFIX) is not None:
        return ClassifiedLine(LineKind.FILE_CLOSE)

    return ClassifiedLine(LineKind.TEXT)


def split_lines(text: str) -> list[str]:
    """Split on `\\n`, dropping one trailing `\\r` per line.

    A terminating newline does not produce a final empty line. Other Unicode
    line separators are content, not breaks.
    """
    lines = text.split("\n")
    if lines and lines[-1] == "":
        lines.pop()
    return [line[:-1] if line.endswith("\r") else line for line in lines]


class ResponseParser:
    """Incremental line-at-a-time scanner.

    Think and explain blocks remember the state they interrupted, so a block
    opened inside a file section hands control back to that section when it
    closes.

    Usage:
        parser = ResponseParser()
        for line in split_lines(text):
            parser.feed(line)
        reply = parser.finish()
    """

    def __init__(self) -> None:
        self._state = ParserState.NORMAL
        self._return_to: list[ParserState] = []
        self._explanation: list[str] = []
        self._trailing: list[str] = []
        self._files: list[FileSection] = []
        self._current_path = ""
        self._current_lines: list[str] = []

    @property
    def state(self) -> ParserState:
        return self._state

    def feed(self, line: str) -> None:
        classified = classify_line(line)
        kind = classified.kind

        if self._state == ParserState.IN_THINK:
            if kind == LineKind.THINK_CLOSE:
                self._state = self._return_to.pop()
            return

        if kind == LineKind.THINK_OPEN:
            self._enter(ParserState.IN_THINK)
            return
        if kind == LineKind.THINK_CLOSE:
            logger.debug("Ignoring think-close outside a think block")
            return

        if kind == LineKind.EXPLAIN_OPEN:
            if self._state != ParserState.IN_EXPLAIN:
                self._enter(ParserState.IN_EXPLAIN)
            return
        if kind == LineKind.EXPLAIN_CLOSE:
            if self._state == ParserState.IN_EXPLAIN:
                self._state = self._return_to.pop()
            return

        if self._state == ParserState.IN_EXPLAIN:
            self._explanation.append(line)
            return

        if kind == LineKind.FILE_OPEN:
            if self._state == ParserState.IN_FILE:
                logger.debug(f"File section '{self._current_path}' restarted by '{classified.path}'")
            self._state = ParserState.IN_FILE
            self._current_path = classified.path or ""
            self._current_lines = []
            return

        if kind == LineKind.FILE_CLOSE:
            if self._state == ParserState.IN_FILE:
                self._close_file()
            else:
                logger.debug("Ignoring file-close outside a file section")
            return

        if self._state == ParserState.IN_FILE:
            self._current_lines.append(line)
        else:
            self._trailing.append(line)

    def finish(self) -> ParsedReply:
        """Return the parsed reply.

        Raises:
            FormatError: If input ended inside a file section
        """
        if ParserState.IN_FILE in (self._state, *self._return_to):
            raise FormatError("unexpected end of response while parsing a file section")
        return ParsedReply(
            explanation="\n".join(self._explanation),
            files=list(self._files),
            trailing="\n".join(self._trailing),
        )

    def _enter(self, state: ParserState) -> None:
        self._return_to.append(self._state)
        self._state = state

    def _close_file(self) -> None:
        if self._current_path:
            self._files.append(
                FileSection(path=self._current_path, content="\n".join(self._current_lines))
            )
        else:
            logger.debug("Discarding file section with an empty path")
        self._current_path = ""
        self._current_lines = []
        self._state = ParserState.NORMAL


def parse_reply(text: str) -> ParsedReply:
    """Parse a complete reply in one pass.

    Raises:
        FormatError: If a file section is left open at end of input
    """
    parser = ResponseParser()
    for line in split_lines(text):
        parser.feed(line)
    return parser.finish()
