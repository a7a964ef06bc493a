"""Reply parsing: sentinel scanner for model output."""

from .response_parser import (
    ParserState,
    ResponseParser,
    classify_line,
    parse_reply,
    split_lines,
)

__all__ = [
    "ParserState",
    "ResponseParser",
    "classify_line",
    "parse_reply",
    "split_lines",
]
