"""Tests for the reply scanner."""

import pytest

from llmpal.domain.errors import FormatError
from llmpal.domain.parsing.response_parser import (
    LineKind,
    ParserState,
    ResponseParser,
    classify_line,
    parse_reply,
    split_lines,
)


class TestClassifyLine:
    def test_think_markers_match_by_prefix(self):
        assert classify_line("<think>").kind == LineKind.THINK_OPEN
        assert classify_line("<think> pondering").kind == LineKind.THINK_OPEN
        assert classify_line("  </think>").kind == LineKind.THINK_CLOSE

    def test_explain_markers_match_exactly_after_trim(self):
        assert classify_line("  === EXPLAIN START ===  ").kind == LineKind.EXPLAIN_OPEN
        assert classify_line("=== EXPLAIN END ===").kind == LineKind.EXPLAIN_CLOSE
        assert classify_line("=== EXPLAIN START === now").kind != LineKind.EXPLAIN_OPEN

    def test_file_open_extracts_literal_path(self):
        classified = classify_line("=== src/a b.py === START ===")
        assert classified.kind == LineKind.FILE_OPEN
        assert classified.path == "src/a b.py"

    def test_file_close_matches_any_path(self):
        assert classify_line("=== whatever === END ===").kind == LineKind.FILE_CLOSE

    def test_plain_text(self):
        assert classify_line("def main():").kind == LineKind.TEXT
        assert classify_line("").kind == LineKind.TEXT

    def test_delimiters_must_not_overlap(self):
        assert classify_line("=== START ===").kind == LineKind.TEXT


class TestSplitLines:
    def test_strips_carriage_returns(self):
        assert split_lines("a\r\nb\r\n") == ["a", "b"]

    def test_final_newline_does_not_add_empty_line(self):
        assert split_lines("a\n") == ["a"]
        assert split_lines("a\n\n") == ["a", ""]

    def test_empty_text(self):
        assert split_lines("") == []


class TestParseReply:
    def test_explanation_and_file(self):
        reply = parse_reply(
            "=== EXPLAIN START ===\n"
            "Added g\n"
            "=== EXPLAIN END ===\n"
            "=== a.py === START ===\n"
            "def f(): pass\n"
            "def g(): pass\n"
            "=== a.py === END ===\n"
        )
        assert reply.explanation == "Added g"
        assert reply.paths == ["a.py"]
        assert reply.files[0].content == "def f(): pass\ndef g(): pass"
        assert reply.trailing == ""

    def test_think_block_is_discarded(self):
        reply = parse_reply(
            "<think>\n"
            "=== evil.txt === START ===\n"
            "x\n"
            "=== evil.txt === END ===\n"
            "</think>\n"
            "=== EXPLAIN START ===\n"
            "ok\n"
            "=== EXPLAIN END ===\n"
        )
        assert reply.files == []
        assert reply.explanation == "ok"

    def test_text_outside_sections_goes_to_trailing(self):
        reply = parse_reply("Sure, here you go\n=== a.py === START ===\nx\n=== a.py === END ===\nBye\n")
        assert reply.trailing == "Sure, here you go\nBye"
        assert reply.paths == ["a.py"]

    def test_file_body_keeps_untrimmed_lines(self):
        reply = parse_reply("=== a.py === START ===\n    indented  \n\n=== a.py === END ===\n")
        assert reply.files[0].content == "    indented  \n"

    def test_crlf_reply(self):
        reply = parse_reply("=== a.txt === START ===\r\nline\r\n=== a.txt === END ===\r\n")
        assert reply.files[0].content == "line"

    def test_empty_file_section(self):
        reply = parse_reply("=== a.txt === START ===\n=== a.txt === END ===\n")
        assert reply.files[0].content == ""

    def test_repeated_path_keeps_both_sections_in_order(self):
        reply = parse_reply(
            "=== a.txt === START ===\none\n=== a.txt === END ===\n"
            "=== a.txt === START ===\ntwo\n=== a.txt === END ===\n"
        )
        assert [f.content for f in reply.files] == ["one", "two"]

    def test_close_with_other_path_still_closes(self):
        reply = parse_reply("=== a.txt === START ===\nx\n=== b.txt === END ===\n")
        assert reply.paths == ["a.txt"]

    def test_file_open_inside_file_restarts_section(self):
        reply = parse_reply(
            "=== a.txt === START ===\nlost\n=== b.txt === START ===\nkept\n=== b.txt === END ===\n"
        )
        assert reply.paths == ["b.txt"]
        assert reply.files[0].content == "kept"

    def test_stray_close_in_normal_state_is_dropped(self):
        reply = parse_reply("=== a.txt === END ===\nhello\n")
        assert reply.files == []
        assert reply.trailing == "hello"

    def test_empty_path_section_is_discarded(self):
        reply = parse_reply("===  === START ===\nx\n===  === END ===\n")
        assert reply.files == []

    def test_think_inside_file_returns_to_file(self):
        reply = parse_reply(
            "=== a.txt === START ===\n"
            "one\n"
            "<think>\n"
            "hmm\n"
            "</think>\n"
            "two\n"
            "=== a.txt === END ===\n"
        )
        assert reply.files[0].content == "one\ntwo"

    def test_explain_inside_file_returns_to_file(self):
        reply = parse_reply(
            "=== a.txt === START ===\n"
            "one\n"
            "=== EXPLAIN START ===\n"
            "note\n"
            "=== EXPLAIN END ===\n"
            "two\n"
            "=== a.txt === END ===\n"
        )
        assert reply.explanation == "note"
        assert reply.files[0].content == "one\ntwo"

    def test_file_markers_inside_explanation_are_text(self):
        reply = parse_reply(
            "=== EXPLAIN START ===\n"
            "=== a.txt === START ===\n"
            "=== EXPLAIN END ===\n"
        )
        assert reply.files == []
        assert reply.explanation == "=== a.txt === START ==="

    def test_only_think_close_ends_think_block(self):
        reply = parse_reply("<think>\n=== EXPLAIN START ===\nx\n=== EXPLAIN END ===\n</think>\nout\n")
        assert reply.explanation == ""
        assert reply.trailing == "out"

    def test_unclosed_file_raises_format_error(self):
        with pytest.raises(FormatError, match="unexpected end of response"):
            parse_reply("=== a.txt === START ===\nx\n")

    def test_unclosed_file_under_think_raises_format_error(self):
        with pytest.raises(FormatError):
            parse_reply("=== a.txt === START ===\nx\n<think>\n")

    def test_unclosed_think_in_normal_state_is_fine(self):
        reply = parse_reply("=== EXPLAIN START ===\nok\n=== EXPLAIN END ===\n<think>\nrest\n")
        assert reply.explanation == "ok"

    def test_empty_reply(self):
        reply = parse_reply("")
        assert reply.explanation == ""
        assert reply.files == []


class TestResponseParserIncremental:
    def test_state_tracks_sections(self):
        parser = ResponseParser()
        assert parser.state == ParserState.NORMAL
        parser.feed("=== a.txt === START ===")
        assert parser.state == ParserState.IN_FILE
        parser.feed("<think>")
        assert parser.state == ParserState.IN_THINK
        parser.feed("</think>")
        assert parser.state == ParserState.IN_FILE
        parser.feed("=== a.txt === END ===")
        assert parser.state == ParserState.NORMAL
        assert parser.finish().paths == ["a.txt"]
