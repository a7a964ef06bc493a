"""Prompt builder for the system and user prompts.

The wording of the system prompt is the contract the reply parser relies on:
it shows the model the exact EXPLAIN and file sentinels to emit.
"""
from collections.abc import Iterable, Mapping
from typing import Self

SYSTEM_PREAMBLE = (
    "Follow user instructions. When asked to make changes, apply changes to given files. \n"
    "When asked to create a file, create it. When asked questions, just answer them without creating or modifying files.\n"
    "When changing files, output an explanation with brief and blunt information about changes.\n"
    "Then output modified files. Always output full contents of changed files.\n"
    "Never propose to output files other than the allowed ones:\n"
)

SYSTEM_GUIDELINES = (
    "When the task requires creating files and you are not allowed to create them, mention the issue in the comments section.\n"
    "When asked to create a new file, output to a new file or extract something from other files - only use allowed files.\n"
    "When asked to explain code, answer questions, suggest changes or improvements - output only in the EXPLAIN section without modifying files. \n"
    "Never explain stuff by adding comments to the code unless directly asked to do so.\n"
    "Do not make unnecessary changes in files. Do not add code comments when not requested. Omit files that need no changes. \n"
    "Always use defined output format. Do not output additional information outside of defined schema. \n"
    "Do not change file formatting (spaces, tabs, etc.). New code should have formatting and style consistent with existing code.\n\n"
)

OUTPUT_FORMAT_EXAMPLE = (
    "# Output format - example\n"
    "=== EXPLAIN START ===\n"
    "Brief explanations and answers to questions\n"
    "=== EXPLAIN END ===\n"
    "=== file1.txt === START ===\n"
    "edited file\n"
    "=== file1.txt === END ===\n"
    "=== file2.txt === START ===\n"
    "edited file\n"
    "=== file2.txt === END ===\n\n"
)

RULES_START = "=== RULES START ===\n"
RULES_END = "=== RULES END ===\n"

INSTRUCTIONS_START = "=== USER INSTRUCTIONS START\n"
INSTRUCTIONS_END = "\n=== USER INSTRUCTIONS END\n\n"
INPUT_FILES_HEADER = "# User input files:\n"


def render_file_block(path: str, content: str) -> str:
    """Wrap file content in the same start/end markers the model must emit."""
    return f"=== {path} === START ===\n{content}\n=== {path} === END ===\n"


class PromptBuilder:
    """Builds the system and user prompts for a run.

    Supports a fluent interface:

        prompts = (
            PromptBuilder()
            .with_allowed_paths(allowed)
            .with_rules(rules)
            .with_instruction("Add tests")
            .with_input_files({"src/app.py": "..."})
            .with_output_path(None)
            .build()
        )
    """

    def __init__(self) -> None:
        self._allowed_paths: list[str] = []
        self._rules: list[str] = []
        self._instruction: str = ""
        self._input_files: dict[str, str] = {}
        self._output_path: str | None = None

    def with_allowed_paths(self, paths: Iterable[str]) -> Self:
        """Set the paths listed as writable in the system prompt."""
        self._allowed_paths = list(paths)
        return self

    def with_rules(self, rules: Iterable[str] | None) -> Self:
        """Set the extra rule lines appended to the system prompt."""
        self._rules = list(rules) if rules else []
        return self

    def with_instruction(self, instruction: str) -> Self:
        """Set the user instruction (embedded once, verbatim)."""
        self._instruction = instruction
        return self

    def with_input_files(self, files: Mapping[str, str]) -> Self:
        """Set input file contents keyed by path, in prompt order."""
        self._input_files = dict(files)
        return self

    def with_output_path(self, output_path: str | None) -> Self:
        """Set the output path; its content is never embedded."""
        self._output_path = output_path
        return self

    def build(self) -> dict[str, str]:
        """Build both prompts.

        Returns:
            dict with keys "system_prompt" and "user_prompt"
        """
        return {
            "system_prompt": self.build_system_prompt(),
            "user_prompt": self.build_user_prompt(),
        }

    def build_system_prompt(self) -> str:
        parts = [SYSTEM_PREAMBLE]
        parts.extend(f" {path}\n" for path in self._allowed_paths)
        parts.append(SYSTEM_GUIDELINES)
        parts.append(OUTPUT_FORMAT_EXAMPLE)

        if self._rules:
            parts.append(RULES_START)
            parts.extend(f"{rule}\n" for rule in self._rules)
            parts.append(RULES_END)

        return "".join(parts)

    def build_user_prompt(self) -> str:
        parts = [INSTRUCTIONS_START, self._instruction, INSTRUCTIONS_END, INPUT_FILES_HEADER]

        for path, content in self._input_files.items():
            # The model rewrites the output file; sending it would duplicate it.
            if self._output_path is not None and path == self._output_path:
                continue
            parts.append(render_file_block(path, content))

        return "".join(parts)


def estimate_token_count(text: str) -> int:
    """Rough token estimate: one token per four characters."""
    return len(text) // 4
