"""Single-run orchestration.

One run is: expand inputs, build prompts and request, one round trip,
parse, guard, then write. Every error is terminal and propagates to the CLI.
"""

import json
import logging
import logging.handlers
import time
from collections.abc import Callable, Iterator
from contextlib import AbstractContextManager, contextmanager, nullcontext
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

from pydantic import BaseModel, Field

from llmpal.application.cost_accountant import CostReport, account
from llmpal.application.materializer import Materializer, quarantine_reply, read_input_files
from llmpal.application.prompt_builder import PromptBuilder, estimate_token_count
from llmpal.application.request_envelope import build_request_for_profile, serialize_request
from llmpal.domain.errors import SafetyViolation
from llmpal.domain.events.observer import NullRunObserver, RunObserver
from llmpal.domain.models.chat_completion import parse_completion
from llmpal.domain.models.model_profile import ModelProfile
from llmpal.domain.parsing.response_parser import parse_reply
from llmpal.domain.providers.chat_provider import ChatProvider
from llmpal.domain.validation.path_guard import PathGuard, expand_inputs

logger = logging.getLogger(__name__)
trace_logger = logging.getLogger("llmpal.trace")

# Held during progress phases; see held_logs.
DOMAIN_LOGGER = "llmpal.domain"

ProgressFactory = Callable[[str], AbstractContextManager[Any]]


def _no_progress(message: str) -> AbstractContextManager[Any]:
    return nullcontext()


@contextmanager
def held_logs(name: str) -> Iterator[None]:
    """Hold records from logger `name` (and its children) until the block exits.

    Used around progress phases so debug lines never interleave with a
    spinner drawing on the same stream. Held records are replayed in order
    on exit, including when the block raises.
    """
    source = logging.getLogger(name)
    buffer = logging.handlers.MemoryHandler(capacity=10_000, flushLevel=logging.CRITICAL + 1, target=None)
    propagate = source.propagate
    source.addHandler(buffer)
    source.propagate = False
    try:
        yield
    finally:
        source.removeHandler(buffer)
        source.propagate = propagate
        for record in buffer.buffer:
            source.handle(record)
        buffer.close()


@dataclass(frozen=True)
class RunRequest:
    """What the user asked for on the command line."""

    instruction: str
    files: list[str] = field(default_factory=list)
    output_path: str | None = None


class RunResult(BaseModel):
    """Outcome of a successful run."""

    explanation: str = ""
    files_written: list[str] = Field(default_factory=list)
    trailing: str = ""
    cost: CostReport | None = None
    provider_name: str | None = None


@dataclass
class RunOrchestrator:
    """Runs one instruction against one model.

    The progress factory wraps the network wait and the parse/guard phase.
    Each wrapped phase exits its context (stopping any indicator) before the
    next phase emits output, on success and on error alike.
    """

    profile: ModelProfile
    provider: ChatProvider
    rules: list[str] = field(default_factory=list)
    observer: RunObserver = field(default_factory=NullRunObserver)
    progress: ProgressFactory = _no_progress
    quarantine_dir: Path | None = None
    clock: Callable[[], float] = time.monotonic

    def run(self, request: RunRequest) -> RunResult:
        """Execute the run.

        Raises:
            StorageError: If an input cannot be read (before any request) or an output cannot be written
            ConfigurationError: If the provider is misconfigured
            SerializeError: If the request body cannot be serialized
            TransportError: If the round trip fails
            FormatError: If the response or reply is malformed
            SafetyViolation: If the reply targets a path outside the allow-list
        """
        input_files, allowed = expand_inputs(request.files, request.output_path)
        contents = read_input_files(input_files, request.output_path)

        prompts = (
            PromptBuilder()
            .with_allowed_paths(allowed)
            .with_rules(self.rules)
            .with_instruction(request.instruction)
            .with_input_files(contents)
            .with_output_path(request.output_path)
            .build()
        )
        system_prompt = prompts["system_prompt"]
        user_prompt = prompts["user_prompt"]

        envelope = build_request_for_profile(self.profile, system_prompt, user_prompt)
        body = serialize_request(envelope)

        trace_logger.debug("=== RAW LLM REQUEST ===")
        trace_logger.debug(envelope.model_dump_json(indent=2, exclude_none=True))
        logger.debug("=== SYSTEM PROMPT ===")
        logger.debug(system_prompt)
        logger.debug("=== USER PROMPT ===")
        logger.debug(user_prompt)

        self.provider.validate()
        self.observer.on_status(self._banner(system_prompt, user_prompt))

        started = self.clock()
        with held_logs(DOMAIN_LOGGER), self.progress("Waiting for LLM response"):
            payload = self.provider.complete(body)
        elapsed = self.clock() - started

        trace_logger.debug("=== RAW LLM RESPONSE ===")
        trace_logger.debug(json.dumps(payload, indent=2, ensure_ascii=False))

        completion = parse_completion(payload)
        raw_reply = completion.content

        logger.debug("=== RAW LLM OUTPUT ===")
        logger.debug(raw_reply)

        violation: SafetyViolation | None = None
        with held_logs(DOMAIN_LOGGER), self.progress("Analyzing LLM response"):
            reply = parse_reply(raw_reply)
            try:
                PathGuard(allowed).check(reply.files)
            except SafetyViolation as e:
                violation = e

        if violation is not None:
            # The dump is written after the indicator has stopped.
            violation.quarantine_path = self._quarantine(raw_reply)
            raise violation

        if reply.trailing:
            logger.debug(f"Ignoring {len(reply.trailing.splitlines())} line(s) outside reply sections")

        written = Materializer(self.observer).apply(reply.explanation, reply.files)

        report = account(
            completion.prompt_tokens,
            completion.completion_tokens,
            self.profile,
            elapsed,
        )
        if report is not None:
            self.observer.on_status(report.summary_line(self.profile.describe(completion.provider)))
            warning = report.truncation_warning()
            if warning:
                self.observer.on_warning(warning)

        return RunResult(
            explanation=reply.explanation,
            files_written=written,
            trailing=reply.trailing,
            cost=report,
            provider_name=completion.provider,
        )

    def _banner(self, system_prompt: str, user_prompt: str) -> str:
        estimated = estimate_token_count(system_prompt) + estimate_token_count(user_prompt)
        return (
            f"Model: {self.profile.describe(self.profile.provider)} | "
            f"URL: {self.profile.endpoint} | "
            f"Cost: ${self.profile.prompt_cost:.4f}/1M prompt, "
            f"${self.profile.completion_cost:.4f}/1M completion | "
            f"Estimated input tokens: {estimated}"
        )

    def _quarantine(self, raw_reply: str) -> str | None:
        try:
            path = quarantine_reply(raw_reply, self.quarantine_dir)
        except (OSError, UnicodeEncodeError) as e:
            self.observer.on_warning(f"Failed to save dump: {e}")
            return None
        logger.debug(f"Raw reply quarantined to {path}")
        return str(path)
