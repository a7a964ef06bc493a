"""Token, cost and throughput telemetry from usage counters."""

from pydantic import BaseModel

from llmpal.domain.models.model_profile import ModelProfile

TOKENS_PER_RATE_UNIT = 1_000_000


class CostReport(BaseModel):
    """Telemetry for one completed request. Costs are in USD."""

    model_config = {"frozen": True}

    prompt_tokens: int
    completion_tokens: int
    prompt_cost: float
    completion_cost: float
    elapsed_seconds: float
    tokens_per_second: float
    truncated: bool
    max_output_tokens: int

    @property
    def total_tokens(self) -> int:
        return self.prompt_tokens + self.completion_tokens

    @property
    def total_cost(self) -> float:
        return self.prompt_cost + self.completion_cost

    def summary_line(self, model_label: str) -> str:
        return (
            f"Model: {model_label} | "
            f"Prompt tokens: {self.prompt_tokens} (${self.prompt_cost:.4f}) | "
            f"Completion tokens: {self.completion_tokens} (${self.completion_cost:.4f}) | "
            f"Total tokens: {self.total_tokens} (${self.total_cost:.4f}) | "
            f"Time: {self.elapsed_seconds:.2f}s | "
            f"Speed: {self.tokens_per_second:.2f} tokens/s"
        )

    def truncation_warning(self) -> str | None:
        if not self.truncated:
            return None
        return (
            f"Completion tokens ({self.completion_tokens}) equal or exceed max token limit "
            f"({self.max_output_tokens}). Output might be missing or incomplete."
        )


def account(
    prompt_tokens: int | None,
    completion_tokens: int | None,
    profile: ModelProfile,
    elapsed_seconds: float,
) -> CostReport | None:
    """
    Derive telemetry when both usage counters are present.

    Returns None when either counter is missing; that is not an error. A
    non-positive elapsed time reports a speed of 0.
    """
    if prompt_tokens is None or completion_tokens is None:
        return None

    prompt_cost = prompt_tokens * profile.prompt_cost / TOKENS_PER_RATE_UNIT
    completion_cost = completion_tokens * profile.completion_cost / TOKENS_PER_RATE_UNIT
    total_tokens = prompt_tokens + completion_tokens
    tokens_per_second = total_tokens / elapsed_seconds if elapsed_seconds > 0 else 0.0
    max_output_tokens = profile.max_output_tokens

    return CostReport(
        prompt_tokens=prompt_tokens,
        completion_tokens=completion_tokens,
        prompt_cost=prompt_cost,
        completion_cost=completion_cost,
        elapsed_seconds=elapsed_seconds,
        tokens_per_second=tokens_per_second,
        truncated=completion_tokens >= max_output_tokens,
        max_output_tokens=max_output_tokens,
    )
