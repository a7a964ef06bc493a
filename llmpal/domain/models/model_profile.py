"""Resolved model profile for a single run."""

from pydantic import BaseModel, ConfigDict

from llmpal.domain.constants import (
    DEFAULT_MAX_TOKENS,
    DEFAULT_RESPONSE_TIMEOUT,
    OPEN_ROUTER_URL,
)


class ModelProfile(BaseModel):
    """Immutable model settings resolved once at startup.

    Costs are USD per million tokens. `api_url` of None means the built-in
    OpenRouter endpoint, which is also what switches on the privacy directive
    in the request body.
    """

    model_config = ConfigDict(frozen=True)

    code: str
    model: str
    prompt_cost: float
    completion_cost: float
    api_url: str | None = None
    api_key: str | None = None
    max_tokens: int | None = None
    provider: str | None = None
    timeout: float | None = None

    @property
    def endpoint(self) -> str:
        return self.api_url or OPEN_ROUTER_URL

    @property
    def is_default_endpoint(self) -> bool:
        return self.api_url is None

    @property
    def max_output_tokens(self) -> int:
        return self.max_tokens if self.max_tokens is not None else DEFAULT_MAX_TOKENS

    @property
    def response_timeout(self) -> float:
        return self.timeout if self.timeout is not None else DEFAULT_RESPONSE_TIMEOUT

    def describe(self, provider_name: str | None) -> str:
        """Render `model [provider: name]`, or the bare model id without a name."""
        if provider_name:
            return f"{self.model} [provider: {provider_name}]"
        return self.model
