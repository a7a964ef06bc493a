"""Configuration models and model-profile resolution.

Config structure (YAML shown; the JSON form has the same keys):

    models:
      - code: kimi
        model: moonshotai/kimi-k2
        prompt_cost: 0.60
        completion_cost: 2.50
        provider: fireworks        # optional, pins routing
        max_tokens: 16384          # optional
        api_url: https://...       # optional, custom endpoint
        api_key: $MY_TOKEN         # optional, "$VAR" reads the environment
        timeout: 600               # optional, seconds
    rules:
      - Use 4-space indentation

Resolution happens once at startup; the core only sees the frozen
ModelProfile and the rule list.
"""

import os
from collections.abc import Mapping

from pydantic import BaseModel, ConfigDict, Field

from llmpal.domain.constants import (
    API_KEY_ENV_VAR,
    DEFAULT_COMPLETION_COST,
    DEFAULT_MODEL,
    DEFAULT_PROMPT_COST,
)
from llmpal.domain.errors import ConfigurationError
from llmpal.domain.models.model_profile import ModelProfile


class ModelEntry(BaseModel):
    """One configured model, addressed by its short `code`."""

    model_config = ConfigDict(extra="forbid")

    code: str
    model: str
    prompt_cost: float
    completion_cost: float
    api_url: str | None = None
    api_key: str | None = None
    max_tokens: int | None = Field(default=None, ge=1)
    provider: str | None = None
    timeout: float | None = Field(default=None, gt=0)


class LlmpalConfig(BaseModel):
    """Top-level configuration file."""

    model_config = ConfigDict(extra="forbid")

    models: list[ModelEntry] = Field(default_factory=list)
    rules: list[str] = Field(default_factory=list)

    def selected_code(self, requested: str | None) -> str:
        """Requested code, else the first configured model, else the default model id."""
        if requested is not None:
            return requested
        if self.models:
            return self.models[0].code
        return DEFAULT_MODEL

    def find_model(self, code: str) -> ModelEntry | None:
        for entry in self.models:
            if entry.code == code:
                return entry
        return None


def resolve_env_token(token: str, environ: Mapping[str, str] | None = None) -> str:
    """Replace a `$VAR` token with the variable's value.

    Tokens not starting with `$`, and tokens naming an unset variable, are
    returned unchanged.
    """
    environ = os.environ if environ is None else environ
    if token.startswith("$"):
        return environ.get(token[1:], token)
    return token


def resolve_model_profile(
    config: LlmpalConfig,
    requested: str | None = None,
    environ: Mapping[str, str] | None = None,
) -> ModelProfile:
    """
    Resolve the profile for the requested model code.

    A code missing from the config keeps the code but falls back to the
    default model id, costs and endpoint.
    """
    code = config.selected_code(requested)
    entry = config.find_model(code)

    if entry is None:
        return ModelProfile(
            code=code,
            model=DEFAULT_MODEL,
            prompt_cost=DEFAULT_PROMPT_COST,
            completion_cost=DEFAULT_COMPLETION_COST,
        )

    return ModelProfile(
        code=code,
        model=entry.model,
        prompt_cost=entry.prompt_cost,
        completion_cost=entry.completion_cost,
        api_url=entry.api_url,
        api_key=resolve_env_token(entry.api_key, environ) if entry.api_key is not None else None,
        max_tokens=entry.max_tokens,
        provider=entry.provider,
        timeout=entry.timeout,
    )


def resolve_api_key(profile: ModelProfile, environ: Mapping[str, str] | None = None) -> str:
    """
    Return the profile's key, else the OPENROUTER_API_KEY variable.

    Raises:
        ConfigurationError: If neither is set
    """
    environ = os.environ if environ is None else environ
    if profile.api_key:
        return profile.api_key
    key = environ.get(API_KEY_ENV_VAR)
    if key:
        return key
    raise ConfigurationError(f"Missing {API_KEY_ENV_VAR} env variable")
