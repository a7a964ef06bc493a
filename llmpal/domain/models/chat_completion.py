"""Wire models for the chat-completion endpoint.

Outbound:
    {model, max_tokens, messages: [system, user], provider?: {only?, data_collection?}}

Inbound (only the fields the run consumes):
    choices[0].message.content   required string
    usage.prompt_tokens          optional
    usage.completion_tokens      optional
    provider                     optional, the upstream that served the call
"""

from typing import Any, Literal

from pydantic import BaseModel, Field, ValidationError, field_validator

from llmpal.domain.errors import FormatError


class ChatMessage(BaseModel):
    role: Literal["system", "user"]
    content: str


class ProviderRouting(BaseModel):
    """Routing preferences; `None` fields are left out of the JSON body."""

    only: list[str] | None = None
    data_collection: Literal["deny"] | None = None


class ChatCompletionRequest(BaseModel):
    model: str
    max_tokens: int
    messages: list[ChatMessage]
    provider: ProviderRouting | None = None

    def to_json(self) -> str:
        return self.model_dump_json(exclude_none=True)


class ResponseMessage(BaseModel):
    content: str


class Choice(BaseModel):
    message: ResponseMessage


class Usage(BaseModel):
    """Token counters. A counter that is not a non-negative integer reads as absent."""

    prompt_tokens: int | None = None
    completion_tokens: int | None = None

    @field_validator("prompt_tokens", "completion_tokens", mode="before")
    @classmethod
    def _counter_or_none(cls, v: Any) -> int | None:
        if isinstance(v, bool) or not isinstance(v, int) or v < 0:
            return None
        return v


class ChatCompletion(BaseModel):
    """Validated response from the endpoint.

    Only `choices[0].message.content` is mandatory. Telemetry fields of an
    unexpected type are dropped instead of failing the run.
    """

    choices: list[Choice] = Field(min_length=1)
    usage: Usage | None = None
    provider: str | None = None

    @field_validator("usage", mode="before")
    @classmethod
    def _usage_or_none(cls, v: Any) -> Any:
        return v if isinstance(v, dict) else None

    @field_validator("provider", mode="before")
    @classmethod
    def _provider_or_none(cls, v: Any) -> str | None:
        return v if isinstance(v, str) else None

    @property
    def content(self) -> str:
        return self.choices[0].message.content

    @property
    def prompt_tokens(self) -> int | None:
        return self.usage.prompt_tokens if self.usage else None

    @property
    def completion_tokens(self) -> int | None:
        return self.usage.completion_tokens if self.usage else None


def parse_completion(payload: Any) -> ChatCompletion:
    """Validate a decoded JSON response.

    Raises:
        FormatError: If `choices[0].message.content` is not a string
    """
    try:
        return ChatCompletion.model_validate(payload)
    except ValidationError as e:
        raise FormatError("Invalid response format from API") from e
