"""Request body assembly for the chat-completion endpoint."""

from llmpal.domain.errors import SerializeError
from llmpal.domain.models.chat_completion import (
    ChatCompletionRequest,
    ChatMessage,
    ProviderRouting,
)
from llmpal.domain.models.model_profile import ModelProfile


def build_request(
    *,
    model: str,
    provider: str | None,
    system_prompt: str,
    user_prompt: str,
    max_tokens: int,
    is_default_endpoint: bool,
) -> ChatCompletionRequest:
    """
    Assemble the request body.

    A pinned provider restricts routing to exactly that provider. On the
    default endpoint the body also denies downstream data retention. The
    `provider` object is omitted when neither applies.
    """
    routing: ProviderRouting | None = None
    if provider is not None:
        routing = ProviderRouting(only=[provider])
    if is_default_endpoint:
        routing = routing or ProviderRouting()
        routing.data_collection = "deny"

    return ChatCompletionRequest(
        model=model,
        max_tokens=max_tokens,
        messages=[
            ChatMessage(role="system", content=system_prompt),
            ChatMessage(role="user", content=user_prompt),
        ],
        provider=routing,
    )


def build_request_for_profile(profile: ModelProfile, system_prompt: str, user_prompt: str) -> ChatCompletionRequest:
    return build_request(
        model=profile.model,
        provider=profile.provider,
        system_prompt=system_prompt,
        user_prompt=user_prompt,
        max_tokens=profile.max_output_tokens,
        is_default_endpoint=profile.is_default_endpoint,
    )


def serialize_request(request: ChatCompletionRequest) -> str:
    """Serialize to compact JSON.

    Raises:
        SerializeError: If the body cannot be encoded
    """
    try:
        return request.to_json()
    except ValueError as e:
        raise SerializeError(str(e)) from e
