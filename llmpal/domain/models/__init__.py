"""Domain models for llmpal."""

from .chat_completion import (
    ChatCompletion,
    ChatCompletionRequest,
    ChatMessage,
    ProviderRouting,
    parse_completion,
)
from .model_profile import ModelProfile
from .parsed_reply import FileSection, ParsedReply


__all__ = [
    "ChatCompletion",
    "ChatCompletionRequest",
    "ChatMessage",
    "ProviderRouting",
    "parse_completion",
    "ModelProfile",
    "FileSection",
    "ParsedReply",
]
