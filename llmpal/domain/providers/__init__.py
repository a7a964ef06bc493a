from .chat_provider import ChatProvider
from .http_chat_provider import HttpChatProvider

__all__ = ["ChatProvider", "HttpChatProvider"]
