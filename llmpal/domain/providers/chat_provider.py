from abc import ABC, abstractmethod
from typing import Any


class ChatProvider(ABC):
    """Abstract interface for chat-completion transports (Strategy pattern)."""

    @classmethod
    def get_metadata(cls) -> dict[str, Any]:
        """Return provider metadata for logging.

        Returns:
            dict with keys: name, description
        """
        return {
            "name": "unknown",
            "description": "No description available",
        }

    @abstractmethod
    def validate(self) -> None:
        """Verify the provider is configured well enough to send a request.

        Called before the request is sent.

        Raises:
            ConfigurationError: If the provider is misconfigured
        """
        ...

    @abstractmethod
    def complete(self, body: str) -> Any:
        """Send one request and return the decoded JSON response.

        Exactly one round trip; implementations must not retry.

        Args:
            body: Serialized JSON request body

        Returns:
            The decoded JSON object; validation of its fields is the caller's job

        Raises:
            TransportError: If sending fails, the status is not 2xx, or the body is not JSON
        """
        ...
