"""Chat-completion provider speaking HTTP to an OpenAI-compatible endpoint.

Sends one POST with a bearer token and two identifying headers. The default
endpoint is OpenRouter; a model profile may point at any compatible URL.
"""

import logging
from typing import Any

import httpx

from llmpal.domain.constants import (
    DEFAULT_CONNECT_TIMEOUT,
    DEFAULT_RESPONSE_TIMEOUT,
    HTTP_REFERER,
    X_TITLE,
)
from llmpal.domain.errors import ConfigurationError, TransportError
from llmpal.domain.providers.chat_provider import ChatProvider

logger = logging.getLogger(__name__)


class HttpChatProvider(ChatProvider):
    """Blocking single-request HTTP transport.

    The deadline is explicit: `connect_timeout` bounds connection setup and
    `response_timeout` bounds every read, write and pool wait. There is no
    retry; a timeout surfaces as TransportError.

    Example:
        provider = HttpChatProvider(
            api_url="https://openrouter.ai/api/v1/chat/completions",
            api_key="sk-...",
        )
        payload = provider.complete(body)
    """

    def __init__(
        self,
        api_url: str,
        api_key: str,
        response_timeout: float = DEFAULT_RESPONSE_TIMEOUT,
        connect_timeout: float = DEFAULT_CONNECT_TIMEOUT,
        transport: httpx.BaseTransport | None = None,
    ) -> None:
        """Initialize the provider.

        Args:
            api_url: Full chat-completions URL
            api_key: Bearer token
            response_timeout: Seconds to wait for the response
            connect_timeout: Seconds to wait for the connection
            transport: Optional httpx transport (tests pass httpx.MockTransport)
        """
        self.api_url = api_url
        self.api_key = api_key
        self._timeout = httpx.Timeout(response_timeout, connect=connect_timeout)
        self._transport = transport

    @classmethod
    def get_metadata(cls) -> dict[str, Any]:
        """Return provider metadata."""
        return {
            "name": "http",
            "description": "OpenAI-compatible chat completions over HTTP",
        }

    def validate(self) -> None:
        """Check that a credential and an http(s) URL are present.

        Raises:
            ConfigurationError: If the key is empty or the URL is not http(s)
        """
        if not self.api_key:
            raise ConfigurationError("Missing API key for chat-completion endpoint")
        if not self.api_url.startswith(("http://", "https://")):
            raise ConfigurationError(f"Invalid API URL: '{self.api_url}'")

    def _headers(self) -> dict[str, str]:
        return {
            "Authorization": f"Bearer {self.api_key}",
            "Content-Type": "application/json",
            "HTTP-Referer": HTTP_REFERER,
            "X-Title": X_TITLE,
        }

    def complete(self, body: str) -> Any:
        """POST the body and decode the JSON response.

        Raises:
            TransportError: On send failure or timeout, non-2xx status, or undecodable JSON
        """
        try:
            with httpx.Client(timeout=self._timeout, transport=self._transport) as client:
                response = client.post(self.api_url, content=body.encode("utf-8"), headers=self._headers())
        except httpx.TimeoutException as e:
            raise TransportError(f"Request to {self.api_url} timed out: {e}") from e
        except httpx.HTTPError as e:
            raise TransportError(f"Failed to send request: {e}") from e

        logger.debug(f"Endpoint answered with status {response.status_code}")

        if not response.is_success:
            raise TransportError(
                f"API request failed with status {response.status_code}: {response.text}",
                status_code=response.status_code,
                body=response.text,
            )

        try:
            return response.json()
        except ValueError as e:
            raise TransportError(f"Failed to parse JSON response: {e}", status_code=response.status_code) from e
