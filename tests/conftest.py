from pathlib import Path
from typing import Any

import pytest

from llmpal.domain.models.model_profile import ModelProfile
from llmpal.domain.providers.chat_provider import ChatProvider


class FakeChatProvider(ChatProvider):
    """Returns a canned payload and records every body it was sent."""

    def __init__(self, reply: str = "", *, usage: dict[str, int] | None = None, provider: str | None = None, payload: Any = None) -> None:
        self.bodies: list[str] = []
        if payload is None:
            payload = {"choices": [{"message": {"content": reply}}]}
            if usage is not None:
                payload["usage"] = usage
            if provider is not None:
                payload["provider"] = provider
        self.payload = payload
        self.validated = False

    def validate(self) -> None:
        self.validated = True

    def complete(self, body: str) -> Any:
        self.bodies.append(body)
        return self.payload


@pytest.fixture(autouse=True)
def _clean_env(monkeypatch: pytest.MonkeyPatch) -> None:
    """Prevent tests from picking up a real API key from the developer machine.

    If a test needs the variable, it should set it explicitly via monkeypatch.
    """
    monkeypatch.delenv("OPENROUTER_API_KEY", raising=False)


@pytest.fixture
def workdir(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> Path:
    """Run the test from an empty temporary directory."""
    monkeypatch.chdir(tmp_path)
    return tmp_path


@pytest.fixture
def default_profile() -> ModelProfile:
    return ModelProfile(
        code="moonshotai/kimi-k2",
        model="moonshotai/kimi-k2",
        prompt_cost=0.60,
        completion_cost=2.50,
    )


@pytest.fixture
def fake_provider_cls() -> type[FakeChatProvider]:
    return FakeChatProvider
