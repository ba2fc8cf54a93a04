"""Pytest configuration for PadTask tests.

Every test gets its own session store and a scripted chat model, so nothing
here talks to the Anthropic API.
"""

from __future__ import annotations

import os
from typing import Any, Dict, List, Optional, Sequence

import pytest

# Never pick up a real key from the developer's .env
os.environ["ANTHROPIC_API_KEY"] = ""

from fastapi.testclient import TestClient  # noqa: E402

from agent.agent import ChatOrchestrator  # noqa: E402
from agent.core.memory import ChatTurn, SessionStore  # noqa: E402
from app.main import create_app  # noqa: E402


class FakeChatModel:
    """Records each call and answers with scripted content blocks."""

    def __init__(self) -> None:
        self.calls: List[Dict[str, Any]] = []
        self.blocks: List[Dict[str, Any]] = [{"type": "text", "text": "Hello! How can I help you?"}]
        self.error: Optional[Exception] = None

    def reply_with(self, text: str) -> None:
        self.blocks = [{"type": "text", "text": text}]

    def complete(self, system_prompt: str, history: Sequence[ChatTurn], max_tokens: int) -> List[Dict[str, Any]]:
        self.calls.append(
            {"system_prompt": system_prompt, "history": list(history), "max_tokens": max_tokens}
        )
        if self.error is not None:
            raise self.error
        return self.blocks


@pytest.fixture()
def store() -> SessionStore:
    return SessionStore(limit=20)


@pytest.fixture()
def model() -> FakeChatModel:
    return FakeChatModel()


@pytest.fixture()
def orchestrator(store: SessionStore, model: FakeChatModel) -> ChatOrchestrator:
    return ChatOrchestrator(store=store, model=model, max_tokens=1024)


@pytest.fixture()
def client(orchestrator: ChatOrchestrator) -> TestClient:
    return TestClient(create_app(orchestrator=orchestrator))
