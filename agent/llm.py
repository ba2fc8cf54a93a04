from __future__ import annotations

from typing import Any, Dict, List, Optional, Protocol, Sequence

from langchain_anthropic import ChatAnthropic
from langchain_core.language_models import BaseChatModel
from langchain_core.messages import AIMessage, BaseMessage, HumanMessage, SystemMessage

from agent.core.memory import ChatTurn
from config.settings import Settings, get_settings


ContentBlock = Dict[str, Any]


class ChatModel(Protocol):
    """Request/response access to a chat language model."""

    def complete(
        self, system_prompt: str, history: Sequence[ChatTurn], max_tokens: int
    ) -> List[ContentBlock]:
        ...


def build_llm(settings: Optional[Settings] = None) -> BaseChatModel:
    settings = settings or get_settings()
    if not settings.anthropic_api_key:
        raise RuntimeError(
            "ANTHROPIC_API_KEY not set. Please configure it in environment or .env"
        )

    return ChatAnthropic(
        model=settings.anthropic_model,
        api_key=settings.anthropic_api_key,
        max_tokens=settings.max_tokens,
    )


def to_lc_messages(history: Sequence[ChatTurn]) -> List[BaseMessage]:
    messages: List[BaseMessage] = []
    for turn in history:
        if turn.role == "user":
            messages.append(HumanMessage(content=turn.content))
        else:
            messages.append(AIMessage(content=turn.content))
    return messages


def to_content_blocks(content: Any) -> List[ContentBlock]:
    """Normalize langchain message content to Anthropic-style blocks."""
    if isinstance(content, str):
        return [{"type": "text", "text": content}]
    blocks: List[ContentBlock] = []
    for item in content or []:
        if isinstance(item, str):
            blocks.append({"type": "text", "text": item})
        elif isinstance(item, dict):
            blocks.append(item)
        else:
            blocks.append({"type": type(item).__name__})
    return blocks


class LangChainChatModel:
    """Adapts a langchain chat model to :class:`ChatModel`.

    Without an explicit *llm* the Anthropic client is built on first use, so a
    missing API key fails the request instead of application startup.
    """

    def __init__(self, llm: Optional[BaseChatModel] = None, settings: Optional[Settings] = None) -> None:
        self._llm = llm
        self._settings = settings

    @property
    def llm(self) -> BaseChatModel:
        if self._llm is None:
            self._llm = build_llm(self._settings)
        return self._llm

    def complete(
        self, system_prompt: str, history: Sequence[ChatTurn], max_tokens: int
    ) -> List[ContentBlock]:
        messages: List[BaseMessage] = [SystemMessage(content=system_prompt)]
        messages.extend(to_lc_messages(history))
        result = self.llm.invoke(messages, max_tokens=max_tokens)
        return to_content_blocks(result.content)
