from __future__ import annotations

import logging
from typing import List, NamedTuple, Optional

from agent.core.memory import ChatTurn, SessionStore
from agent.core.prompt import build_system_prompt
from agent.core.todo_extractor import extract_todo_markdown
from agent.errors import ChatValidationError, UpstreamCapabilityError
from agent.llm import ChatModel, ContentBlock, LangChainChatModel
from config.settings import Settings, get_settings


logger = logging.getLogger("padtask.agent")


class ChatReply(NamedTuple):
    message: str
    todo_markdown: Optional[str]


def reply_text(blocks: List[ContentBlock]) -> str:
    """Text of the first content block; a non-text block reads as empty.

    Raises ``ValueError`` when a text block carries something other than a
    string.
    """
    if not blocks:
        return ""
    first = blocks[0]
    if first.get("type") != "text":
        return ""
    text = first.get("text")
    if text is None:
        return ""
    if not isinstance(text, str):
        raise ValueError(f"text block holds {type(text).__name__}, expected str")
    return text


class ChatOrchestrator:
    """Runs one chat turn: record, ask the model, record, extract tasks."""

    def __init__(self, store: SessionStore, model: ChatModel, max_tokens: int = 1024) -> None:
        self.store = store
        self.model = model
        self.max_tokens = max_tokens

    def chat(self, session_id: Optional[str], message: Optional[str], current_tasks: Optional[str] = None) -> ChatReply:
        if not session_id or not message:
            raise ChatValidationError()

        history = self.store.append(session_id, ChatTurn(role="user", content=message))
        system_prompt = build_system_prompt(current_tasks)

        try:
            assistant_message = reply_text(self.model.complete(system_prompt, history, self.max_tokens))
        except Exception as exc:
            logger.error("Anthropic API Error: %s", exc)
            raise UpstreamCapabilityError(str(exc)) from exc

        # stored unmodified so later turns see exactly what the model said
        self.store.append(session_id, ChatTurn(role="assistant", content=assistant_message), trim=False)

        extraction = extract_todo_markdown(assistant_message)
        logger.info(
            "Chat reply: session_id=%s history_turns=%s reply_chars=%s has_tasks=%s",
            session_id,
            len(history) + 1,
            len(assistant_message),
            extraction.todo_markdown is not None,
        )
        return ChatReply(extraction.chat_message, extraction.todo_markdown)

    def clear(self, session_id: Optional[str]) -> None:
        self.store.clear(session_id)


def build_orchestrator(settings: Optional[Settings] = None) -> ChatOrchestrator:
    settings = settings or get_settings()
    return ChatOrchestrator(
        store=SessionStore(limit=settings.history_limit),
        model=LangChainChatModel(settings=settings),
        max_tokens=settings.max_tokens,
    )
