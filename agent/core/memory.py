"""Server-side conversation memory.

Sessions live in process memory only and are lost on restart. Each session
keeps the most recent ``limit`` turns; the caller decides when trimming
applies so that the assistant reply can be recorded on top of a freshly
trimmed history.
"""

from __future__ import annotations

import threading
from typing import Dict, Literal, Optional, Tuple

from pydantic import BaseModel, ConfigDict, Field


DEFAULT_HISTORY_LIMIT = 20


class ChatTurn(BaseModel):
    model_config = ConfigDict(frozen=True)

    role: Literal["user", "assistant"] = Field(..., description="'user' or 'assistant'")
    content: str


class _Session:
    __slots__ = ("lock", "turns")

    def __init__(self) -> None:
        self.lock = threading.Lock()
        self.turns: list[ChatTurn] = []


class SessionStore:
    """Thread-safe mapping of session id to ordered chat turns."""

    def __init__(self, limit: int = DEFAULT_HISTORY_LIMIT) -> None:
        if limit < 1:
            raise ValueError("history limit must be at least 1")
        self._limit = limit
        self._lock = threading.Lock()
        self._sessions: Dict[str, _Session] = {}

    @property
    def limit(self) -> int:
        return self._limit

    def _session(self, session_id: str) -> _Session:
        with self._lock:
            session = self._sessions.get(session_id)
            if session is None:
                session = self._sessions[session_id] = _Session()
            return session

    def append(self, session_id: str, turn: ChatTurn, trim: bool = True) -> Tuple[ChatTurn, ...]:
        """Append *turn* and return the session history after the append.

        With *trim* set the oldest turns are dropped until at most ``limit``
        remain.
        """
        while True:
            session = self._session(session_id)
            with session.lock:
                with self._lock:
                    # cleared between lookup and lock; retry on the new entry
                    if self._sessions.get(session_id) is not session:
                        continue
                session.turns.append(turn)
                if trim and len(session.turns) > self._limit:
                    del session.turns[: len(session.turns) - self._limit]
                return tuple(session.turns)

    def get(self, session_id: Optional[str]) -> Tuple[ChatTurn, ...]:
        if not session_id:
            return ()
        with self._lock:
            session = self._sessions.get(session_id)
        if session is None:
            return ()
        with session.lock:
            return tuple(session.turns)

    def clear(self, session_id: Optional[str]) -> None:
        if not session_id:
            return
        with self._lock:
            self._sessions.pop(session_id, None)

    def __contains__(self, session_id: object) -> bool:
        with self._lock:
            return session_id in self._sessions

    def __len__(self) -> int:
        with self._lock:
            return len(self._sessions)
