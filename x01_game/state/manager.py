"""In-memory registry of per-chat scoreboard sessions."""

from __future__ import annotations

import inspect
import logging
from dataclasses import dataclass, field
from datetime import datetime, timezone
from secrets import token_urlsafe
from typing import Any, Awaitable, Callable, Dict, List, Optional, Tuple, Union

from .game_state import X01Game

SessionKey = Tuple[int, int]
Listener = Callable[["ChatSession", Any], Union[Awaitable[None], None]]


@dataclass(slots=True)
class ChatSession:
    """A scoreboard bound to one Telegram chat (and forum thread)."""

    session_id: str
    chat_id: int
    thread_id: Optional[int] = None
    game: X01Game = field(default_factory=X01Game)
    board_message_id: Optional[int] = None
    created_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))

    @property
    def key(self) -> SessionKey:
        return (self.chat_id, self.thread_id or 0)


class SessionManager:
    """Create, look up and drop sessions, and notify listeners of changes."""

    def __init__(self) -> None:
        self._logger = logging.getLogger(__name__)
        self._sessions: Dict[str, ChatSession] = {}
        self._chat_index: Dict[SessionKey, str] = {}
        self._listeners: List[Listener] = []

    # Creation helpers -------------------------------------------------
    def create(self, chat_id: int, thread_id: Optional[int] = None) -> ChatSession:
        """Bind a fresh session to the chat, replacing any previous one."""

        self.drop_chat(chat_id, thread_id)
        session = ChatSession(session_id=token_urlsafe(8), chat_id=chat_id, thread_id=thread_id)
        self._sessions[session.session_id] = session
        self._chat_index[session.key] = session.session_id
        self._logger.debug("Created session %s for chat %s", session.session_id, chat_id)
        return session

    def get_or_create(self, chat_id: int, thread_id: Optional[int] = None) -> ChatSession:
        return self.get_by_chat(chat_id, thread_id) or self.create(chat_id, thread_id)

    # Lookup helpers ---------------------------------------------------
    def get_by_chat(self, chat_id: int, thread_id: Optional[int] = None) -> Optional[ChatSession]:
        session_id = self._chat_index.get((chat_id, thread_id or 0))
        return self._sessions.get(session_id) if session_id else None

    def get_by_id(self, session_id: str) -> Optional[ChatSession]:
        return self._sessions.get(session_id)

    def __len__(self) -> int:
        return len(self._sessions)

    # Mutation helpers -------------------------------------------------
    def drop_chat(self, chat_id: int, thread_id: Optional[int] = None) -> Optional[ChatSession]:
        session_id = self._chat_index.pop((chat_id, thread_id or 0), None)
        if not session_id:
            return None
        return self._sessions.pop(session_id, None)

    def reset(self) -> None:
        """Clear all sessions and listeners (used in tests)."""

        self._sessions.clear()
        self._chat_index.clear()
        self._listeners.clear()

    # Notifications ----------------------------------------------------
    def subscribe(self, listener: Listener) -> None:
        if listener not in self._listeners:
            self._listeners.append(listener)

    def unsubscribe(self, listener: Listener) -> None:
        if listener in self._listeners:
            self._listeners.remove(listener)

    async def publish(self, session: ChatSession, context: Any = None) -> None:
        """Tell every listener that ``session`` changed."""

        for listener in list(self._listeners):
            try:
                result = listener(session, context)
                if inspect.isawaitable(result):
                    await result
            except Exception as exc:  # pragma: no cover - defensive logging
                self._logger.exception("Session listener %r failed: %s", listener, exc)


STATE_MANAGER = SessionManager()

__all__ = ["ChatSession", "STATE_MANAGER", "SessionManager"]
