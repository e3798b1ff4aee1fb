"""Sidebar session list.

Sessions are labels only: there is no per-session storage. Starting a new
session or clearing them all resets the chat through the Resettable handed
over at construction.
"""

import uuid
from datetime import datetime

from pydantic import BaseModel, Field

from querymind.client.conversation import Resettable

DEFAULT_SESSION_ID = "default"
DEFAULT_TITLE = "New Chat"


class ChatSessionInfo(BaseModel):
    """A sidebar entry."""

    id: str = Field(default_factory=lambda: uuid.uuid4().hex)
    title: str = DEFAULT_TITLE
    created_at: datetime = Field(default_factory=datetime.now)


class SessionList:
    """Ordered sessions, newest first, with one current selection."""

    def __init__(self, resettable: Resettable) -> None:
        self._resettable = resettable
        self.sessions: list[ChatSessionInfo] = [ChatSessionInfo(id=DEFAULT_SESSION_ID)]
        self.current_id = DEFAULT_SESSION_ID

    @property
    def current(self) -> ChatSessionInfo:
        return next(s for s in self.sessions if s.id == self.current_id)

    def new_session(self) -> ChatSessionInfo:
        session = ChatSessionInfo()
        self.sessions.insert(0, session)
        self.current_id = session.id
        self._resettable.reset()
        return session

    def clear_all(self) -> None:
        self.sessions = [ChatSessionInfo(id=DEFAULT_SESSION_ID)]
        self.current_id = DEFAULT_SESSION_ID
        self._resettable.reset()

    def select(self, session_id: str) -> bool:
        """Make a session current. Returns False for unknown ids."""
        if not any(s.id == session_id for s in self.sessions):
            return False
        self.current_id = session_id
        return True
