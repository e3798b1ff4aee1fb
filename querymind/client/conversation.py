"""In-memory conversation state for the chat client.

A conversation is append-only, with two exceptions: rolling back the
latest unfinished assistant message, and removing an assistant message
that is being regenerated.
"""

import uuid
from datetime import datetime
from enum import Enum
from typing import Protocol

from pydantic import BaseModel, Field

from querymind.models.schemas import ChatMessage, Role


class MessageState(str, Enum):
    """Lifecycle of an assistant message while its reply streams in."""

    PENDING = "pending"
    STREAMING = "streaming"
    COMPLETE = "complete"
    FAILED = "failed"


class Message(BaseModel):
    """A message shown in the conversation.

    Attributes:
        id: Unique identifier, never reused.
        role: The speaker (user or assistant).
        content: Text received so far; only grows while incomplete.
        created_at: Creation timestamp.
        complete: Whether the message is final.
    """

    id: str = Field(default_factory=lambda: uuid.uuid4().hex)
    role: Role
    content: str = ""
    created_at: datetime = Field(default_factory=datetime.now)
    complete: bool = False

    def to_chat_message(self) -> ChatMessage:
        return ChatMessage(role=self.role, content=self.content)


class Resettable(Protocol):
    """Something a parent component can reset without owning its state."""

    def reset(self) -> None: ...


class Conversation:
    """Ordered list of messages with id-keyed access."""

    def __init__(self) -> None:
        self._messages: list[Message] = []

    def __len__(self) -> int:
        return len(self._messages)

    def __iter__(self):
        return iter(list(self._messages))

    def __contains__(self, message_id: object) -> bool:
        return self.get(message_id) is not None

    @property
    def messages(self) -> list[Message]:
        """Snapshot of the messages in order."""
        return list(self._messages)

    def add(self, role: Role, content: str = "", complete: bool = False) -> Message:
        message = Message(role=role, content=content, complete=complete)
        self._messages.append(message)
        return message

    def get(self, message_id: object) -> Message | None:
        for message in self._messages:
            if message.id == message_id:
                return message
        return None

    def index_of(self, message_id: str) -> int:
        """Position of a message, or -1 when absent."""
        for i, message in enumerate(self._messages):
            if message.id == message_id:
                return i
        return -1

    def remove(self, message_id: str) -> bool:
        """Delete a message by id.

        Returns:
            True if the message was present.
        """
        index = self.index_of(message_id)
        if index == -1:
            return False
        del self._messages[index]
        return True

    def append_content(self, message_id: str, text: str) -> Message | None:
        """Append text to an unfinished message.

        Returns:
            The updated message, or None if it no longer exists or is complete.
        """
        message = self.get(message_id)
        if message is None or message.complete:
            return None
        message.content += text
        return message

    def mark_complete(self, message_id: str) -> Message | None:
        message = self.get(message_id)
        if message is None:
            return None
        message.complete = True
        return message

    def history(self, until: int | None = None) -> list[ChatMessage]:
        """Project messages onto the outbound ``{role, content}`` history.

        Args:
            until: Index of the last message to include. All messages if None.
        """
        messages = self._messages if until is None else self._messages[: until + 1]
        return [m.to_chat_message() for m in messages]

    def clear(self) -> None:
        self._messages.clear()
