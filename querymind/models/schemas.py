from typing import Literal

from pydantic import BaseModel, Field

Role = Literal["user", "assistant"]


class ChatMessage(BaseModel):
    """A single turn in the outbound history.

    Attributes:
        role: The speaker (user or assistant).
        content: The message text.
    """

    role: Role
    content: str


class ChatRequest(BaseModel):
    """Request payload for the chat relay endpoint.

    Attributes:
        messages: Ordered conversation history ending with the newest user turn.
    """

    messages: list[ChatMessage] = Field(..., min_length=1)


class ErrorResponse(BaseModel):
    """Error body returned by every endpoint on failure."""

    error: str


class ExtractTextResponse(BaseModel):
    """Response after document text extraction.

    Attributes:
        text: Plain text content of the uploaded document.
    """

    text: str
