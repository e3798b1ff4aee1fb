"""Pydantic models for API requests and responses.

Provides type safety, validation, and automatic OpenAPI documentation.

Models:
    - ChatMessage: Individual {role, content} turn in the outbound history
    - ChatRequest: Incoming chat relay payload
    - ErrorResponse: JSON error body shared by all endpoints
    - ExtractTextResponse: Extracted document text
"""

from querymind.models.schemas import (
    ChatMessage,
    ChatRequest,
    ErrorResponse,
    ExtractTextResponse,
    Role,
)

__all__ = ["ChatMessage", "ChatRequest", "ErrorResponse", "ExtractTextResponse", "Role"]
