"""Chat client: conversation state and stream consumption.

Responsibilities:
    - Conversation model with append-only assistant replies
    - Stream consumer turning the relay byte stream into message updates
    - Regenerate, clear and cancellation of in-flight replies
    - Document processing, session list and auth boundary for the UI

Framework-free: the NiceGUI page subscribes to StreamEvents and redraws.
"""

from querymind.client.config import ClientConfig, get_client_config
from querymind.client.consumer import (
    GENERIC_ERROR,
    RATE_LIMIT_ERROR,
    RATE_LIMIT_WARNING,
    ChatClient,
    StreamEvent,
)
from querymind.client.conversation import Conversation, Message, MessageState, Resettable

__all__ = [
    "GENERIC_ERROR",
    "RATE_LIMIT_ERROR",
    "RATE_LIMIT_WARNING",
    "ChatClient",
    "ClientConfig",
    "Conversation",
    "Message",
    "MessageState",
    "Resettable",
    "StreamEvent",
    "get_client_config",
]
