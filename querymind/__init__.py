"""QueryMind - document-aware chat client with streamed LLM replies.

Combines FastAPI for the streaming relay, httpx for upstream and client
transport, NiceGUI for the chat interface, and Pydantic for data validation.

Components:
    - relay: Upstream SSE re-framing into plain text fragments
    - api: HTTP endpoints (chat relay, PDF text extraction)
    - client: Conversation state machine consuming the relay stream
    - parsing: PDF text extraction
    - ui: Web interface for chat interactions
    - models: Request/response schemas
"""

__version__ = "0.1.0"
