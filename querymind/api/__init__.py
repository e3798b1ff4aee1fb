"""FastAPI endpoints for QueryMind.

HTTP routes with async request handling. The chat route relays the upstream
event stream as plain text fragments.

Endpoints:
    - GET /health: Service health status
    - POST /api/chat: Streamed chat completion relay
    - POST /api/parse-pdf: PDF text extraction
"""

from querymind.api.app import app, create_app

__all__ = ["app", "create_app"]
