"""Unit tests for individual components in isolation.

Coverage:
    - relay/: Config, frame parsing and the upstream relay
    - client/: Conversation, stream consumer, reveal, sessions, documents, auth
    - parsing/: PDF text extraction

HTTP is faked with httpx.MockTransport. Leverages pytest-check for multiple
assertions per test.
"""
