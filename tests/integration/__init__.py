"""Integration tests for components working together as a system.

Coverage:
    - /api/chat relay with status mapping, headers and validation
    - /api/parse-pdf with generated PDF documents
    - ChatClient driving the in-process API end to end

Only the upstream completion service is replaced, so no API key or network
access is required.
"""
