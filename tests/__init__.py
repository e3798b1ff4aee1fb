"""Test package for QueryMind.

Structure:
    - unit/: Individual function and class tests
    - integration/: The ASGI app and client working together

The upstream LLM service is always faked; PDFs are generated in conftest.
Leverages pytest with pytest-check for soft assertions.
"""
