"""NiceGUI interface - thin visualization layer for chat interactions.

Responsibilities:
    - Chat message display with loading, streaming and reveal states
    - Regenerate, copy and reaction controls on finished replies
    - Session sidebar, dark/light theme and document upload
    - Sign-in / sign-up page when an auth provider is configured

Contains no stream handling: it renders StreamEvents from ChatClient.
"""
