"""Relay configuration with environment variable loading.

Pydantic-based configuration for the upstream completion service.
Targets OpenRouter by default; any OpenAI-compatible API works via LLM_BASE_URL.
"""

import os

from dotenv import load_dotenv
from pydantic import BaseModel, Field, field_validator

# Load environment variables from .env file
load_dotenv()

DEFAULT_BASE_URL = "https://openrouter.ai/api/v1"
DEFAULT_MODEL = "deepseek/deepseek-chat-v3-0324:free"


class RelayConfig(BaseModel):
    """Configuration for the upstream completion relay.

    Attributes:
        api_key: Bearer credential for the upstream service.
        base_url: API base URL, without the /chat/completions suffix.
        model_name: Model identifier to request.
        referer: Value sent as HTTP-Referer to identify the calling app.
        app_title: Value sent as X-Title to identify the calling app.
        timeout: Upstream request timeout in seconds.
    """

    api_key: str = Field(
        default_factory=lambda: os.getenv("OPENROUTER_API_KEY", os.getenv("LLM_API_KEY", "")),
        description="API key for the upstream completion service",
    )
    base_url: str = Field(
        default_factory=lambda: os.getenv("LLM_BASE_URL") or DEFAULT_BASE_URL,
        description="Upstream API base URL",
    )
    model_name: str = Field(
        default_factory=lambda: os.getenv("LLM_MODEL", DEFAULT_MODEL),
        description="Model to use",
    )
    referer: str = Field(
        default_factory=lambda: os.getenv("APP_URL", "http://localhost:3000"),
        description="Referer identifying this application upstream",
    )
    app_title: str = Field(
        default_factory=lambda: os.getenv("APP_TITLE", "AI Chat Assistant"),
        description="Title identifying this application upstream",
    )
    timeout: float = Field(
        default=120.0,
        ge=1.0,
        le=600.0,
        description="Upstream request timeout in seconds",
    )

    @field_validator("api_key")
    @classmethod
    def validate_api_key(cls, v: str) -> str:
        """Validate that API key is provided and non-empty."""
        if not v or not v.strip():
            raise ValueError(
                "API key required. Set OPENROUTER_API_KEY or LLM_API_KEY in .env"
            )
        return v.strip()

    @field_validator("base_url")
    @classmethod
    def strip_trailing_slash(cls, v: str) -> str:
        """Normalize base URL so endpoint paths can be appended."""
        return v.rstrip("/")

    @property
    def completions_url(self) -> str:
        """Full URL of the streaming chat completions endpoint."""
        return f"{self.base_url}/chat/completions"


def get_relay_config() -> RelayConfig:
    """Create relay configuration from environment.

    Returns:
        Configured RelayConfig instance.

    Raises:
        ValueError: If no API key is set.
    """
    return RelayConfig()
