"""Chat client configuration with environment variable loading."""

import os

from dotenv import load_dotenv
from pydantic import BaseModel, Field

load_dotenv()


class ClientConfig(BaseModel):
    """Configuration for the browser-side chat client.

    Attributes:
        api_base_url: Base URL of the QueryMind API serving /api/chat.
        timeout: Request timeout in seconds.
        rate_limit_threshold: Rate-limited attempts before warning the user.
    """

    api_base_url: str = Field(
        default_factory=lambda: os.getenv("API_BASE_URL", "http://localhost:8000"),
        description="QueryMind API base URL",
    )
    timeout: float = Field(
        default=120.0,
        ge=1.0,
        le=600.0,
        description="Request timeout in seconds",
    )
    rate_limit_threshold: int = Field(
        default=2,
        ge=1,
        description="Rate-limited attempts before the slow-down warning is shown",
    )


def get_client_config() -> ClientConfig:
    """Create client configuration from environment."""
    return ClientConfig()
