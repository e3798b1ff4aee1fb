"""Streaming client for the upstream chat completions service.

The relay opens one upstream request per chat turn and hands back an async
iterator of plain text fragments. Failures that happen before the first
fragment surface as a single UpstreamError, so the HTTP layer can answer
with a status code instead of a broken stream.
"""

import logging
from collections.abc import AsyncGenerator, Sequence

import httpx

from querymind.models.schemas import ChatMessage
from querymind.relay.config import RelayConfig, get_relay_config
from querymind.relay.frames import iter_fragments

logger = logging.getLogger(__name__)


class UpstreamError(Exception):
    """Raised when the upstream service cannot produce a stream.

    Attributes:
        status_code: HTTP status to report to the caller.
        detail: Diagnostic text (upstream body or transport error).
    """

    def __init__(self, status_code: int, detail: str) -> None:
        self.status_code = status_code
        self.detail = detail
        super().__init__(f"Upstream API error: {status_code} - {detail}")

    @property
    def is_rate_limited(self) -> bool:
        return self.status_code == httpx.codes.TOO_MANY_REQUESTS.value


class CompletionRelay:
    """Forwards chat history upstream and re-frames the streamed reply.

    Wraps an httpx.AsyncClient with:
    - Bearer auth and app identification headers from RelayConfig
    - Eager status check before any fragment is handed out
    - Connection release on every exit path of the fragment stream
    """

    def __init__(
        self,
        config: RelayConfig | None = None,
        client: httpx.AsyncClient | None = None,
    ) -> None:
        """Initialize the relay.

        Args:
            config: Optional relay configuration.
                    Loads from environment if not provided.
            client: Optional HTTP client, mainly for injecting a test transport.
        """
        self._config = config or get_relay_config()
        self._client = client or httpx.AsyncClient(timeout=self._config.timeout)

    def _headers(self) -> dict[str, str]:
        return {
            "Authorization": f"Bearer {self._config.api_key}",
            "HTTP-Referer": self._config.referer,
            "X-Title": self._config.app_title,
            "Content-Type": "application/json",
        }

    def _payload(self, messages: Sequence[ChatMessage]) -> dict:
        return {
            "model": self._config.model_name,
            "messages": [m.model_dump() for m in messages],
            "stream": True,
        }

    async def open_stream(self, messages: Sequence[ChatMessage]) -> AsyncGenerator[str]:
        """Start a streamed completion for the given history.

        Args:
            messages: Ordered conversation history.

        Returns:
            Async iterator of reply text fragments.

        Raises:
            UpstreamError: If the upstream is unreachable or answers non-2xx.
        """
        request = self._client.build_request(
            "POST",
            self._config.completions_url,
            json=self._payload(messages),
            headers=self._headers(),
        )

        try:
            response = await self._client.send(request, stream=True)
        except httpx.RequestError as e:
            logger.error(f"Upstream request failed: {e}")
            raise UpstreamError(httpx.codes.INTERNAL_SERVER_ERROR.value, str(e)) from e

        if not response.is_success:
            try:
                body = (await response.aread()).decode("utf-8", errors="replace")
            except httpx.HTTPError as e:
                body = f"error body unreadable: {e}"
            finally:
                await response.aclose()
            logger.error(f"Upstream API error: {response.status_code} - {body}")
            raise UpstreamError(response.status_code, body)

        logger.info(f"Upstream stream opened ({len(messages)} messages)")
        return self._relay(response)

    async def _relay(self, response: httpx.Response) -> AsyncGenerator[str]:
        try:
            async for fragment in iter_fragments(response.aiter_lines()):
                yield fragment
        except httpx.HTTPError as e:
            logger.error(f"Upstream stream interrupted: {e}")
            raise
        finally:
            await response.aclose()
            logger.info("Upstream stream closed")

    async def aclose(self) -> None:
        """Release the underlying HTTP client."""
        await self._client.aclose()


# Module-level singleton instance
_relay: CompletionRelay | None = None


def get_relay() -> CompletionRelay:
    """Get or create the global relay.

    Reuses one connection pool across requests.

    Returns:
        The CompletionRelay instance.
    """
    global _relay
    if _relay is None:
        _relay = CompletionRelay()
    return _relay


async def close_relay() -> None:
    """Close the global relay if one was created."""
    global _relay
    if _relay is not None:
        await _relay.aclose()
        _relay = None
