"""Chat relay endpoint.

Streams the assistant reply as raw text fragments. Upstream failures are
raised before the stream starts and rendered as a JSON error body by the
application's UpstreamError handler.
"""

import logging

from fastapi import APIRouter, Depends, status
from fastapi.responses import StreamingResponse

from querymind.models.schemas import ChatRequest, ErrorResponse
from querymind.relay.upstream import CompletionRelay, UpstreamError, get_relay

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api", tags=["chat"])

STREAM_HEADERS = {
    "Cache-Control": "no-cache",
    "Connection": "keep-alive",
}


def relay_dependency() -> CompletionRelay:
    """Provide the shared relay, reporting missing configuration as a 500.

    Raises:
        UpstreamError: If the relay cannot be configured (e.g. no API key).
    """
    try:
        return get_relay()
    except ValueError as e:
        logger.error(f"Relay configuration invalid: {e}")
        raise UpstreamError(
            status.HTTP_500_INTERNAL_SERVER_ERROR,
            "Relay is not configured",
        ) from e


@router.post(
    "/chat",
    response_class=StreamingResponse,
    responses={429: {"model": ErrorResponse}, 500: {"model": ErrorResponse}},
)
async def chat(
    request: ChatRequest,
    relay: CompletionRelay = Depends(relay_dependency),
) -> StreamingResponse:
    """Relay a chat turn to the upstream completion service.

    Args:
        request: Conversation history to send upstream.
        relay: Upstream relay (injected).

    Returns:
        StreamingResponse carrying plain text fragments in arrival order.

    Raises:
        UpstreamError: If the upstream rejects the request or is unreachable.
    """
    logger.info(f"Relaying chat request with {len(request.messages)} messages")

    fragments = await relay.open_stream(request.messages)

    return StreamingResponse(
        fragments,
        media_type="text/event-stream",
        headers=STREAM_HEADERS,
    )
