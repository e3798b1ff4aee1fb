"""Pytest fixtures and shared test configuration.

Provides reusable fixtures for unit and integration tests.

Fixtures:
    - relay_config: RelayConfig pointing at a fake upstream
    - make_relay: Builds a CompletionRelay over an httpx.MockTransport
    - async_client: HTTPX client for API testing against the ASGI app
    - text_pdf / blank_pdf: Generated PDF documents

The upstream LLM service is always faked with httpx.MockTransport; tests
never reach the network.
"""

import asyncio
import io
import json
from collections.abc import AsyncGenerator, AsyncIterator, Callable, Generator, Iterable

import httpx
import pytest
from httpx import ASGITransport, AsyncClient
from pypdf import PdfWriter

from querymind.api.app import app
from querymind.api.chat import relay_dependency
from querymind.relay.config import RelayConfig
from querymind.relay.upstream import CompletionRelay

UPSTREAM_BASE_URL = "https://upstream.test/api/v1"


class ChunkStream(httpx.AsyncByteStream):
    """Response body delivered chunk by chunk.

    Optionally waits on ``gate`` before sending ``after_gate`` chunks, and
    raises ``error`` once every chunk has been sent.
    """

    def __init__(
        self,
        chunks: Iterable[bytes],
        gate: asyncio.Event | None = None,
        after_gate: Iterable[bytes] = (),
        error: Exception | None = None,
    ) -> None:
        self._chunks = list(chunks)
        self._gate = gate
        self._after_gate = list(after_gate)
        self._error = error
        self.closed = False

    async def __aiter__(self) -> AsyncIterator[bytes]:
        for chunk in self._chunks:
            yield chunk
        if self._gate is not None:
            await self._gate.wait()
            for chunk in self._after_gate:
                yield chunk
        if self._error is not None:
            raise self._error

    async def aclose(self) -> None:
        self.closed = True


def sse_frame(content: str) -> str:
    """One upstream data frame carrying ``content`` as delta."""
    return "data: " + json.dumps({"choices": [{"delta": {"content": content}}]}) + "\n\n"


def sse_body(*contents: str, done: bool = True) -> bytes:
    """Upstream event stream for the given deltas."""
    body = "".join(sse_frame(c) for c in contents)
    if done:
        body += "data: [DONE]\n\n"
    return body.encode()


async def wait_until(predicate: Callable[[], bool], timeout: float = 1.0) -> None:
    """Yield to the event loop until ``predicate`` holds."""
    async with asyncio.timeout(timeout):
        while not predicate():
            await asyncio.sleep(0)


def build_text_pdf(text: str) -> bytes:
    """Single-page PDF showing ``text`` in Helvetica."""
    stream = f"BT /F1 24 Tf 72 720 Td ({text}) Tj ET".encode()
    objects = [
        b"<< /Type /Catalog /Pages 2 0 R >>",
        b"<< /Type /Pages /Kids [3 0 R] /Count 1 >>",
        b"<< /Type /Page /Parent 2 0 R /MediaBox [0 0 612 792] /Contents 4 0 R "
        b"/Resources << /Font << /F1 5 0 R >> >> >>",
        b"<< /Length %d >>\nstream\n" % len(stream) + stream + b"\nendstream",
        b"<< /Type /Font /Subtype /Type1 /BaseFont /Helvetica >>",
    ]
    out = bytearray(b"%PDF-1.4\n")
    offsets = []
    for number, obj in enumerate(objects, start=1):
        offsets.append(len(out))
        out += b"%d 0 obj\n" % number + obj + b"\nendobj\n"
    xref_offset = len(out)
    out += b"xref\n0 %d\n" % (len(objects) + 1)
    out += b"0000000000 65535 f \n"
    for offset in offsets:
        out += b"%010d 00000 n \n" % offset
    out += b"trailer\n<< /Size %d /Root 1 0 R >>\nstartxref\n%d\n%%%%EOF\n" % (
        len(objects) + 1,
        xref_offset,
    )
    return bytes(out)


def build_blank_pdf(pages: int = 1) -> bytes:
    writer = PdfWriter()
    for _ in range(pages):
        writer.add_blank_page(width=200, height=200)
    buffer = io.BytesIO()
    writer.write(buffer)
    return buffer.getvalue()


@pytest.fixture
def relay_config() -> RelayConfig:
    """Relay configuration aimed at the fake upstream."""
    return RelayConfig(
        api_key="sk-test-key",
        base_url=UPSTREAM_BASE_URL,
        model_name="test/model",
        referer="http://localhost:3000",
        app_title="AI Chat Assistant",
    )


@pytest.fixture
def make_relay(
    relay_config: RelayConfig,
) -> Callable[[Callable[[httpx.Request], httpx.Response]], CompletionRelay]:
    """Factory for a relay whose upstream is answered by ``handler``."""

    def factory(handler: Callable[[httpx.Request], httpx.Response]) -> CompletionRelay:
        upstream = httpx.AsyncClient(transport=httpx.MockTransport(handler))
        return CompletionRelay(config=relay_config, client=upstream)

    return factory


@pytest.fixture
async def async_client() -> AsyncGenerator[AsyncClient]:
    """Create async HTTP client for API testing.

    Yields:
        Configured AsyncClient for making test requests.
    """
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as client:
        yield client
    app.dependency_overrides.clear()


@pytest.fixture
def use_relay() -> Generator[Callable[[CompletionRelay], None]]:
    """Route /api/chat through the given relay."""

    def install(relay: CompletionRelay) -> None:
        app.dependency_overrides[relay_dependency] = lambda: relay

    yield install
    app.dependency_overrides.clear()


@pytest.fixture
def text_pdf() -> bytes:
    return build_text_pdf("Hello QueryMind")


@pytest.fixture
def blank_pdf() -> bytes:
    return build_blank_pdf()
