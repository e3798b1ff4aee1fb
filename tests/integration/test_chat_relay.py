"""Integration tests for the /api/chat relay.

The ASGI app runs in-process; only the upstream completion service is
faked with httpx.MockTransport.
"""

import json
from unittest.mock import patch

import httpx
import pytest
import pytest_check as check
from httpx import ASGITransport, AsyncClient

from querymind.api.app import app
from querymind.client.config import ClientConfig
from querymind.client.consumer import RATE_LIMIT_ERROR, ChatClient
from querymind.client.conversation import MessageState
from querymind.relay import upstream
from tests.conftest import ChunkStream, sse_body

CHAT_BODY = {"messages": [{"role": "user", "content": "Hi"}]}


def upstream_reply(*contents: str):
    return lambda request: httpx.Response(200, content=sse_body(*contents))


class TestChatEndpoint:
    """Tests for the streaming chat endpoint."""

    async def test_streams_plain_text(self, async_client, make_relay, use_relay) -> None:
        """Fragments are relayed as raw text with streaming headers."""
        use_relay(make_relay(upstream_reply("He", "llo")))

        response = await async_client.post("/api/chat", json=CHAT_BODY)

        check.equal(response.status_code, 200)
        check.is_true(response.headers["content-type"].startswith("text/event-stream"))
        check.equal(response.headers["cache-control"], "no-cache")
        check.equal(response.text, "Hello")

    async def test_history_forwarded_upstream(self, async_client, make_relay, use_relay) -> None:
        captured: list[httpx.Request] = []

        def handler(request: httpx.Request) -> httpx.Response:
            captured.append(request)
            return httpx.Response(200, content=sse_body("ok"))

        use_relay(make_relay(handler))
        history = {
            "messages": [
                {"role": "user", "content": "q1"},
                {"role": "assistant", "content": "a1"},
                {"role": "user", "content": "q2"},
            ]
        }

        await async_client.post("/api/chat", json=history)

        assert json.loads(captured[0].content)["messages"] == history["messages"]

    async def test_rate_limit_passes_through(self, async_client, make_relay, use_relay) -> None:
        """Upstream 429 is returned as 429 with an error body."""
        use_relay(make_relay(lambda request: httpx.Response(429, text="slow down")))

        response = await async_client.post("/api/chat", json=CHAT_BODY)

        check.equal(response.status_code, 429)
        check.is_in("429", response.json()["error"])

    @pytest.mark.parametrize("upstream_status", [400, 401, 502, 503])
    async def test_other_failures_become_500(
        self, async_client, make_relay, use_relay, upstream_status: int
    ) -> None:
        use_relay(make_relay(lambda request: httpx.Response(upstream_status, text="nope")))

        response = await async_client.post("/api/chat", json=CHAT_BODY)

        check.equal(response.status_code, 500)
        check.is_in("error", response.json())

    async def test_unreadable_error_body(self, async_client, make_relay, use_relay) -> None:
        """An upstream error whose body cannot be read still yields a JSON 500."""
        stream = ChunkStream([], error=httpx.ReadError("reset"))
        use_relay(make_relay(lambda request: httpx.Response(503, stream=stream)))

        response = await async_client.post("/api/chat", json=CHAT_BODY)

        check.equal(response.status_code, 500)
        check.is_in("503", response.json()["error"])

    async def test_unreachable_upstream(self, async_client, make_relay, use_relay) -> None:
        def handler(request: httpx.Request) -> httpx.Response:
            raise httpx.ConnectError("connection refused", request=request)

        use_relay(make_relay(handler))

        response = await async_client.post("/api/chat", json=CHAT_BODY)

        assert response.status_code == 500
        assert "connection refused" in response.json()["error"]

    async def test_missing_api_key(self, async_client, monkeypatch) -> None:
        """An unconfigured relay answers 500 instead of crashing."""
        monkeypatch.setattr(upstream, "_relay", None)

        with patch.dict("os.environ", {}, clear=True):
            response = await async_client.post("/api/chat", json=CHAT_BODY)

        check.equal(response.status_code, 500)
        check.equal(response.json(), {"error": "Upstream API error: 500 - Relay is not configured"})

    @pytest.mark.parametrize(
        "body",
        [
            {},
            {"messages": []},
            {"messages": [{"role": "system", "content": "x"}]},
            {"messages": [{"role": "user"}]},
        ],
    )
    async def test_invalid_body_rejected(self, async_client, body: dict) -> None:
        response = await async_client.post("/api/chat", json=body)

        assert response.status_code == 422

    async def test_non_json_body_rejected(self, async_client) -> None:
        response = await async_client.post(
            "/api/chat", content=b"not json", headers={"Content-Type": "application/json"}
        )

        assert response.status_code == 422

    async def test_get_not_allowed(self, async_client) -> None:
        response = await async_client.get("/api/chat")

        assert response.status_code == 405

    async def test_cors_preflight(self, async_client) -> None:
        response = await async_client.options(
            "/api/chat",
            headers={
                "Origin": "http://localhost:8080",
                "Access-Control-Request-Method": "POST",
            },
        )

        check.equal(response.status_code, 200)
        check.is_in("access-control-allow-origin", response.headers)


class TestHealth:
    async def test_health_check(self, async_client) -> None:
        response = await async_client.get("/health")

        assert response.json() == {"status": "healthy", "service": "querymind"}


class TestChatClientAgainstApp:
    """The client state machine driven by the real relay endpoint."""

    @staticmethod
    def make_client() -> ChatClient:
        http = AsyncClient(transport=ASGITransport(app=app), base_url="http://test")
        return ChatClient(config=ClientConfig(api_base_url="http://test"), http_client=http)

    async def test_full_turn(self, make_relay, use_relay) -> None:
        use_relay(make_relay(upstream_reply("He", "llo")))
        client = self.make_client()

        reply = await client.send("Hi")
        await client.aclose()

        check.equal(reply.content, "Hello")
        check.equal(client.state_of(reply.id), MessageState.COMPLETE)
        check.equal([m.role for m in client.conversation], ["user", "assistant"])

    async def test_rate_limited_turn(self, make_relay, use_relay) -> None:
        use_relay(make_relay(lambda request: httpx.Response(429, text="slow down")))
        client = self.make_client()

        reply = await client.send("Hi")
        await client.aclose()

        check.is_none(reply)
        check.equal(client.last_error, RATE_LIMIT_ERROR)
        check.equal(client.retry_count, 1)
        check.equal([m.role for m in client.conversation], ["user"])
