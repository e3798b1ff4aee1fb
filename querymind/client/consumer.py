"""Stream consumer driving the assistant message state machine.

Each chat turn creates one assistant message that moves through
PENDING -> STREAMING -> COMPLETE, or is rolled back (FAILED) when the
request or the stream breaks. Every transition and every appended fragment
is published as a StreamEvent so the render layer can redraw.

Architecture Decisions:

1. **Task per reply** - The read loop runs in its own asyncio task. Clearing
   the chat or starting another turn cancels it; the `async with` block
   around the response releases the connection on every exit path.

2. **Id-keyed mutation** - Fragments are applied through the conversation by
   message id, and only while the message still exists. A stream that
   outlives its message cannot bring it back.

3. **Status-driven rate limiting** - The retry counter only moves on HTTP 429.
   The client never retries on its own; it warns the user to slow down.
"""

import asyncio
import logging
from collections.abc import Callable

import httpx
from pydantic import BaseModel

from querymind.client.config import ClientConfig, get_client_config
from querymind.client.conversation import Conversation, Message, MessageState
from querymind.models.schemas import ChatMessage

logger = logging.getLogger(__name__)

CHAT_PATH = "/api/chat"

RATE_LIMIT_ERROR = "Rate limit reached. Please wait a moment before trying again."
GENERIC_ERROR = "Failed to get response from AI"
RATE_LIMIT_WARNING = (
    "You're sending messages too quickly. Please wait a moment between messages."
)


class StreamEvent(BaseModel):
    """Observable update of an assistant message.

    Attributes:
        message_id: The assistant message this update belongs to.
        state: State of the message after the update.
        content: Full text received so far.
        delta: Text appended by this update (empty for pure transitions).
        error: User-facing error for FAILED; None when the reply was cancelled.
    """

    message_id: str
    state: MessageState
    content: str = ""
    delta: str = ""
    error: str | None = None


EventHandler = Callable[[StreamEvent], None]


class ChatClient:
    """Conversation owner that talks to the chat relay.

    Implements send, regenerate and clear on top of one Conversation.
    Satisfies the Resettable protocol through reset().
    """

    def __init__(
        self,
        config: ClientConfig | None = None,
        http_client: httpx.AsyncClient | None = None,
        conversation: Conversation | None = None,
    ) -> None:
        """Initialize the chat client.

        Args:
            config: Optional client configuration.
                    Loads from environment if not provided.
            http_client: Optional HTTP client. Must resolve CHAT_PATH
                         against the QueryMind API.
            conversation: Optional existing conversation.
        """
        self._config = config or get_client_config()
        self._http = http_client or httpx.AsyncClient(
            base_url=self._config.api_base_url,
            timeout=self._config.timeout,
        )
        self.conversation = conversation or Conversation()
        self.retry_count = 0
        self.last_error: str | None = None
        self._handlers: list[EventHandler] = []
        self._states: dict[str, MessageState] = {}
        self._active: asyncio.Task | None = None
        self._active_message_id: str | None = None

    def subscribe(self, handler: EventHandler) -> None:
        """Register a callback invoked for every StreamEvent."""
        self._handlers.append(handler)

    @property
    def http(self) -> httpx.AsyncClient:
        """HTTP client bound to the QueryMind API."""
        return self._http

    def state_of(self, message_id: str) -> MessageState | None:
        return self._states.get(message_id)

    @property
    def is_busy(self) -> bool:
        """Whether a reply is currently being requested or streamed."""
        return self._active is not None and not self._active.done()

    @property
    def rate_limit_warning(self) -> str | None:
        if self.retry_count >= self._config.rate_limit_threshold:
            return RATE_LIMIT_WARNING
        return None

    async def send(self, user_text: str) -> Message | None:
        """Send a user message and stream the assistant reply.

        Args:
            user_text: Text typed by the user. Ignored when blank.

        Returns:
            The completed assistant message, or None if nothing was sent,
            the request failed, or the reply was cancelled.
        """
        text = user_text.strip()
        if not text:
            return None

        self._cancel_active()
        user_message = self.conversation.add("user", text, complete=True)
        return await self._reply_to(user_message)

    async def regenerate(self, assistant_message_id: str) -> Message | None:
        """Replace an assistant reply with a fresh one.

        The history is truncated at the user message that triggered the
        reply; the new assistant message is appended at the end.

        Args:
            assistant_message_id: Id of the assistant message to replace.

        Returns:
            The new completed assistant message, or None.
        """
        index = self.conversation.index_of(assistant_message_id)
        if index <= 0:
            return None

        messages = self.conversation.messages
        target, trigger = messages[index], messages[index - 1]
        if target.role != "assistant" or trigger.role != "user":
            return None

        self._cancel_active()
        self.conversation.remove(target.id)
        self._states.pop(target.id, None)
        logger.info(f"Regenerating reply {target.id}")
        return await self._reply_to(trigger)

    def clear(self) -> None:
        """Discard every message and abandon the in-flight reply."""
        self._cancel_active()
        self.conversation.clear()
        self._states.clear()
        self.last_error = None

    def reset(self) -> None:
        self.clear()

    async def aclose(self) -> None:
        """Cancel the in-flight reply and release the HTTP client."""
        self._cancel_active()
        await self._http.aclose()

    async def _reply_to(self, trigger: Message) -> Message | None:
        history = self.conversation.history(until=self.conversation.index_of(trigger.id))
        assistant = self.conversation.add("assistant")
        self._transition(assistant, MessageState.PENDING)

        task = asyncio.create_task(self._stream_reply(assistant.id, history))
        self._active = task
        self._active_message_id = assistant.id
        try:
            await asyncio.wait([task])
        except asyncio.CancelledError:
            if self._active is task:
                self._cancel_active()
            raise
        finally:
            if self._active is task:
                self._active = None
                self._active_message_id = None

        if task.cancelled():
            return None
        return task.result()

    async def _stream_reply(self, message_id: str, history: list[ChatMessage]) -> Message | None:
        payload = {"messages": [m.model_dump() for m in history]}
        try:
            async with self._http.stream("POST", CHAT_PATH, json=payload) as response:
                if not response.is_success:
                    body = await response.aread()
                    logger.warning(
                        f"Chat request failed: {response.status_code} - "
                        f"{body.decode('utf-8', errors='replace')}"
                    )
                    rate_limited = response.status_code == httpx.codes.TOO_MANY_REQUESTS
                    self._fail(
                        message_id,
                        RATE_LIMIT_ERROR if rate_limited else GENERIC_ERROR,
                        rate_limited=rate_limited,
                    )
                    return None

                async for text in response.aiter_text():
                    if not text:
                        continue
                    message = self.conversation.append_content(message_id, text)
                    if message is None:
                        logger.debug(f"Dropping fragment for removed message {message_id}")
                        return None
                    self._states[message_id] = MessageState.STREAMING
                    self._emit(
                        StreamEvent(
                            message_id=message_id,
                            state=MessageState.STREAMING,
                            content=message.content,
                            delta=text,
                        )
                    )
        except asyncio.CancelledError:
            logger.debug(f"Reply {message_id} cancelled")
            raise
        except httpx.HTTPError as e:
            logger.warning(f"Chat stream failed: {e}")
            self._fail(message_id, GENERIC_ERROR)
            return None
        except Exception:
            logger.exception(f"Reply {message_id} aborted")
            self._fail(message_id, GENERIC_ERROR)
            return None

        message = self.conversation.mark_complete(message_id)
        if message is None:
            return None
        self.retry_count = 0
        self._transition(message, MessageState.COMPLETE)
        return message

    def _transition(self, message: Message, state: MessageState) -> None:
        self._states[message.id] = state
        self._emit(StreamEvent(message_id=message.id, state=state, content=message.content))

    def _fail(self, message_id: str, error: str, rate_limited: bool = False) -> None:
        """Roll back an unfinished assistant message and surface the error."""
        if not self.conversation.remove(message_id):
            return
        if rate_limited:
            self.retry_count += 1
        self._states[message_id] = MessageState.FAILED
        self.last_error = error
        self._emit(StreamEvent(message_id=message_id, state=MessageState.FAILED, error=error))

    def _cancel_active(self) -> None:
        task, message_id = self._active, self._active_message_id
        self._active = None
        self._active_message_id = None
        if task is None or task.done():
            return

        task.cancel()
        if message_id is not None and self.conversation.remove(message_id):
            self._states[message_id] = MessageState.FAILED
            self._emit(StreamEvent(message_id=message_id, state=MessageState.FAILED))

    def _emit(self, event: StreamEvent) -> None:
        for handler in self._handlers:
            handler(event)
