"""Lenient parser for the upstream server-sent event stream.

Each upstream line is either a ``data: <json>`` frame carrying an incremental
delta, the ``data: [DONE]`` sentinel, or noise. A bad line is skipped on its
own; it never ends the stream.
"""

import json
import logging
from collections.abc import AsyncGenerator, AsyncIterable
from typing import NamedTuple

logger = logging.getLogger(__name__)

DATA_PREFIX = "data: "
DONE_SENTINEL = "[DONE]"


class Frame(NamedTuple):
    """Result of parsing one upstream line.

    Attributes:
        content: Text delta carried by the frame, None when there is nothing to emit.
        done: Whether the line is the termination sentinel.
    """

    content: str | None = None
    done: bool = False


SKIP = Frame()
DONE = Frame(done=True)


def parse_frame(line: str) -> Frame:
    """Parse a single upstream line.

    Args:
        line: One line of the upstream event stream, without its newline.

    Returns:
        A frame with content, ``SKIP`` for lines carrying nothing to emit,
        or ``DONE`` for the termination sentinel.
    """
    line = line.strip()
    if not line.startswith(DATA_PREFIX.rstrip()):
        return SKIP

    payload = line[len(DATA_PREFIX.rstrip()):].strip()
    if payload == DONE_SENTINEL:
        return DONE
    if not payload:
        return SKIP

    try:
        data = json.loads(payload)
    except json.JSONDecodeError as e:
        logger.debug(f"Dropping malformed frame: {e}")
        return SKIP

    try:
        content = data["choices"][0]["delta"].get("content")
    except (KeyError, IndexError, TypeError, AttributeError):
        return SKIP

    if not isinstance(content, str) or not content:
        return SKIP
    return Frame(content=content)


async def iter_fragments(lines: AsyncIterable[str]) -> AsyncGenerator[str]:
    """Turn upstream lines into plain text fragments.

    Args:
        lines: Upstream event stream, one line per item.

    Yields:
        Content fragments in arrival order. Stops at the sentinel.
    """
    async for line in lines:
        if not line.strip():
            continue
        frame = parse_frame(line)
        if frame.done:
            return
        if frame.content is not None:
            yield frame.content
