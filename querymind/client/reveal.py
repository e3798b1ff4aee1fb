"""Word-paced reveal of a finished reply.

Purely cosmetic: the text is already complete when the reveal starts, and
the pacing is driven by a local timer, not by network arrival.
"""

import asyncio
from collections.abc import Callable, Iterator

REVEAL_DELAY = 0.03  # seconds between steps


def reveal_steps(text: str) -> Iterator[str]:
    """Yield successively longer prefixes of ``text``.

    The first word appears at once; a space pulls in the whole following
    word; any other character advances one at a time.
    """
    index = 0
    while index < len(text):
        if index == 0:
            step = len(text.split(" ")[0]) or 1
        elif text[index] == " ":
            step = 1 + len(text[index + 1 :].split(" ")[0])
        else:
            step = 1
        index = min(index + step, len(text))
        yield text[:index]


async def reveal(
    text: str,
    on_update: Callable[[str, bool], None],
    delay: float = REVEAL_DELAY,
) -> None:
    """Replay ``text`` word by word through ``on_update``.

    Args:
        text: Complete text to reveal.
        on_update: Called with the visible prefix and whether more is coming
                   (the render layer shows a cursor while it is True).
        delay: Pause between steps in seconds.
    """
    for prefix in reveal_steps(text):
        on_update(prefix, len(prefix) < len(text))
        if len(prefix) < len(text):
            await asyncio.sleep(delay)
