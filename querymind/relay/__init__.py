"""Relay between the browser client and the upstream completion service.

Responsibilities:
    - Forward message history to an OpenAI-compatible chat completions API
    - Re-frame the upstream event stream into plain text fragments
    - Map upstream failures onto a single UpstreamError

Keeps the HTTP layer unaware of the upstream wire protocol.
"""

from querymind.relay.config import RelayConfig, get_relay_config
from querymind.relay.frames import DONE, SKIP, Frame, iter_fragments, parse_frame
from querymind.relay.upstream import CompletionRelay, UpstreamError, get_relay

__all__ = [
    "DONE",
    "SKIP",
    "CompletionRelay",
    "Frame",
    "RelayConfig",
    "UpstreamError",
    "get_relay",
    "get_relay_config",
    "iter_fragments",
    "parse_frame",
]
