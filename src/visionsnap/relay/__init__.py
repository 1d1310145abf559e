"""HTTP relay for visionsnap.

Public API:
    create_app -- FastAPI application factory
    StreamDecoder, encode_text_event, DONE_EVENT -- Event-stream framing
"""

from visionsnap.relay.events import DONE_EVENT, StreamDecoder, encode_text_event

__all__ = ["DONE_EVENT", "StreamDecoder", "encode_text_event", "create_app"]


def __getattr__(name: str) -> object:
    """Lazy import for the server, which pulls in FastAPI."""
    if name == "create_app":
        from visionsnap.relay.server import create_app
        return create_app
    raise AttributeError(f"module {__name__!r} has no attribute {name!r}")
