"""Error taxonomy for the canvas client.

Every error raised here is fatal to the task that owns the connection.
Nothing in the package retries or reconnects; callers propagate these up
to the orchestrator, which stops the whole game on the first one.
"""

from __future__ import annotations

__all__ = [
    "PixelflutError",
    "TransportError",
    "ProtocolError",
    "UnexpectedReplyKind",
]


class PixelflutError(Exception):
    """Base class for all canvas client failures."""


class TransportError(PixelflutError):
    """The connection failed, was reset, or was closed by the server."""


class ProtocolError(PixelflutError):
    """A reply line did not match any known response shape.

    The offending line is kept on ``line`` for diagnostics.
    """

    def __init__(self, message: str, line: str | None = None) -> None:
        super().__init__(message if line is None else f"{message}: {line!r}")
        self.line = line


class UnexpectedReplyKind(PixelflutError):
    """A well-formed reply of the wrong kind arrived (e.g. SIZE for PX)."""
