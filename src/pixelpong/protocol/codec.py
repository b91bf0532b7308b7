"""Pixelflut wire format.

Requests are ASCII lines terminated by ``\\n``:

    SIZE                  query canvas dimensions
    PX <x> <y> <rrggbb>   set a pixel (always 6 lowercase hex digits)
    PX <x> <y>            query a pixel

Replies decoded here:

    SIZE <w> <h>
    PX <x> <y> <rrggbb>

Decoding is fail-fast: a line matching neither reply shape raises
:class:`~pixelpong.errors.ProtocolError`. Skipping unknown lines would let
the reply counter drift out of step with the requests on the connection.

Usage example:

    buf = encode_batch([GetPixel(1, 2), SetPixel(3, 4, 0x00ff00)])
    # b"PX 1 2\\nPX 3 4 00ff00\\n"
    reply = decode_reply("PX 1 2 ff0000\\n")
    # PixelReply(x=1, y=2, rgb=0xff0000)
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from typing import Iterable, Union

from pixelpong.errors import ProtocolError

__all__ = [
    "GetSize",
    "SetPixel",
    "GetPixel",
    "Request",
    "SizeReply",
    "PixelReply",
    "Reply",
    "MAX_RGB",
    "encode",
    "encode_batch",
    "decode_reply",
]

MAX_RGB = 0xFFFFFF

_SIZE_RE = re.compile(r"^\s*SIZE\s+(\d+)\s+(\d+)\s*$", re.IGNORECASE)
_PX_RE = re.compile(r"^\s*PX\s+(\d+)\s+(\d+)\s+([0-9a-fA-F]{6})\s*$", re.IGNORECASE)


def _check_coord(x: int, y: int) -> None:
    if x < 0 or y < 0:
        raise ValueError(f"pixel coordinates must be non-negative: ({x}, {y})")


@dataclass(slots=True, frozen=True)
class GetSize:
    pass


@dataclass(slots=True, frozen=True)
class SetPixel:
    x: int
    y: int
    rgb: int

    def __post_init__(self) -> None:
        _check_coord(self.x, self.y)
        if not 0 <= self.rgb <= MAX_RGB:
            raise ValueError(f"rgb must fit in 24 bits: {self.rgb:#x}")


@dataclass(slots=True, frozen=True)
class GetPixel:
    x: int
    y: int

    def __post_init__(self) -> None:
        _check_coord(self.x, self.y)


Request = Union[GetSize, SetPixel, GetPixel]


@dataclass(slots=True, frozen=True)
class SizeReply:
    width: int
    height: int


@dataclass(slots=True, frozen=True)
class PixelReply:
    x: int
    y: int
    rgb: int


Reply = Union[SizeReply, PixelReply]


def encode(request: Request) -> bytes:
    """Encode a single request as one ``\\n``-terminated line."""
    if isinstance(request, SetPixel):
        return f"PX {request.x} {request.y} {request.rgb:06x}\n".encode("ascii")
    if isinstance(request, GetPixel):
        return f"PX {request.x} {request.y}\n".encode("ascii")
    if isinstance(request, GetSize):
        return b"SIZE\n"
    raise TypeError(f"not a pixelflut request: {request!r}")


def encode_batch(requests: Iterable[Request]) -> bytes:
    """Concatenate the encodings of *requests* into one contiguous buffer."""
    return b"".join(encode(r) for r in requests)


def decode_reply(line: str | bytes) -> Reply:
    """Decode one reply line.

    Raises
    ------
    ProtocolError
        If the line is neither a SIZE nor a PX reply.
    """
    if isinstance(line, bytes):
        try:
            line = line.decode("ascii")
        except UnicodeDecodeError:
            raise ProtocolError("reply is not ASCII", repr(line)) from None

    m = _PX_RE.match(line)
    if m is not None:
        return PixelReply(x=int(m.group(1)), y=int(m.group(2)), rgb=int(m.group(3), 16))
    m = _SIZE_RE.match(line)
    if m is not None:
        return SizeReply(width=int(m.group(1)), height=int(m.group(2)))
    raise ProtocolError("unrecognized reply", line)
