"""Pixelflut protocol encoding and decoding."""

from .codec import (
    GetPixel,
    GetSize,
    PixelReply,
    SetPixel,
    SizeReply,
    decode_reply,
    encode,
    encode_batch,
)

__all__ = [
    "GetPixel",
    "GetSize",
    "PixelReply",
    "SetPixel",
    "SizeReply",
    "decode_reply",
    "encode",
    "encode_batch",
]
