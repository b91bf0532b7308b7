from __future__ import annotations

import hypothesis.strategies as st
import pytest
from hypothesis import given, settings

from pixelpong.errors import ProtocolError
from pixelpong.protocol.codec import (
    GetPixel,
    GetSize,
    PixelReply,
    SetPixel,
    SizeReply,
    decode_reply,
    encode,
    encode_batch,
)


def test_encode_requests() -> None:
    assert encode(GetSize()) == b"SIZE\n"
    assert encode(GetPixel(12, 34)) == b"PX 12 34\n"
    assert encode(SetPixel(1, 2, 0xABCDEF)) == b"PX 1 2 abcdef\n"


def test_set_pixel_keeps_leading_zeros() -> None:
    assert encode(SetPixel(0, 0, 0)) == b"PX 0 0 000000\n"
    assert encode(SetPixel(5, 6, 0x0000FF)) == b"PX 5 6 0000ff\n"


def test_encode_batch_is_contiguous() -> None:
    buf = encode_batch([GetSize(), GetPixel(0, 1), SetPixel(2, 3, 0x010203)])
    assert buf == b"SIZE\nPX 0 1\nPX 2 3 010203\n"


@pytest.mark.parametrize("rgb", [-1, 0x1000000])
def test_set_pixel_rejects_wide_colors(rgb: int) -> None:
    with pytest.raises(ValueError):
        SetPixel(0, 0, rgb)


def test_negative_coordinates_rejected() -> None:
    with pytest.raises(ValueError):
        GetPixel(-1, 0)
    with pytest.raises(ValueError):
        SetPixel(0, -3, 0)


def test_decode_size_reply() -> None:
    assert decode_reply("SIZE 800 600\n") == SizeReply(800, 600)
    assert decode_reply(b"size 1920 1080\n") == SizeReply(1920, 1080)
    assert decode_reply("  SIZE   3 4  \r\n") == SizeReply(3, 4)


def test_decode_pixel_reply() -> None:
    assert decode_reply("PX 10 20 ff0000\n") == PixelReply(10, 20, 0xFF0000)
    assert decode_reply(b"PX 0 0 00FF00\n") == PixelReply(0, 0, 0x00FF00)


@pytest.mark.parametrize(
    "line",
    [
        "",
        "\n",
        "HELLO\n",
        "PX 1 2\n",
        "PX a 2 ffffff\n",
        "PX 1 2 fffff\n",
        "PX 1 2 zzzzzz\n",
        "SIZE 800\n",
        "SIZE -1 2\n",
        b"\xff\xfe\n",
    ],
)
def test_decode_rejects_malformed(line: str | bytes) -> None:
    with pytest.raises(ProtocolError):
        decode_reply(line)


@settings(deadline=None, max_examples=200)
@given(
    x=st.integers(min_value=0, max_value=65535),
    y=st.integers(min_value=0, max_value=65535),
    rgb=st.integers(min_value=0, max_value=0xFFFFFF),
)
def test_set_pixel_line_decodes_to_same_pixel(x: int, y: int, rgb: int) -> None:
    # A set-pixel line has the same shape as a get-pixel reply
    line = encode(SetPixel(x, y, rgb))
    assert len(line.split()[-1]) == 6
    assert decode_reply(line) == PixelReply(x, y, rgb)
