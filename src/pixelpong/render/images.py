"""Turn images and text into set-pixel commands.

Everything here produces a plain list of :class:`SetPixel` commands; the
drawables shuffle and encode those lists into render snapshots with
:func:`encode_shuffled`.
"""

from __future__ import annotations

import random
from pathlib import Path
from typing import List, Optional, Tuple

from PIL import Image, ImageDraw, ImageFont

from pixelpong.core.models import CanvasSize
from pixelpong.protocol.codec import SetPixel, encode

__all__ = [
    "RGB",
    "pack_rgb",
    "load_image",
    "image_pixels",
    "text_with_background",
    "encode_shuffled",
]

RGB = Tuple[int, int, int]


def pack_rgb(rgb: RGB) -> int:
    r, g, b = rgb
    return (r << 16) | (g << 8) | b


def load_image(path: str | Path) -> Image.Image:
    """Open an image file and return it converted to RGBA."""
    with Image.open(path) as img:
        return img.convert("RGBA")


def image_pixels(
    image: Image.Image,
    x_offset: int,
    y_offset: int,
    size: Optional[CanvasSize] = None,
) -> List[SetPixel]:
    """Return one SetPixel per non-transparent pixel of *image*.

    Pixels with alpha 0 are skipped; any other alpha is drawn opaque. When
    *size* is given, pixels landing off-canvas are skipped too.
    """
    rgba = image.convert("RGBA")
    px = rgba.load()
    width, height = rgba.size
    out: List[SetPixel] = []
    for x in range(width):
        cx = x_offset + x
        if cx < 0 or (size is not None and cx >= size.width):
            continue
        for y in range(height):
            cy = y_offset + y
            if cy < 0 or (size is not None and cy >= size.height):
                continue
            r, g, b, a = px[x, y]
            if a == 0:
                continue
            out.append(SetPixel(cx, cy, (r << 16) | (g << 8) | b))
    return out


def _load_font(
    font_px: int, font_path: Optional[str]
) -> ImageFont.ImageFont | ImageFont.FreeTypeFont:
    if font_path:
        return ImageFont.truetype(font_path, font_px)
    return ImageFont.load_default(size=font_px)


def text_with_background(
    x_offset: int,
    y_offset: int,
    width: int,
    height: int,
    font_px: int,
    foreground: RGB,
    background: RGB,
    text: str,
    font_path: Optional[str] = None,
) -> List[SetPixel]:
    """Render *text* centered in a box, filling untouched cells with *background*.

    Every cell of the ``width`` x ``height`` box produces exactly one
    command, so redrawing the box fully replaces the previous text.
    """
    font = _load_font(font_px, font_path)
    img = Image.new("L", (width, height), 0)
    draw = ImageDraw.Draw(img)
    left, top, right, bottom = draw.textbbox((0, 0), text, font=font)
    tx = (width - (right - left)) // 2 - left
    ty = (height - (bottom - top)) // 2 - top
    draw.text((tx, ty), text, fill=255, font=font)

    fg = pack_rgb(foreground)
    bg = pack_rgb(background)
    px = img.load()
    return [
        SetPixel(x_offset + x, y_offset + y, fg if px[x, y] >= 128 else bg)
        for x in range(width)
        for y in range(height)
    ]


def encode_shuffled(
    commands: List[SetPixel], rng: Optional[random.Random] = None
) -> bytes:
    """Shuffle *commands* in place and encode them into one buffer.

    Drawing in scan order on a shared canvas shows sweeping bands while
    other writers race us; a random order spreads the pop-in evenly.
    """
    (rng or random).shuffle(commands)
    return b"".join(encode(cmd) for cmd in commands)
