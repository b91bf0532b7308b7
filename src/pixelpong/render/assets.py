"""Procedurally generated default assets.

Used when no image paths are configured. The field and its hitbox mask
are generated together for one canvas size so goals and posts line up:

- goal lines: a band ``GOAL_DEPTH`` pixels deep along the left and right
  edges, spanning the middle third of the height;
- goal posts: short red bars at both ends of each goal, drawn on the
  canvas and marked as obstacles in the mask;
- center line and center circle, drawn only (no hitbox).
"""

from __future__ import annotations

from typing import Optional

from PIL import Image, ImageDraw

from pixelpong.core.models import CanvasSize
from pixelpong.settings.values import MASK_COLORS

__all__ = ["GOAL_DEPTH", "POST_SIZE", "ball_image", "field_images"]

# Must be at least one tick of travel so a goal cannot be skipped
GOAL_DEPTH = 12
POST_SIZE = 16

_LINE = (255, 255, 255, 255)
_POST = (*MASK_COLORS["obstacle"], 255)
_BALL_FILL = (240, 240, 240, 255)
_BALL_EDGE = (60, 60, 60, 255)


def ball_image(size_px: int) -> Image.Image:
    """A light disc with a dark rim on a transparent square."""
    img = Image.new("RGBA", (size_px, size_px), (0, 0, 0, 0))
    ImageDraw.Draw(img).ellipse(
        (0, 0, size_px - 1, size_px - 1), fill=_BALL_FILL, outline=_BALL_EDGE, width=2
    )
    return img


def _goal_span(size: CanvasSize) -> tuple[int, int]:
    return size.height // 3, (2 * size.height) // 3


def field_images(
    size: CanvasSize, goal_depth: Optional[int] = None
) -> tuple[Image.Image, Image.Image]:
    """Return ``(field, hitbox)`` RGBA images for a canvas of *size*."""
    depth = GOAL_DEPTH if goal_depth is None else goal_depth
    w, h = size.width, size.height
    top, bottom = _goal_span(size)

    field = Image.new("RGBA", (w, h), (0, 0, 0, 0))
    hitbox = Image.new("RGBA", (w, h), (0, 0, 0, 0))
    fd = ImageDraw.Draw(field)
    hd = ImageDraw.Draw(hitbox)

    # Center line and circle
    fd.line((w // 2, 0, w // 2, h - 1), fill=_LINE, width=3)
    r = min(w, h) // 8
    fd.ellipse((w // 2 - r, h // 2 - r, w // 2 + r, h // 2 + r), outline=_LINE, width=3)

    # Goal lines
    fd.line((depth, top, depth, bottom), fill=_LINE, width=2)
    fd.line((w - 1 - depth, top, w - 1 - depth, bottom), fill=_LINE, width=2)
    hd.rectangle((0, top, depth - 1, bottom), fill=(*MASK_COLORS["goal_left"], 255))
    hd.rectangle(
        (w - depth, top, w - 1, bottom), fill=(*MASK_COLORS["goal_right"], 255)
    )

    # Posts, above and below each goal mouth
    for x0 in (0, w - POST_SIZE):
        for y0 in (top - POST_SIZE, bottom + 1):
            box = (x0, y0, x0 + POST_SIZE - 1, y0 + POST_SIZE - 1)
            fd.rectangle(box, fill=_POST)
            hd.rectangle(box, fill=_POST)

    return field, hitbox
