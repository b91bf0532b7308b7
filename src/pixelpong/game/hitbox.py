"""Local hitbox mask.

The mask is an RGBA image the size of the canvas whose colors classify
regions of the field: obstacles the ball bounces off and the left and
right goal lines. It is only consulted locally and never sent to the
server. Obstacle pixels must be fully opaque; goal pixels count at any
nonzero alpha.
"""

from __future__ import annotations

import enum
from typing import Tuple

from PIL import Image

from pixelpong.settings.values import MASK_COLORS

__all__ = ["MaskClass", "HitboxMask"]

RGB = Tuple[int, int, int]


class MaskClass(enum.Enum):
    NONE = "none"
    OBSTACLE = "obstacle"
    GOAL_LEFT = "goal_left"
    GOAL_RIGHT = "goal_right"


class HitboxMask:
    """Per-pixel classification backed by a Pillow image."""

    def __init__(
        self,
        image: Image.Image,
        *,
        obstacle: RGB = MASK_COLORS["obstacle"],
        goal_left: RGB = MASK_COLORS["goal_left"],
        goal_right: RGB = MASK_COLORS["goal_right"],
    ) -> None:
        self._image = image.convert("RGBA")
        self._pixels = self._image.load()
        self._width, self._height = self._image.size
        self._classes: dict[RGB, MaskClass] = {
            tuple(goal_right): MaskClass.GOAL_RIGHT,  # type: ignore[dict-item]
            tuple(goal_left): MaskClass.GOAL_LEFT,  # type: ignore[dict-item]
            tuple(obstacle): MaskClass.OBSTACLE,  # type: ignore[dict-item]
        }

    @property
    def size(self) -> tuple[int, int]:
        return self._width, self._height

    def classify(self, x: int, y: int) -> MaskClass:
        """Return the class of mask pixel (x, y); NONE outside the image.

        Goal colors count at any alpha above 0; obstacles must be fully
        opaque.
        """
        if not (0 <= x < self._width and 0 <= y < self._height):
            return MaskClass.NONE
        r, g, b, a = self._pixels[x, y]
        if a == 0:
            return MaskClass.NONE
        cls = self._classes.get((r, g, b), MaskClass.NONE)
        if cls is MaskClass.OBSTACLE and a != 255:
            return MaskClass.NONE
        return cls

    def is_obstacle(self, x: int, y: int) -> bool:
        return self.classify(x, y) is MaskClass.OBSTACLE

    def is_goal(self, x: int, y: int) -> bool:
        return self.classify(x, y) in (MaskClass.GOAL_LEFT, MaskClass.GOAL_RIGHT)
