"""Static playing field drawable."""

from __future__ import annotations

import random
from typing import Optional

from PIL import Image

from pixelpong.core.models import CanvasSize
from pixelpong.render.images import encode_shuffled, image_pixels

__all__ = ["Field"]


class Field:
    """Field artwork encoded once at construction.

    The image is drawn at the canvas origin; transparent pixels are left
    untouched so other content can show through.
    """

    def __init__(
        self,
        image: Image.Image,
        size: CanvasSize,
        *,
        rng: Optional[random.Random] = None,
    ) -> None:
        self._snapshot = encode_shuffled(image_pixels(image, 0, 0, size), rng)

    def snapshot(self) -> bytes:
        return self._snapshot
