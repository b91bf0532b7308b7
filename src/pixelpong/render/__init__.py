"""Rendering helpers: asset generation and pixel command builders."""

from .assets import ball_image, field_images
from .images import encode_shuffled, image_pixels, load_image, text_with_background

__all__ = [
    "ball_image",
    "encode_shuffled",
    "field_images",
    "image_pixels",
    "load_image",
    "text_with_background",
]
