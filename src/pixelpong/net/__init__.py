"""Network layer: canvas connection and region sampling."""

from .client import CanvasClient, parse_address
from .sampler import RegionSampler, donut_coordinates

__all__ = ["CanvasClient", "RegionSampler", "donut_coordinates", "parse_address"]
