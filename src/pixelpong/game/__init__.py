"""Game entities: ball physics, field, scoreboard and writer loops."""

from .ball import Ball, BounceOutcome, TickResult
from .field import Field
from .hitbox import HitboxMask, MaskClass
from .score import Scoreboard

__all__ = [
    "Ball",
    "BounceOutcome",
    "Field",
    "HitboxMask",
    "MaskClass",
    "Scoreboard",
    "TickResult",
]
