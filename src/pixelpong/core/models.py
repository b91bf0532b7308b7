from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import Literal

from pydantic import BaseModel, Field

GoalSide = Literal["left", "right"]


@dataclass(slots=True, frozen=True)
class CanvasSize:
    """Canvas dimensions as reported by the server's SIZE reply."""

    width: int
    height: int

    def contains(self, x: int, y: int) -> bool:
        return 0 <= x < self.width and 0 <= y < self.height

    @property
    def center(self) -> tuple[float, float]:
        return self.width / 2.0, self.height / 2.0


@dataclass(slots=True, frozen=True)
class BallState:
    """Ball center and heading (radians, as returned by ``atan2``).

    Replaced as a whole value on every tick so readers never see a torn
    mix of old and new fields.
    """

    x: float
    y: float
    heading: float


class GoalEvent(BaseModel):
    """A goal detected by the physics loop.

    ``side`` is the canvas half holding the ball's center when the goal
    line was touched.
    """

    ts: datetime = Field(..., description="Detection timestamp (UTC)")
    side: GoalSide = Field(..., description="Canvas half of the goal")

    def __repr__(self) -> str:  # pragma: no cover
        return f"GoalEvent({self.side} @ {self.ts.isoformat(timespec='seconds')})"
