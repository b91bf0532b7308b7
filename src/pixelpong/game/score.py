"""Scoreboard drawable fed by goal events.

A goal in the left half of the canvas is a point for the right-hand
player and vice versa. The scoreboard listens on the ``game.goal`` topic,
bumps the matching counter and re-renders both score boxes.
"""

from __future__ import annotations

import logging
import random
from typing import Any, Dict, Optional

from pixelpong.core.events import GOAL_TOPIC, EventBus, Subscription, unpack
from pixelpong.core.models import CanvasSize, GoalEvent, GoalSide
from pixelpong.core.shared import Shared
from pixelpong.render.images import encode_shuffled, text_with_background
from pixelpong.settings.values import SCOREBOARD_LAYOUT

__all__ = ["Scoreboard"]

logger = logging.getLogger(__name__)


class Scoreboard:
    def __init__(
        self,
        size: CanvasSize,
        *,
        bus: Optional[EventBus] = None,
        layout: Optional[Dict[str, Any]] = None,
        font_path: Optional[str] = None,
        rng: Optional[random.Random] = None,
    ) -> None:
        self._size = size
        self._layout = dict(SCOREBOARD_LAYOUT if layout is None else layout)
        self._font_path = font_path
        self._rng = rng
        self._points = {"left": 0, "right": 0}
        self._snapshot: Shared[bytes] = Shared(b"")
        self._sub: Subscription | None = bus.subscribe(GOAL_TOPIC) if bus else None
        self._render()

    @property
    def points_left(self) -> int:
        return self._points["left"]

    @property
    def points_right(self) -> int:
        return self._points["right"]

    def snapshot(self) -> bytes:
        return self._snapshot.get()

    def score_goal(self, side: GoalSide) -> None:
        """Credit a goal scored into the *side* half of the field."""
        scorer = "right" if side == "left" else "left"
        self._points[scorer] += 1
        logger.info(
            "goal on the %s, score %d:%d",
            side,
            self._points["left"],
            self._points["right"],
        )
        self._render()

    async def run(self) -> None:
        """Consume goal events until the bus closes."""
        if self._sub is None:
            raise RuntimeError("Scoreboard was created without an EventBus")
        async for env in self._sub:
            event = GoalEvent.model_validate(unpack(env.payload))
            self.score_goal(event.side)

    def _box_origin(self, right: bool) -> tuple[int, int]:
        lay = self._layout
        w, h = int(lay["width"]), int(lay["height"])
        if right:
            x = max(0, self._size.width - int(lay["margin_x"]) - w)
        else:
            x = int(lay["margin_x"])
        y = max(0, min(int(lay["y"]), self._size.height - h))
        return x, y

    def _render(self) -> None:
        lay = self._layout
        fg = tuple(lay["foreground"])
        bg = tuple(lay["background"])
        commands = []
        for right, key in ((False, "left"), (True, "right")):
            x, y = self._box_origin(right)
            commands.extend(
                text_with_background(
                    x,
                    y,
                    int(lay["width"]),
                    int(lay["height"]),
                    int(lay["font_px"]),
                    fg,  # type: ignore[arg-type]
                    bg,  # type: ignore[arg-type]
                    str(self._points[key]),
                    self._font_path,
                )
            )
        commands = [c for c in commands if self._size.contains(c.x, c.y)]
        self._snapshot.set(encode_shuffled(commands, self._rng))
