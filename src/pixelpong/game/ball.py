"""Ball physics driven by canvas reads.

The ball has no local picture of the world. Each tick it asks the server
for the colors in a thin ring around its surface and bounces off anything
drawn in ``TARGET_COLOR``; obstacle pixels from the hitbox mask are merged
into that ring locally. Goals are checked against the mask only.

One tick:

1. movement = speed * (cos θ, sin θ)
2. wall check on the candidate position; crossing an edge inverts the
   movement component (``BounceOutcome.EDGE``) and skips step 3
3. sample the ring ``[R - band/2, R + band/2]``; the target pixel
   nearest to the center (first in x-major scan order on ties) reflects
   the heading (``BounceOutcome.OBSTACLE``); a reflected component that
   would push the ball past a canvas edge is dropped for this tick
4. move, then take the heading from the movement vector
5. a goal mask pixel within ``[R - goal_band, R]`` scores for the canvas
   half holding the center and resets the ball
6. re-render the snapshot

Be careful with the physics constants (see ``settings/values.yml``): a
ring narrower than the per-tick travel lets the ball tunnel through thin
obstacles.
"""

from __future__ import annotations

import enum
import logging
import math
import random
from dataclasses import dataclass
from typing import Optional

from PIL import Image

from pixelpong.core.models import BallState, CanvasSize, GoalSide
from pixelpong.core.shared import Shared
from pixelpong.game.hitbox import HitboxMask
from pixelpong.net.sampler import Grid, RegionSampler, donut_coordinates
from pixelpong.render.images import encode_shuffled, image_pixels
from pixelpong.settings.schema import PhysicsConfig
from pixelpong.settings.values import TARGET_COLOR

__all__ = ["Ball", "BounceOutcome", "TickResult", "nearest_target"]

logger = logging.getLogger(__name__)


class BounceOutcome(enum.Enum):
    NONE = "none"
    EDGE = "edge"
    OBSTACLE = "obstacle"


@dataclass(slots=True, frozen=True)
class TickResult:
    bounce: BounceOutcome
    goal: Optional[GoalSide] = None


def nearest_target(grid: Grid, radius: int) -> Optional[tuple[int, int]]:
    """Return the target cell closest to the grid center as an offset.

    *radius* is the index of the center cell on both axes. Scan order is
    x-major, y ascending; the first of several equidistant cells wins.
    """
    best: Optional[tuple[int, int]] = None
    best_d = math.inf
    for gx, column in enumerate(grid):
        for gy, rgb in enumerate(column):
            if rgb != TARGET_COLOR:
                continue
            dx, dy = gx - radius, gy - radius
            d = math.hypot(dx, dy)
            if d < best_d:
                best_d = d
                best = (dx, dy)
    return best


class Ball:
    """Ball state, physics tick and render snapshot.

    Only the physics task calls :meth:`tick`, :meth:`reset` and
    :meth:`place`; draw tasks only call :meth:`snapshot`.
    """

    def __init__(
        self,
        size: CanvasSize,
        image: Image.Image,
        *,
        hitbox: Optional[HitboxMask] = None,
        physics: Optional[PhysicsConfig] = None,
        rng: Optional[random.Random] = None,
    ) -> None:
        self._size = size
        self._image = image.convert("RGBA")
        self._hitbox = hitbox
        self._physics = physics or PhysicsConfig()
        self._rng = rng or random.Random()
        cx, cy = size.center
        self._state: Shared[BallState] = Shared(BallState(cx, cy, 0.0))
        self._snapshot: Shared[bytes] = Shared(b"")
        self.reset()

    @property
    def state(self) -> BallState:
        return self._state.get()

    @property
    def physics(self) -> PhysicsConfig:
        return self._physics

    def snapshot(self) -> bytes:
        return self._snapshot.get()

    def reset(self) -> None:
        """Move to the canvas center with a random heading in (-π, π]."""
        cx, cy = self._size.center
        heading = math.pi - self._rng.random() * 2.0 * math.pi
        self.place(cx, cy, heading)

    def place(self, x: float, y: float, heading: float) -> None:
        self._state.set(BallState(x, y, heading))
        self._render()

    def _render(self) -> None:
        st = self._state.get()
        r = self._physics.ball_radius
        commands = image_pixels(
            self._image, int(st.x - r), int(st.y - r), self._size
        )
        self._snapshot.set(encode_shuffled(commands, self._rng))

    def wall_check(
        self, st: BallState, mx: float, my: float
    ) -> tuple[float, float, BounceOutcome]:
        """Invert movement components whose step would cross a canvas edge."""
        r = self._physics.ball_radius
        nx, ny = st.x + mx, st.y + my
        outcome = BounceOutcome.NONE
        if (mx < 0 and nx - r <= 0) or (mx > 0 and nx + r >= self._size.width):
            mx = -mx
            outcome = BounceOutcome.EDGE
        if (my < 0 and ny - r <= 0) or (my > 0 and ny + r >= self._size.height):
            my = -my
            outcome = BounceOutcome.EDGE
        return mx, my, outcome

    def _edge_limit(self, st: BallState, mx: float, my: float) -> tuple[float, float]:
        """Zero movement components that would push the ball off the canvas."""
        r = self._physics.ball_radius
        nx, ny = st.x + mx, st.y + my
        if (mx < 0 and nx - r < 0) or (mx > 0 and nx + r > self._size.width):
            mx = 0.0
        if (my < 0 and ny - r < 0) or (my > 0 and ny + r > self._size.height):
            my = 0.0
        return mx, my

    async def obstacle_check(
        self, sampler: RegionSampler, st: BallState
    ) -> Optional[float]:
        """Return the bounce heading if a target pixel touches the ball."""
        phys = self._physics
        outer = phys.bounce_outer_radius
        grid = await sampler.sample_donut(
            int(st.x), int(st.y), phys.bounce_inner_radius, outer, self._hitbox
        )
        hit = nearest_target(grid, int(outer))
        if hit is None:
            return None
        nearest_dir = math.atan2(hit[1], hit[0])
        reflect = nearest_dir + math.pi
        return reflect - (st.heading + math.pi - reflect)

    def goal_scored(self) -> Optional[GoalSide]:
        """Check the goal ring against the mask; no network access."""
        if self._hitbox is None:
            return None
        st = self._state.get()
        phys = self._physics
        for x, y in donut_coordinates(
            int(st.x),
            int(st.y),
            phys.ball_radius - phys.goal_band,
            phys.ball_radius,
            self._size,
        ):
            if self._hitbox.is_goal(x, y):
                return "right" if st.x > self._size.width / 2.0 else "left"
        return None

    async def tick(self, sampler: RegionSampler) -> TickResult:
        st = self._state.get()
        speed = self._physics.speed
        mx = speed * math.cos(st.heading)
        my = speed * math.sin(st.heading)

        mx, my, outcome = self.wall_check(st, mx, my)
        if outcome is BounceOutcome.NONE:
            bounce_dir = await self.obstacle_check(sampler, st)
            if bounce_dir is not None:
                mx = speed * math.cos(bounce_dir)
                my = speed * math.sin(bounce_dir)
                outcome = BounceOutcome.OBSTACLE
                logger.debug(
                    "obstacle bounce at (%.1f, %.1f): %.3f -> %.3f",
                    st.x,
                    st.y,
                    st.heading,
                    bounce_dir,
                )

        heading = math.atan2(my, mx)
        if outcome is BounceOutcome.OBSTACLE:
            # No second bounce; the next tick's wall check flips the heading
            mx, my = self._edge_limit(st, mx, my)
        self._state.set(BallState(st.x + mx, st.y + my, heading))

        goal = self.goal_scored()
        if goal is not None:
            self.reset()
        else:
            self._render()
        return TickResult(bounce=outcome, goal=goal)
