"""Game orchestration.

Startup: open the physics connection, ask the canvas for its size, build
the field, scoreboard and ball for that size. Run: one physics loop at the
configured tick rate plus N writer loops per drawable, each writer on its
own connection. The first task to stop, for whatever reason, stops the
game; its error is re-raised to the caller after every other task has been
cancelled and every connection closed.
"""

from __future__ import annotations

import asyncio
import logging
import random
from datetime import datetime, timezone
from typing import Optional

from pixelpong.core.events import GOAL_TOPIC, EventBus, pack
from pixelpong.core.models import CanvasSize, GoalEvent
from pixelpong.core.time import RealTimeSource, TickPacer, TimeSource
from pixelpong.game.ball import Ball
from pixelpong.game.draw import start_drawing
from pixelpong.game.field import Field
from pixelpong.game.hitbox import HitboxMask
from pixelpong.game.score import Scoreboard
from pixelpong.net.client import CanvasClient
from pixelpong.net.sampler import RegionSampler
from pixelpong.render.assets import ball_image, field_images
from pixelpong.render.images import load_image
from pixelpong.settings.schema import Settings

__all__ = ["Game"]

logger = logging.getLogger(__name__)


class Game:
    """Owns the physics connection and every running task."""

    def __init__(
        self,
        settings: Settings,
        client: CanvasClient,
        size: CanvasSize,
        *,
        ts: Optional[TimeSource] = None,
        rng: Optional[random.Random] = None,
    ) -> None:
        self._settings = settings
        self._client = client
        self._size = size
        self._ts: TimeSource = ts or RealTimeSource()
        self._bus = EventBus()

        field_img, hitbox_img = field_images(size)
        if settings.field_image:
            field_img = load_image(settings.field_image)
        if settings.hitbox_image:
            hitbox_img = load_image(settings.hitbox_image)
        if settings.ball_image:
            sprite = load_image(settings.ball_image)
        else:
            sprite = ball_image(settings.physics.ball_image_size)

        self.hitbox = HitboxMask(hitbox_img)
        self.field = Field(field_img, size, rng=rng)
        self.scoreboard = Scoreboard(
            size, bus=self._bus, font_path=settings.font_path, rng=rng
        )
        self.ball = Ball(
            size, sprite, hitbox=self.hitbox, physics=settings.physics, rng=rng
        )
        self.ticks = 0
        self.missed_ticks = 0

    @classmethod
    async def create(
        cls,
        settings: Settings,
        *,
        ts: Optional[TimeSource] = None,
        rng: Optional[random.Random] = None,
    ) -> "Game":
        client = await CanvasClient.connect(settings.server_address)
        try:
            size = await client.get_size()
            logger.info(
                "connected to %s, canvas %dx%d",
                settings.server_address,
                size.width,
                size.height,
            )
            return cls(settings, client, size, ts=ts, rng=rng)
        except BaseException:
            await client.close()
            raise

    @property
    def size(self) -> CanvasSize:
        return self._size

    @property
    def bus(self) -> EventBus:
        return self._bus

    async def physics_loop(self) -> None:
        """Tick the ball forever at the configured rate."""
        sampler = RegionSampler(self._client, self._size)
        pacer = TickPacer(self._ts, self._settings.fps)
        while True:
            await pacer.wait()
            if pacer.missed > self.missed_ticks:
                logger.debug(
                    "physics behind schedule, %d tick(s) dropped",
                    pacer.missed - self.missed_ticks,
                )
                self.missed_ticks = pacer.missed
            result = await self.ball.tick(sampler)
            self.ticks += 1
            if result.goal is not None:
                event = GoalEvent(ts=datetime.now(timezone.utc), side=result.goal)
                await self._bus.publish(GOAL_TOPIC, pack(event.model_dump(mode="json")))

    async def run(self) -> None:
        """Run until the first task stops; re-raise its error."""
        loops = self._settings.draw_loops
        addr = self._settings.server_address
        tasks: list[asyncio.Task[None]] = [
            asyncio.create_task(self.physics_loop(), name="physics"),
            asyncio.create_task(self.scoreboard.run(), name="scoreboard"),
        ]
        try:
            tasks += await start_drawing(self.ball, addr, loops.ball, name="ball")
            tasks += await start_drawing(self.field, addr, loops.field, name="field")
            tasks += await start_drawing(
                self.scoreboard, addr, loops.score, name="score"
            )
            done, _ = await asyncio.wait(tasks, return_when=asyncio.FIRST_COMPLETED)
            for task in done:
                exc = task.exception()
                if exc is not None:
                    logger.error("task %s failed: %s", task.get_name(), exc)
                    raise exc
            stopped = ", ".join(t.get_name() for t in done)
            raise RuntimeError(f"task(s) stopped unexpectedly: {stopped}")
        finally:
            for task in tasks:
                task.cancel()
            await asyncio.gather(*tasks, return_exceptions=True)
            await self._bus.close()
            await self._client.close()
            logger.debug(
                "stopped after %d ticks (%d missed), bus metrics: %s",
                self.ticks,
                self.missed_ticks,
                self._bus.metrics(),
            )
