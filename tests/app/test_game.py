from __future__ import annotations

import asyncio
import logging
import random

import pytest

from pixelpong.app.game import Game
from pixelpong.core.time import SimTimeSource
from pixelpong.errors import ProtocolError
from pixelpong.settings.schema import DrawLoops, Settings


def _settings(address: str, **loops: int) -> Settings:
    return Settings(
        server_address=address,
        fps=500.0,
        draw_loops=DrawLoops(**loops),
    )


@pytest.mark.asyncio
async def test_create_reads_canvas_size(canvas, isolated_home) -> None:
    canvas.width, canvas.height = 200, 150
    game = await Game.create(_settings(canvas.address), rng=random.Random(3))
    try:
        assert (game.size.width, game.size.height) == (200, 150)
        assert (game.ball.state.x, game.ball.state.y) == (100.0, 75.0)
        assert game.hitbox.size == (200, 150)
        assert game.field.snapshot()
        assert game.scoreboard.snapshot()
    finally:
        await game._client.close()


@pytest.mark.asyncio
async def test_create_fails_on_bad_size_reply(canvas, isolated_home) -> None:
    canvas.size_reply = "nonsense"
    with pytest.raises(ProtocolError):
        await Game.create(_settings(canvas.address))


@pytest.mark.asyncio
async def test_physics_loop_ticks(canvas, isolated_home) -> None:
    canvas.width, canvas.height = 200, 150
    game = await Game.create(_settings(canvas.address))
    task = asyncio.create_task(game.physics_loop())
    try:
        for _ in range(500):
            if game.ticks >= 2:
                break
            await asyncio.sleep(0.01)
        assert game.ticks >= 2
        assert canvas.gets
    finally:
        task.cancel()
        await asyncio.gather(task, return_exceptions=True)
        await game._client.close()


@pytest.mark.asyncio
async def test_run_stops_on_first_failure(canvas, isolated_home) -> None:
    canvas.width, canvas.height = 200, 150
    canvas.garbage_after = 5
    game = await Game.create(_settings(canvas.address, ball=2, field=1, score=1))
    with pytest.raises(ProtocolError):
        await asyncio.wait_for(game.run(), timeout=10.0)
    prefixes = ("physics", "scoreboard", "ball-", "field-", "score-")
    leftover = [t for t in asyncio.all_tasks() if t.get_name().startswith(prefixes)]
    assert leftover == []


@pytest.mark.asyncio
async def test_physics_loop_counts_dropped_ticks(canvas, isolated_home) -> None:
    canvas.width, canvas.height = 200, 150
    ts = SimTimeSource()
    game = await Game.create(_settings(canvas.address), ts=ts)
    task = asyncio.create_task(game.physics_loop())
    try:
        for _ in range(500):
            if game.ticks >= 1:
                break
            await asyncio.sleep(0.01)
        # 500 Hz: a 0.1 s stall skips dozens of ticks
        ts.advance(0.1)
        for _ in range(500):
            if game.missed_ticks:
                break
            await asyncio.sleep(0.01)
        assert game.missed_ticks > 0
        # No catch-up burst after the stall
        await asyncio.sleep(0.05)
        assert 2 <= game.ticks <= 3
    finally:
        task.cancel()
        await asyncio.gather(task, return_exceptions=True)
        await game._client.close()


@pytest.mark.asyncio
async def test_run_logs_tick_and_bus_totals(canvas, isolated_home, caplog) -> None:
    caplog.set_level(logging.DEBUG, logger="pixelpong.app.game")
    canvas.width, canvas.height = 200, 150
    canvas.garbage_after = 5
    game = await Game.create(_settings(canvas.address, ball=1, field=1, score=1))
    with pytest.raises(ProtocolError):
        await asyncio.wait_for(game.run(), timeout=10.0)
    assert "stopped after" in caplog.text
    assert "bus metrics" in caplog.text
