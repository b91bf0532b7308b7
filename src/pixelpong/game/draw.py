"""Writer loops that keep drawables on the canvas.

A drawable only exposes its latest render snapshot: the fully encoded,
already shuffled set-pixel commands for its current appearance. Writer
loops push that buffer as one batch, over and over, as fast as the
connection accepts it. Other clients may paint over us at any time, so
there is no notion of "done".

Each loop owns its own connection; several loops may draw the same
drawable concurrently.
"""

from __future__ import annotations

import asyncio
import logging
from typing import Protocol

from pixelpong.net.client import CanvasClient

__all__ = ["Drawable", "draw", "draw_forever", "start_drawing"]

logger = logging.getLogger(__name__)


class Drawable(Protocol):
    def snapshot(self) -> bytes:
        """Return the current encoded set-pixel batch."""
        ...


async def draw(drawable: Drawable, client: CanvasClient) -> None:
    """Write the drawable's current snapshot once."""
    await client.write_bytes(drawable.snapshot())


async def draw_forever(drawable: Drawable, client: CanvasClient) -> None:
    """Redraw *drawable* until the connection fails.

    Never returns normally; transport errors propagate to the caller.
    """
    while True:
        await draw(drawable, client)
        # drain() does not suspend while the socket buffer has room, so
        # yield explicitly to keep the physics task running.
        await asyncio.sleep(0)


async def start_drawing(
    drawable: Drawable, address: str, count: int, *, name: str = "draw"
) -> list[asyncio.Task[None]]:
    """Open *count* connections and start one writer loop on each.

    Connections are opened before any task starts, so a server that
    refuses us fails here rather than inside a task.
    """
    clients: list[CanvasClient] = []
    try:
        for _ in range(count):
            clients.append(await CanvasClient.connect(address))
    except BaseException:
        for c in clients:
            await c.close()
        raise

    async def _run(client: CanvasClient) -> None:
        async with client:
            await draw_forever(drawable, client)

    tasks = [
        asyncio.create_task(_run(c), name=f"{name}-{i}") for i, c in enumerate(clients)
    ]
    logger.info("started %d writer loop(s) for %s", len(tasks), name)
    return tasks
