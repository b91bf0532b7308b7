"""Region sampling over the canvas connection.

Turns geometric queries into one batch of ``PX x y`` requests and
assembles the replies into a dense grid indexed ``grid[x][y]``. Cells
that are off-canvas or outside the queried shape hold the sentinel ``0``.

Two shapes are supported:

- rectangles, for reading an arbitrary block of the canvas;
- annuli ("donuts"), for asking whether anything is drawn near the edge of
  the ball without reading its interior.

When a :class:`~pixelpong.game.hitbox.HitboxMask` is passed to
:meth:`RegionSampler.sample_donut`, coordinates the mask marks as obstacles
are resolved locally to ``TARGET_COLOR`` and left out of the request batch.
"""

from __future__ import annotations

import logging
import math
from typing import TYPE_CHECKING, Iterator, List, Optional

from pixelpong.core.models import CanvasSize
from pixelpong.errors import ProtocolError, UnexpectedReplyKind
from pixelpong.net.client import CanvasClient
from pixelpong.protocol.codec import GetPixel, PixelReply
from pixelpong.settings.values import TARGET_COLOR

if TYPE_CHECKING:  # pragma: no cover - typing only
    from pixelpong.game.hitbox import HitboxMask

__all__ = ["Grid", "RegionSampler", "donut_coordinates"]

logger = logging.getLogger(__name__)

Grid = List[List[int]]


def donut_coordinates(
    cx: int,
    cy: int,
    inner_radius: float,
    outer_radius: float,
    size: CanvasSize,
) -> Iterator[tuple[int, int]]:
    """Yield on-canvas coordinates whose distance to (cx, cy) is in
    ``[inner_radius, outer_radius]``.

    The bounding square spans ``[c - r, c + r)`` on both axes with
    ``r = int(outer_radius)`` and is scanned x-major, y ascending.
    """
    r = int(outer_radius)
    for x in range(cx - r, cx + r):
        if x < 0 or x >= size.width:
            continue
        dx = x - cx
        for y in range(cy - r, cy + r):
            if y < 0 or y >= size.height:
                continue
            d = math.hypot(dx, y - cy)
            if inner_radius <= d <= outer_radius:
                yield x, y


def _empty_grid(width: int, height: int) -> Grid:
    return [[0] * height for _ in range(width)]


class RegionSampler:
    """Batched region reads against one canvas connection.

    Each query issues exactly one batch and then reads its replies, so a
    sampler must not share its client with any other task.
    """

    def __init__(self, client: CanvasClient, size: CanvasSize) -> None:
        self._client = client
        self._size = size

    @property
    def size(self) -> CanvasSize:
        return self._size

    async def _fetch(self, coords: list[tuple[int, int]]) -> list[PixelReply]:
        if not coords:
            return []
        await self._client.write_batch(GetPixel(x, y) for x, y in coords)
        replies = await self._client.read_replies(len(coords), last_expected=coords[-1])
        out: list[PixelReply] = []
        for reply in replies:
            if not isinstance(reply, PixelReply):
                raise UnexpectedReplyKind(f"expected a PX reply, got {reply!r}")
            out.append(reply)
        logger.debug("sampled %d/%d pixels", len(out), len(coords))
        return out

    async def sample_rect(
        self, x_offset: int, y_offset: int, width: int, height: int
    ) -> Grid:
        """Read a ``width`` x ``height`` block whose top-left is the offset.

        The offset may place part or all of the block off-canvas; those
        cells stay ``0``.
        """
        coords = [
            (x, y)
            for x in range(x_offset, x_offset + width)
            for y in range(y_offset, y_offset + height)
            if self._size.contains(x, y)
        ]
        grid = _empty_grid(width, height)
        for reply in await self._fetch(coords):
            gx = reply.x - x_offset
            gy = reply.y - y_offset
            if not (0 <= gx < width and 0 <= gy < height):
                raise ProtocolError(
                    "reply outside requested rectangle", f"PX {reply.x} {reply.y}"
                )
            grid[gx][gy] = reply.rgb
        return grid

    async def sample_donut(
        self,
        cx: int,
        cy: int,
        inner_radius: float,
        outer_radius: float,
        mask: Optional["HitboxMask"] = None,
    ) -> Grid:
        """Read the ring between two radii around (cx, cy).

        The grid is ``2r`` x ``2r`` (``r = int(outer_radius)``) with the
        query point at index ``(r, r)``.
        """
        r = int(outer_radius)
        grid = _empty_grid(2 * r, 2 * r)
        coords: list[tuple[int, int]] = []
        for x, y in donut_coordinates(cx, cy, inner_radius, outer_radius, self._size):
            if mask is not None and mask.is_obstacle(x, y):
                grid[x - cx + r][y - cy + r] = TARGET_COLOR
                continue
            coords.append((x, y))

        for reply in await self._fetch(coords):
            gx = reply.x - cx + r
            gy = reply.y - cy + r
            if not (0 <= gx < 2 * r and 0 <= gy < 2 * r):
                raise ProtocolError(
                    "reply outside requested annulus", f"PX {reply.x} {reply.y}"
                )
            grid[gx][gy] = reply.rgb
        return grid
