from __future__ import annotations

import asyncio
from typing import AsyncIterator, Callable, Optional

import pytest
import pytest_asyncio

from pixelpong.core.models import CanvasSize


class FakeCanvas:
    """Minimal in-process Pixelflut server for tests.

    Answers SIZE and ``PX x y`` queries in request order and records every
    line it receives. Pixels default to ``color_fn(x, y)``.
    """

    def __init__(
        self,
        width: int = 800,
        height: int = 600,
        color_fn: Optional[Callable[[int, int], int]] = None,
    ) -> None:
        self.width = width
        self.height = height
        self.pixels: dict[tuple[int, int], int] = {}
        self.color_fn = color_fn or (lambda x, y: 0)
        self.gets: list[tuple[int, int]] = []
        self.sets: list[tuple[int, int, int]] = []
        self.size_reply: Optional[str] = None
        # Reply with this line instead of a pixel once this many gets arrived
        self.garbage_after: Optional[int] = None
        # Shift pixel replies to provoke out-of-region errors
        self.reply_shift: int = 0
        self.connections = 0
        self._server: Optional[asyncio.AbstractServer] = None
        self._writers: list[asyncio.StreamWriter] = []

    @property
    def size(self) -> CanvasSize:
        return CanvasSize(self.width, self.height)

    @property
    def address(self) -> str:
        assert self._server is not None
        host, port = self._server.sockets[0].getsockname()[:2]
        return f"{host}:{port}"

    def color(self, x: int, y: int) -> int:
        return self.pixels.get((x, y), self.color_fn(x, y))

    def _answer(self, text: str) -> Optional[str]:
        parts = text.split()
        if not parts:
            return None
        if parts[0].upper() == "SIZE":
            return self.size_reply or f"SIZE {self.width} {self.height}"
        if parts[0] == "PX" and len(parts) == 3:
            x, y = int(parts[1]), int(parts[2])
            self.gets.append((x, y))
            if self.garbage_after is not None and len(self.gets) > self.garbage_after:
                return "garbage"
            return f"PX {x + self.reply_shift} {y} {self.color(x, y):06x}"
        if parts[0] == "PX" and len(parts) == 4:
            x, y, rgb = int(parts[1]), int(parts[2]), int(parts[3], 16)
            self.sets.append((x, y, rgb))
            self.pixels[(x, y)] = rgb
        return None

    async def _handle(
        self, reader: asyncio.StreamReader, writer: asyncio.StreamWriter
    ) -> None:
        self.connections += 1
        self._writers.append(writer)
        try:
            while True:
                line = await reader.readline()
                if not line:
                    break
                reply = self._answer(line.decode("ascii").strip())
                if reply is not None:
                    writer.write(reply.encode("ascii") + b"\n")
                    await writer.drain()
        except (ConnectionResetError, BrokenPipeError):
            pass
        finally:
            writer.close()

    async def start(self) -> None:
        self._server = await asyncio.start_server(self._handle, "127.0.0.1", 0)

    async def drop_connections(self) -> None:
        for w in list(self._writers):
            w.close()

    async def stop(self) -> None:
        if self._server is not None:
            self._server.close()
            await self.drop_connections()
            await self._server.wait_closed()


@pytest_asyncio.fixture
async def canvas() -> AsyncIterator[FakeCanvas]:
    fake = FakeCanvas()
    await fake.start()
    try:
        yield fake
    finally:
        await fake.stop()


@pytest.fixture
def isolated_home(tmp_path, monkeypatch: pytest.MonkeyPatch):
    monkeypatch.setenv("PIXELPONG_HOME", str(tmp_path))
    return tmp_path
