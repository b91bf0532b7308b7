"""Async Pixelflut canvas client.

One :class:`CanvasClient` owns exactly one TCP connection. Requests are
always written in batches (one drain per batch) and replies are read back
by count, because the protocol carries no request identifiers: the server
answers ``PX x y`` queries in the order they were sent, and that order is
the only correlation available.

Usage example:

    async with await CanvasClient.connect("[::1]:1234") as client:
        size = await client.get_size()
        await client.write_batch([GetPixel(0, 0), GetPixel(1, 0)])
        replies = await client.read_replies(2, last_expected=(1, 0))

Every method may raise :class:`~pixelpong.errors.TransportError`; the
client never retries or reconnects.
"""

from __future__ import annotations

import asyncio
import logging
from types import TracebackType
from typing import Iterable, Optional, Type

from pixelpong.core.models import CanvasSize
from pixelpong.errors import TransportError, UnexpectedReplyKind
from pixelpong.protocol.codec import (
    GetSize,
    PixelReply,
    Reply,
    Request,
    SizeReply,
    decode_reply,
    encode_batch,
)

__all__ = ["CanvasClient", "parse_address"]

logger = logging.getLogger(__name__)


def parse_address(address: str) -> tuple[str, int]:
    """Split ``host:port`` or ``[ipv6]:port`` into its parts."""
    address = address.strip()
    if address.startswith("["):
        host, sep, rest = address[1:].partition("]")
        if not sep or not rest.startswith(":"):
            raise ValueError(f"invalid server address: {address!r}")
        port_s = rest[1:]
    else:
        host, sep, port_s = address.rpartition(":")
        if not sep or not host:
            raise ValueError(f"invalid server address: {address!r}")
    try:
        port = int(port_s)
    except ValueError:
        raise ValueError(f"invalid port in server address: {address!r}") from None
    if not 0 < port < 65536:
        raise ValueError(f"port out of range in server address: {address!r}")
    return host, port


class CanvasClient:
    """Batched request writer and counted reply reader over one stream."""

    def __init__(
        self, reader: asyncio.StreamReader, writer: asyncio.StreamWriter
    ) -> None:
        self._reader = reader
        self._writer = writer
        self._closed = False

    @classmethod
    async def connect(cls, address: str) -> "CanvasClient":
        host, port = parse_address(address)
        try:
            reader, writer = await asyncio.open_connection(host, port)
        except OSError as e:
            raise TransportError(f"could not connect to {address}: {e}") from e
        logger.debug("connected to %s", address)
        return cls(reader, writer)

    async def __aenter__(self) -> "CanvasClient":
        return self

    async def __aexit__(
        self,
        exc_type: Optional[Type[BaseException]],
        exc: Optional[BaseException],
        tb: Optional[TracebackType],
    ) -> None:
        await self.close()

    async def write_bytes(self, data: bytes) -> None:
        """Write an already-encoded buffer and drain once."""
        if self._closed:
            raise TransportError("write on closed connection")
        try:
            self._writer.write(data)
            await self._writer.drain()
        except (OSError, RuntimeError) as e:
            raise TransportError(f"write failed: {e}") from e

    async def write_batch(self, requests: Iterable[Request]) -> None:
        """Encode *requests* into one buffer, write it and drain once.

        Slower than :meth:`write_bytes` with a precomputed buffer; the
        draw loops use that instead.
        """
        await self.write_bytes(encode_batch(requests))

    async def _read_line(self) -> bytes:
        try:
            line = await self._reader.readline()
        except (OSError, ValueError) as e:
            raise TransportError(f"read failed: {e}") from e
        if not line:
            raise TransportError("connection closed by server")
        return line

    async def read_replies(
        self, count: int, last_expected: tuple[int, int] | None = None
    ) -> list[Reply]:
        """Read up to *count* replies in arrival order.

        When *last_expected* is the coordinate of the final ``GetPixel`` in
        the batch, reading stops as soon as its reply arrives. Batches must
        not repeat a coordinate for this to be safe.
        """
        replies: list[Reply] = []
        for _ in range(count):
            reply = decode_reply(await self._read_line())
            replies.append(reply)
            if (
                last_expected is not None
                and isinstance(reply, PixelReply)
                and (reply.x, reply.y) == last_expected
            ):
                break
        return replies

    async def get_size(self) -> CanvasSize:
        await self.write_batch([GetSize()])
        replies = await self.read_replies(1)
        reply = replies[0]
        if not isinstance(reply, SizeReply):
            raise UnexpectedReplyKind(f"expected a SIZE reply, got {reply!r}")
        return CanvasSize(width=reply.width, height=reply.height)

    async def close(self) -> None:
        if self._closed:
            return
        self._closed = True
        self._writer.close()
        try:
            await self._writer.wait_closed()
        except OSError:
            logger.debug("error while closing canvas connection", exc_info=True)
