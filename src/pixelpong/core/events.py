"""Async in-process event bus with bounded per-subscriber queues.

Carries game events between tasks; at the moment that is goal events from
the physics loop to the scoreboard (topic ``game.goal``).

Usage example:

    bus = EventBus(default_maxsize=64)
    sub = bus.subscribe(GOAL_TOPIC)

    await bus.publish(GOAL_TOPIC, pack({"side": "left"}))

    async for env in sub:
        event = unpack(env.payload)

Notes
-----
- Every subscription owns one bounded asyncio.Queue.
- A full queue drops its oldest envelope to make room (drop-oldest).
- close() ends every subscription's iteration via a sentinel.
- Payloads are msgpack bytes (see pack/unpack).
"""

from __future__ import annotations

import asyncio
from collections import deque
from dataclasses import dataclass
from time import monotonic
from typing import Any, AsyncIterator, Dict, List

import msgpack

__all__ = [
    "EventBus",
    "Subscription",
    "Envelope",
    "TopicStats",
    "GOAL_TOPIC",
    "pack",
    "unpack",
]

GOAL_TOPIC = "game.goal"


@dataclass(slots=True)
class Envelope:
    topic: str
    ts: float
    payload: bytes


@dataclass(slots=True)
class TopicStats:
    subscribers: int
    drops: int
    publishes: int
    deliveries: int


_Sentinel = object()


class _TopicState:
    __slots__ = ("subscribers", "drops", "publishes", "deliveries")

    def __init__(self) -> None:
        self.subscribers: List[asyncio.Queue[Envelope | object]] = []
        self.drops: int = 0
        self.publishes: int = 0
        self.deliveries: int = 0


def _force_put(q: "asyncio.Queue[Envelope | object]", item: object) -> None:
    # The sentinel must get in even when the queue is full. A full queue has
    # no waiting getters, so appending to the internal deque is enough.
    if not q.full():
        q.put_nowait(item)
        return
    inner: deque[object] = q._queue  # type: ignore[attr-defined]
    inner.append(item)


class EventBus:
    """Topic-based fan-out with drop-oldest backpressure.

    Parameters
    ----------
    default_maxsize:
        Queue capacity for each new subscription (min 1).
    """

    def __init__(self, *, default_maxsize: int = 256) -> None:
        self._maxsize = max(1, int(default_maxsize))
        self._topics: Dict[str, _TopicState] = {}
        self._closed = False

    def _state(self, topic: str) -> _TopicState:
        state = self._topics.get(topic)
        if state is None:
            state = _TopicState()
            self._topics[topic] = state
        return state

    def subscribe(self, topic: str) -> "Subscription":
        if self._closed:
            raise RuntimeError("EventBus is closed")
        queue: asyncio.Queue[Envelope | object] = asyncio.Queue(maxsize=self._maxsize)
        self._state(topic).subscribers.append(queue)
        return Subscription(self, topic, queue)

    async def publish(self, topic: str, payload: bytes) -> None:
        if self._closed:
            raise RuntimeError("EventBus is closed")
        env = Envelope(topic=topic, ts=monotonic(), payload=payload)
        state = self._state(topic)
        state.publishes += 1
        for q in list(state.subscribers):
            if q.full():
                q.get_nowait()
                state.drops += 1
            q.put_nowait(env)
            state.deliveries += 1

    async def close(self) -> None:
        """Close the bus; subscriptions finish after draining queued events."""
        if self._closed:
            return
        self._closed = True
        for state in self._topics.values():
            for q in list(state.subscribers):
                _force_put(q, _Sentinel)

    def metrics(self) -> Dict[str, TopicStats]:
        return {
            name: TopicStats(
                subscribers=len(state.subscribers),
                drops=state.drops,
                publishes=state.publishes,
                deliveries=state.deliveries,
            )
            for name, state in self._topics.items()
        }

    def _remove_subscription(
        self, topic: str, queue: asyncio.Queue[Envelope | object]
    ) -> None:
        state = self._topics.get(topic)
        if state is not None and queue in state.subscribers:
            state.subscribers.remove(queue)


class Subscription:
    """A subscription that yields Envelopes as an async iterator."""

    def __init__(
        self,
        bus: EventBus,
        topic: str,
        queue: asyncio.Queue[Envelope | object],
    ) -> None:
        self._bus = bus
        self._topic = topic
        self._queue = queue
        self._closed = False

    def __aiter__(self) -> AsyncIterator[Envelope]:
        return self

    async def __anext__(self) -> Envelope:
        if self._closed:
            raise StopAsyncIteration
        item = await self._queue.get()
        if item is _Sentinel:
            self._closed = True
            raise StopAsyncIteration
        assert isinstance(item, Envelope)
        return item

    async def close(self) -> None:
        if self._closed:
            return
        self._closed = True
        _force_put(self._queue, _Sentinel)
        self._bus._remove_subscription(self._topic, self._queue)


# Serialization helpers -----------------------------------------------------


def pack(obj: Any) -> bytes:
    """Serialize an object to bytes using msgpack."""
    return msgpack.packb(obj, use_bin_type=True)


def unpack(b: bytes) -> Any:
    """Deserialize bytes into an object using msgpack."""
    return msgpack.unpackb(b, raw=False, strict_map_key=False)
