import asyncio
from datetime import datetime, timezone
from typing import Any

import pytest

from pixelpong.core.events import GOAL_TOPIC, EventBus, pack, unpack
from pixelpong.core.models import GoalEvent


@pytest.mark.asyncio
async def test_basic_pub_sub() -> None:
    bus = EventBus(default_maxsize=8)
    sub = bus.subscribe("t1")

    async def consumer(collected: list[tuple[float, bytes]]) -> None:
        async for env in sub:
            collected.append((env.ts, env.payload))

    results: list[tuple[float, bytes]] = []
    consumer_task = asyncio.create_task(consumer(results))

    for i in range(3):
        await bus.publish("t1", pack({"i": i}))

    await asyncio.sleep(0)
    await bus.close()
    await consumer_task

    assert [unpack(p) for _, p in results] == [{"i": 0}, {"i": 1}, {"i": 2}]
    ts = [t for t, _ in results]
    assert ts == sorted(ts)


@pytest.mark.asyncio
async def test_multiple_subscribers() -> None:
    bus = EventBus(default_maxsize=8)
    s1 = bus.subscribe("t")
    s2 = bus.subscribe("t")
    out1: list[Any] = []
    out2: list[Any] = []

    async def collect(sub, out: list[Any]) -> None:
        async for env in sub:
            out.append(unpack(env.payload))

    tasks = [
        asyncio.create_task(collect(s1, out1)),
        asyncio.create_task(collect(s2, out2)),
    ]
    for i in range(5):
        await bus.publish("t", pack(i))
    await bus.close()
    await asyncio.gather(*tasks)

    assert out1 == [0, 1, 2, 3, 4]
    assert out2 == [0, 1, 2, 3, 4]


@pytest.mark.asyncio
async def test_backpressure_drop_oldest() -> None:
    bus = EventBus(default_maxsize=2)
    sub = bus.subscribe("a")

    # Publish before the consumer gets a chance to run
    for i in range(5):
        await bus.publish("a", pack(i))
    await bus.close()

    received = [int(unpack(env.payload)) async for env in sub]
    assert received == [3, 4]
    stats = bus.metrics()["a"]
    assert stats.drops == 3
    assert stats.publishes == 5
    assert stats.deliveries == 5


@pytest.mark.asyncio
async def test_close_unblocks_subscribers() -> None:
    bus = EventBus()
    sub = bus.subscribe("z")

    async def consumer() -> int:
        n = 0
        async for _ in sub:
            n += 1
        return n

    t = asyncio.create_task(consumer())
    await asyncio.sleep(0.01)
    await bus.close()
    assert await t == 0


@pytest.mark.asyncio
async def test_closed_bus_rejects_use() -> None:
    bus = EventBus()
    await bus.close()
    with pytest.raises(RuntimeError):
        bus.subscribe("x")
    with pytest.raises(RuntimeError):
        await bus.publish("x", b"")


@pytest.mark.asyncio
async def test_subscription_close_detaches() -> None:
    bus = EventBus()
    sub = bus.subscribe("x")
    await sub.close()
    await bus.publish("x", pack(1))
    assert bus.metrics()["x"].subscribers == 0
    assert [env async for env in sub] == []


@pytest.mark.asyncio
async def test_goal_event_round_trip() -> None:
    bus = EventBus()
    sub = bus.subscribe(GOAL_TOPIC)
    event = GoalEvent(ts=datetime(2024, 1, 1, tzinfo=timezone.utc), side="right")
    await bus.publish(GOAL_TOPIC, pack(event.model_dump(mode="json")))
    await bus.close()

    got = [GoalEvent.model_validate(unpack(env.payload)) async for env in sub]
    assert got == [event]
