"""Unit tests for fan-in merging of async iterators."""

import asyncio

import pytest

from opencode_radar.sensors import Instance, InstanceSource, merge_iterators


async def produce(values, delay=0.0):
    for value in values:
        await asyncio.sleep(delay)
        yield value


async def collect(iterator):
    return [value async for value in iterator]


@pytest.mark.asyncio
async def test_merge_no_iterators():
    """Test that merging nothing yields nothing."""
    assert await collect(merge_iterators([])) == []


@pytest.mark.asyncio
async def test_merge_is_complete():
    """Test that every element from every input appears exactly once."""
    inputs = [
        produce([1, 2, 3], delay=0.01),
        produce([4, 5]),
        produce([6], delay=0.02),
        produce([]),
    ]

    result = await collect(merge_iterators(inputs))

    assert sorted(result) == [1, 2, 3, 4, 5, 6]


@pytest.mark.asyncio
async def test_merge_preserves_per_source_order():
    """Test that each input's own order survives interleaving."""
    result = await collect(
        merge_iterators(
            [
                produce(["a1", "a2", "a3"], delay=0.01),
                produce(["b1", "b2", "b3"], delay=0.015),
            ]
        )
    )

    assert [v for v in result if v.startswith("a")] == ["a1", "a2", "a3"]
    assert [v for v in result if v.startswith("b")] == ["b1", "b2", "b3"]


@pytest.mark.asyncio
async def test_merge_first_available_wins():
    """Test that a fast source is not held back by a slow one."""
    result = await collect(
        merge_iterators([produce(["slow"], delay=0.1), produce(["fast"])])
    )

    assert result == ["fast", "slow"]


@pytest.mark.asyncio
async def test_merge_empty_source_does_not_block():
    """Test that an immediately exhausted input is simply dropped."""
    merged = merge_iterators([produce([]), produce(["value"])])

    first = await asyncio.wait_for(merged.__anext__(), timeout=0.5)

    assert first == "value"
    with pytest.raises(StopAsyncIteration):
        await merged.__anext__()


@pytest.mark.asyncio
async def test_merge_drops_failing_source():
    """Test that an input raising an error does not end the merge."""

    async def broken():
        yield 1
        raise RuntimeError("permission denied")

    result = await collect(merge_iterators([broken(), produce([2, 3], delay=0.01)]))

    assert sorted(result) == [1, 2, 3]


@pytest.mark.asyncio
async def test_merge_close_finalizes_inputs():
    """Test that abandoning the merged stream closes every input."""
    closed = []

    async def tracked(name, delay):
        try:
            while True:
                await asyncio.sleep(delay)
                yield name
        finally:
            closed.append(name)

    merged = merge_iterators([tracked("fast", 0.0), tracked("slow", 10.0)])
    assert await merged.__anext__() == "fast"

    await asyncio.wait_for(merged.aclose(), timeout=1.0)

    assert sorted(closed) == ["fast", "slow"]


@pytest.mark.asyncio
async def test_merge_does_not_deduplicate():
    """Test that the same instance from two sensors is yielded twice by the merge.

    Sensor S1 (mDNS) reports port 4096 after 50ms; sensor S2 (process table)
    reports pid 10 on port 4096 immediately. The process record wins the race.
    """
    mdns = Instance(port=4096, source=InstanceSource.MDNS)
    proc = Instance(port=4096, pid=10, source=InstanceSource.PROC)

    result = await collect(
        merge_iterators([produce([mdns], delay=0.05), produce([proc])])
    )

    assert result == [proc, mdns]
