#!/usr/bin/env python3
"""Tests for the media-group sequencer."""

import asyncio

import pytest

from telstash.ingest.media_groups import MediaGroupRegistry
from telstash.utils.naming import GroupPosition


class FakeClock:
    def __init__(self) -> None:
        self.now = 1000.0

    def __call__(self) -> float:
        return self.now


@pytest.mark.asyncio
async def test_first_call_takes_title_from_filename_stem():
    groups = MediaGroupRegistry()
    pos = await groups.advance("g1", "vacation.mp4")
    assert pos == GroupPosition(title="vacation", page_number=1)


@pytest.mark.asyncio
async def test_empty_fallback_uses_group_id():
    groups = MediaGroupRegistry()
    pos = await groups.advance("13579", "")
    assert pos.title == "13579"
    assert pos.page_number == 1


@pytest.mark.asyncio
async def test_title_is_fixed_by_first_item():
    groups = MediaGroupRegistry()
    first = await groups.advance("g", "Trip")
    second = await groups.advance("g", "Something else")
    third = await groups.advance("g", "")
    assert [first, second, third] == [
        GroupPosition("Trip", 1),
        GroupPosition("Trip", 2),
        GroupPosition("Trip", 3),
    ]


@pytest.mark.asyncio
async def test_groups_are_numbered_independently():
    groups = MediaGroupRegistry()
    await groups.advance("a", "A")
    await groups.advance("a", "A")
    pos_b = await groups.advance("b", "B")
    pos_a = await groups.advance("a", "A")
    assert pos_b == GroupPosition("B", 1)
    assert pos_a == GroupPosition("A", 3)
    assert len(groups) == 2


@pytest.mark.asyncio
async def test_concurrent_calls_return_each_page_once():
    groups = MediaGroupRegistry()
    n = 200
    results = await asyncio.gather(*(groups.advance("album", "cover.jpg") for _ in range(n)))
    assert sorted(p.page_number for p in results) == list(range(1, n + 1))
    assert {p.title for p in results} == {"cover"}


@pytest.mark.asyncio
async def test_no_eviction_without_ttl():
    clock = FakeClock()
    groups = MediaGroupRegistry(clock=clock)
    await groups.advance("g", "x")
    clock.now += 10 ** 6
    assert await groups.evict_idle() == []
    assert "g" in groups


@pytest.mark.asyncio
async def test_idle_groups_are_evicted_after_ttl():
    clock = FakeClock()
    groups = MediaGroupRegistry(idle_ttl_seconds=60, clock=clock)
    await groups.advance("old", "x")
    clock.now += 30
    await groups.advance("fresh", "y")
    clock.now += 45

    assert await groups.evict_idle() == ["old"]
    assert "old" not in groups
    assert "fresh" in groups

    # A later post for an evicted group starts over
    pos = await groups.advance("old", "again")
    assert pos == GroupPosition("again", 1)
