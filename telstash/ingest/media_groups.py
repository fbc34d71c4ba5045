"""In-memory media-group sequencer.

Every file of one Telegram album (`media_group_id`) gets the next page number
under a title fixed by the first file seen. Entries live for the process
lifetime unless an idle TTL is configured.
"""

from __future__ import annotations

import asyncio
import logging
import time
from dataclasses import dataclass, field
from typing import Callable, Dict, List

from ..metrics.registry import MEDIA_GROUPS
from ..utils.naming import GroupPosition, path_stem


logger = logging.getLogger("telstash.media_groups")


@dataclass
class MediaGroupEntry:
    title: str
    page_number: int = 0
    last_seen: float = field(default_factory=time.monotonic)


class MediaGroupRegistry:
    """Registry of media groups shared by all concurrent handlers.

    Each `advance` call runs its read-modify-write under the group's own
    `asyncio.Lock`, so concurrent calls for one group never return the same
    page number.
    """

    def __init__(
        self,
        idle_ttl_seconds: float = 0,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self._ttl = idle_ttl_seconds
        self._clock = clock
        self._entries: Dict[str, MediaGroupEntry] = {}
        self._locks: Dict[str, asyncio.Lock] = {}

    def __len__(self) -> int:
        return len(self._entries)

    def __contains__(self, group_id: object) -> bool:
        return group_id in self._entries

    async def advance(self, group_id: str, fallback_title_source: str) -> GroupPosition:
        """Issue the next page number for `group_id`.

        On first sight of the group the title becomes the stem of
        `fallback_title_source`, or the group id when that stem is empty.
        The title never changes afterwards.
        """
        lock = self._locks.setdefault(group_id, asyncio.Lock())
        async with lock:
            entry = self._entries.get(group_id)
            if entry is None:
                title = path_stem(fallback_title_source) or group_id
                entry = MediaGroupEntry(title=title, last_seen=self._clock())
                self._entries[group_id] = entry
                MEDIA_GROUPS.set(len(self._entries))
                logger.debug("media group created", extra={"media_group_id": group_id, "title": title})
            entry.page_number += 1
            entry.last_seen = self._clock()
            return GroupPosition(entry.title, entry.page_number)

    async def evict_idle(self) -> List[str]:
        """Drop groups untouched for longer than the idle TTL.

        Returns the evicted group ids. A no-op when no TTL is configured.
        Groups whose lock is currently held are skipped.
        """
        if self._ttl <= 0:
            return []
        now = self._clock()

        # Collect candidates first to avoid dict mutation
        candidates = [
            gid for gid, entry in self._entries.items()
            if (now - entry.last_seen) > self._ttl
        ]

        evicted: List[str] = []
        for gid in candidates:
            lock = self._locks.get(gid)
            if lock is not None and lock.locked():
                continue
            entry = self._entries.get(gid)
            if entry is None or (now - entry.last_seen) <= self._ttl:
                continue
            del self._entries[gid]
            self._locks.pop(gid, None)
            evicted.append(gid)

        if evicted:
            MEDIA_GROUPS.set(len(self._entries))
            logger.info(
                "evicted idle media groups",
                extra={"count": len(evicted), "remaining": len(self._entries)},
            )
        return evicted
