"""Byte transfer from the Bot API.

`BotTransport` maps a transient `file_id` to a transfer path and downloads
the file's bytes into an open destination.
"""

from __future__ import annotations

from typing import BinaryIO, Protocol

from telegram import Bot

from ..runtime.errors import TransferError


class Transport(Protocol):
    async def resolve_transfer_path(self, file_id: str) -> str: ...

    async def fetch_bytes(self, transfer_path: str, dst: BinaryIO) -> int: ...


class BotTransport:
    """Thin adapter over `telegram.Bot` for file retrieval."""

    def __init__(self, bot: Bot, timeout_seconds: float) -> None:
        self._bot = bot
        self._timeout = timeout_seconds

    async def resolve_transfer_path(self, file_id: str) -> str:
        tfile = await self._bot.get_file(file_id, read_timeout=self._timeout)
        if not tfile.file_path:
            raise TransferError(f"no file path returned for file_id {file_id}")
        return tfile.file_path

    async def fetch_bytes(self, transfer_path: str, dst: BinaryIO) -> int:
        """Download `transfer_path` into `dst`, return bytes written."""
        # telegram lib doesn't expose a streaming iterator; buffer in memory
        data = await self._bot.request.retrieve(transfer_path, read_timeout=self._timeout)
        # No await past this point: a cancelled download never leaves a write in flight
        dst.write(data)
        dst.flush()
        return len(data)
