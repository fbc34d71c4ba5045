"""Ingestion pipeline: extract, sequence, name, and write one channel post.

Transfer failures (file path lookup or byte download) are logged and the
post is dropped. Local filesystem failures (directory or file creation)
raise `FilesystemError`. A download that fails after the destination file
was created leaves that file in place, possibly empty.
"""

from __future__ import annotations

import asyncio
import logging
import os
import shutil
import time
from dataclasses import dataclass
from typing import BinaryIO, Optional

from telegram import Message
from telegram.error import TelegramError

from ..metrics.registry import (
    PROCESSING_SECONDS,
    SAVED_BYTES,
    SAVED_FILES,
    SKIPPED_POSTS,
    TRANSFER_FAILURES,
)
from ..runtime.config import AppConfig
from ..runtime.errors import FilesystemError, TransferError
from ..utils.naming import ResolvedName, resolve_name
from .extractor import InboundMedia, extract_media
from .media_groups import MediaGroupRegistry
from .transport import Transport


logger = logging.getLogger("telstash.ingest")

STATUS_SAVED = "saved"
STATUS_TRANSFER_FAILED = "transfer_failed"
STATUS_SKIPPED = "skipped"


@dataclass
class IngestOutcome:
    status: str
    path: Optional[str] = None
    bytes_written: int = 0
    media: Optional[InboundMedia] = None


def _copy_local(src_path: str, dst: BinaryIO, chunk_size: int = 1024 * 1024) -> int:
    """Copy a file served by a local Bot API server straight from disk."""
    with open(src_path, "rb") as src:
        shutil.copyfileobj(src, dst, chunk_size)
    dst.flush()
    return os.path.getsize(src_path)


class IngestionHandler:
    def __init__(
        self,
        config: AppConfig,
        transport: Transport,
        groups: MediaGroupRegistry,
    ) -> None:
        self._config = config
        self._transport = transport
        self._groups = groups

    async def handle(self, message: Message) -> IngestOutcome:
        """Persist the media of one channel post, if it carries any."""
        if message.chat.id != self._config.telegram_channel_id:
            logger.debug("ignoring post from foreign chat", extra={"chat_id": message.chat.id})
            return IngestOutcome(status=STATUS_SKIPPED)

        media = extract_media(message)
        if media is None:
            SKIPPED_POSTS.inc()
            logger.debug("ignoring post without media", extra={"message_id": message.message_id})
            return IngestOutcome(status=STATUS_SKIPPED)

        start = time.perf_counter()
        group = None
        if message.media_group_id:
            group = await self._groups.advance(str(message.media_group_id), media.title_hint)

        resolved = resolve_name(
            unique_id=media.unique_id,
            file_name_hint=media.file_name,
            caption=media.caption,
            default_ext=media.default_ext,
            group=group,
        )
        logger.info(
            "processing media post",
            extra={
                "message_id": message.message_id,
                "media_group_id": message.media_group_id,
                "kind": media.kind.value,
                "file_unique_id": media.unique_id,
                "filename": resolved.filename,
            },
        )
        try:
            return await self.persist(media, resolved)
        finally:
            PROCESSING_SECONDS.observe(time.perf_counter() - start)

    async def persist(self, media: InboundMedia, resolved: ResolvedName) -> IngestOutcome:
        timeout = self._config.transfer_timeout_seconds
        directory = self._config.media_directory
        file_path = os.path.join(directory, resolved.filename)

        try:
            transfer_path = await asyncio.wait_for(
                self._transport.resolve_transfer_path(media.file_id), timeout
            )
        except (TelegramError, TransferError, asyncio.TimeoutError) as e:
            TRANSFER_FAILURES.labels(stage="resolve").inc()
            logger.error(
                "failed to resolve transfer path",
                extra={"file_unique_id": media.unique_id, "error": repr(e)},
            )
            return IngestOutcome(status=STATUS_TRANSFER_FAILED, media=media)

        try:
            await asyncio.to_thread(os.makedirs, directory, exist_ok=True)
        except OSError as e:
            raise FilesystemError(f"create dir failed: {directory}: {e}", directory) from e
        try:
            dst = await asyncio.to_thread(open, file_path, "wb")
        except OSError as e:
            raise FilesystemError(f"failed to create file: {file_path}: {e}", file_path) from e

        try:
            if os.path.isabs(transfer_path):
                written = await asyncio.to_thread(_copy_local, transfer_path, dst)
            else:
                written = await asyncio.wait_for(
                    self._transport.fetch_bytes(transfer_path, dst), timeout
                )
        except (TelegramError, TransferError, asyncio.TimeoutError, OSError) as e:
            TRANSFER_FAILURES.labels(stage="fetch").inc()
            logger.error(
                "failed to download file",
                extra={"path": file_path, "error": repr(e)},
            )
            return IngestOutcome(status=STATUS_TRANSFER_FAILED, path=file_path, media=media)
        finally:
            await asyncio.to_thread(dst.close)

        SAVED_FILES.inc()
        SAVED_BYTES.inc(written)
        logger.info(
            "downloaded and saved file",
            extra={"path": file_path, "bytes": written},
        )
        return IngestOutcome(
            status=STATUS_SAVED, path=file_path, bytes_written=written, media=media
        )
