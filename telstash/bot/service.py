"""Telegram bot service for telstash.

Subscribes to channel posts of the one configured channel, hands each post to
the ingestion pipeline, and selects the update delivery mode (polling or
webhook). A catch-all handler logs updates nothing else claimed, and an error
handler logs failures raised out of the pipeline.
"""

from __future__ import annotations

import asyncio
import logging
from typing import Optional

from telegram import Update
from telegram.ext import (
    AIORateLimiter,
    Application,
    ApplicationBuilder,
    ContextTypes,
    MessageHandler,
    TypeHandler,
    filters,
)

from ..ingest.media_groups import MediaGroupRegistry
from ..ingest.pipeline import IngestionHandler
from ..ingest.transport import BotTransport
from ..runtime.config import AppConfig


logger = logging.getLogger("telstash.bot")

EVICTION_INTERVAL_SECONDS = 60


class TelstashBotService:
    def __init__(self, config: AppConfig, groups: MediaGroupRegistry) -> None:
        self._config = config
        self._groups = groups
        self._app: Optional[Application] = None
        self._ingest: Optional[IngestionHandler] = None
        self._eviction_task: Optional[asyncio.Task] = None

    def _build_application(self) -> Application:
        cfg = self._config
        builder = (
            ApplicationBuilder()
            .token(cfg.telegram_bot_token)
            .rate_limiter(AIORateLimiter())
            .concurrent_updates(cfg.concurrency)
            .read_timeout(cfg.transfer_timeout_seconds)
        )
        if cfg.bot_api_base_url:
            builder = builder.base_url(cfg.bot_api_base_url)
        if cfg.bot_api_base_file_url:
            builder = builder.base_file_url(cfg.bot_api_base_file_url)
        if cfg.bot_api_local_mode:
            builder = builder.local_mode(True)
        return builder.build()

    async def start(self) -> None:
        self._app = self._build_application()
        self._ingest = IngestionHandler(
            self._config,
            BotTransport(self._app.bot, self._config.transfer_timeout_seconds),
            self._groups,
        )

        # Same group: only the first matching handler runs
        self._app.add_handler(
            MessageHandler(
                filters.UpdateType.CHANNEL_POST
                & filters.Chat(chat_id=self._config.telegram_channel_id),
                self._on_channel_post,
            )
        )
        self._app.add_handler(TypeHandler(Update, self._on_unhandled))
        self._app.add_error_handler(self._on_error)

        await self._app.initialize()
        await self._app.start()
        if self._config.group_idle_ttl_seconds > 0:
            self._eviction_task = asyncio.create_task(self._eviction_loop())

        if self._config.telegram_mode == "webhook":
            await self._app.updater.start_webhook(
                listen="0.0.0.0",
                port=self._config.webhook_port,
                webhook_url=self._config.webhook_url,
                secret_token=self._config.webhook_secret,
            )
        else:
            await self._app.updater.start_polling()

        logger.info(
            "bot started",
            extra={
                "mode": self._config.telegram_mode,
                "channel_id": self._config.telegram_channel_id,
                "media_directory": self._config.media_directory,
            },
        )

    async def stop(self) -> None:
        if self._eviction_task:
            self._eviction_task.cancel()
            try:
                await self._eviction_task
            except asyncio.CancelledError:
                pass
        if not self._app:
            return
        if self._app.updater and self._app.updater.running:
            await self._app.updater.stop()
        if self._app.running:
            await self._app.stop()
        await self._app.shutdown()

    async def _eviction_loop(self) -> None:
        """Periodically drop idle media groups from the sequencer."""
        logger.info(
            "media group eviction loop started",
            extra={"ttl_seconds": self._config.group_idle_ttl_seconds},
        )
        try:
            while True:
                await asyncio.sleep(EVICTION_INTERVAL_SECONDS)
                await self._groups.evict_idle()
        except asyncio.CancelledError:
            logger.info("media group eviction loop stopped")
            raise

    async def _on_channel_post(self, update: Update, context: ContextTypes.DEFAULT_TYPE) -> None:
        assert self._ingest
        message = update.channel_post
        if message is None:
            return
        await self._ingest.handle(message)

    async def _on_unhandled(self, update: Update, context: ContextTypes.DEFAULT_TYPE) -> None:
        logger.warning("unhandled update", extra={"update_id": update.update_id})

    async def _on_error(self, update: object, context: ContextTypes.DEFAULT_TYPE) -> None:
        logger.error(
            "an error has occurred in the dispatcher",
            exc_info=context.error,
            extra={"update_id": getattr(update, "update_id", None)},
        )
