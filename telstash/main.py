"""
Entry point module for telstash service.

This module wires up configuration, logging, health/metrics, the shared
media-group registry, and the Telegram bot runtime (polling vs webhook).
"""

from __future__ import annotations

import asyncio
import logging
import signal
import sys

import uvicorn


def _ensure_event_loop_policy() -> None:
    """Install uvloop if available for better performance."""
    try:
        import uvloop  # type: ignore

        asyncio.set_event_loop_policy(uvloop.EventLoopPolicy())
    except ImportError:  # pragma: no cover - fallback to default loop
        pass


async def _async_main() -> None:
    """Async entry point that sets up services and starts the bot."""
    from .bot.service import TelstashBotService
    from .ingest.media_groups import MediaGroupRegistry
    from .runtime.config import AppConfig
    from .runtime.logging_setup import setup_logging
    from .web import health

    config = AppConfig.from_env()
    setup_logging(config)

    logger = logging.getLogger("telstash")
    logger.info("starting telstash", extra={"mode": config.telegram_mode})

    groups = MediaGroupRegistry(idle_ttl_seconds=config.group_idle_ttl_seconds)

    health_server = uvicorn.Server(
        config=uvicorn.Config(
            app=health.bind(config, groups),
            host="127.0.0.1" if config.bind_health_localhost_only else "0.0.0.0",
            port=config.health_port,
            log_level="info",
            access_log=False,
        )
    )
    health_task = asyncio.create_task(health_server.serve())
    logger.info("health monitoring server started", extra={"port": config.health_port})

    bot = TelstashBotService(config, groups)
    await bot.start()

    # Graceful shutdown signals
    stop_event = asyncio.Event()

    def _handle_signal(signame: str) -> None:
        logger.warning("received signal, stopping", extra={"signal": signame})
        stop_event.set()

    loop = asyncio.get_running_loop()
    for signame in ("SIGINT", "SIGTERM"):
        if hasattr(signal, signame):
            loop.add_signal_handler(getattr(signal, signame), _handle_signal, signame)

    try:
        await stop_event.wait()
    finally:
        logger.info("shutting down services")
        await bot.stop()
        health_server.should_exit = True
        await health_task
        logger.info("shutdown complete")


def main() -> None:
    from .runtime.errors import ConfigurationError

    _ensure_event_loop_policy()
    try:
        asyncio.run(_async_main())
    except ConfigurationError as e:
        # Logging is not configured yet when the config fails to load
        print(f"telstash: configuration error: {e}", file=sys.stderr)
        sys.exit(2)
    except KeyboardInterrupt:
        pass


if __name__ == "__main__":
    main()
