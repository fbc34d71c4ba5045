"""Configuration model and loader for telstash.

Defines the `AppConfig` dataclass that reads environment variables (optionally
seeded from a TOML file named by `CONFIG_PATH`) and provides typed access
across the application.
"""

from __future__ import annotations

import os
import tomllib
from dataclasses import dataclass
from typing import Any, Dict, Optional

from .errors import ConfigurationError


CONFIG_PATH_ENV = "CONFIG_PATH"


def _load_file(path: Optional[str]) -> Dict[str, Any]:
    if not path:
        return {}
    try:
        with open(path, "rb") as f:
            return tomllib.load(f)
    except (OSError, tomllib.TOMLDecodeError) as e:
        raise ConfigurationError(f"cannot read config file {path}: {e}") from e


class _Source:
    """Environment first, then the optional TOML table, then the default."""

    def __init__(self, file_values: Dict[str, Any]) -> None:
        self._file = file_values

    def raw(self, env_name: str, file_key: str) -> Any:
        v = os.getenv(env_name)
        if v is not None:
            return v
        return self._file.get(file_key)

    def get_str(self, env_name: str, file_key: str, default: Optional[str] = None) -> Optional[str]:
        v = self.raw(env_name, file_key)
        if v is None:
            return default
        return str(v)

    def get_bool(self, env_name: str, file_key: str, default: bool = False) -> bool:
        v = self.raw(env_name, file_key)
        if v is None:
            return default
        if isinstance(v, bool):
            return v
        return str(v).strip().lower() in {"1", "true", "yes", "on"}

    def get_int(self, env_name: str, file_key: str, default: int) -> int:
        v = self.raw(env_name, file_key)
        try:
            return int(v) if v is not None else default
        except (TypeError, ValueError):
            return default


@dataclass
class AppConfig:
    """Application configuration resolved from environment variables."""

    # Telegram
    telegram_bot_token: str
    telegram_channel_id: int
    telegram_mode: str  # polling | webhook
    webhook_url: Optional[str]
    webhook_secret: Optional[str]
    webhook_port: int

    # Alternate / self-hosted Bot API server
    bot_api_base_url: Optional[str]
    bot_api_base_file_url: Optional[str]
    bot_api_local_mode: bool

    # Ingestion
    media_directory: str
    transfer_timeout_seconds: int
    concurrency: int
    group_idle_ttl_seconds: int

    # Logging & Health
    log_level: str
    logs_dir: Optional[str]
    log_rotate_max_bytes: int
    log_rotate_backup_count: int
    health_port: int
    bind_health_localhost_only: bool

    def validate(self) -> "AppConfig":
        if not self.telegram_bot_token:
            raise ConfigurationError("bot token is not set (TELEGRAM_BOT_TOKEN / bot_token)")
        if not self.media_directory:
            raise ConfigurationError("media directory is not set (MEDIA_DIRECTORY / media_directory)")
        if self.telegram_mode not in {"polling", "webhook"}:
            raise ConfigurationError(f"unknown telegram mode: {self.telegram_mode!r}")
        if self.telegram_mode == "webhook" and not self.webhook_url:
            raise ConfigurationError("webhook mode requires WEBHOOK_URL")
        if self.transfer_timeout_seconds <= 0:
            raise ConfigurationError("transfer timeout must be positive")
        return self

    @staticmethod
    def from_env() -> "AppConfig":
        src = _Source(_load_file(os.getenv(CONFIG_PATH_ENV)))

        channel_raw = src.raw("TELEGRAM_CHANNEL_ID", "channel_id")
        if channel_raw is None or str(channel_raw).strip() == "":
            raise ConfigurationError("channel id is not set (TELEGRAM_CHANNEL_ID / channel_id)")
        try:
            channel_id = int(str(channel_raw).strip())
        except ValueError as e:
            raise ConfigurationError(f"channel id is not an integer: {channel_raw!r}") from e

        return AppConfig(
            telegram_bot_token=src.get_str("TELEGRAM_BOT_TOKEN", "bot_token", "") or "",
            telegram_channel_id=channel_id,
            telegram_mode=src.get_str("TELEGRAM_MODE", "telegram_mode", "polling") or "polling",
            webhook_url=src.get_str("WEBHOOK_URL", "webhook_url"),
            webhook_secret=src.get_str("WEBHOOK_SECRET", "webhook_secret"),
            webhook_port=src.get_int("WEBHOOK_PORT", "webhook_port", 8080),
            bot_api_base_url=src.get_str("BOT_API_BASE_URL", "bot_api_base_url"),
            bot_api_base_file_url=src.get_str("BOT_API_BASE_FILE_URL", "bot_api_base_file_url"),
            bot_api_local_mode=src.get_bool("BOT_API_LOCAL_MODE", "bot_api_local_mode", False),
            media_directory=src.get_str("MEDIA_DIRECTORY", "media_directory", "") or "",
            transfer_timeout_seconds=src.get_int(
                "TRANSFER_TIMEOUT_SECONDS", "transfer_timeout_seconds", 120
            ),
            concurrency=max(1, min(src.get_int("CONCURRENCY", "concurrency", 8), 32)),
            group_idle_ttl_seconds=max(
                0, src.get_int("GROUP_IDLE_TTL_SECONDS", "group_idle_ttl_seconds", 0)
            ),
            log_level=src.get_str("LOG_LEVEL", "log_level", "INFO") or "INFO",
            logs_dir=src.get_str("LOGS_DIR", "logs_dir"),
            log_rotate_max_bytes=src.get_int(
                "LOG_ROTATE_MAX_BYTES", "log_rotate_max_bytes", 5 * 1024 * 1024
            ),
            log_rotate_backup_count=src.get_int(
                "LOG_ROTATE_BACKUP_COUNT", "log_rotate_backup_count", 10
            ),
            health_port=src.get_int("HEALTH_PORT", "health_port", 8081),
            bind_health_localhost_only=src.get_bool(
                "BIND_HEALTH_LOCALHOST_ONLY", "bind_health_localhost_only", True
            ),
        ).validate()
