#!/usr/bin/env python3
"""Tests for configuration loading."""

import pytest

from telstash.runtime.config import AppConfig
from telstash.runtime.errors import ConfigurationError


ENV_VARS = [
    "CONFIG_PATH",
    "TELEGRAM_BOT_TOKEN",
    "TELEGRAM_CHANNEL_ID",
    "MEDIA_DIRECTORY",
    "TELEGRAM_MODE",
    "WEBHOOK_URL",
    "TRANSFER_TIMEOUT_SECONDS",
    "CONCURRENCY",
    "GROUP_IDLE_TTL_SECONDS",
    "BOT_API_LOCAL_MODE",
]


@pytest.fixture(autouse=True)
def clean_env(monkeypatch):
    for name in ENV_VARS:
        monkeypatch.delenv(name, raising=False)


def test_from_env(monkeypatch):
    monkeypatch.setenv("TELEGRAM_BOT_TOKEN", "123:abc")
    monkeypatch.setenv("TELEGRAM_CHANNEL_ID", "-1001234567890")
    monkeypatch.setenv("MEDIA_DIRECTORY", "/srv/media")
    monkeypatch.setenv("CONCURRENCY", "500")
    monkeypatch.setenv("BOT_API_LOCAL_MODE", "yes")

    cfg = AppConfig.from_env()

    assert cfg.telegram_bot_token == "123:abc"
    assert cfg.telegram_channel_id == -1001234567890
    assert cfg.media_directory == "/srv/media"
    assert cfg.telegram_mode == "polling"
    assert cfg.transfer_timeout_seconds == 120
    assert cfg.concurrency == 32
    assert cfg.group_idle_ttl_seconds == 0
    assert cfg.bot_api_local_mode is True


def test_toml_file_with_env_override(monkeypatch, tmp_path):
    path = tmp_path / "telstash.toml"
    path.write_text(
        'bot_token = "file-token"\n'
        "channel_id = -10042\n"
        'media_directory = "/data/from-file"\n'
        "transfer_timeout_seconds = 30\n"
    )
    monkeypatch.setenv("CONFIG_PATH", str(path))
    monkeypatch.setenv("MEDIA_DIRECTORY", "/data/from-env")

    cfg = AppConfig.from_env()

    assert cfg.telegram_bot_token == "file-token"
    assert cfg.telegram_channel_id == -10042
    assert cfg.media_directory == "/data/from-env"
    assert cfg.transfer_timeout_seconds == 30


def test_missing_channel_id_is_fatal(monkeypatch):
    monkeypatch.setenv("TELEGRAM_BOT_TOKEN", "123:abc")
    monkeypatch.setenv("MEDIA_DIRECTORY", "/srv/media")
    with pytest.raises(ConfigurationError):
        AppConfig.from_env()


def test_malformed_channel_id_is_fatal(monkeypatch):
    monkeypatch.setenv("TELEGRAM_BOT_TOKEN", "123:abc")
    monkeypatch.setenv("TELEGRAM_CHANNEL_ID", "my-channel")
    monkeypatch.setenv("MEDIA_DIRECTORY", "/srv/media")
    with pytest.raises(ConfigurationError):
        AppConfig.from_env()


def test_missing_token_is_fatal(monkeypatch):
    monkeypatch.setenv("TELEGRAM_CHANNEL_ID", "-100")
    monkeypatch.setenv("MEDIA_DIRECTORY", "/srv/media")
    with pytest.raises(ConfigurationError):
        AppConfig.from_env()


def test_webhook_mode_requires_url(monkeypatch):
    monkeypatch.setenv("TELEGRAM_BOT_TOKEN", "123:abc")
    monkeypatch.setenv("TELEGRAM_CHANNEL_ID", "-100")
    monkeypatch.setenv("MEDIA_DIRECTORY", "/srv/media")
    monkeypatch.setenv("TELEGRAM_MODE", "webhook")
    with pytest.raises(ConfigurationError):
        AppConfig.from_env()


def test_unreadable_config_file_is_fatal(monkeypatch, tmp_path):
    bad = tmp_path / "bad.toml"
    bad.write_text("this is = = not toml")
    monkeypatch.setenv("CONFIG_PATH", str(bad))
    with pytest.raises(ConfigurationError):
        AppConfig.from_env()
