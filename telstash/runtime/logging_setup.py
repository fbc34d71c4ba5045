"""JSON logging for telstash.

Every record is emitted as one JSON object tagged with ``"service":
"telstash"`` and the configured channel id, so lines from several
deployments can share one log collector. Records go to stdout; when
`LOGS_DIR` is set they are also appended to ``telstash.log`` there with
size-based rotation.
"""

from __future__ import annotations

import logging
import logging.handlers
import os

from pythonjsonlogger import jsonlogger

from .config import AppConfig


LOG_FILE_NAME = "telstash.log"


def _formatter(config: AppConfig) -> jsonlogger.JsonFormatter:
    return jsonlogger.JsonFormatter(
        fmt="%(asctime)s %(levelname)s %(name)s %(message)s",
        rename_fields={"levelname": "level"},
        static_fields={"service": "telstash", "channel_id": config.telegram_channel_id},
    )


def setup_logging(config: AppConfig) -> None:
    """Install the stdout handler and, with `logs_dir`, the rotating file."""
    level = getattr(logging, config.log_level.upper(), logging.INFO)
    root_logger = logging.getLogger()
    root_logger.setLevel(level)

    for h in list(root_logger.handlers):
        root_logger.removeHandler(h)

    formatter = _formatter(config)
    stdout_handler = logging.StreamHandler()
    stdout_handler.setFormatter(formatter)
    root_logger.addHandler(stdout_handler)

    if config.logs_dir:
        os.makedirs(config.logs_dir, exist_ok=True)
        file_handler = logging.handlers.RotatingFileHandler(
            filename=os.path.join(config.logs_dir, LOG_FILE_NAME),
            maxBytes=config.log_rotate_max_bytes,
            backupCount=config.log_rotate_backup_count,
            encoding="utf-8",
        )
        file_handler.setFormatter(formatter)
        root_logger.addHandler(file_handler)

    # httpx logs every Bot API request URL at INFO, token included
    logging.getLogger("httpx").setLevel(max(level, logging.WARNING))

    logging.getLogger("telstash").info(
        "logging configured",
        extra={"log_level": config.log_level, "logs_dir": config.logs_dir},
    )
