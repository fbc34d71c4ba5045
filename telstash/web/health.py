"""Health check endpoints for telstash.

Provides health status and Prometheus metrics for monitoring. The app is
bound to the running service's configuration and media-group registry by
`bind()` before uvicorn starts serving it.
"""

from __future__ import annotations

import logging
import os
from datetime import datetime, timezone
from typing import Any, Dict, Optional

from fastapi import FastAPI, HTTPException
from fastapi.responses import PlainTextResponse
from prometheus_client import CONTENT_TYPE_LATEST, generate_latest

from ..ingest.media_groups import MediaGroupRegistry
from ..metrics.registry import REGISTRY
from ..runtime.config import AppConfig

logger = logging.getLogger("telstash.health")

app = FastAPI(title="Telstash Health API", version="1.0.0")

_state: Dict[str, Any] = {"config": None, "groups": None}


def bind(config: AppConfig, groups: Optional[MediaGroupRegistry]) -> FastAPI:
    """Attach runtime state to the health app and return it."""
    _state["config"] = config
    _state["groups"] = groups
    return app


def _media_directory_status(directory: str) -> Dict[str, Any]:
    if not os.path.isdir(directory):
        # The pipeline creates it on first write
        return {"status": "pending", "path": directory}
    if not os.access(directory, os.W_OK):
        return {"status": "unhealthy", "path": directory, "error": "not writable"}
    return {"status": "healthy", "path": directory}


@app.get("/healthz")
async def health_check() -> Dict[str, Any]:
    """Basic health check endpoint."""
    config: Optional[AppConfig] = _state["config"]
    if config is None:
        raise HTTPException(status_code=503, detail="service not started")

    health_status: Dict[str, Any] = {
        "status": "healthy",
        "timestamp": datetime.now(timezone.utc).isoformat(),
        "channel_id": config.telegram_channel_id,
        "mode": config.telegram_mode,
    }
    storage = _media_directory_status(config.media_directory)
    health_status["storage"] = storage
    if storage["status"] == "unhealthy":
        health_status["status"] = "degraded"

    groups: Optional[MediaGroupRegistry] = _state["groups"]
    health_status["media_groups"] = len(groups) if groups is not None else 0
    return health_status


@app.get("/metrics")
async def metrics() -> PlainTextResponse:
    """Prometheus metrics endpoint."""
    return PlainTextResponse(content=generate_latest(REGISTRY), media_type=CONTENT_TYPE_LATEST)


@app.get("/")
async def root() -> Dict[str, Any]:
    """Root endpoint with API information."""
    return {
        "service": "Telstash Health API",
        "version": "1.0.0",
        "endpoints": {
            "health": "/healthz",
            "metrics": "/metrics",
        },
    }
