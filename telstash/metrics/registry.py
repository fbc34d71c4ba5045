"""Prometheus metrics registry and metric objects used across the app."""

from __future__ import annotations

from prometheus_client import Counter, Gauge, Histogram, REGISTRY


SAVED_FILES = Counter(
    "telstash_saved_files_total", "Total number of media files written to disk"
)

SAVED_BYTES = Counter(
    "telstash_saved_bytes_total", "Total bytes written to the media directory"
)

TRANSFER_FAILURES = Counter(
    "telstash_transfer_failures_total",
    "Files whose transfer path or bytes could not be fetched",
    ["stage"],
)

SKIPPED_POSTS = Counter(
    "telstash_skipped_posts_total", "Channel posts without a persistable media payload"
)

MEDIA_GROUPS = Gauge(
    "telstash_media_groups", "Media groups currently held by the sequencer"
)

PROCESSING_SECONDS = Histogram(
    "telstash_processing_seconds", "Processing time per channel post"
)
