"""Error taxonomy for telstash.

`ConfigurationError` is fatal at startup. `TransferError` covers a single
remote file that could not be located or fetched; it is logged and the post
is dropped. `FilesystemError` marks a local environment fault and is
propagated out of the ingestion handler.
"""

from __future__ import annotations


class TelstashError(Exception):
    """Base class for all telstash errors."""


class ConfigurationError(TelstashError):
    pass


class TransferError(TelstashError):
    pass


class FilesystemError(TelstashError):
    def __init__(self, message: str, path: str) -> None:
        super().__init__(message)
        self.path = path
