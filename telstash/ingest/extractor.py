"""Selection of the single persistable media payload of a channel post."""

from __future__ import annotations

import enum
from dataclasses import dataclass
from typing import Optional

from telegram import Message


class MediaKind(enum.Enum):
    PHOTO = "photo"
    VIDEO = "video"
    AUDIO = "audio"

    @property
    def default_ext(self) -> str:
        return _DEFAULT_EXT[self]


_DEFAULT_EXT = {
    MediaKind.PHOTO: "jpg",
    MediaKind.VIDEO: "mp4",
    MediaKind.AUDIO: "mp3",
}


@dataclass(frozen=True)
class InboundMedia:
    kind: MediaKind
    file_id: str
    unique_id: str
    file_name: Optional[str]
    caption: Optional[str]
    file_size: Optional[int] = None

    @property
    def default_ext(self) -> str:
        return self.kind.default_ext

    @property
    def title_hint(self) -> str:
        """Caption, falling back to the sender's original filename."""
        return self.caption or self.file_name or ""


def extract_media(message: Message) -> Optional[InboundMedia]:
    """Return the media to persist for `message`, or None to skip it.

    Photos arrive as several resolution variants; the one with the largest
    `file_size` wins. On ties the first maximum in Telegram's order is kept,
    which is what `max` does. Any payload other than photo, video or audio
    yields None.
    """
    caption = message.caption or None
    if message.photo:
        best = max(message.photo, key=lambda p: p.file_size or 0)
        return InboundMedia(
            kind=MediaKind.PHOTO,
            file_id=best.file_id,
            unique_id=best.file_unique_id,
            file_name=None,
            caption=caption,
            file_size=best.file_size,
        )
    if message.video:
        return InboundMedia(
            kind=MediaKind.VIDEO,
            file_id=message.video.file_id,
            unique_id=message.video.file_unique_id,
            file_name=message.video.file_name,
            caption=caption,
            file_size=message.video.file_size,
        )
    if message.audio:
        return InboundMedia(
            kind=MediaKind.AUDIO,
            file_id=message.audio.file_id,
            unique_id=message.audio.file_unique_id,
            file_name=message.audio.file_name,
            caption=caption,
            file_size=message.audio.file_size,
        )
    return None
