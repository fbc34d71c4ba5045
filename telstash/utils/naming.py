"""Filename construction for persisted media.

Derives a deterministic on-disk name from Telegram file metadata. The
platform `file_unique_id` is always embedded verbatim, so two different files
never share a name; the caption, original filename or media-group title is
kept alongside it for humans.

Plain names look like ``[caption]_<unique_id>.<ext>``; media-group members
look like ``title:[<title>]_<unique_id>{page:<n>}.<ext>``.
"""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import PurePosixPath
from typing import NamedTuple, Optional


# Most filesystems cap a single path segment at 255 bytes.
MAX_FILENAME_BYTES = 255

_SEPARATOR_LOOKALIKES = str.maketrans({
    "/": "∕",   # DIVISION SLASH
    "\\": "⧵",  # REVERSE SOLIDUS OPERATOR
    "\x00": None,
})


class GroupPosition(NamedTuple):
    """Title and 1-based page number of one file inside a media group."""

    title: str
    page_number: int


@dataclass(frozen=True)
class ResolvedName:
    filename_body: str
    extension: str

    @property
    def filename(self) -> str:
        return f"{self.filename_body}.{self.extension}"


def path_stem(text: Optional[str]) -> str:
    """Final path component of `text` without its last suffix.

    ``"vacation.mp4"`` -> ``"vacation"``; ``"Sunset"`` -> ``"Sunset"``;
    ``"file."`` -> ``"file"``; ``None`` or ``""`` -> ``""``.
    """
    if not text:
        return ""
    stem = PurePosixPath(text).stem
    if stem.endswith(".") and stem != "..":
        stem = stem[:-1]
    return stem


def _extension_of(file_name: Optional[str]) -> Optional[str]:
    if not file_name:
        return None
    suffix = PurePosixPath(file_name).suffix
    return suffix[1:] if suffix else None


def sanitize_segment(text: str) -> str:
    """Replace path separators with look-alike characters and drop NULs."""
    return text.translate(_SEPARATOR_LOOKALIKES)


def _clip_utf8(text: str, max_bytes: int) -> str:
    if max_bytes <= 0:
        return ""
    encoded = text.encode("utf-8")
    if len(encoded) <= max_bytes:
        return text
    return encoded[:max_bytes].decode("utf-8", errors="ignore")


def resolve_name(
    unique_id: str,
    file_name_hint: Optional[str],
    caption: Optional[str],
    default_ext: str,
    group: Optional[GroupPosition] = None,
) -> ResolvedName:
    """Build the `ResolvedName` for one file.

    Args:
        unique_id: Platform `file_unique_id`; embedded verbatim.
        file_name_hint: Original filename declared by the sender, if any.
            Supplies the extension and, without a caption, the stem.
        caption: Post caption; preferred over the filename stem.
        default_ext: Extension used when the hint carries none.
        group: Media-group position, when the post belongs to an album.

    Never raises: every missing input has a fallback.
    """
    extension = sanitize_segment(_extension_of(file_name_hint) or default_ext)
    uid = sanitize_segment(unique_id)

    if group is not None:
        label = sanitize_segment(group.title)
        prefix, suffix = "title:[", f"]_{uid}{{page:{group.page_number}}}"
    else:
        label = sanitize_segment(caption or path_stem(file_name_hint))
        prefix, suffix = "[", f"]_{uid}"

    fixed = len(f"{prefix}{suffix}.{extension}".encode("utf-8"))
    label = _clip_utf8(label, MAX_FILENAME_BYTES - fixed)
    return ResolvedName(filename_body=f"{prefix}{label}{suffix}", extension=extension)
