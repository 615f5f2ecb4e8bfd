"""Domain entity for an archived link — one row per successfully ingested document."""

from dataclasses import dataclass, field
from datetime import datetime, timezone


def utc_now_iso() -> str:
    """Current UTC time as an ISO-8601 string (the ``links.created_at`` format)."""
    return datetime.now(timezone.utc).isoformat(timespec="seconds")


def format_size(size: int) -> str:
    """Human-readable byte size: ``512 bytes``, ``1.5 KB``, ``2.0 MB``."""
    if size < 1024:
        return f"{size} bytes"
    if size < 1024 * 1024:
        return f"{size / 1024:.1f} KB"
    if size < 1024 * 1024 * 1024:
        return f"{size / (1024 * 1024):.1f} MB"
    return f"{size / (1024 * 1024 * 1024):.1f} GB"


def type_emoji(content_type: str) -> str:
    """Emoji badge for a content type, used in chat replies."""
    mime = content_type.split(";", 1)[0].strip().lower()
    if mime == "text/html":
        return "🌐"
    if mime == "application/pdf":
        return "📄"
    if mime.startswith("image/"):
        return "🖼️"
    if mime == "text/plain":
        return "📝"
    return "📁"


@dataclass(frozen=True)
class Link:
    """A persisted, searchable document.

    Created only after all of its chunk vectors are indexed, and never
    modified afterwards. ``chunk_count`` equals the number of vector index
    entries tagged with ``id``.
    """

    id: str
    url: str
    bucket_path: str
    content_type: str
    size: int
    title: str
    summary: str
    chunk_count: int
    created_at: str = field(default_factory=utc_now_iso)

    @property
    def type_emoji(self) -> str:
        return type_emoji(self.content_type)

    @property
    def formatted_size(self) -> str:
        return format_size(self.size)


@dataclass
class LinkStats:
    """Archive totals plus the most recently saved links."""

    total: int
    recent: list[Link] = field(default_factory=list)
