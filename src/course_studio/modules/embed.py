"""YouTube URL normalization for embedded-video modules."""

from __future__ import annotations

import re
from urllib.parse import parse_qs, urlsplit

CANONICAL_HOST = "www.youtube.com"

_SHORT_HOSTS = frozenset({"youtu.be", "www.youtu.be"})
_LONG_HOSTS = frozenset({"youtube.com", "www.youtube.com", "m.youtube.com"})
_EMBED_MARKER = "embed"
_VIDEO_ID = re.compile(r"[A-Za-z0-9_-]+")


def extract_video_id(url: str | None) -> str | None:
    """Return the video identifier carried by a YouTube URL, or None."""
    video_id = _raw_video_id(url)
    if video_id is None or not _VIDEO_ID.fullmatch(video_id):
        return None
    return video_id


def _raw_video_id(url: str | None) -> str | None:
    if not url or not url.strip():
        return None
    try:
        parts = urlsplit(url.strip())
        host = parts.hostname
    except ValueError:
        return None
    if not host:
        return None

    segments = [segment for segment in parts.path.split("/") if segment]
    if host in _SHORT_HOSTS:
        return segments[0] if segments else None
    if host in _LONG_HOSTS:
        if _EMBED_MARKER in segments:
            index = segments.index(_EMBED_MARKER)
            if index + 1 < len(segments):
                return segments[index + 1]
        values = parse_qs(parts.query).get("v")
        if values and values[0].strip():
            return values[0].strip()
    return None


def normalize_embed_url(url: str | None) -> str | None:
    """Map a YouTube watch, short or embed URL to its canonical embed URL.

    >>> normalize_embed_url("https://youtu.be/abc123")
    'https://www.youtube.com/embed/abc123'
    >>> normalize_embed_url("https://example.com/watch?v=abc123") is None
    True
    """
    video_id = extract_video_id(url)
    if video_id is None:
        return None
    return f"https://{CANONICAL_HOST}/embed/{video_id}"
