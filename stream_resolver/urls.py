"""Video reference extraction for the accepted YouTube URL forms."""

from __future__ import annotations

import re
from typing import Optional
from urllib.parse import urlsplit

from .errors import MalformedInput

_REFERENCE_RE = re.compile(
    r"^.*(?:youtu\.be/|shorts/|live/|v/|u/\w/|embed/|watch\?v=|&v=)([^#&?/]*).*"
)
_TOKEN_RE = re.compile(r"^[A-Za-z0-9_-]{11}$")


def extract_video_id(url: Optional[str]) -> Optional[str]:
    """Return the 11-character video reference in ``url``, or ``None``."""

    if not url:
        return None
    url = url.strip()
    try:
        parts = urlsplit(url)
    except ValueError:
        return None
    if parts.scheme not in ("http", "https") or not parts.netloc:
        return None

    match = _REFERENCE_RE.match(url)
    if not match:
        return None
    token = match.group(1)
    if not _TOKEN_RE.match(token):
        return None
    return token


def require_video_id(url: Optional[str]) -> str:
    if not url or not url.strip():
        raise MalformedInput("YouTube URL is required.")
    video_id = extract_video_id(url)
    if video_id is None:
        raise MalformedInput("Invalid YouTube URL.")
    return video_id


def watch_url(video_id: str) -> str:
    return f"https://www.youtube.com/watch?v={video_id}"
