"""Adapter registry for the supported provider families."""

from __future__ import annotations

import re
from typing import Any, Dict, Iterable, List, Optional

from ..schemas import DEFAULT_TITLE, MediaStream, ResolutionResult

_LEADING_DIGITS = re.compile(r"\s*(\d+)")


class ProviderAdapter:
    """Knows one family's endpoint pattern and JSON shape.

    Subclasses set ``path_template`` and implement ``has_stream_data`` and
    ``normalize``; ``register`` assigns ``family``. ``normalize`` receives
    untrusted JSON and drops anything it cannot interpret.
    """

    family: str = ""
    path_template: str = ""

    def stream_url(self, base_url: str, video_id: str) -> str:
        return base_url.rstrip("/") + self.path_template.format(video_id=video_id)

    def has_stream_data(self, data: Any) -> bool:
        raise NotImplementedError

    def normalize(self, data: Dict[str, Any]) -> ResolutionResult:
        raise NotImplementedError


ADAPTERS: Dict[str, ProviderAdapter] = {}


def register(family: str):
    def decorator(cls):
        cls.family = family
        ADAPTERS[family] = cls()
        return cls

    return decorator


def get_adapter(family: str) -> Optional[ProviderAdapter]:
    return ADAPTERS.get(family)


def quality_number(label: str) -> Optional[int]:
    match = _LEADING_DIGITS.match(label or "")
    if not match:
        return None
    return int(match.group(1))


def sort_by_quality(streams: Iterable[MediaStream]) -> List[MediaStream]:
    """Sort by numeric quality, highest first; unparseable labels go last."""

    def _key(stream: MediaStream):
        number = quality_number(stream.quality)
        if number is None:
            return (1, 0)
        return (0, -number)

    return sorted(streams, key=_key)


def safe_bitrate(value: Any) -> int:
    try:
        return int(value or 0)
    except (TypeError, ValueError):
        return 0


def kbps_label(bitrate: int) -> str:
    return f"{int(bitrate / 1000 + 0.5)}kbps"


def best_audio(entries: Iterable[Dict[str, Any]]) -> List[MediaStream]:
    ranked = sorted(entries, key=lambda e: safe_bitrate(e.get("bitrate")), reverse=True)
    if not ranked:
        return []
    top = ranked[0]
    return [MediaStream(quality=kbps_label(safe_bitrate(top.get("bitrate"))), url=top["url"])]


def stream_entries(data: Dict[str, Any], key: str) -> List[Dict[str, Any]]:
    """Entries under ``key`` that are objects carrying a string ``url``."""

    raw = data.get(key)
    if not isinstance(raw, list):
        return []
    return [
        entry
        for entry in raw
        if isinstance(entry, dict) and isinstance(entry.get("url"), str) and entry["url"]
    ]


def title_of(data: Dict[str, Any]) -> str:
    title = data.get("title")
    if isinstance(title, str) and title.strip():
        return title
    return DEFAULT_TITLE


def _auto_import_adapters() -> None:
    """Import bundled adapters so they register themselves."""
    from importlib import import_module

    for module_name in ("piped", "invidious"):
        import_module(f"{__name__}.{module_name}")


_auto_import_adapters()


__all__ = [
    "ADAPTERS",
    "ProviderAdapter",
    "get_adapter",
    "register",
    "sort_by_quality",
]
