"""Invidious ``/api/v1/videos/{id}`` adapter."""

from __future__ import annotations

from typing import Any, Dict

from ..schemas import MediaStream, ResolutionResult
from . import ProviderAdapter, best_audio, register, sort_by_quality, stream_entries, title_of


def _mime(entry: Dict[str, Any]) -> str:
    value = entry.get("type")
    return value if isinstance(value, str) else ""


def _is_mp4_video(entry: Dict[str, Any]) -> bool:
    return "video/mp4" in _mime(entry) or entry.get("container") == "mp4"


def _label(entry: Dict[str, Any]) -> str:
    return str(entry.get("qualityLabel") or entry.get("resolution") or "unknown")


@register("invidious")
class InvidiousAdapter(ProviderAdapter):
    path_template = "/api/v1/videos/{video_id}"

    def has_stream_data(self, data: Any) -> bool:
        if not isinstance(data, dict):
            return False
        return isinstance(data.get("formatStreams"), list) or isinstance(
            data.get("adaptiveFormats"), list
        )

    def normalize(self, data: Dict[str, Any]) -> ResolutionResult:
        video = [
            MediaStream(quality=_label(entry), url=entry["url"])
            for entry in stream_entries(data, "formatStreams")
            if _is_mp4_video(entry)
        ]
        audio = best_audio(
            entry
            for entry in stream_entries(data, "adaptiveFormats")
            if "audio/mp4" in _mime(entry)
        )
        return ResolutionResult(
            title=title_of(data),
            video_streams=sort_by_quality(video),
            audio_streams=audio,
        )
