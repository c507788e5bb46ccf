"""Piped ``/streams/{id}`` adapter."""

from __future__ import annotations

from typing import Any, Dict

from ..schemas import MediaStream, ResolutionResult
from . import ProviderAdapter, best_audio, register, sort_by_quality, stream_entries, title_of


def _is_progressive_mp4(entry: Dict[str, Any]) -> bool:
    if entry.get("videoOnly"):
        return False
    return entry.get("mimeType") == "video/mp4" or entry.get("format") == "MPEG_4"


@register("piped")
class PipedAdapter(ProviderAdapter):
    path_template = "/streams/{video_id}"

    def has_stream_data(self, data: Any) -> bool:
        if not isinstance(data, dict):
            return False
        return isinstance(data.get("videoStreams"), list) or isinstance(
            data.get("audioStreams"), list
        )

    def normalize(self, data: Dict[str, Any]) -> ResolutionResult:
        video = [
            MediaStream(quality=str(entry.get("quality") or "unknown"), url=entry["url"])
            for entry in stream_entries(data, "videoStreams")
            if _is_progressive_mp4(entry)
        ]
        audio = best_audio(
            entry
            for entry in stream_entries(data, "audioStreams")
            if entry.get("mimeType") == "audio/mp4"
        )
        return ResolutionResult(
            title=title_of(data),
            video_streams=sort_by_quality(video),
            audio_streams=audio,
        )
