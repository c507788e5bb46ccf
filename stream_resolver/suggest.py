"""Title suggestions through Gemini, kept apart from stream resolution."""

from __future__ import annotations

import logging
from typing import Any, Optional

from google import genai
from google.genai import types as genai_types

from .config import Settings, settings as default_settings
from .errors import TitleSuggestionError
from .urls import require_video_id, watch_url

logger = logging.getLogger(__name__)


def _build_prompt(video_url: str) -> str:
    return (
        "Suggest one concise, engaging and search-friendly title for the YouTube video "
        f"at {video_url}. Reply with the title text only.\n"
    )


def _extract_response_text(response: Any) -> str:
    raw = getattr(response, "text", None) or ""
    if raw:
        return str(raw)

    candidates = getattr(response, "candidates", None) or []
    if candidates:
        content = getattr(candidates[0], "content", None)
        parts = getattr(content, "parts", None) or []
        text_parts = [str(getattr(part, "text", "")) for part in parts if getattr(part, "text", None)]
        return "\n".join(text_parts).strip()
    return ""


class TitleSuggester:
    def __init__(self, settings: Settings = default_settings, *, client: Optional[genai.Client] = None) -> None:
        self.settings = settings
        self._client_instance = client

    def _client(self) -> genai.Client:
        if self._client_instance is not None:
            return self._client_instance
        if not self.settings.gemini_api_key:
            raise TitleSuggestionError("GEMINI_API_KEY is required for title suggestions")
        self._client_instance = genai.Client(api_key=self.settings.gemini_api_key)
        return self._client_instance

    def suggest(self, url: str) -> str:
        video_id = require_video_id(url)
        client = self._client()
        try:
            response = client.models.generate_content(
                model=self.settings.gemini_model,
                contents=[_build_prompt(watch_url(video_id))],
                config=genai_types.GenerateContentConfig(
                    temperature=0.7,
                    max_output_tokens=64,
                ),
            )
        except Exception as exc:
            logger.error("Gemini title suggestion failed for %s: %s", video_id, exc)
            raise TitleSuggestionError("An unexpected error occurred. Please try again.") from exc

        lines = _extract_response_text(response).strip().splitlines()
        title = lines[0].strip().strip('"').strip() if lines else ""
        if not title:
            raise TitleSuggestionError("Could not generate a title.")
        return title
