"""Title-only lookup used when no mirror produced streams."""

from __future__ import annotations

import json
import logging
import time
from typing import Callable, Optional

import requests

from .config import Settings, settings as default_settings
from .errors import MetadataUnavailable
from .schemas import DEFAULT_TITLE, Outcome, ResolutionResult
from .sessions import provider_session, read_with_deadline
from .urls import watch_url

logger = logging.getLogger(__name__)

PARTIAL_MESSAGE = "Could not load download links, but title is available."


class MetadataFallback:
    def __init__(
        self,
        settings: Settings = default_settings,
        *,
        session: Optional[requests.Session] = None,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self.settings = settings
        self.clock = clock
        self.session = session or provider_session(settings)

    def fetch_title_only(self, video_id: str) -> ResolutionResult:
        """Return a stream-less result carrying the oEmbed title.

        Raises ``MetadataUnavailable`` on network errors, non-2xx responses
        and bodies that are not JSON objects.
        """

        try:
            resp, body = read_with_deadline(
                self.session,
                self.settings.oembed_url,
                params={"url": watch_url(video_id), "format": "json"},
                timeout=self.settings.oembed_timeout,
                clock=self.clock,
            )
            resp.raise_for_status()
            data = json.loads(body)
        except (requests.RequestException, ValueError) as exc:
            raise MetadataUnavailable(f"oEmbed lookup failed: {exc}") from exc

        if not isinstance(data, dict):
            raise MetadataUnavailable("oEmbed response was not a JSON object")

        title = data.get("title")
        if not isinstance(title, str) or not title.strip():
            title = DEFAULT_TITLE

        logger.info("Metadata fallback recovered title for %s", video_id)
        return ResolutionResult(
            title=title,
            error=PARTIAL_MESSAGE,
            outcome=Outcome.PARTIAL,
            provider="oembed",
        )
