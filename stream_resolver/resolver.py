"""Sequential multi-provider stream resolution with metadata fallback."""

from __future__ import annotations

import json
import logging
import threading
import time
from typing import Callable, List, Optional

import requests

from .cache import ResponseCache
from .config import Settings, settings as default_settings
from .directory import INVIDIOUS, PIPED, ProviderDirectory
from .errors import MetadataUnavailable, ProviderMiss, ResolutionCancelled
from .metadata import MetadataFallback
from .providers import get_adapter
from .schemas import Outcome, ProviderEndpoint, ResolutionResult
from .sessions import provider_session, read_with_deadline
from .urls import require_video_id

logger = logging.getLogger(__name__)

FAMILY_ORDER = (PIPED, INVIDIOUS)
UNAVAILABLE_MESSAGE = "All downloader services failed. Please try again later."


def _check_cancelled(cancel_event: Optional[threading.Event]) -> None:
    if cancel_event is not None and cancel_event.is_set():
        raise ResolutionCancelled("caller disconnected")


class Resolver:
    """Turns a YouTube URL into direct stream links.

    Piped candidates are tried first, then Invidious, one at a time; the
    first candidate yielding at least one usable stream wins. When every
    candidate misses, the oEmbed title lookup produces a partial result, and
    when that misses too the result carries ``Outcome.UNAVAILABLE``.
    """

    def __init__(
        self,
        settings: Settings = default_settings,
        *,
        directory: Optional[ProviderDirectory] = None,
        session: Optional[requests.Session] = None,
        cache: Optional[ResponseCache] = None,
        metadata: Optional[MetadataFallback] = None,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self.settings = settings
        self.clock = clock
        self.session = session or provider_session(settings)
        self.directory = directory or ProviderDirectory(settings)
        if cache is None and settings.cache_enabled:
            cache = ResponseCache(settings.cache_ttl_seconds)
        self.cache = cache
        self.metadata = metadata or MetadataFallback(settings, session=self.session, clock=clock)

    def resolve(self, url: str, cancel_event: Optional[threading.Event] = None) -> ResolutionResult:
        video_id = require_video_id(url)

        if self.cache is not None:
            cached = self.cache.get(video_id)
            if cached is not None:
                logger.info("Cache hit for %s", video_id)
                return cached

        candidates = self.directory.list_candidates()
        for family in FAMILY_ORDER:
            for endpoint in self._bounded(candidates, family):
                _check_cancelled(cancel_event)
                try:
                    result = self._attempt(endpoint, video_id)
                except ProviderMiss as miss:
                    logger.warning("%s instance %s", family.capitalize(), miss)
                    continue

                _check_cancelled(cancel_event)
                logger.info("Resolved %s via %s", video_id, endpoint.base_url)
                if self.cache is not None:
                    self.cache.put(video_id, result)
                return result
            logger.warning("All %s instances failed for %s", family, video_id)

        _check_cancelled(cancel_event)
        try:
            return self.metadata.fetch_title_only(video_id)
        except MetadataUnavailable as exc:
            logger.warning("Metadata fallback failed for %s: %s", video_id, exc)

        return ResolutionResult(error=UNAVAILABLE_MESSAGE, outcome=Outcome.UNAVAILABLE)

    def _bounded(self, candidates: List[ProviderEndpoint], family: str) -> List[ProviderEndpoint]:
        matching = [c for c in candidates if c.family == family]
        return matching[: self.settings.max_candidates]

    def _attempt(self, endpoint: ProviderEndpoint, video_id: str) -> ResolutionResult:
        adapter = get_adapter(endpoint.family)
        if adapter is None:
            raise ProviderMiss(endpoint.base_url, f"no adapter for family {endpoint.family!r}")

        url = adapter.stream_url(endpoint.base_url, video_id)
        try:
            resp, body = read_with_deadline(
                self.session, url, timeout=self.settings.provider_timeout, clock=self.clock
            )
        except requests.Timeout:
            raise ProviderMiss(endpoint.base_url, "timed out") from None
        except requests.RequestException as exc:
            raise ProviderMiss(endpoint.base_url, f"request failed: {exc}") from None

        if not 200 <= resp.status_code < 300:
            raise ProviderMiss(endpoint.base_url, f"responded with status {resp.status_code}")

        try:
            data = json.loads(body)
        except ValueError:
            raise ProviderMiss(endpoint.base_url, "returned malformed JSON") from None

        if not adapter.has_stream_data(data):
            raise ProviderMiss(endpoint.base_url, "returned invalid data")

        try:
            result = adapter.normalize(data)
        except (TypeError, ValueError, KeyError) as exc:
            raise ProviderMiss(endpoint.base_url, f"could not be normalized: {exc}") from None

        if not result.usable:
            raise ProviderMiss(endpoint.base_url, "returned no usable streams")
        return result.model_copy(update={"provider": endpoint.base_url})
