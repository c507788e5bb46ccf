"""Candidate mirror endpoints: curated lists plus the community Piped table."""

from __future__ import annotations

import logging
import random
import time
from typing import Callable, Iterable, List, Optional

import requests

from .config import Settings, settings as default_settings
from .schemas import ProviderEndpoint
from .sessions import directory_session, read_with_deadline

logger = logging.getLogger(__name__)

PIPED = "piped"
INVIDIOUS = "invidious"

CURATED_PIPED = (
    "https://pipedapi.kavin.rocks",
    "https://pipedapi.syncpundit.io",
    "https://pipedapi.moomoo.me",
    "https://piped-api.lunar.icu",
    "https://pipedapi.adminforge.de",
)

CURATED_INVIDIOUS = (
    "https://invidious.snopyta.org",
    "https://vid.puffyan.us",
    "https://inv.nadeko.net",
    "https://invidious.projectsegfau.lt",
    "https://yewtu.be",
)


def parse_instance_table(text: str) -> List[str]:
    """Extract API URLs from the Piped wiki's markdown instance table.

    Rows before the header line (the one mentioning ``API``) are ignored, as
    are separator rows and any row whose second column is not an http(s) URL.
    """

    instances: List[str] = []
    in_table = False
    for line in (text or "").splitlines():
        if not in_table:
            if "API" in line:
                in_table = True
            continue
        stripped = line.strip()
        if not stripped.startswith("|") or "---" in stripped:
            continue
        cols = [col.strip() for col in stripped.split("|")]
        if len(cols) < 3:
            continue
        url = cols[2]
        if url.startswith("http"):
            instances.append(url)
    return instances


def _dedupe(urls: Iterable[str]) -> List[str]:
    seen: set[str] = set()
    unique: List[str] = []
    for url in urls:
        normalized = url.strip().rstrip("/")
        if not normalized or normalized in seen:
            continue
        seen.add(normalized)
        unique.append(normalized)
    return unique


class ProviderDirectory:
    """Supplies shuffled Piped and Invidious endpoints, Piped first."""

    def __init__(
        self,
        settings: Settings = default_settings,
        *,
        session: Optional[requests.Session] = None,
        clock: Callable[[], float] = time.monotonic,
        rng: Optional[random.Random] = None,
        curated_piped: Iterable[str] = CURATED_PIPED,
        curated_invidious: Iterable[str] = CURATED_INVIDIOUS,
    ) -> None:
        self.settings = settings
        self.session = session or directory_session(settings)
        self.clock = clock
        self.rng = rng or random.Random()
        self.curated_piped = tuple(curated_piped)
        self.curated_invidious = tuple(curated_invidious)
        self._remote: List[str] = []
        self._remote_expires_at: Optional[float] = None

    def remote_instances(self) -> List[str]:
        if not self.settings.directory_remote_enabled:
            return []
        now = self.clock()
        if self._remote_expires_at is not None and now < self._remote_expires_at:
            return list(self._remote)

        self._remote = self._fetch_remote()
        self._remote_expires_at = now + self.settings.directory_ttl_seconds
        return list(self._remote)

    def _fetch_remote(self) -> List[str]:
        try:
            resp, body = read_with_deadline(
                self.session,
                self.settings.piped_instances_url,
                timeout=self.settings.directory_timeout,
                clock=self.clock,
            )
            resp.raise_for_status()
        except requests.RequestException as exc:
            logger.warning("Could not fetch Piped instance list, using curated set: %s", exc)
            return []

        instances = parse_instance_table(body.decode("utf-8", errors="replace"))
        logger.info("Fetched %d Piped instances from remote directory", len(instances))
        return instances

    def _shuffled(self, urls: List[str]) -> List[str]:
        self.rng.shuffle(urls)
        return urls

    def list_candidates(self) -> List[ProviderEndpoint]:
        piped = self._shuffled(_dedupe([*self.remote_instances(), *self.curated_piped]))
        invidious = self._shuffled(_dedupe(self.curated_invidious))
        return [ProviderEndpoint(url, PIPED) for url in piped] + [
            ProviderEndpoint(url, INVIDIOUS) for url in invidious
        ]
