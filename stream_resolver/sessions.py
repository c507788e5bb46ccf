"""Shared ``requests`` sessions for provider, directory and oEmbed calls."""

from __future__ import annotations

import threading
import time
from typing import Any, Callable, Dict, Optional, Tuple

import requests
from requests.adapters import HTTPAdapter
from urllib3.util.retry import Retry

from .config import Settings, settings as default_settings


def build_session(
    *,
    retries: int = 0,
    backoff_factor: float = 0.5,
    settings: Settings = default_settings,
) -> requests.Session:
    session = requests.Session()
    retry = Retry(
        total=retries,
        backoff_factor=backoff_factor,
        status_forcelist=[429, 500, 502, 503, 504],
        allowed_methods=["GET"],
        respect_retry_after_header=True,
        raise_on_status=False,
    )
    adapter = HTTPAdapter(max_retries=retry)
    session.mount("https://", adapter)
    session.mount("http://", adapter)
    session.headers.update(
        {
            "Accept": "application/json",
            "User-Agent": settings.user_agent,
        }
    )
    return session


def provider_session(settings: Settings = default_settings) -> requests.Session:
    return build_session(retries=0, settings=settings)


def directory_session(settings: Settings = default_settings) -> requests.Session:
    return build_session(retries=settings.directory_retries, settings=settings)


def read_with_deadline(
    session: requests.Session,
    url: str,
    *,
    timeout: float,
    params: Optional[Dict[str, Any]] = None,
    clock: Callable[[], float] = time.monotonic,
) -> Tuple[requests.Response, bytes]:
    """GET ``url`` and read its body within ``timeout`` seconds overall.

    ``requests`` applies ``timeout`` to the connect and to each socket read,
    so a server trickling bytes would never trip it. The request runs on a
    daemon reader thread that is joined against the deadline; a reader still
    busy at the deadline is abandoned and ``requests.Timeout`` is raised.
    Non-2xx bodies are not read.
    """

    deadline = clock() + timeout
    wait_until = time.monotonic() + timeout
    abandoned = threading.Event()
    outcome: Dict[str, Any] = {"chunks": []}

    def _fetch() -> None:
        try:
            resp = session.get(url, params=params, timeout=timeout, stream=True)
            outcome["response"] = resp
            if abandoned.is_set():
                resp.close()
                return
            if not 200 <= resp.status_code < 300:
                return
            for chunk in resp.iter_content(chunk_size=8192):
                outcome["chunks"].append(chunk)
                if abandoned.is_set() or clock() >= deadline:
                    return
        except Exception as exc:
            outcome["error"] = exc

    reader = threading.Thread(target=_fetch, daemon=True)
    reader.start()
    reader.join(timeout=max(wait_until - time.monotonic(), 0.0))

    timed_out = reader.is_alive() or clock() >= deadline
    if timed_out:
        abandoned.set()
    resp = outcome.get("response")
    try:
        if timed_out:
            raise requests.Timeout(f"{url} exceeded the {timeout}s deadline")
        if "error" in outcome:
            raise outcome["error"]
        return resp, b"".join(outcome["chunks"])
    finally:
        if resp is not None:
            resp.close()
