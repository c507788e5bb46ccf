"""Central configuration loader for the stream resolver service."""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass

import dotenv

dotenv.load_dotenv()


def _int_from_env(key: str, default: int) -> int:
    value = os.getenv(key)
    if value is None or value == "":
        return default
    try:
        return int(value)
    except ValueError:
        raise ValueError(f"Environment variable {key} must be an integer") from None


def _float_from_env(key: str, default: float) -> float:
    value = os.getenv(key)
    if value is None or value == "":
        return default
    try:
        return float(value)
    except ValueError:
        raise ValueError(f"Environment variable {key} must be a number") from None


def _bool_from_env(key: str, default: bool) -> bool:
    value = os.getenv(key)
    if value is None or value == "":
        return default
    return value.strip().lower() not in {"0", "false", "no", "off"}


@dataclass(frozen=True)
class Settings:
    piped_instances_url: str = os.getenv(
        "PIPED_INSTANCES_URL",
        "https://raw.githubusercontent.com/wiki/TeamPiped/Piped-Frontend/Instances.md",
    )
    provider_timeout: float = _float_from_env("PROVIDER_TIMEOUT", 4.0)
    directory_timeout: float = _float_from_env("DIRECTORY_TIMEOUT", 5.0)
    directory_ttl_seconds: int = _int_from_env("DIRECTORY_TTL_SECONDS", 3600)
    directory_retries: int = _int_from_env("DIRECTORY_RETRIES", 2)
    directory_remote_enabled: bool = _bool_from_env("DIRECTORY_REMOTE_ENABLED", True)
    max_candidates: int = _int_from_env("MAX_CANDIDATES", 5)
    cache_enabled: bool = _bool_from_env("CACHE_ENABLED", True)
    cache_ttl_seconds: int = _int_from_env("CACHE_TTL_SECONDS", 300)
    oembed_url: str = os.getenv("OEMBED_URL", "https://www.youtube.com/oembed")
    oembed_timeout: float = _float_from_env("OEMBED_TIMEOUT", 5.0)
    gemini_api_key: str | None = os.getenv("GEMINI_API_KEY")
    gemini_model: str = os.getenv("GEMINI_MODEL", "gemini-2.0-flash")
    log_level: str = os.getenv("LOG_LEVEL", "INFO").upper()
    port: int = _int_from_env("PORT", 8080)
    user_agent: str = os.getenv("USER_AGENT", "stream-resolver/0.1")


settings = Settings()


def init_logging(level: str | None = None) -> None:
    level = (level or settings.log_level).upper()
    logging.basicConfig(
        level=getattr(logging, level, logging.INFO),
        format="%(asctime)s %(levelname)s %(name)s - %(message)s",
    )
