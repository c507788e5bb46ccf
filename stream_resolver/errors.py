"""Exception types raised across the resolution pipeline."""

from __future__ import annotations


class ResolverError(Exception):
    """Base class for stream resolver failures."""


class MalformedInput(ResolverError, ValueError):
    """The input URL is missing or carries no recognizable video reference."""


class ProviderMiss(ResolverError):
    """A single provider call failed or returned nothing usable."""

    def __init__(self, provider: str, reason: str) -> None:
        super().__init__(f"{provider}: {reason}")
        self.provider = provider
        self.reason = reason


class MetadataUnavailable(ResolverError):
    """The title-only fallback could not be reached either."""


class ResolutionCancelled(ResolverError):
    """The caller went away before the resolution finished."""


class TitleSuggestionError(ResolverError):
    pass
