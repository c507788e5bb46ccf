from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field

DEFAULT_TITLE = "Untitled Video"


class Outcome(str, Enum):
    RESOLVED = "resolved"
    PARTIAL = "partial"
    UNAVAILABLE = "unavailable"


@dataclass(frozen=True)
class ProviderEndpoint:
    base_url: str
    family: str


class MediaStream(BaseModel):
    model_config = ConfigDict(frozen=True)

    quality: str
    url: str


class ResolutionResult(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    title: str = DEFAULT_TITLE
    video_streams: List[MediaStream] = Field(default_factory=list, alias="videoStreams")
    audio_streams: List[MediaStream] = Field(default_factory=list, alias="audioStreams")
    error: Optional[str] = None
    outcome: Outcome = Field(default=Outcome.RESOLVED, exclude=True)
    provider: Optional[str] = Field(default=None, exclude=True)

    @property
    def usable(self) -> bool:
        return bool(self.video_streams or self.audio_streams)

    def to_payload(self, *, include_title: bool = True) -> Dict[str, Any]:
        exclude = None if include_title else {"title"}
        return self.model_dump(by_alias=True, exclude_none=True, exclude=exclude)


class ErrorResponse(BaseModel):
    error: str
    code: Optional[str] = None


class HealthResponse(BaseModel):
    status: str = "ok"
    version: str
    families: List[str]
    cache_enabled: bool
    cache_entries: int


class TitleSuggestionRequest(BaseModel):
    url: str


class TitleSuggestionResponse(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    suggested_title: str = Field(..., alias="suggestedTitle")
