from __future__ import annotations
from dataclasses import dataclass
from enum import Enum
from typing import Any, List, Literal, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator

ContentType = Literal["movie", "show"]
StreamType = Literal["subscription", "free", "ads", "rent", "buy"]

# Display order of the widget sections
STREAM_TYPES: tuple[str, ...] = ("subscription", "free", "ads", "rent", "buy")
DEFAULT_STREAM_TYPE = "subscription"


def normalize_content_type(value: Any) -> str:
    v = str(value or "").strip().lower()
    if v == "tv":
        return "show"
    return v


class SearchCandidate(BaseModel):
    model_config = ConfigDict(frozen=True, extra="ignore")

    id: int | str
    title: str
    content_type: str
    year: Optional[int] = None

    @field_validator("content_type", mode="before")
    @classmethod
    def _content_type(cls, v):
        return normalize_content_type(v)


class AvailabilityOffer(BaseModel):
    model_config = ConfigDict(frozen=True, extra="ignore")

    service_name: str
    service_logo: Optional[str] = None
    link: Optional[str] = None
    stream_type: str = DEFAULT_STREAM_TYPE

    @field_validator("stream_type", mode="before")
    @classmethod
    def _stream_type(cls, v):
        return v or DEFAULT_STREAM_TYPE


class TrendingItem(BaseModel):
    model_config = ConfigDict(frozen=True, extra="ignore")

    id: int | str
    title: str
    content_type: str
    year: Optional[int] = None
    rank: Optional[int] = None
    services: List[str] = Field(default_factory=list)

    @field_validator("content_type", mode="before")
    @classmethod
    def _content_type(cls, v):
        return normalize_content_type(v)


class ServiceCount(BaseModel):
    model_config = ConfigDict(frozen=True, extra="ignore")

    service_name: str
    title_count: int = 0


class FailureKind(str, Enum):
    NETWORK = "network"
    EMPTY = "empty"
    EXTRACTION = "extraction"
    INELIGIBLE = "ineligible"


@dataclass(frozen=True)
class Failure:
    """Sentinel returned instead of data. Always falsy so `if not result` works."""

    kind: FailureKind
    reason: str = ""

    def __bool__(self) -> bool:
        return False


@dataclass(frozen=True)
class ProbeSignal:
    title: str | None
    content_type: ContentType
    anchor: Any = None  # bs4 Tag
