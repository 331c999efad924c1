"""
Shared dataclasses used across the ingestion pipeline.
"""
from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from typing import Generic, TypeVar


T = TypeVar("T")

EPOCH = datetime(1970, 1, 1, tzinfo=timezone.utc)


@dataclass(slots=True)
class Category:
    """Live category from the provider catalog."""
    id: int
    name: str = ""


@dataclass(slots=True)
class Stream:
    """Live stream from the provider catalog."""
    id: int
    category_id: int = 0
    number: int = 0
    name: str = ""
    icon: str | None = None


@dataclass(slots=True)
class GuideChannel:
    """Channel declaration from the XMLTV channel pass."""
    xmltv_id: str
    display_name: str | None = None
    icon_path: str | None = None


@dataclass(slots=True)
class GuideProgramme:
    """Programme declaration from the XMLTV programme pass, before validation."""
    channel: str
    start_time: datetime | None = None
    end_time: datetime | None = None
    title: str | None = None
    description: str | None = None
    episode_name: str | None = None
    icon_path: str | None = None
    genre: str | None = None


class MatchKind(str, Enum):
    """Which branch of the channel matching heuristic produced a join key."""
    EXACT_ID = "exact-id"
    NAME_FALLBACK = "name-fallback"
    UNMATCHED = "unmatched"


@dataclass(slots=True, frozen=True)
class ChannelMatch:
    xmltv_id: str
    join_key: str
    kind: MatchKind
    stream_id: int | None = None


@dataclass(slots=True)
class EpgEntry:
    """Single validated schedule entry. end_time > start_time > epoch."""
    channel_id: str
    start_time: datetime
    end_time: datetime
    title: str | None = None
    description: str | None = None
    episode_name: str | None = None
    icon_path: str | None = None
    genre_string: str | None = None

    def __post_init__(self) -> None:
        if not (self.end_time > self.start_time > EPOCH):
            raise ValueError(
                f"Invalid programme window for {self.channel_id}: "
                f"{self.start_time} -> {self.end_time}"
            )


@dataclass(slots=True)
class ChannelEpg:
    """Schedule for one guide channel, entries ordered by start time."""
    id: str
    xmltv_id: str
    display_name: str | None = None
    icon_path: str | None = None
    match_kind: MatchKind = MatchKind.UNMATCHED
    entries: dict[datetime, EpgEntry] = field(default_factory=dict)


@dataclass(slots=True)
class FetchResult(Generic[T]):
    """Outcome of a fetch or parse call: success flag, details and records."""
    ok: bool
    details: str
    records: list[T] = field(default_factory=list)


@dataclass(slots=True)
class CatalogResult:
    ok: bool
    details: str
    categories: list[Category] = field(default_factory=list)
    streams: list[Stream] = field(default_factory=list)


@dataclass(slots=True)
class SeriesRule:
    tvg_id: str
    title: str = ""
    mode: str = ""


@dataclass(slots=True)
class RecurringRule:
    id: int
    channel_id: int = 0
    days_of_week: list[int] = field(default_factory=list)
    start_time: str = ""  # HH:MM:SS
    end_time: str = ""
    start_date: str = ""  # YYYY-MM-DD
    end_date: str = ""
    name: str = ""
    enabled: bool = True


@dataclass(slots=True)
class Recording:
    id: int
    channel_id: int = 0
    title: str = ""
    plot: str = ""
    stream_url: str = ""
    start_time: datetime | None = None
    end_time: datetime | None = None


__all__ = [
    "EPOCH",
    "Category",
    "Stream",
    "GuideChannel",
    "GuideProgramme",
    "MatchKind",
    "ChannelMatch",
    "EpgEntry",
    "ChannelEpg",
    "FetchResult",
    "CatalogResult",
    "SeriesRule",
    "RecurringRule",
    "Recording",
]
