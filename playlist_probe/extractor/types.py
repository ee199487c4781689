from __future__ import annotations

import enum
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any

from .normalize import format_duration
from .urls import watch_url


class SourceMode(str, enum.Enum):
    PRIMARY = "primary"
    FALLBACK = "fallback"


class RunState(str, enum.Enum):
    STARTING = "starting"
    LISTING = "listing"
    PROCESSING = "processing"
    FINALIZING = "finalizing"
    DONE = "done"
    ERRORED = "errored"


@dataclass(frozen=True)
class VideoRecord:
    """One playlist entry, normalized. Built once by the resolver and never mutated."""

    id: str
    title: str
    duration_seconds: int
    view_count: int
    published_at: datetime
    like_count: int = 0
    source: SourceMode = SourceMode.PRIMARY
    # True when the values are demo/placeholder data rather than extracted data.
    used_fallback_data: bool = False

    @property
    def duration_display(self) -> str:
        return format_duration(self.duration_seconds)

    @property
    def url(self) -> str:
        return watch_url(self.id)

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "title": self.title,
            "duration_seconds": self.duration_seconds,
            "duration": self.duration_display,
            "view_count": self.view_count,
            "like_count": self.like_count,
            "published_at": self.published_at.isoformat(),
            "url": self.url,
            "source": self.source.value,
            "used_fallback_data": self.used_fallback_data,
        }


@dataclass(frozen=True)
class CapturedImage:
    """Evidence image for one record: inline bytes, a fetchable URL, or both."""

    for_id: str
    data: bytes | None = None
    url: str | None = None
    mime_type: str = "image/png"
    # service | thumbnail | overlay
    strategy: str = "overlay"

    def __post_init__(self) -> None:
        if not self.data and not self.url:
            raise ValueError("CapturedImage needs inline data or a URL")


@dataclass(frozen=True)
class ProgressEvent:
    fraction_complete: int
    message: str
    processed_count: int = 0
    total_count: int = 0
    current_title: str | None = None
    state: RunState = RunState.STARTING

    def to_dict(self) -> dict[str, Any]:
        return {
            "fraction_complete": self.fraction_complete,
            "message": self.message,
            "processed_count": self.processed_count,
            "total_count": self.total_count,
            "current_title": self.current_title,
            "state": self.state.value,
        }


@dataclass(frozen=True)
class ExtractionRun:
    """Result of one extract() call. records[i] and images[i] describe the same entry."""

    playlist_id: str
    mode: SourceMode
    records: tuple[VideoRecord, ...] = ()
    images: tuple[CapturedImage | None, ...] = ()
    total_duration_seconds: int = 0
    processed_count: int = 0
    # Set when the run was restarted in fallback mode after a primary failure.
    restarted: bool = False
    warnings: tuple[str, ...] = field(default_factory=tuple)

    def __post_init__(self) -> None:
        if len(self.records) != len(self.images):
            raise ValueError("records and images must have the same length")

    @property
    def total_duration_display(self) -> str:
        return format_duration(self.total_duration_seconds)

    @property
    def used_fallback_data(self) -> bool:
        return any(r.used_fallback_data for r in self.records)

    @property
    def image_count(self) -> int:
        return sum(1 for img in self.images if img is not None)

    def summary(self) -> dict[str, Any]:
        return {
            "playlist_id": self.playlist_id,
            "mode": self.mode.value,
            "restarted": self.restarted,
            "videos": len(self.records),
            "images": self.image_count,
            "total_duration_seconds": self.total_duration_seconds,
            "total_duration": self.total_duration_display,
            "used_fallback_data": self.used_fallback_data,
            "warnings": list(self.warnings),
        }
