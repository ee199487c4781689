"""Demo records used when page extraction yields nothing usable.

These are fabricated values for offline runs and demos. Every record built
here has ``used_fallback_data=True`` so callers can tell it apart from
extracted data.
"""
from __future__ import annotations

import random
from datetime import datetime, timezone

from .types import SourceMode, VideoRecord


DEMO_VIDEO_IDS = (
    "dQw4w9WgXcQ",
    "jNQXAC9IVRw",
    "9bZkp7q19f0",
    "kJQP7kiw5Fk",
    "OPf0YbXqDm0",
)

# id -> (title, views, likes, seconds, published)
_DEMO_TABLE: dict[str, tuple[str, int, int, int, str]] = {
    "dQw4w9WgXcQ": (
        "Rick Astley - Never Gonna Give You Up (Official Music Video)",
        1_234_567_890,
        12_345_678,
        213,
        "2009-10-25T00:00:00+00:00",
    ),
    "jNQXAC9IVRw": ("Me at the zoo", 248_000_000, 12_000_000, 19, "2005-04-23T00:00:00+00:00"),
    "9bZkp7q19f0": ("PSY - GANGNAM STYLE(강남스타일) M/V", 4_600_000_000, 24_000_000, 253, "2012-07-15T00:00:00+00:00"),
    "kJQP7kiw5Fk": ("Luis Fonsi - Despacito ft. Daddy Yankee", 8_100_000_000, 50_000_000, 281, "2017-01-12T00:00:00+00:00"),
    "OPf0YbXqDm0": (
        "Mark Ronson - Uptown Funk (Official Video) ft. Bruno Mars",
        4_800_000_000,
        25_000_000,
        271,
        "2014-11-19T00:00:00+00:00",
    ),
}

PLACEHOLDER_DURATION_SEC = 210


def demo_record(video_id: str, *, seed: int | str | None = None, now: datetime | None = None) -> VideoRecord:
    """Demo record for video_id.

    Known ids come from a fixed table. Unknown ids get random-looking counts
    that are stable for the same (seed, video_id) pair, so one run renders the
    same numbers in every artifact.
    """
    known = _DEMO_TABLE.get(video_id)
    if known:
        title, views, likes, seconds, published = known
        return VideoRecord(
            id=video_id,
            title=title,
            duration_seconds=seconds,
            view_count=views,
            like_count=likes,
            published_at=datetime.fromisoformat(published),
            source=SourceMode.FALLBACK,
            used_fallback_data=True,
        )

    rng = random.Random(f"{seed}:{video_id}")
    return VideoRecord(
        id=video_id,
        title=f"Video {video_id}",
        duration_seconds=PLACEHOLDER_DURATION_SEC,
        view_count=rng.randrange(1_000_000),
        like_count=rng.randrange(50_000),
        published_at=now or datetime.now(timezone.utc),
        source=SourceMode.FALLBACK,
        used_fallback_data=True,
    )
