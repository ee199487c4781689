from __future__ import annotations

from datetime import datetime, timezone
from typing import Callable

from playlist_probe.errors import SourceEmpty, SourceError, SourceUnavailable
from playlist_probe.utils.logger import logger

from .capture import ImageCapturer
from .demo import demo_record
from .normalize import parse_localized_date, parse_machine_duration
from .sources.youtube_page import PageFields
from .types import CapturedImage, SourceMode, VideoRecord


PLACEHOLDER_TITLE = "YouTube video"


def _to_int(value, default: int = 0) -> int:
    try:
        return max(0, int(value))
    except (TypeError, ValueError):
        return default


class RecordResolver:
    """Turns one video id into one VideoRecord (and maybe an image).

    Primary mode raises SourceUnavailable/SourceEmpty straight through; the
    pipeline owns the retry policy. Fallback mode never raises for a missing
    page: absent fields keep their defaults and a record with no title is
    swapped for a demo record tagged ``used_fallback_data``.
    """

    def __init__(
        self,
        *,
        api_source=None,
        page_source=None,
        capturer: ImageCapturer | None = None,
        log_fn: Callable[[str], None] | None = None,
        clock: Callable[[], datetime] | None = None,
    ):
        self.api_source = api_source
        self.page_source = page_source
        self.capturer = capturer
        self._log = log_fn
        self._clock = clock or (lambda: datetime.now(timezone.utc))

    def _emit(self, msg: str) -> None:
        if self._log:
            try:
                self._log(msg)
            except Exception as e:
                logger.debug(f"log callback failed: {e}")

    def resolve(
        self,
        video_id: str,
        mode: SourceMode,
        *,
        listing_title: str | None = None,
        seed: int | str | None = None,
    ) -> tuple[VideoRecord, CapturedImage | None]:
        if mode == SourceMode.PRIMARY:
            record = self._resolve_primary(video_id, listing_title)
        else:
            record = self._resolve_fallback(video_id, seed)
        return record, self._capture(record)

    # -- primary --

    def _resolve_primary(self, video_id: str, listing_title: str | None) -> VideoRecord:
        if self.api_source is None:
            raise SourceUnavailable("primary source is not configured")
        details = self.api_source.get_video_details(video_id)
        stats = self.api_source.get_video_statistics(video_id)

        snippet = details.get("snippet") or {}
        content = details.get("contentDetails") or {}
        statistics = stats.get("statistics") or {}

        if "viewCount" not in statistics:
            raise SourceEmpty(f"no view count for video {video_id}")

        title = str(snippet.get("title") or listing_title or "").strip()
        if not title:
            raise SourceEmpty(f"no title for video {video_id}")

        return VideoRecord(
            id=video_id,
            title=title,
            duration_seconds=parse_machine_duration(content.get("duration")),
            view_count=_to_int(statistics.get("viewCount")),
            # Hidden like counts are simply absent from the payload.
            like_count=_to_int(statistics.get("likeCount"), 0),
            published_at=parse_localized_date(snippet.get("publishedAt"), now=self._clock()),
            source=SourceMode.PRIMARY,
        )

    # -- fallback --

    def _resolve_fallback(self, video_id: str, seed: int | str | None) -> VideoRecord:
        now = self._clock()
        fields = PageFields()
        if self.page_source is not None:
            try:
                fields = self.page_source.extract_video(video_id)
            except SourceError as e:
                logger.warning(f"page extraction failed for {video_id}: {e}")
                self._emit(f"page extraction failed: {video_id}: {e}")

        title = (fields.title or "").strip() or PLACEHOLDER_TITLE
        if title == PLACEHOLDER_TITLE:
            logger.warning(f"no title extracted for {video_id}; substituting demo data")
            self._emit(f"demo data substituted: {video_id}")
            return demo_record(video_id, seed=seed, now=now)

        return VideoRecord(
            id=video_id,
            title=title,
            duration_seconds=_to_int(fields.duration_seconds),
            view_count=_to_int(fields.view_count),
            like_count=_to_int(fields.like_count),
            published_at=fields.published_at or now,
            source=SourceMode.FALLBACK,
        )

    # -- image --

    def _capture(self, record: VideoRecord) -> CapturedImage | None:
        if self.capturer is None:
            return None
        try:
            image = self.capturer.capture(record)
        except Exception as e:
            logger.warning(f"image capture failed for {record.id}: {e}")
            self._emit(f"capture failed: {record.id}: {e}")
            return None
        if image.for_id != record.id:
            logger.warning(f"capturer returned image for {image.for_id}, expected {record.id}; dropped")
            return None
        return image
