from __future__ import annotations

import itertools
import secrets
import threading
from typing import Any, Callable

from playlist_probe.errors import (
    EmptyPlaylist,
    ExtractionCancelled,
    ExtractionFailed,
    PipelineBusy,
    PlaylistProbeError,
    SourceEmpty,
    SourceError,
    SourceUnavailable,
)
from playlist_probe.utils.config import AppConfig, load_config
from playlist_probe.utils.logger import clear_run_id, logger, set_run_id
from playlist_probe.utils.network import HttpClient

from .capture import build_capturer
from .demo import DEMO_VIDEO_IDS
from .resolver import RecordResolver
from .sources.base import PlaylistEntry
from .sources.youtube_api import YouTubeApiSource
from .sources.youtube_page import YouTubePageSource
from .types import ExtractionRun, ProgressEvent, RunState, SourceMode


ProgressCallback = Callable[[ProgressEvent], None]

# Fixed progress schedule (percent).
LISTING_START = 5
LISTING_DONE = 10
ITEMS_SPAN = 80
FINALIZING = 90
DONE = 100


class _ProgressReporter:
    """Forwards progress events, never letting fraction_complete move backward."""

    def __init__(self, callback: ProgressCallback | None):
        self._callback = callback
        self.last = 0
        self.last_event: ProgressEvent | None = None

    def emit(
        self,
        fraction: int,
        message: str,
        *,
        state: RunState,
        processed: int = 0,
        total: int = 0,
        current_title: str | None = None,
    ) -> None:
        self.last = max(self.last, min(DONE, int(fraction)))
        event = ProgressEvent(
            fraction_complete=self.last,
            message=message,
            processed_count=processed,
            total_count=total,
            current_title=current_title,
            state=state,
        )
        self.last_event = event
        logger.debug(f"progress {event.fraction_complete}% {message}")
        if not self._callback:
            return
        try:
            self._callback(event)
        except Exception as e:
            logger.warning(f"progress callback failed: {e}")


class _RunContext:
    """Per-call state. Lives on the stack of extract(), never on the pipeline."""

    def __init__(self, settings: AppConfig, progress: _ProgressReporter, cancel_event, seed: int):
        self.settings = settings
        self.progress = progress
        self.cancel_event = cancel_event
        self.seed = seed
        self.restarted = False
        self.warnings: list[str] = []


class PlaylistPipeline:
    """Extracts every video of one playlist into an ExtractionRun.

    With an API key the run uses the Data API; if that fails anywhere
    (listing or any item) the partial result is dropped and the run starts
    over with page extraction. Without a key it goes straight to page
    extraction. One run at a time per instance.
    """

    _run_ids = itertools.count(1)

    def __init__(
        self,
        cfg: AppConfig | None = None,
        *,
        api_source: Any = None,
        page_source: Any = None,
        capturer_factory: Callable[[AppConfig, SourceMode, HttpClient], Any] | None = None,
        seed_factory: Callable[[], int] | None = None,
        log_fn: Callable[[str], None] | None = None,
    ):
        self.cfg = cfg or load_config()
        self._api_source = api_source
        self._page_source = page_source
        self._capturer_factory = capturer_factory or build_capturer
        self._seed_factory = seed_factory or (lambda: secrets.randbits(32))
        self._log = log_fn
        self._lock = threading.Lock()

    @property
    def busy(self) -> bool:
        return self._lock.locked()

    def extract(
        self,
        playlist_id: str,
        on_progress: ProgressCallback | None = None,
        *,
        cancel_event: threading.Event | None = None,
    ) -> ExtractionRun:
        if not self._lock.acquire(blocking=False):
            raise PipelineBusy("extract() already running on this pipeline")
        run_id = next(self._run_ids)
        set_run_id(run_id)
        progress = _ProgressReporter(on_progress)
        try:
            ctx = _RunContext(self.cfg.snapshot(), progress, cancel_event, self._seed_factory())
            logger.info(f"extract: start playlist={playlist_id} api_key={'yes' if ctx.settings.has_api_key else 'no'}")
            progress.emit(0, "Starting...", state=RunState.STARTING)
            run = self._extract(playlist_id, ctx)
            logger.info(
                f"extract: done playlist={playlist_id} mode={run.mode.value} videos={len(run.records)} "
                f"images={run.image_count} demo_data={run.used_fallback_data}"
            )
            return run
        except PlaylistProbeError as e:
            logger.error(f"extract: {type(e).__name__}: {e}")
            progress.emit(progress.last, e.user_message, state=RunState.ERRORED)
            raise
        except Exception as e:
            logger.exception(f"extract: unexpected error for {playlist_id}")
            progress.emit(progress.last, ExtractionFailed.user_message, state=RunState.ERRORED)
            raise ExtractionFailed(str(e)) from e
        finally:
            clear_run_id()
            self._lock.release()

    def _extract(self, playlist_id: str, ctx: _RunContext) -> ExtractionRun:
        http = self._http(ctx.settings)
        if ctx.settings.has_api_key:
            try:
                return self._run(playlist_id, SourceMode.PRIMARY, ctx, http)
            except (SourceUnavailable, SourceEmpty) as e:
                logger.warning(f"primary source failed, restarting with page extraction: {e}")
                ctx.restarted = True
                ctx.warnings.append(f"YouTube API failed ({e}); data extracted from pages instead.")
                ctx.progress.emit(
                    ctx.progress.last,
                    "YouTube API failed; switching to page extraction...",
                    state=RunState.STARTING,
                )
        try:
            return self._run(playlist_id, SourceMode.FALLBACK, ctx, http)
        except SourceError as e:
            raise ExtractionFailed(f"page extraction failed: {e}") from e

    def _http(self, settings: AppConfig) -> HttpClient:
        return HttpClient(
            timeout=settings.request_timeout_sec,
            delay_sec=settings.request_delay_sec,
            proxy_url=settings.proxy_url or None,
            log_fn=self._log,
        )

    def _sources(self, mode: SourceMode, settings: AppConfig, http: HttpClient):
        if mode == SourceMode.PRIMARY:
            api = self._api_source or YouTubeApiSource(settings.youtube_api_key, settings, log_fn=self._log, http=http)
            return api, None
        page = self._page_source or YouTubePageSource(settings, log_fn=self._log, http=http)
        return None, page

    def _list(self, playlist_id: str, mode: SourceMode, ctx: _RunContext, api, page) -> list[PlaylistEntry]:
        if mode == SourceMode.PRIMARY:
            ctx.progress.emit(LISTING_START, "Connecting to the YouTube API...", state=RunState.LISTING)
            return list(api.list_playlist_items(playlist_id))

        ctx.progress.emit(LISTING_START, "Loading the playlist page...", state=RunState.LISTING)
        entries = list(page.list_video_ids(playlist_id))
        if not entries and ctx.settings.demo_listing_on_empty:
            logger.warning(f"no ids found on playlist page {playlist_id}; using demo ids")
            ctx.warnings.append("No videos found on the playlist page; demo videos listed instead.")
            entries = [PlaylistEntry(video_id=vid, position=i) for i, vid in enumerate(DEMO_VIDEO_IDS)]
        return entries

    def _run(self, playlist_id: str, mode: SourceMode, ctx: _RunContext, http: HttpClient) -> ExtractionRun:
        api, page = self._sources(mode, ctx.settings, http)
        entries = self._list(playlist_id, mode, ctx, api, page)
        if not entries:
            raise EmptyPlaylist(f"playlist {playlist_id} has no videos")

        total = len(entries)
        ctx.progress.emit(
            LISTING_DONE, f"Found {total} videos in the playlist.", state=RunState.LISTING, total=total
        )

        resolver = RecordResolver(
            api_source=api,
            page_source=page,
            capturer=self._capturer_factory(ctx.settings, mode, http),
            log_fn=self._log,
        )
        records = []
        images = []
        for index, entry in enumerate(entries):
            if ctx.cancel_event is not None and ctx.cancel_event.is_set():
                raise ExtractionCancelled(f"cancelled after {index} of {total} videos")
            record, image = resolver.resolve(entry.video_id, mode, listing_title=entry.title, seed=ctx.seed)
            records.append(record)
            images.append(image)

            processed = index + 1
            message = f"Processed video {processed} of {total}."
            if record.used_fallback_data:
                message = f"Processed video {processed} of {total} (demo data substituted)."
            ctx.progress.emit(
                LISTING_DONE + (ITEMS_SPAN * processed) // total,
                message,
                state=RunState.PROCESSING,
                processed=processed,
                total=total,
                current_title=record.title,
            )

        ctx.progress.emit(
            FINALIZING, "Finalizing...", state=RunState.FINALIZING, processed=total, total=total
        )
        if any(r.used_fallback_data for r in records):
            ctx.warnings.append("Some videos could not be extracted and show demo data.")
        run = ExtractionRun(
            playlist_id=playlist_id,
            mode=mode,
            records=tuple(records),
            images=tuple(images),
            total_duration_seconds=sum(r.duration_seconds for r in records),
            processed_count=total,
            restarted=ctx.restarted,
            warnings=tuple(ctx.warnings),
        )
        ctx.progress.emit(DONE, "Done!", state=RunState.DONE, processed=total, total=total)
        return run
