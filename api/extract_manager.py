from __future__ import annotations

import threading
import time
from dataclasses import dataclass, field
from typing import Any, Callable

from playlist_probe.errors import (
    EmptyInput,
    ExtractionCancelled,
    ExtractionFailed,
    PipelineBusy,
    PlaylistProbeError,
)
from playlist_probe.extractor.pipeline import PlaylistPipeline
from playlist_probe.extractor.types import ExtractionRun, ProgressEvent
from playlist_probe.extractor.urls import normalize_playlist_input
from playlist_probe.render.exporter import EXPORT_KINDS, export_run, style_from_config
from playlist_probe.render.layout import Artifact
from playlist_probe.utils.config import AppConfig, load_config, save_config
from playlist_probe.utils.logger import logger

from api.constants import (
    FINISHED_STATUSES,
    MAX_JOBS_KEPT,
    STATUS_CANCELLED,
    STATUS_COMPLETED,
    STATUS_FAILED,
    STATUS_PENDING,
    STATUS_RUNNING,
)


class JobNotFound(LookupError):
    pass


class JobNotFinished(RuntimeError):
    pass


@dataclass
class ExtractJob:
    id: int
    url: str
    playlist_id: str
    status: str
    created_at: float
    completed_at: float | None = None
    progress: ProgressEvent | None = None
    error: str | None = None
    run: ExtractionRun | None = None
    cancel_event: threading.Event = field(default_factory=threading.Event, repr=False)

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "url": self.url,
            "playlist_id": self.playlist_id,
            "status": self.status,
            "created_at": self.created_at,
            "completed_at": self.completed_at,
            "progress": self.progress.to_dict() if self.progress else None,
            "summary": self.run.summary() if self.run else None,
            "error": self.error,
            "used_fallback_data": bool(self.run and self.run.used_fallback_data),
        }


class ExtractManager:
    """Runs playlist extractions on a worker thread, one at a time, and keeps results in memory."""

    def __init__(
        self,
        pipeline: PlaylistPipeline | None = None,
        *,
        config_loader: Callable[[], AppConfig] = load_config,
    ):
        self._config_loader = config_loader
        self._pipeline = pipeline or PlaylistPipeline(config_loader())
        self._jobs: dict[int, ExtractJob] = {}
        self._threads: dict[int, threading.Thread] = {}
        self._lock = threading.Lock()
        self._next_id = 1

    # --- config ---

    def get_config(self) -> dict[str, Any]:
        return self._config_loader().to_public_dict()

    def set_config(self, **updates: Any) -> dict[str, Any]:
        cfg = self._config_loader()
        for k, v in updates.items():
            if v is not None and hasattr(cfg, k):
                setattr(cfg, k, v)
        cfg.__post_init__()
        save_config(cfg)
        logger.info(f"Config updated: {sorted(k for k, v in updates.items() if v is not None)}")
        return {"status": "success", "config": cfg.to_public_dict()}

    # --- jobs ---

    def start_job(self, url: str) -> dict[str, Any]:
        """Queue an extraction. Raises InvalidPlaylistReference or PipelineBusy."""
        playlist_id = normalize_playlist_input(url)
        with self._lock:
            if self._pipeline.busy or any(j.status not in FINISHED_STATUSES for j in self._jobs.values()):
                raise PipelineBusy("an extraction is already in progress")
            job = ExtractJob(
                id=self._next_id,
                url=url,
                playlist_id=playlist_id,
                status=STATUS_PENDING,
                created_at=time.time(),
            )
            self._next_id += 1
            self._jobs[job.id] = job
            self._prune_locked()
            # Picks up config changes made since the last run.
            self._pipeline.cfg = self._config_loader()
            thread = threading.Thread(target=self._worker, args=(job,), name=f"extract-{job.id}")
            thread.daemon = True
            self._threads[job.id] = thread

        thread.start()
        logger.info(f"Extract job queued: id={job.id} playlist={playlist_id}")
        return {"status": "success", "job_id": job.id}

    def _worker(self, job: ExtractJob) -> None:
        def on_progress(event: ProgressEvent) -> None:
            job.progress = event

        job.status = STATUS_RUNNING
        try:
            run = self._pipeline.extract(job.playlist_id, on_progress, cancel_event=job.cancel_event)
        except ExtractionCancelled:
            job.status = STATUS_CANCELLED
            job.error = ExtractionCancelled.user_message
            logger.info(f"Extract job cancelled: id={job.id}")
        except PlaylistProbeError as e:
            job.status = STATUS_FAILED
            job.error = e.user_message
            logger.info(f"Extract job failed: id={job.id} error={e}")
        except Exception as e:
            job.status = STATUS_FAILED
            job.error = ExtractionFailed.user_message
            logger.exception(f"Extract job crashed: id={job.id}: {e}")
        else:
            job.run = run
            job.status = STATUS_COMPLETED
            logger.info(f"Extract job completed: id={job.id} videos={len(run.records)}")
        finally:
            job.completed_at = time.time()

    def _prune_locked(self) -> None:
        finished = [j.id for j in self._jobs.values() if j.status in FINISHED_STATUSES]
        excess = len(self._jobs) - MAX_JOBS_KEPT
        for job_id in finished[: max(0, excess)]:
            self._jobs.pop(job_id, None)
            self._threads.pop(job_id, None)

    def _get(self, job_id: int) -> ExtractJob:
        job = self._jobs.get(job_id)
        if job is None:
            raise JobNotFound(f"job {job_id} not found")
        return job

    def get_job(self, job_id: int) -> dict[str, Any]:
        return self._get(job_id).to_dict()

    def list_jobs(self, limit: int = 20) -> list[dict[str, Any]]:
        with self._lock:
            jobs = sorted(self._jobs.values(), key=lambda j: j.id, reverse=True)
        return [j.to_dict() for j in jobs[:limit]]

    def cancel_job(self, job_id: int) -> dict[str, Any]:
        job = self._get(job_id)
        if job.status in FINISHED_STATUSES:
            return {"status": "error", "message": f"Job already {job.status.lower()}", "job_id": job_id}
        job.cancel_event.set()
        logger.info(f"Cancel requested: id={job_id}")
        return {"status": "success", "job_id": job_id}

    def wait(self, job_id: int, timeout: float | None = None) -> dict[str, Any]:
        """Block until the job's worker thread exits (used by tests and the CLI-like callers)."""
        thread = self._threads.get(job_id)
        if thread is not None:
            thread.join(timeout)
        return self.get_job(job_id)

    # --- export ---

    def export(self, job_id: int, kind: str) -> Artifact:
        if kind not in EXPORT_KINDS:
            raise ValueError(f"unknown export kind: {kind}")
        job = self._get(job_id)
        if job.status != STATUS_COMPLETED or job.run is None:
            raise JobNotFinished(f"job {job_id} is {job.status.lower()}")
        if not job.run.records:
            raise EmptyInput("run has no records")
        style = style_from_config(self._config_loader())
        return export_run(job.run, kind, style=style)
