from __future__ import annotations

from fastapi import APIRouter, Depends, HTTPException, Query

from api.async_utils import run_sync
from api.constants import DEFAULT_JOBS_LIMIT
from api.dependencies import get_extract_manager
from api.extract_manager import ExtractManager, JobNotFound
from api.schemas import ExtractRequest
from playlist_probe.errors import InvalidPlaylistReference, PipelineBusy

router = APIRouter()


@router.post("/api/extract")
async def start_extract(request: ExtractRequest, manager: ExtractManager = Depends(get_extract_manager)):
    try:
        return await run_sync(manager.start_job, request.url)
    except InvalidPlaylistReference as e:
        raise HTTPException(status_code=400, detail=e.user_message)
    except PipelineBusy as e:
        raise HTTPException(status_code=409, detail=e.user_message)


@router.get("/api/extract/jobs")
async def list_extract_jobs(limit: int = Query(DEFAULT_JOBS_LIMIT, ge=1, le=100), manager: ExtractManager = Depends(get_extract_manager)):
    return manager.list_jobs(limit=limit)


@router.get("/api/extract/{job_id}")
async def get_extract_job(job_id: int, manager: ExtractManager = Depends(get_extract_manager)):
    try:
        return manager.get_job(job_id)
    except JobNotFound:
        raise HTTPException(status_code=404, detail="Job not found")


@router.post("/api/extract/{job_id}/cancel")
async def cancel_extract_job(job_id: int, manager: ExtractManager = Depends(get_extract_manager)):
    try:
        result = manager.cancel_job(job_id)
    except JobNotFound:
        raise HTTPException(status_code=404, detail="Job not found")
    if result.get("status") == "error":
        raise HTTPException(status_code=409, detail=result.get("message") or "failed")
    return result
