from __future__ import annotations

from fastapi import APIRouter, Depends, HTTPException
from fastapi.responses import Response

from api.async_utils import run_sync
from api.dependencies import get_extract_manager
from api.extract_manager import ExtractManager, JobNotFinished, JobNotFound
from playlist_probe.errors import EmptyInput
from playlist_probe.render.exporter import EXPORT_KINDS

router = APIRouter()


@router.get("/api/export/{job_id}/{kind}")
async def export_job(job_id: int, kind: str, manager: ExtractManager = Depends(get_extract_manager)):
    if kind not in EXPORT_KINDS:
        raise HTTPException(status_code=400, detail=f"kind must be one of: {', '.join(EXPORT_KINDS)}")
    try:
        artifact = await run_sync(manager.export, job_id, kind)
    except JobNotFound:
        raise HTTPException(status_code=404, detail="Job not found")
    except JobNotFinished as e:
        raise HTTPException(status_code=409, detail=str(e))
    except EmptyInput as e:
        raise HTTPException(status_code=409, detail=e.user_message)

    return Response(
        content=artifact.data,
        media_type=artifact.mime_type,
        headers={"Content-Disposition": f'attachment; filename="{artifact.filename}"'},
    )
