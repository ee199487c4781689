from __future__ import annotations

from fastapi import APIRouter, Depends

from api.async_utils import run_sync
from api.dependencies import get_extract_manager
from api.extract_manager import ExtractManager
from api.schemas import ConfigUpdateRequest

router = APIRouter()


@router.get("/api/config")
async def get_config(manager: ExtractManager = Depends(get_extract_manager)):
    return manager.get_config()


@router.post("/api/config")
async def set_config(request: ConfigUpdateRequest, manager: ExtractManager = Depends(get_extract_manager)):
    updates = request.model_dump(exclude_unset=True)
    return await run_sync(manager.set_config, **updates)
