"""
Version API
"""
from fastapi import APIRouter

from playlist_probe.extractor.sources.youtube_page import RULES_VERSION

router = APIRouter()

CURRENT_VERSION = "0.1.0"


@router.get("/api/version")
async def get_version():
    """Application version and the page extraction rule set in use."""
    return {
        "version": CURRENT_VERSION,
        "rules_version": RULES_VERSION,
    }
