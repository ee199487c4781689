"""
Centralized dependency injection for FastAPI routes.

The ExtractManager singleton is created lazily here and injected via
Depends(), so tests can swap it with
app.dependency_overrides[get_extract_manager] = lambda: fake_manager.
"""
from __future__ import annotations

from functools import lru_cache
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from api.extract_manager import ExtractManager


@lru_cache(maxsize=1)
def get_extract_manager() -> ExtractManager:
    from api.extract_manager import ExtractManager
    return ExtractManager()
