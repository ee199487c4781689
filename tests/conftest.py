"""
Shared test fixtures for Playlist Probe tests.

Sources are replaced with in-memory fakes and the API manager is injected
through app.dependency_overrides, so no test touches the network or the
real config file.
"""
from datetime import datetime, timezone
from io import BytesIO

import pytest
from unittest.mock import MagicMock
from fastapi.testclient import TestClient
from PIL import Image

from api.main import create_app
from api.dependencies import get_extract_manager
from api.extract_manager import ExtractManager
from playlist_probe.errors import SourceUnavailable
from playlist_probe.extractor.pipeline import PlaylistPipeline
from playlist_probe.extractor.sources.base import PlaylistEntry
from playlist_probe.extractor.sources.youtube_page import PageFields
from playlist_probe.extractor.types import VideoRecord
from playlist_probe.utils import config as config_module
from playlist_probe.utils.config import AppConfig


FIXED_NOW = datetime(2024, 3, 1, 12, 0, tzinfo=timezone.utc)


def make_record(video_id="abcdefghijk", title="Test", duration=213, views=1200, likes=34, **kwargs):
    return VideoRecord(
        id=video_id,
        title=title,
        duration_seconds=duration,
        view_count=views,
        like_count=likes,
        published_at=kwargs.pop("published_at", datetime(2023, 1, 10, tzinfo=timezone.utc)),
        **kwargs,
    )


def png_bytes(size=(64, 36), color="#3366cc"):
    out = BytesIO()
    Image.new("RGB", size, color).save(out, format="PNG")
    return out.getvalue()


class FakeApiSource:
    """In-memory Data API: ids map to (title, ISO duration, views, likes)."""

    def __init__(self, videos, *, fail_on=None, fail_with=SourceUnavailable, empty_listing=False):
        self.videos = dict(videos)
        self.order = list(videos)
        self.fail_on = fail_on
        self.fail_with = fail_with
        self.empty_listing = empty_listing
        self.calls = []

    def list_playlist_items(self, playlist_id):
        self.calls.append(("list", playlist_id))
        if self.empty_listing:
            return []
        return [PlaylistEntry(video_id=vid, title=self.videos[vid][0], position=i) for i, vid in enumerate(self.order)]

    def get_video_details(self, video_id):
        self.calls.append(("details", video_id))
        if video_id == self.fail_on:
            raise self.fail_with(f"simulated failure for {video_id}")
        title, duration, _, _ = self.videos[video_id]
        return {
            "id": video_id,
            "snippet": {"title": title, "publishedAt": "2023-05-01T10:00:00Z"},
            "contentDetails": {"duration": duration},
        }

    def get_video_statistics(self, video_id):
        self.calls.append(("stats", video_id))
        _, _, views, likes = self.videos[video_id]
        return {"id": video_id, "statistics": {"viewCount": str(views), "likeCount": str(likes)}}


class FakePageSource:
    """In-memory page extraction: ids map to PageFields (None = page failed)."""

    def __init__(self, pages, *, listing=None):
        self.pages = dict(pages)
        self.listing = list(pages) if listing is None else list(listing)
        self.calls = []

    def list_video_ids(self, playlist_id):
        self.calls.append(("list", playlist_id))
        return [PlaylistEntry(video_id=vid, position=i) for i, vid in enumerate(self.listing)]

    def extract_video(self, video_id):
        self.calls.append(("extract", video_id))
        fields = self.pages.get(video_id)
        if fields is None:
            raise SourceUnavailable(f"page for {video_id} failed")
        return fields


FIVE_VIDEOS = {
    "vid00000001": ("First", "PT3M33S", 1000, 10),
    "vid00000002": ("Second", "PT1H2M3S", 2000, 20),
    "vid00000003": ("Third", "PT45S", 3000, 30),
    "vid00000004": ("Fourth", "PT5M", 4000, 40),
    "vid00000005": ("Fifth", "PT10S", 5000, 50),
}


def page_fields_for(videos):
    return {
        vid: PageFields(
            title=f"{title} (page)",
            view_count=views,
            like_count=likes,
            duration_seconds=60,
            published_at=datetime(2022, 2, 2, tzinfo=timezone.utc),
        )
        for vid, (title, _, views, likes) in videos.items()
    }


@pytest.fixture
def api_config():
    return AppConfig(youtube_api_key="test-key", capture_images=False)


@pytest.fixture
def page_config():
    return AppConfig(youtube_api_key="", capture_images=False)


@pytest.fixture
def make_pipeline():
    """Build a pipeline wired to fake sources with capture disabled."""

    def _make(cfg, *, api_source=None, page_source=None, capturer=None):
        return PlaylistPipeline(
            cfg,
            api_source=api_source,
            page_source=page_source,
            capturer_factory=lambda settings, mode, http: capturer,
            seed_factory=lambda: 42,
        )

    return _make


@pytest.fixture
def tmp_config_path(tmp_path, monkeypatch):
    """Point load_config()/save_config() at a throwaway file."""
    path = tmp_path / "config.json"
    monkeypatch.setattr(config_module, "CONFIG_PATH", path)
    monkeypatch.delenv(config_module.API_KEY_ENV, raising=False)
    monkeypatch.delenv(config_module.SCREENSHOT_TOKEN_ENV, raising=False)
    return path


@pytest.fixture
def extract_manager(tmp_config_path, make_pipeline):
    """ExtractManager over a fake primary source with five videos."""
    cfg = AppConfig(youtube_api_key="test-key", capture_images=False)
    pipeline = make_pipeline(cfg, api_source=FakeApiSource(FIVE_VIDEOS))
    return ExtractManager(pipeline, config_loader=lambda: AppConfig(youtube_api_key="test-key", capture_images=False))


@pytest.fixture
def mock_extract_manager():
    """Create a mock ExtractManager for route-level tests."""
    mock = MagicMock()
    mock.get_config.return_value = {"youtube_api_key": "tes***key", "capture_images": False}
    mock.start_job.return_value = {"status": "success", "job_id": 1}
    mock.cancel_job.return_value = {"status": "success", "job_id": 1}
    mock.list_jobs.return_value = []
    return mock


@pytest.fixture
def di_client(extract_manager):
    """Test client with a real ExtractManager over fake sources."""
    app = create_app()
    app.dependency_overrides[get_extract_manager] = lambda: extract_manager

    with TestClient(app) as c:
        yield c

    app.dependency_overrides.clear()


@pytest.fixture
def mock_client(mock_extract_manager):
    """Test client with the manager mocked out."""
    app = create_app()
    app.dependency_overrides[get_extract_manager] = lambda: mock_extract_manager

    with TestClient(app) as c:
        yield c

    app.dependency_overrides.clear()
