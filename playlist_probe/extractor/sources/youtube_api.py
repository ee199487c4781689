from __future__ import annotations

from typing import Any

from playlist_probe.errors import SourceEmpty, SourceUnavailable

from .base import BaseSource, PlaylistEntry


API_BASE_URL = "https://www.googleapis.com/youtube/v3"
PAGE_SIZE = 50

# Placeholder titles the API returns for entries that no longer resolve.
_UNAVAILABLE_TITLES = {"Deleted video", "Private video"}


class YouTubeApiSource(BaseSource):
    """Primary source: YouTube Data API v3 (requires an API key).

    Every lookup raises SourceUnavailable on transport/status failure and
    SourceEmpty when the response carries no items.
    """

    name = "youtube_api"

    def __init__(self, api_key: str, cfg=None, log_fn=None, http=None):
        super().__init__(cfg, log_fn=log_fn, http=http)
        self.api_key = str(api_key or "").strip()

    def _call(self, endpoint: str, params: dict[str, Any]) -> dict:
        if not self.api_key:
            raise SourceUnavailable("YouTube API key is not configured")
        shown = f"{API_BASE_URL}/{endpoint}?" + "&".join(f"{k}={v}" for k, v in params.items())
        return self.http.get_json(
            f"{API_BASE_URL}/{endpoint}",
            params={**params, "key": self.api_key},
            log_url=shown,
        )

    def list_playlist_items(self, playlist_id: str) -> list[PlaylistEntry]:
        """All entries of a playlist in playlist order, following pagination."""
        limit = self._item_limit()
        entries: list[PlaylistEntry] = []
        page_token: str | None = None
        while True:
            params: dict[str, Any] = {"part": "snippet", "maxResults": PAGE_SIZE, "playlistId": playlist_id}
            if page_token:
                params["pageToken"] = page_token
            payload = self._call("playlistItems", params)
            for item in payload.get("items") or []:
                snippet = item.get("snippet") or {}
                video_id = ((snippet.get("resourceId") or {}).get("videoId") or "").strip()
                title = snippet.get("title")
                if not video_id:
                    continue
                if title in _UNAVAILABLE_TITLES:
                    self._emit(f"skip unavailable entry: {video_id} ({title})")
                    continue
                entries.append(PlaylistEntry(video_id=video_id, title=title, position=len(entries)))
                if limit and len(entries) >= limit:
                    return entries
            page_token = payload.get("nextPageToken")
            if not page_token:
                return entries

    def _single_item(self, video_id: str, part: str) -> dict:
        payload = self._call("videos", {"part": part, "id": video_id})
        items = payload.get("items") or []
        if not items or not isinstance(items[0], dict):
            raise SourceEmpty(f"no {part} for video {video_id}")
        return items[0]

    def get_video_details(self, video_id: str) -> dict:
        """The ``videos`` item with ``snippet`` and ``contentDetails``."""
        item = self._single_item(video_id, "snippet,contentDetails")
        if not (item.get("contentDetails") or {}).get("duration"):
            raise SourceEmpty(f"no duration for video {video_id}")
        return item

    def get_video_statistics(self, video_id: str) -> dict:
        """The ``videos`` item with ``statistics``."""
        item = self._single_item(video_id, "statistics")
        if not isinstance(item.get("statistics"), dict):
            raise SourceEmpty(f"no statistics for video {video_id}")
        return item
