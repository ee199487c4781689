from __future__ import annotations

import re
from urllib.parse import parse_qs, urlparse

from playlist_probe.errors import InvalidPlaylistReference


_YOUTUBE_HOST_RE = re.compile(r"(^|\.)(youtube\.com|youtu\.be)$", re.IGNORECASE)
_PLAYLIST_ID_RE = re.compile(r"^[\w-]{10,64}$")
# Playlist id prefixes: user playlists, uploads, albums, favorites, mixes, likes.
_PLAYLIST_PREFIXES = ("PL", "UU", "OL", "FL", "RD", "LL")


def normalize_playlist_input(url_or_id: str | None) -> str:
    """Turn a playlist URL or bare playlist id into the playlist id.

    Raises InvalidPlaylistReference for anything that is not a YouTube playlist.
    """
    raw = "" if url_or_id is None else str(url_or_id)
    s = raw.strip()
    if not s:
        raise InvalidPlaylistReference("empty playlist reference")

    if _PLAYLIST_ID_RE.fullmatch(s) and s.startswith(_PLAYLIST_PREFIXES):
        return s

    candidate = s if re.match(r"^https?://", s, re.IGNORECASE) else f"https://{s.lstrip('/')}"
    parsed = urlparse(candidate)
    host = (parsed.hostname or "").lower()
    if not _YOUTUBE_HOST_RE.search(host):
        raise InvalidPlaylistReference(f"not a YouTube URL: {s}")

    values = parse_qs(parsed.query).get("list") or []
    playlist_id = values[0].strip() if values else ""
    if not playlist_id or not _PLAYLIST_ID_RE.fullmatch(playlist_id):
        raise InvalidPlaylistReference(f"no playlist id in URL: {s}")
    return playlist_id


def watch_url(video_id: str) -> str:
    return f"https://www.youtube.com/watch?v={video_id}"


def playlist_url(playlist_id: str) -> str:
    return f"https://www.youtube.com/playlist?list={playlist_id}"


def thumbnail_url(video_id: str, quality: str = "hqdefault") -> str:
    return f"https://img.youtube.com/vi/{video_id}/{quality}.jpg"
