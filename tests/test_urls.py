"""
Tests for playlist reference parsing and canonical URLs.
"""
import pytest

from playlist_probe.errors import InvalidPlaylistReference
from playlist_probe.extractor.urls import normalize_playlist_input, playlist_url, thumbnail_url, watch_url

PLAYLIST_ID = "PLrAXtmErZgOeiKm4sgNOknGvNjby9efdf"


class TestNormalizePlaylistInput:
    @pytest.mark.parametrize("value", [
        f"https://www.youtube.com/playlist?list={PLAYLIST_ID}",
        f"http://youtube.com/playlist?list={PLAYLIST_ID}",
        f"https://m.youtube.com/watch?v=dQw4w9WgXcQ&list={PLAYLIST_ID}&index=2",
        f"https://youtu.be/dQw4w9WgXcQ?list={PLAYLIST_ID}",
        f"www.youtube.com/playlist?list={PLAYLIST_ID}",
        f"  {PLAYLIST_ID}  ",
    ])
    def test_accepts(self, value):
        assert normalize_playlist_input(value) == PLAYLIST_ID

    @pytest.mark.parametrize("value", [
        None,
        "",
        "   ",
        "https://www.youtube.com/watch?v=dQw4w9WgXcQ",
        f"https://example.com/playlist?list={PLAYLIST_ID}",
        "not a playlist",
        "XX1234567890",
        "https://www.youtube.com/playlist?list=",
    ])
    def test_rejects(self, value):
        with pytest.raises(InvalidPlaylistReference):
            normalize_playlist_input(value)

    def test_error_is_value_error_with_user_message(self):
        with pytest.raises(ValueError) as exc:
            normalize_playlist_input("nope")
        assert exc.value.user_message == "Please enter a valid YouTube playlist link."


class TestCanonicalUrls:
    def test_watch_url(self):
        assert watch_url("dQw4w9WgXcQ") == "https://www.youtube.com/watch?v=dQw4w9WgXcQ"

    def test_playlist_url(self):
        assert playlist_url(PLAYLIST_ID) == f"https://www.youtube.com/playlist?list={PLAYLIST_ID}"

    def test_thumbnail_url(self):
        assert thumbnail_url("dQw4w9WgXcQ") == "https://img.youtube.com/vi/dQw4w9WgXcQ/hqdefault.jpg"
        assert thumbnail_url("dQw4w9WgXcQ", "maxresdefault").endswith("/maxresdefault.jpg")
