"""
Tests for the Data API source, the page source rule set and the HTTP client.

Network calls are replaced by monkeypatching curl_cffi's requests.get.
"""
from datetime import datetime, timezone
from unittest.mock import MagicMock

import pytest

from playlist_probe.errors import SourceEmpty, SourceUnavailable
from playlist_probe.extractor.sources import youtube_page
from playlist_probe.extractor.sources.fetchers import BrowserPageFetcher, HttpPageFetcher, build_page_fetcher
from playlist_probe.extractor.sources.youtube_api import YouTubeApiSource
from playlist_probe.extractor.sources.youtube_page import (
    RULES_VERSION,
    FieldRule,
    YouTubePageSource,
    extract_fields,
    extract_video_ids,
)
from playlist_probe.utils import network
from playlist_probe.utils.config import AppConfig
from playlist_probe.utils.network import HttpClient


class FakeResponse:
    def __init__(self, status_code=200, payload=None, text="", content=b""):
        self.status_code = status_code
        self._payload = payload
        self.text = text
        self.content = content

    def json(self):
        if self._payload is None:
            raise ValueError("no json")
        return self._payload


class RecordingGet:
    """Stands in for curl_cffi.requests.get; returns queued responses in order."""

    def __init__(self, responses):
        self.responses = list(responses)
        self.calls = []

    def __call__(self, url, **kwargs):
        self.calls.append((url, kwargs))
        response = self.responses.pop(0)
        if isinstance(response, Exception):
            raise response
        return response


@pytest.fixture
def fake_get(monkeypatch):
    def _install(*responses):
        getter = RecordingGet(responses)
        monkeypatch.setattr(network.requests, "get", getter)
        return getter

    return _install


def _item(video_id, title):
    return {"snippet": {"title": title, "resourceId": {"kind": "youtube#video", "videoId": video_id}}}


class TestHttpClient:
    def test_non_200_raises_with_status(self, fake_get):
        fake_get(FakeResponse(status_code=403))
        with pytest.raises(SourceUnavailable) as exc:
            HttpClient().get("https://example.com/x")
        assert exc.value.status == 403

    def test_transport_error_raises(self, fake_get):
        fake_get(ConnectionError("reset"))
        with pytest.raises(SourceUnavailable):
            HttpClient().get_text("https://example.com/x")

    def test_json_must_be_object(self, fake_get):
        fake_get(FakeResponse(payload=[1, 2]))
        with pytest.raises(SourceUnavailable):
            HttpClient().get_json("https://example.com/x")

    def test_empty_body_raises(self, fake_get):
        fake_get(FakeResponse(content=b""))
        with pytest.raises(SourceUnavailable):
            HttpClient().get_bytes("https://example.com/x")

    def test_proxy_and_impersonation(self, fake_get):
        getter = fake_get(FakeResponse(text="ok"))
        HttpClient(proxy_url="http://127.0.0.1:7890").get_text("https://example.com/x")
        _, kwargs = getter.calls[0]
        assert kwargs["proxies"] == {"http": "http://127.0.0.1:7890", "https": "http://127.0.0.1:7890"}
        assert kwargs["impersonate"] == "chrome"

    def test_log_fn_receives_lines(self, fake_get):
        fake_get(FakeResponse(text="ok"))
        lines = []
        HttpClient(log_fn=lines.append).get_text("https://example.com/x")
        assert any("GET https://example.com/x" in line for line in lines)


class TestYouTubeApiSource:
    def test_listing_follows_pagination(self, fake_get):
        getter = fake_get(
            FakeResponse(payload={"items": [_item("aaaaaaaaaaa", "A"), _item("bbbbbbbbbbb", "B")], "nextPageToken": "p2"}),
            FakeResponse(payload={"items": [_item("ccccccccccc", "C")]}),
        )
        entries = YouTubeApiSource("KEY").list_playlist_items("PLx")

        assert [e.video_id for e in entries] == ["aaaaaaaaaaa", "bbbbbbbbbbb", "ccccccccccc"]
        assert [e.position for e in entries] == [0, 1, 2]
        assert getter.calls[1][1]["params"]["pageToken"] == "p2"
        assert getter.calls[0][1]["params"]["key"] == "KEY"

    def test_listing_skips_unavailable_entries(self, fake_get):
        fake_get(FakeResponse(payload={"items": [_item("aaaaaaaaaaa", "Private video"), _item("bbbbbbbbbbb", "B")]}))
        entries = YouTubeApiSource("KEY").list_playlist_items("PLx")
        assert [e.video_id for e in entries] == ["bbbbbbbbbbb"]

    def test_listing_respects_item_limit(self, fake_get):
        fake_get(FakeResponse(payload={"items": [_item("aaaaaaaaaaa", "A"), _item("bbbbbbbbbbb", "B")], "nextPageToken": "p2"}))
        source = YouTubeApiSource("KEY", AppConfig(max_playlist_items=1))
        assert [e.video_id for e in source.list_playlist_items("PLx")] == ["aaaaaaaaaaa"]

    def test_key_not_logged(self, fake_get):
        fake_get(FakeResponse(payload={"items": []}))
        lines = []
        YouTubeApiSource("SECRETKEY", log_fn=lines.append).list_playlist_items("PLx")
        assert lines
        assert not any("SECRETKEY" in line for line in lines)

    def test_details_and_statistics(self, fake_get):
        fake_get(
            FakeResponse(payload={"items": [{"snippet": {"title": "T"}, "contentDetails": {"duration": "PT3M33S"}}]}),
            FakeResponse(payload={"items": [{"statistics": {"viewCount": "10"}}]}),
        )
        source = YouTubeApiSource("KEY")
        assert source.get_video_details("abc")["contentDetails"]["duration"] == "PT3M33S"
        assert source.get_video_statistics("abc")["statistics"]["viewCount"] == "10"

    def test_empty_items_is_source_empty(self, fake_get):
        fake_get(FakeResponse(payload={"items": []}))
        with pytest.raises(SourceEmpty):
            YouTubeApiSource("KEY").get_video_details("abc")

    def test_missing_duration_is_source_empty(self, fake_get):
        fake_get(FakeResponse(payload={"items": [{"snippet": {"title": "T"}, "contentDetails": {}}]}))
        with pytest.raises(SourceEmpty):
            YouTubeApiSource("KEY").get_video_details("abc")

    def test_quota_error_is_source_unavailable(self, fake_get):
        fake_get(FakeResponse(status_code=403))
        with pytest.raises(SourceUnavailable):
            YouTubeApiSource("KEY").get_video_statistics("abc")

    def test_missing_key(self):
        with pytest.raises(SourceUnavailable):
            YouTubeApiSource("").list_playlist_items("PLx")


WATCH_PAGE_JSON = """
<html><head>
<meta name="title" content="Never Gonna Give You Up">
<meta itemprop="datePublished" content="2009-10-25">
</head><body>
<script>var ytInitialPlayerResponse = {"videoDetails":{"videoId":"dQw4w9WgXcQ","title":"Never Gonna Give You Up","lengthSeconds":"213","viewCount":"1234567890"}};</script>
<script>var ytInitialData = {"likeCount":"12345678"};</script>
</body></html>
"""

WATCH_PAGE_DOM = """
<html><body>
<h1 class="title">  Rendered   title </h1>
<span class="view-count">1,2 mi de visualizações</span>
<div class="ytp-time-duration">3:33</div>
<div id="info-strings"><yt-formatted-string>25 de out. de 2009</yt-formatted-string></div>
<button aria-label="like this video along with 4.5K other people"><yt-formatted-string>4.5K</yt-formatted-string></button>
</body></html>
"""

PLAYLIST_PAGE = """
<html><body>
<a id="video-title" class="yt-simple-endpoint ytd-playlist-video-renderer" href="/watch?v=aaaaaaaaaaa&list=PLx&index=1">A</a>
<a id="video-title" class="yt-simple-endpoint ytd-playlist-video-renderer" href="/watch?v=bbbbbbbbbbb&list=PLx&index=2">B</a>
<a id="video-title" class="yt-simple-endpoint ytd-playlist-video-renderer" href="/watch?v=aaaaaaaaaaa&list=PLx&index=3">A again</a>
</body></html>
"""

PLAYLIST_JSON = """
<script>var ytInitialData = {"contents":[
{"playlistVideoRenderer":{"videoId":"ccccccccccc","title":{}}},
{"playlistVideoRenderer":{"videoId":"ddddddddddd","title":{}}}
]};</script>
"""


class TestPageRules:
    def test_embedded_json_fields(self):
        fields = extract_fields(WATCH_PAGE_JSON)
        assert fields.title == "Never Gonna Give You Up"
        assert fields.view_count == 1234567890
        assert fields.like_count == 12345678
        assert fields.duration_seconds == 213
        assert fields.published_at == datetime(2009, 10, 25, tzinfo=timezone.utc)

    def test_rendered_dom_fields(self):
        fields = extract_fields(WATCH_PAGE_DOM)
        assert fields.title == "Rendered title"
        assert fields.duration_seconds == 213
        assert fields.like_count == 4500
        assert fields.published_at == datetime(2009, 10, 25, tzinfo=timezone.utc)

    def test_nothing_found(self):
        fields = extract_fields("<html><body>consent wall</body></html>")
        assert fields.found == []

    def test_custom_rule_set(self):
        rules = {"title": (FieldRule("css", "h2.name"),)}
        assert extract_fields("<h2 class='name'>Custom</h2>", rules).title == "Custom"

    def test_listing_from_anchors_deduplicated(self):
        assert extract_video_ids(PLAYLIST_PAGE) == ["aaaaaaaaaaa", "bbbbbbbbbbb"]

    def test_listing_from_embedded_json(self):
        assert extract_video_ids(PLAYLIST_JSON) == ["ccccccccccc", "ddddddddddd"]

    def test_rules_version(self):
        assert RULES_VERSION


class TestYouTubePageSource:
    def test_list_and_extract_through_fetcher(self):
        fetcher = MagicMock()
        fetcher.fetch.side_effect = lambda url: PLAYLIST_PAGE if "playlist" in url else WATCH_PAGE_JSON
        source = YouTubePageSource(AppConfig(), fetcher=fetcher)

        entries = source.list_video_ids("PLx")
        assert [e.video_id for e in entries] == ["aaaaaaaaaaa", "bbbbbbbbbbb"]

        fields = source.extract_video("dQw4w9WgXcQ")
        assert fields.duration_seconds == 213
        fetcher.fetch.assert_called_with("https://www.youtube.com/watch?v=dQw4w9WgXcQ")

    def test_listing_limit(self):
        fetcher = MagicMock()
        fetcher.fetch.return_value = PLAYLIST_PAGE
        source = YouTubePageSource(AppConfig(max_playlist_items=1), fetcher=fetcher)
        assert len(source.list_video_ids("PLx")) == 1

    def test_fetch_failure_propagates(self):
        fetcher = MagicMock()
        fetcher.fetch.side_effect = SourceUnavailable("HTTP 429", status=429)
        with pytest.raises(SourceUnavailable):
            YouTubePageSource(AppConfig(), fetcher=fetcher).extract_video("abc")

    def test_rules_module_constant_is_default(self):
        source = YouTubePageSource(AppConfig(), fetcher=MagicMock())
        assert source.rules is youtube_page.EXTRACTION_RULES


class TestFetchers:
    def test_http_mode_by_default(self):
        assert isinstance(build_page_fetcher(AppConfig(), HttpClient()), HttpPageFetcher)

    def test_browser_fetcher_uses_renderer(self):
        browser = MagicMock()
        browser.render.return_value = "<html>ok</html>"
        assert BrowserPageFetcher(browser=browser).fetch("https://x") == "<html>ok</html>"

    def test_browser_fetcher_empty_render_raises(self):
        browser = MagicMock()
        browser.render.return_value = None
        with pytest.raises(SourceUnavailable):
            BrowserPageFetcher(browser=browser).fetch("https://x")
