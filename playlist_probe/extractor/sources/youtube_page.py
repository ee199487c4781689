from __future__ import annotations

import json
import re
from dataclasses import dataclass
from datetime import datetime
from typing import Callable

from bs4 import BeautifulSoup

from playlist_probe.extractor.normalize import (
    parse_abbreviated_count,
    parse_display_duration,
    parse_localized_date,
    parse_machine_duration,
)
from playlist_probe.extractor.urls import playlist_url, watch_url

from .base import BaseSource, PlaylistEntry
from .fetchers import PageFetcher, build_page_fetcher


# Bump whenever a rule below changes; logged with every extraction so
# partial results can be traced back to the rule set that produced them.
RULES_VERSION = "2024.06"


@dataclass(frozen=True)
class FieldRule:
    """One place a field may be found on a page.

    kind:  css   -> first element matching ``pattern`` (text, or ``attr`` value)
           regex -> first group of ``pattern`` searched in the raw HTML
    parse: text | json_text | count | display_duration | machine_duration | seconds | date | video_href
    """

    kind: str
    pattern: str
    parse: str = "text"
    attr: str | None = None


EXTRACTION_RULES: dict[str, tuple[FieldRule, ...]] = {
    "title": (
        FieldRule("css", "h1.title"),
        FieldRule("css", "h1.ytd-watch-metadata yt-formatted-string"),
        FieldRule("css", "meta[name='title']", attr="content"),
        FieldRule("css", "meta[property='og:title']", attr="content"),
        FieldRule("regex", r'"videoDetails":\{"videoId":"[\w-]+","title":"((?:[^"\\]|\\.)*)"', parse="json_text"),
    ),
    "views": (
        FieldRule("css", "span.view-count", parse="count"),
        FieldRule("css", "meta[itemprop='interactionCount']", parse="count", attr="content"),
        FieldRule("regex", r'"viewCount":"(\d+)"', parse="count"),
    ),
    "likes": (
        FieldRule("css", "button[aria-label*='like this video along with'] yt-formatted-string", parse="count"),
        FieldRule("regex", r"like this video along with ([\d.,]+\s*[KMB]?) other people", parse="count"),
        FieldRule("regex", r'"likeCount":"?(\d+)"?', parse="count"),
    ),
    "duration": (
        FieldRule("css", ".ytp-time-duration", parse="display_duration"),
        FieldRule("css", "meta[itemprop='duration']", parse="machine_duration", attr="content"),
        FieldRule("regex", r'"lengthSeconds":"(\d+)"', parse="seconds"),
    ),
    "published": (
        FieldRule("css", "#info-strings yt-formatted-string", parse="date"),
        FieldRule("css", "meta[itemprop='datePublished']", parse="date", attr="content"),
        FieldRule("css", "meta[itemprop='uploadDate']", parse="date", attr="content"),
        FieldRule("regex", r'"publishDate":"([^"]+)"', parse="date"),
    ),
}

LISTING_RULES: tuple[FieldRule, ...] = (
    FieldRule("css", "a.yt-simple-endpoint.ytd-playlist-video-renderer", parse="video_href", attr="href"),
    FieldRule("css", "a#video-title[href*='watch?v=']", parse="video_href", attr="href"),
    FieldRule("regex", r'"playlistVideoRenderer":\{"videoId":"([\w-]{11})"'),
    FieldRule("regex", r'"videoId":"([\w-]{11})"'),
)

_VIDEO_HREF_RE = re.compile(r"[?&]v=([\w-]{11})")


@dataclass(frozen=True)
class PageFields:
    """Whatever the page yielded; None means the field was not found."""

    title: str | None = None
    view_count: int | None = None
    like_count: int | None = None
    duration_seconds: int | None = None
    published_at: datetime | None = None

    @property
    def found(self) -> list[str]:
        return [k for k, v in self.__dict__.items() if v is not None]


def _convert(raw: str, parse: str):
    s = (raw or "").strip()
    if not s:
        return None
    if parse == "text":
        return re.sub(r"\s+", " ", s)
    if parse == "json_text":
        try:
            return json.loads(f'"{s}"').strip() or None
        except ValueError:
            return s
    if parse == "count":
        if not re.search(r"\d", s):
            return None
        return parse_abbreviated_count(s)
    if parse == "display_duration":
        return parse_display_duration(s) or None
    if parse == "machine_duration":
        return parse_machine_duration(s) or None
    if parse == "seconds":
        return int(s) if s.isdigit() else None
    if parse == "date":
        sentinel = datetime.min
        value = parse_localized_date(s, now=sentinel)
        return None if value.replace(tzinfo=None) == sentinel else value
    if parse == "video_href":
        m = _VIDEO_HREF_RE.search(s)
        return m.group(1) if m else None
    raise ValueError(f"unknown parse kind: {parse}")


def _apply_rule(rule: FieldRule, soup: BeautifulSoup, html: str):
    if rule.kind == "css":
        el = soup.select_one(rule.pattern)
        if el is None:
            return None
        raw = el.get(rule.attr) if rule.attr else el.get_text(" ", strip=True)
        return _convert(str(raw or ""), rule.parse)
    if rule.kind == "regex":
        m = re.search(rule.pattern, html)
        return _convert(m.group(1), rule.parse) if m else None
    raise ValueError(f"unknown rule kind: {rule.kind}")


def _apply_all(rule: FieldRule, soup: BeautifulSoup, html: str) -> list[str]:
    if rule.kind == "css":
        values = [_convert(str(el.get(rule.attr) or "") if rule.attr else el.get_text(" ", strip=True), rule.parse)
                  for el in soup.select(rule.pattern)]
    else:
        values = [_convert(m.group(1), rule.parse) for m in re.finditer(rule.pattern, html)]
    return [v for v in values if v]


def extract_fields(html: str, rules: dict[str, tuple[FieldRule, ...]] = EXTRACTION_RULES) -> PageFields:
    """Apply the rule set to a watch page; the first rule per field that yields a value wins."""
    soup = BeautifulSoup(html or "", "html.parser")
    found: dict[str, object] = {}
    for field_name, field_rules in rules.items():
        for rule in field_rules:
            value = _apply_rule(rule, soup, html or "")
            if value is not None:
                found[field_name] = value
                break
    return PageFields(
        title=found.get("title"),
        view_count=found.get("views"),
        like_count=found.get("likes"),
        duration_seconds=found.get("duration"),
        published_at=found.get("published"),
    )


def extract_video_ids(html: str, rules: tuple[FieldRule, ...] = LISTING_RULES) -> list[str]:
    """Video ids of a playlist page in page order, from the first rule that finds any."""
    soup = BeautifulSoup(html or "", "html.parser")
    for rule in rules:
        ids: list[str] = []
        for vid in _apply_all(rule, soup, html or ""):
            if vid not in ids:
                ids.append(vid)
        if ids:
            return ids
    return []


class YouTubePageSource(BaseSource):
    """Fallback source: structural extraction from playlist and watch pages.

    Best effort by nature: the page layout is not a stable contract, so every
    field may come back as None.
    """

    name = "youtube_page"

    def __init__(
        self,
        cfg=None,
        log_fn: Callable[[str], None] | None = None,
        http=None,
        fetcher: PageFetcher | None = None,
        rules: dict[str, tuple[FieldRule, ...]] | None = None,
        listing_rules: tuple[FieldRule, ...] | None = None,
    ):
        super().__init__(cfg, log_fn=log_fn, http=http)
        self.fetcher = fetcher or build_page_fetcher(cfg, self.http)
        self.rules = rules or EXTRACTION_RULES
        self.listing_rules = listing_rules or LISTING_RULES

    def list_video_ids(self, playlist_id: str) -> list[PlaylistEntry]:
        html = self.fetcher.fetch(playlist_url(playlist_id))
        ids = extract_video_ids(html, self.listing_rules)
        limit = self._item_limit()
        if limit:
            ids = ids[:limit]
        self._emit(f"listing rules {RULES_VERSION}: {len(ids)} ids")
        return [PlaylistEntry(video_id=vid, position=i) for i, vid in enumerate(ids)]

    def extract_video(self, video_id: str) -> PageFields:
        html = self.fetcher.fetch(watch_url(video_id))
        fields = extract_fields(html, self.rules)
        self._emit(f"rules {RULES_VERSION}: {video_id} found={','.join(fields.found) or '-'}")
        return fields
