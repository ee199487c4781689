"""Evidence images for resolved records.

Two kinds of strategy live here and are kept apart on purpose:

- real capture: ``ScreenshotServiceCapture`` asks an external screenshot
  service to photograph the watch page (needs a token);
- synthesized evidence: ``ThumbnailCapture`` references the video thumbnail,
  ``OverlayCapture`` composes the thumbnail with a text panel carrying the
  record's title, URL, counts and publish date.

All of them implement ``ImageCapturer.capture(record)``, which returns a
CapturedImage or raises; the resolver treats any failure as "no image".
"""
from __future__ import annotations

from abc import ABC, abstractmethod
from io import BytesIO
from urllib.parse import quote

from PIL import Image, ImageDraw, ImageFont

from playlist_probe.errors import SourceError, SourceUnavailable
from playlist_probe.utils.logger import logger
from playlist_probe.utils.network import HttpClient

from .normalize import format_count, format_date
from .types import CapturedImage, SourceMode, VideoRecord
from .urls import thumbnail_url


THUMBNAIL_QUALITIES = ("maxresdefault", "hqdefault")

CANVAS_SIZE = (1280, 720)
# Share of the canvas height used by the thumbnail; the rest is the text panel.
THUMBNAIL_SHARE = 0.6
PANEL_BACKGROUND = "#f9f9f9"
TITLE_COLOR = "#000000"
HIGHLIGHT_COLOR = "#ff0000"


def _sniff_mime(data: bytes) -> str:
    """MIME type of encoded image bytes; raises SourceUnavailable if Pillow can't read them."""
    try:
        with Image.open(BytesIO(data)) as im:
            fmt = im.format or ""
            im.verify()
    except Exception as e:
        raise SourceUnavailable(f"not an image: {e}") from e
    return Image.MIME.get(fmt, "image/png")


def _load_font(size: int, bold: bool = False) -> ImageFont.ImageFont:
    name = "DejaVuSans-Bold.ttf" if bold else "DejaVuSans.ttf"
    try:
        return ImageFont.truetype(name, size)
    except OSError:
        return ImageFont.load_default(size=size)


def _wrap_text(draw: ImageDraw.ImageDraw, text: str, font, max_width: int) -> list[str]:
    lines: list[str] = []
    line = ""
    for word in (text or "").split():
        candidate = f"{line} {word}".strip()
        if line and draw.textlength(candidate, font=font) > max_width:
            lines.append(line)
            line = word
        else:
            line = candidate
    if line:
        lines.append(line)
    return lines


class ImageCapturer(ABC):
    strategy: str

    @abstractmethod
    def capture(self, record: VideoRecord) -> CapturedImage:
        raise NotImplementedError


class ScreenshotServiceCapture(ImageCapturer):
    """Real page capture through a screenshot API."""

    strategy = "service"

    def __init__(self, token: str, endpoint: str, http: HttpClient):
        self.token = str(token or "").strip()
        self.endpoint = endpoint
        self.http = http

    def capture(self, record: VideoRecord) -> CapturedImage:
        if not self.token:
            raise SourceUnavailable("screenshot token is not configured")
        url = self.endpoint.format(token=quote(self.token, safe=""), url=quote(record.url, safe=""))
        shown = self.endpoint.format(token="***", url=quote(record.url, safe=""))
        data = self.http.get_bytes(url, log_url=shown)
        return CapturedImage(for_id=record.id, data=data, mime_type=_sniff_mime(data), strategy=self.strategy)


def _fetch_thumbnail(http: HttpClient, video_id: str) -> tuple[bytes, str] | None:
    for quality in THUMBNAIL_QUALITIES:
        url = thumbnail_url(video_id, quality)
        try:
            data = http.get_bytes(url)
            _sniff_mime(data)
            return data, url
        except SourceError as e:
            logger.debug(f"thumbnail {quality} unavailable for {video_id}: {e}")
    return None


class ThumbnailCapture(ImageCapturer):
    """The video's own thumbnail, by reference and inline."""

    strategy = "thumbnail"

    def __init__(self, http: HttpClient):
        self.http = http

    def capture(self, record: VideoRecord) -> CapturedImage:
        fetched = _fetch_thumbnail(self.http, record.id)
        if fetched is None:
            raise SourceUnavailable(f"no thumbnail for {record.id}")
        data, url = fetched
        return CapturedImage(for_id=record.id, data=data, url=url, mime_type=_sniff_mime(data), strategy=self.strategy)


class OverlayCapture(ImageCapturer):
    """Thumbnail plus a panel restating the record, so the image documents itself."""

    strategy = "overlay"

    def __init__(self, http: HttpClient | None = None, *, date_format: str = "%d/%m/%Y", size=CANVAS_SIZE):
        self.http = http
        self.date_format = date_format
        self.size = size

    def capture(self, record: VideoRecord) -> CapturedImage:
        fetched = _fetch_thumbnail(self.http, record.id) if self.http is not None else None
        data = self.compose(record, fetched[0] if fetched else None)
        return CapturedImage(for_id=record.id, data=data, mime_type="image/png", strategy=self.strategy)

    def compose(self, record: VideoRecord, thumbnail: bytes | None) -> bytes:
        width, height = self.size
        split = int(height * THUMBNAIL_SHARE)
        canvas = Image.new("RGB", (width, height), "#ffffff")
        draw = ImageDraw.Draw(canvas)

        pasted = False
        if thumbnail:
            try:
                with Image.open(BytesIO(thumbnail)) as thumb:
                    canvas.paste(thumb.convert("RGB").resize((width, split)), (0, 0))
                pasted = True
            except Exception as e:
                logger.debug(f"thumbnail decode failed for {record.id}: {e}")
        if not pasted:
            draw.rectangle([0, 0, width, split], fill="#000000")
            draw.text((20, 30), "Thumbnail unavailable", fill="#ffffff", font=_load_font(24))

        draw.rectangle([0, split, width, height], fill=PANEL_BACKGROUND)

        title_font = _load_font(24, bold=True)
        y = split + 20
        for line in _wrap_text(draw, record.title, title_font, width - 40)[:2]:
            draw.text((20, y), line, fill=TITLE_COLOR, font=title_font)
            y += 30

        info_font = _load_font(18)
        y = max(y + 10, split + 90)
        for line in (
            f"URL: {record.url}",
            f"Views: {format_count(record.view_count)}",
            f"Likes: {format_count(record.like_count)}",
            f"Published: {format_date(record.published_at, self.date_format)}",
        ):
            draw.text((20, y), line, fill=HIGHLIGHT_COLOR, font=info_font)
            y += 30

        out = BytesIO()
        canvas.save(out, format="PNG")
        return out.getvalue()


class FirstSuccessCapture(ImageCapturer):
    """Try strategies in order; the first image wins."""

    def __init__(self, capturers: list[ImageCapturer]):
        self.capturers = capturers
        self.strategy = "+".join(c.strategy for c in capturers)

    def capture(self, record: VideoRecord) -> CapturedImage:
        last_error: Exception | None = None
        for c in self.capturers:
            try:
                return c.capture(record)
            except Exception as e:
                logger.info(f"capture {c.strategy} failed for {record.id}: {e}")
                last_error = e
        raise SourceUnavailable(f"no image for {record.id}") from last_error


def build_capturer(cfg, mode: SourceMode, http: HttpClient) -> ImageCapturer | None:
    """Capture strategy for one run, or None when capture is disabled."""
    if not getattr(cfg, "capture_images", True):
        return None
    date_format = getattr(cfg, "export_date_format", "%d/%m/%Y")
    own: ImageCapturer
    if mode == SourceMode.PRIMARY:
        own = ThumbnailCapture(http)
    else:
        own = OverlayCapture(http, date_format=date_format)
    token = str(getattr(cfg, "screenshot_token", "") or "").strip()
    if not token:
        return own
    service = ScreenshotServiceCapture(token, getattr(cfg, "screenshot_endpoint"), http)
    return FirstSuccessCapture([service, own])
