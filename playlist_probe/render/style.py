from __future__ import annotations

from dataclasses import dataclass, field


MIME_XLSX = "application/vnd.openxmlformats-officedocument.spreadsheetml.sheet"
MIME_CSV = "text/csv"
MIME_DOCX = "application/vnd.openxmlformats-officedocument.wordprocessingml.document"
MIME_HTML = "text/html"


@dataclass(frozen=True)
class TabularStyle:
    sheet_name: str = "Playlist"
    filename_stem: str = "playlist_data"
    columns: tuple[str, ...] = ("Title", "Duration", "Views", "Likes", "Link", "Published")
    # Column widths in characters, same order as columns.
    column_widths: tuple[int, ...] = (60, 10, 16, 14, 45, 14)
    header_fill: str = "2B579A"
    header_font_color: str = "FFFFFF"
    csv_delimiter: str = ","


@dataclass(frozen=True)
class DocumentStyle:
    filename_stem: str = "playlist_evidence"
    title: str = "Playlist Data Evidence - YouTube"
    creator: str = "Playlist Probe"
    heading_color: str = "2B579A"
    label_color: str = "202124"
    highlight_color: str = "C00000"
    font_name: str = "Arial"
    body_size_pt: int = 11
    # Label/value table column split, percent of text width.
    label_width_pct: int = 30
    value_width_pct: int = 70
    # Fixed display box for embedded images, in pixels at 96 dpi.
    image_width_px: int = 600
    image_height_px: int = 350
    image_caption: str = "Screenshot (visual evidence):"
    section_heading: str = "Video {n}: {title}"
    field_labels: tuple[tuple[str, str], ...] = (
        ("duration", "Duration:"),
        ("views", "Views:"),
        ("likes", "Likes:"),
        ("link", "Link:"),
        ("published", "Published:"),
    )
    # Values rendered in the highlight color.
    highlighted_fields: frozenset[str] = frozenset({"views", "likes", "link", "published"})
    demo_notice: str = "Demo data: these values were not extracted from YouTube."


@dataclass(frozen=True)
class RenderStyle:
    """Layout constants shared by every encoder and every degradation tier."""

    date_format: str = "%d/%m/%Y"
    tabular: TabularStyle = field(default_factory=TabularStyle)
    document: DocumentStyle = field(default_factory=DocumentStyle)


DEFAULT_STYLE = RenderStyle()
