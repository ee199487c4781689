"""Record list -> downloadable artifacts.

Each export tries its preferred encoder first and degrades to the next tier
when the encoder is missing or fails: xlsx -> csv for the tabular export,
docx -> html for the document export. The last tier of each chain only
depends on the standard library, so callers always get an artifact back for
non-empty input.
"""
from __future__ import annotations

from typing import Callable, Optional, Sequence

from playlist_probe.errors import EmptyInput, EncoderUnavailable
from playlist_probe.extractor.types import CapturedImage, ExtractionRun, VideoRecord
from playlist_probe.utils.config import AppConfig
from playlist_probe.utils.logger import logger

from .layout import Artifact, build_rows, build_sections
from .style import DEFAULT_STYLE, MIME_CSV, MIME_DOCX, MIME_HTML, MIME_XLSX, RenderStyle
from .writers.csv import encode_csv
from .writers.docx import encode_docx
from .writers.html import encode_html
from .writers.xlsx import encode_xlsx

Encoder = Callable[[list, RenderStyle], bytes]

EXPORT_KINDS = ("tabular", "document", "plain")


def style_from_config(cfg: AppConfig) -> RenderStyle:
    return RenderStyle(date_format=cfg.export_date_format)


def _require(records: Sequence[VideoRecord]) -> None:
    if not records:
        raise EmptyInput("no records to export")


def _try_encode(name: str, encoder: Optional[Encoder], payload: list, style: RenderStyle) -> Optional[bytes]:
    if encoder is None:
        logger.info(f"{name} encoder not available, degrading")
        return None
    try:
        return encoder(payload, style)
    except EncoderUnavailable as e:
        logger.info(f"{name} encoder not available ({e}), degrading")
    except Exception as e:
        logger.warning(f"{name} encoder failed, degrading: {type(e).__name__}: {e}")
    return None


def to_tabular(
    records: Sequence[VideoRecord],
    *,
    style: RenderStyle = DEFAULT_STYLE,
    encoder: Optional[Encoder] = encode_xlsx,
) -> Artifact:
    _require(records)
    rows = build_rows(records, style)
    stem = style.tabular.filename_stem
    data = _try_encode("xlsx", encoder, rows, style)
    if data is not None:
        return Artifact(data=data, filename=f"{stem}.xlsx", mime_type=MIME_XLSX)
    return Artifact(data=encode_csv(rows, style), filename=f"{stem}.csv", mime_type=MIME_CSV)


def to_plain_document(
    records: Sequence[VideoRecord],
    images: Optional[Sequence[Optional[CapturedImage]]] = None,
    *,
    style: RenderStyle = DEFAULT_STYLE,
) -> Artifact:
    _require(records)
    sections = build_sections(records, images, style)
    return Artifact(
        data=encode_html(sections, style),
        filename=f"{style.document.filename_stem}.html",
        mime_type=MIME_HTML,
    )


def to_rich_document(
    records: Sequence[VideoRecord],
    images: Optional[Sequence[Optional[CapturedImage]]] = None,
    *,
    style: RenderStyle = DEFAULT_STYLE,
    encoder: Optional[Encoder] = encode_docx,
) -> Artifact:
    _require(records)
    sections = build_sections(records, images, style)
    data = _try_encode("docx", encoder, sections, style)
    if data is not None:
        return Artifact(data=data, filename=f"{style.document.filename_stem}.docx", mime_type=MIME_DOCX)
    return to_plain_document(records, images, style=style)


def export_run(run: ExtractionRun, kind: str, *, style: RenderStyle = DEFAULT_STYLE) -> Artifact:
    """Export a finished run as one of EXPORT_KINDS."""
    if kind == "tabular":
        return to_tabular(run.records, style=style)
    if kind == "document":
        return to_rich_document(run.records, run.images, style=style)
    if kind == "plain":
        return to_plain_document(run.records, run.images, style=style)
    raise ValueError(f"unknown export kind: {kind}")


def export_format(run: ExtractionRun, fmt: str, *, style: RenderStyle = DEFAULT_STYLE) -> Artifact:
    """Export by file format name (xlsx, csv, docx, html). Used by the CLI."""
    if fmt == "xlsx":
        return to_tabular(run.records, style=style)
    if fmt == "csv":
        return to_tabular(run.records, style=style, encoder=None)
    if fmt == "docx":
        return to_rich_document(run.records, run.images, style=style)
    if fmt == "html":
        return to_plain_document(run.records, run.images, style=style)
    raise ValueError(f"unknown export format: {fmt}")
