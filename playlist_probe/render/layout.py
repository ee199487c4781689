"""Intermediate representation handed to the encoders.

Rows for the tabular formats, sections for the document formats. Both are
built from the same records so every tier carries the same information.
"""
from __future__ import annotations

from dataclasses import dataclass
from typing import Sequence

from playlist_probe.extractor.normalize import format_count, format_date
from playlist_probe.extractor.types import CapturedImage, VideoRecord

from .style import RenderStyle


@dataclass(frozen=True)
class Artifact:
    data: bytes
    filename: str
    mime_type: str


@dataclass(frozen=True)
class MetadataField:
    key: str
    label: str
    value: str
    highlighted: bool = False


@dataclass(frozen=True)
class DocumentSection:
    number: int
    heading: str
    record: VideoRecord
    fields: tuple[MetadataField, ...]
    image: CapturedImage | None
    page_break_after: bool


def tabular_row(record: VideoRecord, style: RenderStyle) -> list:
    """Title, duration, views, likes, link, published: the fixed column order."""
    return [
        record.title,
        record.duration_display,
        record.view_count,
        record.like_count,
        record.url,
        format_date(record.published_at, style.date_format),
    ]


def build_rows(records: Sequence[VideoRecord], style: RenderStyle) -> list[list]:
    return [tabular_row(r, style) for r in records]


def _field_values(record: VideoRecord, style: RenderStyle) -> dict[str, str]:
    return {
        "duration": record.duration_display,
        "views": format_count(record.view_count),
        "likes": format_count(record.like_count),
        "link": record.url,
        "published": format_date(record.published_at, style.date_format),
    }


def build_sections(
    records: Sequence[VideoRecord],
    images: Sequence[CapturedImage | None] | None,
    style: RenderStyle,
) -> list[DocumentSection]:
    """One section per record; images are matched by position and must belong to the record."""
    doc = style.document
    slots = list(images or [])
    sections: list[DocumentSection] = []
    last = len(records) - 1
    for i, record in enumerate(records):
        image = slots[i] if i < len(slots) else None
        if image is not None and image.for_id != record.id:
            image = None
        values = _field_values(record, style)
        fields = tuple(
            MetadataField(key=key, label=label, value=values[key], highlighted=key in doc.highlighted_fields)
            for key, label in doc.field_labels
        )
        sections.append(
            DocumentSection(
                number=i + 1,
                heading=doc.section_heading.format(n=i + 1, title=record.title),
                record=record,
                fields=fields,
                image=image,
                page_break_after=i < last,
            )
        )
    return sections
