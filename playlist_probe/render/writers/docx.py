from __future__ import annotations

from io import BytesIO

from PIL import Image

from playlist_probe.errors import EncoderUnavailable

from ..layout import DocumentSection
from ..style import RenderStyle

EMU_PER_PX = 9525
EMBEDDABLE_MIME = ("image/png", "image/jpeg")


def _fit_box(data: bytes, box_w: int, box_h: int) -> tuple[int, int]:
    """Scale the image into the display box keeping its aspect ratio."""
    with Image.open(BytesIO(data)) as img:
        w, h = img.size
    if w <= 0 or h <= 0:
        return box_w, box_h
    scale = min(box_w / w, box_h / h)
    return max(1, int(w * scale)), max(1, int(h * scale))


def _embeddable(data: bytes, mime_type: str) -> bytes:
    """Word only embeds a few raster formats; anything else is re-encoded to PNG."""
    if mime_type in EMBEDDABLE_MIME:
        return data
    with Image.open(BytesIO(data)) as img:
        if img.mode not in ("RGB", "RGBA", "L"):
            img = img.convert("RGBA")
        out = BytesIO()
        img.save(out, format="PNG")
    return out.getvalue()


def encode_docx(sections: list[DocumentSection], style: RenderStyle) -> bytes:
    """Word document: one section per record, page breaks between sections."""
    try:
        from docx import Document
        from docx.enum.text import WD_ALIGN_PARAGRAPH
        from docx.shared import Emu, Pt, RGBColor
    except ImportError as e:
        raise EncoderUnavailable("python-docx is not installed") from e

    doc_style = style.document
    document = Document()
    document.core_properties.title = doc_style.title
    document.core_properties.author = doc_style.creator

    normal = document.styles["Normal"]
    normal.font.name = doc_style.font_name
    normal.font.size = Pt(doc_style.body_size_pt)

    title = document.add_heading(doc_style.title, level=0)
    title.alignment = WD_ALIGN_PARAGRAPH.CENTER

    heading_rgb = RGBColor.from_string(doc_style.heading_color)
    label_rgb = RGBColor.from_string(doc_style.label_color)
    highlight_rgb = RGBColor.from_string(doc_style.highlight_color)
    text_width = document.sections[0].page_width - document.sections[0].left_margin - document.sections[0].right_margin

    for section in sections:
        heading = document.add_heading(level=1)
        run = heading.add_run(section.heading)
        run.font.color.rgb = heading_rgb

        table = document.add_table(rows=0, cols=2)
        for f in section.fields:
            cells = table.add_row().cells
            cells[0].width = Emu(int(text_width * doc_style.label_width_pct / 100))
            cells[1].width = Emu(int(text_width * doc_style.value_width_pct / 100))
            label_run = cells[0].paragraphs[0].add_run(f.label)
            label_run.bold = True
            label_run.font.color.rgb = label_rgb
            value_run = cells[1].paragraphs[0].add_run(f.value)
            if f.highlighted:
                value_run.font.color.rgb = highlight_rgb

        if section.record.used_fallback_data:
            notice = document.add_paragraph().add_run(doc_style.demo_notice)
            notice.italic = True
            notice.font.color.rgb = highlight_rgb

        image = section.image
        if image is not None:
            document.add_paragraph().add_run(doc_style.image_caption).bold = True
            if image.data:
                data = _embeddable(image.data, image.mime_type)
                w, h = _fit_box(data, doc_style.image_width_px, doc_style.image_height_px)
                document.add_picture(BytesIO(data), width=Emu(w * EMU_PER_PX), height=Emu(h * EMU_PER_PX))
                document.paragraphs[-1].alignment = WD_ALIGN_PARAGRAPH.CENTER
            else:
                document.add_paragraph(image.url)

        if section.page_break_after:
            document.add_page_break()

    out = BytesIO()
    document.save(out)
    return out.getvalue()
