from __future__ import annotations

import base64
from xml.etree import ElementTree as ET

from playlist_probe.extractor.urls import thumbnail_url

from ..layout import DocumentSection
from ..style import RenderStyle


def _css(style: RenderStyle) -> str:
    d = style.document
    return (
        f"body {{ font-family: {d.font_name}, sans-serif; font-size: {d.body_size_pt}pt; color: #{d.label_color}; }}\n"
        f"h1 {{ text-align: center; color: #{d.heading_color}; }}\n"
        f"h2 {{ color: #{d.heading_color}; }}\n"
        "table.meta { border-collapse: collapse; width: 100%; }\n"
        f"table.meta td.label {{ width: {d.label_width_pct}%; font-weight: bold; }}\n"
        f"table.meta td.value {{ width: {d.value_width_pct}%; }}\n"
        f".highlight {{ color: #{d.highlight_color}; }}\n"
        f".notice {{ font-style: italic; color: #{d.highlight_color}; }}\n"
        f"img.evidence {{ max-width: {d.image_width_px}px; max-height: {d.image_height_px}px; }}\n"
        ".page-break { page-break-after: always; }\n"
    )


def _text_el(parent: ET.Element, tag: str, text: str | None, **attrs: str) -> ET.Element:
    el = ET.SubElement(parent, tag, attrs)
    if text:
        el.text = text
    return el


def _image_src(section: DocumentSection) -> str:
    image = section.image
    if image is not None and image.url:
        return image.url
    if image is not None and image.data:
        return f"data:{image.mime_type};base64," + base64.b64encode(image.data).decode("ascii")
    return thumbnail_url(section.record.id)


def encode_html(sections: list[DocumentSection], style: RenderStyle) -> bytes:
    """Self-contained HTML document; the floor of the document tier."""
    d = style.document
    root = ET.Element("html", {"lang": "en"})
    head = ET.SubElement(root, "head")
    ET.SubElement(head, "meta", {"charset": "utf-8"})
    _text_el(head, "title", d.title)
    _text_el(head, "style", _css(style))

    body = ET.SubElement(root, "body")
    _text_el(body, "h1", d.title)

    for section in sections:
        div = ET.SubElement(body, "div", {"class": "video", "id": f"video-{section.number}"})
        _text_el(div, "h2", section.heading)

        table = ET.SubElement(div, "table", {"class": "meta"})
        for f in section.fields:
            tr = ET.SubElement(table, "tr")
            _text_el(tr, "td", f.label, **{"class": "label"})
            td = _text_el(tr, "td", None, **{"class": "value highlight" if f.highlighted else "value"})
            if f.key == "link":
                _text_el(td, "a", f.value, href=f.value)
            else:
                td.text = f.value

        if section.record.used_fallback_data:
            _text_el(div, "p", d.demo_notice, **{"class": "notice"})

        figure = ET.SubElement(div, "p")
        if section.image is not None:
            _text_el(figure, "strong", d.image_caption)
            ET.SubElement(figure, "br")
        ET.SubElement(
            figure,
            "img",
            {"class": "evidence", "src": _image_src(section), "alt": section.record.title},
        )

        if section.page_break_after:
            ET.SubElement(body, "div", {"class": "page-break"})

    ET.indent(root)
    markup = ET.tostring(root, encoding="unicode", method="html")
    return ("<!DOCTYPE html>\n" + markup + "\n").encode("utf-8")
