from __future__ import annotations

from io import BytesIO

from playlist_probe.errors import EncoderUnavailable

from ..style import RenderStyle


def encode_xlsx(rows: list[list], style: RenderStyle) -> bytes:
    """Spreadsheet with one header row and one row per record."""
    try:
        from openpyxl import Workbook
        from openpyxl.styles import Font, PatternFill
        from openpyxl.utils import get_column_letter
    except ImportError as e:
        raise EncoderUnavailable("openpyxl is not installed") from e

    tab = style.tabular
    wb = Workbook()
    ws = wb.active
    ws.title = tab.sheet_name

    ws.append(list(tab.columns))
    header_font = Font(bold=True, color=tab.header_font_color)
    header_fill = PatternFill(start_color=tab.header_fill, end_color=tab.header_fill, fill_type="solid")
    for cell in ws[1]:
        cell.font = header_font
        cell.fill = header_fill

    for row in rows:
        ws.append(row)
        # openpyxl reads a leading "=" as a formula; titles stay literal text
        for cell in ws[ws.max_row]:
            if isinstance(cell.value, str):
                cell.data_type = "s"

    for idx, width in enumerate(tab.column_widths, 1):
        ws.column_dimensions[get_column_letter(idx)].width = width
    # Views and likes
    for col in ("C", "D"):
        for cell in ws[col][1:]:
            cell.number_format = "#,##0"
    ws.freeze_panes = "A2"

    out = BytesIO()
    wb.save(out)
    return out.getvalue()
