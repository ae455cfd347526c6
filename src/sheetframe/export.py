"""Frame exporters — CSV, JSON records and a styled XLSX sheet."""

from __future__ import annotations

import re
from pathlib import Path
from typing import Literal

from openpyxl import Workbook
from openpyxl.styles import Alignment, Font, PatternFill
from openpyxl.utils import get_column_letter
from openpyxl.worksheet.table import Table, TableStyleInfo
from openpyxl.worksheet.worksheet import Worksheet

from sheetframe.io import write_json
from sheetframe.models import BuildReport, Frame

ExportFormat = Literal["csv", "json", "xlsx"]
EXPORT_FORMATS: tuple[str, ...] = ("csv", "json", "xlsx")

# ── Style constants ──────────────────────────────────────────────

HEADER_FONT = Font(name="Calibri", bold=True, size=11, color="FFFFFF")
HEADER_FILL = PatternFill(start_color="2F5496", end_color="2F5496", fill_type="solid")
HEADER_ALIGN = Alignment(horizontal="center", vertical="center", wrap_text=True)
VALUE_FONT = Font(name="Calibri", size=11)

_AUTO_WIDTH_SAMPLE_ROWS = 300
_EXCEL_FORMULA_PREFIXES = ("=", "+", "-", "@")
_SHEET_TITLE_INVALID = re.compile(r"[\\/*?:\[\]]")


# ── XLSX helpers ─────────────────────────────────────────────────


def _style_header(ws: Worksheet, ncols: int) -> None:
    for c in range(1, ncols + 1):
        cell = ws.cell(row=1, column=c)
        cell.font = HEADER_FONT
        cell.fill = HEADER_FILL
        cell.alignment = HEADER_ALIGN


def _auto_width(ws: Worksheet) -> None:
    max_row = min(ws.max_row, _AUTO_WIDTH_SAMPLE_ROWS + 1)  # include header row
    for c_idx in range(1, ws.max_column + 1):
        letter = get_column_letter(c_idx)
        width = 0
        for row in ws.iter_rows(min_row=1, max_row=max_row, min_col=c_idx, max_col=c_idx):
            cell = row[0]
            width = max(width, len(str(cell.value or "")))
        width += 4
        ws.column_dimensions[letter].width = min(width, 40)


def _sanitize_table_name(name: str) -> str:
    cleaned = re.sub(r"[^A-Za-z0-9_]", "_", name)
    if not cleaned:
        cleaned = "Table"
    if not re.match(r"^[A-Za-z_]", cleaned):
        cleaned = f"_{cleaned}"
    return cleaned[:255]


def _table_headers_ok(headers: tuple[str, ...]) -> bool:
    # Excel compares table column names case-insensitively
    folded = [h.casefold() for h in headers]
    return len(set(folded)) == len(folded)


def _add_excel_table(ws: Worksheet, name: str, ncols: int, nrows: int) -> None:
    """Turn the data range into a proper Excel Table object."""
    if nrows < 1 or ncols < 1:
        return
    end_col = get_column_letter(ncols)
    ref = f"A1:{end_col}{nrows + 1}"  # +1 for header
    table = Table(displayName=_sanitize_table_name(name), ref=ref)
    table.tableStyleInfo = TableStyleInfo(
        name="TableStyleMedium9", showFirstColumn=False,
        showLastColumn=False, showRowStripes=True, showColumnStripes=False,
    )
    ws.add_table(table)


def _is_number(val: str) -> bool:
    try:
        float(val)
    except ValueError:
        return False
    return True


def _excel_value(val: str) -> str | None:
    if val == "":
        return None
    if val.startswith("'"):
        return val
    stripped = val.lstrip()
    # numeric text such as "-3" or "+0.5" is data, not a formula
    if stripped and stripped[0] in _EXCEL_FORMULA_PREFIXES and not _is_number(stripped):
        return f"'{val}"
    return val


def _frame_to_sheet(wb: Workbook, name: str, frame: Frame) -> None:
    ws = wb.create_sheet(title=_SHEET_TITLE_INVALID.sub("_", name)[:31] or "Frame")

    if not frame.headers:
        ws.cell(row=1, column=1, value="No data").font = VALUE_FONT
        ws.column_dimensions["A"].width = 18
        return

    for c_idx, header in enumerate(frame.headers, 1):
        ws.cell(row=1, column=c_idx, value=_excel_value(header))
    for r_idx, row_vals in enumerate(frame.rows(), 2):
        for c_idx, val in enumerate(row_vals, 1):
            ws.cell(row=r_idx, column=c_idx, value=_excel_value(val))
    _style_header(ws, frame.column_count)
    ws.freeze_panes = "A2"
    _auto_width(ws)
    if frame.row_count > 0:
        if _table_headers_ok(frame.headers):
            _add_excel_table(ws, name, frame.column_count, frame.row_count)
        else:
            ws.auto_filter.ref = ws.dimensions


# ── Public API ───────────────────────────────────────────────────


def write_frame(
    frame: Frame, out_dir: Path, fmt: ExportFormat = "csv", *, stem: str = "frame"
) -> Path:
    """Write *frame* to ``{out_dir}/{stem}.{fmt}`` and return the path."""
    if fmt not in EXPORT_FORMATS:
        raise ValueError(f"Unsupported export format: {fmt!r}. Use csv, json, or xlsx")

    out_dir = Path(out_dir)
    out_dir.mkdir(parents=True, exist_ok=True)
    out_path = out_dir / f"{stem}.{fmt}"
    tmp_path = out_dir / f"{stem}.tmp.{fmt}"

    if fmt == "csv":
        frame.to_dataframe().to_csv(tmp_path, index=False, encoding="utf-8")
    elif fmt == "json":
        payload = frame.to_dataframe().to_json(orient="records", force_ascii=False, indent=2)
        tmp_path.write_text(payload + "\n", encoding="utf-8")
    else:
        wb = Workbook()
        active_sheet = wb.active
        if active_sheet is not None:
            wb.remove(active_sheet)  # remove default sheet
        _frame_to_sheet(wb, stem, frame)
        wb.save(tmp_path)

    tmp_path.replace(out_path)
    return out_path


def write_build_report(out_dir: Path, report: BuildReport) -> Path:
    """Write ``build_report.json`` into *out_dir* and return the path."""
    return write_json(Path(out_dir) / "build_report.json", report.to_dict())
