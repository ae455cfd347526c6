"""I/O helpers — load worksheets, write JSON artifacts."""

from __future__ import annotations

import csv
import json
import logging
from collections.abc import Iterable, Sequence
from datetime import date, datetime
from pathlib import Path
from typing import Any

import pandas as pd
from openpyxl import load_workbook

from sheetframe.cells import CellError
from sheetframe.errors import SheetNotFoundError

logger = logging.getLogger(__name__)

XLSX_SUFFIXES = (".xlsx", ".xlsm", ".xltx", ".xltm")

_CSV_DELIMITERS = ",;\t|"
_SNIFF_BYTES = 64 * 1024


# ── Worksheet access ─────────────────────────────────────────────


class RowListSheet:
    """In-memory worksheet: a list of rows, each a tuple of raw cells."""

    def __init__(self, rows: Iterable[Sequence[object]], name: str = "") -> None:
        self.name = name
        self._rows: list[tuple[object, ...]] = [tuple(row) for row in rows]

    def __repr__(self) -> str:
        return f"RowListSheet(name={self.name!r}, rows={len(self._rows)})"

    def row_count(self) -> int:
        return len(self._rows)

    def row_at(self, index: int) -> tuple[object, ...]:
        if not 0 <= index < len(self._rows):
            raise IndexError(f"row index {index} out of range (0..{len(self._rows) - 1})")
        return self._rows[index]


def _pick_sheet_name(available: Sequence[str], sheet: str | None) -> str:
    if not available:
        raise ValueError("Workbook contains no worksheets")
    if sheet is None:
        return available[0]
    if sheet not in available:
        raise SheetNotFoundError(sheet, available)
    return sheet


def _load_xlsx(path: Path, sheet: str | None) -> RowListSheet:
    wb = load_workbook(path, read_only=True, data_only=True)
    try:
        name = _pick_sheet_name(wb.sheetnames, sheet)
        ws = wb[name]
        rows = [
            tuple(
                CellError(str(cell.value)) if cell.data_type == "e" else cell.value
                for cell in row
            )
            for row in ws.iter_rows()
        ]
    finally:
        wb.close()
    return RowListSheet(rows, name=name)


def _load_xls(path: Path, sheet: str | None) -> RowListSheet:
    try:
        import xlrd
    except ImportError as exc:
        raise ValueError(
            "Unsupported .xls input unless 'xlrd' is installed. "
            "Either convert to .xlsx or add dependency: pip install xlrd"
        ) from exc

    book = xlrd.open_workbook(str(path))
    name = _pick_sheet_name(book.sheet_names(), sheet)
    ws = book.sheet_by_name(name)

    def _value(cell: Any) -> object:
        if cell.ctype in (xlrd.XL_CELL_EMPTY, xlrd.XL_CELL_BLANK):
            return None
        if cell.ctype == xlrd.XL_CELL_BOOLEAN:
            return bool(cell.value)
        if cell.ctype == xlrd.XL_CELL_ERROR:
            return CellError(xlrd.error_text_from_code.get(cell.value, f"#ERR{cell.value}"))
        if cell.ctype == xlrd.XL_CELL_DATE:
            return xlrd.xldate.xldate_as_datetime(cell.value, book.datemode)
        return cell.value

    rows = [tuple(_value(cell) for cell in ws.row(r)) for r in range(ws.nrows)]
    return RowListSheet(rows, name=name)


def _sniff_delimiter(path: Path, encoding: str) -> str:
    with open(path, encoding=encoding, newline="") as fh:
        sample = fh.read(_SNIFF_BYTES)
    try:
        return csv.Sniffer().sniff(sample, delimiters=_CSV_DELIMITERS).delimiter
    except csv.Error:
        # single column, or nothing consistent to go on
        return ","


def _max_fields(path: Path, encoding: str, sep: str) -> int:
    with open(path, encoding=encoding, newline="") as fh:
        return max((len(fields) for fields in csv.reader(fh, delimiter=sep)), default=0)


def _read_raw_csv(path: Path, encoding: str, delimiter: str | None) -> pd.DataFrame:
    sep = delimiter or _sniff_delimiter(path, encoding)
    # ragged lines: size the frame to the widest one, pandas pads the rest
    width = _max_fields(path, encoding, sep)
    if width == 0:
        return pd.DataFrame()
    return pd.read_csv(
        path,
        header=None,
        names=list(range(width)),
        dtype=str,
        sep=sep,
        engine="c",
        encoding=encoding,
        encoding_errors="strict",
        keep_default_na=False,
        skip_blank_lines=False,
    )


def _load_csv(path: Path, delimiter: str | None) -> RowListSheet:
    if path.stat().st_size == 0:
        return RowListSheet([], name=path.stem)
    last_exc: Exception | None = None
    for encoding in ("utf-8-sig", "utf-8", "latin-1"):
        try:
            df = _read_raw_csv(path, encoding, delimiter)
        except pd.errors.EmptyDataError:
            return RowListSheet([], name=path.stem)
        except csv.Error as exc:
            raise ValueError(f"Could not read CSV {path}: {exc}") from exc
        except (UnicodeDecodeError, pd.errors.ParserError) as exc:
            last_exc = exc
            continue
        rows = [
            tuple("" if pd.isna(value) else value for value in row)
            for row in df.itertuples(index=False, name=None)
        ]
        return RowListSheet(rows, name=path.stem)
    raise ValueError(f"Could not read CSV {path} (decode or parse failed)") from last_exc


def load_worksheet(
    path: Path, sheet: str | None = None, *, delimiter: str | None = None
) -> RowListSheet:
    """Load one worksheet of *path* as raw rows.

    *sheet* selects a worksheet by name; ``None`` picks the first one.

    Raises
    ------
    FileNotFoundError
        If *path* does not exist.
    SheetNotFoundError
        If *sheet* is not in the workbook.
    ValueError
        If the extension is not supported, or decoding/parsing fails.
    """
    path = Path(path)
    if not path.exists():
        raise FileNotFoundError(f"Input file not found: {path}")

    suffix = path.suffix.lower()
    if suffix == ".csv":
        if sheet is not None:
            logger.debug("Ignoring sheet %r for CSV input %s", sheet, path)
        loaded = _load_csv(path, delimiter)
    elif suffix in XLSX_SUFFIXES:
        loaded = _load_xlsx(path, sheet)
    elif suffix == ".xls":
        loaded = _load_xls(path, sheet)
    else:
        raise ValueError(f"Unsupported file type: {suffix!r}. Use .csv, .xlsx, or .xls")

    logger.debug("Loaded %d rows from %s [%s]", loaded.row_count(), path, loaded.name)
    return loaded


# ── Writing ──────────────────────────────────────────────────────


def _json_default(obj: Any) -> Any:
    if isinstance(obj, Path):
        return str(obj)
    if isinstance(obj, (datetime, date)):
        return obj.isoformat()
    item = getattr(obj, "item", None)
    if callable(item):
        converted = item()
        if isinstance(converted, (str, int, float, bool)) or converted is None:
            return converted
    raise TypeError(f"Object of type {type(obj).__name__} is not JSON serializable")


def write_json(path: Path, data: Any) -> Path:
    """Write *data* as pretty-printed JSON to *path* (atomic + deterministic)."""
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)

    payload = json.dumps(
        data,
        indent=2,
        sort_keys=True,
        ensure_ascii=False,
        default=_json_default,
    ) + "\n"
    tmp_path = path.with_suffix(path.suffix + ".tmp")
    tmp_path.write_text(payload, encoding="utf-8")
    tmp_path.replace(path)
    return path
