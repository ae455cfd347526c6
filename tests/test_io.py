from __future__ import annotations

import csv
import json
import sys
from datetime import datetime
from pathlib import Path

import pandas as pd
import pytest
from openpyxl import Workbook

from sheetframe.cells import CellError
from sheetframe.errors import SheetNotFoundError
from sheetframe.io import RowListSheet, load_worksheet, write_json


def _write_workbook(path: Path, sheets: dict[str, list[list[object]]]) -> Path:
    wb = Workbook()
    active = wb.active
    if active is not None:
        wb.remove(active)
    for name, rows in sheets.items():
        ws = wb.create_sheet(title=name)
        for row in rows:
            ws.append(row)
    wb.save(path)
    return path


# ── RowListSheet ─────────────────────────────────────────────────


def test_row_list_sheet_random_access() -> None:
    sheet = RowListSheet([["a", "b"], ["c"]], name="S")

    assert sheet.row_count() == 2
    assert sheet.row_at(1) == ("c",)
    assert "S" in repr(sheet)


@pytest.mark.parametrize("index", [-1, 2])
def test_row_list_sheet_rejects_out_of_range_index(index: int) -> None:
    with pytest.raises(IndexError):
        RowListSheet([["a"], ["b"]]).row_at(index)


# ── XLSX ─────────────────────────────────────────────────────────


def test_load_xlsx_defaults_to_first_sheet(tmp_path: Path) -> None:
    path = _write_workbook(
        tmp_path / "book.xlsx",
        {"First": [["Name", "Age"], ["Ann", 30]], "Second": [["x"]]},
    )

    sheet = load_worksheet(path)

    assert sheet.name == "First"
    assert sheet.row_count() == 2
    assert sheet.row_at(0) == ("Name", "Age")
    assert sheet.row_at(1) == ("Ann", 30)


def test_load_xlsx_selects_sheet_by_name(tmp_path: Path) -> None:
    path = _write_workbook(
        tmp_path / "book.xlsx",
        {"First": [["a"]], "МАЙ  2024": [["b"], ["c"]]},
    )

    sheet = load_worksheet(path, "МАЙ  2024")

    assert sheet.name == "МАЙ  2024"
    assert sheet.row_count() == 2


def test_load_xlsx_unknown_sheet_lists_available(tmp_path: Path) -> None:
    path = _write_workbook(tmp_path / "book.xlsx", {"First": [["a"]]})

    with pytest.raises(SheetNotFoundError, match="First") as excinfo:
        load_worksheet(path, "Missing")

    assert excinfo.value.available == ["First"]
    assert isinstance(excinfo.value, ValueError)


def test_load_xlsx_keeps_typed_values_and_errors(tmp_path: Path) -> None:
    path = tmp_path / "typed.xlsx"
    wb = Workbook()
    ws = wb.active
    assert ws is not None
    ws.append(["when", "flag", "ratio", "err", "empty"])
    ws.append([datetime(2024, 5, 1), True, 0.5, None, None])
    ws["D2"] = "#DIV/0!"
    ws["D2"].data_type = "e"
    wb.save(path)

    row = load_worksheet(path).row_at(1)

    assert row[0] == datetime(2024, 5, 1)
    assert row[1] is True
    assert row[2] == 0.5
    assert row[3] == CellError("#DIV/0!")
    assert row[4] is None


# ── CSV ──────────────────────────────────────────────────────────


def test_load_csv_reads_every_cell_as_text(tmp_path: Path) -> None:
    path = tmp_path / "data.csv"
    path.write_text("Name,Age\nAnn,030\nBo,\n", encoding="utf-8")

    sheet = load_worksheet(path)

    assert sheet.name == "data"
    assert sheet.row_at(0) == ("Name", "Age")
    assert sheet.row_at(1) == ("Ann", "030")
    assert sheet.row_at(2) == ("Bo", "")


def test_load_csv_with_explicit_delimiter(tmp_path: Path) -> None:
    path = tmp_path / "data.csv"
    path.write_text("a|b\n1|2\n", encoding="utf-8")

    sheet = load_worksheet(path, delimiter="|")

    assert sheet.row_at(1) == ("1", "2")


def test_load_csv_retries_encoding_on_unicode_error(
    monkeypatch: pytest.MonkeyPatch, tmp_path: Path
) -> None:
    csv_path = tmp_path / "data.csv"
    csv_path.write_bytes(b"x")
    expected = pd.DataFrame([["a"], ["1"]])

    encodings: list[str] = []

    def _fake_read_csv(path: Path, **kwargs: object) -> pd.DataFrame:
        del path
        encoding = kwargs.get("encoding")
        assert isinstance(encoding, str)
        assert kwargs.get("header") is None
        encodings.append(encoding)
        if encoding in {"utf-8-sig", "utf-8"}:
            raise UnicodeDecodeError("utf-8", b"x", 0, 1, "bad")
        return expected

    monkeypatch.setattr(pd, "read_csv", _fake_read_csv)

    sheet = load_worksheet(csv_path)

    assert encodings == ["utf-8-sig", "utf-8", "latin-1"]
    assert sheet.row_at(1) == ("1",)


def test_load_csv_raises_value_error_when_all_encodings_fail(
    monkeypatch: pytest.MonkeyPatch, tmp_path: Path
) -> None:
    csv_path = tmp_path / "data.csv"
    csv_path.write_bytes(b"x")

    def _always_fail(path: Path, **kwargs: object) -> pd.DataFrame:
        raise pd.errors.ParserError("broken")

    monkeypatch.setattr(pd, "read_csv", _always_fail)

    with pytest.raises(ValueError, match="Could not read CSV"):
        load_worksheet(csv_path)


def test_load_empty_csv_gives_empty_sheet(tmp_path: Path) -> None:
    path = tmp_path / "empty.csv"
    path.write_text("", encoding="utf-8")

    assert load_worksheet(path).row_count() == 0


# ── Dispatch errors ──────────────────────────────────────────────


def test_load_missing_file(tmp_path: Path) -> None:
    with pytest.raises(FileNotFoundError):
        load_worksheet(tmp_path / "nope.xlsx")


def test_load_unsupported_extension(tmp_path: Path) -> None:
    path = tmp_path / "data.txt"
    path.write_text("x", encoding="utf-8")

    with pytest.raises(ValueError, match="Unsupported file type"):
        load_worksheet(path)


def test_load_xls_without_xlrd_reports_hint(
    monkeypatch: pytest.MonkeyPatch, tmp_path: Path
) -> None:
    path = tmp_path / "legacy.xls"
    path.write_bytes(b"x")
    monkeypatch.setitem(sys.modules, "xlrd", None)

    with pytest.raises(ValueError, match="xlrd"):
        load_worksheet(path)


# ── write_json ───────────────────────────────────────────────────


def test_write_json_is_sorted_and_serializes_paths_and_dates(tmp_path: Path) -> None:
    out = write_json(
        tmp_path / "nested" / "out.json",
        {"b": Path("x/y"), "a": datetime(2024, 1, 2, 3, 4, 5)},
    )

    text = out.read_text(encoding="utf-8")
    assert text.endswith("\n")
    assert text.index('"a"') < text.index('"b"')
    data = json.loads(text)
    assert data == {"a": "2024-01-02T03:04:05", "b": "x/y"}
    assert not (tmp_path / "nested" / "out.json.tmp").exists()


def test_write_json_rejects_unknown_objects(tmp_path: Path) -> None:
    with pytest.raises(TypeError, match="not JSON serializable"):
        write_json(tmp_path / "bad.json", {"x": object()})


def test_load_csv_tolerates_ragged_lines(tmp_path: Path) -> None:
    path = tmp_path / "ragged.csv"
    path.write_text("a,b\n1\n1,2,3\n", encoding="utf-8")

    sheet = load_worksheet(path)

    assert sheet.row_count() == 3
    assert sheet.row_at(0) == ("a", "b", "")
    assert sheet.row_at(1) == ("1", "", "")
    assert sheet.row_at(2) == ("1", "2", "3")


def test_load_single_column_csv(tmp_path: Path) -> None:
    path = tmp_path / "single.csv"
    path.write_text("header\nvalue\n", encoding="utf-8")

    sheet = load_worksheet(path)

    assert sheet.row_at(0) == ("header",)
    assert sheet.row_at(1) == ("value",)


def test_load_csv_reports_oversized_field_as_value_error(tmp_path: Path) -> None:
    path = tmp_path / "wide.csv"
    path.write_text("a,b\n" + "x" * 64 + ",1\n", encoding="utf-8")
    old_limit = csv.field_size_limit(16)
    try:
        with pytest.raises(ValueError, match="Could not read CSV"):
            load_worksheet(path, delimiter=",")
    finally:
        csv.field_size_limit(old_limit)
