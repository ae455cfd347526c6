from __future__ import annotations

import pandas as pd
import pytest

from sheetframe.models import BuildReport, Frame, RunManifest


def _frame() -> Frame:
    return Frame(("name", "age"), (("Ann", "Bo", "Cy"), ("30", "25", "")))


def test_frame_shape_and_accessors() -> None:
    frame = _frame()

    assert frame.shape == (3, 2)
    assert frame.column("age") == ("30", "25", "")
    assert list(frame.rows())[1] == ("Bo", "25")
    assert frame.head(2).row_count == 2
    assert frame.head(2).headers == frame.headers


def test_frame_unknown_column_raises_key_error() -> None:
    with pytest.raises(KeyError):
        _frame().column("missing")


def test_frame_rejects_inconsistent_shapes() -> None:
    with pytest.raises(ValueError, match="same length"):
        Frame(("a", "b"), (("1",),))

    with pytest.raises(ValueError, match="unique"):
        Frame(("a", "a"), (("1",), ("2",)))

    with pytest.raises(ValueError, match="columns"):
        Frame(("a", "b"), (("1",), ("2", "3")))


def test_frame_is_immutable() -> None:
    frame = _frame()
    with pytest.raises(AttributeError):
        frame.headers = ("x",)  # type: ignore[misc]


def test_frame_to_dataframe_uses_string_dtype() -> None:
    df = _frame().to_dataframe()

    assert list(df.columns) == ["name", "age"]
    assert all(str(dtype) == "string" for dtype in df.dtypes)
    assert df.loc[2, "age"] == ""


def test_empty_frame_to_dataframe_keeps_columns() -> None:
    df = Frame(("a", "b"), ((), ())).to_dataframe()

    assert isinstance(df, pd.DataFrame)
    assert df.empty
    assert list(df.columns) == ["a", "b"]


def test_frame_to_dict_returns_list_copies() -> None:
    payload = _frame().to_dict()
    payload["name"].append("Dee")
    assert _frame().column("name") == ("Ann", "Bo", "Cy")


def test_build_report_to_dict_returns_list_copies() -> None:
    report = BuildReport(
        header_rows=[0, 1],
        data_start=2,
        rows_in=5,
        columns=3,
        padded_rows=1,
        renamed_headers=["id -> id_1"],
        warnings=["ragged"],
    )

    payload = report.to_dict()
    payload["header_rows"].append(9)
    payload["warnings"].append("another")

    assert report.header_rows == [0, 1]
    assert report.warnings == ["ragged"]
    assert payload["renamed_headers"] == ["id -> id_1"]


def test_build_report_rejects_negative_counts() -> None:
    with pytest.raises(ValueError, match="rows_in"):
        BuildReport(rows_in=-1)

    with pytest.raises(ValueError, match="header_rows"):
        BuildReport(header_rows=[-1])


def test_build_report_rejects_inconsistent_ragged_counts() -> None:
    with pytest.raises(ValueError, match="padded_rows"):
        BuildReport(rows_in=2, padded_rows=2, truncated_rows=1)


def test_build_report_rejects_non_string_lists() -> None:
    with pytest.raises(TypeError, match="warnings"):
        BuildReport(warnings=["warn", object()])  # type: ignore[list-item]

    with pytest.raises(TypeError, match="renamed_headers"):
        BuildReport(renamed_headers="a -> b")  # type: ignore[arg-type]


def test_run_manifest_rejects_non_integer_and_negative_counts() -> None:
    with pytest.raises(TypeError, match="rows"):
        RunManifest(rows=True)  # type: ignore[arg-type]

    with pytest.raises(ValueError, match="columns"):
        RunManifest(columns=-2)


def test_run_manifest_to_dict_round_trips_fields() -> None:
    manifest = RunManifest(version="0.1.0", sheet="May", rows=3, columns=2)
    payload = manifest.to_dict()
    assert payload["tool"] == "sheetframe"
    assert payload["sheet"] == "May"
    assert payload["rows"] == 3
