"""Data models / typed records used across the package."""

from __future__ import annotations

from collections.abc import Iterator, Sequence
from dataclasses import dataclass, field
from numbers import Integral
from typing import Any, Protocol

import pandas as pd


def _to_non_negative_int(value: Any, field_name: str) -> int:
    if isinstance(value, bool) or not isinstance(value, Integral):
        raise TypeError(f"{field_name} must be an integer")
    result = int(value)
    if result < 0:
        raise ValueError(f"{field_name} must be >= 0")
    return result


def _to_string_list(values: Sequence[Any] | None, field_name: str) -> list[str]:
    if values is None:
        return []
    if isinstance(values, str):
        raise TypeError(f"{field_name} must be a sequence of strings")
    normalized: list[str] = []
    for item in values:
        if not isinstance(item, str):
            raise TypeError(f"{field_name} items must be strings")
        normalized.append(item)
    return normalized


class WorksheetSource(Protocol):
    """Random access to the rows of one worksheet (zero-based)."""

    def row_count(self) -> int: ...

    def row_at(self, index: int) -> Sequence[object]: ...


@dataclass(frozen=True)
class Frame:
    """Column-oriented table of strings keyed by unique header names.

    Contract invariant: every column holds exactly ``row_count`` values.
    """

    headers: tuple[str, ...]
    columns: tuple[tuple[str, ...], ...]

    def __post_init__(self) -> None:
        if len(self.headers) != len(self.columns):
            raise ValueError("headers and columns must have the same length")
        if len(set(self.headers)) != len(self.headers):
            raise ValueError("headers must be unique")
        lengths = {len(col) for col in self.columns}
        if len(lengths) > 1:
            raise ValueError("all columns must have the same length")

    @property
    def row_count(self) -> int:
        return len(self.columns[0]) if self.columns else 0

    @property
    def column_count(self) -> int:
        return len(self.headers)

    @property
    def shape(self) -> tuple[int, int]:
        return self.row_count, self.column_count

    def column(self, name: str) -> tuple[str, ...]:
        try:
            return self.columns[self.headers.index(name)]
        except ValueError:
            raise KeyError(name) from None

    def rows(self) -> Iterator[tuple[str, ...]]:
        return zip(*self.columns) if self.columns else iter(())

    def head(self, n: int = 10) -> Frame:
        """Return a frame holding the first *n* rows."""
        return Frame(self.headers, tuple(col[:n] for col in self.columns))

    def to_dict(self) -> dict[str, list[str]]:
        return {name: list(col) for name, col in zip(self.headers, self.columns)}

    def to_dataframe(self) -> pd.DataFrame:
        """Return a pandas DataFrame with ``string`` dtype columns."""
        return pd.DataFrame(
            {name: pd.Series(col, dtype="string") for name, col in zip(self.headers, self.columns)},
            columns=list(self.headers),
        )


@dataclass
class BuildReport:
    """Audit record emitted alongside every frame build.

    Contract invariant: ``padded_rows + truncated_rows <= rows_in``.
    """

    header_rows: list[int] = field(default_factory=list)
    data_start: int = 0
    rows_in: int = 0
    columns: int = 0
    padded_rows: int = 0
    truncated_rows: int = 0
    renamed_headers: list[str] = field(default_factory=list)
    warnings: list[str] = field(default_factory=list)

    def __post_init__(self) -> None:
        self.header_rows = [
            _to_non_negative_int(i, "header_rows") for i in (self.header_rows or [])
        ]
        self.data_start = _to_non_negative_int(self.data_start, "data_start")
        self.rows_in = _to_non_negative_int(self.rows_in, "rows_in")
        self.columns = _to_non_negative_int(self.columns, "columns")
        self.padded_rows = _to_non_negative_int(self.padded_rows, "padded_rows")
        self.truncated_rows = _to_non_negative_int(self.truncated_rows, "truncated_rows")
        self.renamed_headers = _to_string_list(self.renamed_headers, "renamed_headers")
        self.warnings = _to_string_list(self.warnings, "warnings")
        if self.padded_rows + self.truncated_rows > self.rows_in:
            raise ValueError("padded_rows + truncated_rows must be <= rows_in")

    def to_dict(self) -> dict[str, Any]:
        return {
            "header_rows": list(self.header_rows),
            "data_start": self.data_start,
            "rows_in": self.rows_in,
            "columns": self.columns,
            "padded_rows": self.padded_rows,
            "truncated_rows": self.truncated_rows,
            "renamed_headers": list(self.renamed_headers),
            "warnings": list(self.warnings),
        }


@dataclass
class RunManifest:
    """Audit-trail manifest for a single export run."""

    tool: str = "sheetframe"
    version: str = ""
    input_path: str = ""
    sheet: str = ""
    output_path: str = ""
    created_at_utc: str = ""
    rows: int = 0
    columns: int = 0
    sha256: str = ""

    def __post_init__(self) -> None:
        self.rows = _to_non_negative_int(self.rows, "rows")
        self.columns = _to_non_negative_int(self.columns, "columns")

    def to_dict(self) -> dict[str, Any]:
        return {
            "tool": self.tool,
            "version": self.version,
            "input_path": self.input_path,
            "sheet": self.sheet,
            "output_path": self.output_path,
            "created_at_utc": self.created_at_utc,
            "rows": self.rows,
            "columns": self.columns,
            "sha256": self.sha256,
        }
