"""Frame-building pipeline — pure functions, no side effects."""

from __future__ import annotations

import logging
from collections.abc import Iterable, Sequence
from concurrent.futures import ThreadPoolExecutor
from numbers import Integral

from sheetframe.cells import stringify
from sheetframe.errors import (
    EmptyHeaderRowError,
    InvalidConfigurationError,
    OutOfBoundsError,
    ShapeMismatchError,
)
from sheetframe.headers import resolve_headers
from sheetframe.models import BuildReport, Frame, WorksheetSource

logger = logging.getLogger(__name__)


# ── Row normalisation ───────────────────────────────────────────


def normalize_row(row: Sequence[object], width: int) -> list[str]:
    """Stringify *row* and pad with ``""`` / cut it to exactly *width* cells."""
    if width < 0:
        raise ValueError(f"width must be >= 0, got {width}")
    cells = [stringify(cell) for cell in row[:width]]
    if len(cells) < width:
        cells.extend([""] * (width - len(cells)))
    return cells


# ── Assembly ────────────────────────────────────────────────────


def _project(rows: Sequence[Sequence[str]], index: int) -> tuple[str, ...]:
    return tuple(row[index] for row in rows)


def assemble_frame(
    headers: Sequence[str],
    rows: Sequence[Sequence[str]],
    *,
    workers: int | None = None,
) -> Frame:
    """Build a :class:`Frame` from unique *headers* and normalized *rows*.

    With ``workers > 1`` the per-column projections run on a thread pool;
    columns are placed by index, so the order never depends on completion.

    Raises
    ------
    ShapeMismatchError
        If a row width differs from ``len(headers)``.
    InvalidConfigurationError
        If *headers* contains duplicates or *workers* is < 1.
    """
    width = len(headers)
    if len(set(headers)) != width:
        raise InvalidConfigurationError("Frame headers must be unique")
    if workers is not None and workers < 1:
        raise InvalidConfigurationError(f"workers must be >= 1, got {workers}")

    for position, row in enumerate(rows):
        if len(row) != width:
            raise ShapeMismatchError(position, width, len(row))

    columns: list[tuple[str, ...]]
    if workers is None or workers == 1 or width < 2:
        columns = [_project(rows, i) for i in range(width)]
    else:
        pool_size = min(workers, width)
        logger.debug("Projecting %d columns on %d worker threads", width, pool_size)
        columns = [()] * width
        with ThreadPoolExecutor(max_workers=pool_size) as executor:
            future_to_index = {
                executor.submit(_project, rows, i): i for i in range(width)
            }
            for future, index in future_to_index.items():
                columns[index] = future.result()

    return Frame(tuple(headers), tuple(columns))


# ── Entry point ─────────────────────────────────────────────────


def _validate_header_indices(header_rows: Iterable[int] | int) -> list[int]:
    if isinstance(header_rows, Integral) and not isinstance(header_rows, bool):
        header_rows = [int(header_rows)]
    indices: list[int] = []
    for value in header_rows:
        if isinstance(value, bool) or not isinstance(value, Integral):
            raise InvalidConfigurationError(
                f"Header row indices must be integers, got {value!r}"
            )
        indices.append(int(value))

    if not indices:
        raise InvalidConfigurationError("At least one header row is required")
    negative = [i for i in indices if i < 0]
    if negative:
        raise InvalidConfigurationError(
            f"Header row indices must be >= 0, got {negative[0]}"
        )
    duplicates = sorted({i for i in indices if indices.count(i) > 1})
    if duplicates:
        raise InvalidConfigurationError(
            f"Duplicate header row indices: {', '.join(map(str, duplicates))}"
        )
    return indices


def build_frame_with_report(
    source: WorksheetSource,
    header_rows: Iterable[int] | int = (0,),
    data_start: int | None = None,
    *,
    workers: int | None = None,
) -> tuple[Frame, BuildReport]:
    """Resolve headers from *header_rows* and assemble the rows after them.

    Returns ``(frame, report)``.  Ragged data rows are padded or cut to the
    header width and counted in the report; they never raise.

    Raises
    ------
    InvalidConfigurationError
        Empty, negative or duplicate header indices, or ``data_start`` inside
        the header region.
    OutOfBoundsError
        A header index is past the last worksheet row.
    EmptyHeaderRowError
        The first header row has no cells.
    ShapeMismatchError
        Internal consistency failure during assembly.
    """
    indices = _validate_header_indices(header_rows)
    row_count = source.row_count()
    for index in indices:
        if index >= row_count:
            raise OutOfBoundsError(index, row_count)

    last_header = max(indices)
    if data_start is None:
        data_start = last_header + 1
    elif data_start <= last_header:
        raise InvalidConfigurationError(
            f"data_start ({data_start}) must be after the last header row ({last_header})"
        )

    raw_headers = [source.row_at(i) for i in indices]
    if len(raw_headers[0]) == 0:
        raise EmptyHeaderRowError(indices[0])
    collapsed, headers = resolve_headers(raw_headers)
    width = len(headers)

    padded = truncated = 0
    rows: list[list[str]] = []
    for index in range(data_start, row_count):
        raw = source.row_at(index)
        if len(raw) < width:
            padded += 1
        elif len(raw) > width:
            truncated += 1
        rows.append(normalize_row(raw, width))

    warnings: list[str] = []
    if padded or truncated:
        logger.debug("Normalized ragged rows: %d padded, %d truncated", padded, truncated)
        warnings.append(
            f"Normalized {padded + truncated} ragged rows to {width} columns "
            f"({padded} padded, {truncated} truncated)"
        )

    frame = assemble_frame(headers, rows, workers=workers)
    report = BuildReport(
        header_rows=indices,
        data_start=data_start,
        rows_in=len(rows),
        columns=width,
        padded_rows=padded,
        truncated_rows=truncated,
        renamed_headers=[
            f"{before} -> {after}"
            for before, after in zip(collapsed, headers)
            if before != after
        ],
        warnings=warnings,
    )
    return frame, report


def build_frame(
    source: WorksheetSource,
    header_rows: Iterable[int] | int = (0,),
    data_start: int | None = None,
    *,
    workers: int | None = None,
) -> Frame:
    """Build a :class:`Frame` from *source*; see :func:`build_frame_with_report`."""
    frame, _report = build_frame_with_report(
        source, header_rows, data_start, workers=workers
    )
    return frame
