"""Header resolution — collapse multi-row headers, then make them unique."""

from __future__ import annotations

import logging
from collections.abc import Sequence

from sheetframe import PLACEHOLDER_PREFIX
from sheetframe.cells import stringify
from sheetframe.errors import EmptyHeaderRowError, InvalidConfigurationError

logger = logging.getLogger(__name__)


def placeholder(index: int) -> str:
    """Return the generated name for an unlabeled column at *index*."""
    return f"{PLACEHOLDER_PREFIX}{index}"


def _is_placeholder(label: str) -> bool:
    return label.strip().startswith(PLACEHOLDER_PREFIX)


def _keep_label(label: str) -> bool:
    return bool(label.strip()) and not _is_placeholder(label)


# ── Collapsing ───────────────────────────────────────────────────


def collapse_headers(header_rows: Sequence[Sequence[object]]) -> list[str]:
    """Merge *header_rows* column by column into one label per column.

    The column count is taken from the first header row; shorter rows count
    as empty at the missing positions, longer rows are cut.  Blank labels and
    labels that already look like ``Unnamed_*`` are dropped, the remaining
    ones are joined with a single space in header-row order.  A column with
    nothing left is named ``Unnamed_{column}``.

    Raises
    ------
    InvalidConfigurationError
        If *header_rows* is empty.
    EmptyHeaderRowError
        If the first header row has no cells.  Its ``index`` is the position
        in *header_rows* (always 0); :func:`sheetframe.pipeline.build_frame`
        reports the worksheet row index instead.
    """
    if not header_rows:
        raise InvalidConfigurationError("At least one header row is required")

    cols = len(header_rows[0])
    if cols == 0:
        raise EmptyHeaderRowError(0)

    collapsed: list[str] = []
    for c in range(cols):
        parts = []
        for row in header_rows:
            label = stringify(row[c]) if c < len(row) else ""
            if _keep_label(label):
                parts.append(label)
        collapsed.append(" ".join(parts) if parts else placeholder(c))
    return collapsed


# ── Uniquifying ──────────────────────────────────────────────────


def uniquify(labels: Sequence[str]) -> list[str]:
    """Return *labels* with blanks named and duplicates suffixed.

    A blank label at position ``i`` becomes ``Unnamed_i``.  A label already
    taken gets ``_1``, ``_2``, ... appended until it is free.  Collisions are
    checked against every name emitted so far, so the result is unique even
    when a suffixed name matches a literal label further left.
    """
    used: set[str] = set()
    result: list[str] = []
    for index, label in enumerate(labels):
        base = label if label.strip() else placeholder(index)
        candidate = base
        suffix = 0
        while candidate in used:
            suffix += 1
            candidate = f"{base}_{suffix}"
        used.add(candidate)
        result.append(candidate)
    return result


def resolve_headers(header_rows: Sequence[Sequence[object]]) -> tuple[list[str], list[str]]:
    """Collapse then uniquify; returns ``(collapsed, final)``."""
    collapsed = collapse_headers(header_rows)
    final = uniquify(collapsed)
    renamed = sum(1 for before, after in zip(collapsed, final) if before != after)
    logger.debug(
        "Resolved %d header columns from %d header row(s); %d renamed",
        len(final), len(header_rows), renamed,
    )
    return collapsed, final
