"""Typed failures raised while loading worksheets and building frames."""

from __future__ import annotations

from collections.abc import Sequence


class FrameBuildError(ValueError):
    """Base class for every failure raised by the frame-building engine."""


class OutOfBoundsError(FrameBuildError):
    """A requested header row does not exist in the worksheet."""

    def __init__(self, index: int, row_count: int) -> None:
        self.index = index
        self.row_count = row_count
        super().__init__(
            f"Header row {index} is out of bounds (worksheet has {row_count} rows)"
        )


class InvalidConfigurationError(FrameBuildError):
    """Header/data-region arguments are inconsistent."""


class EmptyHeaderRowError(FrameBuildError):
    """The designated header rows collapse to zero columns."""

    def __init__(self, index: int) -> None:
        self.index = index
        super().__init__(f"Header row {index} has no cells")


class ShapeMismatchError(FrameBuildError):
    """A normalized data row does not match the header width.

    Internal invariant violation: rows produced by ``normalize_row`` never
    trigger it.
    """

    def __init__(self, row: int, expected: int, actual: int) -> None:
        self.row = row
        self.expected = expected
        self.actual = actual
        super().__init__(
            f"Data row {row} has {actual} cells, expected {expected}"
        )


class SheetNotFoundError(ValueError):
    """The requested worksheet name is not present in the workbook."""

    def __init__(self, name: str, available: Sequence[str]) -> None:
        self.name = name
        self.available = list(available)
        listed = ", ".join(repr(s) for s in self.available) or "none"
        super().__init__(f"Worksheet {name!r} not found (available: {listed})")


class ProfileError(ValueError):
    """A profile file is missing, unreadable or malformed."""
