"""Cell values and their canonical string form."""

from __future__ import annotations

import math
from dataclasses import dataclass
from datetime import date, datetime, time, timedelta
from decimal import Decimal
from numbers import Integral, Real
from typing import Union


@dataclass(frozen=True)
class CellError:
    """An error value stored in a worksheet cell (``#DIV/0!``, ``#N/A``, ...)."""

    code: str

    def __str__(self) -> str:
        return self.code


Cell = Union[None, bool, int, float, str, CellError, datetime, date, time, timedelta]


def _format_float(value: float) -> str:
    if math.isnan(value):
        return "NaN"
    if math.isinf(value):
        return "inf" if value > 0 else "-inf"
    if value.is_integer():
        return str(int(value))
    text = repr(value)
    if "e" in text:
        # shortest round-trip digits, positional notation
        text = format(Decimal(text), "f")
    return text


def _format_duration(value: timedelta) -> str:
    sign = "-" if value < timedelta(0) else ""
    value = abs(value)
    hours, rest = divmod(value.seconds, 3600)
    minutes, seconds = divmod(rest, 60)

    date_part = f"{value.days}D" if value.days else ""
    time_part = ""
    if hours:
        time_part += f"{hours}H"
    if minutes:
        time_part += f"{minutes}M"
    if value.microseconds:
        time_part += f"{seconds}.{value.microseconds:06d}".rstrip("0") + "S"
    elif seconds:
        time_part += f"{seconds}S"

    if not date_part and not time_part:
        return "PT0S"
    return f"{sign}P{date_part}" + (f"T{time_part}" if time_part else "")


def stringify(cell: object) -> str:
    """Return the canonical string representation of *cell*.

    Total: every input maps to a string, nothing raises.

    - ``None`` -> ``""``
    - booleans -> ``"true"`` / ``"false"``
    - integers -> decimal digits
    - floats -> ``"30"`` for ``30.0``, shortest round-trip positional
      decimal otherwise (``1e-07`` -> ``"0.0000001"``)
    - :class:`CellError` -> its error code
    - dates/times -> ISO-8601, durations -> ISO-8601 ``PnDTnHnMnS``
    """
    if cell is None:
        return ""
    if isinstance(cell, str):
        return cell
    if isinstance(cell, bool):
        return "true" if cell else "false"
    if isinstance(cell, Integral):
        return str(int(cell))
    if isinstance(cell, Real):
        return _format_float(float(cell))
    if isinstance(cell, CellError):
        return cell.code
    if isinstance(cell, (datetime, date, time)):
        return cell.isoformat()
    if isinstance(cell, timedelta):
        return _format_duration(cell)
    return str(cell)
