"""Build options and ``key=value`` profile files."""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import Any

from sheetframe.errors import ProfileError
from sheetframe.utils import parse_index_list

PROFILE_KEYS = ("sheet", "header_rows", "data_start", "workers", "rows")
_INT_MINIMUMS = {"data_start": 0, "workers": 1, "rows": 0}


@dataclass(frozen=True)
class BuildOptions:
    """Everything needed to turn one worksheet into a frame."""

    sheet: str | None = None
    header_rows: tuple[int, ...] = (0,)
    data_start: int | None = None
    workers: int | None = None
    rows: int = 10


def _parse_int(key: str, raw: str) -> int:
    try:
        value = int(raw)
    except ValueError:
        raise ProfileError(f"Profile value for {key!r} must be an integer, got {raw!r}") from None
    minimum = _INT_MINIMUMS[key]
    if value < minimum:
        raise ProfileError(f"Profile value for {key!r} must be >= {minimum}, got {value}")
    return value


def load_profile(profile: Path | None) -> dict[str, Any]:
    """Read *profile* and return the settings it defines.

    Lines look like ``header_rows=0,1``; blank lines and ``#`` comments are
    skipped.  Only keys in :data:`PROFILE_KEYS` are accepted.
    """
    if not profile:
        return {}
    if not profile.exists():
        raise ProfileError(f"Profile not found: {profile} (expected lines like header_rows=0,1)")
    if profile.is_dir():
        raise ProfileError(f"Profile is a directory, not a file: {profile}")
    try:
        text = profile.read_text(encoding="utf-8")
    except OSError as exc:
        raise ProfileError(f"Cannot read profile {profile}: {exc}") from exc

    settings: dict[str, Any] = {}
    for lineno, line in enumerate(text.splitlines(), 1):
        stripped = line.strip()
        if not stripped or stripped.startswith("#"):
            continue
        if "=" not in stripped:
            raise ProfileError(f"{profile}:{lineno}: expected key=value, got {stripped!r}")
        key, value = (part.strip() for part in stripped.split("=", 1))
        if key not in PROFILE_KEYS:
            raise ProfileError(
                f"{profile}:{lineno}: unknown key {key!r} (use {', '.join(PROFILE_KEYS)})"
            )
        if key == "sheet":
            settings[key] = value
        elif key == "header_rows":
            try:
                settings[key] = tuple(parse_index_list([value]))
            except ValueError as exc:
                raise ProfileError(f"{profile}:{lineno}: {exc}") from exc
        else:
            settings[key] = _parse_int(key, value)
    return settings


def resolve_options(profile: Path | None = None, **overrides: Any) -> BuildOptions:
    """Merge profile settings with explicit *overrides* (``None`` = not given)."""
    settings = load_profile(profile)
    for key, value in overrides.items():
        if key not in PROFILE_KEYS:
            raise TypeError(f"Unknown option: {key}")
        if value is None or (key == "header_rows" and not value):
            continue
        settings[key] = tuple(value) if key == "header_rows" else value
    return BuildOptions(**settings)
