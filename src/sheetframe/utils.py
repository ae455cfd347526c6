"""Shared helpers — hashing, timestamps, index lists."""

from __future__ import annotations

import hashlib
from collections.abc import Iterable
from datetime import datetime, timezone
from pathlib import Path


def sha256_file(path: Path) -> str:
    """Return the hex SHA-256 digest of *path*."""
    h = hashlib.sha256()
    with open(path, "rb") as fh:
        for chunk in iter(lambda: fh.read(8192), b""):
            h.update(chunk)
    return h.hexdigest()


def utcnow_iso() -> str:
    """Return the current UTC time as an ISO-8601 string."""
    return datetime.now(timezone.utc).isoformat()


def parse_index_list(values: Iterable[str]) -> list[int]:
    """Parse ``["0,1", "3"]`` style tokens into ``[0, 1, 3]`` (order kept).

    Raises ``ValueError`` for tokens that are not base-10 integers.
    """
    indices: list[int] = []
    for value in values:
        for token in value.split(","):
            token = token.strip()
            if not token:
                continue
            try:
                indices.append(int(token))
            except ValueError:
                raise ValueError(f"Invalid row index: {token!r}") from None
    return indices
