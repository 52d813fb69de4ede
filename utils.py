"""Small helpers shared by the loaders and the flattener."""

from __future__ import annotations

from typing import Iterable, Mapping

import pandas as pd


def _squash(name: str) -> str:
    return str(name).lower().replace(" ", "").replace("_", "")


def col_lookup(columns: Iterable[str], name: str, default=None):
    """Find the actual column name for a logical key, case/space/underscore-insensitive."""
    key = _squash(name)
    for c in columns:
        if _squash(c) == key:
            return c
    return default


def row_text(row: Mapping, name: str) -> str:
    """Return the first non-empty value stored under *name* or one of its case variants.

    The exact spelling wins over case variants. Missing or empty cells give ``""``.
    """
    candidates = [name] + [k for k in row.keys() if isinstance(k, str) and k != name and k.lower() == name.lower()]
    for key in candidates:
        value = row.get(key)
        if value is None or (not isinstance(value, str) and pd.isna(value)):
            continue
        text = str(value)
        if text:
            return text
    return ""
