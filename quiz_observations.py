"""Turn wide quiz rows (one per student) into long per-quiz observations."""

from __future__ import annotations

import logging
import math
import re
from collections.abc import Mapping, Sequence

import pandas as pd

from quiz_models import QuizIndexSet
from quiz_schema import attempts_column, detect_from_rows, score_columns
from utils import row_text

OBSERVATION_COLUMNS = ["StudentKey", "Name", "Email", "Quiz", "Score", "Attempts"]
_DTYPES = {"Quiz": "int64", "Score": "float64", "Attempts": "float64"}

# Leading decimal number; whatever follows it ("85%", "2 attempts") is ignored.
_LEADING_NUMBER = re.compile(r"[+-]?(?:\d+\.?\d*|\.\d+)(?:[eE][+-]?\d+)?")


def parse_number(value) -> float | None:
    """Parse the leading number of a cell; ``None`` when there is none or it is not finite.

    Text after the number is ignored, so ``"85%"`` reads as ``85.0``. A failed
    parse is never turned into ``0``: zero is a real score.
    """
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, (int, float)):
        number = float(value)
    else:
        match = _LEADING_NUMBER.match(str(value).strip())
        if not match:
            return None
        number = float(pd.to_numeric(match.group(), errors="coerce"))
    return number if math.isfinite(number) else None


def empty_observations() -> pd.DataFrame:
    return pd.DataFrame(columns=OBSERVATION_COLUMNS).astype(_DTYPES)


def _as_rows(rows) -> list:
    if isinstance(rows, pd.DataFrame):
        return rows.to_dict("records")
    if isinstance(rows, (str, bytes, Mapping)) or not isinstance(rows, Sequence):
        raise TypeError(f"rows must be a sequence of mappings, got {type(rows).__name__}")
    for i, row in enumerate(rows):
        if not isinstance(row, Mapping):
            raise TypeError(f"row {i} is a {type(row).__name__}, expected a mapping")
    return list(rows)


def _cell(row: Mapping, *keys: str):
    for key in keys:
        if key in row:
            return row[key]
    return None


def flatten_rows(rows, quizzes: QuizIndexSet) -> pd.DataFrame:
    """Return one observation per (row, quiz), ordered by row then quiz number.

    ``Score`` and ``Attempts`` are NaN where the cell is missing or unparseable.
    The input rows are never modified.
    """
    rows = _as_rows(rows)
    if not rows or not quizzes:
        return empty_observations()

    records = []
    for row in rows:
        name = row_text(row, "Name")
        email = row_text(row, "Email")
        for n in quizzes:
            records.append(
                {
                    "StudentKey": f"{name}-{email}",
                    "Name": name,
                    "Email": email,
                    "Quiz": n,
                    "Score": parse_number(_cell(row, *score_columns(n))),
                    "Attempts": parse_number(_cell(row, attempts_column(n))),
                }
            )

    logging.debug("Flattened %d rows x %d quizzes", len(rows), len(quizzes))
    return pd.DataFrame(records, columns=OBSERVATION_COLUMNS).astype(_DTYPES)


def submissions(observations: pd.DataFrame) -> pd.DataFrame:
    """Observations where the student actually attempted the quiz (attempts > 0)."""
    return observations[observations["Attempts"] > 0].copy()


def flatten_dataset(rows) -> tuple[QuizIndexSet, pd.DataFrame]:
    """Detect the quiz set once and flatten *rows* with it."""
    rows = _as_rows(rows)
    quizzes = detect_from_rows(rows)
    return quizzes, flatten_rows(rows, quizzes)
