"""Discover which quizzes a wide submissions export contains."""

from __future__ import annotations

import logging
import re
from typing import Iterable, Mapping, Sequence

from quiz_models import QuizIndexSet

SCORE_PCT_SUFFIX = "Score (in %)"
SCORE_SUFFIX = "Score"
ATTEMPTS_SUFFIX = "Total attempts"

_QUIZ_COLUMN = re.compile(
    r"Quiz(\d+)_(?:" + "|".join(re.escape(s) for s in (SCORE_PCT_SUFFIX, SCORE_SUFFIX, ATTEMPTS_SUFFIX)) + r")"
)


def score_columns(quiz: int) -> tuple[str, str]:
    """Score column names for *quiz*, preferred spelling first."""
    return f"Quiz{quiz}_{SCORE_PCT_SUFFIX}", f"Quiz{quiz}_{SCORE_SUFFIX}"


def attempts_column(quiz: int) -> str:
    return f"Quiz{quiz}_{ATTEMPTS_SUFFIX}"


def detect_quiz_indices(columns: Iterable[str]) -> QuizIndexSet:
    """Return the quiz numbers that have a score or attempts column in *columns*."""
    found = set()
    for col in columns:
        if not isinstance(col, str):
            continue
        m = _QUIZ_COLUMN.fullmatch(col)
        if m and int(m.group(1)) > 0:
            found.add(int(m.group(1)))

    if not found:
        logging.warning("No quiz columns detected in header")
    return QuizIndexSet(tuple(found))


def detect_from_rows(rows: Sequence[Mapping[str, str]]) -> QuizIndexSet:
    """Detect quizzes from the first row's keys; the header is assumed uniform."""
    if len(rows) == 0:
        return QuizIndexSet()
    return detect_quiz_indices(rows[0].keys())
