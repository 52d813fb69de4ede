"""Per-quiz and section-wide statistics computed over quiz submissions.

Every average and percentage goes through :func:`safe_mean` or
:func:`safe_ratio`, so "no data" is always ``None`` and never ``0`` or NaN.
"""

from __future__ import annotations

import math
from collections import Counter
from typing import Iterable, Optional

import pandas as pd

from config import GRADE_A_MIN, GRADE_C_MIN, MULTI_QUIZ_MASTER_MIN, PASS_MARK, PERFECT_SCORE
from quiz_models import QuizAggregate, QuizIndexSet, QuizSummary, SectionOverview
from quiz_observations import submissions
from section_leaderboard import build_student_profiles, is_section_champion

GRADE_LABELS = {
    "Excellent": "A (90-100%)",
    "Good": "B (70-89%)",
    "Average": "C (50-69%)",
    "Fail": "F (<50%)",
}
SCORE_RANGES = ["0-20%", "21-40%", "41-60%", "61-80%", "81-100%"]


# ==== PRIMITIVES ====

def _present(values: Iterable) -> list[float]:
    return [float(v) for v in values if v is not None and not pd.isna(v)]


def safe_mean(values: Iterable) -> Optional[float]:
    """Mean of the non-null values, or ``None`` when there are none."""
    vals = _present(values)
    if not vals:
        return None
    return sum(vals) / len(vals)


def safe_ratio(numerator: float, denominator: float) -> Optional[float]:
    if not denominator:
        return None
    return numerator / denominator


def quartiles(scores: Iterable) -> tuple[Optional[float], Optional[float], Optional[float]]:
    """Nearest-rank Q1, median and Q3 (no interpolation)."""
    ordered = sorted(_present(scores))
    n = len(ordered)
    if n == 0:
        return None, None, None
    return (
        ordered[math.floor(0.25 * n)],
        ordered[math.floor(0.5 * n)],
        ordered[math.floor(0.75 * n)],
    )


def sample_std(scores: Iterable) -> float:
    """Bessel-corrected standard deviation; ``0.0`` for fewer than two scores."""
    vals = _present(scores)
    n = len(vals)
    if n <= 1:
        return 0.0
    mean = sum(vals) / n
    return math.sqrt(sum((v - mean) ** 2 for v in vals) / (n - 1))


def mode_bucket(scores: Iterable) -> Optional[int]:
    """Lower bound of the most common 10-point bucket; ties go to the higher bucket."""
    freq = Counter(int(math.floor(s / 10) * 10) for s in _present(scores))
    if not freq:
        return None
    return max(freq.items(), key=lambda kv: (kv[1], kv[0]))[0]


def grade_distribution(scores: Iterable) -> dict[str, int]:
    counts = dict.fromkeys(GRADE_LABELS, 0)
    for s in _present(scores):
        if s >= GRADE_A_MIN:
            counts["Excellent"] += 1
        elif s >= PASS_MARK:
            counts["Good"] += 1
        elif s >= GRADE_C_MIN:
            counts["Average"] += 1
        else:
            counts["Fail"] += 1
    return counts


def pass_fail_split(scores: Iterable, threshold: float = PASS_MARK) -> tuple[int, int]:
    vals = _present(scores)
    passed = sum(1 for s in vals if s >= threshold)
    return passed, len(vals) - passed


def score_range_counts(scores: Iterable) -> dict[str, int]:
    counts = dict.fromkeys(SCORE_RANGES, 0)
    for s in _present(scores):
        if s <= 20:
            counts["0-20%"] += 1
        elif s <= 40:
            counts["21-40%"] += 1
        elif s <= 60:
            counts["41-60%"] += 1
        elif s <= 80:
            counts["61-80%"] += 1
        else:
            counts["81-100%"] += 1
    return counts


# ==== PER QUIZ ====

def _quiz_submissions(subs: pd.DataFrame, quiz: int) -> pd.DataFrame:
    return subs[subs["Quiz"] == quiz]


def _aggregate(quiz_subs: pd.DataFrame, quiz: int) -> QuizAggregate:
    scores = quiz_subs["Score"].dropna()
    return QuizAggregate(
        quiz=int(quiz),
        submissions=len(quiz_subs),
        average_score=safe_mean(scores),
        average_attempts=safe_mean(quiz_subs["Attempts"]),
        scores=tuple(float(s) for s in scores),
    )


def aggregate_quiz(observations: pd.DataFrame, quiz: int) -> QuizAggregate:
    return _aggregate(_quiz_submissions(submissions(observations), quiz), quiz)


def compute_quiz_aggregates(observations: pd.DataFrame, quizzes: QuizIndexSet) -> list[QuizAggregate]:
    """One :class:`QuizAggregate` per quiz in *quizzes*, in quiz order."""
    subs = submissions(observations)
    return [_aggregate(_quiz_submissions(subs, n), n) for n in quizzes]


def completion_rate(observations: pd.DataFrame, participants: int, quiz_count: int) -> Optional[float]:
    """Share of expected (participant, quiz) slots that hold a submission.

    A submission with an unparseable score still counts as attempted.
    """
    return safe_ratio(len(submissions(observations)), participants * quiz_count)


def summarize_quiz(observations: pd.DataFrame, quiz: int) -> QuizSummary:
    quiz_subs = _quiz_submissions(submissions(observations), quiz)
    scored = quiz_subs[quiz_subs["Score"].notna()]
    scores = scored["Score"].tolist()
    passed, _ = pass_fail_split(scores)
    q1, median, q3 = quartiles(scores)

    return QuizSummary(
        quiz=int(quiz),
        participants=len(scores),
        average_score=safe_mean(scores),
        highest_score=max(scores) if scores else None,
        lowest_score=min(scores) if scores else None,
        pass_rate=safe_ratio(passed, len(scores)),
        average_attempts=safe_mean(quiz_subs["Attempts"]),
        q1=q1,
        median=median,
        q3=q3,
        std_dev=sample_std(scores),
        mode_bucket=mode_bucket(scores),
        grade_distribution=grade_distribution(scores),
        score_ranges=score_range_counts(scores),
        perfect_scorers=int((scored["Score"] == PERFECT_SCORE).sum()),
        first_try_aces=int(((scored["Attempts"] == 1) & (scored["Score"] == PERFECT_SCORE)).sum()),
        complete_misses=int((scored["Score"] == 0).sum()),
        progress_halted=int((scored["Score"] < PERFECT_SCORE).sum()),
    )


def pass_rate_by_attempts(observations: pd.DataFrame, quiz: int) -> pd.DataFrame:
    """Pass rate (score >= pass mark) of scored submissions grouped by attempt count."""
    columns = ["Attempts", "Submissions", "PassRate"]
    quiz_subs = _quiz_submissions(submissions(observations), quiz)
    scored = quiz_subs[quiz_subs["Score"].notna()]
    if scored.empty:
        return pd.DataFrame(columns=columns)

    grouped = (
        scored.assign(_passed=scored["Score"] >= PASS_MARK)
        .groupby("Attempts")
        .agg(Submissions=("_passed", "size"), PassRate=("_passed", "mean"))
        .reset_index()
        .sort_values("Attempts")
        .reset_index(drop=True)
    )
    return grouped[columns]


# ==== SECTION WIDE ====

def summarize_section(
    observations: pd.DataFrame,
    quizzes: QuizIndexSet,
    participants: int | None = None,
) -> SectionOverview:
    """Totals and badge counts across every quiz.

    *participants* defaults to the number of source rows implied by the
    observation count.
    """
    quiz_count = len(quizzes)
    if participants is None:
        participants = len(observations) // quiz_count if quiz_count else 0

    subs = submissions(observations)
    scores = subs["Score"].dropna().tolist()
    passed, _ = pass_fail_split(scores)
    expected = participants * quiz_count

    profiles = build_student_profiles(observations)
    perfect = profiles["PerfectCount"]
    completed = profiles["CompletedCount"]
    champions = sum(is_section_champion(p, c, quiz_count) for p, c in zip(perfect, completed))

    return SectionOverview(
        total_quizzes=quiz_count,
        total_participants=participants,
        total_submissions=len(subs),
        expected_submissions=expected,
        completion_rate=safe_ratio(len(subs), expected),
        average_score=safe_mean(scores),
        pass_rate=safe_ratio(passed, len(scores)),
        average_attempts=safe_mean(subs["Attempts"]),
        grade_distribution=grade_distribution(scores),
        perfect_submissions=sum(1 for s in scores if s == PERFECT_SCORE),
        multi_quiz_masters=int((perfect >= MULTI_QUIZ_MASTER_MIN).sum()),
        section_champions=champions,
        one_shot_winners=int(((subs["Attempts"] == 1) & (subs["Score"] == PERFECT_SCORE)).sum()),
        need_support=int(((completed > 0) & (perfect == 0)).sum()),
    )


def quiz_trends(observations: pd.DataFrame, quizzes: QuizIndexSet) -> pd.DataFrame:
    """One row per quiz with the series plotted on the overview tab."""
    columns = ["Quiz", "Submissions", "AverageScore", "AverageAttempts", "PerfectScores", "PassRate", "StdDev"]
    rows = []
    for agg in compute_quiz_aggregates(observations, quizzes):
        passed, _ = pass_fail_split(agg.scores)
        rows.append(
            {
                "Quiz": agg.quiz,
                "Submissions": agg.submissions,
                "AverageScore": agg.average_score,
                "AverageAttempts": agg.average_attempts,
                "PerfectScores": sum(1 for s in agg.scores if s == PERFECT_SCORE),
                "PassRate": safe_ratio(passed, len(agg.scores)),
                "StdDev": sample_std(agg.scores),
            }
        )
    return pd.DataFrame(rows, columns=columns)
