"""
Value types for quiz analytics
==============================

Immutable records passed between the schema detector, the aggregator and the
dashboard. Observation-level and leaderboard data stay in pandas frames; the
types here hold the per-dataset and per-quiz summaries.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Dict, Iterator, Optional, Tuple


@dataclass(frozen=True)
class QuizIndexSet:
    """Ascending, de-duplicated quiz numbers discovered from a header."""

    indices: Tuple[int, ...] = ()

    def __post_init__(self):
        object.__setattr__(self, "indices", tuple(sorted({int(i) for i in self.indices})))

    def __iter__(self) -> Iterator[int]:
        return iter(self.indices)

    def __len__(self) -> int:
        return len(self.indices)

    def __contains__(self, quiz) -> bool:
        return quiz in self.indices

    def __bool__(self) -> bool:
        return bool(self.indices)


@dataclass(frozen=True)
class QuizAggregate:
    quiz: int
    submissions: int
    average_score: Optional[float]
    average_attempts: Optional[float]
    scores: Tuple[float, ...] = ()


@dataclass(frozen=True)
class QuizSummary:
    """Statistics for one selected quiz, computed over its submissions."""

    quiz: int
    participants: int
    average_score: Optional[float]
    highest_score: Optional[float]
    lowest_score: Optional[float]
    pass_rate: Optional[float]
    average_attempts: Optional[float]
    q1: Optional[float]
    median: Optional[float]
    q3: Optional[float]
    std_dev: float
    mode_bucket: Optional[int]
    grade_distribution: Dict[str, int] = field(default_factory=dict)
    score_ranges: Dict[str, int] = field(default_factory=dict)
    perfect_scorers: int = 0
    first_try_aces: int = 0
    complete_misses: int = 0
    progress_halted: int = 0


@dataclass(frozen=True)
class SectionOverview:
    """Whole-dataset totals and badge counts."""

    total_quizzes: int
    total_participants: int
    total_submissions: int
    expected_submissions: int
    completion_rate: Optional[float]
    average_score: Optional[float]
    pass_rate: Optional[float]
    average_attempts: Optional[float]
    grade_distribution: Dict[str, int] = field(default_factory=dict)
    perfect_submissions: int = 0
    multi_quiz_masters: int = 0
    section_champions: int = 0
    one_shot_winners: int = 0
    need_support: int = 0
