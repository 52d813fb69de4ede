"""Section-wide leaderboard: who holds a perfect score on every quiz."""

from __future__ import annotations

import pandas as pd

from config import LEADERBOARD_SIZE, PERFECT_SCORE
from quiz_models import QuizIndexSet
from quiz_observations import submissions

PROFILE_COLUMNS = [
    "StudentKey",
    "Name",
    "Email",
    "CompletedQuizzes",
    "PerfectCount",
    "TotalAttempts",
    "CompletedCount",
]

CHAMPION_COLUMNS = [
    "Rank",
    "Name",
    "Email",
    "IsSectionChampion",
    "PerfectCount",
    "TotalQuizzes",
    "TotalAttempts",
    "CompletedCount",
]


def build_student_profiles(observations: pd.DataFrame) -> pd.DataFrame:
    """Aggregate submissions per student key, in order of first appearance.

    Students without a single submission are left out.
    """
    subs = submissions(observations)
    if subs.empty:
        return pd.DataFrame(columns=PROFILE_COLUMNS)

    profiles = []
    for key, group in subs.groupby("StudentKey", sort=False):
        scored = group[group["Score"].notna()]
        completed = frozenset(int(q) for q in scored["Quiz"])
        profiles.append(
            {
                "StudentKey": key,
                "Name": group["Name"].iat[0],
                "Email": group["Email"].iat[0],
                "CompletedQuizzes": completed,
                "PerfectCount": int((scored["Score"] == PERFECT_SCORE).sum()),
                "TotalAttempts": float(group["Attempts"].sum()),
                "CompletedCount": len(completed),
            }
        )
    return pd.DataFrame(profiles, columns=PROFILE_COLUMNS)


def is_section_champion(perfect_count: int, completed_count: int, quiz_count: int) -> bool:
    """A champion holds a recorded 100 on every quiz of the section."""
    return quiz_count > 0 and perfect_count == quiz_count and completed_count == quiz_count


def compute_section_champions(
    observations: pd.DataFrame,
    quizzes: QuizIndexSet,
    top_n: int = LEADERBOARD_SIZE,
) -> pd.DataFrame:
    """Rank students across the whole section and keep the best *top_n*.

    Champions come first, fewest total attempts leading. Everyone else is
    ordered by perfect scores, then completed quizzes (both descending), then
    total attempts ascending.
    """
    if top_n < 0:
        raise ValueError("top_n must be zero or positive")

    profiles = build_student_profiles(observations)
    if profiles.empty:
        return pd.DataFrame(columns=CHAMPION_COLUMNS)

    quiz_count = len(quizzes)
    profiles["TotalQuizzes"] = quiz_count
    profiles["IsSectionChampion"] = [
        is_section_champion(p, c, quiz_count)
        for p, c in zip(profiles["PerfectCount"], profiles["CompletedCount"])
    ]
    profiles["_order"] = range(len(profiles))

    # Champions share PerfectCount and CompletedCount, so within that tier
    # only TotalAttempts separates them.
    ranked = (
        profiles.sort_values(
            ["IsSectionChampion", "PerfectCount", "CompletedCount", "TotalAttempts", "_order"],
            ascending=[False, False, False, True, True],
        )
        .head(top_n)
        .reset_index(drop=True)
    )
    ranked.insert(0, "Rank", ranked.index + 1)
    return ranked[CHAMPION_COLUMNS]
