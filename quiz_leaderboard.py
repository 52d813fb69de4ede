"""Top performers of a single quiz, ranked by efficiency."""

from __future__ import annotations

import pandas as pd

from config import ATTEMPT_BONUS_CAP, LEADERBOARD_SIZE, PERFECT_SCORE
from quiz_observations import submissions

LEADERBOARD_COLUMNS = ["Rank", "Name", "Email", "Score", "Attempts", "EfficiencyScore"]


def efficiency_score(score: float, attempts: float) -> float:
    """Score per attempt; a perfect score instead earns 100 plus a bonus for fewer attempts.

    The perfect-score range [100, 109] sits above any non-perfect ratio.
    """
    if score == PERFECT_SCORE:
        return PERFECT_SCORE + (ATTEMPT_BONUS_CAP - min(attempts, ATTEMPT_BONUS_CAP))
    return score / attempts


def compute_quiz_leaderboard(
    observations: pd.DataFrame,
    quiz: int,
    top_n: int = LEADERBOARD_SIZE,
) -> pd.DataFrame:
    """Rank the scored submissions of *quiz* and keep the best *top_n*.

    Order: efficiency descending, then score descending, then attempts
    ascending; remaining ties keep observation order.
    """
    if top_n < 0:
        raise ValueError("top_n must be zero or positive")

    subs = submissions(observations)
    eligible = subs[(subs["Quiz"] == quiz) & subs["Score"].notna()].copy()
    if eligible.empty:
        return pd.DataFrame(columns=LEADERBOARD_COLUMNS)

    eligible["EfficiencyScore"] = [
        efficiency_score(s, a) for s, a in zip(eligible["Score"], eligible["Attempts"])
    ]
    eligible["_order"] = range(len(eligible))

    ranked = (
        eligible.sort_values(
            ["EfficiencyScore", "Score", "Attempts", "_order"],
            ascending=[False, False, True, True],
        )
        .head(top_n)
        .reset_index(drop=True)
    )
    ranked.insert(0, "Rank", ranked.index + 1)
    return ranked[LEADERBOARD_COLUMNS]
