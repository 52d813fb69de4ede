import math
from pathlib import Path

import pandas as pd
import pytest

from quiz_models import QuizIndexSet
from quiz_observations import flatten_dataset, flatten_rows
from quiz_stats import (
    aggregate_quiz,
    completion_rate,
    compute_quiz_aggregates,
    grade_distribution,
    mode_bucket,
    pass_fail_split,
    pass_rate_by_attempts,
    quartiles,
    quiz_trends,
    safe_mean,
    safe_ratio,
    sample_std,
    score_range_counts,
    summarize_quiz,
    summarize_section,
)
from scores_loading import read_quiz_csv, rows_from_frame


def _load_sample():
    text = (Path(__file__).parent / "data" / "quiz_sample.csv").read_text()
    return flatten_dataset(rows_from_frame(read_quiz_csv(text)))


def test_safe_mean_and_ratio_return_none_without_data():
    assert safe_mean([]) is None
    assert safe_mean([None, float("nan")]) is None
    assert safe_mean([0, None, 4]) == 2.0
    assert safe_ratio(1, 0) is None
    assert safe_ratio(0, 4) == 0.0


def test_quartiles_use_nearest_rank_without_interpolation():
    assert quartiles([40, 10, 30, 20]) == (20, 30, 40)
    assert quartiles([7]) == (7, 7, 7)
    assert quartiles([]) == (None, None, None)


def test_sample_std_is_bessel_corrected():
    assert sample_std([]) == 0.0
    assert sample_std([50]) == 0.0
    assert sample_std([2, 4, 4, 4, 5, 5, 7, 9]) == pytest.approx(math.sqrt(32 / 7))


def test_mode_bucket_prefers_higher_bucket_on_ties():
    assert mode_bucket([15, 25]) == 20
    assert mode_bucket([81, 85, 100]) == 80
    assert mode_bucket([]) is None


def test_grade_bands_and_pass_split():
    scores = [100, 90, 89.9, 70, 69, 50, 49, 0]
    assert grade_distribution(scores) == {"Excellent": 2, "Good": 2, "Average": 2, "Fail": 2}
    assert pass_fail_split(scores) == (4, 4)
    assert score_range_counts([0, 20, 21, 60, 61, 80, 81, 100]) == {
        "0-20%": 2,
        "21-40%": 1,
        "41-60%": 1,
        "61-80%": 2,
        "81-100%": 2,
    }


def test_quiz_aggregates_on_sample():
    quizzes, obs = _load_sample()
    aggs = compute_quiz_aggregates(obs, quizzes)

    assert [a.quiz for a in aggs] == [1, 2, 3]
    q1 = aggs[0]
    # Dan's unparseable score counts as a submission but not in the score mean
    assert q1.submissions == 4
    assert q1.scores == (100.0, 100.0, 80.0)
    assert q1.average_score == pytest.approx(280 / 3)
    assert q1.average_attempts == pytest.approx(7 / 4)

    q3 = aggs[2]
    assert q3.scores == (100.0, 100.0, 0.0)
    assert q3.average_attempts == pytest.approx(7 / 3)
    assert aggregate_quiz(obs, 3) == q3


def test_zero_attempts_are_excluded_from_means():
    rows = [
        {"Name": "A", "Email": "", "Quiz1_Score": "100", "Quiz1_Total attempts": "0"},
        {"Name": "B", "Email": "", "Quiz1_Score": "40", "Quiz1_Total attempts": "2"},
    ]
    obs = flatten_rows(rows, QuizIndexSet((1,)))
    agg = aggregate_quiz(obs, 1)
    assert agg.submissions == 1
    assert agg.average_score == 40.0
    assert completion_rate(obs, participants=2, quiz_count=1) == 0.5


def test_quiz_without_submissions_has_null_means():
    rows = [{"Name": "A", "Email": "", "Quiz1_Score": "", "Quiz1_Total attempts": ""}]
    obs = flatten_rows(rows, QuizIndexSet((1,)))
    agg = aggregate_quiz(obs, 1)
    assert agg.submissions == 0
    assert agg.average_score is None
    assert agg.average_attempts is None

    summary = summarize_quiz(obs, 1)
    assert summary.participants == 0
    assert summary.pass_rate is None
    assert summary.highest_score is None
    assert summary.std_dev == 0.0


def test_summarize_quiz_on_sample():
    _, obs = _load_sample()
    summary = summarize_quiz(obs, 1)

    assert summary.participants == 3
    assert summary.highest_score == 100.0
    assert summary.lowest_score == 80.0
    assert summary.pass_rate == 1.0
    assert (summary.q1, summary.median, summary.q3) == (80.0, 100.0, 100.0)
    assert summary.std_dev == pytest.approx(math.sqrt(400 / 3))
    assert summary.mode_bucket == 100
    assert summary.perfect_scorers == 2
    assert summary.first_try_aces == 1
    assert summary.complete_misses == 0
    assert summary.progress_halted == 1


def test_pass_rate_by_attempts():
    _, obs = _load_sample()
    table = pass_rate_by_attempts(obs, 2)
    # Quiz 2: Alice 100/2, Bob 50/2, Cara 100/1
    assert table["Attempts"].tolist() == [1.0, 2.0]
    assert table["Submissions"].tolist() == [1, 2]
    assert table["PassRate"].tolist() == [1.0, 0.5]
    assert pass_rate_by_attempts(obs, 9).empty


def test_summarize_section_on_sample():
    quizzes, obs = _load_sample()
    overview = summarize_section(obs, quizzes)

    assert overview.total_quizzes == 3
    assert overview.total_participants == 5
    assert overview.total_submissions == 10
    assert overview.expected_submissions == 15
    assert overview.completion_rate == pytest.approx(10 / 15)
    assert overview.average_score == pytest.approx(730 / 9)
    assert overview.pass_rate == pytest.approx(7 / 9)
    assert overview.average_attempts == pytest.approx(1.9)
    assert overview.grade_distribution == {"Excellent": 6, "Good": 1, "Average": 1, "Fail": 1}
    assert overview.perfect_submissions == 6
    assert overview.multi_quiz_masters == 1
    assert overview.section_champions == 1
    assert overview.one_shot_winners == 3
    assert overview.need_support == 1


def test_quiz_trends_has_one_row_per_quiz():
    quizzes, obs = _load_sample()
    trends = quiz_trends(obs, quizzes)
    assert trends["Quiz"].tolist() == [1, 2, 3]
    assert trends["PerfectScores"].tolist() == [2, 2, 2]
    assert trends["PassRate"].tolist() == pytest.approx([1.0, 2 / 3, 2 / 3])


def test_empty_dataset_yields_empty_results():
    quizzes, obs = flatten_dataset([])
    assert compute_quiz_aggregates(obs, quizzes) == []
    assert quiz_trends(obs, quizzes).empty

    overview = summarize_section(obs, quizzes)
    assert overview.total_submissions == 0
    assert overview.completion_rate is None
    assert overview.average_score is None
    assert overview.section_champions == 0


def test_aggregation_does_not_mutate_observations():
    quizzes, obs = _load_sample()
    before = obs.copy()
    compute_quiz_aggregates(obs, quizzes)
    summarize_section(obs, quizzes)
    summarize_quiz(obs, 1)
    pd.testing.assert_frame_equal(obs, before)
