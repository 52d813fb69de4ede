"""Settings for the quiz dashboard.

Values come from ``st.secrets`` when available, then from environment
variables, then from the defaults below.
"""

from __future__ import annotations

import os

import streamlit as st

# ==== BUSINESS CONSTANTS ====
PERFECT_SCORE = 100.0
PASS_MARK = 70.0
GRADE_A_MIN = 90.0
GRADE_C_MIN = 50.0
ATTEMPT_BONUS_CAP = 10
MULTI_QUIZ_MASTER_MIN = 3
HTTP_TIMEOUT = 12

DEFAULT_CSV_PATH = "Tableau.csv"
DEFAULT_CACHE_TTL = 300
DEFAULT_LEADERBOARD_SIZE = 3


def _setting(secret_key: str, env_key: str, default=None):
    try:
        value = st.secrets.get(secret_key)
    except Exception:  # no secrets.toml outside a deployed app
        value = None
    if value in (None, ""):
        value = os.environ.get(env_key)
    if value in (None, ""):
        return default
    return value


def _int_setting(secret_key: str, env_key: str, default: int) -> int:
    try:
        return int(_setting(secret_key, env_key, default))
    except (TypeError, ValueError):
        return default


def load_quiz_config() -> dict:
    """Return the data source and display settings."""
    return {
        "CSV_URL": _setting("quiz_csv_url", "QUIZ_CSV_URL"),
        "CSV_PATH": _setting("quiz_csv_path", "QUIZ_CSV_PATH", DEFAULT_CSV_PATH),
        "CACHE_TTL": _int_setting("cache_ttl", "QUIZ_CACHE_TTL", DEFAULT_CACHE_TTL),
        "LEADERBOARD_SIZE": _int_setting(
            "leaderboard_size", "QUIZ_LEADERBOARD_SIZE", DEFAULT_LEADERBOARD_SIZE
        ),
    }


_CONFIG = load_quiz_config()
CSV_URL = _CONFIG["CSV_URL"]
CSV_PATH = _CONFIG["CSV_PATH"]
CACHE_TTL = _CONFIG["CACHE_TTL"]
LEADERBOARD_SIZE = _CONFIG["LEADERBOARD_SIZE"]
