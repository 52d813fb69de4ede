import importlib
import os
from unittest.mock import patch

import config


def _reload(env):
    with patch.dict(os.environ, env, clear=False):
        return importlib.reload(config)


def test_env_overrides_defaults():
    cfg = _reload(
        {
            "QUIZ_CSV_URL": "http://example.com/quiz.csv",
            "QUIZ_CACHE_TTL": "60",
            "QUIZ_LEADERBOARD_SIZE": "5",
        }
    )
    try:
        assert cfg.CSV_URL == "http://example.com/quiz.csv"
        assert cfg.CACHE_TTL == 60
        assert cfg.LEADERBOARD_SIZE == 5
    finally:
        _reload({})


def test_invalid_numbers_fall_back_to_defaults():
    with patch.dict(os.environ, {"QUIZ_CACHE_TTL": "soon", "QUIZ_LEADERBOARD_SIZE": ""}):
        settings = config.load_quiz_config()
    assert settings["CACHE_TTL"] == config.DEFAULT_CACHE_TTL
    assert settings["LEADERBOARD_SIZE"] == config.DEFAULT_LEADERBOARD_SIZE
    assert settings["CSV_PATH"]
