# scores_loading.py
from __future__ import annotations

import io
import logging
from pathlib import Path

import pandas as pd
import requests
import streamlit as st

from config import CACHE_TTL, CSV_PATH, CSV_URL, HTTP_TIMEOUT
from utils import col_lookup

_HEADERS = {
    "Cache-Control": "no-cache",
    "Pragma": "no-cache",
    "User-Agent": "Mozilla/5.0 (compatible; quiz-dashboard/1.0; +streamlit)",
}


def read_quiz_csv(text: str) -> pd.DataFrame:
    """Parse a quiz export with every cell kept as text; empty cells become ``""``."""
    df = pd.read_csv(
        io.StringIO(text),
        dtype=str,
        keep_default_na=False,
        skip_blank_lines=True,
    )
    df.columns = [str(c).strip() for c in df.columns]

    # Canonical spelling for the identity columns
    ren = {}
    for canon in ("Name", "Email"):
        actual = col_lookup(df.columns, canon)
        if actual and actual != canon and canon not in df.columns:
            ren[actual] = canon
    return df.rename(columns=ren)


@st.cache_data(ttl=CACHE_TTL, show_spinner=False)
def fetch_quiz_csv(url: str) -> pd.DataFrame:
    resp = requests.get(url, timeout=HTTP_TIMEOUT, headers=_HEADERS)
    resp.raise_for_status()
    txt = resp.text
    if "<html" in txt[:512].lower():
        raise ValueError(
            "Expected CSV but received HTML. Ensure the sheet is shared "
            "(Anyone with the link can view) or published as CSV."
        )
    return read_quiz_csv(txt)


@st.cache_data(ttl=CACHE_TTL, show_spinner=False)
def read_local_quiz_csv(path: str) -> pd.DataFrame:
    return read_quiz_csv(Path(path).read_text(encoding="utf-8-sig"))


def load_quiz_rows(
    *,
    url: str | None = CSV_URL,
    path: str | None = CSV_PATH,
    version: int | None = None,
) -> pd.DataFrame:
    """Load the raw submissions export, preferring *url* over *path*.

    Failures are logged and yield an empty frame so callers can show "no data".
    *version* only exists to bust the cache from the dashboard.
    """
    try:
        if url:
            sep = "&" if "?" in url else "?"
            df = fetch_quiz_csv(f"{url}{sep}v={version or 0}")
        elif path:
            df = read_local_quiz_csv(str(path))
        else:
            logging.warning("No quiz CSV source configured")
            return pd.DataFrame()
    except (requests.RequestException, ValueError, OSError) as e:
        logging.exception("Failed to load quiz submissions: %s", e)
        return pd.DataFrame()

    logging.info("Loaded %d submission rows", len(df))
    return df


def rows_from_frame(df: pd.DataFrame) -> list[dict]:
    """Ordered row mappings (column -> text) for the flattener."""
    return df.to_dict("records")


def clear_quiz_cache():
    fetch_quiz_csv.clear()
    read_local_quiz_csv.clear()
