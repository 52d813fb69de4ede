# pages/02_Leaderboards.py
from __future__ import annotations

import os, sys
import streamlit as st

# --- Make imports work when this file lives in /pages ---
APP_DIR = os.path.abspath(os.path.join(os.path.dirname(__file__), ".."))
if APP_DIR not in sys.path:
    sys.path.insert(0, APP_DIR)

# Imports from our modules
from config import LEADERBOARD_SIZE
from dashboard import build_dataset, cached_quiz_leaderboard, cached_section_champions, refresh_all
from scores_loading import load_quiz_rows

st.set_page_config(page_title="Leaderboards", page_icon="🏆", layout="wide")
st.title("🏆 Quiz Leaderboards")

if "ver" not in st.session_state:
    st.session_state["ver"] = 0

# Filters
with st.container():
    col1, col2 = st.columns([1.5, 0.8])
    with col1:
        top_n = st.number_input("Students to show", min_value=1, value=LEADERBOARD_SIZE, step=1)
    with col2:
        st.button("🔄 Refresh", use_container_width=True, on_click=refresh_all)

raw = load_quiz_rows(version=st.session_state["ver"])
if raw is None or raw.empty:
    st.warning("No data found. Check the CSV path or URL in the settings.")
    st.stop()

quizzes, observations = build_dataset(raw)
if not quizzes:
    st.warning("No quiz columns detected.")
    st.stop()

tabs = st.tabs(["Section Champions"] + [f"Quiz {n}" for n in quizzes])

# Section-wide
with tabs[0]:
    st.subheader("Section Champions")
    lb = cached_section_champions(observations, quizzes.indices, int(top_n))
    if lb.empty:
        st.info("No submissions yet.")
    else:
        st.dataframe(lb, use_container_width=True, hide_index=True)
        st.download_button(
            "⬇️ Download CSV (Section Champions)",
            data=lb.to_csv(index=False).encode("utf-8"),
            file_name="section_champions.csv",
            mime="text/csv",
        )

# Per-quiz tabs
for i, quiz in enumerate(quizzes, start=1):
    with tabs[i]:
        st.subheader(f"Quiz {quiz}")
        lb = cached_quiz_leaderboard(observations, quiz, int(top_n))
        if lb.empty:
            st.info("No submissions for this quiz (attempts must be > 0).")
            continue
        st.dataframe(lb, use_container_width=True, hide_index=True)
        st.download_button(
            f"⬇️ Download CSV (Quiz {quiz})",
            data=lb.to_csv(index=False).encode("utf-8"),
            file_name=f"leaderboard_quiz_{quiz}.csv",
            mime="text/csv",
        )
