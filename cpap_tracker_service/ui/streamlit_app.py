import os
from datetime import datetime
from pathlib import Path
from typing import Any, Dict, List, Optional

import pandas as pd
import requests
import streamlit as st
from dotenv import load_dotenv

ENV_PATH = Path(__file__).resolve().parents[1] / "config.env"  # cpap_tracker_service/config.env
load_dotenv(dotenv_path=ENV_PATH, override=False)

st.set_page_config(page_title="CPAP Tracker", layout="centered")

# ---------------------------
# Config
# ---------------------------
DEFAULT_API_BASE = os.getenv("CPAP_API_BASE", "http://127.0.0.1:8000")
API_BASE = st.sidebar.text_input("API Base URL", value=DEFAULT_API_BASE)

# ---------------------------
# Helpers (API)
# ---------------------------
def api_get(path: str, params: Optional[Dict[str, Any]] = None) -> Dict[str, Any]:
    url = f"{API_BASE}{path}"
    r = requests.get(url, params=params or {}, timeout=20)
    if r.status_code >= 400:
        raise RuntimeError(f"{r.status_code} {r.text}")
    return r.json()

def api_put(path: str, payload: Dict[str, Any]) -> Dict[str, Any]:
    url = f"{API_BASE}{path}"
    r = requests.put(url, json=payload, timeout=20)
    if r.status_code >= 400:
        raise RuntimeError(f"{r.status_code} {r.text}")
    return r.json()

# ---------------------------
# Session state
# ---------------------------
if "entries" not in st.session_state:
    st.session_state.entries = []
if "loaded" not in st.session_state:
    st.session_state.loaded = False

def load_entries():
    # on failure keep whatever list we already show
    try:
        resp = api_get("/entries")
    except Exception as e:
        st.error(f"Could not load entries: {e}")
        return
    st.session_state.entries = resp.get("entries", [])
    st.session_state.loaded = True
    if resp.get("warning"):
        st.warning(resp["warning"])

def save_entry(date_text: str, time_text: str):
    updated: List[Dict[str, str]] = st.session_state.entries + [{"date": date_text, "time": time_text}]
    st.session_state.entries = updated
    try:
        api_put("/entries", {"entries": updated})
        st.success("Saved.")
    except Exception as e:
        st.error(f"Could not save entries: {e}")

if not st.session_state.loaded:
    load_entries()

# ---------------------------
# UI
# ---------------------------
st.title("CPAP Tracker")

col_date, col_time = st.columns(2)
with col_date:
    date_text = st.text_input("Date (YYYY-MM-DD)", value=datetime.now().strftime("%Y-%m-%d"), key="date_text")
with col_time:
    time_text = st.text_input("Time (HH:MM)", value=datetime.now().strftime("%H:%M"), key="time_text")

if st.button("Save CPAP Usage", key="save", use_container_width=True):
    save_entry(date_text, time_text)

st.subheader("Saved Entries")
if st.button("Reload", key="reload"):
    load_entries()

if st.session_state.entries:
    st.dataframe(
        pd.DataFrame(st.session_state.entries, columns=["date", "time"]),
        use_container_width=True,
        hide_index=True,
    )
else:
    st.caption("No entries yet.")
