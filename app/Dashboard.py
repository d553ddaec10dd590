import streamlit as st

from utils import api_request, inject_css

st.set_page_config(page_title="CSV Cleaning Dashboard", layout="wide", page_icon="📊")
inject_css()

# ──────────────────────────────────────────────────────────────────────────────
# Introduction
# ──────────────────────────────────────────────────────────────────────────────
STEPS = [
    ("pages/01_Upload.py", "Upload", "📤",
     "Upload a CSV file. Column types, missing values and duplicate rows are detected on the fly."),
    ("pages/02_Cleaning.py", "Cleaning", "🧹",
     "Remove columns, drop duplicate rows or fill missing values. Every change is previewed before it is applied."),
    ("pages/03_Profiling.py", "Profiling", "🔎",
     "Overview, per-variable statistics, Pearson correlations and missing-value breakdown."),
    ("pages/04_Visualization.py", "Visualization", "📈",
     "Histograms for numeric columns and bar or pie charts for categorical ones."),
    ("pages/05_Download.py", "Download", "💾",
     "Export the current table as CSV, JSON or TSV."),
]

st.title("CSV Cleaning Dashboard")
st.caption("Upload a dataset, inspect its statistics, clean it step by step and download the result.")

session_id = st.session_state.get("session_id")
if session_id:
    dataset = api_request("GET", f"/datasets/{session_id}")
    if dataset:
        rows, cols = dataset["shape"]
        st.info(f"Active dataset: `{dataset['filename']}` ({rows} rows × {cols} columns)")

for i, (page, title, icon, text) in enumerate(STEPS, start=1):
    with st.container(border=True):
        st.page_link(page, label=f"{i:02d} · {title}", icon=icon)
        st.caption(text)
