import streamlit as st
import pandas as pd

from utils import api_request, format_pct, inject_css, kpi_grid, stats_frame

inject_css()
st.title("01 · Upload")
st.caption("Upload a CSV file to start your data analysis journey.")

# ───────────────────────────────
# Flash from previous run
# ───────────────────────────────
flash = st.session_state.pop("flash", None)
if flash:
    st.success(flash)

# ───────────────────────────────
# Upload
# ───────────────────────────────
nonce = st.session_state.get("uploader_nonce", 0)
uploaded = st.file_uploader("Upload CSV", type=["csv"], key=f"upload_{nonce}")


def _upload_to_api(file):
    """Send the file to the API; replaces the current dataset when a session exists"""
    session_id = st.session_state.get("session_id")
    path = f"/datasets/{session_id}/upload" if session_id else "/upload"
    files = {"file": (file.name, file.getvalue(), file.type or "text/csv")}
    with st.spinner("Uploading and parsing..."):
        result = api_request("POST", path, files=files)
    if result is None and session_id and "session_id" not in st.session_state:
        # Session expired meanwhile; start a fresh one
        with st.spinner("Uploading and parsing..."):
            result = api_request("POST", "/upload", files=files)
    return result


if uploaded is not None:
    result = _upload_to_api(uploaded)
    if result:
        n_rows, n_cols = result["shape"]
        st.session_state["session_id"] = result["session_id"]
        st.session_state["uploader_nonce"] = nonce + 1
        st.session_state["flash"] = f"Ingested **{result['filename']}** ({n_rows}×{n_cols})."
        st.rerun()

session_id = st.session_state.get("session_id")
if not session_id:
    st.caption("No dataset yet. Upload a CSV above.")
    st.stop()

dataset = api_request("GET", f"/datasets/{session_id}")
if dataset is None:
    st.stop()

n_rows, n_cols = dataset["shape"]
cells = n_rows * n_cols

# ───────────────────────────────
# KPIs
# ───────────────────────────────
st.subheader(f"Dataset · {dataset['filename']}")
kpi_grid(
    {
        "Rows": n_rows,
        "Columns": n_cols,
        "Duplicate rows": dataset["duplicates"],
        "Missing cells": f"{dataset['missing_cells']} ({format_pct(dataset['missing_cells'] / cells * 100 if cells else 0)})",
    }
)

# ---------- Preview ----------
st.markdown("##### Preview")
preview = api_request("GET", f"/datasets/{session_id}/preview", params={"limit": 10})
if preview:
    df = pd.DataFrame(preview["data"], columns=preview["columns"])
    st.dataframe(df, width="stretch")
    st.caption(f"Showing first {preview['rows_returned']} rows of {preview['total_rows']} rows")

# ---------- Column types & missing ----------
stats = stats_frame(dataset)
c1, c2 = st.columns(2)
with c1:
    st.markdown("##### Column types")
    st.dataframe(stats[["Column", "Type"]], width="stretch", hide_index=True)
with c2:
    st.markdown("##### Missing values")
    st.dataframe(stats[["Column", "Missing"]], width="stretch", hide_index=True)

with st.expander("Dataset statistics", expanded=False):
    st.dataframe(stats, width="stretch", hide_index=True)

if st.button("Discard dataset"):
    api_request("DELETE", f"/datasets/{session_id}")
    st.session_state.pop("session_id", None)
    st.rerun()
