import requests
import streamlit as st

from config import API_BASE, REQUEST_TIMEOUT
from utils import error_message, inject_css, kpi_grid, load_dataset, require_session

inject_css()
st.title("05 · Download")
st.caption("Download your processed dataset.")

session_id = require_session()
dataset = load_dataset(session_id)

FORMATS = {"CSV": "csv", "JSON": "json", "TSV": "tsv"}

label = st.radio("Select format", list(FORMATS), horizontal=True)
fmt = FORMATS[label]

try:
    response = requests.get(
        f"{API_BASE}/datasets/{session_id}/download",
        params={"format": fmt},
        timeout=REQUEST_TIMEOUT,
    )
except requests.exceptions.ConnectionError:
    st.error(f"Cannot connect to API. Make sure it's running on {API_BASE}")
    st.stop()

if response.status_code != 200:
    st.error(f"Download failed: {error_message(response)}")
    st.stop()

n_rows, n_cols = dataset["shape"]
kpi_grid(
    {
        "Rows": n_rows,
        "Columns": n_cols,
        "Size": f"~{round(len(response.content) / 1024)} KB",
    }
)

if dataset.get("pending"):
    st.warning("A cleaning edit is pending. The download reflects the last applied dataset.")

st.download_button(
    f"Download dataset ({label})",
    data=response.content,
    file_name=f"dataset.{fmt}",
    mime=response.headers.get("content-type", "text/plain"),
    type="primary",
)
