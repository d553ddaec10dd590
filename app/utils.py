import pandas as pd
import requests
import streamlit as st

from config import API_BASE, REQUEST_TIMEOUT


def format_pct(x: float | None) -> str:
    """Format a value that is already a percentage"""
    if x is None:
        return "N/A"
    return f"{x:.1f}%"


def format_num(x) -> str:
    if x is None:
        return "N/A"
    if isinstance(x, float):
        return f"{x:.2f}"
    return str(x)


# ───────────────────────────────
# API access
# ───────────────────────────────
def error_message(response: requests.Response) -> str:
    """Pull a readable message out of an API error response"""
    try:
        detail = response.json().get("detail", "Unknown error")
    except ValueError:
        return f"HTTP {response.status_code}"
    if isinstance(detail, dict):
        return detail.get("message", str(detail))
    if isinstance(detail, list):
        return "; ".join(d.get("msg", str(d)) for d in detail)
    return str(detail)


def api_request(method: str, path: str, **kwargs) -> dict | None:
    """Call the API; errors are shown in the page and None is returned"""
    try:
        response = requests.request(
            method, f"{API_BASE}{path}", timeout=REQUEST_TIMEOUT, **kwargs
        )
    except requests.exceptions.ConnectionError:
        st.error(f"Cannot connect to API. Make sure it's running on {API_BASE}")
        return None

    if response.status_code == 404 and path.startswith("/datasets/"):
        # Session expired on the server side
        st.session_state.pop("session_id", None)
    if response.status_code >= 400:
        st.error(error_message(response))
        return None
    return response.json()


def require_session() -> str:
    """Active session id, or stop the page with a pointer to the upload page"""
    session_id = st.session_state.get("session_id")
    if not session_id:
        st.warning("No dataset available. Go to **01 · Upload** to upload a CSV.")
        st.stop()
    return session_id


def load_dataset(session_id: str) -> dict:
    data = api_request("GET", f"/datasets/{session_id}")
    if data is None:
        st.stop()
    return data


def stats_frame(dataset: dict) -> pd.DataFrame:
    rows = []
    for column in dataset["columns"]:
        s = dataset["column_stats"][column]
        numeric = s["dtype"] == "numeric"
        rows.append(
            {
                "Column": column,
                "Type": s["dtype"],
                "Min": format_num(s.get("min")) if numeric else "N/A",
                "Max": format_num(s.get("max")) if numeric else "N/A",
                "Mean": format_num(s.get("mean")) if numeric else "N/A",
                "Unique": "N/A" if numeric else s.get("unique"),
                "Missing": s["missing"],
            }
        )
    return pd.DataFrame(rows)


# ───────────────────────────────
# Layout helpers
# ───────────────────────────────
PAGE_CSS = """
<style>
  div[data-testid="stMetric"] {
    background: var(--secondary-background-color);
    border-radius: 12px;
    padding: 10px 14px;
  }
  div[data-testid="stMetricValue"] {
    font-size: 1.3rem;
  }
</style>
"""


def inject_css():
    st.markdown(PAGE_CSS, unsafe_allow_html=True)


def kpi_grid(items: dict[str, str | int | float], per_row: int = 4):
    """Label/value pairs as rows of metric cards"""
    entries = list(items.items())
    for start in range(0, len(entries), per_row):
        chunk = entries[start:start + per_row]
        for column, (label, value) in zip(st.columns(len(chunk)), chunk):
            column.metric(label, value)
