import streamlit as st
import pandas as pd

from utils import api_request, inject_css, load_dataset, require_session

inject_css()
st.title("02 · Cleaning")
st.caption("Clean and prepare your dataset for analysis.")

session_id = require_session()
dataset = load_dataset(session_id)

flash = st.session_state.pop("flash", None)
if flash:
    st.success(flash)

columns = dataset["columns"]
column_stats = dataset["column_stats"]
missing_cols = [c for c in columns if column_stats[c]["missing"] > 0]

n_rows, n_cols = dataset["shape"]
st.caption(f"📂 Active dataset: `{dataset['filename']}` · {n_rows}×{n_cols}")


def _run_edit(path: str, payload: dict | None = None):
    with st.spinner("Preparing preview..."):
        result = api_request("POST", f"/datasets/{session_id}/clean/{path}", json=payload)
    if result:
        st.rerun()


col_remove, col_dupes, col_fill = st.columns(3)

# ───────────────────────────────
# Remove columns
# ───────────────────────────────
with col_remove:
    st.subheader("Remove columns")
    to_remove = st.multiselect(
        "Columns to remove",
        options=columns,
        format_func=lambda c: f"{c} ({column_stats[c]['dtype']})",
    )
    if st.button("Remove selected columns", disabled=not to_remove, type="primary"):
        _run_edit("remove-columns", {"columns": to_remove})

# ───────────────────────────────
# Duplicates
# ───────────────────────────────
with col_dupes:
    st.subheader("Handle duplicates")
    st.metric("Duplicate rows detected", dataset["duplicates"])
    st.info("Duplicate rows can affect the quality of your analysis. Consider removing them.")
    if st.button("Remove duplicates", disabled=dataset["duplicates"] == 0):
        _run_edit("remove-duplicates")

# ───────────────────────────────
# Fill missing values
# ───────────────────────────────
with col_fill:
    st.subheader("Fill missing values")
    if not missing_cols:
        st.success("No missing values detected in the dataset.")

    rules = {}
    for column in missing_cols:
        stats = column_stats[column]
        numeric = stats["dtype"] == "numeric"
        methods = ["", "constant"] + (["mean", "median"] if numeric else []) + ["mode"]
        labels = {
            "": "Select method",
            "constant": "Constant value",
            "mean": "Mean",
            "median": "Median",
            "mode": "Mode (most frequent)",
        }
        method = st.selectbox(
            f"{column} · {stats['missing']} missing",
            methods,
            format_func=labels.get,
            key=f"fill_method_{column}",
        )
        if not method:
            continue
        rule = {"method": method}
        if method == "constant":
            rule["value"] = st.text_input(
                "Value", key=f"fill_value_{column}", placeholder="Enter value"
            )
        rules[column] = rule

    if st.button("Fill missing values", disabled=not rules):
        _run_edit("fill-missing", {"rules": rules})

# ───────────────────────────────
# Pending preview
# ───────────────────────────────
pending = dataset.get("pending")
if pending:
    st.divider()
    st.subheader("Preview changes")
    st.info(
        f"**{pending['label']}** · result {pending['shape'][0]}×{pending['shape'][1]}. "
        "Review the data and apply to save, or cancel to discard."
    )
    preview_df = pd.DataFrame(pending["rows"], columns=pending["columns"])
    st.dataframe(preview_df, width="stretch", hide_index=True)
    st.caption(f"Showing {len(preview_df)} of {pending['shape'][0]} rows")

    c1, c2, _ = st.columns([1, 1, 4])
    with c1:
        if st.button("Apply changes", type="primary"):
            result = api_request("POST", f"/datasets/{session_id}/pending/confirm")
            if result:
                st.session_state["flash"] = f"Applied: {pending['label']}"
                st.rerun()
    with c2:
        if st.button("Cancel"):
            api_request("DELETE", f"/datasets/{session_id}/pending")
            st.rerun()
