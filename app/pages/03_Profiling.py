import pandas as pd
import plotly.express as px
import streamlit as st

from utils import api_request, format_pct, inject_css, kpi_grid, require_session

inject_css()
st.title("03 · Profiling")
st.caption("Generate detailed insights about your dataset.")

session_id = require_session()

with st.spinner("Generating profile report…"):
    response = api_request("GET", f"/datasets/{session_id}/profile")
if response is None:
    st.stop()

profile = response["profile"]
ov = profile["overview"]

# ───────────────────────────────────────────────
# Overview
# ───────────────────────────────────────────────
st.subheader("Dataset overview")
kpi_grid(
    {
        "Rows": ov["rows"],
        "Columns": ov["columns"],
        "Missing cells": f"{ov['missing']} ({format_pct(ov['missing_percent'])})",
        "Duplicate rows": ov["duplicates"],
        "Memory usage": f"{ov['memory_kb']} KB",
        "Data types": ", ".join(ov["datatypes"]) or "—",
    }
)

# ───────────────────────────────────────────────
# Variables
# ───────────────────────────────────────────────
st.subheader("Variable analysis")
for var in profile["variables"]:
    with st.expander(f"{var['name']} · {var['type']}", expanded=False):
        if var["type"] == "numeric":
            kpi_grid(
                {
                    "Min": var["min"],
                    "Max": var["max"],
                    "Mean": f"{var['mean']:.2f}",
                    "Std": "N/A" if var["std"] is None else f"{var['std']:.2f}",
                    "Missing": format_pct(var["missing_percent"]),
                }
            )
        else:
            kpi_grid(
                {
                    "Unique": var["unique"],
                    "Most common": var["most_common"] if var["most_common"] is not None else "—",
                    "Frequency": format_pct(var["most_common_percent"]),
                    "Missing": format_pct(var["missing_percent"]),
                }
            )

# ───────────────────────────────────────────────
# Correlations
# ───────────────────────────────────────────────
st.subheader("Correlations (Pearson)")
corr = profile["correlations"]
if not corr["matrix"]:
    st.caption("Need at least two numeric columns for a correlation matrix.")
else:
    corr_df = pd.DataFrame(corr["matrix"], index=corr["columns"], columns=corr["columns"])
    fig = px.imshow(corr_df, text_auto=".2f", aspect="auto", zmin=-1, zmax=1, color_continuous_scale="RdBu")
    fig.update_layout(height=480, margin=dict(l=0, r=0, t=24, b=0))
    st.plotly_chart(fig, config={"responsive": True, "displayModeBar": False})

# ───────────────────────────────────────────────
# Missing values
# ───────────────────────────────────────────────
st.subheader("Missing values")
missing_df = pd.DataFrame(profile["missing"])
if missing_df.empty or missing_df["missing"].sum() == 0:
    st.caption("No missing values detected.")
else:
    fig = px.bar(missing_df, x="column", y="percent_missing", labels={"percent_missing": "% missing"})
    fig.update_layout(height=320)
    st.plotly_chart(fig, config={"responsive": True, "displayModeBar": False})
st.dataframe(missing_df, width="stretch", hide_index=True)
