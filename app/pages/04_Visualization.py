import pandas as pd
import plotly.express as px
import streamlit as st

from utils import api_request, inject_css, load_dataset, require_session

inject_css()
st.title("04 · Visualization")

session_id = require_session()
dataset = load_dataset(session_id)

st.caption(f"📂 Active dataset: `{dataset['filename']}`")

stats = dataset["column_stats"]
num_cols = [c for c in dataset["columns"] if stats[c]["dtype"] == "numeric"]
cat_cols = [c for c in dataset["columns"] if stats[c]["dtype"] != "numeric"]

tab_num, tab_cat = st.tabs(["Numeric", "Categorical"])

# ───────────────────────────────
# Numeric tab
# ───────────────────────────────
with tab_num:
    if not num_cols:
        st.caption("No numeric columns detected.")
    else:
        c1, c2 = st.columns([2, 1])
        with c1:
            col = st.selectbox("Numeric column", num_cols)
        with c2:
            bins = st.slider("Bins", 5, 80, 20)

        data = api_request(
            "GET",
            f"/datasets/{session_id}/distribution",
            params={"column": col, "bins": bins},
        )
        if data:
            hist_df = pd.DataFrame(data["histogram"])
            fig = px.bar(
                hist_df,
                x="bin_start",
                y="count",
                labels={"bin_start": col, "count": "Frequency"},
            )
            fig.update_traces(marker_line_width=0)
            fig.update_layout(height=380, bargap=0.05, showlegend=False)
            st.plotly_chart(fig, config={"responsive": True, "displayModeBar": False})

            s = stats[col]
            st.caption(
                f"min {s['min']} · max {s['max']} · mean {s['mean']:.2f} · {s['missing']} missing"
            )

# ───────────────────────────────
# Categorical tab
# ───────────────────────────────
with tab_cat:
    if not cat_cols:
        st.caption("No categorical columns detected.")
    else:
        c1, c2 = st.columns([2, 1])
        with c1:
            colc = st.selectbox("Categorical column", cat_cols)
        with c2:
            top_k = st.slider("Show top K categories", 5, 50, 20)

        data = api_request(
            "GET",
            f"/datasets/{session_id}/distribution",
            params={"column": colc, "top_k": top_k},
        )
        if data:
            vc = pd.DataFrame(data["value_counts"], columns=["value", "count"])
            if vc.empty:
                st.caption("Column has no values.")
            else:
                chart = st.radio("Chart", ["Bar", "Pie"], horizontal=True)
                if chart == "Bar":
                    fig = px.bar(vc, x="value", y="count", labels={"value": colc})
                else:
                    fig = px.pie(vc, names="value", values="count")
                fig.update_layout(height=360)
                st.plotly_chart(fig, config={"responsive": True, "displayModeBar": False})
