"""
Token Risk Dashboard - Streamlit Application.

Interactive front-end for the token risk pipeline:
- Token address / feed / description form
- Risk score, component breakdown and flag penalties
- Raw producer results (price feed, chain state, audit, sentiment)
- Scoring methodology tables

Run with: streamlit run streamlit_app.py
"""

import json

import pandas as pd
import plotly.graph_objects as go
import streamlit as st

from risk_pipeline import PRODUCERS, assess_token
from thresholds import (
    Rating,
    COMPONENT_WEIGHTS,
    CONCENTRATION_BANDS,
    CONCENTRATION_FLOOR_SCORE,
    FLAG_PENALTIES,
    NEUTRAL_SCORE,
    RATING_SCALE,
    SEVERITY_SCORES,
    VOLATILITY_BANDS,
    VOLATILITY_FLOOR_SCORE,
)

# =============================================================================
# PAGE CONFIG
# =============================================================================

st.set_page_config(
    page_title="Token Risk Dashboard",
    page_icon="🛡️",
    layout="wide",
    initial_sidebar_state="expanded",
)

RATING_COLORS = {
    Rating.SAFE: "#2e7d32",
    Rating.CAUTION: "#f9a825",
    Rating.AVOID: "#c62828",
}


def init_session_state():
    defaults = {
        "report": None,
        "error": None,
    }
    for key, value in defaults.items():
        if key not in st.session_state:
            st.session_state[key] = value


# =============================================================================
# CHARTS
# =============================================================================

def score_gauge(total: int, rating: Rating) -> go.Figure:
    steps = [
        {"range": [band["min"], band["max"]], "color": RATING_COLORS[r], "thickness": 0.3}
        for r, band in RATING_SCALE.items()
    ]
    fig = go.Figure(go.Indicator(
        mode="gauge+number",
        value=total,
        number={"suffix": " / 100"},
        title={"text": rating.value},
        gauge={
            "axis": {"range": [0, 100]},
            "bar": {"color": RATING_COLORS[rating]},
            "steps": steps,
        },
    ))
    fig.update_layout(height=280, margin=dict(l=20, r=20, t=40, b=10))
    return fig


def breakdown_chart(breakdown_df: pd.DataFrame) -> go.Figure:
    fig = go.Figure()
    fig.add_trace(go.Bar(
        x=breakdown_df["Component"],
        y=breakdown_df["Contribution"],
        text=breakdown_df["Contribution"].map(lambda v: f"{v:.2f}"),
        textposition="auto",
        name="Contribution",
    ))
    fig.update_layout(
        height=300,
        yaxis_title="Points",
        margin=dict(l=20, r=20, t=20, b=20),
    )
    return fig


# =============================================================================
# TAB 1: ASSESS
# =============================================================================

def render_tab_assess():
    st.header("⚙️ Assess a Token")

    with st.form("assess_form"):
        token_address = st.text_input("Token address", placeholder="0x...")
        feed_address = st.text_input("Chainlink feed address (optional)", placeholder="0x...")
        col1, col2 = st.columns(2)
        with col1:
            token_name = st.text_input("Token name (optional)")
        with col2:
            token_symbol = st.text_input("Token symbol (optional)")
        description = st.text_area("Project description (optional)")
        contract_source = st.text_area("Contract source or ABI (optional)")
        skip = st.multiselect("Skip producers", PRODUCERS)
        submitted = st.form_submit_button("Run Analysis")

    if submitted:
        try:
            with st.spinner("Running producers..."):
                st.session_state.report = assess_token(
                    token_address,
                    feed_address=feed_address or None,
                    token_name=token_name or None,
                    token_symbol=token_symbol or None,
                    description=description or None,
                    contract_source=contract_source or None,
                    skip=skip,
                )
            st.session_state.error = None
            st.success("Analysis complete - see the **Risk Score** tab.")
        except ValueError as e:
            st.session_state.error = str(e)

    if st.session_state.error:
        st.error(st.session_state.error)


# =============================================================================
# TAB 2: RISK SCORE
# =============================================================================

def render_tab_risk_score():
    st.header("📊 Risk Score")

    report = st.session_state.report
    if report is None:
        st.info("👈 Run an analysis first in the **Assess** tab.")
        return

    score = report.risk_score
    st.markdown(f"**{report.summary}**")
    st.caption(f"Generated at {report.generated_at}")

    col1, col2 = st.columns([1, 2])
    with col1:
        st.plotly_chart(score_gauge(score.total, score.rating), use_container_width=True)
    with col2:
        breakdown_df = pd.DataFrame([
            {
                "Component": name.title(),
                "Score": component.score,
                "Weight": f"{component.weight:.0%}",
                "Contribution": component.contribution,
            }
            for name, component in score.breakdown
        ])
        st.plotly_chart(breakdown_chart(breakdown_df), use_container_width=True)
        st.dataframe(breakdown_df, use_container_width=True, hide_index=True)

    if score.penalties:
        st.warning(f"⚠️ **{len(score.penalties)} flag penalt{'y' if len(score.penalties) == 1 else 'ies'} applied**")
        for name, penalty in score.penalties:
            st.markdown(f"- **+{penalty}** {FLAG_PENALTIES[name]['justification']}")

    st.divider()
    st.caption(report.disclaimer)


# =============================================================================
# TAB 3: PRODUCERS
# =============================================================================

def render_tab_producers():
    st.header("🔬 Producer Results")

    report = st.session_state.report
    if report is None:
        st.info("👈 Run an analysis first in the **Assess** tab.")
        return

    agents = report.to_dict()["agents"]
    labels = {
        "chainlink": "📈 Price Feed",
        "onchain": "⛓️ Chain State",
        "audit": "🔐 Contract Audit",
        "sentiment": "💬 Sentiment",
    }

    for key, label in labels.items():
        data = agents[key]
        with st.expander(label, expanded=False):
            if data is None:
                st.info("Not run")
                continue
            if data.get("error"):
                st.error(data["error"])

            if key == "audit" and data.get("findings"):
                st.dataframe(pd.DataFrame(data["findings"]), use_container_width=True, hide_index=True)
            elif key == "chainlink" and data.get("history"):
                st.metric("Price (USD)", f"${data['price_usd']:.4f}")
                st.metric("7d Volatility", f"{data['volatility_7d_pct']:.2f}%")
                st.dataframe(pd.DataFrame(data["history"]), use_container_width=True, hide_index=True)

            st.code(json.dumps(data, indent=2, ensure_ascii=False), language="json")


# =============================================================================
# TAB 4: METHODOLOGY
# =============================================================================

def render_tab_methodology():
    st.header("📖 Scoring Methodology")

    st.markdown("""
    ```
    FINAL = Σ (component_score × weight) + flag_penalties   (clamped to 0-100)
    ```
    """)
    st.markdown(f"Missing or failed producers score **{NEUTRAL_SCORE}** "
                "(the audit component scores 0 when it did not run).")

    st.subheader("Component Weights")
    st.dataframe(pd.DataFrame([
        {"Component": name.title(), "Weight": f"{cfg['weight']:.0%}", "Justification": cfg["justification"]}
        for name, cfg in COMPONENT_WEIGHTS.items()
    ]), use_container_width=True, hide_index=True)

    col1, col2, col3 = st.columns(3)
    with col1:
        st.subheader("Audit Severity")
        st.dataframe(pd.DataFrame([
            {"Worst Finding": sev.value, "Score": s} for sev, s in SEVERITY_SCORES.items()
        ]), use_container_width=True, hide_index=True)
    with col2:
        st.subheader("Top-10 Concentration")
        rows = [{"Concentration": f"≥ {b['min_pct']}%", "Score": b["score"]} for b in CONCENTRATION_BANDS]
        rows.append({"Concentration": f"< {CONCENTRATION_BANDS[-1]['min_pct']}%", "Score": CONCENTRATION_FLOOR_SCORE})
        st.dataframe(pd.DataFrame(rows), use_container_width=True, hide_index=True)
    with col3:
        st.subheader("7d Volatility")
        rows = [{"Volatility": f"≥ {b['min_pct']}%", "Score": b["score"]} for b in VOLATILITY_BANDS]
        rows.append({"Volatility": f"< {VOLATILITY_BANDS[-1]['min_pct']}%", "Score": VOLATILITY_FLOOR_SCORE})
        st.dataframe(pd.DataFrame(rows), use_container_width=True, hide_index=True)

    st.subheader("Flag Penalties")
    st.dataframe(pd.DataFrame([
        {"Flag": name.replace("_", " ").title(), "Penalty": f"+{cfg['penalty']}", "Justification": cfg["justification"]}
        for name, cfg in FLAG_PENALTIES.items()
    ]), use_container_width=True, hide_index=True)

    st.subheader("Ratings")
    st.dataframe(pd.DataFrame([
        {"Rating": f"{band['icon']} {rating.value}", "Range": f"{band['min']}-{band['max']}", "Meaning": band["description"]}
        for rating, band in RATING_SCALE.items()
    ]), use_container_width=True, hide_index=True)


# =============================================================================
# MAIN APP
# =============================================================================

def main():
    init_session_state()

    with st.sidebar:
        st.title("🛡️ Token Risk Dashboard")
        report = st.session_state.report
        if report is not None:
            score = report.risk_score
            color = RATING_COLORS[score.rating]
            st.markdown(f"**Token:** `{report.token_address[:10]}...`")
            st.markdown(f"**Score:** <span style='color:{color}'>{score.total} ({score.rating.value})</span>",
                        unsafe_allow_html=True)
        st.divider()
        st.caption("v1.0.0")

    tabs = st.tabs([
        "⚙️ Assess",
        "📊 Risk Score",
        "🔬 Producers",
        "📖 Methodology",
    ])

    with tabs[0]:
        render_tab_assess()
    with tabs[1]:
        render_tab_risk_score()
    with tabs[2]:
        render_tab_producers()
    with tabs[3]:
        render_tab_methodology()


if __name__ == "__main__":
    main()
