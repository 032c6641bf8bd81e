"""Streamlit entry point for the residuals portfolio dashboard."""

from __future__ import annotations

import logging

import pandas as pd
import streamlit as st
from residuals import changes, config, export, insights, kpis, loader, records, synth, utils, valuation, viz

logger = logging.getLogger(__name__)

SAMPLE_SOURCE = "Sample portfolio"
REPORT_SOURCE = "Report files"

TABLE_COLUMNS = {
    "merchant_name": "Merchant",
    "merchant_id": "MID",
    "agent": "Agent",
    "pricing_model": "Pricing",
    "sales_volume": "Volume",
    "transaction_count": "Transactions",
    "net_residual": "Net Residual",
}

TIER_LABELS = {3: "⭐⭐⭐", 2: "⭐⭐", 1: "⭐"}


def _secret_overrides() -> dict[str, str]:
    """Prefer secrets.toml values over environment variables when present."""

    overrides: dict[str, str] = {}
    for key in ("RESIDUALS_DATA_DIR", "RESIDUALS_PERIODS", "RESIDUALS_LOG_LEVEL"):
        try:
            value = st.secrets.get(key)
        except FileNotFoundError:
            value = None
        if value:
            overrides[key] = str(value)
    return overrides


@st.cache_data(show_spinner="Loading residual reports...")
def _load_reports(_settings: config.Settings, cache_key: str) -> records.Portfolio:
    return loader.load_portfolio(_settings)


@st.cache_data(show_spinner=False)
def _load_sample(merchants: int, seed: int) -> records.Portfolio:
    return synth.sample_portfolio(merchants, seed=seed)


def _table(frame: pd.DataFrame) -> pd.DataFrame:
    view = frame[list(TABLE_COLUMNS)].rename(columns=TABLE_COLUMNS).copy()
    view["Merchant"] = view["Merchant"].where(view["Merchant"] != "", "Unknown")
    view["MID"] = view["MID"].str.slice(0, 12)
    return view


def _render_kpis(payload: kpis.KpiPayload) -> None:
    current = payload["current"]
    deltas = payload["deltas"]
    previous = payload["previous"]

    cols = st.columns(4)
    cols[0].metric(
        "Total residuals",
        utils.format_currency_short(current["total_residual"]),
        utils.format_delta(deltas["residual_pct"]),
        delta_color="normal" if payload["has_comparison"] else "off",
    )
    cols[1].metric(
        "Active merchants",
        utils.format_number(current["active_merchants"]),
        utils.format_delta(deltas["merchants"], percentage=False),
        delta_color="normal" if payload["has_comparison"] else "off",
    )
    cols[2].metric(
        "Avg per merchant",
        utils.format_currency_short(current["avg_per_merchant"]),
        utils.format_delta(deltas["avg_pct"]),
        delta_color="normal" if payload["has_comparison"] else "off",
    )
    cols[3].metric(
        "Processing volume",
        utils.format_currency_short(current["total_volume"]),
        utils.format_delta(deltas["volume_pct"]),
        delta_color="normal" if payload["has_comparison"] else "off",
    )

    if previous is not None:
        st.caption(
            f"vs {utils.format_currency_short(previous['total_residual'])} residuals · "
            f"{previous['active_merchants']} merchants · "
            f"{utils.format_currency_short(previous['total_volume'])} volume in the previous period"
        )
    else:
        st.caption("No comparison period for this view.")


def _render_valuation(result: valuation.Valuation) -> None:
    st.header("Portfolio valuation")

    if not result["available"]:
        cols = st.columns(2)
        cols[0].metric("Merchants", result["active_merchants"])
        cols[1].metric("Negative merchants", result["negative_merchants"])
        st.info(
            "Valuation requires single-month data. Select a specific month to view "
            "base multiple, attrition analysis and concentration risk."
        )
        return

    cols = st.columns(4)
    cols[0].metric("Portfolio value", utils.format_currency(result["market"]["value"]))
    for col, (label, key) in zip(cols[1:], (("Conservative", "conservative"), ("Market", "market"), ("Premium", "premium"))):
        band = result[key]
        col.metric(f"{label} ({band['multiple']}x)", utils.format_currency(band["value"]))

    attrition_known = result["attrition_rate"] is not None
    breakdown = pd.DataFrame(
        [
            ("Monthly residuals", utils.format_currency(result["total_residual"]), "Base calculation metric"),
            ("Total merchants", str(result["active_merchants"]), "All unique MIDs in portfolio"),
            (
                "Avg residual/merchant",
                utils.format_currency(result["avg_per_merchant"]),
                f"Base multiple: {result['base_multiple']}x",
            ),
            (
                "Lost merchants",
                f"{result['lost_merchants']} merchants" if attrition_known else "N/A",
                "MIDs from the previous month not seen this month" if attrition_known else "Needs previous month data",
            ),
            (
                "Attrition rate",
                f"{result['attrition_rate']:.1f}%" if attrition_known else "N/A",
                (
                    f"{result['lost_merchants']} of {result['previous_merchants']} lost | "
                    if attrition_known
                    else ""
                )
                + f"Penalty: -{result['attrition_penalty']}x",
            ),
            (
                "Concentration (top 20%)",
                f"{result['concentration_pct']:.1f}%",
                f"Penalty: -{result['concentration_penalty']}x",
            ),
            ("Growth rate", utils.format_delta(result["growth_rate"]), "vs previous period"),
            ("Final multiple", f"{result['adjusted_multiple']}x", "After all adjustments"),
        ],
        columns=["Metric", "Value", "Detail"],
    )
    st.dataframe(breakdown, hide_index=True, use_container_width=True)
    st.caption(
        f"{result['negative_merchants']} merchants with negative residuals in this period."
    )


def _render_analytics(payload: insights.AnalyticsPayload) -> None:
    st.header("Analytics")

    growth_col, risk_col, opportunity_col = st.columns(3)
    growth_col.subheader("Growth")
    growth_col.write(payload["growth"]["text"])
    risk_col.subheader("Risk")
    risk_col.write(payload["risk"]["text"])
    opportunity_col.subheader("Opportunity")
    opportunity_col.write(payload["opportunity"]["text"])

    st.subheader("Agent performance")
    agents = pd.DataFrame(payload["agents"])
    if agents.empty:
        st.caption("No agents in this view.")
    else:
        agents["tier"] = agents["tier"].map(TIER_LABELS)
        agents = agents.rename(
            columns={
                "agent": "Agent",
                "merchants": "Merchants",
                "total_residual": "Total Residual",
                "avg_residual": "Avg Residual",
                "tier": "Rating",
            }
        )
        st.dataframe(agents, hide_index=True, use_container_width=True)

    st.subheader("Recommendations")
    rec_cols = st.columns(len(payload["recommendations"]))
    for col, rec in zip(rec_cols, payload["recommendations"]):
        col.markdown(f"**{rec['title']}**")
        col.write(rec["text"])


def main() -> None:
    """Render the residuals dashboard."""

    st.set_page_config(
        page_title="Residuals Dashboard",
        page_icon="💳",
        layout="wide",
    )

    try:
        settings = config.load_settings(_secret_overrides())
    except ValueError as exc:
        st.error(f"Invalid dashboard configuration: {exc}")
        st.stop()
    config.configure_logging(settings.log_level)

    st.markdown(
        """
        <style>
        div[data-testid="stMetric"] {
            background: #ffffff;
            border-radius: 18px;
            border: 1px solid rgba(226, 232, 240, 0.9);
            padding: 1.15rem 1.25rem;
        }
        div[data-testid="stMetric"] label {
            font-weight: 600;
            text-transform: uppercase;
            font-size: 0.78rem;
        }
        </style>
        """,
        unsafe_allow_html=True,
    )

    sidebar = st.sidebar
    sidebar.header("Data")
    source = sidebar.radio("Data source", [REPORT_SOURCE, SAMPLE_SOURCE], index=0)

    if source == SAMPLE_SOURCE:
        seed = int(sidebar.number_input("Random seed", value=synth.DEFAULT_SEED, min_value=0, step=1))
        portfolio = _load_sample(synth.DEFAULT_MERCHANTS, seed)
    else:
        try:
            portfolio = _load_reports(settings, repr(settings))
        except loader.DataLoadError as exc:
            logger.error("Dashboard cannot start: %s", exc)
            st.error(
                f"Error loading data files: {exc}. Place the monthly reports in "
                f"`{settings.data_dir}` or switch to the sample portfolio."
            )
            st.stop()

    sidebar.header("Filters")
    period_options = portfolio.period_options()
    period = sidebar.selectbox(
        "Period",
        period_options,
        index=period_options.index(portfolio.latest_period) if portfolio.latest_period else 0,
    )
    agent_labels = {records.ALL_AGENTS: "All Agents", **{name: name for name in portfolio.agents()}}
    agent = sidebar.selectbox("Agent", list(agent_labels), format_func=agent_labels.get)

    context = records.FilterContext(period=period, agent=agent)
    current = portfolio.current_records(context)
    previous = portfolio.previous_records(context)

    kpi_payload = kpis.calculate_kpis(current, previous)
    change_report = changes.detect_residual_changes(current, previous)
    valuation_result = valuation.value_portfolio(portfolio, context)
    analytics_payload = insights.build_analytics(current, previous)

    st.title("Residuals portfolio")
    st.caption(f"{len(current):,} merchant rows · {period} · {agent_labels[agent]}")

    _render_kpis(kpi_payload)

    trend_col, agent_col = st.columns([1.2, 0.8], gap="large")
    with trend_col:
        st.plotly_chart(viz.plot_residual_trend(portfolio.period_totals(agent)), use_container_width=True)
    with agent_col:
        st.plotly_chart(viz.plot_agent_donut(insights.agent_residual_split(current)), use_container_width=True)

    leaders = insights.top_merchants(current)
    st.plotly_chart(viz.plot_top_merchants_bar(leaders), use_container_width=True)

    st.header("Merchants")
    master_tab, negative_tab, changes_tab = st.tabs(["All merchants", "Negative residuals", "Significant changes"])
    with master_tab:
        search = st.text_input("Search merchants", "")
        table = _table(current)
        if search:
            needle = search.lower()
            mask = table.astype(str).apply(lambda col: col.str.lower().str.contains(needle, regex=False)).any(axis=1)
            table = table.loc[mask]
        st.caption(f"Showing {len(table)} merchants")
        st.dataframe(table, hide_index=True, use_container_width=True)
        st.download_button(
            "Download CSV",
            export.to_csv_bytes(export.export_frame(current)),
            file_name=export.export_filename("all", period),
            mime="text/csv",
        )
        st.download_button(
            "Download Excel",
            export.to_excel_bytes(export.export_frame(current, include_gross_profit=True)),
            file_name=export.export_filename("detailed", period, "xlsx"),
            mime=export.EXCEL_MIME,
        )
    with negative_tab:
        negative = insights.negative_accounts(current)
        st.caption(f"{len(negative)} merchants with negative residuals")
        st.dataframe(_table(negative), hide_index=True, use_container_width=True)
        st.download_button(
            "Download negatives CSV",
            export.to_csv_bytes(export.export_frame(current, negative_only=True)),
            file_name=export.export_filename("negative", period),
            mime="text/csv",
        )
    with changes_tab:
        if not change_report["available"]:
            st.caption("N/A: no previous period to compare against.")
        else:
            st.caption(f"{len(change_report['changes'])} merchants moved by 30% or more")
            changes_df = pd.DataFrame(
                change_report["changes"],
                columns=[
                    "merchant_name",
                    "merchant_id",
                    "agent",
                    "previous_residual",
                    "current_residual",
                    "percent_change",
                ],
            )
            st.dataframe(changes_df, hide_index=True, use_container_width=True)

    _render_valuation(valuation_result)
    _render_analytics(analytics_payload)


if __name__ == "__main__":
    main()
