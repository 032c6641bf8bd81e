"""Visualization utilities for the residuals dashboard."""

from __future__ import annotations

from collections.abc import Iterable, Mapping

import pandas as pd
import plotly.express as px
import plotly.graph_objects as go

ACCENT = "#ff9900"
AGENT_PALETTE = [
    "#ff9900",
    "#ff8800",
    "#ff7700",
    "#ff6600",
    "#ff5500",
    "#ff4400",
    "#ff3300",
    "#ff2200",
    "#ff1100",
    "#ff0000",
]


def _empty_figure(message: str) -> go.Figure:
    fig = go.Figure()
    fig.add_annotation(
        text=message,
        showarrow=False,
        x=0.5,
        y=0.5,
        xref="paper",
        yref="paper",
        font=dict(size=14, color="#6c757d"),
    )
    fig.update_layout(margin=dict(l=0, r=0, t=20, b=20))
    return fig


def plot_residual_trend(period_totals: Iterable[Mapping[str, object]]) -> go.Figure:
    """Line chart of total net residual per period."""

    data = list(period_totals)
    if not data:
        return _empty_figure("No periods loaded.")

    df = pd.DataFrame(data)
    fig = go.Figure()
    fig.add_trace(
        go.Scatter(
            name="Net Residuals",
            x=df["period"],
            y=df["net_residual"],
            mode="lines+markers",
            fill="tozeroy",
            line=dict(color=ACCENT, width=3, shape="spline"),
            marker=dict(size=10),
            hovertemplate="Residuals: $%{y:,.2f}<extra></extra>",
        )
    )
    fig.update_layout(
        title="Net residuals by period",
        xaxis_title="Period",
        yaxis_title="Net residual",
        showlegend=False,
        margin=dict(l=0, r=0, t=45, b=0),
    )
    fig.update_yaxes(rangemode="tozero")
    return fig


def plot_agent_donut(split: Iterable[Mapping[str, object]]) -> go.Figure:
    data = list(split)
    if not data:
        return _empty_figure("No agent residuals to display.")

    df = pd.DataFrame(data)
    fig = px.pie(
        df,
        names="agent",
        values="net_residual",
        hole=0.55,
        title="Residuals by agent (top 10)",
        color_discrete_sequence=AGENT_PALETTE,
    )
    fig.update_traces(textinfo="percent", hovertemplate="%{label}: $%{value:,.2f}<extra></extra>")
    fig.update_layout(
        margin=dict(l=0, r=0, t=40, b=0),
        legend=dict(orientation="h", yanchor="top", y=-0.05, font=dict(size=10)),
    )
    return fig


def plot_top_merchants_bar(records: pd.DataFrame) -> go.Figure:
    """Horizontal bar of the highest-residual merchants, largest on top."""

    if records.empty:
        return _empty_figure("No merchants in this view.")

    df = records.copy()
    df["label"] = df["merchant_name"].where(df["merchant_name"] != "", "Unknown")
    fig = px.bar(
        df.iloc[::-1],
        x="net_residual",
        y="label",
        orientation="h",
        labels={"net_residual": "Net residual", "label": "Merchant"},
        title="Top 10 merchants by residual",
        color_discrete_sequence=[ACCENT],
    )
    fig.update_traces(hovertemplate="%{y}: $%{x:,.2f}<extra></extra>")
    fig.update_layout(margin=dict(l=0, r=0, t=40, b=0))
    return fig
