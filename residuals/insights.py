"""Narrative insights, agent rankings and table feeds for the analytics section."""

from __future__ import annotations

from typing import Literal, TypedDict

import pandas as pd

from . import utils
from .aggregate import average, group_sum, percent_change, sum_field, top_n

STRONG_GROWTH_PCT = 5.0
OPPORTUNITY_TOP_N = 20
AGENT_LEADERBOARD_SIZE = 10
TOP_MERCHANTS = 10

# (exclusive lower bound on average residual per merchant, tier)
AGENT_TIERS: tuple[tuple[float, int], ...] = (
    (150.0, 3),
    (100.0, 2),
)

GrowthBand = Literal["strong", "modest", "negative", "no_data"]

NO_GROWTH_DATA = "No previous period data available for growth analysis."


class GrowthInsight(TypedDict):
    band: GrowthBand
    growth_pct: float | None
    text: str


class RiskInsight(TypedDict):
    negative_count: int
    negative_pct: float
    negative_total: float
    text: str


class OpportunityInsight(TypedDict):
    top_count: int
    top_total: float
    share_pct: float
    text: str


class AgentPerformance(TypedDict):
    agent: str
    merchants: int
    total_residual: float
    avg_residual: float
    tier: int


class Recommendation(TypedDict):
    title: str
    text: str


class AnalyticsPayload(TypedDict):
    growth: GrowthInsight
    risk: RiskInsight
    opportunity: OpportunityInsight
    agents: list[AgentPerformance]
    recommendations: list[Recommendation]


def growth_insight(current: pd.DataFrame, previous: pd.DataFrame | None) -> GrowthInsight:
    if previous is None or previous.empty:
        return {"band": "no_data", "growth_pct": None, "text": NO_GROWTH_DATA}

    growth = percent_change(sum_field(current, "net_residual"), sum_field(previous, "net_residual"))
    if growth > STRONG_GROWTH_PCT:
        band: GrowthBand = "strong"
        text = (
            f"Strong growth of {growth:.1f}% indicates healthy portfolio expansion. "
            "Continue current merchant acquisition strategy."
        )
    elif growth > 0:
        band = "modest"
        text = f"Modest growth of {growth:.1f}%. Consider implementing targeted merchant development programs."
    else:
        band = "negative"
        text = (
            f"Negative growth of {growth:.1f}%. "
            "Immediate review of merchant retention strategies recommended."
        )
    return {"band": band, "growth_pct": growth, "text": text}


def negative_accounts(current: pd.DataFrame) -> pd.DataFrame:
    """Negative-residual records, most negative first."""

    negative = current.loc[current["net_residual"] < 0]
    return negative.sort_values("net_residual", ascending=True, kind="mergesort")


def risk_insight(current: pd.DataFrame) -> RiskInsight:
    negative = negative_accounts(current)
    count = len(negative)
    pct = count * 100.0 / len(current) if len(current) else 0.0
    total = abs(sum_field(negative, "net_residual"))
    return {
        "negative_count": count,
        "negative_pct": pct,
        "negative_total": total,
        "text": (
            f"{count} merchants ({pct:.1f}%) with negative residuals totaling "
            f"{utils.format_currency(total)}. Review these accounts for adjustment or closure."
        ),
    }


def top_merchants(current: pd.DataFrame, n: int = TOP_MERCHANTS) -> pd.DataFrame:
    return top_n(current, "net_residual", n)


def opportunity_insight(current: pd.DataFrame) -> OpportunityInsight:
    leaders = top_merchants(current, OPPORTUNITY_TOP_N)
    top_total = sum_field(leaders, "net_residual")
    total = sum_field(current, "net_residual")
    share = top_total * 100.0 / total if total else 0.0
    return {
        "top_count": len(leaders),
        "top_total": top_total,
        "share_pct": share,
        "text": (
            f"Top {OPPORTUNITY_TOP_N} merchants represent {share:.1f}% of residuals. "
            "Focus on nurturing these relationships and developing similar high-value accounts."
        ),
    }


def agent_tier(avg_residual: float) -> int:
    for lower_bound, tier in AGENT_TIERS:
        if avg_residual > lower_bound:
            return tier
    return 1


def agent_performance(current: pd.DataFrame, limit: int = AGENT_LEADERBOARD_SIZE) -> list[AgentPerformance]:
    """Rank agents by total residual; merchant counts are record counts."""

    if current.empty:
        return []

    stats = (
        current.groupby("agent", sort=False)
        .agg(merchants=("merchant_id", "size"), total_residual=("net_residual", "sum"))
        .sort_values("total_residual", ascending=False, kind="mergesort")
        .head(limit)
    )
    rows: list[AgentPerformance] = []
    for agent, row in stats.iterrows():
        avg = average(float(row["total_residual"]), int(row["merchants"]))
        rows.append(
            {
                "agent": str(agent),
                "merchants": int(row["merchants"]),
                "total_residual": float(row["total_residual"]),
                "avg_residual": avg,
                "tier": agent_tier(avg),
            }
        )
    return rows


def agent_residual_split(current: pd.DataFrame, limit: int = AGENT_LEADERBOARD_SIZE) -> list[dict[str, float | str]]:
    """Top agents by summed residual, shaped for the donut chart."""

    totals = group_sum(current, "agent", "net_residual")
    if totals.empty:
        return []
    ordered = totals.sort_values(ascending=False, kind="mergesort").head(limit)
    return [{"agent": str(agent), "net_residual": float(value)} for agent, value in ordered.items()]


def recommendations(risk: RiskInsight, agents: list[AgentPerformance]) -> list[Recommendation]:
    if agents:
        agent_text = (
            f"Top performing agents averaging ${agents[0]['avg_residual']:.0f} per merchant. "
            "Share best practices across team."
        )
    else:
        agent_text = "No agent activity in this view yet. Revisit once residuals are attributed."
    return [
        {
            "title": "Merchant Retention",
            "text": (
                "Implement quarterly reviews with top 50 merchants to ensure satisfaction "
                "and identify growth opportunities."
            ),
        },
        {
            "title": "Address Negatives",
            "text": (
                f"{risk['negative_count']} merchants need attention. Schedule review calls to "
                "resolve issues or consider account closure."
            ),
        },
        {"title": "Agent Development", "text": agent_text},
        {
            "title": "Volume Growth",
            "text": (
                "Focus on increasing transaction volume with existing merchants through "
                "POS system optimization and marketing support."
            ),
        },
    ]


def build_analytics(current: pd.DataFrame, previous: pd.DataFrame | None = None) -> AnalyticsPayload:
    """Compute every analytics sub-section for the filtered records."""

    risk = risk_insight(current)
    agents = agent_performance(current)
    return {
        "growth": growth_insight(current, previous),
        "risk": risk,
        "opportunity": opportunity_insight(current),
        "agents": agents,
        "recommendations": recommendations(risk, agents),
    }
