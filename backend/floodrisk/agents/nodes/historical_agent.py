"""
HistoricalScorer
================
Scores the province's recorded flood history.

  Event count            ≥ 10 +40    ≥ 5 +25    ≥ 1 +10
  Average economic loss  ≥ 1e12 VND +30   ≥ 1e11 VND +20   > 0 +10
  Trend                  increasing +20   stable +10   decreasing +0

Trend compares events in the 5 years up to the latest recorded year with the
5 years before that. An empty history is treated as missing data (score 30 /
low), not as evidence of safety.
"""

from typing import Optional, Sequence

from floodrisk.agents.nodes.base import SourceScorer, SourceUnavailable
from floodrisk.clients.gov_data_client import GovDataClient
from floodrisk.models.assessment import Location, SourceAssessment
from floodrisk.models.sources import DisasterRecord
from floodrisk.utils.cache import TTLCache

TREND_WINDOW_YEARS = 5

TREND_SCORES: dict[str, int] = {"increasing": 20, "stable": 10, "decreasing": 0}


def flood_trend(records: Sequence[DisasterRecord]) -> str:
    if not records:
        return "stable"
    latest = max(r.year for r in records)
    recent = sum(1 for r in records if r.year > latest - TREND_WINDOW_YEARS)
    earlier = sum(
        1 for r in records
        if latest - 2 * TREND_WINDOW_YEARS < r.year <= latest - TREND_WINDOW_YEARS
    )
    if recent > earlier:
        return "increasing"
    if recent < earlier:
        return "decreasing"
    return "stable"


def analyze_history(records: Sequence[DisasterRecord]) -> tuple[int, float, str]:
    """Return (event_count, average_impact, trend)."""
    events = len(records)
    average_impact = sum(r.economic_damage for r in records) / events if events else 0.0
    return events, average_impact, flood_trend(records)


def score_history(events: int, average_impact: float, trend: str) -> int:
    score = 0
    if events >= 10:
        score += 40
    elif events >= 5:
        score += 25
    elif events >= 1:
        score += 10

    if average_impact >= 1e12:
        score += 30
    elif average_impact >= 1e11:
        score += 20
    elif average_impact > 0:
        score += 10

    score += TREND_SCORES.get(trend, 0)
    return min(score, 100)


class HistoricalScorer(SourceScorer):
    source = "historical"
    provider = "Vietnam Government Data"
    default_score = 30
    default_level = "low"
    default_factor = "No historical data available"

    def __init__(self, client: GovDataClient, cache: TTLCache, timeout: Optional[float] = None):
        super().__init__(cache, timeout)
        self.client = client

    async def _assess(self, location: Location) -> SourceAssessment:
        if not location.province:
            raise SourceUnavailable("no province given", consulted=False)

        province = location.province
        records = await self.cached(
            f"disasters:{province.lower()}:flood",
            lambda: self.client.get_disaster_history(province, "flood"),
        )
        if not records:
            raise SourceUnavailable(f"no flood history for {province}")

        events, average_impact, trend = analyze_history(records)
        score = score_history(events, average_impact, trend)
        return self.build(
            score,
            [
                f"{events} historical flood events",
                f"Average impact: {average_impact:,.0f} VND",
                f"Trend: {trend}",
            ],
            raw={"historical_events": events, "average_impact": average_impact, "trend": trend},
        )
