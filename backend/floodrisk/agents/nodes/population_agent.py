"""
PopulationScorer
================
Scores exposure from population density and urbanisation of the province.

  Density         > 1000 /km² +40    > 500 +25    > 200 +10
  Urbanisation    > 50 % +20         > 30 % +10
"""

from typing import Optional

from floodrisk.agents.nodes.base import SourceScorer, SourceUnavailable
from floodrisk.clients.gov_data_client import GovDataClient
from floodrisk.models.assessment import Location, SourceAssessment
from floodrisk.utils.cache import TTLCache


def score_population(density: float, urban_percentage: float) -> tuple[int, list[str]]:
    score = 0
    factors = [
        f"Population density: {density:,.0f}/km²",
        f"Urban percentage: {urban_percentage:g}%",
    ]

    if density > 1000:
        score += 40
        factors.append("Very high population density increases vulnerability")
    elif density > 500:
        score += 25
        factors.append("High population density increases vulnerability")
    elif density > 200:
        score += 10
        factors.append("Moderate population density")
    else:
        factors.append("Low population density")

    if urban_percentage > 50:
        score += 20
        factors.append("Predominantly urban area")
    elif urban_percentage > 30:
        score += 10
        factors.append("Partially urbanised area")

    return min(score, 100), factors


class PopulationScorer(SourceScorer):
    source = "population"
    provider = "Vietnam Government Data"
    default_score = 30
    default_level = "low"
    default_factor = "No population data available"

    def __init__(self, client: GovDataClient, cache: TTLCache, timeout: Optional[float] = None):
        super().__init__(cache, timeout)
        self.client = client

    async def _assess(self, location: Location) -> SourceAssessment:
        if not location.province:
            raise SourceUnavailable("no province given", consulted=False)

        province = location.province
        record = await self.cached(
            f"density:{province.lower()}",
            lambda: self.client.get_population_density(province),
        )
        if record is None:
            raise SourceUnavailable(f"no population data for {province}")

        score, factors = score_population(record.density_per_km2, record.urban_percentage)
        return self.build(
            score,
            factors,
            raw={
                "population_density": record.density_per_km2,
                "urban_percentage": record.urban_percentage,
            },
        )
