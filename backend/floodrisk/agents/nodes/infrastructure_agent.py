"""
InfrastructureScorer
====================
Scores man-made and natural features within a ~5 km box around the location
(OpenStreetMap via Overpass).

Increments (summed, capped at 100):
  Water features (rivers + water bodies)  > 10 +25   > 5 +15   > 0 +5
  Drainage channels                       none +20   < 3 +10
  Flood defences                          none +25   < 5 +10
  Buildings                               > 50 +15   > 20 +8
  Roads                                   > 30 +10
"""

from typing import Optional

from floodrisk.agents.nodes.base import SourceScorer, SourceUnavailable
from floodrisk.clients.overpass_client import OverpassClient
from floodrisk.models.assessment import Location, SourceAssessment
from floodrisk.models.sources import InfrastructureBundle
from floodrisk.utils.cache import TTLCache, coord_key

# ±0.045° ≈ 5 km at the equator
BBOX_BUFFER_DEG = 0.045


def score_infrastructure(bundle: InfrastructureBundle) -> tuple[int, list[str]]:
    score = 0
    factors: list[str] = []

    water = len(bundle.rivers) + len(bundle.water_bodies)
    if water > 10:
        score += 25
        factors.append("High density of water bodies nearby")
    elif water > 5:
        score += 15
        factors.append("Moderate density of water bodies nearby")
    elif water > 0:
        score += 5
        factors.append("Some water bodies in vicinity")

    drainage = len(bundle.drainage_channels)
    if drainage == 0:
        score += 20
        factors.append("Limited or no visible drainage infrastructure")
    elif drainage < 3:
        score += 10
        factors.append("Limited drainage infrastructure")

    defenses = len(bundle.flood_defenses)
    if defenses == 0:
        score += 25
        factors.append("No visible flood defense structures")
    elif defenses < 5:
        score += 10
        factors.append("Limited flood defense infrastructure")

    buildings = len(bundle.buildings)
    if buildings > 50:
        score += 15
        factors.append("High building density increases flood vulnerability")
    elif buildings > 20:
        score += 8
        factors.append("Moderate building density")

    if len(bundle.roads) > 30:
        score += 10
        factors.append("Extensive road network at flood risk")

    return min(score, 100), factors or ["No significant infrastructure risk factors identified"]


class InfrastructureScorer(SourceScorer):
    source = "infrastructure"
    provider = "OpenStreetMap"
    default_score = 50
    default_level = "medium"
    default_factor = "Unable to assess infrastructure"

    def __init__(self, client: OverpassClient, cache: TTLCache, timeout: Optional[float] = None):
        super().__init__(cache, timeout)
        self.client = client

    async def _assess(self, location: Location) -> SourceAssessment:
        bbox = (
            location.latitude - BBOX_BUFFER_DEG,
            location.longitude - BBOX_BUFFER_DEG,
            location.latitude + BBOX_BUFFER_DEG,
            location.longitude + BBOX_BUFFER_DEG,
        )
        bundle = await self.cached(
            f"infra:{coord_key(*bbox)}",
            lambda: self.client.get_infrastructure(*bbox),
        )
        if bundle is None:
            raise SourceUnavailable("no infrastructure data returned")

        score, factors = score_infrastructure(bundle)
        return self.build(score, factors, raw={"infrastructure_count": bundle.counts()})
