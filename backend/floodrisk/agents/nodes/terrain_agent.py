"""
TerrainScorer
=============
Approximates terrain vulnerability from point elevation.

  1. Elevation at the location plus four neighbours ±0.001° (≈111 m) N/S/E/W
  2. Average slope (%) between the centre and its neighbours
  3. Proximity to water, estimated from elevation when no direct signal
     exists: < 10 m → 0.8, < 50 m → 0.6, < 100 m → 0.3, otherwise 0.1

Increments (summed, capped at 100):
  Elevation   < 5 m +40     < 10 m +25     < 20 m +10
  Slope       > 20 % +15    > 10 % +8
  Proximity   > 0.7 +30     > 0.5 +20      > 0.3 +10
"""

import asyncio
import logging
from typing import Optional, Sequence

from floodrisk.agents.nodes.base import SourceScorer, SourceUnavailable
from floodrisk.clients.elevation_client import ElevationClient
from floodrisk.models.assessment import Location, SourceAssessment
from floodrisk.models.sources import ElevationPoint
from floodrisk.utils.cache import TTLCache, coord_key

logger = logging.getLogger(__name__)

NEIGHBOUR_OFFSET_DEG = 0.001
NEIGHBOUR_DISTANCE_M = 111


def neighbour_points(lat: float, lng: float) -> list[tuple[float, float]]:
    d = NEIGHBOUR_OFFSET_DEG
    return [
        (lat + d, lng),  # North
        (lat - d, lng),  # South
        (lat, lng + d),  # East
        (lat, lng - d),  # West
    ]


def average_slope(elevation: float, surrounding: Sequence[ElevationPoint]) -> float:
    if len(surrounding) < 4:
        return 0.0
    slopes = [abs(p.elevation - elevation) / NEIGHBOUR_DISTANCE_M * 100 for p in surrounding]
    return sum(slopes) / len(slopes)


def proximity_to_water(elevation: float) -> float:
    if elevation < 10:
        return 0.8
    if elevation < 50:
        return 0.6
    if elevation < 100:
        return 0.3
    return 0.1


def score_terrain(elevation: float, slope: float, proximity: float) -> tuple[int, list[str], list[str]]:
    score = 0
    factors: list[str] = []
    recommendations: list[str] = []

    if elevation < 5:
        score += 40
        factors.append("Very low elevation (< 5m)")
        recommendations += ["Consider elevated building foundations", "Install flood barriers or levees"]
    elif elevation < 10:
        score += 25
        factors.append("Low elevation (5-10m)")
        recommendations.append("Prepare flood evacuation plan")
    elif elevation < 20:
        score += 10
        factors.append("Moderate elevation (10-20m)")
        recommendations.append("Monitor weather forecasts closely")

    if slope > 20:
        score += 15
        factors.append("Steep terrain slope")
        recommendations.append("Implement erosion control measures")
    elif slope > 10:
        score += 8
        factors.append("Moderate terrain slope")

    if proximity > 0.7:
        score += 30
        factors.append("Very close to water bodies")
        recommendations += ["Install flood detection sensors", "Create emergency evacuation routes"]
    elif proximity > 0.5:
        score += 20
        factors.append("Close to water bodies")
        recommendations.append("Prepare sandbags and flood barriers")
    elif proximity > 0.3:
        score += 10
        factors.append("Moderately close to water bodies")

    return (
        min(score, 100),
        factors or ["No significant terrain risk factors"],
        recommendations or ["Continue monitoring local conditions"],
    )


class TerrainScorer(SourceScorer):
    source = "terrain"
    provider = "Open-Elevation API"
    default_score = 50
    default_level = "medium"
    default_factor = "Unable to assess terrain conditions"

    def __init__(self, client: ElevationClient, cache: TTLCache, timeout: Optional[float] = None):
        super().__init__(cache, timeout)
        self.client = client

    async def _assess(self, location: Location) -> SourceAssessment:
        lat, lng = location.latitude, location.longitude
        neighbours = neighbour_points(lat, lng)
        neighbours_key = "points:" + "|".join(coord_key(*p) for p in neighbours)

        centre_res, surrounding_res = await asyncio.gather(
            self.cached(f"point:{coord_key(lat, lng)}", lambda: self.client.get_elevation(lat, lng)),
            self.cached(neighbours_key, lambda: self.client.get_elevations(neighbours)),
            return_exceptions=True,
        )
        if isinstance(centre_res, BaseException):
            raise centre_res
        if centre_res is None:
            raise SourceUnavailable("no elevation data at point")

        if isinstance(surrounding_res, BaseException):
            logger.warning(f"[{self.name}] neighbour elevations unavailable: {surrounding_res}")
            surrounding_res = []

        elevation = float(centre_res)
        slope = average_slope(elevation, surrounding_res or [])
        proximity = proximity_to_water(elevation)
        score, factors, recommendations = score_terrain(elevation, slope, proximity)

        return self.build(
            score,
            factors,
            raw={
                "elevation": elevation,
                "slope": round(slope, 2),
                "proximity_to_water": proximity,
                "recommendations": recommendations,
            },
        )
