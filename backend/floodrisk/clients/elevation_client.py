import logging
from typing import Optional, Sequence

import httpx

from floodrisk.config.settings import settings
from floodrisk.models.sources import ElevationPoint

logger = logging.getLogger(__name__)


class ElevationClient:
    """Open-Elevation lookup: ``GET ?locations=lat,lng|lat,lng``."""

    def __init__(self, client: httpx.AsyncClient, url: str = settings.ELEVATION_API_URL):
        self._client = client
        self.url = url

    async def get_elevations(self, points: Sequence[tuple[float, float]]) -> list[ElevationPoint]:
        if not points:
            return []
        locations = "|".join(f"{lat},{lng}" for lat, lng in points)
        logger.info(f"[ElevationClient] fetching elevation data for {len(points)} point(s)")
        resp = await self._client.get(self.url, params={"locations": locations})
        logger.info(f"[ElevationClient] HTTP {resp.status_code}, {len(resp.content)} bytes")
        resp.raise_for_status()
        results = resp.json().get("results")
        if not isinstance(results, list):
            raise ValueError("Invalid response from elevation API")
        return [
            ElevationPoint(latitude=lat, longitude=lng, elevation=float(r["elevation"]))
            for (lat, lng), r in zip(points, results)
            if r.get("elevation") is not None
        ]

    async def get_elevation(self, lat: float, lng: float) -> Optional[float]:
        points = await self.get_elevations([(lat, lng)])
        return points[0].elevation if points else None
