"""
OverpassClient
==============
Fetches flood-relevant man-made and natural features from OpenStreetMap via
the Overpass API and sorts them into six buckets:

    rivers           : waterway=river|stream
    water_bodies     : natural=water, water=lake, landuse=reservoir
    drainage_channels: waterway=drain, man_made=drain
    roads            : highway=* (excluding foot/cycle paths and tracks)
    buildings        : building=*
    flood_defenses   : man_made=dyke|levee, barrier=flood_barrier
"""

import logging
from typing import Any, Optional

import httpx

from floodrisk.config.settings import settings
from floodrisk.models.sources import InfrastructureBundle, InfrastructureFeature

logger = logging.getLogger(__name__)

_NON_ROAD_HIGHWAYS = {"footway", "path", "cycleway", "track", "bridleway"}


def _build_query(
    min_lat: float,
    min_lng: float,
    max_lat: float,
    max_lng: float,
    timeout: int = settings.OVERPASS_QUERY_TIMEOUT_SECONDS,
) -> str:
    bbox = f"{min_lat},{min_lng},{max_lat},{max_lng}"
    return f"""
[out:json][timeout:{timeout}];
(
  way["waterway"="river"]({bbox});
  way["waterway"="stream"]({bbox});
  way["waterway"="canal"]({bbox});
  way["natural"="water"]({bbox});
  way["landuse"="reservoir"]({bbox});
  way["water"="lake"]({bbox});
  way["man_made"="drain"]({bbox});
  way["waterway"="drain"]({bbox});
  way["highway"]["highway"!~"footway|path|cycleway"]({bbox});
  way["building"]({bbox});
  way["man_made"="dyke"]({bbox});
  way["man_made"="levee"]({bbox});
  way["barrier"="flood_barrier"]({bbox});
);
out geom;
"""


def _classify(tags: dict[str, str]) -> Optional[str]:
    """Return the bucket name for a way's tags, or None if irrelevant."""
    waterway = tags.get("waterway", "")
    man_made = tags.get("man_made", "")
    highway = tags.get("highway", "")

    if waterway in ("river", "stream"):
        return "rivers"
    if tags.get("natural") == "water" or tags.get("water") == "lake" or tags.get("landuse") == "reservoir":
        return "water_bodies"
    if waterway == "drain" or man_made == "drain":
        return "drainage_channels"
    if highway and highway not in _NON_ROAD_HIGHWAYS:
        return "roads"
    if "building" in tags:
        return "buildings"
    if man_made in ("dyke", "levee") or tags.get("barrier") == "flood_barrier":
        return "flood_defenses"
    return None


def parse_infrastructure(data: dict[str, Any]) -> InfrastructureBundle:
    buckets: dict[str, list[InfrastructureFeature]] = {
        "rivers": [],
        "water_bodies": [],
        "drainage_channels": [],
        "roads": [],
        "buildings": [],
        "flood_defenses": [],
    }
    for element in data.get("elements", []):
        if element.get("type") != "way" or not element.get("geometry"):
            continue
        tags = element.get("tags") or {}
        bucket = _classify(tags)
        if bucket is None:
            continue
        buckets[bucket].append(
            InfrastructureFeature(
                id=f"way_{element.get('id', 0)}",
                type=bucket,
                name=tags.get("name"),
                osm_tags=tags,
            )
        )
    return InfrastructureBundle(**buckets)


class OverpassClient:
    def __init__(
        self,
        client: httpx.AsyncClient,
        url: str = settings.OVERPASS_API_URL,
        query_timeout: int = settings.OVERPASS_QUERY_TIMEOUT_SECONDS,
    ):
        self._client = client
        self.url = url
        self.query_timeout = query_timeout

    @property
    def request_timeout(self) -> float:
        # Server-side query limit plus transfer headroom
        return self.query_timeout + 5.0

    async def get_infrastructure(
        self, min_lat: float, min_lng: float, max_lat: float, max_lng: float
    ) -> Optional[InfrastructureBundle]:
        logger.info(
            f"[OverpassClient] fetching infrastructure for bbox {min_lat},{min_lng},{max_lat},{max_lng}"
        )
        resp = await self._client.post(
            self.url,
            data={"data": _build_query(min_lat, min_lng, max_lat, max_lng, self.query_timeout)},
            timeout=self.request_timeout,
        )
        logger.info(f"[OverpassClient] HTTP {resp.status_code}, {len(resp.content)} bytes")
        if resp.status_code == 429:
            logger.warning("[OverpassClient] rate limit exceeded")
        elif resp.status_code == 504:
            logger.warning("[OverpassClient] query timeout: try a smaller bounding box")
        resp.raise_for_status()
        if not resp.content:
            return None
        bundle = parse_infrastructure(resp.json())
        logger.info(f"[OverpassClient] {bundle.counts()['total']} feature(s) classified")
        return bundle
