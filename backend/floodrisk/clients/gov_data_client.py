"""
GovDataClient
=============
Government open-data collaborator covering three datasets:

  /disasters           : disaster history (floods, storms, ...) per province
  /hydro/stations      : hydrological monitoring stations with flood levels
                          and recent water-level measurements
  /population/density  : population density and urbanisation per province

Responses are either a bare JSON list or an object wrapping the list under
``items``; both shapes are accepted.
"""

import logging
from typing import Any, Optional

import httpx

from floodrisk.config.settings import settings
from floodrisk.models.sources import DensityRecord, DisasterRecord, HydroStation

logger = logging.getLogger(__name__)


def _items(data: Any) -> list[dict]:
    if isinstance(data, list):
        return data
    if isinstance(data, dict):
        items = data.get("items", data.get("results", []))
        return items if isinstance(items, list) else []
    return []


class GovDataClient:
    def __init__(
        self,
        client: httpx.AsyncClient,
        base_url: str = settings.GOV_DATA_API_URL,
        api_key: str = settings.GOV_DATA_API_KEY,
    ):
        self._client = client
        self.base_url = base_url.rstrip("/")
        self._headers = {"Accept": "application/json"}
        if api_key:
            self._headers["Authorization"] = f"Bearer {api_key}"

    async def _get(self, path: str, params: dict) -> Any:
        params = {k: v for k, v in params.items() if v is not None}
        resp = await self._client.get(f"{self.base_url}{path}", params=params, headers=self._headers)
        logger.info(f"[GovDataClient] {path} HTTP {resp.status_code}, {len(resp.content)} bytes")
        if resp.status_code == 404:
            return None
        resp.raise_for_status()
        if not resp.content:
            return None
        return resp.json()

    async def get_disaster_history(
        self,
        province: str,
        type: Optional[str] = None,
        year_range: Optional[tuple[int, int]] = None,
    ) -> list[DisasterRecord]:
        start, end = year_range if year_range else (None, None)
        data = await self._get(
            "/disasters",
            {"province": province, "type": type, "start_year": start, "end_year": end},
        )
        records = [DisasterRecord(**item) for item in _items(data)]
        if type:
            records = [r for r in records if r.type == type]
        return records

    async def get_hydro_stations(self, province: Optional[str] = None) -> list[HydroStation]:
        data = await self._get("/hydro/stations", {"province": province})
        return [HydroStation(**item) for item in _items(data)]

    async def get_population_density(self, province: str) -> Optional[DensityRecord]:
        data = await self._get("/population/density", {"province": province})
        if not data:
            return None
        if isinstance(data, dict) and "province" not in data:
            data = {**data, "province": province}
        return DensityRecord(**data)
