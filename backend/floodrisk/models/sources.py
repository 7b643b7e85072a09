"""
Payloads returned by the external data collaborators.

The clients in ``floodrisk.clients`` translate provider JSON into these models
so the scorers never touch raw provider responses.
"""

from datetime import datetime
from typing import Any, List, Optional

from pydantic import BaseModel, Field


# ---------------------------------------------------------------------------
# Weather (WeatherAPI.com)
# ---------------------------------------------------------------------------
class CurrentConditions(BaseModel):
    precip_mm: float = 0.0
    humidity: float = 0.0
    wind_kph: float = 0.0
    temp_c: Optional[float] = None
    condition: Optional[str] = None


class ForecastDay(BaseModel):
    date: str
    totalprecip_mm: float = 0.0
    avghumidity: float = 0.0
    daily_chance_of_rain: float = 0.0
    maxwind_kph: float = 0.0


class WeatherSnapshot(BaseModel):
    location_name: Optional[str] = None
    last_updated: Optional[str] = None
    current: Optional[CurrentConditions] = None
    forecast: List[ForecastDay] = []

    @classmethod
    def from_api(cls, data: dict[str, Any]) -> "WeatherSnapshot":
        """Build a snapshot from a WeatherAPI ``current.json``/``forecast.json`` body."""
        current_raw = data.get("current") or None
        current = None
        if current_raw:
            current = CurrentConditions(
                precip_mm=current_raw.get("precip_mm") or 0.0,
                humidity=current_raw.get("humidity") or 0.0,
                wind_kph=current_raw.get("wind_kph") or 0.0,
                temp_c=current_raw.get("temp_c"),
                condition=(current_raw.get("condition") or {}).get("text"),
            )

        days: list[ForecastDay] = []
        for fd in (data.get("forecast") or {}).get("forecastday") or []:
            day = fd.get("day") or {}
            days.append(
                ForecastDay(
                    date=fd.get("date", ""),
                    totalprecip_mm=day.get("totalprecip_mm") or 0.0,
                    avghumidity=day.get("avghumidity") or 0.0,
                    daily_chance_of_rain=day.get("daily_chance_of_rain") or 0.0,
                    maxwind_kph=day.get("maxwind_kph") or 0.0,
                )
            )

        loc = data.get("location") or {}
        return cls(
            location_name=loc.get("name"),
            last_updated=(current_raw or {}).get("last_updated"),
            current=current,
            forecast=days,
        )


class WeatherAlert(BaseModel):
    type: str
    severity: str
    message: str


class WeatherAlertBundle(BaseModel):
    alerts: List[WeatherAlert] = []
    last_updated: datetime


# ---------------------------------------------------------------------------
# Elevation (Open-Elevation)
# ---------------------------------------------------------------------------
class ElevationPoint(BaseModel):
    latitude: float
    longitude: float
    elevation: float


# ---------------------------------------------------------------------------
# Map / infrastructure (OpenStreetMap Overpass)
# ---------------------------------------------------------------------------
class InfrastructureFeature(BaseModel):
    id: str
    type: str
    name: Optional[str] = None
    osm_tags: dict[str, str] = {}


class InfrastructureBundle(BaseModel):
    rivers: List[InfrastructureFeature] = []
    water_bodies: List[InfrastructureFeature] = []
    drainage_channels: List[InfrastructureFeature] = []
    roads: List[InfrastructureFeature] = []
    buildings: List[InfrastructureFeature] = []
    flood_defenses: List[InfrastructureFeature] = []

    def counts(self) -> dict[str, int]:
        counts = {
            "rivers": len(self.rivers),
            "water_bodies": len(self.water_bodies),
            "drainage": len(self.drainage_channels),
            "roads": len(self.roads),
            "buildings": len(self.buildings),
            "flood_defenses": len(self.flood_defenses),
        }
        counts["total"] = sum(counts.values())
        return counts


# ---------------------------------------------------------------------------
# Government open data
# ---------------------------------------------------------------------------
class DisasterRecord(BaseModel):
    year: int
    type: str = "flood"
    province: Optional[str] = None
    economic_damage: float = 0.0     # VND
    affected_population: int = 0
    description: str = ""


class FloodLevels(BaseModel):
    warning: float
    alert: float
    danger: float


class HydroMeasurement(BaseModel):
    timestamp: datetime
    water_level: float


class HydroStation(BaseModel):
    station_id: str
    station_name: str
    province: Optional[str] = None
    flood_levels: FloodLevels
    measurements: List[HydroMeasurement] = []
    last_updated: datetime

    @property
    def latest_measurement(self) -> Optional[HydroMeasurement]:
        return self.measurements[-1] if self.measurements else None


class DensityRecord(BaseModel):
    province: str
    density_per_km2: float = Field(ge=0)
    urban_percentage: float = Field(ge=0, le=100)
    population: Optional[int] = None
