"""
WeatherClient
=============
Thin async wrapper around WeatherAPI.com:

  current.json  : current conditions for a location string
  forecast.json : daily forecast (precipitation, humidity, chance of rain)

Alerts are derived from the forecast rather than from the provider's own alert
feed, which does not cover most of the monitored provinces.
"""

import logging
from datetime import datetime, timezone
from typing import Optional

import httpx

from floodrisk.config.settings import settings
from floodrisk.models.sources import WeatherAlert, WeatherAlertBundle, WeatherSnapshot

logger = logging.getLogger(__name__)

# Forecast thresholds for weather alerts
HEAVY_RAIN_HIGH_MM = 50
HEAVY_RAIN_MEDIUM_MM = 20
HIGH_HUMIDITY_PCT = 90
ALERT_FORECAST_DAYS = 3


def derive_weather_alerts(snapshot: WeatherSnapshot) -> list[WeatherAlert]:
    alerts: list[WeatherAlert] = []
    for day in snapshot.forecast[:ALERT_FORECAST_DAYS]:
        if day.totalprecip_mm > HEAVY_RAIN_HIGH_MM:
            alerts.append(
                WeatherAlert(
                    type="heavy_rain",
                    severity="high",
                    message=f"Heavy rainfall of {day.totalprecip_mm}mm forecast for {day.date}",
                )
            )
        elif day.totalprecip_mm > HEAVY_RAIN_MEDIUM_MM:
            alerts.append(
                WeatherAlert(
                    type="heavy_rain",
                    severity="medium",
                    message=f"Moderate rainfall of {day.totalprecip_mm}mm forecast for {day.date}",
                )
            )
        if day.avghumidity > HIGH_HUMIDITY_PCT:
            alerts.append(
                WeatherAlert(
                    type="high_humidity",
                    severity="medium",
                    message=f"Humidity of {day.avghumidity}% forecast for {day.date}",
                )
            )
    return alerts


class WeatherClient:
    def __init__(self, client: httpx.AsyncClient, base_url: str = settings.WEATHER_API_URL, api_key: str = settings.WEATHER_API_KEY):
        self._client = client
        self.base_url = base_url.rstrip("/")
        self.api_key = api_key

    async def _get(self, path: str, params: dict) -> Optional[dict]:
        resp = await self._client.get(
            f"{self.base_url}/{path}",
            params={"key": self.api_key, **params},
        )
        logger.info(f"[WeatherClient] {path} HTTP {resp.status_code}, {len(resp.content)} bytes")
        resp.raise_for_status()
        if not resp.content:
            return None
        return resp.json()

    async def get_current_weather(self, location: str) -> Optional[WeatherSnapshot]:
        data = await self._get("current.json", {"q": location, "aqi": "no"})
        return WeatherSnapshot.from_api(data) if data else None

    async def get_forecast(self, location: str, days: int = 3) -> Optional[WeatherSnapshot]:
        data = await self._get(
            "forecast.json",
            {"q": location, "days": days, "aqi": "no", "alerts": "no"},
        )
        return WeatherSnapshot.from_api(data) if data else None

    async def get_alerts(self, location: str) -> Optional[WeatherAlertBundle]:
        forecast = await self.get_forecast(location, days=ALERT_FORECAST_DAYS)
        if forecast is None:
            return None
        return WeatherAlertBundle(
            alerts=derive_weather_alerts(forecast),
            last_updated=datetime.now(timezone.utc),
        )
