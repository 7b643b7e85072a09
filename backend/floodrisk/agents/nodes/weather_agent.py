"""
WeatherScorer
=============
Scores short-term flood pressure from current conditions and a 3-day forecast.

Increments (summed, capped at 100):
  Current precipitation   > 50 mm  +30    > 20 mm  +15
  Current humidity        > 90 %   +20    > 80 %   +10
  Current wind            > 50 kph +10
  Each forecast day (next 3):
    Total precipitation   > 50 mm  +15    > 20 mm  +8
    Chance of rain        > 80 %   +5     > 60 %   +3

Degraded: score 50 / medium when neither current nor forecast data is available.
"""

import asyncio
import logging
from typing import Optional, Sequence

from floodrisk.agents.nodes.base import SourceScorer, SourceUnavailable
from floodrisk.clients.weather_client import WeatherClient
from floodrisk.models.assessment import Location, SourceAssessment
from floodrisk.models.sources import CurrentConditions, ForecastDay, WeatherSnapshot
from floodrisk.utils.cache import TTLCache, coord_key

logger = logging.getLogger(__name__)

FORECAST_DAYS = 3


def score_weather(
    current: Optional[CurrentConditions], forecast: Sequence[ForecastDay]
) -> tuple[int, list[str]]:
    score = 0
    factors: list[str] = []

    if current is not None:
        if current.precip_mm > 50:
            score += 30
            factors.append(f"Heavy rainfall ({current.precip_mm}mm)")
        elif current.precip_mm > 20:
            score += 15
            factors.append(f"Moderate rainfall ({current.precip_mm}mm)")

        if current.humidity > 90:
            score += 20
            factors.append(f"Very high humidity ({current.humidity}%)")
        elif current.humidity > 80:
            score += 10
            factors.append(f"High humidity ({current.humidity}%)")

        if current.wind_kph > 50:
            score += 10
            factors.append(f"Strong winds ({current.wind_kph} kph)")

    for day in forecast[:FORECAST_DAYS]:
        if day.totalprecip_mm > 50:
            score += 15
            factors.append(f"Heavy rain forecast on {day.date} ({day.totalprecip_mm}mm)")
        elif day.totalprecip_mm > 20:
            score += 8
            factors.append(f"Moderate rain forecast on {day.date} ({day.totalprecip_mm}mm)")

        if day.daily_chance_of_rain > 80:
            score += 5
            factors.append(f"High chance of rain on {day.date} ({day.daily_chance_of_rain}%)")
        elif day.daily_chance_of_rain > 60:
            score += 3
            factors.append(f"Likely rain on {day.date} ({day.daily_chance_of_rain}%)")

    if not factors:
        factors.append("No significant weather risk factors")
    return min(score, 100), factors


class WeatherScorer(SourceScorer):
    source = "weather"
    provider = "WeatherAPI"
    default_score = 50
    default_level = "medium"
    default_factor = "No weather data available"

    def __init__(self, client: WeatherClient, cache: TTLCache, timeout: Optional[float] = None):
        super().__init__(cache, timeout)
        self.client = client

    @staticmethod
    def _key(location: Location) -> str:
        if location.name:
            return location.name.strip().lower()
        return coord_key(location.latitude, location.longitude)

    async def _assess(self, location: Location) -> SourceAssessment:
        query = location.query_string
        key = self._key(location)

        current_res, forecast_res = await asyncio.gather(
            self.cached(f"current:{key}", lambda: self.client.get_current_weather(query)),
            self.cached(
                f"forecast:{key}:{FORECAST_DAYS}",
                lambda: self.client.get_forecast(query, FORECAST_DAYS),
            ),
            return_exceptions=True,
        )
        for res in (current_res, forecast_res):
            if isinstance(res, BaseException):
                logger.warning(f"[{self.name}] partial fetch failure: {res}")

        current: Optional[WeatherSnapshot] = None if isinstance(current_res, BaseException) else current_res
        forecast: Optional[WeatherSnapshot] = None if isinstance(forecast_res, BaseException) else forecast_res

        if current is None and forecast is None:
            if isinstance(current_res, BaseException):
                raise current_res
            raise SourceUnavailable("no weather data returned")

        conditions = current.current if current is not None else None
        if conditions is None and forecast is not None:
            conditions = forecast.current
        days = forecast.forecast if forecast is not None else []

        score, factors = score_weather(conditions, days)
        return self.build(
            score,
            factors,
            raw={
                "current_weather": conditions.model_dump() if conditions else None,
                "forecast": [d.model_dump() for d in days[:FORECAST_DAYS]],
            },
        )
