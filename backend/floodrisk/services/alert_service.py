"""
AlertCompiler
=============
Region-level flood alerts from two collaborators:

  1. Weather: alerts derived from forecast precipitation / humidity
  2. Hydrological stations: latest water level against each station's
     warning / alert / danger levels:
         ≥ danger → hydro_danger (high)
         ≥ alert  → hydro_alert  (medium)
         otherwise no alert (warning level is informational only)

Alerts are deduplicated by (type, location), keeping the most severe, then
ranked high → low. A failing collaborator only removes its own alerts.
"""

import asyncio
import logging
from datetime import datetime, timezone
from typing import Iterable, Optional, Sequence

from floodrisk.clients.gov_data_client import GovDataClient
from floodrisk.clients.weather_client import WeatherClient
from floodrisk.models.alert import SEVERITY_RANK, Alert, AlertReport, AlertSummary
from floodrisk.models.sources import HydroStation, WeatherAlertBundle

logger = logging.getLogger(__name__)

WEATHER_ALERT_ACTIONS: dict[tuple[str, str], list[str]] = {
    ("heavy_rain", "high"): [
        "Seek higher ground",
        "Avoid driving",
        "Turn off electrical appliances",
    ],
    ("heavy_rain", "medium"): [
        "Monitor water levels",
        "Prepare emergency kit",
        "Stay indoors if possible",
    ],
    ("high_humidity", "medium"): [
        "Use dehumidifiers if available",
        "Monitor for mold growth",
        "Improve ventilation",
    ],
}
DEFAULT_ALERT_ACTIONS = ["Stay alert and monitor local conditions"]

HYDRO_DANGER_ACTIONS = [
    "Immediate evacuation of low-lying areas",
    "Activate emergency response teams",
    "Close roads and bridges if necessary",
    "Monitor water levels continuously",
]
HYDRO_ALERT_ACTIONS = [
    "Prepare emergency supplies",
    "Monitor weather updates",
    "Be ready for evacuation",
    "Secure property and vehicles",
]


def recommended_actions(alert_type: str, severity: str) -> list[str]:
    return list(WEATHER_ALERT_ACTIONS.get((alert_type, severity), DEFAULT_ALERT_ACTIONS))


def weather_alerts(bundle: WeatherAlertBundle, province: str) -> list[Alert]:
    return [
        Alert(
            type=a.type,
            severity=a.severity,
            location=province,
            message=a.message,
            timestamp=bundle.last_updated,
            recommended_actions=recommended_actions(a.type, a.severity),
        )
        for a in bundle.alerts
    ]


def hydro_alert(station: HydroStation) -> Optional[Alert]:
    latest = station.latest_measurement
    if latest is None:
        return None
    levels = station.flood_levels
    if latest.water_level >= levels.danger:
        return Alert(
            type="hydro_danger",
            severity="high",
            location=station.station_name,
            message=f"Danger water level: {latest.water_level}m (danger: {levels.danger}m)",
            timestamp=station.last_updated,
            recommended_actions=list(HYDRO_DANGER_ACTIONS),
        )
    if latest.water_level >= levels.alert:
        return Alert(
            type="hydro_alert",
            severity="medium",
            location=station.station_name,
            message=f"Alert water level: {latest.water_level}m (alert: {levels.alert}m)",
            timestamp=station.last_updated,
            recommended_actions=list(HYDRO_ALERT_ACTIONS),
        )
    return None


def deduplicate(alerts: Iterable[Alert]) -> list[Alert]:
    """Keep one alert per (type, location): the most severe, first seen on ties."""
    kept: dict[tuple[str, str], Alert] = {}
    for alert in alerts:
        key = (alert.type, alert.location)
        current = kept.get(key)
        if current is None or SEVERITY_RANK[alert.severity] > SEVERITY_RANK[current.severity]:
            kept[key] = alert
    return list(kept.values())


def rank(alerts: Iterable[Alert]) -> list[Alert]:
    return sorted(alerts, key=lambda a: SEVERITY_RANK[a.severity], reverse=True)


def compile_report(alerts: Sequence[Alert], stations_monitored: int = 0) -> AlertReport:
    ranked = rank(deduplicate(alerts))
    return AlertReport(
        alerts=ranked,
        summary=AlertSummary(
            total_alerts=len(ranked),
            high_severity_count=sum(1 for a in ranked if a.severity == "high"),
            stations_monitored=stations_monitored,
            last_updated=datetime.now(timezone.utc),
        ),
    )


class AlertCompiler:
    def __init__(self, weather_client: WeatherClient, gov_client: GovDataClient):
        self.weather_client = weather_client
        self.gov_client = gov_client

    async def get_alerts(self, province: str) -> AlertReport:
        logger.info(f"[AlertCompiler] getting flood alerts for province: {province}")

        weather_res, hydro_res = await asyncio.gather(
            self.weather_client.get_alerts(province),
            self.gov_client.get_hydro_stations(province),
            return_exceptions=True,
        )

        alerts: list[Alert] = []
        if isinstance(weather_res, Exception):
            logger.warning(f"[AlertCompiler] weather alerts unavailable for {province}: {weather_res}")
        elif weather_res is not None:
            alerts += weather_alerts(weather_res, province)

        stations: list[HydroStation] = []
        if isinstance(hydro_res, Exception):
            logger.warning(f"[AlertCompiler] hydro data unavailable for {province}: {hydro_res}")
        else:
            stations = hydro_res or []
            alerts += [a for a in (hydro_alert(s) for s in stations) if a is not None]

        report = compile_report(alerts, stations_monitored=len(stations))
        logger.info(
            f"[AlertCompiler] {province}: {report.summary.total_alerts} alert(s), "
            f"{report.summary.high_severity_count} high severity"
        )
        return report
