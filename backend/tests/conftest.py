"""Shared fixtures for the flood risk engine test suite."""

from datetime import datetime, timezone

import pytest

from floodrisk.models.assessment import (
    FloodRiskAssessment,
    Location,
    Recommendations,
    RiskFactors,
    ScorerOutcome,
    SourceAssessment,
    source_level,
)
from floodrisk.models.sources import (
    FloodLevels,
    HydroMeasurement,
    HydroStation,
    WeatherAlert,
    WeatherAlertBundle,
)


class FakeClock:
    """Manually advanced monotonic clock."""

    def __init__(self, start: float = 1000.0):
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


class RecordingSleep:
    """Async stand-in for asyncio.sleep that only records requested delays."""

    def __init__(self):
        self.calls: list[float] = []

    async def __call__(self, delay: float) -> None:
        self.calls.append(delay)


def make_outcome(source: str, score: int, degraded: bool = False, provider: str = "Test", consulted: bool = True):
    assessment = SourceAssessment(score=score, level=source_level(score), factors=[f"{source} factor"])
    if degraded:
        return ScorerOutcome.degraded(source, provider, assessment, reason="unavailable", consulted=consulted)
    return ScorerOutcome.ok(source, provider, assessment)


def make_station(name: str, level: float, warning=4.0, alert=6.0, danger=8.0) -> HydroStation:
    ts = datetime(2024, 10, 1, 6, 0, tzinfo=timezone.utc)
    return HydroStation(
        station_id=name.lower().replace(" ", "-"),
        station_name=name,
        province="Quang Nam",
        flood_levels=FloodLevels(warning=warning, alert=alert, danger=danger),
        measurements=[HydroMeasurement(timestamp=ts, water_level=level)],
        last_updated=ts,
    )


def make_alert_bundle(*alerts: tuple[str, str]) -> WeatherAlertBundle:
    return WeatherAlertBundle(
        alerts=[WeatherAlert(type=t, severity=s, message=f"{t} {s}") for t, s in alerts],
        last_updated=datetime(2024, 10, 1, tzinfo=timezone.utc),
    )


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def recording_sleep():
    return RecordingSleep()


@pytest.fixture
def da_nang():
    return Location(latitude=16.0544, longitude=108.2022, name="Da Nang", province="Da Nang")


@pytest.fixture
def bare_location():
    return Location(latitude=21.0285, longitude=105.8542)


def make_assessment(location: Location, score: int = 10) -> FloodRiskAssessment:
    source = SourceAssessment(score=score, level=source_level(score))
    return FloodRiskAssessment(
        location=location,
        overall_risk_score=score,
        risk_level="low",
        factors=RiskFactors(
            weather=source, terrain=source, infrastructure=source, historical=source, population=source
        ),
        recommendations=Recommendations(
            immediate_actions=["Monitor local conditions"],
            short_term=["Stay informed about weather conditions"],
            long_term=["Consider flood insurance"],
            preparedness=["Create emergency contact list"],
        ),
        data_sources=[],
        confidence_level="high",
    )
