import asyncio
import logging
from datetime import datetime, timezone
from typing import Awaitable, Callable, Optional, Sequence

import httpx

from floodrisk.agents.graph import build_graph
from floodrisk.agents.nodes.base import SourceScorer
from floodrisk.agents.nodes.historical_agent import HistoricalScorer
from floodrisk.agents.nodes.infrastructure_agent import InfrastructureScorer
from floodrisk.agents.nodes.population_agent import PopulationScorer
from floodrisk.agents.nodes.recommendation_agent import risk_factors_from_state
from floodrisk.agents.nodes.terrain_agent import TerrainScorer
from floodrisk.agents.nodes.weather_agent import WeatherScorer
from floodrisk.agents.state.assessment_state import AssessmentState
from floodrisk.clients.elevation_client import ElevationClient
from floodrisk.clients.gov_data_client import GovDataClient
from floodrisk.clients.overpass_client import OverpassClient
from floodrisk.clients.weather_client import WeatherClient
from floodrisk.config.settings import settings
from floodrisk.models.alert import AlertReport
from floodrisk.models.assessment import (
    BatchResult,
    FloodRiskAssessment,
    Location,
    RegionalRiskSummary,
    ScorerOutcome,
)
from floodrisk.models.sources import HydroStation
from floodrisk.services.alert_service import AlertCompiler
from floodrisk.services.batch_orchestrator import BatchOrchestrator
from floodrisk.utils.cache import TTLCache
from floodrisk.utils.pacing import GroupPacer

logger = logging.getLogger(__name__)

REGIONAL_RECOMMENDATIONS = [
    "Implement comprehensive flood monitoring system",
    "Develop emergency response plans",
    "Improve drainage infrastructure",
    "Community preparedness programs",
]


def _initial_state(location: Location) -> AssessmentState:
    return {"location": location, "data_collection_errors": []}


def _build_assessment(location: Location, final_state: dict) -> FloodRiskAssessment:
    return FloodRiskAssessment(
        location=location,
        overall_risk_score=final_state["overall_risk_score"],
        risk_level=final_state["risk_level"],
        assessment_date=datetime.now(timezone.utc),
        factors=risk_factors_from_state(final_state),
        recommendations=final_state["recommendations"],
        data_sources=final_state.get("data_sources", []),
        confidence_level=final_state["confidence_level"],
    )


class FloodRiskService:
    def __init__(
        self,
        scorers: Sequence[SourceScorer],
        alert_compiler: AlertCompiler,
        group_size: int = settings.BATCH_GROUP_SIZE,
        pacing_delay: float = settings.BATCH_PACING_DELAY_SECONDS,
        sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
    ):
        self.graph = build_graph(scorers)
        self.scorers = {s.source: s for s in scorers}
        self.alert_compiler = alert_compiler
        self.orchestrator = BatchOrchestrator(
            self.assess_location,
            pacer_factory=lambda: GroupPacer(pacing_delay, sleep=sleep),
            group_size=group_size,
        )

    async def assess_location(self, location: Location) -> Optional[FloodRiskAssessment]:
        """
        Full assessment for one location. Source failures degrade inside the
        scorers; anything else unexpected is logged and reported as None.
        """
        logger.info(f"[FloodRiskService] starting flood risk assessment for {location.display_name}")
        try:
            final_state = await self.graph.ainvoke(_initial_state(location))
            assessment = _build_assessment(location, final_state)
        except Exception:
            logger.exception(f"[FloodRiskService] assessment failed for {location.display_name}")
            return None

        degraded = final_state.get("data_collection_errors") or []
        if degraded:
            logger.info(f"[FloodRiskService] degraded sources: {degraded}")
        logger.info(
            f"[FloodRiskService] completed assessment for {location.display_name}: "
            f"{assessment.risk_level} ({assessment.overall_risk_score}/100), "
            f"confidence {assessment.confidence_level}"
        )
        return assessment

    async def assess_batch(self, locations: Sequence[Location]) -> BatchResult:
        return await self.orchestrator.assess_batch(locations)

    async def get_alerts(self, province: str) -> AlertReport:
        return await self.alert_compiler.get_alerts(province)

    async def assess_source(self, source: str, location: Location) -> ScorerOutcome:
        """Run a single source scorer outside the full pipeline."""
        return await self.scorers[source].assess(location)

    async def get_hydro_stations(self, province: str) -> Optional[list[HydroStation]]:
        try:
            return await self.alert_compiler.gov_client.get_hydro_stations(province)
        except Exception:
            logger.exception(f"[FloodRiskService] hydro stations unavailable for {province}")
            return None

    async def get_regional_summary(self, province: str) -> Optional[RegionalRiskSummary]:
        try:
            report = await self.alert_compiler.get_alerts(province)
        except Exception:
            logger.exception(f"[FloodRiskService] regional summary failed for {province}")
            return None

        summary = report.summary
        if summary.high_severity_count > 5:
            level = "high"
        elif summary.total_alerts > 10:
            level = "medium"
        else:
            level = "low"

        return RegionalRiskSummary(
            province=province,
            assessment_date=datetime.now(timezone.utc),
            overall_risk_level=level,
            high_risk_areas=len({a.location for a in report.alerts if a.severity == "high"}),
            total_assessed_areas=summary.stations_monitored,
            recent_alerts=summary.total_alerts,
            recommendations=list(REGIONAL_RECOMMENDATIONS),
        )


def create_flood_risk_service(http_client: httpx.AsyncClient) -> FloodRiskService:
    """Wire collaborators, one private cache per scorer, and the pipeline."""
    weather = WeatherClient(http_client)
    elevation = ElevationClient(http_client)
    overpass = OverpassClient(http_client)
    gov = GovDataClient(http_client)

    scorers = [
        WeatherScorer(
            weather,
            TTLCache(settings.WEATHER_CACHE_TTL, settings.WEATHER_CACHE_SIZE, name="weather-cache"),
        ),
        TerrainScorer(
            elevation,
            TTLCache(settings.ELEVATION_CACHE_TTL, settings.ELEVATION_CACHE_SIZE, name="elevation-cache"),
        ),
        InfrastructureScorer(
            overpass,
            TTLCache(settings.MAP_CACHE_TTL, settings.MAP_CACHE_SIZE, name="map-cache"),
        ),
        HistoricalScorer(
            gov,
            TTLCache(settings.GOV_CACHE_TTL, settings.GOV_CACHE_SIZE, name="history-cache"),
        ),
        PopulationScorer(
            gov,
            TTLCache(settings.GOV_CACHE_TTL, settings.GOV_CACHE_SIZE, name="population-cache"),
        ),
    ]
    return FloodRiskService(scorers, AlertCompiler(weather, gov))
