from datetime import datetime, timezone
from typing import Any, List, Literal, Optional

from pydantic import BaseModel, Field

SourceLevel = Literal["low", "medium", "high"]
RiskLevel = Literal["low", "medium", "high", "very_high", "extreme"]
ConfidenceLevel = Literal["low", "medium", "high"]
SourceName = Literal["weather", "terrain", "infrastructure", "historical", "population"]

SOURCE_NAMES: tuple[str, ...] = ("weather", "terrain", "infrastructure", "historical", "population")


class Location(BaseModel):
    latitude: float = Field(ge=-90, le=90)
    longitude: float = Field(ge=-180, le=180)
    name: Optional[str] = None
    province: Optional[str] = None
    district: Optional[str] = None
    ward: Optional[str] = None

    model_config = {"frozen": True, "str_strip_whitespace": True}

    @property
    def display_name(self) -> str:
        return self.name or f"{self.latitude}, {self.longitude}"

    @property
    def query_string(self) -> str:
        """Location string understood by the weather provider."""
        return self.name or f"{self.latitude},{self.longitude}"


class SourceAssessment(BaseModel):
    score: int = Field(ge=0, le=100)
    level: SourceLevel
    factors: List[str] = []
    raw: Optional[dict[str, Any]] = None

    model_config = {"frozen": True}


def source_level(score: int) -> SourceLevel:
    if score > 60:
        return "high"
    if score > 30:
        return "medium"
    return "low"


class ScorerOutcome(BaseModel):
    """
    Result of one source scorer.

    ``status`` tells genuine data ("ok") apart from the fixed fallback
    ("degraded"), so confidence never has to be guessed from the score.
    ``consulted`` is False only when the collaborator was never called.
    """

    source: SourceName
    status: Literal["ok", "degraded"]
    assessment: SourceAssessment
    provider: str
    reason: Optional[str] = None
    consulted: bool = True

    model_config = {"frozen": True}

    @classmethod
    def ok(cls, source: str, provider: str, assessment: SourceAssessment) -> "ScorerOutcome":
        return cls(source=source, status="ok", assessment=assessment, provider=provider)

    @classmethod
    def degraded(
        cls,
        source: str,
        provider: str,
        assessment: SourceAssessment,
        reason: str,
        consulted: bool = True,
    ) -> "ScorerOutcome":
        return cls(
            source=source,
            status="degraded",
            assessment=assessment,
            provider=provider,
            reason=reason,
            consulted=consulted,
        )

    @property
    def is_degraded(self) -> bool:
        return self.status == "degraded"


class RiskFactors(BaseModel):
    weather: SourceAssessment
    terrain: SourceAssessment
    infrastructure: SourceAssessment
    historical: SourceAssessment
    population: SourceAssessment

    model_config = {"frozen": True}


class Recommendations(BaseModel):
    immediate_actions: List[str]
    short_term: List[str]
    long_term: List[str]
    preparedness: List[str]

    model_config = {"frozen": True}


class FloodRiskAssessment(BaseModel):
    location: Location
    overall_risk_score: int = Field(ge=0, le=100)
    risk_level: RiskLevel
    assessment_date: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))
    factors: RiskFactors
    recommendations: Recommendations
    data_sources: List[str] = []
    confidence_level: ConfidenceLevel

    model_config = {"frozen": True}


class BatchResult(BaseModel):
    assessments: List[FloodRiskAssessment] = []
    total_requested: int
    total_assessed: int

    @property
    def success_rate(self) -> int:
        if self.total_requested == 0:
            return 0
        return round(self.total_assessed / self.total_requested * 100)


class RegionalRiskSummary(BaseModel):
    province: str
    assessment_date: datetime
    overall_risk_level: Literal["low", "medium", "high"]
    high_risk_areas: int
    total_assessed_areas: int
    recent_alerts: int
    recommendations: List[str]
