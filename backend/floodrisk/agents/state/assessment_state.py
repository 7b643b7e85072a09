import operator
from typing import Annotated, List, Optional, TypedDict

from floodrisk.models.assessment import (
    ConfidenceLevel,
    Location,
    Recommendations,
    RiskLevel,
    ScorerOutcome,
)


class AssessmentState(TypedDict, total=False):
    # Input
    location: Location

    # --- Source scorer outputs (run in parallel) ---
    weather_outcome: ScorerOutcome
    terrain_outcome: ScorerOutcome
    infrastructure_outcome: ScorerOutcome
    historical_outcome: ScorerOutcome
    population_outcome: ScorerOutcome

    # --- Aggregator outputs ---
    overall_risk_score: int                  # 0-100
    risk_level: RiskLevel
    confidence_level: ConfidenceLevel
    data_sources: List[str]

    # --- Recommendation outputs ---
    recommendations: Optional[Recommendations]

    # Written by all five parallel scorers: use operator.add to merge
    data_collection_errors: Annotated[List[str], operator.add]
