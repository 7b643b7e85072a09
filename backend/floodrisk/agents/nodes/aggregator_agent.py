"""
Aggregator
==========
Combines the five source scores into one overall flood-risk score.

  weather 40% + terrain 25% + infrastructure 15% + historical 15% + population 5%

Overall is rounded half-up to an integer. Risk level uses a 5-tier scale on the
overall score (the per-source levels stay 3-tier):

  ≥ 80 extreme   ≥ 60 very_high   ≥ 40 high   ≥ 20 medium   else low

Confidence counts sources that returned genuine (non-degraded) data:
  ≥ 80% high   ≥ 50% medium   else low
"""

import logging
from typing import Mapping, NamedTuple

from floodrisk.agents.state.assessment_state import AssessmentState
from floodrisk.models.assessment import (
    SOURCE_NAMES,
    ConfidenceLevel,
    RiskLevel,
    ScorerOutcome,
)

logger = logging.getLogger(__name__)

# Percent weights, summing to 100.
SOURCE_WEIGHTS: dict[str, int] = {
    "weather": 40,
    "terrain": 25,
    "infrastructure": 15,
    "historical": 15,
    "population": 5,
}

RISK_LEVEL_THRESHOLDS: list[tuple[int, RiskLevel]] = [
    (80, "extreme"),
    (60, "very_high"),
    (40, "high"),
    (20, "medium"),
]


class AggregateResult(NamedTuple):
    overall_risk_score: int
    risk_level: RiskLevel
    confidence_level: ConfidenceLevel


def overall_score(scores: Mapping[str, int]) -> int:
    weighted = sum(SOURCE_WEIGHTS[name] * scores[name] for name in SOURCE_NAMES)
    # Integer arithmetic keeps x.5 results exact before rounding half-up.
    return (weighted + 50) // 100


def risk_level(score: int) -> RiskLevel:
    for threshold, level in RISK_LEVEL_THRESHOLDS:
        if score >= threshold:
            return level
    return "low"


def confidence_level(available: int, total: int = len(SOURCE_NAMES)) -> ConfidenceLevel:
    if total <= 0:
        return "low"
    ratio = available / total
    if ratio >= 0.8:
        return "high"
    if ratio >= 0.5:
        return "medium"
    return "low"


def aggregate(outcomes: Mapping[str, ScorerOutcome]) -> AggregateResult:
    scores = {name: outcomes[name].assessment.score for name in SOURCE_NAMES}
    overall = overall_score(scores)
    available = sum(1 for name in SOURCE_NAMES if not outcomes[name].is_degraded)
    return AggregateResult(overall, risk_level(overall), confidence_level(available))


def consulted_providers(outcomes: Mapping[str, ScorerOutcome]) -> list[str]:
    return sorted({o.provider for o in outcomes.values() if o.consulted})


def outcomes_from_state(state: AssessmentState) -> dict[str, ScorerOutcome]:
    return {name: state[f"{name}_outcome"] for name in SOURCE_NAMES}


async def aggregator_agent(state: AssessmentState) -> AssessmentState:
    """Aggregator node: runs once all five scorer outcomes are in the state."""
    outcomes = outcomes_from_state(state)
    result = aggregate(outcomes)
    scores = {n: o.assessment.score for n, o in outcomes.items()}
    logger.info(
        f"[Aggregator] {state['location'].display_name}: overall={result.overall_risk_score} "
        f"level={result.risk_level} confidence={result.confidence_level} "
        f"scores={scores}"
    )
    return {
        "overall_risk_score": result.overall_risk_score,
        "risk_level": result.risk_level,
        "confidence_level": result.confidence_level,
        "data_sources": consulted_providers(outcomes),
    }
