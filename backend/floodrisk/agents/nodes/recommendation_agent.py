"""
RecommendationGenerator
=======================
Rule-based mapping from per-source and overall scores to four tiers of
guidance. Rules fire independently; a tier with no fired rule falls back to a
single default line so no tier is ever empty.
"""

from floodrisk.agents.nodes.aggregator_agent import outcomes_from_state
from floodrisk.agents.state.assessment_state import AssessmentState
from floodrisk.models.assessment import Recommendations, RiskFactors

SOURCE_THRESHOLD = 60

EVACUATION_ACTIONS = [
    "Immediate evacuation of high-risk areas",
    "Activate emergency operations center",
    "Deploy emergency response teams",
    "Close roads and evacuate vehicles",
]

PREPARATION_ACTIONS = [
    "Monitor water levels continuously",
    "Prepare emergency supplies",
    "Alert vulnerable populations",
]

DEFAULTS = {
    "immediate_actions": "Monitor local conditions",
    "short_term": "Stay informed about weather conditions",
    "long_term": "Consider flood insurance",
    "preparedness": "Create emergency contact list",
}


def generate_recommendations(factors: RiskFactors, overall: int) -> Recommendations:
    immediate: list[str] = []
    short_term: list[str] = []
    long_term: list[str] = []
    preparedness: list[str] = []

    if overall >= 80:
        immediate += EVACUATION_ACTIONS
    elif overall >= 60:
        immediate += PREPARATION_ACTIONS

    if factors.weather.score >= SOURCE_THRESHOLD:
        short_term.append("Monitor weather forecasts closely")
        preparedness.append("Prepare emergency weather radio")

    if factors.terrain.score >= SOURCE_THRESHOLD:
        long_term.append("Consider property elevation or relocation")
        preparedness.append("Create family emergency plan")

    if factors.infrastructure.score >= SOURCE_THRESHOLD:
        long_term.append("Improve drainage infrastructure")
        short_term.append("Clear drains and stormwater systems")

    if factors.historical.score >= SOURCE_THRESHOLD:
        preparedness.append("Learn from past flood events")
        long_term.append("Implement flood-resistant building codes")

    if factors.population.score >= SOURCE_THRESHOLD:
        preparedness.append("Develop community flood preparedness programs")
        short_term.append("Organize community evacuation drills")

    return Recommendations(
        immediate_actions=immediate or [DEFAULTS["immediate_actions"]],
        short_term=short_term or [DEFAULTS["short_term"]],
        long_term=long_term or [DEFAULTS["long_term"]],
        preparedness=preparedness or [DEFAULTS["preparedness"]],
    )


def risk_factors_from_state(state: AssessmentState) -> RiskFactors:
    outcomes = outcomes_from_state(state)
    return RiskFactors(**{name: o.assessment for name, o in outcomes.items()})


async def recommendation_agent(state: AssessmentState) -> AssessmentState:
    factors = risk_factors_from_state(state)
    return {"recommendations": generate_recommendations(factors, state["overall_risk_score"])}
