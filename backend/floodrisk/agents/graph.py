"""
LangGraph pipeline: single-location flood-risk assessment
==========================================================

  START
    │
    ├────────────┬──────────────┬──────────────────┬──────────────┐
    ▼            ▼              ▼                  ▼              ▼
  Weather     Terrain    Infrastructure       Historical     Population
  Scorer      Scorer        Scorer              Scorer         Scorer
 (WeatherAPI) (Elevation)  (Overpass)        (gov. data)    (gov. data)
    │            │              │                  │              │
    └────────────┴──────────────┴─────────┬────────┴──────────────┘
                                          ▼
                                     Aggregator
                          (weighted score, risk level, confidence)
                                          │
                                          ▼
                               RecommendationGenerator
                                          │
                                         END

The five scorers share no state and run in the same superstep. The Aggregator
has an edge from every scorer, so it only runs once all five have completed or
degraded.
"""

from typing import Sequence

from langgraph.graph import END, START, StateGraph

from floodrisk.agents.nodes.aggregator_agent import aggregator_agent
from floodrisk.agents.nodes.base import SourceScorer
from floodrisk.agents.nodes.recommendation_agent import recommendation_agent
from floodrisk.agents.state.assessment_state import AssessmentState
from floodrisk.models.assessment import SOURCE_NAMES


def build_graph(scorers: Sequence[SourceScorer]):
    by_source = {s.source: s for s in scorers}
    missing = [name for name in SOURCE_NAMES if name not in by_source]
    if missing:
        raise ValueError(f"missing scorers for: {', '.join(missing)}")

    graph = StateGraph(AssessmentState)

    graph.add_node("Aggregator", aggregator_agent)
    graph.add_node("RecommendationGenerator", recommendation_agent)

    # Fan-out: one node per source
    for name in SOURCE_NAMES:
        scorer = by_source[name]
        graph.add_node(scorer.name, scorer.node)
        graph.add_edge(START, scorer.name)
        # Fan-in: Aggregator waits for every scorer
        graph.add_edge(scorer.name, "Aggregator")

    graph.add_edge("Aggregator", "RecommendationGenerator")
    graph.add_edge("RecommendationGenerator", END)

    return graph.compile()
