"""
SourceScorer
============
Shared contract for the five source scorers.

Each scorer turns one external collaborator's data into a normalised
``SourceAssessment`` (score 0–100, level, contributing factors). ``assess``
never raises: collaborator errors, rate limiting (HTTP 429), missing data and
timeouts all produce the scorer's fixed degraded assessment, tagged as such in
the returned ``ScorerOutcome`` so a single failing source never aborts an
overall assessment.
"""

import asyncio
import logging
from abc import ABC, abstractmethod
from typing import Any, Awaitable, Callable, Optional, TypeVar

from floodrisk.agents.state.assessment_state import AssessmentState
from floodrisk.config.settings import settings
from floodrisk.models.assessment import (
    Location,
    ScorerOutcome,
    SourceAssessment,
    SourceLevel,
    source_level,
)
from floodrisk.utils.cache import TTLCache

logger = logging.getLogger(__name__)

T = TypeVar("T")


class SourceUnavailable(Exception):
    """The collaborator answered but had no usable data for this location."""

    def __init__(self, reason: str, consulted: bool = True):
        super().__init__(reason)
        self.consulted = consulted


class SourceScorer(ABC):
    source: str
    provider: str
    default_score: int
    default_level: SourceLevel
    default_factor: str

    def __init__(self, cache: TTLCache, timeout: Optional[float] = None):
        self.cache = cache
        self.timeout = settings.SCORER_TIMEOUT_SECONDS if timeout is None else timeout
        self._inflight: dict[str, asyncio.Future] = {}

    @property
    def name(self) -> str:
        return type(self).__name__

    @abstractmethod
    async def _assess(self, location: Location) -> SourceAssessment:
        """Fetch collaborator data and score it. May raise."""

    def default_assessment(self) -> SourceAssessment:
        return SourceAssessment(
            score=self.default_score,
            level=self.default_level,
            factors=[self.default_factor],
        )

    def build(self, score: int, factors: list[str], raw: Optional[dict[str, Any]] = None) -> SourceAssessment:
        score = min(int(score), 100)
        return SourceAssessment(score=score, level=source_level(score), factors=factors, raw=raw)

    async def cached(self, key: str, fetch: Callable[[], Awaitable[Optional[T]]]) -> Optional[T]:
        """
        Return the cached value for ``key`` or fetch, store and return it.

        Concurrent misses on the same key share one collaborator call. The
        fetch is shielded, so a caller timing out does not cancel it for the
        others still waiting.
        """
        value = self.cache.get(key)
        if value is not None:
            logger.debug(f"[{self.name}] cache hit {key!r}")
            return value

        pending = self._inflight.get(key)
        if pending is None:
            pending = asyncio.ensure_future(self._fetch_and_store(key, fetch))
            self._inflight[key] = pending
            pending.add_done_callback(lambda fut: self._settle(key, fut))
        else:
            logger.debug(f"[{self.name}] joining in-flight fetch {key!r}")
        return await asyncio.shield(pending)

    async def _fetch_and_store(self, key: str, fetch: Callable[[], Awaitable[Optional[T]]]) -> Optional[T]:
        value = await fetch()
        if value is not None:
            self.cache.set(key, value)
        return value

    def _settle(self, key: str, fut: asyncio.Future) -> None:
        if self._inflight.get(key) is fut:
            del self._inflight[key]
        # Mark the error retrieved when every waiter has already given up.
        if not fut.cancelled():
            fut.exception()

    async def assess(self, location: Location) -> ScorerOutcome:
        consulted = True
        try:
            assessment = await asyncio.wait_for(self._assess(location), timeout=self.timeout)
            logger.info(
                f"[{self.name}] {location.display_name}: score={assessment.score} level={assessment.level}"
            )
            return ScorerOutcome.ok(self.source, self.provider, assessment)
        except asyncio.TimeoutError:
            reason = f"timed out after {self.timeout}s"
        except SourceUnavailable as e:
            reason = str(e)
            consulted = e.consulted
        except Exception as e:
            reason = f"{type(e).__name__}: {e}"

        logger.warning(f"[{self.name}] degraded for {location.display_name}: {reason}")
        return ScorerOutcome.degraded(
            self.source,
            self.provider,
            self.default_assessment(),
            reason=reason,
            consulted=consulted,
        )

    async def node(self, state: AssessmentState) -> AssessmentState:
        """LangGraph node: score ``state['location']`` into this source's slot."""
        outcome = await self.assess(state["location"])
        errors = [f"{self.source}: {outcome.reason}"] if outcome.is_degraded else []
        return {f"{self.source}_outcome": outcome, "data_collection_errors": errors}
