"""
BatchOrchestrator
=================
Runs the single-location pipeline over many locations:

  - fixed-size groups (default 5), every location in a group runs concurrently
  - group N+1 starts only after group N has fully settled and the pacer has
    let it through (provider rate limits)
  - failed items (None or an exception) are dropped, never abort the batch
"""

import asyncio
import logging
from typing import Awaitable, Callable, Optional, Sequence

from floodrisk.models.assessment import BatchResult, FloodRiskAssessment, Location
from floodrisk.utils.pacing import GroupPacer

logger = logging.getLogger(__name__)

AssessFn = Callable[[Location], Awaitable[Optional[FloodRiskAssessment]]]


def split_groups(items: Sequence[Location], size: int) -> list[list[Location]]:
    return [list(items[i:i + size]) for i in range(0, len(items), size)]


class BatchOrchestrator:
    def __init__(
        self,
        assess: AssessFn,
        pacer_factory: Callable[[], GroupPacer],
        group_size: int = 5,
    ):
        if group_size < 1:
            raise ValueError("group_size must be at least 1")
        self._assess = assess
        self._pacer_factory = pacer_factory
        self.group_size = group_size

    async def assess_batch(self, locations: Sequence[Location]) -> BatchResult:
        logger.info(f"[BatchOrchestrator] starting batch assessment for {len(locations)} location(s)")
        pacer = self._pacer_factory()
        assessments: list[FloodRiskAssessment] = []

        groups = split_groups(locations, self.group_size)
        for index, group in enumerate(groups, start=1):
            await pacer.wait()
            logger.info(f"[BatchOrchestrator] group {index}/{len(groups)}: {len(group)} location(s)")
            results = await asyncio.gather(
                *(self._assess(loc) for loc in group),
                return_exceptions=True,
            )
            for loc, res in zip(group, results):
                if isinstance(res, BaseException):
                    logger.error(f"[BatchOrchestrator] {loc.display_name} failed: {res}")
                elif res is None:
                    logger.warning(f"[BatchOrchestrator] {loc.display_name} returned no assessment")
                else:
                    assessments.append(res)

        result = BatchResult(
            assessments=assessments,
            total_requested=len(locations),
            total_assessed=len(assessments),
        )
        logger.info(
            f"[BatchOrchestrator] completed batch assessment: "
            f"{result.total_assessed}/{result.total_requested} successful"
        )
        return result
