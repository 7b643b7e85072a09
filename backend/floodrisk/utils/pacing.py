import asyncio
import logging
from typing import Awaitable, Callable

logger = logging.getLogger(__name__)


class GroupPacer:
    """
    Spaces out successive batch groups to stay under provider rate limits.

    ``wait()`` is called before each group. The first call returns at once;
    every later call sleeps ``delay`` seconds.
    """

    def __init__(
        self,
        delay: float,
        sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
    ):
        self.delay = delay
        self._sleep = sleep
        self._started = False

    async def wait(self) -> None:
        if not self._started:
            self._started = True
            return
        if self.delay > 0:
            logger.info(f"[GroupPacer] pausing {self.delay}s before next group")
            await self._sleep(self.delay)

    def reset(self) -> None:
        self._started = False
