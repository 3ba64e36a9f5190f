import asyncio
from typing import Awaitable, Callable, Optional
import logging

from ..providers.base_provider import AttemptOutcome, OutcomeKind

logger = logging.getLogger(__name__)

SleepFunc = Callable[[float], Awaitable[None]]


class BackoffPolicy:
    """Fixed pause between models after a rate-limited attempt.

    Only 429s trigger the pause, and never after the last model in the
    registry. Other failures advance to the next model immediately.
    """

    def __init__(self, delay: float = 2.0, sleep: Optional[SleepFunc] = None):
        if delay < 0:
            raise ValueError("delay must be >= 0")
        self.delay = delay
        self._sleep = sleep or asyncio.sleep

    def should_wait(self, outcome: AttemptOutcome, is_last: bool) -> bool:
        return outcome.kind == OutcomeKind.RATE_LIMITED and not is_last

    async def wait(self, outcome: AttemptOutcome, is_last: bool) -> bool:
        """Sleep if the policy applies. Returns whether it slept."""
        if not self.should_wait(outcome, is_last):
            return False

        logger.info(f"Model {outcome.model} is rate-limited. Waiting {self.delay:.1f}s before next model")
        await self._sleep(self.delay)
        return True
