"""Explicit wait/retry policies.

Sleeping is part of the contract in exactly two places: between pages of the
open-PR listing, and between attempts of PR discovery. Both take a policy so
tests can pass NO_WAIT.
"""

from __future__ import annotations

import logging
import time
from dataclasses import dataclass
from typing import Callable

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class RetryPolicy:
    max_attempts: int = 2
    delay: float = 10.0
    # attempt -> seconds; overrides the fixed delay when set.
    backoff: Callable[[int], float] | None = None
    sleep: Callable[[float], None] = time.sleep

    def delay_for(self, attempt: int) -> float:
        if self.backoff is not None:
            return max(0.0, float(self.backoff(attempt)))
        return max(0.0, float(self.delay))

    def wait(self, attempt: int) -> None:
        seconds = self.delay_for(attempt)
        if seconds > 0:
            logger.debug("Waiting %.1fs before attempt %d", seconds, attempt)
            self.sleep(seconds)


def _no_sleep(_seconds: float) -> None:
    pass


NO_WAIT = RetryPolicy(max_attempts=1, delay=0.0, sleep=_no_sleep)

DISCOVERY_POLICY = RetryPolicy(max_attempts=2, delay=10.0)
PAGE_COURTESY_POLICY = RetryPolicy(max_attempts=1, delay=2.0)
