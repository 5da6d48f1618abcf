from __future__ import annotations

import logging
import threading
from dataclasses import dataclass
from typing import Callable, Optional, Tuple, Type, TypeVar

from ..core.constants import DEFAULT_RETRY_DELAYS
from ..core.exceptions import VendorUnavailable

logger = logging.getLogger(__name__)

T = TypeVar("T")


@dataclass(frozen=True)
class RetryPolicy:
    """Exponential backoff: ``base_delay * 2**n`` for n in 0..max_retries-1."""

    max_retries: int = len(DEFAULT_RETRY_DELAYS)
    base_delay: float = DEFAULT_RETRY_DELAYS[0]
    retry_on: Tuple[Type[BaseException], ...] = (VendorUnavailable,)

    def delays(self) -> Tuple[float, ...]:
        return tuple(self.base_delay * (2 ** n) for n in range(self.max_retries))


class RetryCancelled(Exception):
    """Raised when the stop event fires during a backoff sleep."""


def call_with_retry(
    fn: Callable[[], T],
    policy: RetryPolicy,
    *,
    stop_event: Optional[threading.Event] = None,
    wait: Optional[Callable[[float], bool]] = None,
) -> Tuple[T, int]:
    """Call ``fn`` until it succeeds or the retry budget is spent.

    Returns ``(value, attempts)``. ``wait(seconds)`` sleeps and returns True when
    the sleep was interrupted; it defaults to ``stop_event.wait``.
    """

    event = stop_event or threading.Event()
    sleeper = wait or event.wait
    delays = policy.delays()

    attempt = 0
    while True:
        attempt += 1
        try:
            return fn(), attempt
        except policy.retry_on as e:
            if attempt > len(delays):
                logger.error("Giving up after %d attempts: %s", attempt, e)
                raise
            delay = delays[attempt - 1]
            logger.warning("Attempt %d failed (%s); retrying in %.0fs", attempt, e, delay)
            if sleeper(delay):
                raise RetryCancelled(f"Cancelled while waiting to retry: {e}") from e
