"""
Fixed-delay rate limiter for the LLM's requests-per-minute quota.

Calls are strictly sequential; after each one the pacer sleeps either the
normal inter-call delay or, when the call hit a rate limit, the longer
recovery delay. `sleep` is injectable so tests never wait.
"""
import logging
import time
from typing import Callable, Iterable, Optional

from leadrank.ranking.ranking_config import get_pacing_setting

logger = logging.getLogger('ranking.pacing')


def is_rate_limit_error(message: Optional[str], markers: Iterable[str] = None) -> bool:
    """True if an error message carries one of the rate-limit markers."""
    if not message:
        return False
    if markers is None:
        markers = get_pacing_setting('rate_limit_markers')
    text = message.lower()
    return any(m.lower() in text for m in markers)


class FixedDelayPacer:
    """Sleeps a fixed delay between calls, longer after a rate-limit hit."""

    def __init__(self, call_delay: float = None, rate_limit_delay: float = None,
                 sleep: Callable[[float], None] = None):
        self.call_delay = float(get_pacing_setting('call_delay') if call_delay is None else call_delay)
        self.rate_limit_delay = float(
            get_pacing_setting('rate_limit_delay') if rate_limit_delay is None else rate_limit_delay
        )
        self._sleep = sleep or time.sleep
        self.total_slept = 0.0

    def after_call(self, rate_limited: bool = False) -> float:
        """Pause after one call; returns the delay used."""
        delay = self.rate_limit_delay if rate_limited else self.call_delay
        if rate_limited:
            logger.warning("Rate limit hit — backing off %.1fs", delay)
        if delay > 0:
            self._sleep(delay)
            self.total_slept += delay
        return delay
