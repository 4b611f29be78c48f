"""
Circuit breaker for the external LLM, with Redis-backed state.

States:
  - CLOSED    → requests pass through
  - OPEN      → too many consecutive failures, calls short-circuit with CircuitOpenError
  - HALF_OPEN → reset_timeout elapsed, one trial call is allowed

Redis being unreachable never blocks a call: the breaker fails open.
Health counters are kept in a Redis hash for /api/health.
"""
import logging
import time

logger = logging.getLogger('services.circuit_breaker')

CLOSED = 'closed'
OPEN = 'open'
HALF_OPEN = 'half_open'


class CircuitOpenError(Exception):
    """Raised when calling through an open circuit breaker."""
    def __init__(self, name, retry_after=None):
        self.name = name
        self.retry_after = retry_after
        super().__init__(f"Circuit breaker '{name}' is OPEN — service unavailable")


class CircuitBreaker:
    """
    Usage:
        cb = CircuitBreaker('llm', redis_client, failure_threshold=5, reset_timeout=60)
        response = cb.call(client.chat.completions.create, model=..., messages=...)
    """

    PREFIX = 'cb'

    def __init__(self, name, redis_client, failure_threshold=5, reset_timeout=60, ignore=None):
        self.name = name
        self.redis = redis_client
        self.failure_threshold = failure_threshold
        self.reset_timeout = reset_timeout
        # Errors matching `ignore` pass through without counting as failures
        self.ignore = ignore

    def _key(self, suffix):
        return f'{self.PREFIX}:{self.name}:{suffix}'

    # ── State ─────────────────────────────────────────────────────────

    @property
    def state(self):
        try:
            s = self.redis.get(self._key('state'))
            if s is None:
                return CLOSED
            if s == OPEN and self._seconds_since_failure() > self.reset_timeout:
                self.redis.set(self._key('state'), HALF_OPEN)
                return HALF_OPEN
            return s
        except Exception:
            return CLOSED

    def _seconds_since_failure(self):
        last = self.redis.get(self._key('last_failure'))
        if not last:
            return float('inf')
        return time.time() - float(last)

    @property
    def failure_count(self):
        try:
            val = self.redis.get(self._key('failures'))
            return int(val) if val else 0
        except Exception:
            return 0

    # ── Calls ─────────────────────────────────────────────────────────

    def call(self, func, *args, **kwargs):
        """Execute func through the breaker; re-raises the func's own errors."""
        if self.state == OPEN:
            try:
                retry_after = max(0.0, self.reset_timeout - self._seconds_since_failure())
            except Exception:
                retry_after = None
            raise CircuitOpenError(self.name, retry_after=retry_after)

        try:
            result = func(*args, **kwargs)
        except Exception as e:
            if self.ignore is not None and self.ignore(e):
                self._on_ignored(e)
            else:
                self._on_failure(e)
            raise
        self._on_success()
        return result

    def _on_success(self):
        try:
            pipe = self.redis.pipeline()
            pipe.set(self._key('state'), CLOSED)
            pipe.set(self._key('failures'), 0)
            pipe.hincrby(self._key('health'), 'success', 1)
            pipe.hset(self._key('health'), 'last_success', str(time.time()))
            pipe.execute()
        except Exception:
            logger.debug("Circuit '%s': could not record success", self.name)

    def _on_ignored(self, error):
        try:
            self.redis.hincrby(self._key('health'), 'ignored', 1)
        except Exception:
            logger.debug("Circuit '%s': could not record ignored error", self.name)
        logger.info("Circuit '%s': not counting error: %s", self.name, error)

    def _on_failure(self, error):
        try:
            count = self.redis.incr(self._key('failures'))
            now = str(time.time())
            self.redis.set(self._key('last_failure'), now)
            pipe = self.redis.pipeline()
            pipe.hincrby(self._key('health'), 'failure', 1)
            pipe.hset(self._key('health'), 'last_failure', now)
            pipe.hset(self._key('health'), 'last_error', str(error)[:200])
            pipe.execute()
            if count >= self.failure_threshold:
                self.redis.set(self._key('state'), OPEN)
                logger.warning("Circuit '%s' OPENED after %d failures: %s", self.name, count, error)
            else:
                logger.info("Circuit '%s' failure %d/%d: %s", self.name, count, self.failure_threshold, error)
        except Exception:
            logger.debug("Circuit '%s': could not record failure", self.name)

    def reset(self):
        """Manually close the circuit."""
        try:
            pipe = self.redis.pipeline()
            pipe.set(self._key('state'), CLOSED)
            pipe.set(self._key('failures'), 0)
            pipe.delete(self._key('last_failure'))
            pipe.execute()
            logger.info("Circuit '%s' manually reset to CLOSED", self.name)
        except Exception as e:
            logger.error("Failed to reset circuit '%s': %s", self.name, e)

    def get_health(self):
        """Health metrics dict for this service."""
        health = {
            'name': self.name,
            'state': 'unknown',
            'failure_count': 0,
            'failure_threshold': self.failure_threshold,
            'reset_timeout': self.reset_timeout,
            'total_success': 0,
            'total_failure': 0,
            'total_ignored': 0,
            'last_error': '',
        }
        try:
            data = self.redis.hgetall(self._key('health')) or {}
            health.update(
                state=self.state,
                failure_count=self.failure_count,
                total_success=int(data.get('success', 0)),
                total_failure=int(data.get('failure', 0)),
                total_ignored=int(data.get('ignored', 0)),
                last_error=data.get('last_error', ''),
            )
        except Exception:
            pass
        return health


# ── Registry ──────────────────────────────────────────────────────────────

_registry = {}


def _is_rate_limited(error):
    # Rate limits are paced by the batch runner, not tripped on
    from leadrank.ranking.pacing import is_rate_limit_error
    return is_rate_limit_error(str(error))


BREAKER_SETTINGS = {
    'llm': {'failure_threshold': 5, 'reset_timeout': 60, 'ignore': _is_rate_limited},
}


def get_breaker(name, redis_client=None, **kwargs):
    """Get or create a named circuit breaker (singleton per name)."""
    if name not in _registry:
        if redis_client is None:
            from leadrank.extensions import redis_client as rc
            redis_client = rc
        settings = {**BREAKER_SETTINGS.get(name, {}), **kwargs}
        _registry[name] = CircuitBreaker(name, redis_client, **settings)
    return _registry[name]


def get_all_breakers():
    return dict(_registry)


def init_breakers(redis_client):
    """Register the breakers for every external service."""
    breakers = {
        name: CircuitBreaker(name, redis_client, **settings)
        for name, settings in BREAKER_SETTINGS.items()
    }
    _registry.update(breakers)
    return breakers
