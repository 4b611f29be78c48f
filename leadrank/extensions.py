"""
Shared client instances — Redis and the LLM (OpenAI-compatible) client.

Importing this module is always safe, even when env vars are missing
during tests: the Redis client connects lazily and the LLM client is
left as None without an API key.
"""
import logging
import redis

from leadrank.config import REDIS_URL, LLM_API_KEY, LLM_BASE_URL, LLM_TIMEOUT

logger = logging.getLogger('leadrank.extensions')

# ── Redis ─────────────────────────────────────────────────────────────────────
redis_client = redis.from_url(REDIS_URL, decode_responses=True)

# ── LLM ───────────────────────────────────────────────────────────────────────
llm_client = None
if LLM_API_KEY:
    try:
        from openai import OpenAI
        # SDK retries are disabled: rate-limited calls are paced, never re-sent.
        llm_client = OpenAI(
            api_key=LLM_API_KEY,
            base_url=LLM_BASE_URL,
            timeout=LLM_TIMEOUT,
            max_retries=0,
        )
        logger.info("LLM client initialized (base_url=%s)", LLM_BASE_URL)
    except Exception as e:
        logger.error("Error initializing LLM client: %s", e)
else:
    logger.warning("LLM_API_KEY not set — every lead will get the fallback judgement")
