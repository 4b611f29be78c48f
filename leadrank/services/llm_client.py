"""
LLM chat helper — one request/response call through the circuit breaker.

Works against any OpenAI-compatible endpoint (Groq by default, see config).
"""
import logging
from typing import Dict, List, Tuple

from leadrank.config import LLM_MODEL
from leadrank.extensions import llm_client as client

logger = logging.getLogger('services.llm')


class LLMUnavailableError(RuntimeError):
    """No LLM client is configured (missing API key)."""


def complete_chat(messages: List[Dict[str, str]], temperature: float, max_tokens: int,
                  model: str = None) -> Tuple[str, int]:
    """
    Send a chat completion and return (text, total_tokens).

    Raises whatever the client raises (rate limits included); callers decide
    how to recover.
    """
    if client is None:
        raise LLMUnavailableError("LLM client not configured — set LLM_API_KEY")

    from leadrank.services.circuit_breaker import get_breaker
    cb = get_breaker('llm')
    response = cb.call(
        client.chat.completions.create,
        model=model or LLM_MODEL,
        messages=messages,
        temperature=temperature,
        max_tokens=max_tokens,
    )

    content = ''
    if response.choices:
        content = response.choices[0].message.content or ''
    tokens = 0
    usage = getattr(response, 'usage', None)
    if usage is not None:
        tokens = getattr(usage, 'total_tokens', 0) or 0
    logger.debug("LLM call used %d tokens", tokens)
    return content, int(tokens)
