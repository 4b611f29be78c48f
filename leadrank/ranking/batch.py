"""
Batch runner — scores a slice of a run's leads one at a time.

No persistence happens here; the run controller stores what this returns.
A failing lead never aborts the batch: its fallback judgement is kept and
the loop moves on.
"""
import logging
from dataclasses import dataclass, field
from typing import Any, Callable, List, Tuple

from leadrank.ranking.pacing import FixedDelayPacer, is_rate_limit_error
from leadrank.ranking.scorer import ERROR_CALL, Judgement, ScoreOutcome, score_lead

logger = logging.getLogger('ranking.batch')


@dataclass
class BatchResult:
    """Uniform output of one batch."""
    results: List[Tuple[Any, Judgement]] = field(default_factory=list)
    total_tokens: int = 0
    failed: int = 0
    rate_limited: int = 0
    errors: List[str] = field(default_factory=list)

    @property
    def processed(self) -> int:
        return len(self.results)


def run_batch(leads, scorer: Callable[[Any], ScoreOutcome] = None,
              pacer: FixedDelayPacer = None) -> BatchResult:
    """Score leads sequentially with pacing between every call."""
    scorer = scorer or score_lead
    pacer = pacer or FixedDelayPacer()
    batch = BatchResult()

    for lead in leads:
        outcome = scorer(lead)
        batch.results.append((lead, outcome.judgement))
        batch.total_tokens += outcome.tokens_used or 0

        rate_limited = False
        if outcome.failed:
            batch.failed += 1
            batch.errors.append(f"lead {getattr(lead, 'id', '?')}: {outcome.error}")
            rate_limited = outcome.error_kind == ERROR_CALL and is_rate_limit_error(outcome.error)
            if rate_limited:
                batch.rate_limited += 1
        else:
            logger.info("Lead %s: score=%d relevant=%s",
                        getattr(lead, 'id', '?'), outcome.judgement.relevance_score,
                        outcome.judgement.is_relevant)

        pacer.after_call(rate_limited=rate_limited)

    logger.info("Batch done — %d scored, %d failed (%d rate-limited), %d tokens",
                batch.processed, batch.failed, batch.rate_limited, batch.total_tokens)
    return batch
