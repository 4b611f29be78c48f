"""
Run controller — lifecycle of a ranking run.

    start_run()                      → new 'running' run + the lead ids to score
    process_batch(run_id, lead_ids)  → score a slice, persist, bump counters atomically
    finalize_run(run_id)             → per-company ranks, mark 'completed'
    get_results(run_id=None)         → ranked results (latest completed run by default)

Batches are driven by the caller (HTTP client, CLI, or the optional RQ job
below), so a crashed client resumes by sending the lead ids not yet scored.
"""
import logging
import uuid
from datetime import datetime, timezone
from typing import Dict, Iterable, List, Optional

from sqlalchemy import update
from sqlalchemy.exc import SQLAlchemyError

from leadrank.config import DEFAULT_BATCH_SIZE, RUN_STATUSES
from leadrank.database import get_session
from leadrank.models.lead import Lead
from leadrank.models.ranking_result import RankingResult
from leadrank.models.ranking_run import RankingRun
from leadrank.ranking.batch import run_batch
from leadrank.ranking.errors import (
    RankingError, RankingInputError, RankingPersistenceError,
    RunNotFoundError, RunStateError,
)
from leadrank.ranking.ranking_config import get_cost_per_1k_tokens
from leadrank.ranking.ranks import ScoredEntry, company_key, rank_by_company

logger = logging.getLogger('ranking.controller')


# ── Lazy RQ queue (avoids an import-time Redis connection) ───────────────────

_queue = None


def _get_queue():
    global _queue
    if _queue is None:
        from leadrank.extensions import redis_client
        from rq import Queue
        _queue = Queue(connection=redis_client)
    return _queue


def _now():
    return datetime.now(timezone.utc)


def _normalize_lead_ids(lead_ids) -> List[int]:
    """Integer ids, de-duplicated, request order kept."""
    if not isinstance(lead_ids, (list, tuple)):
        raise RankingInputError("lead_ids must be a list")
    seen = []
    for raw in lead_ids:
        if isinstance(raw, bool) or (isinstance(raw, float) and not raw.is_integer()):
            raise RankingInputError(f"Invalid lead id: {raw!r}")
        try:
            lead_id = int(raw)
        except (TypeError, ValueError):
            raise RankingInputError(f"Invalid lead id: {raw!r}")
        if lead_id not in seen:
            seen.append(lead_id)
    return seen


# ── Start ─────────────────────────────────────────────────────────────────────

def start_run() -> Dict:
    """
    Create a new running run over every known lead.

    Any run still marked 'running' (a crashed or abandoned client) is failed
    in the same transaction, so at most one run is active afterwards.
    """
    session = get_session()
    try:
        lead_ids = [row.id for row in session.query(Lead.id).order_by(Lead.account_name, Lead.id)]
        if not lead_ids:
            raise RankingInputError("No leads found. Please seed the database first.")

        swept = session.execute(
            update(RankingRun)
            .where(RankingRun.status == 'running')
            .values(status='failed', completed_at=_now())
            .execution_options(synchronize_session=False)
        ).rowcount
        if swept:
            logger.warning("Marked %d stale running run(s) as failed", swept)

        run_id = str(uuid.uuid4())
        session.add(RankingRun(
            id=run_id,
            status='running',
            total_leads=len(lead_ids),
            processed_leads=0,
            total_tokens=0,
            total_cost=0.0,
        ))
        session.commit()
    except RankingError:
        session.rollback()
        raise
    except SQLAlchemyError as e:
        session.rollback()
        logger.error("Failed to create ranking run", exc_info=True)
        raise RankingPersistenceError(f"Failed to create ranking run: {e}") from e
    finally:
        session.close()

    logger.info("Run %s started — %d leads", run_id, len(lead_ids), extra={'run_id': run_id})
    return {'run_id': run_id, 'lead_ids': lead_ids, 'total': len(lead_ids)}


# ── Process batch ─────────────────────────────────────────────────────────────

def process_batch(run_id: str, lead_ids, scorer=None, pacer=None) -> Dict:
    """
    Score the named leads for a run and persist one result per lead.

    Leads that already have a result in this run are skipped, so re-sending a
    batch never duplicates results or double-counts progress. Scoring happens
    outside any DB transaction; the inserts and the counter increment commit
    together, or not at all.
    """
    if not run_id or not lead_ids:
        raise RankingInputError("run_id and lead_ids are required")
    lead_ids = _normalize_lead_ids(lead_ids)

    # Read phase
    session = get_session()
    try:
        run = session.get(RankingRun, run_id)
        if run is None:
            raise RunNotFoundError(run_id)
        if run.status != 'running':
            raise RunStateError(run_id, run.status, 'process a batch for')

        by_id = {lead.id: lead for lead in session.query(Lead).filter(Lead.id.in_(lead_ids))}
        if not by_id:
            raise RankingInputError("No leads found for given IDs")

        already_scored = {
            row.lead_id for row in session.query(RankingResult.lead_id).filter(
                RankingResult.ranking_run_id == run_id,
                RankingResult.lead_id.in_(list(by_id)),
            )
        }
        pending = [by_id[i] for i in lead_ids if i in by_id and i not in already_scored]
        for lead in pending:
            session.expunge(lead)
    finally:
        session.close()

    missing = len(lead_ids) - len(by_id)
    if missing:
        logger.warning("Run %s: %d requested lead id(s) do not exist", run_id, missing)
    if already_scored:
        logger.info("Run %s: skipping %d already-scored lead(s)", run_id, len(already_scored))

    batch = run_batch(pending, scorer=scorer, pacer=pacer)

    # Write phase
    session = get_session()
    try:
        for lead, judgement in batch.results:
            session.add(RankingResult(
                ranking_run_id=run_id,
                lead_id=lead.id,
                rank=None,
                **judgement.to_dict(),
            ))

        count = batch.processed
        updated = session.execute(
            update(RankingRun)
            .where(
                RankingRun.id == run_id,
                RankingRun.status == 'running',
                RankingRun.processed_leads + count <= RankingRun.total_leads,
            )
            .values(
                processed_leads=RankingRun.processed_leads + count,
                total_tokens=RankingRun.total_tokens + batch.total_tokens,
            )
            .execution_options(synchronize_session=False)
        ).rowcount

        if updated != 1:
            session.rollback()
            run = session.get(RankingRun, run_id)
            if run is None:
                raise RunNotFoundError(run_id)
            if run.status != 'running':
                raise RunStateError(run_id, run.status, 'process a batch for')
            raise RankingInputError(
                f"Batch of {count} would exceed run total "
                f"({run.processed_leads}/{run.total_leads} already processed)"
            )

        session.commit()
        run = session.get(RankingRun, run_id)
        totals = {'total_processed': run.processed_leads, 'total_tokens': run.total_tokens}
    except RankingError:
        session.rollback()
        raise
    except SQLAlchemyError as e:
        session.rollback()
        logger.error("Run %s: failed to save batch results", run_id, exc_info=True)
        raise RankingPersistenceError(f"Failed to save results: {e}") from e
    finally:
        session.close()

    logger.info("Run %s: batch saved — %d processed (%d so far), %d tokens",
                run_id, count, totals['total_processed'], batch.total_tokens,
                extra={'run_id': run_id})
    return {
        'processed': count,
        'skipped': len(already_scored),
        'failed': batch.failed,
        'batch_tokens': batch.total_tokens,
        **totals,
    }


# ── Finalize ──────────────────────────────────────────────────────────────────

def finalize_run(run_id: str) -> Dict:
    """
    Assign per-company ranks to every result of the run and complete it.

    Finalizing before all leads are scored is allowed; only the results
    stored so far are ranked.
    """
    if not run_id:
        raise RankingInputError("run_id is required")

    session = get_session()
    try:
        run = session.get(RankingRun, run_id)
        if run is None:
            raise RunNotFoundError(run_id)
        if run.status != 'running':
            raise RunStateError(run_id, run.status, 'finalize')

        rows = (
            session.query(
                RankingResult.id,
                RankingResult.relevance_score,
                RankingResult.is_relevant,
                Lead.account_name,
            )
            .join(Lead, RankingResult.lead_id == Lead.id)
            .filter(RankingResult.ranking_run_id == run_id)
            .order_by(RankingResult.id)
            .all()
        )
        entries = [
            ScoredEntry(
                result_id=row.id,
                company=row.account_name,
                relevance_score=row.relevance_score or 0,
                is_relevant=bool(row.is_relevant),
            )
            for row in rows
        ]
        ranked = rank_by_company(entries)

        params = [{'id': e.result_id, 'rank': e.rank} for group in ranked.values() for e in group]
        if params:
            session.execute(update(RankingResult), params)

        relevant_count = sum(1 for e in entries if e.is_relevant)
        total_tokens = run.total_tokens or 0
        total_cost = round(total_tokens / 1000.0 * get_cost_per_1k_tokens(), 6)
        summary = _generate_run_summary(
            total_results=len(entries),
            relevant_count=relevant_count,
            company_count=len(ranked),
            total_leads=run.total_leads or 0,
            total_tokens=total_tokens,
            total_cost=total_cost,
        )

        completed = session.execute(
            update(RankingRun)
            .where(RankingRun.id == run_id, RankingRun.status == 'running')
            .values(status='completed', completed_at=_now(), total_cost=total_cost, summary=summary)
            .execution_options(synchronize_session=False)
        ).rowcount
        if completed != 1:
            session.rollback()
            run = session.get(RankingRun, run_id)
            if run is None:
                raise RunNotFoundError(run_id)
            raise RunStateError(run_id, run.status, 'finalize')

        session.commit()
    except RankingError:
        session.rollback()
        raise
    except SQLAlchemyError as e:
        session.rollback()
        logger.error("Run %s: finalize failed", run_id, exc_info=True)
        raise RankingPersistenceError(f"Finalize failed: {e}") from e
    finally:
        session.close()

    logger.info("Run %s completed — %d results, %d relevant across %d companies",
                run_id, len(entries), relevant_count, len(ranked),
                extra={'run_id': run_id})
    return {
        'total_results': len(entries),
        'relevant_count': relevant_count,
        'companies': len(ranked),
        'total_tokens': total_tokens,
        'total_cost': total_cost,
    }


def _generate_run_summary(*, total_results, relevant_count, company_count,
                          total_leads, total_tokens, total_cost) -> str:
    """Human-readable one-paragraph summary. Pure Python, no API calls."""
    if total_results == 0:
        return "No leads were scored in this run."

    lines = [f"Scored {total_results} leads across {company_count} companies."]
    pct = round(relevant_count / total_results * 100)
    lines.append(f"{relevant_count} relevant ({pct}%).")
    if total_leads and total_results < total_leads:
        lines.append(f"Finalized early: {total_leads - total_results} of {total_leads} leads were not scored.")
    if total_tokens:
        lines.append(f"{total_tokens:,} tokens used.")
    if total_cost > 0:
        lines.append(f"~${total_cost:.2f} spent.")
    return ' '.join(lines)


# ── Read side ─────────────────────────────────────────────────────────────────

def _latest_completed_run(session) -> Optional[RankingRun]:
    return (
        session.query(RankingRun)
        .filter(RankingRun.status == 'completed')
        .order_by(RankingRun.created_at.desc(), RankingRun.completed_at.desc())
        .first()
    )


def _rank_sort_key(result: Dict):
    # Ranked first (1, 2, ...), then unranked by descending score.
    if result['rank'] is not None:
        return (0, result['rank'], 0)
    return (1, 0, -result['relevance_score'])


def get_results(run_id: str = None, relevant_only: bool = False) -> Dict:
    """Results of a run joined with lead data, flat (by score) and grouped by company."""
    session = get_session()
    try:
        if run_id:
            run = session.get(RankingRun, run_id)
            if run is None:
                raise RunNotFoundError(run_id)
        else:
            run = _latest_completed_run(session)
            if run is None:
                return {'results': [], 'companies': [], 'run': None,
                        'message': 'No completed ranking runs found'}

        query = session.query(RankingResult).filter(RankingResult.ranking_run_id == run.id)
        if relevant_only:
            query = query.filter(RankingResult.is_relevant.is_(True))
        results = [
            r.to_dict()
            for r in query.order_by(RankingResult.relevance_score.desc(), RankingResult.id)
        ]
        run_dict = run.to_dict()
    finally:
        session.close()

    groups: Dict[str, List[Dict]] = {}
    for result in results:
        company = company_key((result.get('lead') or {}).get('account_name'))
        groups.setdefault(company, []).append(result)

    companies = [
        {
            'company': company,
            'relevant_count': sum(1 for r in group if r['is_relevant']),
            'results': sorted(group, key=_rank_sort_key),
        }
        for company, group in sorted(groups.items(), key=lambda kv: kv[0].lower())
    ]
    return {'results': results, 'companies': companies, 'run': run_dict}


def get_run(run_id: str) -> Dict:
    session = get_session()
    try:
        run = session.get(RankingRun, run_id)
        if run is None:
            raise RunNotFoundError(run_id)
        return run.to_dict()
    finally:
        session.close()


def list_runs(limit: int = None, status: str = None) -> List[Dict]:
    """All runs, newest first, optionally only those in one status."""
    if status is not None and status not in RUN_STATUSES:
        raise RankingInputError(f"Unknown run status: {status!r} (expected one of {', '.join(RUN_STATUSES)})")
    session = get_session()
    try:
        query = session.query(RankingRun).order_by(RankingRun.created_at.desc())
        if status is not None:
            query = query.filter(RankingRun.status == status)
        if limit:
            query = query.limit(limit)
        return [run.to_dict() for run in query]
    finally:
        session.close()


def mark_run_failed(run_id: str) -> bool:
    """Fail a running run. Terminal runs are left untouched."""
    session = get_session()
    try:
        changed = session.execute(
            update(RankingRun)
            .where(RankingRun.id == run_id, RankingRun.status == 'running')
            .values(status='failed', completed_at=_now())
            .execution_options(synchronize_session=False)
        ).rowcount
        session.commit()
        return changed == 1
    except SQLAlchemyError:
        session.rollback()
        logger.error("Run %s: could not mark as failed", run_id, exc_info=True)
        return False
    finally:
        session.close()


# ── Background driver (enqueued via RQ) ───────────────────────────────────────

def _chunks(items: List, size: int) -> Iterable[List]:
    for i in range(0, len(items), size):
        yield items[i:i + size]


def launch_full_run(batch_size: int = None) -> Dict:
    """Start a run and enqueue a worker job that scores every batch and finalizes."""
    batch_size = batch_size or DEFAULT_BATCH_SIZE
    if batch_size < 1:
        raise RankingInputError("batch_size must be at least 1")

    started = start_run()
    job = _get_queue().enqueue(
        run_all_batches, started['run_id'], started['lead_ids'], batch_size,
        job_timeout=14400,
    )
    logger.info("Run %s enqueued as job %s (batch_size=%d)", started['run_id'], job.id, batch_size)
    return {**started, 'job_id': job.id, 'batch_size': batch_size}


def run_all_batches(run_id: str, lead_ids: List[int], batch_size: int = None) -> Optional[Dict]:
    """Drive a run to completion. Any failure marks the run failed."""
    batch_size = batch_size or DEFAULT_BATCH_SIZE
    try:
        for chunk in _chunks(list(lead_ids), batch_size):
            progress = process_batch(run_id, chunk)
            logger.info("Run %s: %d/%d processed", run_id, progress['total_processed'], len(lead_ids))
        return finalize_run(run_id)
    except Exception as e:
        logger.error("Run %s FAILED: %s", run_id, e, exc_info=True, extra={'run_id': run_id})
        mark_run_failed(run_id)
        return None
