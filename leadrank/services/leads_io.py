"""
Lead CSV import / listing / top-N export.

Seeding replaces everything: results, runs and leads are cleared before the
new leads go in, so ids from an older import never mix with new ones.
"""
import csv
import io
import logging
from typing import Dict, List, Optional, Tuple

from sqlalchemy import delete
from sqlalchemy.exc import SQLAlchemyError

from leadrank.config import DEFAULT_TOP_N, LEADS_CSV_PATH
from leadrank.database import get_session
from leadrank.models.lead import Lead
from leadrank.models.ranking_result import RankingResult
from leadrank.models.ranking_run import RankingRun
from leadrank.ranking.errors import (
    LeadImportError, RankingInputError, RankingPersistenceError, RunNotFoundError,
)
from leadrank.ranking.ranks import company_key

logger = logging.getLogger('services.leads_io')

LEAD_COLUMNS = (
    'account_name',
    'lead_first_name',
    'lead_last_name',
    'lead_job_title',
    'account_domain',
    'account_employee_range',
    'account_industry',
)

INSERT_CHUNK = 50

EXPORT_HEADERS = [
    'Rank', 'Company', 'First Name', 'Last Name', 'Job Title',
    'Relevance Score', 'Department Fit', 'Seniority Fit', 'Reasoning',
    'Domain', 'Employee Range', 'Industry',
]


# ── Import ────────────────────────────────────────────────────────────────────

def parse_leads_csv(text: str) -> List[Dict[str, str]]:
    """Header-row CSV → lead dicts. Missing columns become ''."""
    if text is None:
        text = ''
    # utf-8-sig exports leave a BOM on the first header
    reader = csv.DictReader(io.StringIO(text.lstrip('\ufeff')))
    if reader.fieldnames:
        reader.fieldnames = [(name or '').strip() for name in reader.fieldnames]

    leads = []
    for row in reader:
        values = {col: (row.get(col) or '').strip() for col in LEAD_COLUMNS}
        if not any(values.values()):
            continue
        leads.append(values)
    return leads


def import_leads_csv(text: str) -> int:
    """Replace all leads with the ones in `text`. Returns the inserted count."""
    leads = parse_leads_csv(text)
    if not leads:
        raise LeadImportError("No records found in CSV")

    session = get_session()
    try:
        session.execute(delete(RankingResult))
        session.execute(delete(RankingRun))
        session.execute(delete(Lead))

        inserted = 0
        for i in range(0, len(leads), INSERT_CHUNK):
            chunk = leads[i:i + INSERT_CHUNK]
            session.add_all(Lead(**values) for values in chunk)
            session.flush()
            inserted += len(chunk)

        session.commit()
    except SQLAlchemyError as e:
        session.rollback()
        logger.error("Lead import failed", exc_info=True)
        raise RankingPersistenceError(f"Failed to insert leads: {e}") from e
    finally:
        session.close()

    logger.info("Imported %d leads", inserted)
    return inserted


def load_default_csv(path: str = None) -> str:
    """Read the bundled leads file (LEADS_CSV_PATH unless given)."""
    path = path or LEADS_CSV_PATH
    try:
        with open(path, 'r', encoding='utf-8') as f:
            return f.read()
    except OSError as e:
        raise LeadImportError(f"Cannot read leads file {path}: {e}") from e


# ── Listing ───────────────────────────────────────────────────────────────────

def list_leads() -> Dict:
    """All leads ordered by company name, with a count."""
    session = get_session()
    try:
        leads = [
            lead.to_dict()
            for lead in session.query(Lead).order_by(Lead.account_name, Lead.id)
        ]
        return {'leads': leads, 'count': len(leads)}
    finally:
        session.close()


# ── Export ────────────────────────────────────────────────────────────────────

def _resolve_export_run(session, run_id: Optional[str]) -> RankingRun:
    if run_id:
        run = session.get(RankingRun, run_id)
        if run is None:
            raise RunNotFoundError(run_id)
        return run

    run = (
        session.query(RankingRun)
        .filter(RankingRun.status == 'completed')
        .order_by(RankingRun.created_at.desc())
        .first()
    )
    if run is None:
        raise RunNotFoundError(None, "No completed ranking runs found")
    return run


def top_leads_per_company(run_id: str = None, top_n: int = DEFAULT_TOP_N) -> List[Dict]:
    """Relevant results of a run, at most top_n per company, best score first."""
    if top_n < 1:
        raise RankingInputError("top_n must be at least 1")

    session = get_session()
    try:
        run = _resolve_export_run(session, run_id)
        results = (
            session.query(RankingResult)
            .filter(RankingResult.ranking_run_id == run.id, RankingResult.is_relevant.is_(True))
            .order_by(RankingResult.relevance_score.desc(), RankingResult.id)
            .all()
        )
        rows = [r.to_dict() for r in results]
    finally:
        session.close()

    groups: Dict[str, List[Dict]] = {}
    for row in rows:
        company = company_key((row.get('lead') or {}).get('account_name'))
        group = groups.setdefault(company, [])
        if len(group) < top_n:
            group.append(row)
    return [row for group in groups.values() for row in group]


def export_top_leads_csv(run_id: str = None, top_n: int = DEFAULT_TOP_N) -> Tuple[str, str]:
    """Build the top-N-per-company CSV. Returns (csv_text, filename)."""
    rows = top_leads_per_company(run_id=run_id, top_n=top_n)

    buf = io.StringIO()
    writer = csv.writer(buf, lineterminator='\n')
    writer.writerow(EXPORT_HEADERS)
    for r in rows:
        lead = r.get('lead') or {}
        writer.writerow([
            r['rank'] or '',
            lead.get('account_name', ''),
            lead.get('lead_first_name', ''),
            lead.get('lead_last_name', ''),
            lead.get('lead_job_title', ''),
            r['relevance_score'],
            r['department_fit'],
            r['seniority_fit'],
            r['reasoning'],
            lead.get('account_domain', ''),
            lead.get('account_employee_range', ''),
            lead.get('account_industry', ''),
        ])

    logger.info("Exported %d leads (top %d per company)", len(rows), top_n)
    return buf.getvalue(), f"top_{top_n}_leads_per_company.csv"
