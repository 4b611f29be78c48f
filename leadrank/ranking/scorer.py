"""
Lead scorer — evaluates one lead against the persona rubric with the LLM.

Every call yields exactly one Judgement. Call failures and malformed
responses are recovered into a zero-relevance fallback judgement and
reported on the ScoreOutcome, never raised.
"""
import json
import logging
import re
from dataclasses import dataclass, asdict
from typing import Any, Dict, List, Optional, Union

from leadrank.ranking.persona import PERSONA_SPEC, classify_company_size
from leadrank.ranking.ranking_config import get_scorer_setting
from leadrank.services.llm_client import complete_chat

logger = logging.getLogger('ranking.scorer')

FIT_LEVELS = ('excellent', 'good', 'moderate', 'poor', 'disqualified')

JUDGEMENT_FIELDS = ('relevance_score', 'is_relevant', 'reasoning', 'department_fit', 'seniority_fit')

ERROR_CALL = 'call'
ERROR_PARSE = 'parse'

SYSTEM_PROMPT = (
    "You are a lead qualification AI. Always respond with valid JSON only. "
    "No markdown formatting, no code blocks, just the raw JSON object."
)


@dataclass(frozen=True)
class Judgement:
    relevance_score: int
    is_relevant: bool
    reasoning: str
    department_fit: str
    seniority_fit: str

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


@dataclass(frozen=True)
class Ok:
    judgement: Judgement


@dataclass(frozen=True)
class Err:
    reason: str


ParseResult = Union[Ok, Err]


@dataclass
class ScoreOutcome:
    """What scoring one lead produced, including why it fell back (if it did)."""
    judgement: Judgement
    tokens_used: int = 0
    error: Optional[str] = None
    error_kind: Optional[str] = None

    @property
    def failed(self) -> bool:
        return self.error is not None


# ── Prompt ────────────────────────────────────────────────────────────────────

def build_prompt(lead) -> str:
    """User prompt: rubric, lead attributes, size band, output contract."""
    company_size = classify_company_size(lead.account_employee_range)
    first = lead.lead_first_name or ''
    last = lead.lead_last_name or ''

    return f"""You are an expert B2B sales lead qualification analyst for Throxy, an AI-powered sales company.

Given the following persona specification and lead information, evaluate how well this lead matches the ideal customer persona.

{PERSONA_SPEC}

## Lead to Evaluate
- **Name:** {first} {last}
- **Job Title:** {lead.lead_job_title or 'Unknown'}
- **Company:** {lead.account_name or 'Unknown'}
- **Company Domain:** {lead.account_domain or 'Unknown'}
- **Employee Range:** {lead.account_employee_range or 'Unknown'}
- **Company Size Classification:** {company_size}
- **Industry:** {lead.account_industry or 'Unknown'}

## Instructions
Evaluate this lead and respond with ONLY a valid JSON object (no markdown, no code blocks) with exactly these fields:

{{
  "relevance_score": <integer 0-100>,
  "is_relevant": <boolean>,
  "reasoning": "<2-3 sentence explanation of why this lead is or isn't a good fit>",
  "department_fit": "<one of: {', '.join(FIT_LEVELS)}>",
  "seniority_fit": "<one of: {', '.join(FIT_LEVELS)}>"
}}

Key evaluation criteria:
1. Is the lead's job title/role aligned with Throxy's target personas for this company size?
2. Is the department relevant (Sales, Sales Development, Revenue Ops, BD, GTM)?
3. Is the seniority level appropriate for the company size?
4. Should this lead be excluded based on hard/soft exclusion criteria?
5. Does the company/industry suggest they could be a Throxy customer?

If the lead falls under hard exclusions (HR, Finance, Engineering, Legal, etc.) or has a clearly irrelevant role, set is_relevant to false and relevance_score below 20.
If the lead is a strong match, set relevance_score above 70.
A lead with no job title or very unclear information should score around 10-30."""


def build_messages(lead) -> List[Dict[str, str]]:
    return [
        {"role": "system", "content": SYSTEM_PROMPT},
        {"role": "user", "content": build_prompt(lead)},
    ]


# ── Parsing ───────────────────────────────────────────────────────────────────

_FENCE_RE = re.compile(r'```(?:json)?\s*', re.IGNORECASE)


def strip_code_fences(text: str) -> str:
    """Remove markdown ``` / ```json fences around a response."""
    return _FENCE_RE.sub('', text or '').strip()


def _fit(value, field_name):
    if not isinstance(value, str) or value.strip().lower() not in FIT_LEVELS:
        raise ValueError(f"{field_name} must be one of {', '.join(FIT_LEVELS)}, got {value!r}")
    return value.strip().lower()


def parse_judgement(raw: str) -> ParseResult:
    """Validate a raw LLM response against the five-field judgement schema."""
    try:
        data = json.loads(strip_code_fences(raw))
    except (TypeError, ValueError) as e:
        return Err(f"invalid JSON ({e})")

    if not isinstance(data, dict):
        return Err(f"expected a JSON object, got {type(data).__name__}")

    missing = [f for f in JUDGEMENT_FIELDS if f not in data]
    if missing:
        return Err(f"missing fields: {', '.join(missing)}")

    score = data['relevance_score']
    if isinstance(score, bool) or not isinstance(score, (int, float)):
        return Err(f"relevance_score must be a number, got {score!r}")
    if isinstance(score, float) and not score.is_integer():
        return Err(f"relevance_score must be an integer, got {score!r}")
    score = int(score)
    if not 0 <= score <= 100:
        return Err(f"relevance_score out of range 0-100: {score}")

    if not isinstance(data['is_relevant'], bool):
        return Err(f"is_relevant must be a boolean, got {data['is_relevant']!r}")
    if not isinstance(data['reasoning'], str):
        return Err("reasoning must be a string")

    try:
        department_fit = _fit(data['department_fit'], 'department_fit')
        seniority_fit = _fit(data['seniority_fit'], 'seniority_fit')
    except ValueError as e:
        return Err(str(e))

    return Ok(Judgement(
        relevance_score=score,
        is_relevant=data['is_relevant'],
        reasoning=data['reasoning'],
        department_fit=department_fit,
        seniority_fit=seniority_fit,
    ))


def fallback_judgement(reasoning: str) -> Judgement:
    """The zero-relevance judgement recorded whenever scoring fails."""
    return Judgement(
        relevance_score=0,
        is_relevant=False,
        reasoning=reasoning,
        department_fit='poor',
        seniority_fit='poor',
    )


# ── Public API ────────────────────────────────────────────────────────────────

def score_lead(lead) -> ScoreOutcome:
    """Score one lead. Never raises; failures come back as a fallback outcome."""
    preview_chars = int(get_scorer_setting('response_preview_chars'))

    try:
        content, tokens = complete_chat(
            build_messages(lead),
            temperature=get_scorer_setting('temperature'),
            max_tokens=get_scorer_setting('max_tokens'),
        )
    except Exception as e:
        message = str(e) or e.__class__.__name__
        logger.warning("Lead %s: scoring call failed: %s", getattr(lead, 'id', '?'), message,
                       extra={'lead_id': getattr(lead, 'id', None)})
        return ScoreOutcome(
            judgement=fallback_judgement(f"Ranking failed: {message[:preview_chars * 2]}"),
            tokens_used=0,
            error=message,
            error_kind=ERROR_CALL,
        )

    parsed = parse_judgement(content)
    if isinstance(parsed, Ok):
        return ScoreOutcome(judgement=parsed.judgement, tokens_used=tokens)

    logger.warning("Lead %s: unusable response (%s)", getattr(lead, 'id', '?'), parsed.reason,
                   extra={'lead_id': getattr(lead, 'id', None)})
    return ScoreOutcome(
        judgement=fallback_judgement(f"Failed to parse AI response: {(content or '')[:preview_chars]}"),
        tokens_used=tokens,
        error=parsed.reason,
        error_kind=ERROR_PARSE,
    )
