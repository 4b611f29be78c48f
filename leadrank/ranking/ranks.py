"""
Per-company rank assignment.

Within one company, relevant entries get dense 1-based ranks by descending
relevance score; irrelevant entries stay unranked and do not consume a rank.
Equal scores keep their input order (sorted() is stable).
"""
from dataclasses import dataclass, replace
from typing import Dict, Iterable, List, Optional

UNKNOWN_COMPANY = 'Unknown'


@dataclass(frozen=True)
class ScoredEntry:
    result_id: Optional[int]
    company: str
    relevance_score: int
    is_relevant: bool
    rank: Optional[int] = None


def company_key(name) -> str:
    """Grouping key for a company name; blank names share one bucket."""
    if name is None:
        return UNKNOWN_COMPANY
    name = str(name)
    return name if name.strip() else UNKNOWN_COMPANY


def assign_ranks(entries: Iterable[ScoredEntry]) -> List[ScoredEntry]:
    """Rank one company's group. Returns new entries in the input order."""
    entries = list(entries)
    order = sorted(range(len(entries)), key=lambda i: entries[i].relevance_score, reverse=True)

    ranks: Dict[int, Optional[int]] = {}
    counter = 1
    for i in order:
        if entries[i].is_relevant:
            ranks[i] = counter
            counter += 1
        else:
            ranks[i] = None

    return [replace(entry, rank=ranks[i]) for i, entry in enumerate(entries)]


def group_by_company(entries: Iterable[ScoredEntry]) -> Dict[str, List[ScoredEntry]]:
    """Group entries by company key, preserving first-seen and insertion order."""
    groups: Dict[str, List[ScoredEntry]] = {}
    for entry in entries:
        groups.setdefault(company_key(entry.company), []).append(entry)
    return groups


def rank_by_company(entries: Iterable[ScoredEntry]) -> Dict[str, List[ScoredEntry]]:
    """Group by company and rank every group."""
    return {company: assign_ranks(group) for company, group in group_by_company(entries).items()}
