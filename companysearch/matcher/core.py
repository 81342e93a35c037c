from __future__ import annotations
from dataclasses import dataclass
from enum import IntEnum
from typing import Any, Dict, Iterable, List
import logging

from companysearch.catalog.base import CompanyCatalog, CompanyRecord, MalformedFullTextQuery

logger = logging.getLogger(__name__)

RESULT_LIMIT = 20
SIMILARITY_THRESHOLD = 0.3


class MatchTier(IntEnum):
    EXACT = 1
    PREFIX = 2
    SUBSTRING = 3
    FUZZY = 4
    FULL_TEXT = 5


@dataclass(frozen=True)
class ScoredMatch:
    record: CompanyRecord
    tier: MatchTier


def _tier_matches(q: str, catalog: CompanyCatalog) -> Iterable[ScoredMatch]:
    for r in catalog.exact_match(q):
        yield ScoredMatch(r, MatchTier.EXACT)
    for r in catalog.prefix_match(q):
        yield ScoredMatch(r, MatchTier.PREFIX)
    for r in catalog.substring_match(q):
        yield ScoredMatch(r, MatchTier.SUBSTRING)
    for r, _score in catalog.similarity_match(q, SIMILARITY_THRESHOLD):
        yield ScoredMatch(r, MatchTier.FUZZY)
    if not catalog.supports_full_text:
        return
    try:
        # Materialize so a lazily raised parse error is caught here.
        full_text = list(catalog.full_text_match(q))
    except MalformedFullTextQuery as e:
        logger.warning("Full-text tier skipped for %r: %s", q, e)
        return
    for r in full_text:
        yield ScoredMatch(r, MatchTier.FULL_TEXT)


def rank(matches: Iterable[ScoredMatch], limit: int = RESULT_LIMIT) -> List[ScoredMatch]:
    """Keep each name at its best tier, order by (tier, name), cap at `limit`.

    The dedup key is the stored name as-is, so names differing only in case
    are separate entries.
    """
    best: Dict[str, ScoredMatch] = {}
    for m in matches:
        cur = best.get(m.record.name)
        if cur is None or m.tier < cur.tier:
            best[m.record.name] = m
    out = sorted(best.values(), key=lambda m: (m.tier, m.record.name))
    return out[:min(limit, RESULT_LIMIT)]


def search(query: str, catalog: CompanyCatalog) -> List[CompanyRecord]:
    """Resolve a free-text company query to at most RESULT_LIMIT records.

    Tiers, best first:
    - Exact: case-insensitive equality
    - Prefix: name starts with the query
    - Substring: name contains the query
    - Fuzzy: trigram similarity above SIMILARITY_THRESHOLD
    - FullText: stemmed AND-of-terms match (when the catalog supports it)
    An empty or whitespace-only query returns [] without touching the catalog.
    CatalogUnavailable propagates unchanged; nothing is retried.
    """
    q = query.strip()
    if not q:
        return []
    ranked = rank(_tier_matches(q, catalog))
    logger.debug("Query %r matched %d record(s)", q, len(ranked))
    return [m.record for m in ranked]


def build_response(query: str, results: List[CompanyRecord]) -> Dict[str, Any]:
    return {
        "results": [{"company_name": r.name, "website": r.website} for r in results],
        "count": len(results),
        "query": query.strip(),
    }
