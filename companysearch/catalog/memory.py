from __future__ import annotations
from typing import Iterable, Iterator, List, Tuple
import json
import random
from pathlib import Path

from .base import CompanyRecord
from .text import lexeme_index, parse_plain_query, plain_query_matches, similarity, trigram_similarity, trigrams


class MemoryCompanyCatalog:
    """Catalog over an immutable in-process snapshot of records.

    The trigram sets and stemmed lexemes of every name are built once at
    construction and never mutated, so concurrent searches need no locking.
    """

    def __init__(self, records: Iterable[CompanyRecord], full_text: bool = True):
        self._records: Tuple[CompanyRecord, ...] = tuple(records)
        self._lowered = tuple(r.name.lower() for r in self._records)
        self._trigrams = tuple(trigrams(r.name) for r in self._records)
        self.supports_full_text = full_text
        self._lexemes = tuple(lexeme_index(r.name for r in self._records)) if full_text else ()

    @staticmethod
    def from_json_path(path: str | Path, full_text: bool = True) -> "MemoryCompanyCatalog":
        data = json.loads(Path(path).read_text(encoding="utf-8"))
        records = [
            CompanyRecord(name=row["company_name"], website=row.get("website") or None)
            for row in data
            if row.get("company_name")
        ]
        return MemoryCompanyCatalog(records, full_text=full_text)

    def exact_match(self, name: str) -> Iterator[CompanyRecord]:
        q = name.lower()
        return (r for r, low in zip(self._records, self._lowered) if low == q)

    def prefix_match(self, name: str) -> Iterator[CompanyRecord]:
        q = name.lower()
        return (r for r, low in zip(self._records, self._lowered) if low.startswith(q))

    def substring_match(self, name: str) -> Iterator[CompanyRecord]:
        q = name.lower()
        return (r for r, low in zip(self._records, self._lowered) if q in low)

    def similarity_match(self, name: str, threshold: float) -> Iterator[Tuple[CompanyRecord, float]]:
        qt = trigrams(name)
        for r, rt in zip(self._records, self._trigrams):
            if qt or rt:
                score = trigram_similarity(qt, rt)
            else:
                score = similarity(name, r.name)
            if score > threshold:
                yield r, score

    def full_text_match(self, query: str) -> Iterator[CompanyRecord]:
        if not self.supports_full_text:
            return iter(())
        ql = parse_plain_query(query)
        return (r for r, lx in zip(self._records, self._lexemes) if plain_query_matches(ql, lx))

    def count(self) -> int:
        return len(self._records)

    def sample(self, n: int) -> List[CompanyRecord]:
        return random.sample(self._records, min(max(n, 0), len(self._records)))
