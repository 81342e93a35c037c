"""Text primitives behind the fuzzy and full-text tiers.

Trigrams follow pg_trgm: each alphanumeric word is lowercased and padded with
two leading blanks and one trailing blank before taking 3-character windows.
Lexemes follow the PostgreSQL `english` text-search configuration: stop words
are dropped and the remaining tokens are Snowball-stemmed.
"""

from __future__ import annotations
from typing import FrozenSet, Iterable, List
import re

import snowballstemmer

from .base import MalformedFullTextQuery

_WORD = re.compile(r"[^\W_]+")

STOP_WORDS: FrozenSet[str] = frozenset("""
i me my myself we our ours ourselves you your yours yourself yourselves he him
his himself she her hers herself it its itself they them their theirs themselves
what which who whom this that these those am is are was were be been being have
has had having do does did doing a an the and but if or because as until while
of at by for with about against between into through during before after above
below to from up down in out on off over under again further then once here
there when where why how all any both each few more most other some such no nor
not only own same so than too very s t can will just don should now
""".split())


def words(text: str) -> List[str]:
    return _WORD.findall(text.lower())


def trigrams(text: str) -> FrozenSet[str]:
    out = set()
    for w in words(text):
        padded = f"  {w} "
        for i in range(len(padded) - 2):
            out.add(padded[i:i + 3])
    return frozenset(out)


def trigram_similarity(a: FrozenSet[str], b: FrozenSet[str]) -> float:
    if not a and not b:
        return 0.0
    return len(a & b) / len(a | b)


def similarity(x: str, y: str) -> float:
    """Jaccard similarity of the trigram sets of `x` and `y`, in [0, 1].

    Symmetric and deterministic. Strings without word characters only score
    1.0 against an identical string.
    """
    tx, ty = trigrams(x), trigrams(y)
    if not tx and not ty:
        return 1.0 if x.lower() == y.lower() else 0.0
    return trigram_similarity(tx, ty)


def new_stemmer():
    # Stemmer objects keep per-word state; never share one across threads.
    return snowballstemmer.stemmer("english")


def lexemes(text: str, stemmer=None) -> FrozenSet[str]:
    stemmer = stemmer or new_stemmer()
    kept = [w for w in words(text) if w not in STOP_WORDS]
    return frozenset(stemmer.stemWords(kept))


def lexeme_index(names: Iterable[str]) -> List[FrozenSet[str]]:
    stemmer = new_stemmer()
    return [lexemes(n, stemmer) for n in names]


def plain_query_matches(query_lexemes: FrozenSet[str], name_lexemes: FrozenSet[str]) -> bool:
    """AND of terms; a query reduced to nothing (only stop words) matches nothing."""
    if not query_lexemes:
        return False
    return query_lexemes <= name_lexemes


def parse_plain_query(query: str) -> FrozenSet[str]:
    if "\x00" in query:
        raise MalformedFullTextQuery("query contains a NUL character")
    return lexemes(query)
