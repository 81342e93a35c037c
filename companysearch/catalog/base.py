from __future__ import annotations
from dataclasses import dataclass
from typing import Iterable, List, Optional, Protocol, Tuple


@dataclass(frozen=True)
class CompanyRecord:
    name: str
    website: Optional[str] = None


class CatalogUnavailable(Exception):
    """The store cannot be reached or a read against it failed."""


class MalformedFullTextQuery(Exception):
    """The text-search subsystem rejected the raw query expression."""


class CompanyCatalog(Protocol):
    # False for deployments without a text index (four-tier search)
    supports_full_text: bool

    def exact_match(self, name: str) -> Iterable[CompanyRecord]: ...

    def prefix_match(self, name: str) -> Iterable[CompanyRecord]: ...

    def substring_match(self, name: str) -> Iterable[CompanyRecord]: ...

    def similarity_match(self, name: str, threshold: float) -> Iterable[Tuple[CompanyRecord, float]]: ...

    def full_text_match(self, query: str) -> Iterable[CompanyRecord]: ...

    def count(self) -> int: ...

    def sample(self, n: int) -> List[CompanyRecord]: ...
