"""
SQL-backed company catalog.

Reads the `companies` table through a long-lived SQLAlchemy engine.
PostgreSQL deployments answer the fuzzy and full-text tiers server-side with
pg_trgm `similarity()` and the `tsv` tsvector column; other dialects (SQLite
in tests and local development) compute those tiers in-process from a row
snapshot.
"""

from __future__ import annotations
from typing import Any, Dict, List, Optional, Tuple
import logging

from sqlalchemy import Column, Integer, String, create_engine, func, select, text
from sqlalchemy.engine import Engine
from sqlalchemy.exc import DataError, ProgrammingError, SQLAlchemyError
from sqlalchemy.orm import declarative_base
from sqlalchemy.pool import QueuePool, StaticPool

from .base import CatalogUnavailable, CompanyRecord, MalformedFullTextQuery
from .memory import MemoryCompanyCatalog

logger = logging.getLogger(__name__)

Base = declarative_base()

_LIKE_ESCAPE = "\\"
# PostgreSQL text cannot hold NUL and psycopg2 refuses to bind it
_NUL = "\x00"

_PG_SIMILARITY = text(
    "SELECT company_name, website, similarity(company_name, :q) AS score "
    "FROM companies WHERE similarity(company_name, :q) > :threshold"
)
_PG_FULL_TEXT = text(
    "SELECT company_name, website FROM companies "
    "WHERE tsv @@ plainto_tsquery(CAST(:config AS regconfig), :q)"
)


class Company(Base):
    """Company row; PostgreSQL deployments also carry a `tsv` tsvector column."""

    __tablename__ = "companies"

    id = Column(Integer, primary_key=True)
    company_name = Column(String, nullable=False, index=True)
    website = Column(String, nullable=True)


def create_catalog_engine(
    url: str,
    sslmode: Optional[str] = None,
    statement_timeout_ms: Optional[int] = None,
    pool_size: int = 5,
) -> Engine:
    """
    Create the engine a SqlCompanyCatalog reads through.

    Args:
        url: Database URL. ':memory:' creates a shared SQLite in-memory database.
        sslmode: libpq sslmode for PostgreSQL (e.g. 'require').
        statement_timeout_ms: Server-side deadline per statement (PostgreSQL).
        pool_size: Connection pool size (PostgreSQL).

    Returns:
        SQLAlchemy engine
    """
    if url in (":memory:", "sqlite://", "sqlite:///:memory:"):
        return create_engine(
            "sqlite://",
            connect_args={"check_same_thread": False},
            poolclass=StaticPool,
        )
    if url.startswith("sqlite"):
        return create_engine(url, connect_args={"check_same_thread": False})

    if url.startswith("postgres://"):
        url = "postgresql://" + url[len("postgres://"):]
    connect_args: Dict[str, Any] = {}
    if sslmode:
        connect_args["sslmode"] = sslmode
    if statement_timeout_ms:
        connect_args["options"] = f"-c statement_timeout={int(statement_timeout_ms)}"
    return create_engine(
        url,
        poolclass=QueuePool,
        pool_size=pool_size,
        max_overflow=10,
        pool_timeout=30,
        pool_recycle=3600,
        pool_pre_ping=True,
        connect_args=connect_args,
    )


def init_database(engine: Engine) -> None:
    """Create the companies table if missing (development and tests)."""
    Base.metadata.create_all(engine)


def _escape_like(s: str) -> str:
    return (
        s.replace(_LIKE_ESCAPE, _LIKE_ESCAPE * 2)
        .replace("%", _LIKE_ESCAPE + "%")
        .replace("_", _LIKE_ESCAPE + "_")
    )


def _describe(exc: SQLAlchemyError) -> str:
    orig = getattr(exc, "orig", None)
    return str(orig if orig is not None else exc).strip()


class SqlCompanyCatalog:
    def __init__(self, engine: Engine, full_text: bool = True, text_search_config: str = "english"):
        self._engine = engine
        self.supports_full_text = full_text
        self._text_search_config = text_search_config

    @property
    def is_postgres(self) -> bool:
        return self._engine.dialect.name == "postgresql"

    def _fetch(self, stmt, params: Optional[Dict[str, Any]] = None):
        try:
            with self._engine.connect() as conn:
                return conn.execute(stmt, params or {}).all()
        except SQLAlchemyError as e:
            logger.error("Catalog read failed: %s", _describe(e))
            raise CatalogUnavailable(_describe(e)) from e

    def _records(self, stmt, params: Optional[Dict[str, Any]] = None) -> List[CompanyRecord]:
        return [CompanyRecord(name=row.company_name, website=row.website) for row in self._fetch(stmt, params)]

    def _columns(self):
        return select(Company.company_name, Company.website)

    def _snapshot(self, full_text: bool = False) -> MemoryCompanyCatalog:
        return MemoryCompanyCatalog(self._records(self._columns()), full_text=full_text)

    def _like(self, pattern: str) -> List[CompanyRecord]:
        if _NUL in pattern:
            return []
        stmt = self._columns().where(
            func.lower(Company.company_name).like(func.lower(pattern), escape=_LIKE_ESCAPE)
        )
        return self._records(stmt)

    def exact_match(self, name: str) -> List[CompanyRecord]:
        if _NUL in name:
            return []
        stmt = self._columns().where(func.lower(Company.company_name) == func.lower(name))
        return self._records(stmt)

    def prefix_match(self, name: str) -> List[CompanyRecord]:
        return self._like(_escape_like(name) + "%")

    def substring_match(self, name: str) -> List[CompanyRecord]:
        return self._like("%" + _escape_like(name) + "%")

    def similarity_match(self, name: str, threshold: float) -> List[Tuple[CompanyRecord, float]]:
        # NUL is not a word character, so dropping it leaves the trigrams unchanged
        name = name.replace(_NUL, "")
        if not self.is_postgres:
            return list(self._snapshot().similarity_match(name, threshold))
        rows = self._fetch(_PG_SIMILARITY, {"q": name, "threshold": threshold})
        return [(CompanyRecord(name=r.company_name, website=r.website), float(r.score)) for r in rows]

    def full_text_match(self, query: str) -> List[CompanyRecord]:
        if not self.supports_full_text:
            return []
        if _NUL in query:
            raise MalformedFullTextQuery("query contains a NUL character")
        if not self.is_postgres:
            return list(self._snapshot(full_text=True).full_text_match(query))
        try:
            with self._engine.connect() as conn:
                rows = conn.execute(_PG_FULL_TEXT, {"config": self._text_search_config, "q": query}).all()
        except (DataError, ProgrammingError) as e:
            raise MalformedFullTextQuery(_describe(e)) from e
        except SQLAlchemyError as e:
            logger.error("Catalog read failed: %s", _describe(e))
            raise CatalogUnavailable(_describe(e)) from e
        return [CompanyRecord(name=r.company_name, website=r.website) for r in rows]

    def count(self) -> int:
        rows = self._fetch(select(func.count()).select_from(Company))
        return int(rows[0][0])

    def sample(self, n: int) -> List[CompanyRecord]:
        return self._records(self._columns().order_by(func.random()).limit(max(n, 0)))
