"""Company catalog: the read-only record store the matcher queries.

- base.py: CompanyRecord, the CompanyCatalog protocol and catalog errors
- text.py: trigram similarity and stemmed lexemes (the full-text index)
- memory.py: in-memory catalog, optionally loaded from JSON
- sql.py: SQLAlchemy catalog (PostgreSQL pg_trgm/tsvector, portable fallback)
"""

from __future__ import annotations
import logging

from companysearch.config.env import CatalogConfig
from .base import CatalogUnavailable, CompanyCatalog, CompanyRecord, MalformedFullTextQuery
from .memory import MemoryCompanyCatalog

logger = logging.getLogger(__name__)


def open_catalog(config: CatalogConfig) -> CompanyCatalog:
    """Build the long-lived catalog described by `config`."""
    if config.database_url:
        from .sql import SqlCompanyCatalog, create_catalog_engine

        engine = create_catalog_engine(
            config.database_url,
            sslmode=config.sslmode,
            statement_timeout_ms=config.statement_timeout_ms,
            pool_size=config.pool_size,
        )
        return SqlCompanyCatalog(engine, full_text=config.full_text, text_search_config=config.text_search_config)
    if config.catalog_path:
        return MemoryCompanyCatalog.from_json_path(config.catalog_path, full_text=config.full_text)
    logger.warning("Neither DATABASE_URL nor CATALOG_PATH is set; serving an empty catalog")
    return MemoryCompanyCatalog((), full_text=config.full_text)


__all__ = [
    "CatalogUnavailable",
    "CompanyCatalog",
    "CompanyRecord",
    "MalformedFullTextQuery",
    "MemoryCompanyCatalog",
    "open_catalog",
]
