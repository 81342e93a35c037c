from __future__ import annotations
import logging
import os
import sys
from dataclasses import dataclass
from pathlib import Path

from dotenv import load_dotenv

LOG_FORMAT = "%(asctime)s | %(levelname)-8s | %(name)s | %(message)s"
LOG_DATEFMT = "%Y-%m-%d %H:%M:%S"

_FALSE = {"0", "false", "no", "off"}


def load_env() -> None:
    """Load .env from the working directory if present; real env vars win."""
    env_path = Path.cwd() / ".env"
    if env_path.exists():
        load_dotenv(dotenv_path=env_path, override=False)


def _flag(name: str, default: bool) -> bool:
    raw = os.getenv(name)
    if raw is None or not raw.strip():
        return default
    return raw.strip().lower() not in _FALSE


@dataclass(frozen=True)
class CatalogConfig:
    database_url: str | None = None
    sslmode: str | None = "require"
    statement_timeout_ms: int = 5000
    pool_size: int = 5
    catalog_path: str | None = None
    full_text: bool = True
    text_search_config: str = "english"


def get_catalog_config() -> CatalogConfig:
    return CatalogConfig(
        database_url=os.getenv("DATABASE_URL") or None,
        sslmode=os.getenv("DATABASE_SSLMODE", "require") or None,
        statement_timeout_ms=int(os.getenv("DATABASE_STATEMENT_TIMEOUT_MS", "5000")),
        pool_size=int(os.getenv("DATABASE_POOL_SIZE", "5")),
        catalog_path=os.getenv("CATALOG_PATH") or None,
        full_text=_flag("FULL_TEXT_SEARCH", True),
        text_search_config=os.getenv("TEXT_SEARCH_CONFIG", "english"),
    )


@dataclass(frozen=True)
class ServerConfig:
    host: str = "0.0.0.0"
    port: int = 8000
    log_level: str = "INFO"


def get_server_config() -> ServerConfig:
    return ServerConfig(
        host=os.getenv("HOST", "0.0.0.0"),
        port=int(os.getenv("PORT", "8000")),
        log_level=os.getenv("LOG_LEVEL", "INFO"),
    )


def configure_logging(level: str = "INFO", stream=None) -> None:
    handler = logging.StreamHandler(stream or sys.stdout)
    handler.setFormatter(logging.Formatter(fmt=LOG_FORMAT, datefmt=LOG_DATEFMT))
    root = logging.getLogger()
    root.handlers.clear()
    root.addHandler(handler)
    root.setLevel(getattr(logging, level.upper(), logging.INFO))
