from __future__ import annotations

import os
from dataclasses import dataclass, field
from typing import Optional

from dotenv import find_dotenv, load_dotenv

GEMINI_OPENAI_BASE_URL = "https://generativelanguage.googleapis.com/v1beta/openai/"

DEFAULT_DENYLIST = ("DROP", "TRUNCATE", "DELETE", "UPDATE")


@dataclass(frozen=True)
class LLMConfig:
    api_key: Optional[str]
    model: str = "gemini-1.5-flash"
    base_url: Optional[str] = GEMINI_OPENAI_BASE_URL
    timeout_s: float = 30.0


@dataclass(frozen=True)
class DBConfig:
    host: str
    port: int
    database: str
    user: str
    password: str
    connect_timeout_s: int = 10
    statement_timeout_ms: int = 15000
    # mirrors the pool's max connection lifetime
    pool_recycle_s: int = 60 * 30


@dataclass(frozen=True)
class SafetyConfig:
    """Extra denylist keywords on top of DEFAULT_DENYLIST, plus the optional sqlglot SELECT-only check."""

    extra_keywords: tuple[str, ...] = ()
    select_only: bool = False

    @property
    def denylist(self) -> tuple[str, ...]:
        return DEFAULT_DENYLIST + tuple(self.extra_keywords)


@dataclass(frozen=True)
class AppConfig:
    llm: LLMConfig
    db: DBConfig
    safety: SafetyConfig = field(default_factory=SafetyConfig)
    log_level: str = "INFO"


def _env_bool(name: str, default: bool = False) -> bool:
    raw = os.getenv(name)
    if raw is None:
        return default
    return raw.strip().lower() in {"1", "true", "yes", "on"}


def get_llm_config() -> LLMConfig:
    api_key = (
        os.getenv("LLM_API_KEY")
        or os.getenv("GOOGLE_API_KEY")
        or os.getenv("OPENAI_API_KEY")
        or None
    )
    return LLMConfig(
        api_key=api_key,
        model=os.getenv("LLM_MODEL", "gemini-1.5-flash"),
        base_url=os.getenv("LLM_BASE_URL", GEMINI_OPENAI_BASE_URL) or None,
        timeout_s=float(os.getenv("LLM_TIMEOUT_S", "30")),
    )


def get_db_config() -> DBConfig:
    return DBConfig(
        host=os.getenv("DB_HOST", "localhost"),
        port=int(os.getenv("DB_PORT", "5432")),
        database=os.getenv("DB_NAME", "talker"),
        user=os.getenv("DB_USER", "postgres"),
        password=os.getenv("DB_PASSWORD", ""),
        connect_timeout_s=int(os.getenv("DB_CONNECT_TIMEOUT_S", "10")),
        statement_timeout_ms=int(os.getenv("DB_STATEMENT_TIMEOUT_MS", "15000")),
        pool_recycle_s=int(os.getenv("DB_MAX_LIFETIME_S", str(60 * 30))),
    )


def load_config() -> AppConfig:
    """
    Read the whole application configuration from the environment (and .env).
    A missing model credential is allowed here; the gateway reports it on use.
    """
    load_dotenv(find_dotenv(usecwd=True))
    return AppConfig(
        llm=get_llm_config(),
        db=get_db_config(),
        safety=SafetyConfig(select_only=_env_bool("SQL_SELECT_ONLY")),
        log_level=os.getenv("LOG_LEVEL", "INFO").upper(),
    )
