from __future__ import annotations

from sqlalchemy import URL, create_engine
from sqlalchemy.engine import Engine

from talker_market.config import DBConfig


def get_engine(cfg: DBConfig) -> Engine:
    """
    Pooled PostgreSQL engine. Connections are recycled after the configured lifetime
    and every statement runs under a server-side timeout.
    """
    url = URL.create(
        "postgresql+psycopg",
        username=cfg.user,
        password=cfg.password,
        host=cfg.host,
        port=cfg.port,
        database=cfg.database,
    )
    return create_engine(
        url,
        pool_pre_ping=True,
        pool_recycle=cfg.pool_recycle_s,
        connect_args={
            "connect_timeout": cfg.connect_timeout_s,
            "options": f"-c statement_timeout={cfg.statement_timeout_ms}",
        },
    )
