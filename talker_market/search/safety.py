from __future__ import annotations

import logging
from typing import Optional

import sqlglot
from sqlglot import exp
from sqlglot.errors import SqlglotError

from talker_market.config import SafetyConfig
from talker_market.search.errors import UnsafeStatement

logger = logging.getLogger(__name__)


def is_safe(sql: str, cfg: Optional[SafetyConfig] = None) -> bool:
    """
    Return False if any denylisted keyword occurs anywhere in the statement.

    This is a plain case-insensitive substring scan, not a parser: "updated_at" or
    '%update%' are rejected too, and comments or synonyms can slip through.
    """
    cfg = cfg or SafetyConfig()
    upper = sql.upper()
    return not any(word.upper() in upper for word in cfg.denylist)


def _is_single_select(sql: str) -> bool:
    """Parse with sqlglot and accept exactly one SELECT (set operations included)."""
    try:
        statements = [s for s in sqlglot.parse(sql, read="postgres") if s is not None]
    except SqlglotError as e:
        logger.info("SQL parse error in select-only check: %s", e)
        return False

    if len(statements) != 1:
        return False
    parsed = statements[0]
    return isinstance(parsed, (exp.Select, exp.Union, exp.Intersect, exp.Except))


def ensure_safe(sql: str, cfg: Optional[SafetyConfig] = None) -> str:
    """
    Gate every generated statement before execution. Returns the statement unchanged
    or raises UnsafeStatement.
    """
    cfg = cfg or SafetyConfig()

    if not is_safe(sql, cfg):
        # statement text stays out of INFO logs
        logger.warning("Rejected statement containing a denylisted keyword")
        logger.debug("Rejected SQL: %s", sql)
        raise UnsafeStatement("denylisted keyword")

    if cfg.select_only and not _is_single_select(sql):
        logger.warning("Rejected statement that is not a single SELECT")
        logger.debug("Rejected SQL: %s", sql)
        raise UnsafeStatement("not a single SELECT")

    return sql
