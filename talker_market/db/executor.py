from __future__ import annotations

import logging
from typing import Any, Dict, List

from pydantic import ValidationError
from sqlalchemy.engine import Engine
from sqlalchemy.exc import SQLAlchemyError

from talker_market.search.errors import ExecutionError
from talker_market.search.models import Product

logger = logging.getLogger(__name__)


class ProductStore:
    def __init__(self, engine: Engine):
        """Runs already-filtered SQL against the Product table."""
        self.engine = engine

    def fetch_rows(self, sql: str) -> List[Dict[str, Any]]:
        """
        Execute the statement text exactly as given. The driver receives no parameters,
        so '%' and ':' in literals are not treated as placeholders.
        """
        logger.info("Executing generated SQL")
        logger.debug("SQL: %s", sql)
        try:
            with self.engine.connect() as conn:
                result = conn.execution_options(no_parameters=True).exec_driver_sql(sql)
                rows = [dict(r) for r in result.mappings().all()]
        except SQLAlchemyError as e:
            logger.error("SQL execution failed: %s", e, exc_info=True)
            raise ExecutionError(str(e)) from e
        logger.info("SQL executed successfully; rows=%s", len(rows))
        return rows

    def execute(self, sql: str) -> List[Product]:
        """Execute and map every row onto the Product shape."""
        rows = self.fetch_rows(sql)
        try:
            return [Product.model_validate(r) for r in rows]
        except ValidationError as e:
            logger.error("Result rows do not match the Product shape: %s", e)
            raise ExecutionError(f"rows do not match Product: {e}") from e
