from __future__ import annotations

import enum
import logging
from typing import List, Optional, Protocol

from talker_market.config import AppConfig, SafetyConfig
from talker_market.db.engine import get_engine
from talker_market.db.executor import ProductStore
from talker_market.llm.gateway import ModelGateway
from talker_market.search.errors import DomainRejection, SearchError
from talker_market.search.models import ErrorOutcome, Outcome, Product, SuccessOutcome
from talker_market.search.parser import parse_response
from talker_market.search.prompt import build_prompt
from talker_market.search.safety import ensure_safe

logger = logging.getLogger(__name__)


class Stage(str, enum.Enum):
    IDLE = "idle"
    PROMPTED = "prompted"
    MODEL_RESPONDED = "model_responded"
    PARSED = "parsed"
    FILTERED = "filtered"
    EXECUTED = "executed"
    DONE = "done"
    ERROR_DONE = "error_done"


class Gateway(Protocol):
    def generate(self, instruction: str) -> str: ...


class Store(Protocol):
    def execute(self, sql: str) -> List[Product]: ...


class ProductSearch:
    """
    Natural-language product search: prompt -> model -> parse -> safety gate -> store.

    Holds only its collaborators; every call to translate_and_fetch is independent.
    """

    def __init__(self, gateway: Gateway, store: Store, safety_cfg: Optional[SafetyConfig] = None):
        self.gateway = gateway
        self.store = store
        self.safety_cfg = safety_cfg or SafetyConfig()

    def translate_and_fetch(self, query: str) -> Outcome:
        """Never raises: every failure is returned as an ErrorOutcome."""
        stage = Stage.IDLE
        try:
            instruction = build_prompt(query)
            stage = Stage.PROMPTED

            raw = self.gateway.generate(instruction)
            stage = Stage.MODEL_RESPONDED

            intent = parse_response(raw)
            stage = Stage.PARSED

            if intent.kind == "error":
                raise DomainRejection(intent.payload)

            sql = ensure_safe(intent.payload, self.safety_cfg)
            stage = Stage.FILTERED

            products = self.store.execute(sql)
            stage = Stage.EXECUTED
            logger.debug("Search stage=%s", stage.value)
        except SearchError as e:
            logger.info(
                "Search failed at stage=%s with %s -> %s", stage.value, type(e).__name__, Stage.ERROR_DONE.value
            )
            return ErrorOutcome(message=e.user_message)
        except Exception:
            logger.exception("Unexpected failure at stage=%s -> %s", stage.value, Stage.ERROR_DONE.value)
            return ErrorOutcome(message=SearchError.user_message)

        logger.info("Search %s: products=%s", Stage.DONE.value, len(products))
        return SuccessOutcome(sql=sql, products=products)


def build_search(cfg: AppConfig) -> ProductSearch:
    """Wire the real model gateway and PostgreSQL store from configuration."""
    return ProductSearch(
        gateway=ModelGateway(cfg.llm),
        store=ProductStore(get_engine(cfg.db)),
        safety_cfg=cfg.safety,
    )
