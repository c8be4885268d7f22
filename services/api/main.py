from __future__ import annotations

import logging
from typing import Optional

from fastapi import FastAPI, Query
from fastapi.middleware.cors import CORSMiddleware

from talker_market.config import AppConfig, load_config
from talker_market.search.models import Outcome
from talker_market.search.pipeline import ProductSearch, build_search
from talker_market.utils.logging import setup_logging

from .schemas import HealthResponse

logger = logging.getLogger(__name__)


def create_app(cfg: Optional[AppConfig] = None, search: Optional[ProductSearch] = None) -> FastAPI:
    """
    Build the HTTP service. Run with:
        uvicorn services.api.main:create_app --factory
    """
    cfg = cfg or load_config()
    setup_logging(cfg.log_level)

    app = FastAPI(title="Talker Market API", version="0.1.0")

    # the Next.js front-end runs on a different origin in development
    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_methods=["GET"],
        allow_headers=["*"],
    )

    search = search or build_search(cfg)

    @app.get("/health", response_model=HealthResponse)
    def health() -> HealthResponse:
        return HealthResponse(model_configured=bool(cfg.llm.api_key))

    @app.get("/api/products", response_model=Outcome)
    def products(q: Optional[str] = Query(default=None)) -> Outcome:
        # a missing query still goes to the model, which classifies it
        query = q or "error"
        logger.info("Product search request received")
        return search.translate_and_fetch(query)

    return app
