from __future__ import annotations

import logging
from typing import Optional

from openai import OpenAI, OpenAIError

from talker_market.config import LLMConfig
from talker_market.search.errors import GatewayError, GatewayUnavailable

logger = logging.getLogger(__name__)


class ModelGateway:
    """Sends one instruction to the text model and returns its raw reply."""

    def __init__(self, cfg: LLMConfig, client: Optional[OpenAI] = None):
        self.cfg = cfg
        self.model = cfg.model
        self._client = client

    @property
    def configured(self) -> bool:
        return bool(self.cfg.api_key)

    def _get_client(self) -> OpenAI:
        if self._client is None:
            self._client = OpenAI(
                api_key=self.cfg.api_key,
                base_url=self.cfg.base_url,
                timeout=self.cfg.timeout_s,
                max_retries=0,
            )
        return self._client

    def generate(self, instruction: str) -> str:
        """
        One completion request, no retries.
        Raises GatewayUnavailable without touching the network when no key is set.
        """
        if not self.configured:
            logger.error("Model credential is not set (LLM_API_KEY / GOOGLE_API_KEY)")
            raise GatewayUnavailable("model credential missing")

        client = self._get_client()
        logger.info("Requesting SQL translation from model=%s", self.model)
        try:
            resp = client.chat.completions.create(
                model=self.model,
                messages=[{"role": "user", "content": instruction}],
            )
        except OpenAIError as e:
            logger.error("Model backend call failed: %s", e, exc_info=True)
            raise GatewayError(str(e)) from e

        if not resp.choices:
            return ""
        return resp.choices[0].message.content or ""
