from __future__ import annotations

import logging
import re

from pydantic import ValidationError

from talker_market.search.errors import MalformedResponse
from talker_market.search.models import ParsedIntent

logger = logging.getLogger(__name__)

_LANG_TAG = re.compile(r"^json\b", re.IGNORECASE)


def strip_fences(raw: str) -> str:
    """
    Remove Markdown code fences the model may wrap its JSON in.

    Handles:
      - ```json\\n{...}\\n```  (language tag in any letter case)
      - ```\\n{...}\\n```
      - `{...}` and unwrapped text
      - surrounding whitespace and newlines

    Every backtick is dropped, then one leading `json` tag. The word "json" inside the
    payload is left alone.
    """
    text = raw.strip().replace("`", "").strip()
    text = _LANG_TAG.sub("", text, count=1)
    return text.strip()


def parse_response(raw: str) -> ParsedIntent:
    """Decode the model's raw reply into a ParsedIntent or raise MalformedResponse."""
    body = strip_fences(raw)
    try:
        intent = ParsedIntent.model_validate_json(body)
    except ValidationError as e:
        logger.warning("Model reply could not be decoded (%s error(s))", e.error_count())
        logger.debug("Raw model reply: %r", raw)
        raise MalformedResponse(f"undecodable model reply: {e}") from e

    logger.debug("Parsed model reply: kind=%s", intent.kind)
    return intent
