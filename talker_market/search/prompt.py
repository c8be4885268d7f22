from __future__ import annotations

from functools import lru_cache
from pathlib import Path

PROMPTS_DIR = Path(__file__).resolve().parents[1] / "prompts"

# Bump together with the Product table; the template file carries the version in its name.
SCHEMA_VERSION = "v1"


@lru_cache(maxsize=None)
def load_prompt(name: str) -> str:
    path = PROMPTS_DIR / name
    return path.read_text(encoding="utf-8").strip()


def build_prompt(user_query: str) -> str:
    """
    Render the instruction sent to the model: the fixed preamble, schema and reply
    format, followed by the user's text verbatim. No validation happens here.
    """
    template = load_prompt(f"product_sql_{SCHEMA_VERSION}.txt")
    return f"{template}\n\nUser query: {user_query}"
