from __future__ import annotations

import argparse
import logging
from dataclasses import dataclass
from pathlib import Path
from time import perf_counter
from typing import Any, Dict, List, Optional

import yaml

from talker_market.config import load_config
from talker_market.search.models import SuccessOutcome
from talker_market.search.pipeline import ProductSearch, build_search
from talker_market.utils.formatting import rows_to_markdown_table
from talker_market.utils.logging import setup_logging

logger = logging.getLogger(__name__)

DEFAULT_QUERIES = Path(__file__).resolve().parent / "queries.yaml"

REPORT_COLUMNS = ("Query", "Outcome", "SQL / message", "Products", "Time")


@dataclass
class EvalRow:
    query: str
    outcome: str
    detail: str
    products: int
    total_s: float


def load_queries(path: Path) -> List[str]:
    """Queries come from a YAML mapping with a `queries` list."""
    data = yaml.safe_load(path.read_text(encoding="utf-8")) or {}
    return [str(q) for q in data.get("queries", []) or []]


def run_one_query(q: str, search: ProductSearch) -> EvalRow:
    t0 = perf_counter()
    outcome = search.translate_and_fetch(q)
    t1 = perf_counter()

    if isinstance(outcome, SuccessOutcome):
        return EvalRow(q, "success", outcome.sql, len(outcome.products), t1 - t0)
    return EvalRow(q, "error", outcome.message, 0, t1 - t0)


def render_report(rows: List[EvalRow], model: str) -> str:
    table: List[Dict[str, Any]] = [
        {
            "Query": r.query,
            "Outcome": r.outcome,
            "SQL / message": r.detail,
            "Products": r.products,
            "Time": f"{r.total_s:.2f}s",
        }
        for r in rows
    ]
    n_ok = sum(1 for r in rows if r.outcome == "success")

    lines = ["# Search Evaluation", "", f"- Model: `{model}`", ""]
    lines.append(rows_to_markdown_table(table, max_rows=len(table) or 1, columns=REPORT_COLUMNS))
    lines += ["", "## Summary", ""]
    lines.append(f"- Total queries: **{len(rows)}**")
    lines.append(f"- Success: **{n_ok}**, error: **{len(rows) - n_ok}**")
    if rows:
        avg = sum(r.total_s for r in rows) / len(rows)
        lines.append(f"- Avg time: **{avg:.2f}s**")
    return "\n".join(lines)


def run_eval(queries: List[str], search: ProductSearch, model: str) -> str:
    results: List[EvalRow] = []
    for n, q in enumerate(queries, start=1):
        row = run_one_query(q, search)
        logger.info("Q%s done: outcome=%s products=%s time=%.2fs", n, row.outcome, row.products, row.total_s)
        results.append(row)
    return render_report(results, model)


def main(argv: Optional[List[str]] = None) -> None:
    parser = argparse.ArgumentParser(description="Run a batch of product queries through the search pipeline.")
    parser.add_argument("--queries", type=Path, default=DEFAULT_QUERIES)
    parser.add_argument("--out", type=Path, default=Path("Search_Eval.md"))
    args = parser.parse_args(argv)

    cfg = load_config()
    setup_logging(cfg.log_level)

    queries = load_queries(args.queries)
    logger.info("Starting eval: model=%s queries=%s", cfg.llm.model, len(queries))

    report = run_eval(queries, build_search(cfg), cfg.llm.model)
    args.out.write_text(report, encoding="utf-8")
    logger.info("Eval complete: output=%s", args.out)
    print(f"Wrote: {args.out}")


if __name__ == "__main__":
    main()
