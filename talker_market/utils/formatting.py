from __future__ import annotations

from typing import Any, Dict, List, Optional, Sequence


def rows_to_markdown_table(
    rows: List[Dict[str, Any]],
    max_rows: int = 50,
    columns: Optional[Sequence[str]] = None,
) -> str:
    if not rows:
        return "_No rows._"

    shown = rows[:max_rows]
    cols = list(columns) if columns else list(shown[0].keys())

    def esc(x: Any) -> str:
        s = "" if x is None else str(x)
        return s.replace("|", "\\|").replace("\n", " ")

    lines = ["| " + " | ".join(cols) + " |", "|" + "---|" * len(cols)]
    lines += ["| " + " | ".join(esc(r.get(c)) for c in cols) + " |" for r in shown]

    if len(rows) > max_rows:
        lines.append(f"\n_Showing first {max_rows} of {len(rows)} rows._")
    return "\n".join(lines)
