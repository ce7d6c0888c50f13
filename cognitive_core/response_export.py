"""Export a result's per-question responses in JSON/CSV formats."""
from __future__ import annotations

from typing import Any, Callable, Dict, Iterable, List
import csv
import io
import json


def _as_int(val: Any) -> int:
    try:
        return int(val)
    except (TypeError, ValueError):
        return 0


def _as_text(val: Any) -> str:
    return "" if val is None else str(val)


def _as_answer(val: Any) -> Any:
    return list(val) if isinstance(val, (list, tuple)) else _as_text(val)


# column order is the CSV header
COLUMNS: Dict[str, Callable[[Any], Any]] = {
    "questionId": _as_text,
    "category": _as_text,
    "answer": _as_answer,
    "isCorrect": bool,
    "responseTime": _as_int,
    "points": _as_int,
    "maxPoints": _as_int,
}


def _row(raw: Dict[str, Any]) -> Dict[str, Any]:
    return {name: coerce(raw.get(name)) for name, coerce in COLUMNS.items()}


def to_json(responses: Iterable[Dict[str, Any]]) -> Dict[str, Any]:
    rows: List[Dict[str, Any]] = [_row(r or {}) for r in responses]
    return {"responses": rows}


def to_csv(responses: Iterable[Dict[str, Any]]) -> str:
    """List answers are written as a JSON array in the answer column."""

    out = io.StringIO()
    writer = csv.writer(out)
    writer.writerow(COLUMNS)
    for row in (_row(r or {}) for r in responses):
        if isinstance(row["answer"], list):
            row["answer"] = json.dumps(row["answer"], ensure_ascii=False)
        row["isCorrect"] = "true" if row["isCorrect"] else "false"
        writer.writerow(row.values())
    return out.getvalue()


__all__ = ["COLUMNS", "to_json", "to_csv"]
