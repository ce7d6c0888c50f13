from __future__ import annotations

import json
from collections import Counter
from pathlib import Path
from typing import Iterable

from .checker import normalize
from .config import QUESTION_TYPES
from .question_bank import CATEGORIES, CATEGORY_CONFIG, load_bank
from .types import Question

DIFFICULTIES: tuple[int, ...] = (1, 2, 3)


def _blank_category() -> dict[str, object]:
    return {
        "questions": 0,
        "points": 0,
        "max_points": 0,
        "by_difficulty": {lvl: 0 for lvl in DIFFICULTIES},
    }


def audit_items(items: Iterable[Question]) -> dict[str, object]:
    coverage: dict[str, dict[str, object]] = {c: _blank_category() for c in CATEGORIES}
    for c in CATEGORIES:
        coverage[c]["max_points"] = int(CATEGORY_CONFIG[c]["max_points"])
    warnings: list[str] = []
    ids: Counter[str] = Counter()

    for q in items:
        ids[q.id] += 1
        if q.category not in coverage:
            warnings.append(f"{q.id} has unknown category {q.category!r}")
            continue
        if q.type not in QUESTION_TYPES:
            warnings.append(f"{q.id} has unknown type {q.type!r}")
        if q.time_limit <= 0:
            warnings.append(f"{q.id} has no time limit")

        data = coverage[q.category]
        data["questions"] += 1  # type: ignore[operator]
        data["points"] += int(q.points)  # type: ignore[operator]
        by_diff = data["by_difficulty"]  # type: ignore[assignment]
        if q.difficulty in by_diff:
            by_diff[q.difficulty] += 1
        else:
            warnings.append(f"{q.id} has difficulty {q.difficulty} outside 1..3")

        if q.type == "multiple_choice" and q.options:
            opts = {normalize(o) for o in q.options}
            missing = [v for v in q.correct_answer.values if normalize(v) not in opts]
            if missing:
                warnings.append(f"{q.id} answer not among options: {', '.join(missing)}")

    for qid, n in ids.items():
        if n > 1:
            warnings.append(f"duplicate question id {qid} ({n}x)")

    for c, data in coverage.items():
        if data["points"] != data["max_points"]:
            warnings.append(f"{c} points sum to {data['points']} (expected {data['max_points']})")
        if not data["questions"]:
            warnings.append(f"{c} has no questions")

    totals = {
        "questions": sum(int(d["questions"]) for d in coverage.values()),  # type: ignore[arg-type]
        "points": sum(int(d["points"]) for d in coverage.values()),  # type: ignore[arg-type]
    }
    return {"coverage": coverage, "warnings": warnings, "totals": totals}


def print_report(summary: dict[str, object]) -> None:
    coverage: dict[str, dict[str, object]] = summary["coverage"]  # type: ignore[assignment]
    print("=== Question Bank Coverage ===")
    for c in CATEGORIES:
        data = coverage[c]
        by_diff = data["by_difficulty"]  # type: ignore[assignment]
        diff_txt = "  ".join(f"d{lvl}:{by_diff.get(lvl, 0):2d}" for lvl in DIFFICULTIES)
        print(f"{c:<13} n={data['questions']:2d}  points={data['points']}/{data['max_points']}  {diff_txt}")

    warnings: list[str] = summary["warnings"]  # type: ignore[assignment]
    if warnings:
        print("\nWarnings:")
        for msg in warnings:
            print(f" - {msg}")
    else:
        print("\nNo warnings.")
    print("\nTotals:", summary["totals"])


def write_summary(summary: dict[str, object], path: Path = Path("/tmp/bank_audit.json")) -> str:
    text = json.dumps(summary, indent=2, sort_keys=True)
    path.write_text(text + "\n", encoding="utf-8")
    return text


def main(_argv: list[str] | None = None) -> int:
    summary = audit_items(load_bank())
    print_report(summary)
    write_summary(summary)
    return 2 if summary["warnings"] else 0


if __name__ == "__main__":
    raise SystemExit(main())
