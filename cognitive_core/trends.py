"""Comparisons between assessments of the same subject."""
from __future__ import annotations

from typing import Any, Dict, List, Optional, Sequence

from .config import STRONG_AREA_PCT, WEAK_AREA_PCT
from .question_bank import CATEGORIES, category_max_points, category_name
from .scoring import round_half_up
from .types import AssessmentResult, CategoryChange, CategoryScore, TrendComparison


def trend_of(change: float) -> str:
    if change > 0:
        return "up"
    if change < 0:
        return "down"
    return "stable"


def compare_with_previous(
    current: AssessmentResult, previous: Optional[AssessmentResult]
) -> Optional[TrendComparison]:
    """None when there is no earlier result; that is the first assessment."""
    if previous is None:
        return None

    changes: List[CategoryChange] = []
    for cs in current.category_scores:
        prev_cs = previous.category(cs.category)
        change = cs.score - prev_cs.score if prev_cs is not None else 0
        changes.append(CategoryChange(category=cs.category, change=change, trend=trend_of(change)))

    return TrendComparison(
        total_score_change=current.total_score - previous.total_score,
        category_changes=changes,
    )


def weak_areas(category_scores: Sequence[CategoryScore]) -> List[str]:
    picked = [cs for cs in category_scores if cs.percentage < WEAK_AREA_PCT]
    return [cs.category for cs in sorted(picked, key=lambda cs: cs.percentage)]


def strong_areas(category_scores: Sequence[CategoryScore]) -> List[str]:
    picked = [cs for cs in category_scores if cs.percentage >= STRONG_AREA_PCT]
    return [cs.category for cs in sorted(picked, key=lambda cs: cs.percentage, reverse=True)]


def _category_points(result: AssessmentResult, category: str) -> int:
    cs = result.category(category)
    return cs.score if cs is not None else 0


def score_series(results: Sequence[AssessmentResult]) -> List[Dict[str, Any]]:
    """Chart rows for `results` given oldest first."""
    rows: List[Dict[str, Any]] = []
    for idx, res in enumerate(results, start=1):
        row: Dict[str, Any] = {
            "index": idx,
            "date": (res.completed_at or "")[:10],
            "totalScore": res.total_score,
        }
        for category in CATEGORIES:
            row[f"{category}Score"] = _category_points(res, category)
        rows.append(row)
    return rows


def category_trends(results: Sequence[AssessmentResult]) -> List[Dict[str, Any]]:
    """First-vs-latest movement per category over `results` (oldest first)."""
    if not results:
        return []
    first, latest = results[0], results[-1]
    out: List[Dict[str, Any]] = []
    for category in CATEGORIES:
        max_score = category_max_points(category)
        a = _category_points(first, category)
        b = _category_points(latest, category)
        out.append(
            {
                "key": category,
                "name": category_name(category),
                "first": a,
                "latest": b,
                "maxScore": max_score,
                "change": b - a,
                "trend": trend_of(b - a),
                "firstPercentage": round_half_up(a / max_score * 100),
                "latestPercentage": round_half_up(b / max_score * 100),
            }
        )
    return out
