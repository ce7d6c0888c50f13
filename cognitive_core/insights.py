# cognitive_core/insights.py
from __future__ import annotations
from typing import Dict, List, Sequence

from .config import HIGH_PRIORITY_PCT, STRONG_AREA_PCT, WEAK_AREA_PCT
from .types import CategoryScore, Recommendation

TRAININGS: Dict[str, tuple[str, str]] = {
    "memory": ("Memory game", "/training/memory-game"),
    "language": ("Language game", "/training/language"),
    "calculation": ("Calculation game", "/training/calculation"),
    "attention": ("Memory game", "/training/memory-game"),
    "executive": ("Calculation game", "/training/calculation"),
    "visuospatial": ("Memory game", "/training/memory-game"),
}

_PRIORITY_ORDER = {"high": 0, "medium": 1, "low": 2}


def _priority(pct: int) -> str:
    if pct < HIGH_PRIORITY_PCT: return "high"
    if pct < WEAK_AREA_PCT: return "medium"
    return "low"


def _reason(name: str, priority: str, pct: int) -> str:
    if priority == "high":
        return f"{name} scored {pct}%. Focused daily training of about 10 minutes is recommended."
    if priority == "medium":
        return f"{name} can still improve. Training 3-4 times a week is recommended."
    return f"{name} is in good shape. Light training will help maintain it."


def training_recommendations(category_scores: Sequence[CategoryScore]) -> List[Recommendation]:
    """
    One entry per category below the strong-area line, lowest first.
    Priority: high < 55%, medium < 70%, otherwise low.
    """
    picked = sorted(
        (cs for cs in category_scores if cs.percentage < STRONG_AREA_PCT),
        key=lambda cs: cs.percentage,
    )
    out: List[Recommendation] = []
    for cs in picked:
        pr = _priority(cs.percentage)
        training, path = TRAININGS.get(cs.category, ("Memory game", "/training/memory-game"))
        out.append(
            Recommendation(
                category=cs.category,
                name=cs.name,
                priority=pr,
                percentage=cs.percentage,
                reason=_reason(cs.name, pr, cs.percentage),
                suggested_training=training,
                training_path=path,
            )
        )
    out.sort(key=lambda r: _PRIORITY_ORDER[r.priority])
    return out


def overall_advice(recs: Sequence[Recommendation]) -> str:
    if not recs:
        return "All areas are strong. Keep up your current routine."
    high = [r.name for r in recs if r.priority == "high"]
    if high:
        return f"Start with focused training in {', '.join(high)}."
    return f"Keep training regularly, starting with {recs[0].name}."
