from __future__ import annotations
import logging, math
from datetime import datetime, timezone
from typing import Iterable, List, Optional

from . import config
from .question_bank import CATEGORIES, category_max_points, category_name
from .risk import classify_risk, risk_info
from .types import AssessmentResult, CategoryScore, Question, Response

log = logging.getLogger(__name__)


def round_half_up(x: float) -> int:
    return int(math.floor(float(x) + 0.5))


def score_response(question: Question, is_correct: bool, response_time: float) -> int:
    """
    Points earned for one answer.
    Fast answers (<= half the limit) get a bonus, late ones a penalty;
    the result never exceeds the question's points.
    """
    if not is_correct:
        return 0
    points = int(question.points)
    limit_ms = question.time_limit_ms
    score = points
    if response_time <= limit_ms * config.SPEED_BONUS_RATIO:
        score = round_half_up(points * config.SPEED_BONUS_MULTIPLIER)
    elif response_time > limit_ms:
        score = round_half_up(points * config.LATE_PENALTY_MULTIPLIER)
    return max(0, min(score, points))


def calculate_category_score(category: str, responses: Iterable[Response]) -> CategoryScore:
    picked = [r for r in responses if r.category == category]
    max_score = category_max_points(category)
    total = min(sum(int(r.points) for r in picked), max_score)
    correct = sum(1 for r in picked if r.is_correct)
    rt_total = sum(int(r.response_time) for r in picked)
    return CategoryScore(
        category=category,
        name=category_name(category),
        score=total,
        max_score=max_score,
        percentage=round_half_up(total / max_score * 100) if max_score > 0 else 0,
        questions_correct=correct,
        questions_total=len(picked),
        average_response_time=round_half_up(rt_total / len(picked)) if picked else 0,
    )


def calculate_assessment_result(
    responses: List[Response],
    start_ms: float,
    end_ms: float,
    completed_at: Optional[str] = None,
) -> AssessmentResult:
    category_scores = [calculate_category_score(c, responses) for c in CATEGORIES]
    total = sum(cs.score for cs in category_scores)
    max_score = config.TOTAL_MAX_SCORE
    percentage = round_half_up(total / max_score * 100)
    level = classify_risk(percentage)
    log.debug("assessment total=%s pct=%s risk=%s", total, percentage, level)
    return AssessmentResult(
        total_score=total,
        max_score=max_score,
        percentage=percentage,
        risk_level=level,
        risk_description=risk_info(level)["description"],
        category_scores=category_scores,
        responses=list(responses),
        completed_at=completed_at or datetime.now(timezone.utc).isoformat(),
        duration=max(0, int(end_ms - start_ms)),
    )
