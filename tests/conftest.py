from __future__ import annotations

import pytest

from cognitive_core.question_bank import CATEGORIES, CATEGORY_CONFIG
from cognitive_core.types import AnswerValue, Question


def make_question(**overrides) -> Question:
    """One scalar multiple-choice question; any field can be overridden."""

    fields = dict(
        id="q1",
        category="memory",
        type="multiple_choice",
        difficulty=1,
        question="Pick A",
        correct_answer=AnswerValue.scalar("A"),
        time_limit=30,
        points=4,
        options=("A", "B", "C", "D"),
    )
    fields.update(overrides)
    return Question(**fields)


def build_synthetic_bank(
    *,
    categories: list[str] | None = None,
    per_category: int = 5,
    time_limit: int = 30,
) -> list[Question]:
    """Create a deterministic synthetic bank for tests and smoke runs.

    Points are spread so that a full category sums to its configured maximum.
    """

    items: list[Question] = []
    for category in categories or list(CATEGORIES):
        max_points = int(CATEGORY_CONFIG[category]["max_points"])
        for idx in range(per_category):
            items.append(
                make_question(
                    id=f"{category}-{idx + 1}",
                    category=category,
                    difficulty=min(3, idx // 2 + 1),
                    question=f"{category} question #{idx + 1}",
                    time_limit=time_limit,
                    points=max_points // per_category,
                )
            )
    return items


class FakeClock:
    """Millisecond clock that only moves when told to."""

    def __init__(self, start: float = 1_000_000.0):
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, ms: float) -> None:
        self.now += ms


@pytest.fixture
def synthetic_bank() -> list[Question]:
    return build_synthetic_bank()


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()
