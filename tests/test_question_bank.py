from __future__ import annotations

import random

from cognitive_core.question_bank import (
    CATEGORIES,
    category_max_points,
    create_assessment_set,
    load_bank,
    question_from_dict,
    questions_by_category,
    questions_by_difficulty,
    shuffle_questions,
)


def test_catalog_loads_thirty_questions():
    bank = load_bank()
    assert len(bank) == 30
    assert len({q.id for q in bank}) == 30
    for category in CATEGORIES:
        items = questions_by_category(category, bank)
        assert len(items) == 5
        assert sum(q.points for q in items) == category_max_points(category)
    assert sum(category_max_points(c) for c in CATEGORIES) == 100


def test_list_keys_become_tagged_answers():
    bank = {q.id: q for q in load_bank()}
    assert bank["memory-1"].correct_answer.kind == "unordered"
    assert bank["executive-3"].correct_answer.kind == "scalar"
    seq = question_from_dict(
        {"id": "s", "category": "executive", "type": "sequence", "question": "order", "correctAnswer": ["b", "a"]}
    )
    assert seq.correct_answer.kind == "ordered"
    assert seq.correct_answer.values == ("b", "a")
    assert seq.time_limit == 30


def test_assessment_set_groups_categories_easiest_first():
    items = create_assessment_set()
    assert [q.category for q in items[::5]] == CATEGORIES
    for i in range(0, 30, 5):
        diffs = [q.difficulty for q in items[i:i + 5]]
        assert diffs == sorted(diffs)


def test_filters_and_shuffle(synthetic_bank):
    assert {q.difficulty for q in questions_by_difficulty(3, synthetic_bank)} == {3}
    shuffled = shuffle_questions(synthetic_bank, random.Random(7))
    assert sorted(q.id for q in shuffled) == sorted(q.id for q in synthetic_bank)
    assert shuffled is not synthetic_bank
    assert shuffle_questions(synthetic_bank, random.Random(7)) == shuffled


def test_public_view_hides_the_answer():
    q = load_bank()[0]
    view = q.public_dict()
    assert "correctAnswer" not in view
    assert view["timeLimit"] == q.time_limit
