from __future__ import annotations
import json, random
from pathlib import Path
from typing import Any, Dict, List, Optional

from .config import CATEGORY_ORDER
from .types import AnswerValue, Question

CATEGORIES = list(CATEGORY_ORDER)

CATEGORY_CONFIG: Dict[str, Dict[str, Any]] = {
    "memory": {
        "name": "Memory",
        "max_points": 20,
        "description": "Word recall and image memory.",
    },
    "language": {
        "name": "Language",
        "max_points": 20,
        "description": "Sentence comprehension and word association.",
    },
    "calculation": {
        "name": "Calculation",
        "max_points": 15,
        "description": "Arithmetic and number pattern recognition.",
    },
    "attention": {
        "name": "Attention",
        "max_points": 15,
        "description": "Concentration and reaction speed.",
    },
    "executive": {
        "name": "Executive Function",
        "max_points": 15,
        "description": "Planning and ordering steps.",
    },
    "visuospatial": {
        "name": "Visuospatial",
        "max_points": 15,
        "description": "Shape recognition and spatial perception.",
    },
}

_BANK_PATH = Path(__file__).with_name("data") / "questions.json"


def _correct_answer(qtype: str, raw: Any) -> AnswerValue:
    if isinstance(raw, (list, tuple)):
        if qtype == "sequence":
            return AnswerValue.ordered(raw)
        return AnswerValue.unordered(raw)
    return AnswerValue.scalar(raw)


def question_from_dict(r: Dict[str, Any]) -> Question:
    qtype = r["type"]
    opts = r.get("options")
    return Question(
        id=r["id"],
        category=r["category"],
        type=qtype,
        difficulty=int(r.get("difficulty", 1)),
        question=r["question"],
        correct_answer=_correct_answer(qtype, r.get("correctAnswer")),
        time_limit=int(r.get("timeLimit", 30)),
        points=int(r.get("points", 0)),
        options=tuple(str(o) for o in opts) if opts else None,
        instruction=r.get("instruction"),
        hint=r.get("hint"),
        multi_select=bool(r.get("multiSelect", False)),
    )


def load_bank(path: Optional[Path] = None) -> List[Question]:
    data = (path or _BANK_PATH).read_text(encoding="utf-8")
    raw = json.loads(data)
    return [question_from_dict(r) for r in raw]


def questions_by_category(category: str, bank: Optional[List[Question]] = None) -> List[Question]:
    items = bank if bank is not None else load_bank()
    return [q for q in items if q.category == category]


def questions_by_difficulty(difficulty: int, bank: Optional[List[Question]] = None) -> List[Question]:
    items = bank if bank is not None else load_bank()
    return [q for q in items if q.difficulty == difficulty]


def shuffle_questions(questions: List[Question], rng: Optional[random.Random] = None) -> List[Question]:
    shuffled = list(questions)
    (rng or random).shuffle(shuffled)
    return shuffled


def create_assessment_set(bank: Optional[List[Question]] = None) -> List[Question]:
    """Questions grouped by category (fixed order), easiest first inside each."""
    items = bank if bank is not None else load_bank()
    out: List[Question] = []
    for category in CATEGORIES:
        out.extend(sorted(questions_by_category(category, items), key=lambda q: q.difficulty))
    return out


def category_name(category: str) -> str:
    return str(CATEGORY_CONFIG.get(category, {}).get("name", category))


def category_max_points(category: str) -> int:
    return int(CATEGORY_CONFIG[category]["max_points"])
