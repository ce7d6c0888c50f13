from __future__ import annotations
import re
from typing import Iterable

from .types import AnswerValue, Question, RawAnswer, answer_text

_WS_RX = re.compile(r"\s+")


def normalize(value: object) -> str:
    return _WS_RX.sub("", answer_text(value).strip().lower())


def normalize_list(values: Iterable[object]) -> str:
    return ",".join(normalize(v) for v in values)


def coerce_answer(question: Question, raw: RawAnswer) -> AnswerValue:
    """Turn a transport value into a candidate answer for `question`."""
    if isinstance(raw, AnswerValue):
        return raw
    if isinstance(raw, (list, tuple)):
        return AnswerValue.ordered(raw)
    if raw is None:
        return AnswerValue.scalar("")
    if (
        isinstance(raw, str)
        and question.type == "recall"
        and question.correct_answer.is_list
        and "," in raw
    ):
        parts = [p.strip() for p in raw.split(",") if p.strip()]
        return AnswerValue.ordered(parts)
    return AnswerValue.scalar(raw)


def _check_scalar(question: Question, candidate: AnswerValue) -> bool:
    expected = normalize(question.correct_answer.values[0])
    if candidate.kind == "scalar":
        return normalize(candidate.values[0]) == expected
    # a list is only comparable to a scalar key for ordering questions
    if question.type == "sequence":
        return normalize_list(candidate.values) == expected
    return False


def _check_ordered(question: Question, candidate: AnswerValue) -> bool:
    expected = question.correct_answer.values
    if candidate.kind == "scalar":
        return False
    if len(candidate.values) != len(expected):
        return False
    return all(normalize(a) == normalize(b) for a, b in zip(expected, candidate.values))


def _check_unordered(question: Question, candidate: AnswerValue) -> bool:
    expected = [normalize(v) for v in question.correct_answer.values]
    if candidate.kind == "scalar":
        return normalize(candidate.values[0]) in expected
    given = {normalize(v) for v in candidate.values}
    return all(ans in given for ans in expected)


def check_answer(question: Question, answer: RawAnswer) -> bool:
    """
    Boolean verdict for `answer` against the question's key.
    Shape mismatches are simply incorrect.
    """
    candidate = coerce_answer(question, answer)
    kind = question.correct_answer.kind
    if kind == "scalar":
        return _check_scalar(question, candidate)
    if kind == "ordered":
        return _check_ordered(question, candidate)
    if kind == "unordered":
        return _check_unordered(question, candidate)
    raise ValueError(f"unknown answer kind: {kind}")
