from __future__ import annotations
from dataclasses import dataclass, field
from typing import Any, Dict, List, Literal, Optional, Tuple, Union

Category = Literal["memory", "language", "calculation", "attention", "executive", "visuospatial"]
QuestionType = Literal["multiple_choice", "text_input", "sequence", "pattern_match", "reaction", "recall"]
AnswerKind = Literal["scalar", "ordered", "unordered"]
RiskLevel = Literal["excellent", "mild_caution", "caution", "severe"]
Trend = Literal["up", "down", "stable"]
Priority = Literal["high", "medium", "low"]

RawAnswer = Union[str, int, float, bool, List[str], Tuple[str, ...], "AnswerValue", None]


def answer_text(value: Any) -> str:
    # 12.0 reads as "12", the way a browser prints it
    if isinstance(value, float) and value.is_integer():
        value = int(value)
    return "" if value is None else str(value)


@dataclass(frozen=True)
class AnswerValue:
    """Tagged answer: one scalar, an ordered list or an unordered set."""

    kind: AnswerKind
    values: Tuple[str, ...]

    @classmethod
    def scalar(cls, value: Any) -> "AnswerValue":
        return cls("scalar", (answer_text(value),))

    @classmethod
    def ordered(cls, values) -> "AnswerValue":
        return cls("ordered", tuple(answer_text(v) for v in values))

    @classmethod
    def unordered(cls, values) -> "AnswerValue":
        return cls("unordered", tuple(answer_text(v) for v in values))

    @property
    def is_list(self) -> bool:
        return self.kind != "scalar"

    def to_raw(self) -> RawAnswer:
        if self.kind == "scalar":
            return self.values[0] if self.values else ""
        return list(self.values)


@dataclass(frozen=True)
class Question:
    id: str; category: Category; type: QuestionType; difficulty: int; question: str
    correct_answer: AnswerValue
    time_limit: int
    points: int
    options: Optional[Tuple[str, ...]] = None
    instruction: Optional[str] = None
    hint: Optional[str] = None
    multi_select: bool = False

    @property
    def time_limit_ms(self) -> int:
        return int(self.time_limit) * 1000

    def public_dict(self) -> Dict[str, Any]:
        """Client-facing view; never includes the correct answer."""
        return {
            "id": self.id,
            "category": self.category,
            "type": self.type,
            "difficulty": self.difficulty,
            "question": self.question,
            "instruction": self.instruction,
            "options": list(self.options) if self.options else None,
            "timeLimit": self.time_limit,
            "points": self.points,
            "hint": self.hint,
            "multiSelect": self.multi_select,
        }


@dataclass(frozen=True)
class Response:
    question_id: str
    category: Category
    answer: RawAnswer
    is_correct: bool
    response_time: int
    points: int
    max_points: int

    def to_dict(self) -> Dict[str, Any]:
        return {
            "questionId": self.question_id,
            "category": self.category,
            "answer": list(self.answer) if isinstance(self.answer, tuple) else self.answer,
            "isCorrect": self.is_correct,
            "responseTime": self.response_time,
            "points": self.points,
            "maxPoints": self.max_points,
        }

    @classmethod
    def from_dict(cls, d: Dict[str, Any]) -> "Response":
        ans = d.get("answer")
        return cls(
            question_id=str(d.get("questionId", "")),
            category=d.get("category", "memory"),
            answer=tuple(ans) if isinstance(ans, list) else ans,
            is_correct=bool(d.get("isCorrect", False)),
            response_time=int(d.get("responseTime", 0) or 0),
            points=int(d.get("points", 0) or 0),
            max_points=int(d.get("maxPoints", 0) or 0),
        )


@dataclass
class CategoryScore:
    category: Category
    name: str
    score: int
    max_score: int
    percentage: int
    questions_correct: int
    questions_total: int
    average_response_time: int

    def to_dict(self) -> Dict[str, Any]:
        return {
            "category": self.category,
            "name": self.name,
            "score": self.score,
            "maxScore": self.max_score,
            "percentage": self.percentage,
            "questionsCorrect": self.questions_correct,
            "questionsTotal": self.questions_total,
            "averageResponseTime": self.average_response_time,
        }

    @classmethod
    def from_dict(cls, d: Dict[str, Any]) -> "CategoryScore":
        return cls(
            category=d["category"],
            name=str(d.get("name", d["category"])),
            score=int(d.get("score", 0) or 0),
            max_score=int(d.get("maxScore", 0) or 0),
            percentage=int(d.get("percentage", 0) or 0),
            questions_correct=int(d.get("questionsCorrect", 0) or 0),
            questions_total=int(d.get("questionsTotal", 0) or 0),
            average_response_time=int(d.get("averageResponseTime", 0) or 0),
        )


@dataclass(frozen=True)
class EmotionSample:
    timestamp: float
    emotion: str
    confidence: float
    question_index: Optional[int] = None

    def to_dict(self) -> Dict[str, Any]:
        out: Dict[str, Any] = {
            "timestamp": self.timestamp,
            "emotion": self.emotion,
            "confidence": self.confidence,
        }
        if self.question_index is not None:
            out["questionIndex"] = self.question_index
        return out


@dataclass
class BehaviorData:
    response_time: List[int] = field(default_factory=list)
    hesitation_count: int = 0
    correction_count: int = 0
    emotion_timeline: List[EmotionSample] = field(default_factory=list)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "responseTime": list(self.response_time),
            "hesitationCount": self.hesitation_count,
            "correctionCount": self.correction_count,
            "emotionTimeline": [e.to_dict() for e in self.emotion_timeline],
        }


@dataclass
class AssessmentResult:
    total_score: int
    max_score: int
    percentage: int
    risk_level: RiskLevel
    risk_description: str
    category_scores: List[CategoryScore]
    responses: List[Response]
    completed_at: str
    duration: int

    def category(self, category: str) -> Optional[CategoryScore]:
        return next((cs for cs in self.category_scores if cs.category == category), None)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "totalScore": self.total_score,
            "maxScore": self.max_score,
            "percentage": self.percentage,
            "riskLevel": self.risk_level,
            "riskDescription": self.risk_description,
            "categoryScores": [cs.to_dict() for cs in self.category_scores],
            "responses": [r.to_dict() for r in self.responses],
            "completedAt": self.completed_at,
            "duration": self.duration,
        }

    @classmethod
    def from_dict(cls, d: Dict[str, Any]) -> "AssessmentResult":
        return cls(
            total_score=int(d.get("totalScore", 0) or 0),
            max_score=int(d.get("maxScore", 100) or 100),
            percentage=int(d.get("percentage", 0) or 0),
            risk_level=d.get("riskLevel", "severe"),
            risk_description=str(d.get("riskDescription", "")),
            category_scores=[CategoryScore.from_dict(cs) for cs in d.get("categoryScores") or []],
            responses=[Response.from_dict(r) for r in d.get("responses") or []],
            completed_at=str(d.get("completedAt", "")),
            duration=int(d.get("duration", 0) or 0),
        )


@dataclass(frozen=True)
class CategoryChange:
    category: Category
    change: int
    trend: Trend

    def to_dict(self) -> Dict[str, Any]:
        return {"category": self.category, "change": self.change, "trend": self.trend}


@dataclass
class TrendComparison:
    total_score_change: int
    category_changes: List[CategoryChange]

    def to_dict(self) -> Dict[str, Any]:
        return {
            "totalScoreChange": self.total_score_change,
            "categoryChanges": [c.to_dict() for c in self.category_changes],
        }


@dataclass(frozen=True)
class Recommendation:
    category: Category
    name: str
    priority: Priority
    percentage: int
    reason: str
    suggested_training: str
    training_path: str

    def to_dict(self) -> Dict[str, Any]:
        return {
            "category": self.category,
            "name": self.name,
            "priority": self.priority,
            "percentage": self.percentage,
            "reason": self.reason,
            "suggestedTraining": self.suggested_training,
            "trainingPath": self.training_path,
        }
