# cognitive_core/engine.py
from __future__ import annotations
from dataclasses import replace
from typing import Callable, Dict, List, Optional, Protocol, Set
import logging, time

from .checker import check_answer, coerce_answer
from .config import DEBUG_TRACE, TRACE_FIELDS
from .scoring import calculate_assessment_result, round_half_up, score_response
from .types import (
    AssessmentResult,
    BehaviorData,
    EmotionSample,
    Question,
    RawAnswer,
    Response,
)

log = logging.getLogger(__name__)

IDLE = "idle"
IN_PROGRESS = "in_progress"
COMPLETED = "completed"


class InvalidTransition(RuntimeError):
    """Operation not allowed in the session's current state."""


class PersistenceError(RuntimeError):
    """The result store failed; the computed result is still valid."""


class ResultSink(Protocol):
    def save(self, subject_id: str, result: AssessmentResult, behavior: BehaviorData) -> str: ...


def _now_ms() -> float:
    return time.time() * 1000.0


def _emit_trace(**values: object) -> None:
    if not DEBUG_TRACE:
        return
    ordered = [f"{key}={values[key]}" for key in TRACE_FIELDS if key in values]
    if ordered:
        log.info("trace %s", " ".join(ordered))


class AssessmentSession:
    """
    One subject's run through a question set.

    idle -> in_progress -> completed. Scoring is synchronous; the clock
    (milliseconds) and the result store are injected.
    """

    def __init__(self, clock: Callable[[], float] = _now_ms):
        self._clock = clock
        self.state = IDLE
        self.questions: List[Question] = []
        self.question_index = 0
        self.responses: List[Response] = []
        self.answered: Set[int] = set()
        self.behavior = BehaviorData()
        self.start_time: Optional[float] = None
        self.question_start_time: Optional[float] = None
        self.end_time: Optional[float] = None
        self.result: Optional[AssessmentResult] = None
        self.result_id: Optional[str] = None

    # ---- state helpers ----
    @property
    def is_started(self) -> bool:
        return self.state != IDLE

    @property
    def is_completed(self) -> bool:
        return self.state == COMPLETED

    def _require(self, *states: str, op: str) -> None:
        if self.state not in states:
            raise InvalidTransition(f"{op} not allowed in state {self.state!r}")

    @property
    def current_question(self) -> Optional[Question]:
        if self.state != IN_PROGRESS:
            return None
        if 0 <= self.question_index < len(self.questions):
            return self.questions[self.question_index]
        return None

    def progress(self) -> Dict[str, object]:
        answered = {r.question_id for r in self.responses}
        per_cat: Dict[str, List[str]] = {}
        for q in self.questions:
            per_cat.setdefault(q.category, []).append(q.id)
        done = [c for c, ids in per_cat.items() if ids and all(i in answered for i in ids)]
        return {
            "state": self.state,
            "questionIndex": self.question_index,
            "answered": len(self.responses),
            "total": len(self.questions),
            "completedCategories": done,
        }

    # ---- transitions ----
    def start(self, questions: List[Question]) -> Optional[Question]:
        if not questions:
            raise ValueError("cannot start an assessment without questions")
        now = self._clock()
        self.questions = list(questions)
        self.question_index = 0
        self.responses = []
        self.answered = set()
        self.behavior = BehaviorData()
        self.start_time = now
        self.question_start_time = now
        self.end_time = None
        self.result = None
        self.result_id = None
        self.state = IN_PROGRESS
        log.debug("session started with %d questions", len(self.questions))
        return self.current_question

    def submit_response(self, raw_answer: RawAnswer, response_time_ms: Optional[float] = None) -> Response:
        self._require(IN_PROGRESS, op="submit_response")
        q = self.current_question
        if q is None:
            raise InvalidTransition("no current question")
        if self.question_index in self.answered:
            raise InvalidTransition(f"question {q.id} already answered")

        if response_time_ms is None:
            started = self.question_start_time if self.question_start_time is not None else self._clock()
            response_time_ms = self._clock() - started
        rt = max(0, round_half_up(response_time_ms))

        is_correct = check_answer(q, coerce_answer(q, raw_answer))
        points = score_response(q, is_correct, rt)
        answer = raw_answer if not isinstance(raw_answer, list) else tuple(raw_answer)
        resp = Response(
            question_id=q.id,
            category=q.category,
            answer=answer,
            is_correct=is_correct,
            response_time=rt,
            points=points,
            max_points=q.points,
        )
        self.answered.add(self.question_index)
        self.responses.append(resp)
        self.behavior.response_time.append(rt)

        log.debug("answer %s correct=%s rt=%sms points=%s/%s", q.id, is_correct, rt, points, q.points)
        _emit_trace(
            question_id=q.id,
            category=q.category,
            type=q.type,
            is_correct=is_correct,
            response_time=rt,
            points=points,
            max_points=q.points,
        )
        return resp

    def time_out(self) -> Response:
        """Record an empty answer at the full time limit."""
        self._require(IN_PROGRESS, op="time_out")
        q = self.current_question
        if q is None:
            raise InvalidTransition("no current question")
        return self.submit_response("", response_time_ms=q.time_limit_ms)

    def advance(self) -> Optional[Question]:
        self._require(IN_PROGRESS, op="advance")
        nxt = self.question_index + 1
        if nxt >= len(self.questions):
            self.question_index = len(self.questions)
            self.complete()
            return None
        self.question_index = nxt
        self.question_start_time = self._clock()
        return self.current_question

    def complete(self) -> AssessmentResult:
        if self.state == COMPLETED and self.result is not None:
            return self.result
        self._require(IN_PROGRESS, op="complete")
        self.end_time = self._clock()
        started = self.start_time if self.start_time is not None else self.end_time
        self.result = calculate_assessment_result(self.responses, started, self.end_time)
        self.behavior = replace(
            self.behavior,
            response_time=list(self.behavior.response_time),
            emotion_timeline=list(self.behavior.emotion_timeline),
        )
        self.state = COMPLETED
        log.info(
            "assessment completed: total=%s pct=%s risk=%s answered=%d",
            self.result.total_score,
            self.result.percentage,
            self.result.risk_level,
            len(self.responses),
        )
        return self.result

    def reset(self) -> None:
        self.__init__(clock=self._clock)

    # ---- side-channel signals ----
    def _accepts_signals(self, kind: str) -> bool:
        if self.state != IN_PROGRESS:
            log.debug("ignoring %s outside an active assessment (state=%s)", kind, self.state)
            return False
        return True

    def record_emotion(self, emotion: str, confidence: float, timestamp: Optional[float] = None) -> None:
        if not self._accepts_signals("emotion"):
            return
        self.behavior.emotion_timeline.append(
            EmotionSample(
                timestamp=float(timestamp if timestamp is not None else self._clock()),
                emotion=str(emotion),
                confidence=float(confidence),
                question_index=self.question_index,
            )
        )

    def record_hesitation(self) -> None:
        if self._accepts_signals("hesitation"):
            self.behavior.hesitation_count += 1

    def record_correction(self) -> None:
        if self._accepts_signals("correction"):
            self.behavior.correction_count += 1

    # ---- persistence boundary ----
    def save(self, sink: ResultSink, subject_id: str) -> str:
        """Hand the finished result to `sink`; safe to retry after a failure."""
        self._require(COMPLETED, op="save")
        if self.result_id is not None:
            return self.result_id
        try:
            rid = sink.save(subject_id, self.result, self.behavior)
        except Exception as e:
            log.warning("saving assessment for %s failed: %s", subject_id, e)
            raise PersistenceError(str(e)) from e
        self.result_id = rid
        return rid
