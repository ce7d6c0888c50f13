from __future__ import annotations
from fastapi import FastAPI, HTTPException, Query, Request, Response
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from pydantic import BaseModel
import logging, os, random, uuid, typing as t

# ---- Engine imports ----
from cognitive_core.config import EXPORT_ENABLED, HISTORY_LIMIT, TREND_LIMIT, load_config
from cognitive_core.engine import AssessmentSession, InvalidTransition, PersistenceError
from cognitive_core.insights import overall_advice, training_recommendations
from cognitive_core.llm_bridge import generate_insights
from cognitive_core.question_bank import create_assessment_set, load_bank, shuffle_questions
from cognitive_core.report_html import render_result_html
from cognitive_core.response_export import to_csv as responses_to_csv, to_json as responses_to_json
from cognitive_core.trends import category_trends, compare_with_previous, score_series, strong_areas, weak_areas
from cognitive_core.types import AssessmentResult
from .storage import (
    ResultStore,
    active_sessions_for_subject,
    clear_active_session,
    count_results,
    delete_result,
    latest_results,
    list_results_for_subject,
    load_all_active_sessions,
    load_result,
    record_active_session,
    update_active_session,
    update_result,
    utcnow_iso,
)

log = logging.getLogger(__name__)

SESS: dict[str, AssessmentSession] = {}
SESSION_INFO: dict[str, dict[str, t.Any]] = {}

for sid, payload in load_all_active_sessions().items():
    SESSION_INFO[sid] = {
        "subject_id": payload.get("subjectId"),
        "started_at": payload.get("startedAt"),
    }

app = FastAPI(title="Cognitive Assessment API")


@app.get("/")
def root():
    return {"status": "ok", "service": "cognitive-assessment-api"}


ALLOWED_ORIGINS = [o.strip() for o in os.getenv("ALLOWED_ORIGINS", "http://localhost:3000").split(",") if o.strip()]

app.add_middleware(
    CORSMiddleware,
    allow_origins=ALLOWED_ORIGINS,
    allow_methods=["*"],
    allow_headers=["*"],
    allow_credentials=False,
)


@app.exception_handler(InvalidTransition)
def _invalid_transition(_request: Request, exc: InvalidTransition):
    return JSONResponse(status_code=409, content={"detail": str(exc)})


# ---- Schemas ----
class StartReq(BaseModel):
    subject_id: str
    shuffle: bool = False

class AnswerReq(BaseModel):
    question_id: str
    answer: list[str] | str | int | float | None = None
    response_time_ms: int | None = None

class EmotionReq(BaseModel):
    emotion: str
    confidence: float = 1.0
    timestamp: float | None = None


# ---- Helpers ----
def _session(sid: str) -> AssessmentSession:
    sess = SESS.get(sid)
    if not sess:
        raise HTTPException(404, "session not found")
    return sess


def _serialize_question(q) -> dict[str, t.Any] | None:
    return q.public_dict() if q is not None else None


def _stored(result_id: str) -> dict[str, t.Any]:
    stored = load_result(result_id)
    if not stored:
        raise HTTPException(404, "result not found")
    return stored


def _touch(sid: str, sess: AssessmentSession) -> None:
    if SESSION_INFO.get(sid, {}).get("subject_id"):
        update_active_session(sid, {"lastUpdated": utcnow_iso(), "questionIndex": sess.question_index})


# ---- Health ----
@app.get("/health")
def health():
    return {
        "llm_backend": os.getenv("LLM_BACKEND", "none"),
        "use_llm_insights": os.getenv("USE_LLM_INSIGHTS", "0"),
        "azure_config_present": all(os.getenv(k) for k in [
            "AZURE_OPENAI_ENDPOINT", "AZURE_OPENAI_API_KEY", "AZURE_OPENAI_API_VERSION", "AZURE_OPENAI_DEPLOYMENT"
        ]),
        "export_enabled": EXPORT_ENABLED,
    }


@app.get("/questions")
def questions():
    items = create_assessment_set()
    return {"questions": [q.public_dict() for q in items], "total": len(items)}


# ---- Assessment session ----
@app.post("/assessment/start")
def start(req: StartReq):
    items = create_assessment_set(load_bank())
    if req.shuffle:
        seed = load_config().get("SEED")
        items = shuffle_questions(items, random.Random(seed) if seed is not None else None)

    sid = str(uuid.uuid4())
    sess = AssessmentSession()
    first = sess.start(items)
    SESS[sid] = sess
    started_at = utcnow_iso()
    SESSION_INFO[sid] = {"subject_id": req.subject_id, "started_at": started_at}
    record_active_session(
        sid,
        {
            "sessionId": sid,
            "subjectId": req.subject_id,
            "startedAt": started_at,
            "lastUpdated": started_at,
            "questionIndex": 0,
        },
    )
    log.info("assessment %s started for %s (%d questions)", sid, req.subject_id, len(items))
    return {"session_id": sid, "total": len(items), "question": _serialize_question(first)}


@app.post("/assessment/{sid}/answer")
def answer(sid: str, req: AnswerReq):
    sess = _session(sid)
    current = sess.current_question
    if current is None:
        raise HTTPException(409, "no question awaiting an answer")
    if req.question_id != current.id:
        raise HTTPException(409, f"expected an answer to {current.id}, got {req.question_id}")
    resp = sess.submit_response(req.answer, response_time_ms=req.response_time_ms)
    nxt = sess.advance()
    _touch(sid, sess)
    return {"response": resp.to_dict(), "done": nxt is None, "question": _serialize_question(nxt)}


@app.post("/assessment/{sid}/timeout")
def timeout(sid: str):
    sess = _session(sid)
    resp = sess.time_out()
    nxt = sess.advance()
    _touch(sid, sess)
    return {"response": resp.to_dict(), "done": nxt is None, "question": _serialize_question(nxt)}


@app.post("/assessment/{sid}/emotion")
def emotion(sid: str, req: EmotionReq):
    _session(sid).record_emotion(req.emotion, req.confidence, req.timestamp)
    return {"ok": True}


@app.post("/assessment/{sid}/hesitation")
def hesitation(sid: str):
    sess = _session(sid)
    sess.record_hesitation()
    return {"ok": True, "hesitationCount": sess.behavior.hesitation_count}


@app.post("/assessment/{sid}/correction")
def correction(sid: str):
    sess = _session(sid)
    sess.record_correction()
    return {"ok": True, "correctionCount": sess.behavior.correction_count}


@app.get("/assessment/{sid}/progress")
def progress(sid: str):
    sess = _session(sid)
    out = sess.progress()
    out["question"] = _serialize_question(sess.current_question)
    return out


@app.post("/assessment/{sid}/finish")
def finish(sid: str):
    sess = _session(sid)
    info = SESSION_INFO.setdefault(sid, {})
    subject_id = info.get("subject_id") or "anonymous"
    result = sess.complete()

    store = ResultStore(session_id=sid)
    # looked up once so a retried finish still compares against the real previous result
    if "previous" not in info:
        prev = store.recent(subject_id, 1)
        info["previous"] = prev[0] if prev else None

    try:
        rid = sess.save(store, subject_id)
    except PersistenceError as e:
        raise HTTPException(503, f"result could not be stored, retry finish: {e}")

    payload = load_result(rid) or {**result.to_dict(), "id": rid}
    comparison = compare_with_previous(result, info["previous"])
    recs = training_recommendations(result.category_scores)
    payload["comparison"] = comparison.to_dict() if comparison else None
    payload["insights"] = generate_insights(result, sess.behavior)
    payload["recommendations"] = [r.to_dict() for r in recs]
    payload["advice"] = overall_advice(recs)
    try:
        update_result(rid, payload)
    except (OSError, KeyError) as e:
        log.warning("result %s stored without analytics: %s", rid, e)

    clear_active_session(sid)
    SESS.pop(sid, None)
    SESSION_INFO.pop(sid, None)
    return payload


@app.delete("/assessment/{sid}")
def discard(sid: str):
    sess = _session(sid)
    sess.reset()
    clear_active_session(sid)
    SESS.pop(sid, None)
    SESSION_INFO.pop(sid, None)
    return {"ok": True}


# ---- Stored results ----
@app.get("/assessments/{result_id}")
def get_result(result_id: str):
    return _stored(result_id)


@app.delete("/assessments/{result_id}")
def delete_result_endpoint(result_id: str):
    ok = delete_result(result_id)
    if not ok:
        raise HTTPException(404, "result not found")
    return {"ok": True}


@app.get("/assessments/{result_id}/responses.json")
def get_responses_json(result_id: str):
    if not EXPORT_ENABLED:
        raise HTTPException(404, "response export disabled")
    stored = _stored(result_id)
    return {"result_id": result_id, **responses_to_json(stored.get("responses") or [])}


@app.get("/assessments/{result_id}/responses.csv")
def get_responses_csv(result_id: str):
    if not EXPORT_ENABLED:
        raise HTTPException(404, "response export disabled")
    stored = _stored(result_id)
    body = responses_to_csv(stored.get("responses") or [])
    filename = f"{result_id}_responses.csv"
    return Response(
        content=body,
        media_type="text/csv",
        headers={"Content-Disposition": f"attachment; filename=\"{filename}\""},
    )


@app.get("/assessments/{result_id}/report/html")
def report_html_endpoint(result_id: str):
    return {"html": render_result_html(_stored(result_id))}


# ---- Subject history and analytics ----
@app.get("/subjects/{subject_id}/assessments")
def list_assessments(subject_id: str, limit: int = Query(HISTORY_LIMIT, ge=1, le=100)):
    return {"assessments": list_results_for_subject(subject_id, limit=limit)}


@app.get("/subjects/{subject_id}/sessions/active")
def list_active_sessions(subject_id: str):
    return {"sessions": active_sessions_for_subject(subject_id)}


@app.get("/subjects/{subject_id}/analytics/summary")
def analytics_summary(subject_id: str):
    recent = [AssessmentResult.from_dict(p) for p in latest_results(subject_id, 2)]
    total = count_results(subject_id)
    if not recent:
        return {"latest": None, "previous": None, "comparison": None,
                "weakAreas": [], "strongAreas": [], "totalAssessments": 0}
    latest = recent[0]
    previous = recent[1] if len(recent) > 1 else None
    comparison = compare_with_previous(latest, previous)
    return {
        "latest": latest.to_dict(),
        "previous": previous.to_dict() if previous else None,
        "comparison": comparison.to_dict() if comparison else None,
        "weakAreas": weak_areas(latest.category_scores),
        "strongAreas": strong_areas(latest.category_scores),
        "totalAssessments": total,
    }


@app.get("/subjects/{subject_id}/analytics/trends")
def analytics_trends(subject_id: str, limit: int = Query(TREND_LIMIT, ge=1, le=100)):
    # oldest first for charting
    results = [AssessmentResult.from_dict(p) for p in reversed(latest_results(subject_id, limit))]
    return {
        "series": score_series(results),
        "categoryTrends": category_trends(results),
        "count": len(results),
    }


@app.get("/subjects/{subject_id}/analytics/recommendations")
def analytics_recommendations(subject_id: str):
    recent = latest_results(subject_id, 1)
    if not recent:
        raise HTTPException(404, "no assessments for subject")
    latest = AssessmentResult.from_dict(recent[0])
    recs = training_recommendations(latest.category_scores)
    return {
        "resultId": recent[0].get("id"),
        "recommendations": [r.to_dict() for r in recs],
        "advice": overall_advice(recs),
    }
