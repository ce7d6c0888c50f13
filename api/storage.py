"""Persistence for finished assessments and in-flight session metadata.

Results are JSON files on disk with a small index so that a subject's
history can be listed without opening every file. Production deployments can
swap this module for a database-backed implementation with the same
functions.
"""

from __future__ import annotations

import json
import logging
import os
import threading
import uuid
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Callable, Dict, List, Optional

from cognitive_core.behavior import summarize_behavior
from cognitive_core.types import AssessmentResult, BehaviorData


DATA_ROOT = Path(os.getenv("DATA_DIR", "data")).resolve()
RESULTS_DIR = DATA_ROOT / "assessments"
RESULT_INDEX_PATH = DATA_ROOT / "assessments_index.json"
ACTIVE_SESSIONS_PATH = DATA_ROOT / "sessions_active.json"

_LOCK = threading.Lock()

log = logging.getLogger(__name__)


def _ensure_dirs() -> None:
    RESULTS_DIR.mkdir(parents=True, exist_ok=True)
    DATA_ROOT.mkdir(parents=True, exist_ok=True)


def _read_json(path: Path, default: Any) -> Any:
    if not path.exists():
        return default
    try:
        return json.loads(path.read_text(encoding="utf-8"))
    except (OSError, ValueError) as e:
        log.warning("unreadable store file %s: %s", path, e)
        return default


def _write_json(path: Path, payload: Any) -> None:
    path.parent.mkdir(parents=True, exist_ok=True)
    tmp = path.with_suffix(path.suffix + ".tmp")
    tmp.write_text(json.dumps(payload, indent=2, sort_keys=True, ensure_ascii=False), encoding="utf-8")
    tmp.replace(path)


def utcnow_iso() -> str:
    return datetime.now(timezone.utc).isoformat()


def save_result(result_id: str, payload: Dict[str, Any], metadata: Dict[str, Any]) -> None:
    """Persist the result JSON and its index metadata."""

    _ensure_dirs()
    _write_json(RESULTS_DIR / f"{result_id}.json", payload)

    with _LOCK:
        index: Dict[str, Dict[str, Any]] = _read_json(RESULT_INDEX_PATH, {})
        index[result_id] = metadata
        _write_json(RESULT_INDEX_PATH, index)


def load_result(result_id: str) -> Optional[Dict[str, Any]]:
    path = RESULTS_DIR / f"{result_id}.json"
    if not path.exists():
        return None
    return _read_json(path, None)


def update_result(result_id: str, payload: Dict[str, Any]) -> None:
    """Rewrite a stored result in place; the index row is left as is."""
    if not (RESULTS_DIR / f"{result_id}.json").exists():
        raise KeyError(result_id)
    _write_json(RESULTS_DIR / f"{result_id}.json", payload)


def delete_result(result_id: str) -> bool:
    removed = False
    with _LOCK:
        index: Dict[str, Dict[str, Any]] = _read_json(RESULT_INDEX_PATH, {})
        if result_id in index:
            index.pop(result_id, None)
            _write_json(RESULT_INDEX_PATH, index)
            removed = True
    path = RESULTS_DIR / f"{result_id}.json"
    if path.exists():
        path.unlink()
    return removed


def list_results_for_subject(subject_id: str, limit: Optional[int] = None) -> List[Dict[str, Any]]:
    """Index rows for `subject_id`, most recent first."""
    index: Dict[str, Dict[str, Any]] = _read_json(RESULT_INDEX_PATH, {})
    out = [{**meta, "id": rid} for rid, meta in index.items() if meta.get("subjectId") == subject_id]
    out.sort(key=lambda r: r.get("completedAt", ""), reverse=True)
    if limit is not None:
        out = out[: max(0, int(limit))]
    return out


def latest_results(subject_id: str, n: int) -> List[Dict[str, Any]]:
    """Full payloads of the `n` most recent results, newest first."""
    payloads = (load_result(row["id"]) for row in list_results_for_subject(subject_id, limit=n))
    return [p for p in payloads if p]


def count_results(subject_id: str) -> int:
    return len(list_results_for_subject(subject_id))


def load_all_active_sessions() -> Dict[str, Dict[str, Any]]:
    """Unfinished sessions keyed by session id."""
    return _read_json(ACTIVE_SESSIONS_PATH, {})


def _edit_active_sessions(edit: Callable[[Dict[str, Dict[str, Any]]], bool]) -> None:
    # `edit` mutates the mapping in place and returns whether to write it back
    with _LOCK:
        sessions = load_all_active_sessions()
        if edit(sessions):
            _write_json(ACTIVE_SESSIONS_PATH, sessions)


def record_active_session(session_id: str, payload: Dict[str, Any]) -> None:
    if not payload.get("subjectId"):
        return

    def edit(sessions: Dict[str, Dict[str, Any]]) -> bool:
        sessions[session_id] = payload
        return True

    _edit_active_sessions(edit)


def update_active_session(session_id: str, updates: Dict[str, Any]) -> None:
    def edit(sessions: Dict[str, Dict[str, Any]]) -> bool:
        entry = sessions.get(session_id)
        if entry is None:
            return False
        entry.update(updates)
        return True

    _edit_active_sessions(edit)


def clear_active_session(session_id: str) -> None:
    _edit_active_sessions(lambda s: s.pop(session_id, None) is not None)


def active_sessions_for_subject(subject_id: str) -> List[Dict[str, Any]]:
    rows = [p for p in load_all_active_sessions().values() if p.get("subjectId") == subject_id]
    return sorted(rows, key=lambda r: r.get("startedAt", ""), reverse=True)


class ResultStore:
    """Adapter handed to `AssessmentSession.save`."""

    def __init__(self, session_id: Optional[str] = None):
        self.session_id = session_id

    def save(self, subject_id: str, result: AssessmentResult, behavior: BehaviorData) -> str:
        rid = str(uuid.uuid4())
        payload = result.to_dict()
        payload["id"] = rid
        payload["behaviorData"] = summarize_behavior(behavior)
        payload["meta"] = {
            "resultId": rid,
            "subjectId": subject_id,
            "sessionId": self.session_id,
            "createdAt": utcnow_iso(),
        }
        metadata = {
            "subjectId": subject_id,
            "sessionId": self.session_id,
            "completedAt": result.completed_at,
            "totalScore": result.total_score,
            "percentage": result.percentage,
            "riskLevel": result.risk_level,
        }
        save_result(rid, payload, metadata)
        return rid

    def recent(self, subject_id: str, n: int) -> List[AssessmentResult]:
        return [AssessmentResult.from_dict(p) for p in latest_results(subject_id, n)]
