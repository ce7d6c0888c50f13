from __future__ import annotations

import importlib
import os
import sys

from fastapi.testclient import TestClient

from tests.conftest import build_synthetic_bank


_DEF_MODULES = [
    "api.storage",
    "api.app",
]


def _reload_app(tmp_path, monkeypatch) -> tuple[object, object]:
    os.environ["DATA_DIR"] = str(tmp_path)
    for name in _DEF_MODULES:
        if name in sys.modules:
            importlib.reload(sys.modules[name])
        else:
            __import__(name)
    storage = sys.modules["api.storage"]
    app_module = sys.modules["api.app"]
    monkeypatch.setattr(app_module, "load_bank", lambda: build_synthetic_bank())
    monkeypatch.setattr(app_module, "generate_insights", lambda result, behavior: {"source": "rules", "insights": ["ok"]})
    return storage, app_module


def _play(client, subject="s-1", correct=True, rt=2_000):
    start = client.post("/assessment/start", json={"subject_id": subject})
    assert start.status_code == 200
    sid = start.json()["session_id"]
    q = start.json()["question"]
    while q is not None:
        body = {"question_id": q["id"], "answer": "A" if correct else "C", "response_time_ms": rt}
        r = client.post(f"/assessment/{sid}/answer", json=body)
        assert r.status_code == 200
        q = r.json()["question"]
    return sid


def test_health_and_questions(tmp_path, monkeypatch):
    _storage, app_module = _reload_app(tmp_path, monkeypatch)
    client = TestClient(app_module.app)

    assert client.get("/").json()["status"] == "ok"
    assert "llm_backend" in client.get("/health").json()
    qs = client.get("/questions").json()
    assert qs["total"] == 30
    assert all("correctAnswer" not in q for q in qs["questions"])


def test_full_assessment_flow(tmp_path, monkeypatch):
    storage, app_module = _reload_app(tmp_path, monkeypatch)
    client = TestClient(app_module.app)

    start = client.post("/assessment/start", json={"subject_id": "s-1"})
    sid = start.json()["session_id"]
    first = start.json()["question"]
    assert start.json()["total"] == 30
    assert "correctAnswer" not in first
    assert client.get("/subjects/s-1/sessions/active").json()["sessions"][0]["sessionId"] == sid

    r = client.post(f"/assessment/{sid}/answer", json={"question_id": first["id"], "answer": "A", "response_time_ms": 1500})
    body = r.json()
    assert body["response"]["isCorrect"] is True
    assert body["response"]["points"] == 4
    assert body["done"] is False

    assert client.post(f"/assessment/{sid}/hesitation").json()["hesitationCount"] == 1
    assert client.post(f"/assessment/{sid}/emotion", json={"emotion": "neutral", "confidence": 0.8}).status_code == 200

    timed = client.post(f"/assessment/{sid}/timeout").json()
    assert timed["response"]["isCorrect"] is False
    assert timed["response"]["responseTime"] == 30_000

    progress = client.get(f"/assessment/{sid}/progress").json()
    assert progress["answered"] == 2
    assert progress["state"] == "in_progress"

    q = timed["question"]
    while q is not None:
        q = client.post(f"/assessment/{sid}/answer", json={"question_id": q["id"], "answer": "A", "response_time_ms": 2000}).json()["question"]

    fin = client.post(f"/assessment/{sid}/finish")
    assert fin.status_code == 200
    result = fin.json()
    assert result["totalScore"] == 96
    assert result["riskLevel"] == "excellent"
    assert result["comparison"] is None
    assert result["behaviorData"]["hesitationCount"] == 1
    assert result["insights"]["insights"] == ["ok"]
    # memory lost one question: 16/20 is below the strong-area line
    assert [r["category"] for r in result["recommendations"]] == ["memory"]

    stored = client.get(f"/assessments/{result['id']}").json()
    assert stored["recommendations"] == result["recommendations"]
    assert client.get("/subjects/s-1/sessions/active").json()["sessions"] == []
    assert client.get(f"/assessment/{sid}/progress").status_code == 404
    assert storage.count_results("s-1") == 1


def test_second_assessment_is_compared_with_previous(tmp_path, monkeypatch):
    _storage, app_module = _reload_app(tmp_path, monkeypatch)
    client = TestClient(app_module.app)

    first = client.post(f"/assessment/{_play(client, correct=False)}/finish").json()
    second = client.post(f"/assessment/{_play(client)}/finish").json()
    assert first["totalScore"] == 0
    assert second["comparison"]["totalScoreChange"] == 100
    assert {c["trend"] for c in second["comparison"]["categoryChanges"]} == {"up"}

    history = client.get("/subjects/s-1/assessments").json()["assessments"]
    assert [h["id"] for h in history] == [second["id"], first["id"]]
    assert client.get("/subjects/s-1/assessments", params={"limit": 1}).json()["assessments"][0]["id"] == second["id"]

    summary = client.get("/subjects/s-1/analytics/summary").json()
    assert summary["totalAssessments"] == 2
    assert summary["comparison"]["totalScoreChange"] == 100
    assert summary["weakAreas"] == []

    trends = client.get("/subjects/s-1/analytics/trends").json()
    assert [row["totalScore"] for row in trends["series"]] == [0, 100]
    assert all(t["trend"] == "up" for t in trends["categoryTrends"])

    recs = client.get("/subjects/s-1/analytics/recommendations").json()
    assert recs["resultId"] == second["id"]
    assert recs["recommendations"] == []


def test_stale_or_out_of_state_calls(tmp_path, monkeypatch):
    _storage, app_module = _reload_app(tmp_path, monkeypatch)
    client = TestClient(app_module.app)

    assert client.post("/assessment/nope/answer", json={"question_id": "x", "answer": "A"}).status_code == 404
    sid = client.post("/assessment/start", json={"subject_id": "s-2"}).json()["session_id"]
    wrong = client.post(f"/assessment/{sid}/answer", json={"question_id": "language-1", "answer": "A"})
    assert wrong.status_code == 409
    assert client.post(f"/assessment/{sid}/answer", json={"question_id": "memory-1"}).status_code == 200
    assert client.post(f"/assessment/{sid}/answer", json={"answer": "A"}).status_code == 422

    assert client.delete(f"/assessment/{sid}").json() == {"ok": True}
    assert client.post(f"/assessment/{sid}/finish").status_code == 404
    assert client.get("/subjects/s-2/analytics/recommendations").status_code == 404
    empty = client.get("/subjects/s-2/analytics/summary").json()
    assert empty["totalAssessments"] == 0 and empty["latest"] is None


def test_finish_retries_after_store_failure(tmp_path, monkeypatch):
    _storage, app_module = _reload_app(tmp_path, monkeypatch)
    client = TestClient(app_module.app)
    sid = _play(client)

    real_save = app_module.ResultStore.save

    def broken(self, subject_id, result, behavior):
        raise OSError("read-only file system")

    monkeypatch.setattr(app_module.ResultStore, "save", broken)
    failed = client.post(f"/assessment/{sid}/finish")
    assert failed.status_code == 503
    assert app_module.SESS[sid].result.total_score == 100

    monkeypatch.setattr(app_module.ResultStore, "save", real_save)
    ok = client.post(f"/assessment/{sid}/finish")
    assert ok.status_code == 200
    assert ok.json()["totalScore"] == 100


def test_result_exports_report_and_delete(tmp_path, monkeypatch):
    _storage, app_module = _reload_app(tmp_path, monkeypatch)
    client = TestClient(app_module.app)
    rid = client.post(f"/assessment/{_play(client)}/finish").json()["id"]

    js = client.get(f"/assessments/{rid}/responses.json").json()
    assert js["result_id"] == rid
    assert len(js["responses"]) == 30

    csv_resp = client.get(f"/assessments/{rid}/responses.csv")
    assert csv_resp.status_code == 200
    assert csv_resp.headers["content-type"].startswith("text/csv")
    assert csv_resp.text.splitlines()[0] == "questionId,category,answer,isCorrect,responseTime,points,maxPoints"

    html = client.get(f"/assessments/{rid}/report/html").json()["html"]
    assert "Cognitive Assessment Report" in html

    monkeypatch.setattr(app_module, "EXPORT_ENABLED", False)
    assert client.get(f"/assessments/{rid}/responses.json").status_code == 404

    assert client.delete(f"/assessments/{rid}").json() == {"ok": True}
    assert client.get(f"/assessments/{rid}").status_code == 404
    assert client.delete(f"/assessments/{rid}").status_code == 404
