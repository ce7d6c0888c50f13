from __future__ import annotations

import pytest

import cognitive_core.llm_bridge as llm_bridge
from cognitive_core.heuristics import heuristic_insights
from cognitive_core.insights import overall_advice, training_recommendations
from cognitive_core.types import AssessmentResult, BehaviorData, CategoryScore, Response


def _scores(pcts: dict[str, int]) -> list[CategoryScore]:
    return [CategoryScore(c, c.title(), p, 100, p, 0, 5, 0) for c, p in pcts.items()]


def _result(level="mild_caution", correct=4, wrong=1) -> AssessmentResult:
    responses = [Response(f"q{i}", "memory", "A", True, 1000, 4, 4) for i in range(correct)]
    responses += [Response(f"w{i}", "memory", "B", False, 1000, 0, 4) for i in range(wrong)]
    return AssessmentResult(70, 100, 70, level, "", _scores({"memory": 70}), responses, "2026-01-01", 0)


def test_recommendations_skip_strong_areas_and_sort_by_priority():
    recs = training_recommendations(
        _scores({"memory": 90, "language": 72, "calculation": 40, "attention": 60, "executive": 85, "visuospatial": 54})
    )
    assert [r.category for r in recs] == ["calculation", "visuospatial", "attention", "language"]
    assert [r.priority for r in recs] == ["high", "high", "medium", "low"]
    assert recs[0].suggested_training == "Calculation game"
    assert recs[0].training_path == "/training/calculation"
    assert "40%" in recs[0].reason


def test_overall_advice():
    assert "strong" in overall_advice([])
    recs = training_recommendations(_scores({"memory": 30, "language": 65}))
    assert "Memory" in overall_advice(recs)


def test_rule_insights_include_behavior_flags():
    behavior = BehaviorData(response_time=[20_000, 18_000], hesitation_count=6, correction_count=4)
    out = heuristic_insights(_result(correct=1, wrong=3), behavior)
    assert out[0].startswith("Some areas need attention")
    assert any("hesitation" in s for s in out)
    assert any("changed frequently" in s for s in out)
    assert any("response time" in s for s in out)
    assert any("accuracy" in s for s in out)


def test_rule_insights_thresholds_are_strict():
    behavior = BehaviorData(response_time=[15_000], hesitation_count=5, correction_count=3)
    out = heuristic_insights(_result(level="excellent", correct=1, wrong=1), behavior)
    assert out == ["Overall cognitive function looks good."]


def test_generate_insights_without_llm_uses_rules():
    out = llm_bridge.generate_insights(_result(), cfg={})
    assert out["source"] == "rules"
    assert out["insights"]


def test_llm_failure_falls_back_to_rules(monkeypatch):
    def boom(result, behavior):
        raise RuntimeError("service unavailable")

    monkeypatch.setattr(llm_bridge, "_insights_azure", boom)
    out = llm_bridge.generate_insights(_result(), cfg={"USE_LLM_INSIGHTS": True, "LLM_BACKEND": "azure"})
    assert out["source"] == "rules"


def test_llm_insights_used_when_available(monkeypatch):
    monkeypatch.setattr(llm_bridge, "_insights_azure", lambda result, behavior: ["Nice work."])
    out = llm_bridge.generate_insights(_result(), cfg={"USE_LLM_INSIGHTS": True, "LLM_BACKEND": "azure"})
    assert out == {"source": "azure", "insights": ["Nice work."]}


def test_azure_settings_reports_missing_env(monkeypatch, tmp_path):
    for k in ("AZURE_OPENAI_ENDPOINT", "AZURE_OPENAI_API_KEY", "AZURE_OPENAI_API_VERSION", "AZURE_OPENAI_DEPLOYMENT"):
        monkeypatch.delenv(k, raising=False)
    with pytest.raises(RuntimeError, match="AZURE_OPENAI_ENDPOINT"):
        llm_bridge.azure_settings(str(tmp_path / "missing.json"))
