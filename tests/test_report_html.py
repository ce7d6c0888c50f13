from __future__ import annotations

from cognitive_core.report_html import export_result_html, render_result_html
from cognitive_core.scoring import calculate_assessment_result, score_response
from cognitive_core.types import Response


def _result_dict(bank):
    responses = [
        Response(q.id, q.category, "A", True, 3000, score_response(q, True, 3000), q.points) for q in bank
    ]
    d = calculate_assessment_result(responses, 0, 300_000).to_dict()
    d["id"] = "r-1"
    return d


def test_report_lists_categories_and_risk(synthetic_bank):
    html = render_result_html(_result_dict(synthetic_bank))
    assert "Executive Function" in html
    assert "100 / 100" in html
    assert "Excellent" in html
    assert "/assessments/r-1/responses.csv" in html


def test_report_escapes_text_and_shows_sections(synthetic_bank, tmp_path):
    d = _result_dict(synthetic_bank)
    d["insights"] = {"source": "rules", "insights": ["<b>steady</b>"]}
    d["comparison"] = {"totalScoreChange": 12, "categoryChanges": [{"category": "memory", "change": 4, "trend": "up"}]}
    d["recommendations"] = [
        {"name": "Memory", "priority": "high", "reason": "low", "suggestedTraining": "Memory game"}
    ]
    html = render_result_html(d)
    assert "&lt;b&gt;steady&lt;/b&gt;" in html
    assert "+12 points" in html
    assert "Recommended training" in html

    path = export_result_html(d, str(tmp_path / "report.html"))
    assert (tmp_path / "report.html").read_text(encoding="utf-8") == html
    assert path.endswith("report.html")
