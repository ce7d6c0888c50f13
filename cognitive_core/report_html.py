from __future__ import annotations
from html import escape
from typing import Any, Dict, List

from .config import EXPORT_ENABLED
from .risk import risk_label

def _row(cs: Dict[str, Any]) -> str:
    avg_s = float(cs.get('averageResponseTime', 0) or 0) / 1000.0
    return (
        f"<tr><td>{escape(str(cs.get('name') or cs.get('category')))}</td>"
        f"<td>{cs.get('score', 0)} / {cs.get('maxScore', 0)}</td>"
        f"<td>{cs.get('percentage', 0)}%</td>"
        f"<td>{cs.get('questionsCorrect', 0)} / {cs.get('questionsTotal', 0)}</td>"
        f"<td>{avg_s:.1f}s</td></tr>"
    )

def _trend_rows(comparison: Dict[str, Any]) -> str:
    arrows = {"up": "▲", "down": "▼", "stable": "–"}
    rows = []
    for ch in comparison.get('categoryChanges') or []:
        arrow = arrows.get(ch.get('trend'), '')
        rows.append(f"<tr><td>{escape(str(ch.get('category')))}</td><td>{arrow} {int(ch.get('change', 0)):+d}</td></tr>")
    return "".join(rows)

def render_result_html(result: Dict[str, Any]) -> str:
    cats: List[Dict[str, Any]] = result.get("categoryScores") or []
    rows = "\n".join(_row(cs) for cs in cats)
    level = str(result.get("riskLevel") or "")
    meta = result.get("meta") or {}

    comparison = result.get("comparison") or None
    trend_section = ""
    if comparison:
        trend_section = (
            f"<h3>Since last assessment: {int(comparison.get('totalScoreChange', 0)):+d} points</h3>"
            "<table border='1' cellpadding='6' cellspacing='0'>"
            "<thead><tr><th>Category</th><th>Change</th></tr></thead>"
            f"<tbody>{_trend_rows(comparison)}</tbody></table>"
        )

    insights = (result.get("insights") or {}).get("insights") or []
    insight_html = ""
    if insights:
        insight_html = "<h3>Insights</h3><ul>" + "".join(f"<li>{escape(str(s))}</li>" for s in insights) + "</ul>"

    recs = result.get("recommendations") or []
    rec_html = ""
    if recs:
        items = [
            f"<li><b>{escape(str(r.get('name')))}</b> ({r.get('priority')}): {escape(str(r.get('reason')))}"
            f" <span>Try: {escape(str(r.get('suggestedTraining')))}</span></li>"
            for r in recs
        ]
        rec_html = "<h3>Recommended training</h3><ul>" + "".join(items) + "</ul>"

    export_links = ""
    rid = result.get("id") or meta.get("resultId")
    if EXPORT_ENABLED and rid:
        rid = escape(str(rid))
        export_links = (
            "<p class=\"export-links\">"
            f"<a href=\"/assessments/{rid}/responses.json\">Download responses (JSON)</a> · "
            f"<a href=\"/assessments/{rid}/responses.csv\">Download responses (CSV)</a>"
            "</p>"
        )

    minutes = int(result.get("duration", 0) or 0) / 60000.0
    return f"""<!doctype html>
<html lang="en">
<head>
<meta charset="utf-8"/>
<title>Cognitive Assessment Report</title>
<style>
 body{{font-family:system-ui,-apple-system,Segoe UI,Roboto,Ubuntu,'Helvetica Neue',Arial}}
 .wrap{{max-width:960px;margin:40px auto;padding:0 16px}}
 h1{{margin:0 0 16px}}
 .overall{{font-size:1.1rem;margin:8px 0 16px}}
 .banner{{padding:12px 16px;border-radius:6px;margin:16px 0;background:#eef3ff;border:1px solid #9db4ff}}
 table{{border-collapse:collapse;width:100%}}
 th,td{{text-align:left}}
</style>
</head>
<body>
<div class="wrap">
  <h1>Cognitive Assessment Report</h1>
  <div class="overall"><b>Total:</b> {result.get('totalScore', 0)} / {result.get('maxScore', 100)} ({result.get('percentage', 0)}%)</div>
  <div class="banner"><b>{escape(risk_label(level))}</b>: {escape(str(result.get('riskDescription') or ''))}</div>

  <table border='1' cellpadding='6' cellspacing='0'>
    <thead><tr><th>Category</th><th>Score</th><th>%</th><th>Correct</th><th>Avg time</th></tr></thead>
    <tbody>{rows}</tbody>
  </table>
  <p><b>Duration:</b> {minutes:.1f} min · <b>Completed:</b> {escape(str(result.get('completedAt') or ''))}</p>

  {trend_section}

  {insight_html}

  {rec_html}

  {export_links}
</div>
</body>
</html>"""

def export_result_html(result: Dict[str, Any], path: str) -> str:
    with open(path, "w", encoding="utf-8") as f:
        f.write(render_result_html(result))
    return path
