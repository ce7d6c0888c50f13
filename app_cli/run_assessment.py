from __future__ import annotations
import argparse, datetime, logging, os, time
from cognitive_core.engine import AssessmentSession
from cognitive_core.insights import training_recommendations
from cognitive_core.llm_bridge import generate_insights
from cognitive_core.question_bank import create_assessment_set
from cognitive_core.report_html import export_result_html


def ask(prompt: str, options=None, multi: bool = False):
    if not options:
        return input(prompt + " ").strip()
    print(prompt)
    for i, opt in enumerate(options): print(f"  [{i}] {opt}")
    hint = "Your choices (indexes, comma separated): " if multi else "Your choice (index): "
    while True:
        raw = input(hint).strip()
        picks = [p.strip() for p in raw.split(",") if p.strip()]
        if picks and all(p.isdigit() and int(p) < len(options) for p in picks):
            chosen = [options[int(p)] for p in picks]
            return chosen if multi else chosen[0]
        print("Enter a valid option index.")


def _prompt_for(q) -> str:
    head = f"\n[{q.category} {q.difficulty}/3, {q.time_limit}s] {q.question}"
    if q.instruction: head += f"\n  {q.instruction}"
    if q.type == "sequence": head += "\n  (answer in order, comma separated)"
    return head


def main(argv=None):
    ap = argparse.ArgumentParser(description="Run the cognitive assessment in the terminal.")
    ap.add_argument("--subject", default=None, help="Store the result for this subject id")
    ap.add_argument("--verbose", action="store_true")
    a = ap.parse_args(argv)
    logging.basicConfig(level=logging.DEBUG if a.verbose else logging.WARNING)

    print("Cognitive Assessment")
    session = AssessmentSession()
    q = session.start(create_assessment_set())
    while q is not None:
        t0 = time.perf_counter()
        v = ask(_prompt_for(q), q.options, multi=q.multi_select or q.correct_answer.is_list)
        rt_ms = (time.perf_counter() - t0) * 1000.0
        r = session.submit_response(v, response_time_ms=rt_ms)
        print("  correct" if r.is_correct else "  incorrect")
        q = session.advance()

    res = session.complete()
    d = res.to_dict()
    d["insights"] = generate_insights(res, session.behavior)
    d["recommendations"] = [r.to_dict() for r in training_recommendations(res.category_scores)]
    if a.subject:
        from api.storage import ResultStore
        d["id"] = session.save(ResultStore(), a.subject)

    os.makedirs("reports", exist_ok=True)
    ts = datetime.datetime.now().strftime("%Y%m%d_%H%M%S")
    path = export_result_html(d, os.path.join("reports", f"assessment_{ts}.html"))
    print(f"\nScore {res.total_score}/{res.max_score} ({res.percentage}%), {res.risk_level}")
    print(f"Done. Report saved to: {path}")


if __name__ == "__main__": main()
