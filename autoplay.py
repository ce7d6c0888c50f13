# autoplay.py
from __future__ import annotations
import argparse, os, random, datetime
from typing import Optional
from cognitive_core.config import load_config, seed_rng
from cognitive_core.engine import AssessmentSession
from cognitive_core.insights import training_recommendations
from cognitive_core.llm_bridge import generate_insights
from cognitive_core.question_bank import create_assessment_set, shuffle_questions
from cognitive_core.report_html import export_result_html
from cognitive_core.types import Question, RawAnswer

PROFILES = ("perfect", "mixed", "struggling")

# fraction of the time limit used per answer
_PACE = {"perfect": 0.3, "mixed": 0.7, "struggling": 1.2}
_EMOTION = {"perfect": "happy", "mixed": "neutral", "struggling": "confused"}


def _correct_for(q: Question) -> RawAnswer:
    return q.correct_answer.to_raw()


def _wrong_for(q: Question) -> RawAnswer:
    if q.options:
        keys = set(q.correct_answer.values)
        for opt in q.options:
            if opt not in keys:
                return [opt] if q.multi_select else opt
    return "pass"


def _knows(q: Question, idx: int, profile: str) -> bool:
    if profile == "perfect": return True
    if profile == "mixed": return idx % 2 == 0 or q.difficulty == 1
    return idx % 3 == 0 and q.difficulty == 1


def run(profile: str, seed: Optional[int], shuffle: bool = False, subject: Optional[str] = None) -> str:
    cfg = load_config()
    if seed is not None: cfg["SEED"] = seed
    seed_rng(cfg)
    items = create_assessment_set()
    if shuffle: items = shuffle_questions(items)

    clock = {"now": 0.0}
    sess = AssessmentSession(clock=lambda: clock["now"])
    q = sess.start(items)
    idx = 0
    while q is not None:
        rt = q.time_limit_ms * _PACE[profile]
        if profile == "struggling" and random.random() < 0.5: sess.record_hesitation()
        if profile != "perfect" and random.random() < 0.2: sess.record_correction()
        sess.record_emotion(_EMOTION[profile], round(random.uniform(0.6, 0.95), 2), timestamp=clock["now"])
        clock["now"] += rt
        sess.submit_response(_correct_for(q) if _knows(q, idx, profile) else _wrong_for(q), response_time_ms=rt)
        q = sess.advance(); idx += 1
    if idx <= 0: raise RuntimeError("Driver answered 0 questions.")

    res = sess.result
    d = res.to_dict()
    d["insights"] = generate_insights(res, sess.behavior, cfg)
    d["recommendations"] = [r.to_dict() for r in training_recommendations(res.category_scores)]
    if subject:
        from api.storage import ResultStore
        d["id"] = sess.save(ResultStore(), subject)

    ts = datetime.datetime.now().strftime("%Y%m%d_%H%M%S")
    os.makedirs("reports", exist_ok=True)
    path = os.path.join("reports", f"auto_{profile}_{ts}.html")
    export_result_html(d, path)
    print(f"{profile}: {res.total_score}/{res.max_score} ({res.percentage}%) {res.risk_level}")
    print(f"Report: {path}")
    return path


def main(argv=None):
    ap = argparse.ArgumentParser()
    ap.add_argument("--profile", choices=PROFILES, default="perfect")
    ap.add_argument("--seed", type=int, default=1337)
    ap.add_argument("--shuffle", action="store_true")
    ap.add_argument("--subject", default=None)
    ap.add_argument("--llm", choices=["none", "azure"], default="none")
    a = ap.parse_args(argv)
    if a.llm != "none":
        os.environ["USE_LLM_INSIGHTS"] = "1"; os.environ["LLM_BACKEND"] = a.llm
    run(a.profile, a.seed, shuffle=a.shuffle, subject=a.subject)


if __name__ == "__main__":
    main()
