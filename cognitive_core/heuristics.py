# cognitive_core/heuristics.py
from __future__ import annotations
from typing import List, Optional

from . import config
from .types import AssessmentResult, BehaviorData

_RISK_SENTENCES = {
    "excellent": "Overall cognitive function looks good.",
    "mild_caution": "Some areas need attention. Regular cognitive training is recommended.",
    "caution": "A decline in cognitive function was observed. A consultation with a medical professional is recommended.",
    "severe": "Significant difficulties were observed. Please seek professional advice as soon as possible.",
}


def heuristic_insights(result: AssessmentResult, behavior: Optional[BehaviorData] = None) -> List[str]:
    out: List[str] = [_RISK_SENTENCES.get(result.risk_level, _RISK_SENTENCES["severe"])]

    if behavior is not None:
        if behavior.hesitation_count > config.HESITATION_INSIGHT_MIN:
            out.append("Frequent hesitation was observed before answering.")
        if behavior.correction_count > config.CORRECTION_INSIGHT_MIN:
            out.append("Answers were changed frequently.")
        if behavior.response_time:
            avg = sum(behavior.response_time) / len(behavior.response_time)
            if avg > config.SLOW_RESPONSE_MS:
                out.append("Average response time was on the long side.")

    answered = len(result.responses)
    if answered:
        correct = sum(1 for r in result.responses if r.is_correct)
        if correct / answered * 100 < config.LOW_ACCURACY_PCT:
            out.append("Focused training is needed to improve accuracy.")
    return out
