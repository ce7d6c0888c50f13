# cognitive_core/risk.py
from __future__ import annotations
from typing import Dict

from .config import RISK_CAUTION_MIN, RISK_EXCELLENT_MIN, RISK_MILD_CAUTION_MIN

RISK_LEVELS: Dict[str, Dict[str, object]] = {
    "excellent": {
        "label": "Excellent",
        "description": "Cognitive function is currently in excellent shape. Keep up your healthy habits.",
        "color": "success",
        "min_score": RISK_EXCELLENT_MIN,
        "max_score": 100,
    },
    "mild_caution": {
        "label": "Mild caution",
        "description": "Some areas need attention. Regular cognitive training is recommended.",
        "color": "warning",
        "min_score": RISK_MILD_CAUTION_MIN,
        "max_score": RISK_EXCELLENT_MIN - 1,
    },
    "caution": {
        "label": "Caution",
        "description": "A decline in cognitive function was observed. A consultation with a medical professional is recommended.",
        "color": "caution",
        "min_score": RISK_CAUTION_MIN,
        "max_score": RISK_MILD_CAUTION_MIN - 1,
    },
    "severe": {
        "label": "Severe",
        "description": "Cognitive function shows a significant decline. Please consult a medical professional as soon as possible.",
        "color": "danger",
        "min_score": 0,
        "max_score": RISK_CAUTION_MIN - 1,
    },
}


def classify_risk(percentage: float) -> str:
    p = float(percentage)
    if p >= RISK_EXCELLENT_MIN: return "excellent"
    if p >= RISK_MILD_CAUTION_MIN: return "mild_caution"
    if p >= RISK_CAUTION_MIN: return "caution"
    return "severe"


def risk_info(level: str) -> Dict[str, object]:
    return RISK_LEVELS[level]


def risk_label(level: str) -> str:
    return str(RISK_LEVELS.get(level, {}).get("label", level))
