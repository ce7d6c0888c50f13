# cognitive_core/behavior.py
from __future__ import annotations
from collections import Counter
from statistics import mean, pvariance
from typing import Any, Dict, List, Sequence

from .scoring import round_half_up
from .types import BehaviorData, EmotionSample


def emotion_distribution(timeline: Sequence[EmotionSample]) -> List[Dict[str, Any]]:
    if not timeline:
        return []
    counts = Counter(sample.emotion for sample in timeline)
    total = len(timeline)
    rows = [
        {"emotion": emotion, "count": n, "percentage": round_half_up(n / total * 100)}
        for emotion, n in counts.items()
    ]
    rows.sort(key=lambda r: r["count"], reverse=True)
    return rows


def dominant_emotion(timeline: Sequence[EmotionSample]) -> str:
    dist = emotion_distribution(timeline)
    return dist[0]["emotion"] if dist else "neutral"


def summarize_behavior(data: BehaviorData) -> Dict[str, Any]:
    """Aggregate side-channel signals; nothing here feeds scoring."""
    times = [int(t) for t in data.response_time]
    return {
        "responseTime": times,
        "avgResponseTime": round_half_up(mean(times)) if times else 0,
        "responseTimeVariance": round_half_up(pvariance(times)) if times else 0,
        "maxResponseTime": max(times) if times else 0,
        "minResponseTime": min(times) if times else 0,
        "hesitationCount": data.hesitation_count,
        "correctionCount": data.correction_count,
        "emotionTimeline": [e.to_dict() for e in data.emotion_timeline],
        "emotionDistribution": emotion_distribution(data.emotion_timeline),
        "dominantEmotion": dominant_emotion(data.emotion_timeline),
    }
