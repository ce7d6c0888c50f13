"""Optional LLM-written insight sentences for a finished assessment.

Only the Azure OpenAI backend is wired; every failure falls back to the
rule-based sentences from `heuristics`.
"""
from __future__ import annotations

import json
import logging
import os
import pathlib
from dataclasses import dataclass
from typing import Dict, List, Optional

from openai import AzureOpenAI

from .config import get_backend, load_config
from .heuristics import heuristic_insights
from .types import AssessmentResult, BehaviorData

log = logging.getLogger(__name__)

_AZURE_KEYS = {
    "endpoint": "AZURE_OPENAI_ENDPOINT",
    "api_key": "AZURE_OPENAI_API_KEY",
    "api_version": "AZURE_OPENAI_API_VERSION",
    "deployment": "AZURE_OPENAI_DEPLOYMENT",
}


@dataclass(frozen=True)
class AzureSettings:
    endpoint: str
    api_key: str
    deployment: str
    api_version: str


def azure_settings(path: str = ".azure_config.json") -> AzureSettings:
    values = {name: os.getenv(env, "") for name, env in _AZURE_KEYS.items()}
    p = pathlib.Path(path)
    if not all(values.values()) and p.exists():
        try:
            stored = json.loads(p.read_text(encoding="utf-8"))
        except (OSError, ValueError):
            stored = {}
        for name in values:
            if not values[name]:
                values[name] = str(stored.get(name, ""))
    missing = [_AZURE_KEYS[k] for k, v in values.items() if not v]
    if missing:
        raise RuntimeError(f"Azure OpenAI not configured. Missing: {', '.join(missing)}")
    return AzureSettings(**values)


def azure_client(s: AzureSettings) -> AzureOpenAI:
    return AzureOpenAI(azure_endpoint=s.endpoint, api_key=s.api_key, api_version=s.api_version)


def _prompt(result: AssessmentResult, behavior: Optional[BehaviorData]) -> str:
    scores = ", ".join(f"{cs.category} {cs.percentage}%" for cs in result.category_scores)
    lines = [
        f"Overall: {result.percentage}% ({result.risk_level}).",
        f"Categories: {scores}.",
    ]
    if behavior is not None:
        lines.append(
            f"Hesitations: {behavior.hesitation_count}, corrections: {behavior.correction_count}, "
            f"answers timed: {len(behavior.response_time)}."
        )
    return "\n".join(lines)


def _insights_azure(result: AssessmentResult, behavior: Optional[BehaviorData]) -> List[str]:
    s = azure_settings()
    cli = azure_client(s)
    system = (
        "You write short, supportive feedback for a cognitive screening result. "
        "Return ONLY a JSON object {\"insights\": [str, ...]} with 2-4 sentences. "
        "Never give a diagnosis."
    )
    resp = cli.chat.completions.create(
        model=s.deployment,
        messages=[{"role": "system", "content": system}, {"role": "user", "content": _prompt(result, behavior)}],
        temperature=0.2,
        max_tokens=300,
    )
    raw = json.loads(resp.choices[0].message.content or "{}")
    out = [str(x).strip() for x in raw.get("insights", []) if str(x).strip()]
    if not out:
        raise ValueError("empty insights from LLM")
    return out


def generate_insights(
    result: AssessmentResult,
    behavior: Optional[BehaviorData] = None,
    cfg: Optional[Dict[str, object]] = None,
) -> Dict[str, object]:
    backend = get_backend(cfg if cfg is not None else load_config())
    if backend == "azure":
        try:
            return {"source": "azure", "insights": _insights_azure(result, behavior)}
        except Exception as e:
            log.warning("LLM insights failed, using rules: %s", e)
    return {"source": "rules", "insights": heuristic_insights(result, behavior)}
