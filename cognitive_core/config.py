from __future__ import annotations
import os, json, pathlib, random
from typing import Callable, TypeVar

T = TypeVar("T")

_TRUTHY = {"1", "true", "yes", "on"}


def _env(name: str, default: T, cast: Callable[[str], T]) -> T:
    """Typed env override; unset, blank or unparsable values keep `default`."""
    raw = (os.getenv(name) or "").strip()
    if not raw:
        return default
    if cast is bool:
        return raw.lower() in _TRUTHY  # type: ignore[return-value]
    try:
        return cast(raw)
    except ValueError:
        return default


CATEGORY_ORDER: tuple[str, ...] = (
    "memory",
    "language",
    "calculation",
    "attention",
    "executive",
    "visuospatial",
)
QUESTION_TYPES: tuple[str, ...] = (
    "multiple_choice",
    "text_input",
    "sequence",
    "pattern_match",
    "reaction",
    "recall",
)

TOTAL_MAX_SCORE: int = 100

SPEED_BONUS_RATIO: float = 0.5
SPEED_BONUS_MULTIPLIER: float = 1.1
LATE_PENALTY_MULTIPLIER: float = 0.5

# risk bands, lower bound inclusive; not env-overridable
RISK_EXCELLENT_MIN: int = 80
RISK_MILD_CAUTION_MIN: int = 60
RISK_CAUTION_MIN: int = 50

WEAK_AREA_PCT: int = 70
STRONG_AREA_PCT: int = 85
HIGH_PRIORITY_PCT: int = 55

HISTORY_LIMIT: int = 10
TREND_LIMIT: int = 10

HESITATION_INSIGHT_MIN: int = 5
CORRECTION_INSIGHT_MIN: int = 3
SLOW_RESPONSE_MS: int = 15000
LOW_ACCURACY_PCT: int = 50

EXPORT_ENABLED: bool = True

DEBUG_TRACE: bool = False
TRACE_FIELDS: tuple[str, ...] = (
    "question_id",
    "category",
    "type",
    "is_correct",
    "response_time",
    "points",
    "max_points",
)

# env overrides for staging/ops
SPEED_BONUS_RATIO = _env("SPEED_BONUS_RATIO", SPEED_BONUS_RATIO, float)
SPEED_BONUS_MULTIPLIER = _env("SPEED_BONUS_MULTIPLIER", SPEED_BONUS_MULTIPLIER, float)
LATE_PENALTY_MULTIPLIER = _env("LATE_PENALTY_MULTIPLIER", LATE_PENALTY_MULTIPLIER, float)
HISTORY_LIMIT = _env("HISTORY_LIMIT", HISTORY_LIMIT, int)
TREND_LIMIT = _env("TREND_LIMIT", TREND_LIMIT, int)
EXPORT_ENABLED = _env("EXPORT_ENABLED", EXPORT_ENABLED, bool)
DEBUG_TRACE = _env("DEBUG_TRACE", DEBUG_TRACE, bool)

_LLM_ENV_KEYS = (
    "LLM_BACKEND",
    "AZURE_OPENAI_ENDPOINT",
    "AZURE_OPENAI_API_VERSION",
    "AZURE_OPENAI_API_KEY",
    "AZURE_OPENAI_DEPLOYMENT",
)


def load_config(path: str = "config.json") -> dict:
    """Optional `config.json` in the working directory, overlaid by env."""
    cfg: dict = {}
    p = pathlib.Path(path)
    if p.exists():
        try:
            cfg = json.loads(p.read_text(encoding="utf-8"))
        except (OSError, ValueError):
            cfg = {}
    if os.getenv("USE_LLM_INSIGHTS"):
        cfg["USE_LLM_INSIGHTS"] = _env("USE_LLM_INSIGHTS", False, bool)
    cfg.update({k: os.environ[k] for k in _LLM_ENV_KEYS if os.getenv(k)})
    seed = _env("SEED", None, int)
    if seed is not None:
        cfg["SEED"] = seed
    return cfg


def get_backend(cfg: dict) -> str | None:
    if not cfg.get("USE_LLM_INSIGHTS"):
        return None
    return "azure" if str(cfg.get("LLM_BACKEND") or "").strip().lower() == "azure" else None


def seed_rng(cfg: dict) -> None:
    if cfg.get("SEED") is not None:
        random.seed(int(cfg["SEED"]))
