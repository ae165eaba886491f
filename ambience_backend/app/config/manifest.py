# ambience_backend/app/config/manifest.py
from __future__ import annotations

import os
from typing import Dict, List, Optional

# ---- Host settings and environment mode ----
APP_ENV: str = os.getenv("APP_ENV", "development")
DEBUG_MODE: bool = os.getenv("DEBUG", "0") not in ("", "0", "false", "False")

def _env_int(name: str, default: int) -> int:
    raw = (os.getenv(name) or "").strip()
    return int(raw) if raw.lstrip("-").isdigit() else default

def _env_float(name: str, default: float) -> float:
    raw = (os.getenv(name) or "").strip()
    try:
        return float(raw) if raw else default
    except ValueError:
        return default

def _env_flag(name: str, default: bool) -> bool:
    raw = (os.getenv(name) or "").strip()
    if not raw:
        return default
    return raw not in ("0", "false", "False", "no")

def _env_seed() -> Optional[int]:
    raw = (os.getenv("AMBIENCE_SEED") or "").strip()
    return int(raw) if raw.lstrip("-").isdigit() else None

def engine_config_from_env():
    """
    Build an EngineConfig from AMBIENCE_* env vars. Only the host app calls
    this; the engine itself never reads the environment.
    """
    from ambience_backend.app.services.engine import EngineConfig

    return EngineConfig.build(
        history_cap=max(1, _env_int("AMBIENCE_HISTORY_CAP", 1000)),
        pattern_cap=max(1, _env_int("AMBIENCE_PATTERN_CAP", 50)),
        ab_sample_threshold=max(2, _env_int("AMBIENCE_AB_SAMPLES", 50)),
        similarity_threshold=_env_float("AMBIENCE_SIMILARITY_THRESHOLD", 0.7),
        seed=_env_seed(),
    )

def seed_patterns_enabled() -> bool:
    return _env_flag("AMBIENCE_SEED_PATTERNS", True)

# ---- Rulebook manifest ----
RULES_REQUIRED: List[str] = [
    "temporal_policy.yaml",
    "show_control.yaml",
]

RULES_OPTIONAL: List[str] = [
    "seed_patterns.yaml",
]

def validate_manifest() -> Dict[str, object]:
    from ambience_backend.app.services.rules_loader import has_rules_file, inventory

    inv = inventory()
    missing_required = [n for n in RULES_REQUIRED if not has_rules_file(n)]
    missing_optional = [n for n in RULES_OPTIONAL if not has_rules_file(n)]
    status = "ok" if not missing_required else "missing_required"
    return {
        "status": status,
        "inventory": inv,
        "required": RULES_REQUIRED,
        "optional": RULES_OPTIONAL,
        "missing_required": missing_required,
        "missing_optional": missing_optional,
    }


__all__ = [
    "APP_ENV", "DEBUG_MODE", "RULES_REQUIRED", "RULES_OPTIONAL",
    "engine_config_from_env", "seed_patterns_enabled", "validate_manifest",
]
