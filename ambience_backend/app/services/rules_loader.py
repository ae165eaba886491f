# ambience_backend/app/services/rules_loader.py
from __future__ import annotations

import logging
from functools import lru_cache
from typing import Any, Dict, List

import yaml  # PyYAML

from ambience_backend.app.config.paths import get_rules_dir, resolve_rules_file

# -----------------------------------------------------------------------------
# Logger
# -----------------------------------------------------------------------------
log = logging.getLogger("ambience.rules_loader")
if not log.handlers:
    handler = logging.StreamHandler()
    log.addHandler(handler)
    log.setLevel(logging.INFO)

# -----------------------------------------------------------------------------
# Public loader API
# -----------------------------------------------------------------------------
@lru_cache(maxsize=32)
def load_yaml_rules(filename: str) -> Any:
    """
    Load a YAML rulebook from app/rules (or MOOD_RULES_DIR).
    Raises FileNotFoundError if missing, ValueError if the YAML is malformed.
    """
    path = resolve_rules_file(filename)
    if not path.exists():
        raise FileNotFoundError(f"Rules file not found: {path}")
    try:
        obj = yaml.safe_load(path.read_text(encoding="utf-8"))
    except yaml.YAMLError as e:
        raise ValueError(f"Invalid YAML in {path}: {e}") from e
    log.info(f"[rules] loaded {filename} from {path}")
    return obj

def has_rules_file(filename: str) -> bool:
    return resolve_rules_file(filename).exists()

def inventory() -> Dict[str, List[str]]:
    root = get_rules_dir()
    names = sorted(p.name for p in root.glob("*.yaml")) if root.exists() else []
    return {"rules": names}

def clear_cache() -> None:
    load_yaml_rules.cache_clear()

__all__ = ["load_yaml_rules", "has_rules_file", "inventory", "clear_cache"]
