# ambience_backend/app/config/__init__.py
from __future__ import annotations

# Re-export config surface expected by callers across the app.

# Host settings live in manifest.py
from .manifest import (
    APP_ENV,
    DEBUG_MODE,
    engine_config_from_env,
    seed_patterns_enabled,
    validate_manifest,
)

# Path helpers live in paths.py
from .paths import (
    REPO_ROOT,
    APP_ROOT,
    get_data_dir,
    get_rules_dir,
    resolve_rules_file,
    resolve_data_file,
    path_under_data,
    ensure_data_dir_exists,
)

__all__ = [
    # manifest
    "APP_ENV",
    "DEBUG_MODE",
    "engine_config_from_env",
    "seed_patterns_enabled",
    "validate_manifest",
    # paths
    "REPO_ROOT",
    "APP_ROOT",
    "get_data_dir",
    "get_rules_dir",
    "resolve_rules_file",
    "resolve_data_file",
    "path_under_data",
    "ensure_data_dir_exists",
]
