"""
Centralized Settings Loader

This module provides a single point of access for all runtime configuration.
All backend modules should import settings from here instead of defining their own.

Usage:
    from config.settings_loader import load_settings, get_retention_limits

    # Access settings
    max_views = load_settings()["retention"]["max_views"]

    # Pick up edits made on disk
    reload_settings()

Lookup order: $LANDING_PREFS_SETTINGS, config/settings.json, then the shipped
config/settings.defaults.json. Keys missing from an override file fall back
to the defaults.
"""

import json
import os
from pathlib import Path
from typing import Any, Dict, List, Optional, Tuple

# Paths
CONFIG_DIR = Path(__file__).parent
SETTINGS_FILE = CONFIG_DIR / "settings.json"
DEFAULTS_FILE = CONFIG_DIR / "settings.defaults.json"
SETTINGS_ENV = "LANDING_PREFS_SETTINGS"

# --- Settings Cache ---
_settings_cache = None


def _deep_merge(base: dict, update: dict) -> dict:
    for key, value in update.items():
        if key in base and isinstance(base[key], dict) and isinstance(value, dict):
            _deep_merge(base[key], value)
        else:
            base[key] = value
    return base


def _override_file() -> Optional[Path]:
    env_path = os.environ.get(SETTINGS_ENV)
    if env_path:
        return Path(env_path)
    if SETTINGS_FILE.exists():
        return SETTINGS_FILE
    return None


def load_settings() -> dict:
    """Load settings from file. Uses cache if already loaded."""
    global _settings_cache
    if _settings_cache is None:
        if not DEFAULTS_FILE.exists():
            raise FileNotFoundError(f"No settings files found in {CONFIG_DIR}")
        settings = json.loads(DEFAULTS_FILE.read_text(encoding="utf-8"))
        override = _override_file()
        if override is not None:
            _deep_merge(settings, json.loads(override.read_text(encoding="utf-8")))
        _settings_cache = settings
    return _settings_cache


def reload_settings() -> dict:
    """Force reload settings from disk (useful after external changes)."""
    global _settings_cache
    _settings_cache = None
    return load_settings()


# --- Convenience Accessors ---
# Each accepts an explicit settings dict; without one the cached settings are used.

def get_storage_path(settings: Optional[Dict[str, Any]] = None) -> Path:
    """Path of the persisted preference document. Relative paths are resolved from the project root."""
    path = Path((settings or load_settings())["storage"]["path"])
    if not path.is_absolute():
        path = CONFIG_DIR.parent / path
    return path


def get_retention_limits(settings: Optional[Dict[str, Any]] = None) -> Tuple[int, int]:
    """(max_views, max_notes)"""
    retention = (settings or load_settings())["retention"]
    return int(retention["max_views"]), int(retention["max_notes"])


def get_summary_limits(settings: Optional[Dict[str, Any]] = None) -> Tuple[int, int]:
    """(top_n, recent_notes)"""
    summary = (settings or load_settings())["summary"]
    return int(summary["top_n"]), int(summary["recent_notes"])


def get_tracking_rules(settings: Optional[Dict[str, Any]] = None) -> Tuple[str, List[str]]:
    """(path_marker, excluded path fragments) for auto-instrumentation."""
    tracking = (settings or load_settings())["tracking"]
    return tracking["path_marker"], list(tracking.get("excluded", []))


def get_log_level(settings: Optional[Dict[str, Any]] = None) -> str:
    return str((settings or load_settings())["logging"]["level"]).upper()
