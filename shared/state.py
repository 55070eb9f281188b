# Shared State Module
# This module holds global state that is shared across all routers

from pathlib import Path

# Project root for path resolution in routers
PROJECT_ROOT = Path(__file__).parent.parent

# === Lazy-loaded dependencies ===
# These will be initialized when first accessed or during api.py lifespan

# Preference engine instance
_landing_preferences = None


def get_landing_preferences():
    """Get the LandingPreferences instance, creating it if needed."""
    global _landing_preferences
    if _landing_preferences is None:
        from landing_prefs.engine import LandingPreferences
        _landing_preferences = LandingPreferences()
    return _landing_preferences


def set_landing_preferences(instance) -> None:
    """Replace the shared instance (tests, alternative storage)."""
    global _landing_preferences
    _landing_preferences = instance
