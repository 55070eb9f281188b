"""
Landing Preferences

Tracks how a visitor interacts with alternative landing page variants (views,
dwell time, ratings, comments, like/dislike) and rolls that history up into a
compact preference profile that can bias future page generation.

Usage:
    from landing_prefs import LandingPreferences

    prefs = LandingPreferences()
    prefs.record_page_view("aurora", "Aurora")
    prefs.record_feedback("aurora", {"liked": True, "styles": {"colorSchemes": "dark"}})
    prefs.get_summary()
"""

# Core store
from landing_prefs.store import PreferenceStore, StateSlot, FileSlot, MemorySlot
from landing_prefs.migration import migrate, decode_state

# Recording & aggregation
from landing_prefs.recorder import Recorder
from landing_prefs.aggregator import apply_style_weights, summarize
from landing_prefs.session import SessionTracker, ViewSession

# Public facade
from landing_prefs.engine import LandingPreferences, page_id_from_path

# Errors
from landing_prefs.errors import (
    PreferenceError,
    CorruptState,
    PersistenceUnavailable,
    InvalidInput,
)

# Schemas
from landing_prefs.schemas.state_schemas import (
    SCHEMA_VERSION,
    FeedbackInput,
    PreferenceState,
    Summary,
    ViewRecord,
)

__all__ = [
    # Core
    "PreferenceStore",
    "StateSlot",
    "FileSlot",
    "MemorySlot",
    "migrate",
    "decode_state",
    # Recording & aggregation
    "Recorder",
    "apply_style_weights",
    "summarize",
    "SessionTracker",
    "ViewSession",
    # Facade
    "LandingPreferences",
    "page_id_from_path",
    # Errors
    "PreferenceError",
    "CorruptState",
    "PersistenceUnavailable",
    "InvalidInput",
    # Schemas
    "SCHEMA_VERSION",
    "FeedbackInput",
    "PreferenceState",
    "Summary",
    "ViewRecord",
]
