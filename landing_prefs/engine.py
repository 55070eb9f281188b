"""
LandingPreferences - public entry point used by the host page / HTTP layer.

Wires the PreferenceStore, Recorder, Aggregator and SessionTracker together.
Preference tracking is best-effort telemetry: every public operation absorbs
its failures, logs them, and returns a neutral value instead of raising.
"""

import logging
import time
from typing import Any, Dict, Mapping, Optional

from config.settings_loader import (
    get_retention_limits,
    get_storage_path,
    get_summary_limits,
    get_tracking_rules,
    load_settings,
)
from landing_prefs.aggregator import summarize
from landing_prefs.recorder import Recorder
from landing_prefs.schemas.state_schemas import (
    Note,
    PreferenceState,
    Summary,
    ViewRecord,
)
from landing_prefs.session import Clock
from landing_prefs.store import FileSlot, PreferenceStore

logger = logging.getLogger("landing_prefs.engine")


def page_id_from_path(path: str, marker: str = "landing-pages/", excluded=("landing-showcase",)) -> Optional[str]:
    """
    Derive a page id from a location path, or None when the path is not a
    tracked landing page.

    Example: "/site/landing-pages/aurora.html" -> "aurora"
    """
    if not isinstance(path, str) or marker not in path:
        return None
    if any(fragment in path for fragment in excluded):
        return None
    name = path.split("/")[-1].removesuffix(".html")
    return name or None


class LandingPreferences:
    """
    Preference engine for landing page variants.

    Construct once per process/session and pass it where needed. Tests build
    it over a MemorySlot-backed store.
    """

    def __init__(
        self,
        store: Optional[PreferenceStore] = None,
        settings: Optional[Dict[str, Any]] = None,
        clock: Clock = time.monotonic,
    ):
        settings = settings if settings is not None else load_settings()
        max_views, max_notes = get_retention_limits(settings)
        self.top_n, self.recent_notes = get_summary_limits(settings)
        self.path_marker, self.excluded = get_tracking_rules(settings)

        self.store = store or PreferenceStore(FileSlot(get_storage_path(settings)), max_views, max_notes)
        self.recorder = Recorder(self.store, max_views=max_views, max_notes=max_notes, clock=clock)

    # =========================================================================
    # RECORDING
    # =========================================================================

    def record_page_view(self, page_id: str, page_name: Optional[str] = None) -> Optional[ViewRecord]:
        """Record a view and start measuring its dwell time."""
        try:
            return self.recorder.record_view(page_id, page_name)
        except Exception as e:
            logger.exception(f"❌ Failed to record page view for {page_id!r}: {e}")
            return None

    def end_view_session(self) -> Optional[int]:
        """Host signal that the current page was left. Returns the measured seconds."""
        try:
            return self.recorder.tracker.end_active()
        except Exception as e:
            logger.exception(f"❌ Failed to close view session: {e}")
            return None

    def record_feedback(self, page_id: str, feedback: Mapping[str, Any]) -> bool:
        try:
            return self.recorder.record_feedback(page_id, feedback)
        except Exception as e:
            logger.exception(f"❌ Failed to record feedback for {page_id!r}: {e}")
            return False

    def add_user_note(self, text: str, context: Optional[Dict[str, Any]] = None) -> Optional[Note]:
        try:
            return self.recorder.add_note(text, context)
        except Exception as e:
            logger.exception(f"❌ Failed to add user note: {e}")
            return None

    def track_location(self, path: str) -> Optional[str]:
        """
        Auto-instrumentation: record one view when `path` is a tracked
        landing page variant.

        Returns:
            The recorded page id, or None when the path is not tracked.
        """
        page_id = page_id_from_path(path, self.path_marker, self.excluded)
        if page_id is None:
            return None
        if self.record_page_view(page_id, page_id) is None:
            return None
        logger.info(f"📊 Landing page view recorded: {page_id}")
        return page_id

    # =========================================================================
    # READING
    # =========================================================================

    def get_summary(self) -> Summary:
        """Ranked preference report over the current state."""
        try:
            return summarize(self.store.load(), top_n=self.top_n, recent_notes=self.recent_notes)
        except Exception as e:
            logger.exception(f"❌ Failed to summarize preferences: {e}")
            return Summary()

    def export_state(self) -> str:
        """The persisted document as JSON text, e.g. for an AI prompt."""
        try:
            return self.store.export_state()
        except Exception as e:
            logger.exception(f"❌ Failed to export preferences: {e}")
            return PreferenceState().model_dump_json(indent=2, by_alias=True)

    def reset(self) -> None:
        """Forget everything. The next load starts from defaults."""
        try:
            self.store.reset()
        except Exception as e:
            logger.exception(f"❌ Failed to reset preferences: {e}")
