"""
Session tracking for view dwell time.

Each recorded view arms a one-shot ViewSession. When the host signals that
the page was left (visibility change, unload, shutdown), the session measures
how long it was open and reports the duration once. After firing or being
cancelled a session is inert.
"""

import logging
import math
import threading
import time
from typing import Any, Callable, Optional

from landing_prefs.schemas.state_schemas import ViewRecord

logger = logging.getLogger("landing_prefs.session")

Clock = Callable[[], float]
DurationCallback = Callable[[int, ViewRecord], Any]


class ViewSession:
    """One-shot observer bound to a single view record."""

    def __init__(self, view: ViewRecord, on_end: DurationCallback, clock: Clock = time.monotonic):
        self.view = view
        self._on_end = on_end
        self._clock = clock
        self.started_at = clock()
        self._done = False
        self._lock = threading.Lock()

    @property
    def active(self) -> bool:
        return not self._done

    def _claim(self) -> bool:
        with self._lock:
            if self._done:
                return False
            self._done = True
            return True

    def end(self) -> Optional[int]:
        """Fire the session. Returns the measured seconds, or None if already inert."""
        if not self._claim():
            return None
        elapsed = max(0.0, self._clock() - self.started_at)
        duration = int(math.floor(elapsed + 0.5))
        self._on_end(duration, self.view)
        return duration

    def cancel(self) -> bool:
        """Disarm without reporting. Returns False if already inert."""
        return self._claim()


class SessionTracker:
    """Holds the currently armed view session."""

    def __init__(self, on_end: DurationCallback, clock: Clock = time.monotonic):
        self._on_end = on_end
        self._clock = clock
        self._active: Optional[ViewSession] = None

    @property
    def active(self) -> Optional[ViewSession]:
        if self._active is not None and not self._active.active:
            self._active = None
        return self._active

    def arm(self, view: ViewRecord) -> ViewSession:
        """Start measuring a freshly recorded view."""
        previous = self.active
        if previous is not None:
            previous.cancel()
        self._active = ViewSession(view, self._on_end, self._clock)
        logger.debug(f"Armed view session for {view.page_id}")
        return self._active

    def end_active(self) -> Optional[int]:
        """Fire the armed session, if any."""
        session, self._active = self._active, None
        if session is None:
            return None
        return session.end()

    def cancel_active(self) -> bool:
        session, self._active = self._active, None
        return session.cancel() if session is not None else False
