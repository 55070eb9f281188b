"""
Recorder - appends visitor signals to the persisted preference state.

Every operation is a single read-modify-write through the PreferenceStore:
load, mutate the returned object, save once. Logs are bounded: the view
history and the user notes drop their oldest entries past capacity.

Malformed calls are logged and ignored; they never raise to the caller.
"""

import logging
import time
from typing import Any, Dict, Mapping, Optional, Union

from pydantic import ValidationError

from landing_prefs.aggregator import apply_style_weights, style_weight
from landing_prefs.errors import InvalidInput
from landing_prefs.schemas.state_schemas import (
    MAX_USER_NOTES,
    MAX_VIEW_HISTORY,
    CommentEntry,
    FeedbackInput,
    Note,
    PageFeedback,
    PreferenceState,
    RatingEntry,
    ViewRecord,
    utcnow,
)
from landing_prefs.session import Clock, SessionTracker
from landing_prefs.store import PreferenceStore

logger = logging.getLogger("landing_prefs.recorder")


def _require_page_id(page_id: Any) -> str:
    if not isinstance(page_id, str) or not page_id.strip():
        raise InvalidInput(f"page id must be a non-empty string, got {page_id!r}")
    return page_id


def _require_page_name(page_name: Any) -> Optional[str]:
    if page_name is not None and not isinstance(page_name, str):
        raise InvalidInput(f"page name must be a string, got {type(page_name).__name__}")
    return page_name


def _coerce_feedback(feedback: Union[FeedbackInput, Mapping[str, Any], None]) -> FeedbackInput:
    if isinstance(feedback, FeedbackInput):
        return feedback
    if not isinstance(feedback, Mapping):
        raise InvalidInput(f"feedback must be a mapping, got {type(feedback).__name__}")
    try:
        return FeedbackInput.model_validate(dict(feedback))
    except ValidationError as e:
        raise InvalidInput(f"malformed feedback: {e.errors()[0]['msg']}") from e


def mark_liked(state: PreferenceState, page_id: str, liked: bool) -> None:
    """Put page_id in exactly one of favorites / disliked."""
    target, other = (state.favorites, state.disliked) if liked else (state.disliked, state.favorites)
    if page_id not in target:
        target.append(page_id)
    if page_id in other:
        other[:] = [p for p in other if p != page_id]


class Recorder:
    """
    Appends views, feedback and notes under bounded-retention policies.

    Owns a SessionTracker so each recorded view can report its dwell time
    back through patch_last_view_duration().
    """

    def __init__(
        self,
        store: PreferenceStore,
        max_views: int = MAX_VIEW_HISTORY,
        max_notes: int = MAX_USER_NOTES,
        clock: Clock = time.monotonic,
    ):
        self.store = store
        self.max_views = max_views
        self.max_notes = max_notes
        self.tracker = SessionTracker(self.patch_last_view_duration, clock=clock)

    # =========================================================================
    # VIEWS
    # =========================================================================

    def record_view(self, page_id: str, page_name: Optional[str] = None) -> Optional[ViewRecord]:
        """
        Append a view record and arm its session-end observer.

        A session still armed from an earlier view is ended first: a new view
        means the previous page was left.
        """
        try:
            page_id = _require_page_id(page_id)
            page_name = _require_page_name(page_name)
        except InvalidInput as e:
            logger.warning(f"⚠️ Ignoring page view: {e}")
            return None

        self.tracker.end_active()

        state = self.store.load()
        record = ViewRecord(page_id=page_id, page_name=page_name or page_id)
        state.view_history.append(record)
        if len(state.view_history) > self.max_views:
            state.view_history = state.view_history[-self.max_views:]
        self.store.save(state)

        self.tracker.arm(record)
        return record

    def patch_last_view_duration(self, duration_seconds: int, view: Optional[ViewRecord] = None) -> bool:
        """
        Write the dwell time into the most recent view record.

        No-op when the history is empty (e.g. reset mid-session), when the last
        record was already patched, or when `view` is given and a newer record
        has been appended since.
        """
        if isinstance(duration_seconds, bool) or not isinstance(duration_seconds, (int, float)) or duration_seconds < 0:
            logger.warning(f"⚠️ Ignoring invalid view duration {duration_seconds!r}")
            return False

        state = self.store.load()
        if not state.view_history:
            logger.debug("No view to patch; history is empty")
            return False

        last = state.view_history[-1]
        if view is not None and not last.same_view(view):
            logger.debug(f"View {view.page_id} is no longer the latest record; duration dropped")
            return False
        if last.duration_seconds > 0:
            logger.debug(f"View {last.page_id} already has a duration")
            return False

        last.duration_seconds = int(round(duration_seconds))
        self.store.save(state)
        return True

    # =========================================================================
    # FEEDBACK
    # =========================================================================

    def record_feedback(self, page_id: str, feedback: Union[FeedbackInput, Mapping[str, Any]]) -> bool:
        """
        Apply a visitor reaction to a page in one read-modify-write.

        - rating: appended to the page's rating log
        - comment: appended when non-empty
        - liked: moves the page into favorites or disliked
        - styles: weighted into the style vector (+1 liked, -1 disliked,
          nothing when no verdict was given)
        """
        try:
            page_id = _require_page_id(page_id)
            signal = _coerce_feedback(feedback)
        except InvalidInput as e:
            logger.warning(f"⚠️ Ignoring feedback for {page_id!r}: {e}")
            return False

        state = self.store.load()
        now = utcnow()
        entry = state.feedback_by_page.setdefault(page_id, PageFeedback())

        if signal.rating is not None:
            entry.ratings.append(RatingEntry(value=signal.rating, timestamp=now))
        if signal.comment and signal.comment.strip():
            entry.comments.append(CommentEntry(text=signal.comment, timestamp=now))
        if signal.liked is not None:
            mark_liked(state, page_id, signal.liked)
        if signal.styles:
            apply_style_weights(state, signal.styles, style_weight(signal.liked))

        entry.last_updated = now
        self.store.save(state)
        return True

    # =========================================================================
    # NOTES
    # =========================================================================

    def add_note(self, text: str, context: Optional[Dict[str, Any]] = None) -> Optional[Note]:
        """Append a free-form note, keeping only the most recent ones."""
        if not isinstance(text, str) or not text.strip():
            logger.warning(f"⚠️ Ignoring note with empty text: {text!r}")
            return None
        if context is not None and not isinstance(context, Mapping):
            logger.warning(f"⚠️ Ignoring note with non-mapping context: {type(context).__name__}")
            return None

        state = self.store.load()
        note = Note(text=text, context=dict(context or {}))
        state.user_notes.append(note)
        if len(state.user_notes) > self.max_notes:
            state.user_notes = state.user_notes[-self.max_notes:]
        self.store.save(state)
        return note
