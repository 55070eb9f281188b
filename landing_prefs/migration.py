"""
Schema migration for the persisted preference document.

Any previously stored JSON value is normalized into a current-version
PreferenceState:
- Raw event logs (views, feedback, notes, favorites, disliked) are kept
  element by element; malformed elements are dropped.
- Aggregates (the style preference vector) are only kept when the document is
  already at the current version. Older versions start from a zeroed vector.
- Retention bounds and the favorites/disliked exclusion are re-established.

migrate() never raises. Only decode_state() can fail, with CorruptState.
"""

import json
import logging
from datetime import datetime
from typing import Any, Callable, Dict, List, Optional, Type, TypeVar

from pydantic import BaseModel, TypeAdapter, ValidationError

from landing_prefs.errors import CorruptState
from landing_prefs.schemas.state_schemas import (
    MAX_USER_NOTES,
    MAX_VIEW_HISTORY,
    SCHEMA_VERSION,
    CommentEntry,
    Note,
    PageFeedback,
    PreferenceState,
    RatingEntry,
    ViewRecord,
    default_style_preferences,
    utcnow,
)

logger = logging.getLogger("landing_prefs.migration")

M = TypeVar("M", bound=BaseModel)

_DATETIME = TypeAdapter(datetime)


def decode_state(text: str) -> Any:
    """Parse persisted text into a JSON value."""
    try:
        return json.loads(text)
    except (TypeError, ValueError) as e:
        raise CorruptState(f"Persisted preference state is not valid JSON: {e}") from e


def schema_version_of(raw: Any) -> Optional[str]:
    """Return the version tag of a raw document (legacy documents use 'version')."""
    if not isinstance(raw, dict):
        return None
    version = raw.get("schemaVersion", raw.get("version"))
    return version if isinstance(version, str) else None


def is_current(raw: Any) -> bool:
    return schema_version_of(raw) == SCHEMA_VERSION


# =============================================================================
# Field parsers
# =============================================================================

def _timestamp(value: Any) -> Optional[datetime]:
    if value is None:
        return None
    try:
        return _DATETIME.validate_python(value)
    except ValidationError:
        return None


def _first_timestamp(raw: Dict[str, Any], *keys: str) -> Optional[datetime]:
    for key in keys:
        parsed = _timestamp(raw.get(key))
        if parsed is not None:
            return parsed
    return None


def _parse_items(values: Any, model: Type[M], prepare: Callable[[Any], Any] = None) -> List[M]:
    """Validate each element on its own, dropping the ones that don't fit."""
    if not isinstance(values, list):
        return []
    items: List[M] = []
    dropped = 0
    for value in values:
        if prepare is not None:
            value = prepare(value)
        try:
            items.append(model.model_validate(value))
        except ValidationError:
            dropped += 1
    if dropped:
        logger.debug(f"Dropped {dropped} malformed {model.__name__} entries during migration")
    return items


def _legacy_view(value: Any) -> Any:
    # v1 records used 'duration' and always set pageName == pageId
    if not isinstance(value, dict):
        return value
    value = dict(value)
    if "durationSeconds" not in value and "duration" in value:
        value["durationSeconds"] = value.pop("duration")
    if not value.get("pageName") and isinstance(value.get("pageId"), str):
        value["pageName"] = value["pageId"]
    return value


def _page_feedback(value: Any) -> Optional[PageFeedback]:
    if not isinstance(value, dict):
        return None
    return PageFeedback(
        ratings=_parse_items(value.get("ratings"), RatingEntry),
        comments=_parse_items(value.get("comments"), CommentEntry),
        last_updated=_timestamp(value.get("lastUpdated")),
    )


def _feedback_by_page(raw: Dict[str, Any]) -> Dict[str, PageFeedback]:
    values = raw.get("feedbackByPage", raw.get("pageFeedback"))
    if not isinstance(values, dict):
        return {}
    result: Dict[str, PageFeedback] = {}
    for page_id, value in values.items():
        if not isinstance(page_id, str) or not page_id:
            continue
        feedback = _page_feedback(value)
        if feedback is not None:
            result[page_id] = feedback
    return result


def _id_set(values: Any) -> List[str]:
    """Unique, non-empty string ids in first-seen order."""
    if not isinstance(values, list):
        return []
    seen: Dict[str, None] = {}
    for value in values:
        if isinstance(value, str) and value:
            seen.setdefault(value, None)
    return list(seen)


def _style_scores(values: Any) -> Dict[str, Dict[str, int]]:
    """Overlay stored integer scores onto the fixed category set."""
    scores = default_style_preferences()
    if not isinstance(values, dict):
        return scores
    for category, labels in scores.items():
        stored = values.get(category)
        if not isinstance(stored, dict):
            continue
        for label in labels:
            score = stored.get(label)
            if isinstance(score, int) and not isinstance(score, bool):
                labels[label] = score
    return scores


# =============================================================================
# Migration
# =============================================================================

def migrate(
    raw: Any,
    max_views: int = MAX_VIEW_HISTORY,
    max_notes: int = MAX_USER_NOTES,
) -> PreferenceState:
    """
    Produce a current-version PreferenceState from any persisted JSON value.

    Args:
        raw: Decoded JSON (or an existing PreferenceState)
        max_views: View history retention bound
        max_notes: User note retention bound

    Returns:
        A fully well-formed state. Never raises.
    """
    if isinstance(raw, BaseModel):
        raw = raw.model_dump(mode="json", by_alias=True)
    if not isinstance(raw, dict):
        logger.debug(f"Persisted preference state has unexpected type {type(raw).__name__}, using defaults")
        raw = {}

    version = schema_version_of(raw)
    current = version == SCHEMA_VERSION
    if raw and not current:
        logger.debug(f"Migrating preference state from version {version!r} to {SCHEMA_VERSION}")

    now = utcnow()
    created_at = _first_timestamp(raw, "createdAt", "created") or now
    updated_at = _first_timestamp(raw, "updatedAt", "updated") or now

    disliked = _id_set(raw.get("disliked"))
    favorites = [page_id for page_id in _id_set(raw.get("favorites")) if page_id not in disliked]

    view_history = _parse_items(raw.get("viewHistory"), ViewRecord, _legacy_view)
    user_notes = _parse_items(raw.get("userNotes"), Note)

    return PreferenceState(
        schema_version=SCHEMA_VERSION,
        created_at=created_at,
        updated_at=updated_at,
        view_history=view_history[-max_views:] if max_views > 0 else [],
        feedback_by_page=_feedback_by_page(raw),
        style_preferences=_style_scores(raw.get("stylePreferences")) if current else default_style_preferences(),
        user_notes=user_notes[-max_notes:] if max_notes > 0 else [],
        favorites=favorites,
        disliked=disliked,
    )
