"""
Pydantic Schemas for Landing Page Preferences

Defines the data models for:
- PreferenceState (the single persisted document)
- View history, page feedback and user notes
- FeedbackInput (what the host UI sends when a visitor reacts to a page)
- Summary (the derived, read-only preference report)

The persisted document uses camelCase keys; Python code uses snake_case
attribute names. Dump with ``by_alias=True`` to get the on-disk shape.
"""

import math
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic.alias_generators import to_camel


SCHEMA_VERSION = "2.0"
LEGACY_SCHEMA_VERSION = "1.0.0"

MAX_VIEW_HISTORY = 100
MAX_USER_NOTES = 50

# Fixed category set of the current schema. Order matters: the first label
# of a category wins a tie in the summary.
STYLE_CATEGORIES: Dict[str, List[str]] = {
    "colorSchemes": ["dark", "light", "gradient"],
    "layouts": ["minimal", "feature_rich", "photo_forward"],
    "animations": ["subtle", "dynamic", "none"],
    "typography": ["bold", "elegant", "modern"],
}


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


def default_style_preferences() -> Dict[str, Dict[str, int]]:
    """Zeroed preference vector for every known category."""
    return {category: {label: 0 for label in labels} for category, labels in STYLE_CATEGORIES.items()}


class CamelModel(BaseModel):
    """Base model that reads and writes camelCase keys."""
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


# =============================================================================
# Event Logs
# =============================================================================

class ViewRecord(CamelModel):
    """One logged visit to a tracked page variant."""
    page_id: str = Field(min_length=1)
    page_name: str = ""
    timestamp: datetime = Field(default_factory=utcnow)
    duration_seconds: int = Field(default=0, ge=0)

    def same_view(self, other: "ViewRecord") -> bool:
        return self.page_id == other.page_id and self.timestamp == other.timestamp


class RatingEntry(CamelModel):
    value: float
    timestamp: datetime = Field(default_factory=utcnow)


class CommentEntry(CamelModel):
    text: str
    timestamp: datetime = Field(default_factory=utcnow)


class PageFeedback(CamelModel):
    """Append-only feedback log for one page."""
    ratings: List[RatingEntry] = Field(default_factory=list)
    comments: List[CommentEntry] = Field(default_factory=list)
    last_updated: Optional[datetime] = None


class Note(CamelModel):
    """Free-form note left by the visitor."""
    text: str
    context: Dict[str, Any] = Field(default_factory=dict)
    timestamp: datetime = Field(default_factory=utcnow)


# =============================================================================
# Aggregate Root
# =============================================================================

class PreferenceState(CamelModel):
    """Complete persisted preference document."""
    schema_version: str = SCHEMA_VERSION
    created_at: datetime = Field(default_factory=utcnow)
    updated_at: datetime = Field(default_factory=utcnow)
    view_history: List[ViewRecord] = Field(default_factory=list)
    feedback_by_page: Dict[str, PageFeedback] = Field(default_factory=dict)
    style_preferences: Dict[str, Dict[str, int]] = Field(default_factory=default_style_preferences)
    user_notes: List[Note] = Field(default_factory=list)
    favorites: List[str] = Field(default_factory=list)
    disliked: List[str] = Field(default_factory=list)

    def to_document(self) -> Dict[str, Any]:
        """Return the state in its persisted JSON shape."""
        return self.model_dump(mode="json", by_alias=True)


# =============================================================================
# Inputs
# =============================================================================

class FeedbackInput(CamelModel):
    """A visitor reaction to a page, as sent by the host UI."""
    rating: Optional[float] = None
    comment: Optional[str] = None
    liked: Optional[bool] = Field(default=None, strict=True)
    styles: Optional[Dict[str, Any]] = None

    @field_validator("rating", mode="before")
    @classmethod
    def _finite_rating(cls, value: Any) -> Any:
        if isinstance(value, bool):
            raise ValueError("rating must be a number, not a boolean")
        if isinstance(value, float) and not math.isfinite(value):
            raise ValueError("rating must be finite")
        return value


# =============================================================================
# Summary
# =============================================================================

class PageViewCount(CamelModel):
    page_id: str
    views: int


class PageDuration(CamelModel):
    page_id: str
    avg_duration: float


class Summary(CamelModel):
    """Derived preference report. Never persisted."""
    total_views: int = 0
    most_viewed: List[PageViewCount] = Field(default_factory=list)
    longest_viewed: List[PageDuration] = Field(default_factory=list)
    top_style_preferences: Dict[str, str] = Field(default_factory=dict)
    recent_notes: List[str] = Field(default_factory=list)
    favorites: List[str] = Field(default_factory=list)
    disliked: List[str] = Field(default_factory=list)
    average_ratings: Dict[str, float] = Field(default_factory=dict)
    last_updated: Optional[datetime] = None
