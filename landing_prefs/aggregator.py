"""
Aggregator - folds feedback into the style preference vector and builds the
ranked preference summary.
"""

import logging
from typing import Any, Dict, List, Mapping, Optional

from landing_prefs.schemas.state_schemas import (
    PageDuration,
    PageViewCount,
    PreferenceState,
    Summary,
)

logger = logging.getLogger("landing_prefs.aggregator")

TOP_N = 5
RECENT_NOTES = 5


def style_weight(liked: Optional[bool]) -> int:
    """+1 for a like, -1 for a dislike, 0 when the visitor gave no verdict."""
    if liked is None:
        return 0
    return 1 if liked else -1


def apply_style_weights(state: PreferenceState, styles: Mapping[str, Any], weight: int) -> int:
    """
    Add weight to the score of every known (category, label) pair.

    Unknown categories and labels (including non-string labels) are skipped,
    never registered.

    Returns:
        Number of scores that changed.
    """
    if not weight:
        return 0

    applied = 0
    for category, label in styles.items():
        scores = state.style_preferences.get(category)
        if scores is None or not isinstance(label, str) or label not in scores:
            logger.debug(f"Ignoring unknown style {category}={label}")
            continue
        scores[label] += weight
        applied += 1
    return applied


def _ranked(values: Dict[str, float], first_seen: Dict[str, int], limit: int) -> List[str]:
    ordered = sorted(values, key=lambda page_id: (-values[page_id], first_seen[page_id]))
    return ordered[:limit]


def summarize(state: PreferenceState, top_n: int = TOP_N, recent_notes: int = RECENT_NOTES) -> Summary:
    """
    Build the preference report for a state. Pure: never mutates or saves.

    Rankings break ties by the position at which a page first appears in the
    view history.
    """
    counts: Dict[str, int] = {}
    first_seen: Dict[str, int] = {}
    duration_totals: Dict[str, int] = {}
    duration_counts: Dict[str, int] = {}

    for index, view in enumerate(state.view_history):
        first_seen.setdefault(view.page_id, index)
        counts[view.page_id] = counts.get(view.page_id, 0) + 1
        # unpatched records have no measured duration yet
        if view.duration_seconds > 0:
            duration_totals[view.page_id] = duration_totals.get(view.page_id, 0) + view.duration_seconds
            duration_counts[view.page_id] = duration_counts.get(view.page_id, 0) + 1

    averages = {page_id: duration_totals[page_id] / duration_counts[page_id] for page_id in duration_totals}

    top_styles: Dict[str, str] = {}
    for category, scores in state.style_preferences.items():
        if not scores:
            continue
        label, score = max(scores.items(), key=lambda item: item[1])
        if score > 0:
            top_styles[category] = label

    average_ratings = {
        page_id: sum(r.value for r in feedback.ratings) / len(feedback.ratings)
        for page_id, feedback in state.feedback_by_page.items()
        if feedback.ratings
    }

    notes = state.user_notes[-recent_notes:] if recent_notes > 0 else []

    return Summary(
        total_views=len(state.view_history),
        most_viewed=[
            PageViewCount(page_id=page_id, views=counts[page_id])
            for page_id in _ranked(counts, first_seen, top_n)
        ],
        longest_viewed=[
            PageDuration(page_id=page_id, avg_duration=averages[page_id])
            for page_id in _ranked(averages, first_seen, top_n)
        ],
        top_style_preferences=top_styles,
        recent_notes=[note.text for note in reversed(notes)],
        favorites=list(state.favorites),
        disliked=list(state.disliked),
        average_ratings=average_ratings,
        last_updated=state.updated_at,
    )
