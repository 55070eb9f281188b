from landing_prefs.aggregator import apply_style_weights, style_weight, summarize
from landing_prefs.schemas.state_schemas import (
    Note,
    PageFeedback,
    PreferenceState,
    RatingEntry,
    ViewRecord,
)


def _views(*pairs) -> list:
    return [ViewRecord(page_id=page_id, duration_seconds=duration) for page_id, duration in pairs]


def test_style_weight() -> None:
    assert style_weight(True) == 1
    assert style_weight(False) == -1
    assert style_weight(None) == 0


def test_apply_style_weights_counts_known_pairs() -> None:
    state = PreferenceState()
    applied = apply_style_weights(state, {"colorSchemes": "dark", "moods": "calm", "layouts": "x"}, 1)

    assert applied == 1
    assert state.style_preferences["colorSchemes"]["dark"] == 1
    assert apply_style_weights(state, {"colorSchemes": "dark"}, 0) == 0


def test_most_viewed_ranking_breaks_ties_by_first_view() -> None:
    order = ["b", "a", "c", "a", "c", "a", "b", "a", "c", "a", "b"]
    state = PreferenceState(view_history=_views(*[(page_id, 0) for page_id in order]))

    summary = summarize(state)

    assert summary.total_views == 11
    assert [(entry.page_id, entry.views) for entry in summary.most_viewed] == [("a", 5), ("b", 3), ("c", 3)]


def test_most_viewed_is_capped() -> None:
    state = PreferenceState(view_history=_views(*[(f"p{i}", 0) for i in range(8)]))
    summary = summarize(state, top_n=5)
    assert [entry.page_id for entry in summary.most_viewed] == ["p0", "p1", "p2", "p3", "p4"]


def test_longest_viewed_ignores_unpatched_records() -> None:
    state = PreferenceState(view_history=_views(("a", 10), ("a", 0), ("a", 20), ("b", 40), ("c", 0)))

    summary = summarize(state)

    assert [(entry.page_id, entry.avg_duration) for entry in summary.longest_viewed] == [("b", 40), ("a", 15)]


def test_top_styles_skip_categories_without_positive_score() -> None:
    state = PreferenceState()
    state.style_preferences["colorSchemes"].update({"dark": 2, "gradient": 2})
    state.style_preferences["layouts"]["minimal"] = -3
    state.style_preferences["typography"]["modern"] = 1

    top = summarize(state).top_style_preferences

    assert top == {"colorSchemes": "dark", "typography": "modern"}


def test_recent_notes_newest_first() -> None:
    state = PreferenceState(user_notes=[Note(text=f"note {i}") for i in range(7)])
    assert summarize(state).recent_notes == ["note 6", "note 5", "note 4", "note 3", "note 2"]


def test_average_ratings_and_verdicts() -> None:
    state = PreferenceState(
        feedback_by_page={
            "aurora": PageFeedback(ratings=[RatingEntry(value=4), RatingEntry(value=5)]),
            "nebula": PageFeedback(),
        },
        favorites=["aurora"],
        disliked=["nebula"],
    )

    summary = summarize(state)

    assert summary.average_ratings == {"aurora": 4.5}
    assert summary.favorites == ["aurora"]
    assert summary.disliked == ["nebula"]
    assert summary.last_updated == state.updated_at


def test_empty_state_summary() -> None:
    summary = summarize(PreferenceState())
    assert summary.total_views == 0
    assert summary.most_viewed == []
    assert summary.top_style_preferences == {}


def test_summarize_does_not_mutate() -> None:
    state = PreferenceState(view_history=_views(("a", 3)), user_notes=[Note(text="n")])
    before = state.to_document()
    summarize(state)
    assert state.to_document() == before


def test_summary_serializes_with_camel_case() -> None:
    document = summarize(PreferenceState(view_history=_views(("a", 3)))).model_dump(mode="json", by_alias=True)
    assert document["totalViews"] == 1
    assert document["longestViewed"] == [{"pageId": "a", "avgDuration": 3.0}]
    assert "topStylePreferences" in document


def test_apply_style_weights_skips_non_string_labels() -> None:
    state = PreferenceState()
    applied = apply_style_weights(state, {"colorSchemes": ["dark"], "layouts": None, "typography": "bold"}, 1)

    assert applied == 1
    assert state.style_preferences["typography"]["bold"] == 1
