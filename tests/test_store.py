import json
import logging

import pytest

from landing_prefs.schemas.state_schemas import SCHEMA_VERSION, ViewRecord
from landing_prefs.store import FileSlot, MemorySlot, PreferenceStore

from conftest import RejectingSlot


def test_empty_slot_loads_defaults_without_writing(store, slot) -> None:
    state = store.load()
    assert state.view_history == []
    assert slot.read() is None


def test_loads_are_independent(store) -> None:
    first = store.load()
    first.favorites.append("aurora")
    assert store.load().favorites == []


def test_save_stamps_updated_at(store, slot) -> None:
    state = store.load()
    before = state.updated_at
    assert store.save(state) is True

    document = json.loads(slot.read())
    assert document["schemaVersion"] == SCHEMA_VERSION
    assert store.load().updated_at >= before


def test_corrupt_text_yields_defaults(caplog) -> None:
    store = PreferenceStore(MemorySlot("{{{ definitely not json"))
    with caplog.at_level(logging.WARNING, logger="landing_prefs.store"):
        state = store.load()

    assert state.view_history == []
    assert "unreadable" in caplog.text


def test_legacy_document_is_upgraded_on_load(caplog) -> None:
    slot = MemorySlot(json.dumps({"version": "1.0.0", "viewHistory": [{"pageId": "aurora", "duration": 5}]}))
    with caplog.at_level(logging.INFO, logger="landing_prefs.store"):
        state = PreferenceStore(slot).load()

    assert state.schema_version == SCHEMA_VERSION
    assert state.view_history[0].duration_seconds == 5
    assert "Upgrading" in caplog.text


def test_export_round_trip(store) -> None:
    state = store.load()
    state.view_history.append(ViewRecord(page_id="aurora", page_name="Aurora", duration_seconds=4))
    state.favorites.append("aurora")
    store.save(state)

    exported = json.loads(store.export_state())
    assert exported == store.load().to_document()


def test_reset_forgets_everything(store, slot) -> None:
    state = store.load()
    state.favorites.append("aurora")
    store.save(state)

    store.reset()
    assert slot.read() is None
    assert store.load().favorites == []


def test_reset_of_empty_slot_is_harmless(store) -> None:
    store.reset()
    store.reset()
    assert store.load().view_history == []


def test_rejected_write_keeps_state_for_the_session() -> None:
    store = PreferenceStore(RejectingSlot())
    state = store.load()
    state.favorites.append("aurora")

    assert store.save(state) is False
    assert store.degraded
    assert store.load().favorites == ["aurora"]

    store.reset()
    assert not store.degraded
    assert store.load().favorites == []


def test_file_slot_round_trip(tmp_path) -> None:
    path = tmp_path / "nested" / "prefs.json"
    store = PreferenceStore(FileSlot(path))
    state = store.load()
    state.disliked.append("nebula")

    assert store.save(state) is True
    assert path.exists()
    assert PreferenceStore(FileSlot(path)).load().disliked == ["nebula"]

    store.reset()
    assert not path.exists()


def test_file_slot_write_failure_degrades(tmp_path) -> None:
    # a plain file where the parent directory should be
    blocker = tmp_path / "memory"
    blocker.write_text("not a directory", encoding="utf-8")
    store = PreferenceStore(FileSlot(blocker / "prefs.json"))

    state = store.load()
    state.favorites.append("aurora")
    assert store.save(state) is False
    assert store.load().favorites == ["aurora"]


def test_file_slot_with_binary_garbage_yields_defaults(tmp_path) -> None:
    path = tmp_path / "prefs.json"
    path.write_bytes(b"\xff\xfe\x00garbage")
    assert PreferenceStore(FileSlot(path)).load().view_history == []


def test_two_stores_on_one_slot_lose_an_update(slot) -> None:
    tab_a = PreferenceStore(slot)
    tab_b = PreferenceStore(slot)

    state_a = tab_a.load()
    state_b = tab_b.load()
    state_a.favorites.append("aurora")
    state_b.favorites.append("nebula")
    tab_a.save(state_a)
    tab_b.save(state_b)

    # last writer wins; no locking across stores
    assert PreferenceStore(slot).load().favorites == ["nebula"]


LEGACY_TEXT = json.dumps(
    {
        "version": "1.0.0",
        "updated": "2024-03-02T10:00:00Z",
        "viewHistory": [{"pageId": "aurora", "duration": 5}],
    }
)


@pytest.mark.parametrize("text", [None, LEGACY_TEXT, "{{{ definitely not json"])
def test_export_round_trip_before_any_save(text) -> None:
    store = PreferenceStore(MemorySlot(text))

    assert json.loads(store.export_state()) == store.load().to_document()
    assert store.load() == store.load()


def test_unsaved_defaults_are_replaced_by_another_writer(slot) -> None:
    store = PreferenceStore(slot)
    store.load()

    other = PreferenceStore(slot)
    state = other.load()
    state.favorites.append("aurora")
    other.save(state)

    assert store.load().favorites == ["aurora"]


def test_legacy_updated_timestamp_is_kept() -> None:
    state = PreferenceStore(MemorySlot(LEGACY_TEXT)).load()
    assert state.updated_at.isoformat().startswith("2024-03-02T10:00:00")
