import json

import pytest

from config import settings_loader
from config.settings_loader import (
    get_log_level,
    get_retention_limits,
    get_storage_path,
    get_summary_limits,
    get_tracking_rules,
    load_settings,
    reload_settings,
)


@pytest.fixture
def restore_settings():
    yield
    settings_loader._settings_cache = None


def test_shipped_defaults(monkeypatch, restore_settings) -> None:
    monkeypatch.delenv(settings_loader.SETTINGS_ENV, raising=False)
    monkeypatch.setattr(settings_loader, "SETTINGS_FILE", settings_loader.CONFIG_DIR / "missing.json")
    reload_settings()

    assert get_retention_limits() == (100, 50)
    assert get_summary_limits() == (5, 5)
    assert get_tracking_rules() == ("landing-pages/", ["landing-showcase"])
    assert get_log_level() == "INFO"
    assert get_storage_path() == settings_loader.CONFIG_DIR.parent / "memory" / "landing_preferences.json"


def test_override_file_is_merged(tmp_path, monkeypatch, restore_settings) -> None:
    override = tmp_path / "settings.json"
    override.write_text(
        json.dumps({"retention": {"max_views": 20}, "logging": {"level": "debug"}, "storage": {"path": str(tmp_path / "p.json")}}),
        encoding="utf-8",
    )
    monkeypatch.setenv(settings_loader.SETTINGS_ENV, str(override))
    reload_settings()

    assert get_retention_limits() == (20, 50)
    assert get_log_level() == "DEBUG"
    assert get_storage_path() == tmp_path / "p.json"


def test_settings_are_cached(monkeypatch, restore_settings) -> None:
    monkeypatch.delenv(settings_loader.SETTINGS_ENV, raising=False)
    first = reload_settings()
    assert load_settings() is first


def test_explicit_settings_take_precedence() -> None:
    settings = {"retention": {"max_views": "7", "max_notes": 3}}
    assert get_retention_limits(settings) == (7, 3)
