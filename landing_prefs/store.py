"""
PreferenceStore - Owner of the single persisted preference document.

Provides:
- load(): read + eager migration to the current schema
- save(): stamp updatedAt and write through to the persisted slot
- reset(): delete the persisted slot
- export_state(): the persisted document as JSON text

The persisted slot is pluggable (StateSlot). FileSlot keeps one JSON file on
disk; MemorySlot keeps the text in process memory. Several stores built over
the same slot behave like browser tabs sharing one origin's storage: there is
no locking, so the last writer wins.
"""

import logging
from abc import ABC, abstractmethod
from pathlib import Path
from typing import Optional, Tuple

from landing_prefs.errors import CorruptState, PersistenceUnavailable, PreferenceError
from landing_prefs.migration import decode_state, is_current, migrate
from landing_prefs.schemas.state_schemas import (
    MAX_USER_NOTES,
    MAX_VIEW_HISTORY,
    PreferenceState,
    utcnow,
)

logger = logging.getLogger("landing_prefs.store")


# =============================================================================
# Persisted slots
# =============================================================================

class StateSlot(ABC):
    """A single storage location holding the serialized state."""

    @abstractmethod
    def read(self) -> Optional[str]:
        """Return the stored text, or None when the slot is empty."""

    @abstractmethod
    def write(self, text: str) -> None:
        """Replace the stored text. Raises PersistenceUnavailable on rejection."""

    @abstractmethod
    def clear(self) -> None:
        """Empty the slot. Must not fail when it is already empty."""


class FileSlot(StateSlot):
    """JSON file on disk, with automatic directory creation."""

    DEFAULT_PATH = "memory/landing_preferences.json"

    def __init__(self, path: Optional[Path] = None):
        self.path = Path(path) if path else Path(__file__).parent.parent / self.DEFAULT_PATH

    def read(self) -> Optional[str]:
        if not self.path.exists():
            return None
        try:
            return self.path.read_text(encoding="utf-8")
        except UnicodeDecodeError as e:
            raise CorruptState(f"{self.path} is not UTF-8 text: {e}") from e
        except OSError as e:
            raise PersistenceUnavailable(f"Cannot read {self.path}: {e}") from e

    def write(self, text: str) -> None:
        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            self.path.write_text(text, encoding="utf-8")
        except OSError as e:
            raise PersistenceUnavailable(f"Cannot write {self.path}: {e}") from e

    def clear(self) -> None:
        try:
            self.path.unlink(missing_ok=True)
        except OSError as e:
            raise PersistenceUnavailable(f"Cannot delete {self.path}: {e}") from e


class MemorySlot(StateSlot):
    """Process-local slot."""

    def __init__(self, text: Optional[str] = None):
        self.text = text

    def read(self) -> Optional[str]:
        return self.text

    def write(self, text: str) -> None:
        self.text = text

    def clear(self) -> None:
        self.text = None


# =============================================================================
# Store
# =============================================================================

class PreferenceStore:
    """
    Read-modify-write access to the persisted PreferenceState.

    Every load() returns an independent object. A state derived from the
    slot (defaults, or a migrated document) is kept until the slot text
    changes, so repeated loads of an unsaved slot agree with each other. When the medium rejects a
    write, the store keeps that state for the rest of the session and serves
    it from load() until a write succeeds or the store is reset.
    """

    def __init__(
        self,
        slot: Optional[StateSlot] = None,
        max_views: int = MAX_VIEW_HISTORY,
        max_notes: int = MAX_USER_NOTES,
    ):
        self.slot = slot if slot is not None else FileSlot()
        self.max_views = max_views
        self.max_notes = max_notes
        self._session_state: Optional[PreferenceState] = None
        # state derived from slot text that has not been re-saved yet, keyed by that text
        self._derived: Optional[Tuple[Optional[str], PreferenceState]] = None

    @property
    def degraded(self) -> bool:
        """True while mutations only live in memory."""
        return self._session_state is not None

    def load(self) -> PreferenceState:
        """Load the current state, migrating older documents eagerly."""
        if self._session_state is not None:
            return self._session_state.model_copy(deep=True)

        try:
            text = self.slot.read()
        except PersistenceUnavailable as e:
            logger.warning(f"⚠️ Cannot read preference state: {e}")
            text = None
        except CorruptState as e:
            logger.warning(f"⚠️ Discarding unreadable preference state: {e}")
            text = None

        if self._derived is None or self._derived[0] != text:
            self._derived = (text, self._derive(text))
        return self._derived[1].model_copy(deep=True)

    def _derive(self, text: Optional[str]) -> PreferenceState:
        if text is None:
            return PreferenceState()
        try:
            raw = decode_state(text)
        except CorruptState as e:
            logger.warning(f"⚠️ Discarding unreadable preference state: {e}")
            return PreferenceState()

        if not is_current(raw):
            logger.info("♻️ Upgrading stored preference state to the current schema")
        return migrate(raw, max_views=self.max_views, max_notes=self.max_notes)

    def save(self, state: PreferenceState) -> bool:
        """
        Stamp updatedAt and write the state through to the slot.

        Returns:
            True when persisted, False when the write was dropped and the
            state only lives in this session.
        """
        state.updated_at = utcnow()
        text = state.model_dump_json(indent=2, by_alias=True)
        try:
            self.slot.write(text)
        except PersistenceUnavailable as e:
            logger.warning(f"⚠️ Preference state kept in memory only: {e}")
            self._session_state = state.model_copy(deep=True)
            return False

        self._session_state = None
        self._derived = None
        return True

    def reset(self) -> None:
        """Delete the persisted slot. Never fails."""
        self._session_state = None
        self._derived = None
        try:
            self.slot.clear()
        except PreferenceError as e:
            logger.warning(f"⚠️ Failed to clear preference state: {e}")
            return
        logger.info("🧹 Preference state reset")

    def export_state(self) -> str:
        """Serialize the current (post-migration) state verbatim."""
        return self.load().model_dump_json(indent=2, by_alias=True)
