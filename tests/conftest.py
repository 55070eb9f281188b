import pytest

from landing_prefs.engine import LandingPreferences
from landing_prefs.errors import PersistenceUnavailable
from landing_prefs.store import MemorySlot, PreferenceStore


class FakeClock:
    def __init__(self, start: float = 1000.0) -> None:
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


class RejectingSlot(MemorySlot):
    """Storage medium that refuses every write (quota exceeded / disabled)."""

    def write(self, text: str) -> None:
        raise PersistenceUnavailable("quota exceeded")


@pytest.fixture
def slot() -> MemorySlot:
    return MemorySlot()


@pytest.fixture
def store(slot: MemorySlot) -> PreferenceStore:
    return PreferenceStore(slot)


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def prefs(store: PreferenceStore, clock: FakeClock) -> LandingPreferences:
    return LandingPreferences(store=store, clock=clock)
