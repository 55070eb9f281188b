"""
Failure taxonomy for the preference engine.

None of these cross into the calling layer: the Store absorbs
CorruptState and PersistenceUnavailable, the Recorder absorbs InvalidInput.
"""


class PreferenceError(Exception):
    """Base class for all preference engine failures."""


class CorruptState(PreferenceError):
    """Persisted data could not be parsed as structured data."""


class PersistenceUnavailable(PreferenceError):
    """The storage medium rejected a read, write or delete."""


class InvalidInput(PreferenceError):
    """A recording call supplied a malformed argument."""
