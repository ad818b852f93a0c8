from __future__ import annotations


class FieldSimError(Exception):
    """Root of the simulation's domain errors."""


class CoordinateOutOfBoundsError(FieldSimError, ValueError):
    """A coordinate lies outside the active grid's dimensions."""


class NoSuchEntityError(FieldSimError, LookupError):
    """A query or collection addressed an empty tile."""


class BadSaveError(FieldSimError, ValueError):
    """Malformed or semantically invalid save text."""


class IllegalConfigurationError(FieldSimError, ValueError):
    """A grid or entity was constructed with out-of-range values."""
