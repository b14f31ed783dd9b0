"""
Exception taxonomy for the constraint engine.

All failures are deterministic functions of the input; the engine performs
no I/O, so nothing here is retryable.
"""


class ConstraintEngineError(Exception):
    """Base exception for all constraint engine failures."""

    pass


class NotFoundError(ConstraintEngineError, LookupError):
    """An operation referenced a constraint or scenario id that is not registered."""

    pass


class InvalidInputError(ConstraintEngineError, ValueError):
    """Arguments or records violate the engine's input contract."""

    pass


class DegenerateResultError(ConstraintEngineError):
    """The requested computation has nothing to operate on (e.g. an empty scenario)."""

    pass
