"""
Exception hierarchy for the gallery backend.
"""


class GalerieError(Exception):
    """Base class for application errors."""


class MigrationError(GalerieError):
    """
    A migration could not be read or applied.

    Attributes:
        tag: Journal tag of the offending migration (None for journal errors)
    """

    def __init__(self, message: str, tag: str | None = None):
        super().__init__(message)
        self.tag = tag


class InvalidTransitionError(GalerieError, ValueError):
    """A workflow status change is not allowed from the current status."""

    def __init__(self, current: str, requested: str):
        super().__init__(f"Cannot transition from '{current}' to '{requested}'")
        self.current = current
        self.requested = requested
