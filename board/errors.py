"""Errors raised by the events board and its store adapters."""


class BoardError(Exception):
    """Base class for all board errors."""


class LoadError(BoardError):
    """The store subscription could not be established or failed mid-stream."""


class PersistenceError(BoardError):
    """A create, update, delete or batch request was rejected by the store."""


class InvariantViolation(PersistenceError):
    """A mutation targeted a record that was never synced (no store key)."""


class ValidationError(BoardError):
    """Submitted form left a required field blank."""

    def __init__(self, fields):
        self.fields = list(fields)
        super().__init__(f"Missing required fields: {', '.join(self.fields)}")
