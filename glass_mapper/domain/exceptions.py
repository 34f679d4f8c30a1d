"""
Domain exceptions raised by the site editing core.

All of them are local, recoverable conditions; the HTTP layer maps them
to client errors.
"""


class SiteCoreError(Exception):
    """Base class for site core errors."""

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class InvalidInput(SiteCoreError):
    """A value supplied by the caller is malformed or out of range."""


class IllegalTransition(SiteCoreError):
    """The requested operation is not valid in the current state."""


class NotFound(SiteCoreError):
    """A referenced entity does not exist."""
