"""Error taxonomy for the ordering client.

Every error here is recoverable: the UI shows the message and keeps its
state.
"""

from __future__ import annotations


class PosError(Exception):
    """Base class for all client errors surfaced to the waiter."""


class ConfigurationError(PosError):
    """Waiter code or backend endpoint is missing."""


class ValidationError(PosError):
    """User input cannot be accepted as-is."""


class WorkflowError(PosError):
    """An intent was issued in a stage that does not accept it."""


class TransportError(PosError):
    """The backend could not be reached or answered unexpectedly."""

    def __init__(self, message: str, status_code: int | None = None, body: str = "") -> None:
        super().__init__(message)
        self.status_code = status_code
        self.body = body


class MenuRefreshError(TransportError):
    """Catalog fetch failed; the cached menu is still valid."""


class SubmissionError(TransportError):
    """Order submission failed; the cart is kept for a manual retry."""
