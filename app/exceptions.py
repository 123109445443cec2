# app/exceptions.py
"""
Error taxonomy for the gate access backend.
Mapped to HTTP responses by the handlers registered in app/main.py.
"""


class GateAccessError(Exception):
    """Base class for all errors raised by the access pipeline."""

    status_code = 500

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class InvalidRequest(GateAccessError):
    """Missing or malformed input. Raised before any lookup or side effect."""

    status_code = 400


class NotFound(GateAccessError):
    """An administrative operation referenced a row that does not exist.

    Never raised by verification: an unknown student or plate is a denial.
    """

    status_code = 404


class PersistenceUnavailable(GateAccessError):
    """The store is unreachable, timed out, or rejected a write."""

    status_code = 500


class BroadcastFailure(GateAccessError):
    """Delivery to a single observer failed. Swallowed by the broadcaster."""
