"""Domain errors raised by the booking services.

Each error carries the HTTP status it maps to; app.main renders them as
``{"success": false, "message": ...}``.
"""


class BookingError(Exception):
    status_code = 400

    def __init__(self, message: str):
        self.message = message
        super().__init__(message)


class ValidationError(BookingError):
    """Malformed or missing input. Not retryable."""
    status_code = 400


class NotFoundError(BookingError):
    status_code = 404


class ConflictError(BookingError):
    """Valid request, but the booking's current state does not allow it."""
    status_code = 409


class AlreadyConfirmedError(ConflictError):
    pass


class InvalidStateError(ConflictError):
    pass


class SeatConflictError(ConflictError):
    def __init__(self, message: str, seats: list[str] | None = None):
        self.seats = list(seats or [])
        super().__init__(message)


class StorageError(BookingError):
    """Datastore or filesystem failure. Transient, the caller may retry."""
    status_code = 503
