"""Error types shared by the services, the store and the HTTP layer."""


class TrackerError(Exception):
    """Base error; carries the HTTP status the API answers with."""

    status_code = 500
    kind = "SERVER_ERROR"

    def __init__(self, message: str = "Server error"):
        super().__init__(message)
        self.message = message


class MissingFieldError(TrackerError):
    status_code = 400
    kind = "MISSING_FIELD"


class InvalidFieldError(TrackerError):
    status_code = 400
    kind = "INVALID_FIELD"


class NotFoundError(TrackerError):
    status_code = 404
    kind = "NOT_FOUND"


class ServerError(TrackerError):
    pass


# --- raised by the persistence layer


class StorageError(Exception):
    """Any storage failure the services do not recover from."""


class UniqueConstraintViolation(StorageError):
    """Insert rejected by a unique index."""
