"""
Error taxonomy shared by services and routes.

Services raise these; app.main turns them into JSON responses of the form
{"success": false, "error": {"code": ..., "message": ...}}.
"""


class AppError(Exception):
    """Base class for errors that map onto an HTTP response."""
    status_code = 500
    code = "internal_error"

    def __init__(self, message: str = "Internal server error"):
        super().__init__(message)
        self.message = message


class ValidationError(AppError):
    """Client-correctable input problem."""
    status_code = 400
    code = "validation_error"


class ConflictError(AppError):
    status_code = 409
    code = "conflict"


class SlotConflictError(ConflictError):
    """Another active booking already holds the (date, time) slot."""
    code = "slot_conflict"

    def __init__(self, message: str = "This time slot is already booked. Please choose a different time."):
        super().__init__(message)


class NotFoundError(AppError):
    status_code = 404
    code = "not_found"


class StorageError(AppError):
    """Local disk or object storage failure. Detail is logged, not returned."""
    status_code = 500
    code = "storage_error"
    public_message = "File storage failed"


class PersistenceError(AppError):
    """Datastore unreachable or an unclassified constraint violation."""
    status_code = 500
    code = "persistence_error"
    public_message = "Database operation failed"


class NotificationError(AppError):
    """Email delivery failure. Logged by the caller, never sent to clients."""
    code = "notification_error"
