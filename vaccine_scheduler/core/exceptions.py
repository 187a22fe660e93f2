"""
Domain errors raised by the scheduler services.

Every error carries a human-readable ``detail`` (the single outcome line shown
to the user) and the HTTP status the API reports it with.
"""

class SchedulerError(Exception):
    status_code: int = 400
    kind: str = "SchedulerError"
    default_detail: str = "Please try again!"

    def __init__(self, detail: str = None):
        self.detail = detail or self.default_detail
        super().__init__(self.detail)

class InvalidInput(SchedulerError):
    status_code = 400
    kind = "InvalidInput"

class Unauthorized(SchedulerError):
    status_code = 401
    kind = "Unauthorized"
    default_detail = "Please login first!"

class Forbidden(Unauthorized):
    """Logged in, but with the wrong role or already holding a session."""
    status_code = 403

class NotFound(SchedulerError):
    status_code = 404
    kind = "NotFound"
    default_detail = "Not found!"

class VaccineNotFound(NotFound):
    default_detail = "Please enter a valid vaccine!"

class Conflict(SchedulerError):
    status_code = 409
    kind = "Conflict"
    default_detail = "Conflicting record already exists!"

class DuplicateUsername(Conflict):
    default_detail = "Username taken, try again!"

class DuplicateAvailability(Conflict):
    default_detail = "Availability for this date has already been uploaded!"

class OutOfStock(SchedulerError):
    status_code = 409
    kind = "OutOfStock"
    default_detail = "There are 0 doses of this vaccine available!"

class NoAvailability(SchedulerError):
    status_code = 409
    kind = "NoAvailability"
    default_detail = "There are no caregivers available for your selected date!"

class StorageFailure(SchedulerError):
    status_code = 503
    kind = "StorageFailure"
    default_detail = "Storage error, please try again later!"
