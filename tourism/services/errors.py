"""Domain errors raised by the reservation services"""


class ReservationError(Exception):
    """Base class for failures surfaced to API callers"""

    status_code = 400
    kind = "reservation_error"

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class NotFound(ReservationError):
    status_code = 404
    kind = "not_found"


class PlaceNotFound(NotFound):
    kind = "place_not_found"

    def __init__(self, place_id):
        super().__init__(f"Place {place_id} not found")
        self.place_id = place_id


class InvalidTransition(ReservationError):
    """A lifecycle guard or source-state precondition failed"""

    status_code = 409
    kind = "invalid_transition"


class CapacityExceeded(ReservationError):
    status_code = 409
    kind = "capacity_exceeded"


class PlaceNotAvailable(ReservationError):
    status_code = 409
    kind = "place_not_available"


class DuplicateCode(ReservationError):
    status_code = 409
    kind = "duplicate_code"


class CodeGenerationExhausted(ReservationError):
    status_code = 503
    kind = "code_generation_exhausted"


class Unauthorized(ReservationError):
    status_code = 403
    kind = "unauthorized"


class DeleteBlocked(ReservationError):
    """Deletion refused while dependent records exist"""

    status_code = 409
    kind = "delete_blocked"


class ValidationFailed(ReservationError):
    status_code = 400
    kind = "validation_failed"
