"""Classified failures raised by the service layer.

Services raise these; ``app.py`` turns them into JSON responses with the
matching status code. Nothing here knows about HTTP beyond the status number.
"""

from models.ErrorCode import ErrorCode


class ServiceError(Exception):
    code: ErrorCode = ErrorCode.INVALID_ARGUMENT
    status_code: int = 400

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message

    def to_dict(self) -> dict:
        return {"success": False, "code": self.code.value, "detail": self.message}


class NotFoundError(ServiceError):
    code = ErrorCode.NOT_FOUND
    status_code = 404


class CapacityExceededError(ServiceError):
    code = ErrorCode.CAPACITY_EXCEEDED


class ConflictError(ServiceError):
    code = ErrorCode.CONFLICT


class InvalidDurationError(ServiceError):
    code = ErrorCode.INVALID_DURATION


class InvalidStartTimeError(ServiceError):
    code = ErrorCode.INVALID_START_TIME


class InvalidArgumentError(ServiceError):
    code = ErrorCode.INVALID_ARGUMENT


class AlreadyCancelledError(ServiceError):
    code = ErrorCode.ALREADY_CANCELLED


class ReservationClosedError(ServiceError):
    code = ErrorCode.RESERVATION_CLOSED


class HasActiveReservationsError(ServiceError):
    code = ErrorCode.HAS_ACTIVE_RESERVATIONS


class DuplicateEmailError(ServiceError):
    code = ErrorCode.DUPLICATE_EMAIL


class DuplicateTableNumberError(ServiceError):
    code = ErrorCode.DUPLICATE_TABLE_NUMBER


class DuplicateUsernameError(ServiceError):
    code = ErrorCode.DUPLICATE_USERNAME


class InvalidCredentialsError(ServiceError):
    code = ErrorCode.INVALID_CREDENTIALS
    status_code = 401


class InvalidRefreshTokenError(ServiceError):
    code = ErrorCode.INVALID_REFRESH_TOKEN
    status_code = 401


class AccountLockedError(ServiceError):
    code = ErrorCode.ACCOUNT_LOCKED
    status_code = 403


class ForbiddenError(ServiceError):
    code = ErrorCode.FORBIDDEN
    status_code = 403
