from enum import Enum

class ErrorCode(str, Enum):
    NOT_FOUND = "NOT_FOUND"
    CAPACITY_EXCEEDED = "CAPACITY_EXCEEDED"
    CONFLICT = "CONFLICT"
    INVALID_DURATION = "INVALID_DURATION"
    INVALID_START_TIME = "INVALID_START_TIME"
    INVALID_ARGUMENT = "INVALID_ARGUMENT"
    ALREADY_CANCELLED = "ALREADY_CANCELLED"
    RESERVATION_CLOSED = "RESERVATION_CLOSED"
    HAS_ACTIVE_RESERVATIONS = "HAS_ACTIVE_RESERVATIONS"
    DUPLICATE_EMAIL = "DUPLICATE_EMAIL"
    DUPLICATE_TABLE_NUMBER = "DUPLICATE_TABLE_NUMBER"
    DUPLICATE_USERNAME = "DUPLICATE_USERNAME"
    INVALID_CREDENTIALS = "INVALID_CREDENTIALS"
    INVALID_REFRESH_TOKEN = "INVALID_REFRESH_TOKEN"
    ACCOUNT_LOCKED = "ACCOUNT_LOCKED"
    FORBIDDEN = "FORBIDDEN"
