# app/core/errors.py

from typing import List, Optional
from fastapi import status


class BookingError(Exception):
    """Base error carrying the HTTP status and the client-facing message"""

    status_code = status.HTTP_500_INTERNAL_SERVER_ERROR
    default_message = "Request failed"

    def __init__(self, message: Optional[str] = None, errors: Optional[List[str]] = None):
        self.message = message or self.default_message
        self.errors = errors or []
        super().__init__(self.message)


class ValidationFailed(BookingError):
    status_code = status.HTTP_400_BAD_REQUEST
    default_message = "Validation failed"


class Unauthorized(BookingError):
    status_code = status.HTTP_401_UNAUTHORIZED
    default_message = "Invalid or expired token"


class Forbidden(BookingError):
    status_code = status.HTTP_403_FORBIDDEN
    default_message = "Access denied"


class NotFound(BookingError):
    status_code = status.HTTP_404_NOT_FOUND
    default_message = "Resource not found"


class SlotUnavailable(BookingError):
    status_code = status.HTTP_403_FORBIDDEN
    default_message = "This time slot is already booked"


class SlotNoLongerAvailable(BookingError):
    status_code = status.HTTP_400_BAD_REQUEST
    default_message = "Time slot is no longer available. Please contact support for refund."


class PaymentIncomplete(BookingError):
    status_code = status.HTTP_400_BAD_REQUEST
    default_message = "Payment not completed or failed"


class ProcessorError(BookingError):
    status_code = status.HTTP_502_BAD_GATEWAY
    default_message = "Payment processor request failed"


class StorageError(BookingError):
    status_code = status.HTTP_500_INTERNAL_SERVER_ERROR
    default_message = "Failed to save appointment"


class ConfigurationError(BookingError):
    status_code = status.HTTP_500_INTERNAL_SERVER_ERROR
    default_message = "Server configuration error"
