"""
Domain errors raised by services and translated to JSON responses by routers
"""


class GymError(Exception):
    """Base class for expected, client-facing failures."""

    code = "gym_error"
    status = 400

    def __init__(self, message: str = "An error occurred", code: str = None):
        super().__init__(message)
        self.message = message
        if code:
            self.code = code


class ValidationFailed(GymError):
    code = "validation_error"
    status = 400


class Forbidden(GymError):
    code = "forbidden"
    status = 403


class NotFound(GymError):
    code = "not_found"
    status = 404


class CapacityExceeded(GymError):
    code = "capacity_exceeded"
    status = 409


class BookingAlreadyCancelled(GymError):
    code = "booking_already_cancelled"
    status = 409


class BookingNotCancellable(GymError):
    code = "booking_not_cancellable"
    status = 409


class PaymentsUnavailable(GymError):
    code = "payments_unavailable"
    status = 503


class PaymentGatewayError(GymError):
    """Gateway call failed; the detail is only logged, never returned."""

    code = "payment_gateway_error"
    status = 500
