"""Domain errors raised by services and mapped to HTTP responses in main."""

from fastapi import status


class BakeryError(Exception):
    """Base class for expected business failures."""

    status_code: int = status.HTTP_400_BAD_REQUEST

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message


class Unauthorized(BakeryError):
    status_code = status.HTTP_401_UNAUTHORIZED


class Forbidden(Unauthorized):
    """Authenticated, but the role does not allow the action."""

    status_code = status.HTTP_403_FORBIDDEN


class NotFound(BakeryError):
    status_code = status.HTTP_404_NOT_FOUND


class ValidationError(BakeryError):
    status_code = status.HTTP_422_UNPROCESSABLE_ENTITY


class InsufficientInventory(BakeryError):
    status_code = status.HTTP_409_CONFLICT


class PaymentFailed(BakeryError):
    status_code = status.HTTP_402_PAYMENT_REQUIRED


class NoFulfillmentAvailable(BakeryError):
    """Requested delivery or pickup cannot be offered."""

    status_code = status.HTTP_409_CONFLICT
