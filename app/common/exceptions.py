# app/common/exceptions.py

from fastapi import status


class AppError(ValueError):
    """Base class for expected failures raised by the service layer."""
    status_code = status.HTTP_400_BAD_REQUEST
    default_message = "Request failed"

    def __init__(self, message: str | None = None):
        self.message = message or self.default_message
        super().__init__(self.message)


class Unauthorized(AppError):
    status_code = status.HTTP_401_UNAUTHORIZED
    default_message = "Not authenticated"


class ValidationError(AppError):
    status_code = status.HTTP_400_BAD_REQUEST
    default_message = "Invalid input"


class NotFoundError(AppError):
    status_code = status.HTTP_404_NOT_FOUND
    default_message = "Not found"


class DuplicateError(AppError):
    status_code = status.HTTP_409_CONFLICT
    default_message = "Already exists"


class ImmutableError(AppError):
    status_code = status.HTTP_409_CONFLICT
    default_message = "This record cannot be modified"


class ImmutableStateError(ImmutableError):
    default_message = "Only draft invoices can be edited"


class InUseError(AppError):
    status_code = status.HTTP_409_CONFLICT
    default_message = "Record is still in use"


class InvalidTransitionError(AppError):
    status_code = status.HTTP_409_CONFLICT
    default_message = "Invalid status transition"


class InvalidReferenceError(AppError):
    status_code = status.HTTP_400_BAD_REQUEST
    default_message = "Invalid reference"
