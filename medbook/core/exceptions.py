"""
Domain errors raised by the appointment services.

Each error carries the HTTP status it maps to; ``main`` turns them into
``{"message": ...}`` responses.
"""
from typing import Optional

from fastapi import status


class DomainError(Exception):
    status_code: int = status.HTTP_500_INTERNAL_SERVER_ERROR
    default_message: str = "Internal server error"

    def __init__(self, message: Optional[str] = None):
        self.message = message or self.default_message
        super().__init__(self.message)


class NotFoundError(DomainError):
    status_code = status.HTTP_404_NOT_FOUND
    default_message = "Not found"


class UnauthorizedError(DomainError):
    status_code = status.HTTP_401_UNAUTHORIZED
    default_message = "Not authorized"


class InvalidStateError(DomainError):
    status_code = status.HTTP_400_BAD_REQUEST
    default_message = "Action not allowed in the current state"


class InvalidInputError(DomainError):
    status_code = status.HTTP_400_BAD_REQUEST
    default_message = "Invalid input"
