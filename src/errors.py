"""Application errors rendered as JSON envelopes."""

from typing import Any

from fastapi import status


class ApiError(Exception):
    """Base error carrying an HTTP status code and a user-facing message."""

    status_code: int = status.HTTP_500_INTERNAL_SERVER_ERROR
    default_message: str = "Something went wrong"

    def __init__(self, message: str | None = None, errors: list[Any] | None = None):
        self.message = message or self.default_message
        self.errors = errors or []
        super().__init__(self.message)


class BadRequestError(ApiError):
    """Missing or invalid input, duplicate user, missing required file."""

    status_code = status.HTTP_400_BAD_REQUEST
    default_message = "Bad request"


class UnauthorizedError(ApiError):
    """Invalid credentials or tokens."""

    status_code = status.HTTP_401_UNAUTHORIZED
    default_message = "Unauthorized request"


class NotFoundError(ApiError):
    status_code = status.HTTP_404_NOT_FOUND
    default_message = "Not found"


class InternalServerError(ApiError):
    """Token generation, persistence or media upload failure."""

    status_code = status.HTTP_500_INTERNAL_SERVER_ERROR
    default_message = "Internal server error"


def error_body(status_code: int, message: str, errors: list[Any] | None = None) -> dict[str, Any]:
    """Build the JSON envelope returned for failed requests."""
    return {
        "statusCode": status_code,
        "data": None,
        "message": message,
        "success": False,
        "errors": errors or [],
    }
