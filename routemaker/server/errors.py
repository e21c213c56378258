"""
Error taxonomy shared by services and routes.

Each error carries the HTTP status it is reported with. Services raise these;
routes translate them into ``HTTPException`` via ``to_http_exception``.
"""

from fastapi import HTTPException, status


class RouteMakerError(Exception):
    """Base exception for domain errors."""

    status_code = status.HTTP_500_INTERNAL_SERVER_ERROR
    default_message = 'An unexpected error occurred'

    def __init__(self, message: str | None = None):
        super().__init__(message or self.default_message)


class UnauthenticatedError(RouteMakerError):
    status_code = status.HTTP_401_UNAUTHORIZED
    default_message = 'Authentication required'


class ForbiddenError(RouteMakerError):
    status_code = status.HTTP_403_FORBIDDEN
    default_message = 'Insufficient permissions'


class NotFoundError(RouteMakerError):
    status_code = status.HTTP_404_NOT_FOUND
    default_message = 'Not found'


class ConflictError(RouteMakerError):
    status_code = status.HTTP_409_CONFLICT
    default_message = 'Conflict'


class ValidationError(RouteMakerError):
    status_code = status.HTTP_400_BAD_REQUEST
    default_message = 'Invalid request'


class UpstreamError(RouteMakerError):
    """Raised when the database or a third-party provider fails."""

    status_code = status.HTTP_502_BAD_GATEWAY
    default_message = 'Upstream service failure'


def to_http_exception(error: RouteMakerError) -> HTTPException:
    return HTTPException(status_code=error.status_code, detail=str(error))
