from fastapi import HTTPException

from alumnet.schemas.enums import ErrorKind


HTTP_STATUS_BY_KIND = {
    ErrorKind.unauthenticated: 401,
    ErrorKind.unauthorized: 403,
    ErrorKind.not_found: 404,
    ErrorKind.conflict: 409,
    ErrorKind.validation: 400,
    ErrorKind.backend: 500,
}


class AlumnetError(Exception):
    """Base class for domain errors raised by the service layer."""

    kind = ErrorKind.backend

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class NotAuthenticated(AlumnetError):
    kind = ErrorKind.unauthenticated


class Unauthorized(AlumnetError):
    kind = ErrorKind.unauthorized


class NotFound(AlumnetError):
    kind = ErrorKind.not_found


class Conflict(AlumnetError):
    kind = ErrorKind.conflict


class ValidationFailed(AlumnetError):
    kind = ErrorKind.validation


class InvalidTransition(AlumnetError):
    kind = ErrorKind.conflict


class BackendFailure(AlumnetError):
    kind = ErrorKind.backend


def to_http(exc: AlumnetError) -> HTTPException:
    return HTTPException(
        status_code=HTTP_STATUS_BY_KIND[exc.kind],
        detail=exc.message,
    )
