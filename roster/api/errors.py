"""Translate RosterError into HTTP responses carrying the structured error code."""

from fastapi import Request, status
from fastapi.responses import JSONResponse

from roster.core import exceptions as exc

STATUS_BY_CODE: dict[str, int] = {
    exc.NOT_AUTHENTICATED: status.HTTP_401_UNAUTHORIZED,
    exc.IDENTITY_NOT_FOUND: status.HTTP_401_UNAUTHORIZED,
    exc.NO_SYSTEM_ACCESS: status.HTTP_401_UNAUTHORIZED,
    exc.ACCOUNT_INACTIVE: status.HTTP_401_UNAUTHORIZED,
    exc.INSUFFICIENT_ROLE: status.HTTP_403_FORBIDDEN,
    exc.NOT_AN_INSTRUCTOR: status.HTTP_403_FORBIDDEN,
    exc.RESOURCE_NOT_FOUND: status.HTTP_404_NOT_FOUND,
    exc.ASSIGNMENT_NOT_FOUND: status.HTTP_404_NOT_FOUND,
    exc.ALREADY_ASSIGNED: status.HTTP_409_CONFLICT,
    exc.CONFLICT: status.HTTP_409_CONFLICT,
    exc.INVALID_INPUT: status.HTTP_422_UNPROCESSABLE_ENTITY,
    exc.RATE_LIMITED: status.HTTP_429_TOO_MANY_REQUESTS,
}


def roster_error_handler(request: Request, err: exc.RosterError) -> JSONResponse:
    """Body is {"detail": message, "code": code}; clients key off code, never the text."""
    status_code = STATUS_BY_CODE.get(err.code, status.HTTP_400_BAD_REQUEST)
    headers = None
    if status_code == status.HTTP_401_UNAUTHORIZED:
        headers = {"WWW-Authenticate": "Bearer"}
    return JSONResponse(
        status_code=status_code,
        content={"detail": err.message, "code": err.code},
        headers=headers,
    )
