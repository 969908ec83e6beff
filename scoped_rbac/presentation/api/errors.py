from fastapi import HTTPException, status

from scoped_rbac.domain.exceptions import (AuthenticationException,
                                           ConflictException,
                                           NotFoundException,
                                           PermissionDeniedError,
                                           RbacException,
                                           ReferentialIntegrityException,
                                           ValidationException)

_STATUS_BY_EXCEPTION: list[tuple[type[RbacException], int]] = [
    (NotFoundException, status.HTTP_404_NOT_FOUND),
    (ConflictException, status.HTTP_409_CONFLICT),
    (ReferentialIntegrityException, status.HTTP_422_UNPROCESSABLE_ENTITY),
    (ValidationException, status.HTTP_422_UNPROCESSABLE_ENTITY),
    (PermissionDeniedError, status.HTTP_403_FORBIDDEN),
    (AuthenticationException, status.HTTP_401_UNAUTHORIZED),
]


def to_http_exception(exc: RbacException) -> HTTPException:
    """Translate a domain exception into the matching HTTP error"""
    for exc_type, status_code in _STATUS_BY_EXCEPTION:
        if isinstance(exc, exc_type):
            headers = None
            if status_code == status.HTTP_401_UNAUTHORIZED:
                headers = {"WWW-Authenticate": "Bearer"}
            return HTTPException(status_code=status_code, detail=exc.to_dict(), headers=headers)
    return HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=exc.to_dict())
