from fastapi import Request, status
from fastapi.responses import JSONResponse


class DomainError(Exception):
    """Base error carrying the HTTP status and stable code it maps to."""

    status_code: int = status.HTTP_500_INTERNAL_SERVER_ERROR
    code: str = "C001"
    message: str = "Internal server error"

    def __init__(self, message: str = None):
        super().__init__(message or self.message)
        self.message = message or self.message


class ArtworkNotFound(DomainError):
    status_code = status.HTTP_404_NOT_FOUND
    code = "W001"
    message = "Artwork not found"


class ArtworkAccessDenied(DomainError):
    status_code = status.HTTP_403_FORBIDDEN
    code = "W003"
    message = "You do not have access to this artwork"


class QrNotFound(DomainError):
    # Raised for unknown, disabled and private tokens alike.
    status_code = status.HTTP_404_NOT_FOUND
    code = "Q002"
    message = "QR code not found"


class GenerationExhausted(DomainError):
    code = "Q004"
    message = "Could not generate a unique QR token"


class EncodingError(DomainError):
    status_code = status.HTTP_400_BAD_REQUEST
    code = "Q005"
    message = "QR payload cannot be encoded"


class StorageError(DomainError):
    code = "S001"
    message = "Storage operation failed"


class AuthenticationFailed(DomainError):
    status_code = status.HTTP_401_UNAUTHORIZED
    code = "A001"
    message = "Could not validate credentials"


async def domain_error_handler(request: Request, exc: DomainError) -> JSONResponse:
    headers = None
    if isinstance(exc, AuthenticationFailed):
        headers = {"WWW-Authenticate": "Bearer"}
    return JSONResponse(
        status_code=exc.status_code,
        content={"status": exc.status_code, "code": exc.code, "message": exc.message},
        headers=headers,
    )
