"""
Error taxonomy for the photo-sharing core.

Each error carries the HTTP status it maps to and renders as the
``{message, error?}`` body returned to clients.
"""
from typing import Optional, Dict, Any
from fastapi import Request, status
from fastapi.responses import JSONResponse


class PhotoAppError(Exception):
    """Base exception for all expected failures of the core."""

    status_code = status.HTTP_500_INTERNAL_SERVER_ERROR

    def __init__(self, message: str, error: Optional[str] = None):
        super().__init__(message)
        self.message = message
        self.error = error

    def to_dict(self) -> Dict[str, Any]:
        body = {"message": self.message}
        if self.error:
            body["error"] = self.error
        return body


class ValidationError(PhotoAppError):
    """Malformed identity, empty text, rejected upload."""
    status_code = status.HTTP_400_BAD_REQUEST


class UnauthorizedError(PhotoAppError):
    """No session identity on the request."""
    status_code = status.HTTP_401_UNAUTHORIZED

    def __init__(self, message: str = "Unauthorized"):
        super().__init__(message)


class NotFoundError(PhotoAppError):
    status_code = status.HTTP_404_NOT_FOUND


class NotFoundOrForbiddenError(PhotoAppError):
    """
    Ownership-opaque failure.

    Raised both when the entity does not exist and when it belongs to someone
    else; the message never depends on which case occurred.
    """
    status_code = status.HTTP_404_NOT_FOUND

    def __init__(self, entity: str, action: str):
        super().__init__(
            f"{entity} not found or you do not have permission to {action} it"
        )
        self.entity = entity
        self.action = action


class StorageError(PhotoAppError):
    """Upload destination could not be written."""
    status_code = status.HTTP_500_INTERNAL_SERVER_ERROR


async def photo_app_exception_handler(request: Request, exc: PhotoAppError) -> JSONResponse:
    """Render a PhotoAppError as its status code and ``{message, error?}`` body."""
    return JSONResponse(status_code=exc.status_code, content=exc.to_dict())
