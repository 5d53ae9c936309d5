"""Domain exceptions raised by the service layer.

Each exception is an ``HTTPException`` so it propagates through FastAPI
unchanged; ``app.errors`` renders all of them as ``{"error": ...}`` bodies.
"""

from fastapi import HTTPException, status


class AppError(HTTPException):
    """Base class for expected, client-facing failures."""

    def __init__(
        self,
        detail: str,
        status_code: int = status.HTTP_500_INTERNAL_SERVER_ERROR,
        code: str | None = None,
    ):
        super().__init__(status_code=status_code, detail=detail)
        self.code = code


class ValidationError(AppError):
    """Malformed or missing input (400).

    ``code`` carries a stable machine-readable reason, e.g. ``MISSING_NIGHT_PRICE``.
    """

    def __init__(self, detail: str, code: str | None = None):
        super().__init__(detail=detail, status_code=status.HTTP_400_BAD_REQUEST, code=code)


class ForbiddenError(AppError):
    def __init__(self, detail: str = "You do not have permission to perform this action"):
        super().__init__(detail=detail, status_code=status.HTTP_403_FORBIDDEN)


class NotFoundError(AppError):
    def __init__(self, resource: str):
        super().__init__(detail=f"{resource} not found", status_code=status.HTTP_404_NOT_FOUND)


class ConflictError(AppError):
    def __init__(self, detail: str):
        super().__init__(detail=detail, status_code=status.HTTP_409_CONFLICT)
