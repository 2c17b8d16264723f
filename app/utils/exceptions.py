from __future__ import annotations

from typing import Any, Optional


class CatalogException(Exception):
    """Base exception for the catalog application.

    API response format is handled by the global exception handler.
    """

    def __init__(
        self,
        message: str | None = None,
        *,
        details: Optional[dict[str, Any]] = None,
        status_code: int = 500,
    ):
        self.message = message or "Internal server error"
        self.details = details or {}
        self.status_code = status_code
        super().__init__(self.message)

    def to_dict(self) -> dict:
        return {"error": self.message}


class BadRequestException(CatalogException):
    def __init__(self, message: str | None = None, *, details: Optional[dict[str, Any]] = None):
        super().__init__(message or "Bad request", details=details, status_code=400)


class UnauthorizedException(CatalogException):
    def __init__(self, message: str | None = None, *, details: Optional[dict[str, Any]] = None):
        super().__init__(message or "Unauthorized", details=details, status_code=401)


class ForbiddenException(CatalogException):
    def __init__(self, message: str | None = None, *, details: Optional[dict[str, Any]] = None):
        super().__init__(message or "Forbidden", details=details, status_code=403)


class NotFoundException(CatalogException):
    def __init__(self, message: str | None = None, *, details: Optional[dict[str, Any]] = None):
        super().__init__(message or "Not found", details=details, status_code=404)


class ConflictException(CatalogException):
    def __init__(self, message: str | None = None, *, details: Optional[dict[str, Any]] = None):
        super().__init__(message or "Conflict", details=details, status_code=409)


class ImageUploadError(CatalogException):
    """The image host rejected or failed an upload.

    Rendered as a plain 500 to the client; the cause is logged, not returned.
    """

    def __init__(self, message: str | None = None, *, details: Optional[dict[str, Any]] = None):
        super().__init__(message or "Unable to upload image", details=details, status_code=500)

    def to_dict(self) -> dict:
        return {"error": "Internal server error"}
