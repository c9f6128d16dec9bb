"""
Domain exceptions.

Each carries the HTTP status the API layer answers with, so services can
raise them without knowing about FastAPI.
"""


class AppError(Exception):
    status_code = 400

    def __init__(self, message: str = ""):
        super().__init__(message)
        self.message = message


class ValidationError(AppError):
    status_code = 422


class NotFoundError(AppError):
    status_code = 404


class AuthenticationError(AppError):
    status_code = 401


class PermissionDeniedError(AppError):
    status_code = 403


class BackendError(AppError):
    """The hosted backend rejected or failed a query."""
    status_code = 502


class StorageError(AppError):
    """Object storage rejected or failed a request."""
    status_code = 502


class UploadError(StorageError):
    """All upload attempts were exhausted."""


class BackupFormatError(AppError):
    status_code = 400
