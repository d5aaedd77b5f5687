"""Error taxonomy shared by the pipeline, the access gate and the API."""

from __future__ import annotations


class DashboardError(Exception):
    """Base error carrying the HTTP status used to render it."""

    status_code = 500
    default_message = "Internal server error"

    def __init__(self, message: str | None = None) -> None:
        self.message = message or self.default_message
        super().__init__(self.message)


class ValidationError(DashboardError):
    status_code = 422
    default_message = "Invalid request"


class Unauthorized(DashboardError):
    status_code = 401
    default_message = "Unauthorized"


class InvalidCredentials(Unauthorized):
    default_message = "Invalid credentials"


class ScopeMismatch(DashboardError):
    status_code = 403
    default_message = "Access denied"


class NotFound(DashboardError):
    status_code = 404
    default_message = "Not found"


class InternalError(DashboardError):
    status_code = 500
    default_message = "Internal server error"


class SheetImportError(DashboardError):
    """Raised when an import run fails as a whole. No rows are written."""

    status_code = 500
    default_message = "Import failed"
    retryable = False


class InvalidSourceReference(SheetImportError):
    status_code = 400
    default_message = "Invalid spreadsheet reference"


class SourceUnavailable(SheetImportError):
    status_code = 502
    default_message = "Spreadsheet export unavailable"


class DataReplaceError(SheetImportError):
    status_code = 503
    default_message = "Could not replace dashboard data, try again"
    retryable = True


__all__ = [
    "DashboardError",
    "ValidationError",
    "Unauthorized",
    "InvalidCredentials",
    "ScopeMismatch",
    "NotFound",
    "InternalError",
    "SheetImportError",
    "InvalidSourceReference",
    "SourceUnavailable",
    "DataReplaceError",
]
