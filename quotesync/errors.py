from __future__ import annotations


class QuoteSyncError(Exception):
    """Base class for quotesync failures."""


class ValidationError(QuoteSyncError, ValueError):
    def __init__(self, field: str, message: str | None = None) -> None:
        self.field = field
        super().__init__(message or f"{field} must not be empty")


class RemoteUnavailable(QuoteSyncError):
    def __init__(self, operation: str, detail: str, *, status: int | None = None) -> None:
        self.operation = operation
        self.status = status
        self.detail = detail
        suffix = f" ({status})" if status is not None else ""
        super().__init__(f"{operation} failed{suffix}: {detail}")


class ImportFormatError(QuoteSyncError, ValueError):
    pass


class PersistenceFailure(QuoteSyncError):
    pass
