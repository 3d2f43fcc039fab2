"""Error taxonomy for the audit engine."""

from typing import Optional


class SeoScanError(Exception):
    """Base class for every error raised by the audit engine."""

    def __init__(self, message: str):
        self.message = message
        super().__init__(message)


class FetchError(SeoScanError):
    """Raised when the target page cannot be fetched (unreachable, non-2xx, timeout)."""

    def __init__(self, message: str, status_code: Optional[int] = None, reason: Optional[str] = None):
        self.status_code = status_code
        self.reason = reason
        super().__init__(message)


class PerformanceProviderError(SeoScanError):
    """Raised when the page-speed provider fails or returns a malformed response."""

    def __init__(self, message: str, status_code: Optional[int] = None, strategy: Optional[str] = None):
        self.status_code = status_code
        self.strategy = strategy
        super().__init__(message)


class ValidationError(SeoScanError):
    """Raised for malformed input rejected before an audit is created."""

    def __init__(self, message: str, field: Optional[str] = None):
        self.field = field
        super().__init__(message)


class PreconditionError(SeoScanError):
    """Raised when an operation is not allowed in the audit's current state."""


class NotFoundError(SeoScanError):
    """Raised for operations on an unknown audit id."""

    def __init__(self, audit_id: str):
        self.audit_id = audit_id
        super().__init__(f"Audit not found: {audit_id}")


class ReportNotReadyError(SeoScanError):
    """Raised when a report is requested for an audit that has not completed."""

    def __init__(self, audit_id: str, status: str):
        self.audit_id = audit_id
        self.status = status
        super().__init__(f"Audit {audit_id} is not completed yet (status: {status})")


class StorageError(SeoScanError):
    """Raised when the storage backend is unavailable or fails."""
