"""Exception hierarchy shared across the CV builder."""

from typing import Optional


class CVBuilderError(Exception):
    """Base class for all CV builder errors."""


class ExportError(CVBuilderError):
    """Raised when rendering an export artifact fails."""


class ExportTimeoutError(ExportError):
    """Raised when an export takes longer than the configured timeout."""


class ExportCancelledError(ExportError):
    """Raised when an in-flight export is cancelled by the caller."""


class RemoteAPIError(CVBuilderError):
    """
    Error returned by the remote CV API, carrying a user-facing message.

    Args:
        status_code: HTTP status code, or None for network failures
        message: Message safe to show to the user
    """

    def __init__(self, status_code: Optional[int], message: str):
        super().__init__(message)
        self.status_code = status_code
        self.message = message
