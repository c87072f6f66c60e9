"""Shared exceptions module."""

from typing import Optional


class TelemetryException(Exception):
    """Base exception for the telemetry client."""

    pass


class StorageException(TelemetryException):
    """Raised when a key-value store operation fails."""

    def __init__(self, message: Optional[str] = "Storage operation failed"):
        """Create a new StorageException instance.

        Args:
        ----
            message (str, optional): The error message. Has default message.

        """
        self.message = message
        super().__init__(self.message)


class IngestError(TelemetryException):
    """Raised when the ingest endpoint does not accept a payload."""

    def __init__(self, message: str, status_code: Optional[int] = None):
        """Create a new IngestError instance.

        Args:
        ----
            message (str): The error message.
            status_code (int, optional): HTTP status, None for transport failures.

        """
        self.message = message
        self.status_code = status_code
        super().__init__(self.message)

    @property
    def retryable(self) -> bool:
        """Whether resending the same payload later may succeed."""
        return True


class IngestRejectedError(IngestError):
    """The endpoint refused the payload itself (4xx other than 408/429)."""

    @property
    def retryable(self) -> bool:
        """Resending an identical payload will be refused again."""
        return False


class IngestUnavailableError(IngestError):
    """The endpoint was unreachable, timed out, throttled, or returned 5xx."""

    pass
