"""Custom exceptions for the disc catalog."""


class DiscCatalogError(Exception):
    """Base exception for disc catalog errors."""
    pass


class ConfigurationError(DiscCatalogError):
    """Raised when there's an error in configuration."""
    pass


class ValidationError(DiscCatalogError):
    """Raised when a record is missing required fields or holds invalid values."""
    pass


class NotFoundError(DiscCatalogError):
    """Raised when a record does not exist in the store."""
    pass


class StoreError(DiscCatalogError):
    """Raised when the catalog store rejects or fails a request."""
    pass


class ServiceUnavailableError(DiscCatalogError):
    """Raised when an external catalog reports that it is temporarily busy (HTTP 503)."""

    def __init__(self, service: str, message: str = ""):
        self.service = service
        super().__init__(
            message or f"{service} service temporarily unavailable. Please wait a moment and try again."
        )
