"""
Domain exceptions for the catalog cache.
Every failure the core can report has a type here.
"""


class CatalogError(Exception):
    """Base class for all catalog failures."""
    pass


class ConfigError(CatalogError):
    """Raised when required configuration is missing or invalid."""
    pass


class NetworkError(CatalogError):
    """Raised when the upstream catalog is unreachable or answers with a non-success status."""
    pass


class FormatError(CatalogError):
    """Raised when a remote or persisted payload is not a well-formed product array."""
    pass


class LoadError(CatalogError):
    """Raised by the cache coordinator when the snapshot could not be obtained."""

    def __init__(self, message: str, reason: Exception = None):
        super().__init__(message)
        self.reason = reason


class StorageError(CatalogError):
    """Raised when a durable store operation fails."""
    pass


class NotFoundError(CatalogError):
    """Raised when a product id is not present in the snapshot."""

    def __init__(self, product_id: int):
        super().__init__(f"Product {product_id} not found")
        self.product_id = product_id


class InvalidQueryError(CatalogError):
    """Raised when a query spec violates its contract."""
    pass


class InvalidProductError(CatalogError):
    """Raised when a draft or patch fails product validation."""
    pass


class RetryExhaustedError(CatalogError):
    """Raised when all retry attempts for an operation are exhausted."""
    pass
