"""
Catalog Cache - product catalog served from a synchronized local cache.
"""

__version__ = "1.0.0"
__author__ = "Engineering Team"

# Export main components for easy import
from catalog.config import config
from catalog.logger import logger
from catalog.errors import (
    CatalogError,
    ConfigError,
    NetworkError,
    FormatError,
    LoadError,
    StorageError,
    NotFoundError,
    InvalidQueryError,
    InvalidProductError,
    RetryExhaustedError
)

__all__ = [
    'config',
    'logger',
    'CatalogError',
    'ConfigError',
    'NetworkError',
    'FormatError',
    'LoadError',
    'StorageError',
    'NotFoundError',
    'InvalidQueryError',
    'InvalidProductError',
    'RetryExhaustedError'
]
