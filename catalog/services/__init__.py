"""
Services package initialization.
Centralizes service imports.
"""

from catalog.services.remote_source import RemoteSource

__all__ = [
    'RemoteSource'
]
