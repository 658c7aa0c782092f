"""
Test that all modules import correctly.
Catches circular imports early.
"""
import importlib

import pytest


MODULES = [
    "catalog.config",
    "catalog.errors",
    "catalog.logger",
    "catalog.sentry",
    "catalog.models.product",
    "catalog.store",
    "catalog.store.file_store",
    "catalog.store.redis_store",
    "catalog.services.remote_source",
    "catalog.coordinator",
    "catalog.query",
    "catalog.mutations",
    "catalog.invalidation",
    "catalog.views",
    "catalog.utils.debounce",
    "catalog.utils.retry",
    "catalog.catalog",
    "catalog.health",
    "catalog.main",
]


@pytest.mark.parametrize("module_name", MODULES)
def test_imports(module_name):
    importlib.import_module(module_name)
