"""
Pytest plugin for imsaccess testing fixtures.

To use these fixtures in your tests, add this to your conftest.py:

    pytest_plugins = ["imsaccess.testing.conftest"]
"""

from imsaccess.testing.fixtures import (
    access_manager,
    ledger,
    ledger_store,
    memory_registry,
    repository_service,
    token_index_store,
    token_manager,
    token_store,
)

__all__ = [
    "memory_registry",
    "ledger_store",
    "token_store",
    "token_index_store",
    "ledger",
    "access_manager",
    "token_manager",
    "repository_service",
]
