"""
Pytest fixtures for testing code built on imsaccess.
"""

from collections.abc import Generator

import pytest

from imsaccess.access import AccountAccessManager
from imsaccess.ledger import StoreAccountLedger
from imsaccess.repositories import RepositoryService
from imsaccess.testing.fakes import MemoryRegistry, MemoryStore
from imsaccess.tokens import TokenManager


# ============================================================================
# Fakes
# ============================================================================


@pytest.fixture
def memory_registry() -> Generator[MemoryRegistry, None, None]:
    """
    Provide a MemoryRegistry holding ``acme/api`` and ``acme/web``.

    Example:
        ```python
        def test_grant(access_manager, memory_registry):
            access_manager.grant_access("111")
            assert memory_registry.principals("acme/api") == {"111"}
        ```
    """
    registry = MemoryRegistry(["acme/api", "acme/web"])
    yield registry
    registry.clear_errors()


@pytest.fixture
def ledger_store() -> MemoryStore:
    """Provide an empty store for the granted-accounts ledger."""
    return MemoryStore()


@pytest.fixture
def token_store() -> MemoryStore:
    """Provide an empty token table."""
    return MemoryStore()


@pytest.fixture
def token_index_store() -> MemoryStore:
    """Provide an empty user-to-token index table."""
    return MemoryStore()


# ============================================================================
# Managers
# ============================================================================


@pytest.fixture
def ledger(ledger_store: MemoryStore) -> StoreAccountLedger:
    return StoreAccountLedger(ledger_store)


@pytest.fixture
def access_manager(
    memory_registry: MemoryRegistry, ledger: StoreAccountLedger
) -> AccountAccessManager:
    """Provide an AccountAccessManager over the in-memory registry and ledger."""
    return AccountAccessManager(memory_registry, ledger)


@pytest.fixture
def token_manager(
    token_store: MemoryStore, token_index_store: MemoryStore
) -> TokenManager:
    """Provide a TokenManager that keeps one live token per user."""
    return TokenManager(token_store, user_index=token_index_store)


@pytest.fixture
def repository_service(
    memory_registry: MemoryRegistry, access_manager: AccountAccessManager
) -> RepositoryService:
    return RepositoryService(memory_registry, access_manager)
