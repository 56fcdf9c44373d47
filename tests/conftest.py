from imsaccess.testing.conftest import (  # noqa: F401
    access_manager,
    ledger,
    ledger_store,
    memory_registry,
    repository_service,
    token_index_store,
    token_manager,
    token_store,
)
