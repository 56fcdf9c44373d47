"""
Top-level wiring of the access core.

Builds the registry client, the SQL-backed stores and the managers from one
set of settings.
"""

from typing import Any

from sqlalchemy.engine import Engine

from imsaccess.access import AccountAccessManager
from imsaccess.config import Settings
from imsaccess.ledger import StoreAccountLedger
from imsaccess.registry import HTTPRepositoryRegistry
from imsaccess.repositories import RepositoryService
from imsaccess.store import SQLKeyValueStore, make_engine
from imsaccess.tokens import TokenManager
from imsaccess.transport import HTTPTransport, RetryConfig


class AccessControl:
    """
    Aggregates the access, token and repository services.

    Example:
        ```python
        from imsaccess import AccessControl

        with AccessControl.from_env() as ac:
            ac.access.grant_access("111122223333")
            token = ac.tokens.create_token("alice")
            ac.repositories.create_repository("acme", "api")
        ```
    """

    def __init__(
        self,
        settings: Settings,
        retry_config: RetryConfig | None = None,
        engine: Engine | None = None,
    ) -> None:
        """
        Initialize from settings.

        Args:
            settings: Runtime configuration
            retry_config: Retry behavior for registry calls (optional)
            engine: SQLAlchemy engine to use instead of one built from settings.database_url
        """
        self.settings = settings

        self._transport = HTTPTransport(
            base_url=settings.registry_url,
            api_key=settings.registry_api_key,
            timeout=settings.timeout,
            retry_config=retry_config,
        )
        self._owns_engine = engine is None
        self._engine = engine or make_engine(settings.database_url)

        self.registry = HTTPRepositoryRegistry(self._transport)
        self.access = AccountAccessManager(
            self.registry,
            StoreAccountLedger(SQLKeyValueStore(self._engine, settings.account_table)),
            fanout_deadline=settings.fanout_deadline,
        )
        self.tokens = TokenManager(
            SQLKeyValueStore(self._engine, settings.token_table),
            user_index=SQLKeyValueStore(self._engine, settings.token_index_table),
        )
        self.repositories = RepositoryService(self.registry, self.access)

    @classmethod
    def from_env(cls, retry_config: RetryConfig | None = None) -> "AccessControl":
        """
        Create from environment variables (see :meth:`Settings.from_env`).

        Raises:
            ConfigurationError: If required environment variables are missing
        """
        return cls(Settings.from_env(), retry_config=retry_config)

    @property
    def transport(self) -> HTTPTransport:
        """Get the underlying HTTP transport (for advanced use cases)."""
        return self._transport

    def close(self) -> None:
        """Close the HTTP client and dispose of the engine if this object created it."""
        self._transport.close()
        if self._owns_engine:
            self._engine.dispose()

    def __enter__(self) -> "AccessControl":
        return self

    def __exit__(self, *args: Any) -> None:
        self.close()
