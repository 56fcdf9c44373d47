"""Environment-driven settings."""

import os
from collections.abc import Mapping
from dataclasses import dataclass

from imsaccess.exceptions import ConfigurationError


def _parse_float(env: Mapping[str, str], name: str, default: float | None) -> float | None:
    raw = env.get(name)
    if raw is None or raw == "":
        return default
    try:
        value = float(raw)
    except ValueError:
        raise ConfigurationError(f"{name} must be a number, got '{raw}'") from None
    if value <= 0:
        raise ConfigurationError(f"{name} must be positive, got '{raw}'")
    return value


@dataclass
class Settings:
    """Runtime configuration for :class:`imsaccess.AccessControl`."""

    registry_url: str
    registry_api_key: str | None = None
    database_url: str = "sqlite:///imsaccess.db"
    token_table: str = "tokens"
    token_index_table: str = "token_users"
    account_table: str = "accounts"
    timeout: float = 30.0
    fanout_deadline: float | None = None

    @classmethod
    def from_env(cls, env: Mapping[str, str] | None = None) -> "Settings":
        """
        Read settings from environment variables.

        Environment variables:
            IMS_REGISTRY_URL: Base URL of the registry API (required)
            IMS_REGISTRY_API_KEY: Bearer credential for the registry API (optional)
            IMS_DATABASE_URL: SQLAlchemy URL of the token/ledger database (default: sqlite:///imsaccess.db)
            IMS_TOKEN_TABLE: Table holding tokens (default: tokens)
            IMS_TOKEN_INDEX_TABLE: Table mapping users to their current token (default: token_users)
            IMS_ACCOUNT_TABLE: Table holding the granted-accounts ledger (default: accounts)
            IMS_TIMEOUT: Registry request timeout in seconds (default: 30)
            IMS_FANOUT_DEADLINE: Seconds a grant/revoke pass may take (optional)

        Raises:
            ConfigurationError: If a required variable is missing or a value is invalid
        """
        if env is None:
            env = os.environ

        registry_url = env.get("IMS_REGISTRY_URL")
        if not registry_url:
            raise ConfigurationError("IMS_REGISTRY_URL environment variable not set")

        return cls(
            registry_url=registry_url,
            registry_api_key=env.get("IMS_REGISTRY_API_KEY") or None,
            database_url=env.get("IMS_DATABASE_URL", cls.database_url),
            token_table=env.get("IMS_TOKEN_TABLE", cls.token_table),
            token_index_table=env.get("IMS_TOKEN_INDEX_TABLE", cls.token_index_table),
            account_table=env.get("IMS_ACCOUNT_TABLE", cls.account_table),
            timeout=_parse_float(env, "IMS_TIMEOUT", cls.timeout),
            fanout_deadline=_parse_float(env, "IMS_FANOUT_DEADLINE", None),
        )
