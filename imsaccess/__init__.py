"""imsaccess - registry access control and API tokens."""

from imsaccess.access import AccountAccessManager
from imsaccess.client import AccessControl
from imsaccess.config import Settings
from imsaccess.exceptions import (
    ConfigurationError,
    DeadlineExceededError,
    EncodingError,
    FanoutError,
    ImsError,
    NotFoundError,
    RegistryError,
    StoreError,
    ValidationError,
)
from imsaccess.interfaces import KeyValueStore, RepositoryRegistry, iter_images, iter_repositories
from imsaccess.ledger import AccountLedger, StoreAccountLedger
from imsaccess.logging import configure_logging, get_logger
from imsaccess.policy import PolicyDocument
from imsaccess.registry import HTTPRepositoryRegistry
from imsaccess.repositories import RepositoryService
from imsaccess.store import SQLKeyValueStore
from imsaccess.tokens import TokenManager
from imsaccess.transport import HTTPTransport, RetryConfig
from imsaccess.types import Image, ImagePage, Repository, RepositoryPage

__version__ = "0.1.0"

__all__ = [
    "__version__",
    # Wiring
    "AccessControl",
    "Settings",
    # Core
    "AccountAccessManager",
    "TokenManager",
    "PolicyDocument",
    "RepositoryService",
    # Capabilities
    "RepositoryRegistry",
    "KeyValueStore",
    "AccountLedger",
    "iter_repositories",
    "iter_images",
    # Adapters
    "HTTPRepositoryRegistry",
    "SQLKeyValueStore",
    "StoreAccountLedger",
    # Types
    "Repository",
    "RepositoryPage",
    "Image",
    "ImagePage",
    # Exceptions
    "ImsError",
    "ConfigurationError",
    "ValidationError",
    "StoreError",
    "RegistryError",
    "NotFoundError",
    "EncodingError",
    "FanoutError",
    "DeadlineExceededError",
    # Transport
    "HTTPTransport",
    "RetryConfig",
    # Logging
    "configure_logging",
    "get_logger",
]
