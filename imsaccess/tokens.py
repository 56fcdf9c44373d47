"""
Bearer token lifecycle.

Tokens are opaque random strings stored in a key-value table keyed by the
token itself, with the owning user as an attribute. A token is valid for as
long as its record exists; there is no expiry.
"""

import secrets

from imsaccess.exceptions import StoreError
from imsaccess.interfaces import KeyValueStore
from imsaccess.logging import get_logger, mask_token

logger = get_logger("tokens")

TOKEN_BYTES = 32


def generate_token() -> str:
    """Return a fresh URL-safe random token."""
    return secrets.token_urlsafe(TOKEN_BYTES)


class TokenManager:
    """
    Creates, deletes and authenticates bearer tokens.

    When ``user_index`` is given, each user has at most one live token: a new
    :meth:`create_token` call deletes the user's previous token. Without it,
    every created token stays live until deleted.

    Example:
        ```python
        manager = TokenManager(store, user_index=index_store)
        token = manager.create_token("alice")
        assert manager.authenticate("alice", token)
        manager.delete_token(token)
        ```
    """

    def __init__(
        self,
        store: KeyValueStore,
        user_index: KeyValueStore | None = None,
    ) -> None:
        """
        Initialize the token manager.

        Args:
            store: Table holding ``{User, Token}`` records keyed by token
            user_index: Optional table mapping each user to their current token
        """
        self.store = store
        self.user_index = user_index

    def create_token(self, user: str) -> str:
        """
        Create a token for ``user``.

        Returns:
            The new token

        Raises:
            StoreError: If a store write fails
        """
        token = generate_token()
        self.store.put_item(token, {"User": user, "Token": token})

        if self.user_index is not None:
            try:
                previous = self.user_index.get_item(user, consistent_read=True)
                self.user_index.put_item(user, {"User": user, "Token": token})
            except StoreError:
                # A token the caller never received must not stay live.
                self.store.delete_item(token)
                raise

            if previous and previous.get("Token") and previous["Token"] != token:
                self.store.delete_item(previous["Token"])
                logger.info("Replaced token %s for user %s", mask_token(previous["Token"]), user)

        logger.info("Created token %s for user %s", mask_token(token), user)
        return token

    def delete_token(self, token: str) -> None:
        """
        Delete ``token``. Deleting an unknown token is not an error.

        Raises:
            StoreError: If the store delete fails
        """
        item = None
        if self.user_index is not None:
            item = self.store.get_item(token, consistent_read=True)

        self.store.delete_item(token)

        if item and item.get("User"):
            current = self.user_index.get_item(item["User"], consistent_read=True)
            if current and current.get("Token") == token:
                self.user_index.delete_item(item["User"])

        logger.info("Deleted token %s", mask_token(token))

    def authenticate(self, user: str, token: str) -> bool:
        """
        Check whether ``token`` is live.

        The lookup is keyed by the token alone; the record's existence is the
        only proof of validity. ``user`` is only used for logging.

        Returns:
            True if a record exists for the token, False otherwise

        Raises:
            StoreError: If the store lookup fails
        """
        if not token:
            return False

        item = self.store.get_item(token, consistent_read=True)
        if item is None:
            logger.debug("Rejected token %s presented by %s", mask_token(token), user)
            return False

        return True
