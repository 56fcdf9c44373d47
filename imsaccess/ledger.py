"""Ledger of accounts granted fleet-wide access."""

from typing import Protocol, runtime_checkable

from imsaccess.exceptions import StoreError
from imsaccess.interfaces import KeyValueStore

LEDGER_KEY = "granted-accounts"


@runtime_checkable
class AccountLedger(Protocol):
    """The authoritative set of granted accounts."""

    def load(self) -> set[str]:
        ...

    def save(self, accounts: set[str]) -> None:
        ...


class StoreAccountLedger:
    """Keeps the whole account set in a single key-value item."""

    def __init__(self, store: KeyValueStore, key: str = LEDGER_KEY) -> None:
        self.store = store
        self.key = key

    def load(self) -> set[str]:
        item = self.store.get_item(self.key, consistent_read=True)
        if item is None:
            return set()

        accounts = item.get("Accounts", [])
        if not isinstance(accounts, list):
            raise StoreError(
                "CORRUPT_LEDGER",
                f"Item '{self.key}' has a malformed 'Accounts' attribute",
            )
        return set(accounts)

    def save(self, accounts: set[str]) -> None:
        self.store.put_item(self.key, {"Accounts": sorted(accounts)})
