"""
Fleet-wide account access.

Granting or revoking an account rewrites the policy document of every
repository in the registry, then records the change in the ledger. Ledger
commits happen once, after the whole fan-out, so a failed pass never records
success.
"""

import threading
import time
from collections.abc import Callable, Iterable

from imsaccess.exceptions import DeadlineExceededError, FanoutError, ImsError
from imsaccess.interfaces import RepositoryRegistry, list_all_repositories
from imsaccess.ledger import AccountLedger
from imsaccess.logging import get_logger
from imsaccess.policy import PolicyDocument
from imsaccess.types import Repository
from imsaccess.validation import validate_account

logger = get_logger("access")


class AccountAccessManager:
    """
    Keeps every repository policy in line with the granted-accounts ledger.

    The per-repository update is a read-modify-write of the policy document.
    It is applied sequentially; the first failure aborts the pass with a
    :class:`FanoutError` and repositories already rewritten are left as they
    are. Retrying the same call converges the fleet because adding or
    removing a principal is idempotent.

    Grant, revoke and seed calls on one manager are serialized by a lock so
    overlapping calls cannot lose each other's ledger update.

    Example:
        ```python
        manager = AccountAccessManager(registry, StoreAccountLedger(store))
        manager.grant_access("111122223333")
        manager.accounts()  # ["111122223333"]
        ```
    """

    def __init__(
        self,
        registry: RepositoryRegistry,
        ledger: AccountLedger,
        fanout_deadline: float | None = None,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        """
        Initialize the access manager.

        Args:
            registry: Registry holding the repositories and their policies
            ledger: Ledger of granted accounts
            fanout_deadline: Seconds a single grant/revoke pass may take (default: unlimited)
            clock: Monotonic clock used for the deadline
        """
        self.registry = registry
        self.ledger = ledger
        self.fanout_deadline = fanout_deadline
        self._clock = clock
        self._lock = threading.Lock()

    def accounts(self) -> list[str]:
        """Return the granted accounts, sorted."""
        return sorted(self.ledger.load())

    def grant_access(self, account: str) -> None:
        """
        Grant ``account`` pull/push access on every repository.

        Raises:
            ValidationError: If the account is empty
            RegistryError: If the repository listing fails (nothing was changed)
            FanoutError: If a repository update fails part-way through the pass
            StoreError: If the ledger cannot be read or written
        """
        account = validate_account(account)

        with self._lock:
            repositories = list_all_repositories(self.registry)
            accounts = self.ledger.load()
            accounts.add(account)

            logger.info(
                "Granting account %s on %d repositories", account, len(repositories)
            )

            def grant(doc: PolicyDocument) -> None:
                for a in accounts:
                    doc.add_principal(a)

            self._fan_out(repositories, grant)
            self.ledger.save(accounts)

        logger.info("Granted account %s", account)

    def revoke_access(self, account: str) -> None:
        """
        Revoke ``account`` from every repository.

        Repositories left without principals get their policy cleared by
        writing empty policy text.

        Raises:
            ValidationError: If the account is empty
            RegistryError: If the repository listing fails (nothing was changed)
            FanoutError: If a repository update fails part-way through the pass
            StoreError: If the ledger cannot be read or written
        """
        account = validate_account(account)

        with self._lock:
            repositories = list_all_repositories(self.registry)
            accounts = self.ledger.load()
            accounts.discard(account)

            logger.info(
                "Revoking account %s on %d repositories", account, len(repositories)
            )

            self._fan_out(repositories, lambda doc: doc.remove_principal(account))
            self.ledger.save(accounts)

        logger.info("Revoked account %s", account)

    def seed_repository(self, repository: Repository | str) -> None:
        """
        Add every granted account to a single repository's policy.

        Used when a repository is created so that it starts out with the same
        principals as the rest of the fleet.

        Raises:
            FanoutError: If the policy read or write fails
            StoreError: If the ledger cannot be read
        """
        if isinstance(repository, str):
            repository = Repository.from_full_name(repository)

        with self._lock:
            accounts = self.ledger.load()

            def seed(doc: PolicyDocument) -> None:
                for a in accounts:
                    doc.add_principal(a)

            self._fan_out([repository], seed)

        logger.info(
            "Seeded repository %s with %d accounts", repository.full_name, len(accounts)
        )

    def _fan_out(
        self,
        repositories: Iterable[Repository],
        mutate: Callable[[PolicyDocument], None],
    ) -> list[str]:
        started = self._clock()
        completed: list[str] = []

        for repository in repositories:
            name = repository.full_name

            if self.fanout_deadline is not None:
                elapsed = self._clock() - started
                if elapsed > self.fanout_deadline:
                    cause = DeadlineExceededError(
                        f"fan-out exceeded {self.fanout_deadline:g}s "
                        f"with {len(completed)} repositories updated"
                    )
                    logger.error("Aborting fan-out before %s: %s", name, cause.message)
                    raise FanoutError(name, completed, cause) from cause

            try:
                self._update_policy(name, mutate)
            except ImsError as e:
                logger.error(
                    "Policy update failed on %s after %d repositories: %s",
                    name,
                    len(completed),
                    e,
                )
                raise FanoutError(name, completed, e) from e

            completed.append(name)
            logger.debug("Updated policy on %s", name)

        return completed

    def _update_policy(
        self, name: str, mutate: Callable[[PolicyDocument], None]
    ) -> None:
        doc = PolicyDocument.parse_policy_text(self.registry.get_policy(name))
        mutate(doc)
        self.registry.set_policy(name, doc.render_policy_text())
