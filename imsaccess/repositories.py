"""Repository management on top of the registry."""

from imsaccess.access import AccountAccessManager
from imsaccess.interfaces import RepositoryRegistry, iter_images, iter_repositories
from imsaccess.logging import get_logger
from imsaccess.types import Image, Repository
from imsaccess.validation import validate_owner, validate_repository_name, validate_tag

logger = get_logger("repositories")


class RepositoryService:
    """Manages repositories and their images, keeping new repositories in line with the ledger."""

    def __init__(
        self, registry: RepositoryRegistry, access: AccountAccessManager
    ) -> None:
        self.registry = registry
        self.access = access

    def create_repository(self, owner: str, name: str) -> Repository:
        """
        Create ``owner/name`` and seed its policy with every granted account.

        The repository is returned only once seeding has succeeded.

        Raises:
            ValidationError: If the owner or name is empty or contains '/'
            RegistryError: If the registry rejects the creation
            FanoutError: If seeding the policy fails; the repository exists
                but has not been seeded, and can be fixed by granting any
                account again
        """
        validate_owner(owner)
        validate_repository_name(name)

        repository = self.registry.create_repository(f"{owner}/{name}")
        self.access.seed_repository(repository)

        logger.info("Created repository %s", repository.full_name)
        return repository

    def delete_repository(self, owner: str, name: str) -> None:
        """Delete ``owner/name`` together with any images it still holds."""
        validate_owner(owner)
        validate_repository_name(name)

        self.registry.delete_repository(f"{owner}/{name}", force=True)
        logger.info("Deleted repository %s/%s", owner, name)

    def get_repository(self, owner: str, name: str) -> Repository:
        validate_owner(owner)
        validate_repository_name(name)
        return self.registry.describe_repository(f"{owner}/{name}")

    def list_repositories(self, owner: str | None = None) -> list[Repository]:
        """List every repository, or only those belonging to ``owner``."""
        return [
            repo
            for repo in iter_repositories(self.registry)
            if owner is None or repo.owner == owner
        ]

    def list_images(self, owner: str, name: str) -> list[Image]:
        """List every image in ``owner/name``, across all listing pages."""
        validate_owner(owner)
        validate_repository_name(name)
        return list(iter_images(self.registry, f"{owner}/{name}"))

    def get_image(self, owner: str, name: str, tag: str) -> Image:
        """
        Describe the image tagged ``tag`` in ``owner/name``.

        Raises:
            ValidationError: If the owner, name or tag is invalid
            NotFoundError: If the repository or tag does not exist
        """
        validate_owner(owner)
        validate_repository_name(name)
        validate_tag(tag)
        return self.registry.describe_image(f"{owner}/{name}", tag)

    def delete_image(self, owner: str, name: str, tag: str) -> None:
        validate_owner(owner)
        validate_repository_name(name)
        validate_tag(tag)

        self.registry.delete_image(f"{owner}/{name}", tag)
        logger.info("Deleted image %s/%s:%s", owner, name, tag)
