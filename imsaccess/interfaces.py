"""
Capabilities the access core consumes.

The managers receive these as constructor arguments; production wiring uses
:mod:`imsaccess.registry` and :mod:`imsaccess.store`, tests use the fakes in
:mod:`imsaccess.testing`.
"""

from collections.abc import Iterator
from typing import Any, Protocol, runtime_checkable

from imsaccess.types import Image, ImagePage, Repository, RepositoryPage


@runtime_checkable
class RepositoryRegistry(Protocol):
    """Control-plane operations on the managed image registry."""

    def list_repositories(self, next_token: str | None = None) -> RepositoryPage:
        """
        Return one page of repositories.

        Args:
            next_token: Continuation token from the previous page, or None for the first page

        Raises:
            RegistryError: If the listing call fails
        """
        ...

    def describe_repository(self, name: str) -> Repository:
        """
        Look up a single repository by ``owner/name``.

        Raises:
            NotFoundError: If the repository does not exist
        """
        ...

    def get_policy(self, name: str) -> str:
        """Return the repository's policy text, or "" when none is attached."""
        ...

    def set_policy(self, name: str, text: str) -> None:
        """Replace the repository's policy; "" clears it."""
        ...

    def create_repository(self, name: str) -> Repository:
        ...

    def delete_repository(self, name: str, force: bool = False) -> None:
        ...

    def list_images(self, name: str, next_token: str | None = None) -> ImagePage:
        """
        Return one page of the images stored in repository ``name``.

        Raises:
            NotFoundError: If the repository does not exist
        """
        ...

    def describe_image(self, name: str, tag: str) -> Image:
        """
        Look up the image tagged ``tag`` in repository ``name``.

        Raises:
            NotFoundError: If the repository or the tag does not exist
        """
        ...

    def delete_image(self, name: str, tag: str) -> None:
        """
        Delete the image tagged ``tag`` from repository ``name``.

        Raises:
            NotFoundError: If the repository or the tag does not exist
        """
        ...


@runtime_checkable
class KeyValueStore(Protocol):
    """A single table of items addressed by a string key."""

    def put_item(self, key: str, attributes: dict[str, Any]) -> None:
        """
        Create or overwrite the item at ``key``.

        Raises:
            StoreError: If the write fails
        """
        ...

    def get_item(self, key: str, consistent_read: bool = False) -> dict[str, Any] | None:
        """
        Return the item at ``key`` or None when absent.

        Args:
            consistent_read: Reflect every write acknowledged before this call

        Raises:
            StoreError: If the read fails
        """
        ...

    def delete_item(self, key: str) -> None:
        """Delete the item at ``key``; deleting an absent key is not an error."""
        ...


def iter_repositories(registry: RepositoryRegistry) -> Iterator[Repository]:
    """
    Lazily walk every page of the registry's repository listing.

    Each call starts again from the first page.
    """
    next_token: str | None = None
    while True:
        page = registry.list_repositories(next_token)
        yield from page.repositories
        next_token = page.next_token
        if not next_token:
            return


def list_all_repositories(registry: RepositoryRegistry) -> list[Repository]:
    """Drain the full listing; a partial listing raises instead of being returned."""
    return list(iter_repositories(registry))


def iter_images(registry: RepositoryRegistry, name: str) -> Iterator[Image]:
    """Lazily walk every page of repository ``name``'s image listing."""
    next_token: str | None = None
    while True:
        page = registry.list_images(name, next_token)
        yield from page.images
        next_token = page.next_token
        if not next_token:
            return
