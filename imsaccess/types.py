"""Repository data models."""

from dataclasses import dataclass, field
from datetime import datetime

REPOSITORY_SEPARATOR = "/"


@dataclass(frozen=True)
class Repository:
    """A registry repository, identified by ``owner/name``."""

    owner: str
    name: str
    uri: str | None = field(default=None, compare=False)
    created_at: datetime | None = field(default=None, compare=False)

    @property
    def full_name(self) -> str:
        if not self.owner:
            return self.name
        return f"{self.owner}{REPOSITORY_SEPARATOR}{self.name}"

    @classmethod
    def from_full_name(cls, full_name: str, **kwargs) -> "Repository":
        """Split ``owner/name``; a name without an owner segment gets an empty owner."""
        owner, sep, name = full_name.partition(REPOSITORY_SEPARATOR)
        if not sep:
            return cls(owner="", name=full_name, **kwargs)
        return cls(owner=owner, name=name, **kwargs)

    def __str__(self) -> str:
        return self.full_name


@dataclass
class RepositoryPage:
    """One page of a repository listing."""

    repositories: list[Repository]
    next_token: str | None = None


@dataclass(frozen=True)
class Image:
    """An image stored in a repository, addressed by tag."""

    repository: str
    digest: str
    tags: tuple[str, ...] = ()
    size_bytes: int | None = field(default=None, compare=False)
    pushed_at: datetime | None = field(default=None, compare=False)


@dataclass
class ImagePage:
    """One page of a repository's image listing."""

    images: list[Image]
    next_token: str | None = None
