"""Registry control-plane client.

Implements :class:`imsaccess.interfaces.RepositoryRegistry` over the
registry's JSON HTTP API.
"""

from datetime import datetime
from typing import Any
from urllib.parse import quote

from imsaccess.exceptions import NotFoundError
from imsaccess.transport import HTTPTransport
from imsaccess.types import Image, ImagePage, Repository, RepositoryPage

POLICY_NOT_FOUND = "POLICY_NOT_FOUND"


def _repository_path(name: str) -> str:
    repo = Repository.from_full_name(name)
    if not repo.owner:
        return f"/v1/repositories/{quote(repo.name, safe='')}"
    return f"/v1/repositories/{quote(repo.owner, safe='')}/{quote(repo.name, safe='')}"


def _image_path(name: str, tag: str) -> str:
    return f"{_repository_path(name)}/images/{quote(tag, safe='')}"


def _parse_timestamp(value: str | None) -> datetime | None:
    return datetime.fromisoformat(value.rstrip("Z")) if value else None


def _parse_repository(data: dict[str, Any]) -> Repository:
    return Repository.from_full_name(
        data["repositoryName"],
        uri=data.get("repositoryUri"),
        created_at=_parse_timestamp(data.get("createdAt")),
    )


def _parse_image(name: str, data: dict[str, Any]) -> Image:
    return Image(
        repository=data.get("repositoryName", name),
        digest=data["imageDigest"],
        tags=tuple(data.get("imageTags") or ()),
        size_bytes=data.get("imageSizeInBytes"),
        pushed_at=_parse_timestamp(data.get("imagePushedAt")),
    )


class HTTPRepositoryRegistry:
    """Repository registry reached over HTTP."""

    DEFAULT_PAGE_SIZE = 100

    def __init__(self, transport: HTTPTransport, page_size: int = DEFAULT_PAGE_SIZE) -> None:
        """
        Initialize the registry client.

        Args:
            transport: HTTP transport for making requests
            page_size: Repositories or images requested per listing page
        """
        self.transport = transport
        self.page_size = page_size

    def list_repositories(self, next_token: str | None = None) -> RepositoryPage:
        params: dict[str, Any] = {"maxResults": self.page_size}
        if next_token:
            params["nextToken"] = next_token

        response = self.transport.request("GET", "/v1/repositories", params=params)

        return RepositoryPage(
            repositories=[_parse_repository(r) for r in response.get("repositories", [])],
            next_token=response.get("nextToken") or None,
        )

    def describe_repository(self, name: str) -> Repository:
        response = self.transport.request("GET", _repository_path(name))
        return _parse_repository(response["repository"])

    def get_policy(self, name: str) -> str:
        """
        Return the repository's policy text.

        A repository without a policy answers 404 with code POLICY_NOT_FOUND,
        which is reported as "". Any other 404 means the repository itself is
        missing and is raised.
        """
        try:
            response = self.transport.request("GET", f"{_repository_path(name)}/policy")
        except NotFoundError as e:
            if e.code == POLICY_NOT_FOUND:
                return ""
            raise

        return response.get("policyText") or ""

    def set_policy(self, name: str, text: str) -> None:
        """Replace the policy; empty text deletes the attached policy instead."""
        path = f"{_repository_path(name)}/policy"

        if text:
            self.transport.request("PUT", path, body={"policyText": text})
            return

        try:
            self.transport.request("DELETE", path)
        except NotFoundError as e:
            if e.code != POLICY_NOT_FOUND:
                raise

    def create_repository(self, name: str) -> Repository:
        response = self.transport.request(
            "POST", "/v1/repositories", body={"repositoryName": name}
        )
        return _parse_repository(response["repository"])

    def delete_repository(self, name: str, force: bool = False) -> None:
        self.transport.request(
            "DELETE",
            _repository_path(name),
            params={"force": "true" if force else "false"},
        )

    def list_images(self, name: str, next_token: str | None = None) -> ImagePage:
        params: dict[str, Any] = {"maxResults": self.page_size}
        if next_token:
            params["nextToken"] = next_token

        response = self.transport.request("GET", f"{_repository_path(name)}/images", params=params)

        return ImagePage(
            images=[_parse_image(name, i) for i in response.get("images", [])],
            next_token=response.get("nextToken") or None,
        )

    def describe_image(self, name: str, tag: str) -> Image:
        response = self.transport.request("GET", _image_path(name, tag))
        return _parse_image(name, response["image"])

    def delete_image(self, name: str, tag: str) -> None:
        self.transport.request("DELETE", _image_path(name, tag))
