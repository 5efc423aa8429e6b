"""Payload types decoded from GitHub API responses."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Callable, TypeVar

from repobrowser.github_api import GitHubError

T = TypeVar("T")


class DecodeError(GitHubError):
    """Raised when a response body does not match the expected payload shape."""


@dataclass
class RepositoryData:
    """A repository as listed by ``/users/{user}/repos``."""

    id: int
    name: str
    full_name: str | None = None
    description: str | None = None
    html_url: str | None = None
    language: str | None = None
    stargazers_count: int = 0
    forks_count: int = 0
    owner_login: str | None = None

    @classmethod
    def from_json(cls, data: dict[str, Any]) -> RepositoryData:
        owner = data.get("owner") or {}
        return cls(
            id=data["id"],
            name=data["name"],
            full_name=data.get("full_name"),
            description=data.get("description"),
            html_url=data.get("html_url"),
            language=data.get("language"),
            stargazers_count=data.get("stargazers_count") or 0,
            forks_count=data.get("forks_count") or 0,
            owner_login=owner.get("login"),
        )


@dataclass
class ContributorData:
    """A contributor as listed by ``/repos/{owner}/{repo}/contributors``."""

    login: str
    id: int | None = None
    avatar_url: str | None = None
    html_url: str | None = None
    contributions: int = 0

    @classmethod
    def from_json(cls, data: dict[str, Any]) -> ContributorData:
        return cls(
            login=data["login"],
            id=data.get("id"),
            avatar_url=data.get("avatar_url"),
            html_url=data.get("html_url"),
            contributions=data.get("contributions") or 0,
        )


@dataclass
class PersonData:
    """A user profile from ``/users/{user}``."""

    login: str
    id: int | None = None
    name: str | None = None
    avatar_url: str | None = None
    html_url: str | None = None
    company: str | None = None
    location: str | None = None
    bio: str | None = None
    public_repos: int = 0
    followers: int = 0
    following: int = 0

    @classmethod
    def from_json(cls, data: dict[str, Any]) -> PersonData:
        return cls(
            login=data["login"],
            id=data.get("id"),
            name=data.get("name"),
            avatar_url=data.get("avatar_url"),
            html_url=data.get("html_url"),
            company=data.get("company"),
            location=data.get("location"),
            bio=data.get("bio"),
            public_repos=data.get("public_repos") or 0,
            followers=data.get("followers") or 0,
            following=data.get("following") or 0,
        )


def decode_object(data: Any, factory: Callable[[dict[str, Any]], T]) -> T:
    """Decode a single JSON object.

    Raises:
        DecodeError: If ``data`` is not an object or lacks a required key.
    """
    if not isinstance(data, dict):
        raise DecodeError(f"Expected a JSON object, got {type(data).__name__}")
    try:
        return factory(data)
    except (KeyError, TypeError, AttributeError) as e:
        raise DecodeError(f"Malformed object: {e!r}") from e


def decode_list(data: Any, factory: Callable[[dict[str, Any]], T]) -> list[T]:
    """Decode a JSON array of objects."""
    if not isinstance(data, list):
        raise DecodeError(f"Expected a JSON array, got {type(data).__name__}")
    return [decode_object(item, factory) for item in data]


def decode_repositories(data: Any) -> list[RepositoryData]:
    return decode_list(data, RepositoryData.from_json)


def decode_contributors(data: Any) -> list[ContributorData]:
    return decode_list(data, ContributorData.from_json)


def decode_person(data: Any) -> PersonData:
    return decode_object(data, PersonData.from_json)


def to_json(payload: Any) -> Any:
    """Convert a payload (or list of payloads) to JSON-serializable data."""
    if isinstance(payload, list):
        return [to_json(item) for item in payload]
    return dict(vars(payload))
