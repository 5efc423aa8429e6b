"""GitHub API transport with access-token injection."""

from __future__ import annotations

import json
import logging
import re
from dataclasses import dataclass, field
from typing import Any, Callable
from urllib.parse import urlencode

import requests

logger = logging.getLogger(__name__)

Json = Any
TokenProvider = Callable[[], str | None]

DEFAULT_BASE_URL = "https://api.github.com"
DEFAULT_USER_AGENT = "repobrowser"
ACCESS_TOKEN_PARAM = "access_token"
_TOKEN_PATTERN = re.compile(rf"({ACCESS_TOKEN_PARAM}=)[^&\s'\")]+")


class GitHubError(RuntimeError):
    """Base exception for GitHub API errors."""


@dataclass
class GitHubHTTPError(GitHubError):
    """Raised for HTTP errors from the GitHub API."""

    status_code: int
    url: str
    response_text: str | None = None
    headers: dict[str, str] = field(default_factory=dict)

    def __str__(self) -> str:
        return f"GitHub API error {self.status_code} for {self.url}: {self.response_text[:200] if self.response_text else 'No response body'}"


@dataclass
class ApiRequest:
    """A GET request against the API, before the token is applied."""

    path: str
    params: dict[str, Any] = field(default_factory=dict)


@dataclass
class ResponseData:
    """Response from a GitHub API request."""

    url: str
    status_code: int
    headers: dict[str, str]
    text: str

    @property
    def ok(self) -> bool:
        return 200 <= self.status_code < 300

    @property
    def is_empty(self) -> bool:
        return not self.text.strip()

    def json(self) -> Json:
        return json.loads(self.text)


def redact(text: str) -> str:
    """Hide every access token value in a URL or message before it is logged."""
    return _TOKEN_PATTERN.sub(r"\g<1>***", text)


def _no_token() -> str | None:
    return None


class GitHubClient:
    """GitHub API client that appends the current access token to every request.

    The token is read from ``token_provider`` each time a request is sent, so
    changing the token affects requests that have not been sent yet.
    """

    def __init__(
        self,
        *,
        token_provider: TokenProvider | None = None,
        base_url: str = DEFAULT_BASE_URL,
        user_agent: str = DEFAULT_USER_AGENT,
        timeout_s: float = 30.0,
        session: requests.Session | None = None,
    ) -> None:
        self.base_url = base_url.rstrip("/")
        self.user_agent = user_agent
        self.timeout_s = timeout_s
        self.token_provider: TokenProvider = token_provider or _no_token
        self._session = session if session is not None else requests.Session()

    def _build_url(self, path: str, params: dict[str, Any] | None = None) -> str:
        """Build full URL from path and parameters."""
        if path.startswith("http://") or path.startswith("https://"):
            url = path
        else:
            url = f"{self.base_url}/{path.lstrip('/')}"

        if params:
            sorted_params = sorted(params.items())
            url = f"{url}?{urlencode(sorted_params)}"

        return url

    def _authorize(self, params: dict[str, Any]) -> dict[str, Any]:
        """Return a copy of ``params`` with the current token appended."""
        token = self.token_provider()
        authorized = dict(params)
        if token:
            authorized[ACCESS_TOKEN_PARAM] = token
        return authorized

    def send(self, request: ApiRequest) -> ResponseData:
        """Send a GET request and return the raw response.

        Any received HTTP status is returned; only transport problems raise.

        Raises:
            GitHubError: If the request could not be completed.
        """
        url = self._build_url(request.path, self._authorize(request.params))
        headers = {
            "Accept": "application/vnd.github+json",
            "X-GitHub-Api-Version": "2022-11-28",
            "User-Agent": self.user_agent,
        }

        logger.debug("GET %s", redact(url))
        try:
            response = self._session.request(
                "GET",
                url,
                headers=headers,
                timeout=self.timeout_s,
            )
        except requests.RequestException as e:
            raise GitHubError(f"Request to {redact(url)} failed: {redact(str(e))}") from e

        return ResponseData(
            url=url,
            status_code=response.status_code,
            headers=dict(response.headers),
            text=response.text,
        )

    def close(self) -> None:
        """Close the session."""
        self._session.close()

    def __enter__(self) -> GitHubClient:
        return self

    def __exit__(self, exc_type: Any, exc: Any, tb: Any) -> None:
        self.close()
