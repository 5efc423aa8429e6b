"""Loads repositories, contributors and users from the GitHub API.

Every operation returns immediately with a :class:`PendingCall`. The request
runs on the manager's thread pool, and exactly one outcome is delivered per
call: empty (with the HTTP status code), success (with the decoded payload) or
failure. A call cancelled before delivery gets no outcome at all.

Outcomes reach the caller two ways: through the optional listener, invoked by
the manager's dispatcher, and through ``PendingCall.future``, which resolves
to a :class:`LoadEmpty`, :class:`LoadSuccess` or :class:`LoadFailure` after
the listener has run.
"""

from __future__ import annotations

import logging
import threading
from concurrent.futures import Future, ThreadPoolExecutor
from dataclasses import dataclass
from functools import partial
from typing import Any, Callable, Generic, Protocol, TypeVar, Union
from urllib.parse import quote

import requests

from repobrowser.auth import AuthToken
from repobrowser.config import ManagerConfig
from repobrowser.dispatch import Dispatcher, ImmediateDispatcher
from repobrowser.github_api import (
    ApiRequest,
    GitHubClient,
    GitHubError,
    GitHubHTTPError,
    TokenProvider,
    redact,
)
from repobrowser.models import (
    ContributorData,
    DecodeError,
    PersonData,
    RepositoryData,
    decode_contributors,
    decode_person,
    decode_repositories,
)

logger = logging.getLogger(__name__)

T = TypeVar("T")
T_contra = TypeVar("T_contra", contravariant=True)


class NetworkCallListener(Protocol[T_contra]):
    """Receives the outcome of one network call."""

    def on_load_empty(self, http_code: int) -> None:
        """The response carried no data; ``http_code`` is its status."""

    def on_load_success(self, data: T_contra) -> None:
        """The data was loaded and decoded."""

    def on_load_failure(self) -> None:
        """The data could not be loaded."""


@dataclass(frozen=True)
class LoadEmpty:
    status_code: int

    def notify(self, listener: NetworkCallListener[Any]) -> None:
        listener.on_load_empty(self.status_code)


@dataclass(frozen=True)
class LoadSuccess(Generic[T]):
    data: T

    def notify(self, listener: NetworkCallListener[Any]) -> None:
        listener.on_load_success(self.data)


@dataclass(frozen=True)
class LoadFailure:
    # Kept for logging and inspection; listeners are not given the error.
    error: BaseException | None = None

    def notify(self, listener: NetworkCallListener[Any]) -> None:
        listener.on_load_failure()


Outcome = Union[LoadEmpty, LoadSuccess[Any], LoadFailure]


class PendingCall:
    """Handle for one in-flight network call."""

    def __init__(self, description: str, listener: NetworkCallListener[Any] | None) -> None:
        self.description = description
        self.future: Future[Outcome] = Future()
        self._listener = listener
        self._lock = threading.Lock()
        self._task: Future[None] | None = None
        self._cancelled = False
        self._delivered = False

    def __repr__(self) -> str:
        if self._cancelled:
            state = "cancelled"
        elif self._delivered:
            state = "delivered"
        else:
            state = "pending"
        return f"<PendingCall {self.description} {state}>"

    def _attach(self, task: Future[None]) -> None:
        with self._lock:
            self._task = task
            cancelled = self._cancelled
        if cancelled:
            task.cancel()

    def cancel(self) -> bool:
        """Cancel the call.

        Returns True if the call is cancelled (now or earlier), False if its
        outcome was already delivered, in which case nothing changes.
        """
        with self._lock:
            if self._delivered:
                return False
            if self._cancelled:
                return True
            self._cancelled = True
            task = self._task

        if task is not None:
            task.cancel()
        self.future.cancel()
        logger.debug("Cancelled %s", self.description)
        return True

    def cancelled(self) -> bool:
        return self._cancelled

    def done(self) -> bool:
        return self._cancelled or self._delivered

    def result(self, timeout: float | None = None) -> Outcome:
        """Wait for the outcome.

        Raises:
            concurrent.futures.CancelledError: If the call was cancelled.
            TimeoutError: If no outcome arrived within ``timeout`` seconds.
        """
        return self.future.result(timeout)

    def _deliver(self, outcome: Outcome) -> None:
        with self._lock:
            if self._cancelled or self._delivered:
                return
            self._delivered = True

        if self._listener is not None:
            try:
                outcome.notify(self._listener)
            except Exception:
                logger.exception("Listener callback raised for %s", self.description)
        self.future.set_result(outcome)


def _check_identifier(name: str, value: Any) -> str | None:
    if not isinstance(value, str) or not value.strip():
        return f"{name} must be a non-empty string, got {value!r}"
    return None


def _check_page(name: str, value: Any) -> str | None:
    if isinstance(value, bool) or not isinstance(value, int) or value < 0:
        return f"{name} must be a non-negative integer, got {value!r}"
    return None


class NetworkManager:
    """Issues GitHub API calls on a thread pool and reports their outcomes.

    Create one manager at startup and pass it to the code that needs it. Use
    it as a context manager, or call :meth:`close`, to release its threads and
    HTTP session.
    """

    def __init__(
        self,
        client: GitHubClient,
        *,
        max_workers: int = 4,
        dispatcher: Dispatcher | None = None,
    ) -> None:
        self._client = client
        self._dispatcher: Dispatcher = dispatcher or ImmediateDispatcher()
        self._executor = ThreadPoolExecutor(
            max_workers=max_workers, thread_name_prefix="repobrowser"
        )

    @classmethod
    def from_config(
        cls,
        config: ManagerConfig | None = None,
        token_provider: TokenProvider | None = None,
        *,
        dispatcher: Dispatcher | None = None,
        session: requests.Session | None = None,
    ) -> NetworkManager:
        """Build a manager and its client from configuration.

        Without ``token_provider`` the token is taken from the environment
        variables named in ``config.token_env``.
        """
        config = config or ManagerConfig()
        if token_provider is None:
            token_provider = AuthToken.from_env(config.token_env)

        client = GitHubClient(
            token_provider=token_provider,
            base_url=config.base_url,
            user_agent=config.user_agent,
            timeout_s=config.timeout_s,
            session=session,
        )
        return cls(client, max_workers=config.max_workers, dispatcher=dispatcher)

    def set_auth_token_provider(self, token_provider: TokenProvider) -> None:
        """Use ``token_provider`` for every request sent from now on."""
        self._client.token_provider = token_provider

    def list_repositories(
        self,
        user: str,
        page_index: int,
        listener: NetworkCallListener[list[RepositoryData]] | None = None,
    ) -> PendingCall:
        """Fetch the given page of a user's repositories."""
        problem = _check_identifier("user", user) or _check_page("page_index", page_index)
        request = None
        if problem is None:
            request = ApiRequest(f"/users/{quote(user, safe='')}/repos", {"page": page_index})
        return self._enqueue(
            f"list_repositories({user!r}, {page_index!r})",
            request,
            decode_repositories,
            listener,
            problem,
        )

    def get_contributors(
        self,
        owner: str,
        project: str,
        page: int,
        listener: NetworkCallListener[list[ContributorData]] | None = None,
    ) -> PendingCall:
        """Fetch the given page of a repository's contributors."""
        problem = (
            _check_identifier("owner", owner)
            or _check_identifier("project", project)
            or _check_page("page", page)
        )
        request = None
        if problem is None:
            request = ApiRequest(
                f"/repos/{quote(owner, safe='')}/{quote(project, safe='')}/contributors",
                {"page": page},
            )
        return self._enqueue(
            f"get_contributors({owner!r}, {project!r}, {page!r})",
            request,
            decode_contributors,
            listener,
            problem,
        )

    def get_user(
        self,
        user: str,
        listener: NetworkCallListener[PersonData] | None = None,
    ) -> PendingCall:
        """Fetch the profile of a user."""
        problem = _check_identifier("user", user)
        request = None
        if problem is None:
            request = ApiRequest(f"/users/{quote(user, safe='')}")
        return self._enqueue(
            f"get_user({user!r})",
            request,
            decode_person,
            listener,
            problem,
        )

    def _enqueue(
        self,
        description: str,
        request: ApiRequest | None,
        decode: Callable[[Any], Any],
        listener: NetworkCallListener[Any] | None,
        problem: str | None,
    ) -> PendingCall:
        call = PendingCall(description, listener)

        if request is None:
            logger.error("Rejected %s: %s", description, problem)
            work = partial(self._post, call, LoadFailure(ValueError(problem)))
        else:
            work = partial(self._execute, call, request, decode)

        try:
            task = self._executor.submit(work)
        except RuntimeError as e:
            # closed manager: posted from the calling thread before the handle is returned
            logger.error("Could not schedule %s: %s", description, e)
            self._post(call, LoadFailure(e))
            return call

        call._attach(task)
        return call

    def _post(self, call: PendingCall, outcome: Outcome) -> None:
        self._dispatcher.post(partial(call._deliver, outcome))

    def _execute(
        self,
        call: PendingCall,
        request: ApiRequest,
        decode: Callable[[Any], Any],
    ) -> None:
        if call.cancelled():
            return
        outcome = self._load(call.description, request, decode)
        if call.cancelled():
            logger.debug("Dropping outcome of cancelled %s", call.description)
            return
        self._post(call, outcome)

    def _load(
        self,
        description: str,
        request: ApiRequest,
        decode: Callable[[Any], Any],
    ) -> Outcome:
        try:
            response = self._client.send(request)

            if response.is_empty:
                return LoadEmpty(response.status_code)

            if not response.ok:
                raise GitHubHTTPError(
                    status_code=response.status_code,
                    url=redact(response.url),
                    response_text=response.text,
                    headers=response.headers,
                )

            try:
                body = response.json()
            except ValueError as e:
                raise DecodeError(f"Invalid JSON from {redact(response.url)}: {e}") from e

            if body is None:
                return LoadEmpty(response.status_code)

            return LoadSuccess(decode(body))
        except GitHubError as e:
            logger.error("Call %s failed: %s", description, e)
            return LoadFailure(e)
        except Exception as e:
            logger.exception("Call %s failed unexpectedly", description)
            return LoadFailure(e)

    def close(self) -> None:
        """Wait for running calls, then close the HTTP session."""
        self._executor.shutdown(wait=True)
        self._client.close()

    def __enter__(self) -> NetworkManager:
        return self

    def __exit__(self, exc_type: Any, exc: Any, tb: Any) -> None:
        self.close()
