"""Access token holder shared between the application and the network layer."""

from __future__ import annotations

import os
from collections.abc import Mapping

DEFAULT_TOKEN_ENV = ("GITHUB_TOKEN", "GH_TOKEN")


class AuthToken:
    """Mutable access token.

    Instances are callables returning the current value, so they can be handed
    to the manager as its token provider. The value may be replaced at any time;
    requests read it when they are sent.
    """

    def __init__(self, value: str | None = None) -> None:
        self._value = value

    @property
    def value(self) -> str | None:
        return self._value

    @value.setter
    def value(self, value: str | None) -> None:
        self._value = value

    def clear(self) -> None:
        self._value = None

    def __call__(self) -> str | None:
        return self._value

    def __repr__(self) -> str:
        state = "set" if self._value else "unset"
        return f"AuthToken({state})"

    @classmethod
    def from_env(
        cls,
        token_env: tuple[str, ...] = DEFAULT_TOKEN_ENV,
        environ: Mapping[str, str] | None = None,
    ) -> AuthToken:
        """Create a token from the first environment variable that is set."""
        env = os.environ if environ is None else environ
        for env_var in token_env:
            if env_var in env:
                return cls(env[env_var])
        return cls()
