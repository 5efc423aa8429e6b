"""Tests for the access token holder."""

from __future__ import annotations

from repobrowser.auth import AuthToken


class TestAuthToken:
    def test_callable_returns_current_value(self):
        token = AuthToken("abc")
        assert token() == "abc"
        token.value = "def"
        assert token() == "def"
        token.clear()
        assert token() is None

    def test_repr_hides_value(self):
        assert repr(AuthToken("secret")) == "AuthToken(set)"
        assert repr(AuthToken()) == "AuthToken(unset)"

    def test_from_env_first_match(self):
        token = AuthToken.from_env(environ={"GH_TOKEN": "gh", "GITHUB_TOKEN": "github"})
        assert token.value == "github"

    def test_from_env_fallback(self):
        assert AuthToken.from_env(environ={"GH_TOKEN": "gh"}).value == "gh"

    def test_from_env_missing(self):
        assert AuthToken.from_env(("MY_TOKEN",), environ={}).value is None
