"""Parsing of user and repository references given on the command line."""

from __future__ import annotations

import re

_URL_PREFIX = re.compile(r"^(?:https?://(?:www\.)?github\.com/|git@github\.com:)")
_NAME = re.compile(r"^[\w.-]+$")


def _split(ref: str) -> tuple[list[str], bool]:
    """Return the path segments of ``ref`` and whether it was a URL.

    Query strings and fragments of URLs are dropped.
    """
    text = ref.strip()
    is_url = bool(_URL_PREFIX.match(text))
    if is_url:
        text = _URL_PREFIX.sub("", text)
        text = re.split(r"[?#]", text, maxsplit=1)[0]
    segments = [segment for segment in text.strip("/").split("/") if segment]
    return segments, is_url


def parse_user(ref: str) -> str:
    """Extract a user name from ``name`` or a profile URL.

    Raises:
        ValueError: If the reference is not a single user name.
    """
    segments, is_url = _split(ref)
    if len(segments) == 1 or (is_url and segments):
        user = segments[0]
        if _NAME.match(user):
            return user
    raise ValueError(f"Cannot parse GitHub user reference: {ref}")


def parse_owner_repo(ref: str) -> tuple[str, str]:
    """Extract owner and repo from ``owner/repo`` or a repository URL.

    URLs may point below the repository (``/tree/main``, ``/issues``) and may
    end in ``.git``. The shorthand form must have exactly two segments.

    Raises:
        ValueError: If the reference cannot be parsed.
    """
    segments, is_url = _split(ref)
    if len(segments) == 2 or (is_url and len(segments) > 2):
        owner, repo = segments[0], segments[1]
        if repo.endswith(".git"):
            repo = repo[:-4]
        if _NAME.match(owner) and repo and _NAME.match(repo):
            return owner, repo
    raise ValueError(f"Cannot parse GitHub repository reference: {ref}")
