#!/usr/bin/env python3
"""Browse GitHub repositories, contributors and users from the command line."""

import argparse
import json
import logging
import sys
from pathlib import Path

from repobrowser import (
    LoadEmpty,
    LoadFailure,
    NetworkManager,
    PendingCall,
    QueueDispatcher,
    load_config,
)
from repobrowser.github_url import parse_owner_repo, parse_user
from repobrowser.models import ContributorData, PersonData, RepositoryData, to_json


class PrintingListener:
    """Prints the outcome of a call."""

    def __init__(self, json_output: bool) -> None:
        self.json_output = json_output

    def on_load_empty(self, http_code: int) -> None:
        print(f"No data returned (HTTP {http_code})", file=sys.stderr)

    def on_load_success(self, data) -> None:
        if self.json_output:
            print(json.dumps(to_json(data), indent=2))
            return

        items = data if isinstance(data, list) else [data]
        for item in items:
            print(format_item(item))
        if isinstance(data, list):
            print()
            print(f"{len(data)} item(s)")

    def on_load_failure(self) -> None:
        print("Error: request failed", file=sys.stderr)


def format_item(item) -> str:
    """Render one payload as a single line of text."""
    if isinstance(item, RepositoryData):
        language = f" [{item.language}]" if item.language else ""
        return f"📦 {item.full_name or item.name}{language} ★ {item.stargazers_count}"
    if isinstance(item, ContributorData):
        return f"👤 {item.login}: {item.contributions} contribution(s)"
    if isinstance(item, PersonData):
        name = f" ({item.name})" if item.name else ""
        return f"👤 {item.login}{name}: {item.public_repos} public repo(s), {item.followers} follower(s)"
    return str(item)


def exit_code(call: PendingCall) -> int:
    outcome = call.result(timeout=0)
    if isinstance(outcome, LoadFailure):
        return 1
    if isinstance(outcome, LoadEmpty):
        return 3
    return 0


def main() -> int:
    """Main entry point."""
    parser = argparse.ArgumentParser(
        description="Browse GitHub repositories, contributors and users."
    )
    parser.add_argument(
        "--config",
        type=Path,
        default=None,
        help="YAML configuration file",
    )
    parser.add_argument(
        "--json",
        action="store_true",
        dest="json_output",
        help="Output JSON format",
    )
    parser.add_argument(
        "--verbose",
        "-v",
        action="store_true",
        help="Log requests and failures",
    )
    subparsers = parser.add_subparsers(dest="command", required=True)

    repos_parser = subparsers.add_parser("repos", help="List a user's repositories")
    repos_parser.add_argument("user", help="GitHub user name or profile URL")
    repos_parser.add_argument("--page", type=int, default=1, help="Page number (default: 1)")

    contributors_parser = subparsers.add_parser(
        "contributors", help="List a repository's contributors"
    )
    contributors_parser.add_argument("repo", help="owner/repo or GitHub URL")
    contributors_parser.add_argument(
        "--page", type=int, default=1, help="Page number (default: 1)"
    )

    user_parser = subparsers.add_parser("user", help="Show a user's profile")
    user_parser.add_argument("user", help="GitHub user name or profile URL")

    args = parser.parse_args()

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
        stream=sys.stderr,
    )

    try:
        config = load_config(args.config)
    except (OSError, ValueError) as e:
        print(f"Error: {e}", file=sys.stderr)
        return 2

    try:
        if args.command == "contributors":
            owner, repo = parse_owner_repo(args.repo)
        else:
            user = parse_user(args.user)
    except ValueError as e:
        print(f"Error: {e}", file=sys.stderr)
        return 2

    listener = PrintingListener(args.json_output)
    dispatcher = QueueDispatcher()

    with NetworkManager.from_config(config, dispatcher=dispatcher) as manager:
        if args.command == "repos":
            call = manager.list_repositories(user, args.page, listener)
        elif args.command == "contributors":
            call = manager.get_contributors(owner, repo, args.page, listener)
        else:
            call = manager.get_user(user, listener)

        try:
            dispatcher.drain(until=call.done)
        except KeyboardInterrupt:
            call.cancel()
            print("Cancelled", file=sys.stderr)
            return 130

    return exit_code(call)


if __name__ == "__main__":
    sys.exit(main())
