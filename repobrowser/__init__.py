"""Repobrowser - GitHub network access for the repository browser."""

from repobrowser.auth import AuthToken
from repobrowser.config import ManagerConfig, load_config
from repobrowser.dispatch import ImmediateDispatcher, QueueDispatcher
from repobrowser.github_api import (
    GitHubClient,
    GitHubError,
    GitHubHTTPError,
)
from repobrowser.models import ContributorData, DecodeError, PersonData, RepositoryData
from repobrowser.network_manager import (
    LoadEmpty,
    LoadFailure,
    LoadSuccess,
    NetworkCallListener,
    NetworkManager,
    PendingCall,
)

__all__ = [
    "AuthToken",
    "ManagerConfig",
    "load_config",
    "ImmediateDispatcher",
    "QueueDispatcher",
    "GitHubClient",
    "GitHubError",
    "GitHubHTTPError",
    "ContributorData",
    "DecodeError",
    "PersonData",
    "RepositoryData",
    "LoadEmpty",
    "LoadFailure",
    "LoadSuccess",
    "NetworkCallListener",
    "NetworkManager",
    "PendingCall",
]
