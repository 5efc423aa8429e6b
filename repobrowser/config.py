"""Manager configuration from defaults, a YAML file and the environment."""

from __future__ import annotations

import os
from collections.abc import Mapping
from dataclasses import dataclass, replace
from pathlib import Path
from typing import Any, Callable

import yaml

from repobrowser.auth import DEFAULT_TOKEN_ENV
from repobrowser.github_api import DEFAULT_BASE_URL, DEFAULT_USER_AGENT


@dataclass(frozen=True)
class ManagerConfig:
    """Settings used to build a NetworkManager."""

    base_url: str = DEFAULT_BASE_URL
    user_agent: str = DEFAULT_USER_AGENT
    timeout_s: float = 30.0
    max_workers: int = 4
    token_env: tuple[str, ...] = DEFAULT_TOKEN_ENV


def _to_str(value: Any) -> str:
    if not isinstance(value, str):
        raise ValueError(f"expected a string, got {value!r}")
    return value


def _to_float(value: Any) -> float:
    if isinstance(value, bool):
        raise ValueError(f"expected a number, got {value!r}")
    try:
        return float(value)
    except (TypeError, ValueError) as e:
        raise ValueError(f"expected a number, got {value!r}") from e


def _to_int(value: Any) -> int:
    if isinstance(value, bool) or (isinstance(value, float) and not value.is_integer()):
        raise ValueError(f"expected an integer, got {value!r}")
    try:
        return int(value)
    except (TypeError, ValueError) as e:
        raise ValueError(f"expected an integer, got {value!r}") from e


def _to_names(value: Any) -> tuple[str, ...]:
    if isinstance(value, str):
        return (value,)
    if isinstance(value, list) and all(isinstance(item, str) for item in value):
        return tuple(value)
    raise ValueError(f"expected a name or a list of names, got {value!r}")


CONVERTERS: dict[str, Callable[[Any], Any]] = {
    "base_url": _to_str,
    "user_agent": _to_str,
    "timeout_s": _to_float,
    "max_workers": _to_int,
    "token_env": _to_names,
}

ENV_OVERRIDES = {
    "REPOBROWSER_BASE_URL": "base_url",
    "REPOBROWSER_TIMEOUT": "timeout_s",
    "REPOBROWSER_MAX_WORKERS": "max_workers",
}


def _from_mapping(config: ManagerConfig, data: Mapping[str, Any], source: str) -> ManagerConfig:
    unknown = sorted(str(key) for key in set(data) - set(CONVERTERS))
    if unknown:
        raise ValueError(f"Unknown config keys in {source}: {', '.join(unknown)}")

    values = {}
    for name, value in data.items():
        try:
            values[name] = CONVERTERS[name](value)
        except ValueError as e:
            raise ValueError(f"Invalid value for {name} in {source}: {e}") from e
    return replace(config, **values)


def load_config(
    path: Path | None = None,
    environ: Mapping[str, str] | None = None,
) -> ManagerConfig:
    """Load configuration.

    Values from ``path`` (a YAML mapping) override the defaults, and
    ``REPOBROWSER_*`` environment variables override both.

    Raises:
        ValueError: If the file is not a mapping, has unknown keys, or a
            value from the file or the environment cannot be converted.
    """
    config = ManagerConfig()

    if path is not None:
        with open(path, encoding="utf-8") as f:
            data = yaml.safe_load(f) or {}
        if not isinstance(data, dict):
            raise ValueError(f"Config file {path} must contain a mapping")
        config = _from_mapping(config, data, str(path))

    env = os.environ if environ is None else environ
    overrides = {name: env[env_var] for env_var, name in ENV_OVERRIDES.items() if env_var in env}
    if overrides:
        config = _from_mapping(config, overrides, "environment")

    if config.max_workers < 1:
        raise ValueError(f"max_workers must be at least 1, got {config.max_workers}")

    return config
