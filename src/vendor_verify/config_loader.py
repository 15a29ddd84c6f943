# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.

"""Layered configuration loading (defaults, pyproject, TOML file, CLI)."""

from __future__ import annotations

import os
import re
import tomllib
from collections.abc import Mapping, Sequence
from pathlib import Path
from typing import Any, Final, Protocol

from pydantic import ValidationError

from .config import VerifyConfig
from .errors import ConfigError

PYPROJECT_FILENAME: Final[str] = "pyproject.toml"
CONFIG_FILENAME: Final[str] = ".vendor-verify.toml"
PYPROJECT_TOOL_KEY: Final[str] = "tool"
PYPROJECT_SECTION_KEY: Final[str] = "vendor-verify"

_ENV_VAR_PATTERN: Final[re.Pattern[str]] = re.compile(r"\$(?:(?P<bare>\w+)|\{(?P<braced>[^}]+)\})")


class ConfigSource(Protocol):
    """Source of a configuration fragment."""

    name: str

    def load(self) -> Mapping[str, Any]: ...


class TomlConfigSource:
    """Load configuration data from a standalone TOML document."""

    def __init__(self, path: Path, *, env: Mapping[str, str] | None = None, required: bool = False) -> None:
        """Create a source for ``path``.

        Args:
            path: TOML document to read.
            env: Environment for ``$VAR`` expansion; defaults to ``os.environ``.
            required: Whether a missing file is an error instead of an empty source.
        """

        self.name = str(path)
        self._path = path
        self._env = env if env is not None else os.environ
        self._required = required

    def load(self) -> Mapping[str, Any]:
        """Return the whole document keyed by configuration field names."""

        document = self._read()
        return _prepare(document, self._env)

    def _read(self) -> dict[str, Any]:
        """Parse the TOML file, returning an empty table when an optional file is absent.

        Raises:
            ConfigError: If the file is required but missing, unreadable or invalid TOML.
        """

        if not self._path.exists():
            if self._required:
                raise ConfigError("configuration file does not exist", subject=self.name)
            return {}
        try:
            with self._path.open("rb") as handle:
                return tomllib.load(handle)
        except (OSError, tomllib.TOMLDecodeError) as exc:
            raise ConfigError(f"cannot read configuration: {exc}", subject=self.name) from exc


class PyProjectConfigSource(TomlConfigSource):
    """Read configuration from ``[tool.vendor-verify]`` within ``pyproject.toml``."""

    def load(self) -> Mapping[str, Any]:
        """Return the ``[tool.vendor-verify]`` table, or an empty one."""

        data = self._read()
        tool_section = data.get(PYPROJECT_TOOL_KEY)
        if not isinstance(tool_section, Mapping):
            return {}
        section = tool_section.get(PYPROJECT_SECTION_KEY)
        if not isinstance(section, Mapping):
            return {}
        return _prepare(section, self._env)


def default_sources(
    root: Path,
    *,
    config_file: Path | None = None,
    env: Mapping[str, str] | None = None,
) -> list[ConfigSource]:
    """Return the configuration sources consulted for ``root`` in precedence order.

    Args:
        root: Project directory searched for ``pyproject.toml`` and ``.vendor-verify.toml``.
        config_file: Explicit configuration file replacing ``.vendor-verify.toml``.
        env: Environment used for ``$VAR`` expansion; defaults to ``os.environ``.

    Returns:
        list[ConfigSource]: Sources ordered from lowest to highest precedence.
    """

    sources: list[ConfigSource] = [PyProjectConfigSource(root / PYPROJECT_FILENAME, env=env)]
    if config_file is not None:
        sources.append(TomlConfigSource(config_file, env=env, required=True))
    else:
        sources.append(TomlConfigSource(root / CONFIG_FILENAME, env=env))
    return sources


def load_config(
    root: Path,
    *,
    config_file: Path | None = None,
    overrides: Mapping[str, Any] | None = None,
    env: Mapping[str, str] | None = None,
    sources: Sequence[ConfigSource] | None = None,
) -> VerifyConfig:
    """Build the effective :class:`VerifyConfig` for a run.

    Later sources win over earlier ones; ``overrides`` (the CLI flags that were
    actually supplied) win over every file.

    Args:
        root: Project directory holding optional configuration files.
        config_file: Explicit configuration file path.
        overrides: Values supplied on the command line.
        env: Environment used for ``$VAR`` expansion.
        sources: Explicit sources replacing :func:`default_sources`.

    Returns:
        VerifyConfig: Validated configuration.

    Raises:
        ConfigError: If a source is unreadable or the merged values are invalid.
    """

    active_sources = sources if sources is not None else default_sources(root, config_file=config_file, env=env)
    merged: dict[str, Any] = {}
    for source in active_sources:
        merged.update(source.load())
    merged.update({key: value for key, value in (overrides or {}).items() if value is not None})
    try:
        return VerifyConfig.model_validate(merged)
    except ValidationError as exc:
        details = "; ".join(
            f"{'.'.join(str(part) for part in error['loc']) or '<root>'}: {error['msg']}" for error in exc.errors()
        )
        raise ConfigError(f"invalid configuration: {details}") from exc


def _prepare(data: Mapping[str, Any], env: Mapping[str, str]) -> dict[str, Any]:
    """Map TOML keys onto field names and expand ``$VAR`` references in values.

    Configuration is flat, so only top-level string values are expanded.
    Unknown variables are left as written.

    Args:
        data: Raw table read from a TOML source.
        env: Environment consulted for ``$VAR`` and ``${VAR}`` references.

    Returns:
        dict[str, Any]: Table keyed by :class:`VerifyConfig` field names.
    """

    def _lookup(match: re.Match[str]) -> str:
        return env.get(match.group("bare") or match.group("braced"), match.group(0))

    prepared: dict[str, Any] = {}
    for key, value in data.items():
        field_name = str(key).replace("-", "_")
        prepared[field_name] = _ENV_VAR_PATTERN.sub(_lookup, value) if isinstance(value, str) else value
    return prepared


__all__ = [
    "CONFIG_FILENAME",
    "ConfigSource",
    "PyProjectConfigSource",
    "TomlConfigSource",
    "default_sources",
    "load_config",
]
