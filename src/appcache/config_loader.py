# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.

"""Layered configuration sources (defaults, pyproject, TOML, overrides)."""

from __future__ import annotations

import copy
import tomllib
from collections.abc import Mapping, MutableMapping, Sequence
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Final

from .config import AppCacheConfig, ConfigError
from .logging import warn

PYPROJECT_FILENAME: Final[str] = "pyproject.toml"
CONFIG_FILENAME: Final[str] = "appcache.toml"
PYPROJECT_TOOL_KEY: Final[str] = "tool"
PYPROJECT_SECTION_KEY: Final[str] = "appcache"
LEGACY_SECTION_KEY: Final[str] = "appcache"

_TOML_CACHE: dict[tuple[Path, int], Mapping[str, Any]] = {}


def _deep_merge(base: Mapping[str, Any], override: Mapping[str, Any]) -> dict[str, Any]:
    result: dict[str, Any] = dict(base)
    for key, value in override.items():
        if key in result and isinstance(result[key], Mapping) and isinstance(value, Mapping):
            result[key] = _deep_merge(result[key], value)
        else:
            result[key] = value
    return result


def _read_toml(path: Path) -> dict[str, Any]:
    """Return the parsed TOML document at ``path``, cached by mtime.

    Args:
        path: TOML document location.

    Returns:
        dict[str, Any]: Parsed document, or an empty mapping when missing.

    Raises:
        ConfigError: If the document cannot be read or parsed.
    """

    if not path.is_file():
        return {}
    resolved = path.resolve()
    try:
        cache_key = (resolved, resolved.stat().st_mtime_ns)
        if (cached := _TOML_CACHE.get(cache_key)) is not None:
            return copy.deepcopy(dict(cached))
        with resolved.open("rb") as handle:
            data = tomllib.load(handle)
    except (OSError, tomllib.TOMLDecodeError) as exc:
        raise ConfigError(f"Unable to load configuration from {path}: {exc}") from exc
    _TOML_CACHE[cache_key] = copy.deepcopy(data)
    return data


def _unwrap_legacy_section(section: Mapping[str, Any], *, source: str) -> dict[str, Any]:
    """Fold a nested ``appcache`` table into ``section`` with a warning.

    Older configurations nested the options one level deeper. The nested
    table is applied underneath the options declared at the current level.
    """

    document = dict(section)
    legacy = document.pop(LEGACY_SECTION_KEY, None)
    if legacy is None:
        return document
    if not isinstance(legacy, Mapping):
        raise ConfigError(f"{source}: legacy '{LEGACY_SECTION_KEY}' entry must be a table")
    warn(
        f"{source}: a nested '{LEGACY_SECTION_KEY}' table is deprecated, move its options up one level",
        use_emoji=True,
    )
    return _deep_merge(dict(legacy), document)


def load_pyproject_section(path: Path) -> dict[str, Any]:
    """Return the ``[tool.appcache]`` table of the ``pyproject.toml`` at ``path``."""

    data = _read_toml(path)
    tool_section = data.get(PYPROJECT_TOOL_KEY)
    if not isinstance(tool_section, Mapping):
        return {}
    section = tool_section.get(PYPROJECT_SECTION_KEY)
    if section is None:
        return {}
    if not isinstance(section, Mapping):
        raise ConfigError(f"[tool.{PYPROJECT_SECTION_KEY}] in {path} must be a table")
    return _unwrap_legacy_section(section, source=str(path))


def load_toml_file(path: Path) -> dict[str, Any]:
    """Return the options declared in a standalone ``appcache.toml``."""

    data = _read_toml(path)
    if not isinstance(data, MutableMapping):
        raise ConfigError(f"Configuration at {path} must be a table")
    return _unwrap_legacy_section(data, source=str(path))


@dataclass(slots=True)
class ConfigLoader:
    """Merge configuration fragments from every source in precedence order.

    Precedence, lowest first: built-in defaults, ``[tool.appcache]`` in
    ``pyproject.toml``, ``appcache.toml`` (or the explicit ``config_file``),
    then ``overrides``.
    """

    root: Path
    config_file: Path | None = None
    overrides: Mapping[str, Any] = field(default_factory=dict)

    def sources(self) -> Sequence[Path]:
        """Return the files consulted, in ascending precedence."""

        explicit = self.config_file
        if explicit is not None and not explicit.is_absolute():
            explicit = self.root / explicit
        return (self.root / PYPROJECT_FILENAME, explicit or self.root / CONFIG_FILENAME)

    def load_fragment(self) -> dict[str, Any]:
        """Return the merged raw option mapping."""

        pyproject, standalone = self.sources()
        if self.config_file is not None and not standalone.is_file():
            raise ConfigError(f"Configuration file not found: {standalone}")
        merged: dict[str, Any] = {}
        merged = _deep_merge(merged, load_pyproject_section(pyproject))
        merged = _deep_merge(merged, load_toml_file(standalone))
        return _deep_merge(merged, self.overrides)

    def load(self) -> AppCacheConfig:
        """Return the validated configuration."""

        return AppCacheConfig.from_mapping(self.load_fragment())


def load_config(
    root: Path,
    *,
    config_file: Path | None = None,
    overrides: Mapping[str, Any] | None = None,
) -> AppCacheConfig:
    """Load the effective configuration for the project rooted at ``root``.

    Args:
        root: Project directory holding ``pyproject.toml`` / ``appcache.toml``.
        config_file: Optional explicit TOML file replacing ``appcache.toml``.
        overrides: Options applied last, typically from the command line.

    Returns:
        AppCacheConfig: Validated configuration merged over the defaults.

    Raises:
        ConfigError: If a source cannot be parsed or the merged options are invalid.
    """

    loader = ConfigLoader(root=root, config_file=config_file, overrides=dict(overrides or {}))
    return loader.load()


__all__ = [
    "CONFIG_FILENAME",
    "ConfigLoader",
    "PYPROJECT_FILENAME",
    "load_config",
    "load_pyproject_section",
    "load_toml_file",
]
