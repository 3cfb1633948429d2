# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.
"""Configuration model for manifest generation."""

from __future__ import annotations

import re
from collections.abc import Mapping
from pathlib import PurePosixPath
from typing import Any, Final

from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator
from pydantic.alias_generators import to_camel

DEFAULT_IGNORE_PATTERN: Final[str] = r"(?:^|[\\/])[.]"
DEFAULT_NETWORK: Final[tuple[str, ...]] = ("*",)
DEFAULT_STATIC_ROOT: Final[str] = "."
DEFAULT_MANIFEST_FILE: Final[str] = "appcache.appcache"
DEFAULT_PUBLIC_PATH: Final[str] = "public"


class ConfigError(Exception):
    """Raised when configuration input is invalid."""


class AppCacheConfig(BaseModel):
    """Options controlling which assets are listed and how the manifest reads.

    Keys are accepted either in snake_case or in the camelCase spelling used by
    front-end build configuration files (``externalCacheEntries``,
    ``staticRoot``, ``manifestFile`` ...).
    """

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        validate_assignment=True,
        extra="forbid",
    )

    ignore: re.Pattern[str] = Field(default_factory=lambda: re.compile(DEFAULT_IGNORE_PATTERN))
    external_cache_entries: list[str] = Field(default_factory=list)
    network: list[str] = Field(default_factory=lambda: list(DEFAULT_NETWORK))
    fallback: dict[str, str] = Field(default_factory=dict)
    static_root: str = DEFAULT_STATIC_ROOT
    manifest_file: str = DEFAULT_MANIFEST_FILE
    public_path: str = DEFAULT_PUBLIC_PATH

    @field_validator("manifest_file")
    @classmethod
    def _validate_manifest_file(cls, value: str) -> str:
        """Reject manifest names that would escape the public directory."""

        name = value.strip()
        if not name:
            raise ValueError("manifest_file must not be empty")
        if "/" in name or "\\" in name:
            raise ValueError("manifest_file must be a bare file name")
        return name

    @property
    def manifest_extension(self) -> str:
        """Return the suffix identifying manifest files among build assets.

        Returns:
            str: Suffix of :attr:`manifest_file` (``".appcache"`` by default),
            or the whole file name when it has no suffix.
        """

        suffix = PurePosixPath(self.manifest_file).suffix
        return suffix or self.manifest_file

    @classmethod
    def from_mapping(cls, data: Mapping[str, Any]) -> AppCacheConfig:
        """Validate ``data`` and return the resulting configuration.

        Args:
            data: Raw option mapping merged from configuration sources.

        Returns:
            AppCacheConfig: Validated configuration.

        Raises:
            ConfigError: If any option has an invalid value or is unknown.
        """

        try:
            return cls.model_validate(dict(data))
        except ValidationError as exc:
            raise ConfigError(_describe_validation_error(exc)) from exc

    def to_dict(self) -> dict[str, Any]:
        """Return a JSON-compatible representation using camelCase keys."""

        return self.model_dump(mode="json", by_alias=True)


def _describe_validation_error(error: ValidationError) -> str:
    """Return a single-line summary of ``error`` suitable for CLI output."""

    details = []
    for entry in error.errors():
        location = ".".join(str(part) for part in entry.get("loc", ())) or "<root>"
        details.append(f"{location}: {entry.get('msg', 'invalid value')}")
    return "Invalid appcache configuration (" + "; ".join(details) + ")"


__all__ = [
    "AppCacheConfig",
    "ConfigError",
    "DEFAULT_IGNORE_PATTERN",
    "DEFAULT_MANIFEST_FILE",
    "DEFAULT_NETWORK",
    "DEFAULT_PUBLIC_PATH",
    "DEFAULT_STATIC_ROOT",
]
