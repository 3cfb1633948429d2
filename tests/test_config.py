# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.

"""Tests for configuration defaults and validation."""

from __future__ import annotations

import re

import pytest

from appcache.config import AppCacheConfig, ConfigError


def test_defaults() -> None:
    config = AppCacheConfig()
    assert config.ignore.pattern == r"(?:^|[\\/])[.]"
    assert config.external_cache_entries == []
    assert config.network == ["*"]
    assert config.fallback == {}
    assert config.static_root == "."
    assert config.manifest_file == "appcache.appcache"
    assert config.manifest_extension == ".appcache"


def test_camel_case_keys_are_accepted() -> None:
    config = AppCacheConfig.from_mapping(
        {
            "externalCacheEntries": ["https://cdn.example.com/lib.js"],
            "staticRoot": "/static",
            "manifestFile": "offline.manifest",
            "ignore": r"\.map$",
        },
    )
    assert config.external_cache_entries == ["https://cdn.example.com/lib.js"]
    assert config.static_root == "/static"
    assert config.manifest_extension == ".manifest"
    assert isinstance(config.ignore, re.Pattern)
    assert config.ignore.search("app.js.map")


def test_snake_case_keys_are_accepted() -> None:
    config = AppCacheConfig.from_mapping({"static_root": "/assets", "network": ["/api"]})
    assert config.static_root == "/assets"
    assert config.network == ["/api"]


def test_unknown_keys_are_rejected() -> None:
    with pytest.raises(ConfigError, match="Extra inputs"):
        AppCacheConfig.from_mapping({"cacheEverything": True})


def test_invalid_regex_is_rejected() -> None:
    with pytest.raises(ConfigError, match="ignore"):
        AppCacheConfig.from_mapping({"ignore": "("})


def test_manifest_file_must_be_a_bare_name() -> None:
    with pytest.raises(ConfigError, match="bare file name"):
        AppCacheConfig.from_mapping({"manifestFile": "../escape.appcache"})


def test_manifest_name_without_suffix_is_its_own_extension() -> None:
    config = AppCacheConfig(manifest_file="MANIFEST")
    assert config.manifest_extension == "MANIFEST"


def test_to_dict_uses_camel_case() -> None:
    payload = AppCacheConfig().to_dict()
    assert payload["staticRoot"] == "."
    assert payload["manifestFile"] == "appcache.appcache"
    assert payload["ignore"] == r"(?:^|[\\/])[.]"
