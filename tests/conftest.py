# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.

"""Shared pytest fixtures."""

from __future__ import annotations

from pathlib import Path

import pytest

from appcache.models import AssetFile


@pytest.fixture
def mock_files() -> list[AssetFile]:
    """Return the two reference assets used across manifest tests."""
    return [
        AssetFile(path="path/to/file_1.js", content=b"const foo = bar"),
        AssetFile(path="path/to/file_2.css", content=b"const bar = baz"),
    ]


@pytest.fixture
def ignored_files() -> list[AssetFile]:
    """Return a manifest file followed by a regular asset."""
    return [
        AssetFile(path="path/to/file_1.appcache", content=b"appcache manifest"),
        AssetFile(path="path/to/file_2.js", content=b"const bar = baz"),
    ]


@pytest.fixture
def public_dir(tmp_path: Path) -> Path:
    """Return a public output directory populated with the reference assets."""
    public = tmp_path / "public"
    (public / "path" / "to").mkdir(parents=True)
    (public / "path" / "to" / "file_1.js").write_bytes(b"const foo = bar")
    (public / "path" / "to" / "file_2.css").write_bytes(b"const bar = baz")
    return public
