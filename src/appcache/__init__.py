# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.
"""Application-cache manifest generation for build pipelines."""

from __future__ import annotations

from importlib import metadata

from .config import AppCacheConfig, ConfigError
from .errors import AppCacheError, BatchStateError, ReadError, WriteError
from .models import AssetFile, BatchOutcome, BatchResult, BatchState
from .plugin import AppCachePlugin

__all__ = [
    "AppCacheConfig",
    "AppCacheError",
    "AppCachePlugin",
    "AssetFile",
    "BatchOutcome",
    "BatchResult",
    "BatchState",
    "BatchStateError",
    "ConfigError",
    "ReadError",
    "WriteError",
    "__version__",
]

try:
    __version__ = metadata.version("appcache-manifest")
except metadata.PackageNotFoundError:  # pragma: no cover - local development fallback
    __version__ = "0.0.0"
