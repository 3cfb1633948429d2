# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.
"""Exception hierarchy surfaced to build hosts."""

from __future__ import annotations

from pathlib import Path


class AppCacheError(Exception):
    """Base class for failures raised while producing a manifest."""


class ReadError(AppCacheError):
    """Raised when the content of an asset cannot be obtained."""

    def __init__(self, path: str, reason: str | None = None) -> None:
        """Record the asset ``path`` whose content could not be read.

        Args:
            path: Relative asset path reported by the host.
            reason: Optional human readable cause.
        """

        self.path = path
        message = f"Unable to read asset {path!r}"
        if reason:
            message = f"{message}: {reason}"
        super().__init__(message)


class WriteError(AppCacheError):
    """Raised when the manifest file cannot be persisted."""

    def __init__(self, destination: Path, reason: str | None = None) -> None:
        """Record the manifest ``destination`` that could not be written.

        Args:
            destination: Manifest file location.
            reason: Optional human readable cause.
        """

        self.destination = destination
        message = f"Unable to write manifest {destination}"
        if reason:
            message = f"{message}: {reason}"
        super().__init__(message)


class BatchStateError(AppCacheError):
    """Raised when a hook is invoked outside the batch protocol."""


__all__ = ["AppCacheError", "BatchStateError", "ReadError", "WriteError"]
