# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.
"""Value objects exchanged between the build host and the plugin."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from pathlib import Path


class BatchState(str, Enum):
    """Enumerate the lifecycle states of a plugin instance across one batch."""

    IDLE = "idle"
    DIGESTING = "digesting"
    AGGREGATE_READY = "aggregate_ready"
    COMMITTED = "committed"
    SKIPPED = "skipped"


@dataclass(frozen=True, slots=True)
class AssetFile:
    """Describe one compiled asset handed over by the build host.

    Attributes:
        path: Asset path relative to the public directory, ``/``-separated.
        content: Asset bytes when the host already holds them in memory.
        source: Filesystem location to read when ``content`` is ``None``.
            Defaults to ``path`` resolved against the public directory.
    """

    path: str
    content: bytes | None = None
    source: Path | None = None


@dataclass(frozen=True, slots=True)
class BatchResult:
    """Bundle the aggregate fingerprint with the cache paths of the same batch."""

    fingerprint: str
    paths: tuple[str, ...]


@dataclass(frozen=True, slots=True)
class BatchOutcome:
    """Report how a batch ended.

    Attributes:
        state: :attr:`BatchState.COMMITTED` or :attr:`BatchState.SKIPPED`.
        fingerprint: Aggregate fingerprint of the batch, ``None`` when the
            batch never produced one.
        manifest_path: Manifest written for the batch, if any.
        paths: Cache paths rendered (or that would have been rendered).
    """

    state: BatchState
    fingerprint: str | None
    manifest_path: Path | None = None
    paths: tuple[str, ...] = ()


__all__ = ["AssetFile", "BatchOutcome", "BatchResult", "BatchState"]
