# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.
"""Decide whether a new aggregate fingerprint warrants rewriting the manifest."""

from __future__ import annotations

from pathlib import Path

from .manifest import MANIFEST_ENCODING, MANIFEST_HEADER


class ChangeGate:
    """Remember the last committed fingerprint and compare new ones against it."""

    def __init__(self, committed: str | None = None) -> None:
        self._committed = committed

    @property
    def committed(self) -> str | None:
        """Return the fingerprint of the last written manifest, if any."""

        return self._committed

    def should_commit(self, new_aggregate: str) -> bool:
        """Return ``True`` when ``new_aggregate`` differs from the committed value."""

        return self._committed is None or self._committed != new_aggregate

    def commit(self, new_aggregate: str) -> None:
        """Record ``new_aggregate`` as the fingerprint of the written manifest."""

        self._committed = new_aggregate


def read_committed_manifest(path: Path) -> str | None:
    """Return the text of the manifest previously written to ``path``.

    The fingerprint only covers asset contents, so a fresh process compares
    the full text to notice renamed assets and changed options.

    Args:
        path: Location of a previously written manifest.

    Returns:
        str | None: The manifest text, or ``None`` when the file is missing,
        unreadable or does not start with the manifest header.
    """

    try:
        with path.open(encoding=MANIFEST_ENCODING, newline="") as handle:
            text = handle.read()
    except (OSError, UnicodeDecodeError):
        return None
    if text.partition("\n")[0].rstrip("\r") != MANIFEST_HEADER:
        return None
    return text


__all__ = ["ChangeGate", "read_committed_manifest"]
