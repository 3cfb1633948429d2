# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.
"""Render and persist application-cache manifest documents."""

from __future__ import annotations

import os
import tempfile
from collections.abc import Mapping, Sequence
from pathlib import Path
from typing import Final

from .config import AppCacheConfig
from .errors import WriteError
from .models import BatchResult

MANIFEST_HEADER: Final[str] = "CACHE MANIFEST"
NETWORK_SECTION: Final[str] = "NETWORK:"
FALLBACK_SECTION: Final[str] = "FALLBACK:"
CACHE_SECTION: Final[str] = "CACHE:"
MANIFEST_ENCODING: Final[str] = "utf-8"


def format_fallback(fallback: Mapping[str, str]) -> str:
    """Return ``"<pattern> <resource>"`` lines ordered by pattern."""

    return "\n".join(f"{key} {fallback[key]}" for key in sorted(fallback))


def format_cache_entries(paths: Sequence[str], static_root: str) -> str:
    """Return one ``"<static_root>/<path>"`` line per path, sorted by path."""

    return "\n".join(f"{static_root}/{path}" for path in sorted(paths))


def render_manifest(fingerprint: str, paths: Sequence[str], config: AppCacheConfig) -> str:
    """Return the manifest document for ``paths`` stamped with ``fingerprint``.

    Args:
        fingerprint: Aggregate fingerprint written to the comment line.
        paths: Cache-eligible asset paths.
        config: Options providing the NETWORK, FALLBACK and external entries.

    Returns:
        str: Complete manifest text. External cache entries follow the
        path-derived entries verbatim; when there are none the document ends
        with the newline after the last path entry.
    """

    network = "\n".join(config.network)
    fallback = format_fallback(config.fallback)
    cache_entries = format_cache_entries(paths, config.static_root)
    external = "\n".join(config.external_cache_entries)
    return (
        f"{MANIFEST_HEADER}\n"
        f"# {fingerprint}\n"
        "\n"
        f"{NETWORK_SECTION}\n"
        f"{network}\n"
        "\n"
        f"{FALLBACK_SECTION}\n"
        f"{fallback}\n"
        "\n"
        f"{CACHE_SECTION}\n"
        f"{cache_entries}\n"
        f"{external}"
    )


def persist_manifest(text: str, destination: Path) -> Path:
    """Replace the content of ``destination`` with ``text``.

    The document is written to a temporary sibling and moved into place, so
    readers observe either the previous manifest or the new one in full.

    Args:
        text: Rendered manifest document.
        destination: Manifest file location.

    Returns:
        Path: ``destination``.

    Raises:
        WriteError: If the directory cannot be created or the file cannot be
        written or replaced.
    """

    temp_name: str | None = None
    try:
        destination.parent.mkdir(parents=True, exist_ok=True)
        with tempfile.NamedTemporaryFile(
            "w",
            encoding=MANIFEST_ENCODING,
            newline="",
            dir=destination.parent,
            prefix=f".{destination.name}.",
            suffix=".tmp",
            delete=False,
        ) as handle:
            temp_name = handle.name
            handle.write(text)
        os.replace(temp_name, destination)
    except OSError as exc:
        if temp_name is not None:
            Path(temp_name).unlink(missing_ok=True)
        raise WriteError(destination, str(exc)) from exc
    return destination


class ManifestWriter:
    """Render batch results and persist them inside the public directory."""

    def __init__(self, config: AppCacheConfig, public_dir: Path) -> None:
        self._config = config
        self._public_dir = public_dir

    @property
    def destination(self) -> Path:
        """Return the manifest file location."""

        return self._public_dir / self._config.manifest_file

    def render(self, result: BatchResult) -> str:
        """Return the manifest text for ``result``."""

        return render_manifest(result.fingerprint, result.paths, self._config)

    def write(self, result: BatchResult) -> Path:
        """Render ``result`` and overwrite the manifest file with it.

        Raises:
            WriteError: If the manifest cannot be persisted.
        """

        return persist_manifest(self.render(result), self.destination)


__all__ = [
    "CACHE_SECTION",
    "FALLBACK_SECTION",
    "MANIFEST_HEADER",
    "ManifestWriter",
    "NETWORK_SECTION",
    "format_cache_entries",
    "format_fallback",
    "persist_manifest",
    "render_manifest",
]
