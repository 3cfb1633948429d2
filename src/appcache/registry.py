# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.
"""Sorted, deduplicated registry of asset paths listed in the CACHE section."""

from __future__ import annotations

import bisect
import re
from collections.abc import Iterable, Iterator
from threading import Lock


class PathRegistry:
    """Track the asset paths eligible for the manifest's cache list.

    Entries are kept in lexicographic order at all times so readers never
    observe an unsorted snapshot. Entries are only removed by :meth:`discard`
    and :meth:`clear`.
    """

    def __init__(self, ignore: re.Pattern[str], *, manifest_extension: str = ".appcache") -> None:
        """Create an empty registry.

        Args:
            ignore: Pattern searched in each path; matches are never registered.
            manifest_extension: Suffix of manifest files, excluded so the
                manifest never lists itself.
        """

        self._ignore = ignore
        self._manifest_extension = manifest_extension
        self._paths: list[str] = []
        self._lock = Lock()

    def is_eligible(self, path: str) -> bool:
        """Return whether ``path`` passes the exclusion rules.

        Args:
            path: Relative asset path.

        Returns:
            bool: ``False`` for manifest files and paths matching the ignore
            pattern, ``True`` otherwise. Presence in the registry is not
            considered.
        """

        if path.endswith(self._manifest_extension):
            return False
        return self._ignore.search(path) is None

    def consider_path(self, path: str) -> bool:
        """Register ``path`` when it is eligible and not yet present.

        Args:
            path: Relative asset path.

        Returns:
            bool: ``True`` when the path was inserted.
        """

        if not self.is_eligible(path):
            return False
        with self._lock:
            index = bisect.bisect_left(self._paths, path)
            if index < len(self._paths) and self._paths[index] == path:
                return False
            self._paths.insert(index, path)
        return True

    def discard(self, paths: Iterable[str]) -> None:
        """Remove ``paths`` from the registry, ignoring absent entries."""

        with self._lock:
            for path in paths:
                index = bisect.bisect_left(self._paths, path)
                if index < len(self._paths) and self._paths[index] == path:
                    del self._paths[index]

    def clear(self) -> None:
        """Remove every registered path."""

        with self._lock:
            self._paths.clear()

    @property
    def paths(self) -> tuple[str, ...]:
        """Return a sorted snapshot of the registered paths."""

        with self._lock:
            return tuple(self._paths)

    def __contains__(self, path: object) -> bool:
        with self._lock:
            return path in self._paths

    def __iter__(self) -> Iterator[str]:
        return iter(self.paths)

    def __len__(self) -> int:
        with self._lock:
            return len(self._paths)


__all__ = ["PathRegistry"]
