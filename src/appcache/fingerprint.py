# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.
"""Order-independent aggregate fingerprint over one batch of asset digests."""

from __future__ import annotations

from collections.abc import Iterable
from threading import Lock
from typing import Final

from .digest import digest
from .errors import BatchStateError

DIGEST_SEPARATOR: Final[str] = ","


def combine_digests(digests: Iterable[str]) -> str:
    """Return the aggregate fingerprint for ``digests``.

    Digests are sorted by value before joining, so the result does not
    depend on the order in which assets finished reading.

    Args:
        digests: Hex digests of every asset in the batch.

    Returns:
        str: Hex digest of the sorted, separator-joined digests.
    """

    joined = DIGEST_SEPARATOR.join(sorted(digests))
    return digest(joined.encode("ascii"))


class FingerprintAccumulator:
    """Collect per-asset digests and fire once when the batch is complete.

    The completion check is performed in the same critical section as the
    insertion, so exactly one :meth:`record_digest` call observes the
    transition to complete even when digests arrive from several threads.
    """

    def __init__(self) -> None:
        self._lock = Lock()
        self._digests: list[str] = []
        self._expected: int | None = None
        self._aggregate: str | None = None

    def begin_batch(self, expected_count: int) -> None:
        """Reset collected digests and expect ``expected_count`` new ones.

        Args:
            expected_count: Number of eligible assets in the batch.

        Raises:
            ValueError: If ``expected_count`` is negative.
        """

        if expected_count < 0:
            raise ValueError("expected_count must be non-negative")
        with self._lock:
            self._digests = []
            self._expected = expected_count
            self._aggregate = None

    def record_digest(self, value: str) -> bool:
        """Record one asset digest.

        Args:
            value: Hex digest of a single asset.

        Returns:
            bool: ``True`` for the single call whose digest completed the batch.

        Raises:
            BatchStateError: If no batch is active or the batch is already complete.
        """

        with self._lock:
            if self._expected is None:
                raise BatchStateError("record_digest called before begin_batch")
            if len(self._digests) >= self._expected:
                raise BatchStateError(
                    f"batch already holds all {self._expected} expected digests",
                )
            self._digests.append(value)
            return len(self._digests) == self._expected

    def is_complete(self) -> bool:
        """Return whether every expected digest has been recorded."""

        with self._lock:
            return self._expected is not None and len(self._digests) == self._expected

    @property
    def recorded_count(self) -> int:
        """Return the number of digests recorded so far."""

        with self._lock:
            return len(self._digests)

    def aggregate(self) -> str:
        """Return the aggregate fingerprint of the completed batch.

        Returns:
            str: Hex digest combining all recorded digests.

        Raises:
            BatchStateError: If the batch is not complete.
        """

        with self._lock:
            if self._expected is None or len(self._digests) != self._expected:
                raise BatchStateError("aggregate requested before the batch completed")
            if self._aggregate is None:
                self._aggregate = combine_digests(self._digests)
            return self._aggregate


__all__ = ["DIGEST_SEPARATOR", "FingerprintAccumulator", "combine_digests"]
