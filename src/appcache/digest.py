# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.
"""Content digests for individual assets."""

from __future__ import annotations

import hashlib
from collections.abc import Iterable
from typing import Final

# Fingerprint comments in existing manifests are 40-character SHA-1 digests.
DIGEST_ALGORITHM: Final[str] = "sha1"


def _new_hasher() -> hashlib._Hash:
    return hashlib.new(DIGEST_ALGORITHM, usedforsecurity=False)


def digest(content: bytes) -> str:
    """Return the hex digest of ``content``."""

    hasher = _new_hasher()
    hasher.update(content)
    return hasher.hexdigest()


def digest_stream(chunks: Iterable[bytes]) -> str:
    """Return the hex digest of the concatenation of ``chunks``.

    Args:
        chunks: Content delivered incrementally, e.g. by a chunked file read.

    Returns:
        str: Digest identical to :func:`digest` over the joined chunks.
    """

    hasher = _new_hasher()
    for chunk in chunks:
        hasher.update(chunk)
    return hasher.hexdigest()


__all__ = ["DIGEST_ALGORITHM", "digest", "digest_stream"]
