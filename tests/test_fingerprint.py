# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.

"""Tests for content digests and the batch fingerprint accumulator."""

from __future__ import annotations

import hashlib
import itertools
import random
import threading

import pytest

from appcache.digest import digest, digest_stream
from appcache.errors import BatchStateError
from appcache.fingerprint import FingerprintAccumulator, combine_digests

FILE_1_DIGEST = "bc39407add8365f6be9ac7b3552e7c29d4096ce1"
FILE_2_DIGEST = "359be5ca457b1a1acb324a27433321d16a59dbac"
FILE_1_AGGREGATE = "a7b003bdeb8e286c215e85e5537cfc080abdc9db"
PAIR_AGGREGATE = "92e8f0ebfc29c1b0c272d615c0c1786347bf5d7b"
EMPTY_AGGREGATE = "da39a3ee5e6b4b0d3255bfef95601890afd80709"


def test_digest_matches_reference_values() -> None:
    assert digest(b"const foo = bar") == FILE_1_DIGEST
    assert digest(b"const bar = baz") == FILE_2_DIGEST


def test_digest_stream_matches_digest() -> None:
    content = bytes(range(256)) * 1024
    chunks = [content[offset : offset + 4096] for offset in range(0, len(content), 4096)]
    assert digest_stream(chunks) == digest(content)
    assert len(digest(content)) == 40


def test_single_file_aggregate_matches_fixture() -> None:
    assert combine_digests([FILE_1_DIGEST]) == FILE_1_AGGREGATE


def test_aggregate_hashes_sorted_joined_digests() -> None:
    expected = hashlib.sha1(f"{FILE_2_DIGEST},{FILE_1_DIGEST}".encode("ascii")).hexdigest()
    assert combine_digests([FILE_1_DIGEST, FILE_2_DIGEST]) == expected == PAIR_AGGREGATE


def test_empty_aggregate_is_deterministic() -> None:
    accumulator = FingerprintAccumulator()
    accumulator.begin_batch(0)
    assert accumulator.is_complete()
    assert accumulator.aggregate() == EMPTY_AGGREGATE


def test_aggregate_ignores_recording_order() -> None:
    digests = [digest(f"asset {index}".encode()) for index in range(5)]
    results = set()
    for permutation in itertools.permutations(digests):
        accumulator = FingerprintAccumulator()
        accumulator.begin_batch(len(permutation))
        for value in permutation:
            accumulator.record_digest(value)
        results.add(accumulator.aggregate())
    assert results == {combine_digests(digests)}


def test_duplicate_digests_are_kept() -> None:
    accumulator = FingerprintAccumulator()
    accumulator.begin_batch(2)
    accumulator.record_digest(FILE_1_DIGEST)
    assert accumulator.record_digest(FILE_1_DIGEST) is True
    assert accumulator.aggregate() == combine_digests([FILE_1_DIGEST, FILE_1_DIGEST])
    assert accumulator.aggregate() != FILE_1_AGGREGATE


def test_record_digest_reports_completion_once() -> None:
    accumulator = FingerprintAccumulator()
    accumulator.begin_batch(2)
    assert accumulator.record_digest(FILE_1_DIGEST) is False
    assert accumulator.is_complete() is False
    assert accumulator.record_digest(FILE_2_DIGEST) is True
    assert accumulator.is_complete() is True


def test_barrier_fires_exactly_once_across_threads() -> None:
    digests = [digest(str(index).encode()) for index in range(200)]
    random.Random(7).shuffle(digests)
    accumulator = FingerprintAccumulator()
    accumulator.begin_batch(len(digests))
    start = threading.Barrier(len(digests))
    completions: list[bool] = []
    completions_lock = threading.Lock()

    def worker(value: str) -> None:
        start.wait()
        completed = accumulator.record_digest(value)
        with completions_lock:
            completions.append(completed)

    threads = [threading.Thread(target=worker, args=(value,)) for value in digests]
    for thread in threads:
        thread.start()
    for thread in threads:
        thread.join()

    assert completions.count(True) == 1
    assert accumulator.aggregate() == combine_digests(digests)


def test_aggregate_before_completion_raises() -> None:
    accumulator = FingerprintAccumulator()
    accumulator.begin_batch(2)
    accumulator.record_digest(FILE_1_DIGEST)
    with pytest.raises(BatchStateError):
        accumulator.aggregate()


def test_record_without_batch_raises() -> None:
    with pytest.raises(BatchStateError):
        FingerprintAccumulator().record_digest(FILE_1_DIGEST)


def test_record_after_completion_raises() -> None:
    accumulator = FingerprintAccumulator()
    accumulator.begin_batch(1)
    accumulator.record_digest(FILE_1_DIGEST)
    with pytest.raises(BatchStateError):
        accumulator.record_digest(FILE_2_DIGEST)


def test_begin_batch_resets_previous_digests() -> None:
    accumulator = FingerprintAccumulator()
    accumulator.begin_batch(1)
    accumulator.record_digest(FILE_2_DIGEST)
    accumulator.begin_batch(1)
    assert accumulator.recorded_count == 0
    accumulator.record_digest(FILE_1_DIGEST)
    assert accumulator.aggregate() == FILE_1_AGGREGATE


def test_negative_expected_count_is_rejected() -> None:
    with pytest.raises(ValueError):
        FingerprintAccumulator().begin_batch(-1)
