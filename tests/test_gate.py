# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.

"""Tests for the fingerprint change gate."""

from __future__ import annotations

from pathlib import Path

from appcache.gate import ChangeGate, read_committed_manifest

FINGERPRINT = "a7b003bdeb8e286c215e85e5537cfc080abdc9db"


def test_first_fingerprint_always_commits() -> None:
    gate = ChangeGate()
    assert gate.committed is None
    assert gate.should_commit(FINGERPRINT) is True


def test_unchanged_fingerprint_is_skipped() -> None:
    gate = ChangeGate()
    gate.commit(FINGERPRINT)
    assert gate.should_commit(FINGERPRINT) is False
    assert gate.should_commit("0" * 40) is True


def test_should_commit_does_not_mutate() -> None:
    gate = ChangeGate(FINGERPRINT)
    gate.should_commit("0" * 40)
    assert gate.committed == FINGERPRINT


def test_read_committed_manifest(tmp_path: Path) -> None:
    manifest = tmp_path / "appcache.appcache"
    text = f"CACHE MANIFEST\n# {FINGERPRINT}\n\nNETWORK:\n*\n"
    manifest.write_text(text, encoding="utf-8")
    assert read_committed_manifest(manifest) == text


def test_read_committed_manifest_rejects_other_files(tmp_path: Path) -> None:
    missing = tmp_path / "missing.appcache"
    assert read_committed_manifest(missing) is None

    not_manifest = tmp_path / "notes.appcache"
    not_manifest.write_text(f"NOTES\n# {FINGERPRINT}\n", encoding="utf-8")
    assert read_committed_manifest(not_manifest) is None

    binary = tmp_path / "binary.appcache"
    binary.write_bytes(b"\xff\xfe\x00")
    assert read_committed_manifest(binary) is None
