# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.
"""Build-host hooks producing an application-cache manifest per batch.

A batch runs through three calls:

1. :meth:`AppCachePlugin.reset_for_batch` with every file of the batch;
2. :meth:`AppCachePlugin.process_file` once per file, in any order and from
   any thread;
3. :meth:`AppCachePlugin.complete_batch` once all ``process_file`` calls have
   settled.

:meth:`AppCachePlugin.on_compile` performs the whole cycle for hosts that
hand over a batch in one call; :meth:`AppCachePlugin.digest_batch` covers the
first two steps. Paths registered by a batch that is rejected are removed
from the registry again.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable, Iterator, Sequence
from concurrent.futures import ThreadPoolExecutor, wait
from pathlib import Path
from threading import Lock
from typing import BinaryIO, Final

from .config import AppCacheConfig
from .digest import digest, digest_stream
from .errors import AppCacheError, BatchStateError, ReadError
from .fingerprint import FingerprintAccumulator
from .gate import ChangeGate
from .logging import info, ok, warn
from .manifest import ManifestWriter
from .models import AssetFile, BatchOutcome, BatchResult, BatchState
from .registry import PathRegistry

LOGGER = logging.getLogger(__name__)

READ_CHUNK_SIZE: Final[int] = 64 * 1024
_ACTIVE_STATES: Final[frozenset[BatchState]] = frozenset({BatchState.DIGESTING, BatchState.AGGREGATE_READY})


def _iter_chunks(handle: BinaryIO) -> Iterator[bytes]:
    while chunk := handle.read(READ_CHUNK_SIZE):
        yield chunk


class AppCachePlugin:
    """Maintain the cache path registry and manifest fingerprint across batches.

    The registry and the committed fingerprint belong to the instance and
    survive from one batch to the next; digests are collected per batch.
    """

    def __init__(
        self,
        config: AppCacheConfig | None = None,
        *,
        public_dir: Path | None = None,
        gate: ChangeGate | None = None,
        max_workers: int | None = None,
        use_emoji: bool = True,
    ) -> None:
        """Create a plugin instance.

        Args:
            config: Manifest options; defaults apply when omitted.
            public_dir: Output directory holding the assets and the manifest.
                Defaults to ``config.public_path``.
            gate: Change gate, e.g. seeded from an existing manifest.
            max_workers: Thread count used by :meth:`on_compile` for reads.
            use_emoji: Whether console messages carry emoji prefixes.
        """

        self.config = config or AppCacheConfig()
        self.public_dir = public_dir if public_dir is not None else Path(self.config.public_path)
        self.registry = PathRegistry(self.config.ignore, manifest_extension=self.config.manifest_extension)
        self.accumulator = FingerprintAccumulator()
        self.gate = gate or ChangeGate()
        self.writer = ManifestWriter(self.config, self.public_dir)
        self._max_workers = max_workers
        self._use_emoji = use_emoji
        self._lock = Lock()
        self._state = BatchState.IDLE
        self._slots: dict[str, int] = {}
        self._claimed: set[str] = set()
        self._inserted: list[str] = []
        self._result: BatchResult | None = None
        self._failure: AppCacheError | None = None

    @property
    def state(self) -> BatchState:
        """Return the current lifecycle state."""

        with self._lock:
            return self._state

    @property
    def result(self) -> BatchResult | None:
        """Return the fingerprint and paths of the active batch once ready."""

        with self._lock:
            return self._result

    @property
    def manifest_path(self) -> Path:
        """Return the manifest file location."""

        return self.writer.destination

    # -------- Batch lifecycle --------

    def reset_for_batch(self, files: Iterable[AssetFile], *, reset_registry: bool = False) -> None:
        """Start a batch made of ``files``.

        Every eligible path receives a slot; the batch completes once each
        slot holds a digest. Paths registered by earlier batches stay in the
        cache list unless ``reset_registry`` is set.

        Args:
            files: All assets the host will pass to :meth:`process_file`.
            reset_registry: Drop every previously registered path so the
                manifest lists only the assets of this batch.
        """

        slots: dict[str, int] = {}
        for asset in files:
            if asset.path not in slots and self.registry.is_eligible(asset.path):
                slots[asset.path] = len(slots)

        with self._lock:
            if self._state in _ACTIVE_STATES:
                LOGGER.warning("Starting a new batch while the previous one was still %s", self._state.value)
                if self._failure is not None:
                    self.registry.discard(self._inserted)
            if reset_registry:
                self.registry.clear()
            self._slots = slots
            self._claimed = set()
            self._inserted = []
            self._result = None
            self._failure = None
            self.accumulator.begin_batch(len(slots))
            self._state = BatchState.DIGESTING
            if not slots:
                self._result = self._build_result()
                self._state = BatchState.AGGREGATE_READY
        LOGGER.debug("Batch started with %d eligible assets", len(slots))

    def process_file(self, file: AssetFile) -> AssetFile:
        """Register ``file`` and fold its content digest into the batch.

        Args:
            file: Asset handed over by the build host.

        Returns:
            AssetFile: ``file`` unchanged, so hosts can chain the hook.

        Raises:
            BatchStateError: If no batch is active.
            ReadError: If the asset content cannot be read.
        """

        with self._lock:
            if self._state not in _ACTIVE_STATES:
                raise BatchStateError("process_file called outside of a batch")
            slotted = file.path in self._slots
            first_claim = slotted and file.path not in self._claimed
            if first_claim:
                self._claimed.add(file.path)

        if self.registry.consider_path(file.path):
            with self._lock:
                self._inserted.append(file.path)
        if not first_claim:
            if not slotted and self.registry.is_eligible(file.path):
                LOGGER.debug("Asset %s was not announced for this batch; not fingerprinted", file.path)
            return file

        try:
            file_digest = self._digest_asset(file)
        except ReadError as exc:
            with self._lock:
                if self._failure is None:
                    self._failure = exc
            raise

        if self.accumulator.record_digest(file_digest):
            with self._lock:
                self._result = self._build_result()
                self._state = BatchState.AGGREGATE_READY
            LOGGER.debug("All %d digests recorded", len(self._slots))
        return file

    def complete_batch(self) -> BatchOutcome:
        """Write the manifest when the batch fingerprint changed.

        Returns:
            BatchOutcome: ``COMMITTED`` when the manifest was written,
            ``SKIPPED`` when the fingerprint is unchanged or the batch never
            produced one.

        Raises:
            BatchStateError: If no batch is active.
            ReadError: If an asset of the batch could not be read.
            WriteError: If the manifest could not be persisted.
        """

        with self._lock:
            if self._state not in _ACTIVE_STATES:
                raise BatchStateError("complete_batch called without an active batch")
            failure = self._failure
            result = self._result
            expected = len(self._slots)
            inserted = self._inserted
            self._inserted = []
            self._state = BatchState.IDLE

        if failure is not None:
            self.registry.discard(inserted)
            LOGGER.debug("Batch rejected: %s", failure)
            raise failure

        if result is None:
            warn(
                f"Batch finished with {self.accumulator.recorded_count} of {expected} assets fingerprinted; "
                "manifest left unchanged",
                use_emoji=self._use_emoji,
            )
            return BatchOutcome(state=BatchState.SKIPPED, fingerprint=None)

        if not self.gate.should_commit(result.fingerprint):
            info(f"Manifest unchanged ({result.fingerprint})", use_emoji=self._use_emoji)
            return BatchOutcome(state=BatchState.SKIPPED, fingerprint=result.fingerprint, paths=result.paths)

        destination = self.writer.write(result)
        self.gate.commit(result.fingerprint)
        ok(f"Wrote {destination} ({result.fingerprint})", use_emoji=self._use_emoji)
        return BatchOutcome(
            state=BatchState.COMMITTED,
            fingerprint=result.fingerprint,
            manifest_path=destination,
            paths=result.paths,
        )

    def digest_batch(self, files: Sequence[AssetFile], *, reset_registry: bool = False) -> None:
        """Start a batch over ``files`` and digest them concurrently.

        Returns once every read has settled. Read failures are kept for
        :meth:`complete_batch`; any other error aborts the batch.

        Args:
            files: Every asset produced by the compile pass.
            reset_registry: Forwarded to :meth:`reset_for_batch`.
        """

        assets = list(files)
        self.reset_for_batch(assets, reset_registry=reset_registry)
        with ThreadPoolExecutor(max_workers=self._max_workers) as executor:
            futures = [executor.submit(self.process_file, asset) for asset in assets]
            wait(futures)
        errors = [exc for future in futures if (exc := future.exception()) is not None]
        if errors and not any(isinstance(exc, ReadError) for exc in errors):
            self._abort_batch()
            raise errors[0]

    def on_compile(self, files: Sequence[AssetFile], *, reset_registry: bool = False) -> BatchOutcome:
        """Run a full batch over ``files``.

        Args:
            files: Every asset produced by the compile pass.
            reset_registry: Forwarded to :meth:`reset_for_batch`.

        Returns:
            BatchOutcome: Result of :meth:`complete_batch`.

        Raises:
            ReadError: If any asset could not be read. The manifest is not written.
            WriteError: If the manifest could not be persisted.
        """

        self.digest_batch(files, reset_registry=reset_registry)
        return self.complete_batch()

    # -------- Internal --------

    def _build_result(self) -> BatchResult:
        return BatchResult(fingerprint=self.accumulator.aggregate(), paths=self.registry.paths)

    def _abort_batch(self) -> None:
        with self._lock:
            inserted = self._inserted
            self._inserted = []
            self._state = BatchState.IDLE
            self._result = None
        self.registry.discard(inserted)

    def _digest_asset(self, file: AssetFile) -> str:
        """Return the content digest of ``file``.

        Raises:
            ReadError: If the asset cannot be read from disk.
        """

        if file.content is not None:
            return digest(file.content)
        source = file.source or self.public_dir / file.path
        try:
            with source.open("rb") as handle:
                return digest_stream(_iter_chunks(handle))
        except OSError as exc:
            raise ReadError(file.path, str(exc)) from exc


__all__ = ["AppCachePlugin", "READ_CHUNK_SIZE"]

