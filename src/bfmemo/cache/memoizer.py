"""Transparent memoizing wrapper for expensive reader initialization.

``Memoizer`` is a **drop-in wrapper** around any reader that satisfies
:class:`~bfmemo.core.protocols.MemoizableReader`. Opening a source through
it either adopts a previously persisted state (hit) or runs the reader's
real initialization (miss), timing it and persisting the result when it
took at least ``config.minimum_elapsed_ms``.

Caching never changes what the caller observes: every caching failure
degrades to "behave as if caching were disabled". Only the reader's own
initialization failure is raised, as :class:`InitializationError`.

Usage:

.. code-block:: python

    config = MemoConfig(directory="~/.cache/bfmemo", minimum_elapsed_ms=0)
    with Memoizer(FakeReader(), config) as memo:
        memo.set_id("/data/a&sizeX=20&sizeY=20.fake")
        plane = memo.open_bytes(0)       # delegated to the reader
        print(memo.is_loaded_from_memo)
"""

from __future__ import annotations

import logging
import time
from pathlib import Path
from typing import Any, Callable, Optional

from bfmemo.cache.envelope import (
    PickleSerializer,
    make_record,
    read_payload,
    unpack_record,
    write_memo,
)
from bfmemo.cache.paths import SourceId, canonical_source, resolve_memo_path
from bfmemo.cache.validity import check_memo
from bfmemo.config.schemas import MemoConfig
from bfmemo.core.constants import LoadOutcome, MemoizerState, MemoStatus, SaveOutcome
from bfmemo.core.exceptions import InitializationError
from bfmemo.core.logging import get_logger, log_exception
from bfmemo.core.protocols import MemoizableReader, Serializer
from bfmemo.core.types import Fingerprint

logger = get_logger(__name__)

_NO_STATE = object()


class Memoizer:
    """Reader wrapper that persists and restores initialized reader state.

    Parameters
    ----------
    reader : MemoizableReader
        The real reader to delegate to on cache misses.
    config : MemoConfig, optional
        Cache placement and threshold policy. Defaults to disabled.
    serializer : Serializer, optional
        Converts reader state to bytes. Defaults to pickle.
    clock : callable, optional
        Returns seconds as a float; used to time initialization.
    """

    def __init__(
        self,
        reader: MemoizableReader,
        config: Optional[MemoConfig] = None,
        serializer: Optional[Serializer] = None,
        clock: Callable[[], float] = time.perf_counter,
    ) -> None:
        if not isinstance(reader, MemoizableReader):
            raise TypeError(f"{type(reader).__name__} does not support memoization")
        self.reader = reader
        self.config = config if config is not None else MemoConfig.disabled()
        self.serializer = serializer if serializer is not None else PickleSerializer()
        self._clock = clock

        self.state = MemoizerState.UNINITIALIZED
        self.current_id: Optional[SourceId] = None
        self.memo_file: Optional[Path] = None
        self.last_status: Optional[MemoStatus] = None
        self.last_load: Optional[LoadOutcome] = None
        self.last_save = SaveOutcome.NOT_ATTEMPTED
        self.last_elapsed_ms: Optional[float] = None

    # -- Queries ----------------------------------------------------------

    def get_memo_file(self, source_id: SourceId) -> Optional[Path]:
        """Memo path that would be used for ``source_id``, or None. No side effects."""
        return resolve_memo_path(source_id, self.config)

    def check_memo(self, source_id: SourceId) -> MemoStatus:
        return check_memo(self.get_memo_file(source_id), source_id)

    @property
    def is_loaded_from_memo(self) -> bool:
        return self.last_load is LoadOutcome.HIT

    @property
    def is_saved_to_memo(self) -> bool:
        return self.last_save is SaveOutcome.SAVED

    # -- Lifecycle --------------------------------------------------------

    def set_id(self, source_id: SourceId) -> Any:
        """Open ``source_id``, from its memo file when one is valid.

        Returns the reader's opaque state, or None if the reader could not
        snapshot it (the source is still open).

        Raises:
            InitializationError: If the reader fails to initialize the source
        """
        if self.state in (MemoizerState.OPENED, MemoizerState.OPENING):
            self.close()

        self.state = MemoizerState.OPENING
        self.current_id = source_id
        self.last_load = None
        self.last_save = SaveOutcome.NOT_ATTEMPTED
        self.last_elapsed_ms = None

        memo_file = self.get_memo_file(source_id)
        self.memo_file = memo_file
        status = check_memo(memo_file, source_id)
        self.last_status = status

        if status is MemoStatus.VALID:
            state = self._load_memo(memo_file, source_id)
            if state is not _NO_STATE:
                self.last_load = LoadOutcome.HIT
                self.state = MemoizerState.OPENED
                logger.info("Loaded %s from memo %s", source_id, memo_file)
                return state
            status = MemoStatus.CORRUPT
            self.last_status = status

        if status.should_delete:
            _delete_quietly(memo_file)
        elif status is MemoStatus.DISABLED:
            logger.debug("Memo disabled for %s", source_id)

        try:
            state = self._initialize(source_id, memo_file)
        except BaseException:
            self._release_reader()
            self.state = MemoizerState.UNINITIALIZED
            raise
        self.state = MemoizerState.OPENED
        return state

    open = set_id

    def close(self) -> None:
        """Release the reader's state and handles. Safe to call repeatedly."""
        if self.state not in (MemoizerState.OPENED, MemoizerState.OPENING):
            return
        try:
            self.reader.close()
        finally:
            self.state = MemoizerState.CLOSED
            self.current_id = None

    def __enter__(self) -> "Memoizer":
        return self

    def __exit__(self, *exc: object) -> None:
        self.close()

    def __getattr__(self, name: str) -> Any:
        # Only called for attributes the memoizer itself lacks
        if name.startswith("_"):
            raise AttributeError(name)
        reader = self.__dict__.get("reader")
        if reader is None:
            raise AttributeError(name)
        return getattr(reader, name)

    # -- Internal ---------------------------------------------------------

    def _load_memo(self, memo_file: Path, source_id: SourceId) -> Any:
        """Adopt the state in ``memo_file``; ``_NO_STATE`` on any failure."""
        source = str(canonical_source(source_id))
        expected = Fingerprint.of(source)
        if expected is None:
            return _NO_STATE
        try:
            payload = read_payload(memo_file, expected)
            record = self.serializer.loads(payload)
            state = unpack_record(record, self.reader, source)
        except Exception as e:
            log_exception(logger, f"Ignoring unusable memo {memo_file}", e, level=logging.DEBUG)
            return _NO_STATE

        try:
            self.reader.restore_state(state)
        except Exception as e:
            log_exception(logger, f"Could not restore state from {memo_file}", e, level=logging.WARNING)
            self._release_reader()
            return _NO_STATE
        return state

    def _initialize(self, source_id: SourceId, memo_file: Optional[Path]) -> Any:
        source = str(canonical_source(source_id))
        before = Fingerprint.of(source) if memo_file is not None else None

        start = self._clock()
        try:
            self.reader.set_id(source_id)
        except BaseException as e:
            self._release_reader()
            if isinstance(e, Exception):
                raise InitializationError(
                    "Reader failed to initialize source",
                    details={"source": source_id},
                    cause=e,
                ) from e
            raise
        elapsed_ms = (self._clock() - start) * 1000.0

        self.last_elapsed_ms = elapsed_ms
        self.last_load = LoadOutcome.DISABLED if memo_file is None else LoadOutcome.MISS

        try:
            state = self.reader.save_state()
        except Exception as e:
            # The reader is initialized; only persistence is lost
            log_exception(logger, f"Could not snapshot state of {source_id}", e, level=logging.WARNING)
            self.last_save = SaveOutcome.NOT_ATTEMPTED if memo_file is None else SaveOutcome.FAILED
            return None

        self.last_save = self._maybe_save(memo_file, source, before, state, elapsed_ms)
        return state

    def _maybe_save(
        self,
        memo_file: Optional[Path],
        source: str,
        before: Optional[Fingerprint],
        state: Any,
        elapsed_ms: float,
    ) -> SaveOutcome:
        if memo_file is None:
            return SaveOutcome.NOT_ATTEMPTED
        if before is None:
            logger.debug("Not saving memo for %s: source cannot be fingerprinted", source)
            return SaveOutcome.NOT_ATTEMPTED
        if elapsed_ms < self.config.minimum_elapsed_ms:
            logger.debug(
                "Not saving memo for %s: initialized in %.1f ms (< %.1f ms)",
                source,
                elapsed_ms,
                self.config.minimum_elapsed_ms,
            )
            return SaveOutcome.SKIPPED_FAST
        if Fingerprint.of(source) != before:
            logger.info("Not saving memo for %s: source changed during initialization", source)
            return SaveOutcome.SKIPPED_CHANGED

        try:
            payload = self.serializer.dumps(make_record(self.reader, source, state))
            write_memo(memo_file, before, payload)
        except Exception as e:
            log_exception(logger, f"Could not save memo {memo_file}", e, level=logging.WARNING)
            return SaveOutcome.FAILED

        logger.info("Saved memo %s (initialized in %.1f ms)", memo_file, elapsed_ms)
        return SaveOutcome.SAVED

    def _release_reader(self) -> None:
        try:
            self.reader.close()
        except Exception:
            logger.warning("Error closing reader after failure", exc_info=True)


def _delete_quietly(path: Optional[Path]) -> None:
    if path is None:
        return
    try:
        path.unlink()
        logger.debug("Deleted invalid memo %s", path)
    except FileNotFoundError:
        pass
    except OSError:
        logger.debug("Could not delete invalid memo %s", path, exc_info=True)
