"""Producer side: feed input records into the reservoir."""

from __future__ import annotations

import io
import logging
import threading
from collections.abc import Iterable, Sequence
from typing import BinaryIO, TextIO

from ssample.reservoir.store import ReservoirStore
from ssample.sinks import Sink
from ssample.termination import STREAM_EXHAUSTED, STREAM_FAULT, TerminationCoordinator

logger = logging.getLogger(__name__)


def open_input(stream: BinaryIO) -> TextIO:
    """Wrap a binary stream as UTF-8 text split on ``\\n`` only.

    Undecodable bytes survive as surrogates so they can be written back out
    unchanged.
    """
    return io.TextIOWrapper(stream, encoding="utf-8", errors="surrogateescape", newline="\n")


def _chomp(line: str) -> str:
    if line.endswith("\n"):
        line = line[:-1]
    if line.endswith("\r"):
        line = line[:-1]
    return line


def _tee(sinks: list[Sink], record: str) -> None:
    for sink in list(sinks):
        try:
            sink.write(record)
        except (OSError, ValueError) as exc:
            logger.error("dropping sink %s after write failure: %s", type(sink).__name__, exc)
            sinks.remove(sink)
            _close(sink)


def _close(sink: Sink) -> None:
    try:
        sink.close()
    except (OSError, ValueError) as exc:
        logger.error("failed to close sink %s: %s", type(sink).__name__, exc)


def feed_records(
    records: Iterable[str],
    store: ReservoirStore,
    coordinator: TerminationCoordinator,
    sinks: Sequence[Sink] = (),
) -> int:
    """Admit records until the input ends or *coordinator* is stopped.

    The coordinator is checked before each record, so nothing is admitted
    once it has stopped. On return all sinks are closed and the coordinator
    is stopped with :data:`STREAM_EXHAUSTED`, or :data:`STREAM_FAULT` after a
    read error (a no-op if an interrupt got there first). Both mean "no more
    input"; the reason only feeds the diagnostics.

    Returns:
        Number of records admitted by this call.
    """
    live_sinks = list(sinks)
    admitted = 0
    reason = STREAM_EXHAUSTED
    iterator = iter(records)
    try:
        while True:
            try:
                line = next(iterator)
            except StopIteration:
                logger.info("input exhausted after %d records", admitted)
                break
            except (OSError, ValueError) as exc:
                logger.warning("input read fault after %d records: %s", admitted, exc)
                reason = STREAM_FAULT
                break
            if coordinator.is_stopped:
                logger.info("got interrupt, stopped reading after %d records", admitted)
                break
            record = _chomp(line)
            _tee(live_sinks, record)
            store.admit(record)
            admitted += 1
    finally:
        for sink in live_sinks:
            _close(sink)
        coordinator.stop(reason)
    return admitted


def start_reader(
    records: Iterable[str],
    store: ReservoirStore,
    coordinator: TerminationCoordinator,
    sinks: Sequence[Sink] = (),
) -> threading.Thread:
    """Run :func:`feed_records` on a daemon thread and return the thread."""
    thread = threading.Thread(
        target=feed_records,
        args=(records, store, coordinator, sinks),
        name="ssample-reader",
        daemon=True,
    )
    thread.start()
    return thread
