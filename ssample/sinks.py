"""Destinations that receive a copy of every input record."""

from __future__ import annotations

import gzip
import logging
import threading
from abc import ABC, abstractmethod
from pathlib import Path
from typing import BinaryIO, TextIO

from ssample.config import ConfigurationError, SampleConfig

logger = logging.getLogger(__name__)


class Sink(ABC):
    """Append-only record destination."""

    @abstractmethod
    def write(self, record: str) -> None:
        """Write one record followed by a newline."""

    @abstractmethod
    def close(self) -> None:
        """Flush and release the destination."""


class _FileBackedSink(Sink):
    """Text file sink whose close may race the reader thread.

    Writes and close share a lock; closing twice is a no-op, and writing
    after close raises ``ValueError``.
    """

    def __init__(self, path: str | Path) -> None:
        self.path = Path(path)
        self._lock = threading.Lock()
        try:
            self._fh = self._open()
        except OSError as exc:
            raise ConfigurationError(f"{self.path}: {exc}") from exc

    @abstractmethod
    def _open(self) -> TextIO:
        """Open the underlying text stream."""

    def write(self, record: str) -> None:
        with self._lock:
            self._fh.write(record + "\n")

    def close(self) -> None:
        with self._lock:
            self._fh.close()


class FileSink(_FileBackedSink):
    """Appends records to a plain text file."""

    def _open(self) -> TextIO:
        return self.path.open("a", encoding="utf-8", errors="surrogateescape")


class GzipSink(_FileBackedSink):
    """Writes records to a gzip file, truncating it (gzip cannot append)."""

    def _open(self) -> TextIO:
        return gzip.open(self.path, "wt", encoding="utf-8", errors="surrogateescape")


class EchoSink(Sink):
    """Copies records to a binary stream (normally stdout) as they arrive."""

    def __init__(self, stream: BinaryIO) -> None:
        self._stream = stream

    def write(self, record: str) -> None:
        self._stream.write(record.encode("utf-8", "surrogateescape") + b"\n")
        self._stream.flush()

    def close(self) -> None:
        # stdout belongs to the caller
        self._stream.flush()


def open_sinks(config: SampleConfig, stdout: BinaryIO) -> list[Sink]:
    """Open the sinks *config* asks for.

    Raises:
        ConfigurationError: If a file sink cannot be opened.
    """
    sinks: list[Sink] = []
    if config.append:
        if config.teez:
            logger.warning("both append and teez set; ignoring teez=%s", config.teez)
        sinks.append(FileSink(config.append))
    elif config.teez:
        sinks.append(GzipSink(config.teez))
    if config.echo:
        sinks.append(EchoSink(stdout))
    return sinks
