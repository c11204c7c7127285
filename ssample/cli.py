"""Command-line entry point.

Usage:
    some-command | ssample -l 20
    tail -f app.log | ssample -l 50 --http :8080 --teez app.log.gz
    ssample --config sample.yaml seed=7 < data.txt

Reads records from stdin until it is exhausted or SIGINT arrives, then writes
the uniform sample to stdout as ``<lineNumber>\\t<line>`` rows. Diagnostics go
to stderr.
"""

from __future__ import annotations

import argparse
import logging
import signal
import sys
from collections.abc import Sequence
from typing import Any, BinaryIO

from ssample.config import ConfigurationError, load_config
from ssample.reader import open_input, start_reader
from ssample.render import render_text
from ssample.reservoir import NumpyRandomSource, ReservoirStore
from ssample.server import ExposureServer
from ssample.sinks import Sink, open_sinks
from ssample.termination import TerminationCoordinator, install_interrupt_handler

# how long main waits for an in-flight record before closing sinks itself
READER_GRACE_SECONDS = 1.0

LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"

logger = logging.getLogger("ssample")


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="ssample",
        description="Keep a uniform random sample of lines read from stdin.",
    )
    parser.add_argument(
        "-l",
        "--lines",
        type=int,
        default=None,
        help="keep this many lines, uniformly sampled across all input (default 100)",
    )
    parser.add_argument("--http", default=None, help="host:port (or :port) to serve http on")
    parser.add_argument("-a", "--append", default=None, help="also append all input to file")
    parser.add_argument(
        "--teez", default=None, help="also write all input to file (gzipped)"
    )
    parser.add_argument(
        "--echo",
        action="store_true",
        default=None,
        help="also write all lines to stdout as they happen",
    )
    parser.add_argument("--seed", type=int, default=None, help="random seed")
    parser.add_argument("--config", default=None, help="YAML config file")
    parser.add_argument("--log-level", dest="log_level", default=None)
    parser.add_argument("overrides", nargs="*", help="key=value config overrides")
    return parser


def _flag_overrides(args: argparse.Namespace) -> dict[str, Any]:
    keys = ("lines", "http", "append", "teez", "echo", "seed", "log_level")
    return {key: getattr(args, key) for key in keys if getattr(args, key) is not None}


def _close_sinks(sinks: Sequence[Sink]) -> None:
    for sink in sinks:
        sink.close()


def main(
    argv: Sequence[str] | None = None,
    stdin: BinaryIO | None = None,
    stdout: BinaryIO | None = None,
) -> int:
    """Run one sampling session and return the process exit code."""
    args = build_parser().parse_args(argv)
    logging.basicConfig(level=logging.INFO, format=LOG_FORMAT, stream=sys.stderr)
    stdin = stdin if stdin is not None else sys.stdin.buffer
    stdout = stdout if stdout is not None else sys.stdout.buffer

    try:
        config = load_config(args.config, _flag_overrides(args), args.overrides)
    except ConfigurationError as exc:
        logger.error("configuration error: %s", exc)
        return 1
    logging.getLogger().setLevel(config.log_level.upper())

    store = ReservoirStore(config.lines, rng=NumpyRandomSource(config.seed))
    sinks: list[Sink] = []
    server: ExposureServer | None = None
    try:
        sinks = open_sinks(config, stdout)
        if config.http:
            server = ExposureServer(store, config.http)
    except ConfigurationError as exc:
        logger.error("configuration error: %s", exc)
        _close_sinks(sinks)
        return 1

    coordinator = TerminationCoordinator()
    previous_handler = install_interrupt_handler(coordinator)
    try:
        if server is not None:
            server.start()
        reader = start_reader(open_input(stdin), store, coordinator, sinks)
        coordinator.wait()
        reader.join(timeout=READER_GRACE_SECONDS)
        if reader.is_alive():
            # blocked on input; the reader admits nothing more once stopped
            logger.info("input still open, closing sinks")
            _close_sinks(sinks)

        snapshot = store.snapshot()
        logger.info(
            "stopped (%s): kept %d of %d lines", coordinator.reason, len(snapshot), snapshot.seen
        )
        stdout.write(render_text(snapshot))
        stdout.flush()
    finally:
        if server is not None:
            server.shutdown()
        signal.signal(signal.SIGINT, previous_handler)
    return 0
