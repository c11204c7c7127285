"""ssample: uniform fixed-size sampling of an unbounded line stream.

Public API
----------
The usable surface is importable directly from ``ssample``::

    from ssample import ReservoirStore, TerminationCoordinator, feed_records
    from ssample.server import create_app
    from ssample.cli import main
"""

from __future__ import annotations

# Configuration
from ssample.config import ConfigurationError, SampleConfig, load_config

# Producer side
from ssample.reader import feed_records, open_input, start_reader

# Wire formats
from ssample.render import RenderFormat, boolish, render, select_format

# Core reservoir
from ssample.reservoir import Entry, NumpyRandomSource, RandomSource, ReservoirStore, Snapshot

# Tee sinks
from ssample.sinks import EchoSink, FileSink, GzipSink, Sink

# Termination
from ssample.termination import (
    INTERRUPT,
    STREAM_EXHAUSTED,
    STREAM_FAULT,
    TerminationCoordinator,
)

__version__ = "0.1.0"

__all__ = [
    # Core
    "ReservoirStore",
    "Snapshot",
    "Entry",
    "RandomSource",
    "NumpyRandomSource",
    # Coordination
    "TerminationCoordinator",
    "STREAM_EXHAUSTED",
    "STREAM_FAULT",
    "INTERRUPT",
    # Producer
    "feed_records",
    "start_reader",
    "open_input",
    # Sinks
    "Sink",
    "FileSink",
    "GzipSink",
    "EchoSink",
    # Rendering
    "RenderFormat",
    "boolish",
    "render",
    "select_format",
    # Configuration
    "SampleConfig",
    "ConfigurationError",
    "load_config",
    "__version__",
]
