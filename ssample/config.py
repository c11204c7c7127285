"""Runtime configuration for one sampling run."""

from __future__ import annotations

import logging
from collections.abc import Mapping, Sequence
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Optional

from dotenv import find_dotenv, load_dotenv
from omegaconf import OmegaConf
from omegaconf.errors import OmegaConfBaseException


class ConfigurationError(ValueError):
    """Raised for settings that make the run impossible to start."""


@dataclass
class SampleConfig:
    """Settings for one run.

    Attributes:
        lines: Reservoir capacity.
        http: ``host:port`` or ``:port`` to serve the live sample on.
            ``None`` disables the HTTP view. Defaults to ``$SSAMPLE_HTTP``.
        append: Also append every input record to this file.
        teez: Also write every input record, gzipped, to this file.
            Ignored when ``append`` is set.
        echo: Also copy every input record to stdout as it arrives.
        seed: Random seed; ``None`` draws from OS entropy.
        log_level: Level for diagnostics on stderr.
    """

    lines: int = 100
    http: Optional[str] = "${oc.env:SSAMPLE_HTTP,null}"
    append: Optional[str] = None
    teez: Optional[str] = None
    echo: bool = False
    seed: Optional[int] = None
    log_level: str = "INFO"


def parse_listen_address(address: str) -> tuple[str, int]:
    """Split ``host:port`` (or ``:port``, meaning all interfaces).

    Examples:
        >>> parse_listen_address(":8080")
        ('0.0.0.0', 8080)
        >>> parse_listen_address("[::1]:9000")
        ('::1', 9000)
    """
    host, sep, port_text = address.rpartition(":")
    if not sep:
        raise ConfigurationError(f"listen address {address!r} must be host:port or :port")
    try:
        port = int(port_text)
    except ValueError:
        raise ConfigurationError(f"invalid port in listen address {address!r}") from None
    if not 0 <= port <= 65535:
        raise ConfigurationError(f"port out of range in listen address {address!r}")
    host = host.strip("[]") or "0.0.0.0"
    return host, port


def _validate(config: SampleConfig) -> None:
    if config.lines <= 0:
        raise ConfigurationError(f"lines must be positive, got {config.lines}")
    if config.http:
        parse_listen_address(config.http)
    if not isinstance(logging.getLevelName(config.log_level.upper()), int):
        raise ConfigurationError(f"unknown log level {config.log_level!r}")


def load_config(
    config_file: str | Path | None = None,
    overrides: Mapping[str, Any] | None = None,
    dotlist: Sequence[str] = (),
) -> SampleConfig:
    """Build a :class:`SampleConfig`.

    Sources are merged in order, later ones winning: structured defaults,
    *config_file* (YAML), *overrides* (already-typed values, e.g. from CLI
    flags), then *dotlist* (``key=value`` strings). A ``.env`` file in the
    working directory is loaded first so ``SSAMPLE_HTTP`` may come from it.

    Raises:
        ConfigurationError: If a source is unreadable or a value is invalid.
    """
    load_dotenv(find_dotenv(usecwd=True))
    try:
        cfg = OmegaConf.structured(SampleConfig)
        if config_file is not None:
            cfg = OmegaConf.merge(cfg, OmegaConf.load(config_file))
        if overrides:
            cfg = OmegaConf.merge(cfg, OmegaConf.create(dict(overrides)))
        if dotlist:
            cfg = OmegaConf.merge(cfg, OmegaConf.from_dotlist(list(dotlist)))
        config = OmegaConf.to_object(cfg)
    except OSError as exc:
        raise ConfigurationError(f"{config_file}: {exc}") from exc
    except OmegaConfBaseException as exc:
        raise ConfigurationError(str(exc)) from exc
    _validate(config)
    return config
