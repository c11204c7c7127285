"""Wire formats for reservoir snapshots.

Three renderings are supported:

- ``json``: ``{"lines": [...], "lineNumbers": [...], "seen": n}``
- ``text``: ``<lineNumber>\\t<content>\\n`` per record
- ``plain``: ``<content>\\n`` per record

Records are decoded with ``surrogateescape``; the text formats write the
original bytes back out, while JSON must be valid UTF-8 and raises
``UnicodeEncodeError`` on undecodable input.
"""

from __future__ import annotations

import json
from collections.abc import Mapping
from enum import Enum

from ssample.reservoir.store import Snapshot

_FALSE_TOKENS = frozenset({"", "f", "false", "0"})


class RenderFormat(str, Enum):
    """Snapshot wire format with its response content type."""

    JSON = "json"
    TEXT = "text"
    PLAIN = "plain"

    @property
    def content_type(self) -> str:
        return "application/json" if self is RenderFormat.JSON else "text/plain"


def boolish(value: str | None) -> bool:
    """Return ``False`` for a missing/empty value or ``f``/``false``/``0``.

    Examples:
        >>> boolish("1"), boolish("FALSE"), boolish(None), boolish("yes")
        (True, False, False, True)
    """
    if value is None:
        return False
    return value.lower() not in _FALSE_TOKENS


def select_format(params: Mapping[str, str]) -> RenderFormat:
    """Pick the format from request parameters ``p`` and ``t``; ``p`` wins."""
    if boolish(params.get("p")):
        return RenderFormat.PLAIN
    if boolish(params.get("t")):
        return RenderFormat.TEXT
    return RenderFormat.JSON


def _encode(text: str) -> bytes:
    return text.encode("utf-8", "surrogateescape")


def render_json(snapshot: Snapshot) -> bytes:
    payload = {
        "lines": snapshot.lines,
        "lineNumbers": snapshot.line_numbers,
        "seen": snapshot.seen,
    }
    return json.dumps(payload, ensure_ascii=False).encode("utf-8")


def render_text(snapshot: Snapshot) -> bytes:
    return b"".join(
        _encode(f"{entry.sequence_index}\t{entry.content}\n") for entry in snapshot.entries
    )


def render_plain(snapshot: Snapshot) -> bytes:
    return b"".join(_encode(f"{entry.content}\n") for entry in snapshot.entries)


_RENDERERS = {
    RenderFormat.JSON: render_json,
    RenderFormat.TEXT: render_text,
    RenderFormat.PLAIN: render_plain,
}


def render(snapshot: Snapshot, fmt: RenderFormat) -> bytes:
    """Render *snapshot* in *fmt*.

    Raises:
        ValueError: If the snapshot cannot be serialized in *fmt*.
    """
    return _RENDERERS[fmt](snapshot)
