"""Single-fire stop signal shared by the reader, the interrupt handler and main."""

from __future__ import annotations

import logging
import signal
import threading
from typing import Any

logger = logging.getLogger(__name__)

STREAM_EXHAUSTED = "stream exhausted"
STREAM_FAULT = "stream read fault"
INTERRUPT = "interrupt"


class TerminationCoordinator:
    """One-way ``RUNNING -> STOPPED`` switch.

    Either trigger (the reader running out of input, or an external
    interrupt) stops the coordinator; whichever fires first wins and later
    calls to :meth:`stop` are no-ops. Every thread blocked in :meth:`wait`
    is released on the transition.
    """

    def __init__(self) -> None:
        self._stopped = threading.Event()
        self._lock = threading.Lock()
        self._reason: str | None = None

    def stop(self, reason: str) -> bool:
        """Stop the coordinator.

        Returns:
            ``True`` if this call performed the transition.
        """
        with self._lock:
            if self._stopped.is_set():
                return False
            self._reason = reason
            self._stopped.set()
        logger.debug("termination triggered by %s", reason)
        return True

    @property
    def is_stopped(self) -> bool:
        return self._stopped.is_set()

    @property
    def reason(self) -> str | None:
        """Trigger that stopped the coordinator, ``None`` while running."""
        # written once, before the event is set
        return self._reason

    def wait(self, timeout: float | None = None) -> bool:
        """Block until stopped; returns ``False`` only if *timeout* expired."""
        return self._stopped.wait(timeout)


def install_interrupt_handler(
    coordinator: TerminationCoordinator, signum: int = signal.SIGINT
) -> Any:
    """Route *signum* to ``coordinator.stop(INTERRUPT)``.

    Must be called from the main thread. Returns the previous handler so the
    caller can restore it.

    The handler runs on the main thread, which may already hold the
    coordinator lock, so the stop itself happens on a short-lived thread.
    """

    def _handle(received: int, frame: Any) -> None:
        logger.warning("got signal: %s", signal.Signals(received).name)
        threading.Thread(
            target=coordinator.stop, args=(INTERRUPT,), name="ssample-interrupt", daemon=True
        ).start()

    return signal.signal(signum, _handle)
