from __future__ import annotations
from contextlib import contextmanager
import signal
import threading
from typing import Iterator, Optional

from ..logger import get_logger

logger = get_logger(__name__)


class CancellationToken:
    """
    Boolean flag raised asynchronously (e.g. by a SIGINT handler).

    The hybrid loop polls it between trajectories only, so a trajectory that
    is already running finishes before the run stops.
    """

    def __init__(self):
        self._event = threading.Event()

    def cancel(self) -> None:
        self._event.set()

    def reset(self) -> None:
        self._event.clear()

    @property
    def cancelled(self) -> bool:
        return self._event.is_set()


# process-wide token used when a run is not given one explicitly
interrupted = CancellationToken()


@contextmanager
def interrupt_handler(token: Optional[CancellationToken] = None) -> Iterator[CancellationToken]:
    """
    Route SIGINT to ``token`` for the duration of the block.

    Outside the main thread signal handlers cannot be installed; the token is
    still yielded and can be cancelled programmatically.
    """
    token = interrupted if token is None else token

    if threading.current_thread() is not threading.main_thread():
        yield token
        return

    def _handler(signum, frame):
        logger.warning("Interrupt received; stopping after the current trajectory")
        token.cancel()

    previous = signal.signal(signal.SIGINT, _handler)
    try:
        yield token
    finally:
        signal.signal(signal.SIGINT, previous)
