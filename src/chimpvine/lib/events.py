"""Ready notification for a session.

Listeners register explicitly and receive a ``GameProgress`` snapshot
each time the session becomes ready. Callers that prefer to await can
use ``wait()``, which resolves with the snapshot or raises
``SessionFailedError`` once the handshake has failed.

Usage:
    notifier = ReadyNotifier()
    unsubscribe = notifier.subscribe(lambda progress: print(progress.level))

    # Session side
    notifier.notify(progress)

    # Caller side
    progress = await notifier.wait()
"""

import asyncio
import logging
from collections.abc import Callable

from chimpvine.errors import SessionError, SessionFailedError
from chimpvine.models import GameProgress

logger = logging.getLogger(__name__)

ReadyListener = Callable[[GameProgress], None]
"""Callback invoked with a progress snapshot when the session is ready."""


class ReadyNotifier:
    """Listener registry plus an awaitable outcome.

    The outcome is the latest of ``notify()`` / ``fail()``. Listeners are
    only called by ``notify()``, once per call.
    """

    def __init__(self) -> None:
        self._listeners: list[ReadyListener] = []
        self._settled = asyncio.Event()
        self._progress: GameProgress | None = None
        self._error: SessionError | None = None
        self.notify_count = 0

    @property
    def settled(self) -> bool:
        """Whether the session has become ready or failed."""
        return self._settled.is_set()

    def subscribe(self, listener: ReadyListener) -> Callable[[], None]:
        """Register a listener. Returns a callable that removes it."""
        self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    def notify(self, progress: GameProgress) -> None:
        """Settle as ready and call every listener with its own snapshot."""
        self._progress = progress.snapshot()
        self._error = None
        self._settled.set()
        self.notify_count += 1

        for listener in list(self._listeners):
            try:
                listener(progress.snapshot())
            except Exception:
                logger.exception("Ready listener %r raised", listener)

    def fail(self, error: SessionError | None) -> None:
        """Settle as failed without calling listeners."""
        self._progress = None
        self._error = error
        self._settled.set()

    async def wait(self) -> GameProgress:
        """Wait until settled.

        Raises:
            SessionFailedError: If the latest outcome is a failure.
        """
        await self._settled.wait()
        if self._progress is None:
            raise SessionFailedError(self._error)
        return self._progress.snapshot()
