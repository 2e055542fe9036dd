"""
modules/common/loader.py

Purpose
-------
Run blocking API calls off the UI thread and hand the result back on the
UI thread.

Public interface
----------------
- AsyncRunner.submit(work, on_done, on_error=None) -> None
- AsyncRunner.shutdown() -> None          # drop results that arrive later
- InlineRunner.submit(work, on_done, on_error=None) -> None

`work` is a zero-argument callable. `on_done(result)` receives its return
value; `on_error(exc)` receives any exception it raised. When `on_error` is
omitted the exception is logged and dropped.
"""

from __future__ import annotations

import logging
from typing import Any, Callable, Optional

from PySide6.QtCore import QObject, QRunnable, QThreadPool, Signal, Slot

_log = logging.getLogger(__name__)

Work = Callable[[], Any]
DoneCallback = Callable[[Any], None]
ErrorCallback = Callable[[BaseException], None]


class InlineRunner:
    """Executes work immediately on the caller's thread."""

    def submit(self, work: Work, on_done: DoneCallback, on_error: Optional[ErrorCallback] = None) -> None:
        try:
            result = work()
        except Exception as exc:
            _dispatch_error(exc, on_error)
            return
        on_done(result)

    def shutdown(self) -> None:
        pass


def _dispatch_error(exc: BaseException, on_error: Optional[ErrorCallback]) -> None:
    if on_error is None:
        _log.error("Background call failed: %s", exc, exc_info=exc)
        return
    on_error(exc)


# ----------------------------
# Qt thread-pool runner
# ----------------------------

class _Relay(QObject):
    """
    Created on the UI thread. Its slots are bound methods, so emits from the
    worker thread arrive as queued calls on the UI thread.
    """
    succeeded = Signal(object)
    failed = Signal(object)

    def __init__(self, on_done: DoneCallback, on_failed: ErrorCallback) -> None:
        super().__init__()
        self._on_done = on_done
        self._on_failed = on_failed
        self.succeeded.connect(self._deliver_done)
        self.failed.connect(self._deliver_failed)

    @Slot(object)
    def _deliver_done(self, result) -> None:
        self._on_done(result)

    @Slot(object)
    def _deliver_failed(self, exc) -> None:
        self._on_failed(exc)


class _JobRunnable(QRunnable):
    """
    Thin QRunnable wrapper that executes a callable and always reports back
    through the relay.
    """
    def __init__(self, work: Work, relay: _Relay) -> None:
        super().__init__()
        self.setAutoDelete(True)
        self._work = work
        self._relay = relay

    @Slot()
    def run(self) -> None:  # type: ignore[override]
        try:
            result = self._work()
        except Exception as exc:
            self._relay.failed.emit(exc)
            return
        self._relay.succeeded.emit(result)


class AsyncRunner(QObject):
    def __init__(self, parent: QObject | None = None, pool: QThreadPool | None = None) -> None:
        super().__init__(parent)
        self._pool = pool or QThreadPool.globalInstance()
        self._relays: set[_Relay] = set()
        self._closed = False

    def submit(self, work: Work, on_done: DoneCallback, on_error: Optional[ErrorCallback] = None) -> None:
        if self._closed:
            _log.debug("Runner closed; ignoring submitted work")
            return
        relay: _Relay

        def _done(result):
            self._relays.discard(relay)
            if self._closed:
                return
            on_done(result)

        def _failed(exc):
            self._relays.discard(relay)
            if self._closed:
                return
            _dispatch_error(exc, on_error)

        relay = _Relay(_done, _failed)
        self._relays.add(relay)
        self._pool.start(_JobRunnable(work, relay))

    def shutdown(self) -> None:
        """Owner is going away: results still in flight are discarded."""
        self._closed = True
        self._relays.clear()

    @property
    def pending(self) -> int:
        return len(self._relays)
