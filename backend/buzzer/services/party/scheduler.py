import logging
import time

logger = logging.getLogger(__name__)


class TimerHandle:
    """A cancellable one-shot transition scheduled for a party.

    The handle is recorded on the party as ``party.timer``; the callback
    decides under the party lock whether it is still current.
    """

    def __init__(self, party_code: str, label: str, delay_ms: int, callback):
        self.party_code = party_code
        self.label = label
        self.delay_ms = delay_ms
        self.deadline = time.time() + delay_ms / 1000.0
        self.cancelled = False
        self.fired = False
        self._callback = callback

    def cancel(self) -> None:
        self.cancelled = True

    def fire(self) -> bool:
        if self.cancelled or self.fired:
            return False
        self.fired = True
        self._callback(self)
        return True

    def __repr__(self):
        return f"<TimerHandle party={self.party_code} label={self.label} delay={self.delay_ms}ms>"


class PartyScheduler:
    """Runs timer handles as Socket.IO background tasks.

    - No workers in TESTING mode unless ENABLE_TIMERS_IN_TESTS is set; tests
      call ``handle.fire()`` to simulate the delay elapsing
    - Workers fire inside an app context
    """

    def __init__(self, sio, app=None):
        self.sio = sio
        self.app = app

    @property
    def workers_enabled(self) -> bool:
        if self.app is None:
            return False
        cfg = self.app.config
        return not cfg.get('TESTING') or bool(cfg.get('ENABLE_TIMERS_IN_TESTS'))

    def schedule(self, party_code: str, label: str, delay_ms: int, callback) -> TimerHandle:
        handle = TimerHandle(party_code, label, delay_ms, callback)
        logger.info(f"[timer-set] party={party_code} label={label} delay={delay_ms}ms deadline={handle.deadline:.3f}")
        if self.workers_enabled:
            self.sio.start_background_task(self._worker, handle)
        return handle

    def _worker(self, handle: TimerHandle) -> None:
        self.sio.sleep(max(0.0, handle.deadline - time.time()))
        if handle.cancelled:
            logger.info(f"[timer-abort] party={handle.party_code} label={handle.label} cancelled")
            return
        with self.app.app_context():
            handle.fire()
