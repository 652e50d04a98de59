# src/remote_eq/sync/liveness_monitor.py

import logging
import time

from PyQt5.QtCore import QObject, QTimer, pyqtSignal

from .. import config
from ..core.liveness import LivenessStatus, classify_liveness

logger = logging.getLogger(__name__)


def _now_ms():
    return time.time() * 1000


class LivenessMonitor(QObject):
    """
    Polls the store on a timer and classifies device connectivity.

    Each tick sends a probe; a reachable store is followed by a read of the
    device heartbeat. Replies may arrive while the user is editing; they only
    update the session's connection gate and the published status. A status
    is emitted only when it differs from the previous one.
    """
    status_changed = pyqtSignal(object)  # LivenessStatus

    def __init__(self, store, session=None, interval_ms=config.POLL_INTERVAL_MS, clock=_now_ms, parent=None):
        super(LivenessMonitor, self).__init__(parent)
        self.store = store
        self.session = session
        self.interval_ms = interval_ms
        self.clock = clock
        self.status = None
        self._timer = None

        store.probe_finished.connect(self.on_probe_finished)
        store.device_status.connect(self.on_device_status)

    def start(self):
        if self._timer is None:
            self._timer = QTimer(self)
            self._timer.timeout.connect(self.poll)
        self._timer.start(self.interval_ms)
        self.poll()

    def stop(self):
        if self._timer is not None:
            self._timer.stop()

    def poll(self):
        self.store.probe()

    def on_probe_finished(self, reachable):
        if self.session is not None:
            self.session.set_connected(reachable)
        if reachable:
            self.store.fetch_device_status()
        else:
            self._publish(classify_liveness(False, False, None, self.clock()))

    def on_device_status(self, online, last_seen):
        self._publish(classify_liveness(True, bool(online), last_seen, self.clock()))

    def _publish(self, status: LivenessStatus):
        if status == self.status:
            return
        logger.info("Connection status: %s", status.describe())
        self.status = status
        self.status_changed.emit(status)
