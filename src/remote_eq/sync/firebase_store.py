# src/remote_eq/sync/firebase_store.py

import json
import logging

from PyQt5.QtCore import QByteArray, QObject, QUrl, QUrlQuery, pyqtSignal
from PyQt5.QtNetwork import QNetworkAccessManager, QNetworkReply, QNetworkRequest

from .. import config

logger = logging.getLogger(__name__)


def normalize_base_url(base_url):
    """Strip whitespace and a trailing slash from the database URL."""
    base_url = (base_url or "").strip()
    while base_url.endswith("/"):
        base_url = base_url[:-1]
    return base_url


def build_url(base_url, path, auth=""):
    """
    REST URL of a database node, e.g. https://x.firebaseio.com/state.json?auth=...
    """
    url = QUrl(f"{normalize_base_url(base_url)}/{path.strip('/')}.json")
    if auth:
        query = QUrlQuery()
        query.addQueryItem("auth", auth)
        url.setQuery(query)
    return url


class FirebaseStore(QObject):
    """
    Non-blocking client for the Firebase Realtime Database REST API.

    Every request returns immediately; results arrive through the signals
    below once the Qt event loop delivers the reply. Writes are
    fire-and-forget: a failed write is logged and reported through
    request_failed, and nothing is retried.

    Signals:
        state_loaded(dict): Current state document.
        probe_finished(bool): Whether the store answered.
        device_status(object, object): Raw online flag and lastSeen value.
        profiles_listed(list): Saved profile names.
        profile_loaded(str, dict): Profile name and its document.
        profile_saved(str, bool): Profile name and whether the write succeeded.
        write_finished(str, bool): Path written and whether it succeeded.
        request_failed(str, str): Operation name and error message.
    """
    state_loaded = pyqtSignal(dict)
    probe_finished = pyqtSignal(bool)
    device_status = pyqtSignal(object, object)
    profiles_listed = pyqtSignal(list)
    profile_loaded = pyqtSignal(str, dict)
    profile_saved = pyqtSignal(str, bool)
    write_finished = pyqtSignal(str, bool)
    request_failed = pyqtSignal(str, str)

    def __init__(self, base_url="", auth="", manager=None, parent=None):
        super(FirebaseStore, self).__init__(parent)
        self.base_url = normalize_base_url(base_url)
        self.auth = (auth or "").strip()
        self.manager = manager if manager is not None else QNetworkAccessManager(self)

    @property
    def configured(self):
        return bool(self.base_url)

    def configure(self, base_url, auth=""):
        self.base_url = normalize_base_url(base_url)
        self.auth = (auth or "").strip()
        logger.info("Store URL set to %s", self.base_url or "<offline>")

    def url_for(self, path):
        return build_url(self.base_url, path, self.auth)

    # --- Transport ---

    def _request(self, path):
        request = QNetworkRequest(self.url_for(path))
        request.setHeader(QNetworkRequest.ContentTypeHeader, "application/json")
        request.setTransferTimeout(config.REQUEST_TIMEOUT_MS)
        return request

    def _get(self, path, on_done):
        reply = self.manager.get(self._request(path))
        reply.finished.connect(lambda: self._finish(reply, path, on_done))
        return reply

    def _put(self, path, payload, on_done):
        body = QByteArray(json.dumps(payload).encode("utf-8"))
        reply = self.manager.put(self._request(path), body)
        reply.finished.connect(lambda: self._finish(reply, path, on_done))
        return reply

    def _finish(self, reply, path, on_done):
        """Decode a finished reply and hand (ok, data) to on_done."""
        try:
            if reply.error() != QNetworkReply.NoError:
                logger.error("Request to %s failed: %s", path, reply.errorString())
                on_done(False, reply.errorString())
                return
            body = bytes(reply.readAll())
            try:
                data = json.loads(body.decode("utf-8")) if body else None
            except ValueError as e:
                logger.error("Invalid JSON from %s: %s", path, e)
                on_done(False, str(e))
                return
            on_done(True, data)
        finally:
            reply.deleteLater()

    # --- State document ---

    def fetch_state(self):
        """Load the state document; emits state_loaded on success."""
        if not self.configured:
            logger.warning("No store URL set. Running in offline mode.")
            return None

        def done(ok, data):
            if not ok:
                self.request_failed.emit("load_state", str(data))
            elif not isinstance(data, dict):
                logger.warning("No state found in store")
            else:
                self.state_loaded.emit(data)

        return self._get(config.STATE_PATH, done)

    def put_state(self, document):
        """Full-document replace of the state node."""
        return self._write(config.STATE_PATH, document)

    def put_field(self, path, value):
        """Granular write of a single leaf below the state node, e.g. 'bands/0/freq'."""
        return self._write(f"{config.STATE_PATH}/{path.strip('/')}", value)

    def _write(self, path, payload, on_done=None):
        if not self.configured:
            logger.debug("Offline, skipping write to %s", path)
            return None

        def done(ok, data):
            if ok:
                logger.debug("Saved %s", path)
            else:
                self.request_failed.emit("write", str(data))
            self.write_finished.emit(path, ok)
            if on_done is not None:
                on_done(ok)

        return self._put(path, payload, done)

    # --- Liveness inputs ---

    def probe(self):
        """Check that the store answers; emits probe_finished(bool)."""
        if not self.configured:
            self.probe_finished.emit(False)
            return None
        return self._get(config.STATE_PATH, lambda ok, data: self.probe_finished.emit(ok))

    def fetch_device_status(self):
        """
        Read the device heartbeat node; emits device_status(online, last_seen).
        A failed read emits device_status(None, None) so the status never lags
        behind a successful probe.
        """
        if not self.configured:
            return None

        def done(ok, data):
            if not ok:
                self.request_failed.emit("device_status", str(data))
                self.device_status.emit(None, None)
                return
            data = data if isinstance(data, dict) else {}
            self.device_status.emit(data.get(config.DEVICE_ONLINE_KEY), data.get(config.DEVICE_LAST_SEEN_KEY))

        return self._get(config.DEVICE_PATH, done)

    # --- Profiles ---

    @staticmethod
    def _profile_path(name):
        name = (name or "").strip()
        if name.endswith(".json"):
            name = name[:-len(".json")]
        if not name:
            raise ValueError("No profile name provided.")
        return f"{config.PROFILES_PATH}/{name}"

    def save_profile(self, name, document):
        if not self.configured:
            logger.warning("No store URL set, profile not saved.")
            return None
        path = self._profile_path(name)
        saved_name = path.rsplit("/", 1)[-1]
        return self._write(path, document, lambda ok: self.profile_saved.emit(saved_name, ok))

    def list_profiles(self):
        """Emits profiles_listed with the saved profile names, sorted."""
        if not self.configured:
            logger.warning("No store URL set, cannot list profiles.")
            return None

        def done(ok, data):
            if not ok:
                self.request_failed.emit("list_profiles", str(data))
                return
            names = sorted(key[:-len(".json")] if key.endswith(".json") else key for key in (data or {}))
            self.profiles_listed.emit(names)

        return self._get(config.PROFILES_PATH, done)

    def load_profile(self, name):
        if not self.configured:
            logger.warning("No store URL set, cannot load profile.")
            return None
        path = self._profile_path(name)

        def done(ok, data):
            if not ok:
                self.request_failed.emit("load_profile", str(data))
            elif not isinstance(data, dict):
                self.request_failed.emit("load_profile", f"Profile {name} not found")
            else:
                self.profile_loaded.emit(name, data)

        return self._get(path, done)
