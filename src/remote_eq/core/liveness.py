# src/remote_eq/core/liveness.py

"""
Classification of device connectivity from the store's heartbeat fields.

The device reports an `online` flag and a `lastSeen` timestamp whose unit is
not fixed: it may be epoch seconds, epoch milliseconds or a counter since
boot. normalize_timestamp() guesses the unit from the magnitude.
"""

import math
from dataclasses import dataclass
from enum import Enum
from typing import Optional

from .. import config


class LivenessState(Enum):
    UNREACHABLE = "unreachable"
    LIVE = "live"
    STALE = "stale"
    UNKNOWN = "unknown"


@dataclass(frozen=True)
class LivenessStatus:
    """
    Result of one classification.

    Attributes:
        state (LivenessState): Observable connectivity state.
        reachable (bool): Whether the store answered the probe.
        elapsed_ms (float | None): Time since the last heartbeat, when known.
        label (str): Human-readable elapsed time for STALE, else ''.
    """
    state: LivenessState
    reachable: bool
    elapsed_ms: Optional[float] = None
    label: str = ""

    @property
    def connection_gate(self):
        """Mutating controls are enabled only while the store is reachable."""
        return self.reachable

    def describe(self):
        if self.state is LivenessState.UNREACHABLE:
            return "Store unreachable"
        if self.state is LivenessState.LIVE:
            return "Device live"
        if self.state is LivenessState.STALE:
            return f"Device last seen {self.label} ago"
        return "Device status unknown"


def normalize_timestamp(raw):
    """
    Convert a raw heartbeat value to milliseconds.

    Values above 1e11 are taken as epoch milliseconds, values in (3e8, 1e11]
    as epoch seconds. Anything smaller is passed through unchanged and cannot
    be compared reliably with wall-clock time.

    Returns None when the value is absent, not numeric, not finite or not
    positive.
    """
    if raw is None or isinstance(raw, bool):
        return None
    try:
        value = float(raw)
    except (TypeError, ValueError):
        return None
    if not math.isfinite(value) or value <= 0:
        return None
    if value > config.EPOCH_MS_THRESHOLD:
        return value
    if value > config.EPOCH_S_THRESHOLD:
        return value * 1000
    return value


def format_elapsed(elapsed_ms):
    """
    Compact elapsed-time label: '42s', '3m 5s', '2h 10m', '4d 1h'.
    Negative durations (clock skew) read as '0s'.
    """
    seconds = int(max(elapsed_ms, 0) // 1000)
    if seconds < 60:
        return f"{seconds}s"
    minutes, seconds = divmod(seconds, 60)
    if minutes < 60:
        return f"{minutes}m {seconds}s"
    hours, minutes = divmod(minutes, 60)
    if hours < 24:
        return f"{hours}h {minutes}m"
    days, hours = divmod(hours, 24)
    return f"{days}d {hours}h"


def is_fresh(last_seen_ms, now_ms, window_ms=config.FRESHNESS_WINDOW_MS):
    return now_ms - last_seen_ms < window_ms


def classify_liveness(reachable, device_online, last_seen_raw, now_ms):
    """
    Classify connectivity.

    Not reachable -> UNREACHABLE. Online with a fresh heartbeat -> LIVE.
    No usable timestamp -> UNKNOWN. Otherwise STALE with the elapsed label.
    """
    if not reachable:
        return LivenessStatus(LivenessState.UNREACHABLE, reachable=False)

    last_seen = normalize_timestamp(last_seen_raw)
    if last_seen is not None and device_online and is_fresh(last_seen, now_ms):
        return LivenessStatus(LivenessState.LIVE, reachable=True)
    if last_seen is None:
        return LivenessStatus(LivenessState.UNKNOWN, reachable=True)

    elapsed = now_ms - last_seen
    return LivenessStatus(LivenessState.STALE, reachable=True, elapsed_ms=elapsed, label=format_elapsed(elapsed))
