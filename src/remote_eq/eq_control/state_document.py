# src/remote_eq/eq_control/state_document.py

"""
Conversion between the session and the JSON document mirrored to the store.

Document layout:
    {
        "gain": -1.5,
        "power": true,
        "bands": [{"type": "bell", "freq": 1000, "gain": 6.0, "Q": 1.0, "enabled": true}, ...],
        "filename": "41.json",
        "version": 1
    }

Example:
    document = build_state_snapshot(session.snapshot())
    store.put_state(document)
"""

import math
from datetime import datetime, timezone

from .. import config
from ..core.models import Band, BandType

BAND_KEYS = ("type", "freq", "gain", "Q", "enabled")

# Decimal places kept on the wire, per leaf field.
_PRECISION = {
    "freq": 0,
    "gain": 1,
    "Q": 1,
}


def field_name(path: str) -> str:
    """Leaf field of a store path, e.g. 'bands/2/freq' -> 'freq'."""
    return path.rstrip("/").rsplit("/", 1)[-1]


def quantize(field: str, value):
    """
    Round a value the way it is written to the store.

    'freq' becomes the nearest integer, 'gain' and 'Q' are rounded to 0.1.
    Halves round up (2.5 -> 3, -0.25 -> -0.2). Other fields (and booleans)
    pass through unchanged. A full path such as 'bands/0/Q' is quantized by
    its leaf.
    """
    digits = _PRECISION.get(field_name(field))
    if digits is None or isinstance(value, bool):
        return value
    scale = 10 ** digits
    rounded = math.floor(float(value) * scale + 0.5)
    if digits == 0:
        return int(rounded)
    return rounded / scale


def band_to_dict(band: Band) -> dict:
    kind = band.kind.value if isinstance(band.kind, BandType) else band.kind
    return {
        "type": kind,
        "freq": quantize("freq", band.freq),
        "gain": quantize("gain", band.gain),
        "Q": quantize("Q", band.q),
        "enabled": bool(band.enabled),
    }


def build_state_snapshot(snapshot, filename: str = config.STATE_FILENAME) -> dict:
    """
    Build the full state document from a SessionSnapshot, quantizing every
    numeric leaf.
    """
    return {
        "gain": quantize("gain", snapshot.master_gain),
        "power": bool(snapshot.power),
        "bands": [band_to_dict(band) for band in snapshot.bands],
        "filename": filename,
        "version": config.STATE_VERSION,
    }


def build_profile_document(snapshot, saved_at=None) -> dict:
    """State document stored under profiles/<name>, stamped with savedAt."""
    if saved_at is None:
        saved_at = datetime.now(timezone.utc)
    return {
        "gain": quantize("gain", snapshot.master_gain),
        "power": bool(snapshot.power),
        "bands": [band_to_dict(band) for band in snapshot.bands],
        "savedAt": saved_at.isoformat(),
    }


def band_from_dict(data: dict, base: Band) -> Band:
    """
    Overlay the keys present in a band entry onto an existing band. Missing
    keys keep the current value; values are not clamped here.
    """
    return Band(
        kind=BandType.parse(data["type"]) if "type" in data else base.kind,
        freq=float(data["freq"]) if data.get("freq") is not None else base.freq,
        gain=float(data["gain"]) if data.get("gain") is not None else base.gain,
        q=float(data["Q"]) if data.get("Q") is not None else base.q,
        enabled=bool(data["enabled"]) if "enabled" in data else base.enabled,
    )
