# src/remote_eq/response/response_model.py

import numpy as np
from scipy.special import expit

from .. import config
from .. import utils
from ..core.models import BandType


# === Shape Functions ===
# Each shape takes the signed octave distance from the band frequency and only
# the parameters it actually uses. These are visual approximations of filter
# magnitude, not transfer functions.

def bell_response(distance, gain, q):
    """Gaussian bump in log-frequency; higher Q narrows it."""
    return gain * np.exp(-0.5 * (distance * q) ** 2)


def low_shelf_response(distance, gain):
    """Logistic step: ~gain far below the corner, ~0 far above. Q has no effect."""
    return gain * expit(-config.SHELF_STEEPNESS * distance)


def high_shelf_response(distance, gain):
    return gain * expit(config.SHELF_STEEPNESS * distance)


def low_cut_response(distance, q):
    """Attenuation approaching CUT_FLOOR_DB below the corner; Q scales the slope."""
    return config.CUT_FLOOR_DB * expit(-config.SHELF_STEEPNESS * distance * q)


def high_cut_response(distance, q):
    return config.CUT_FLOOR_DB * expit(config.SHELF_STEEPNESS * distance * q)


_SHAPES = {
    BandType.BELL: lambda d, band: bell_response(d, band.gain, band.q),
    BandType.LOW_SHELF: lambda d, band: low_shelf_response(d, band.gain),
    BandType.HIGH_SHELF: lambda d, band: high_shelf_response(d, band.gain),
    BandType.LOW_CUT: lambda d, band: low_cut_response(d, band.q),
    BandType.HIGH_CUT: lambda d, band: high_cut_response(d, band.q),
}


def band_gain_at(frequency, band):
    """
    Gain contribution (dB) of a single band at the given frequency.
    Unknown kinds contribute exactly 0. Accepts a scalar or an ndarray.
    """
    shape = _SHAPES.get(BandType.parse(band.kind))
    if shape is None:
        return np.zeros_like(frequency, dtype=float) if np.ndim(frequency) else 0.0
    distance = np.log2(frequency / band.freq)
    return shape(distance, band)


def total_gain_at(frequency, bands, master_gain):
    """
    Sum the contributions of all enabled bands plus the master gain.
    Disabled bands are skipped entirely.
    """
    total = 0.0
    for band in bands:
        if not band.enabled:
            continue
        total = total + band_gain_at(frequency, band)
    return master_gain + total


def sample_frequencies(steps=config.CURVE_STEPS):
    """steps + 1 log-spaced frequencies from MIN_FREQUENCY to MAX_FREQUENCY."""
    return utils.unit_fraction_to_frequency(np.arange(steps + 1) / steps)


def sample_curve(snapshot, steps=config.CURVE_STEPS):
    """
    Sample the composite response of a session snapshot for rendering.

    Returns:
        (freqs, gains) as numpy arrays of length steps + 1.
    """
    freqs = sample_frequencies(steps)
    gains = total_gain_at(freqs, snapshot.bands, snapshot.master_gain)
    return freqs, np.broadcast_to(gains, freqs.shape).astype(float)


def band_display_gain(band, master_gain):
    """Displayed gain of a band's marker: its own gain lifted by the master gain."""
    return band.gain + master_gain


def marker_positions(snapshot, width, height):
    """Pixel position of every enabled band's marker, keyed by band index."""
    positions = {}
    for index, band in enumerate(snapshot.bands):
        if not band.enabled:
            continue
        x = utils.frequency_to_horizontal_position(band.freq, width)
        y = utils.gain_to_vertical_position(band_display_gain(band, snapshot.master_gain), height)
        positions[index] = (float(x), float(y))
    return positions


def hit_test(x, y, snapshot, width, height, radius):
    """
    Index of the enabled band whose marker is nearest to (x, y) and within
    radius, or None. Equal distances resolve to the lowest index.
    """
    best_index = None
    best_distance = None
    for index, (mx, my) in marker_positions(snapshot, width, height).items():
        distance = np.hypot(x - mx, y - my)
        if distance > radius:
            continue
        if best_distance is None or distance < best_distance:
            best_index = index
            best_distance = distance
    return best_index
