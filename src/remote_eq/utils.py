# src/remote_eq/utils.py

"""
Utility functions mapping control positions (slider fractions, pixels) to
physical EQ parameters and back.
"""

import numpy as np
from . import config


def clamp(value, low, high):
    """Clamp value into [low, high]."""
    return min(max(value, low), high)


def _log_to_fraction(value, low, high):
    return (np.log10(value) - np.log10(low)) / (np.log10(high) - np.log10(low))


def _fraction_to_log(fraction, low, high):
    return low * np.power(high / low, fraction)


def frequency_to_unit_fraction(freq, min_freq=config.MIN_FREQUENCY, max_freq=config.MAX_FREQUENCY):
    """
    Map a frequency in [min_freq, max_freq] onto [0, 1] on a log10 scale.
    Works for scalars and numpy arrays.
    """
    return _log_to_fraction(freq, min_freq, max_freq)


def unit_fraction_to_frequency(fraction, min_freq=config.MIN_FREQUENCY, max_freq=config.MAX_FREQUENCY):
    """Inverse of frequency_to_unit_fraction: min_freq * (max_freq / min_freq) ** fraction."""
    return _fraction_to_log(fraction, min_freq, max_freq)


def q_to_unit_fraction(q, min_q=config.MIN_Q, max_q=config.MAX_Q):
    return _log_to_fraction(q, min_q, max_q)


def unit_fraction_to_q(fraction, min_q=config.MIN_Q, max_q=config.MAX_Q):
    return _fraction_to_log(fraction, min_q, max_q)


def frequency_to_horizontal_position(freq, axis_width):
    """Pixel x of a frequency on an axis of the given width."""
    return frequency_to_unit_fraction(freq) * axis_width


def horizontal_position_to_frequency(x, axis_width):
    return unit_fraction_to_frequency(x / axis_width)


def gain_to_vertical_position(gain, axis_height):
    """
    Pixel y of a gain value. Zero gain sits at half height; +MAX_DISPLAY_GAIN
    sits axis_height / DISPLAY_GAIN_DIVISOR above it. y grows downwards.
    """
    scale = axis_height / config.DISPLAY_GAIN_DIVISOR
    return axis_height / 2 - (gain / config.MAX_DISPLAY_GAIN) * scale


def vertical_position_to_gain(y, axis_height):
    """Inverse of gain_to_vertical_position."""
    scale = axis_height / config.DISPLAY_GAIN_DIVISOR
    return (axis_height / 2 - y) / scale * config.MAX_DISPLAY_GAIN


def format_frequency_label(freq):
    """Axis label for a frequency, e.g. 500 -> '500', 2000 -> '2k'."""
    if freq >= 1000:
        khz = freq / 1000
        return f"{khz:g}k"
    return f"{freq:g}"
