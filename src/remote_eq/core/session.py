# src/remote_eq/core/session.py

import logging
import math
from dataclasses import replace

from .. import config
from .. import utils
from ..eq_control.state_document import band_from_dict, build_state_snapshot, quantize
from ..response.response_model import hit_test
from .models import SessionSnapshot, default_bands

logger = logging.getLogger(__name__)


def _coerce(value, default):
    """Float value of a number or text input; default when it is not a number."""
    try:
        number = float(value)
    except (TypeError, ValueError):
        return float(default)
    if math.isnan(number):
        return float(default)
    return number


class EqSession:
    """
    Owns the editable EQ state: master gain, power, the fixed list of bands and
    the current selection. All mutation goes through the methods below, which
    clamp their inputs, notify listeners and forward writes to the sync
    collaborator.

    The sync collaborator needs two methods:
        put_field(path, value): granular write of one quantized leaf.
        put_state(document): full document replace.

    Mutating methods return True when the session changed. They are no-ops
    while the session is not editable (power off or no connection).
    """

    def __init__(self, sync=None):
        self.sync = sync
        self._bands = default_bands()
        self._master_gain = float(config.DEFAULT_MASTER_GAIN)
        self._power = config.POWER
        self._connected = False
        self._selected_index = None
        self._dragging_index = None
        self._drag_moved = False
        self._listeners = []

    # --- Read access ---

    @property
    def bands(self):
        return tuple(self._bands)

    @property
    def master_gain(self):
        return self._master_gain

    @property
    def power(self):
        return self._power

    @property
    def connected(self):
        return self._connected

    @property
    def selected_index(self):
        return self._selected_index

    @property
    def dragging_index(self):
        return self._dragging_index

    @property
    def editable(self):
        return self._power and self._connected

    def snapshot(self):
        """Immutable copy of the current state for rendering and serialization."""
        return SessionSnapshot(
            master_gain=self._master_gain,
            power=self._power,
            connected=self._connected,
            bands=tuple(self._bands),
            selected_index=self._selected_index,
        )

    def add_listener(self, callback):
        """Register a no-argument callable invoked after every change."""
        self._listeners.append(callback)

    # --- Internal helpers ---

    def _notify(self):
        for callback in self._listeners:
            callback()

    def _check_index(self, index):
        if not 0 <= index < len(self._bands):
            raise IndexError(f"Band index {index} out of range.")

    def _replace_band(self, index, **changes):
        self._bands[index] = replace(self._bands[index], **changes)

    def _write_field(self, path, value):
        if self.sync is None:
            return
        self.sync.put_field(path, quantize(path, value))

    def _write_band(self, index, *fields):
        band = self._bands[index]
        values = {"freq": band.freq, "gain": band.gain, "Q": band.q, "enabled": band.enabled}
        for name in fields:
            self._write_field(f"bands/{index}/{name}", values[name])

    def publish_state(self):
        """Full-document replace of the remote state."""
        if self.sync is None:
            return
        self.sync.put_state(build_state_snapshot(self.snapshot()))

    # --- Connection gate ---

    def set_connected(self, connected):
        connected = bool(connected)
        if connected == self._connected:
            return False
        self._connected = connected
        if not connected:
            self._dragging_index = None
        self._notify()
        return True

    # --- Band parameters (list controls) ---

    def set_band_gain(self, index, value):
        self._check_index(index)
        if not self.editable:
            return False
        gain = utils.clamp(_coerce(value, 0), -config.MAX_BAND_GAIN, config.MAX_BAND_GAIN)
        self._replace_band(index, gain=gain)
        self._notify()
        self._write_band(index, "gain")
        return True

    def set_band_frequency(self, index, value):
        self._check_index(index)
        if not self.editable:
            return False
        freq = utils.clamp(_coerce(value, config.DEFAULT_FREQ_INPUT), config.MIN_FREQUENCY, config.MAX_FREQUENCY)
        self._replace_band(index, freq=freq)
        self._notify()
        self._write_band(index, "freq")
        return True

    def set_band_q(self, index, value):
        self._check_index(index)
        if not self.editable:
            return False
        q = utils.clamp(_coerce(value, config.DEFAULT_Q_INPUT), config.MIN_Q, config.MAX_Q)
        self._replace_band(index, q=q)
        self._notify()
        self._write_band(index, "Q")
        return True

    def set_band_frequency_fraction(self, index, fraction):
        """Slider position in [0, 1] mapped logarithmically onto the frequency range."""
        fraction = utils.clamp(float(fraction), 0.0, 1.0)
        return self.set_band_frequency(index, float(utils.unit_fraction_to_frequency(fraction)))

    def set_band_q_fraction(self, index, fraction):
        fraction = utils.clamp(float(fraction), 0.0, 1.0)
        return self.set_band_q(index, float(utils.unit_fraction_to_q(fraction)))

    def toggle_band(self, index):
        self._check_index(index)
        if not self.editable:
            return False
        enabled = not self._bands[index].enabled
        self._replace_band(index, enabled=enabled)
        if not enabled and self._selected_index == index:
            self._selected_index = None
        self._notify()
        self._write_band(index, "enabled")
        return True

    def select_band(self, index):
        """Toggle selection of an enabled band (list click). Disabled bands are ignored."""
        self._check_index(index)
        if not self._bands[index].enabled:
            return False
        self._selected_index = None if self._selected_index == index else index
        self._notify()
        return True

    # --- Master controls ---

    def set_master_gain(self, value):
        if not self.editable:
            return False
        self._master_gain = utils.clamp(_coerce(value, 0), -config.MAX_MASTER_GAIN, config.MAX_MASTER_GAIN)
        self._notify()
        self._write_field("gain", self._master_gain)
        return True

    def toggle_power(self):
        if not self._connected:
            return False
        self._power = not self._power
        if not self._power:
            self._dragging_index = None
        self._notify()
        self._write_field("power", self._power)
        return True

    # --- Pointer interaction on the response plot ---

    def band_at(self, x, y, width, height, factor=config.PRESS_HIT_FACTOR):
        """Enabled band under the pointer, or None."""
        radius = config.CIRCLE_RADIUS * factor
        return hit_test(x, y, self.snapshot(), width, height, radius)

    def pointer_press(self, x, y, width, height):
        """Select and start dragging the band under the pointer; clear selection on a miss."""
        if not self.editable:
            return None
        index = self.band_at(x, y, width, height)
        self._selected_index = index
        self._dragging_index = index
        self._drag_moved = False
        self._notify()
        return index

    def pointer_drag(self, x, y, width, height):
        """
        Move the dragged band: x maps to frequency on the log axis, y to the
        displayed gain minus the master gain.
        """
        index = self._dragging_index
        if index is None or not self.editable:
            return False
        fraction = utils.clamp(x / width, 0.0, 1.0)
        freq = float(utils.unit_fraction_to_frequency(fraction))
        gain = utils.vertical_position_to_gain(y, height) - self._master_gain
        gain = utils.clamp(gain, -config.MAX_BAND_GAIN, config.MAX_BAND_GAIN)
        self._replace_band(index, freq=freq, gain=gain)
        self._drag_moved = True
        self._notify()
        return True

    def pointer_release(self):
        """Finish a drag and write the dragged band's frequency and gain if it moved."""
        index = self._dragging_index
        self._dragging_index = None
        if index is not None and self._drag_moved:
            self._write_band(index, "freq", "gain")
        return index

    def wheel(self, x, y, delta_y, width, height):
        """Scrolling up over a band raises its Q by one step, down lowers it."""
        if not self.editable:
            return None
        index = self.band_at(x, y, width, height, factor=config.WHEEL_HIT_FACTOR)
        if index is None:
            return None
        step = config.Q_WHEEL_STEP if delta_y < 0 else -config.Q_WHEEL_STEP
        q = utils.clamp(self._bands[index].q + step, config.MIN_Q, config.MAX_Q)
        self._replace_band(index, q=q)
        self._notify()
        self._write_band(index, "Q")
        return index

    # --- Whole-state operations ---

    def reset(self):
        """Restore default bands and master gain, then replace the remote document."""
        if not self._connected:
            return False
        self._bands = default_bands()
        self._master_gain = float(config.DEFAULT_MASTER_GAIN)
        self._selected_index = None
        self._dragging_index = None
        self._notify()
        self.publish_state()
        return True

    def apply_document(self, document, publish=False):
        """
        Load a state or profile document. 'gain' defaults to 0 and 'power' to
        True; band entries are applied by index and clamped into range. Extra
        entries beyond the fixed band count are ignored.
        """
        if not isinstance(document, dict) or not document:
            logger.warning("Empty or malformed state document, keeping current state.")
            return False

        self._master_gain = utils.clamp(
            _coerce(document.get("gain"), 0), -config.MAX_MASTER_GAIN, config.MAX_MASTER_GAIN)
        power = document.get("power")
        self._power = True if power is None else bool(power)

        for index, data in enumerate(document.get("bands") or []):
            if index >= len(self._bands) or not isinstance(data, dict):
                continue
            try:
                band = band_from_dict(data, self._bands[index])
            except (TypeError, ValueError) as e:
                logger.warning("Skipping malformed band %d: %s", index, e)
                continue
            self._bands[index] = replace(
                band,
                freq=utils.clamp(band.freq, config.MIN_FREQUENCY, config.MAX_FREQUENCY),
                gain=utils.clamp(band.gain, -config.MAX_BAND_GAIN, config.MAX_BAND_GAIN),
                q=utils.clamp(band.q, config.MIN_Q, config.MAX_Q),
            )

        if self._selected_index is not None and not self._bands[self._selected_index].enabled:
            self._selected_index = None
        self._dragging_index = None
        self._notify()
        if publish:
            self.publish_state()
        return True
