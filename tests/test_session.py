# tests/test_session.py

import math
from unittest.mock import Mock, call

import pytest

from remote_eq import config
from remote_eq import utils
from remote_eq.core.models import BandType
from remote_eq.core.session import EqSession

WIDTH = 900
HEIGHT = 420
BELL_1K = 3  # index of the default 1 kHz bell


class TestSessionControls:
    """Clamping, gating and write-through of the list and master controls."""

    @pytest.fixture(autouse=True)
    def setup_method(self):
        self.sync = Mock()
        self.session = EqSession(sync=self.sync)
        self.session.set_connected(True)

    def test_defaults(self):
        assert len(self.session.bands) == len(config.DEFAULT_BANDS)
        assert not any(band.enabled for band in self.session.bands)
        assert self.session.master_gain == 0.0
        assert self.session.power is True
        assert self.session.selected_index is None

    def test_edits_blocked_without_connection(self):
        session = EqSession(sync=self.sync)
        assert session.set_band_gain(0, 3) is False
        assert session.toggle_band(0) is False
        assert session.toggle_power() is False
        assert session.reset() is False
        self.sync.put_field.assert_not_called()
        self.sync.put_state.assert_not_called()

    def test_edits_blocked_with_power_off(self):
        assert self.session.toggle_power() is True
        self.sync.put_field.assert_called_once_with("power", False)
        assert self.session.set_master_gain(3) is False
        assert self.session.set_band_q(0, 2) is False

    def test_band_gain_is_clamped_and_written(self):
        assert self.session.set_band_gain(2, 20) is True
        assert self.session.bands[2].gain == 15
        self.sync.put_field.assert_called_once_with("bands/2/gain", 15.0)

    def test_band_gain_text_input(self):
        self.session.set_band_gain(2, "-4.3")
        assert self.session.bands[2].gain == -4.3
        self.sync.put_field.assert_called_with("bands/2/gain", -4.3)
        self.session.set_band_gain(2, "abc")
        assert self.session.bands[2].gain == 0.0

    def test_frequency_is_clamped_and_quantized(self):
        self.session.set_band_frequency(1, 5)
        assert self.session.bands[1].freq == config.MIN_FREQUENCY
        self.session.set_band_frequency(1, 50000)
        assert self.session.bands[1].freq == config.MAX_FREQUENCY
        self.session.set_band_frequency(1, 440.6)
        self.sync.put_field.assert_called_with("bands/1/freq", 441)

    def test_unparseable_frequency_falls_back(self):
        self.session.set_band_frequency(1, float("nan"))
        assert self.session.bands[1].freq == config.DEFAULT_FREQ_INPUT

    def test_q_is_clamped(self):
        self.session.set_band_q(0, 0.01)
        assert self.session.bands[0].q == config.MIN_Q
        self.session.set_band_q(0, 42)
        assert self.session.bands[0].q == config.MAX_Q
        self.session.set_band_q(0, None)
        assert self.session.bands[0].q == config.DEFAULT_Q_INPUT

    def test_frequency_slider_is_logarithmic(self):
        self.session.set_band_frequency_fraction(BELL_1K, 0.5)
        expected = 10 * math.sqrt(3000)
        assert self.session.bands[BELL_1K].freq == pytest.approx(expected)
        self.sync.put_field.assert_called_with(f"bands/{BELL_1K}/freq", round(expected))

    def test_q_slider_is_logarithmic(self):
        self.session.set_band_q_fraction(BELL_1K, 1.0)
        assert self.session.bands[BELL_1K].q == pytest.approx(config.MAX_Q)

    def test_toggle_band_writes_enabled(self):
        self.session.toggle_band(BELL_1K)
        assert self.session.bands[BELL_1K].enabled is True
        self.sync.put_field.assert_called_once_with(f"bands/{BELL_1K}/enabled", True)

    def test_disabling_selected_band_clears_selection(self):
        self.session.toggle_band(BELL_1K)
        self.session.select_band(BELL_1K)
        assert self.session.selected_index == BELL_1K
        self.session.toggle_band(BELL_1K)
        assert self.session.selected_index is None

    def test_select_band_toggles_and_ignores_disabled(self):
        assert self.session.select_band(0) is False
        self.session.toggle_band(0)
        self.session.select_band(0)
        assert self.session.selected_index == 0
        self.session.select_band(0)
        assert self.session.selected_index is None

    def test_master_gain_is_clamped(self):
        self.session.set_master_gain(20)
        assert self.session.master_gain == config.MAX_MASTER_GAIN
        self.sync.put_field.assert_called_once_with("gain", 12.0)

    def test_index_out_of_range(self):
        with pytest.raises(IndexError):
            self.session.set_band_gain(len(config.DEFAULT_BANDS), 1)

    def test_listeners_are_notified(self):
        listener = Mock()
        self.session.add_listener(listener)
        self.session.set_master_gain(1)
        self.session.toggle_band(0)
        assert listener.call_count == 2

    def test_snapshot_is_not_affected_by_later_edits(self):
        snapshot = self.session.snapshot()
        self.session.set_band_gain(0, 5)
        assert snapshot.bands[0].gain == 0.0
        assert self.session.snapshot().bands[0].gain == 5

    def test_losing_connection_disables_editing(self):
        self.session.set_connected(False)
        assert self.session.editable is False
        assert self.session.snapshot().editable is False


class TestPointerInteraction:
    """Press, drag, release and wheel on the response plot."""

    @pytest.fixture(autouse=True)
    def setup_method(self):
        self.sync = Mock()
        self.session = EqSession(sync=self.sync)
        self.session.set_connected(True)
        self.session.toggle_band(BELL_1K)
        self.sync.reset_mock()
        self.marker = (utils.frequency_to_horizontal_position(1000, WIDTH), HEIGHT / 2)

    def test_press_selects_band_under_pointer(self):
        assert self.session.pointer_press(*self.marker, WIDTH, HEIGHT) == BELL_1K
        assert self.session.selected_index == BELL_1K
        assert self.session.dragging_index == BELL_1K

    def test_press_on_empty_space_clears_selection(self):
        self.session.pointer_press(*self.marker, WIDTH, HEIGHT)
        self.session.pointer_release()
        assert self.session.pointer_press(5, 5, WIDTH, HEIGHT) is None
        assert self.session.selected_index is None

    def test_drag_moves_band_and_release_writes(self):
        self.session.pointer_press(*self.marker, WIDTH, HEIGHT)
        top = utils.gain_to_vertical_position(12, HEIGHT)
        assert self.session.pointer_drag(WIDTH / 2, top, WIDTH, HEIGHT) is True
        band = self.session.bands[BELL_1K]
        assert band.freq == pytest.approx(utils.unit_fraction_to_frequency(0.5))
        assert band.gain == pytest.approx(12)
        self.sync.put_field.assert_not_called()

        assert self.session.pointer_release() == BELL_1K
        self.sync.put_field.assert_has_calls([
            call(f"bands/{BELL_1K}/freq", round(band.freq)),
            call(f"bands/{BELL_1K}/gain", 12.0),
        ])
        assert self.session.dragging_index is None

    def test_click_without_drag_does_not_write(self):
        self.session.pointer_press(*self.marker, WIDTH, HEIGHT)
        self.session.pointer_release()
        self.sync.put_field.assert_not_called()

    def test_drag_subtracts_master_gain_and_clamps(self):
        self.session.set_master_gain(6)
        marker = (self.marker[0], utils.gain_to_vertical_position(6, HEIGHT))
        self.session.pointer_press(*marker, WIDTH, HEIGHT)
        self.session.pointer_drag(marker[0], utils.gain_to_vertical_position(10, HEIGHT), WIDTH, HEIGHT)
        assert self.session.bands[BELL_1K].gain == pytest.approx(4)
        self.session.pointer_drag(marker[0], -1000, WIDTH, HEIGHT)
        assert self.session.bands[BELL_1K].gain == config.MAX_BAND_GAIN

    def test_drag_clamps_to_axis(self):
        self.session.pointer_press(*self.marker, WIDTH, HEIGHT)
        self.session.pointer_drag(WIDTH * 2, HEIGHT / 2, WIDTH, HEIGHT)
        assert self.session.bands[BELL_1K].freq == pytest.approx(config.MAX_FREQUENCY)
        self.session.pointer_drag(-50, HEIGHT / 2, WIDTH, HEIGHT)
        assert self.session.bands[BELL_1K].freq == pytest.approx(config.MIN_FREQUENCY)

    def test_drag_without_press_is_ignored(self):
        assert self.session.pointer_drag(10, 10, WIDTH, HEIGHT) is False

    def test_wheel_adjusts_q(self):
        assert self.session.wheel(*self.marker, -120, WIDTH, HEIGHT) == BELL_1K
        assert self.session.bands[BELL_1K].q == pytest.approx(1.1)
        self.sync.put_field.assert_called_with(f"bands/{BELL_1K}/Q", 1.1)
        self.session.wheel(*self.marker, 120, WIDTH, HEIGHT)
        self.session.wheel(*self.marker, 120, WIDTH, HEIGHT)
        assert self.session.bands[BELL_1K].q == pytest.approx(0.9)

    def test_wheel_q_is_clamped(self):
        self.session.set_band_q(BELL_1K, config.MAX_Q)
        self.session.wheel(*self.marker, -120, WIDTH, HEIGHT)
        assert self.session.bands[BELL_1K].q == config.MAX_Q

    def test_wheel_on_empty_space(self):
        assert self.session.wheel(5, 5, -120, WIDTH, HEIGHT) is None

    def test_interaction_blocked_with_power_off(self):
        self.session.toggle_power()
        assert self.session.pointer_press(*self.marker, WIDTH, HEIGHT) is None
        assert self.session.wheel(*self.marker, -120, WIDTH, HEIGHT) is None


class TestWholeState:

    @pytest.fixture(autouse=True)
    def setup_method(self):
        self.sync = Mock()
        self.session = EqSession(sync=self.sync)
        self.session.set_connected(True)

    def test_reset_restores_defaults_and_replaces_document(self):
        self.session.toggle_band(0)
        self.session.set_master_gain(4)
        self.session.select_band(0)
        assert self.session.reset() is True
        assert self.session.master_gain == 0.0
        assert self.session.selected_index is None
        assert not self.session.bands[0].enabled
        document = self.sync.put_state.call_args[0][0]
        assert document["gain"] == 0.0
        assert len(document["bands"]) == len(config.DEFAULT_BANDS)

    def test_apply_document(self):
        document = {
            "gain": 2.5,
            "bands": [
                {"type": "highshelf", "freq": 6000, "gain": 3.0, "Q": 1.0, "enabled": True},
                {"type": "bell", "freq": 50000, "gain": 40, "Q": 0.01, "enabled": True},
            ] + [{}] * 10,
        }
        assert self.session.apply_document(document) is True
        assert self.session.master_gain == 2.5
        assert self.session.power is True
        assert self.session.bands[0].kind is BandType.HIGH_SHELF
        assert self.session.bands[1].freq == config.MAX_FREQUENCY
        assert self.session.bands[1].gain == config.MAX_BAND_GAIN
        assert self.session.bands[1].q == config.MIN_Q
        assert len(self.session.bands) == len(config.DEFAULT_BANDS)
        self.sync.put_state.assert_not_called()

    def test_apply_document_defaults(self):
        self.session.set_master_gain(5)
        self.session.apply_document({"power": False})
        assert self.session.master_gain == 0.0
        assert self.session.power is False

    def test_apply_document_skips_malformed_band(self):
        self.session.apply_document({"bands": [{"freq": "loud"}, {"gain": 2}]})
        assert self.session.bands[0].freq == config.DEFAULT_BANDS[0][1]
        assert self.session.bands[1].gain == 2

    def test_apply_document_can_publish(self):
        self.session.apply_document({"gain": 1.0}, publish=True)
        self.sync.put_state.assert_called_once()

    @pytest.mark.parametrize("document", [[1, 2], "gain", 42])
    def test_non_mapping_document_keeps_state(self, document):
        self.session.set_master_gain(3)
        assert self.session.apply_document(document) is False
        assert self.session.master_gain == 3
        self.sync.put_state.assert_not_called()

    def test_empty_document_keeps_state(self):
        self.session.set_master_gain(3)
        assert self.session.apply_document(None) is False
        assert self.session.master_gain == 3
