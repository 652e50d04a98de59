# tests/test_integration.py

import json
from unittest.mock import Mock

import numpy as np
import pytest

from remote_eq.core.session import EqSession
from remote_eq.eq_control.state_document import build_state_snapshot
from remote_eq.response.response_model import sample_curve, total_gain_at
from remote_eq.sync.firebase_store import FirebaseStore

BELL_1K = 3


class TestEditToStore:
    """A session edit flows through the model, the document and the store."""

    @pytest.fixture(autouse=True)
    def setup_method(self):
        self.manager = Mock()
        self.store = FirebaseStore("https://eq-demo.firebaseio.com", manager=self.manager)
        self.session = EqSession(sync=self.store)
        self.session.set_connected(True)

    def test_bell_edit_shapes_curve_and_document(self):
        self.session.toggle_band(BELL_1K)
        self.session.set_band_gain(BELL_1K, 6)
        bands = self.session.bands

        assert total_gain_at(1000.0, bands, 0.0) == 6.0
        assert total_gain_at(2000.0, bands, 0.0) == pytest.approx(6 * np.exp(-0.5))

        document = build_state_snapshot(self.session.snapshot())
        assert document["bands"][BELL_1K] == {"type": "bell", "freq": 1000, "gain": 6.0, "Q": 1.0, "enabled": True}

        freqs, gains = sample_curve(self.session.snapshot())
        assert gains.max() == pytest.approx(6.0, abs=0.05)

    def test_toggle_is_written_to_leaf(self):
        self.session.toggle_band(BELL_1K)
        request, body = self.manager.put.call_args[0]
        assert request.url().toString() == "https://eq-demo.firebaseio.com/state/bands/3/enabled.json"
        assert body.data() == b"true"

    def test_reset_replaces_whole_document(self):
        self.session.toggle_band(BELL_1K)
        self.session.reset()
        request, body = self.manager.put.call_args[0]
        assert request.url().toString() == "https://eq-demo.firebaseio.com/state.json"
        document = json.loads(body.data())
        assert document["version"] == 1
        assert not any(band["enabled"] for band in document["bands"])
