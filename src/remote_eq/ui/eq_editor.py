# src/remote_eq/ui/eq_editor.py

"""Interactive EQ editor window with a dark theme."""

import pyqtgraph as pg
from PyQt5 import QtCore, QtWidgets

from .. import config
from .. import utils
from ..core.liveness import LivenessState
from ..eq_control.state_document import build_profile_document
from ..response.response_model import marker_positions, sample_curve

DARK_STYLESHEET = """
    QWidget {
        background-color: #1e1e1e;
        color: #dcdcdc;
        font-family: Segoe UI, sans-serif;
        font-size: 11pt;
    }
    QGroupBox {
        background-color: #2d2d2d;
        border: 1px solid #444444;
        border-radius: 5px;
        margin-top: 1ex;
        font-weight: bold;
    }
    QPushButton:checked {
        background-color: #55aaff;
        color: #1e1e1e;
    }
    QPushButton:disabled, QSlider:disabled, QDoubleSpinBox:disabled {
        color: #666666;
    }
"""

# Slider resolution: integer ticks per unit fraction or per dB.
FRACTION_TICKS = 1000
GAIN_TICKS = 10

WIDTH = config.CANVAS_WIDTH
HEIGHT = config.CANVAS_HEIGHT


class EqViewBox(pg.ViewBox):
    """
    ViewBox laid out in canvas pixels (y grows downwards) that forwards mouse
    interaction to the session instead of panning and zooming.
    """

    def __init__(self, session):
        super(EqViewBox, self).__init__(enableMenu=False)
        self.session = session
        self.setMouseEnabled(x=False, y=False)
        self.invertY(True)
        self.setRange(xRange=(0, WIDTH), yRange=(0, HEIGHT), padding=0)

    def _canvas_pos(self, pos):
        point = self.mapToView(pos)
        return point.x(), point.y()

    def mouseClickEvent(self, ev):
        if ev.button() != QtCore.Qt.LeftButton:
            ev.ignore()
            return
        ev.accept()
        x, y = self._canvas_pos(ev.pos())
        self.session.pointer_press(x, y, WIDTH, HEIGHT)
        self.session.pointer_release()

    def mouseDragEvent(self, ev, axis=None):
        if ev.button() != QtCore.Qt.LeftButton:
            ev.ignore()
            return
        ev.accept()
        if ev.isStart():
            x, y = self._canvas_pos(ev.buttonDownPos())
            self.session.pointer_press(x, y, WIDTH, HEIGHT)
        x, y = self._canvas_pos(ev.pos())
        self.session.pointer_drag(x, y, WIDTH, HEIGHT)
        if ev.isFinish():
            self.session.pointer_release()

    def wheelEvent(self, ev, axis=None):
        x, y = self._canvas_pos(ev.pos())
        # Qt reports scrolling up as a positive delta
        if self.session.wheel(x, y, -ev.delta(), WIDTH, HEIGHT) is not None:
            ev.accept()
        else:
            ev.ignore()


class BandControls(QtWidgets.QGroupBox):
    """Gain, frequency and Q controls for one band."""

    def __init__(self, index, session, parent=None):
        super(BandControls, self).__init__(parent)
        self.index = index
        self.session = session

        layout = QtWidgets.QGridLayout(self)
        self.btn_select = QtWidgets.QPushButton()
        self.btn_select.setCheckable(True)
        self.btn_select.clicked.connect(lambda: self.session.select_band(self.index))
        layout.addWidget(self.btn_select, 0, 0, 1, 3)

        self.gain_slider = QtWidgets.QSlider(QtCore.Qt.Horizontal)
        self.gain_slider.setRange(-config.MAX_BAND_GAIN * GAIN_TICKS, config.MAX_BAND_GAIN * GAIN_TICKS)
        self.gain_input = self._spin_box(-config.MAX_BAND_GAIN, config.MAX_BAND_GAIN, 1, 0.1)

        self.freq_slider = QtWidgets.QSlider(QtCore.Qt.Horizontal)
        self.freq_slider.setRange(0, FRACTION_TICKS)
        self.freq_input = self._spin_box(config.MIN_FREQUENCY, config.MAX_FREQUENCY, 0, 1)

        self.q_slider = QtWidgets.QSlider(QtCore.Qt.Horizontal)
        self.q_slider.setRange(0, FRACTION_TICKS)
        self.q_input = self._spin_box(config.MIN_Q, config.MAX_Q, 2, 0.1)

        for row, (label, slider, spin) in enumerate([
            ("Gain", self.gain_slider, self.gain_input),
            ("Freq", self.freq_slider, self.freq_input),
            ("Q", self.q_slider, self.q_input),
        ], start=1):
            layout.addWidget(QtWidgets.QLabel(label), row, 0)
            layout.addWidget(slider, row, 1)
            layout.addWidget(spin, row, 2)

        self.gain_slider.valueChanged.connect(
            lambda v: self.session.set_band_gain(self.index, v / GAIN_TICKS))
        self.gain_input.editingFinished.connect(
            lambda: self.session.set_band_gain(self.index, self.gain_input.value()))
        self.freq_slider.valueChanged.connect(
            lambda v: self.session.set_band_frequency_fraction(self.index, v / FRACTION_TICKS))
        self.freq_input.editingFinished.connect(
            lambda: self.session.set_band_frequency(self.index, self.freq_input.value()))
        self.q_slider.valueChanged.connect(
            lambda v: self.session.set_band_q_fraction(self.index, v / FRACTION_TICKS))
        self.q_input.editingFinished.connect(
            lambda: self.session.set_band_q(self.index, self.q_input.value()))

    @staticmethod
    def _spin_box(low, high, decimals, step):
        spin = QtWidgets.QDoubleSpinBox()
        spin.setRange(low, high)
        spin.setDecimals(decimals)
        spin.setSingleStep(step)
        spin.setKeyboardTracking(False)
        return spin

    def refresh(self, band, selected, editable):
        """Show the band's values without feeding them back into the session."""
        kind = getattr(band.kind, "value", band.kind)
        self.btn_select.setText(f"{self.index + 1}: {kind}")
        self.btn_select.setChecked(selected)
        widgets = [self.gain_slider, self.gain_input, self.freq_slider, self.freq_input,
                   self.q_slider, self.q_input]
        for widget in widgets:
            widget.blockSignals(True)
        self.gain_slider.setValue(int(round(band.gain * GAIN_TICKS)))
        self.gain_input.setValue(band.gain)
        self.freq_slider.setValue(int(round(float(utils.frequency_to_unit_fraction(band.freq)) * FRACTION_TICKS)))
        self.freq_input.setValue(round(band.freq))
        self.q_slider.setValue(int(round(float(utils.q_to_unit_fraction(band.q)) * FRACTION_TICKS)))
        self.q_input.setValue(band.q)
        for widget in widgets:
            widget.blockSignals(False)
            widget.setEnabled(editable and band.enabled)
        self.btn_select.setEnabled(band.enabled)


class EqEditorWindow:
    """
    Main editor: response plot, band toggles, per-band controls, master gain,
    power, profile buttons and the connection status line.

    Rendering always reads a fresh session snapshot; every interaction goes
    through the session.
    """

    def __init__(self, app, session, store=None, monitor=None):
        self.app = app
        self.session = session
        self.store = store
        self.monitor = monitor
        self.app.setStyleSheet(DARK_STYLESHEET)

        pg.setConfigOption("background", "#1e1e1e")
        pg.setConfigOption("foreground", "#dcdcdc")

        self.win = QtWidgets.QMainWindow()
        self.win.setWindowTitle("Remote EQ Editor")
        central_widget = QtWidgets.QWidget()
        self.win.setCentralWidget(central_widget)
        main_layout = QtWidgets.QVBoxLayout(central_widget)

        # --- Top Controls: band toggles and settings ---
        top_layout = QtWidgets.QHBoxLayout()
        main_layout.addLayout(top_layout)
        self.band_buttons = []
        for index, band in enumerate(session.bands):
            btn = QtWidgets.QPushButton(getattr(band.kind, "value", band.kind))
            btn.setCheckable(True)
            btn.clicked.connect(lambda _checked, i=index: self.session.toggle_band(i))
            top_layout.addWidget(btn)
            self.band_buttons.append(btn)
        top_layout.addStretch(1)
        self.btn_save = QtWidgets.QPushButton("Save")
        self.btn_load = QtWidgets.QPushButton("Load")
        self.btn_reset = QtWidgets.QPushButton("Reset")
        self.btn_settings = QtWidgets.QPushButton("Settings")
        for btn in (self.btn_save, self.btn_load, self.btn_reset, self.btn_settings):
            top_layout.addWidget(btn)
        self.btn_save.clicked.connect(self.save_profile)
        self.btn_load.clicked.connect(self.open_load_dialog)
        self.btn_reset.clicked.connect(self.session.reset)
        self.btn_settings.clicked.connect(self.open_settings)

        # --- Plot and master section ---
        body_layout = QtWidgets.QHBoxLayout()
        main_layout.addLayout(body_layout)

        self.view_box = EqViewBox(session)
        self.plot_widget = pg.PlotWidget(viewBox=self.view_box)
        self.plot_widget.setMinimumSize(WIDTH, HEIGHT)
        self._draw_grid()
        self.curve = self.plot_widget.plot(pen=pg.mkPen(config.CURVE_COLOR, width=3))
        self.markers = pg.ScatterPlotItem(size=config.CIRCLE_RADIUS * 2, pen=pg.mkPen("w"))
        self.selection_ring = pg.ScatterPlotItem(
            size=config.CIRCLE_RADIUS * 3, pen=pg.mkPen("w", width=3), brush=None)
        self.plot_widget.addItem(self.markers)
        self.plot_widget.addItem(self.selection_ring)
        self.plot_widget.scene().sigMouseMoved.connect(self._update_cursor)
        body_layout.addWidget(self.plot_widget, stretch=1)

        master_layout = QtWidgets.QVBoxLayout()
        body_layout.addLayout(master_layout)
        self.btn_power = QtWidgets.QPushButton("Power")
        self.btn_power.setCheckable(True)
        self.btn_power.clicked.connect(self.session.toggle_power)
        self.master_slider = QtWidgets.QSlider(QtCore.Qt.Vertical)
        self.master_slider.setRange(-config.MAX_MASTER_GAIN * GAIN_TICKS, config.MAX_MASTER_GAIN * GAIN_TICKS)
        self.master_slider.valueChanged.connect(lambda v: self.session.set_master_gain(v / GAIN_TICKS))
        self.master_input = BandControls._spin_box(-config.MAX_MASTER_GAIN, config.MAX_MASTER_GAIN, 1, 0.1)
        self.master_input.editingFinished.connect(
            lambda: self.session.set_master_gain(self.master_input.value()))
        self.master_label = QtWidgets.QLabel()
        master_layout.addWidget(self.btn_power)
        master_layout.addWidget(self.master_slider, stretch=1, alignment=QtCore.Qt.AlignHCenter)
        master_layout.addWidget(self.master_input)
        master_layout.addWidget(self.master_label)

        # --- Band list ---
        band_list = QtWidgets.QHBoxLayout()
        main_layout.addLayout(band_list)
        self.band_controls = []
        for index in range(len(session.bands)):
            controls = BandControls(index, session)
            band_list.addWidget(controls)
            self.band_controls.append(controls)

        self.status_label = QtWidgets.QLabel("Connecting...")
        self.win.statusBar().addWidget(self.status_label)

        # --- Wiring ---
        self.session.add_listener(self.refresh)
        if self.store is not None:
            self.store.state_loaded.connect(self.session.apply_document)
            self.store.profiles_listed.connect(self._choose_profile)
            self.store.profile_loaded.connect(self._apply_profile)
            self.store.profile_saved.connect(self._on_profile_saved)
            self.store.request_failed.connect(self._show_error)
        if self.monitor is not None:
            self.monitor.status_changed.connect(self.update_status)

        self.refresh()
        self.win.show()

    def _draw_grid(self):
        for gain in config.REFERENCE_GAINS:
            y = utils.gain_to_vertical_position(gain, HEIGHT)
            color = config.CENTER_LINE_COLOR if gain == 0 else config.GRID_COLOR
            self.plot_widget.addItem(pg.InfiniteLine(pos=y, angle=0, pen=pg.mkPen(color)))
        for freq in config.FREQ_LABELS:
            x = utils.frequency_to_horizontal_position(freq, WIDTH)
            self.plot_widget.addItem(pg.InfiniteLine(pos=x, angle=90, pen=pg.mkPen(config.GRID_COLOR)))

        bottom = self.plot_widget.getAxis("bottom")
        bottom.setTicks([[(float(utils.frequency_to_horizontal_position(f, WIDTH)), utils.format_frequency_label(f))
                          for f in config.FREQ_LABELS]])
        left = self.plot_widget.getAxis("left")
        left.setTicks([[(float(utils.gain_to_vertical_position(g, HEIGHT)), str(g))
                        for g in config.REFERENCE_GAINS]])

    def refresh(self):
        """Redraw from a fresh snapshot and sync every control to it."""
        snapshot = self.session.snapshot()
        active = snapshot.power and snapshot.connected
        color = config.CURVE_COLOR if active else config.CURVE_COLOR_OFF

        freqs, gains = sample_curve(snapshot)
        xs = utils.frequency_to_horizontal_position(freqs, WIDTH)
        ys = utils.gain_to_vertical_position(gains, HEIGHT)
        self.curve.setData(xs, ys)
        self.curve.setPen(pg.mkPen(color, width=3))

        positions = marker_positions(snapshot, WIDTH, HEIGHT)
        self.markers.setData(pos=list(positions.values()), brush=pg.mkBrush(color))
        selected = positions.get(snapshot.selected_index)
        self.selection_ring.setData(pos=[selected] if selected else [])

        for index, (btn, band) in enumerate(zip(self.band_buttons, snapshot.bands)):
            btn.blockSignals(True)
            btn.setChecked(band.enabled)
            btn.blockSignals(False)
            btn.setEnabled(active)
            self.band_controls[index].refresh(band, snapshot.selected_index == index, active)

        self.btn_power.blockSignals(True)
        self.btn_power.setChecked(snapshot.power)
        self.btn_power.blockSignals(False)
        self.btn_power.setEnabled(snapshot.connected)
        for widget in (self.master_slider, self.master_input):
            widget.blockSignals(True)
        self.master_slider.setValue(int(round(snapshot.master_gain * GAIN_TICKS)))
        self.master_input.setValue(snapshot.master_gain)
        for widget in (self.master_slider, self.master_input):
            widget.blockSignals(False)
            widget.setEnabled(active)
        self.master_label.setText(f"{snapshot.master_gain:.1f} dB")

        for btn in (self.btn_save, self.btn_load, self.btn_reset):
            btn.setEnabled(snapshot.connected)

    def _update_cursor(self, scene_pos):
        point = self.view_box.mapSceneToView(scene_pos)
        hovered = self.session.editable and self.session.band_at(point.x(), point.y(), WIDTH, HEIGHT) is not None
        self.plot_widget.setCursor(QtCore.Qt.PointingHandCursor if hovered else QtCore.Qt.ArrowCursor)

    def update_status(self, status):
        self.status_label.setText(status.describe())
        colors = {
            LivenessState.LIVE: "#00ff00",
            LivenessState.STALE: "#ffA500",
            LivenessState.UNKNOWN: "#dcdcdc",
            LivenessState.UNREACHABLE: "#ff0000",
        }
        self.status_label.setStyleSheet(f"color: {colors[status.state]};")

    # --- Profiles and settings ---

    def save_profile(self):
        if self.store is None:
            return
        name, ok = QtWidgets.QInputDialog.getText(self.win, "Save profile", "Profile name:")
        if not ok:
            return
        try:
            self.store.save_profile(name, build_profile_document(self.session.snapshot()))
        except ValueError as e:
            self._show_error("save_profile", str(e))

    def _on_profile_saved(self, name, ok):
        if ok:
            self.win.statusBar().showMessage(f'Saved as "{name}"', 3000)

    def open_load_dialog(self):
        if self.store is not None:
            self.store.list_profiles()

    def _choose_profile(self, names):
        if not names:
            self.win.statusBar().showMessage("No profiles saved", 3000)
            return
        name, ok = QtWidgets.QInputDialog.getItem(self.win, "Load profile", "Profile:", names, 0, False)
        if ok:
            self.store.load_profile(name)

    def _apply_profile(self, name, document):
        self.session.apply_document(document, publish=True)
        self.win.statusBar().showMessage(f'Loaded "{name}"', 3000)

    def open_settings(self):
        if self.store is None:
            return
        url, ok = QtWidgets.QInputDialog.getText(
            self.win, "Settings", "Database URL:", text=self.store.base_url)
        if not ok:
            return
        auth, ok = QtWidgets.QInputDialog.getText(
            self.win, "Settings", "Auth secret:", QtWidgets.QLineEdit.Password, self.store.auth)
        if not ok:
            return
        self.store.configure(url, auth)
        self.store.fetch_state()
        if self.monitor is not None:
            self.monitor.poll()

    def _show_error(self, operation, message):
        self.win.statusBar().showMessage(f"{operation} failed: {message}", 3000)
