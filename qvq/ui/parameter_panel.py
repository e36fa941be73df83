"""Parameter panel - sliders, toggles and angle readouts."""
from __future__ import annotations

import logging

from PySide6 import QtCore
from PySide6.QtWidgets import (QCheckBox, QComboBox, QFormLayout, QGroupBox, QHBoxLayout,
                               QLabel, QPushButton, QSlider, QVBoxLayout, QWidget)

from qvq.animation.choreography import QV, QVQ
from qvq.core.angles import ANGLE_PLACEHOLDER
from qvq.core.parameters import PARAMETER_RANGES, ParameterRange, ParameterSnapshot
from qvq.core.results import ConjugationMode

logger = logging.getLogger(__name__)

READOUT_LABELS = ("∠(Q, _Q)", "∠(Q, Q')", "∠(_Q, Q')")


class ParameterPanel(QWidget):
    """
    Controls of the viewer.

    The panel holds no state of its own: it emits what the user asks for
    and is refreshed from the controller with ``set_values`` and
    ``set_readouts``.
    """

    parameterChanged = QtCore.Signal(str, float)
    modeChanged = QtCore.Signal(str)
    showFinalChanged = QtCore.Signal(bool)
    animateRequested = QtCore.Signal(str)
    resetRequested = QtCore.Signal()

    def __init__(self, parent: QWidget | None = None):
        super().__init__(parent)
        self.sliders: dict[str, QSlider] = {}
        self.value_labels: dict[str, QLabel] = {}
        self.readout_labels: list[QLabel] = []
        self._setup_ui()

    def _setup_ui(self) -> None:
        layout = QVBoxLayout(self)

        params_box = QGroupBox("Parameters", self)
        form = QFormLayout(params_box)
        for name, rng in PARAMETER_RANGES.items():
            form.addRow(rng.label, self._make_slider_row(rng))
        layout.addWidget(params_box)

        self.mode_combo = QComboBox(self)
        self.mode_combo.addItem("Pseudo quaternion", ConjugationMode.PSEUDO.value)
        self.mode_combo.addItem("Hamilton quaternion", ConjugationMode.REAL.value)
        self.mode_combo.currentIndexChanged.connect(self._on_mode_index_changed)
        layout.addWidget(self.mode_combo)

        self.show_final_check = QCheckBox("Show final result", self)
        self.show_final_check.toggled.connect(self.showFinalChanged)
        layout.addWidget(self.show_final_check)

        buttons = QHBoxLayout()
        self.animate_qv_button = QPushButton("Animate Q·V", self)
        self.animate_qv_button.clicked.connect(lambda: self.animateRequested.emit(QV))
        self.animate_qvq_button = QPushButton("Animate Q·V·Q⁻¹", self)
        self.animate_qvq_button.clicked.connect(lambda: self.animateRequested.emit(QVQ))
        self.reset_button = QPushButton("Reset", self)
        self.reset_button.clicked.connect(self.resetRequested)
        for b in (self.animate_qv_button, self.animate_qvq_button, self.reset_button):
            buttons.addWidget(b)
        layout.addLayout(buttons)

        readout_box = QGroupBox("Angles", self)
        readout_form = QFormLayout(readout_box)
        for text in READOUT_LABELS:
            label = QLabel(ANGLE_PLACEHOLDER, self)
            readout_form.addRow(text, label)
            self.readout_labels.append(label)
        layout.addWidget(readout_box)
        layout.addStretch(1)

    def _make_slider_row(self, rng: ParameterRange) -> QWidget:
        row = QWidget(self)
        h = QHBoxLayout(row)
        h.setContentsMargins(0, 0, 0, 0)

        slider = QSlider(QtCore.Qt.Horizontal, row)
        slider.setRange(rng.to_slider(rng.minimum), rng.to_slider(rng.maximum))
        slider.valueChanged.connect(lambda pos, r=rng: self._on_slider_moved(r, pos))
        label = QLabel(rng.format(0.0), row)
        label.setMinimumWidth(48)

        h.addWidget(slider, 1)
        h.addWidget(label)
        self.sliders[rng.name] = slider
        self.value_labels[rng.name] = label
        return row

    # =====================================================
    # User input
    # =====================================================

    def _on_slider_moved(self, rng: ParameterRange, position: int) -> None:
        value = rng.from_slider(position)
        self.value_labels[rng.name].setText(rng.format(value))
        self.parameterChanged.emit(rng.name, value)

    def _on_mode_index_changed(self, index: int) -> None:
        self.modeChanged.emit(self.mode_combo.itemData(index))

    # =====================================================
    # Refresh from the controller
    # =====================================================

    def set_values(self, params: ParameterSnapshot) -> None:
        """Move the sliders to *params* without echoing signals."""
        for name, rng in PARAMETER_RANGES.items():
            value = getattr(params, name)
            slider = self.sliders[name]
            slider.blockSignals(True)
            slider.setValue(rng.to_slider(value))
            slider.blockSignals(False)
            self.value_labels[name].setText(rng.format(value))

    def set_mode(self, mode: ConjugationMode | str) -> None:
        index = self.mode_combo.findData(ConjugationMode(mode).value)
        self.mode_combo.blockSignals(True)
        self.mode_combo.setCurrentIndex(index)
        self.mode_combo.blockSignals(False)

    def set_show_final(self, show: bool) -> None:
        self.show_final_check.blockSignals(True)
        self.show_final_check.setChecked(show)
        self.show_final_check.blockSignals(False)

    def set_readouts(self, readouts: tuple[str, str, str]) -> None:
        for label, text in zip(self.readout_labels, readouts):
            label.setText(text)

    def set_animation_running(self, running: bool) -> None:
        self.animate_qv_button.setEnabled(not running)
        self.animate_qvq_button.setEnabled(not running)
