import copy
import logging

from PySide6 import QtCore
from PySide6.QtWidgets import QMainWindow, QWidget, QHBoxLayout, QSplitter, QLabel

from qvq.animation.choreography import QV, QVQ
from qvq.animation.sequencer import AnimationFrame, SequencerState
from qvq.app.app_settings_manager import AppSettingsManager
from qvq.app.shortcut_manager import ShortcutManager
from qvq.core.angles import ResultAngles
from qvq.core.results import ConjugationMode, ConjugationResult
from qvq.status import STATUS_FIELDS, StatusField
from qvq.ui.parameter_panel import ParameterPanel
from qvq.ui.timeline_widget import TimelineWidget
from qvq.utils.resource_paths import settings_dir
from qvq.viewers.conjugation_viewer import ConjugationViewer, QtClock
from qvq.viewers.controllers.conjugation_controller import ConjugationController

logger = logging.getLogger(__name__)

_READOUT_KEYS = ("angle_source_intermediate", "angle_source_final", "angle_intermediate_final")


class MainWindow(QMainWindow):
    """Main application window: parameter panel, 3D view and timeline."""

    def __init__(self, settings_mgr: AppSettingsManager | None = None):
        """
        Initialize the main window.

        :param settings_mgr: Application settings manager.
        """
        super().__init__()

        self.setting = settings_mgr or AppSettingsManager()

        self.shortcut_mgr = ShortcutManager(
            parent=self,
            config_path=settings_dir(),
            settings_manager=self.setting,
        )

        # Status fields, copied per window
        self.status_fields: dict[str, StatusField] = {
            k: copy.deepcopy(v) for k, v in STATUS_FIELDS.items()
        }
        self._status_label: dict[str, QLabel] = {}

        self.setWindowTitle("QVQ - Quaternion Conjugation Viewer")
        self._setup_ui()
        self._setup_menus()
        self._setup_status_bar()

        self.controller = ConjugationController(self.viewer.sink, QtClock(), self.setting)
        self._connect_controller()
        self._register_shortcuts()
        self._sync_panel()

        self.controller.start_render_loop()
        self.show()

    def _setup_ui(self) -> None:
        central_widget = QWidget(self)
        self.setCentralWidget(central_widget)
        main_layout = QHBoxLayout(central_widget)

        self.panel = ParameterPanel(central_widget)
        self.panel.setMaximumWidth(360)

        splitter = QSplitter(QtCore.Qt.Vertical)
        self.viewer = ConjugationViewer(settings_manager=self.setting, parent=central_widget)
        self.timeline = TimelineWidget()
        self.timeline.setMinimumHeight(100)
        splitter.addWidget(self.viewer)
        splitter.addWidget(self.timeline)
        splitter.setStretchFactor(0, 4)
        splitter.setStretchFactor(1, 1)

        main_layout.addWidget(self.panel)
        main_layout.addWidget(splitter, 1)
        self.setGeometry(100, 100, 1280, 800)

    def _setup_menus(self) -> None:
        menubar = self.menuBar()

        file_menu = menubar.addMenu("&File")
        file_menu.addAction("&Quit", self.close)

        view_menu = menubar.addMenu("&View")
        view_menu.addAction("&Reset View", self.viewer.reset_camera)

        anim_menu = menubar.addMenu("&Animate")
        anim_menu.addAction("Q·V", lambda: self.start_animation(QV))
        anim_menu.addAction("Q·V·Q⁻¹", lambda: self.start_animation(QVQ))
        anim_menu.addSeparator()
        anim_menu.addAction("&Reset Parameters", self.reset_parameters)

    def _setup_status_bar(self) -> None:
        status_bar = self.statusBar()
        for key, field in self.status_fields.items():
            if not field.visible:
                self._status_label[key] = None
                continue
            label = QLabel("", self)
            status_bar.addPermanentWidget(label)
            self._status_label[key] = label

    def _connect_controller(self) -> None:
        self.panel.parameterChanged.connect(self.controller.set_parameter)
        self.panel.modeChanged.connect(self._on_mode_changed)
        self.panel.showFinalChanged.connect(self._on_show_final_changed)
        self.panel.animateRequested.connect(self.start_animation)
        self.panel.resetRequested.connect(self.reset_parameters)

        self.controller.add_result_callback(self._on_result)
        self.controller.add_frame_callback(self._on_frame)
        self.controller.add_animation_state_callback(self._on_animation_state)

    def _register_shortcuts(self) -> None:
        self.shortcut_mgr.add_callback("animate_qv", lambda: self.start_animation(QV))
        self.shortcut_mgr.add_callback("animate_qvq", lambda: self.start_animation(QVQ))
        self.shortcut_mgr.add_callback("reset_parameters", self.reset_parameters)
        self.shortcut_mgr.add_callback("toggle_final_result", self.toggle_final_result)
        self.shortcut_mgr.add_callback("toggle_mode", self.toggle_mode)
        self.shortcut_mgr.add_callback("reset_view", self.viewer.reset_camera)

    def _sync_panel(self) -> None:
        """Push the controller state into the panel, status bar and view."""
        self.panel.set_values(self.controller.parameters)
        self.panel.set_mode(self.controller.mode)
        self.panel.set_show_final(self.controller.show_final_result)
        self._refresh_readouts()
        self._update_status("mode", str(self.controller.mode))
        self.timeline.set_spec(self.controller.sequencer(QVQ).spec)
        self.viewer.update_view()

    # =====================================================
    # Actions
    # =====================================================

    def start_animation(self, name: str) -> bool:
        return self.controller.start_animation(name)

    def reset_parameters(self) -> None:
        self.controller.reset_parameters()
        self.panel.set_values(self.controller.parameters)

    def toggle_final_result(self) -> None:
        show = not self.controller.show_final_result
        self.controller.set_show_final_result(show)
        self.panel.set_show_final(show)

    def toggle_mode(self) -> None:
        mode = (ConjugationMode.REAL if self.controller.mode is ConjugationMode.PSEUDO
                else ConjugationMode.PSEUDO)
        self._on_mode_changed(mode.value)
        self.panel.set_mode(mode)

    # =====================================================
    # Signal Handlers
    # =====================================================

    def _on_mode_changed(self, mode: str) -> None:
        self.controller.set_mode(mode)
        self._update_status("mode", str(self.controller.mode))

    def _on_show_final_changed(self, show: bool) -> None:
        self.controller.set_show_final_result(show)

    def _on_result(self, result: ConjugationResult, angles: ResultAngles) -> None:
        self._refresh_readouts()
        self.viewer.update_view()

    def _on_frame(self, frame: AnimationFrame) -> None:
        self.timeline.set_progress(frame.t)
        self._update_status("animation", frame.t)
        self.viewer.update_view()

    def _on_animation_state(self, name: str, state: SequencerState) -> None:
        running = state is SequencerState.RUNNING
        self.panel.set_animation_running(running)
        if running:
            self.timeline.set_spec(self.controller.sequencer(name).spec)
        else:
            self.timeline.clear_progress()
            self._update_status("animation", None)

    def _refresh_readouts(self) -> None:
        readouts = self.controller.angle_readouts()
        self.panel.set_readouts(readouts)
        for key, text in zip(_READOUT_KEYS, readouts):
            self._update_status(key, text)

    def _update_status(self, key: str, value) -> None:
        """Update status bar label."""
        label = self._status_label.get(key)
        if label is None:
            return

        field = self.status_fields.get(key)
        if field is None:
            return

        field.value = value
        try:
            label.setText(field.text())
        except (ValueError, TypeError) as e:
            logger.warning("Error formatting status field %s: %s", key, e)
            label.setText(str(value))

    def closeEvent(self, event) -> None:
        self.controller.stop_render_loop()
        super().closeEvent(event)
