"""Base viewer class for VTK-based viewers"""
from __future__ import annotations

import logging
from abc import ABCMeta, abstractmethod

import vtk
from PySide6 import QtWidgets

from qvq.app.app_settings_manager import AppSettingsManager
from qvq.scene.drawables import Palette
from qvq.utils import vtk_helpers

logger = logging.getLogger(__name__)

CAMERA_POSITION = (5.0, 5.0, 5.0)
AXES_LENGTH = 5.0


class ABCQtMeta(ABCMeta, type(QtWidgets.QWidget)):
    """
    Metaclass that combines ABCMeta and type(QWidget)
    """
    pass


class BaseViewer(QtWidgets.QWidget, metaclass=ABCQtMeta):
    """
    Base class for VTK-based viewers

    Provides common functionality:
    - VTK rendering setup (renderer, interactor, lighting)
    - Reference decorations (world axes, XY grid)
    - Camera reset

    Subclasses should implement:
    - setup_interactor_style(): Set up the interactor style
    - setup_scene(): Add the viewer specific props
    """

    def __init__(
            self,
            settings_manager: AppSettingsManager | None = None,
            parent: QtWidgets.QWidget | None = None,
    ) -> None:
        """
        Initialize the base viewer.
        :param settings_manager: Application settings manager
        :param parent: Parent widget
        """
        super().__init__(parent)
        self.setting = settings_manager or AppSettingsManager()
        self._setup_ui()
        self._setup_vtk_rendering()
        self._setup_decorations()

        self.setup_interactor_style()
        self.setup_scene()
        self.reset_camera()
        self.interactor.Initialize()

    def _setup_ui(self) -> None:
        layout = QtWidgets.QVBoxLayout(self)
        layout.setContentsMargins(0, 0, 0, 0)

        from vtkmodules.qt.QVTKRenderWindowInteractor import QVTKRenderWindowInteractor
        self.vtk_widget = QVTKRenderWindowInteractor(self)
        layout.addWidget(self.vtk_widget)

        self.setLayout(layout)

        logger.debug("Base viewer UI created.")

    def _setup_vtk_rendering(self) -> None:
        """Setup the VTK rendering components."""
        render_window = self.vtk_widget.GetRenderWindow()

        self.renderer = vtk.vtkRenderer()
        self.renderer.SetBackground(*Palette.BACKGROUND)
        render_window.AddRenderer(self.renderer)

        # ambient fill plus one directional key light
        self.renderer.RemoveAllLights()
        fill = vtk.vtkLight()
        fill.SetLightTypeToHeadlight()
        fill.SetIntensity(0.6)
        self.renderer.AddLight(fill)
        key = vtk.vtkLight()
        key.SetLightTypeToSceneLight()
        key.SetPosition(5.0, 5.0, 5.0)
        key.SetFocalPoint(0.0, 0.0, 0.0)
        key.SetIntensity(0.8)
        self.renderer.AddLight(key)

        self.interactor = render_window.GetInteractor()

        logger.debug("VTK rendering components initialized.")

    def _setup_decorations(self) -> None:
        self.axes_actor = vtk_helpers.make_frame_actor(AXES_LENGTH)
        self.renderer.AddActor(self.axes_actor)
        self.grid_actor = vtk_helpers.make_grid_actor()
        self.renderer.AddActor(self.grid_actor)

    @abstractmethod
    def setup_interactor_style(self) -> None:
        """
        Setup the interactor style for user interaction.

        Example:
        style = vtk.vtkInteractorStyleTrackballCamera()
        self.interactor.SetInteractorStyle(style)
        """
        pass

    @abstractmethod
    def setup_scene(self) -> None:
        """Add the viewer specific props to the renderer."""
        pass

    # =====================================================
    # Rendering
    # =====================================================

    def update_view(self) -> None:
        """Trigger a render."""
        self.vtk_widget.GetRenderWindow().Render()

    def reset_camera(self) -> None:
        """Look at the origin from (5, 5, 5) with +z up."""
        camera = self.renderer.GetActiveCamera()
        camera.SetPosition(*CAMERA_POSITION)
        camera.SetFocalPoint(0.0, 0.0, 0.0)
        camera.SetViewUp(0.0, 0.0, 1.0)
        camera.SetViewAngle(75.0)
        self.renderer.ResetCameraClippingRange()
        self.update_view()

    # =====================================================
    # Lifecycle
    # =====================================================

    def closeEvent(self, event) -> None:
        """Handle close event."""
        if hasattr(self, "interactor") and self.interactor:
            self.interactor.TerminateApp()
        super().closeEvent(event)
