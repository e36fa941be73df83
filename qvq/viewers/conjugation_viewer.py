"""VTK viewer of the conjugation scene."""
from __future__ import annotations

import logging
from typing import Callable

import numpy as np
import vtk
from PySide6 import QtCore, QtWidgets

from qvq.app.app_settings_manager import AppSettingsManager
from qvq.scene.drawables import DrawableKind, DrawableState
from qvq.utils import vtk_helpers
from qvq.viewers.base_viewer import BaseViewer

logger = logging.getLogger(__name__)

FRAME_INTERVAL_MS = 16
AXIS_LINE_EXTENT = 5.0


class QtClock:
    """Clock backed by QElapsedTimer; frames are scheduled with QTimer."""

    def __init__(self, interval_ms: int = FRAME_INTERVAL_MS):
        self._timer = QtCore.QElapsedTimer()
        self._timer.start()
        self._interval_ms = interval_ms

    def now_ms(self) -> float:
        return float(self._timer.elapsed())

    def call_on_next_frame(self, callback: Callable[[], None]) -> None:
        QtCore.QTimer.singleShot(self._interval_ms, callback)


class _DrawableHandle:
    """The VTK props standing for one role."""

    def __init__(self, kind: DrawableKind, state: DrawableState):
        self.kind = kind
        self.props: list[vtk.vtkProp] = []
        self._sphere = None
        self._line = None

        if kind is DrawableKind.ARROW:
            self._arrow = vtk_helpers.make_arrow_actor(state.color)
            self.props.append(self._arrow)
        elif kind is DrawableKind.FRAME:
            self._frame = vtk_helpers.make_frame_actor()
            self.props.append(self._frame)
        elif kind is DrawableKind.AXIS_LINE:
            self._line_actor, self._line = vtk_helpers.make_line_actor(state.color)
            self.props.append(self._line_actor)
        else:
            self._sphere_actor, self._sphere = vtk_helpers.make_sphere_actor(state.size, state.color)
            self._line_actor, self._line = vtk_helpers.make_line_actor(state.color, width=1.0)
            self.props.extend([self._sphere_actor, self._line_actor])

    def apply(self, state: DrawableState) -> None:
        position = np.asarray(state.position, dtype=float)

        if self.kind is DrawableKind.ARROW:
            vtk_helpers.apply_pose(self._arrow, (0.0, 0.0, 0.0), state.orientation, state.scale)
            vtk_helpers.set_color(self._arrow, state.color, state.opacity)
        elif self.kind is DrawableKind.FRAME:
            vtk_helpers.apply_pose(self._frame, position, state.orientation, state.scale)
        elif self.kind is DrawableKind.AXIS_LINE:
            self._line.SetPoint1(*(-AXIS_LINE_EXTENT * position))
            self._line.SetPoint2(*(AXIS_LINE_EXTENT * position))
            vtk_helpers.set_color(self._line_actor, state.color, state.opacity)
        else:
            if self.kind is DrawableKind.PROJECTION:
                anchor = (position[0], position[1], 0.0)
                line_start = anchor
            else:
                anchor = tuple(position)
                line_start = (0.0, 0.0, 0.0)
            self._sphere.SetRadius(state.size)
            self._sphere_actor.SetPosition(*anchor)
            self._line.SetPoint1(*line_start)
            self._line.SetPoint2(*position)
            vtk_helpers.set_color(self._sphere_actor, state.color, state.opacity)
            vtk_helpers.set_color(self._line_actor, state.color, state.opacity * 0.5)

        for prop in self.props:
            prop.SetVisibility(state.visible)


class VtkDrawableSink:
    """
    DrawableSink that keeps one set of VTK props per role in a renderer.

    Replacing a role with a different kind rebuilds its props.
    """

    def __init__(self, renderer: vtk.vtkRenderer):
        self._renderer = renderer
        self._handles: dict[str, _DrawableHandle] = {}

    @property
    def roles(self) -> list[str]:
        return list(self._handles)

    def props(self, role: str) -> list[vtk.vtkProp]:
        handle = self._handles.get(role)
        return list(handle.props) if handle else []

    def add(self, role: str, state: DrawableState) -> None:
        if role in self._handles:
            self.remove(role)
        handle = _DrawableHandle(state.kind, state)
        handle.apply(state)
        for prop in handle.props:
            self._renderer.AddActor(prop)
        self._handles[role] = handle

    def replace(self, role: str, state: DrawableState) -> None:
        handle = self._handles.get(role)
        if handle is None or handle.kind is not state.kind:
            self.add(role, state)
            return
        handle.apply(state)

    def remove(self, role: str) -> None:
        handle = self._handles.pop(role, None)
        if handle is None:
            logger.debug("remove: unknown role %s", role)
            return
        for prop in handle.props:
            self._renderer.RemoveActor(prop)


class ConjugationViewer(BaseViewer):
    """Orbitable 3D view whose drawables are driven through ``sink``."""

    def __init__(self, settings_manager: AppSettingsManager | None = None,
                 parent: QtWidgets.QWidget | None = None) -> None:
        self.sink: VtkDrawableSink | None = None
        super().__init__(settings_manager, parent)

    def setup_interactor_style(self) -> None:
        style = vtk.vtkInteractorStyleTrackballCamera()
        self.interactor.SetInteractorStyle(style)

    def setup_scene(self) -> None:
        self.sink = VtkDrawableSink(self.renderer)
