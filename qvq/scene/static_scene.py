"""Persistent drawables rebuilt on every recompute pass."""
from __future__ import annotations

import numpy as np

from qvq.core.parameters import Parameters, ParameterSnapshot
from qvq.core.results import ConjugationResult
from qvq.scene.drawables import DrawableKind, DrawableState, Palette, Role


def static_scene(params: Parameters | ParameterSnapshot,
                 result: ConjugationResult,
                 show_final: bool) -> dict[str, DrawableState]:
    """
    Drawables of the resting scene.

    The intermediate projection and the final point are only part of the
    scene while the final result is shown.
    """
    axis = np.array([params.dx, params.dy, 0.0])
    axis_length = float(np.linalg.norm(axis))
    if axis_length > 0.0:
        axis_state = DrawableState(DrawableKind.AXIS_LINE, position=axis / axis_length,
                                   color=Palette.ROTATION_AXIS)
    else:
        axis_state = DrawableState(DrawableKind.AXIS_LINE, color=Palette.ROTATION_AXIS,
                                   visible=False)

    states = {
        Role.CANONICAL_AXIS: DrawableState(DrawableKind.ARROW, color=Palette.CANONICAL),
        Role.ROTATION_AXIS: axis_state,
        Role.TARGET: DrawableState(DrawableKind.POINT, position=result.target_point,
                                   color=Palette.TARGET, opacity=0.5, size=0.15),
        Role.ELEMENT: DrawableState(DrawableKind.POINT, position=result.element_point,
                                    color=Palette.ELEMENT),
        Role.ELEMENT_INVERSE: DrawableState(DrawableKind.POINT, position=result.reference_point,
                                            color=Palette.ELEMENT_INVERSE),
    }

    if show_final:
        states[Role.INTERMEDIATE_PROJECTION] = DrawableState(
            DrawableKind.PROJECTION, position=result.intermediate_point,
            color=Palette.INTERMEDIATE, opacity=0.7, size=0.1)
        states[Role.FINAL_RESULT] = DrawableState(
            DrawableKind.POINT, position=result.final_point,
            color=Palette.FINAL, size=0.15)

    return states
