"""
The two named animations.

``qv`` shows the first stage only: a coordinate frame turns from the
identity into the first transform while the element travels from its
source to the intermediate point.

``qvq`` continues with the second stage: a second frame turns into the
second transform, the canonical arrow swings onto the reference element
and the final point leaves the intermediate point for the result.
"""
from __future__ import annotations

from typing import Any

import numpy as np

from qvq.animation.context import AnimationContext
from qvq.animation.easing import interpolate_pose, lerp, lerp_color, lerp_vector
from qvq.animation.phases import PhaseTable
from qvq.animation.sequencer import AnimationSpec
from qvq.core.affine import AffineTransform
from qvq.core.pseudo_quaternion import CANONICAL_DIRECTION
from qvq.core.quaternion import from_unit_vectors
from qvq.scene.drawables import DrawableKind, DrawableState, Palette, Role

QV = "qv"
QVQ = "qvq"

QV_DURATION_MS = 3000
QVQ_DURATION_MS = 6000

QV_PHASES = PhaseTable.from_boundaries(
    [0.33, 0.67], names=["initial", "first_transform", "result"])
QVQ_PHASES = PhaseTable.from_boundaries(
    [0.25, 0.5, 0.75], names=["initial", "first_transform", "second_transform", "result"])

QVQ_TRANSIENT_ROLES = (Role.ANIMATED_INVERSE, Role.MOVING_CANONICAL, Role.ANIMATED_PROJECTION)

# Below this length the swinging arrow has no usable direction.
_MIN_ARROW_LENGTH = 0.01
_PROJECTION_OPACITY = 0.7


# =====================================================
# Drawable helpers
# =====================================================

def _frame(transform: AffineTransform | None, e: float = 1.0) -> DrawableState:
    if transform is None:
        return DrawableState(DrawableKind.FRAME, visible=False)
    position, rotation, scale = interpolate_pose(transform, e)
    return DrawableState(DrawableKind.FRAME, position=position, orientation=rotation, scale=scale)


def _point(position, color, visible: bool = True, size: float = 0.12) -> DrawableState:
    return DrawableState(DrawableKind.POINT, position=position, color=color,
                         visible=visible, size=size)


def _projection(position, opacity: float) -> DrawableState:
    return DrawableState(DrawableKind.PROJECTION, position=position, color=Palette.INTERMEDIATE,
                         opacity=opacity, visible=opacity > 0.0, size=0.1)


def _arrow_towards(direction: np.ndarray, color) -> DrawableState:
    """Canonical arrow re-oriented and stretched to end at *direction*."""
    length = float(np.linalg.norm(direction))
    if length <= _MIN_ARROW_LENGTH:
        return DrawableState(DrawableKind.ARROW, color=color, visible=False)
    rotation = from_unit_vectors(CANONICAL_DIRECTION, direction / length)
    return DrawableState(DrawableKind.ARROW, orientation=rotation, scale=length, color=color)


def _moving_element(ctx: AnimationContext, e: float) -> DrawableState:
    return _point(lerp_vector(ctx.source, ctx.intermediate, e),
                  lerp_color(Palette.ELEMENT, Palette.INTERMEDIATE, e))


# =====================================================
# Q·V
# =====================================================

def compose_qv(ctx: AnimationContext, phase: int, e: float) -> dict[str, DrawableState]:
    if phase == 0:
        return {
            Role.FIRST_FRAME: _frame(None),
            Role.MOVING_ELEMENT: _moving_element(ctx, 0.0).hidden(),
        }
    if phase == 1:
        return {
            Role.FIRST_FRAME: _frame(ctx.first_transform, e),
            Role.MOVING_ELEMENT: _moving_element(ctx, e),
        }
    return {
        Role.FIRST_FRAME: _frame(ctx.first_transform),
        Role.MOVING_ELEMENT: _moving_element(ctx, 1.0),
    }


# =====================================================
# Q·V·Q⁻¹
# =====================================================

def compose_qvq(ctx: AnimationContext, phase: int, e: float) -> dict[str, DrawableState]:
    inverse = _point(ctx.reference, Palette.ELEMENT_INVERSE)
    canonical = np.asarray(CANONICAL_DIRECTION, dtype=float)

    if phase == 0:
        return {
            Role.FIRST_FRAME: _frame(None),
            Role.SECOND_FRAME: _frame(None),
            Role.MOVING_ELEMENT: _moving_element(ctx, 0.0).hidden(),
            Role.MOVING_FINAL: _point(ctx.intermediate, Palette.INTERMEDIATE, visible=False),
            Role.MOVING_CANONICAL: _arrow_towards(canonical, Palette.ELEMENT_INVERSE).hidden(),
            Role.ANIMATED_INVERSE: inverse,
            Role.ANIMATED_PROJECTION: _projection(ctx.intermediate, 0.0),
        }
    if phase == 1:
        return {
            Role.FIRST_FRAME: _frame(ctx.first_transform, e),
            Role.SECOND_FRAME: _frame(None),
            Role.MOVING_ELEMENT: _moving_element(ctx, e),
            Role.MOVING_FINAL: _point(ctx.intermediate, Palette.INTERMEDIATE, visible=False),
            Role.MOVING_CANONICAL: _arrow_towards(canonical, Palette.ELEMENT_INVERSE).hidden(),
            Role.ANIMATED_INVERSE: inverse,
            Role.ANIMATED_PROJECTION: _projection(ctx.intermediate, lerp(0.0, _PROJECTION_OPACITY, e)),
        }
    if phase == 2:
        return {
            Role.FIRST_FRAME: _frame(ctx.first_transform),
            Role.SECOND_FRAME: _frame(ctx.second_transform, e),
            Role.MOVING_ELEMENT: _moving_element(ctx, 1.0),
            Role.MOVING_FINAL: _point(lerp_vector(ctx.intermediate, ctx.final, e),
                                      lerp_color(Palette.INTERMEDIATE, Palette.FINAL, e), size=0.15),
            Role.MOVING_CANONICAL: _arrow_towards(lerp_vector(canonical, ctx.reference, e),
                                                  Palette.ELEMENT_INVERSE),
            Role.ANIMATED_INVERSE: inverse,
            Role.ANIMATED_PROJECTION: _projection(ctx.intermediate, _PROJECTION_OPACITY),
        }
    return {
        Role.FIRST_FRAME: _frame(None),
        Role.SECOND_FRAME: _frame(ctx.second_transform),
        Role.MOVING_ELEMENT: _moving_element(ctx, 1.0).hidden(),
        Role.MOVING_FINAL: _point(ctx.final, Palette.FINAL, size=0.15),
        Role.MOVING_CANONICAL: _arrow_towards(np.asarray(ctx.reference), Palette.ELEMENT_INVERSE).hidden(),
        Role.ANIMATED_INVERSE: inverse,
        Role.ANIMATED_PROJECTION: _projection(ctx.intermediate, 0.0),
    }


# =====================================================
# Specs
# =====================================================

def _duration(settings: Any, attr: str, default: int) -> float:
    value = getattr(settings, attr, None) if settings is not None else None
    return float(value) if value else float(default)


def build_animation_specs(settings: Any = None) -> dict[str, AnimationSpec]:
    """
    Both animation specs keyed by name.

    :param settings: Optional object with ``qv_duration_ms`` and
        ``qvq_duration_ms`` (e.g. ``AnimationConfig``).
    """
    return {
        QV: AnimationSpec(
            name=QV,
            duration_ms=_duration(settings, "qv_duration_ms", QV_DURATION_MS),
            phases=QV_PHASES,
            compose=compose_qv,
        ),
        QVQ: AnimationSpec(
            name=QVQ,
            duration_ms=_duration(settings, "qvq_duration_ms", QVQ_DURATION_MS),
            phases=QVQ_PHASES,
            compose=compose_qvq,
            transient_roles=QVQ_TRANSIENT_ROLES,
        ),
    }
