"""
Pseudo-quaternion engine.

The rotation element is embedded as a point on the unit sphere,
``Q = cos(θ)·ẑ + sin(θ)·D̂``, and conjugation Q·V·Q⁻¹ is realised as two
sequential geometric transforms instead of an algebraic product:

1. the transform that carries the canonical direction ẑ onto V is applied
   to Q, giving the intermediate point _Q;
2. the transform that carries ẑ onto the pseudo-inverse Q⁻¹ is applied
   to _Q, giving the final point.

The pseudo-inverse only flips the in-plane component of Q. It is *not* the
inverse of the two transforms above; this is the teaching model and is kept
as is.
"""
from __future__ import annotations

import logging
import math
from typing import TYPE_CHECKING, Any, Sequence

import numpy as np

from qvq.core.affine import AffineTransform
from qvq.core.angles import angle_between
from qvq.core.quaternion import EPSILON, from_axis_angle, from_unit_vectors
from qvq.core.results import PseudoResult

if TYPE_CHECKING:
    from qvq.core.parameters import Parameters

logger = logging.getLogger(__name__)

CANONICAL_DIRECTION = np.array([0.0, 0.0, 1.0])

# Rotation axes shorter than this are treated as undefined.
_AXIS_EPSILON = 1e-4


def _unit_axis(axis: Sequence[float]) -> np.ndarray | None:
    a = np.asarray(axis, dtype=float)[:2]
    length = float(np.linalg.norm(a))
    if length < EPSILON:
        return None
    return a / length


def embed(theta_deg: float, axis: Sequence[float]) -> np.ndarray:
    """
    Embed (θ, D) as the point (sinθ·nx, sinθ·ny, cosθ).

    A zero axis means "no rotation axis" and yields the canonical direction.
    """
    n = _unit_axis(axis)
    if n is None:
        return CANONICAL_DIRECTION.copy()
    theta = math.radians(theta_deg)
    s = math.sin(theta)
    return np.array([s * n[0], s * n[1], math.cos(theta)])


def embed_inverse(theta_deg: float, axis: Sequence[float]) -> np.ndarray:
    """Pseudo-conjugate (-sinθ·nx, -sinθ·ny, cosθ): only the in-plane part flips."""
    n = _unit_axis(axis)
    if n is None:
        return CANONICAL_DIRECTION.copy()
    theta = math.radians(theta_deg)
    s = math.sin(theta)
    return np.array([-s * n[0], -s * n[1], math.cos(theta)])


def transform_to_target_2d(target: Sequence[float]) -> AffineTransform:
    """
    Transform carrying ẑ onto the in-plane point (vx, vy, 0).

    Any in-plane target is orthogonal to ẑ, so the rotation is always
    exactly 90° about ẑ × V̂. The scale is |V|; a zero target gives the
    identity.
    """
    v = np.array([float(target[0]), float(target[1]), 0.0])
    length = float(np.linalg.norm(v))
    if length < EPSILON:
        return AffineTransform.identity()

    rotation_axis = np.cross(CANONICAL_DIRECTION, v / length)
    if np.linalg.norm(rotation_axis) > _AXIS_EPSILON:
        rotation = from_axis_angle(rotation_axis, math.pi / 2)
    else:
        rotation = AffineTransform.identity().rotation

    return AffineTransform(rotation=rotation, scale=length)


def transform_to_target_3d(target: Sequence[float]) -> AffineTransform:
    """
    Transform carrying ẑ onto an arbitrary 3D point.

    The rotation is the minimal-angle rotation ẑ -> normalized(target),
    the scale is |target|; a zero target gives the identity.
    """
    v = np.asarray(target, dtype=float)
    length = float(np.linalg.norm(v))
    if length < EPSILON:
        return AffineTransform.identity()

    rotation = from_unit_vectors(CANONICAL_DIRECTION, v / length)
    return AffineTransform(rotation=rotation, scale=length)


def apply(point: Sequence[float], transform: AffineTransform) -> np.ndarray:
    return transform.apply(point)


def composed_result(params: Parameters) -> PseudoResult:
    """Run both transform stages for the current parameters."""
    embedding = embed(params.theta, params.axis)
    pseudo_inverse = embed_inverse(params.theta, params.axis)

    first = transform_to_target_2d(params.target)
    intermediate = apply(embedding, first)

    second = transform_to_target_3d(pseudo_inverse)
    final = apply(intermediate, second)

    logger.debug("pseudo: Q=%s Q^-1=%s _Q=%s final=%s",
                 embedding, pseudo_inverse, intermediate, final)

    return PseudoResult(
        embedding=embedding,
        pseudo_inverse=pseudo_inverse,
        intermediate=intermediate,
        final=final,
        target=np.array([params.vx, params.vy, 0.0]),
        first=first,
        second=second,
    )


def _scale_ratio(after: np.ndarray, before: np.ndarray) -> float:
    before_len = float(np.linalg.norm(before))
    if before_len < EPSILON:
        return 0.0
    return float(np.linalg.norm(after)) / before_len


def transform_report(result: PseudoResult, tol: float = 1e-3) -> dict[str, Any]:
    """
    Consistency checks of both transform stages.

    Each stage is a rotation plus uniform scale, so the element it moves
    must turn by the same angle and grow by the same factor as the
    canonical direction does. The angle check only holds while the
    element lies on the rotation's great circle, so a mismatch is
    reported, not raised.
    """
    z = CANONICAL_DIRECTION
    mapped_target = result.first.apply(z)
    mapped_reference = result.second.apply(z)

    stage1 = {
        "mapping_error": float(np.linalg.norm(mapped_target - result.target)),
        "angle_z": angle_between(z, mapped_target),
        "angle_element": angle_between(result.embedding, result.intermediate),
        "scale_z": _scale_ratio(mapped_target, z),
        "scale_element": _scale_ratio(result.intermediate, result.embedding),
    }
    stage2 = {
        "mapping_error": float(np.linalg.norm(mapped_reference - result.pseudo_inverse)),
        "angle_z": angle_between(z, mapped_reference),
        "angle_element": angle_between(result.intermediate, result.final),
        "scale_z": _scale_ratio(mapped_reference, z),
        "scale_element": _scale_ratio(result.final, result.intermediate),
    }
    for stage in (stage1, stage2):
        stage["mapping_ok"] = stage["mapping_error"] < tol
        stage["angle_match"] = abs(stage["angle_z"] - stage["angle_element"]) < 0.1
        stage["scale_match"] = abs(stage["scale_z"] - stage["scale_element"]) < tol

    return {"first": stage1, "second": stage2}
