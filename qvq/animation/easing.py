"""Easing and interpolation primitives used by the phase choreography."""
from __future__ import annotations

from typing import Callable, Sequence

import numpy as np

from qvq.core.affine import AffineTransform
from qvq.core.quaternion import Quaternion, slerp

EasingFunction = Callable[[float], float]


def linear(u: float) -> float:
    return u


def ease_in_out_quad(u: float) -> float:
    """2u² on the first half, 1 - (-2u + 2)² / 2 on the second."""
    if u < 0.5:
        return 2.0 * u * u
    return 1.0 - (-2.0 * u + 2.0) ** 2 / 2.0


def lerp(a: float, b: float, e: float) -> float:
    return a + (b - a) * e


def lerp_vector(a: Sequence[float], b: Sequence[float], e: float) -> np.ndarray:
    va = np.asarray(a, dtype=float)
    vb = np.asarray(b, dtype=float)
    return va + (vb - va) * e


def lerp_color(a: Sequence[float], b: Sequence[float], e: float) -> tuple[float, float, float]:
    r, g, bl = lerp_vector(a, b, e)
    return float(r), float(g), float(bl)


def interpolate_pose(transform: AffineTransform, e: float) -> tuple[np.ndarray, Quaternion, float]:
    """
    Pose part way from the identity to *transform*.

    Position and scale are lerped, the rotation is slerped.

    :param transform: Target transform reached at e == 1.
    :param e: Eased progress in [0, 1].
    :return: (position, rotation, uniform scale)
    """
    position, rotation, scale = transform.decompose()
    pos = lerp_vector(np.zeros(3), position, e)
    rot = slerp(Quaternion.identity(), rotation, e)
    s = lerp(1.0, float(scale[0]), e)
    return pos, rot, s
