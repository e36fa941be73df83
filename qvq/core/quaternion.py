"""Hamilton quaternion algebra used by the real conjugation engine."""
from __future__ import annotations

import logging
import math
from dataclasses import dataclass
from typing import TYPE_CHECKING, Sequence

import numpy as np

if TYPE_CHECKING:
    from qvq.core.parameters import Parameters
    from qvq.core.results import RealResult

logger = logging.getLogger(__name__)

# Below this length a vector is treated as the zero vector.
EPSILON = 1e-12


@dataclass(frozen=True)
class Quaternion:
    """
    Immutable quaternion (w, x, y, z).

    Unit quaternions represent rotations, pure quaternions (w == 0)
    represent points.
    """
    w: float
    x: float
    y: float
    z: float

    @staticmethod
    def identity() -> Quaternion:
        return Quaternion(1.0, 0.0, 0.0, 0.0)

    @classmethod
    def from_array(cls, values: Sequence[float]) -> Quaternion:
        w, x, y, z = (float(v) for v in values)
        return cls(w, x, y, z)

    def as_array(self) -> np.ndarray:
        return np.array([self.w, self.x, self.y, self.z], dtype=float)

    @property
    def vector(self) -> np.ndarray:
        """The (x, y, z) part."""
        return np.array([self.x, self.y, self.z], dtype=float)

    def norm(self) -> float:
        return math.sqrt(self.w * self.w + self.x * self.x + self.y * self.y + self.z * self.z)

    def normalized(self) -> Quaternion:
        n = self.norm()
        if n < EPSILON:
            return Quaternion.identity()
        return Quaternion(self.w / n, self.x / n, self.y / n, self.z / n)

    def is_close(self, other: Quaternion, tol: float = 1e-9) -> bool:
        return bool(np.allclose(self.as_array(), other.as_array(), atol=tol, rtol=0.0))

    def __mul__(self, other: Quaternion) -> Quaternion:
        return multiply(self, other)

    def __str__(self) -> str:
        return f"({self.w:.5f}, {self.x:.5f}, {self.y:.5f}, {self.z:.5f})"


def _unit_axis_2d(axis: Sequence[float]) -> np.ndarray | None:
    """Normalise an in-plane axis, or return None for the zero vector."""
    a = np.asarray(axis, dtype=float)[:2]
    length = float(np.linalg.norm(a))
    if length < EPSILON:
        return None
    return a / length


def rotation_quaternion(theta_deg: float, axis: Sequence[float]) -> Quaternion:
    """
    Unit quaternion rotating by *theta_deg* about the in-plane *axis*.

    :param theta_deg: Rotation angle in degrees.
    :param axis: (dx, dy) axis direction; need not be unit length.
    :return: (cos(θ/2), sin(θ/2)·nx, sin(θ/2)·ny, 0), identity for a zero axis.
    """
    n = _unit_axis_2d(axis)
    if n is None:
        return Quaternion.identity()
    half = math.radians(theta_deg) / 2.0
    s = math.sin(half)
    return Quaternion(math.cos(half), s * n[0], s * n[1], 0.0)


def pure_quaternion(point: Sequence[float]) -> Quaternion:
    """Embed an in-plane point (x, y) as the pure quaternion (0, x, y, 0)."""
    return Quaternion(0.0, float(point[0]), float(point[1]), 0.0)


def multiply(a: Quaternion, b: Quaternion) -> Quaternion:
    """Hamilton product a·b (non-commutative)."""
    return Quaternion(
        a.w * b.w - a.x * b.x - a.y * b.y - a.z * b.z,
        a.w * b.x + a.x * b.w + a.y * b.z - a.z * b.y,
        a.w * b.y - a.x * b.z + a.y * b.w + a.z * b.x,
        a.w * b.z + a.x * b.y - a.y * b.x + a.z * b.w,
    )


def conjugate(q: Quaternion) -> Quaternion:
    """(w, -x, -y, -z); the inverse of a unit quaternion."""
    return Quaternion(q.w, -q.x, -q.y, -q.z)


def visual_projection(q: Quaternion) -> np.ndarray:
    """Project to 3D for display as (x, y, w), dropping the k component."""
    return np.array([q.x, q.y, q.w], dtype=float)


def from_axis_angle(axis: Sequence[float], angle_rad: float) -> Quaternion:
    """Rotation of *angle_rad* about a 3D *axis* (identity for a zero axis)."""
    a = np.asarray(axis, dtype=float)
    length = float(np.linalg.norm(a))
    if length < EPSILON:
        return Quaternion.identity()
    a = a / length
    s = math.sin(angle_rad / 2.0)
    return Quaternion(math.cos(angle_rad / 2.0), s * a[0], s * a[1], s * a[2])


def from_unit_vectors(v_from: Sequence[float], v_to: Sequence[float]) -> Quaternion:
    """
    Minimal-angle rotation taking unit vector *v_from* onto unit vector *v_to*.

    Opposite vectors have no unique minimal rotation; a half turn about an
    axis orthogonal to *v_from* is returned.
    """
    f = np.asarray(v_from, dtype=float)
    t = np.asarray(v_to, dtype=float)
    r = float(np.dot(f, t)) + 1.0

    if r < 1e-8:
        if abs(f[0]) > abs(f[2]):
            w, x, y, z = 0.0, -f[1], f[0], 0.0
        else:
            w, x, y, z = 0.0, 0.0, -f[2], f[1]
    else:
        c = np.cross(f, t)
        w, x, y, z = r, c[0], c[1], c[2]

    return Quaternion(w, x, y, z).normalized()


def to_rotation_matrix(q: Quaternion) -> np.ndarray:
    """3x3 rotation matrix of the (normalised) quaternion."""
    u = q.normalized()
    w, x, y, z = u.w, u.x, u.y, u.z
    return np.array([
        [1 - 2 * (y * y + z * z), 2 * (x * y - w * z),     2 * (x * z + w * y)],
        [2 * (x * y + w * z),     1 - 2 * (x * x + z * z), 2 * (y * z - w * x)],
        [2 * (x * z - w * y),     2 * (y * z + w * x),     1 - 2 * (x * x + y * y)],
    ])


def rotate_vector(q: Quaternion, v: Sequence[float]) -> np.ndarray:
    """Rotate a 3D vector by the sandwich q·(0, v)·q⁻¹."""
    p = Quaternion(0.0, float(v[0]), float(v[1]), float(v[2]))
    r = multiply(multiply(q, p), conjugate(q))
    return r.vector


def slerp(a: Quaternion, b: Quaternion, t: float) -> Quaternion:
    """
    Spherical linear interpolation between unit quaternions.

    Takes the shorter arc (flips *b* when the dot product is negative) and
    falls back to normalised lerp when the quaternions nearly coincide.
    """
    qa = a.as_array()
    qb = b.as_array()
    dot = float(np.dot(qa, qb))
    if dot < 0.0:
        qb = -qb
        dot = -dot

    theta = math.acos(float(np.clip(dot, -1.0, 1.0)))
    if theta < 1e-6:
        result = (1.0 - t) * qa + t * qb
    else:
        sin_theta = math.sin(theta)
        s0 = math.sin((1.0 - t) * theta) / sin_theta
        s1 = math.sin(t * theta) / sin_theta
        result = s0 * qa + s1 * qb

    return Quaternion.from_array(result).normalized()


def composed_result(params: Parameters) -> RealResult:
    """
    Conjugate the target point V by the rotation quaternion Q.

    Q = rotation_quaternion(θ, D), V = pure_quaternion(target),
    QV = Q·V and the final value is QV·Q⁻¹.
    """
    from qvq.core.results import RealResult

    q = rotation_quaternion(params.theta, params.axis)
    v = pure_quaternion(params.target)
    q_inverse = conjugate(q)
    qv = multiply(q, v)
    qvq = multiply(qv, q_inverse)

    logger.debug("real: Q=%s V=%s QV=%s QVQ^-1=%s", q, v, qv, qvq)
    return RealResult(q=q, v=v, q_inverse=q_inverse, qv=qv, qvq=qvq)
