"""Uniform-scale rotation transforms (Scale ∘ Rotation)."""
from __future__ import annotations

from dataclasses import dataclass, field
from typing import Sequence

import numpy as np

from qvq.core.quaternion import Quaternion, to_rotation_matrix


@dataclass(frozen=True)
class AffineTransform:
    """
    Composition of a rotation followed by a uniform scale.

    There is no translation component: every transform used here maps the
    origin onto itself.

    Attributes:
        rotation: Unit quaternion of the rotation part.
        scale: Uniform scale factor applied after the rotation.
    """
    rotation: Quaternion = field(default_factory=Quaternion.identity)
    scale: float = 1.0

    @staticmethod
    def identity() -> AffineTransform:
        return AffineTransform()

    def is_identity(self, tol: float = 1e-12) -> bool:
        return self.rotation.is_close(Quaternion.identity(), tol) and abs(self.scale - 1.0) <= tol

    def matrix(self) -> np.ndarray:
        """3x3 matrix ``scale * R``."""
        return self.scale * to_rotation_matrix(self.rotation)

    def apply(self, point: Sequence[float]) -> np.ndarray:
        return self.matrix() @ np.asarray(point, dtype=float)

    def decompose(self) -> tuple[np.ndarray, Quaternion, np.ndarray]:
        """
        Split into (position, rotation, scale vector) for interpolation.

        :return: position is always the origin, scale is (s, s, s).
        """
        return (
            np.zeros(3),
            self.rotation,
            np.full(3, float(self.scale)),
        )

    def __str__(self) -> str:
        return f"AffineTransform(rotation={self.rotation}, scale={self.scale:.3f})"
