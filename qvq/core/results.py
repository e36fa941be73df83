"""
Result bundles of the two conjugation engines.

Both engines publish the same set of points so that the angle calculator,
the static scene and the animation sequencer can consume either of them
without knowing which algebra produced it:

- source_point:       the element that is carried through the two stages
- intermediate_point: after the first stage (Q·V, or the first transform)
- final_point:        after the second stage (Q·V·Q⁻¹)
- reference_point:    the inverse element used by the second stage
- element_point:      the rotation element Q itself
- target_point:       the target V, lifted into 3D as (vx, vy, 0)
"""
from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Protocol, runtime_checkable

import numpy as np

from qvq.core.affine import AffineTransform
from qvq.core.quaternion import Quaternion, visual_projection


class ConjugationMode(str, Enum):
    PSEUDO = "pseudo"
    REAL = "real"

    def __str__(self):
        return self.value


@runtime_checkable
class ConjugationResult(Protocol):
    @property
    def mode(self) -> ConjugationMode: ...

    @property
    def source_point(self) -> np.ndarray: ...

    @property
    def intermediate_point(self) -> np.ndarray: ...

    @property
    def final_point(self) -> np.ndarray: ...

    @property
    def reference_point(self) -> np.ndarray: ...

    @property
    def element_point(self) -> np.ndarray: ...

    @property
    def target_point(self) -> np.ndarray: ...

    @property
    def first_transform(self) -> AffineTransform: ...

    @property
    def second_transform(self) -> AffineTransform: ...


@dataclass(frozen=True, eq=False)
class PseudoResult:
    """Pseudo-quaternion conjugation realised as two affine transforms."""
    embedding: np.ndarray
    pseudo_inverse: np.ndarray
    intermediate: np.ndarray
    final: np.ndarray
    target: np.ndarray
    first: AffineTransform
    second: AffineTransform

    @property
    def mode(self) -> ConjugationMode:
        return ConjugationMode.PSEUDO

    @property
    def source_point(self) -> np.ndarray:
        return self.embedding

    @property
    def intermediate_point(self) -> np.ndarray:
        return self.intermediate

    @property
    def final_point(self) -> np.ndarray:
        return self.final

    @property
    def reference_point(self) -> np.ndarray:
        return self.pseudo_inverse

    @property
    def element_point(self) -> np.ndarray:
        return self.embedding

    @property
    def target_point(self) -> np.ndarray:
        return self.target

    @property
    def first_transform(self) -> AffineTransform:
        return self.first

    @property
    def second_transform(self) -> AffineTransform:
        return self.second


@dataclass(frozen=True)
class RealResult:
    """Hamilton-quaternion conjugation with every intermediate value."""
    q: Quaternion
    v: Quaternion
    q_inverse: Quaternion
    qv: Quaternion
    qvq: Quaternion

    @property
    def mode(self) -> ConjugationMode:
        return ConjugationMode.REAL

    @property
    def source_point(self) -> np.ndarray:
        return visual_projection(self.v)

    @property
    def intermediate_point(self) -> np.ndarray:
        return visual_projection(self.qv)

    @property
    def final_point(self) -> np.ndarray:
        return visual_projection(self.qvq)

    @property
    def reference_point(self) -> np.ndarray:
        return visual_projection(self.q_inverse)

    @property
    def element_point(self) -> np.ndarray:
        return visual_projection(self.q)

    @property
    def target_point(self) -> np.ndarray:
        return np.array([self.v.x, self.v.y, 0.0], dtype=float)

    @property
    def first_transform(self) -> AffineTransform:
        """Rotation applied by the left factor Q."""
        return AffineTransform(rotation=self.q.normalized(), scale=1.0)

    @property
    def second_transform(self) -> AffineTransform:
        """Rotation applied by the right factor Q⁻¹."""
        return AffineTransform(rotation=self.q_inverse.normalized(), scale=1.0)
