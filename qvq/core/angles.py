"""Angle calculator for the published result points."""
from __future__ import annotations

import math
from dataclasses import dataclass
from typing import TYPE_CHECKING, Sequence

import numpy as np

if TYPE_CHECKING:
    from qvq.core.results import ConjugationResult

ANGLE_PLACEHOLDER = "-"

_ZERO_LENGTH = 1e-12


def angle_between(a: Sequence[float], b: Sequence[float]) -> float:
    """
    Angle between two vectors in degrees.

    The dot product of the normalised vectors is clamped to [-1, 1] before
    ``acos`` since rounding can push it marginally outside. A zero-length
    vector has no direction; the angle is then reported as 0.
    """
    va = np.asarray(a, dtype=float)
    vb = np.asarray(b, dtype=float)
    na = float(np.linalg.norm(va))
    nb = float(np.linalg.norm(vb))
    if na < _ZERO_LENGTH or nb < _ZERO_LENGTH:
        return 0.0
    cos = float(np.dot(va / na, vb / nb))
    return math.degrees(math.acos(max(-1.0, min(1.0, cos))))


@dataclass(frozen=True)
class ResultAngles:
    """Pairwise angles (degrees) between source, intermediate and final points."""
    source_intermediate: float
    source_final: float
    intermediate_final: float

    def as_tuple(self) -> tuple[float, float, float]:
        return self.source_intermediate, self.source_final, self.intermediate_final


def result_angles(result: ConjugationResult) -> ResultAngles:
    return ResultAngles(
        source_intermediate=angle_between(result.source_point, result.intermediate_point),
        source_final=angle_between(result.source_point, result.final_point),
        intermediate_final=angle_between(result.intermediate_point, result.final_point),
    )


def format_angle(value: float | None) -> str:
    """Readout text: two decimals in degrees, or the placeholder for no value."""
    if value is None:
        return ANGLE_PLACEHOLDER
    return f"{value:.2f}°"
