"""Immutable per-run snapshot of everything an animation needs."""
from __future__ import annotations

from dataclasses import dataclass

import numpy as np

from qvq.core.affine import AffineTransform
from qvq.core.parameters import Parameters, ParameterSnapshot
from qvq.core.results import ConjugationMode, ConjugationResult


def _frozen(values) -> np.ndarray:
    arr = np.array(values, dtype=float, copy=True)
    arr.setflags(write=False)
    return arr


@dataclass(frozen=True, eq=False)
class AnimationContext:
    """
    Inputs of one animation run, captured once at start.

    Later parameter changes produce new results but never touch a context
    that is already driving an animation.
    """
    mode: ConjugationMode
    params: ParameterSnapshot
    source: np.ndarray
    intermediate: np.ndarray
    final: np.ndarray
    reference: np.ndarray
    element: np.ndarray
    target: np.ndarray
    first_transform: AffineTransform
    second_transform: AffineTransform

    @classmethod
    def capture(cls, result: ConjugationResult,
                params: Parameters | ParameterSnapshot) -> AnimationContext:
        snapshot = params.snapshot() if isinstance(params, Parameters) else params
        return cls(
            mode=result.mode,
            params=snapshot,
            source=_frozen(result.source_point),
            intermediate=_frozen(result.intermediate_point),
            final=_frozen(result.final_point),
            reference=_frozen(result.reference_point),
            element=_frozen(result.element_point),
            target=_frozen(result.target_point),
            first_transform=result.first_transform,
            second_transform=result.second_transform,
        )
