"""Dispatch between the two conjugation engines."""
from __future__ import annotations

from qvq.core import pseudo_quaternion, quaternion
from qvq.core.parameters import Parameters, ParameterSnapshot
from qvq.core.results import ConjugationMode, ConjugationResult


def compute_result(params: Parameters | ParameterSnapshot,
                   mode: ConjugationMode | str = ConjugationMode.PSEUDO) -> ConjugationResult:
    """
    Compute the result bundle of the engine selected by *mode*.

    Always recomputes from *params*; nothing is cached.
    """
    mode = ConjugationMode(mode)
    if mode is ConjugationMode.REAL:
        return quaternion.composed_result(params)
    return pseudo_quaternion.composed_result(params)
