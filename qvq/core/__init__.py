"""Core layer - view-independent math of both conjugation models."""

from qvq.core.affine import AffineTransform
from qvq.core.angles import ResultAngles, angle_between, format_angle, result_angles
from qvq.core.conjugation import compute_result
from qvq.core.parameters import PARAMETER_RANGES, Parameters, ParameterSnapshot
from qvq.core.quaternion import Quaternion
from qvq.core.results import ConjugationMode, ConjugationResult, PseudoResult, RealResult

__all__ = [
    "AffineTransform",
    "ConjugationMode",
    "ConjugationResult",
    "PARAMETER_RANGES",
    "Parameters",
    "ParameterSnapshot",
    "PseudoResult",
    "Quaternion",
    "RealResult",
    "ResultAngles",
    "angle_between",
    "compute_result",
    "format_angle",
    "result_angles",
]
