"""Animation layer: phase tables, per-run contexts and the sequencer."""

from qvq.animation.choreography import QV, QVQ, build_animation_specs
from qvq.animation.context import AnimationContext
from qvq.animation.easing import ease_in_out_quad
from qvq.animation.phases import Phase, PhaseTable
from qvq.animation.sequencer import AnimationFrame, AnimationSequencer, AnimationSpec, SequencerState

__all__ = [
    "QV",
    "QVQ",
    "AnimationContext",
    "AnimationFrame",
    "AnimationSequencer",
    "AnimationSpec",
    "Phase",
    "PhaseTable",
    "SequencerState",
    "build_animation_specs",
    "ease_in_out_quad",
]
