"""Generic phase-driven animation state machine."""
from __future__ import annotations

import logging
from dataclasses import dataclass, field
from enum import Enum
from typing import Callable, Mapping

from qvq.animation.context import AnimationContext
from qvq.animation.phases import PhaseTable
from qvq.scene.drawables import DrawableState

logger = logging.getLogger(__name__)

ComposeFunction = Callable[[AnimationContext, int, float], Mapping[str, DrawableState]]


class SequencerState(Enum):
    IDLE = "idle"
    RUNNING = "running"
    COMPLETE = "complete"


@dataclass(frozen=True)
class AnimationSpec:
    """
    Description of one named animation.

    :param compose: ``compose(context, phase_index, eased)`` returns the
        drawable states of the animation layer for that instant.
    :param transient_roles: Roles that only exist while the animation runs
        and are removed when it completes.
    """
    name: str
    duration_ms: float
    phases: PhaseTable
    compose: ComposeFunction = field(compare=False)
    transient_roles: tuple[str, ...] = ()

    def __post_init__(self):
        if not self.duration_ms > 0:
            raise ValueError(f"animation {self.name!r}: duration must be positive, got {self.duration_ms}")


@dataclass(frozen=True)
class AnimationFrame:
    name: str
    t: float
    phase_index: int
    phase_name: str
    local: float
    eased: float
    states: Mapping[str, DrawableState]
    removed: tuple[str, ...] = ()
    finished: bool = False


class AnimationSequencer:
    """
    Runs one AnimationSpec: IDLE -> RUNNING -> COMPLETE -> IDLE.

    Progress is elapsed / duration clamped to [0, 1] and never decreases
    within a run. A start request while running is ignored.
    """

    def __init__(self, spec: AnimationSpec):
        self._spec = spec
        self._state = SequencerState.IDLE
        self._context: AnimationContext | None = None
        self._start_ms = 0.0
        self._progress = 0.0
        self._phase_index = -1
        self._completion_callbacks: list[Callable[[AnimationFrame], None]] = []

    # =====================================================
    # Properties
    # =====================================================

    @property
    def spec(self) -> AnimationSpec:
        return self._spec

    @property
    def name(self) -> str:
        return self._spec.name

    @property
    def state(self) -> SequencerState:
        return self._state

    @property
    def is_running(self) -> bool:
        return self._state is SequencerState.RUNNING

    @property
    def progress(self) -> float:
        return self._progress

    @property
    def context(self) -> AnimationContext | None:
        return self._context

    # =====================================================
    # Callbacks
    # =====================================================

    def add_completion_callback(self, callback: Callable[[AnimationFrame], None]) -> None:
        if callback not in self._completion_callbacks:
            self._completion_callbacks.append(callback)

    def remove_completion_callback(self, callback: Callable[[AnimationFrame], None]) -> None:
        if callback in self._completion_callbacks:
            self._completion_callbacks.remove(callback)

    def _notify_completed(self, frame: AnimationFrame) -> None:
        for cb in list(self._completion_callbacks):
            try:
                cb(frame)
            except Exception:
                logger.exception("[%s] completion callback failed", self.name)

    # =====================================================
    # Run
    # =====================================================

    def start(self, context: AnimationContext, now_ms: float) -> bool:
        """
        Begin a run with an already captured context.

        :return: False if a run is in progress (the request is dropped).
        """
        if self.is_running:
            logger.info("[%s] start ignored: already running (t=%.3f)", self.name, self._progress)
            return False

        self._context = context
        self._start_ms = float(now_ms)
        self._progress = 0.0
        self._phase_index = -1
        self._state = SequencerState.RUNNING
        logger.info("[%s] started (%s mode, %.0f ms)", self.name, context.mode, self._spec.duration_ms)
        return True

    def tick(self, now_ms: float) -> AnimationFrame | None:
        """
        Advance to *now_ms* and describe the animation layer at that time.

        :return: None when not running.
        """
        if not self.is_running or self._context is None:
            return None

        elapsed = float(now_ms) - self._start_ms
        t = min(max(elapsed / self._spec.duration_ms, 0.0), 1.0)
        t = max(t, self._progress)
        self._progress = t

        index, phase = self._spec.phases.locate(t)
        if index != self._phase_index:
            logger.debug("[%s] phase %d (%s) at t=%.3f", self.name, index + 1, phase.name, t)
            self._phase_index = index

        local = phase.local_progress(t)
        eased = phase.easing(local)
        states = dict(self._spec.compose(self._context, index, eased))

        if t < 1.0:
            return AnimationFrame(self.name, t, index, phase.name, local, eased, states)

        removed = self._spec.transient_roles
        for role in removed:
            states.pop(role, None)
        frame = AnimationFrame(self.name, t, index, phase.name, local, eased, states,
                               removed=removed, finished=True)
        self._finish(frame)
        return frame

    def _finish(self, frame: AnimationFrame) -> None:
        self._state = SequencerState.COMPLETE
        logger.info("[%s] complete", self.name)
        # callbacks see an idle sequencer and may start the next run
        self._context = None
        self._phase_index = -1
        self._state = SequencerState.IDLE
        self._notify_completed(frame)
