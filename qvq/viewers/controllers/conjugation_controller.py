"""Conjugation controller - parameters in, scene and readouts out."""
from __future__ import annotations

import logging
from typing import Callable, Optional, Protocol, TYPE_CHECKING

from qvq.animation.choreography import build_animation_specs
from qvq.animation.context import AnimationContext
from qvq.animation.sequencer import AnimationFrame, AnimationSequencer, SequencerState
from qvq.core.angles import ANGLE_PLACEHOLDER, ResultAngles, format_angle, result_angles
from qvq.core.conjugation import compute_result
from qvq.core.parameters import Parameters, ParameterSnapshot
from qvq.core.pseudo_quaternion import transform_report
from qvq.core.results import ConjugationMode, ConjugationResult, PseudoResult
from qvq.scene.scene_graph import ANIMATION_LAYER, STATIC_LAYER, DrawableSink, SceneGraph
from qvq.scene.static_scene import static_scene
from qvq.utils.log_util import log_io

if TYPE_CHECKING:
    from qvq.app.app_settings_manager import AppSettingsManager


logger = logging.getLogger(__name__)


class Clock(Protocol):
    """Monotonic time source with a next-display-refresh scheduler."""

    def now_ms(self) -> float: ...

    def call_on_next_frame(self, callback: Callable[[], None]) -> None: ...


class ConjugationController:
    """
    Owner of the parameter record, the scene graph and both animations.

    Every parameter change recomputes the result of the selected engine,
    rebuilds the static layer of the scene and notifies listeners. A running
    animation works on the context captured when it started and is not
    affected by later changes.

    Usage:
        controller = ConjugationController(sink, clock)
        controller.add_result_callback(on_result)
        controller.set_parameter("theta", 45)
        controller.start_animation("qvq")
        controller.start_render_loop()
    """

    def __init__(self, sink: Optional[DrawableSink], clock: Clock,
                 settings: Optional[AppSettingsManager] = None):
        self._clock = clock
        self._params = Parameters()
        self._scene = SceneGraph(sink)

        if settings is not None:
            self._mode = settings.algebra_mode
            self._show_final = settings.show_final_result
            specs = build_animation_specs(settings.animation)
        else:
            self._mode = ConjugationMode.PSEUDO
            self._show_final = True
            specs = build_animation_specs()
        self._sequencers: dict[str, AnimationSequencer] = {
            name: AnimationSequencer(spec) for name, spec in specs.items()
        }

        self._result: ConjugationResult | None = None
        self._angles: ResultAngles | None = None
        self._render_loop_active = False

        self._on_result_callbacks: list[Callable[[ConjugationResult, ResultAngles], None]] = []
        self._on_frame_callbacks: list[Callable[[AnimationFrame], None]] = []
        self._on_animation_state_callbacks: list[Callable[[str, SequencerState], None]] = []

        self.recompute()

    # =====================================================
    # Properties
    # =====================================================

    @property
    def parameters(self) -> ParameterSnapshot:
        return self._params.snapshot()

    @property
    def mode(self) -> ConjugationMode:
        return self._mode

    @property
    def show_final_result(self) -> bool:
        return self._show_final

    @property
    def result(self) -> ConjugationResult:
        return self._result

    @property
    def angles(self) -> ResultAngles:
        return self._angles

    @property
    def scene(self) -> SceneGraph:
        return self._scene

    @property
    def animation_names(self) -> tuple[str, ...]:
        return tuple(self._sequencers)

    @property
    def is_animating(self) -> bool:
        return any(s.is_running for s in self._sequencers.values())

    @property
    def running_animation(self) -> str | None:
        for name, seq in self._sequencers.items():
            if seq.is_running:
                return name
        return None

    def sequencer(self, name: str) -> AnimationSequencer:
        try:
            return self._sequencers[name]
        except KeyError:
            raise ValueError(f"Unknown animation: {name}") from None

    # =====================================================
    # Parameter source
    # =====================================================

    def set_parameter(self, name: str, value: float) -> bool:
        return self.set_parameters(**{name: value})

    def set_parameters(self, **values: float) -> bool:
        """
        Update parameters and recompute if anything changed.

        :raise ValueError: For an unknown parameter name.
        """
        changed = self._params.update(**values)
        if changed:
            self.recompute()
        return changed

    @log_io(logging.INFO, slow_ms=50.0)
    def reset_parameters(self) -> None:
        self._params.reset()
        self.recompute()

    def set_mode(self, mode: ConjugationMode | str) -> None:
        mode = ConjugationMode(mode)
        if mode is self._mode:
            return
        logger.info("Algebra mode changed %s -> %s", self._mode, mode)
        self._mode = mode
        self.recompute()

    def set_show_final_result(self, show: bool) -> None:
        show = bool(show)
        if show == self._show_final:
            return
        self._show_final = show
        self.recompute()

    # =====================================================
    # Recompute
    # =====================================================

    def recompute(self) -> ConjugationResult:
        """Full synchronous recompute: result, angles and static scene."""
        self._result = compute_result(self._params, self._mode)
        self._angles = result_angles(self._result)

        self._scene.sync(static_scene(self._params, self._result, self._show_final), STATIC_LAYER)
        if not self.is_animating:
            self._scene.clear_layer(ANIMATION_LAYER)

        logger.debug("Recomputed (%s): angles=%s", self._mode, self._angles.as_tuple())
        self._notify(self._on_result_callbacks, self._result, self._angles)
        return self._result

    def angle_readouts(self) -> tuple[str, str, str]:
        """Formatted pairwise angles, placeholders while the final result is hidden."""
        if not self._show_final or self._angles is None:
            return ANGLE_PLACEHOLDER, ANGLE_PLACEHOLDER, ANGLE_PLACEHOLDER
        a, b, c = self._angles.as_tuple()
        return format_angle(a), format_angle(b), format_angle(c)

    # =====================================================
    # Animation
    # =====================================================

    @log_io(logging.INFO)
    def start_animation(self, name: str) -> bool:
        """
        Start the named animation with the current result.

        :return: False when another animation is already running; the
            request is dropped, not queued.
        :raise ValueError: For an unknown animation name.
        """
        seq = self.sequencer(name)
        running = self.running_animation
        if running is not None:
            logger.info("Animation '%s' ignored: '%s' is running", name, running)
            return False

        context = AnimationContext.capture(self._result, self._params)
        if isinstance(self._result, PseudoResult) and logger.isEnabledFor(logging.DEBUG):
            logger.debug("Transform check: %s", transform_report(self._result))

        self._scene.clear_layer(ANIMATION_LAYER)
        started = seq.start(context, self._clock.now_ms())
        if started:
            self._notify(self._on_animation_state_callbacks, name, SequencerState.RUNNING)
        return started

    def tick(self) -> AnimationFrame | None:
        """Advance the running animation and push its frame into the scene."""
        for name, seq in self._sequencers.items():
            if not seq.is_running:
                continue
            frame = seq.tick(self._clock.now_ms())
            if frame is None:
                return None
            self._scene.update(frame.states, ANIMATION_LAYER)
            if frame.removed:
                self._scene.remove(frame.removed)
            self._notify(self._on_frame_callbacks, frame)
            if frame.finished:
                self._notify(self._on_animation_state_callbacks, name, SequencerState.IDLE)
            return frame
        return None

    def start_render_loop(self) -> None:
        """Tick once per display refresh until stop_render_loop()."""
        if self._render_loop_active:
            return
        self._render_loop_active = True
        self._clock.call_on_next_frame(self._on_frame)

    def stop_render_loop(self) -> None:
        self._render_loop_active = False

    def _on_frame(self) -> None:
        if not self._render_loop_active:
            return
        try:
            self.tick()
        except Exception:
            logger.exception("Animation tick failed")
        self._clock.call_on_next_frame(self._on_frame)

    # =====================================================
    # Callbacks
    # =====================================================

    def add_result_callback(self, callback: Callable[[ConjugationResult, ResultAngles], None]) -> None:
        """callback(result, angles) after every recompute."""
        self._on_result_callbacks.append(callback)

    def add_frame_callback(self, callback: Callable[[AnimationFrame], None]) -> None:
        """callback(frame) after every animation tick."""
        self._on_frame_callbacks.append(callback)

    def add_animation_state_callback(self, callback: Callable[[str, SequencerState], None]) -> None:
        """callback(name, state) when an animation starts (RUNNING) or ends (IDLE)."""
        self._on_animation_state_callbacks.append(callback)

    @staticmethod
    def _notify(callbacks: list[Callable], *args) -> None:
        for callback in callbacks:
            try:
                callback(*args)
            except Exception:
                logger.exception("Error in controller callback %r", callback)
