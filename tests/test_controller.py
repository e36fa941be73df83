import logging

import numpy as np
import pytest

from qvq.animation.choreography import QV, QVQ, QVQ_TRANSIENT_ROLES
from qvq.animation.sequencer import SequencerState
from qvq.app.app_settings_manager import AppSettingsManager
from qvq.core.angles import ANGLE_PLACEHOLDER
from qvq.core.results import ConjugationMode, PseudoResult, RealResult
from qvq.scene import ANIMATION_LAYER, STATIC_LAYER
from qvq.scene.drawables import Role
from qvq.viewers.controllers.conjugation_controller import ConjugationController


@pytest.fixture
def controller(sink, fake_clock):
    return ConjugationController(sink, fake_clock)


def test_initial_state(controller, sink):
    assert controller.mode is ConjugationMode.PSEUDO
    assert isinstance(controller.result, PseudoResult)
    assert Role.FINAL_RESULT in sink.live
    assert controller.scene.roles(ANIMATION_LAYER) == []
    assert controller.animation_names == (QV, QVQ)


def test_parameter_change_recomputes(controller, sink):
    results = []
    controller.add_result_callback(lambda result, angles: results.append(result))
    before = controller.result.final_point.copy()

    assert controller.set_parameter("theta", 45.0)
    assert len(results) == 1
    assert not np.allclose(controller.result.final_point, before)
    np.testing.assert_allclose(sink.live[Role.FINAL_RESULT].position, controller.result.final_point)


def test_unchanged_parameter_does_not_recompute(controller):
    results = []
    controller.add_result_callback(lambda result, angles: results.append(result))
    assert controller.set_parameter("vx", 2.0) is False
    assert results == []


def test_unknown_parameter_rejected(controller):
    with pytest.raises(ValueError):
        controller.set_parameter("phi", 1.0)


def test_reset_parameters(controller):
    controller.set_parameters(theta=30.0, vx=-1.0)
    controller.reset_parameters()
    snap = controller.parameters
    assert (snap.theta, snap.vx) == (0.0, 2.0)


def test_readouts_follow_final_result_toggle(controller, sink):
    assert all(r.endswith("°") for r in controller.angle_readouts())
    controller.set_show_final_result(False)
    assert controller.angle_readouts() == (ANGLE_PLACEHOLDER,) * 3
    assert Role.FINAL_RESULT not in sink.live


def test_mode_switch(controller):
    controller.set_mode("real")
    assert controller.mode is ConjugationMode.REAL
    assert isinstance(controller.result, RealResult)


def test_unknown_animation_rejected(controller):
    with pytest.raises(ValueError):
        controller.start_animation("spin")


def test_start_while_running_is_ignored(controller, fake_clock):
    states = []
    controller.add_animation_state_callback(lambda name, state: states.append((name, state)))

    assert controller.start_animation(QVQ)
    fake_clock.advance(100)
    assert controller.start_animation(QV) is False
    assert controller.running_animation == QVQ
    assert states == [(QVQ, SequencerState.RUNNING)]


def test_ticks_drive_animation_layer(controller, fake_clock, sink):
    frames = []
    states = []
    controller.add_frame_callback(frames.append)
    controller.add_animation_state_callback(lambda name, state: states.append((name, state)))

    controller.start_animation(QVQ)
    fake_clock.advance(1000)
    frame = controller.tick()
    assert frame.phase_index == 0
    assert Role.ANIMATED_INVERSE in sink.live
    assert controller.scene.layer_of(Role.MOVING_ELEMENT) == ANIMATION_LAYER

    fake_clock.advance(6000)
    last = controller.tick()
    assert last.finished
    assert frames == [frame, last]
    assert states[-1] == (QVQ, SequencerState.IDLE)
    assert not controller.is_animating
    for role in QVQ_TRANSIENT_ROLES:
        assert role not in sink.live
    assert Role.MOVING_FINAL in sink.live


def test_recompute_during_animation_leaves_animation_layer(controller, fake_clock):
    controller.start_animation(QV)
    fake_clock.advance(1500)
    controller.tick()
    moving = controller.scene.get(Role.MOVING_ELEMENT)

    controller.set_parameter("theta", 90.0)
    assert controller.scene.get(Role.MOVING_ELEMENT) == moving
    assert controller.scene.layer_of(Role.FINAL_RESULT) == STATIC_LAYER

    # the running animation still heads for the old intermediate point
    fake_clock.advance(3000)
    last = controller.tick()
    assert last.finished
    assert not np.allclose(last.states[Role.MOVING_ELEMENT].position,
                           controller.result.intermediate_point)


def test_idle_recompute_clears_finished_animation(controller, fake_clock):
    controller.start_animation(QV)
    fake_clock.advance(3000)
    controller.tick()
    assert controller.scene.roles(ANIMATION_LAYER)

    controller.set_parameter("vy", -1.0)
    assert controller.scene.roles(ANIMATION_LAYER) == []


def test_render_loop(controller, fake_clock):
    frames = []
    controller.add_frame_callback(frames.append)
    controller.start_animation(QV)
    controller.start_render_loop()
    assert len(fake_clock.scheduled) == 1

    for _ in range(10):
        fake_clock.run_frame(400)
    assert frames[-1].finished
    assert not controller.is_animating

    controller.stop_render_loop()
    fake_clock.run_frame()
    assert fake_clock.scheduled == []


def test_failing_listener_is_logged(controller, caplog):
    def bad(result, angles):
        raise RuntimeError("listener broke")

    controller.add_result_callback(bad)
    with caplog.at_level(logging.ERROR):
        controller.set_parameter("theta", 10.0)
    assert "Error in controller callback" in caplog.text
    assert controller.parameters.theta == 10.0


def test_settings_are_applied(tmp_settings, fake_clock):
    mgr = AppSettingsManager()
    mgr.set_algebra_mode("real")
    mgr.set_show_final_result(False)
    mgr.set_qv_duration_ms(1000)

    ctrl = ConjugationController(None, fake_clock, mgr)
    assert ctrl.mode is ConjugationMode.REAL
    assert not ctrl.show_final_result
    assert ctrl.sequencer(QV).spec.duration_ms == 1000
