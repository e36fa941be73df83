import math

import numpy as np
import pytest

from qvq.core import quaternion as qt
from qvq.core.parameters import Parameters
from qvq.core.quaternion import Quaternion


def _random_quaternions(n, seed=7):
    rng = np.random.default_rng(seed)
    return [Quaternion.from_array(rng.normal(size=4)) for _ in range(n)]


def test_rotation_quaternion_zero_angle_is_identity():
    q = qt.rotation_quaternion(0.0, (1.0, 0.0))
    assert q.is_close(Quaternion.identity())


def test_rotation_quaternion_zero_axis_is_identity():
    """Degenerate axis gives the identity rather than dividing by zero."""
    q = qt.rotation_quaternion(90.0, (0.0, 0.0))
    assert q == Quaternion.identity()


def test_rotation_quaternion_normalizes_axis():
    q = qt.rotation_quaternion(60.0, (0.0, 3.0))
    assert q.w == pytest.approx(math.cos(math.radians(30)))
    assert q.x == pytest.approx(0.0)
    assert q.y == pytest.approx(math.sin(math.radians(30)))
    assert q.z == 0.0
    assert q.norm() == pytest.approx(1.0)


def test_pure_quaternion():
    v = qt.pure_quaternion((2.0, 1.0))
    assert v.as_array().tolist() == [0.0, 2.0, 1.0, 0.0]


def test_hamilton_basis_products():
    i = Quaternion(0, 1, 0, 0)
    j = Quaternion(0, 0, 1, 0)
    k = Quaternion(0, 0, 0, 1)
    assert qt.multiply(i, j).is_close(k)
    assert qt.multiply(j, i).is_close(Quaternion(0, 0, 0, -1))
    assert qt.multiply(i, i).is_close(Quaternion(-1, 0, 0, 0))


def test_multiply_is_norm_multiplicative():
    qs = _random_quaternions(20)
    for a, b in zip(qs[::2], qs[1::2]):
        assert qt.multiply(a, b).norm() == pytest.approx(a.norm() * b.norm(), rel=1e-12)


def test_multiply_is_associative():
    a, b, c = _random_quaternions(3, seed=11)
    left = qt.multiply(qt.multiply(a, b), c)
    right = qt.multiply(a, qt.multiply(b, c))
    np.testing.assert_allclose(left.as_array(), right.as_array(), atol=1e-12)


def test_multiply_is_not_commutative_in_general():
    a, b = _random_quaternions(2, seed=3)
    assert not qt.multiply(a, b).is_close(qt.multiply(b, a), tol=1e-6)


def test_operator_matches_multiply():
    a, b = _random_quaternions(2, seed=5)
    assert (a * b) == qt.multiply(a, b)


def test_unit_quaternion_times_conjugate_is_identity():
    for q in _random_quaternions(10, seed=13):
        u = q.normalized()
        assert qt.multiply(u, qt.conjugate(u)).is_close(Quaternion.identity(), tol=1e-9)


def test_visual_projection_drops_k_component():
    p = qt.visual_projection(Quaternion(0.5, 0.1, 0.2, 0.9))
    assert p.tolist() == pytest.approx([0.1, 0.2, 0.5])


def test_from_unit_vectors_maps_source_to_target():
    z = np.array([0.0, 0.0, 1.0])
    for target in ([1.0, 0.0, 0.0], [0.0, -1.0, 0.0], [0.3, 0.4, -0.5]):
        t = np.asarray(target) / np.linalg.norm(target)
        q = qt.from_unit_vectors(z, t)
        np.testing.assert_allclose(qt.rotate_vector(q, z), t, atol=1e-12)


def test_from_unit_vectors_opposite_is_half_turn():
    z = np.array([0.0, 0.0, 1.0])
    q = qt.from_unit_vectors(z, -z)
    np.testing.assert_allclose(qt.rotate_vector(q, z), -z, atol=1e-12)


def test_rotation_matrix_matches_sandwich():
    q = qt.from_axis_angle((1.0, 2.0, 3.0), 0.7)
    v = np.array([0.3, -1.2, 2.0])
    np.testing.assert_allclose(qt.to_rotation_matrix(q) @ v, qt.rotate_vector(q, v), atol=1e-12)


def test_slerp_endpoints_and_midpoint():
    a = Quaternion.identity()
    b = qt.from_axis_angle((0.0, 0.0, 1.0), math.pi / 2)
    assert qt.slerp(a, b, 0.0).is_close(a)
    assert qt.slerp(a, b, 1.0).is_close(b)
    mid = qt.slerp(a, b, 0.5)
    assert mid.is_close(qt.from_axis_angle((0.0, 0.0, 1.0), math.pi / 4))


def test_slerp_takes_shorter_arc():
    a = Quaternion.identity()
    b = qt.from_axis_angle((0.0, 0.0, 1.0), math.pi / 2)
    negated = Quaternion.from_array(-b.as_array())
    mid = qt.slerp(a, negated, 0.5)
    assert mid.is_close(qt.from_axis_angle((0.0, 0.0, 1.0), math.pi / 4))


def test_slerp_nearly_identical_inputs():
    a = Quaternion.identity()
    b = qt.from_axis_angle((1.0, 0.0, 0.0), 1e-9)
    assert qt.slerp(a, b, 0.5).norm() == pytest.approx(1.0)


def test_scenario_identity_conjugation():
    """θ=0: Q is the identity and conjugation leaves V unchanged."""
    r = qt.composed_result(Parameters(theta=0.0, dx=1.0, dy=0.0, vx=2.0, vy=1.0))
    assert r.q.is_close(Quaternion(1, 0, 0, 0))
    assert r.v.is_close(Quaternion(0, 2, 1, 0))
    assert r.qv.is_close(r.v)
    assert r.qvq.is_close(r.v)


def test_scenario_quarter_turn():
    r = qt.composed_result(Parameters(theta=90.0, dx=1.0, dy=0.0))
    s = math.sqrt(0.5)
    np.testing.assert_allclose(r.q.as_array(), [s, s, 0, 0], atol=1e-5)
    np.testing.assert_allclose(r.q_inverse.as_array(), [s, -s, 0, 0], atol=1e-5)
    assert qt.multiply(r.q, qt.conjugate(r.q)).is_close(Quaternion.identity(), tol=1e-6)


def test_real_result_rotates_target_about_axis():
    """Q·V·Q⁻¹ with a unit Q is the rotation of V by θ about D."""
    r = qt.composed_result(Parameters(theta=90.0, dx=1.0, dy=0.0, vx=2.0, vy=1.0))
    assert r.qvq.w == pytest.approx(0.0, abs=1e-12)
    np.testing.assert_allclose(r.qvq.vector, [2.0, 0.0, 1.0], atol=1e-12)
