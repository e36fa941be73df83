import math

import numpy as np
import pytest

from qvq.core import pseudo_quaternion as pq
from qvq.core.affine import AffineTransform
from qvq.core.parameters import Parameters
from qvq.core.results import ConjugationMode, ConjugationResult


@pytest.mark.parametrize("theta", [-180.0, -37.5, 0.0, 12.0, 90.0, 135.0, 720.0])
@pytest.mark.parametrize("axis", [(1.0, 0.0), (0.3, -0.8), (0.0, 5.0)])
def test_embedding_lies_on_unit_sphere(theta, axis):
    assert np.linalg.norm(pq.embed(theta, axis)) == pytest.approx(1.0)


def test_embed_values():
    p = pq.embed(90.0, (0.0, 2.0))
    np.testing.assert_allclose(p, [0.0, 1.0, 0.0], atol=1e-12)


def test_embed_zero_axis_returns_canonical_direction():
    p = pq.embed(45.0, (0.0, 0.0))
    np.testing.assert_array_equal(p, [0.0, 0.0, 1.0])
    # callers get a copy, not the module constant
    p[0] = 9.0
    assert pq.CANONICAL_DIRECTION[0] == 0.0


def test_embed_inverse_flips_only_in_plane_part():
    p = pq.embed(30.0, (1.0, 1.0))
    q = pq.embed_inverse(30.0, (1.0, 1.0))
    np.testing.assert_allclose(q[:2], -p[:2])
    assert q[2] == pytest.approx(p[2])


def test_embed_inverse_zero_axis():
    np.testing.assert_array_equal(pq.embed_inverse(45.0, (0.0, 0.0)), [0.0, 0.0, 1.0])


@pytest.mark.parametrize("target", [(2.0, 1.0), (-1.5, 0.25), (0.0, -3.0), (0.001, 0.0)])
def test_transform_2d_maps_canonical_onto_target(target):
    t = pq.transform_to_target_2d(target)
    mapped = pq.apply(pq.CANONICAL_DIRECTION, t)
    np.testing.assert_allclose(mapped, [target[0], target[1], 0.0], atol=1e-9)
    assert t.scale == pytest.approx(math.hypot(*target))


def test_transform_2d_is_quarter_turn():
    t = pq.transform_to_target_2d((2.0, 1.0))
    # rotation angle of a unit quaternion is 2*acos(w)
    assert math.degrees(2 * math.acos(t.rotation.w)) == pytest.approx(90.0)


def test_transform_zero_target_is_identity():
    assert pq.transform_to_target_2d((0.0, 0.0)).is_identity()
    assert pq.transform_to_target_3d((0.0, 0.0, 0.0)).is_identity()


@pytest.mark.parametrize("target", [(0.0, 0.0, 2.0), (0.0, 0.0, -1.0), (0.3, -0.2, 0.9)])
def test_transform_3d_maps_canonical_onto_target(target):
    t = pq.transform_to_target_3d(target)
    np.testing.assert_allclose(t.apply(pq.CANONICAL_DIRECTION), target, atol=1e-9)


def test_scenario_identity_case():
    r = pq.composed_result(Parameters(theta=0.0, dx=1.0, dy=0.0, vx=2.0, vy=1.0))
    np.testing.assert_allclose(r.embedding, [0.0, 0.0, 1.0], atol=1e-12)
    np.testing.assert_allclose(r.intermediate, [2.0, 1.0, 0.0], atol=1e-12)
    # pseudo-inverse equals ẑ here, so the second stage is the identity
    assert r.second.is_identity(tol=1e-9)
    np.testing.assert_allclose(r.final, [2.0, 1.0, 0.0], atol=1e-12)


def test_result_implements_protocol():
    r = pq.composed_result(Parameters())
    assert isinstance(r, ConjugationResult)
    assert r.mode is ConjugationMode.PSEUDO
    assert r.source_point is r.embedding
    assert r.reference_point is r.pseudo_inverse
    assert isinstance(r.first_transform, AffineTransform)


def test_pseudo_inverse_is_not_a_true_inverse():
    """Running the stages again does not bring the target back."""
    r = pq.composed_result(Parameters(theta=60.0, dx=0.6, dy=0.8, vx=1.0, vy=-0.5))
    back = r.second.apply(r.first.apply(r.final))
    assert not np.allclose(back, r.embedding, atol=1e-3)


def test_transform_report_flags_consistent_stages():
    r = pq.composed_result(Parameters(theta=0.0, dx=1.0, dy=0.0, vx=2.0, vy=1.0))
    report = pq.transform_report(r)
    first = report["first"]
    assert first["mapping_ok"]
    assert first["angle_z"] == pytest.approx(90.0)
    assert first["scale_z"] == pytest.approx(math.sqrt(5.0))
    assert first["scale_match"]
    assert report["second"]["mapping_ok"]
