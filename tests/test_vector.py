import math

import pytest

from apart.vector import V2, inner, length_sq, normalize, reflect

A = V2(1.5, -2.0)
B = V2(-3.25, 4.0)


def test_add_then_subtract_restores():
    assert (A + B) - B == A


def test_negation_cancels():
    assert -A + A == V2(0.0, 0.0)
    assert -(-A) == A


def test_scalar_multiplication_both_sides():
    assert 2 * A == A + A
    assert A * 3 == 3 * A
    assert (A * 0.5).x == A.x * 0.5


def test_multiplying_by_zero_and_minus_one():
    assert 0 * A == V2(0.0, 0.0)
    assert A * -1 == -A


def test_inner_is_symmetric_and_length_sq_matches():
    assert inner(A, B) == inner(B, A)
    assert length_sq(A) == inner(A, A)
    assert length_sq(A) >= 0


def test_perpendicular_inner_is_zero():
    assert inner(V2(A.x, A.y), V2(-A.y, A.x)) == 0


def test_normalize_gives_unit_length():
    n = normalize(B)
    assert math.isclose(length_sq(n), 1.0)
    assert n.x * B.y == pytest.approx(n.y * B.x)


def test_normalize_axis_vector():
    assert normalize(V2(3.0, 0.0)) == V2(1.0, 0.0)


def test_normalize_zero_raises():
    with pytest.raises(ZeroDivisionError):
        normalize(V2(0.0, 0.0))


def test_reflect_off_floor():
    assert reflect(V2(1.0, -1.0), V2(0.0, 1.0)) == V2(1.0, 1.0)


def test_reflect_twice_restores_and_preserves_length():
    n = normalize(V2(1.0, 2.0))
    r = reflect(A, n)
    assert math.isclose(length_sq(r), length_sq(A))
    back = reflect(r, n)
    assert back.x == pytest.approx(A.x)
    assert back.y == pytest.approx(A.y)


def test_reflect_with_zero_normal_is_identity():
    assert reflect(A, V2()) == A