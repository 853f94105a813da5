import pytest

from multibrot import complex_power, escapes


@pytest.mark.parametrize("exponent", [1, 2, 3, 4, 7])
@pytest.mark.parametrize("z", [0j, 1 + 0j, 0.5 - 0.25j, -1.25 + 0.75j, 2j])
def test_complex_power_matches_builtin_power(z, exponent):
    assert complex_power(z, exponent) == pytest.approx(z ** exponent)


def test_complex_power_zero_exponent_is_one():
    assert complex_power(3 - 4j, 0) == 1
    assert complex_power(0j, 0) == 1


def test_complex_power_returns_new_value():
    z = 1 + 1j
    assert complex_power(z, 2) == 2j
    assert z == 1 + 1j


def test_complex_power_rejects_negative_exponent():
    with pytest.raises(ValueError):
        complex_power(1j, -1)


@pytest.mark.parametrize("iterations", [1, 2, 10, 100])
def test_origin_never_escapes(iterations):
    assert not escapes(0j, iterations, 2, 2.0)


def test_period_two_orbit_stays_bounded():
    assert not escapes(-1 + 0j, 500, 2, 2.0)


def test_far_point_escapes_after_first_step():
    assert escapes(2 + 2j, 1, 2, 2.0)


def test_point_on_escape_radius_has_not_escaped():
    # With exponent 1 the first iterate of c = 1 is exactly 2.
    assert not escapes(1 + 0j, 1, 1, 2.0)
    assert escapes(1 + 0j, 2, 1, 2.0)


@pytest.mark.parametrize(
    "c, expected",
    [(0.5 + 0j, False), (1.5 + 0j, True), (1 + 0j, False), (-3 + 0j, False), (0.5 + 2j, True)],
)
def test_zero_exponent_escapes_iff_one_plus_c_leaves_radius(c, expected):
    assert escapes(c, 10, 0, 2.0) is expected
