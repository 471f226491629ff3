"""
Tests for the escape-time functions.

Verifies:
1. Cardioid/bulb shortcuts agree with brute-force iteration
2. Smooth coloring stays in range and never produces the unfilled sentinel
3. Border tracing agrees with direct computation on uniform regions
4. The 4x4 default-view scenario
"""

import numpy as np

from fractald.compute import (
    compute_field_direct,
    compute_field_traced,
    escape_time,
    in_main_cardioid,
    in_period2_bulb,
    pixel_to_complex,
    view_bounds,
)


def _brute_escapes(x0, y0, cap):
    x = y = 0.0
    for _ in range(cap):
        x, y = x * x - y * y + x0, 2.0 * x * y + y0
        if x * x + y * y > 4.0:
            return True
    return False


def test_shortcut_points_never_escape():
    """Points caught by the closed-form tests stay bounded under iteration."""
    checked = 0
    for x0 in np.linspace(-1.3, 0.3, 33):
        for y0 in np.linspace(-0.7, 0.7, 29):
            if in_main_cardioid(x0, y0) or in_period2_bulb(x0, y0):
                assert not _brute_escapes(x0, y0, 5000), (x0, y0)
                assert escape_time(x0, y0, 50) == 50
                checked += 1
    assert checked > 100


def test_shortcut_boundaries():
    assert in_main_cardioid(0.0, 0.0)
    assert in_main_cardioid(0.25, 0.0)
    assert not in_main_cardioid(0.3, 0.0)
    assert in_period2_bulb(-1.0, 0.0)
    assert in_period2_bulb(-1.2, 0.0)
    assert not in_period2_bulb(-1.3, 0.0)


def test_points_inside_set_reach_cap():
    # On the real segment [-2, 0.25] but outside both shortcut regions
    assert escape_time(-1.5, 0.0, 200) == 200
    assert escape_time(-1.9, 0.0, 200) == 200


def test_escaped_points_are_positive_and_below_cap():
    for x0, y0 in [(2.5, 0.0), (0.5, 0.5), (-0.75, 0.2), (0.3, 0.0), (-2.1, 0.0)]:
        value = escape_time(x0, y0, 1000)
        assert 1 <= value < 1000, (x0, y0, value)


def test_far_point_is_clamped_to_one():
    """A point escaping immediately with a huge magnitude must not become 0."""
    assert escape_time(100.0, 100.0, 50) == 1


def test_non_finite_smoothing_falls_back_to_raw_count():
    # |c|^2 overflows to inf, so the logarithm is not finite
    assert escape_time(1e200, 0.0, 50) == 1
    assert escape_time(1e300, 1e300, 50) == 1


def test_smooth_value_matches_formula():
    x0, y0 = 0.3333333333333333, -1.6666666666666667
    x = y = 0.0
    n = 0
    while x * x + y * y <= 4.0:
        x, y = x * x - y * y + x0, 2.0 * x * y + y0
        n += 1
    log_zn = np.log(x * x + y * y) / 2.0
    nu = np.log(log_zn / np.log(2.0)) / np.log(2.0)
    assert escape_time(x0, y0, 100) == max(1, int(n + 1 - nu))


def test_view_bounds_are_aspect_aware():
    x_min, x_max, y_min, y_max = view_bounds(-0.5, 0.0, 0.6, 400, 200)
    assert np.isclose(y_max - y_min, 2.0 / 0.6)
    assert np.isclose(x_max - x_min, 2 * (2.0 / 0.6))
    assert np.isclose((x_min + x_max) / 2, -0.5)
    assert np.isclose((y_min + y_max) / 2, 0.0)


def test_pixel_mapping():
    x0, y0 = pixel_to_complex(0, 0, -2.0, 1.0, -1.0, 1.0, 300, 200)
    assert (x0, y0) == (-2.0, -1.0)
    x0, y0 = pixel_to_complex(150, 100, -2.0, 1.0, -1.0, 1.0, 300, 200)
    assert np.isclose(x0, -0.5) and np.isclose(y0, 0.0)


def test_fields_are_in_range_and_fully_filled():
    bounds = view_bounds(-0.5, 0.0, 0.6, 64, 48)
    for compute in (compute_field_traced, compute_field_direct):
        field = compute(*bounds, 64, 48, 100)
        assert field.shape == (48, 64)
        assert field.min() >= 1
        assert field.max() <= 100


def test_traced_matches_direct_inside_cardioid():
    bounds = view_bounds(-0.1, 0.0, 20.0, 64, 48)
    traced = compute_field_traced(*bounds, 64, 48, 80)
    direct = compute_field_direct(*bounds, 64, 48, 80)
    np.testing.assert_array_equal(traced, direct)
    assert (traced == 80).all()


def test_traced_matches_direct_far_outside():
    bounds = view_bounds(3.0, 3.0, 2.0, 40, 30)
    traced = compute_field_traced(*bounds, 40, 30, 80)
    direct = compute_field_direct(*bounds, 40, 30, 80)
    np.testing.assert_array_equal(traced, direct)


def test_traced_mostly_matches_direct_on_full_view():
    """Border tracing is approximate, but only near fine structure."""
    bounds = view_bounds(-0.5, 0.0, 0.6, 96, 72)
    traced = compute_field_traced(*bounds, 96, 72, 120)
    direct = compute_field_direct(*bounds, 96, 72, 120)
    assert (traced == direct).mean() > 0.9


def test_small_and_degenerate_grids():
    for width, height in [(1, 1), (2, 5), (5, 2), (3, 3), (7, 1)]:
        bounds = view_bounds(-0.5, 0.0, 0.6, width, height)
        traced = compute_field_traced(*bounds, width, height, 30)
        direct = compute_field_direct(*bounds, width, height, 30)
        assert traced.shape == (height, width)
        np.testing.assert_array_equal(traced, direct)


def test_four_by_four_default_view():
    bounds = view_bounds(-0.5, 0.0, 0.6, 4, 4)
    field = compute_field_traced(*bounds, 4, 4, 50)
    assert field.shape == (4, 4)
    # (-0.5, 0) lies in the main cardioid
    assert field[2, 2] == 50
    for py, px in [(0, 0), (0, 3), (3, 0), (3, 3)]:
        assert 1 <= field[py, px] < 10
