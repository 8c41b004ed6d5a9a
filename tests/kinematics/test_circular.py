"""Tests for angular normalization and circular statistics."""

import math

import numpy as np
import pytest

pytestmark = pytest.mark.unit

from servosphere.kinematics.circular import (
    bearing_from_xy,
    circular_mean,
    wrap_bearing,
    wrap_turn,
)


def angular_gap(a, b):
    """Smallest absolute difference between two bearings."""
    d = abs(a - b) % 360.0
    return min(d, 360.0 - d)


class TestWrap:

    @pytest.mark.parametrize("angle, expected", [
        (0.0, 0.0), (360.0, 0.0), (-90.0, 270.0), (725.0, 5.0), (359.5, 359.5),
    ])
    def test_wrap_bearing(self, angle, expected):
        assert float(wrap_bearing(angle)) == pytest.approx(expected)

    def test_wrap_bearing_never_returns_360(self):
        assert float(wrap_bearing(-1e-14)) < 360.0

    @pytest.mark.parametrize("angle, expected", [
        (20.0, 20.0), (-20.0, -20.0), (340.0, -20.0), (-340.0, 20.0),
        (180.0, 180.0), (-180.0, 180.0), (540.0, 180.0),
    ])
    def test_wrap_turn(self, angle, expected):
        assert float(wrap_turn(angle)) == pytest.approx(expected)

    def test_turn_from_350_to_10_is_plus_20(self):
        assert float(wrap_turn(10.0 - 350.0)) == pytest.approx(20.0)

    def test_turn_from_10_to_350_is_minus_20(self):
        assert float(wrap_turn(350.0 - 10.0)) == pytest.approx(-20.0)

    def test_nan_propagates(self):
        assert np.isnan(wrap_turn(np.nan))


class TestBearingFromXY:

    @pytest.mark.parametrize("dx, dy, expected", [
        (0, 1, 0.0), (1, 0, 90.0), (0, -1, 180.0), (-1, 0, 270.0), (1, 1, 45.0),
    ])
    def test_compass_bearing(self, dx, dy, expected):
        assert float(bearing_from_xy(dx, dy)) == pytest.approx(expected)

    def test_no_movement_is_undefined(self):
        assert np.isnan(bearing_from_xy(0.0, 0.0))

    def test_vectorized(self):
        out = bearing_from_xy([0, 1, 0], [1, 0, 0])
        assert out[:2].tolist() == pytest.approx([0.0, 90.0])
        assert np.isnan(out[2])


class TestCircularMean:

    def test_mean_across_north(self):
        mean, rho = circular_mean([10.0, 350.0])
        assert angular_gap(mean, 0.0) < 1e-9
        assert 0.0 <= mean < 360.0
        assert rho == pytest.approx(math.cos(math.radians(10.0)))

    def test_identical_bearings_have_rho_one(self):
        mean, rho = circular_mean([123.0] * 5)
        assert mean == pytest.approx(123.0)
        assert rho == pytest.approx(1.0)

    def test_uniform_spread_has_rho_near_zero(self):
        mean, rho = circular_mean([0.0, 90.0, 180.0, 270.0])
        assert rho < 1e-9
        assert np.isnan(mean)

    def test_single_sample(self):
        mean, rho = circular_mean([270.0])
        assert mean == pytest.approx(270.0)
        assert rho == pytest.approx(1.0)

    def test_no_samples(self):
        mean, rho = circular_mean([])
        assert np.isnan(mean) and np.isnan(rho)

    def test_nan_excluded(self):
        mean, rho = circular_mean([np.nan, 90.0, np.nan])
        assert mean == pytest.approx(90.0)
        assert rho == pytest.approx(1.0)

    def test_all_nan_is_undefined(self):
        mean, rho = circular_mean([np.nan, np.nan])
        assert np.isnan(mean) and np.isnan(rho)

    @pytest.mark.parametrize("bearing", [31.5, 4.0, 359.5, 0.0, 137.25])
    def test_single_sample_rho_is_exactly_one(self, bearing):
        assert circular_mean([bearing]) == (bearing, 1.0)

    def test_identical_bearings_are_exact(self):
        assert circular_mean([4.0] * 3) == (4.0, 1.0)

    def test_identical_after_wrapping(self):
        assert circular_mean([0.0, 360.0, np.nan]) == (0.0, 1.0)

    def test_rho_bounded(self):
        rng = np.random.default_rng(0)
        for _ in range(20):
            _, rho = circular_mean(rng.uniform(0, 360, size=7))
            assert 0.0 <= rho <= 1.0
