"""
Unit tests for the landscape data model.
"""

import dataclasses
import math

import numpy as np
import pytest

from wavescape.models.landscape import (
    ColorScaleBounds,
    Domain,
    GaussianTerm,
    LandscapeError,
    LandscapeParameters,
    QuadraticBowl,
    SinusoidTerm,
    generate_landscape,
)


@pytest.mark.unit
class TestLandscapeValidation:
    """Test that invalid coefficients are rejected loudly."""

    def test_bowl_must_be_strictly_convex(self):
        """Test that a saddle-shaped quadratic is rejected."""
        with pytest.raises(LandscapeError):
            QuadraticBowl(xx=0.02, yy=0.02, xy=0.1)

    def test_bowl_diagonal_must_be_positive(self):
        with pytest.raises(LandscapeError):
            QuadraticBowl(xx=0.0, yy=0.02)
        with pytest.raises(LandscapeError):
            QuadraticBowl(xx=0.02, yy=-0.01)

    def test_non_finite_coefficients_rejected(self):
        """Test that NaN and inf never make it into a landscape."""
        with pytest.raises(LandscapeError):
            GaussianTerm(amp=math.nan, cx=0.0, cy=0.0, sigma_x=1.0, sigma_y=1.0)
        with pytest.raises(LandscapeError):
            SinusoidTerm(amp=1.0, freq_x=math.inf, freq_y=1.0, phase_x=0.0, phase_y=0.0)
        with pytest.raises(LandscapeError):
            QuadraticBowl(xx=0.02, yy=math.nan)

    def test_gaussian_sigma_must_be_positive(self):
        with pytest.raises(LandscapeError):
            GaussianTerm(amp=1.0, cx=0.0, cy=0.0, sigma_x=0.0, sigma_y=1.0)

    def test_landscape_error_is_value_error(self):
        assert issubclass(LandscapeError, ValueError)

    def test_landscape_is_immutable(self, rugged_landscape):
        with pytest.raises(dataclasses.FrozenInstanceError):
            rugged_landscape.quadratic = QuadraticBowl(0.1, 0.1)

    def test_lists_are_stored_as_tuples(self):
        landscape = LandscapeParameters(
            quadratic=QuadraticBowl(0.02, 0.02),
            gaussians=[GaussianTerm(1.0, 0.0, 0.0, 1.0, 1.0)],
            sinusoids=[],
        )
        assert isinstance(landscape.gaussians, tuple)
        assert isinstance(landscape.sinusoids, tuple)

    def test_bowl_constructor(self):
        landscape = LandscapeParameters.bowl(0.02, 0.03, 0.01)
        assert landscape.gaussians == ()
        assert landscape.sinusoids == ()
        assert landscape.quadratic == QuadraticBowl(0.02, 0.03, 0.01)


@pytest.mark.unit
class TestGenerateLandscape:
    """Test random landscape sampling."""

    def test_same_seed_gives_same_landscape(self):
        """Test that an injected seeded generator makes generation reproducible."""
        a = generate_landscape(np.random.default_rng(42))
        b = generate_landscape(np.random.default_rng(42))
        assert a == b

    def test_different_seeds_differ(self):
        a = generate_landscape(np.random.default_rng(1))
        b = generate_landscape(np.random.default_rng(2))
        assert a != b

    def test_counts_within_configured_ranges(self, rng):
        for _ in range(20):
            landscape = generate_landscape(rng)
            assert 4 <= len(landscape.gaussians) <= 7
            assert 2 <= len(landscape.sinusoids) <= 4

    def test_quadratic_is_strictly_convex(self, rng):
        for _ in range(50):
            q = generate_landscape(rng).quadratic
            assert q.xx > 0 and q.yy > 0
            assert q.xy ** 2 < 4 * q.xx * q.yy

    def test_gaussian_centres_inside_domain(self, rng, domain):
        for _ in range(20):
            for g in generate_landscape(rng, domain=domain).gaussians:
                assert domain.contains((g.cx, g.cy))

    def test_config_overrides_counts(self, rng):
        config = {'gaussian_count': [0, 0], 'sinusoid_count': [1, 1]}
        landscape = generate_landscape(rng, config)
        assert len(landscape.gaussians) == 0
        assert len(landscape.sinusoids) == 1

    def test_bad_config_fails_loudly(self, rng):
        """Test that a misconfigured sampler raises instead of producing a saddle."""
        config = {'quadratic_diagonal': [0.02, 0.02], 'quadratic_cross': [0.5, 0.5]}
        with pytest.raises(LandscapeError):
            generate_landscape(rng, config)


@pytest.mark.unit
class TestDomain:
    """Test the world bounds helper."""

    def test_inverted_domain_rejected(self):
        with pytest.raises(LandscapeError):
            Domain(5.0, -5.0)

    def test_clamp(self, domain):
        np.testing.assert_array_equal(domain.clamp((7.0, -9.0)), [5.0, -5.0])
        np.testing.assert_array_equal(domain.clamp((1.5, -2.5)), [1.5, -2.5])

    def test_random_point_inside(self, domain, rng):
        for _ in range(100):
            assert domain.contains(domain.random_point(rng))

    def test_span(self, domain):
        assert domain.span == 10.0


@pytest.mark.unit
class TestColorScaleBounds:
    """Test loss-to-color normalization."""

    def test_normalize_endpoints(self):
        bounds = ColorScaleBounds(-1.0, 3.0)
        assert bounds.normalize(-1.0) == pytest.approx(0.0)
        assert bounds.normalize(3.0) == pytest.approx(1.0)
        assert bounds.normalize(1.0) == pytest.approx(0.5)

    def test_normalize_clips(self):
        bounds = ColorScaleBounds(0.0, 1.0)
        assert bounds.normalize(5.0) == 1.0
        assert bounds.normalize(-5.0) == 0.0

    def test_flat_landscape_does_not_divide_by_zero(self):
        bounds = ColorScaleBounds(2.0, 2.0)
        value = bounds.normalize(2.0)
        assert math.isfinite(value)
        assert value == 0.0

    def test_normalize_arrays(self):
        bounds = ColorScaleBounds(0.0, 4.0)
        result = bounds.normalize(np.array([[0.0, 2.0], [4.0, 1.0]]))
        assert result.shape == (2, 2)
        np.testing.assert_allclose(result, [[0.0, 0.5], [1.0, 0.25]], atol=1e-8)
