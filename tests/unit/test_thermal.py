"""
Unit tests for thermal (Langevin) gradient noise.
"""

import math

import numpy as np
import pytest

from wavescape.engine.thermal import LR_EPSILON, noise_scale, perturb, standard_normal


@pytest.mark.unit
class TestStandardNormal:
    """Test the Box-Muller sampler."""

    def test_moments(self):
        rng = np.random.default_rng(0)
        samples = standard_normal(rng, 200_000)
        assert abs(samples.mean()) < 0.01
        assert abs(samples.std() - 1.0) < 0.01

    def test_always_finite(self):
        rng = np.random.default_rng(5)
        assert np.all(np.isfinite(standard_normal(rng, 100_000)))

    def test_reproducible_with_seed(self):
        a = standard_normal(np.random.default_rng(9), 4)
        b = standard_normal(np.random.default_rng(9), 4)
        np.testing.assert_array_equal(a, b)


@pytest.mark.unit
class TestPerturb:
    """Test gradient perturbation."""

    def test_zero_temperature_is_identity(self, rng):
        g = np.array([0.3, -0.7])
        result = perturb(g, 0.0, 0.08, rng)
        np.testing.assert_array_equal(result, g)

    def test_negative_temperature_is_identity(self, rng):
        g = np.array([0.3, -0.7])
        np.testing.assert_array_equal(perturb(g, -2.0, 0.08, rng), g)

    def test_input_not_modified(self, rng):
        g = np.array([1.0, 2.0])
        perturb(g, 0.5, 0.1, rng)
        np.testing.assert_array_equal(g, [1.0, 2.0])

    def test_noise_added_to_true_gradient(self):
        """Test that the perturbed gradient averages back to the true gradient."""
        rng = np.random.default_rng(3)
        g = np.array([0.5, -0.25])
        samples = np.array([perturb(g, 0.01, 0.1, rng) for _ in range(20_000)])
        sigma = noise_scale(0.01, 0.1)
        np.testing.assert_allclose(samples.mean(axis=0), g, atol=4 * sigma / math.sqrt(20_000))
        np.testing.assert_allclose(samples.std(axis=0), [sigma, sigma], rtol=0.03)

    def test_noise_scale_formula(self):
        assert noise_scale(0.5, 0.1) == pytest.approx(math.sqrt(2 * 0.5 / (0.1 + LR_EPSILON)))

    def test_zero_lr_stays_finite(self, rng):
        result = perturb([0.0, 0.0], 0.2, 0.0, rng)
        assert np.all(np.isfinite(result))
