"""
Thermal perturbation (Langevin dynamics).

Adds zero-mean Gaussian noise to the gradient:

    g' = g + sqrt(2 T / (lr + eps)) * z,    z ~ N(0, 1) per component

After the optimizer multiplies by lr, the position noise has variance
2 T lr, which is the usual Langevin discretization. The noise is added to
the true gradient, so the descent direction is perturbed, not replaced.
"""

import logging
import math

import numpy as np

from wavescape.types import PointLike, Vector2

logger = logging.getLogger(__name__)

LR_EPSILON = 1e-8


def standard_normal(rng: np.random.Generator, size: int = 2) -> np.ndarray:
    """
    Standard normal samples via the Box-Muller transform.

    Each sample uses two independent uniform draws u1 in (0, 1] and
    u2 in [0, 1):  z = sqrt(-2 ln u1) * cos(2 pi u2).
    """
    u1 = 1.0 - rng.random(size)  # (0, 1], keeps log() finite
    u2 = rng.random(size)
    return np.sqrt(-2.0 * np.log(u1)) * np.cos(2.0 * np.pi * u2)


def noise_scale(temperature: float, lr: float) -> float:
    """Per-component standard deviation of the injected gradient noise."""
    temperature = max(0.0, float(temperature))
    return math.sqrt(2.0 * temperature / (max(0.0, float(lr)) + LR_EPSILON))


def perturb(gradient: PointLike, temperature: float, lr: float,
            rng: np.random.Generator) -> Vector2:
    """
    Perturb a gradient with thermal noise.

    Args:
        gradient: True gradient
        temperature: Noise temperature, clamped to >= 0
        lr: Current learning rate
        rng: Random generator used for the uniform draws

    Returns:
        New gradient array; the input is never modified
    """
    g = np.array(gradient, dtype=float)
    if temperature <= 0:
        return g
    sigma = noise_scale(temperature, lr)
    return g + sigma * standard_normal(rng, g.shape[0])
