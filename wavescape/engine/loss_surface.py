"""
LossSurface - scalar field evaluation and numerical gradients.

The field is a continuation blend:

    loss(x, y; s) = bowl(x, y) + (1 - s) * (sum of sinusoids + sum of gaussians)

A smoothing factor s of 1 gives the bare convex bowl, 0 gives full detail.
The gradient is estimated with central finite differences:

    df/dx ~= (f(x + h, y) - f(x - h, y)) / 2h
"""

import logging
from typing import Tuple

import numpy as np

from wavescape.models.landscape import ColorScaleBounds, Domain, LandscapeParameters
from wavescape.types import Grid, PointLike, ScalarField, Vector2

logger = logging.getLogger(__name__)

GRADIENT_STEP = 1e-4


def _clip_smoothing(smoothing: float) -> float:
    return min(1.0, max(0.0, float(smoothing)))


class LossSurface:
    """
    Evaluates a LandscapeParameters instance as a loss function.

    All evaluation is vectorized with numpy, so x and y may be scalars or
    arrays of the same shape (e.g. meshes for rendering).

    Attributes:
        landscape: The immutable landscape description being evaluated
        h: Finite difference step, fixed and bounded away from zero
    """

    def __init__(self, landscape: LandscapeParameters, h: float = GRADIENT_STEP) -> None:
        if not h > 0:
            raise ValueError(f"Finite difference step must be positive, got {h}")
        self.landscape = landscape
        self.h = float(h)

    def bowl(self, x: ScalarField, y: ScalarField) -> ScalarField:
        """Quadratic base term, never blended away."""
        q = self.landscape.quadratic
        return q.xx * x * x + q.yy * y * y + q.xy * x * y

    def detail(self, x: ScalarField, y: ScalarField) -> ScalarField:
        """Sum of the sinusoid and gaussian terms, before smoothing."""
        total = np.zeros(np.broadcast(x, y).shape)
        for s in self.landscape.sinusoids:
            total = total + s.amp * np.sin(s.freq_x * x + s.phase_x) * np.sin(s.freq_y * y + s.phase_y)
        for g in self.landscape.gaussians:
            dx = x - g.cx
            dy = y - g.cy
            total = total + g.amp * np.exp(
                -(dx * dx / (2.0 * g.sigma_x ** 2) + dy * dy / (2.0 * g.sigma_y ** 2))
            )
        return total

    def evaluate(self, x: ScalarField, y: ScalarField, smoothing: float = 0.0) -> ScalarField:
        """
        Loss at (x, y) for the given smoothing factor.

        Returns:
            float for scalar inputs, ndarray for array inputs
        """
        weight = 1.0 - _clip_smoothing(smoothing)
        value = self.bowl(x, y)
        if weight != 0.0:
            value = value + weight * self.detail(x, y)
        if np.ndim(value) == 0:
            return float(value)
        return value

    def evaluate_point(self, point: PointLike, smoothing: float = 0.0) -> float:
        x, y = np.asarray(point, dtype=float)
        return self.evaluate(x, y, smoothing)

    def gradient(self, point: PointLike, smoothing: float = 0.0) -> Vector2:
        """
        Central finite difference gradient at point.

        Args:
            point: (x, y) position
            smoothing: Continuation factor in [0, 1]

        Returns:
            np.ndarray([df/dx, df/dy])
        """
        x, y = np.asarray(point, dtype=float)
        h = self.h
        gx = (self.evaluate(x + h, y, smoothing) - self.evaluate(x - h, y, smoothing)) / (2.0 * h)
        gy = (self.evaluate(x, y + h, smoothing) - self.evaluate(x, y - h, smoothing)) / (2.0 * h)
        return np.array([gx, gy], dtype=float)

    def analytic_gradient(self, point: PointLike, smoothing: float = 0.0) -> Vector2:
        """Closed-form gradient of the same sum; used to check the numerical estimate."""
        x, y = np.asarray(point, dtype=float)
        q = self.landscape.quadratic
        gx = 2.0 * q.xx * x + q.xy * y
        gy = 2.0 * q.yy * y + q.xy * x

        weight = 1.0 - _clip_smoothing(smoothing)
        if weight != 0.0:
            dgx = 0.0
            dgy = 0.0
            for s in self.landscape.sinusoids:
                sx = np.sin(s.freq_x * x + s.phase_x)
                sy = np.sin(s.freq_y * y + s.phase_y)
                dgx += s.amp * s.freq_x * np.cos(s.freq_x * x + s.phase_x) * sy
                dgy += s.amp * s.freq_y * sx * np.cos(s.freq_y * y + s.phase_y)
            for g in self.landscape.gaussians:
                dx = x - g.cx
                dy = y - g.cy
                value = g.amp * np.exp(-(dx * dx / (2.0 * g.sigma_x ** 2) + dy * dy / (2.0 * g.sigma_y ** 2)))
                dgx += -value * dx / g.sigma_x ** 2
                dgy += -value * dy / g.sigma_y ** 2
            gx += weight * dgx
            gy += weight * dgy

        return np.array([gx, gy], dtype=float)

    def sample_grid(self, domain: Domain, resolution: int,
                    smoothing: float = 0.0) -> Tuple[Grid, Grid, Grid]:
        """
        Evaluate the field on a resolution x resolution mesh over the domain.

        Returns:
            (X, Y, Z) meshes, each of shape (resolution, resolution)
        """
        if resolution < 2:
            raise ValueError(f"Grid resolution must be at least 2, got {resolution}")
        axis = np.linspace(domain.world_min, domain.world_max, int(resolution))
        X, Y = np.meshgrid(axis, axis)
        Z = self.evaluate(X, Y, smoothing)
        return X, Y, Z

    def color_scale_bounds(self, domain: Domain, resolution: int = 96) -> ColorScaleBounds:
        """
        Loss range over a fixed grid at zero smoothing.

        Computed without smoothing so the color scale does not drift while
        the smoothing factor anneals.
        """
        _, _, Z = self.sample_grid(domain, resolution, smoothing=0.0)
        if not np.all(np.isfinite(Z)):
            raise FloatingPointError("Landscape produced non-finite loss values on the color grid")
        bounds = ColorScaleBounds(float(Z.min()), float(Z.max()))
        logger.debug(f"Color scale bounds: [{bounds.min_loss:.4f}, {bounds.max_loss:.4f}]")
        return bounds
