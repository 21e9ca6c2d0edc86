"""
Landscape data model for WaveScape.

A landscape is an immutable sum of basis terms over a square world:
signed Gaussian bumps/wells, separable sinusoidal ripples and a strictly
convex quadratic bowl. The bowl keeps the field bounded below at every
smoothing level.
"""

import logging
import math
from dataclasses import dataclass, field
from typing import Any, Dict, Optional, Sequence, Tuple

import numpy as np

from wavescape.types import PointLike, Vector2

logger = logging.getLogger(__name__)


class LandscapeError(ValueError):
    """Raised when landscape coefficients are non-finite or degenerate."""


def _require_finite(owner: str, **values: float) -> None:
    for name, value in values.items():
        if not math.isfinite(value):
            raise LandscapeError(f"{owner}.{name} must be finite, got {value!r}")


@dataclass(frozen=True)
class GaussianTerm:
    """amp * exp(-((x-cx)^2 / (2 sx^2) + (y-cy)^2 / (2 sy^2)))"""
    amp: float
    cx: float
    cy: float
    sigma_x: float
    sigma_y: float

    def __post_init__(self):
        _require_finite("GaussianTerm", amp=self.amp, cx=self.cx, cy=self.cy,
                        sigma_x=self.sigma_x, sigma_y=self.sigma_y)
        if self.sigma_x <= 0 or self.sigma_y <= 0:
            raise LandscapeError(
                f"GaussianTerm sigmas must be positive, got ({self.sigma_x}, {self.sigma_y})"
            )


@dataclass(frozen=True)
class SinusoidTerm:
    """amp * sin(freq_x * x + phase_x) * sin(freq_y * y + phase_y)"""
    amp: float
    freq_x: float
    freq_y: float
    phase_x: float
    phase_y: float

    def __post_init__(self):
        _require_finite("SinusoidTerm", amp=self.amp, freq_x=self.freq_x, freq_y=self.freq_y,
                        phase_x=self.phase_x, phase_y=self.phase_y)


@dataclass(frozen=True)
class QuadraticBowl:
    """xx * x^2 + yy * y^2 + xy * x * y, strictly convex."""
    xx: float
    yy: float
    xy: float = 0.0

    def __post_init__(self):
        _require_finite("QuadraticBowl", xx=self.xx, yy=self.yy, xy=self.xy)
        if self.xx <= 0 or self.yy <= 0 or self.xy ** 2 >= 4.0 * self.xx * self.yy:
            raise LandscapeError(
                f"QuadraticBowl must be strictly convex, got xx={self.xx}, yy={self.yy}, xy={self.xy}"
            )


@dataclass(frozen=True)
class LandscapeParameters:
    """Complete, immutable description of a loss landscape."""
    quadratic: QuadraticBowl
    gaussians: Tuple[GaussianTerm, ...] = field(default_factory=tuple)
    sinusoids: Tuple[SinusoidTerm, ...] = field(default_factory=tuple)

    def __post_init__(self):
        # Accept lists from callers but store tuples so the value stays hashable
        object.__setattr__(self, 'gaussians', tuple(self.gaussians))
        object.__setattr__(self, 'sinusoids', tuple(self.sinusoids))

    @classmethod
    def bowl(cls, xx: float, yy: float, xy: float = 0.0) -> "LandscapeParameters":
        """A landscape made of the quadratic bowl only."""
        return cls(quadratic=QuadraticBowl(xx, yy, xy))


@dataclass(frozen=True)
class Domain:
    """Axis-aligned square world [world_min, world_max]^2."""
    world_min: float = -5.0
    world_max: float = 5.0

    def __post_init__(self):
        _require_finite("Domain", world_min=self.world_min, world_max=self.world_max)
        if self.world_min >= self.world_max:
            raise LandscapeError(
                f"Domain world_min ({self.world_min}) must be below world_max ({self.world_max})"
            )

    @property
    def span(self) -> float:
        return self.world_max - self.world_min

    def clamp(self, point: PointLike) -> Vector2:
        """Clamp a point into the domain on both axes."""
        return np.clip(np.asarray(point, dtype=float), self.world_min, self.world_max)

    def contains(self, point: PointLike) -> bool:
        p = np.asarray(point, dtype=float)
        return bool(np.all(p >= self.world_min) and np.all(p <= self.world_max))

    def random_point(self, rng: np.random.Generator) -> Vector2:
        """Uniform random point inside the domain."""
        return rng.uniform(self.world_min, self.world_max, size=2)


@dataclass(frozen=True)
class ColorScaleBounds:
    """Loss range used to map loss values onto the color scale."""
    min_loss: float
    max_loss: float

    EPSILON = 1e-9

    def normalize(self, loss):
        """Map loss into [0, 1]; a flat landscape maps to 0 instead of dividing by zero."""
        scaled = (np.asarray(loss, dtype=float) - self.min_loss) / (
            self.max_loss - self.min_loss + self.EPSILON
        )
        scaled = np.clip(scaled, 0.0, 1.0)
        return float(scaled) if scaled.ndim == 0 else scaled


def _range(config: Dict[str, Any], key: str, default: Sequence[float]) -> Tuple[float, float]:
    low, high = config.get(key, default)
    return float(low), float(high)


def generate_landscape(rng: np.random.Generator,
                       config: Optional[Dict[str, Any]] = None,
                       domain: Optional[Domain] = None) -> LandscapeParameters:
    """
    Sample a random landscape.

    Args:
        rng: Random generator; pass a seeded one for reproducible landscapes
        config: Optional 'landscape' config section overriding the sampling ranges
        domain: World bounds used to place the Gaussian centres

    Returns:
        LandscapeParameters

    Raises:
        LandscapeError: if the configured ranges produce invalid coefficients
    """
    config = config or {}
    domain = domain or Domain(config.get('world_min', -5.0), config.get('world_max', 5.0))

    g_lo, g_hi = config.get('gaussian_count', (4, 7))
    s_lo, s_hi = config.get('sinusoid_count', (2, 4))
    amp_lo, amp_hi = _range(config, 'gaussian_amplitude', (0.5, 1.4))
    sig_lo, sig_hi = _range(config, 'gaussian_sigma', (0.5, 1.5))
    sin_amp_lo, sin_amp_hi = _range(config, 'sinusoid_amplitude', (0.15, 0.6))
    freq_lo, freq_hi = _range(config, 'sinusoid_frequency', (0.4, 1.8))
    diag_lo, diag_hi = _range(config, 'quadratic_diagonal', (0.02, 0.08))
    cross_lo, cross_hi = _range(config, 'quadratic_cross', (-0.02, 0.02))
    centre_extent = float(config.get('gaussian_center_fraction', 0.8)) * domain.span / 2.0
    centre = (domain.world_min + domain.world_max) / 2.0

    gaussians = []
    for _ in range(int(rng.integers(int(g_lo), int(g_hi) + 1))):
        sign = 1.0 if rng.random() < 0.5 else -1.0
        gaussians.append(GaussianTerm(
            amp=sign * rng.uniform(amp_lo, amp_hi),
            cx=centre + rng.uniform(-centre_extent, centre_extent),
            cy=centre + rng.uniform(-centre_extent, centre_extent),
            sigma_x=rng.uniform(sig_lo, sig_hi),
            sigma_y=rng.uniform(sig_lo, sig_hi),
        ))

    sinusoids = []
    for _ in range(int(rng.integers(int(s_lo), int(s_hi) + 1))):
        sinusoids.append(SinusoidTerm(
            amp=rng.uniform(sin_amp_lo, sin_amp_hi),
            freq_x=rng.uniform(freq_lo, freq_hi),
            freq_y=rng.uniform(freq_lo, freq_hi),
            phase_x=rng.uniform(0.0, 2.0 * np.pi),
            phase_y=rng.uniform(0.0, 2.0 * np.pi),
        ))

    quadratic = QuadraticBowl(
        xx=rng.uniform(diag_lo, diag_hi),
        yy=rng.uniform(diag_lo, diag_hi),
        xy=rng.uniform(cross_lo, cross_hi),
    )

    landscape = LandscapeParameters(quadratic=quadratic, gaussians=gaussians, sinusoids=sinusoids)
    logger.debug(f"Generated landscape: {len(gaussians)} gaussians, {len(sinusoids)} sinusoids, "
                 f"bowl=({quadratic.xx:.4f}, {quadratic.yy:.4f}, {quadratic.xy:.4f})")
    return landscape
