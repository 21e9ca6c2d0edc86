"""
Render data for WaveScape landscapes.

Nothing in here paints. These helpers turn the engine state into arrays
and strings a renderer can draw directly: stacked ridge lines (one
polyline per world-y row, lifted by height), a per-line colour palette,
the world-to-screen projection used for the ball and trail, and the HUD
readout.
"""

import logging
from typing import Optional, Tuple

import numpy as np

from wavescape.engine.loss_surface import LossSurface
from wavescape.models.landscape import ColorScaleBounds, Domain
from wavescape.models.optimizer_state import SimulationSnapshot

logger = logging.getLogger(__name__)

DEFAULT_LINES = 46
DEFAULT_SAMPLES_PER_LINE = 320
DEFAULT_PADDING = 24
DEFAULT_HEIGHT_SCALE = 36.0


def ridge_lines(surface: LossSurface, domain: Domain, smoothing: float = 0.0,
                n_lines: int = DEFAULT_LINES,
                samples_per_line: int = DEFAULT_SAMPLES_PER_LINE) -> Tuple[np.ndarray, np.ndarray, np.ndarray]:
    """
    Sample the field along evenly spaced horizontal world lines.

    Args:
        surface: Loss surface to sample
        domain: World bounds
        smoothing: Continuation factor for the sampled field
        n_lines: Number of ridge lines (rows)
        samples_per_line: Segments per line; each line has samples_per_line + 1 points

    Returns:
        (line_ys, xs, heights) where line_ys has shape (n_lines,), xs has shape
        (samples_per_line + 1,) and heights has shape (n_lines, samples_per_line + 1)
    """
    if n_lines < 1 or samples_per_line < 1:
        raise ValueError(f"Need at least one line and one segment, got {n_lines}, {samples_per_line}")
    span = domain.span
    line_ys = domain.world_min + (np.arange(n_lines) + 0.5) / n_lines * span
    xs = domain.world_min + np.arange(samples_per_line + 1) / samples_per_line * span
    X, Y = np.meshgrid(xs, line_ys)
    heights = surface.evaluate(X, Y, smoothing)
    return line_ys, xs, heights


def line_colour(i: int, n: int, alpha: float = 0.85) -> str:
    """HSLA colour for ridge line i of n, spreading hue across the stack."""
    hue = (320 * (i / n) + 20) % 360
    return f"hsla({hue:g}, 80%, 58%, {alpha:g})"


def world_to_screen(x, y, z, width: float, height: float, domain: Domain,
                    padding: float = DEFAULT_PADDING,
                    height_scale: float = DEFAULT_HEIGHT_SCALE):
    """
    Project a world point with height z onto screen coordinates.

    World y picks the baseline row; the point is then lifted by
    z * height_scale pixels. Works element-wise on arrays.

    Returns:
        (sx, sy)
    """
    w = width - padding * 2
    h = height - padding * 2
    nx = (np.asarray(x, dtype=float) - domain.world_min) / domain.span
    ny = (np.asarray(y, dtype=float) - domain.world_min) / domain.span
    sx = padding + nx * w
    sy = padding + ny * h - np.asarray(z, dtype=float) * height_scale
    if np.ndim(sx) == 0:
        return float(sx), float(sy)
    return sx, sy


def trail_to_screen(snapshot: SimulationSnapshot, surface: LossSurface, width: float,
                    height: float, domain: Domain, **kwargs) -> Optional[np.ndarray]:
    """Screen polyline (N x 2) for the snapshot trail, or None if it has fewer than two points."""
    if len(snapshot.trail) < 2:
        return None
    pts = np.asarray(snapshot.trail, dtype=float)
    z = surface.evaluate(pts[:, 0], pts[:, 1], snapshot.smoothing)
    sx, sy = world_to_screen(pts[:, 0], pts[:, 1], z, width, height, domain, **kwargs)
    return np.column_stack([sx, sy])


def normalized_loss_grid(surface: LossSurface, domain: Domain, bounds: ColorScaleBounds,
                         resolution: int = 96, smoothing: float = 0.0) -> np.ndarray:
    """Loss grid mapped into [0, 1] with fixed color bounds, ready for a colormap."""
    _, _, Z = surface.sample_grid(domain, resolution, smoothing)
    return bounds.normalize(Z)


def hud_text(snapshot: SimulationSnapshot) -> str:
    """One-line readout of position and loss."""
    x, y = snapshot.position
    return f"x={x:.2f}  y={y:.2f}  loss={snapshot.loss:.3f}"
