"""
Type definitions for WaveScape.

This module provides common type aliases used throughout the codebase
for improved code readability and type checking.
"""

from typing import Any, Callable, Sequence, Tuple, Union

import numpy as np
from numpy.typing import NDArray

# Geometry
Point = Tuple[float, float]
"""2D point in world coordinates as (x, y) tuple."""

Vector2 = NDArray[np.float64]
"""Length-2 float array used for positions, velocities and gradients."""

PointLike = Union[Point, Sequence[float], Vector2]
"""Anything that can be converted to a length-2 float array."""

# Fields
ScalarField = Union[float, NDArray[np.float64]]
"""A loss value: scalar, or an array when evaluated over a grid."""

Grid = NDArray[np.float64]
"""2D mesh array (shape: Ny x Nx)."""

# Callback types
SnapshotCallback = Callable[[Any], None]
"""Subscriber notified after each completed tick: (snapshot) -> None."""

Unsubscribe = Callable[[], None]
"""Handle returned by subscribe(); call it to stop receiving snapshots."""

# UI types
Color = Union[str, Tuple[int, int, int], Tuple[int, int, int, int]]
"""Color specification: CSS string, RGB tuple, or RGBA tuple."""
