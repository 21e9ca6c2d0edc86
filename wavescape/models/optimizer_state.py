"""
Optimizer State Management for WaveScape

Mutable descent state owned by the SimulationController, plus the immutable
snapshot handed to renderers after each tick.
"""

from collections import deque
from dataclasses import dataclass, field
from enum import Enum
from typing import Deque, Optional, Tuple

import numpy as np

from wavescape.models.landscape import ColorScaleBounds
from wavescape.types import Point, PointLike, Vector2

DEFAULT_TRAIL_CAPACITY = 600


class SimulationState(Enum):
    """Run state of the simulation controller."""
    IDLE = "idle"
    RUNNING = "running"


def _zeros() -> Vector2:
    return np.zeros(2)


@dataclass(eq=False)
class OptimizerState:
    """
    Iterate, optimizer buffers and display trail.

    velocity is only advanced by the momentum optimizer, moment1/moment2 only
    by Adam. The trail is display-only and evicts its oldest entry on overflow.
    """
    position: Vector2 = field(default_factory=_zeros)
    velocity: Vector2 = field(default_factory=_zeros)
    moment1: Vector2 = field(default_factory=_zeros)
    moment2: Vector2 = field(default_factory=_zeros)
    step_count: int = 0
    trail_capacity: int = DEFAULT_TRAIL_CAPACITY
    trail: Deque[Point] = field(init=False)

    def __post_init__(self):
        if self.trail_capacity < 1:
            raise ValueError(f"trail_capacity must be at least 1, got {self.trail_capacity}")
        self.position = np.asarray(self.position, dtype=float).copy()
        self.trail = deque(maxlen=self.trail_capacity)

    def reset(self, position: PointLike) -> None:
        """Move to position and zero buffers, step counter and trail."""
        self.position = np.asarray(position, dtype=float).copy()
        self.velocity = _zeros()
        self.moment1 = _zeros()
        self.moment2 = _zeros()
        self.step_count = 0
        self.trail.clear()

    def push_trail(self, point: PointLike) -> None:
        x, y = (float(v) for v in point)
        self.trail.append((x, y))

    def resize_trail(self, capacity: int) -> None:
        """Change trail capacity, keeping the newest entries."""
        if capacity < 1:
            raise ValueError(f"trail_capacity must be at least 1, got {capacity}")
        self.trail_capacity = capacity
        self.trail = deque(self.trail, maxlen=capacity)


@dataclass(frozen=True)
class SimulationSnapshot:
    """Read-only view of the simulation, taken after a tick completes."""
    state: SimulationState
    optimizer_kind: str
    step_count: int
    position: Point
    trail: Tuple[Point, ...]
    color_bounds: ColorScaleBounds
    loss: float
    learning_rate: float
    smoothing: float
    temperature: float
    progress: float
    event: Optional[str] = None

    @property
    def is_running(self) -> bool:
        return self.state is SimulationState.RUNNING
