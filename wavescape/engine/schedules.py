"""
Schedule functions for WaveScape.

Everything here is a pure function of the step counter. Two progress
measures are used:

    progress        = clamp(step / horizon_steps, 0, 1)
    cyclic progress = (step mod cycle_steps) / cycle_steps

The learning rate follows the selected ScheduleKind. Smoothing and
temperature always anneal towards zero over the global progress, whatever
the learning-rate schedule, so late steps run on the full-detail, noise-free
landscape.
"""

import math
from dataclasses import dataclass
from enum import Enum
from typing import Any, Tuple, Union

import numpy as np

MIN_CYCLE_STEPS = 6
MIN_LR_FRACTION = 0.01
STEP_DROPS = 4
STEP_DROP_RATE = 0.5
WARMUP_FRACTION = 0.1
ONE_CYCLE_PEAK = 0.4


class ScheduleKind(Enum):
    """Available learning-rate schedules."""
    CONSTANT = "constant"
    LINEAR = "linear"
    COSINE = "cosine"
    COSINE_RESTARTS = "cosine-restarts"
    STEP = "step"
    EXPONENTIAL = "exponential"
    WARMUP_COSINE = "warmup-cosine"
    ONE_CYCLE = "one-cycle"

    @classmethod
    def parse(cls, value: Union["ScheduleKind", str]) -> "ScheduleKind":
        """Accept a member or its string value ('cosine_restarts' is tolerated)."""
        if isinstance(value, cls):
            return value
        try:
            return cls(str(value).strip().lower().replace('_', '-'))
        except ValueError:
            valid = [k.value for k in cls]
            raise ValueError(f"Unknown schedule kind '{value}', must be one of {valid}") from None


@dataclass(frozen=True)
class ScheduleValues:
    """Scheduled quantities for one integration substep."""
    learning_rate: float
    smoothing: float
    temperature: float
    progress: float


def cycle_steps_from_seconds(cycle_seconds: float, frame_rate: float = 60.0) -> int:
    """Convert a cycle length in seconds to steps, never shorter than MIN_CYCLE_STEPS."""
    return max(MIN_CYCLE_STEPS, int(math.floor(frame_rate * cycle_seconds)))


def progress(step: int, horizon_steps: int) -> float:
    if horizon_steps <= 0:
        return 1.0
    return min(1.0, max(0.0, step / horizon_steps))


def cyclic_progress(step: int, cycle_steps: int) -> float:
    cycle_steps = max(1, int(cycle_steps))
    return (step % cycle_steps) / cycle_steps


def _cosine(p: float) -> float:
    return 0.5 * (1.0 + math.cos(math.pi * p))


def learning_rate(kind: Union[ScheduleKind, str], base: float, step: int,
                  cycle_steps: int, horizon_steps: int) -> float:
    """
    Learning rate at a given step.

    Args:
        kind: Schedule to apply
        base: Base (peak) learning rate
        step: Current step counter
        cycle_steps: Steps per restart cycle (cosine-restarts)
        horizon_steps: Steps over which one-shot schedules decay

    Returns:
        float learning rate, >= 0 for base >= 0
    """
    kind = ScheduleKind.parse(kind)
    p = progress(step, horizon_steps)
    min_lr = base * MIN_LR_FRACTION

    if kind is ScheduleKind.CONSTANT:
        return base
    if kind is ScheduleKind.LINEAR:
        return base * (1.0 - p)
    if kind is ScheduleKind.COSINE:
        return base * _cosine(p)
    if kind is ScheduleKind.COSINE_RESTARTS:
        return base * _cosine(cyclic_progress(step, cycle_steps))
    if kind is ScheduleKind.STEP:
        drops = min(STEP_DROPS, int(math.floor(p * STEP_DROPS)))
        return base * STEP_DROP_RATE ** drops
    if kind is ScheduleKind.EXPONENTIAL:
        return base * MIN_LR_FRACTION ** p
    if kind is ScheduleKind.WARMUP_COSINE:
        if p < WARMUP_FRACTION:
            return min(base, base * (p + 1.0 / max(1, horizon_steps)) / WARMUP_FRACTION)
        decay = (p - WARMUP_FRACTION) / (1.0 - WARMUP_FRACTION)
        return min_lr + (base - min_lr) * _cosine(decay)
    if kind is ScheduleKind.ONE_CYCLE:
        if p < ONE_CYCLE_PEAK:
            ramp = 0.5 * (1.0 - math.cos(math.pi * p / ONE_CYCLE_PEAK))
            return min_lr + (base - min_lr) * ramp
        decay = (p - ONE_CYCLE_PEAK) / (1.0 - ONE_CYCLE_PEAK)
        return min_lr + (base - min_lr) * _cosine(decay)

    raise ValueError(f"Unhandled schedule kind {kind}")


def smoothing_factor(amount: float, p: float) -> float:
    """Continuation factor: starts at amount, cosine-decays to 0 at p = 1."""
    amount = min(1.0, max(0.0, amount))
    return amount * _cosine(min(1.0, max(0.0, p)))


def temperature(base: float, p: float, anneal: bool = True) -> float:
    """Langevin temperature, linearly annealed to 0 at p = 1 when anneal is set."""
    base = max(0.0, base)
    if not anneal:
        return base
    return base * (1.0 - min(1.0, max(0.0, p)))


def evaluate_schedules(step: int, settings: Any) -> ScheduleValues:
    """
    All scheduled values for a step.

    settings is any object exposing schedule_kind, learning_rate, cycle_steps,
    horizon_steps, smoothing, temperature and anneal_temperature
    (normally a SimulationSettings).
    """
    p = progress(step, settings.horizon_steps)
    return ScheduleValues(
        learning_rate=learning_rate(settings.schedule_kind, settings.learning_rate, step,
                                    settings.cycle_steps, settings.horizon_steps),
        smoothing=smoothing_factor(settings.smoothing, p),
        temperature=temperature(settings.temperature, p, settings.anneal_temperature),
        progress=p,
    )


def generate_schedule_data(kind: Union[ScheduleKind, str], base: float, cycle_steps: int,
                           horizon_steps: int, n_points: int = 200) -> Tuple[np.ndarray, np.ndarray]:
    """
    Sample a schedule across its horizon for charting.

    Returns:
        (steps, learning_rates) arrays of length n_points
    """
    steps = np.linspace(0, horizon_steps, int(n_points)).astype(int)
    lrs = np.array([learning_rate(kind, base, int(s), cycle_steps, horizon_steps) for s in steps])
    return steps, lrs
