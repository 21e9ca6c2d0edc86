"""
SimulationController - owns and steps the WaveScape descent simulation.

The controller is an explicit two-state machine (IDLE / RUNNING) that owns
every piece of mutable simulation state. A host frame-pacing primitive
calls tick() once per frame; renderers subscribe and receive immutable
SimulationSnapshot objects, never the live state.
"""

import logging
import math
from dataclasses import dataclass, replace
from typing import Any, Dict, List, Optional, Tuple

import numpy as np

from wavescape.engine.loss_surface import LossSurface
from wavescape.engine.optimizers import AdamOptimizer, MomentumOptimizer, Optimizer, OptimizerKind
from wavescape.engine.schedules import (
    ScheduleKind,
    ScheduleValues,
    cycle_steps_from_seconds,
    evaluate_schedules,
)
from wavescape.engine.thermal import perturb
from wavescape.models.landscape import ColorScaleBounds, Domain, LandscapeParameters, generate_landscape
from wavescape.models.optimizer_state import (
    DEFAULT_TRAIL_CAPACITY,
    OptimizerState,
    SimulationSnapshot,
    SimulationState,
)
from wavescape.types import Point, PointLike, SnapshotCallback, Unsubscribe

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class SimulationSettings:
    """
    Immutable snapshot of every user-tunable parameter.

    Setters on the controller replace the whole object, so a tick always
    works from one consistent set of values.
    """
    optimizer_kind: OptimizerKind = OptimizerKind.SGD
    learning_rate: float = 0.08
    momentum: float = 0.85
    nesterov: bool = True
    temperature: float = 0.0
    anneal_temperature: bool = True
    smoothing: float = 0.0
    schedule_kind: ScheduleKind = ScheduleKind.COSINE_RESTARTS
    cycle_steps: int = 360
    horizon_cycles: int = 4
    substeps_per_tick: int = 2
    trail_capacity: int = DEFAULT_TRAIL_CAPACITY

    @property
    def horizon_steps(self) -> int:
        """Schedule horizon used for annealing: cycle length times horizon_cycles."""
        return self.cycle_steps * self.horizon_cycles


def _check_number(name: str, value: Any, minimum: Optional[float] = None,
                  maximum: Optional[float] = None) -> float:
    if isinstance(value, bool) or not isinstance(value, (int, float, np.floating, np.integer)):
        raise ValueError(f"{name} must be a number, got {value!r}")
    value = float(value)
    if not math.isfinite(value):
        raise ValueError(f"{name} must be finite, got {value!r}")
    if minimum is not None and value < minimum:
        raise ValueError(f"{name} must be >= {minimum}, got {value}")
    if maximum is not None and value > maximum:
        raise ValueError(f"{name} must be <= {maximum}, got {value}")
    return value


def _check_count(name: str, value: Any, minimum: int = 1) -> int:
    number = _check_number(name, value, minimum=minimum)
    if number != int(number):
        raise ValueError(f"{name} must be an integer, got {value!r}")
    return int(number)


class SimulationController:
    """
    Drives the point mass across the loss landscape.

    Each integration substep:
        1. evaluates the schedules at the current step count
        2. takes the gradient at the optimizer's evaluation point
        3. perturbs it with thermal noise when the temperature is positive
        4. applies the optimizer update (position clamped into the domain)
        5. increments the step count
        6. appends the new position to the bounded trail

    Attributes:
        domain: World bounds
        landscape: Current LandscapeParameters
        surface: LossSurface evaluating the current landscape
        settings: Current SimulationSettings
        state: OptimizerState (position, buffers, step count, trail)
        sim_state: SimulationState.IDLE or SimulationState.RUNNING
    """

    def __init__(self,
                 landscape: Optional[LandscapeParameters] = None,
                 settings: Optional[SimulationSettings] = None,
                 domain: Optional[Domain] = None,
                 rng: Optional[np.random.Generator] = None,
                 seed: Optional[int] = None,
                 start_position: Optional[PointLike] = None,
                 landscape_config: Optional[Dict[str, Any]] = None,
                 color_grid_resolution: int = 96,
                 adam_params: Optional[Dict[str, float]] = None) -> None:
        """
        Initialize the controller in the IDLE state.

        Args:
            landscape: Explicit landscape; sampled from rng when omitted
            settings: Initial settings; defaults when omitted
            domain: World bounds, [-5, 5]^2 by default
            rng: Random generator for landscapes, start positions and noise
            seed: Seed for a fresh generator when rng is not given
            start_position: Initial position; random in the domain when omitted
            landscape_config: 'landscape' config section used for regeneration
            color_grid_resolution: Grid size used for the color scale bounds
            adam_params: Optional beta1/beta2/epsilon for Adam
        """
        self.rng = rng if rng is not None else np.random.default_rng(seed)
        self.domain = domain or Domain()
        self.landscape_config = dict(landscape_config or {})
        self.color_grid_resolution = int(color_grid_resolution)
        self.settings = settings or SimulationSettings()

        self._optimizers: Dict[OptimizerKind, Optimizer] = {
            OptimizerKind.SGD: MomentumOptimizer(),
            OptimizerKind.ADAM: AdamOptimizer(**(adam_params or {})),
        }
        self._subscribers: List[SnapshotCallback] = []

        self.sim_state = SimulationState.IDLE
        self._install_landscape(landscape)

        self.state = OptimizerState(trail_capacity=self.settings.trail_capacity)
        self.state.reset(self._start_position(start_position))

    # ------------------------------------------------------------------
    # Construction helpers
    # ------------------------------------------------------------------

    @classmethod
    def from_config(cls, config: Any, seed: Optional[int] = None,
                    rng: Optional[np.random.Generator] = None) -> "SimulationController":
        """
        Build a controller from a ConfigManager.

        Args:
            config: ConfigManager (or anything with a dot-notation get())
            seed: Optional seed for reproducible runs
            rng: Optional explicit generator, takes precedence over seed
        """
        landscape_config = config.get("landscape", {}) or {}
        domain = Domain(landscape_config.get("world_min", -5.0), landscape_config.get("world_max", 5.0))
        controller = cls(
            domain=domain,
            rng=rng,
            seed=seed,
            start_position=config.get("animation.start_position"),
            landscape_config=landscape_config,
            color_grid_resolution=landscape_config.get("color_grid_resolution", 96),
            adam_params={
                "beta1": config.get("optimizer.adam_beta1", 0.9),
                "beta2": config.get("optimizer.adam_beta2", 0.999),
                "epsilon": config.get("optimizer.adam_epsilon", 1e-8),
            },
        )
        config.apply_to_controller(controller)
        return controller

    def _install_landscape(self, landscape: Optional[LandscapeParameters]) -> None:
        if landscape is None:
            landscape = generate_landscape(self.rng, self.landscape_config, self.domain)
        self.landscape = landscape
        self.surface = LossSurface(landscape)
        self._color_bounds = self.surface.color_scale_bounds(self.domain, self.color_grid_resolution)

    def _start_position(self, position: Optional[PointLike]) -> np.ndarray:
        if position is None:
            return self.domain.random_point(self.rng)
        point = np.asarray(position, dtype=float)
        if point.shape != (2,) or not np.all(np.isfinite(point)):
            raise ValueError(f"Start position must be two finite numbers, got {position!r}")
        return self.domain.clamp(point)

    # ------------------------------------------------------------------
    # State machine
    # ------------------------------------------------------------------

    @property
    def is_running(self) -> bool:
        return self.sim_state is SimulationState.RUNNING

    def play(self) -> bool:
        """IDLE -> RUNNING. Returns False if already running."""
        if self.is_running:
            logger.debug("play() ignored: simulation already running")
            return False
        self.sim_state = SimulationState.RUNNING
        logger.info(f"Simulation running from step {self.state.step_count}")
        self._publish(self.snapshot("play"))
        return True

    def pause(self) -> bool:
        """RUNNING -> IDLE. Returns False if already idle."""
        if not self.is_running:
            logger.debug("pause() ignored: simulation already idle")
            return False
        self.sim_state = SimulationState.IDLE
        logger.info(f"Simulation paused at step {self.state.step_count}")
        self._publish(self.snapshot("pause"))
        return True

    def step(self) -> bool:
        """
        Perform exactly one integration step. Only accepted while IDLE.

        Returns:
            True if a step was performed, False if rejected
        """
        if self.is_running:
            logger.warning("Single step rejected: pause the simulation first")
            return False
        self._integrate(self.settings)
        self._publish(self.snapshot("step"))
        return True

    def tick(self, settings: Optional[SimulationSettings] = None) -> SimulationSnapshot:
        """
        Advance one animation frame.

        While RUNNING, performs settings.substeps_per_tick integration substeps
        and notifies subscribers. While IDLE nothing is integrated and the
        current snapshot is returned.

        Args:
            settings: Explicit settings snapshot for this tick; the
                      controller's current settings when omitted

        Returns:
            SimulationSnapshot taken after the tick
        """
        if not self.is_running:
            return self.snapshot()

        settings = settings or self.settings
        for _ in range(settings.substeps_per_tick):
            self._integrate(settings)

        snap = self.snapshot("tick")
        self._publish(snap)
        return snap

    def reset_ball(self, position: Optional[PointLike] = None) -> None:
        """
        Re-randomize (or set) the position and clear all optimizer state.
        Keeps the landscape. Forces IDLE.
        """
        self.sim_state = SimulationState.IDLE
        self.state.reset(self._start_position(position))
        logger.info(f"Ball reset to ({self.state.position[0]:.3f}, {self.state.position[1]:.3f})")
        self._publish(self.snapshot("reset"))

    def regenerate_landscape(self, landscape: Optional[LandscapeParameters] = None,
                             position: Optional[PointLike] = None) -> None:
        """
        Replace the landscape and color bounds, then reset the ball. Forces IDLE.

        Args:
            landscape: Explicit replacement; a fresh random one when omitted
            position: Explicit start position; random when omitted
        """
        self.sim_state = SimulationState.IDLE
        self._install_landscape(landscape)
        self.state.reset(self._start_position(position))
        logger.info(f"Landscape regenerated: {len(self.landscape.gaussians)} gaussians, "
                    f"{len(self.landscape.sinusoids)} sinusoids")
        self._publish(self.snapshot("regenerate"))

    def _integrate(self, settings: SimulationSettings) -> None:
        """One integration substep."""
        state = self.state
        values = evaluate_schedules(state.step_count, settings)
        optimizer = self._optimizers[settings.optimizer_kind]

        point = optimizer.evaluation_point(state, settings)
        gradient = self.surface.gradient(point, values.smoothing)
        if not np.all(np.isfinite(gradient)):
            raise FloatingPointError(
                f"Non-finite gradient {gradient} at ({point[0]}, {point[1]}), step {state.step_count}"
            )

        if values.temperature > 0:
            gradient = perturb(gradient, values.temperature, values.learning_rate, self.rng)

        optimizer.update(state, gradient, values.learning_rate, settings, self.domain)
        state.step_count += 1
        state.push_trail(state.position)

    # ------------------------------------------------------------------
    # Parameter setters (take effect on the next substep, never reset)
    # ------------------------------------------------------------------

    def _update_settings(self, **changes) -> None:
        self.settings = replace(self.settings, **changes)
        logger.debug(f"Settings updated: {changes}")

    def set_optimizer_kind(self, kind) -> None:
        self._update_settings(optimizer_kind=OptimizerKind.parse(kind))

    def set_learning_rate(self, lr: float) -> None:
        self._update_settings(learning_rate=_check_number("learning_rate", lr, minimum=0.0))

    def set_momentum(self, momentum: float) -> None:
        self._update_settings(momentum=_check_number("momentum", momentum, minimum=0.0, maximum=0.999))

    def set_nesterov(self, enabled: bool) -> None:
        self._update_settings(nesterov=bool(enabled))

    def set_temperature(self, temperature: float) -> None:
        self._update_settings(temperature=_check_number("temperature", temperature, minimum=0.0))

    def set_anneal_temperature(self, enabled: bool) -> None:
        self._update_settings(anneal_temperature=bool(enabled))

    def set_smoothing(self, amount: float) -> None:
        self._update_settings(smoothing=_check_number("smoothing", amount, minimum=0.0, maximum=1.0))

    def set_schedule_kind(self, kind) -> None:
        self._update_settings(schedule_kind=ScheduleKind.parse(kind))

    def set_cycle_steps(self, steps: int) -> None:
        self._update_settings(cycle_steps=_check_count("cycle_steps", steps))

    def set_cycle_seconds(self, seconds: float, frame_rate: float = 60.0) -> None:
        seconds = _check_number("cycle_seconds", seconds, minimum=0.0)
        frame_rate = _check_number("frame_rate", frame_rate, minimum=1.0)
        self._update_settings(cycle_steps=cycle_steps_from_seconds(seconds, frame_rate))

    def set_horizon_cycles(self, cycles: int) -> None:
        self._update_settings(horizon_cycles=_check_count("horizon_cycles", cycles))

    def set_substeps(self, substeps: int) -> None:
        self._update_settings(substeps_per_tick=_check_count("substeps_per_tick", substeps))

    def set_trail_capacity(self, capacity: int) -> None:
        capacity = _check_count("trail_capacity", capacity)
        self._update_settings(trail_capacity=capacity)
        self.state.resize_trail(capacity)

    # ------------------------------------------------------------------
    # Observers
    # ------------------------------------------------------------------

    def subscribe(self, callback: SnapshotCallback) -> Unsubscribe:
        """
        Register a callback receiving a SimulationSnapshot after each change.

        Returns:
            Callable that removes the subscription
        """
        self._subscribers.append(callback)

        def unsubscribe():
            if callback in self._subscribers:
                self._subscribers.remove(callback)

        return unsubscribe

    def _publish(self, snapshot: SimulationSnapshot) -> None:
        for callback in list(self._subscribers):
            try:
                callback(snapshot)
            except Exception as e:
                logger.error(f"Snapshot subscriber {callback!r} failed: {e}")

    # ------------------------------------------------------------------
    # Render queries
    # ------------------------------------------------------------------

    def schedule_values(self) -> ScheduleValues:
        """Scheduled values that the next substep will use."""
        return evaluate_schedules(self.state.step_count, self.settings)

    def current_smoothing(self) -> float:
        return self.schedule_values().smoothing

    def sample_loss(self, x, y):
        """Loss at (x, y) under the current smoothing; accepts scalars or arrays."""
        return self.surface.evaluate(x, y, self.current_smoothing())

    def current_position(self) -> Point:
        return float(self.state.position[0]), float(self.state.position[1])

    def current_trail(self) -> Tuple[Point, ...]:
        return tuple(self.state.trail)

    def color_scale_bounds(self) -> ColorScaleBounds:
        return self._color_bounds

    def snapshot(self, event: Optional[str] = None) -> SimulationSnapshot:
        """Immutable copy of everything a renderer needs."""
        values = self.schedule_values()
        x, y = self.current_position()
        return SimulationSnapshot(
            state=self.sim_state,
            optimizer_kind=self.settings.optimizer_kind.value,
            step_count=self.state.step_count,
            position=(x, y),
            trail=self.current_trail(),
            color_bounds=self._color_bounds,
            loss=float(self.surface.evaluate(x, y, values.smoothing)),
            learning_rate=values.learning_rate,
            smoothing=values.smoothing,
            temperature=values.temperature,
            progress=values.progress,
            event=event,
        )

    def get_execution_status(self) -> Dict[str, Any]:
        """
        Get current execution status.

        Returns:
            dict: Status information
        """
        return {
            'state': self.sim_state.value,
            'step_count': self.state.step_count,
            'optimizer': self.settings.optimizer_kind.value,
            'schedule': self.settings.schedule_kind.value,
            'trail_length': len(self.state.trail),
        }
