"""
Engine package - Simulation logic for WaveScape.
Contains the loss surface, schedules, thermal noise, optimizers and the
simulation controller that drives them.
"""

from wavescape.engine.loss_surface import LossSurface
from wavescape.engine.optimizers import (
    AdamOptimizer,
    MomentumOptimizer,
    Optimizer,
    OptimizerKind,
    create_optimizer,
)
from wavescape.engine.schedules import ScheduleKind, ScheduleValues, evaluate_schedules
from wavescape.engine.simulation_controller import SimulationController, SimulationSettings
from wavescape.engine.thermal import perturb

__all__ = [
    'LossSurface',
    'AdamOptimizer',
    'MomentumOptimizer',
    'Optimizer',
    'OptimizerKind',
    'create_optimizer',
    'ScheduleKind',
    'ScheduleValues',
    'evaluate_schedules',
    'SimulationController',
    'SimulationSettings',
    'perturb',
]
