"""
Models package - Data layer for WaveScape.
Contains the landscape description and the optimizer state containers.
"""

from wavescape.models.landscape import (
    ColorScaleBounds,
    Domain,
    GaussianTerm,
    LandscapeError,
    LandscapeParameters,
    QuadraticBowl,
    SinusoidTerm,
    generate_landscape,
)
from wavescape.models.optimizer_state import OptimizerState, SimulationSnapshot, SimulationState

__all__ = [
    'ColorScaleBounds',
    'Domain',
    'GaussianTerm',
    'LandscapeError',
    'LandscapeParameters',
    'QuadraticBowl',
    'SinusoidTerm',
    'generate_landscape',
    'OptimizerState',
    'SimulationSnapshot',
    'SimulationState',
]
