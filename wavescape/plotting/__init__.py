"""
Plotting module for WaveScape.
Contains render-data helpers consumed by external renderers.
"""

from wavescape.plotting.render_data import (
    hud_text,
    line_colour,
    normalized_loss_grid,
    ridge_lines,
    trail_to_screen,
    world_to_screen,
)

__all__ = [
    'hud_text',
    'line_colour',
    'normalized_loss_grid',
    'ridge_lines',
    'trail_to_screen',
    'world_to_screen',
]
