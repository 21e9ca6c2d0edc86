"""
UI package - Qt integration for WaveScape.
Contains the frame-pacing driver that ticks the simulation controller.
"""

from wavescape.ui.animation_driver import AnimationDriver

__all__ = ['AnimationDriver']
