"""
Pytest configuration and shared fixtures for WaveScape tests.
"""

import os
import sys
from pathlib import Path

# Add parent directory to path so we can import wavescape modules
project_root = Path(__file__).parent.parent
sys.path.insert(0, str(project_root))

# Qt tests run without a display
os.environ.setdefault("QT_QPA_PLATFORM", "offscreen")

import numpy as np
import pytest

from wavescape.models.landscape import (
    Domain,
    GaussianTerm,
    LandscapeParameters,
    QuadraticBowl,
    SinusoidTerm,
)


# Need a QApplication instance for PyQt tests
@pytest.fixture(scope="session")
def qapp():
    """Create QApplication instance for tests that need Qt."""
    from PyQt5.QtWidgets import QApplication
    app = QApplication.instance()
    if app is None:
        app = QApplication(sys.argv)
    yield app


@pytest.fixture
def rng():
    """Seeded generator so random tests are reproducible."""
    return np.random.default_rng(1234)


@pytest.fixture
def domain():
    return Domain(-5.0, 5.0)


@pytest.fixture
def bowl_landscape():
    """Pure bowl: no gaussians or sinusoids."""
    return LandscapeParameters.bowl(0.02, 0.02, 0.0)


@pytest.fixture
def rugged_landscape():
    """Hand-written landscape with wells, bumps and ripples."""
    return LandscapeParameters(
        quadratic=QuadraticBowl(xx=0.048, yy=0.021, xy=0.01),
        gaussians=(
            GaussianTerm(amp=1.2, cx=1.8, cy=-1.3, sigma_x=0.67, sigma_y=0.67),
            GaussianTerm(amp=0.9, cx=-1.4, cy=2.3, sigma_x=0.59, sigma_y=0.59),
            GaussianTerm(amp=-1.1, cx=-2.5, cy=-2.0, sigma_x=0.9, sigma_y=1.3),
        ),
        sinusoids=(
            SinusoidTerm(amp=0.9, freq_x=1.1, freq_y=0.7, phase_x=0.0, phase_y=0.0),
            SinusoidTerm(amp=0.3, freq_x=0.5, freq_y=1.6, phase_x=1.0, phase_y=2.0),
        ),
    )


@pytest.fixture
def controller(rugged_landscape):
    """SimulationController on the rugged landscape, starting at (3.6, -3.4)."""
    from wavescape.engine.simulation_controller import SimulationController
    return SimulationController(landscape=rugged_landscape, seed=7, start_position=(3.6, -3.4))


@pytest.fixture
def bowl_controller(bowl_landscape):
    """SimulationController on the pure bowl, starting at (3.6, -3.4)."""
    from wavescape.engine.simulation_controller import SimulationController
    return SimulationController(landscape=bowl_landscape, seed=7, start_position=(3.6, -3.4))


@pytest.fixture
def temp_config_file(tmp_path):
    """Provide a temporary config file path."""
    return tmp_path / "config" / "test_config.json"
