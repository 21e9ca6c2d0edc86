"""
Tests for the Qt animation driver.
"""

import pytest

from wavescape.models.optimizer_state import SimulationState
from wavescape.profiling import TickProfiler
from wavescape.ui.animation_driver import AnimationDriver


@pytest.mark.qt
class TestAnimationDriver:
    """Test that the frame timer follows the controller state."""

    def test_timer_interval(self, qapp, controller):
        driver = AnimationDriver(controller, fps=60)
        assert driver._timer.interval() == 17
        driver.shutdown()

    def test_invalid_fps(self, qapp, controller):
        with pytest.raises(ValueError):
            AnimationDriver(controller, fps=0)

    def test_play_pause_controls_timer(self, qapp, controller):
        driver = AnimationDriver(controller)
        states = []
        driver.state_changed.connect(states.append)

        assert driver.play()
        assert driver.is_active
        assert driver.pause()
        assert not driver.is_active
        assert states == ["running", "idle"]
        driver.shutdown()

    def test_toggle(self, qapp, controller):
        driver = AnimationDriver(controller)
        assert driver.toggle() is True
        assert driver.toggle() is False
        driver.shutdown()

    def test_frame_ticks_once(self, qapp, controller):
        """Test that one timer frame runs exactly one tick."""
        driver = AnimationDriver(controller)
        snapshots = []
        driver.snapshot_ready.connect(snapshots.append)
        driver.play()
        driver._on_frame()
        driver._on_frame()

        assert driver.frames == 2
        assert controller.state.step_count == 2 * controller.settings.substeps_per_tick
        assert [s.event for s in snapshots] == ["play", "tick", "tick"]
        driver.shutdown()

    def test_frame_while_idle_stops_timer(self, qapp, controller):
        driver = AnimationDriver(controller)
        driver.play()
        controller.pause()
        driver._on_frame()
        assert driver.frames == 0
        assert not driver.is_active
        driver.shutdown()

    def test_reset_stops_timer(self, qapp, controller):
        driver = AnimationDriver(controller)
        driver.play()
        driver.reset_ball()
        assert controller.sim_state is SimulationState.IDLE
        assert not driver.is_active
        driver.shutdown()

    def test_regenerate_stops_timer(self, qapp, controller):
        driver = AnimationDriver(controller)
        driver.play()
        driver._on_frame()
        driver.regenerate_landscape()
        assert not driver.is_active
        assert controller.state.step_count == 0
        driver.shutdown()

    def test_step_rejected_while_running(self, qapp, controller):
        driver = AnimationDriver(controller)
        assert driver.step() is True
        driver.play()
        assert driver.step() is False
        driver.shutdown()

    def test_profiled_frames(self, qapp, controller):
        profiler = TickProfiler(warn_slow_ticks=False)
        profiler.start()
        driver = AnimationDriver(controller, profiler=profiler)
        driver.play()
        driver._on_frame()
        assert profiler.total_ticks == 1
        driver.shutdown()

    def test_shutdown_detaches(self, qapp, controller):
        driver = AnimationDriver(controller)
        snapshots = []
        driver.snapshot_ready.connect(snapshots.append)
        driver.shutdown()
        controller.step()
        assert snapshots == []
