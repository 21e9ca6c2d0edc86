"""
Animation Driver - Qt frame pacing for the simulation controller.

A QTimer plays the role of the host's frame-pacing primitive: while the
controller is RUNNING it fires once per frame, runs exactly one tick and
emits the resulting snapshot. Everything happens on the Qt main thread.
"""

import logging
from typing import Optional

from PyQt5.QtCore import QObject, QTimer, pyqtSignal

from wavescape.engine.simulation_controller import SimulationController
from wavescape.profiling import TickProfiler

logger = logging.getLogger(__name__)


class AnimationDriver(QObject):
    """
    Bridges SimulationController to Qt.

    Control calls (play/pause/step/reset/regenerate) go through the driver so
    the timer follows the controller state; every snapshot the controller
    publishes is re-emitted as snapshot_ready.
    """

    snapshot_ready = pyqtSignal(object)  # SimulationSnapshot
    state_changed = pyqtSignal(str)  # 'idle' / 'running'

    def __init__(self, controller: SimulationController, fps: int = 60,
                 profiler: Optional[TickProfiler] = None, parent=None):
        super().__init__(parent)
        if fps < 1:
            raise ValueError(f"fps must be at least 1, got {fps}")
        self.controller = controller
        self.fps = int(fps)
        self.profiler = profiler
        self.frames = 0

        self._timer = QTimer(self)
        self._timer.setInterval(max(1, int(round(1000 / self.fps))))
        self._timer.timeout.connect(self._on_frame)

        self._unsubscribe = controller.subscribe(self.snapshot_ready.emit)

    @property
    def is_active(self) -> bool:
        """True while the frame timer is scheduled."""
        return self._timer.isActive()

    def play(self) -> bool:
        started = self.controller.play()
        self._sync_timer()
        return started

    def pause(self) -> bool:
        paused = self.controller.pause()
        self._sync_timer()
        return paused

    def toggle(self) -> bool:
        """Run/Pause button behaviour. Returns True if now running."""
        if self.controller.is_running:
            self.pause()
        else:
            self.play()
        return self.controller.is_running

    def step(self) -> bool:
        return self.controller.step()

    def reset_ball(self):
        self.controller.reset_ball()
        self._sync_timer()

    def regenerate_landscape(self):
        self.controller.regenerate_landscape()
        self._sync_timer()

    def shutdown(self):
        """Stop the timer and detach from the controller."""
        self._timer.stop()
        self._unsubscribe()

    def _sync_timer(self):
        if self.controller.is_running and not self._timer.isActive():
            self._timer.start()
            self.state_changed.emit(self.controller.sim_state.value)
            logger.debug(f"Frame timer started at {self.fps} fps")
        elif not self.controller.is_running and self._timer.isActive():
            self._timer.stop()
            self.state_changed.emit(self.controller.sim_state.value)
            logger.debug("Frame timer stopped")

    def _on_frame(self):
        """One frame: a full tick, then stop scheduling if the controller went idle."""
        if not self.controller.is_running:
            self._sync_timer()
            return

        if self.profiler is not None:
            with self.profiler.measure():
                self.controller.tick()
        else:
            self.controller.tick()
        self.frames += 1
