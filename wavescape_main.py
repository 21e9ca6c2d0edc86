"""
WaveScape - headless runner.

Runs the descent simulation under the Qt frame timer for a fixed number of
frames and logs the HUD readout, so optimizer/schedule/noise combinations
can be compared without a window.
"""

import logging
import sys

from PyQt5.QtCore import QCoreApplication

from wavescape.config_manager import reload_config
from wavescape.engine.simulation_controller import SimulationController
from wavescape.logging_config import setup_logging
from wavescape.plotting.render_data import hud_text
from wavescape.profiling import TickProfiler
from wavescape.ui.animation_driver import AnimationDriver

logger = logging.getLogger(__name__)


def build_parser():
    import argparse

    parser = argparse.ArgumentParser(description='Run a WaveScape descent without a window')
    parser.add_argument('--config', default=None, help='Path to a JSON config (default: config/default_config.json)')
    parser.add_argument('--frames', type=int, default=300, help='Number of animation frames to run')
    parser.add_argument('--seed', type=int, default=None, help='Seed for landscape, start point and noise')
    parser.add_argument('--optimizer', choices=['sgd', 'adam'], help='Override optimizer kind')
    parser.add_argument('--lr', type=float, help='Override base learning rate')
    parser.add_argument('--schedule', help='Override learning-rate schedule')
    parser.add_argument('--temperature', type=float, help='Override Langevin temperature')
    parser.add_argument('--smoothing', type=float, help='Override initial smoothing amount')
    parser.add_argument('--log-every', type=int, default=30, help='Log the HUD every N frames')
    parser.add_argument('--profile', action='store_true', help='Report tick timings at the end')
    return parser


def apply_overrides(controller, args):
    """Apply command line overrides on top of the config."""
    if args.optimizer:
        controller.set_optimizer_kind(args.optimizer)
    if args.lr is not None:
        controller.set_learning_rate(args.lr)
    if args.schedule:
        controller.set_schedule_kind(args.schedule)
    if args.temperature is not None:
        controller.set_temperature(args.temperature)
    if args.smoothing is not None:
        controller.set_smoothing(args.smoothing)


def main(argv=None):
    """Main application entry point."""
    parser = build_parser()
    args = parser.parse_args(argv)
    if args.frames < 1:
        parser.error("--frames must be at least 1")
    config = reload_config(args.config)
    valid, errors = config.validate_config()
    setup_logging(
        level=config.get("logging.level") if valid else None,
        log_file=config.get("logging.log_file") if config.get("logging.log_to_file", True) else None,
    )
    if not valid:
        for error in errors:
            logger.error(f"Config error: {error}")
        return 1

    app = QCoreApplication.instance() or QCoreApplication(sys.argv if argv is None else ['wavescape'])

    try:
        controller = SimulationController.from_config(config, seed=args.seed)
        apply_overrides(controller, args)
    except ValueError as e:
        logger.error(f"Could not start simulation: {e}")
        return 1

    profiler = None
    if args.profile or config.get("performance.enable_profiling", False):
        profiler = TickProfiler(
            slow_tick_threshold=config.get("performance.slow_tick_threshold", 0.016),
            warn_slow_ticks=config.get("performance.warn_slow_ticks", True),
        )
        profiler.start()

    driver = AnimationDriver(controller, fps=config.get("animation.fps", 60), profiler=profiler)

    def on_snapshot(snapshot):
        if snapshot.event != "tick":
            return
        if driver.frames % max(1, args.log_every) == 0:
            logger.info(f"step {snapshot.step_count:>6}  lr={snapshot.learning_rate:.4f}  "
                        f"T={snapshot.temperature:.3f}  s={snapshot.smoothing:.3f}  {hud_text(snapshot)}")
        if driver.frames + 1 >= args.frames:
            driver.pause()
            app.quit()

    driver.snapshot_ready.connect(on_snapshot)
    driver.play()
    app.exec_()

    final = controller.snapshot()
    logger.info(f"Finished after {final.step_count} steps: {hud_text(final)}")
    if profiler is not None:
        profiler.stop()
        profiler.report()
    driver.shutdown()
    return 0


if __name__ == "__main__":
    sys.exit(main())
