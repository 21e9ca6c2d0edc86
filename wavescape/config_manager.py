"""
Simple configuration management for WaveScape.

Settings live in config/default_config.json; anything missing from the file
falls back to the built-in defaults below.
"""

import copy
import json
import math
import os
from typing import Dict, Any, Optional
import logging

logger = logging.getLogger(__name__)

_PROJECT_ROOT = os.path.dirname(os.path.dirname(os.path.abspath(__file__)))
DEFAULT_CONFIG_FILE = os.path.join(_PROJECT_ROOT, "config", "default_config.json")


class ConfigManager:
    """Simple configuration manager for WaveScape settings."""

    def __init__(self, config_file: Optional[str] = None):
        self.config_file = config_file or DEFAULT_CONFIG_FILE
        self._config: Dict[str, Any] = {}
        self._load_config()

    def _load_config(self) -> None:
        """Load configuration from file, layered over the defaults."""
        self._config = self._get_default_config()
        try:
            if os.path.exists(self.config_file):
                with open(self.config_file, 'r') as f:
                    loaded = json.load(f)
                _deep_update(self._config, loaded)
                logger.info(f"Configuration loaded from {self.config_file}")
            else:
                logger.warning(f"Configuration file {self.config_file} not found, using defaults")
        except (OSError, json.JSONDecodeError) as e:
            logger.error(f"Error loading configuration: {e}")
            self._config = self._get_default_config()

    def _get_default_config(self) -> Dict[str, Any]:
        """Get default configuration."""
        return {
            "landscape": {
                "world_min": -5.0,
                "world_max": 5.0,
                "gaussian_count": [4, 7],
                "gaussian_amplitude": [0.5, 1.4],
                "gaussian_sigma": [0.5, 1.5],
                "gaussian_center_fraction": 0.8,
                "sinusoid_count": [2, 4],
                "sinusoid_amplitude": [0.15, 0.6],
                "sinusoid_frequency": [0.4, 1.8],
                "quadratic_diagonal": [0.02, 0.08],
                "quadratic_cross": [-0.02, 0.02],
                "color_grid_resolution": 96
            },
            "optimizer": {
                "kind": "sgd",
                "learning_rate": 0.08,
                "momentum": 0.85,
                "nesterov": True,
                "adam_beta1": 0.9,
                "adam_beta2": 0.999,
                "adam_epsilon": 1e-8
            },
            "schedule": {
                "kind": "cosine-restarts",
                "cycle_seconds": 6.0,
                "frame_rate": 60,
                "horizon_cycles": 4,
                "available_kinds": [
                    "constant", "linear", "cosine", "cosine-restarts",
                    "step", "exponential", "warmup-cosine", "one-cycle"
                ]
            },
            "thermal": {
                "temperature": 0.0,
                "anneal": True
            },
            "smoothing": {
                "amount": 0.0
            },
            "animation": {
                "fps": 60,
                "substeps_per_tick": 2,
                "trail_capacity": 600,
                "start_position": [3.6, -3.4]
            },
            "logging": {
                "level": "INFO",
                "log_to_file": True,
                "log_file": "wavescape.log"
            },
            "performance": {
                "warn_slow_ticks": True,
                "slow_tick_threshold": 0.016,
                "enable_profiling": False
            }
        }

    def get(self, key_path: str, default: Any = None) -> Any:
        """
        Get configuration value using dot notation.

        Args:
            key_path: Path to the configuration key (e.g., "optimizer.learning_rate")
            default: Default value if key not found

        Returns:
            Configuration value or default
        """
        value = self._config
        for key in key_path.split('.'):
            if isinstance(value, dict) and key in value:
                value = value[key]
            else:
                return default
        return value

    def set(self, key_path: str, value: Any) -> bool:
        """
        Set configuration value using dot notation.

        Args:
            key_path: Path to the configuration key
            value: Value to set

        Returns:
            True if successful, False otherwise
        """
        keys = key_path.split('.')
        config_ref = self._config

        for key in keys[:-1]:
            if key not in config_ref:
                config_ref[key] = {}
            config_ref = config_ref[key]
            if not isinstance(config_ref, dict):
                logger.error(f"Error setting config key {key_path}: '{key}' is not a section")
                return False

        config_ref[keys[-1]] = value
        return True

    def save(self) -> bool:
        """Save current configuration to file."""
        try:
            directory = os.path.dirname(self.config_file)
            if directory:
                os.makedirs(directory, exist_ok=True)

            with open(self.config_file, 'w') as f:
                json.dump(self._config, f, indent=2)

            logger.info(f"Configuration saved to {self.config_file}")
            return True

        except (OSError, TypeError) as e:
            logger.error(f"Error saving configuration: {e}")
            return False

    def apply_to_controller(self, controller: Any) -> None:
        """Push optimizer, schedule, thermal and animation settings onto a controller."""
        controller.set_optimizer_kind(self.get("optimizer.kind", "sgd"))
        controller.set_learning_rate(self.get("optimizer.learning_rate", 0.08))
        controller.set_momentum(self.get("optimizer.momentum", 0.85))
        controller.set_nesterov(self.get("optimizer.nesterov", True))
        controller.set_schedule_kind(self.get("schedule.kind", "cosine-restarts"))
        controller.set_cycle_seconds(
            self.get("schedule.cycle_seconds", 6.0),
            frame_rate=self.get("schedule.frame_rate", 60)
        )
        controller.set_horizon_cycles(self.get("schedule.horizon_cycles", 4))
        controller.set_temperature(self.get("thermal.temperature", 0.0))
        controller.set_anneal_temperature(self.get("thermal.anneal", True))
        controller.set_smoothing(self.get("smoothing.amount", 0.0))
        controller.set_substeps(self.get("animation.substeps_per_tick", 2))
        controller.set_trail_capacity(self.get("animation.trail_capacity", 600))
        logger.info("Configuration applied to simulation controller")

    def validate_config(self) -> tuple[bool, list[str]]:
        """Validate current configuration."""
        errors = []

        world_min = self.get("landscape.world_min")
        world_max = self.get("landscape.world_max")
        if world_min is not None and world_max is not None and world_min >= world_max:
            errors.append("landscape.world_min must be smaller than landscape.world_max")

        for key in ("landscape.gaussian_count", "landscape.sinusoid_count",
                    "landscape.gaussian_amplitude", "landscape.gaussian_sigma",
                    "landscape.sinusoid_amplitude", "landscape.sinusoid_frequency",
                    "landscape.quadratic_diagonal", "landscape.quadratic_cross"):
            bounds = self.get(key)
            if bounds is None:
                continue
            if not isinstance(bounds, (list, tuple)) or len(bounds) != 2 or bounds[0] > bounds[1]:
                errors.append(f"{key} must be a [low, high] pair with low <= high")

        diagonal = self.get("landscape.quadratic_diagonal")
        if isinstance(diagonal, (list, tuple)) and len(diagonal) == 2 and diagonal[0] <= 0:
            errors.append("landscape.quadratic_diagonal must be strictly positive")

        sigma = self.get("landscape.gaussian_sigma")
        if isinstance(sigma, (list, tuple)) and len(sigma) == 2 and sigma[0] <= 0:
            errors.append("landscape.gaussian_sigma must be strictly positive")

        lr = self.get("optimizer.learning_rate")
        if lr is not None and (not _is_finite_number(lr) or lr < 0):
            errors.append("optimizer.learning_rate must be a finite non-negative number")

        momentum = self.get("optimizer.momentum")
        if momentum is not None and (not _is_finite_number(momentum) or not 0.0 <= momentum < 1.0):
            errors.append("optimizer.momentum should be in [0, 1)")

        kind = self.get("optimizer.kind")
        if kind is not None and kind not in ("sgd", "adam"):
            errors.append(f"Invalid optimizer '{kind}', must be one of ['sgd', 'adam']")

        schedule = self.get("schedule.kind")
        available = self.get("schedule.available_kinds", [])
        if schedule and available and schedule not in available:
            errors.append(f"Invalid schedule '{schedule}', must be one of {available}")

        cycle = self.get("schedule.cycle_seconds")
        if cycle is not None and (not _is_finite_number(cycle) or cycle <= 0):
            errors.append("schedule.cycle_seconds must be positive")

        temperature = self.get("thermal.temperature")
        if temperature is not None and (not _is_finite_number(temperature) or temperature < 0):
            errors.append("thermal.temperature must be a finite non-negative number")

        amount = self.get("smoothing.amount")
        if amount is not None and (not _is_finite_number(amount) or not 0.0 <= amount <= 1.0):
            errors.append("smoothing.amount must be in [0, 1]")

        fps = self.get("animation.fps")
        if fps is not None and (fps < 1 or fps > 240):
            errors.append("animation.fps should be between 1 and 240")

        capacity = self.get("animation.trail_capacity")
        if capacity is not None and capacity < 1:
            errors.append("animation.trail_capacity must be at least 1")

        substeps = self.get("animation.substeps_per_tick")
        if substeps is not None and substeps < 1:
            errors.append("animation.substeps_per_tick must be at least 1")

        level = self.get("logging.level")
        if level is not None and str(level).upper() not in ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"):
            errors.append(f"Invalid logging.level '{level}'")

        return len(errors) == 0, errors

    def get_all(self) -> Dict[str, Any]:
        """Get all configuration as dictionary."""
        return copy.deepcopy(self._config)

    def reset_to_defaults(self) -> None:
        """Reset configuration to defaults."""
        self._config = self._get_default_config()
        logger.info("Configuration reset to defaults")


def _deep_update(target: Dict[str, Any], source: Dict[str, Any]) -> None:
    for key, value in source.items():
        if isinstance(value, dict) and isinstance(target.get(key), dict):
            _deep_update(target[key], value)
        else:
            target[key] = value


def _is_finite_number(value: Any) -> bool:
    return isinstance(value, (int, float)) and not isinstance(value, bool) and math.isfinite(value)


# Global configuration instance for easy access
_global_config: Optional[ConfigManager] = None


def get_config() -> ConfigManager:
    """Get global configuration instance."""
    global _global_config
    if _global_config is None:
        _global_config = ConfigManager()
    return _global_config


def reload_config(config_file: Optional[str] = None) -> ConfigManager:
    """Reload configuration from file."""
    global _global_config
    _global_config = ConfigManager(config_file)
    return _global_config
