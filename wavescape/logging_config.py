"""
Logging setup for WaveScape runs.

config/logging.json (a dictConfig document) is used when present; otherwise
stdout plus an optional log file are installed with basicConfig. The
per-substep engine loggers are held at WARNING unless DEBUG is requested.
"""

import json
import logging
import logging.config
import os
import sys
from typing import Optional, Union

LOG_FORMAT = '%(asctime)s - %(name)s - %(levelname)s - %(message)s'

DEFAULT_LOG_CONFIG = os.path.join(
    os.path.dirname(os.path.dirname(os.path.abspath(__file__))), 'config', 'logging.json'
)

ENGINE_LOGGERS = (
    'wavescape.engine.loss_surface',
    'wavescape.engine.thermal',
    'wavescape.engine.optimizers',
    'wavescape.plotting',
)


def setup_logging(config_path: Optional[str] = None,
                  level: Optional[Union[str, int]] = None,
                  log_file: Optional[str] = 'wavescape.log') -> None:
    """
    Install logging handlers for a run.

    Args:
        config_path: dictConfig JSON file; config/logging.json when omitted
        level: Root level override, e.g. the 'logging.level' config value
        log_file: File used by the fallback setup; None logs to stdout only

    Raises:
        ValueError: if level is not a known logging level
    """
    root_level = _parse_level(level) if level is not None else None

    if not _load_dict_config(config_path or DEFAULT_LOG_CONFIG):
        handlers = [logging.StreamHandler(sys.stdout)]
        if log_file:
            handlers.append(logging.FileHandler(log_file))
        logging.basicConfig(level=logging.INFO, format=LOG_FORMAT, handlers=handlers)

    if root_level is not None:
        logging.getLogger().setLevel(root_level)

    engine_level = logging.DEBUG if root_level == logging.DEBUG else logging.WARNING
    for name in ENGINE_LOGGERS:
        logging.getLogger(name).setLevel(engine_level)


def _load_dict_config(config_path: str) -> bool:
    if not os.path.exists(config_path):
        return False
    try:
        with open(config_path, 'r') as f:
            logging.config.dictConfig(json.load(f))
        return True
    except (json.JSONDecodeError, ValueError, KeyError) as e:
        # Handlers are not installed yet, so report on stderr directly
        print(f"Warning: ignoring logging config {config_path}: {e}", file=sys.stderr)
        return False


def _parse_level(level: Union[str, int]) -> int:
    if isinstance(level, int):
        return level
    value = logging.getLevelName(str(level).upper())
    if not isinstance(value, int):
        raise ValueError(f"Unknown logging level '{level}'")
    return value
