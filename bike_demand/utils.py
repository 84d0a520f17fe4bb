import copy
import logging
import os
from pathlib import Path

import yaml

from config.settings import DEFAULT_CONFIG, PROJECT_ROOT

logger = logging.getLogger(__name__)


def load_config(config_path=None):
    """
    Load the analysis configuration from YAML and merge it over the defaults.

    Each top-level section of the YAML file updates the matching section of
    ``DEFAULT_CONFIG``; keys not given keep their default value.

    Parameters:
    -----------
    config_path : str or Path, optional
        Path to a YAML file. ``None`` returns a copy of the defaults.

    Returns:
    --------
    dict : Merged configuration
    """
    config = copy.deepcopy(DEFAULT_CONFIG)
    if config_path is None:
        return config

    config_path = Path(config_path)
    if not config_path.exists():
        # Scripts in notebooks/ run one level below the project root
        candidate = Path("..") / config_path
        if candidate.exists():
            config_path = candidate
        else:
            raise FileNotFoundError(f"Config file not found: {config_path}")

    with open(config_path, 'r') as f:
        user_config = yaml.safe_load(f) or {}

    if not isinstance(user_config, dict):
        raise ValueError(f"Config file must be a mapping of sections: {config_path}")

    unknown = set(user_config) - set(config)
    if unknown:
        raise ValueError(
            f"Unknown config section(s): {', '.join(sorted(unknown))}. "
            f"Valid sections: {', '.join(config.keys())}"
        )

    for section, values in user_config.items():
        if values is None:
            continue
        if not isinstance(values, dict):
            raise ValueError(f"Config section '{section}' must be a mapping")
        config[section].update(values)

    logger.info(f"✓ Loaded config from: {config_path}")
    return config


def resolve_path(path):
    """Resolve a relative path against the cwd first, then the project root."""
    path = Path(path)
    if path.is_absolute() or path.exists():
        return path
    return PROJECT_ROOT / path


def ensure_dir(path):
    """Create a directory (and parents) if missing and return it as a Path."""
    path = Path(path)
    os.makedirs(path, exist_ok=True)
    return path
