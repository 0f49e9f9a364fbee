"""Configuration persistence and tunables.

This module handles:
- Loading/saving the config document (hub IP, lights, names, presets)
- Where that document lives on disk
- Network timeouts and limits used by the hub transport
"""

import copy
import json
import os
from pathlib import Path

from models.types import ConfigDocument

# Configuration file path, SUNFLOWER_CONFIG overrides the default
CONFIG_FILE = Path(os.environ.get('SUNFLOWER_CONFIG', Path.home() / '.sunflower' / 'config.json'))

# Hub network settings
HUB_PORT = 10003
DISCOVERY_ADDRESS = '239.255.255.250'
DISCOVERY_PORT = 1900
DISCOVERY_TIMEOUT = 3.0
HEARTBEAT_TIMEOUT = 3.0
COMMAND_TIMEOUT = 5.0

# Commands in flight to the hub at any one time
MAX_WORKERS = 4

# Brightness below this turns the light off
BRIGHTNESS_OFF_THRESHOLD = 0.08

DEFAULT_NAME_PREFIX = 'Yee'

_DEFAULT_CONFIG: ConfigDocument = {
    'initialised': False,
    'ip': '',
    'lightIDs': [],
    'names': {},
    'presetNames': [],
    'presets': {},
}


def default_config() -> ConfigDocument:
    """Return a fresh, empty config document."""
    return copy.deepcopy(_DEFAULT_CONFIG)


def load_config(path: Path | None = None) -> ConfigDocument:
    """Load the config document from disk.

    Args:
        path: File to read (defaults to CONFIG_FILE)

    Returns:
        The stored document with any missing keys filled from the defaults,
        or an empty document if the file does not exist
    """
    path = Path(path) if path else CONFIG_FILE
    config = default_config()
    if path.exists():
        with open(path, 'r') as f:
            config.update(json.load(f))
    return config


def save_config(config: ConfigDocument, path: Path | None = None):
    """Save the whole config document, replacing the previous file.

    Args:
        config: Configuration dict to save
        path: File to write (defaults to CONFIG_FILE)
    """
    path = Path(path) if path else CONFIG_FILE
    path.parent.mkdir(parents=True, exist_ok=True)

    with open(path, 'w') as f:
        json.dump(config, f, indent=2)
