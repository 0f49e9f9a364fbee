"""SunflowerController: the driver facade over the hub and its lights.

This module wires the transport, registry, state synchroniser and preset
store together around one config document and one lock, and persists the
document after every change.
"""

import logging
import threading
from pathlib import Path

from core.config import load_config, save_config, DISCOVERY_TIMEOUT, HEARTBEAT_TIMEOUT
from core.errors import HubUnreachable
from core.presets import PresetStore
from core.registry import LightRegistry
from core.sync import StateSynchronizer
from core.transport import HubTransport
from models.light import Light, LightRequest

logger = logging.getLogger(__name__)


class SunflowerController:
    """Manages one Sunflower hub: its lights, their state and saved presets."""

    def __init__(self, config_path: Path | None = None, transport: HubTransport | None = None):
        """Initialise SunflowerController.

        Args:
            config_path: Config document location (defaults to CONFIG_FILE)
            transport: Hub transport (a new HubTransport if not given)
        """
        self.config_path = config_path
        self.config = load_config(config_path)
        self.transport = transport or HubTransport()

        # Registry, presets and light state all mutate under this lock
        self.lock = threading.RLock()

        self.registry = LightRegistry(self.config, self.lock, self._persist)
        self.sync = StateSynchronizer(self.transport, self.registry, self.lock)
        self.presets = PresetStore(self.config, self.transport, self.registry,
                                   self.lock, self._persist)

    def _persist(self, config):
        save_config(config, self.config_path)

    def start(self, timeout: float = DISCOVERY_TIMEOUT) -> bool:
        """Scan for the hub on first run. Returns True if initialised."""
        return self.registry.ensure_initialised(self.transport, timeout)

    def check_hub(self, timeout: float = HEARTBEAT_TIMEOUT):
        """Heartbeat the configured hub.

        Raises:
            HubUnreachable: If no IP is set or the hub doesn't answer
        """
        if not self.registry.ip:
            raise HubUnreachable('', "No hub IP configured")
        self.transport.heartbeat(self.registry.ip, timeout)

    def scan(self, timeout: float = DISCOVERY_TIMEOUT):
        """Discover the hub and merge in any new lights."""
        return self.registry.scan_and_merge(self.transport, timeout=timeout)

    def set_ip(self, ip: str):
        """Use a hub IP given by the operator and scan it for lights."""
        return self.registry.set_ip(ip, self.transport)

    def reset(self, keep_presets: bool = True):
        return self.registry.reset(keep_presets)

    def rename(self, names: dict[str, str]):
        return self.registry.rename(names)

    def apply(self, identifier: str, request: LightRequest) -> Light:
        return self.sync.apply(identifier, request)

    def apply_batch(self, requests: dict[str, LightRequest]) -> dict[str, Light]:
        return self.sync.apply_batch(requests)

    def all_off(self):
        self.sync.all_off()
