"""Light registry: which lights exist, what they're called, and where the hub is.

The registry is the durable part of the light model. It lives in the shared
config document and is saved in full after every change.
"""

from __future__ import annotations

import logging
import threading
from typing import Callable

from core.config import DEFAULT_NAME_PREFIX, DISCOVERY_TIMEOUT, default_config
from core.errors import DiscoveryError, HubCommandError, NotFoundError
from core.transport import HubTransport
from models.types import ConfigDocument, LightSnapshot
from models.utils import find_similar_strings

logger = logging.getLogger(__name__)


def default_name(light_id: str) -> str:
    return f"{DEFAULT_NAME_PREFIX}{light_id}"


class LightRegistry:
    """Owns the known light ids, their display names and the hub IP."""

    def __init__(self, config: ConfigDocument, lock: threading.RLock | None = None,
                 save: Callable[[ConfigDocument], None] | None = None):
        """Initialise LightRegistry.

        Args:
            config: Config document, shared with the preset store
            lock: Lock guarding the config document
            save: Called with the whole document after every change
        """
        self.config = config
        self._lock = lock or threading.RLock()
        self._save = save or (lambda config: None)

    @property
    def ip(self) -> str:
        return self.config['ip']

    @property
    def initialised(self) -> bool:
        return self.config['initialised']

    @property
    def light_ids(self) -> list[str]:
        with self._lock:
            return list(self.config['lightIDs'])

    @property
    def names(self) -> dict[str, str]:
        with self._lock:
            return dict(self.config['names'])

    def name_of(self, light_id: str) -> str:
        with self._lock:
            return self.config['names'].get(light_id, default_name(light_id))

    def merge(self, ip: str, lights: list[LightSnapshot]) -> list[str]:
        """Merge a hub light list into the registry.

        New ids are appended in hub order with a default name. Known ids keep
        their names, and ids missing from the list are kept (the light may
        just be offline).

        Returns:
            The ids that were added
        """
        with self._lock:
            known = set(self.config['lightIDs'])
            added = []
            for light in lights:
                light_id = light['id']
                if light_id in known:
                    continue
                known.add(light_id)
                self.config['lightIDs'].append(light_id)
                self.config['names'].setdefault(light_id, default_name(light_id))
                added.append(light_id)

            self.config['ip'] = ip
            self.config['initialised'] = True
            self._save(self.config)

        logger.info("Hub %s: %d lights, %d new", ip, len(lights), len(added))
        return added

    def scan_and_merge(self, transport: HubTransport, ip: str | None = None,
                       timeout: float = DISCOVERY_TIMEOUT) -> ConfigDocument:
        """Find the hub, read its lights and merge them in.

        Args:
            transport: Transport used for discovery and the light list
            ip: Hub IP to use instead of discovering it
            timeout: Discovery timeout in seconds

        Raises:
            DiscoveryError: If ip is not given and no hub answers
        """
        if not ip:
            ip = transport.discover(timeout)
        lights = transport.snapshot(ip)
        self.merge(ip, lights)
        return self.config

    def set_ip(self, ip: str, transport: HubTransport) -> ConfigDocument:
        """Use an operator-supplied hub IP and scan it for lights."""
        return self.scan_and_merge(transport, ip=ip.strip())

    def ensure_initialised(self, transport: HubTransport,
                           timeout: float = DISCOVERY_TIMEOUT) -> bool:
        """Scan for the hub on first run.

        A failed discovery or light list query is not fatal: the registry
        stays uninitialised and the operator can scan again or set the IP.

        Returns:
            True if the registry is initialised afterwards
        """
        if self.initialised:
            return True
        try:
            self.scan_and_merge(transport, timeout=timeout)
        except (DiscoveryError, HubCommandError) as e:
            logger.warning("Hub scan failed: %s", e.technical_message)
            return False
        return True

    def rename(self, names: dict[str, str]) -> ConfigDocument:
        """Change display names for the given ids.

        Ids not in names keep their current name. A blank name restores the
        default name. Ids that aren't known lights are skipped.
        """
        with self._lock:
            for light_id, new_name in names.items():
                if light_id not in self.config['names']:
                    logger.warning("Not renaming unknown light %s", light_id)
                    continue
                new_name = new_name.strip()
                self.config['names'][light_id] = new_name or default_name(light_id)
            self._save(self.config)
            return self.config

    def reset(self, keep_presets: bool = True) -> ConfigDocument:
        """Forget the hub and every light, optionally keeping presets."""
        with self._lock:
            fresh = default_config()
            if keep_presets:
                fresh['presetNames'] = self.config['presetNames']
                fresh['presets'] = self.config['presets']
            # Replace in place, the preset store holds the same dict
            self.config.clear()
            self.config.update(fresh)
            self._save(self.config)
            logger.info("Registry reset (presets %s)", 'kept' if keep_presets else 'discarded')
            return self.config

    def resolve(self, identifier: str) -> str:
        """Find a light id from an id or a display name (case-insensitive).

        Raises:
            NotFoundError: If nothing matches
        """
        with self._lock:
            if identifier in self.config['names']:
                return identifier
            wanted = identifier.lower()
            for light_id in self.config['lightIDs']:
                if self.config['names'].get(light_id, '').lower() == wanted:
                    return light_id
            candidates = list(self.config['names'].values()) + self.config['lightIDs']
        raise NotFoundError('light', identifier, find_similar_strings(identifier, candidates))
