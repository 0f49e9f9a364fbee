"""Preset (scene) capture and replay.

A preset is a named list of light snapshots taken from the hub. Activating
it sends each snapshot back with one combined colour + brightness command.
Lights not in the preset are left alone.

Activation is not atomic: if some lights fail, the others keep their new
state, and every failure is reported together in one PresetActivationError.
"""

from __future__ import annotations

import logging
import threading
from dataclasses import dataclass
from typing import Callable

from core.errors import HubCommandError, NotFoundError, PresetActivationError
from core.registry import LightRegistry
from core.transport import HubTransport
from models.types import ConfigDocument, LightSnapshot
from models.utils import find_similar_strings

logger = logging.getLogger(__name__)

# Selector meaning every light in the registry
ALL_LIGHTS = 'all'


@dataclass(frozen=True)
class Preset:
    name: str
    snapshots: list[LightSnapshot]


@dataclass(frozen=True)
class PendingDelete:
    """Carries the preset name from a delete request to its confirmation."""
    name: str


class PresetStore:
    """Saves, activates and deletes presets in the shared config document."""

    def __init__(self, config: ConfigDocument, transport: HubTransport,
                 registry: LightRegistry, lock: threading.RLock | None = None,
                 save: Callable[[ConfigDocument], None] | None = None):
        self.config = config
        self.transport = transport
        self.registry = registry
        self._lock = lock or threading.RLock()
        self._save = save or (lambda config: None)

    def names(self) -> list[str]:
        """Preset names in the order they were first saved."""
        with self._lock:
            return list(self.config['presetNames'])

    def get(self, name: str) -> Preset:
        """Return a preset by name.

        Raises:
            NotFoundError: If there is no preset called name
        """
        with self._lock:
            snapshots = self.config['presets'].get(name)
            if snapshots is None:
                raise NotFoundError('preset', name,
                                    find_similar_strings(name, self.config['presetNames']))
            return Preset(name=name, snapshots=[dict(s) for s in snapshots])

    def save(self, name: str, light_ids: list[str] | str = ALL_LIGHTS) -> Preset:
        """Capture the current state of some lights as a preset.

        Saving under an existing name replaces that preset but keeps its
        place in the listing.

        Args:
            name: Preset name
            light_ids: Ids or names of lights to include, or 'all'

        Returns:
            The saved preset

        Raises:
            ValueError: If name is blank
            NotFoundError: If a selected light isn't in the registry
        """
        name = name.strip()
        if not name:
            raise ValueError("Preset name must not be empty")

        if light_ids == ALL_LIGHTS:
            selected = self.registry.light_ids
        else:
            if isinstance(light_ids, str):
                light_ids = [light_ids]
            selected = [self.registry.resolve(i) for i in light_ids]

        live = {s['id']: s for s in self.transport.snapshot(self.registry.ip)}
        snapshots: list[LightSnapshot] = []
        for light_id in selected:
            snap = live.get(light_id)
            if snap is None:
                logger.warning("Light %s not reported by hub, left out of preset %r", light_id, name)
                continue
            snapshots.append({'id': light_id, 'r': snap['r'], 'g': snap['g'],
                              'b': snap['b'], 'level': snap['level']})

        with self._lock:
            if name not in self.config['presets']:
                self.config['presetNames'].append(name)
            self.config['presets'][name] = snapshots
            self._save(self.config)

        logger.info("Saved preset %r with %d lights", name, len(snapshots))
        return Preset(name=name, snapshots=snapshots)

    def activate(self, name: str) -> Preset:
        """Send every snapshot in a preset to the hub.

        All lights are attempted even if some fail.

        Raises:
            NotFoundError: If there is no preset called name
            PresetActivationError: Listing every light that failed
        """
        preset = self.get(name)
        ip = self.registry.ip

        def send(snap: LightSnapshot):
            self.transport.set_light(ip, snap['id'], snap['r'], snap['g'], snap['b'], snap['level'])

        failures: list[tuple[str, HubCommandError]] = []
        for snap, _, error in self.transport.fan_out(send, preset.snapshots):
            if error is None:
                continue
            if not isinstance(error, HubCommandError):
                raise error
            failures.append((snap['id'], error))

        if failures:
            logger.warning("Preset %r: %d of %d lights failed", name, len(failures), len(preset.snapshots))
            raise PresetActivationError(name, failures)
        return preset

    def request_delete(self, name: str) -> PendingDelete:
        """Check a preset exists and return the payload to confirm deleting it.

        Raises:
            NotFoundError: If there is no preset called name
        """
        return PendingDelete(self.get(name).name)

    def confirm_delete(self, pending: PendingDelete):
        self.delete(pending.name)

    def delete(self, name: str):
        """Remove a preset.

        Raises:
            NotFoundError: If there is no preset called name (nothing changes)
        """
        with self._lock:
            if name not in self.config['presets']:
                raise NotFoundError('preset', name,
                                    find_similar_strings(name, self.config['presetNames']))
            del self.config['presets'][name]
            self.config['presetNames'].remove(name)
            self._save(self.config)
        logger.info("Deleted preset %r", name)
