"""State synchronisation between requested light state and the hub.

The coupling between on/off and brightness lives in one pure function,
transition(), which works out the resulting light state and the hub
commands needed to get there. StateSynchronizer runs those commands and
keeps the last known state of each light.

Local state is optimistic: it is updated as soon as a request is accepted.
If a command then fails, the light is flagged stale and the error is
raised; reconcile() later replaces stale values with what the hub reports.
"""

from __future__ import annotations

import logging
import threading
from collections import defaultdict
from contextlib import ExitStack
from typing import NamedTuple

from core.config import BRIGHTNESS_OFF_THRESHOLD
from core.errors import BatchApplyError, HubCommandError
from core.registry import LightRegistry
from core.transport import HubTransport, level_to_brightness
from models.light import Capability, Light, LightRequest

logger = logging.getLogger(__name__)


class Command(NamedTuple):
    """One hub command produced by transition()."""
    kind: str  # 'on_off', 'brightness' or 'colour'
    args: tuple


def transition(light: Light, request: LightRequest,
               threshold: float = BRIGHTNESS_OFF_THRESHOLD) -> tuple[Light, list[Command]]:
    """Work out the state a request leads to, and the commands to send.

    Fields are handled in a fixed order so later ones win:

    1. on: turning on implies full brightness, turning off implies zero,
       unless the request also gives a brightness.
    2. brightness: clamped to 0-1; anything under threshold becomes 0 and
       turns the light off, anything else turns it on.
    3. colour: converted to RGB. Hue colours use a fixed value of 1 since
       brightness is a separate channel.

    Channels the light doesn't support are ignored.

    Args:
        light: Current light state
        request: Requested change
        threshold: Brightness below which the light is switched off

    Returns:
        Tuple of (new light state, commands in the order to send them)
    """
    on, brightness, colour = light.on, light.brightness, light.colour
    commands: list[Command] = []

    requested_brightness = request.brightness
    if request.on is not None and light.supports(Capability.ON_OFF):
        on = request.on
        commands.append(Command('on_off', (request.on,)))
        if requested_brightness is None:
            requested_brightness = 1.0 if request.on else 0.0

    if requested_brightness is not None and light.supports(Capability.BRIGHTNESS):
        value = min(1.0, max(0.0, float(requested_brightness)))
        if value < threshold:
            value = 0.0
            on = False
        else:
            on = True
        brightness = value
        commands.append(Command('brightness', (value,)))

    if request.colour is not None and light.supports(Capability.COLOUR):
        colour = request.colour
        commands.append(Command('colour', colour.to_rgb()))

    return light.with_state(on=on, brightness=brightness, colour=colour), commands


def is_on(light: Light) -> bool:
    return light.brightness > 0


class StateSynchronizer:
    """Applies state requests to lights and keeps their last known state."""

    def __init__(self, transport: HubTransport, registry: LightRegistry,
                 lock: threading.RLock | None = None):
        self.transport = transport
        self.registry = registry
        self._lock = lock or threading.RLock()
        self._lights: dict[str, Light] = {}
        # Commands for one light are sent one request at a time
        self._light_locks: dict[str, threading.Lock] = defaultdict(threading.Lock)

    def light(self, identifier: str) -> Light:
        """Return the known state of a light, by id or display name.

        Raises:
            NotFoundError: If the light isn't in the registry
        """
        light_id = self.registry.resolve(identifier)
        with self._lock:
            light = self._lights.get(light_id) or Light(id=light_id, name='')
            light = light.with_state(name=self.registry.name_of(light_id))
            self._lights[light_id] = light
            return light

    def lights(self) -> list[Light]:
        """All registered lights in registry order."""
        return [self.light(light_id) for light_id in self.registry.light_ids]

    def _light_lock(self, light_id: str) -> threading.Lock:
        with self._lock:
            return self._light_locks[light_id]

    def _store(self, light: Light):
        with self._lock:
            self._lights[light.id] = light

    def _send(self, light_id: str, command: Command):
        ip = self.registry.ip
        if command.kind == 'on_off':
            self.transport.set_on_off(ip, light_id, *command.args)
        elif command.kind == 'brightness':
            self.transport.set_brightness(ip, light_id, *command.args)
        elif command.kind == 'colour':
            self.transport.set_colour(ip, light_id, *command.args)
        else:
            raise ValueError(f"Unknown command kind: {command.kind}")

    def apply(self, identifier: str, request: LightRequest) -> Light:
        """Apply a state request to one light.

        Commands are sent in order and the first failure stops the rest.
        The light keeps the requested state but is marked stale.

        Returns:
            The light's new state

        Raises:
            NotFoundError: If the light isn't in the registry
            HubCommandError: If a command fails
        """
        light_id = self.registry.resolve(identifier)
        with self._light_lock(light_id):
            current = self.light(light_id)
            new, commands = transition(current, request)
            new = new.with_state(stale=False)
            self._store(new)
            logger.debug("Applying %s to %s: %s", request, light_id, commands)

            for command in commands:
                try:
                    self._send(light_id, command)
                except HubCommandError:
                    logger.warning("Command %s to %s failed, state marked stale", command.kind, light_id)
                    new = new.with_state(stale=True)
                    self._store(new)
                    raise
            return new

    def apply_batch(self, requests: dict[str, LightRequest]) -> dict[str, Light]:
        """Apply requests to several lights concurrently.

        Every light is attempted even if some fail.

        Returns:
            Dict of light id to new state

        Raises:
            NotFoundError: If any light is unknown (nothing is sent)
            BatchApplyError: Listing every light whose commands failed
        """
        resolved = [(self.registry.resolve(identifier), request)
                    for identifier, request in requests.items()]

        results = self.transport.fan_out(lambda item: self.apply(*item), resolved)

        updated: dict[str, Light] = {}
        failures: list[tuple[str, HubCommandError]] = []
        for (light_id, _), light, error in results:
            if error is None:
                updated[light_id] = light
            elif isinstance(error, HubCommandError):
                failures.append((light_id, error))
            else:
                raise error
        if failures:
            raise BatchApplyError(failures)
        return updated

    def all_off(self):
        """Turn off every light with the hub's bulk command.

        Every light's lock is held until the cache is updated, so no
        single-light apply can land between the bulk command and the store.

        Raises:
            HubCommandError: If the hub rejects the command
        """
        light_ids = sorted(self.registry.light_ids)
        failed = False
        with ExitStack() as stack:
            for light_id in light_ids:
                stack.enter_context(self._light_lock(light_id))
            try:
                self.transport.all_off(self.registry.ip)
            except HubCommandError:
                failed = True
                raise
            finally:
                for light_id in light_ids:
                    light = self.light(light_id)
                    self._store(light.with_state(on=False, brightness=0.0, stale=failed))

    def reconcile(self) -> list[Light]:
        """Refresh on/off and brightness of every light from the hub.

        Lights the hub doesn't report keep their last known state.
        """
        snapshot = {s['id']: s for s in self.transport.snapshot(self.registry.ip)}
        refreshed = []
        for light in self.lights():
            reported = snapshot.get(light.id)
            if reported is not None:
                brightness = level_to_brightness(reported['level'])
                light = light.with_state(on=brightness > 0, brightness=brightness, stale=False)
                self._store(light)
            refreshed.append(light)
        return refreshed

    def on_lights(self) -> list[str]:
        """Ids of lights the hub currently reports as on."""
        return [s['id'] for s in self.transport.snapshot(self.registry.ip) if s['level'] > 0]
