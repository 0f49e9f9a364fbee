"""Pytest configuration and fixtures for Sunflower tests."""

import threading
from pathlib import Path

import pytest

from core.controller import SunflowerController
from core.errors import DiscoveryError, HubUnreachable, HubCommandError
from core.transport import HubTransport, brightness_to_level, format_set_command

HUB_IP = '192.168.1.50'


class FakeHub(HubTransport):
    """In-memory stand-in for the hub. Records every command it receives.

    Commands for ids in `failing` raise HubCommandError.
    """

    def __init__(self, lights=None):
        super().__init__(max_workers=2)
        self.hub_ip = HUB_IP
        self.lights = {light['id']: dict(light) for light in (lights or [])}
        self.calls = []
        self.failing = set()
        self.discoverable = True
        self.alive = True
        self._calls_lock = threading.Lock()

    def _record(self, *call):
        with self._calls_lock:
            self.calls.append(call)

    def _check(self, light_id, **fields):
        if light_id in self.failing:
            raise HubCommandError(format_set_command(light_id, **fields))

    def discover(self, timeout=3.0):
        self._record('discover')
        if not self.discoverable:
            raise DiscoveryError(timeout)
        return self.hub_ip

    def heartbeat(self, ip, timeout=3.0):
        if not self.alive or ip != self.hub_ip:
            raise HubUnreachable(ip)

    def get_lights(self, ip):
        return [dict(light) for light in self.lights.values()]

    def set_light(self, ip, light_id, r, g, b, level):
        self._record('set_light', light_id, r, g, b, level)
        self._check(light_id, r=r, g=g, b=b, level=level)
        self.lights[light_id].update(r=r, g=g, b=b, level=level)

    def set_on_off(self, ip, light_id, on):
        self._record('set_on_off', light_id, on)
        self._check(light_id, level=100 if on else 0)
        self.lights[light_id]['level'] = 100 if on else 0

    def set_brightness(self, ip, light_id, value):
        self._record('set_brightness', light_id, value)
        self._check(light_id, level=brightness_to_level(value))
        self.lights[light_id]['level'] = brightness_to_level(value)

    def set_colour(self, ip, light_id, r, g, b):
        self._record('set_colour', light_id, r, g, b)
        self._check(light_id, r=r, g=g, b=b)
        self.lights[light_id].update(r=r, g=g, b=b)

    def all_off(self, ip):
        self._record('all_off')
        if self.failing:
            raise HubCommandError(format_set_command('FFFF', level=0))
        for light in self.lights.values():
            light['level'] = 0


@pytest.fixture
def project_root():
    """Return the project root directory."""
    return Path(__file__).parent.parent


@pytest.fixture
def config_path(tmp_path):
    """Path for a throwaway config document."""
    return tmp_path / 'sunflower' / 'config.json'


@pytest.fixture
def hub():
    """A fake hub with three lights."""
    return FakeHub([
        {'id': '143E', 'r': 255, 'g': 0, 'b': 0, 'level': 100},
        {'id': '143C', 'r': 0, 'g': 255, 'b': 0, 'level': 40},
        {'id': '1440', 'r': 0, 'g': 0, 'b': 255, 'level': 0},
    ])


@pytest.fixture
def controller(config_path, hub):
    """A controller whose registry has already scanned the fake hub."""
    controller = SunflowerController(config_path, transport=hub)
    controller.scan()
    hub.calls.clear()
    return controller
