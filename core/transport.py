"""Network transport for the Yeelight Sunflower hub.

This module contains the HubTransport class which handles all communication
with the hub: locating it on the LAN, checking it is alive, reading the
light list and sending light commands.

Every command is an independent TCP round-trip with its own timeout. The
hub is a shared, slow device, so the number of commands in flight at once
is capped by a semaphore that every round-trip has to acquire.
"""

import logging
import socket
import threading
import time
from concurrent.futures import ThreadPoolExecutor
from typing import Callable, Iterable, TypeVar

from core.config import (
    HUB_PORT,
    DISCOVERY_ADDRESS,
    DISCOVERY_PORT,
    DISCOVERY_TIMEOUT,
    HEARTBEAT_TIMEOUT,
    COMMAND_TIMEOUT,
    MAX_WORKERS,
)
from core.errors import DiscoveryError, HubUnreachable, ProtocolError, HubCommandError
from models.types import LightSnapshot

logger = logging.getLogger(__name__)

T = TypeVar('T')
R = TypeVar('R')

# Hub id that addresses every bulb at once
ALL_LIGHTS_ID = 'FFFF'

DISCOVERY_MESSAGE = (
    'M-SEARCH * HTTP/1.1\r\n'
    f'HOST: {DISCOVERY_ADDRESS}:{DISCOVERY_PORT}\r\n'
    'MAN: "ssdp:discover"\r\n'
    'ST: yeelink:yeelight\r\n'
    '\r\n'
).encode('ascii')

# Field positions in a light list record: id,type,online,signal,r,g,b,level
_FIELD_ID = 0
_FIELD_RED = 4
_FIELD_GREEN = 5
_FIELD_BLUE = 6
_FIELD_LEVEL = 7


def brightness_to_level(value: float) -> int:
    """Convert a 0-1 brightness to the hub's 0-100 level."""
    return max(0, min(100, int(round(value * 100))))


def level_to_brightness(level: int) -> float:
    """Convert the hub's 0-100 level to a 0-1 brightness."""
    return max(0.0, min(1.0, level / 100))


def parse_light_list(reply: str) -> list[LightSnapshot]:
    """Parse a GLB light list reply.

    Args:
        reply: Raw reply line, e.g. 'GLB 143E,1,1,22,255,255,255,100,0;...'

    Returns:
        List of light snapshots in hub order

    Raises:
        ProtocolError: If the reply is not a well-formed light list
    """
    reply = reply.strip()
    if not reply.startswith('GLB'):
        raise ProtocolError(reply)

    lights: list[LightSnapshot] = []
    for record in reply[3:].split(';'):
        record = record.strip()
        if not record:
            continue
        fields = record.split(',')
        if len(fields) <= _FIELD_LEVEL or not fields[_FIELD_ID]:
            raise ProtocolError(reply, f"Short light record {record!r}")
        try:
            lights.append({
                'id': fields[_FIELD_ID],
                'r': int(fields[_FIELD_RED]),
                'g': int(fields[_FIELD_GREEN]),
                'b': int(fields[_FIELD_BLUE]),
                'level': int(fields[_FIELD_LEVEL]),
            })
        except ValueError as e:
            raise ProtocolError(reply, f"Bad number in light record {record!r}: {e}") from e
    return lights


def _fmt(value) -> str:
    return '' if value is None else str(value)


def format_set_command(light_id: str, r=None, g=None, b=None, level=None) -> str:
    """Build a 'C' command. Fields left as None are not changed by the hub."""
    return f"C {light_id},{_fmt(r)},{_fmt(g)},{_fmt(b)},{_fmt(level)},"


class HubTransport:
    """Sends commands to a Sunflower hub over the LAN.

    None of the methods retry; retry policy belongs to the caller.
    """

    def __init__(self, port: int = HUB_PORT, timeout: float = COMMAND_TIMEOUT,
                 max_workers: int = MAX_WORKERS):
        """Initialise HubTransport.

        Args:
            port: TCP port the hub listens on
            timeout: Timeout for each command round-trip, in seconds
            max_workers: Maximum number of commands in flight at once
        """
        self.port = port
        self.timeout = timeout
        self.max_workers = max_workers
        self._slots = threading.BoundedSemaphore(max_workers)

    def _read_reply(self, sock: socket.socket) -> str:
        buf = b''
        while b'\n' not in buf:
            chunk = sock.recv(1024)
            if not chunk:
                break
            buf += chunk
        return buf.decode('ascii', errors='replace').strip()

    def _send(self, ip: str, command: str, timeout: float | None = None) -> str:
        """Send one command line and return the reply line.

        Raises:
            HubCommandError: On connection failure or timeout
        """
        if not ip:
            raise HubCommandError(command, "No hub IP configured")

        timeout = self.timeout if timeout is None else timeout
        with self._slots:
            logger.debug("-> %s: %s", ip, command)
            try:
                with socket.create_connection((ip, self.port), timeout=timeout) as sock:
                    sock.settimeout(timeout)
                    sock.sendall((command + '\r\n').encode('ascii'))
                    reply = self._read_reply(sock)
            except OSError as e:
                raise HubCommandError(command, f"{ip}:{self.port} {command!r}: {e}") from e
        logger.debug("<- %s: %s", ip, reply)
        return reply

    def _command(self, ip: str, command: str):
        reply = self._send(ip, command)
        if not reply.startswith('CACK'):
            raise HubCommandError(command, f"Hub replied {reply!r} to {command!r}")

    def discover(self, timeout: float = DISCOVERY_TIMEOUT) -> str:
        """Locate the hub with a multicast search.

        Args:
            timeout: Seconds to wait for a reply

        Returns:
            IP address of the first hub that answers

        Raises:
            DiscoveryError: If no hub answers within timeout
        """
        sock = socket.socket(socket.AF_INET, socket.SOCK_DGRAM, socket.IPPROTO_UDP)
        try:
            sock.setsockopt(socket.IPPROTO_IP, socket.IP_MULTICAST_TTL, 2)
            sock.sendto(DISCOVERY_MESSAGE, (DISCOVERY_ADDRESS, DISCOVERY_PORT))

            end_time = time.monotonic() + timeout
            while True:
                remaining = end_time - time.monotonic()
                if remaining <= 0:
                    raise DiscoveryError(timeout)
                sock.settimeout(remaining)
                try:
                    data, addr = sock.recvfrom(1024)
                except socket.timeout:
                    raise DiscoveryError(timeout)
                if b'yeelink' in data.lower():
                    logger.info("Found hub at %s", addr[0])
                    return addr[0]
                logger.debug("Ignoring discovery reply from %s", addr[0])
        except OSError as e:
            raise DiscoveryError(timeout, f"Discovery failed: {e}") from e
        finally:
            sock.close()

    def heartbeat(self, ip: str, timeout: float = HEARTBEAT_TIMEOUT):
        """Check the hub is alive.

        Raises:
            HubUnreachable: If the hub does not acknowledge within timeout
        """
        try:
            reply = self._send(ip, 'HB', timeout=timeout)
        except HubCommandError as e:
            raise HubUnreachable(ip, e.technical_message) from e
        if not reply.startswith('HACK'):
            raise HubUnreachable(ip, f"Unexpected heartbeat reply {reply!r}")

    def get_lights(self, ip: str) -> list[LightSnapshot]:
        """Query the current state of every light the hub knows.

        Raises:
            ProtocolError: If the reply can't be parsed
            HubCommandError: If the hub can't be reached
        """
        return parse_light_list(self._send(ip, 'GL,,,,0,'))

    def snapshot(self, ip: str) -> list[LightSnapshot]:
        """Like get_lights(), but a malformed reply counts as no lights."""
        try:
            return self.get_lights(ip)
        except ProtocolError as e:
            logger.warning("Ignoring light list from %s: %s", ip, e.technical_message)
            return []

    def set_light(self, ip: str, light_id: str, r: int, g: int, b: int, level: int):
        """Set colour and brightness (0-100 level) in one command."""
        self._command(ip, format_set_command(light_id, r, g, b, level))

    def set_on_off(self, ip: str, light_id: str, on: bool):
        self._command(ip, format_set_command(light_id, level=100 if on else 0))

    def set_brightness(self, ip: str, light_id: str, value: float):
        """Set brightness from a 0-1 value."""
        self._command(ip, format_set_command(light_id, level=brightness_to_level(value)))

    def set_colour(self, ip: str, light_id: str, r: int, g: int, b: int):
        self._command(ip, format_set_command(light_id, r, g, b))

    def all_off(self, ip: str):
        """Turn every light on the hub off."""
        self._command(ip, format_set_command(ALL_LIGHTS_ID, level=0))

    def fan_out(self, fn: Callable[[T], R], items: Iterable[T]) -> list[tuple[T, R | None, Exception | None]]:
        """Run fn over items concurrently, collecting results and errors.

        Concurrency is bounded by max_workers. Exceptions are returned rather
        than raised so callers can report every failure.

        Returns:
            List of (item, result, error) in the order items were given
        """
        items = list(items)
        if not items:
            return []
        with ThreadPoolExecutor(max_workers=self.max_workers,
                                thread_name_prefix='sunflower-hub') as executor:
            futures = [(item, executor.submit(fn, item)) for item in items]
            results = []
            for item, future in futures:
                try:
                    results.append((item, future.result(), None))
                except Exception as e:
                    results.append((item, None, e))
        return results
