"""Tests for the hub transport in core/transport.py

No real network traffic: sockets are mocked.
"""

import socket
import threading
import time
from unittest.mock import MagicMock, patch

import pytest

from core.errors import DiscoveryError, HubUnreachable, ProtocolError, HubCommandError
from core.transport import (
    HubTransport,
    parse_light_list,
    format_set_command,
    brightness_to_level,
    level_to_brightness,
)


def _connection(reply: bytes):
    """A mock socket context manager that answers with reply."""
    sock = MagicMock()
    sock.recv.side_effect = [reply, b'']
    conn = MagicMock()
    conn.__enter__.return_value = sock
    return conn, sock


class TestParseLightList:
    """Tests for parse_light_list."""

    def test_two_lights(self):
        reply = 'GLB 143E,1,1,22,255,128,0,100,0;143C,1,1,20,0,0,255,0,0;\r\n'
        assert parse_light_list(reply) == [
            {'id': '143E', 'r': 255, 'g': 128, 'b': 0, 'level': 100},
            {'id': '143C', 'r': 0, 'g': 0, 'b': 255, 'level': 0},
        ]

    def test_no_lights(self):
        assert parse_light_list('GLB ') == []

    def test_wrong_prefix(self):
        with pytest.raises(ProtocolError):
            parse_light_list('CACK')

    def test_short_record(self):
        with pytest.raises(ProtocolError):
            parse_light_list('GLB 143E,1,1')

    def test_bad_number(self):
        with pytest.raises(ProtocolError):
            parse_light_list('GLB 143E,1,1,22,red,0,0,100,0')


class TestCommandFormatting:
    """Tests for command building and level conversion."""

    def test_combined(self):
        assert format_set_command('143E', 1, 2, 3, 50) == 'C 143E,1,2,3,50,'

    def test_level_only(self):
        assert format_set_command('143E', level=0) == 'C 143E,,,,0,'

    def test_colour_only(self):
        assert format_set_command('143E', 10, 20, 30) == 'C 143E,10,20,30,,'

    def test_brightness_to_level(self):
        assert brightness_to_level(0.5) == 50
        assert brightness_to_level(1.0) == 100
        assert brightness_to_level(1.7) == 100
        assert brightness_to_level(-0.2) == 0

    def test_level_to_brightness(self):
        assert level_to_brightness(40) == pytest.approx(0.4)
        assert level_to_brightness(0) == 0.0


class TestCommands:
    """Tests for single commands over a mocked TCP connection."""

    @patch('core.transport.socket.create_connection')
    def test_set_light_sends_combined_command(self, mock_connect):
        conn, sock = _connection(b'CACK\r\n')
        mock_connect.return_value = conn

        HubTransport().set_light('10.0.0.2', '143E', 255, 0, 0, 80)

        mock_connect.assert_called_once_with(('10.0.0.2', 10003), timeout=5.0)
        sock.sendall.assert_called_once_with(b'C 143E,255,0,0,80,\r\n')

    @patch('core.transport.socket.create_connection')
    def test_set_brightness_scales_to_level(self, mock_connect):
        conn, sock = _connection(b'CACK\r\n')
        mock_connect.return_value = conn

        HubTransport().set_brightness('10.0.0.2', '143E', 0.25)

        sock.sendall.assert_called_once_with(b'C 143E,,,,25,\r\n')

    @patch('core.transport.socket.create_connection')
    def test_set_on_off(self, mock_connect):
        conn, sock = _connection(b'CACK\r\n')
        mock_connect.return_value = conn

        HubTransport().set_on_off('10.0.0.2', '143E', False)

        sock.sendall.assert_called_once_with(b'C 143E,,,,0,\r\n')

    @patch('core.transport.socket.create_connection')
    def test_all_off(self, mock_connect):
        conn, sock = _connection(b'CACK\r\n')
        mock_connect.return_value = conn

        HubTransport().all_off('10.0.0.2')

        sock.sendall.assert_called_once_with(b'C FFFF,,,,0,\r\n')

    @patch('core.transport.socket.create_connection')
    def test_timeout_is_command_error(self, mock_connect):
        """A timeout surfaces as HubCommandError, which is also an OSError."""
        mock_connect.side_effect = socket.timeout('timed out')

        with pytest.raises(HubCommandError) as exc_info:
            HubTransport().set_colour('10.0.0.2', '143E', 1, 2, 3)
        assert isinstance(exc_info.value, OSError)
        assert mock_connect.call_count == 1  # no retries

    @patch('core.transport.socket.create_connection')
    def test_unacknowledged_command_fails(self, mock_connect):
        conn, _ = _connection(b'ERR\r\n')
        mock_connect.return_value = conn

        with pytest.raises(HubCommandError):
            HubTransport().set_on_off('10.0.0.2', '143E', True)

    def test_no_ip_fails_without_connecting(self):
        with patch('core.transport.socket.create_connection') as mock_connect:
            with pytest.raises(HubCommandError):
                HubTransport().set_on_off('', '143E', True)
            mock_connect.assert_not_called()


class TestLightList:
    """Tests for get_lights and snapshot."""

    @patch('core.transport.socket.create_connection')
    def test_get_lights(self, mock_connect):
        conn, sock = _connection(b'GLB 143E,1,1,22,1,2,3,60,0;\r\n')
        mock_connect.return_value = conn

        lights = HubTransport().get_lights('10.0.0.2')

        sock.sendall.assert_called_once_with(b'GL,,,,0,\r\n')
        assert lights == [{'id': '143E', 'r': 1, 'g': 2, 'b': 3, 'level': 60}]

    @patch('core.transport.socket.create_connection')
    def test_get_lights_malformed_raises(self, mock_connect):
        conn, _ = _connection(b'garbage\r\n')
        mock_connect.return_value = conn

        with pytest.raises(ProtocolError):
            HubTransport().get_lights('10.0.0.2')

    @patch('core.transport.socket.create_connection')
    def test_snapshot_malformed_is_empty(self, mock_connect):
        conn, _ = _connection(b'garbage\r\n')
        mock_connect.return_value = conn

        assert HubTransport().snapshot('10.0.0.2') == []


class TestHeartbeat:
    """Tests for heartbeat."""

    @patch('core.transport.socket.create_connection')
    def test_acknowledged(self, mock_connect):
        conn, sock = _connection(b'HACK\r\n')
        mock_connect.return_value = conn

        HubTransport().heartbeat('10.0.0.2', timeout=2.0)

        mock_connect.assert_called_once_with(('10.0.0.2', 10003), timeout=2.0)
        sock.sendall.assert_called_once_with(b'HB\r\n')

    @patch('core.transport.socket.create_connection')
    def test_wrong_reply(self, mock_connect):
        conn, _ = _connection(b'NOPE\r\n')
        mock_connect.return_value = conn

        with pytest.raises(HubUnreachable):
            HubTransport().heartbeat('10.0.0.2')

    @patch('core.transport.socket.create_connection')
    def test_connection_refused(self, mock_connect):
        mock_connect.side_effect = ConnectionRefusedError()

        with pytest.raises(HubUnreachable) as exc_info:
            HubTransport().heartbeat('10.0.0.2')
        assert exc_info.value.recoverable is True


class TestDiscover:
    """Tests for discover with a mocked UDP socket."""

    @patch('core.transport.socket.socket')
    def test_first_hub_reply_wins(self, mock_socket_cls):
        sock = MagicMock()
        sock.recvfrom.side_effect = [
            (b'HTTP/1.1 200 OK\r\nST: some-tv\r\n', ('10.0.0.9', 1900)),
            (b'HTTP/1.1 200 OK\r\nST: yeelink:yeelight\r\n', ('10.0.0.2', 1900)),
        ]
        mock_socket_cls.return_value = sock

        assert HubTransport().discover(timeout=2.0) == '10.0.0.2'
        sock.sendto.assert_called_once()
        sock.close.assert_called_once()

    @patch('core.transport.socket.socket')
    def test_timeout_raises_discovery_error(self, mock_socket_cls):
        sock = MagicMock()
        sock.recvfrom.side_effect = socket.timeout()
        mock_socket_cls.return_value = sock

        with pytest.raises(DiscoveryError) as exc_info:
            HubTransport().discover(timeout=1.0)
        assert exc_info.value.timeout == 1.0
        sock.close.assert_called_once()


class TestFanOut:
    """Tests for fan_out."""

    def test_collects_results_and_errors_in_order(self):
        def work(n):
            if n == 2:
                raise HubCommandError(f'cmd {n}')
            return n * 10

        results = HubTransport(max_workers=2).fan_out(work, [1, 2, 3])

        assert [item for item, _, _ in results] == [1, 2, 3]
        assert results[0][1] == 10
        assert isinstance(results[1][2], HubCommandError)
        assert results[2][1] == 30

    def test_empty(self):
        assert HubTransport().fan_out(lambda x: x, []) == []

    @patch('core.transport.socket.create_connection')
    def test_commands_in_flight_are_capped(self, mock_connect):
        """Callers on their own threads still share max_workers slots."""
        lock = threading.Lock()
        open_now, peak = [0], [0]

        def connect(address, timeout):
            with lock:
                open_now[0] += 1
                peak[0] = max(peak[0], open_now[0])
            time.sleep(0.05)
            conn, _ = _connection(b'CACK\r\n')

            def close(*exc_info):
                with lock:
                    open_now[0] -= 1
                return False
            conn.__exit__.side_effect = close
            return conn
        mock_connect.side_effect = connect

        transport = HubTransport(max_workers=2)
        threads = [threading.Thread(target=transport.set_on_off, args=('10.0.0.2', f'14{n:02X}', True))
                   for n in range(6)]
        for thread in threads:
            thread.start()
        for thread in threads:
            thread.join(5)

        assert mock_connect.call_count == 6
        assert peak[0] <= 2
        assert open_now[0] == 0
