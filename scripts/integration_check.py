#!/usr/bin/env python3
"""
Standalone integration check for the relay.

This script tests the full flow against a real server process:
1. Start the relay in the background
2. Host creates a room and sends a snapshot
3. Guest joins and receives room_ready plus the stored snapshot
4. A second guest is refused
5. Cursor / ping / action traffic reaches the right seats
6. Host disconnects and the guest sees room_closed

This is NOT part of the pytest suite but is a manual integration test
to catch real-world client-server issues. Server output is written to a
temporary directory for easier debugging.
"""

import os
import subprocess
import sys
import tempfile
import time
from pathlib import Path

import requests
import socketio

ROOT = Path(__file__).resolve().parent.parent


class ServerManager:
    """Manages the test server lifecycle."""

    def __init__(self, port=5555):
        self.port = port
        self.process = None
        self.server_url = f"http://127.0.0.1:{port}"
        self.log_dir = None
        self._log_files = []

    def start(self):
        """Start the server in the background and wait for the health check."""
        print(f"🚀 Starting server on port {self.port}...")
        self.log_dir = tempfile.mkdtemp(prefix="relay_integration_")
        print(f"📁 Logs will be written to: {self.log_dir}")

        stdout = open(os.path.join(self.log_dir, "server_stdout.log"), "w")
        stderr = open(os.path.join(self.log_dir, "server_stderr.log"), "w")
        self._log_files = [stdout, stderr]

        env = dict(os.environ, PORT=str(self.port), HOST='127.0.0.1', LOG_LEVEL='DEBUG')
        env['PYTHONPATH'] = os.pathsep.join(filter(None, [str(ROOT / 'src'), env.get('PYTHONPATH')]))
        self.process = subprocess.Popen(
            [sys.executable, str(ROOT / 'run.py')],
            cwd=str(ROOT), env=env, stdout=stdout, stderr=stderr,
        )

        deadline = time.time() + 10
        while time.time() < deadline:
            try:
                if requests.get(self.server_url, timeout=0.5).ok:
                    print("✓ Server is up")
                    return
            except requests.RequestException:
                time.sleep(0.2)
        self.stop()
        raise RuntimeError(f"Server did not start; see logs in {self.log_dir}")

    def stop(self):
        """Stop the server."""
        if self.process and self.process.poll() is None:
            self.process.terminate()
            try:
                self.process.wait(timeout=5)
            except subprocess.TimeoutExpired:
                self.process.kill()
        for f in self._log_files:
            f.close()

    def __enter__(self):
        self.start()
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.stop()


class RecordingClient:
    """A python-socketio client that records every event it receives."""

    EVENTS = ('room_ready', 'state_sync', 'cursor', 'ping', 'action', 'room_closed', 'player_left')

    def __init__(self, name, server_url):
        self.name = name
        self.received = []
        self.sio = socketio.Client()
        for event in self.EVENTS:
            self.sio.on(event, self._recorder(event))
        self.sio.connect(server_url)

    def _recorder(self, event):
        def record(*args):
            self.received.append((event, args))
        return record

    def names(self):
        return [event for event, _ in self.received]

    def wait_for(self, event, timeout=3.0):
        deadline = time.time() + timeout
        while time.time() < deadline:
            for name, args in self.received:
                if name == event:
                    return args
            time.sleep(0.05)
        raise AssertionError(f"{self.name} never received '{event}' (got {self.names()})")

    def close(self):
        if self.sio.connected:
            self.sio.disconnect()


def check_full_flow(server_url):
    host = RecordingClient('host', server_url)
    guest = RecordingClient('guest', server_url)
    late = RecordingClient('late', server_url)
    try:
        hosted = host.sio.call('host_room', timeout=5)
        assert hosted['ok'] and hosted['seat'] == 'Y', hosted
        code = hosted['code']
        print(f"✓ Hosted room {code}")

        host.sio.emit('snapshot', {'code': code, 'state': {'turn': 1}})
        host.wait_for('state_sync')

        joined = guest.sio.call('join_room', {'code': code}, timeout=5)
        assert joined == {'ok': True, 'code': code, 'seat': 'B'}, joined
        host.wait_for('room_ready')
        guest.wait_for('room_ready')
        assert guest.wait_for('state_sync') == ({'turn': 1},)
        print("✓ Guest joined and received the stored snapshot")

        refused = late.sio.call('join_room', {'code': code}, timeout=5)
        assert refused == {'ok': False, 'error': 'Room already full'}, refused
        print("✓ Third player refused")

        guest.sio.emit('cursor', {'code': code, 'x': 10, 'y': 20})
        (cursor,) = host.wait_for('cursor')
        assert (cursor['x'], cursor['y']) == (10, 20)
        host.sio.emit('ping', {'code': code, 'x': 1, 'y': 2})
        guest.wait_for('ping')
        host.wait_for('ping')
        guest.sio.emit('action', {'code': code, 'action': 'brew'})
        host.wait_for('action')
        guest.wait_for('action')
        assert 'cursor' not in guest.names()
        print("✓ Relay traffic delivered")

        host.close()
        guest.wait_for('room_closed')
        missing = late.sio.call('join_room', {'code': code}, timeout=5)
        assert missing == {'ok': False, 'error': 'Room not found'}, missing
        print("✓ Host disconnect closed the room")
    finally:
        for client in (host, guest, late):
            client.close()


def main():
    port = int(sys.argv[1]) if len(sys.argv) > 1 else 5555
    with ServerManager(port) as server:
        try:
            check_full_flow(server.server_url)
        except AssertionError as e:
            print(f"✗ Integration check failed: {e}")
            print(f"📁 Server logs: {server.log_dir}")
            sys.exit(1)
    print("🎉 All integration checks passed")


if __name__ == "__main__":
    main()
