#!/usr/bin/env python3
"""
Socket.IO console client for the Herbalist Wizards relay.

This client connects to the relay and lets you host or join a room and push
relay events by hand, printing whatever the server sends back.

Usage:
    python relay_client.py http://localhost:3000

Commands:
    health - Check the HTTP health endpoint
    host - Host a new room
    join <code> - Join a room as guest
    cursor <x> <y> - Send a cursor position
    ping <x> <y> - Send a ping
    action <text> - Send an action
    snapshot <json> - Send an authoritative snapshot (host)
    sync <json> - Relay a serialized state blob to the other seat
    exit - Exit the program
"""

import sys
import json
import requests
import socketio
from typing import Optional


class RelayConsoleClient:
    """Socket.IO client for the relay server."""

    def __init__(self, server_url: str):
        self.server_url = server_url.rstrip('/')
        self.sio = socketio.Client()
        self.code: Optional[str] = None
        self.seat: Optional[str] = None
        self.setup_socketio_handlers()

    def setup_socketio_handlers(self):
        """Set up Socket.IO event handlers."""

        @self.sio.on('connect')
        def on_connect():
            print("🔌 Socket.IO connected")

        @self.sio.on('disconnect')
        def on_disconnect(*args):
            print("🔌 Socket.IO disconnected")

        @self.sio.on('room_ready')
        def on_room_ready(*args):
            print(f"✓ Room {self.code} is ready, both seats taken")

        @self.sio.on('room_closed')
        def on_room_closed(*args):
            print(f"📴 Room {self.code} was closed by the host")
            self.code = None
            self.seat = None

        @self.sio.on('player_left')
        def on_player_left(*args):
            print("📴 The guest left the room")

        @self.sio.on('state_sync')
        def on_state_sync(data=None):
            # Relayed blobs come wrapped as {"json": ...}; snapshots arrive raw.
            if isinstance(data, dict) and set(data) == {'json'}:
                print(f"🔄 State relayed: {data['json']}")
            else:
                print(f"🔄 Snapshot: {json.dumps(data)}")

        @self.sio.on('cursor')
        def on_cursor(data):
            print(f"🖱  {data.get('from')} at ({data.get('x')}, {data.get('y')})")

        @self.sio.on('ping')
        def on_ping(data):
            print(f"📍 Ping from {data.get('from')} at ({data.get('x')}, {data.get('y')}) t={data.get('t')}")

        @self.sio.on('action')
        def on_action(data):
            print(f"🎯 Action from {data.get('from')}: {json.dumps(data.get('action'))}")

    def check_health(self) -> bool:
        """Hit the HTTP health check."""
        try:
            response = requests.get(f"{self.server_url}/")
            print(f"✓ {response.status_code}: {response.text}")
            return response.ok
        except Exception as e:
            print(f"✗ Health check failed: {e}")
            return False

    def connect_socketio(self) -> bool:
        """Connect to the Socket.IO server."""
        try:
            self.sio.connect(self.server_url)
            return True
        except Exception as e:
            print(f"✗ Socket.IO connection failed: {e}")
            return False

    def disconnect_socketio(self):
        """Disconnect from Socket.IO server."""
        if self.sio.connected:
            self.sio.disconnect()

    def host_room(self) -> Optional[str]:
        """Host a new room and remember its code."""
        result = self.sio.call('host_room', timeout=5)
        if result and result.get('ok'):
            self.code = result['code']
            self.seat = result['seat']
            print(f"✓ Hosting room {self.code} (seat {self.seat})")
            return self.code
        print(f"✗ Could not host a room: {result}")
        return None

    def join_room(self, code: str) -> bool:
        """Join ``code`` as the guest."""
        result = self.sio.call('join_room', {'code': code.upper()}, timeout=5)
        if result and result.get('ok'):
            self.code = result['code']
            self.seat = result['seat']
            print(f"✓ Joined room {self.code} (seat {self.seat})")
            return True
        print(f"✗ Join failed: {(result or {}).get('error', 'Unknown error')}")
        return False

    def send(self, event: str, payload: dict):
        """Emit a relay event for the current room."""
        if not self.code:
            print("✗ Not in a room. Use 'host' or 'join <code>' first.")
            return
        self.sio.emit(event, dict(payload, code=self.code))


def _parse_json(text: str):
    try:
        return json.loads(text)
    except ValueError:
        return text


def main():
    """Main function."""
    if len(sys.argv) != 2:
        print("Usage: python relay_client.py SERVER_URL")
        print("Example: python relay_client.py http://localhost:3000")
        sys.exit(1)

    server_url = sys.argv[1]
    client = RelayConsoleClient(server_url)

    print(f"Connecting to server at {server_url}")
    if not client.connect_socketio():
        sys.exit(1)

    print("\nAvailable commands:")
    print("  health, host, join <code>, cursor <x> <y>, ping <x> <y>,")
    print("  action <text>, snapshot <json>, sync <json>, exit")

    try:
        while True:
            command = input("> ").strip()
            if not command:
                continue

            cmd, _, rest = command.partition(' ')
            cmd = cmd.lower()
            args = rest.split()

            if cmd == "exit":
                print("Goodbye!")
                break
            elif cmd == "health":
                client.check_health()
            elif cmd == "host":
                client.host_room()
            elif cmd == "join":
                if len(args) != 1:
                    print("Usage: join <code>")
                    continue
                client.join_room(args[0])
            elif cmd in ("cursor", "ping"):
                if len(args) != 2:
                    print(f"Usage: {cmd} <x> <y>")
                    continue
                try:
                    x, y = float(args[0]), float(args[1])
                except ValueError:
                    print("x and y must be numbers")
                    continue
                client.send(cmd, {'x': x, 'y': y})
            elif cmd == "action":
                client.send('action', {'action': _parse_json(rest)})
            elif cmd == "snapshot":
                client.send('snapshot', {'state': _parse_json(rest)})
            elif cmd == "sync":
                client.send('state_sync', {'json': rest})
            else:
                print("Unknown command. Available: health, host, join, cursor, ping, action, snapshot, sync, exit")

    except (KeyboardInterrupt, EOFError):
        print("\n👋 Exiting...")
    finally:
        client.disconnect_socketio()


if __name__ == "__main__":
    main()
