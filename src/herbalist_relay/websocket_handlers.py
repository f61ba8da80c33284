"""
WebSocket event handlers for the relay.

This module wires the Socket.IO events onto a RoomRegistry: hosting and
joining rooms, relaying cursor/ping/action/state traffic between the two
seats, and cleaning up when a connection drops.

Relay channels have no acknowledgment path, so a stale room code or a
malformed payload is dropped quietly. Only ``host_room`` and ``join_room``
answer the client, through the Socket.IO ack callback.
"""

import time
from functools import wraps

from flask import request
from flask_socketio import emit, join_room, close_room
from loguru import logger

from .messages import (
    ActionMessage,
    CursorMessage,
    JoinRoomMessage,
    MalformedMessage,
    PingMessage,
    SnapshotMessage,
    StateSyncMessage,
)
from .room_registry import Departure, GUEST_SEAT, HOST_SEAT, RoomError, RoomNotFound


def relay_handler(f):
    """Drop, rather than raise, anything that goes wrong inside a relay handler."""
    @wraps(f)
    def decorated_function(*args, **kwargs):
        try:
            return f(*args, **kwargs)
        except MalformedMessage as e:
            logger.debug(f"Dropped message from {request.sid}: {e}")
        except Exception:
            logger.exception(f"Error in '{f.__name__}' handler for {request.sid}")
        return None
    return decorated_function


def now_ms() -> int:
    """Server timestamp attached to pings, in milliseconds since the epoch."""
    return int(time.time() * 1000)


def init_socketio_handlers(socketio, registry):
    """Initialize WebSocket event handlers against ``registry``."""

    @socketio.on('connect')
    def handle_connect(auth=None):
        logger.info(f"Connected: {request.sid}")

    @socketio.on('disconnect')
    def handle_disconnect(reason=None):
        """Close rooms this connection hosted and free any guest seat it held."""
        sid = request.sid
        logger.info(f"Disconnected: {sid}")

        for departure in registry.remove_connection(sid):
            if departure.kind == Departure.CLOSED:
                emit('room_closed', to=departure.code, include_self=False)
                # Guests are still members of the Socket.IO room; clear it so
                # they can't receive traffic for a new room with the same code.
                close_room(departure.code)
                logger.info(f"Room closed: {departure.code}")
            else:
                emit('player_left', to=departure.code, include_self=False)
                logger.info(f"Player left room {departure.code}: {sid}")

    @socketio.on('host_room')
    def handle_host_room(data=None):
        """Create a room with the caller in seat Y."""
        code = registry.create_room(request.sid)
        join_room(code)
        logger.info(f"Room hosted: {code} by {request.sid}")
        return {'ok': True, 'code': code, 'seat': HOST_SEAT}

    @socketio.on('join_room')
    def handle_join_room(data=None):
        """Seat the caller as guest and bring them up to date."""
        try:
            message = JoinRoomMessage.parse(data)
        except MalformedMessage as e:
            logger.debug(f"Rejected join from {request.sid}: {e}")
            return {'ok': False, 'error': RoomNotFound.message}

        try:
            room = registry.join_room(message.code, request.sid)
        except RoomError as e:
            logger.info(f"Join of {message.code} by {request.sid} refused: {e}")
            return {'ok': False, 'error': str(e)}

        join_room(room.code)
        logger.info(f"Joined room: {room.code} by {request.sid}")

        emit('room_ready', to=room.code)

        # Late joiner: hand over the host's last snapshot to the guest only.
        if room.has_snapshot():
            emit('state_sync', room.last_state)

        return {'ok': True, 'code': room.code, 'seat': GUEST_SEAT}

    @socketio.on('cursor')
    @relay_handler
    def handle_cursor(data=None):
        message = CursorMessage.parse(data)
        if not registry.has_room(message.code):
            return
        emit('cursor', {'from': request.sid, 'x': message.x, 'y': message.y},
             to=message.code, include_self=False)

    @socketio.on('ping')
    @relay_handler
    def handle_ping(data=None):
        message = PingMessage.parse(data)
        if not registry.has_room(message.code):
            return
        emit('ping', {
            'from': request.sid,
            'x': message.x,
            'y': message.y,
            't': now_ms(),
        }, to=message.code)

    @socketio.on('state_sync')
    @relay_handler
    def handle_state_sync(data=None):
        """Relay a peer's serialized state to everyone else in the room."""
        message = StateSyncMessage.parse(data)
        if not registry.has_room(message.code):
            return
        emit('state_sync', {'json': message.json}, to=message.code, include_self=False)

    @socketio.on('action')
    @relay_handler
    def handle_action(data=None):
        message = ActionMessage.parse(data)
        if not registry.has_room(message.code):
            return
        emit('action', {'from': request.sid, 'action': message.action}, to=message.code)

    @socketio.on('snapshot')
    @relay_handler
    def handle_snapshot(data=None):
        """Store the host's authoritative state, then broadcast it.

        The raw state goes out under ``state_sync``, the same event name the
        peer relay uses with a ``{json}`` envelope. Clients already handle
        both shapes, so the wire format stays as it is.

        The sender isn't checked against the host seat; whoever sends a
        snapshot for a live code overwrites the stored state.
        """
        message = SnapshotMessage.parse(data)
        room = registry.store_snapshot(message.code, message.state)
        if room is None:
            return
        # Wrapped in a tuple so a null state still goes out as one argument.
        emit('state_sync', (message.state,), to=room.code)
