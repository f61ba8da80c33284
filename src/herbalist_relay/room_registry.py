"""In-memory bookkeeping for two-seat relay rooms.

The registry knows nothing about the transport. It hands out room codes,
assigns seats, and tells the caller what happened when a connection goes
away; the websocket handlers turn those results into Socket.IO traffic.
"""

import random
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

# I, L, O, 0 and 1 are left out so codes can be read aloud and typed back.
CODE_ALPHABET = "ABCDEFGHJKMNPQRSTUVWXYZ23456789"
CODE_LENGTH = 5

HOST_SEAT = 'Y'
GUEST_SEAT = 'B'


class RoomError(Exception):
    """Base class for errors reported back to a client joining a room."""

    message = "Room error"

    def __init__(self, code: str):
        self.code = code
        super().__init__(self.message)


class RoomNotFound(RoomError):
    message = "Room not found"


class RoomFull(RoomError):
    message = "Room already full"


def make_code(length: int = CODE_LENGTH) -> str:
    """Return a random room code.

    Codes only need to avoid colliding with each other, so the module-level
    PRNG is good enough here.
    """
    return ''.join(random.choice(CODE_ALPHABET) for _ in range(length))


@dataclass
class Room:
    """A live room.

    Attributes
    ----------
    code : str
        The room code, also used as the Socket.IO room name
    host_id : str
        Connection id of the host; the room lives as long as it does
    seats : dict
        Seat label -> connection id, or None for an empty guest seat
    last_state : object
        Latest authoritative snapshot from the host, None until one arrives
    """

    code: str
    host_id: str
    seats: Dict[str, Optional[str]] = field(default_factory=dict)
    last_state: Any = None

    @property
    def guest_id(self) -> Optional[str]:
        return self.seats.get(GUEST_SEAT)

    def has_snapshot(self) -> bool:
        return self.last_state is not None


@dataclass(frozen=True)
class Departure:
    """What a disconnect did to one room.

    ``kind`` is ``'closed'`` when the host left and the room is gone, or
    ``'left'`` when the guest left and the seat was freed.
    """

    code: str
    kind: str

    CLOSED = 'closed'
    LEFT = 'left'


class RoomRegistry(object):
    """Tracks live rooms by code.

    The model here is:
    - Each room has exactly two seats, 'Y' for the host and 'B' for a guest.
    - A room exists only while its host is connected.
    - Connections are indexed by id, so a disconnect finds its rooms without
      walking the whole registry.

    """
    def __init__(self, code_length: int = CODE_LENGTH):
        self.code_length = code_length
        self.rooms: Dict[str, Room] = {}
        self.connections: Dict[str, Dict[str, str]] = {}  # conn_id -> {code: seat}

    def __len__(self) -> int:
        return len(self.rooms)

    def __contains__(self, code) -> bool:
        return self.has_room(code)

    def has_room(self, code) -> bool:
        return isinstance(code, str) and code in self.rooms

    def get_room(self, code) -> Optional[Room]:
        """Return the room for ``code``, or None if there is no such room."""
        if not isinstance(code, str):
            return None
        return self.rooms.get(code)

    def list_rooms(self) -> List[str]:
        """Lists current room codes."""
        return list(self.rooms.keys())

    def rooms_for(self, conn_id: str) -> Dict[str, str]:
        """Return ``{code: seat}`` for every room ``conn_id`` sits in."""
        return dict(self.connections.get(conn_id, {}))

    def _new_code(self) -> str:
        code = make_code(self.code_length)
        while code in self.rooms:
            code = make_code(self.code_length)
        return code

    def _index(self, conn_id: str, code: str, seat: str):
        # A host that also takes its own guest seat stays indexed as host.
        self.connections.setdefault(conn_id, {}).setdefault(code, seat)

    def _unindex(self, conn_id: str, code: str):
        held = self.connections.get(conn_id)
        if held is None:
            return
        held.pop(code, None)
        if not held:
            del self.connections[conn_id]

    def create_room(self, host_id: str) -> str:
        """Create a room hosted by ``host_id`` and return its code."""
        code = self._new_code()
        self.rooms[code] = Room(
            code=code,
            host_id=host_id,
            seats={HOST_SEAT: host_id, GUEST_SEAT: None},
        )
        self._index(host_id, code, HOST_SEAT)
        return code

    def join_room(self, code, guest_id: str) -> Room:
        """Seat ``guest_id`` in the guest seat of room ``code``.

        Raises RoomNotFound if there is no such room, and RoomFull if the
        guest seat is already taken.

        """
        room = self.get_room(code)
        if room is None:
            raise RoomNotFound(code)
        if room.seats[GUEST_SEAT] is not None:
            raise RoomFull(code)

        room.seats[GUEST_SEAT] = guest_id
        self._index(guest_id, code, GUEST_SEAT)
        return room

    def store_snapshot(self, code, state) -> Optional[Room]:
        """Record ``state`` as the room's latest snapshot.

        Returns the room, or None if the code is unknown.
        """
        room = self.get_room(code)
        if room is None:
            return None
        room.last_state = state
        return room

    def close_room(self, code: str) -> Optional[Room]:
        """Remove a room and drop both seats from the connection index."""
        room = self.rooms.pop(code, None)
        if room is None:
            return None
        for conn_id in room.seats.values():
            if conn_id is not None:
                self._unindex(conn_id, code)
        return room

    def remove_connection(self, conn_id: str) -> List[Departure]:
        """Forget a disconnected connection.

        Rooms hosted by ``conn_id`` are closed; a guest seat held by
        ``conn_id`` is emptied and the room survives. Returns one Departure
        per affected room so the caller can notify the members left behind.

        """
        departures = []
        for code in self.rooms_for(conn_id):
            room = self.rooms.get(code)
            if room is None:
                continue
            if room.host_id == conn_id:
                self.close_room(code)
                departures.append(Departure(code, Departure.CLOSED))
            elif room.seats[GUEST_SEAT] == conn_id:
                room.seats[GUEST_SEAT] = None
                self._unindex(conn_id, code)
                departures.append(Departure(code, Departure.LEFT))
        self.connections.pop(conn_id, None)
        return departures
