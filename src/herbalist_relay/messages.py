"""Shapes of the inbound relay messages.

Each inbound event has one dataclass naming its required fields. ``parse``
does the minimal shape check the relay needs (a mapping with a string room
code) and raises MalformedMessage otherwise. Everything else in a payload is
opaque and forwarded untouched.
"""

from dataclasses import dataclass
from typing import Any, Mapping


class MalformedMessage(ValueError):
    """Raised when an inbound payload doesn't have the shape its event needs."""

    def __init__(self, event: str, reason: str):
        self.event = event
        self.reason = reason
        super().__init__(f"Malformed '{event}' payload: {reason}")


def _require_mapping(event: str, payload) -> Mapping:
    if not isinstance(payload, Mapping):
        raise MalformedMessage(event, f"expected an object, got {type(payload).__name__}")
    return payload


def _require_code(event: str, payload: Mapping) -> str:
    code = payload.get('code')
    if not isinstance(code, str):
        raise MalformedMessage(event, "missing room code")
    return code


def normalize_code(raw) -> str:
    """Trim and upper-case a user-typed room code; None becomes ''."""
    return str(raw or '').strip().upper()


@dataclass(frozen=True)
class JoinRoomMessage:
    EVENT = 'join_room'

    code: str

    @classmethod
    def parse(cls, payload) -> 'JoinRoomMessage':
        payload = _require_mapping(cls.EVENT, payload)
        return cls(code=_require_code(cls.EVENT, payload))


@dataclass(frozen=True)
class CursorMessage:
    EVENT = 'cursor'

    code: str
    x: Any = None
    y: Any = None

    @classmethod
    def parse(cls, payload) -> 'CursorMessage':
        payload = _require_mapping(cls.EVENT, payload)
        return cls(code=_require_code(cls.EVENT, payload),
                   x=payload.get('x'), y=payload.get('y'))


@dataclass(frozen=True)
class PingMessage:
    EVENT = 'ping'

    code: str
    x: Any = None
    y: Any = None

    @classmethod
    def parse(cls, payload) -> 'PingMessage':
        payload = _require_mapping(cls.EVENT, payload)
        return cls(code=_require_code(cls.EVENT, payload),
                   x=payload.get('x'), y=payload.get('y'))


@dataclass(frozen=True)
class StateSyncMessage:
    """A pre-serialized state blob relayed between peers.

    Unlike the other messages the code is normalized, since clients send it
    as typed by the player. ``json`` has to be a string; the relay never
    looks inside it.
    """

    EVENT = 'state_sync'

    code: str
    json: str

    @classmethod
    def parse(cls, payload) -> 'StateSyncMessage':
        payload = _require_mapping(cls.EVENT, payload)
        code = normalize_code(payload.get('code'))
        if not code:
            raise MalformedMessage(cls.EVENT, "missing room code")
        blob = payload.get('json')
        if not isinstance(blob, str):
            raise MalformedMessage(cls.EVENT, "'json' must be a string")
        return cls(code=code, json=blob)


@dataclass(frozen=True)
class ActionMessage:
    EVENT = 'action'

    code: str
    action: Any = None

    @classmethod
    def parse(cls, payload) -> 'ActionMessage':
        payload = _require_mapping(cls.EVENT, payload)
        return cls(code=_require_code(cls.EVENT, payload),
                   action=payload.get('action'))


@dataclass(frozen=True)
class SnapshotMessage:
    """Authoritative full state from the host, kept for late joiners."""

    EVENT = 'snapshot'

    code: str
    state: Any = None

    @classmethod
    def parse(cls, payload) -> 'SnapshotMessage':
        payload = _require_mapping(cls.EVENT, payload)
        return cls(code=_require_code(cls.EVENT, payload),
                   state=payload.get('state'))
