"""Request schemas + validation.

Bodies are JSON objects, e.g.:
  POST /players  {"playerId": "p1", "name": "Alice"}
  POST /kills    {"killerId": "p1", "victimId": "p2"}
"""

from __future__ import annotations

import json
from dataclasses import dataclass
from typing import Any


class ProtocolError(Exception):
    pass


MAX_ID_LEN = 64
MAX_NAME_LEN = 24


def loads(text: str) -> dict[str, Any]:
    try:
        obj = json.loads(text) if text else {}
    except ValueError as e:
        raise ProtocolError(f"invalid json: {e}")
    if not isinstance(obj, dict):
        raise ProtocolError("body must be object")
    return obj


def _id(data: dict[str, Any], key: str) -> str:
    v = data.get(key)
    if not isinstance(v, str) or not v.strip():
        raise ProtocolError(f"{key} required")
    v = v.strip()
    if len(v) > MAX_ID_LEN:
        raise ProtocolError(f"{key} too long")
    return v


@dataclass
class AddPlayer:
    playerId: str
    name: str

    @classmethod
    def parse(cls, data: dict[str, Any]) -> "AddPlayer":
        pid = _id(data, "playerId")
        name = data.get("name")
        if not isinstance(name, str) or not name.strip():
            name = "Player"
        return cls(playerId=pid, name=name.strip()[:MAX_NAME_LEN])


@dataclass
class Kill:
    killerId: str
    victimId: str

    @classmethod
    def parse(cls, data: dict[str, Any]) -> "Kill":
        return cls(killerId=_id(data, "killerId"), victimId=_id(data, "victimId"))
