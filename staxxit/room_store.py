from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Tuple
import secrets
import string
import threading
import time

from .game_engine import PLAYERS, MatchState, apply_action, create_match, parse_action, serialize


def _now() -> float:
    return time.time()


def _gen_code(length: int = 6) -> str:
    alphabet = string.ascii_uppercase + string.digits
    return "".join(secrets.choice(alphabet) for _ in range(length))


def _norm_code(code: str) -> str:
    return (code or "").strip().upper()


@dataclass
class Player:
    player_id: str
    nick: str
    color: str
    joined_at: float
    last_seen: float


@dataclass
class Room:
    code: str
    created_at: float
    players: Dict[str, Player]  # key = player_id
    match: MatchState = field(default_factory=create_match)

    def free_color(self) -> Optional[str]:
        taken = {p.color for p in self.players.values()}
        for color in PLAYERS:
            if color not in taken:
                return color
        return None

    @property
    def started(self) -> bool:
        return len(self.players) == len(PLAYERS)

    def sync_seats(self) -> None:
        seats: Dict[str, Optional[str]] = {color: None for color in PLAYERS}
        for p in self.players.values():
            seats[p.color] = p.nick
        self.match.players = seats

    def player_list(self) -> List[dict]:
        # Sort by join time for stable UI
        items = sorted(self.players.values(), key=lambda p: p.joined_at)
        return [
            {
                "nick": p.nick,
                "color": p.color,
                "joined_at": p.joined_at,
            }
            for p in items
        ]


class RoomStore:
    """Rooms keyed by code. One lock serializes every room mutation."""

    def __init__(self, player_timeout_seconds: int = 120):
        self._lock = threading.Lock()
        self._rooms: Dict[str, Room] = {}
        self.player_timeout_seconds = int(player_timeout_seconds)

    def _new_player(self, nick: str, color: str) -> Player:
        pid = secrets.token_urlsafe(10)
        t = _now()
        return Player(player_id=pid, nick=nick, color=color, joined_at=t, last_seen=t)

    def __len__(self) -> int:
        with self._lock:
            return len(self._rooms)

    def create_room(self, nick: str) -> Tuple[Room, Player]:
        with self._lock:
            while True:
                code = _gen_code(6)
                if code not in self._rooms:
                    break

            host = self._new_player(nick, color="W")
            room = Room(code=code, created_at=_now(), players={host.player_id: host})
            room.sync_seats()
            self._rooms[code] = room
            return room, host

    def get_room(self, code: str) -> Optional[Room]:
        code = _norm_code(code)
        with self._lock:
            return self._rooms.get(code)

    def join_room(self, code: str, nick: str) -> dict:
        code = _norm_code(code)
        with self._lock:
            room = self._rooms.get(code)
            if not room:
                return {"ok": False, "error": "Room not found"}
            color = room.free_color()
            if color is None:
                return {"ok": False, "error": "Room is full"}

            p = self._new_player(nick, color=color)
            room.players[p.player_id] = p
            room.sync_seats()
            return {
                "ok": True,
                "code": room.code,
                "player_id": p.player_id,
                "color": color,
            }

    def leave_room(self, code: str, player_id: str) -> bool:
        code = _norm_code(code)
        with self._lock:
            room = self._rooms.get(code)
            if not room:
                return False
            p = room.players.pop(player_id, None)
            if not p:
                return False

            if not room.players:
                self._rooms.pop(code, None)
            else:
                room.sync_seats()
            return True

    def ping(self, code: str, player_id: str) -> None:
        code = _norm_code(code)
        with self._lock:
            room = self._rooms.get(code)
            if not room:
                return
            p = room.players.get(player_id)
            if not p:
                return
            p.last_seen = _now()

    def get_state(self, code: str) -> Optional[dict]:
        code = _norm_code(code)
        with self._lock:
            room = self._rooms.get(code)
            if not room:
                return None
            return self._public_state(room)

    def _public_state(self, room: Room) -> dict:
        state = serialize(room.match)
        state["code"] = room.code
        state["started"] = room.started
        state["created_at"] = room.created_at
        state["seated"] = room.player_list()
        return state

    def make_move(self, code: str, player_id: str, payload: Any) -> dict:
        code = _norm_code(code)
        with self._lock:
            room = self._rooms.get(code)
            if not room:
                return {"ok": False, "error": "Room not found"}
            p = room.players.get(player_id)
            if not p:
                return {"ok": False, "error": "Player not found"}
            p.last_seen = _now()

            action = parse_action(payload)
            if action is None:
                return {"ok": False, "error": "Malformed action"}

            result = apply_action(room.match, p.color, action)
            if not result.accepted:
                return {"ok": False, "error": "Invalid move"}

            room.match = result.state
            return {
                "ok": True,
                "state": self._public_state(room),
                "outcome": result.outcome.to_dict() if result.outcome else None,
            }

    def cleanup(self) -> int:
        """Drop players that stopped pinging and rooms left empty. Returns rooms removed."""
        cutoff = _now() - self.player_timeout_seconds
        with self._lock:
            to_delete = []
            for code, room in self._rooms.items():
                stale = [pid for pid, p in room.players.items() if p.last_seen < cutoff]
                for pid in stale:
                    room.players.pop(pid, None)

                if not room.players:
                    to_delete.append(code)
                elif stale:
                    room.sync_seats()

            for code in to_delete:
                self._rooms.pop(code, None)
            return len(to_delete)
