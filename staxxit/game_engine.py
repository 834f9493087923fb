from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Set

from . import rules
from .board import Board
from .hexgrid import ORIGIN, OUTER_COLORS, Coord, format_key, is_inner, is_outer, neighbors, parse_key

PLAYERS = ("W", "B")
PIECES_PER_PLAYER = 18

PLACING = "placing"
PLAYING = "playing"
ENDED = "ended"

PLACE = "place"
MOVE_OR_CAPTURE = "move-or-capture"
SPLIT = "split"


def opponent(player: str) -> str:
    return "B" if player == "W" else "W"


@dataclass(frozen=True)
class Action:
    kind: str
    pos: Optional[Coord] = None
    src: Optional[Coord] = None
    dst: Optional[Coord] = None
    top_count: Optional[int] = None


@dataclass(frozen=True)
class LastAction:
    type: str
    player: str
    pos: Optional[Coord] = None
    src: Optional[Coord] = None
    dst: Optional[Coord] = None
    top_count: Optional[int] = None

    def to_dict(self) -> dict:
        d: Dict[str, Any] = {"type": self.type, "player": self.player}
        if self.pos is not None:
            d["pos"] = format_key(self.pos)
        if self.src is not None:
            d["from"] = format_key(self.src)
            d["to"] = format_key(self.dst)
        if self.top_count is not None:
            d["top_count"] = self.top_count
        return d


@dataclass(frozen=True)
class Outcome:
    winner: Optional[str]

    def to_dict(self) -> dict:
        return {"winner": self.winner}


@dataclass
class MatchState:
    board: Board = field(default_factory=Board)
    phase: str = PLACING
    current_player: str = "W"
    pieces_left: Dict[str, int] = field(
        default_factory=lambda: {p: PIECES_PER_PLAYER for p in PLAYERS}
    )
    occupied: Set[Coord] = field(default_factory=set)
    # color -> nick, filled in by the room store
    players: Dict[str, Optional[str]] = field(default_factory=lambda: {p: None for p in PLAYERS})
    ai_player: Optional[str] = None
    last_action: Optional[LastAction] = None
    winner: Optional[str] = None

    def copy(self) -> "MatchState":
        return MatchState(
            board=self.board.copy(),
            phase=self.phase,
            current_player=self.current_player,
            pieces_left=dict(self.pieces_left),
            occupied=set(self.occupied),
            players=dict(self.players),
            ai_player=self.ai_player,
            last_action=self.last_action,
            winner=self.winner,
        )

    @property
    def game_over(self) -> bool:
        return self.phase == ENDED


@dataclass(frozen=True)
class ActionResult:
    accepted: bool
    state: MatchState
    outcome: Optional[Outcome] = None


def create_match() -> MatchState:
    return MatchState()


# -------- placement --------

def valid_placements(state: MatchState, player: str) -> List[Coord]:
    board = state.board
    if state.pieces_left[player] == PIECES_PER_PLAYER:
        if player == "W":
            return [ORIGIN] if board.is_empty(ORIGIN) else []
        if ORIGIN not in state.occupied:
            return []
        return [n for n in neighbors(ORIGIN) if is_inner(n) and board.is_empty(n)]

    cands = set()
    for occ in state.occupied:
        for n in neighbors(occ):
            if is_inner(n) and board.is_empty(n):
                cands.add(n)
    return sorted(cands)


def _apply_place(state: MatchState, player: str, pos: Coord) -> bool:
    if state.pieces_left[player] <= 0:
        return False
    if pos not in valid_placements(state, player):
        return False

    state.board.place(pos, player)
    state.occupied.add(pos)
    state.pieces_left[player] -= 1
    assert state.pieces_left[player] >= 0
    if sum(state.pieces_left.values()) == 0:
        state.phase = PLAYING
    state.last_action = LastAction(type=PLACE, player=player, pos=pos)
    return True


# -------- play --------

def _apply_play(state: MatchState, player: str, action: Action) -> bool:
    board = state.board
    src, dst = action.src, action.dst
    if src is None or dst is None:
        return False
    if not is_inner(src) or board.top(src) != player:
        return False

    targets = rules.targets_for(board, src, player)
    kind = targets.classify(dst, split=action.kind == SPLIT)
    if kind is None:
        return False

    if kind == rules.CAPTURE:
        board.merge_onto(src, dst)
    elif kind == rules.MOVE:
        board.relocate(src, dst)
    else:
        top_count = action.top_count
        if top_count is None or not 1 <= top_count < targets.height:
            return False
        board.split(src, dst, top_count)
        state.occupied.add(dst)

    state.last_action = LastAction(
        type=kind,
        player=player,
        src=src,
        dst=dst,
        top_count=action.top_count if kind == rules.SPLIT else None,
    )
    return True


# -------- termination --------

def evaluate_termination(board: Board) -> Optional[Outcome]:
    """Outcome once either side has no stack left on the inner board, else None.

    Winner is decided by stacks on the outer ring, then by pieces in those
    stacks; a full tie is a draw (winner None).
    """
    inner = {p: 0 for p in PLAYERS}
    outer_stacks = {p: 0 for p in PLAYERS}
    outer_pieces = {p: 0 for p in PLAYERS}

    for pos, stack in board.items():
        owner = stack[-1]
        if is_outer(pos):
            outer_stacks[owner] += 1
            outer_pieces[owner] += len(stack)
        else:
            inner[owner] += 1

    if inner["W"] > 0 and inner["B"] > 0:
        return None

    winner = None
    if outer_stacks["W"] != outer_stacks["B"]:
        winner = "W" if outer_stacks["W"] > outer_stacks["B"] else "B"
    elif outer_pieces["W"] != outer_pieces["B"]:
        winner = "W" if outer_pieces["W"] > outer_pieces["B"] else "B"
    return Outcome(winner=winner)


# -------- entry points --------

def apply_action(state: MatchState, player: str, action: Optional[Action]) -> ActionResult:
    """Apply one action for player.

    Illegal actions are declined: the result is not accepted and carries
    the untouched input state.
    """
    rejected = ActionResult(accepted=False, state=state)
    if action is None or state.phase == ENDED:
        return rejected
    if player != state.current_player:
        return rejected

    new_state = state.copy()
    if state.phase == PLACING:
        if action.kind != PLACE or action.pos is None:
            return rejected
        ok = _apply_place(new_state, player, action.pos)
    else:
        if action.kind not in (MOVE_OR_CAPTURE, SPLIT):
            return rejected
        ok = _apply_play(new_state, player, action)
    if not ok:
        return rejected

    new_state.current_player = opponent(player)

    outcome = None
    if new_state.phase == PLAYING:
        outcome = evaluate_termination(new_state.board)
        if outcome is not None:
            new_state.phase = ENDED
            new_state.winner = outcome.winner
    return ActionResult(accepted=True, state=new_state, outcome=outcome)


def parse_action(payload: Any) -> Optional[Action]:
    """Build an Action from a decoded JSON payload, None if malformed."""
    if not isinstance(payload, dict):
        return None
    kind = payload.get("kind")
    try:
        if kind == PLACE:
            return Action(kind=kind, pos=parse_key(payload["pos"]))
        if kind == MOVE_OR_CAPTURE:
            return Action(kind=kind, src=parse_key(payload["from"]), dst=parse_key(payload["to"]))
        if kind == SPLIT:
            top_count = payload["top_count"]
            if isinstance(top_count, bool) or not isinstance(top_count, int):
                return None
            return Action(
                kind=kind,
                src=parse_key(payload["from"]),
                dst=parse_key(payload["to"]),
                top_count=top_count,
            )
    except (KeyError, ValueError):
        return None
    return None


def serialize(state: MatchState) -> dict:
    return {
        "board": state.board.to_dict(),
        "phase": state.phase,
        "current_player": state.current_player,
        "pieces_left": dict(state.pieces_left),
        "occupied": [format_key(pos) for pos in sorted(state.occupied)],
        "players": dict(state.players),
        "ai_player": state.ai_player,
        "outer_colors": {format_key(pos): color for pos, color in OUTER_COLORS.items()},
        "last_action": state.last_action.to_dict() if state.last_action else None,
        "winner": state.winner,
        "game_over": state.game_over,
    }
