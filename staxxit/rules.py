"""
Move generation for Staxxit.

A stack of height h reaches exactly h cells when it captures or exits, but
may slide to any empty inner cell within h steps along a clear ray. Keep
this asymmetry; it is how the game is played.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import List, Optional

from .board import Board
from .hexgrid import DIRECTIONS, Coord, accepts_exit, is_inner, is_outer, neighbors, path_clear, step

SPLIT_MIN_HEIGHT = 12

MOVE = "move"
CAPTURE = "capture"
SPLIT = "split"


def capture_targets(board: Board, pos: Coord, player: str) -> List[Coord]:
    h = board.height(pos)
    if h == 0:
        return []
    targets = []
    for d in DIRECTIONS:
        target = step(pos, d, h)
        if not is_inner(target):
            continue
        if not path_clear(board, pos, d, h):
            continue
        top = board.top(target)
        if top is not None and top != player:
            targets.append(target)
    return targets


def move_targets(board: Board, pos: Coord, player: str) -> List[Coord]:
    h = board.height(pos)
    targets = []
    for d in DIRECTIONS:
        for k in range(1, h + 1):
            target = step(pos, d, k)
            if not is_inner(target):
                break
            if not path_clear(board, pos, d, k):
                break
            if not board.is_empty(target):
                break
            targets.append(target)
    return targets


def exit_targets(board: Board, pos: Coord, player: str) -> List[Coord]:
    h = board.height(pos)
    if h == 0:
        return []
    targets = []
    for d in DIRECTIONS:
        target = step(pos, d, h)
        if not is_outer(target):
            continue
        if not path_clear(board, pos, d, h):
            continue
        if board.is_empty(target) and accepts_exit(target, player):
            targets.append(target)
    return targets


def can_split(board: Board, pos: Coord) -> bool:
    return board.height(pos) >= SPLIT_MIN_HEIGHT


def split_targets(board: Board, pos: Coord) -> List[Coord]:
    if not can_split(board, pos):
        return []
    return [n for n in neighbors(pos) if is_inner(n) and board.is_empty(n)]


def has_any_capture(board: Board, player: str) -> bool:
    for pos in board.owned_by(player):
        if capture_targets(board, pos, player):
            return True
    return False


@dataclass
class Targets:
    """Every target category for one origin, computed once per action."""

    origin: Coord
    height: int
    mandatory_capture: bool
    captures: List[Coord] = field(default_factory=list)
    moves: List[Coord] = field(default_factory=list)
    exits: List[Coord] = field(default_factory=list)
    splits: List[Coord] = field(default_factory=list)

    def legal(self) -> List[Coord]:
        if self.mandatory_capture:
            return list(self.captures)
        return self.moves + self.exits + self.splits

    def classify(self, to: Coord, split: bool = False) -> Optional[str]:
        """Resolve the action type for a destination, or None if illegal.

        Plain moves resolve to a capture first, then a slide or exit. A
        split request only matches split targets.
        """
        if split:
            if self.mandatory_capture:
                return None
            return SPLIT if to in self.splits else None
        if to in self.captures:
            return CAPTURE
        if self.mandatory_capture:
            return None
        if to in self.moves or to in self.exits:
            return MOVE
        return None


def targets_for(board: Board, pos: Coord, player: str) -> Targets:
    return Targets(
        origin=pos,
        height=board.height(pos),
        mandatory_capture=has_any_capture(board, player),
        captures=capture_targets(board, pos, player),
        moves=move_targets(board, pos, player),
        exits=exit_targets(board, pos, player),
        splits=split_targets(board, pos),
    )


def legal_targets(board: Board, pos: Coord, player: str) -> List[Coord]:
    return targets_for(board, pos, player).legal()
