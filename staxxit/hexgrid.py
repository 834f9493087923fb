"""
Hex geometry for the Staxxit board.

Axial coordinates (q, r) with the implied cube coordinate s = -q - r.
Cells within distance 5 of the origin form the inner (playable) board,
the ring at distance 6 holds the 36 exit cells.
"""

from __future__ import annotations

import math
from types import MappingProxyType
from typing import TYPE_CHECKING, Dict, List, Mapping, Sequence, Tuple, Union

if TYPE_CHECKING:
    from .board import Board

Coord = Tuple[int, int]

INNER_RADIUS = 5
OUTER_RADIUS = 6

ORIGIN: Coord = (0, 0)

DIRECTIONS: Tuple[Coord, ...] = (
    (1, 0),
    (1, -1),
    (0, -1),
    (-1, 0),
    (-1, 1),
    (0, 1),
)

# Corners of the outer ring accept exits from either color
DUAL_CELLS = frozenset({(6, 0), (0, 6), (-6, 6), (0, -6), (6, -6), (-6, 0)})

BOTH = "both"


def format_key(pos: Coord) -> str:
    return f"{pos[0]},{pos[1]}"


def parse_key(key: Union[str, Sequence[int]]) -> Coord:
    """Parse a wire coordinate ("q,r" or [q, r]) into a tuple.

    Raises ValueError for anything else.
    """
    if isinstance(key, str):
        parts = key.split(",")
    elif isinstance(key, (list, tuple)):
        parts = list(key)
    else:
        raise ValueError(f"Bad coordinate: {key!r}")
    if len(parts) != 2:
        raise ValueError(f"Bad coordinate: {key!r}")
    coord = []
    for p in parts:
        if isinstance(p, str):
            coord.append(int(p))
        elif isinstance(p, int) and not isinstance(p, bool):
            coord.append(p)
        else:
            raise ValueError(f"Bad coordinate: {key!r}")
    return coord[0], coord[1]


def cube_distance(a: Coord, b: Coord) -> int:
    aq, ar = a
    bq, br = b
    a_s = -aq - ar
    b_s = -bq - br
    return max(abs(aq - bq), abs(ar - br), abs(a_s - b_s))


def distance_from_center(pos: Coord) -> int:
    return cube_distance(ORIGIN, pos)


def is_inner(pos: Coord) -> bool:
    return distance_from_center(pos) <= INNER_RADIUS


def is_outer(pos: Coord) -> bool:
    return distance_from_center(pos) == OUTER_RADIUS


def on_board(pos: Coord) -> bool:
    return distance_from_center(pos) <= OUTER_RADIUS


def step(pos: Coord, direction: Coord, k: int = 1) -> Coord:
    return pos[0] + k * direction[0], pos[1] + k * direction[1]


def neighbors(pos: Coord) -> List[Coord]:
    """Adjacent cells, inner or outer, in DIRECTIONS order."""
    res = []
    for d in DIRECTIONS:
        n = step(pos, d)
        if on_board(n):
            res.append(n)
    return res


def path_clear(board: Board, start: Coord, direction: Coord, steps: int) -> bool:
    """True if every cell strictly between start and the target is inner and empty."""
    for i in range(1, steps):
        cell = step(start, direction, i)
        if not is_inner(cell) or board.get(cell):
            return False
    return True


def _pixel_angle(pos: Coord) -> float:
    q, r = pos
    x = math.sqrt(3) * q + (math.sqrt(3) / 2) * r
    y = 1.5 * r
    return math.atan2(y, x)


def _cells_at(predicate) -> Tuple[Coord, ...]:
    cells = []
    for q in range(-OUTER_RADIUS, OUTER_RADIUS + 1):
        for r in range(-OUTER_RADIUS, OUTER_RADIUS + 1):
            if predicate((q, r)):
                cells.append((q, r))
    return tuple(cells)


def _build_outer_ring() -> Tuple[Coord, ...]:
    ring = sorted(_cells_at(is_outer), key=_pixel_angle)
    start = ring.index((OUTER_RADIUS, 0))
    return tuple(ring[start:] + ring[:start])


def _build_outer_colors(ring: Sequence[Coord]) -> Dict[Coord, str]:
    colors: Dict[Coord, str] = {}
    toggle = "W"
    for pos in ring:
        if pos in DUAL_CELLS:
            colors[pos] = BOTH
        else:
            colors[pos] = toggle
            toggle = "B" if toggle == "W" else "W"
    return colors


INNER_CELLS: Tuple[Coord, ...] = _cells_at(is_inner)
OUTER_CELLS: Tuple[Coord, ...] = _cells_at(is_outer)

# Outer ring in angular order starting at (6, 0)
OUTER_RING: Tuple[Coord, ...] = _build_outer_ring()

# Shared by every match, never mutated
OUTER_COLORS: Mapping[Coord, str] = MappingProxyType(_build_outer_colors(OUTER_RING))


def accepts_exit(pos: Coord, player: str) -> bool:
    color = OUTER_COLORS.get(pos)
    return color == player or color == BOTH
