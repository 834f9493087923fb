from __future__ import annotations

from typing import Dict, Iterator, List, Optional, Tuple

from .hexgrid import Coord, format_key, is_inner

Stack = List[str]


class Board:
    """Occupied cells only. A stack is a list of owner tokens, bottom to top."""

    def __init__(self, stacks: Optional[Dict[Coord, Stack]] = None):
        self._stacks: Dict[Coord, Stack] = {}
        if stacks:
            for pos, stack in stacks.items():
                if stack:
                    self._stacks[pos] = list(stack)

    def copy(self) -> "Board":
        return Board(self._stacks)

    def __contains__(self, pos: Coord) -> bool:
        return pos in self._stacks

    def __iter__(self) -> Iterator[Coord]:
        return iter(self._stacks)

    def __len__(self) -> int:
        return len(self._stacks)

    def get(self, pos: Coord, default=None) -> Optional[Stack]:
        return self._stacks.get(pos, default)

    def items(self) -> Iterator[Tuple[Coord, Stack]]:
        return iter(self._stacks.items())

    def stack(self, pos: Coord) -> Stack:
        return self._stacks.get(pos, [])

    def height(self, pos: Coord) -> int:
        return len(self._stacks.get(pos, ()))

    def top(self, pos: Coord) -> Optional[str]:
        stack = self._stacks.get(pos)
        return stack[-1] if stack else None

    def is_empty(self, pos: Coord) -> bool:
        return pos not in self._stacks

    def owned_by(self, player: str) -> List[Coord]:
        """Inner cells whose top token is player."""
        return [pos for pos, stack in self._stacks.items() if is_inner(pos) and stack[-1] == player]

    # -------- mutations --------

    def place(self, pos: Coord, player: str) -> None:
        assert pos not in self._stacks, f"{pos} is already occupied"
        self._stacks[pos] = [player]

    def relocate(self, src: Coord, dst: Coord) -> None:
        """Move the whole stack from src to an empty dst."""
        assert dst not in self._stacks, f"{dst} is already occupied"
        self._stacks[dst] = self._stacks.pop(src)

    def merge_onto(self, src: Coord, dst: Coord) -> None:
        """Put the stack at src on top of the stack at dst."""
        moving = self._stacks.pop(src)
        self._stacks[dst] = self._stacks[dst] + moving

    def split(self, src: Coord, dst: Coord, top_count: int) -> None:
        """Peel top_count tokens off src into a new stack at dst."""
        stack = self._stacks[src]
        assert 1 <= top_count < len(stack), "split must leave both parts non-empty"
        assert dst not in self._stacks, f"{dst} is already occupied"
        self._stacks[dst] = stack[-top_count:]
        self._stacks[src] = stack[:-top_count]

    def to_dict(self) -> Dict[str, Stack]:
        return {format_key(pos): list(stack) for pos, stack in self._stacks.items()}
