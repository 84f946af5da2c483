from __future__ import annotations

from dataclasses import dataclass
from enum import Enum, IntEnum
from typing import FrozenSet, List, Sequence, Tuple

import numpy as np
from numpy.typing import NDArray

BoardArray = NDArray[np.int8]
Occupancy = Sequence[BoardArray]
Coord = Tuple[int, int, int]

EMPTY = 0


class Player(IntEnum):
    X = 1
    O = 2

    def opponent(self) -> "Player":
        return Player.O if self == Player.X else Player.X


class LineFamily(Enum):
    AXIS = "axis"
    PLANAR_DIAGONAL = "planar_diagonal"
    SPACE_DIAGONAL = "space_diagonal"
    CROSS_BOARD = "cross_board"


@dataclass(frozen=True, order=True)
class GlobalPosition:
    board_id: int
    x: int
    y: int
    z: int

    @property
    def coords(self) -> Coord:
        return (self.x, self.y, self.z)


@dataclass(frozen=True)
class WinningLine:
    positions: Tuple[GlobalPosition, ...]
    family: LineFamily

    def __len__(self) -> int:
        return len(self.positions)

    def __iter__(self):
        return iter(self.positions)

    @property
    def key(self) -> FrozenSet[GlobalPosition]:
        return frozenset(self.positions)

    @property
    def board_ids(self) -> Tuple[int, ...]:
        return tuple(sorted({p.board_id for p in self.positions}))

    @property
    def is_cross_board(self) -> bool:
        return len(self.board_ids) > 1

    @property
    def spans_depth(self) -> bool:
        first_z = self.positions[0].z
        return any(p.z != first_z for p in self.positions)


@dataclass(frozen=True)
class Move:
    board_id: int
    position: Coord
    player: Player
    timestamp: float

    @property
    def global_position(self) -> GlobalPosition:
        x, y, z = self.position
        return GlobalPosition(self.board_id, x, y, z)


def create_empty_boards(shapes: Sequence[Tuple[int, int, int]]) -> List[BoardArray]:
    return [np.zeros(shape, dtype=np.int8) for shape in shapes]


def copy_boards(boards: Occupancy) -> List[BoardArray]:
    return [board.copy() for board in boards]
