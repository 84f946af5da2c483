from __future__ import annotations

from functools import cached_property
from typing import Dict, FrozenSet, List, Optional, Sequence, Tuple

import numpy as np

from .config import DEFAULT_BOARD_SPECS, BoardSpec
from .errors import ConfigurationError
from .state import Coord, GlobalPosition, LineFamily, WinningLine

# One representative per opposite pair: 3 axes, 6 planar and 4 space diagonals.
DIRECTIONS: Tuple[Coord, ...] = (
    (1, 0, 0),
    (0, 1, 0),
    (0, 0, 1),
    (1, 1, 0),
    (1, -1, 0),
    (1, 0, 1),
    (1, 0, -1),
    (0, 1, 1),
    (0, 1, -1),
    (1, 1, 1),
    (1, 1, -1),
    (1, -1, 1),
    (-1, 1, 1),
)

_FAMILY_BY_RANK = {
    1: LineFamily.AXIS,
    2: LineFamily.PLANAR_DIAGONAL,
    3: LineFamily.SPACE_DIAGONAL,
}


def _family_for(direction: Coord) -> LineFamily:
    return _FAMILY_BY_RANK[sum(1 for step in direction if step != 0)]


def _normalize_coords(spec: BoardSpec, coords: Sequence[int]) -> Optional[Coord]:
    """Wrap ``coords`` on the axes ``spec`` wraps; None if any other axis is out of range."""
    normalized = []
    for value, size, wraps in zip(coords, spec.shape, spec.wrap):
        if wraps:
            value %= size
        elif not 0 <= value < size:
            return None
        normalized.append(value)
    return tuple(normalized)


class TopologyRegistry:
    """Enumerates every winning line of a fixed set of boards.

    Lines are computed once at construction and never change. Each board is
    scanned along the 13 canonical directions; axes flagged as wrapping are
    normalised modulo their length instead of being bounds-checked, and the
    resulting lines are de-duplicated by their set of positions.

    Cross-board lines join the same straight segment of ``line_length / B``
    cells on each of the ``B`` boards, so every such line visits matching
    ``(x, y, z)`` coordinates on all boards.

    Cells also get a flat index (board 0 first, then ``x``, ``y``, ``z`` in
    C order) so that line membership can be tested with numpy fancy indexing.
    """

    def __init__(self, boards: Sequence[BoardSpec] = DEFAULT_BOARD_SPECS, line_length: int = 4) -> None:
        if not boards:
            raise ConfigurationError("At least one board is required")
        if line_length < 1:
            raise ConfigurationError(f"line_length must be positive, got {line_length}")
        self.boards: Tuple[BoardSpec, ...] = tuple(boards)
        self.line_length = line_length

        offsets = []
        total = 0
        for spec in self.boards:
            offsets.append(total)
            total += spec.cell_count
        self._offsets: Tuple[int, ...] = tuple(offsets)
        self.cell_count = total

        self._board_lines: Dict[int, Tuple[WinningLine, ...]] = {
            spec.board_id: self._enumerate_board(spec) for spec in self.boards
        }
        self._cross_lines = self._enumerate_cross_board()

    # ------------------------------------------------------------------
    # Public contract
    # ------------------------------------------------------------------
    @property
    def board_count(self) -> int:
        return len(self.boards)

    def spec(self, board_id: int) -> BoardSpec:
        if not 0 <= board_id < len(self.boards):
            raise ConfigurationError(f"Unknown board id {board_id}")
        return self.boards[board_id]

    def lines_for(self, board_id: int) -> Tuple[WinningLine, ...]:
        self.spec(board_id)
        return self._board_lines[board_id]

    def cross_board_lines(self) -> Tuple[WinningLine, ...]:
        return self._cross_lines

    def all_lines(self) -> Tuple[WinningLine, ...]:
        return self._all_lines

    def normalize(self, board_id: int, x: int, y: int, z: int) -> Optional[GlobalPosition]:
        coords = _normalize_coords(self.spec(board_id), (x, y, z))
        return None if coords is None else GlobalPosition(board_id, *coords)

    def contains(self, position: GlobalPosition) -> bool:
        if not 0 <= position.board_id < len(self.boards):
            return False
        spec = self.boards[position.board_id]
        return all(0 <= value < size for value, size in zip(position.coords, spec.shape))

    # ------------------------------------------------------------------
    # Flat indexing
    # ------------------------------------------------------------------
    def flat_index(self, position: GlobalPosition) -> int:
        spec = self.spec(position.board_id)
        local = int(np.ravel_multi_index(position.coords, spec.shape))
        return self._offsets[position.board_id] + local

    def position_at(self, index: int) -> GlobalPosition:
        if not 0 <= index < self.cell_count:
            raise IndexError(f"Cell index {index} out of range")
        board_id = int(np.searchsorted(self._offsets, index, side="right")) - 1
        spec = self.boards[board_id]
        x, y, z = np.unravel_index(index - self._offsets[board_id], spec.shape)
        return GlobalPosition(board_id, int(x), int(y), int(z))

    @cached_property
    def _all_lines(self) -> Tuple[WinningLine, ...]:
        lines: List[WinningLine] = []
        for spec in self.boards:
            lines.extend(self._board_lines[spec.board_id])
        lines.extend(self._cross_lines)
        return tuple(lines)

    @cached_property
    def line_index(self) -> np.ndarray:
        """``(L, N)`` array of flat cell indices, one row per line of :meth:`all_lines`."""
        rows = [[self.flat_index(p) for p in line.positions] for line in self._all_lines]
        index = np.array(rows, dtype=np.intp).reshape(len(rows), self.line_length)
        index.setflags(write=False)
        return index

    @cached_property
    def incidence(self) -> np.ndarray:
        """``(cells, L)`` boolean matrix: cell ``c`` lies on line ``l``."""
        matrix = np.zeros((self.cell_count, len(self._all_lines)), dtype=bool)
        line_ids = np.repeat(np.arange(len(self._all_lines)), self.line_length)
        matrix[self.line_index.ravel(), line_ids] = True
        matrix.setflags(write=False)
        return matrix

    def lines_through(self, index: int) -> np.ndarray:
        return np.flatnonzero(self.incidence[index])

    # ------------------------------------------------------------------
    # Enumeration
    # ------------------------------------------------------------------
    def _enumerate_board(self, spec: BoardSpec) -> Tuple[WinningLine, ...]:
        seen: set[FrozenSet[GlobalPosition]] = set()
        lines: List[WinningLine] = []
        for x in range(spec.rows):
            for y in range(spec.cols):
                for z in range(spec.depth):
                    for direction in DIRECTIONS:
                        positions = self._walk(spec, (x, y, z), direction, self.line_length)
                        if positions is None:
                            continue
                        key = frozenset(positions)
                        if key in seen:
                            continue
                        seen.add(key)
                        lines.append(WinningLine(positions, _family_for(direction)))
        return tuple(lines)

    def _walk(
        self,
        spec: BoardSpec,
        start: Coord,
        direction: Coord,
        length: int,
    ) -> Optional[Tuple[GlobalPosition, ...]]:
        positions: List[GlobalPosition] = []
        for step in range(length):
            coords = _normalize_coords(
                spec, tuple(origin + delta * step for origin, delta in zip(start, direction))
            )
            if coords is None:
                return None
            positions.append(GlobalPosition(spec.board_id, *coords))
        if len(set(positions)) != length:
            # A wrapped axis shorter than the line revisits cells.
            return None
        return tuple(positions)

    def _enumerate_cross_board(self) -> Tuple[WinningLine, ...]:
        board_count = len(self.boards)
        if board_count < 2 or self.line_length % board_count:
            return ()
        segment = self.line_length // board_count
        # Segments must fit every board at the same coordinates.
        shared = BoardSpec(
            0,
            min(spec.rows for spec in self.boards),
            min(spec.cols for spec in self.boards),
            min(spec.depth for spec in self.boards),
        )
        directions = DIRECTIONS if segment > 1 else ((0, 0, 0),)

        seen: set[FrozenSet[GlobalPosition]] = set()
        lines: List[WinningLine] = []
        for x in range(shared.rows):
            for y in range(shared.cols):
                for z in range(shared.depth):
                    for direction in directions:
                        cells = self._walk(shared, (x, y, z), direction, segment)
                        if cells is None:
                            continue
                        positions = tuple(
                            GlobalPosition(spec.board_id, *cell.coords)
                            for spec in self.boards
                            for cell in cells
                        )
                        key = frozenset(positions)
                        if key in seen:
                            continue
                        seen.add(key)
                        lines.append(WinningLine(positions, LineFamily.CROSS_BOARD))
        return tuple(lines)
