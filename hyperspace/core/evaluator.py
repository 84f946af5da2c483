from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Optional, Tuple

import numpy as np

from .config import ScoringConfig
from .errors import InvariantViolation
from .state import EMPTY, Occupancy, Player, WinningLine
from .topology import TopologyRegistry


class LineKind(Enum):
    CROSS_BOARD = "cross_board"
    DIAGONAL_3D = "diagonal_3d"
    STANDARD = "standard"


@dataclass(frozen=True)
class ClassifiedLine:
    line: WinningLine
    kind: LineKind
    spans_depth: bool


@dataclass(frozen=True)
class WinResult:
    winner: Optional[Player]
    lines: Tuple[ClassifiedLine, ...] = ()

    @property
    def has_winner(self) -> bool:
        return self.winner is not None

    def cells(self):
        return {position for classified in self.lines for position in classified.line.positions}


def classify_line(line: WinningLine) -> ClassifiedLine:
    spans_depth = line.spans_depth
    if line.is_cross_board:
        kind = LineKind.CROSS_BOARD
    elif spans_depth:
        kind = LineKind.DIAGONAL_3D
    else:
        kind = LineKind.STANDARD
    return ClassifiedLine(line=line, kind=kind, spans_depth=spans_depth)


class WinEvaluator:
    """Reports which winning lines a player has completed.

    All methods are pure reads of the occupancy they are given. Besides the
    public :meth:`evaluate`, the evaluator exposes vectorised primitives over
    the flat cell vector (see :meth:`flatten`) that the move selector uses to
    ask what a hypothetical placement would complete or deny.
    """

    def __init__(self, registry: TopologyRegistry, scoring: Optional[ScoringConfig] = None) -> None:
        self.registry = registry
        self.scoring = scoring or ScoringConfig()
        self._lines = registry.all_lines()
        self._classified = tuple(classify_line(line) for line in self._lines)
        self._line_index = registry.line_index
        self._incidence = registry.incidence.astype(np.int32)
        self._line_length = registry.line_length

    # ------------------------------------------------------------------
    # Occupancy views
    # ------------------------------------------------------------------
    def flatten(self, occupancy: Occupancy) -> np.ndarray:
        if len(occupancy) != self.registry.board_count:
            raise InvariantViolation(
                f"Expected {self.registry.board_count} boards, got {len(occupancy)}"
            )
        parts = []
        for spec, board in zip(self.registry.boards, occupancy):
            board = np.asarray(board, dtype=np.int8)
            if board.shape != spec.shape:
                raise InvariantViolation(
                    f"Board {spec.board_id} has shape {board.shape}, expected {spec.shape}"
                )
            parts.append(board.ravel())
        return np.concatenate(parts)

    def is_full(self, occupancy: Occupancy) -> bool:
        return bool(np.all(self.flatten(occupancy) != EMPTY))

    # ------------------------------------------------------------------
    # Evaluation
    # ------------------------------------------------------------------
    def evaluate(self, occupancy: Occupancy, player: Player) -> WinResult:
        cells = self.flatten(occupancy)
        completed = np.flatnonzero(self.completed_mask(cells, player))
        if completed.size == 0:
            return WinResult(winner=None)
        lines = tuple(self._classified[i] for i in completed)
        return WinResult(winner=Player(player), lines=lines)

    def winner(self, occupancy: Occupancy) -> Optional[Player]:
        for player in (Player.X, Player.O):
            if self.evaluate(occupancy, player).has_winner:
                return player
        return None

    def score(self, result: WinResult) -> int:
        if result.winner is None:
            return 0
        scoring = self.scoring
        points = len(result.lines) * scoring.line
        for classified in result.lines:
            if classified.kind is LineKind.CROSS_BOARD:
                points += scoring.diagonal_3d * 2
                if scoring.stack_cross_board_bonus and classified.spans_depth:
                    points += scoring.diagonal_3d
            elif classified.kind is LineKind.DIAGONAL_3D:
                points += scoring.diagonal_3d
        return points

    # ------------------------------------------------------------------
    # Flat-vector primitives
    # ------------------------------------------------------------------
    def line_tallies(self, cells: np.ndarray, player: Player) -> Tuple[np.ndarray, np.ndarray]:
        """Per line: how many cells ``player`` holds and how many the opponent holds."""
        values = cells[self._line_index]
        own = np.count_nonzero(values == int(player), axis=1)
        opposing = np.count_nonzero(values == int(Player(player).opponent()), axis=1)
        return own, opposing

    def completed_mask(self, cells: np.ndarray, player: Player) -> np.ndarray:
        return np.all(cells[self._line_index] == int(player), axis=1)

    def completion_counts(self, cells: np.ndarray, player: Player) -> np.ndarray:
        """Per cell: lines a placement of ``player`` there would complete.

        Only lines missing exactly one mark with no opposing mark qualify, so
        the count is meaningful for empty cells; occupied cells report 0.
        """
        own, opposing = self.line_tallies(cells, player)
        one_short = ((own == self._line_length - 1) & (opposing == 0)).astype(np.int32)
        counts = self._incidence @ one_short
        counts[cells != EMPTY] = 0
        return counts

    def live_line_counts(self, cells: np.ndarray, player: Player) -> np.ndarray:
        """Per cell: lines through it that hold no opposing mark."""
        _, opposing = self.line_tallies(cells, player)
        return self._incidence @ (opposing == 0).astype(np.int32)
