from __future__ import annotations

import logging
from typing import Iterable, Mapping, Optional, Sequence, Union

import numpy as np

from hyperspace.core import (
    EMPTY,
    Difficulty,
    GlobalPosition,
    InvariantViolation,
    Occupancy,
    Player,
    SelectorWeights,
    WinEvaluator,
)

logger = logging.getLogger(__name__)

BlockedCells = Union[Sequence[Iterable], Mapping[int, Iterable]]

_UNAVAILABLE = np.iinfo(np.int64).min


class MoveSelector:
    """Chooses the computer player's move at one of three difficulty tiers.

    Every question about lines ("what would this placement complete", "what
    would it deny the opponent") is answered by the :class:`WinEvaluator`.
    Hypothetical placements are written into a private flat copy of the
    occupancy and reverted; the caller's boards are never touched.

    Ties go to the lowest flat cell index, i.e. the lowest board id and then
    the lexicographically lowest ``(x, y, z)``.
    """

    def __init__(
        self,
        evaluator: WinEvaluator,
        weights: Optional[SelectorWeights] = None,
        *,
        player: Player = Player.O,
        rng: Optional[np.random.Generator] = None,
    ) -> None:
        self.evaluator = evaluator
        self.registry = evaluator.registry
        self.weights = weights or SelectorWeights()
        self.player = Player(player)
        self.rng = rng or np.random.default_rng()

    # ------------------------------------------------------------------
    def select_move(
        self,
        occupancy: Occupancy,
        blocked_cells: Optional[BlockedCells],
        difficulty: Union[Difficulty, str],
    ) -> GlobalPosition:
        tier = Difficulty.parse(difficulty)
        cells = self.evaluator.flatten(occupancy)
        eligible = self.eligible_mask(cells, blocked_cells)
        if not eligible.any():
            raise InvariantViolation("select_move called with no eligible cell")

        if tier is Difficulty.ROOKIE:
            index = self._rookie(cells, eligible)
        else:
            scores = self._scores(cells, eligible, tier)
            index = int(np.argmax(scores))
            logger.debug("%s picked cell %d with score %d", tier.value, index, scores[index])

        return self.registry.position_at(index)

    def score_moves(
        self,
        occupancy: Occupancy,
        blocked_cells: Optional[BlockedCells],
        difficulty: Union[Difficulty, str],
    ) -> np.ndarray:
        """Per-cell scores for ``difficulty``; ineligible cells hold the int64 minimum."""
        tier = Difficulty.parse(difficulty)
        cells = self.evaluator.flatten(occupancy)
        eligible = self.eligible_mask(cells, blocked_cells)
        if tier is Difficulty.ROOKIE:
            completes = self.evaluator.completion_counts(cells, self.player)
            scores = completes.astype(np.int64) * self.weights.complete
            return np.where(eligible, scores, _UNAVAILABLE)
        return self._scores(cells, eligible, tier)

    def eligible_mask(self, cells: np.ndarray, blocked_cells: Optional[BlockedCells]) -> np.ndarray:
        mask = cells == EMPTY
        if not blocked_cells:
            return mask
        items = blocked_cells.items() if isinstance(blocked_cells, Mapping) else enumerate(blocked_cells)
        for board_id, coords in items:
            for coord in coords or ():
                if isinstance(coord, GlobalPosition):
                    position = coord
                else:
                    position = GlobalPosition(board_id, *coord)
                if not self.registry.contains(position):
                    raise InvariantViolation(f"Blocked cell {position} lies outside the boards")
                mask[self.registry.flat_index(position)] = False
        return mask

    # ------------------------------------------------------------------
    # Tiers
    # ------------------------------------------------------------------
    def _rookie(self, cells: np.ndarray, eligible: np.ndarray) -> int:
        completes = self.evaluator.completion_counts(cells, self.player)
        winning = np.flatnonzero((completes > 0) & eligible)
        if winning.size:
            return int(winning[0])
        return int(self.rng.choice(np.flatnonzero(eligible)))

    def _scores(self, cells: np.ndarray, eligible: np.ndarray, tier: Difficulty) -> np.ndarray:
        base = self._heuristic(cells, self.player)
        if tier is Difficulty.ELITE:
            return np.where(eligible, base, _UNAVAILABLE)
        return self._lookahead(cells, eligible, base)

    def _heuristic(self, cells: np.ndarray, player: Player) -> np.ndarray:
        weights = self.weights
        completes = self.evaluator.completion_counts(cells, player)
        denies = self.evaluator.completion_counts(cells, player.opponent())
        live = self.evaluator.live_line_counts(cells, player)
        return (
            completes.astype(np.int64) * weights.complete
            + denies.astype(np.int64) * weights.block
            + live.astype(np.int64) * weights.position
        )

    def _lookahead(self, cells: np.ndarray, eligible: np.ndarray, base: np.ndarray) -> np.ndarray:
        opponent = self.player.opponent()
        completes = self.evaluator.completion_counts(cells, self.player)
        scratch = cells.copy()
        replies = eligible.copy()
        scores = np.full(cells.shape, _UNAVAILABLE, dtype=np.int64)

        for index in np.flatnonzero(eligible):
            if completes[index] > 0:
                # Winning move: the opponent never gets a reply.
                scores[index] = base[index]
                continue
            scratch[index] = int(self.player)
            replies[index] = False
            best_reply = 0
            if replies.any():
                reply_scores = self._heuristic(scratch, opponent)
                best_reply = int(reply_scores[replies].max())
            scores[index] = base[index] - best_reply
            scratch[index] = EMPTY
            replies[index] = True
        return scores
