from __future__ import annotations

import logging
import time
from typing import Optional, Union

import numpy as np

from hyperspace.ai import MoveSelector
from hyperspace.core import (
    EMPTY,
    Difficulty,
    GameConfig,
    GlobalPosition,
    IllegalMoveError,
    Move,
    Player,
    TopologyRegistry,
    WinEvaluator,
    create_empty_boards,
)

from .state import DRAW, GameState, PowerUpType

logger = logging.getLogger(__name__)


class HyperspaceGame:
    """State transitions for a human (X) versus computer (O) game.

    Every transition returns a new :class:`GameState` unless ``in_place`` is
    set. Line detection is delegated to the :class:`WinEvaluator`; the rules
    here only handle turn order, scoring, credits, blocked cells and
    power-ups.
    """

    def __init__(
        self,
        config: Optional[GameConfig] = None,
        *,
        difficulty: Union[Difficulty, str] = Difficulty.ELITE,
        rng: Optional[np.random.Generator] = None,
    ) -> None:
        self.config = config or GameConfig()
        self.registry = TopologyRegistry(self.config.boards, self.config.line_length)
        self.evaluator = WinEvaluator(self.registry, self.config.scoring)
        self.selector = MoveSelector(self.evaluator, self.config.weights, player=Player.O, rng=rng)
        self.difficulty = Difficulty.parse(difficulty)

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------
    def new_state(
        self,
        *,
        difficulty: Optional[Union[Difficulty, str]] = None,
        testing_mode: bool = False,
    ) -> GameState:
        board_count = self.registry.board_count
        return GameState(
            boards=create_empty_boards([spec.shape for spec in self.registry.boards]),
            blocked=[{} for _ in range(board_count)],
            winning_cells=[set() for _ in range(board_count)],
            wallet=self.config.economy.initial_wallet,
            difficulty=Difficulty.parse(difficulty) if difficulty is not None else self.difficulty,
            testing_mode=testing_mode,
        )

    def reset(self, state: GameState) -> GameState:
        return self.new_state(difficulty=state.difficulty, testing_mode=state.testing_mode)

    # ------------------------------------------------------------------
    # Moves
    # ------------------------------------------------------------------
    def apply_move(
        self,
        state: GameState,
        position: GlobalPosition,
        *,
        timestamp: Optional[float] = None,
        in_place: bool = False,
    ) -> GameState:
        if state.is_game_over:
            raise IllegalMoveError("Cannot move after the game is over.")
        if state.current_player is self.selector.player and not state.testing_mode:
            raise IllegalMoveError("It is the computer's turn; manual moves for it need testing mode.")
        return self._place(state, position, timestamp=timestamp, in_place=in_place)

    def _place(
        self,
        state: GameState,
        position: GlobalPosition,
        *,
        timestamp: Optional[float] = None,
        in_place: bool = False,
    ) -> GameState:
        target = state if in_place else state.copy()
        if target.is_game_over:
            raise IllegalMoveError("Cannot move after the game is over.")
        self._require_playable(target, position)

        player = target.current_player
        target.boards[position.board_id][position.coords] = int(player)
        target.history.append(
            Move(
                board_id=position.board_id,
                position=position.coords,
                player=player,
                timestamp=time.time() if timestamp is None else timestamp,
            )
        )
        self._settle(target, player)
        target.current_player = player.opponent()
        target.selected_power_up = None
        target.peek = None
        self._tick_blocked(target)
        self._check_stalemate(target)
        return target

    def ai_move(self, state: GameState, *, in_place: bool = False) -> GameState:
        if state.is_game_over:
            raise IllegalMoveError("Cannot move after the game is over.")
        if state.current_player is not self.selector.player:
            raise IllegalMoveError("It is not the computer's turn.")
        position = self.selector.select_move(state.boards, state.blocked, state.difficulty)
        logger.debug("AI (%s) plays %s", state.difficulty.value, position)
        return self._place(state, position, in_place=in_place)

    def undo(self, state: GameState, *, in_place: bool = False) -> GameState:
        cost = self.config.economy.undo_cost
        if len(state.history) < 2:
            raise IllegalMoveError("Nothing to rewind: undo needs two recorded moves.")
        if state.wallet < cost:
            raise IllegalMoveError(f"Undo costs {cost} credits, wallet holds {state.wallet}.")

        target = state if in_place else state.copy()
        for move in target.history[-2:]:
            target.boards[move.board_id][move.position] = EMPTY
        del target.history[-2:]
        target.wallet -= cost
        target.current_player = Player.X
        target.is_game_over = False
        target.winner = None
        target.winning_cells = [set() for _ in target.boards]
        return target

    # ------------------------------------------------------------------
    # Power-ups
    # ------------------------------------------------------------------
    def use_power_up(
        self,
        state: GameState,
        kind: Union[PowerUpType, str],
        target: Optional[GlobalPosition] = None,
        second: Optional[GlobalPosition] = None,
        *,
        in_place: bool = False,
    ) -> GameState:
        if not isinstance(kind, PowerUpType):
            try:
                kind = PowerUpType[str(kind).upper()]
            except KeyError as exc:
                raise IllegalMoveError(f"Unknown power-up: {kind!r}") from exc
        cost = self.power_up_cost(kind)
        if state.is_game_over:
            raise IllegalMoveError("Power-ups are unavailable once the game is over.")
        if state.wallet < cost:
            raise IllegalMoveError(f"{kind.value} costs {cost} credits, wallet holds {state.wallet}.")

        result = state if in_place else state.copy()
        user = result.current_player
        if kind is PowerUpType.SWAP:
            self._swap(result, self._need(target, kind), self._need(second, kind))
        elif kind is PowerUpType.REMOVE:
            self._remove(result, self._need(target, kind), user)
        elif kind is PowerUpType.BLOCK:
            self._block(result, self._need(target, kind))
        elif kind is PowerUpType.PEEK:
            result.peek = self.selector.select_move(result.boards, result.blocked, result.difficulty)
        elif kind is PowerUpType.CLONE:
            self._clone(result, self._need(target, kind), user)

        result.wallet -= cost
        result.selected_power_up = kind
        self._check_stalemate(result)
        logger.info("%s used %s for %d credits", user.name, kind.value, cost)
        return result

    def power_up_cost(self, kind: PowerUpType) -> int:
        try:
            return int(self.config.economy.power_up_costs[kind.cost_key])
        except KeyError as exc:
            raise IllegalMoveError(f"No price configured for {kind.value}.") from exc

    def _swap(self, state: GameState, first: GlobalPosition, second: GlobalPosition) -> None:
        self._require_on_board(first)
        self._require_on_board(second)
        if first == second:
            raise IllegalMoveError("Swap needs two different cells.")
        a, b = state.cell(first), state.cell(second)
        if a == EMPTY and b == EMPTY:
            raise IllegalMoveError("Swap needs at least one piece.")
        state.boards[first.board_id][first.coords] = b
        state.boards[second.board_id][second.coords] = a
        self._settle(state, state.current_player, award=False)

    def _remove(self, state: GameState, position: GlobalPosition, user: Player) -> None:
        self._require_on_board(position)
        if state.cell(position) != int(user.opponent()):
            raise IllegalMoveError(f"{position} does not hold an opponent piece.")
        state.boards[position.board_id][position.coords] = EMPTY
        state.winning_cells = [set() for _ in state.boards]

    def _block(self, state: GameState, position: GlobalPosition) -> None:
        self._require_playable(state, position)
        state.blocked[position.board_id][position.coords] = self.config.economy.block_turns

    def _clone(self, state: GameState, position: GlobalPosition, user: Player) -> None:
        if not any(move.player is user for move in state.history):
            raise IllegalMoveError("Clone needs a previous move to copy.")
        self._require_playable(state, position)
        state.boards[position.board_id][position.coords] = int(user)
        state.history.append(Move(position.board_id, position.coords, user, time.time()))
        self._settle(state, user)

    # ------------------------------------------------------------------
    # Helpers
    # ------------------------------------------------------------------
    def _settle(self, state: GameState, mover: Player, *, award: bool = True) -> None:
        result = self.evaluator.evaluate(state.boards, mover)
        winner = mover if result.has_winner else self.evaluator.winner(state.boards)
        if winner is not None and winner is not mover:
            result = self.evaluator.evaluate(state.boards, winner)

        state.winning_cells = [set() for _ in state.boards]
        for position in result.cells():
            state.winning_cells[position.board_id].add(position.coords)

        if award and winner is mover:
            points = self.evaluator.score(result)
            state.scores[mover] = state.scores.get(mover, 0) + points
            if mover is Player.X:
                state.wallet += points

        full = self.evaluator.is_full(state.boards)
        if winner is not None or full:
            state.is_game_over = True
            state.winner = winner if winner is not None else DRAW
            logger.info("Game over: %s", state.winner if state.is_draw else state.winner.name)

    def _check_stalemate(self, state: GameState) -> None:
        """End the game as a draw when the player to move has no eligible cell."""
        if state.is_game_over:
            return
        cells = self.evaluator.flatten(state.boards)
        if not self.selector.eligible_mask(cells, state.blocked).any():
            state.is_game_over = True
            state.winner = DRAW
            logger.info("Game over: %s, no eligible cell for %s", DRAW, state.current_player.name)

    def _tick_blocked(self, state: GameState) -> None:
        for cells in state.blocked:
            for coord in list(cells):
                cells[coord] -= 1
                if cells[coord] <= 0:
                    del cells[coord]

    def _require_on_board(self, position: GlobalPosition) -> None:
        if not self.registry.contains(position):
            raise IllegalMoveError(f"{position} is outside the boards.")

    def _require_playable(self, state: GameState, position: GlobalPosition) -> None:
        self._require_on_board(position)
        if state.cell(position) != EMPTY:
            raise IllegalMoveError(f"{position} is already occupied.")
        if position.coords in state.blocked[position.board_id]:
            raise IllegalMoveError(f"{position} is blocked.")

    @staticmethod
    def _need(position: Optional[GlobalPosition], kind: PowerUpType) -> GlobalPosition:
        if position is None:
            raise IllegalMoveError(f"{kind.value} needs a target cell.")
        return position
