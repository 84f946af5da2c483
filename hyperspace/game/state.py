from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Dict, List, Optional, Set, Union

from hyperspace.core import BoardArray, Coord, Difficulty, GlobalPosition, Move, Player, copy_boards

DRAW = "Draw"


class PowerUpType(Enum):
    SWAP = "Swap"
    REMOVE = "Remove"
    BLOCK = "Block"
    PEEK = "Peek"
    CLONE = "Clone"

    @property
    def cost_key(self) -> str:
        return self.value.lower()


POWER_UP_DESCRIPTIONS: Dict[PowerUpType, str] = {
    PowerUpType.SWAP: "Exchange any two pieces on any board.",
    PowerUpType.REMOVE: "Delete one opponent piece.",
    PowerUpType.BLOCK: "Freeze a space for 3 turns.",
    PowerUpType.PEEK: "See AI's next intended move.",
    PowerUpType.CLONE: "Copy your last move to another space.",
}


@dataclass
class GameState:
    boards: List[BoardArray]  # one (rows, cols, depth) int8 array per board, indexed [x, y, z]
    blocked: List[Dict[Coord, int]]  # per board: cell -> turns until it frees up
    winning_cells: List[Set[Coord]]
    wallet: int
    scores: Dict[Player, int] = field(default_factory=lambda: {Player.X: 0, Player.O: 0})
    history: List[Move] = field(default_factory=list)
    current_player: Player = Player.X
    difficulty: Difficulty = Difficulty.ELITE
    is_game_over: bool = False
    winner: Optional[Union[Player, str]] = None
    selected_power_up: Optional[PowerUpType] = None
    peek: Optional[GlobalPosition] = None
    testing_mode: bool = False

    def copy(self) -> "GameState":
        return GameState(
            boards=copy_boards(self.boards),
            blocked=[dict(cells) for cells in self.blocked],
            winning_cells=[set(cells) for cells in self.winning_cells],
            wallet=self.wallet,
            scores=dict(self.scores),
            history=list(self.history),
            current_player=self.current_player,
            difficulty=self.difficulty,
            is_game_over=self.is_game_over,
            winner=self.winner,
            selected_power_up=self.selected_power_up,
            peek=self.peek,
            testing_mode=self.testing_mode,
        )

    @property
    def is_draw(self) -> bool:
        return self.winner == DRAW

    def cell(self, position: GlobalPosition) -> int:
        return int(self.boards[position.board_id][position.coords])

    def __repr__(self) -> str:
        return (
            f"GameState(current={self.current_player.name}, winner={self.winner}, "
            f"moves={len(self.history)}, wallet={self.wallet})"
        )
