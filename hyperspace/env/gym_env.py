from __future__ import annotations

from typing import Dict, Optional, Sequence, Union

import gymnasium as gym
import numpy as np
from gymnasium import spaces

from hyperspace.core import BoardSpec, Difficulty, GameConfig, Player
from hyperspace.game import GameState, HyperspaceGame


class HyperspaceEnv(gym.Env):
    """The agent plays X; the built-in move selector answers as O within ``step``."""

    metadata = {"render_modes": ["ansi"], "render_fps": 4}

    def __init__(
        self,
        *,
        config: Optional[GameConfig] = None,
        difficulty: Union[Difficulty, str] = Difficulty.ELITE,
        enforce_legal_actions: bool = True,
        render_mode: Optional[str] = None,
    ) -> None:
        super().__init__()
        self._config = config
        self._difficulty = Difficulty.parse(difficulty)
        self._enforce_legal = enforce_legal_actions
        self.render_mode = render_mode

        self.game = HyperspaceGame(config, difficulty=self._difficulty)
        cells = self.game.registry.cell_count
        self.observation_space = spaces.Box(low=0, high=2, shape=(cells,), dtype=np.int8)
        self.action_space = spaces.Discrete(cells)

        self._state: GameState = self.game.new_state()

    def reset(self, *, seed: Optional[int] = None, options: Optional[Dict] = None):
        super().reset(seed=seed)
        difficulty = options.get("difficulty", self._difficulty) if options else self._difficulty
        self.game = HyperspaceGame(self._config, difficulty=difficulty, rng=self.np_random)
        self._state = self.game.new_state()
        return self._build_observation(), self._build_info()

    def step(self, action_index: int):
        if not self.action_space.contains(action_index):
            raise ValueError(f"Action index {action_index} out of bounds.")
        if self._state.is_game_over:
            raise ValueError("Episode is over; call reset().")

        legal_mask = self.legal_action_mask()
        if self._enforce_legal and not legal_mask[action_index]:
            raise ValueError("Illegal action provided and enforce_legal_actions=True.")

        position = self.game.registry.position_at(int(action_index))
        self._state = self.game.apply_move(self._state, position)
        if not self._state.is_game_over:
            self._state = self.game.ai_move(self._state)

        reward = self._compute_reward(self._state)
        terminated = self._state.is_game_over
        return self._build_observation(), reward, terminated, False, self._build_info()

    def legal_action_mask(self) -> np.ndarray:
        cells = self.game.evaluator.flatten(self._state.boards)
        return self.game.selector.eligible_mask(cells, self._state.blocked).astype(np.int8)

    def render(self):
        if self.render_mode != "ansi":
            raise NotImplementedError("Only 'ansi' render mode is supported.")
        return render_boards(self._state, self.game.registry.boards)

    # ------------------------------------------------------------------
    # Helpers
    # ------------------------------------------------------------------
    def _build_observation(self) -> np.ndarray:
        return self.game.evaluator.flatten(self._state.boards).astype(np.int8)

    def _build_info(self) -> Dict[str, object]:
        return {
            "legal_action_mask": self.legal_action_mask(),
            "wallet": self._state.wallet,
            "winner": self._state.winner,
        }

    def _compute_reward(self, state: GameState) -> float:
        if state.winner is Player.X:
            return 1.0
        if state.winner is Player.O:
            return -1.0
        return 0.0


def render_boards(state: GameState, specs: Sequence[BoardSpec] = ()) -> str:
    symbols = {0: ".", 1: "X", 2: "O"}
    labels = {spec.board_id: spec.label for spec in specs}
    blocks = []
    for board_id, board in enumerate(state.boards):
        rows, cols, depth = board.shape
        label = labels.get(board_id)
        lines = [f"Board {board_id}: {label}" if label else f"Board {board_id}"]
        for z in range(depth):
            lines.append(f" z={z}")
            for x in range(rows):
                row = []
                for y in range(cols):
                    if (x, y, z) in state.blocked[board_id]:
                        row.append("#")
                    else:
                        row.append(symbols[int(board[x, y, z])])
                lines.append("  " + "".join(row))
        blocks.append("\n".join(lines))
    return "\n".join(blocks)
