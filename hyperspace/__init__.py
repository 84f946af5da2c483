"""Hyperspace tic-tac-toe: multi-board win detection and computer opponent."""

from . import ai, core, env, game
from .ai import MoveSelector
from .core import (
    BoardSpec,
    ConfigurationError,
    Difficulty,
    GameConfig,
    GlobalPosition,
    InvariantViolation,
    LineKind,
    Player,
    TopologyRegistry,
    WinEvaluator,
    WinningLine,
    WinResult,
    load_config,
)
from .env import HyperspaceEnv
from .game import GameState, HyperspaceGame, PowerUpType

__all__ = [
    "ai",
    "core",
    "env",
    "game",
    "MoveSelector",
    "BoardSpec",
    "ConfigurationError",
    "Difficulty",
    "GameConfig",
    "GlobalPosition",
    "InvariantViolation",
    "LineKind",
    "Player",
    "TopologyRegistry",
    "WinEvaluator",
    "WinningLine",
    "WinResult",
    "load_config",
    "HyperspaceEnv",
    "GameState",
    "HyperspaceGame",
    "PowerUpType",
]
