"""Core geometry and win detection for Hyperspace tic-tac-toe."""

from .config import (
    DEFAULT_BOARD_SPECS,
    BoardSpec,
    Difficulty,
    EconomyConfig,
    GameConfig,
    ScoringConfig,
    SelectorWeights,
    config_from_dict,
    load_config,
)
from .errors import ConfigurationError, HyperspaceError, IllegalMoveError, InvariantViolation
from .evaluator import ClassifiedLine, LineKind, WinEvaluator, WinResult, classify_line
from .state import (
    EMPTY,
    BoardArray,
    Coord,
    GlobalPosition,
    LineFamily,
    Move,
    Occupancy,
    Player,
    WinningLine,
    copy_boards,
    create_empty_boards,
)
from .topology import DIRECTIONS, TopologyRegistry

__all__ = [
    "DEFAULT_BOARD_SPECS",
    "BoardSpec",
    "Difficulty",
    "EconomyConfig",
    "GameConfig",
    "ScoringConfig",
    "SelectorWeights",
    "config_from_dict",
    "load_config",
    "ConfigurationError",
    "HyperspaceError",
    "IllegalMoveError",
    "InvariantViolation",
    "ClassifiedLine",
    "LineKind",
    "WinEvaluator",
    "WinResult",
    "classify_line",
    "EMPTY",
    "BoardArray",
    "Coord",
    "GlobalPosition",
    "LineFamily",
    "Move",
    "Occupancy",
    "Player",
    "WinningLine",
    "copy_boards",
    "create_empty_boards",
    "DIRECTIONS",
    "TopologyRegistry",
]
