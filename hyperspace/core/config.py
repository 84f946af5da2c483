from __future__ import annotations

import logging
from dataclasses import dataclass, field, fields
from enum import Enum
from pathlib import Path
from typing import Any, Dict, Mapping, Optional, Sequence, Tuple, Union

import yaml

from .errors import ConfigurationError

logger = logging.getLogger(__name__)


class Difficulty(Enum):
    ROOKIE = "Rookie"
    ELITE = "Elite"
    GODLIKE = "Godlike"

    @classmethod
    def parse(cls, value: Union["Difficulty", str]) -> "Difficulty":
        if isinstance(value, Difficulty):
            return value
        if isinstance(value, str):
            key = value.strip().lower()
            for member in cls:
                if key in (member.name.lower(), member.value.lower()):
                    return member
            if key in _DIFFICULTY_ALIASES:
                return _DIFFICULTY_ALIASES[key]
        raise ConfigurationError(f"Unknown difficulty tier: {value!r}")


# Labels used by the original UI selector.
_DIFFICULTY_ALIASES = {
    "easy": Difficulty.ROOKIE,
    "medium": Difficulty.ELITE,
    "hard": Difficulty.GODLIKE,
}


@dataclass(frozen=True)
class BoardSpec:
    board_id: int
    rows: int = 4
    cols: int = 4
    depth: int = 4
    wrap: Tuple[bool, bool, bool] = (False, False, False)
    label: str = ""

    def __post_init__(self) -> None:
        for name in ("rows", "cols", "depth"):
            value = getattr(self, name)
            if not isinstance(value, int) or value <= 0:
                raise ConfigurationError(
                    f"Board {self.board_id}: {name} must be a positive integer, got {value!r}"
                )
        if (
            not isinstance(self.wrap, (list, tuple))
            or len(self.wrap) != 3
            or not all(isinstance(flag, bool) for flag in self.wrap)
        ):
            raise ConfigurationError(
                f"Board {self.board_id}: wrap must be three booleans, one per axis, got {self.wrap!r}"
            )
        object.__setattr__(self, "wrap", tuple(self.wrap))

    @property
    def shape(self) -> Tuple[int, int, int]:
        return (self.rows, self.cols, self.depth)

    @property
    def cell_count(self) -> int:
        return self.rows * self.cols * self.depth


DEFAULT_BOARD_SPECS: Tuple[BoardSpec, ...] = (
    BoardSpec(0, 4, 4, 4, wrap=(False, False, False), label="ALPHA [EUCLIDEAN]"),
    BoardSpec(1, 4, 4, 4, wrap=(False, True, False), label="BETA [NON-EUCLIDEAN]"),
)


@dataclass(frozen=True)
class ScoringConfig:
    line: int = 10
    diagonal_plane: int = 25
    diagonal_3d: int = 50
    # Cross-board lines that also vary in z additionally earn the 3D bonus.
    stack_cross_board_bonus: bool = True


@dataclass(frozen=True)
class SelectorWeights:
    complete: int = 1000
    block: int = 100
    position: int = 1


DEFAULT_POWER_UP_COSTS: Dict[str, int] = {
    "swap": 40,
    "remove": 30,
    "block": 25,
    "peek": 15,
    "clone": 50,
}


@dataclass(frozen=True)
class EconomyConfig:
    initial_wallet: int = 100
    undo_cost: int = 5
    block_turns: int = 3
    power_up_costs: Mapping[str, int] = field(default_factory=lambda: dict(DEFAULT_POWER_UP_COSTS))


@dataclass(frozen=True)
class GameConfig:
    boards: Tuple[BoardSpec, ...] = DEFAULT_BOARD_SPECS
    line_length: int = 4
    scoring: ScoringConfig = field(default_factory=ScoringConfig)
    weights: SelectorWeights = field(default_factory=SelectorWeights)
    economy: EconomyConfig = field(default_factory=EconomyConfig)

    def __post_init__(self) -> None:
        if not self.boards:
            raise ConfigurationError("At least one board is required")
        if self.line_length < 1:
            raise ConfigurationError(f"line_length must be positive, got {self.line_length}")
        ids = [spec.board_id for spec in self.boards]
        if ids != list(range(len(ids))):
            raise ConfigurationError(f"Board ids must be 0..{len(ids) - 1} in order, got {ids}")
        object.__setattr__(self, "boards", tuple(self.boards))


def _build_section(cls, raw: Optional[Mapping[str, Any]], section: str):
    if raw is None:
        return cls()
    if not isinstance(raw, Mapping):
        raise ConfigurationError(f"Section '{section}' must be a mapping")
    known = {f.name for f in fields(cls)}
    unknown = set(raw) - known
    if unknown:
        raise ConfigurationError(f"Unknown keys in '{section}': {sorted(unknown)}")
    try:
        return cls(**raw)
    except TypeError as exc:
        raise ConfigurationError(f"Invalid '{section}' section: {exc}") from exc


def _as_int(value: Any, name: str) -> int:
    if isinstance(value, bool):
        raise ConfigurationError(f"{name} must be an integer, got {value!r}")
    try:
        return int(value)
    except (TypeError, ValueError) as exc:
        raise ConfigurationError(f"{name} must be an integer, got {value!r}") from exc


def config_from_dict(data: Mapping[str, Any]) -> GameConfig:
    known = {"boards", "line_length", "scoring", "weights", "economy"}
    unknown = set(data) - known
    if unknown:
        raise ConfigurationError(f"Unknown top-level keys: {sorted(unknown)}")

    boards: Sequence[BoardSpec] = DEFAULT_BOARD_SPECS
    if "boards" in data:
        raw_boards = data["boards"]
        if not isinstance(raw_boards, list):
            raise ConfigurationError("'boards' must be a list")
        built = []
        for index, entry in enumerate(raw_boards):
            entry = dict(entry or {})
            entry.setdefault("board_id", index)
            built.append(_build_section(BoardSpec, entry, f"boards[{index}]"))
        boards = tuple(built)

    economy = _build_section(EconomyConfig, data.get("economy"), "economy")
    if "power_up_costs" in (data.get("economy") or {}):
        costs = economy.power_up_costs
        if not isinstance(costs, Mapping):
            raise ConfigurationError("'economy.power_up_costs' must be a mapping")
        merged = dict(DEFAULT_POWER_UP_COSTS)
        merged.update({str(k).lower(): _as_int(v, f"power_up_costs.{k}") for k, v in costs.items()})
        economy = EconomyConfig(
            initial_wallet=economy.initial_wallet,
            undo_cost=economy.undo_cost,
            block_turns=economy.block_turns,
            power_up_costs=merged,
        )

    return GameConfig(
        boards=tuple(boards),
        line_length=_as_int(data.get("line_length", 4), "line_length"),
        scoring=_build_section(ScoringConfig, data.get("scoring"), "scoring"),
        weights=_build_section(SelectorWeights, data.get("weights"), "weights"),
        economy=economy,
    )


def load_config(path: Union[str, Path]) -> GameConfig:
    path = Path(path)
    if not path.exists():
        raise ConfigurationError(f"Config file not found: {path}")
    data = yaml.safe_load(path.read_text(encoding="utf-8")) or {}
    if not isinstance(data, Mapping):
        raise ConfigurationError(f"Config root must be a mapping: {path}")
    config = config_from_dict(data)
    logger.debug("Loaded config from %s with %d boards", path, len(config.boards))
    return config
