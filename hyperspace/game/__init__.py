"""Caller-side game state: turns, scoring, credits and power-ups."""

from .rules import HyperspaceGame
from .state import DRAW, POWER_UP_DESCRIPTIONS, GameState, PowerUpType

__all__ = ["DRAW", "POWER_UP_DESCRIPTIONS", "GameState", "HyperspaceGame", "PowerUpType"]
