"""Computer opponent move selection."""

from .selector import BlockedCells, MoveSelector

__all__ = ["BlockedCells", "MoveSelector"]
