from __future__ import annotations


class HyperspaceError(Exception):
    pass


class ConfigurationError(HyperspaceError, ValueError):
    """Invalid static configuration: board topology, config file or difficulty tier."""


class InvariantViolation(HyperspaceError, RuntimeError):
    """A caller broke a precondition, e.g. asked for a move on a full board set."""


class IllegalMoveError(HyperspaceError, ValueError):
    pass
