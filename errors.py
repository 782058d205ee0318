"""
Exceptions raised by the memory match game core.
"""


class ConfigError(ValueError):
    """Raised when a mode or the game settings cannot be satisfied (fatal at startup)."""


class InvariantViolation(AssertionError):
    """Raised when the game core is driven in a way that breaks its own rules.

    These are programming errors, never shown to the player.
    """
