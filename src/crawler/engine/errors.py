"""Exceptions raised by the simulation engine.

Expected, player-facing outcomes (walking into a wall, swinging at a
corpse, a failed escape) are never raised; they come back as result
records. Only bad configuration and broken invariants end up here.
"""


class CrawlerError(Exception):
    """Base class for engine errors."""


class ConfigurationError(CrawlerError, ValueError):
    """Dungeon generation was asked for something it cannot build."""


class InvalidParametersError(ConfigurationError):
    """Generation parameters are out of range."""


class InsufficientRoomsError(ConfigurationError):
    """Too few rooms to place both an entrance and an exit."""


class InvalidPositionError(CrawlerError, ValueError):
    """A grid coordinate would become negative."""


class DungeonIntegrityError(CrawlerError, RuntimeError):
    """A generated dungeon violates a structural invariant."""
