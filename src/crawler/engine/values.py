"""Immutable value objects shared by every part of the engine."""

from dataclasses import dataclass
from enum import Enum

from .errors import InvalidPositionError


class Direction(Enum):
    """One of the four compass directions a room can connect in."""

    NORTH = "north"
    SOUTH = "south"
    EAST = "east"
    WEST = "west"

    @classmethod
    def parse(cls, text: str) -> "Direction":
        """Parse a full direction name or its single-letter alias."""
        word = text.strip().lower()
        direction = _ALIASES.get(word)
        if direction is None:
            raise ValueError(f"Invalid direction: {text!r}")
        return direction

    def opposite(self) -> "Direction":
        return _OPPOSITES[self]

    @property
    def label(self) -> str:
        return self.value.capitalize()


_ALIASES: dict[str, Direction] = {
    **{d.value: d for d in Direction},
    "n": Direction.NORTH,
    "s": Direction.SOUTH,
    "e": Direction.EAST,
    "w": Direction.WEST,
}

_OPPOSITES: dict[Direction, Direction] = {
    Direction.NORTH: Direction.SOUTH,
    Direction.SOUTH: Direction.NORTH,
    Direction.EAST: Direction.WEST,
    Direction.WEST: Direction.EAST,
}

# Grid offsets: y grows southward.
_OFFSETS: dict[Direction, tuple[int, int]] = {
    Direction.NORTH: (0, -1),
    Direction.SOUTH: (0, 1),
    Direction.EAST: (1, 0),
    Direction.WEST: (-1, 0),
}


@dataclass(frozen=True)
class Position:
    """A cell on the dungeon grid."""

    x: int
    y: int

    def __post_init__(self) -> None:
        if self.x < 0 or self.y < 0:
            raise InvalidPositionError(
                f"Position coordinates must be non-negative, got ({self.x}, {self.y})"
            )

    def move(self, direction: Direction) -> "Position":
        """Return the neighbouring position in `direction`."""
        dx, dy = _OFFSETS[direction]
        return Position(self.x + dx, self.y + dy)

    def __str__(self) -> str:
        return f"[{self.x},{self.y}]"


@dataclass(frozen=True)
class Health:
    """Current and maximum hit points. Operations return new instances."""

    current: int
    max: int

    def __post_init__(self) -> None:
        if self.max <= 0:
            raise ValueError("Max health must be positive")
        if self.current < 0:
            raise ValueError("Current health cannot be negative")
        if self.current > self.max:
            raise ValueError("Current health cannot exceed max health")

    @classmethod
    def full(cls, max_health: int) -> "Health":
        return cls(max_health, max_health)

    def reduce(self, damage: int) -> "Health":
        """Take damage, clamping at zero."""
        if damage < 0:
            raise ValueError("Damage cannot be negative")
        return Health(max(0, self.current - damage), self.max)

    def heal(self, amount: int) -> "Health":
        """Restore health, clamping at the maximum."""
        if amount < 0:
            raise ValueError("Heal amount cannot be negative")
        return Health(min(self.max, self.current + amount), self.max)

    @property
    def percentage(self) -> float:
        return self.current / self.max * 100

    @property
    def is_dead(self) -> bool:
        return self.current <= 0

    @property
    def is_full(self) -> bool:
        return self.current == self.max

    def __str__(self) -> str:
        return f"{self.current}/{self.max}"


@dataclass(frozen=True, order=True)
class Score:
    """A non-negative point total that only grows."""

    value: int = 0

    def __post_init__(self) -> None:
        if self.value < 0:
            raise ValueError("Score cannot be negative")

    def add(self, points: int) -> "Score":
        if points < 0:
            raise ValueError("Cannot add negative points to score")
        return Score(self.value + points)

    def __str__(self) -> str:
        return str(self.value)
