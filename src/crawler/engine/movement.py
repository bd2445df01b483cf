"""Movement resolution.

MovementResolver never raises for an illegal move: every outcome comes
back as a MovementResult. The only state it touches on success is the
player's position and the destination's visited flag.
"""

from dataclasses import dataclass

from .errors import InvalidPositionError
from .values import Direction
from .world import Dungeon, Monster, Player, Room


@dataclass(frozen=True)
class LocationInfo:
    """What the player sees on arriving in a room."""

    description: str
    has_treasure: bool
    is_exit: bool
    available_directions: tuple[Direction, ...]

    def can_move(self, direction: Direction) -> bool:
        return direction in self.available_directions

    @property
    def directions_text(self) -> str:
        if not self.available_directions:
            return "none"
        return ", ".join(d.value for d in self.available_directions)


@dataclass(frozen=True)
class MovementResult:
    successful: bool
    reason: str | None = None
    blocking_monster: Monster | None = None
    direction: Direction | None = None
    location: LocationInfo | None = None

    @classmethod
    def success(cls, direction: Direction, location: LocationInfo) -> "MovementResult":
        return cls(True, direction=direction, location=location)

    @classmethod
    def failure(cls, reason: str, direction: Direction | None = None) -> "MovementResult":
        return cls(False, reason=reason, direction=direction)

    @classmethod
    def blocked(cls, reason: str, monster: Monster, direction: Direction) -> "MovementResult":
        return cls(False, reason=reason, blocking_monster=monster, direction=direction)

    @property
    def is_blocked(self) -> bool:
        return self.blocking_monster is not None


def location_info(room: Room) -> LocationInfo:
    return LocationInfo(
        description=room.description,
        has_treasure=room.has_treasure,
        is_exit=room.is_exit,
        available_directions=tuple(room.available_directions),
    )


class MovementResolver:
    def move(self, player: Player, direction: Direction, dungeon: Dungeon) -> MovementResult:
        """Try to walk `player` one room in `direction`."""
        current = dungeon.room_at(player.position)
        if current is None:
            return MovementResult.failure("You are not in a valid room!", direction)

        if current.has_monster:
            return MovementResult.failure(
                f"The {current.monster.name} won't let you leave! "
                "You must fight or flee.",
                direction,
            )

        if not current.has_connection(direction):
            return MovementResult.failure(
                f"You can't go {direction.value} from here. There's a wall.", direction
            )

        try:
            target = player.position.move(direction)
        except InvalidPositionError:
            return MovementResult.failure(
                f"You can't go {direction.value} from here. "
                "You've reached the edge of the dungeon.",
                direction,
            )

        room = dungeon.room_at(target)
        if room is None:
            return MovementResult.failure(
                f"You can't go {direction.value} from here. There's nothing there.",
                direction,
            )

        if room.has_monster:
            return MovementResult.blocked(
                f"A {room.monster.name} blocks your path! You can still move "
                "in other directions, or fight the monster.",
                room.monster,
                direction,
            )

        player.position = target
        room.enter()
        return MovementResult.success(direction, location_info(room))

    def can_move(self, player: Player, direction: Direction, dungeon: Dungeon) -> bool:
        return dungeon.can_move(player.position, direction)

    def scout(self, player: Player, dungeon: Dungeon) -> dict[Direction, str]:
        """Describe what lies in each direction from the player's room.

        Unvisited rooms only reveal that they exist.
        """
        current = dungeon.room_at(player.position)
        if current is None:
            return {}

        hints = {}
        for direction in Direction:
            target = None
            if current.has_connection(direction):
                target = dungeon.room_in_direction(current.position, direction)

            if target is None:
                hints[direction] = "A solid wall blocks the way."
            elif not target.visited:
                hints[direction] = "An unexplored room."
            elif target.is_exit:
                hints[direction] = "The EXIT is here!"
            elif target.has_monster:
                hints[direction] = f"{target.monster.name} ({target.monster.health} HP)"
            elif target.has_treasure:
                hints[direction] = "Treasure awaits!"
            else:
                hints[direction] = "An empty room you've visited before."
        return hints
