"""The dungeon's data model: rooms, their occupants, and the room graph.

A Dungeon is built once by the generator and then mutated in place only
as rooms are visited, cleared of monsters, or looted.
"""

import uuid
from collections import deque
from dataclasses import dataclass, field
from enum import Enum

from .errors import DungeonIntegrityError, InvalidPositionError
from .values import Direction, Health, Position


def _new_id() -> str:
    return uuid.uuid4().hex


class ItemKind(Enum):
    """What an item does when carried or used."""

    GOLD = "gold"
    POTION = "potion"
    WEAPON = "weapon"
    ARTIFACT = "artifact"

    @property
    def display_name(self) -> str:
        return _KIND_NAMES[self]

    @property
    def aliases(self) -> tuple[str, ...]:
        return _KIND_ALIASES[self]


_KIND_NAMES = {
    ItemKind.GOLD: "Gold",
    ItemKind.POTION: "Health Potion",
    ItemKind.WEAPON: "Weapon",
    ItemKind.ARTIFACT: "Artifact",
}

_KIND_ALIASES = {
    ItemKind.GOLD: ("gold", "coins", "money", "gp"),
    ItemKind.POTION: ("potion", "health", "healing", "hp"),
    ItemKind.WEAPON: ("weapon", "sword", "blade", "arms"),
    ItemKind.ARTIFACT: ("artifact", "relic", "ancient"),
}


@dataclass(frozen=True)
class Item:
    """A treasure lying in a room or carried by the player."""

    kind: ItemKind
    name: str
    value: int
    description: str = ""
    id: str = field(default_factory=_new_id)

    @property
    def attack_bonus(self) -> int:
        """Attack power granted when equipped (weapons only)."""
        if self.kind is not ItemKind.WEAPON:
            return 0
        return max(2, self.value // 5)

    @property
    def heal_amount(self) -> int:
        """Health restored when drunk (potions only)."""
        return self.value if self.kind is ItemKind.POTION else 0

    def matches(self, query: str) -> bool:
        """Check whether a typed name refers to this item."""
        query = query.strip().lower()
        if not query:
            return False
        name = self.name.lower()
        return (
            query == name
            or query == self.kind.value
            or query in name
            or query in self.kind.aliases
        )


@dataclass
class Monster:
    """A hostile creature occupying a room."""

    name: str
    health: Health
    attack_power: int
    experience_reward: int = 10
    id: str = field(default_factory=_new_id)

    def __post_init__(self) -> None:
        if not self.name:
            raise ValueError("Monster name cannot be empty")
        if self.attack_power <= 0:
            raise ValueError("Attack power must be positive")
        if self.experience_reward < 0:
            raise ValueError("Experience reward cannot be negative")

    @property
    def is_alive(self) -> bool:
        return not self.health.is_dead

    def take_damage(self, damage: int) -> None:
        self.health = self.health.reduce(damage)


@dataclass
class Player:
    """The adventurer."""

    name: str
    health: Health = field(default_factory=lambda: Health.full(100))
    position: Position = field(default_factory=lambda: Position(0, 0))
    base_attack_power: int = 20
    inventory: list[Item] = field(default_factory=list)
    experience: int = 0
    weapon: Item | None = None

    def __post_init__(self) -> None:
        if not self.name:
            raise ValueError("Player name cannot be empty")
        if self.base_attack_power <= 0:
            raise ValueError("Attack power must be positive")

    @property
    def attack_power(self) -> int:
        bonus = self.weapon.attack_bonus if self.weapon else 0
        return self.base_attack_power + bonus

    @property
    def is_alive(self) -> bool:
        return not self.health.is_dead

    def take_damage(self, damage: int) -> None:
        self.health = self.health.reduce(damage)

    def heal(self, amount: int) -> None:
        self.health = self.health.heal(amount)

    def gain_experience(self, points: int) -> None:
        if points < 0:
            raise ValueError("Experience points cannot be negative")
        self.experience += points

    def add_item(self, item: Item) -> None:
        self.inventory.append(item)

    def find_item(self, query: str, kind: ItemKind | None = None) -> Item | None:
        """Return the first carried item matching `query` (and `kind`)."""
        for item in self.inventory:
            if kind is not None and item.kind is not kind:
                continue
            if item.matches(query):
                return item
        return None

    def remove_item(self, item_id: str) -> Item | None:
        for index, item in enumerate(self.inventory):
            if item.id == item_id:
                return self.inventory.pop(index)
        return None

    def equip(self, weapon: Item) -> Item | None:
        """Wield `weapon`, returning the previously wielded one."""
        if weapon.kind is not ItemKind.WEAPON:
            raise ValueError(f"{weapon.name} is not a weapon")
        previous = self.weapon
        self.weapon = weapon
        return previous


@dataclass
class Room:
    """A single chamber on the grid."""

    position: Position
    description: str = ""
    monster: Monster | None = None
    treasures: list[Item] = field(default_factory=list)
    is_exit: bool = False
    visited: bool = False
    connections: dict[Direction, bool] = field(
        default_factory=lambda: dict.fromkeys(Direction, False)
    )
    id: str = field(default_factory=_new_id)

    def connect_to(self, direction: Direction) -> None:
        """Open this side of a passage. Use Dungeon.connect for both sides."""
        self.connections[direction] = True

    def has_connection(self, direction: Direction) -> bool:
        return self.connections.get(direction, False)

    @property
    def available_directions(self) -> list[Direction]:
        return [d for d in Direction if self.has_connection(d)]

    @property
    def has_monster(self) -> bool:
        """True only while the occupant is still alive."""
        return self.monster is not None and self.monster.is_alive

    @property
    def has_treasure(self) -> bool:
        return bool(self.treasures)

    @property
    def is_empty(self) -> bool:
        return not self.has_monster and not self.has_treasure and not self.is_exit

    def enter(self) -> None:
        self.visited = True

    def remove_monster(self) -> Monster | None:
        monster, self.monster = self.monster, None
        return monster

    def add_treasure(self, item: Item) -> None:
        self.treasures.append(item)

    def take_treasure(self, query: str) -> Item | None:
        """Remove and return the first treasure matching `query`."""
        for index, item in enumerate(self.treasures):
            if item.matches(query):
                return self.treasures.pop(index)
        return None

    def take_all_treasures(self) -> list[Item]:
        taken, self.treasures = self.treasures, []
        return taken

    @property
    def name(self) -> str:
        if self.is_exit:
            return "Exit Room"
        words = self.description.split()
        if words:
            return " ".join(words[:3]) + "..."
        return f"Room at {self.position}"


def adjacent(position: Position, direction: Direction) -> Position | None:
    """Return the neighbouring position, or None past the grid edge."""
    try:
        return position.move(direction)
    except InvalidPositionError:
        return None


def link(rooms: dict[Position, Room], position: Position, direction: Direction) -> None:
    """Open a passage in both directions between two adjacent rooms."""
    room = rooms.get(position)
    neighbor = adjacent(position, direction)
    other = rooms.get(neighbor) if neighbor is not None else None
    if room is None or other is None:
        raise DungeonIntegrityError(
            f"Cannot connect {position} {direction.value}: no room on both sides"
        )
    room.connect_to(direction)
    other.connect_to(direction.opposite())


def reachable(rooms: dict[Position, Room], start: Position) -> set[Position]:
    """Breadth-first search over open passages."""
    if start not in rooms:
        return set()
    seen = {start}
    queue = deque([start])
    while queue:
        current = queue.popleft()
        for direction in rooms[current].available_directions:
            neighbor = adjacent(current, direction)
            if neighbor is None or neighbor in seen or neighbor not in rooms:
                continue
            seen.add(neighbor)
            queue.append(neighbor)
    return seen


@dataclass
class Dungeon:
    """The room graph plus its dimensions and landmarks."""

    rooms: dict[Position, Room]
    entrance: Position
    exit: Position
    width: int
    height: int
    difficulty: int = 1
    id: str = field(default_factory=_new_id)

    def __post_init__(self) -> None:
        if not self.rooms:
            raise ValueError("Dungeon must have at least one room")
        if self.width <= 0 or self.height <= 0:
            raise ValueError("Dungeon dimensions must be positive")
        if self.difficulty < 1:
            raise ValueError("Difficulty must be at least 1")
        if self.entrance not in self.rooms:
            raise DungeonIntegrityError(f"Entrance room not found at {self.entrance}")
        if self.exit not in self.rooms:
            raise DungeonIntegrityError(f"Exit room not found at {self.exit}")

    def room_at(self, position: Position) -> Room | None:
        return self.rooms.get(position)

    def has_room_at(self, position: Position) -> bool:
        return position in self.rooms

    @property
    def entrance_room(self) -> Room:
        return self.rooms[self.entrance]

    @property
    def exit_room(self) -> Room:
        return self.rooms[self.exit]

    def room_in_direction(self, position: Position, direction: Direction) -> Room | None:
        """Return the room adjacent to `position`, connected or not."""
        neighbor = adjacent(position, direction)
        return self.rooms.get(neighbor) if neighbor is not None else None

    def neighbors(self, position: Position) -> list[tuple[Direction, Room]]:
        """All existing rooms next to `position`, in direction order."""
        found = []
        for direction in Direction:
            room = self.room_in_direction(position, direction)
            if room is not None:
                found.append((direction, room))
        return found

    def connect(self, position: Position, direction: Direction) -> None:
        link(self.rooms, position, direction)

    def can_move(self, position: Position, direction: Direction) -> bool:
        room = self.rooms.get(position)
        if room is None or not room.has_connection(direction):
            return False
        return self.room_in_direction(position, direction) is not None

    def reachable_from(self, start: Position) -> set[Position]:
        return reachable(self.rooms, start)

    def path_exists(self, start: Position, end: Position) -> bool:
        return end in self.reachable_from(start)

    @property
    def is_connected(self) -> bool:
        first = next(iter(self.rooms))
        return len(self.reachable_from(first)) == len(self.rooms)

    @property
    def visited_count(self) -> int:
        return sum(1 for room in self.rooms.values() if room.visited)

    @property
    def exploration_percentage(self) -> float:
        return self.visited_count / len(self.rooms) * 100

    def statistics(self) -> dict[str, int | str]:
        rooms = self.rooms.values()
        return {
            "total_rooms": len(self.rooms),
            "visited_rooms": self.visited_count,
            "rooms_with_monsters": sum(1 for r in rooms if r.has_monster),
            "rooms_with_treasure": sum(1 for r in rooms if r.has_treasure),
            "empty_rooms": sum(1 for r in rooms if r.is_empty),
            "difficulty": self.difficulty,
            "size": f"{self.width}x{self.height}",
        }
