"""Procedural dungeon generation.

generate() runs six passes over a width x height grid:

1. place rooms (corners always, border cells 90%, interior cells 85%),
   re-rolling layouts that fall apart into separate clusters
2. open passages between neighbours (75% per pair, always both sides)
3. merge every room into one connected component
4. pick an entrance in the top-left quadrant and an exit in the bottom-right
5. check that the exit is reachable from the entrance
6. scatter monsters and treasure according to the requested densities

All randomness comes from the injected random.Random, so a seeded
generator always builds the same dungeon.
"""

import random
from collections import deque

from ..logging import get_logger
from . import treasure
from .bestiary import GOBLIN, ORC, monster_for_difficulty
from .errors import DungeonIntegrityError, InsufficientRoomsError, InvalidParametersError
from .values import Direction, Position
from .world import Dungeon, Room, adjacent, link, reachable

logger = get_logger(__name__)

BORDER_ROOM_CHANCE = 90
INTERIOR_ROOM_CHANCE = 85
CONNECTION_CHANCE = 75
MIN_ROOMS = 4

EXIT_DESCRIPTION = "The exit chamber! A bright light shines from the doorway ahead."

ROOM_DESCRIPTIONS = (
    "A dimly lit chamber with stone walls covered in moss.",
    "A spacious hall with ancient pillars reaching to the ceiling.",
    "A narrow corridor with flickering torches on the walls.",
    "A circular room with mysterious symbols etched into the floor.",
    "A cold chamber with the sound of dripping water echoing.",
    "A dusty room filled with cobwebs and shadows.",
    "A vault with a high ceiling lost in darkness.",
    "A cramped space with rough-hewn walls.",
    "An abandoned guard post with rusted weapons on the walls.",
    "A natural cavern with stalactites hanging from above.",
    "A forgotten library with crumbling shelves and scattered pages.",
    "A ritual chamber with a broken altar at its center.",
    "A storage room with broken crates and barrels.",
    "A sleeping quarters with rotted beds and torn tapestries.",
    "A throne room, its glory long faded into decay.",
)


def describe_room(x: int, y: int) -> str:
    """Stable description for a grid cell."""
    return ROOM_DESCRIPTIONS[(x * 7 + y * 13) % len(ROOM_DESCRIPTIONS)]


def _grid_components(rooms: dict[Position, Room]) -> list[set[Position]]:
    """Group rooms by grid adjacency, ignoring passages."""
    components = []
    seen: set[Position] = set()
    for start in rooms:
        if start in seen:
            continue
        component = {start}
        queue = deque([start])
        while queue:
            current = queue.popleft()
            for direction in Direction:
                neighbor = adjacent(current, direction)
                if neighbor in rooms and neighbor not in component:
                    component.add(neighbor)
                    queue.append(neighbor)
        seen |= component
        components.append(component)
    return components


class DungeonGenerator:
    """Builds Dungeons from an injectable random source."""

    def __init__(self, rng: random.Random | None = None, max_attempts: int = 10):
        self.rng = rng if rng is not None else random.Random()
        self.max_attempts = max_attempts

    def generate(
        self,
        width: int = 5,
        height: int = 5,
        difficulty: int = 1,
        monster_density: float = 0.3,
        treasure_density: float = 0.2,
    ) -> Dungeon:
        """Generate a connected dungeon with a reachable exit."""
        self._validate(width, height, difficulty, monster_density, treasure_density)

        rooms = self._layout_with_retries(width, height)
        self._connect_rooms(rooms)
        self._ensure_connectivity(rooms)

        entrance, exit_position = self._place_entrance_and_exit(rooms, width, height)
        dungeon = Dungeon(
            rooms=rooms,
            entrance=entrance,
            exit=exit_position,
            width=width,
            height=height,
            difficulty=difficulty,
        )
        self._ensure_path_to_exit(dungeon)
        self._populate(dungeon, difficulty, monster_density, treasure_density)

        logger.info(
            "dungeon_generated",
            size=f"{width}x{height}",
            difficulty=difficulty,
            rooms=len(rooms),
            entrance=str(entrance),
            exit=str(exit_position),
        )
        return dungeon

    def generate_simple(self) -> Dungeon:
        """The fixed 3x3 tutorial layout.

        [S]---[M]---[.]
         |           |
        [T]         [.]
         |           |
        [.]---[M]---[E]
        """
        rooms = {
            Position(x, y): Room(position=Position(x, y), description=describe_room(x, y))
            for y in range(3)
            for x in range(3)
            if (x, y) != (1, 1)
        }
        exit_position = Position(2, 2)
        rooms[exit_position] = Room(
            position=exit_position, description=EXIT_DESCRIPTION, is_exit=True
        )

        passages = [
            ((0, 0), Direction.EAST),
            ((1, 0), Direction.EAST),
            ((0, 0), Direction.SOUTH),
            ((2, 0), Direction.SOUTH),
            ((0, 1), Direction.SOUTH),
            ((2, 1), Direction.SOUTH),
            ((0, 2), Direction.EAST),
            ((1, 2), Direction.EAST),
        ]
        for (x, y), direction in passages:
            link(rooms, Position(x, y), direction)

        rooms[Position(1, 0)].monster = GOBLIN.spawn()
        rooms[Position(0, 1)].add_treasure(treasure.create_by_rarity("common", self.rng))
        rooms[Position(1, 2)].monster = ORC.spawn()
        rooms[Position(1, 2)].add_treasure(treasure.create_by_rarity("uncommon", self.rng))

        return Dungeon(
            rooms=rooms,
            entrance=Position(0, 0),
            exit=exit_position,
            width=3,
            height=3,
            difficulty=1,
        )

    def _validate(
        self,
        width: int,
        height: int,
        difficulty: int,
        monster_density: float,
        treasure_density: float,
    ) -> None:
        if width < 3 or height < 3:
            raise InvalidParametersError("Dungeon must be at least 3x3")
        if difficulty < 1:
            raise InvalidParametersError("Difficulty must be at least 1")
        if not 0 <= monster_density <= 1:
            raise InvalidParametersError("Monster density must be between 0 and 1")
        if not 0 <= treasure_density <= 1:
            raise InvalidParametersError("Treasure density must be between 0 and 1")

    def _roll(self, percent: float) -> bool:
        return self.rng.randint(1, 100) <= percent

    def _layout_with_retries(self, width: int, height: int) -> dict[Position, Room]:
        """Roll layouts until every room belongs to one grid cluster.

        A room cut off from the others by empty cells can never get a
        passage, so such layouts are thrown away whole rather than trimmed.
        """
        for attempt in range(1, self.max_attempts + 1):
            rooms = self._create_layout(width, height)
            clusters = _grid_components(rooms)
            if len(clusters) == 1:
                return rooms
            logger.warning(
                "layout_rejected",
                attempt=attempt,
                rooms=len(rooms),
                clusters=len(clusters),
            )
        raise InsufficientRoomsError(
            f"No connected layout found in {self.max_attempts} attempts"
        )

    def _create_layout(self, width: int, height: int) -> dict[Position, Room]:
        rooms: dict[Position, Room] = {}
        for y in range(height):
            for x in range(width):
                if self._should_create_room(x, y, width, height):
                    rooms[Position(x, y)] = Room(
                        position=Position(x, y), description=describe_room(x, y)
                    )

        if len(rooms) < MIN_ROOMS:
            for x, y in ((0, 0), (width - 1, 0), (0, height - 1), (width - 1, height - 1)):
                position = Position(x, y)
                if position not in rooms:
                    rooms[position] = Room(position=position, description=describe_room(x, y))
        return rooms

    def _should_create_room(self, x: int, y: int, width: int, height: int) -> bool:
        on_x_edge = x in (0, width - 1)
        on_y_edge = y in (0, height - 1)
        if on_x_edge and on_y_edge:
            return True
        if on_x_edge or on_y_edge:
            return self._roll(BORDER_ROOM_CHANCE)
        return self._roll(INTERIOR_ROOM_CHANCE)

    def _connect_rooms(self, rooms: dict[Position, Room]) -> None:
        for position in list(rooms):
            for direction in Direction:
                neighbor = adjacent(position, direction)
                if neighbor in rooms and self._roll(CONNECTION_CHANCE):
                    link(rooms, position, direction)

    def _ensure_connectivity(self, rooms: dict[Position, Room]) -> None:
        """Merge every room into a single connected component.

        The layout must be a single grid cluster; a room with no path of
        neighbouring cells to the rest is a DungeonIntegrityError.
        """
        start = next(iter(rooms))
        reached = reachable(rooms, start)
        while len(reached) < len(rooms):
            linked = 0
            for position in [p for p in rooms if p not in reached]:
                for direction in Direction:
                    if adjacent(position, direction) in reached:
                        link(rooms, position, direction)
                        linked += 1
                        break
            if not linked:
                raise DungeonIntegrityError("Layout has rooms no passage can reach")
            reached = reachable(rooms, start)

    def _place_entrance_and_exit(
        self, rooms: dict[Position, Room], width: int, height: int
    ) -> tuple[Position, Position]:
        positions = list(rooms)
        if len(positions) < 2:
            raise InsufficientRoomsError("Not enough rooms to place entrance and exit")

        entrance_candidates = [
            p for p in positions if p.x < width / 2 and p.y < height / 2
        ] or positions
        entrance = self.rng.choice(entrance_candidates)

        exit_candidates = [
            p
            for p in positions
            if p.x >= width / 2 and p.y >= height / 2 and p != entrance
        ] or [p for p in positions if p != entrance]
        exit_position = self.rng.choice(exit_candidates)

        previous = rooms[exit_position]
        rooms[exit_position] = Room(
            position=exit_position,
            description=EXIT_DESCRIPTION,
            is_exit=True,
            connections=dict(previous.connections),
        )
        return entrance, exit_position

    def _ensure_path_to_exit(self, dungeon: Dungeon) -> None:
        """Check reachability of the exit.

        The fallback only gives every dead room one passage; it is not a
        corridor carve. With _ensure_connectivity run first it never fires.
        """
        if dungeon.path_exists(dungeon.entrance, dungeon.exit):
            return

        logger.warning("exit_unreachable", entrance=str(dungeon.entrance), exit=str(dungeon.exit))
        for room in dungeon.rooms.values():
            if room.available_directions:
                continue
            for direction, _ in dungeon.neighbors(room.position):
                dungeon.connect(room.position, direction)
                break

        if not dungeon.path_exists(dungeon.entrance, dungeon.exit):
            raise DungeonIntegrityError("No path from entrance to exit")

    def _populate(
        self,
        dungeon: Dungeon,
        difficulty: int,
        monster_density: float,
        treasure_density: float,
    ) -> None:
        for room in dungeon.rooms.values():
            if room.position == dungeon.entrance or room.is_exit:
                continue
            if self._roll(monster_density * 100):
                room.monster = monster_for_difficulty(difficulty, self.rng)
            if self._roll(treasure_density * 100):
                room.add_treasure(treasure.create_for_difficulty(difficulty, self.rng))
