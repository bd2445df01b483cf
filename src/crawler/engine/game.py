"""The Game aggregate: the single mutable root of a play-through.

Holds no random source and no resolvers, so the whole object graph
pickles cleanly for persistence.
"""

import datetime as dt
from dataclasses import dataclass, field
from enum import Enum

from .errors import InvalidParametersError, InvalidPositionError
from .generator import DungeonGenerator
from .values import Direction, Position, Score
from .world import Dungeon, Monster, Player, Room


class GamePhase(Enum):
    EXPLORING = "exploring"
    BLOCKED = "blocked"
    IN_COMBAT = "in_combat"
    VICTORY = "victory"
    DEFEAT = "defeat"


@dataclass(frozen=True)
class Preset:
    size: int
    level: int


DIFFICULTY_PRESETS: dict[str, Preset] = {
    "easy": Preset(size=5, level=1),
    "normal": Preset(size=10, level=2),
    "hard": Preset(size=15, level=3),
}


def _now() -> dt.datetime:
    return dt.datetime.now(dt.UTC)


@dataclass
class Game:
    player: Player
    dungeon: Dungeon
    score: Score = field(default_factory=Score)
    turn: int = 1
    in_combat: bool = False
    blocking_monster: Monster | None = None
    blocked_direction: Direction | None = None
    gave_up: bool = False
    started_at: dt.datetime = field(default_factory=_now)

    @classmethod
    def create(
        cls,
        player_name: str,
        difficulty: str = "normal",
        generator: DungeonGenerator | None = None,
    ) -> "Game":
        """Start a new game on a freshly generated dungeon."""
        preset = DIFFICULTY_PRESETS.get(difficulty)
        if preset is None:
            raise InvalidParametersError(f"Unknown difficulty: {difficulty}")
        generator = generator or DungeonGenerator()
        dungeon = generator.generate(preset.size, preset.size, preset.level)
        return cls.start(player_name, dungeon)

    @classmethod
    def start(cls, player_name: str, dungeon: Dungeon) -> "Game":
        """Place a fresh player at the entrance of an existing dungeon."""
        player = Player(name=player_name, position=dungeon.entrance)
        dungeon.entrance_room.enter()
        return cls(player=player, dungeon=dungeon)

    @property
    def current_position(self) -> Position:
        return self.player.position

    @property
    def current_room(self) -> Room:
        return self.dungeon.rooms[self.player.position]

    def move_player(self, position: Position) -> None:
        if not self.dungeon.has_room_at(position):
            raise InvalidPositionError(f"No room at {position}")
        self.player.position = position
        self.current_room.enter()

    def increment_turn(self) -> None:
        self.turn += 1

    def add_score(self, points: int) -> None:
        self.score = self.score.add(points)

    def set_blocking_monster(self, monster: Monster, direction: Direction) -> None:
        self.blocking_monster = monster
        self.blocked_direction = direction

    def clear_blocking_monster(self) -> None:
        self.blocking_monster = None
        self.blocked_direction = None

    @property
    def is_path_blocked(self) -> bool:
        return self.blocking_monster is not None

    def start_combat(self) -> None:
        self.in_combat = True

    def end_combat(self) -> None:
        self.in_combat = False

    @property
    def is_victory(self) -> bool:
        room = self.current_room
        return self.player.is_alive and room.is_exit and not room.has_monster

    @property
    def is_over(self) -> bool:
        return self.gave_up or not self.player.is_alive or self.is_victory

    @property
    def phase(self) -> GamePhase:
        if not self.player.is_alive:
            return GamePhase.DEFEAT
        if self.is_victory:
            return GamePhase.VICTORY
        if self.in_combat:
            return GamePhase.IN_COMBAT
        if self.is_path_blocked:
            return GamePhase.BLOCKED
        return GamePhase.EXPLORING
