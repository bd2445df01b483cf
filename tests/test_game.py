"""Tests for the Game aggregate."""

import pickle
import random
import zlib

import pytest

from crawler.engine.errors import InvalidParametersError, InvalidPositionError
from crawler.engine.game import Game, GamePhase
from crawler.engine.generator import DungeonGenerator
from crawler.engine.values import Direction, Position


def test_new_game_starts_at_entrance(game: Game):
    assert game.current_position == game.dungeon.entrance
    assert game.current_room.visited
    assert game.turn == 1
    assert game.score.value == 0
    assert game.phase is GamePhase.EXPLORING
    assert not game.is_over


def test_create_uses_difficulty_presets():
    game = Game.create("Hero", "easy", DungeonGenerator(random.Random(3)))
    assert game.dungeon.width == game.dungeon.height == 5
    assert game.dungeon.difficulty == 1
    assert game.player.name == "Hero"

    hard = Game.create("Hero", "hard", DungeonGenerator(random.Random(3)))
    assert hard.dungeon.width == 15
    assert hard.dungeon.difficulty == 3


def test_create_rejects_unknown_difficulty():
    with pytest.raises(InvalidParametersError):
        Game.create("Hero", "nightmare")


def test_score_is_monotonic(game: Game):
    game.add_score(10)
    game.add_score(0)
    assert game.score.value == 10
    with pytest.raises(ValueError):
        game.add_score(-5)
    assert game.score.value == 10


def test_increment_turn(game: Game):
    game.increment_turn()
    game.increment_turn()
    assert game.turn == 3


def test_move_player_marks_visited(game: Game):
    game.move_player(Position(0, 1))
    assert game.current_position == Position(0, 1)
    assert game.player.position == Position(0, 1)
    assert game.dungeon.room_at(Position(0, 1)).visited
    assert game.turn == 1


def test_phases(game: Game):
    goblin = game.dungeon.room_at(Position(1, 0)).monster

    game.set_blocking_monster(goblin, Direction.EAST)
    assert game.phase is GamePhase.BLOCKED
    assert game.is_path_blocked

    game.start_combat()
    assert game.phase is GamePhase.IN_COMBAT

    game.end_combat()
    game.clear_blocking_monster()
    assert game.phase is GamePhase.EXPLORING
    assert game.blocked_direction is None


def test_defeat(game: Game):
    game.player.take_damage(1000)
    assert game.phase is GamePhase.DEFEAT
    assert game.is_over
    assert not game.is_victory


def test_victory_requires_clear_exit(game: Game):
    game.move_player(game.dungeon.exit)
    assert game.is_victory
    assert game.phase is GamePhase.VICTORY

    from crawler.engine.bestiary import GOBLIN

    game.current_room.monster = GOBLIN.spawn()
    assert not game.is_victory


def test_giving_up_ends_the_game(game: Game):
    game.gave_up = True
    assert game.is_over
    assert game.phase is GamePhase.EXPLORING


def test_pickle_roundtrip(game: Game):
    """The whole game graph survives the session layer's pickle/zlib cycle."""
    game.move_player(Position(0, 1))
    game.add_score(42)
    game.increment_turn()
    goblin = game.dungeon.room_at(Position(1, 0)).monster
    game.set_blocking_monster(goblin, Direction.EAST)

    restored = pickle.loads(zlib.decompress(zlib.compress(pickle.dumps(game))))

    assert restored.current_position == Position(0, 1)
    assert restored.score.value == 42
    assert restored.turn == 2
    assert restored.blocked_direction is Direction.EAST
    assert restored.dungeon.room_at(Position(1, 0)).monster is restored.blocking_monster
    assert restored.dungeon.id == game.dungeon.id


def test_move_player_needs_a_room(game: Game):
    """The tutorial layout has no room in its centre."""
    with pytest.raises(InvalidPositionError):
        game.move_player(Position(1, 1))
    assert game.current_position == Position(0, 0)
