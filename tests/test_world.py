"""Tests for rooms, dungeons, and their occupants."""

import pytest

from crawler.engine.bestiary import GOBLIN
from crawler.engine.errors import DungeonIntegrityError
from crawler.engine.values import Direction, Health, Position
from crawler.engine.world import Dungeon, Item, ItemKind, Monster, Player, Room


def _grid(*coords: tuple[int, int]) -> dict[Position, Room]:
    return {Position(x, y): Room(position=Position(x, y)) for x, y in coords}


def test_connect_is_symmetric():
    """Dungeon.connect opens both sides of the passage at once."""
    rooms = _grid((0, 0), (1, 0))
    dungeon = Dungeon(rooms, Position(0, 0), Position(1, 0), width=2, height=1)
    dungeon.connect(Position(0, 0), Direction.EAST)

    assert rooms[Position(0, 0)].has_connection(Direction.EAST)
    assert rooms[Position(1, 0)].has_connection(Direction.WEST)
    assert dungeon.can_move(Position(1, 0), Direction.WEST)


def test_connect_requires_both_rooms():
    rooms = _grid((0, 0), (1, 0))
    dungeon = Dungeon(rooms, Position(0, 0), Position(1, 0), width=2, height=2)
    with pytest.raises(DungeonIntegrityError):
        dungeon.connect(Position(0, 0), Direction.SOUTH)
    with pytest.raises(DungeonIntegrityError):
        dungeon.connect(Position(0, 0), Direction.NORTH)


def test_room_connections_are_not_forced_symmetric():
    """A single Room only records its own side."""
    rooms = _grid((0, 0), (1, 0))
    rooms[Position(0, 0)].connect_to(Direction.EAST)
    assert not rooms[Position(1, 0)].has_connection(Direction.WEST)


def test_dungeon_validation():
    rooms = _grid((0, 0), (1, 0))
    with pytest.raises(DungeonIntegrityError):
        Dungeon(rooms, Position(0, 0), Position(5, 5), width=2, height=1)
    with pytest.raises(DungeonIntegrityError):
        Dungeon(rooms, Position(3, 3), Position(1, 0), width=2, height=1)
    with pytest.raises(ValueError):
        Dungeon({}, Position(0, 0), Position(1, 0), width=2, height=1)
    with pytest.raises(ValueError):
        Dungeon(rooms, Position(0, 0), Position(1, 0), width=0, height=1)
    with pytest.raises(ValueError):
        Dungeon(rooms, Position(0, 0), Position(1, 0), width=2, height=1, difficulty=0)


def test_reachability(simple_dungeon: Dungeon):
    """The tutorial ring reaches every room and the exit."""
    assert simple_dungeon.is_connected
    assert simple_dungeon.path_exists(simple_dungeon.entrance, simple_dungeon.exit)
    assert len(simple_dungeon.reachable_from(Position(0, 0))) == 8


def test_neighbors_in_direction_order(simple_dungeon: Dungeon):
    neighbors = simple_dungeon.neighbors(Position(1, 0))
    assert [d for d, _ in neighbors] == [Direction.EAST, Direction.WEST]


def test_exploration_statistics(simple_dungeon: Dungeon):
    assert simple_dungeon.visited_count == 0
    simple_dungeon.room_at(Position(0, 0)).enter()
    simple_dungeon.room_at(Position(0, 0)).enter()
    assert simple_dungeon.visited_count == 1
    assert simple_dungeon.exploration_percentage == pytest.approx(12.5)

    stats = simple_dungeon.statistics()
    assert stats["total_rooms"] == 8
    assert stats["rooms_with_monsters"] == 2
    assert stats["rooms_with_treasure"] == 2
    assert stats["size"] == "3x3"


def test_room_has_monster_only_when_alive():
    room = Room(position=Position(0, 0), monster=GOBLIN.spawn())
    assert room.has_monster
    room.monster.take_damage(100)
    assert not room.has_monster
    assert room.monster is not None


def test_room_ids_are_unique():
    assert Room(position=Position(0, 0)).id != Room(position=Position(0, 0)).id


def test_take_treasure_by_name_and_alias():
    room = Room(position=Position(0, 0))
    coins = Item(ItemKind.GOLD, "Silver Coins", 15)
    potion = Item(ItemKind.POTION, "Health Potion", 50)
    room.add_treasure(coins)
    room.add_treasure(potion)

    assert room.take_treasure("dagger") is None
    assert room.take_treasure("healing") is potion
    assert room.take_treasure("silver") is coins
    assert not room.has_treasure


def test_monster_validation():
    with pytest.raises(ValueError):
        Monster("", Health.full(10), 5)
    with pytest.raises(ValueError):
        Monster("Rat", Health.full(10), 0)
    with pytest.raises(ValueError):
        Monster("Rat", Health.full(10), 5, experience_reward=-1)


def test_player_weapon_bonus():
    """Weapons add max(2, value // 5) to attack power."""
    player = Player("Hero")
    assert player.attack_power == 20

    dagger = Item(ItemKind.WEAPON, "Iron Dagger", 5)
    assert player.equip(dagger) is None
    assert player.attack_power == 22

    sword = Item(ItemKind.WEAPON, "Steel Sword", 50)
    assert player.equip(sword) is dagger
    assert player.attack_power == 30

    with pytest.raises(ValueError):
        player.equip(Item(ItemKind.GOLD, "Copper Coins", 5))


def test_player_inventory():
    player = Player("Hero")
    potion = Item(ItemKind.POTION, "Minor Health Potion", 25)
    player.add_item(potion)

    assert player.find_item("potion") is potion
    assert player.find_item("potion", kind=ItemKind.WEAPON) is None
    assert player.remove_item(potion.id) is potion
    assert player.remove_item(potion.id) is None


def test_player_validation():
    with pytest.raises(ValueError):
        Player("")
    with pytest.raises(ValueError):
        Player("Hero", base_attack_power=0)
    with pytest.raises(ValueError):
        Player("Hero").gain_experience(-5)


def test_item_effects():
    assert Item(ItemKind.POTION, "Health Potion", 50).heal_amount == 50
    assert Item(ItemKind.GOLD, "Gold Purse", 30).heal_amount == 0
    assert Item(ItemKind.ARTIFACT, "Crystal Orb", 90).attack_bonus == 0
    assert Item(ItemKind.WEAPON, "Excalibur", 175).attack_bonus == 35
