"""Tests for the combat resolver, driven by scripted rolls."""

import pytest

from crawler.engine.bestiary import DRAGON, GOBLIN, ORC
from crawler.engine.combat import CombatResolver, health_bar
from crawler.engine.values import Health
from crawler.engine.world import ItemKind, Player

NO_CRIT = 50
NO_DODGE = 90
NO_DROP = 100


def test_attack_hits_and_monster_counters(scripted):
    """A surviving monster strikes back inside the same attack."""
    player, goblin = Player("Hero"), GOBLIN.spawn()
    scripted.queue(20, NO_CRIT, 10, NO_DODGE)

    result = CombatResolver(scripted).attack(player, goblin)

    assert result.successful
    assert result.damage == 20
    assert not result.victory
    assert goblin.health == Health(10, 30)
    assert result.counter.damage == 10
    assert player.health == Health(90, 100)
    assert "20 damage" in result.full_message
    assert "10 damage" in result.full_message


def test_counter_attack_can_be_dodged(scripted):
    player, goblin = Player("Hero"), GOBLIN.spawn()
    scripted.queue(20, NO_CRIT, 10, 15)

    result = CombatResolver(scripted).attack(player, goblin)

    assert result.counter.dodged
    assert player.health.is_full


def test_attack_without_counter(scripted):
    player, goblin = Player("Hero"), GOBLIN.spawn()
    scripted.queue(16, NO_CRIT)

    result = CombatResolver(scripted).attack(player, goblin, counter_attack=False)

    assert result.counter is None
    assert player.health.is_full
    assert goblin.health.current == 14


def test_critical_hit_kills(scripted):
    """Criticals multiply damage by 1.5, truncated."""
    player, goblin = Player("Hero"), GOBLIN.spawn()
    scripted.queue(23, 10, NO_DROP)

    result = CombatResolver(scripted).attack(player, goblin)

    assert result.critical
    assert result.damage == 34
    assert result.victory
    assert goblin.health.current == 0
    assert player.experience == 15
    assert result.experience_gained == 15
    assert result.drop is None
    assert result.counter is None


def test_kill_can_drop_loot(scripted):
    """Tough monsters drop from the better pools."""
    player = Player("Hero", base_attack_power=200)
    orc = ORC.spawn()
    scripted.queue(200, NO_CRIT, 30)

    result = CombatResolver(scripted).attack(player, orc)

    assert result.victory
    assert result.drop is not None
    assert result.drop.name in {name for _, name, _ in _pool("uncommon")}


def _pool(rarity):
    from crawler.engine.treasure import TREASURE_TABLE

    return TREASURE_TABLE[rarity]


def test_attacking_dead_monster_is_an_error(scripted):
    """Death is final: a second blow changes nothing."""
    player, goblin = Player("Hero"), GOBLIN.spawn()
    goblin.take_damage(100)

    result = CombatResolver(scripted).attack(player, goblin)

    assert not result.successful
    assert goblin.health.current == 0
    assert player.experience == 0


def test_dead_player_cannot_attack(scripted):
    player = Player("Hero", health=Health(0, 100))
    result = CombatResolver(scripted).attack(player, GOBLIN.spawn())
    assert not result.successful


def test_monster_attack_can_kill(scripted):
    player = Player("Hero", health=Health(20, 100))
    dragon = DRAGON.spawn()
    scripted.queue(33, NO_DODGE)

    result = CombatResolver(scripted).monster_attack(dragon, player)

    assert result.defeat
    assert player.health.current == 0
    assert not player.is_alive


def test_round_alternates_blows(scripted):
    player, orc = Player("Hero"), ORC.spawn()
    scripted.queue(24, NO_CRIT, 16, NO_DODGE)

    result = CombatResolver(scripted).round(player, orc)

    assert len(result.actions) == 2
    assert result.actions[0].counter is None
    assert result.monster_health.current == 26
    assert result.player_health.current == 84
    assert not result.ended


def test_round_ends_on_kill(scripted):
    player, goblin = Player("Hero"), GOBLIN.spawn()
    goblin.take_damage(15)
    scripted.queue(16, NO_CRIT, NO_DROP)

    result = CombatResolver(scripted).round(player, goblin)

    assert len(result.actions) == 1
    assert result.ended
    assert result.player_won
    assert not result.player_lost


@pytest.mark.parametrize(
    ("player_health", "monster_health", "expected"),
    [
        (Health(100, 100), Health(30, 30), 5),
        (Health(10, 100), Health(30, 30), 50),
        (Health(50, 100), Health(15, 30), 43),
        (Health(1, 100), Health(1, 100), 75),
    ],
)
def test_flee_chance(player_health, monster_health, expected):
    player = Player("Hero", health=player_health)
    goblin = GOBLIN.spawn()
    goblin.health = monster_health
    assert CombatResolver().flee_chance(player, goblin) == expected


def test_flee_success(scripted):
    player, goblin = Player("Hero"), GOBLIN.spawn()
    scripted.queue(5)

    result = CombatResolver(scripted).flee(player, goblin)

    assert result.successful
    assert result.punishment is None
    assert result.chance == 5


def test_failed_flee_cannot_be_dodged(scripted):
    """The punishing blow skips the dodge roll entirely."""
    player, goblin = Player("Hero"), GOBLIN.spawn()
    scripted.queue(6, 11)

    result = CombatResolver(scripted).flee(player, goblin)

    assert not result.successful
    assert result.punishment.damage == 11
    assert not result.punishment.dodged
    assert player.health.current == 89
    assert scripted.rolls == []


def test_stats_snapshot():
    player, orc = Player("Hero"), ORC.spawn()
    stats = CombatResolver().stats(player, orc)
    assert stats.monster_name == "Orc"
    assert stats.monster_attack == 15
    assert stats.flee_chance == 5
    assert "Orc: 50/50 HP" in stats.display


def test_health_bar():
    assert health_bar(Health(50, 100), length=10) == "[#####-----] 50/100 HP"


def test_loot_kinds_are_known():
    from crawler.engine.treasure import TREASURE_TABLE

    for pool in TREASURE_TABLE.values():
        for kind, _, value in pool:
            assert isinstance(kind, ItemKind)
            assert value > 0
