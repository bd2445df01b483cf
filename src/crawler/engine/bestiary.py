"""Monster archetypes and how often each appears at a given difficulty."""

import random
from dataclasses import dataclass

from .values import Health
from .world import Monster


@dataclass(frozen=True)
class Archetype:
    name: str
    max_health: int
    attack_power: int
    experience_reward: int

    def spawn(self) -> Monster:
        return Monster(
            name=self.name,
            health=Health.full(self.max_health),
            attack_power=self.attack_power,
            experience_reward=self.experience_reward,
        )


GOBLIN = Archetype("Goblin", max_health=30, attack_power=10, experience_reward=15)
ORC = Archetype("Orc", max_health=50, attack_power=15, experience_reward=25)
DRAGON = Archetype("Dragon", max_health=100, attack_power=30, experience_reward=100)

ARCHETYPES = {a.name.lower(): a for a in (GOBLIN, ORC, DRAGON)}

# (upper roll bound, archetype) on a d100, checked in order.
_LOW_TIER = ((70, GOBLIN), (100, ORC))
_MID_TIER = ((40, GOBLIN), (100, ORC))
_HIGH_TIER = ((10, DRAGON), (50, GOBLIN), (100, ORC))


def tier_for_difficulty(difficulty: int) -> tuple[tuple[int, Archetype], ...]:
    if difficulty <= 2:
        return _LOW_TIER
    if difficulty <= 4:
        return _MID_TIER
    return _HIGH_TIER


def monster_for_difficulty(difficulty: int, rng: random.Random) -> Monster:
    """Roll a fresh monster from the difficulty's tier table."""
    roll = rng.randint(1, 100)
    for bound, archetype in tier_for_difficulty(difficulty):
        if roll <= bound:
            return archetype.spawn()
    raise AssertionError(f"d100 roll {roll} fell outside the tier table")
