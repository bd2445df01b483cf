"""Combat resolution.

Every roll goes through the resolver's random.Random, in a fixed order:

* player attack: damage, critical, then (on a kill) the drop roll
* monster attack: damage, then dodge (skipped when the attack can't be dodged)
* flee: the escape roll, then the punishing attack on failure
"""

import random
from dataclasses import dataclass

from . import treasure
from .values import Health
from .world import Item, Monster, Player

CRITICAL_CHANCE = 10
CRITICAL_MULTIPLIER = 1.5
DODGE_CHANCE = 15
PLAYER_VARIANCE = 0.2
MONSTER_VARIANCE = 0.1
MAX_FLEE_CHANCE = 75
BASE_FLEE_CHANCE = 30


@dataclass(frozen=True)
class CombatResult:
    """The outcome of one attack, plus any counter-attack it provoked."""

    successful: bool
    message: str
    attacker: str = ""
    defender: str = ""
    damage: int = 0
    critical: bool = False
    dodged: bool = False
    victory: bool = False
    defeat: bool = False
    experience_gained: int = 0
    defender_health: Health | None = None
    drop: Item | None = None
    counter: "CombatResult | None" = None

    @classmethod
    def error(cls, message: str) -> "CombatResult":
        return cls(False, message)

    @property
    def player_defeated(self) -> bool:
        """True when this attack or its counter-attack killed the player."""
        return self.defeat or (self.counter is not None and self.counter.defeat)

    @property
    def full_message(self) -> str:
        if self.counter is None:
            return self.message
        return f"{self.message}\n{self.counter.message}"


@dataclass(frozen=True)
class CombatRound:
    actions: tuple[CombatResult, ...]
    player_health: Health
    monster_health: Health

    @property
    def ended(self) -> bool:
        return self.player_health.is_dead or self.monster_health.is_dead

    @property
    def player_won(self) -> bool:
        return self.monster_health.is_dead

    @property
    def player_lost(self) -> bool:
        return self.player_health.is_dead

    @property
    def summary(self) -> str:
        return "\n".join(action.message for action in self.actions)


@dataclass(frozen=True)
class FleeResult:
    successful: bool
    message: str
    chance: int = 0
    punishment: CombatResult | None = None

    @property
    def full_message(self) -> str:
        if self.punishment is None:
            return self.message
        return f"{self.message}\n{self.punishment.message}"


@dataclass(frozen=True)
class CombatStats:
    """A snapshot of both combatants for display."""

    player_name: str
    player_health: Health
    player_attack: int
    monster_name: str
    monster_health: Health
    monster_attack: int
    monster_experience: int
    flee_chance: int

    @property
    def display(self) -> str:
        return (
            f"{self.player_name}: {self.player_health} HP | Attack: {self.player_attack}\n"
            f"{self.monster_name}: {self.monster_health} HP | Attack: {self.monster_attack}"
            f" | XP Reward: {self.monster_experience}\n"
            f"Chance to flee: {self.flee_chance}%"
        )


def health_bar(health: Health, length: int = 20) -> str:
    filled = int(length * health.percentage / 100)
    return f"[{'#' * filled}{'-' * (length - filled)}] {health} HP"


def _player_attack_message(
    monster: Monster, damage: int, critical: bool
) -> str:
    verb = "critically strike" if critical else "attack"
    message = f"You {verb} the {monster.name} for {damage} damage!"
    if critical:
        message += " CRITICAL HIT!"
    if monster.is_alive:
        message += f" ({monster.health} HP remaining)"
    else:
        message += f" The {monster.name} has been defeated!"
    return message


def _monster_attack_message(monster: Monster, player: Player, damage: int) -> str:
    message = f"The {monster.name} attacks you for {damage} damage!"
    if not player.is_alive:
        return message + " You have been defeated!"
    if player.health.percentage <= 25:
        return message + f" Critical health! ({player.health} HP)"
    return message + f" (Your health: {player.health} HP)"


class CombatResolver:
    def __init__(self, rng: random.Random | None = None):
        self.rng = rng if rng is not None else random.Random()

    def _roll(self, percent: int) -> bool:
        return self.rng.randint(1, 100) <= percent

    def _vary(self, power: int, variance: float) -> int:
        spread = int(power * variance)
        return self.rng.randint(power - spread, power + spread)

    def attack(
        self, player: Player, monster: Monster, counter_attack: bool = True
    ) -> CombatResult:
        """The player strikes `monster`.

        A surviving monster strikes back inside the same call unless
        `counter_attack` is False.
        """
        if not player.is_alive:
            return CombatResult.error("You cannot attack while dead!")
        if not monster.is_alive:
            return CombatResult.error("The monster is already defeated!")

        damage = self._vary(player.attack_power, PLAYER_VARIANCE)
        critical = self._roll(CRITICAL_CHANCE)
        if critical:
            damage = int(damage * CRITICAL_MULTIPLIER)

        monster.take_damage(damage)
        message = _player_attack_message(monster, damage, critical)

        if not monster.is_alive:
            player.gain_experience(monster.experience_reward)
            drop = treasure.roll_drop(monster, self.rng)
            if drop is not None:
                message += f" It dropped {drop.name}!"
            return CombatResult(
                True,
                message,
                attacker=player.name,
                defender=monster.name,
                damage=damage,
                critical=critical,
                victory=True,
                experience_gained=monster.experience_reward,
                defender_health=monster.health,
                drop=drop,
            )

        counter = self.monster_attack(monster, player) if counter_attack else None
        return CombatResult(
            True,
            message,
            attacker=player.name,
            defender=monster.name,
            damage=damage,
            critical=critical,
            defender_health=monster.health,
            counter=counter,
        )

    def monster_attack(
        self, monster: Monster, player: Player, dodgeable: bool = True
    ) -> CombatResult:
        if not monster.is_alive:
            return CombatResult.error("The monster cannot attack!")
        if not player.is_alive:
            return CombatResult.error("The player is already defeated!")

        damage = self._vary(monster.attack_power, MONSTER_VARIANCE)
        if dodgeable and self._roll(DODGE_CHANCE):
            return CombatResult(
                True,
                f"You dodge the {monster.name}'s attack!",
                attacker=monster.name,
                defender=player.name,
                dodged=True,
                defender_health=player.health,
            )

        player.take_damage(damage)
        return CombatResult(
            True,
            _monster_attack_message(monster, player, damage),
            attacker=monster.name,
            defender=player.name,
            damage=damage,
            defeat=not player.is_alive,
            defender_health=player.health,
        )

    def round(self, player: Player, monster: Monster) -> CombatRound:
        """One exchange: the player swings, then the monster if both still stand."""
        actions = [self.attack(player, monster, counter_attack=False)]
        if player.is_alive and monster.is_alive:
            actions.append(self.monster_attack(monster, player))
        return CombatRound(tuple(actions), player.health, monster.health)

    def flee_chance(self, player: Player, monster: Monster) -> int:
        """Wounded players slip away more easily; healthy monsters make it harder."""
        chance = (
            BASE_FLEE_CHANCE
            + int((100 - player.health.percentage) / 2)
            - int(monster.health.percentage / 4)
        )
        return min(MAX_FLEE_CHANCE, chance)

    def flee(self, player: Player, monster: Monster) -> FleeResult:
        if not player.is_alive:
            return FleeResult(False, "You cannot flee while dead!")

        chance = self.flee_chance(player, monster)
        if not monster.is_alive or self._roll(chance):
            return FleeResult(
                True, f"You manage to escape from the {monster.name}!", chance
            )

        punishment = self.monster_attack(monster, player, dodgeable=False)
        return FleeResult(
            False,
            f"You fail to escape! The {monster.name} blocks your path!",
            chance,
            punishment,
        )

    def stats(self, player: Player, monster: Monster) -> CombatStats:
        return CombatStats(
            player_name=player.name,
            player_health=player.health,
            player_attack=player.attack_power,
            monster_name=monster.name,
            monster_health=monster.health,
            monster_attack=monster.attack_power,
            monster_experience=monster.experience_reward,
            flee_chance=self.flee_chance(player, monster),
        )
