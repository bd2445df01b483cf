"""Treasure tables.

Treasure is drawn from five rarity pools. Room loot scales with dungeon
difficulty; monster drops scale with the monster's toughness.
"""

import random

from .world import Item, ItemKind, Monster

TREASURE_TABLE: dict[str, tuple[tuple[ItemKind, str, int], ...]] = {
    "common": (
        (ItemKind.GOLD, "Copper Coins", 5),
        (ItemKind.GOLD, "Small Gold Pile", 10),
        (ItemKind.GOLD, "Silver Coins", 15),
        (ItemKind.POTION, "Weak Health Potion", 15),
        (ItemKind.POTION, "Minor Health Potion", 25),
    ),
    "uncommon": (
        (ItemKind.GOLD, "Gold Purse", 30),
        (ItemKind.GOLD, "Large Gold Pile", 50),
        (ItemKind.POTION, "Health Potion", 50),
        (ItemKind.WEAPON, "Iron Dagger", 20),
        (ItemKind.WEAPON, "Rusty Sword", 25),
    ),
    "rare": (
        (ItemKind.GOLD, "Treasure Chest", 75),
        (ItemKind.POTION, "Greater Health Potion", 75),
        (ItemKind.WEAPON, "Steel Sword", 50),
        (ItemKind.WEAPON, "Battle Axe", 60),
    ),
    "epic": (
        (ItemKind.GOLD, "Royal Treasury", 100),
        (ItemKind.WEAPON, "Enchanted Blade", 75),
        (ItemKind.WEAPON, "Mithril Sword", 85),
        (ItemKind.ARTIFACT, "Crystal Orb", 90),
    ),
    "legendary": (
        (ItemKind.ARTIFACT, "Ancient Relic", 100),
        (ItemKind.ARTIFACT, "Dragon Scale", 150),
        (ItemKind.ARTIFACT, "Crown of Kings", 200),
        (ItemKind.WEAPON, "Excalibur", 175),
    ),
}

_FLAVOR: dict[ItemKind, tuple[str, ...]] = {
    ItemKind.GOLD: (
        "Gleaming in the torchlight.",
        "Scattered across the cold stone floor.",
        "Hidden in a dusty corner.",
        "Piled neatly in an ancient container.",
    ),
    ItemKind.POTION: (
        "The liquid inside glows with healing energy.",
        "A faint warmth emanates from the bottle.",
        "Carefully preserved in a padded container.",
        "The cork is sealed with wax bearing a healer's mark.",
    ),
    ItemKind.WEAPON: (
        "Despite its age, the edge remains sharp.",
        "Intricate runes are carved along the blade.",
        "The weapon feels perfectly balanced in your hands.",
        "It hums with barely contained power.",
    ),
    ItemKind.ARTIFACT: (
        "Ancient power thrums within this mysterious object.",
        "The artifact seems to bend light around itself.",
        "Touching it sends shivers down your spine.",
        "Lost for centuries, spoken of only in legends.",
    ),
}

DROP_CHANCE = 30


def _make(kind: ItemKind, name: str, value: int, rng: random.Random) -> Item:
    return Item(
        kind=kind,
        name=name,
        value=value,
        description=f"{name}. {rng.choice(_FLAVOR[kind])}",
    )


def create_by_rarity(rarity: str, rng: random.Random) -> Item:
    """Draw one treasure from the named rarity pool."""
    pool = TREASURE_TABLE.get(rarity)
    if pool is None:
        raise ValueError(f"Unknown rarity: {rarity}")
    kind, name, value = rng.choice(pool)
    return _make(kind, name, value, rng)


def rarity_for_difficulty(difficulty: int, rng: random.Random) -> str:
    """Deeper dungeons shift the d100 roll toward rarer pools."""
    roll = rng.randint(1, 100) + difficulty * 2
    if roll <= 40:
        return "common"
    if roll <= 70:
        return "uncommon"
    if roll <= 90:
        return "rare"
    if roll <= 105:
        return "epic"
    return "legendary"


def create_for_difficulty(difficulty: int, rng: random.Random) -> Item:
    return create_by_rarity(rarity_for_difficulty(difficulty, rng), rng)


def drop_rarity(monster: Monster) -> str:
    """Tougher monsters drop better loot."""
    if monster.health.max >= 100:
        return "rare"
    if monster.health.max >= 50:
        return "uncommon"
    return "common"


def roll_drop(monster: Monster, rng: random.Random) -> Item | None:
    """Roll the post-kill drop for `monster`."""
    if rng.randint(1, 100) > DROP_CHANCE:
        return None
    return create_by_rarity(drop_rarity(monster), rng)
