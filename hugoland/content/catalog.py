"""
Content Catalog - Static tables the default content provider draws from.

Names are flavour only; the engine reads numbers.
"""

from ..engine_core.state import Rarity


WEAPON_NAMES: dict[Rarity, list[str]] = {
    Rarity.COMMON: ["Rusty Sword", "Wooden Club", "Iron Dagger", "Short Bow", "Stone Axe"],
    Rarity.RARE: ["Steel Blade", "Hunter's Bow", "War Hammer", "Silver Spear"],
    Rarity.EPIC: ["Flamebrand", "Frostbite Axe", "Thunder Maul", "Shadow Fang"],
    Rarity.LEGENDARY: ["Dragonslayer", "Excalibur", "Stormbreaker", "Sunforged Lance"],
    Rarity.MYTHICAL: ["Blade of Eternity", "Worldsplitter", "Starfall Scythe"],
}

ARMOR_NAMES: dict[Rarity, list[str]] = {
    Rarity.COMMON: ["Leather Vest", "Padded Tunic", "Wooden Shield", "Cloth Robe"],
    Rarity.RARE: ["Chainmail", "Iron Plate", "Scale Armor", "Reinforced Shield"],
    Rarity.EPIC: ["Mithril Mail", "Dragonhide Coat", "Runed Aegis"],
    Rarity.LEGENDARY: ["Aegis of Dawn", "Titan Plate", "Phoenix Mantle"],
    Rarity.MYTHICAL: ["Armor of the Ancients", "Celestial Bulwark", "Voidwoven Shroud"],
}

ENCHANTED_PREFIX = "Enchanted"

# (min, max) base power by rarity
WEAPON_POWER: dict[Rarity, tuple[int, int]] = {
    Rarity.COMMON: (8, 15),
    Rarity.RARE: (15, 25),
    Rarity.EPIC: (25, 40),
    Rarity.LEGENDARY: (40, 60),
    Rarity.MYTHICAL: (60, 90),
}

ARMOR_POWER: dict[Rarity, tuple[int, int]] = {
    Rarity.COMMON: (4, 8),
    Rarity.RARE: (8, 14),
    Rarity.EPIC: (14, 22),
    Rarity.LEGENDARY: (22, 34),
    Rarity.MYTHICAL: (34, 50),
}

ENCHANT_POWER_BONUS = 1.5

MAX_DURABILITY: dict[Rarity, int] = {
    Rarity.COMMON: 100,
    Rarity.RARE: 120,
    Rarity.EPIC: 150,
    Rarity.LEGENDARY: 200,
    Rarity.MYTHICAL: 250,
}

UPGRADE_COST: dict[Rarity, int] = {
    Rarity.COMMON: 5,
    Rarity.RARE: 10,
    Rarity.EPIC: 20,
    Rarity.LEGENDARY: 40,
    Rarity.MYTHICAL: 80,
}

SELL_PRICE: dict[Rarity, int] = {
    Rarity.COMMON: 25,
    Rarity.RARE: 50,
    Rarity.EPIC: 100,
    Rarity.LEGENDARY: 200,
    Rarity.MYTHICAL: 400,
}

# Chest rarity weights, keyed by minimum cost, highest first
CHEST_WEIGHTS: list[tuple[int, list[float]]] = [
    (1000, [20, 30, 30, 15, 5]),
    (500, [35, 30, 20, 12, 3]),
    (250, [45, 30, 15, 8, 2]),
    (0, [60, 25, 10, 4, 1]),
]

OFFENSE_RELICS = [
    "Fang of Yojef",
    "Ember Idol",
    "Warlord's Sigil",
    "Storm Totem",
    "Bloodstone",
]

DEFENSE_RELICS = [
    "Ward of Yojef",
    "Tortoise Shell",
    "Guardian Rune",
    "Moonstone Charm",
    "Bulwark Icon",
]

# Relic bonus growth per level
OFFENSE_PER_LEVEL = 22
DEFENSE_PER_LEVEL = 15

ENEMY_NAMES = [
    "Goblin",
    "Skeleton",
    "Orc Brute",
    "Cave Troll",
    "Dark Mage",
    "Wyvern",
    "Stone Golem",
    "Lich",
    "Shadow Knight",
    "Ancient Dragon",
]
