"""Shared 5e rules tables used by derivation, validation and progression."""

from dataclasses import dataclass
from enum import StrEnum


class AttributeName(StrEnum):
    """Core character attributes."""

    STRENGTH = "strength"
    DEXTERITY = "dexterity"
    CONSTITUTION = "constitution"
    INTELLIGENCE = "intelligence"
    WISDOM = "wisdom"
    CHARISMA = "charisma"


# Constant attribute names for easy import
ATTRIBUTE_NAMES = [attr.value for attr in AttributeName]

ABILITY_SCORE_MIN = 1
ABILITY_SCORE_MAX = 30

MIN_LEVEL = 1
MAX_LEVEL = 20

# Total XP required to reach each level, index 0 is level 1
XP_THRESHOLDS: tuple[int, ...] = (
    0,
    300,
    900,
    2700,
    6500,
    14000,
    23000,
    34000,
    48000,
    64000,
    85000,
    100000,
    120000,
    140000,
    165000,
    195000,
    225000,
    265000,
    305000,
    355000,
)

# Point buy
POINT_BUY_COSTS: dict[int, int] = {
    8: 0,
    9: 1,
    10: 2,
    11: 3,
    12: 4,
    13: 5,
    14: 7,
    15: 9,
}
POINT_BUY_TOTAL = 27
POINT_BUY_MIN = 8
POINT_BUY_MAX = 15

STANDARD_ARRAY: tuple[int, ...] = (15, 14, 13, 12, 10, 8)

NAME_MIN_LENGTH = 2
NAME_MAX_LENGTH = 50


class ProficiencyLevel(StrEnum):
    """How much of the proficiency bonus a skill or save receives."""

    NONE = "none"
    HALF = "half"
    PROFICIENT = "proficient"
    EXPERTISE = "expertise"


PROFICIENCY_MULTIPLIERS: dict[ProficiencyLevel, float] = {
    ProficiencyLevel.NONE: 0,
    ProficiencyLevel.HALF: 0.5,
    ProficiencyLevel.PROFICIENT: 1,
    ProficiencyLevel.EXPERTISE: 2,
}

# Skills and their governing ability (SRD)
SKILLS: dict[str, AttributeName] = {
    "acrobatics": AttributeName.DEXTERITY,
    "animal_handling": AttributeName.WISDOM,
    "arcana": AttributeName.INTELLIGENCE,
    "athletics": AttributeName.STRENGTH,
    "deception": AttributeName.CHARISMA,
    "history": AttributeName.INTELLIGENCE,
    "insight": AttributeName.WISDOM,
    "intimidation": AttributeName.CHARISMA,
    "investigation": AttributeName.INTELLIGENCE,
    "medicine": AttributeName.WISDOM,
    "nature": AttributeName.INTELLIGENCE,
    "perception": AttributeName.WISDOM,
    "performance": AttributeName.CHARISMA,
    "persuasion": AttributeName.CHARISMA,
    "religion": AttributeName.INTELLIGENCE,
    "sleight_of_hand": AttributeName.DEXTERITY,
    "stealth": AttributeName.DEXTERITY,
    "survival": AttributeName.WISDOM,
}

CLASS_HIT_DICE: dict[str, int] = {
    "barbarian": 12,
    "bard": 8,
    "cleric": 8,
    "druid": 8,
    "fighter": 10,
    "monk": 8,
    "paladin": 10,
    "ranger": 10,
    "rogue": 8,
    "sorcerer": 6,
    "warlock": 8,
    "wizard": 6,
}
DEFAULT_HIT_DIE = 8


class ArmorCategory(StrEnum):
    """Armor categories for AC calculation."""

    LIGHT = "light"
    MEDIUM = "medium"
    HEAVY = "heavy"
    SHIELD = "shield"


@dataclass(frozen=True)
class ArmorRule:
    """How an armor category lets dexterity contribute to AC."""

    add_dex_modifier: bool
    max_dex_bonus: int | None


ARMOR_CATEGORIES: dict[ArmorCategory, ArmorRule] = {
    ArmorCategory.LIGHT: ArmorRule(add_dex_modifier=True, max_dex_bonus=None),
    ArmorCategory.MEDIUM: ArmorRule(add_dex_modifier=True, max_dex_bonus=2),
    ArmorCategory.HEAVY: ArmorRule(add_dex_modifier=False, max_dex_bonus=0),
    ArmorCategory.SHIELD: ArmorRule(add_dex_modifier=False, max_dex_bonus=None),
}

BASE_ARMOR_CLASS = 10
DEFAULT_SPEED = 30
CARRY_CAPACITY_PER_STRENGTH = 15


# Modifier targets used by derivation
class Target(StrEnum):
    """Named derived values that modifiers can act on."""

    ARMOR_CLASS = "armor_class"
    INITIATIVE = "initiative"
    SPEED = "speed"
    MAX_HP = "max_hp"
    PASSIVE_PERCEPTION = "passive_perception"


def save_target(ability: str) -> str:
    """Modifier target name for a saving throw."""
    return f"save.{ability}"


def skill_target(skill: str) -> str:
    """Modifier target name for a skill check."""
    return f"skill.{skill}"
