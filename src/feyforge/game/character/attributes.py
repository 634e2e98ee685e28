"""Character attributes and derived stats for feyforge.

This module holds the raw 5e ability math (modifiers, proficiency, hit
points) and is the composition point between that math and the modifier
resolver: every derived number starts from a rules base value and is then
resolved against the modifiers acting on its target.
"""

import math
from collections.abc import Iterable, Mapping
from dataclasses import asdict, dataclass, replace

from .constants import (
    ABILITY_SCORE_MAX,
    ABILITY_SCORE_MIN,
    ARMOR_CATEGORIES,
    BASE_ARMOR_CLASS,
    CARRY_CAPACITY_PER_STRENGTH,
    MAX_LEVEL,
    MIN_LEVEL,
    PROFICIENCY_MULTIPLIERS,
    ArmorCategory,
    AttributeName,
    ProficiencyLevel,
    Target,
    save_target,
    skill_target,
)
from .modifiers import Modifier, ModifierKind, apply_modifiers, create_modifier, filter_modifiers_by_target


@dataclass(frozen=True)
class AbilityScores:
    """The six ability scores of a character."""

    strength: int = 10
    dexterity: int = 10
    constitution: int = 10
    intelligence: int = 10
    wisdom: int = 10
    charisma: int = 10

    def get(self, ability: AttributeName | str) -> int:
        """Get one score by ability name."""
        return getattr(self, AttributeName(ability).value)

    def as_dict(self) -> dict[str, int]:
        """Get the scores keyed by ability name."""
        return asdict(self)


@dataclass(frozen=True)
class AttributeModifiers:
    """Container for all attribute modifiers."""

    strength: int
    dexterity: int
    constitution: int
    intelligence: int
    wisdom: int
    charisma: int

    def get(self, ability: AttributeName | str) -> int:
        """Get one modifier by ability name."""
        return getattr(self, AttributeName(ability).value)


@dataclass(frozen=True)
class Armor:
    """A worn armor or shield.

    For body armor ``base_ac`` is the armor's printed AC (leather 11, chain
    mail 16); for a shield it is the bonus it grants (normally 2).
    """

    name: str
    category: ArmorCategory
    base_ac: int


def get_modifier(value: int) -> int:
    """Calculate D&D-style attribute modifier.

    Args:
        value: The attribute value (typically 1-30)

    Returns:
        The modifier: (value - 10) // 2

    Examples:
        >>> get_modifier(10)
        0
        >>> get_modifier(20)
        5
        >>> get_modifier(8)
        -1
    """
    return (value - 10) // 2


ability_modifier = get_modifier


def format_modifier(modifier: int) -> str:
    """Format a modifier with its sign (+2, -1, +0)."""
    return f"+{modifier}" if modifier >= 0 else str(modifier)


def proficiency_bonus(level: int) -> int:
    """Calculate proficiency bonus by character level: ceil(level / 4) + 1."""
    level = min(max(level, MIN_LEVEL), MAX_LEVEL)
    return math.ceil(level / 4) + 1


def calculate_modifiers(scores: AbilityScores) -> AttributeModifiers:
    """
    Calculate all attribute modifiers for a set of scores.

    Args:
        scores: The character's final ability scores

    Returns:
        AttributeModifiers with all calculated modifiers
    """
    return AttributeModifiers(
        strength=get_modifier(scores.strength),
        dexterity=get_modifier(scores.dexterity),
        constitution=get_modifier(scores.constitution),
        intelligence=get_modifier(scores.intelligence),
        wisdom=get_modifier(scores.wisdom),
        charisma=get_modifier(scores.charisma),
    )


def apply_attribute_bonuses(
    scores: AbilityScores,
    bonuses: Mapping[str, int],
    modifiers: Iterable[Modifier] = (),
) -> AbilityScores:
    """
    Calculate final ability scores from base scores, flat bonuses and modifiers.

    Args:
        scores: Base scores chosen at creation
        bonuses: Flat bonuses by ability name (racial bonuses, ASIs)
            Example: {"strength": 2, "constitution": 1}
        modifiers: Modifiers, of which those targeting an ability name apply

    Returns:
        AbilityScores clamped to [1, 30]
    """
    modifiers = list(modifiers)
    totals: dict[str, int] = {}

    for attr_name, base_value in scores.as_dict().items():
        value = apply_modifiers(
            base_value + bonuses.get(attr_name, 0),
            filter_modifiers_by_target(modifiers, attr_name),
        )
        totals[attr_name] = min(max(value, ABILITY_SCORE_MIN), ABILITY_SCORE_MAX)

    return replace(scores, **totals)


def armor_class_modifiers(
    dexterity: int,
    armor: Armor | None = None,
    shield: Armor | None = None,
) -> list[Modifier]:
    """
    Build the modifiers equipment and dexterity contribute to armor class.

    Armor adds (base_ac - 10) so that resolving against a base of 10 gives
    the armor's printed AC. Dexterity adds its modifier, capped by the armor
    category (medium +2, heavy none). A shield adds its bonus.

    Args:
        dexterity: Final dexterity score
        armor: Worn body armor, if any
        shield: Wielded shield, if any

    Returns:
        Modifiers targeting armor_class
    """
    target = Target.ARMOR_CLASS.value
    mods: list[Modifier] = []
    dex_mod: int | None = get_modifier(dexterity)

    if armor is not None:
        mods.append(create_modifier(armor.name, target, ModifierKind.ADD, armor.base_ac - BASE_ARMOR_CLASS))
        rule = ARMOR_CATEGORIES[armor.category]
        if not rule.add_dex_modifier:
            dex_mod = None
        elif rule.max_dex_bonus is not None and dex_mod is not None:
            dex_mod = min(dex_mod, rule.max_dex_bonus)

    if dex_mod is not None:
        mods.append(create_modifier("dexterity", target, ModifierKind.ADD, dex_mod))

    if shield is not None:
        mods.append(create_modifier(shield.name, target, ModifierKind.ADD, shield.base_ac))

    return mods


def calculate_armor_class(
    dexterity: int,
    armor: Armor | None = None,
    shield: Armor | None = None,
    modifiers: Iterable[Modifier] = (),
) -> int:
    """
    Calculate armor class: base 10 resolved against equipment, dexterity and features.

    Args:
        dexterity: Final dexterity score
        armor: Worn body armor, if any
        shield: Wielded shield, if any
        modifiers: Feature modifiers (only those targeting armor_class apply)

    Returns:
        The resolved armor class
    """
    return apply_modifiers(
        BASE_ARMOR_CLASS,
        [
            *armor_class_modifiers(dexterity, armor, shield),
            *filter_modifiers_by_target(modifiers, Target.ARMOR_CLASS.value),
        ],
    )


def calculate_initiative_bonus(dexterity: int, modifiers: Iterable[Modifier] = ()) -> int:
    """Initiative bonus: DEX modifier resolved against initiative modifiers."""
    return apply_modifiers(
        get_modifier(dexterity), filter_modifiers_by_target(modifiers, Target.INITIATIVE.value)
    )


def proficiency_contribution(bonus: int, level: ProficiencyLevel | str) -> int:
    """Portion of the proficiency bonus granted by a proficiency level, floored."""
    return math.floor(bonus * PROFICIENCY_MULTIPLIERS[ProficiencyLevel(level)])


def saving_throw_bonus(
    ability: AttributeName | str,
    score: int,
    proficient: bool,
    prof_bonus: int,
    modifiers: Iterable[Modifier] = (),
) -> int:
    """Saving throw bonus for one ability."""
    base = get_modifier(score) + (prof_bonus if proficient else 0)
    return apply_modifiers(
        base, filter_modifiers_by_target(modifiers, save_target(AttributeName(ability).value))
    )


def skill_bonus(
    skill: str,
    score: int,
    proficiency: ProficiencyLevel | str,
    prof_bonus: int,
    modifiers: Iterable[Modifier] = (),
) -> int:
    """Skill check bonus from the governing ability score and proficiency level."""
    base = get_modifier(score) + proficiency_contribution(prof_bonus, proficiency)
    return apply_modifiers(base, filter_modifiers_by_target(modifiers, skill_target(skill)))


def passive_score(check_bonus: int, modifiers: Iterable[Modifier] = ()) -> int:
    """Passive perception: 10 + the perception bonus, then passive_perception modifiers."""
    return apply_modifiers(
        10 + check_bonus,
        filter_modifiers_by_target(modifiers, Target.PASSIVE_PERCEPTION.value),
    )


def hit_points_for_level(hit_die: int, constitution_modifier: int, level: int) -> int:
    """
    Calculate max hit points using the fixed-average progression.

    Level 1 grants the full hit die plus CON modifier; every later level
    grants (hit_die // 2 + 1) plus CON modifier. Each level grants at least 1.

    Args:
        hit_die: Class hit die size (6, 8, 10 or 12)
        constitution_modifier: Current CON modifier
        level: Character level (clamped to 1-20)

    Returns:
        Max hit points

    Examples:
        >>> hit_points_for_level(10, 2, 1)
        12
        >>> hit_points_for_level(10, 2, 3)
        28
    """
    level = min(max(level, MIN_LEVEL), MAX_LEVEL)
    first_level = max(1, hit_die + constitution_modifier)
    per_level = max(1, hit_die // 2 + 1 + constitution_modifier)
    return first_level + per_level * (level - 1)


def carrying_capacity(strength: int) -> int:
    """Carrying capacity in pounds: 15 x STR score."""
    return strength * CARRY_CAPACITY_PER_STRENGTH
