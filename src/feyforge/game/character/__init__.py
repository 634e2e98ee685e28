"""Character-related game systems and mechanics."""

from .attributes import (
    AbilityScores,
    Armor,
    apply_attribute_bonuses,
    calculate_armor_class,
    calculate_modifiers,
    get_modifier,
    proficiency_bonus,
)
from .constants import ATTRIBUTE_NAMES, AttributeName, ProficiencyLevel
from .modifiers import (
    Modifier,
    ModifierKind,
    apply_modifiers,
    combine_modifiers,
    create_modifier,
    has_advantage,
    has_disadvantage,
)
from .validators import ValidationError, ValidationResult, validate_character_creation

__all__ = [
    "ATTRIBUTE_NAMES",
    "AbilityScores",
    "Armor",
    "AttributeName",
    "ProficiencyLevel",
    "apply_attribute_bonuses",
    "calculate_armor_class",
    "calculate_modifiers",
    "get_modifier",
    "proficiency_bonus",
    "Modifier",
    "ModifierKind",
    "apply_modifiers",
    "combine_modifiers",
    "create_modifier",
    "has_advantage",
    "has_disadvantage",
    "ValidationError",
    "ValidationResult",
    "validate_character_creation",
]
