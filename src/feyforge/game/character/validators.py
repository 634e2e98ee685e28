"""Character creation validation for feyforge.

Validators never raise: they return every problem found as a list of
ValidationError records, so a caller can show the whole list at once.
"""

from collections import Counter
from collections.abc import Iterable, Mapping
from dataclasses import dataclass, field
from enum import StrEnum
from typing import TYPE_CHECKING

from pydantic import BaseModel, ConfigDict, Field

from .attributes import AbilityScores
from .constants import (
    ABILITY_SCORE_MAX,
    ABILITY_SCORE_MIN,
    ATTRIBUTE_NAMES,
    MAX_LEVEL,
    MIN_LEVEL,
    NAME_MAX_LENGTH,
    NAME_MIN_LENGTH,
    POINT_BUY_COSTS,
    POINT_BUY_MAX,
    POINT_BUY_MIN,
    POINT_BUY_TOTAL,
    STANDARD_ARRAY,
)

if TYPE_CHECKING:
    from .sheet import CharacterSheet

ScoreInput = AbilityScores | Mapping[str, int | None] | None


@dataclass(frozen=True)
class ValidationError:
    """One problem with a field of the submitted data."""

    field: str
    message: str


@dataclass(frozen=True)
class ValidationResult:
    """Outcome of a composed validation."""

    errors: list[ValidationError] = field(default_factory=list)

    @property
    def valid(self) -> bool:
        return not self.errors


class AbilityScoreMethod(StrEnum):
    """How ability scores were generated in the character builder."""

    POINT_BUY = "point_buy"
    STANDARD_ARRAY = "standard_array"
    ROLL = "roll"
    MANUAL = "manual"


class CharacterCreationData(BaseModel):
    """
    Draft data collected by the character builder.

    Every field is optional so partially completed drafts can be validated
    step by step.
    """

    model_config = ConfigDict(populate_by_name=True)

    name: str | None = None
    race: str | None = None
    subrace: str | None = None
    class_name: str | None = Field(default=None, alias="class")
    background: str | None = None
    alignment: str | None = None

    base_abilities: dict[str, int | None] | None = None
    ability_score_method: AbilityScoreMethod | None = None
    racial_bonuses: dict[str, int] = Field(default_factory=dict)

    skill_proficiencies: list[str] = Field(default_factory=list)


def _scores(abilities: ScoreInput) -> Mapping[str, int | None] | None:
    if isinstance(abilities, AbilityScores):
        return abilities.as_dict()
    return abilities


def validate_name(name: str | None) -> list[ValidationError]:
    """Validate character name: required, 2-50 characters after trimming."""
    errors: list[ValidationError] = []
    trimmed = (name or "").strip()

    if not trimmed:
        errors.append(ValidationError("name", "Name is required"))
    elif len(trimmed) < NAME_MIN_LENGTH:
        errors.append(ValidationError("name", f"Name must be at least {NAME_MIN_LENGTH} characters"))
    elif len(trimmed) > NAME_MAX_LENGTH:
        errors.append(ValidationError("name", f"Name must be {NAME_MAX_LENGTH} characters or less"))

    return errors


def validate_race(race: str | None) -> list[ValidationError]:
    """Validate race selection."""
    if not (race or "").strip():
        return [ValidationError("race", "Race is required")]
    return []


def validate_class(class_name: str | None) -> list[ValidationError]:
    """Validate class selection."""
    if not (class_name or "").strip():
        return [ValidationError("class", "Class is required")]
    return []


def validate_ability_scores(abilities: ScoreInput) -> list[ValidationError]:
    """Validate rolled or manually entered scores are within 1-30."""
    scores = _scores(abilities)
    if scores is None:
        return [ValidationError("abilities", "Ability scores are required")]

    errors: list[ValidationError] = []
    for ability in ATTRIBUTE_NAMES:
        score = scores.get(ability)
        if score is None:
            errors.append(ValidationError(f"abilities.{ability}", f"{ability} score is required"))
        elif not ABILITY_SCORE_MIN <= score <= ABILITY_SCORE_MAX:
            errors.append(
                ValidationError(
                    f"abilities.{ability}",
                    f"{ability} must be between {ABILITY_SCORE_MIN} and {ABILITY_SCORE_MAX}",
                )
            )

    return errors


def validate_point_buy(abilities: ScoreInput) -> list[ValidationError]:
    """
    Validate point buy ability scores.

    Each score must be within 8-15; in-range scores are costed from the
    point buy table and the total must not exceed the 27-point budget.

    Args:
        abilities: Proposed scores keyed by ability name

    Returns:
        Every violation found (empty when valid)
    """
    scores = _scores(abilities)
    if scores is None:
        return [ValidationError("abilities", "Ability scores are required")]

    errors: list[ValidationError] = []
    total_cost = 0

    for ability in ATTRIBUTE_NAMES:
        score = scores.get(ability)

        if score is None:
            errors.append(ValidationError(f"abilities.{ability}", f"{ability} score is required"))
        elif score < POINT_BUY_MIN:
            errors.append(
                ValidationError(
                    f"abilities.{ability}",
                    f"{ability} must be at least {POINT_BUY_MIN} for point buy",
                )
            )
        elif score > POINT_BUY_MAX:
            errors.append(
                ValidationError(
                    f"abilities.{ability}",
                    f"{ability} cannot exceed {POINT_BUY_MAX} for point buy",
                )
            )
        elif (cost := POINT_BUY_COSTS.get(score)) is None:
            errors.append(
                ValidationError(
                    f"abilities.{ability}",
                    f"{ability} must be a whole number for point buy",
                )
            )
        else:
            total_cost += cost

    if total_cost > POINT_BUY_TOTAL:
        errors.append(
            ValidationError(
                "abilities",
                f"Point buy total ({total_cost}) exceeds maximum ({POINT_BUY_TOTAL})",
            )
        )

    return errors


def point_buy_remaining(abilities: ScoreInput) -> int:
    """Points left in the budget; scores outside the cost table cost nothing."""
    scores = _scores(abilities) or {}
    spent = sum(
        POINT_BUY_COSTS.get(score, 0)
        for ability in ATTRIBUTE_NAMES
        if (score := scores.get(ability)) is not None and POINT_BUY_MIN <= score <= POINT_BUY_MAX
    )
    return POINT_BUY_TOTAL - spent


def validate_standard_array(abilities: ScoreInput) -> list[ValidationError]:
    """
    Validate standard array ability scores.

    Every score must come from 15, 14, 13, 12, 10, 8 and no value may be used
    more often than it appears in the array.
    """
    scores = _scores(abilities)
    if scores is None:
        return [ValidationError("abilities", "Ability scores are required")]

    errors: list[ValidationError] = []
    used: list[int] = []

    for ability in ATTRIBUTE_NAMES:
        score = scores.get(ability)

        if score is None:
            errors.append(ValidationError(f"abilities.{ability}", f"{ability} score is required"))
        elif score not in STANDARD_ARRAY:
            errors.append(
                ValidationError(f"abilities.{ability}", f"{score} is not a valid standard array value")
            )
        else:
            used.append(score)

    available = Counter(STANDARD_ARRAY)
    for value, count in Counter(used).items():
        if count > available[value]:
            errors.append(
                ValidationError("abilities", f"Standard array value {value} used too many times")
            )

    return errors


def validate_skill_proficiencies(
    skills: list[str] | None,
    max_choices: int,
    available_skills: Iterable[str],
) -> list[ValidationError]:
    """Validate skill picks: count, availability for the class, no duplicates."""
    if not skills:
        if max_choices > 0:
            return [ValidationError("skill_proficiencies", f"Select {max_choices} skill proficiencies")]
        return []

    errors: list[ValidationError] = []
    allowed = set(available_skills)

    if len(skills) > max_choices:
        errors.append(
            ValidationError("skill_proficiencies", f"Too many skills selected (max {max_choices})")
        )

    for skill in skills:
        if skill not in allowed:
            errors.append(
                ValidationError("skill_proficiencies", f"{skill} is not available for this class")
            )

    if len(set(skills)) != len(skills):
        errors.append(
            ValidationError("skill_proficiencies", "Duplicate skill selections are not allowed")
        )

    return errors


def validate_basics(data: CharacterCreationData) -> ValidationResult:
    """Validate the basics step: name, race and class."""
    return ValidationResult(
        [
            *validate_name(data.name),
            *validate_race(data.race),
            *validate_class(data.class_name),
        ]
    )


def validate_abilities(data: CharacterCreationData) -> ValidationResult:
    """Validate the ability score step using the chosen generation method."""
    match data.ability_score_method:
        case AbilityScoreMethod.POINT_BUY:
            errors = validate_point_buy(data.base_abilities)
        case AbilityScoreMethod.STANDARD_ARRAY:
            errors = validate_standard_array(data.base_abilities)
        case AbilityScoreMethod.ROLL | AbilityScoreMethod.MANUAL:
            errors = validate_ability_scores(data.base_abilities)
        case _:
            errors = [ValidationError("ability_score_method", "Select an ability score method")]

    return ValidationResult(errors)


def validate_skills(
    data: CharacterCreationData,
    max_skill_choices: int,
    available_skills: Iterable[str],
) -> ValidationResult:
    """Validate the skills step."""
    return ValidationResult(
        validate_skill_proficiencies(data.skill_proficiencies, max_skill_choices, available_skills)
    )


def validate_character_creation(
    data: CharacterCreationData,
    max_skill_choices: int = 2,
    available_skills: Iterable[str] = (),
) -> ValidationResult:
    """
    Validate complete character creation data.

    Unions the errors of every builder step. Never raises.

    Args:
        data: Builder draft
        max_skill_choices: Number of skills the class lets the player pick
        available_skills: Skills the class offers

    Returns:
        ValidationResult with every error from every step
    """
    return ValidationResult(
        [
            *validate_basics(data).errors,
            *validate_abilities(data).errors,
            *validate_skills(data, max_skill_choices, available_skills).errors,
        ]
    )


def validate_character(sheet: "CharacterSheet") -> ValidationResult:
    """Validate a finished character sheet loaded from storage."""
    errors: list[ValidationError] = [
        *validate_name(sheet.name),
        *validate_race(sheet.race),
        *validate_class(sheet.class_name),
    ]

    if not MIN_LEVEL <= sheet.level <= MAX_LEVEL:
        errors.append(ValidationError("level", f"Level must be between {MIN_LEVEL} and {MAX_LEVEL}"))

    errors.extend(validate_ability_scores(sheet.base_abilities))

    hp = sheet.hit_points
    if hp is None:
        return ValidationResult(errors)

    if hp.max < 1:
        errors.append(ValidationError("hit_points.max", "Max HP must be at least 1"))
    if hp.current > hp.max + hp.temp:
        errors.append(
            ValidationError("hit_points.current", "Current HP cannot exceed max HP + temp HP")
        )

    return ValidationResult(errors)
