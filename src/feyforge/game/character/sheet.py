"""Character sheet record and the stats derived from it."""

import uuid
from dataclasses import dataclass

from pydantic import BaseModel, ConfigDict, Field, field_validator

from feyforge.game.systems.combat import Combatant, CombatantKind, HitPoints, roll_initiative
from feyforge.game.systems.experience import ExperienceTracker, XPAward, level_from_xp

from .attributes import (
    AbilityScores,
    Armor,
    apply_attribute_bonuses,
    calculate_armor_class,
    calculate_initiative_bonus,
    calculate_modifiers,
    carrying_capacity,
    hit_points_for_level,
    passive_score,
    proficiency_bonus,
    saving_throw_bonus,
    skill_bonus,
)
from .constants import (
    ATTRIBUTE_NAMES,
    CLASS_HIT_DICE,
    DEFAULT_HIT_DIE,
    DEFAULT_SPEED,
    SKILLS,
    AttributeName,
    ProficiencyLevel,
    Target,
)
from .modifiers import Modifier, apply_modifiers, filter_modifiers_by_target


class CharacterSheet(BaseModel):
    """
    The stored choices of a character.

    ``experience`` is the only progression field; ``level`` is derived from
    it on every read.
    """

    model_config = ConfigDict(populate_by_name=True, validate_assignment=True)

    id: str = Field(default_factory=lambda: str(uuid.uuid4()))
    name: str
    race: str
    class_name: str = Field(alias="class")
    background: str | None = None

    base_abilities: AbilityScores = Field(default_factory=AbilityScores)
    racial_bonuses: dict[str, int] = Field(default_factory=dict)
    experience: int = 0

    hit_points: HitPoints | None = Field(
        default=None, description="Tracked hit points (None means full health)"
    )
    hit_die: int | None = Field(default=None, description="Overrides the class hit die")
    base_speed: int = DEFAULT_SPEED

    saving_throw_proficiencies: list[AttributeName] = Field(default_factory=list)
    skill_proficiencies: dict[str, ProficiencyLevel] = Field(default_factory=dict)

    armor: Armor | None = None
    shield: Armor | None = None
    modifiers: list[Modifier] = Field(default_factory=list)

    @field_validator("experience")
    @classmethod
    def _clamp_experience(cls, value: int) -> int:
        return max(0, value)

    @property
    def level(self) -> int:
        return level_from_xp(self.experience)

    @property
    def effective_hit_die(self) -> int:
        if self.hit_die is not None:
            return self.hit_die
        return CLASS_HIT_DICE.get(self.class_name.strip().lower(), DEFAULT_HIT_DIE)

    def award_xp(self, amount: int, source: str = "unspecified") -> XPAward:
        """Add experience through a tracker, keeping XP the source of truth for level."""
        tracker = ExperienceTracker(self.experience, character_id=self.id)
        award = tracker.add_xp(amount, source=source)
        self.experience = tracker.xp
        return award

    def set_level(self, level: int) -> None:
        """Milestone leveling: snap experience to the floor of a level."""
        tracker = ExperienceTracker(self.experience, character_id=self.id)
        tracker.set_level(level)
        self.experience = tracker.xp

    def to_combatant(self, initiative: int | None = None) -> Combatant:
        """
        Copy this character's derived numbers into a new PC combatant.

        Args:
            initiative: Rolled initiative total; rolls d20 + initiative bonus if None

        Returns:
            A combatant linked to this sheet by id
        """
        stats = calculate_stats(self)
        if initiative is None:
            initiative = roll_initiative(stats.initiative)

        if self.hit_points is None:
            hit_points = HitPoints(current=stats.max_hp, max=stats.max_hp)
        else:
            hp_max = max(0, self.hit_points.max)
            hit_points = HitPoints(
                current=min(max(self.hit_points.current, 0), hp_max),
                max=hp_max,
                temp=max(0, self.hit_points.temp),
            )

        return Combatant(
            name=self.name,
            kind=CombatantKind.PC,
            hit_points=hit_points,
            initiative=initiative,
            initiative_bonus=stats.initiative,
            armor_class=stats.armor_class,
            linked_character_id=self.id,
        )


@dataclass(frozen=True)
class CalculatedStats:
    """Numbers derived from a character sheet; computed, never stored."""

    abilities: AbilityScores
    ability_modifiers: dict[str, int]
    proficiency_bonus: int
    armor_class: int
    initiative: int
    speed: int
    passive_perception: int
    saving_throws: dict[str, int]
    skill_modifiers: dict[str, int]
    max_hp: int
    carrying_capacity: int


def calculate_stats(sheet: CharacterSheet) -> CalculatedStats:
    """
    Derive every combat-ready number of a character.

    Final ability scores are base + racial bonuses resolved against modifiers
    targeting the ability; every other number starts from its rules base
    and is resolved against the sheet's modifiers for its target.

    Args:
        sheet: The character sheet

    Returns:
        CalculatedStats for the sheet's current level
    """
    modifiers = sheet.modifiers
    abilities = apply_attribute_bonuses(sheet.base_abilities, sheet.racial_bonuses, modifiers)
    mods = calculate_modifiers(abilities)
    level = sheet.level
    prof = proficiency_bonus(level)

    saving_throws = {
        ability: saving_throw_bonus(
            ability,
            abilities.get(ability),
            AttributeName(ability) in sheet.saving_throw_proficiencies,
            prof,
            modifiers,
        )
        for ability in ATTRIBUTE_NAMES
    }

    skill_modifiers = {
        skill: skill_bonus(
            skill,
            abilities.get(ability),
            sheet.skill_proficiencies.get(skill, ProficiencyLevel.NONE),
            prof,
            modifiers,
        )
        for skill, ability in SKILLS.items()
    }

    max_hp = apply_modifiers(
        hit_points_for_level(sheet.effective_hit_die, mods.constitution, level),
        filter_modifiers_by_target(modifiers, Target.MAX_HP.value),
    )

    return CalculatedStats(
        abilities=abilities,
        ability_modifiers={ability: mods.get(ability) for ability in ATTRIBUTE_NAMES},
        proficiency_bonus=prof,
        armor_class=calculate_armor_class(abilities.dexterity, sheet.armor, sheet.shield, modifiers),
        initiative=calculate_initiative_bonus(abilities.dexterity, modifiers),
        speed=apply_modifiers(
            sheet.base_speed, filter_modifiers_by_target(modifiers, Target.SPEED.value)
        ),
        passive_perception=passive_score(skill_modifiers["perception"], modifiers),
        saving_throws=saving_throws,
        skill_modifiers=skill_modifiers,
        max_hp=max(1, max_hp),
        carrying_capacity=carrying_capacity(abilities.strength),
    )
