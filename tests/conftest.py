"""Shared fixtures for all tests."""

import pytest

from feyforge.config import get_settings
from feyforge.game.character.attributes import AbilityScores, Armor
from feyforge.game.character.constants import ArmorCategory, AttributeName, ProficiencyLevel
from feyforge.game.character.sheet import CharacterSheet
from feyforge.game.systems.combat import CombatantKind, Encounter

SETTINGS_ENV_VARS = (
    "FEYFORGE_TEMP_HP_POLICY",
    "FEYFORGE_MONSTER_DATA_DIR",
    "FEYFORGE_LOG_LEVEL",
    "FEYFORGE_LOG_FORMAT",
)


@pytest.fixture(autouse=True)
def isolated_settings(monkeypatch):
    """Run every test against default settings, unaffected by the host environment."""
    for var in SETTINGS_ENV_VARS:
        monkeypatch.delenv(var, raising=False)
    get_settings.cache_clear()
    yield
    get_settings.cache_clear()


@pytest.fixture
def encounter():
    """An empty encounter using the default temp HP policy."""
    return Encounter(temp_hp_policy="replace")


@pytest.fixture
def staged_encounter(encounter):
    """Three combatants added out of initiative order, combat not yet started."""
    encounter.add_combatant("Goblin", CombatantKind.MONSTER, 7, initiative=12, armor_class=15)
    encounter.add_combatant("Aria", CombatantKind.PC, 24, initiative=18, initiative_bonus=3)
    encounter.add_combatant("Orc", CombatantKind.MONSTER, 15, initiative=5, armor_class=13)
    return encounter


@pytest.fixture
def fighter_sheet():
    """A level 1 human fighter in chain mail with a shield."""
    return CharacterSheet(
        name="Brenna Ironhold",
        race="Human",
        class_name="Fighter",
        base_abilities=AbilityScores(
            strength=15, dexterity=13, constitution=14, intelligence=8, wisdom=12, charisma=10
        ),
        racial_bonuses={ability: 1 for ability in AttributeName},
        saving_throw_proficiencies=[AttributeName.STRENGTH, AttributeName.CONSTITUTION],
        skill_proficiencies={
            "athletics": ProficiencyLevel.PROFICIENT,
            "perception": ProficiencyLevel.PROFICIENT,
        },
        armor=Armor(name="Chain Mail", category=ArmorCategory.HEAVY, base_ac=16),
        shield=Armor(name="Shield", category=ArmorCategory.SHIELD, base_ac=2),
    )
