"""
Monster template loader for feyforge.

Handles loading and validating monster stat blocks from YAML files. A
template only carries what the combat tracker needs to seed a combatant.
"""

from pathlib import Path
from typing import Any

import structlog
import yaml
from pydantic import BaseModel, ConfigDict, Field, ValidationError

from feyforge.config import get_settings
from feyforge.game.character.attributes import get_modifier
from feyforge.game.systems.combat import Combatant, CombatantKind, HitPoints, roll_initiative
from feyforge.game.systems.difficulty import CR_TO_XP

logger = structlog.get_logger(__name__)


class MonsterLoadError(Exception):
    """Raised when there's an error loading monster data."""

    pass


class MonsterValidationError(Exception):
    """Raised when monster validation fails."""

    pass


class MonsterTemplate(BaseModel):
    """
    Monster stat block loaded from YAML data.

    Attributes:
        id: Unique identifier for the template (e.g., "goblin", "dire_wolf")
        name: Display name used for spawned combatants
        armor_class: Armor class
        hit_points: Average hit points
        hit_dice: Hit dice expression, informational only (e.g., "2d6")
        dexterity: Dexterity score, used for the initiative bonus
        initiative_bonus: Explicit initiative bonus; derived from dexterity if omitted
        challenge_rating: Challenge rating as written ("1/4", "2", ...)
        kind: Combatant kind to spawn as (monster or npc)
    """

    model_config = ConfigDict(extra="allow")

    id: str = Field(..., description="Unique monster template identifier")
    name: str = Field(..., description="Display name of the monster")
    armor_class: int = Field(..., ge=0, description="Armor class")
    hit_points: int = Field(..., ge=1, description="Average hit points")
    hit_dice: str | None = Field(default=None, description="Hit dice expression")
    dexterity: int = Field(default=10, ge=1, le=30, description="Dexterity score")
    initiative_bonus: int | None = Field(default=None, description="Initiative bonus override")
    challenge_rating: str = Field(default="0", description="Challenge rating")
    kind: CombatantKind = Field(default=CombatantKind.MONSTER, description="monster or npc")

    @property
    def effective_initiative_bonus(self) -> int:
        if self.initiative_bonus is not None:
            return self.initiative_bonus
        return get_modifier(self.dexterity)

    @property
    def xp(self) -> int:
        """XP value of one creature of this template."""
        return CR_TO_XP.get(self.challenge_rating, 0)

    def to_combatant(self, initiative: int | None = None, name: str | None = None) -> Combatant:
        """
        Spawn a combatant from this template.

        Args:
            initiative: Rolled initiative total; rolls d20 + bonus if None
            name: Display name override (e.g. "Goblin 2")

        Returns:
            A new combatant at full hit points
        """
        bonus = self.effective_initiative_bonus
        return Combatant(
            name=name or self.name,
            kind=self.kind,
            hit_points=HitPoints(current=self.hit_points, max=self.hit_points),
            initiative=roll_initiative(bonus) if initiative is None else initiative,
            initiative_bonus=bonus,
            armor_class=self.armor_class,
        )


def load_yaml_file(file_path: Path) -> list[dict[str, Any]]:
    """
    Load a YAML file containing monster definitions.

    Args:
        file_path: Path to the YAML file

    Returns:
        List of monster dictionaries

    Raises:
        MonsterLoadError: If the file cannot be loaded or parsed
    """
    try:
        with open(file_path, encoding="utf-8") as f:
            data = yaml.safe_load(f)
    except yaml.YAMLError as e:
        raise MonsterLoadError(f"YAML parsing error in {file_path}: {e}") from e
    except OSError as e:
        raise MonsterLoadError(f"Error loading {file_path}: {e}") from e

    if not data:
        raise MonsterLoadError(f"Empty YAML file: {file_path}")

    if not isinstance(data, dict) or "monsters" not in data:
        raise MonsterLoadError(f"Missing 'monsters' key in {file_path}")

    monsters = data["monsters"]
    if not isinstance(monsters, list):
        raise MonsterLoadError(f"'monsters' must be a list in {file_path}")

    return monsters


def create_monster_from_data(monster_data: dict[str, Any], file_path: Path) -> MonsterTemplate:
    """
    Create a MonsterTemplate instance from dictionary data.

    Raises:
        MonsterValidationError: If Pydantic validation fails
    """
    if not isinstance(monster_data, dict):
        raise MonsterValidationError(f"Monster entries in {file_path} must be mappings")

    try:
        return MonsterTemplate(**monster_data)
    except ValidationError as e:
        raise MonsterValidationError(
            f"Monster '{monster_data.get('id', 'unknown')}' in {file_path} is invalid: {e}"
        ) from e


def load_monsters_from_directory(directory: Path) -> dict[str, MonsterTemplate]:
    """
    Load all monster YAML files from a directory.

    Args:
        directory: Path to the directory containing YAML files

    Returns:
        Dictionary mapping monster id to MonsterTemplate instances

    Raises:
        MonsterLoadError: If directory doesn't exist or files can't be loaded
        MonsterValidationError: If monster validation fails or ids collide
    """
    if not directory.exists():
        raise MonsterLoadError(f"Directory does not exist: {directory}")

    if not directory.is_dir():
        raise MonsterLoadError(f"Not a directory: {directory}")

    yaml_files = sorted([*directory.glob("*.yaml"), *directory.glob("*.yml")])
    if not yaml_files:
        raise MonsterLoadError(f"No YAML files found in {directory}")

    monsters: dict[str, MonsterTemplate] = {}
    for yaml_file in yaml_files:
        for monster_data in load_yaml_file(yaml_file):
            monster = create_monster_from_data(monster_data, yaml_file)

            if monster.id in monsters:
                raise MonsterValidationError(
                    f"Duplicate monster ID '{monster.id}' found in {yaml_file}"
                )

            monsters[monster.id] = monster

    return monsters


def load_all_monsters(data_dir: Path | None = None) -> dict[str, MonsterTemplate]:
    """
    Load all monster templates.

    This is the main entry point for loading monster templates.

    Args:
        data_dir: Directory of YAML files. If None, uses the configured
            monster_data_dir or the bundled SRD sample.

    Returns:
        Dictionary mapping monster id to MonsterTemplate instances
    """
    if data_dir is None:
        data_dir = get_settings().monsters_dir

    monsters = load_monsters_from_directory(data_dir)

    logger.info("monster_templates_loaded", count=len(monsters), directory=str(data_dir))

    return monsters


def get_monster_by_id(monsters: dict[str, MonsterTemplate], monster_id: str) -> MonsterTemplate | None:
    """
    Get a monster template by its ID.

    Args:
        monsters: Dictionary of all monster templates
        monster_id: The monster ID to look up

    Returns:
        MonsterTemplate if found, None otherwise
    """
    return monsters.get(monster_id)


def get_monsters_by_challenge_rating(
    monsters: dict[str, MonsterTemplate], challenge_rating: str
) -> list[MonsterTemplate]:
    """Get all monster templates of one challenge rating."""
    return [monster for monster in monsters.values() if monster.challenge_rating == challenge_rating]
