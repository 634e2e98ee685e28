"""World content - monster templates loaded from YAML."""

from .monster_loader import (
    MonsterLoadError,
    MonsterTemplate,
    MonsterValidationError,
    get_monster_by_id,
    get_monsters_by_challenge_rating,
    load_all_monsters,
    load_monsters_from_directory,
)

__all__ = [
    "MonsterTemplate",
    "load_all_monsters",
    "load_monsters_from_directory",
    "get_monster_by_id",
    "get_monsters_by_challenge_rating",
    "MonsterLoadError",
    "MonsterValidationError",
]
