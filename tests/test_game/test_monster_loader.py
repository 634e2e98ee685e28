"""Tests for monster template loading."""

import pytest

from feyforge.config import get_settings
from feyforge.game.systems.combat import CombatantKind
from feyforge.game.world import (
    MonsterLoadError,
    MonsterTemplate,
    MonsterValidationError,
    get_monster_by_id,
    get_monsters_by_challenge_rating,
    load_all_monsters,
    load_monsters_from_directory,
)

GOBLIN_YAML = """\
monsters:
  - id: goblin
    name: Goblin
    armor_class: 15
    hit_points: 7
    dexterity: 14
    challenge_rating: "1/4"
"""


class TestMonsterTemplate:
    """Test the MonsterTemplate Pydantic model."""

    def test_minimal(self):
        """Optional fields fall back to their defaults."""
        monster = MonsterTemplate(id="rat", name="Rat", armor_class=10, hit_points=1)

        assert monster.dexterity == 10
        assert monster.challenge_rating == "0"
        assert monster.kind is CombatantKind.MONSTER
        assert monster.effective_initiative_bonus == 0
        assert monster.xp == 10

    def test_initiative_bonus_from_dexterity(self):
        """Without an explicit bonus, DEX sets initiative."""
        monster = MonsterTemplate(id="wolf", name="Wolf", armor_class=13, hit_points=11, dexterity=15)
        assert monster.effective_initiative_bonus == 2

    def test_explicit_initiative_bonus_wins(self):
        """An explicit initiative bonus overrides DEX."""
        monster = MonsterTemplate(
            id="wolf", name="Wolf", armor_class=13, hit_points=11, dexterity=15, initiative_bonus=5
        )
        assert monster.effective_initiative_bonus == 5

    def test_to_combatant(self):
        """A template seeds a monster combatant at full HP."""
        monster = MonsterTemplate(
            id="goblin", name="Goblin", armor_class=15, hit_points=7, dexterity=14
        )

        combatant = monster.to_combatant(initiative=14, name="Goblin 2")

        assert combatant.name == "Goblin 2"
        assert combatant.kind is CombatantKind.MONSTER
        assert combatant.initiative == 14
        assert combatant.initiative_bonus == 2
        assert combatant.armor_class == 15
        assert combatant.hit_points.current == 7
        assert combatant.hit_points.max == 7
        assert combatant.death_saves is None

    def test_npc_kind(self):
        """NPC templates produce NPC combatants."""
        monster = MonsterTemplate(
            id="captain", name="Bandit Captain", armor_class=15, hit_points=65, kind="npc"
        )
        assert monster.to_combatant(initiative=10).kind is CombatantKind.NPC


class TestLoadMonsters:
    """Tests for YAML loading."""

    def test_load_from_directory(self, tmp_path):
        """Templates are keyed by id."""
        (tmp_path / "goblins.yaml").write_text(GOBLIN_YAML)

        monsters = load_monsters_from_directory(tmp_path)

        assert list(monsters) == ["goblin"]
        assert monsters["goblin"].xp == 50

    def test_missing_directory(self, tmp_path):
        """A missing directory is a load error."""
        with pytest.raises(MonsterLoadError, match="does not exist"):
            load_monsters_from_directory(tmp_path / "missing")

    def test_empty_directory(self, tmp_path):
        """A directory without YAML files is a load error."""
        with pytest.raises(MonsterLoadError, match="No YAML files"):
            load_monsters_from_directory(tmp_path)

    def test_missing_monsters_key(self, tmp_path):
        """Files must have a top-level monsters list."""
        (tmp_path / "bad.yaml").write_text("creatures: []\n")

        with pytest.raises(MonsterLoadError, match="Missing 'monsters' key"):
            load_monsters_from_directory(tmp_path)

    def test_invalid_yaml(self, tmp_path):
        """Malformed YAML is a load error."""
        (tmp_path / "bad.yaml").write_text("monsters: [unclosed\n")

        with pytest.raises(MonsterLoadError, match="YAML parsing error"):
            load_monsters_from_directory(tmp_path)

    def test_invalid_monster(self, tmp_path):
        """Missing required fields name the offending monster."""
        (tmp_path / "bad.yaml").write_text("monsters:\n  - id: blob\n    name: Blob\n")

        with pytest.raises(MonsterValidationError, match="blob"):
            load_monsters_from_directory(tmp_path)

    def test_duplicate_ids(self, tmp_path):
        """The same id in two files is rejected."""
        (tmp_path / "a.yaml").write_text(GOBLIN_YAML)
        (tmp_path / "b.yaml").write_text(GOBLIN_YAML)

        with pytest.raises(MonsterValidationError, match="Duplicate monster ID 'goblin'"):
            load_monsters_from_directory(tmp_path)


class TestBundledMonsters:
    """Tests against the bundled SRD sample."""

    def test_load_all_monsters_default(self):
        """The bundled data loads without configuration."""
        monsters = load_all_monsters()

        goblin = get_monster_by_id(monsters, "goblin")
        assert goblin is not None
        assert goblin.armor_class == 15
        assert goblin.hit_points == 7
        assert get_monster_by_id(monsters, "tarrasque") is None

    def test_by_challenge_rating(self):
        """Filtering by rating finds every matching template."""
        monsters = load_all_monsters()
        quarter = {m.id for m in get_monsters_by_challenge_rating(monsters, "1/4")}

        assert {"goblin", "wolf", "skeleton"} <= quarter

    def test_configured_directory(self, tmp_path, monkeypatch):
        """FEYFORGE_MONSTER_DATA_DIR replaces the bundled data."""
        (tmp_path / "goblins.yaml").write_text(GOBLIN_YAML)
        monkeypatch.setenv("FEYFORGE_MONSTER_DATA_DIR", str(tmp_path))
        get_settings.cache_clear()

        assert list(load_all_monsters()) == ["goblin"]
