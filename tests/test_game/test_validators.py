"""Tests for character creation validation."""

from feyforge.game.character.attributes import AbilityScores
from feyforge.game.character.sheet import CharacterSheet
from feyforge.game.character.validators import (
    AbilityScoreMethod,
    CharacterCreationData,
    ValidationError,
    point_buy_remaining,
    validate_abilities,
    validate_ability_scores,
    validate_basics,
    validate_character,
    validate_character_creation,
    validate_name,
    validate_point_buy,
    validate_skill_proficiencies,
    validate_standard_array,
)
from feyforge.game.systems.combat import HitPoints

ALL_FIFTEENS = dict.fromkeys(
    ["strength", "dexterity", "constitution", "intelligence", "wisdom", "charisma"], 15
)
ONE_FIFTEEN = {
    "strength": 15,
    "dexterity": 8,
    "constitution": 8,
    "intelligence": 8,
    "wisdom": 8,
    "charisma": 8,
}
STANDARD = {
    "strength": 15,
    "dexterity": 14,
    "constitution": 13,
    "intelligence": 12,
    "wisdom": 10,
    "charisma": 8,
}


def _fields(errors):
    return [error.field for error in errors]


class TestValidateName:
    """Tests for character name rules."""

    def test_valid_name(self):
        """An ordinary name passes."""
        assert validate_name("Kvothe") == []

    def test_missing_name(self):
        """Missing or blank names are required errors."""
        assert validate_name(None) == [ValidationError("name", "Name is required")]
        assert validate_name("   ") == [ValidationError("name", "Name is required")]

    def test_too_short(self):
        """Names shorter than 2 characters after trimming fail."""
        errors = validate_name(" K ")
        assert errors == [ValidationError("name", "Name must be at least 2 characters")]

    def test_too_long(self):
        """Names longer than 50 characters fail."""
        errors = validate_name("x" * 51)
        assert errors == [ValidationError("name", "Name must be 50 characters or less")]

    def test_length_measured_after_trim(self):
        """Surrounding whitespace does not count toward the limit."""
        assert validate_name("  " + "x" * 50 + "  ") == []


class TestPointBuy:
    """Tests for the 27-point buy budget."""

    def test_all_fifteens_over_budget(self):
        """Six 15s cost 54 points."""
        errors = validate_point_buy(ALL_FIFTEENS)
        assert errors == [
            ValidationError("abilities", "Point buy total (54) exceeds maximum (27)")
        ]

    def test_single_fifteen_within_budget(self):
        """15, 8, 8, 8, 8, 8 costs 9 points."""
        assert validate_point_buy(ONE_FIFTEEN) == []

    def test_exact_budget(self):
        """15, 15, 15, 8, 8, 8 costs exactly 27."""
        scores = dict(ONE_FIFTEEN, dexterity=15, constitution=15)
        assert validate_point_buy(scores) == []

    def test_accepts_ability_scores_record(self):
        """An AbilityScores record is accepted as well as a mapping."""
        assert validate_point_buy(AbilityScores(**ONE_FIFTEEN)) == []

    def test_out_of_range_scores(self):
        """Each out-of-range score is reported, and costs nothing."""
        scores = dict(ONE_FIFTEEN, strength=16, dexterity=7)
        errors = validate_point_buy(scores)

        assert errors == [
            ValidationError("abilities.strength", "strength cannot exceed 15 for point buy"),
            ValidationError("abilities.dexterity", "dexterity must be at least 8 for point buy"),
        ]

    def test_missing_score(self):
        """A missing ability is reported on its own field."""
        scores = dict(ONE_FIFTEEN)
        del scores["wisdom"]

        assert _fields(validate_point_buy(scores)) == ["abilities.wisdom"]

    def test_fractional_score(self):
        """A score between table entries is reported instead of costed."""
        scores = dict(ONE_FIFTEEN, strength=8.5)

        assert validate_point_buy(scores) == [
            ValidationError("abilities.strength", "strength must be a whole number for point buy")
        ]
        assert point_buy_remaining(scores) == 27

    def test_missing_scores(self):
        """No scores at all is a single error."""
        assert _fields(validate_point_buy(None)) == ["abilities"]

    def test_points_remaining(self):
        """Remaining points can go negative when over budget."""
        assert point_buy_remaining(ONE_FIFTEEN) == 18
        assert point_buy_remaining(ALL_FIFTEENS) == -27
        assert point_buy_remaining(None) == 27


class TestStandardArray:
    """Tests for the standard array."""

    def test_valid_assignment(self):
        """Each array value used once passes."""
        assert validate_standard_array(STANDARD) == []

    def test_value_outside_array(self):
        """Values not in the array are reported per ability."""
        scores = dict(STANDARD, charisma=9)
        errors = validate_standard_array(scores)

        assert errors == [
            ValidationError("abilities.charisma", "9 is not a valid standard array value")
        ]

    def test_value_used_twice(self):
        """A value used more often than it appears is reported."""
        scores = dict(STANDARD, wisdom=15)
        errors = validate_standard_array(scores)

        assert errors == [ValidationError("abilities", "Standard array value 15 used too many times")]


class TestAbilityScoreRange:
    """Tests for rolled and manual scores."""

    def test_valid_range(self):
        """Rolled extremes such as 3 and 18 are accepted."""
        assert validate_ability_scores(dict(STANDARD, strength=18, charisma=3)) == []

    def test_out_of_range(self):
        """Each score outside 1-30 is reported."""
        errors = validate_ability_scores(dict(STANDARD, strength=31, charisma=0))
        assert _fields(errors) == ["abilities.strength", "abilities.charisma"]


class TestSkillProficiencies:
    """Tests for skill selection."""

    AVAILABLE = ["athletics", "perception", "survival", "intimidation"]

    def test_valid_selection(self):
        """The right number of available skills passes."""
        assert validate_skill_proficiencies(["athletics", "perception"], 2, self.AVAILABLE) == []

    def test_none_selected(self):
        """Selecting nothing when skills are required fails."""
        errors = validate_skill_proficiencies([], 2, self.AVAILABLE)
        assert errors == [ValidationError("skill_proficiencies", "Select 2 skill proficiencies")]

    def test_nothing_required(self):
        """Classes without skill choices accept an empty list."""
        assert validate_skill_proficiencies([], 0, self.AVAILABLE) == []

    def test_too_many_unavailable_and_duplicate(self):
        """All three problems are reported together."""
        errors = validate_skill_proficiencies(["arcana", "athletics", "athletics"], 2, self.AVAILABLE)

        assert [e.message for e in errors] == [
            "Too many skills selected (max 2)",
            "arcana is not available for this class",
            "Duplicate skill selections are not allowed",
        ]


class TestComposedValidation:
    """Tests for step and whole-draft validation."""

    def test_basics_collects_every_error(self):
        """Name, race and class are all checked in one pass."""
        result = validate_basics(CharacterCreationData())

        assert not result.valid
        assert _fields(result.errors) == ["name", "race", "class"]

    def test_class_alias(self):
        """Drafts accept the "class" key as submitted by the builder."""
        data = CharacterCreationData.model_validate({"name": "Kvothe", "race": "Human", "class": "Bard"})

        assert data.class_name == "Bard"
        assert validate_basics(data).valid

    def test_abilities_without_method(self):
        """Scores without a method ask for the method."""
        result = validate_abilities(CharacterCreationData(base_abilities=STANDARD))
        assert result.errors == [
            ValidationError("ability_score_method", "Select an ability score method")
        ]

    def test_abilities_dispatch_on_method(self):
        """The method decides which rules apply."""
        point_buy = CharacterCreationData(
            base_abilities=ALL_FIFTEENS, ability_score_method=AbilityScoreMethod.POINT_BUY
        )
        rolled = CharacterCreationData(
            base_abilities=ALL_FIFTEENS, ability_score_method=AbilityScoreMethod.ROLL
        )

        assert not validate_abilities(point_buy).valid
        assert validate_abilities(rolled).valid

    def test_complete_draft_is_valid(self):
        """A finished draft passes every step."""
        data = CharacterCreationData(
            name="Brenna",
            race="Dwarf",
            class_name="Fighter",
            base_abilities=ONE_FIFTEEN,
            ability_score_method=AbilityScoreMethod.POINT_BUY,
            skill_proficiencies=["athletics", "survival"],
        )

        result = validate_character_creation(
            data, max_skill_choices=2, available_skills=["athletics", "survival", "perception"]
        )

        assert result.valid
        assert result.errors == []

    def test_errors_from_every_step(self):
        """Errors are collected across all steps."""
        data = CharacterCreationData(
            name="B",
            race="Dwarf",
            class_name="Fighter",
            base_abilities=ALL_FIFTEENS,
            ability_score_method="point_buy",
        )

        result = validate_character_creation(data, max_skill_choices=2, available_skills=["athletics"])

        assert _fields(result.errors) == ["name", "abilities", "skill_proficiencies"]


class TestValidateCharacter:
    """Tests for validating a stored sheet."""

    def test_valid_sheet(self, fighter_sheet):
        """A well-formed sheet passes."""
        assert validate_character(fighter_sheet).valid

    def test_hit_points_checked(self):
        """Stored hit points must stay within max."""
        sheet = CharacterSheet(
            name="Brenna",
            race="Dwarf",
            class_name="Fighter",
            hit_points=HitPoints(current=30, max=20, temp=5),
        )

        result = validate_character(sheet)

        assert _fields(result.errors) == ["hit_points.current"]

    def test_missing_identity(self):
        """Name, race and class are required on a sheet."""
        sheet = CharacterSheet(name="", race="", class_name="")
        assert _fields(validate_character(sheet).errors) == ["name", "race", "class"]
