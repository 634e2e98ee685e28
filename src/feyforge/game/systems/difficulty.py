"""Encounter difficulty budgeting (DMG encounter building rules)."""

from collections.abc import Iterable
from dataclasses import dataclass
from enum import StrEnum

import structlog

from feyforge.game.character.constants import MAX_LEVEL, MIN_LEVEL

logger = structlog.get_logger(__name__)


class Difficulty(StrEnum):
    """Encounter difficulty rating."""

    TRIVIAL = "trivial"
    EASY = "easy"
    MEDIUM = "medium"
    HARD = "hard"
    DEADLY = "deadly"


# Per-character XP thresholds by level: (easy, medium, hard, deadly)
PARTY_THRESHOLDS: dict[int, tuple[int, int, int, int]] = {
    1: (25, 50, 75, 100),
    2: (50, 100, 150, 200),
    3: (75, 150, 225, 400),
    4: (125, 250, 375, 500),
    5: (250, 500, 750, 1100),
    6: (300, 600, 900, 1400),
    7: (350, 750, 1100, 1700),
    8: (450, 900, 1400, 2100),
    9: (550, 1100, 1600, 2400),
    10: (600, 1200, 1900, 2800),
    11: (800, 1600, 2400, 3600),
    12: (1000, 2000, 3000, 4500),
    13: (1100, 2200, 3400, 5100),
    14: (1250, 2500, 3800, 5700),
    15: (1400, 2800, 4300, 6400),
    16: (1600, 3200, 4800, 7200),
    17: (2000, 3900, 5900, 8800),
    18: (2100, 4200, 6300, 9500),
    19: (2400, 4900, 7300, 10900),
    20: (2800, 5700, 8500, 12700),
}

CR_TO_XP: dict[str, int] = {
    "0": 10,
    "1/8": 25,
    "1/4": 50,
    "1/2": 100,
    "1": 200,
    "2": 450,
    "3": 700,
    "4": 1100,
    "5": 1800,
    "6": 2300,
    "7": 2900,
    "8": 3900,
    "9": 5000,
    "10": 5900,
    "11": 7200,
    "12": 8400,
    "13": 10000,
    "14": 11500,
    "15": 13000,
    "16": 15000,
    "17": 18000,
    "18": 20000,
    "19": 22000,
    "20": 25000,
    "21": 33000,
    "22": 41000,
    "23": 50000,
    "24": 62000,
    "25": 75000,
    "26": 90000,
    "27": 105000,
    "28": 120000,
    "29": 135000,
    "30": 155000,
}


@dataclass(frozen=True)
class MonsterGroup:
    """A number of identical monsters of one challenge rating."""

    challenge_rating: str
    count: int = 1


@dataclass(frozen=True)
class EncounterDifficulty:
    """Result of budgeting an encounter against a party."""

    base_xp: int
    adjusted_xp: int
    multiplier: float
    monster_count: int
    party_size: int
    thresholds: dict[Difficulty, int]
    rating: Difficulty

    @property
    def xp_per_character(self) -> int:
        """Share of the (unadjusted) award each character receives."""
        return self.base_xp // self.party_size


def encounter_multiplier(monster_count: int) -> float:
    """
    Get the XP multiplier for the number of monsters.

    1 -> x1, 2 -> x1.5, 3-6 -> x2, 7-10 -> x2.5, 11-14 -> x3, 15+ -> x4.
    """
    if monster_count <= 1:
        return 1.0
    if monster_count == 2:
        return 1.5
    if monster_count <= 6:
        return 2.0
    if monster_count <= 10:
        return 2.5
    if monster_count <= 14:
        return 3.0
    return 4.0


def xp_for_challenge_rating(challenge_rating: str) -> int:
    """XP value of one monster; unknown ratings are worth 0."""
    return CR_TO_XP.get(str(challenge_rating).strip(), 0)


def party_thresholds(party_size: int, party_level: int) -> dict[Difficulty, int]:
    """Party XP thresholds (per-character thresholds times party size)."""
    party_size = max(1, party_size)
    level = min(max(party_level, MIN_LEVEL), MAX_LEVEL)
    easy, medium, hard, deadly = PARTY_THRESHOLDS[level]
    return {
        Difficulty.EASY: easy * party_size,
        Difficulty.MEDIUM: medium * party_size,
        Difficulty.HARD: hard * party_size,
        Difficulty.DEADLY: deadly * party_size,
    }


def calculate_encounter_difficulty(
    party_size: int,
    party_level: int,
    monsters: Iterable[MonsterGroup],
) -> EncounterDifficulty | None:
    """
    Rate an encounter for a party.

    Args:
        party_size: Number of characters (floored at 1)
        party_level: Average party level (clamped to 1-20)
        monsters: Monster groups in the encounter

    Returns:
        EncounterDifficulty, or None when there are no monsters
    """
    groups = [group for group in monsters if group.count > 0]
    monster_count = sum(group.count for group in groups)
    if monster_count == 0:
        return None

    base_xp = sum(xp_for_challenge_rating(g.challenge_rating) * g.count for g in groups)
    multiplier = encounter_multiplier(monster_count)
    adjusted_xp = int(base_xp * multiplier)
    thresholds = party_thresholds(party_size, party_level)

    if adjusted_xp < thresholds[Difficulty.EASY]:
        rating = Difficulty.TRIVIAL
    elif adjusted_xp < thresholds[Difficulty.MEDIUM]:
        rating = Difficulty.EASY
    elif adjusted_xp < thresholds[Difficulty.HARD]:
        rating = Difficulty.MEDIUM
    elif adjusted_xp < thresholds[Difficulty.DEADLY]:
        rating = Difficulty.HARD
    else:
        rating = Difficulty.DEADLY

    logger.debug(
        "encounter_difficulty_calculated",
        party_size=party_size,
        party_level=party_level,
        monster_count=monster_count,
        base_xp=base_xp,
        adjusted_xp=adjusted_xp,
        rating=rating.value,
    )

    return EncounterDifficulty(
        base_xp=base_xp,
        adjusted_xp=adjusted_xp,
        multiplier=multiplier,
        monster_count=monster_count,
        party_size=max(1, party_size),
        thresholds=thresholds,
        rating=rating,
    )
