"""Experience and leveling system for feyforge.

XP is the single source of truth for level: level is always derived from
the XP total, never stored on its own. Milestone campaigns still go through
XP by snapping it to the floor of the chosen level.
"""

from dataclasses import dataclass, field

import structlog

from feyforge.game.character.constants import MAX_LEVEL, MIN_LEVEL, XP_THRESHOLDS

logger = structlog.get_logger(__name__)


@dataclass(frozen=True)
class XPAward:
    """Result of adding experience to a tracker."""

    new_xp: int
    levels_gained: list[int] = field(default_factory=list)

    @property
    def leveled_up(self) -> bool:
        """True if at least one level boundary was crossed."""
        return bool(self.levels_gained)


def _clamp_level(level: int) -> int:
    return min(max(level, MIN_LEVEL), MAX_LEVEL)


def xp_for_level(level: int) -> int:
    """
    Get the total XP required to reach a level.

    Args:
        level: The target level; values outside 1-20 are clamped

    Returns:
        Threshold XP for that level

    Examples:
        >>> xp_for_level(1)
        0
        >>> xp_for_level(4)
        2700
    """
    return XP_THRESHOLDS[_clamp_level(level) - 1]


def level_from_xp(xp: int) -> int:
    """
    Get the level for an XP total.

    Scans the threshold table from the top for the highest level whose
    threshold is <= xp. Always returns 1-20, whatever the magnitude of xp.

    Examples:
        >>> level_from_xp(2699)
        3
        >>> level_from_xp(2700)
        4
    """
    for level in range(MAX_LEVEL, MIN_LEVEL - 1, -1):
        if xp >= XP_THRESHOLDS[level - 1]:
            return level
    return MIN_LEVEL


def xp_to_next_level(xp: int) -> int:
    """Get XP still needed to reach the next level (0 at level 20)."""
    level = level_from_xp(xp)
    if level >= MAX_LEVEL:
        return 0
    return xp_for_level(level + 1) - xp


def xp_progress(xp: int) -> int:
    """
    Calculate progress through the current level as a whole percentage.

    Example:
        A level 2 character (300 XP) with 600 XP is halfway to level 3
        (900 XP), so progress is 50.
    """
    level = level_from_xp(xp)
    if level >= MAX_LEVEL:
        return 100

    current_floor = xp_for_level(level)
    next_floor = xp_for_level(level + 1)
    return (max(xp, 0) - current_floor) * 100 // (next_floor - current_floor)


def would_level_up(current_xp: int, added_xp: int) -> bool:
    """Check if adding XP would cross at least one level boundary."""
    return level_from_xp(current_xp + added_xp) > level_from_xp(current_xp)


def levels_gained(current_xp: int, added_xp: int) -> list[int]:
    """
    Get every level gained by adding XP.

    One entry per level crossed, so a jump from level 1 to 4 reports
    [2, 3, 4] and each can fire its own level-up notification.

    Returns:
        Ascending list of new levels, empty if no boundary is crossed
    """
    current_level = level_from_xp(current_xp)
    new_level = level_from_xp(current_xp + added_xp)
    return list(range(current_level + 1, new_level + 1))


def split_xp(total_xp: int, party_size: int) -> int:
    """Share of an XP award per character (floored, 0 for an empty party)."""
    if party_size <= 0 or total_xp <= 0:
        return 0
    return total_xp // party_size


# Milestone leveling


def set_to_level(level: int) -> int:
    """Get the XP value that places a character exactly at a level."""
    return xp_for_level(level)


def level_up(current_xp: int) -> int:
    """Get the XP value one level above the current one (unchanged at level 20)."""
    current_level = level_from_xp(current_xp)
    if current_level >= MAX_LEVEL:
        return current_xp
    return xp_for_level(current_level + 1)


def level_down(current_xp: int) -> int:
    """Get the XP value one level below the current one (0 at level 1)."""
    current_level = level_from_xp(current_xp)
    if current_level <= MIN_LEVEL:
        return 0
    return xp_for_level(current_level - 1)


class ExperienceTracker:
    """
    Tracks a character's XP total.

    The only stored field is ``xp``; level, progress and XP-to-next are
    computed on read. Negative values are clamped to 0 here, at the entity
    boundary.
    """

    def __init__(self, xp: int = 0, character_id: str | None = None) -> None:
        """
        Initialize a tracker.

        Args:
            xp: Starting XP total
            character_id: Optional owner id, used for logging only
        """
        self.character_id = character_id
        self._xp = max(0, xp)

    @property
    def xp(self) -> int:
        return self._xp

    @xp.setter
    def xp(self, value: int) -> None:
        self._xp = max(0, value)

    @property
    def level(self) -> int:
        return level_from_xp(self._xp)

    @property
    def xp_to_next_level(self) -> int:
        return xp_to_next_level(self._xp)

    @property
    def progress(self) -> int:
        return xp_progress(self._xp)

    def add_xp(self, amount: int, source: str = "unspecified") -> XPAward:
        """
        Award experience points and report every level gained.

        Args:
            amount: XP to add (negative values remove XP, floored at 0)
            source: Source description for logging (e.g., "encounter", "milestone")

        Returns:
            XPAward with the new total and the levels gained
        """
        old_xp = self._xp
        old_level = self.level
        gained = levels_gained(old_xp, amount)
        self.xp = old_xp + amount

        logger.info(
            "xp_awarded",
            character_id=self.character_id,
            amount=amount,
            source=source,
            old_xp=old_xp,
            new_xp=self._xp,
        )

        previous = old_level
        for new_level in gained:
            logger.info(
                "character_leveled_up",
                character_id=self.character_id,
                old_level=previous,
                new_level=new_level,
            )
            previous = new_level

        return XPAward(new_xp=self._xp, levels_gained=gained)

    def set_level(self, level: int) -> None:
        """Snap XP to the floor of a level (milestone leveling)."""
        old_level = self.level
        self._xp = set_to_level(level)

        logger.info(
            "character_level_set",
            character_id=self.character_id,
            old_level=old_level,
            new_level=self.level,
            xp=self._xp,
        )

    def __repr__(self) -> str:
        return f"ExperienceTracker(xp={self._xp}, level={self.level})"
