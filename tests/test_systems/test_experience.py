"""Tests for the experience and leveling system."""

import pytest

from feyforge.game.character.constants import XP_THRESHOLDS
from feyforge.game.systems.experience import (
    ExperienceTracker,
    level_down,
    level_from_xp,
    level_up,
    levels_gained,
    set_to_level,
    split_xp,
    would_level_up,
    xp_for_level,
    xp_progress,
    xp_to_next_level,
)


class TestLevelFromXP:
    """Tests for deriving level from an XP total."""

    def test_boundary_exactness(self):
        """2699 XP is still level 3; 2700 is level 4."""
        assert level_from_xp(2699) == 3
        assert level_from_xp(2700) == 4

    def test_every_threshold(self):
        """Each threshold starts its level and one XP less falls short."""
        for level, threshold in enumerate(XP_THRESHOLDS, start=1):
            assert level_from_xp(threshold) == level
            if threshold > 0:
                assert level_from_xp(threshold - 1) == level - 1

    def test_range_is_bounded(self):
        """Levels stay within 1-20 for any XP."""
        assert level_from_xp(-100) == 1
        assert level_from_xp(0) == 1
        assert level_from_xp(10**9) == 20

    def test_monotonic(self):
        """More XP never means a lower level."""
        samples = sorted({0, 1, 299, 300, 899, 2700, 6499, 6500, 100000, 354999, 355000, 999999})
        levels = [level_from_xp(xp) for xp in samples]

        assert levels == sorted(levels)


class TestXPHelpers:
    """Tests for progress and threshold helpers."""

    def test_xp_for_level(self):
        """Threshold lookup clamps out-of-range levels."""
        assert xp_for_level(1) == 0
        assert xp_for_level(4) == 2700
        assert xp_for_level(20) == 355000
        assert xp_for_level(0) == 0
        assert xp_for_level(21) == 355000

    def test_xp_to_next_level(self):
        """XP still needed, zero at the level cap."""
        assert xp_to_next_level(0) == 300
        assert xp_to_next_level(600) == 300
        assert xp_to_next_level(355000) == 0

    def test_progress(self):
        """Progress is a percentage of the current level band."""
        assert xp_progress(0) == 0
        assert xp_progress(600) == 50
        assert xp_progress(400000) == 100

    def test_would_level_up(self):
        """An award levels up only when it reaches the next threshold."""
        assert would_level_up(250, 50) is True
        assert would_level_up(250, 49) is False

    def test_levels_gained_reports_each_level(self):
        """Every level crossed is listed, not just the last."""
        assert levels_gained(0, 2700) == [2, 3, 4]
        assert levels_gained(300, 10) == []

    @pytest.mark.parametrize(
        ("total", "party_size", "expected"),
        [(1000, 4, 250), (1000, 3, 333), (1000, 0, 0), (-50, 2, 0)],
    )
    def test_split_xp(self, total, party_size, expected):
        """XP is shared evenly, rounded down, never negative."""
        assert split_xp(total, party_size) == expected


class TestMilestoneLeveling:
    """Tests for level-based XP snapping."""

    def test_set_to_level(self):
        """Setting a level snaps XP to its threshold."""
        assert set_to_level(5) == 6500

    def test_set_to_level_clamps(self):
        """Levels outside 1-20 snap to the nearest bound."""
        assert set_to_level(0) == 0
        assert set_to_level(25) == 355000

    def test_level_up(self):
        """Level up moves to the next threshold, stopping at 20."""
        assert level_up(1234) == 2700
        assert level_up(355000) == 355000

    def test_level_down(self):
        """Level down moves to the previous threshold, stopping at 0."""
        assert level_down(2800) == 900
        assert level_down(100) == 0


class TestExperienceTracker:
    """Tests for the XP tracker entity."""

    def test_negative_xp_clamped(self):
        """The tracker never stores negative XP."""
        tracker = ExperienceTracker(-10)
        assert tracker.xp == 0

        tracker.xp = -5
        assert tracker.xp == 0

    def test_add_xp_single_level(self):
        """Crossing one threshold reports one level gained."""
        tracker = ExperienceTracker(250)
        award = tracker.add_xp(100, source="encounter")

        assert award.new_xp == 350
        assert award.levels_gained == [2]
        assert award.leveled_up is True
        assert tracker.level == 2

    def test_add_xp_multiple_levels(self):
        """A large award can cross several thresholds."""
        tracker = ExperienceTracker()
        award = tracker.add_xp(7000)

        assert award.levels_gained == [2, 3, 4, 5]
        assert tracker.level == 5

    def test_add_xp_no_level(self):
        """Small awards do not level up."""
        award = ExperienceTracker(0).add_xp(10)
        assert award.leveled_up is False

    def test_remove_xp_floors_at_zero(self):
        """Removing more XP than held stops at zero."""
        tracker = ExperienceTracker(100)
        award = tracker.add_xp(-500)

        assert tracker.xp == 0
        assert award.levels_gained == []

    def test_set_level(self):
        """Setting a level snaps XP and resets progress."""
        tracker = ExperienceTracker(50)
        tracker.set_level(3)

        assert tracker.xp == 900
        assert tracker.level == 3
        assert tracker.xp_to_next_level == 1800
        assert tracker.progress == 0

    def test_repr(self):
        """The repr shows XP and the derived level."""
        assert repr(ExperienceTracker(900)) == "ExperienceTracker(xp=900, level=3)"
