"""Turn-based combat tracker for feyforge.

An Encounter owns the mutable state of one combat: the ordered combatant
list, the active-turn pointer, the round counter, and each combatant's hit
points, conditions and death saves. It is owned by a single caller; writes
must be serialized by that caller.

Misuse never raises: unknown combatant ids are no-ops returning None, and
turn movement on an empty or idle encounter does nothing.
"""

import random
import uuid
from dataclasses import dataclass, field
from datetime import UTC, datetime
from enum import Enum, StrEnum
from typing import Any

import structlog
from pydantic import BaseModel, Field

from feyforge.config import TempHPPolicy, get_settings

logger = structlog.get_logger(__name__)

DEATH_SAVE_LIMIT = 3


class CombatState(Enum):
    """Combat state machine states."""

    IDLE = "idle"
    STAGED = "staged"
    ACTIVE = "active"


class CombatantKind(StrEnum):
    """Who controls a combatant."""

    PC = "pc"
    NPC = "npc"
    MONSTER = "monster"


class Condition(StrEnum):
    """Conditions trackable on a combatant."""

    BLINDED = "blinded"
    CHARMED = "charmed"
    DEAFENED = "deafened"
    FRIGHTENED = "frightened"
    GRAPPLED = "grappled"
    INCAPACITATED = "incapacitated"
    INVISIBLE = "invisible"
    PARALYZED = "paralyzed"
    PETRIFIED = "petrified"
    POISONED = "poisoned"
    PRONE = "prone"
    RESTRAINED = "restrained"
    STUNNED = "stunned"
    UNCONSCIOUS = "unconscious"
    EXHAUSTION = "exhaustion"
    CONCENTRATING = "concentrating"


@dataclass
class HitPoints:
    """Hit point pool. Invariant: 0 <= current <= max, temp >= 0."""

    current: int
    max: int
    temp: int = 0


@dataclass
class DeathSaves:
    """Death saving throw counters, each capped at 3."""

    successes: int = 0
    failures: int = 0

    @property
    def is_stable(self) -> bool:
        return self.successes >= DEATH_SAVE_LIMIT

    @property
    def is_dead(self) -> bool:
        return self.failures >= DEATH_SAVE_LIMIT


@dataclass
class Combatant:
    """
    A participant in an encounter.

    Stats are copied in when the combatant is created; the encounter never
    re-reads a linked character sheet.

    Attributes:
        name: Display name
        kind: PC, NPC or monster
        initiative: Rolled initiative total
        initiative_bonus: Tie-break when initiative totals are equal
        armor_class: Armor class at the time of joining
        hit_points: Current, max and temporary hit points
        conditions: Active conditions
        death_saves: Death save track, only for PCs
        notes: Free-form notes
        is_active_turn: True for the combatant whose turn it is
        linked_character_id: Character sheet this combatant was created from
        id: Unique combatant identifier
    """

    name: str
    kind: CombatantKind
    hit_points: HitPoints
    initiative: int = 0
    initiative_bonus: int = 0
    armor_class: int = 10
    conditions: set[Condition] = field(default_factory=set)
    death_saves: DeathSaves | None = None
    notes: str = ""
    is_active_turn: bool = False
    linked_character_id: str | None = None
    id: str = field(default_factory=lambda: str(uuid.uuid4()))

    def __post_init__(self) -> None:
        self.kind = CombatantKind(self.kind)
        if self.kind is CombatantKind.PC and self.death_saves is None:
            self.death_saves = DeathSaves()
        elif self.kind is not CombatantKind.PC:
            self.death_saves = None

    @property
    def is_down(self) -> bool:
        """True at 0 hit points."""
        return self.hit_points.current == 0

    @property
    def is_bloodied(self) -> bool:
        """True at or below half of max hit points."""
        return self.hit_points.current * 2 <= self.hit_points.max


class SavedEncounter(BaseModel):
    """Serializable snapshot of an encounter, handed to a persistence layer."""

    id: str = Field(default_factory=lambda: str(uuid.uuid4()))
    name: str
    combatants: list[Combatant]
    round: int = Field(default=1, ge=1)
    created_at: datetime = Field(default_factory=lambda: datetime.now(UTC))


def roll_d20() -> int:
    """Roll a d20."""
    return random.randint(1, 20)


def roll_initiative(initiative_bonus: int) -> int:
    """Roll initiative: d20 + initiative bonus."""
    return roll_d20() + initiative_bonus


# Fields update_combatant may change directly; hit points, conditions and
# death saves go through their own operations so their invariants hold.
UPDATABLE_FIELDS = frozenset(
    {"name", "initiative", "initiative_bonus", "armor_class", "notes", "linked_character_id"}
)


class Encounter:
    """
    Manages a single combat encounter.

    States: IDLE (nothing running) -> STAGED (combatants added) -> ACTIVE
    (turns advancing) -> IDLE (ended or cleared).
    """

    def __init__(self, temp_hp_policy: TempHPPolicy | None = None) -> None:
        """
        Initialize an empty encounter.

        Args:
            temp_hp_policy: "replace" or "keep_higher"; defaults to settings
        """
        self.state = CombatState.IDLE
        self.combatants: list[Combatant] = []
        self.round_number = 1
        self.active_index = 0
        self.temp_hp_policy: TempHPPolicy = temp_hp_policy or get_settings().temp_hp_policy

    @property
    def in_combat(self) -> bool:
        return self.state is CombatState.ACTIVE

    # Combatant management

    def add_combatant(
        self,
        name: str,
        kind: CombatantKind | str,
        max_hp: int,
        *,
        current_hp: int | None = None,
        temp_hp: int = 0,
        initiative: int = 0,
        initiative_bonus: int = 0,
        armor_class: int = 10,
        notes: str = "",
        linked_character_id: str | None = None,
    ) -> Combatant:
        """
        Create a combatant and append it to the encounter.

        Hit points are clamped into their invariants: max >= 0,
        0 <= current <= max (current defaults to max), temp >= 0.

        Returns:
            The new combatant
        """
        max_hp = max(0, max_hp)
        current = max_hp if current_hp is None else min(max(current_hp, 0), max_hp)

        combatant = Combatant(
            name=name,
            kind=CombatantKind(kind),
            hit_points=HitPoints(current=current, max=max_hp, temp=max(0, temp_hp)),
            initiative=initiative,
            initiative_bonus=initiative_bonus,
            armor_class=armor_class,
            notes=notes,
            linked_character_id=linked_character_id,
        )
        return self.add(combatant)

    def add(self, combatant: Combatant) -> Combatant:
        """
        Append an already built combatant (e.g. from a character sheet or template).

        Hit points and death saves are clamped into their invariants. A
        combatant whose id is already in the encounter is not added again.

        Returns:
            The combatant held by the encounter
        """
        existing = self.get_combatant(combatant.id)
        if existing is not None:
            logger.warning(
                "combatant_add_ignored", combatant_id=combatant.id, reason="duplicate_id"
            )
            return existing

        _normalize(combatant)
        combatant.is_active_turn = False
        self.combatants.append(combatant)

        if self.state is CombatState.IDLE:
            self.state = CombatState.STAGED

        logger.info(
            "combatant_added",
            combatant_id=combatant.id,
            combatant_name=combatant.name,
            kind=combatant.kind.value,
            initiative=combatant.initiative,
        )
        return combatant

    def get_combatant(self, combatant_id: str) -> Combatant | None:
        """Get a combatant by id."""
        return next((c for c in self.combatants if c.id == combatant_id), None)

    def _index_of(self, combatant_id: str) -> int | None:
        return next((i for i, c in enumerate(self.combatants) if c.id == combatant_id), None)

    def remove_combatant(self, combatant_id: str) -> Combatant | None:
        """
        Remove a combatant.

        The active pointer stays on the same combatant if it is still
        present; if the active combatant itself is removed, whoever moved
        into its slot becomes active (wrapping to the first combatant).

        Returns:
            The removed combatant, or None if the id is unknown
        """
        index = self._index_of(combatant_id)
        if index is None:
            return None

        removed = self.combatants.pop(index)

        if not self.combatants:
            self.active_index = 0
            self.round_number = 1
            self.state = CombatState.IDLE
        else:
            if index < self.active_index:
                self.active_index -= 1
            elif self.active_index >= len(self.combatants):
                self.active_index = 0
            if self.in_combat:
                self._mark_active()

        logger.info(
            "combatant_removed",
            combatant_id=removed.id,
            combatant_name=removed.name,
            remaining=len(self.combatants),
        )
        return removed

    def update_combatant(self, combatant_id: str, **changes: Any) -> Combatant | None:
        """
        Update plain fields of a combatant.

        Args:
            combatant_id: Combatant to update
            **changes: Any of name, initiative, initiative_bonus, armor_class,
                notes, linked_character_id

        Returns:
            The updated combatant, or None if the id is unknown

        Raises:
            ValueError: If a field outside the updatable set is given
        """
        unknown = set(changes) - UPDATABLE_FIELDS
        if unknown:
            raise ValueError(f"Cannot update combatant fields: {', '.join(sorted(unknown))}")

        combatant = self.get_combatant(combatant_id)
        if combatant is None:
            return None

        for name, value in changes.items():
            setattr(combatant, name, value)

        logger.debug("combatant_updated", combatant_id=combatant_id, fields=sorted(changes))
        return combatant

    # Hit point management

    def adjust_hp(self, combatant_id: str, delta: int) -> Combatant | None:
        """
        Apply damage (negative delta) or healing (positive delta).

        Damage is absorbed by temporary hit points first and the remainder
        comes off current hit points. Healing only restores current hit
        points, never temporary ones. Current is clamped to [0, max].

        Death saves are left untouched when healing lifts a combatant above
        0; resetting them is the caller's call (reset_death_saves).

        Returns:
            The updated combatant, or None if the id is unknown
        """
        combatant = self.get_combatant(combatant_id)
        if combatant is None:
            return None

        hp = combatant.hit_points
        old_current, old_temp = hp.current, hp.temp
        current, temp = hp.current, hp.temp

        if delta < 0:
            damage = -delta
            absorbed = min(temp, damage)
            temp -= absorbed
            current -= damage - absorbed
        else:
            current += delta

        hp.current = min(max(current, 0), hp.max)
        hp.temp = temp

        logger.debug(
            "hp_adjusted",
            combatant_id=combatant_id,
            delta=delta,
            old_current=old_current,
            new_current=hp.current,
            old_temp=old_temp,
            new_temp=hp.temp,
        )

        if hp.current == 0 and old_current > 0:
            logger.info("combatant_down", combatant_id=combatant_id, combatant_name=combatant.name)

        return combatant

    def set_temp_hp(self, combatant_id: str, amount: int) -> Combatant | None:
        """
        Grant temporary hit points.

        Under the default "replace" policy the new amount replaces the pool
        (temporary hit points never stack); "keep_higher" keeps whichever of
        the old and new pools is larger. Negative amounts floor at 0.

        Returns:
            The updated combatant, or None if the id is unknown
        """
        combatant = self.get_combatant(combatant_id)
        if combatant is None:
            return None

        amount = max(0, amount)
        hp = combatant.hit_points
        old_temp = hp.temp

        if self.temp_hp_policy == "keep_higher":
            hp.temp = max(hp.temp, amount)
        else:
            hp.temp = amount

        logger.debug(
            "temp_hp_set",
            combatant_id=combatant_id,
            policy=self.temp_hp_policy,
            old_temp=old_temp,
            new_temp=hp.temp,
        )
        return combatant

    def set_max_hp(self, combatant_id: str, max_hp: int) -> Combatant | None:
        """Change max hit points, re-clamping current hit points."""
        combatant = self.get_combatant(combatant_id)
        if combatant is None:
            return None

        hp = combatant.hit_points
        hp.max = max(0, max_hp)
        hp.current = min(hp.current, hp.max)
        return combatant

    # Condition management

    def add_condition(self, combatant_id: str, condition: Condition | str) -> Combatant | None:
        """Add a condition (idempotent). Unknown condition names are ignored."""
        combatant = self.get_combatant(combatant_id)
        parsed = self._parse_condition(condition)
        if combatant is None or parsed is None:
            return combatant

        combatant.conditions.add(parsed)
        logger.debug("condition_added", combatant_id=combatant_id, condition=parsed.value)
        return combatant

    def remove_condition(self, combatant_id: str, condition: Condition | str) -> Combatant | None:
        """Remove a condition (idempotent)."""
        combatant = self.get_combatant(combatant_id)
        parsed = self._parse_condition(condition)
        if combatant is None or parsed is None:
            return combatant

        combatant.conditions.discard(parsed)
        logger.debug("condition_removed", combatant_id=combatant_id, condition=parsed.value)
        return combatant

    @staticmethod
    def _parse_condition(condition: Condition | str) -> Condition | None:
        try:
            return Condition(condition)
        except ValueError:
            logger.warning("unknown_condition_ignored", condition=str(condition))
            return None

    # Death saves

    def add_death_save(self, combatant_id: str, success: bool) -> Combatant | None:
        """
        Record a death saving throw.

        Increments successes or failures up to 3; further saves of that
        kind are ignored. No-op for combatants without a death save track.
        """
        combatant = self.get_combatant(combatant_id)
        if combatant is None or combatant.death_saves is None:
            return combatant

        saves = combatant.death_saves
        if success:
            saves.successes = min(DEATH_SAVE_LIMIT, saves.successes + 1)
        else:
            saves.failures = min(DEATH_SAVE_LIMIT, saves.failures + 1)

        logger.info(
            "death_save_recorded",
            combatant_id=combatant_id,
            success=success,
            successes=saves.successes,
            failures=saves.failures,
        )
        return combatant

    def reset_death_saves(self, combatant_id: str) -> Combatant | None:
        """Zero both death save counters (on stabilizing or healing from 0)."""
        combatant = self.get_combatant(combatant_id)
        if combatant is None or combatant.death_saves is None:
            return combatant

        combatant.death_saves.successes = 0
        combatant.death_saves.failures = 0
        return combatant

    # Initiative and turns

    def sort_by_initiative(self) -> None:
        """Order combatants by initiative, then initiative bonus, highest first."""
        active = self.active_combatant if self.in_combat else None
        self.combatants.sort(key=lambda c: (c.initiative, c.initiative_bonus), reverse=True)
        if active is not None:
            self.active_index = self.combatants.index(active)

    def start_combat(self) -> None:
        """Start combat: sort by initiative, round 1, first combatant active."""
        if not self.combatants:
            logger.warning("combat_start_ignored", reason="no_combatants")
            return

        self.combatants.sort(key=lambda c: (c.initiative, c.initiative_bonus), reverse=True)
        self.state = CombatState.ACTIVE
        self.round_number = 1
        self.active_index = 0
        self._mark_active()

        logger.info(
            "combat_started",
            combatant_count=len(self.combatants),
            turn_order=[c.name for c in self.combatants],
        )

    @property
    def active_combatant(self) -> Combatant | None:
        """
        Get the combatant whose turn it currently is.

        Returns:
            Current combatant or None if combat not in progress
        """
        if not self.in_combat or not self.combatants:
            return None
        return self.combatants[self.active_index]

    def _mark_active(self) -> None:
        for i, combatant in enumerate(self.combatants):
            combatant.is_active_turn = i == self.active_index

    def next_turn(self) -> Combatant | None:
        """
        Advance to the next turn.

        Landing back on the first combatant starts a new round.

        Returns:
            The newly active combatant, or None if combat is not active
        """
        if not self.in_combat or not self.combatants:
            return None

        self.active_index = (self.active_index + 1) % len(self.combatants)
        if self.active_index == 0:
            self.round_number += 1
            logger.info("combat_new_round", round_number=self.round_number)

        self._mark_active()
        return self.active_combatant

    def previous_turn(self) -> Combatant | None:
        """
        Go back one turn.

        Stepping back from the first combatant to the last returns to the
        previous round (never below round 1).
        """
        if not self.in_combat or not self.combatants:
            return None

        if self.active_index == 0:
            self.active_index = len(self.combatants) - 1
            self.round_number = max(1, self.round_number - 1)
        else:
            self.active_index -= 1

        self._mark_active()
        return self.active_combatant

    def set_active_combatant(self, index: int) -> Combatant | None:
        """Jump to a combatant's turn; out-of-range indexes are ignored."""
        if not self.in_combat or not 0 <= index < len(self.combatants):
            return None

        self.active_index = index
        self._mark_active()
        return self.active_combatant

    # Round management

    def increment_round(self) -> None:
        self.round_number += 1

    def decrement_round(self) -> None:
        self.round_number = max(1, self.round_number - 1)

    def reset_round(self) -> None:
        self.round_number = 1

    # Combat state

    def end_combat(self) -> None:
        """End combat but keep the combatant list (a paused encounter)."""
        if self.state is not CombatState.ACTIVE:
            logger.warning("combat_end_ignored", state=self.state.value)
            return

        for combatant in self.combatants:
            combatant.is_active_turn = False
        self.state = CombatState.IDLE

        logger.info("combat_ended", round_number=self.round_number)

    def clear_combat(self) -> None:
        """Discard the encounter: no combatants, round 1, idle."""
        self.combatants = []
        self.round_number = 1
        self.active_index = 0
        self.state = CombatState.IDLE

        logger.info("combat_cleared")

    # Snapshots

    def snapshot(self, name: str) -> SavedEncounter:
        """Build a serializable snapshot of the combatants and round."""
        return SavedEncounter(
            name=name,
            combatants=[_copy_combatant(c) for c in self.combatants],
            round=self.round_number,
        )

    def load_snapshot(self, saved: SavedEncounter) -> None:
        """
        Replace the encounter with a saved one.

        The loaded encounter is staged, not running: index 0, no active turn.
        """
        self.combatants = [_copy_combatant(c) for c in saved.combatants]
        for combatant in self.combatants:
            _normalize(combatant)
            combatant.is_active_turn = False
        self.round_number = saved.round
        self.active_index = 0
        self.state = CombatState.STAGED if self.combatants else CombatState.IDLE

        logger.info(
            "encounter_loaded",
            encounter_id=saved.id,
            encounter_name=saved.name,
            combatant_count=len(self.combatants),
        )

    def get_combat_status(self) -> str:
        """
        Get a plain-text status of the combat.

        Returns:
            One line per combatant, the active one marked with >>>
        """
        if not self.combatants:
            return "No combatants."

        lines = [f"=== Round {self.round_number} ({self.state.value}) ==="]
        for combatant in self.combatants:
            marker = ">>> " if combatant.is_active_turn else "    "
            hp = combatant.hit_points
            temp = f" +{hp.temp} temp" if hp.temp else ""
            conditions = (
                f" [{', '.join(sorted(c.value for c in combatant.conditions))}]"
                if combatant.conditions
                else ""
            )
            lines.append(
                f"{marker}{combatant.name} (Init {combatant.initiative}, AC {combatant.armor_class}, "
                f"HP {hp.current}/{hp.max}{temp}){conditions}"
            )

        return "\n".join(lines)


def _normalize(combatant: Combatant) -> None:
    """Clamp hit points and death saves into their invariants in place."""
    hp = combatant.hit_points
    hp.max = max(0, hp.max)
    hp.current = min(max(hp.current, 0), hp.max)
    hp.temp = max(0, hp.temp)

    saves = combatant.death_saves
    if saves is not None:
        saves.successes = min(max(saves.successes, 0), DEATH_SAVE_LIMIT)
        saves.failures = min(max(saves.failures, 0), DEATH_SAVE_LIMIT)


def _copy_combatant(combatant: Combatant) -> Combatant:
    return Combatant(
        name=combatant.name,
        kind=combatant.kind,
        hit_points=HitPoints(
            current=combatant.hit_points.current,
            max=combatant.hit_points.max,
            temp=combatant.hit_points.temp,
        ),
        initiative=combatant.initiative,
        initiative_bonus=combatant.initiative_bonus,
        armor_class=combatant.armor_class,
        conditions=set(combatant.conditions),
        death_saves=(
            DeathSaves(combatant.death_saves.successes, combatant.death_saves.failures)
            if combatant.death_saves is not None
            else None
        ),
        notes=combatant.notes,
        is_active_turn=combatant.is_active_turn,
        linked_character_id=combatant.linked_character_id,
        id=combatant.id,
    )
