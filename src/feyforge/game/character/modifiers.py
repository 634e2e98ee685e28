"""Modifier resolution for derived character numbers.

A modifier is a named, sourced adjustment acting on one target value (armor
class, a saving throw, an ability score...). Resolution follows 5e stacking
rules: kinds apply in a fixed precedence, and bonuses of the same kind from
the same source do not stack.
"""

import math
import uuid
from collections.abc import Iterable
from dataclasses import dataclass, field
from enum import StrEnum
from typing import assert_never


class ModifierKind(StrEnum):
    """How a modifier acts on its target."""

    SET = "set"
    ADD = "add"
    MULTIPLY = "multiply"
    MIN = "min"
    MAX = "max"
    ADVANTAGE = "advantage"
    DISADVANTAGE = "disadvantage"


# Application order; advantage/disadvantage share the last slot
KIND_PRECEDENCE: dict[ModifierKind, int] = {
    ModifierKind.SET: 0,
    ModifierKind.ADD: 1,
    ModifierKind.MULTIPLY: 2,
    ModifierKind.MIN: 3,
    ModifierKind.MAX: 4,
    ModifierKind.ADVANTAGE: 5,
    ModifierKind.DISADVANTAGE: 5,
}


@dataclass(frozen=True)
class Modifier:
    """One effect acting on one target.

    Attributes:
        source: Name of the feature, item or condition that granted it
        target: Name of the value it acts on (e.g. "armor_class", "save.dexterity")
        kind: How it acts on the target
        value: Operand; ignored by advantage/disadvantage
        priority: Tie-break within the same kind, ascending
        active: Inactive modifiers are ignored everywhere
        id: Unique identifier
    """

    source: str
    target: str
    kind: ModifierKind
    value: float = 0
    priority: int = 0
    active: bool = True
    id: str = field(default_factory=lambda: str(uuid.uuid4()))


def create_modifier(
    source: str,
    target: str,
    kind: ModifierKind | str,
    value: float = 0,
    *,
    priority: int = 0,
    active: bool = True,
) -> Modifier:
    """Create a new active modifier with a fresh id."""
    return Modifier(
        source=source,
        target=target,
        kind=ModifierKind(kind),
        value=value,
        priority=priority,
        active=active,
    )


def _sort_key(modifier: Modifier) -> tuple[int, int, float, str, str, str]:
    # Content fields after precedence/priority make the order total, so any
    # permutation of the same list folds identically.
    return (
        KIND_PRECEDENCE[modifier.kind],
        modifier.priority,
        modifier.value,
        modifier.source,
        modifier.target,
        modifier.id,
    )


def _collapse_same_source(modifiers: Iterable[Modifier]) -> list[Modifier]:
    """Keep only the largest ADD per (source, target); every other kind is kept."""
    best_adds: dict[tuple[str, str], Modifier] = {}
    result: list[Modifier] = []

    for mod in modifiers:
        if mod.kind is not ModifierKind.ADD:
            result.append(mod)
            continue

        key = (mod.source, mod.target)
        current = best_adds.get(key)
        if current is None or (mod.value, _sort_key(mod)) > (current.value, _sort_key(current)):
            best_adds[key] = mod

    result.extend(best_adds.values())
    return result


def combine_modifiers(*modifier_lists: Iterable[Modifier]) -> list[Modifier]:
    """
    Merge modifier lists from independent feature sources.

    Same-source bonuses of the same kind do not stack: when several ADD
    modifiers share a (source, target) pair only the greatest survives, as
    they represent the same named effect applied more than once.

    Args:
        *modifier_lists: Modifier lists (race, class, items, conditions...)

    Returns:
        A single list ready for apply_modifiers
    """
    merged = [mod for mods in modifier_lists for mod in mods]
    return _collapse_same_source(merged)


def apply_modifiers(base: float, modifiers: Iterable[Modifier]) -> int:
    """
    Apply modifiers to a base value.

    Steps:
    1. Drop inactive modifiers
    2. Collapse same-source ADD modifiers (see combine_modifiers)
    3. Sort by kind precedence set < add < multiply < min < max < adv/disadv,
       then by priority
    4. Fold from the base value
    5. Floor the result

    When more than one SET is present, the first replaces the running value
    and every later SET takes the larger of the running value and its own.
    Conflicting forced values therefore resolve to the highest one rather
    than to whichever happened to be applied last.

    Args:
        base: Starting value
        modifiers: Modifiers acting on this value

    Returns:
        The resolved integer value

    Examples:
        >>> apply_modifiers(10, [create_modifier("armor", "armor_class", "add", 4)])
        14
    """
    active = [mod for mod in modifiers if mod.active]
    if not active:
        return math.floor(base)

    ordered = sorted(_collapse_same_source(active), key=_sort_key)

    result: float = base
    set_applied = False

    for mod in ordered:
        match mod.kind:
            case ModifierKind.SET:
                if not set_applied:
                    result = mod.value
                    set_applied = True
                else:
                    result = max(result, mod.value)
            case ModifierKind.ADD:
                result += mod.value
            case ModifierKind.MULTIPLY:
                result *= mod.value
            case ModifierKind.MIN:
                result = max(result, mod.value)
            case ModifierKind.MAX:
                result = min(result, mod.value)
            case ModifierKind.ADVANTAGE | ModifierKind.DISADVANTAGE:
                pass
            case _:
                assert_never(mod.kind)

    return math.floor(result)


def _roll_mode(modifiers: Iterable[Modifier]) -> tuple[bool, bool]:
    active = [mod for mod in modifiers if mod.active]
    has_adv = any(mod.kind is ModifierKind.ADVANTAGE for mod in active)
    has_disadv = any(mod.kind is ModifierKind.DISADVANTAGE for mod in active)

    # Advantage and disadvantage cancel out
    if has_adv and has_disadv:
        return False, False
    return has_adv, has_disadv


def has_advantage(modifiers: Iterable[Modifier]) -> bool:
    """Check if a roll has advantage (cancelled by any disadvantage)."""
    return _roll_mode(modifiers)[0]


def has_disadvantage(modifiers: Iterable[Modifier]) -> bool:
    """Check if a roll has disadvantage (cancelled by any advantage)."""
    return _roll_mode(modifiers)[1]


def filter_modifiers_by_target(modifiers: Iterable[Modifier], target: str) -> list[Modifier]:
    """Get the modifiers acting on one target."""
    return [mod for mod in modifiers if mod.target == target]


def get_modifier_sources(modifiers: Iterable[Modifier], target: str) -> list[str]:
    """Get the unique active sources acting on a target, in first-seen order."""
    sources: dict[str, None] = {}
    for mod in modifiers:
        if mod.active and mod.target == target:
            sources.setdefault(mod.source, None)
    return list(sources)


def get_total_add_bonus(modifiers: Iterable[Modifier]) -> float:
    """Sum every active ADD modifier."""
    return sum(mod.value for mod in modifiers if mod.active and mod.kind is ModifierKind.ADD)


def _format_number(value: float) -> str:
    return str(int(value)) if float(value).is_integer() else str(value)


def describe_modifiers(modifiers: Iterable[Modifier]) -> list[str]:
    """
    Describe active modifiers for display.

    Returns:
        Lines such as "+2 (Ring of Protection)" or "Advantage (Bless)"
    """
    lines = []
    for mod in modifiers:
        if not mod.active:
            continue

        number = _format_number(mod.value)
        match mod.kind:
            case ModifierKind.ADD:
                sign = "+" if mod.value >= 0 else ""
                lines.append(f"{sign}{number} ({mod.source})")
            case ModifierKind.MULTIPLY:
                lines.append(f"x{number} ({mod.source})")
            case ModifierKind.SET:
                lines.append(f"= {number} ({mod.source})")
            case ModifierKind.MIN:
                lines.append(f"min {number} ({mod.source})")
            case ModifierKind.MAX:
                lines.append(f"max {number} ({mod.source})")
            case ModifierKind.ADVANTAGE:
                lines.append(f"Advantage ({mod.source})")
            case ModifierKind.DISADVANTAGE:
                lines.append(f"Disadvantage ({mod.source})")
            case _:
                assert_never(mod.kind)

    return lines
