"""Eligibility of a player profile for a group advertisement.

Pure functions only: no database access, no side effects. Every filter that is
unset passes, so an empty filter set admits every profile.

Two comparison styles are used on purpose and must not be mixed up:

* level and equipment tiers use "meets or exceeds" (candidate >= minimum);
* interests and tools use "any overlap" (at least one listed value matches).
"""

from collections.abc import Callable, Iterable
from typing import Any

from sietch.models.player import ToolCategory
from sietch.services.tiers import has_tier, tier_rank

# Profile attribute holding the tier of each tool category
TOOL_TIER_FIELDS = {
    ToolCategory.mining.value: "mining_tool_tier",
    ToolCategory.spice.value: "spice_tool_tier",
}

# (filter attribute, profile attribute) for "meets or exceeds" tier checks
EQUIPMENT_TIER_FIELDS = (
    ("min_weapon_tier", "weapon_tier"),
    ("min_armor_tier", "armor_tier"),
    ("min_vehicle_tier", "vehicle_tier"),
)


def _to_int(value: Any) -> int | None:
    if isinstance(value, bool):
        return None
    if isinstance(value, int):
        return value
    try:
        return int(str(value).strip())
    except (TypeError, ValueError):
        return None


def _values(items: Iterable[Any] | None) -> set[str]:
    # Enum members and raw strings compare by their value
    return {getattr(item, "value", item) for item in items or ()}


def _is_unset(value: Any) -> bool:
    return value is None or value == ""


def level_ok(filters: Any, candidate: Any) -> bool:
    min_level = getattr(filters, "min_level", None)
    if _is_unset(min_level):
        return True
    required = _to_int(min_level)
    level = _to_int(getattr(candidate, "level", None))
    if required is None or level is None:
        return False
    return level >= required


def interests_ok(filters: Any, candidate: Any) -> bool:
    wanted = _values(getattr(filters, "interests", None))
    if not wanted:
        return True
    return bool(wanted & _values(getattr(candidate, "interests", None)))


def _tier_check(filter_field: str, profile_field: str) -> Callable[[Any, Any], bool]:
    def check(filters: Any, candidate: Any) -> bool:
        minimum = getattr(filters, filter_field, None)
        if _is_unset(minimum):
            return True
        return tier_rank(getattr(candidate, profile_field, None)) >= tier_rank(minimum)

    check.__name__ = f"{profile_field}_ok"
    return check


weapon_tier_ok = _tier_check("min_weapon_tier", "weapon_tier")
armor_tier_ok = _tier_check("min_armor_tier", "armor_tier")
vehicle_tier_ok = _tier_check("min_vehicle_tier", "vehicle_tier")


def base_ok(filters: Any, candidate: Any) -> bool:
    if not getattr(filters, "requires_base", False):
        return True
    if not getattr(candidate, "has_base", False):
        return False
    sector = getattr(filters, "specific_sector", None)
    if _is_unset(sector):
        return True
    return getattr(candidate, "base_sector", None) == sector


def owned_tools(candidate: Any) -> set[str]:
    return {
        tool
        for tool, field in TOOL_TIER_FIELDS.items()
        if has_tier(getattr(candidate, field, None))
    }


def tools_ok(filters: Any, candidate: Any) -> bool:
    required = _values(getattr(filters, "required_tools", None))
    if not required:
        return True
    return bool(required & owned_tools(candidate))


CHECKS: dict[str, Callable[[Any, Any], bool]] = {
    "level": level_ok,
    "interests": interests_ok,
    "weapon_tier": weapon_tier_ok,
    "armor_tier": armor_tier_ok,
    "vehicle_tier": vehicle_tier_ok,
    "base": base_ok,
    "tools": tools_ok,
}


def is_eligible(filters: Any, candidate: Any) -> bool:
    """Return True if *candidate* satisfies every filter in *filters*."""
    return all(check(filters, candidate) for check in CHECKS.values())


def explain_ineligibility(filters: Any, candidate: Any) -> list[str]:
    """Names of the checks *candidate* fails, in evaluation order."""
    return [name for name, check in CHECKS.items() if not check(filters, candidate)]


def eligible_players(filters: Any, candidates: Iterable[Any]) -> list[Any]:
    """Filter *candidates* down to those eligible for *filters*, keeping order."""
    return [candidate for candidate in candidates if is_eligible(filters, candidate)]
