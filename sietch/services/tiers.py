import re

_TIER_PATTERN = re.compile(r"T(\d+)")


def tier_rank(label: str | None) -> int:
    """Extract the comparable rank from a tier label ("T3 - Tier 3" -> 3).

    Labels without a ``T<digits>`` token rank 0, the lowest possible value.
    """
    if not label:
        return 0
    match = _TIER_PATTERN.search(label)
    return int(match.group(1)) if match else 0


def has_tier(label: str | None) -> bool:
    return bool(label and label.strip())
