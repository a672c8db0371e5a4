"""Plain-text export of army lists."""

from app.schemas.army import SelectedUnit

UNKNOWN_FACTION_NAME = "Unknown Faction"
UNTITLED_LIST_NAME = "Untitled List"

# Keywords hidden from a courtesy list shown to the opponent
HIDDEN_KEYWORDS = frozenset({"scout", "ambusher"})

FACTIONS: dict[str, str] = {
    "northern-tribes": "Northern Tribes",
    "hegemony-of-embersig": "Hegemony of Embersig",
    "scions-of-yaldabaoth": "Scions of Yaldabaoth",
    "syenann": "Sÿenann",
}

# Alternate spellings and short names -> faction ID
_FACTION_ALIASES: dict[str, str] = {
    "hegemony of embersig": "hegemony-of-embersig",
    "hegemony": "hegemony-of-embersig",
    "northern tribes": "northern-tribes",
    "tribes": "northern-tribes",
    "scions of yaldabaoth": "scions-of-yaldabaoth",
    "scions": "scions-of-yaldabaoth",
    "sÿenann": "syenann",
}


def normalize_faction_id(faction: str) -> str:
    """Map a faction name or alias to its ID; unknown values pass through."""
    if faction in FACTIONS:
        return faction
    return _FACTION_ALIASES.get(faction.strip().lower(), faction)


def get_faction_name(faction_id: str) -> str:
    return FACTIONS.get(normalize_faction_id(faction_id), UNKNOWN_FACTION_NAME)


def total_points(units: list[SelectedUnit]) -> int:
    return sum(unit.points_cost * unit.quantity for unit in units)


def total_command(units: list[SelectedUnit]) -> int:
    return sum((unit.command or 0) * unit.quantity for unit in units)


def _format_unit(unit: SelectedUnit) -> str:
    high_command = " [High Command]" if unit.high_command else ""
    command = f" ({unit.command} CP)" if unit.command else ""
    return (
        f"{unit.name}{high_command}{command} x{unit.quantity} "
        f"({unit.points_cost * unit.quantity} pts)"
    )


def generate_list_text(units: list[SelectedUnit], list_name: str | None, faction: str) -> str:
    """Render a list as text for the clipboard or printing.

    High Command units come first; the rest keep their order.
    """
    ordered = sorted(units, key=lambda unit: not unit.high_command)
    lines = "\n".join(_format_unit(unit) for unit in ordered)
    header = f"{list_name or UNTITLED_LIST_NAME}\nFaction: {get_faction_name(faction)}"
    return (
        f"{header}\n\n{lines}\n\n"
        f"Total Command Points: {total_command(units)}\n"
        f"Total Points: {total_points(units)}"
    )


def filter_units_for_courtesy(units: list[SelectedUnit]) -> list[SelectedUnit]:
    """Drop units the opponent should not see before deployment."""
    return [
        unit
        for unit in units
        if not any(keyword.lower() in HIDDEN_KEYWORDS for keyword in unit.keywords)
    ]
