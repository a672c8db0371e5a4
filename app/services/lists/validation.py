"""Army building rules checked before a unit is added to a list."""

import logging
from dataclasses import dataclass

from app.schemas.army import SelectedUnit, UnitDefinition

logger = logging.getLogger(__name__)


@dataclass
class ValidationResult:
    """Result of validating a unit addition."""

    is_valid: bool = True
    error_code: str | None = None
    error_message: str | None = None

    @classmethod
    def ok(cls) -> "ValidationResult":
        return cls(is_valid=True)

    @classmethod
    def error(cls, code: str, message: str) -> "ValidationResult":
        return cls(is_valid=False, error_code=code, error_message=message)


def validate_high_command_addition(units: list[SelectedUnit], new_unit: UnitDefinition) -> bool:
    """Only one High Command unit is allowed per list."""
    if not new_unit.high_command:
        return True
    return not any(unit.high_command for unit in units)


def validate_faction_restriction(army_faction: str, unit_faction: str) -> bool:
    return army_faction == unit_faction


def validate_unit_availability(units: list[SelectedUnit], unit_to_add: UnitDefinition) -> bool:
    """A unit can be taken up to its availability."""
    existing = next((unit for unit in units if unit.id == unit_to_add.id), None)
    if existing is None:
        return True
    return existing.quantity < unit_to_add.availability


def validate_unit_addition(
    units: list[SelectedUnit],
    unit_to_add: UnitDefinition,
    army_faction: str,
) -> ValidationResult:
    """Check High Command, faction and availability rules, in that order."""
    if not validate_high_command_addition(units, unit_to_add):
        return ValidationResult.error(
            "HIGH_COMMAND_LIMIT", "Only one High Command unit is allowed per list"
        )

    if not validate_faction_restriction(army_faction, unit_to_add.faction):
        return ValidationResult.error(
            "WRONG_FACTION", f"'{unit_to_add.name}' does not belong to this faction"
        )

    if not validate_unit_availability(units, unit_to_add):
        return ValidationResult.error(
            "AVAILABILITY_EXCEEDED",
            f"'{unit_to_add.name}' is limited to {unit_to_add.availability} per list",
        )

    return ValidationResult.ok()


def add_unit_to_list(units: list[SelectedUnit], unit: UnitDefinition) -> list[SelectedUnit]:
    """Return a new unit list with one more copy of `unit`.

    Does not validate; call validate_unit_addition() first.
    """
    for index, existing in enumerate(units):
        if existing.id == unit.id:
            updated = list(units)
            updated[index] = existing.model_copy(update={"quantity": existing.quantity + 1})
            return updated

    logger.debug("Adding new unit to list: %s", unit.id)
    return [
        *units,
        SelectedUnit(
            id=unit.id,
            name=unit.name,
            points_cost=unit.points_cost,
            quantity=1,
            faction=unit.faction,
            keywords=list(unit.keywords),
            high_command=unit.high_command,
            availability=unit.availability,
            image_url=unit.image_url,
            special_rules=unit.special_rules,
            command=unit.command,
        ),
    ]
