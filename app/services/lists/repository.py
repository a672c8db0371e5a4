"""Saved army lists stored in the army_lists table."""

import logging
from typing import Any, cast

from supabase import Client

from app.schemas.army import SavedList, SelectedUnit

from .codec import is_temporary_list, unit_from_payload

logger = logging.getLogger(__name__)

TABLE = "army_lists"


def unit_to_row(unit: SelectedUnit) -> dict[str, Any]:
    """Serialise a unit the way list rows store it (camelCase keys)."""
    row: dict[str, Any] = {
        "id": unit.id,
        "name": unit.name,
        "pointsCost": unit.points_cost,
        "quantity": unit.quantity,
        "faction": unit.faction,
        "keywords": list(unit.keywords),
        "highCommand": unit.high_command,
        "availability": unit.availability,
    }
    if unit.command is not None:
        row["command"] = unit.command
    if unit.special_rules is not None:
        row["specialRules"] = list(unit.special_rules)
    if unit.image_url is not None:
        row["imageUrl"] = unit.image_url
    return row


def list_from_row(row: dict[str, Any]) -> SavedList:
    return SavedList(
        id=row["id"],
        name=row["name"],
        faction=row["faction"],
        units=[unit_from_payload(unit, row["faction"]) for unit in row.get("units") or []],
        created_at=row.get("created_at") or "",
        user_id=row.get("user_id"),
        wab_id=row.get("wab_id"),
    )


class ListRepository:
    """CRUD for saved lists over the Supabase client."""

    def __init__(self, supabase_client: Client):
        self._supabase = supabase_client

    def list_for_user(self, user_id: str) -> list[SavedList]:
        response = self._supabase.table(TABLE).select("*").eq("user_id", user_id).execute()
        rows = cast(list[dict[str, Any]], response.data or [])
        logger.debug("Found %d lists for user %s", len(rows), user_id)
        return [list_from_row(row) for row in rows]

    def list_for_wab_id(self, wab_id: str) -> list[SavedList]:
        response = self._supabase.table(TABLE).select("*").eq("wab_id", wab_id).execute()
        rows = cast(list[dict[str, Any]], response.data or [])
        logger.debug("Found %d lists for WAB ID %s", len(rows), wab_id)
        return [list_from_row(row) for row in rows]

    def save(self, saved_list: SavedList, user_id: str) -> SavedList | None:
        """Insert or update a list owned by user_id.

        Temporary ids from shared links are not sent, so the database
        assigns a new one.
        """
        row: dict[str, Any] = {
            "name": saved_list.name,
            "faction": saved_list.faction,
            "units": [unit_to_row(unit) for unit in saved_list.units],
            "user_id": user_id,
            "wab_id": saved_list.wab_id,
        }
        if saved_list.id and not is_temporary_list(saved_list):
            row["id"] = saved_list.id

        response = self._supabase.table(TABLE).upsert(row).execute()
        if not response.data:
            logger.warning("Saving list %r returned no rows for user %s", saved_list.name, user_id)
            return None

        saved = list_from_row(cast(dict[str, Any], response.data[0]))
        logger.info("List %s saved for user %s", saved.id, user_id)
        return saved

    def delete(self, list_id: str, user_id: str) -> bool:
        response = (
            self._supabase.table(TABLE).delete().eq("id", list_id).eq("user_id", user_id).execute()
        )
        deleted = bool(response.data)
        logger.info("List %s deleted for user %s: %s", list_id, user_id, deleted)
        return deleted
