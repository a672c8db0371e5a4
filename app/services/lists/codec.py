"""List sharing codec - packs an army list into a URL-safe token.

encode_list():
    SavedList -> minimal projection -> compact JSON -> zlib (level 9)
    -> Base64 with '+' -> '-', '/' -> '_' and no '=' padding

decode_list() reverses it and fills in defaults for fields the projection
drops. The token alphabet is A-Z a-z 0-9 - _ and must stay that way so
links created elsewhere keep loading.
"""

import base64
import binascii
import json
import logging
import zlib
from datetime import datetime, timezone
from typing import Any

from pydantic import ValidationError

from app.schemas.army import SavedList, SelectedUnit

logger = logging.getLogger(__name__)

TEMP_LIST_PREFIX = "temp-"
SHARED_LIST_PATH = "shared-list"

# Deflate settings: maximum compression, zlib wrapper, 32K window
_COMPRESSION_LEVEL = 9
_WINDOW_BITS = 15
_MEM_LEVEL = 9


class ListCodecError(ValueError):
    """A share token could not be turned back into text."""


def compress(data: str) -> str:
    """Deflate a string and encode it with the URL-safe Base64 alphabet, unpadded."""
    compressor = zlib.compressobj(_COMPRESSION_LEVEL, zlib.DEFLATED, _WINDOW_BITS, _MEM_LEVEL)
    compressed = compressor.compress(data.encode("utf-8")) + compressor.flush()
    return base64.urlsafe_b64encode(compressed).decode("ascii").rstrip("=")


def decompress(token: str) -> str:
    """Inverse of compress().

    Raises:
        ListCodecError: If the token is not ASCII Base64, not a complete
            deflate stream, has trailing data, or is not UTF-8.
    """
    standard = token.replace("-", "+").replace("_", "/")
    standard += "=" * (-len(standard) % 4)

    try:
        raw = base64.b64decode(standard.encode("ascii"), validate=True)
        decompressor = zlib.decompressobj(_WINDOW_BITS)
        inflated = decompressor.decompress(raw) + decompressor.flush()
        if not decompressor.eof or decompressor.unused_data:
            raise ListCodecError("Incomplete stream or trailing data")
        return inflated.decode("utf-8")
    except (binascii.Error, zlib.error, UnicodeError) as e:
        raise ListCodecError(f"Failed to decompress data: {e}") from e


def project_list(saved_list: SavedList) -> dict[str, Any]:
    """Reduce a list to the fields needed to rebuild it.

    Keys use the camelCase names of the share format. Images, descriptions,
    availability and server-side ids are dropped to keep links short.
    """
    return {
        "name": saved_list.name,
        "faction": saved_list.faction,
        "units": [
            {
                "id": unit.id,
                "name": unit.name,
                "pointsCost": unit.points_cost,
                "command": unit.command or 0,
                "highCommand": unit.high_command or False,
                "quantity": unit.quantity or 1,
                "keywords": list(unit.keywords or []),
            }
            for unit in saved_list.units
        ],
        "created_at": saved_list.created_at,
    }


def encode_list(saved_list: SavedList) -> str:
    # Compact separators and raw non-ASCII match the JSON produced by browsers
    payload = json.dumps(project_list(saved_list), separators=(",", ":"), ensure_ascii=False)
    return compress(payload)


def unit_from_payload(unit: dict[str, Any], list_faction: str) -> SelectedUnit:
    """Build a unit from its camelCase wire form, defaulting missing fields."""
    quantity = unit.get("quantity") or 1
    return SelectedUnit(
        id=unit["id"],
        name=unit["name"],
        points_cost=unit.get("pointsCost") or 0,
        quantity=quantity,
        faction=unit.get("faction") or list_faction,
        keywords=unit.get("keywords") or [],
        high_command=bool(unit.get("highCommand")),
        availability=unit.get("availability") or quantity,
        image_url=unit.get("imageUrl"),
        special_rules=unit.get("specialRules"),
        command=unit.get("command") or 0,
    )


def decode_list(token: str, now: datetime | None = None) -> SavedList | None:
    """Rebuild a list from a share token.

    The result gets a temporary id ("temp-<epoch ms>") so callers can tell
    it apart from a stored list.

    Args:
        token: Token produced by encode_list().
        now: Clock override for the temporary id and a missing created_at.

    Returns:
        The decoded SavedList, or None if the token is empty or cannot be
        decoded. Failures are logged, never raised.
    """
    if not token or not token.strip():
        logger.warning("Empty share token provided")
        return None

    now = now or datetime.now(timezone.utc)
    try:
        data = json.loads(decompress(token))
        faction = data["faction"]
        return SavedList(
            id=f"{TEMP_LIST_PREFIX}{int(now.timestamp() * 1000)}",
            name=data["name"],
            faction=faction,
            units=[unit_from_payload(unit, faction) for unit in data["units"]],
            created_at=data.get("created_at") or now.isoformat(),
        )
    except (ValueError, TypeError, KeyError, AttributeError, ValidationError) as e:
        # json.JSONDecodeError and ListCodecError are ValueErrors
        logger.warning("Failed to decode shared list (%d chars): %s", len(token), e)
        return None


def is_temporary_list(saved_list: SavedList) -> bool:
    return saved_list.id.startswith(TEMP_LIST_PREFIX)


def generate_shareable_link(saved_list: SavedList, base_url: str) -> str:
    return f"{base_url.rstrip('/')}/{SHARED_LIST_PATH}/{encode_list(saved_list)}"
