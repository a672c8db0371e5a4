"""Session codes players use to find a shared session."""

import re
import secrets

# No 0/O or 1/I to avoid misreading
JOIN_CODE_ALPHABET = "ABCDEFGHJKLMNPQRSTUVWXYZ23456789"
JOIN_CODE_LENGTH = 6

_JOIN_CODE_PATTERN = re.compile(r"^[A-Z0-9]{6}$")


def generate_join_code() -> str:
    return "".join(secrets.choice(JOIN_CODE_ALPHABET) for _ in range(JOIN_CODE_LENGTH))


def normalize_join_code(code: str) -> str:
    """Strip whitespace and uppercase."""
    return re.sub(r"\s", "", code or "").upper()


def format_join_code(code: str) -> str:
    """Insert a space at the midpoint for readability, e.g. 'ABC DEF'."""
    clean = normalize_join_code(code)
    if len(clean) <= 3:
        return clean
    midpoint = len(clean) // 2
    return f"{clean[:midpoint]} {clean[midpoint:]}"


def validate_join_code(code: str) -> bool:
    if not code:
        return False
    return bool(_JOIN_CODE_PATTERN.match(re.sub(r"\s", "", code)))
