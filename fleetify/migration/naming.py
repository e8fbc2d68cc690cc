"""Table and model naming conventions."""

from __future__ import annotations

import re

from fleetify.errors import InvalidTableNameError

_IDENTIFIER_RE = re.compile(r"^[A-Za-z_][A-Za-z0-9_]*$")


def normalize_table_name(name: str) -> str:
    """
    Lower-case a table name and check that it is a plain SQL identifier.

    Raises
    ------
    InvalidTableNameError
        For anything that would need quoting (spaces, dashes, dots, ...).
    """
    candidate = (name or "").strip()
    if not _IDENTIFIER_RE.match(candidate):
        raise InvalidTableNameError(
            f"invalid table name {name!r}: use letters, digits and underscores only"
        )
    return candidate.lower()


def to_pascal_case(name: str) -> str:
    """``purchasing_details`` -> ``PurchasingDetails``."""
    return "".join(part[:1].upper() + part[1:].lower() for part in name.split("_") if part)


__all__ = ["normalize_table_name", "to_pascal_case"]
