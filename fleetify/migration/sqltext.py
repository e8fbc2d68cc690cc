"""
Plain-text handling of migration files.

A migration file has a forward body of semicolon-terminated statements and an
optional trailing rollback block:

    CREATE TABLE IF NOT EXISTS roles (...);

    -- Rollback
    -- DROP TABLE IF EXISTS roles;
    -- End Rollback

A rollback marker is a full-line comment starting with ``-- rollback``
(case-insensitive). The block starts at the last such marker in the file and
ends at a comment line containing ``end rollback`` or at end of file, so a
header comment that merely mentions rollback never swallows the forward body.
Rollback statements are usually written commented out so the file stays
runnable as a whole; they are uncommented on extraction.
"""

from __future__ import annotations

import re
from typing import List, NamedTuple, Optional, Tuple

ROLLBACK_MARKER = "-- rollback"
ROLLBACK_END_MARKER = "end rollback"

MIGRATION_NAME_RE = re.compile(r"^(?P<timestamp>\d{14})_(?P<table>.+)_(?P<kind>create|alter)\.sql$")


class MigrationName(NamedTuple):
    timestamp: str
    table: str
    kind: str


def parse_migration_name(name: str) -> Optional[MigrationName]:
    """Split `<timestamp>_<table>_<create|alter>.sql`; None if it does not match."""
    match = MIGRATION_NAME_RE.match(name)
    if match is None:
        return None
    return MigrationName(match["timestamp"], match["table"], match["kind"])


def _is_rollback_start(line: str) -> bool:
    return line.strip().lower().startswith(ROLLBACK_MARKER)


def _is_rollback_end(line: str) -> bool:
    stripped = line.strip()
    return stripped.startswith("--") and ROLLBACK_END_MARKER in stripped.lower()


def _rollback_bounds(lines: List[str]) -> Optional[Tuple[int, int]]:
    """Line indexes of the last rollback marker and of its end marker (line count when unterminated)."""
    starts = [index for index, line in enumerate(lines) if _is_rollback_start(line)]
    if not starts:
        return None
    start = starts[-1]
    for end in range(start + 1, len(lines)):
        if _is_rollback_end(lines[end]):
            return start, end
    return start, len(lines)


def split_statements(text: str) -> List[str]:
    """
    Split SQL text into individual statements.

    Blank lines and full-line ``--`` comments are dropped. Lines accumulate
    until one ends with ``;``. Whatever is left unterminated at end of input is
    returned as a final statement.

    A ``;`` at end of line always terminates, even inside a string literal or
    a function body.
    """
    statements: List[str] = []
    current: List[str] = []

    for line in text.splitlines():
        trimmed = line.strip()
        if not trimmed or trimmed.startswith("--"):
            continue

        current.append(line)
        if trimmed.endswith(";"):
            statement = "\n".join(current).strip()
            if statement:
                statements.append(statement)
            current = []

    if current:
        statement = "\n".join(current).strip()
        if statement:
            statements.append(statement)

    return statements


def forward_sql(text: str) -> str:
    """Return the file content without its rollback block."""
    lines = text.splitlines()
    bounds = _rollback_bounds(lines)
    if bounds is None:
        return "\n".join(lines)
    start, end = bounds
    return "\n".join(lines[:start] + lines[end + 1 :])


def _uncomment(line: str) -> str:
    stripped = line.strip()
    if stripped.startswith("--"):
        return stripped[2:].strip()
    return line


def extract_rollback_sql(text: str) -> str:
    """
    Return the rollback block of a migration, uncommented.

    Returns an empty string when the file has no ``-- rollback`` marker or the
    block holds nothing but blank lines.
    """
    lines = text.splitlines()
    bounds = _rollback_bounds(lines)
    if bounds is None:
        return ""
    start, end = bounds
    return "\n".join(_uncomment(line) for line in lines[start + 1 : end]).strip()


__all__ = [
    "MigrationName",
    "extract_rollback_sql",
    "forward_sql",
    "parse_migration_name",
    "split_statements",
]
