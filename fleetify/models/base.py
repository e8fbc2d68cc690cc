"""
Base class and field helper for table models.

A table model is a pydantic model whose persisted fields carry a ``db``
annotation: the column name optionally followed by comma separated markers.

    class Roles(TableModel):
        table_name: ClassVar[str] = "roles"

        roles_id: Optional[str] = db_field("roles_id", default=None)
        role_name: str = db_field("role_name,notnull,unique")

Recognized markers are ``notnull`` and ``unique``. A field without a ``db``
annotation, or annotated with ``-``, is not persisted.
"""

from __future__ import annotations

from typing import Any, ClassVar, Dict, Optional

from pydantic import BaseModel, ConfigDict, Field

DB_TAG_KEY = "db"
CREATED_TIMESTAMP = "created_timestamp"
UPDATED_TIMESTAMP = "updated_timestamp"
AUDIT_COLUMNS = (CREATED_TIMESTAMP, UPDATED_TIMESTAMP)


def db_field(tag: str, default: Any = ..., **kwargs: Any) -> Any:
    """
    Declare a persisted model field.

    Parameters
    ----------
    tag : str
        ``"<column>[,notnull][,unique]"``.
    default : Any
        Field default; required when omitted.
    **kwargs
        Forwarded to `pydantic.Field`.
    """
    extra = dict(kwargs.pop("json_schema_extra", None) or {})
    extra[DB_TAG_KEY] = tag
    if "default_factory" in kwargs:
        return Field(json_schema_extra=extra, **kwargs)
    return Field(default, json_schema_extra=extra, **kwargs)


def split_tag(tag: Optional[str]) -> tuple[str, frozenset[str]]:
    """Return ``(column, markers)`` for a ``db`` annotation; column is "" when not persisted."""
    if not tag or tag.strip() == "-":
        return "", frozenset()
    parts = [part.strip() for part in tag.split(",")]
    return parts[0], frozenset(part.lower() for part in parts[1:] if part)


def primary_key_column(table_name: str) -> str:
    """Identifier column of a table: ``<table>_id``."""
    return f"{table_name.lower()}_id"


class TableModel(BaseModel):
    """
    Base class for all table models.

    Subclasses set `table_name`; the identifier column is `<table_name>_id`.
    """

    table_name: ClassVar[str] = ""

    model_config = ConfigDict(
        populate_by_name=True,
        arbitrary_types_allowed=False,
    )

    def to_row(self) -> Dict[str, Any]:
        """Flatten to a column -> value mapping of the persisted fields, in declaration order."""
        return {column: getattr(self, attr) for attr, column in column_map(type(self)).items()}


def column_map(model_cls: type[BaseModel]) -> Dict[str, str]:
    """
    Map attribute name -> column name for any pydantic model using ``db`` annotations.
    """
    columns: Dict[str, str] = {}
    for attr, info in model_cls.model_fields.items():
        extra = info.json_schema_extra
        if not isinstance(extra, dict):
            continue
        column, _ = split_tag(extra.get(DB_TAG_KEY))  # type: ignore[arg-type]
        if column:
            columns[attr] = column
    return columns


__all__ = [
    "AUDIT_COLUMNS",
    "CREATED_TIMESTAMP",
    "DB_TAG_KEY",
    "TableModel",
    "UPDATED_TIMESTAMP",
    "column_map",
    "db_field",
    "primary_key_column",
    "split_tag",
]
