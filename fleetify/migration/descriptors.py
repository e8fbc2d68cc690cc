"""
Column descriptor extraction from table model source.

The model module is parsed with `ast` rather than imported, so a model that is
still being edited (or whose imports are not installed yet) can be turned into
DDL without executing it.
"""

from __future__ import annotations

import ast
from dataclasses import dataclass
from pathlib import Path
from typing import Iterator, List, Optional

from fleetify.errors import ModelNotFoundError, ModelParseError
from fleetify.models.base import AUDIT_COLUMNS, DB_TAG_KEY, primary_key_column, split_tag
from fleetify.utils.logging import get_logger

log = get_logger(__name__)

DEFAULT_SQL_TYPE = "TEXT"

TYPE_MAP = {
    "str": "TEXT",
    "int": "INTEGER",
    "float": "NUMERIC(10, 2)",
    "Decimal": "NUMERIC(10, 2)",
    "bool": "BOOLEAN",
    "datetime": "TIMESTAMPTZ",
    "dict": "JSONB",
    "Dict": "JSONB",
    "Mapping": "JSONB",
    "MutableMapping": "JSONB",
}

_OPTIONAL_WRAPPERS = {"Optional", "Union"}
_NONE_NAMES = {"None", "NoneType"}


@dataclass(frozen=True)
class ColumnDescriptor:
    name: str
    sql_type: str
    not_null: bool = False
    unique: bool = False

    @property
    def definition(self) -> str:
        """Column definition as it appears in CREATE/ALTER TABLE."""
        parts = [self.name, self.sql_type]
        if self.not_null:
            parts.append("NOT NULL")
        if self.unique:
            parts.append("UNIQUE")
        return " ".join(parts)


def model_path(table_name: str, models_dir: Path | str) -> Path:
    return Path(models_dir) / f"{table_name.lower()}.py"


def _dotted_tail(node: ast.expr) -> Optional[str]:
    if isinstance(node, ast.Name):
        return node.id
    if isinstance(node, ast.Attribute):
        return node.attr
    return None


def _is_none(node: ast.expr) -> bool:
    if isinstance(node, ast.Constant):
        return node.value is None
    return _dotted_tail(node) in _NONE_NAMES


def _base_type_name(node: ast.expr) -> Optional[str]:
    """
    Reduce an annotation to the name of its underlying type.

    Unwraps string annotations, ``Optional[X]``, ``Union[X, None]``,
    ``X | None`` and ``Annotated[X, ...]``; generic aliases reduce to their
    origin (``dict[str, Any]`` -> ``dict``).
    """
    if isinstance(node, ast.Constant) and isinstance(node.value, str):
        try:
            node = ast.parse(node.value, mode="eval").body
        except SyntaxError:
            return None

    if isinstance(node, ast.BinOp) and isinstance(node.op, ast.BitOr):
        members = [m for m in (node.left, node.right) if not _is_none(m)]
        return _base_type_name(members[0]) if len(members) == 1 else None

    if isinstance(node, ast.Subscript):
        origin = _dotted_tail(node.value)
        args = node.slice.elts if isinstance(node.slice, ast.Tuple) else [node.slice]
        if origin == "Annotated":
            return _base_type_name(args[0])
        if origin in _OPTIONAL_WRAPPERS:
            members = [a for a in args if not _is_none(a)]
            return _base_type_name(members[0]) if len(members) == 1 else None
        return origin

    return _dotted_tail(node)


def sql_type_for(annotation: ast.expr) -> str:
    """Map a field annotation to its SQL column type."""
    return TYPE_MAP.get(_base_type_name(annotation) or "", DEFAULT_SQL_TYPE)


def _db_tag(value: Optional[ast.expr]) -> Optional[str]:
    """Pull the ``db`` annotation out of a `db_field(...)` or `Field(...)` call."""
    if not isinstance(value, ast.Call):
        return None
    func = _dotted_tail(value.func)

    if func == "db_field":
        if value.args and isinstance(value.args[0], ast.Constant):
            return value.args[0].value if isinstance(value.args[0].value, str) else None
        for keyword in value.keywords:
            if keyword.arg == "tag" and isinstance(keyword.value, ast.Constant):
                return keyword.value.value if isinstance(keyword.value.value, str) else None
        return None

    if func == "Field":
        for keyword in value.keywords:
            if keyword.arg != "json_schema_extra" or not isinstance(keyword.value, ast.Dict):
                continue
            for key, item in zip(keyword.value.keys, keyword.value.values):
                if (
                    isinstance(key, ast.Constant)
                    and key.value == DB_TAG_KEY
                    and isinstance(item, ast.Constant)
                    and isinstance(item.value, str)
                ):
                    return item.value
    return None


def _annotated_fields(tree: ast.Module) -> Iterator[ast.AnnAssign]:
    """Yield annotated assignments of every class in the module, in source order."""
    for node in ast.walk(tree):
        if isinstance(node, ast.ClassDef):
            for statement in node.body:
                if isinstance(statement, ast.AnnAssign) and isinstance(statement.target, ast.Name):
                    yield statement


def extract_columns_from_source(source: str, table_name: str, filename: str = "<model>") -> List[ColumnDescriptor]:
    """
    Build the ordered column list for a table from model source text.

    The identifier column and the audit timestamp columns are left out; the
    generated DDL adds them itself.

    Raises
    ------
    ModelParseError
        If the source is not valid Python.
    """
    try:
        tree = ast.parse(source, filename=filename)
    except (SyntaxError, ValueError) as exc:
        raise ModelParseError(f"failed to parse model file {filename}: {exc}") from exc

    skipped = {primary_key_column(table_name), *AUDIT_COLUMNS}
    columns: List[ColumnDescriptor] = []
    for field in _annotated_fields(tree):
        column, markers = split_tag(_db_tag(field.value))
        if not column or column in skipped:
            continue
        columns.append(
            ColumnDescriptor(
                name=column,
                sql_type=sql_type_for(field.annotation),
                not_null="notnull" in markers,
                unique="unique" in markers,
            )
        )
    return columns


def extract_columns(table_name: str, models_dir: Path | str) -> List[ColumnDescriptor]:
    """
    Read `<models_dir>/<table>.py` and extract its column descriptors.

    Raises
    ------
    ModelNotFoundError
        If the model file does not exist.
    ModelParseError
        If it cannot be parsed.
    """
    path = model_path(table_name, models_dir)
    if not path.is_file():
        raise ModelNotFoundError(f"model file not found: {path}")

    columns = extract_columns_from_source(path.read_text(encoding="utf-8"), table_name, str(path))
    log.debug(
        f"Extracted {len(columns)} column(s) from {path}",
        extra={"table": table_name, "columns": [c.name for c in columns]},
    )
    return columns


__all__ = [
    "ColumnDescriptor",
    "TYPE_MAP",
    "extract_columns",
    "extract_columns_from_source",
    "model_path",
    "sql_type_for",
]
