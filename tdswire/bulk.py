"""Bulk copy configuration and the statements it produces."""

from __future__ import annotations

import json
from dataclasses import dataclass, field
from typing import Any, Iterable, Optional

COPY_IN_PREFIX = "INSERTBULK "


@dataclass
class BulkOptions:
    """Options for an ``INSERT BULK`` operation."""

    check_constraints: bool = False
    fire_triggers: bool = False
    keep_nulls: bool = False
    kilobytes_per_batch: int = 0
    rows_per_batch: int = 0
    order: Optional[list[str]] = None
    tablock: bool = False

    def with_clause(self) -> str:
        """Return the ``WITH (...)`` clause, or an empty string if no option is set."""
        parts = []
        if self.check_constraints:
            parts.append("CHECK_CONSTRAINTS")
        if self.fire_triggers:
            parts.append("FIRE_TRIGGERS")
        if self.keep_nulls:
            parts.append("KEEP_NULLS")
        if self.kilobytes_per_batch > 0:
            parts.append(f"KILOBYTES_PER_BATCH = {self.kilobytes_per_batch}")
        if self.rows_per_batch > 0:
            parts.append(f"ROWS_PER_BATCH = {self.rows_per_batch}")
        if self.order:
            parts.append(f"ORDER({','.join(self.order)})")
        if self.tablock:
            parts.append("TABLOCK")
        return f"WITH ({','.join(parts)})" if parts else ""

    def _to_dict(self) -> dict[str, Any]:
        return {
            "CheckConstraints": self.check_constraints,
            "FireTriggers": self.fire_triggers,
            "KeepNulls": self.keep_nulls,
            "KilobytesPerBatch": self.kilobytes_per_batch,
            "RowsPerBatch": self.rows_per_batch,
            "Order": None if self.order is None else list(self.order),
            "Tablock": self.tablock,
        }

    @classmethod
    def _from_dict(cls, data: Any) -> BulkOptions:
        if data is None:
            return cls()
        if not isinstance(data, dict):
            raise ValueError("bulk options must be a JSON object")
        return cls(
            check_constraints=_bool(data, "CheckConstraints"),
            fire_triggers=_bool(data, "FireTriggers"),
            keep_nulls=_bool(data, "KeepNulls"),
            kilobytes_per_batch=_int(data, "KilobytesPerBatch"),
            rows_per_batch=_int(data, "RowsPerBatch"),
            order=_strings(data, "Order"),
            tablock=_bool(data, "Tablock"),
        )


@dataclass
class BulkConfig:
    """Destination table, columns and options of a bulk copy."""

    table_name: str = ""
    columns: Optional[list[str]] = None
    options: BulkOptions = field(default_factory=BulkOptions)

    def to_json(self) -> str:
        """Serialize to the compact JSON carried by a copy-in statement."""
        data = {
            "TableName": self.table_name,
            "ColumnsName": None if self.columns is None else list(self.columns),
            "Options": self.options._to_dict(),
        }
        text = json.dumps(data, ensure_ascii=False, separators=(",", ":"))
        for raw, escaped in _JSON_ESCAPES:
            text = text.replace(raw, escaped)
        return text

    @classmethod
    def from_json(cls, text: str) -> BulkConfig:
        """Parse a configuration; field names match without regard to case.

        Raises ValueError for malformed JSON or fields of the wrong type.
        """
        data = json.loads(text)
        if data is None:
            return cls()
        if not isinstance(data, dict):
            raise ValueError("bulk configuration must be a JSON object")
        table_name = _lookup(data, "TableName")
        if table_name is None:
            table_name = ""
        elif not isinstance(table_name, str):
            raise ValueError("TableName must be a string")
        return cls(
            table_name=table_name,
            columns=_strings(data, "ColumnsName"),
            options=BulkOptions._from_dict(_lookup(data, "Options")),
        )


# Characters escaped so the JSON stays safe to embed in HTML.
_JSON_ESCAPES = (
    ("<", "\\u003c"),
    (">", "\\u003e"),
    ("&", "\\u0026"),
    ("\u2028", "\\u2028"),
    ("\u2029", "\\u2029"),
)

_MISSING = object()


def _lookup(data: dict[str, Any], name: str) -> Any:
    if name in data:
        return data[name]
    wanted = name.lower()
    for key, value in data.items():
        if key.lower() == wanted:
            return value
    return None


def _bool(data: dict[str, Any], name: str) -> bool:
    value = _lookup(data, name)
    if value is None:
        return False
    if not isinstance(value, bool):
        raise ValueError(f"{name} must be a boolean")
    return value


def _int(data: dict[str, Any], name: str) -> int:
    value = _lookup(data, name)
    if value is None:
        return 0
    if isinstance(value, bool) or not isinstance(value, int):
        raise ValueError(f"{name} must be an integer")
    return value


def _strings(data: dict[str, Any], name: str) -> Optional[list[str]]:
    value = _lookup(data, name)
    if value is None:
        return None
    if not isinstance(value, list) or not all(isinstance(v, str) for v in value):
        raise ValueError(f"{name} must be a list of strings")
    return list(value)


def copy_in(table: str, options: Optional[BulkOptions], *args: str) -> str:
    """Build a copy-in statement for ``table`` with the given column names."""
    config = BulkConfig(
        table_name=table,
        columns=list(args) if args else None,
        options=options if options is not None else BulkOptions(),
    )
    return COPY_IN_PREFIX + config.to_json()


def parse_copy_in(query: str) -> BulkConfig:
    """Read the configuration back out of a copy-in statement."""
    return BulkConfig.from_json(query[len(COPY_IN_PREFIX) :])


def insert_bulk_statement(
    table: str,
    column_defs: Iterable[tuple[str, str]],
    options: Optional[BulkOptions] = None,
) -> str:
    """Build the ``INSERT BULK`` command from (column name, declaration) pairs."""
    defs = ", ".join(f"[{name}] {decl}" for name, decl in column_defs)
    with_part = (options or BulkOptions()).with_clause()
    return f"INSERT BULK {table} ({defs}) {with_part}"