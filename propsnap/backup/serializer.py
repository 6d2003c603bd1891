"""Record-collection serializer: renders one collection into its archive artifacts."""

import json
from dataclasses import dataclass
from datetime import date, datetime
from decimal import Decimal
from typing import Any, Dict, Iterable, List, Optional

from ..base import BaseRecordStore, Row
from ..collections import CollectionSpec
from .._utils import logger, json_dumps
from .codec import encode_table, table_columns


@dataclass
class CollectionArtifacts:
    """Everything written to the archive for one collection."""
    name: str
    tabular: str
    structured: str
    sql: str
    record_count: int = 0
    error: Optional[str] = None


def _sql_literal(value: Any) -> str:
    if value is None:
        return "NULL"
    if isinstance(value, bool):
        return "TRUE" if value else "FALSE"
    if isinstance(value, (int, float, Decimal)):
        return str(value)
    if isinstance(value, (datetime, date)):
        text = value.isoformat()
    elif isinstance(value, (dict, list, tuple)):
        text = json.dumps(value, ensure_ascii=False, default=str)
    else:
        text = str(value)
    return "'" + text.replace("'", "''") + "'"


def _sql_identifier(name: str) -> str:
    return '"' + name.replace('"', '""') + '"'


def render_sql(name: str, rows: List[Row]) -> str:
    """One INSERT statement per record, with a short header comment."""
    lines = [f"-- Table: {name}", f"-- Records: {len(rows)}"]
    if rows:
        columns = table_columns(rows)
        column_list = ", ".join(_sql_identifier(column) for column in columns)
        lines.append("")
        for row in rows:
            values = ", ".join(_sql_literal(row.get(column)) for column in columns)
            lines.append(f"INSERT INTO public.{_sql_identifier(name)} ({column_list}) VALUES ({values});")
    return "\n".join(lines) + "\n"


def render_json(rows: List[Row]) -> str:
    return json_dumps(rows, indent=2)


def render_readme(
    backup_date: datetime,
    restore_order: Iterable[str],
    record_counts: Dict[str, int],
    collection_errors: Dict[str, str],
) -> str:
    """Human-readable restoration notes for database/README.txt."""
    lines = [
        "Database backup",
        f"Created: {backup_date.isoformat()}",
        "",
        "Each collection is stored three ways:",
        "  <collection>.csv   tabular form, used by the lead import",
        "  <collection>.json  structured form",
        "  <collection>.sql   INSERT statements",
        "",
        "Restore in this order (parents before children):",
    ]
    for position, name in enumerate(restore_order, start=1):
        lines.append(f"  {position}. {name} ({record_counts.get(name, 0)} records)")
    if collection_errors:
        lines.append("")
        lines.append("Collections that could not be read (exported empty):")
        for name, error in collection_errors.items():
            lines.append(f"  - {name}: {error}")
    return "\n".join(lines) + "\n"


async def serialize_collection(store: BaseRecordStore, spec: CollectionSpec) -> CollectionArtifacts:
    """Read a collection and render its artifacts.

    A failed read is logged and yields empty artifacts carrying the error, so
    the rest of the backup job keeps going.
    """
    error = None
    try:
        rows = await store.fetch_all(spec.name)
    except Exception as e:
        logger.warning(f"Failed to read collection {spec.name}, exporting it empty: {e}")
        rows = []
        error = str(e)

    logger.debug(f"Serialized {spec.name}: {len(rows)} records")
    return CollectionArtifacts(
        name=spec.name,
        tabular=encode_table(rows),
        structured=render_json(rows),
        sql=render_sql(spec.name, rows),
        record_count=len(rows),
        error=error,
    )
