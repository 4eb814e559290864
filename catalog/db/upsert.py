"""INSERT ... ON CONFLICT DO UPDATE for the dialects the service runs on."""

from typing import Any, Dict, Iterable, List, Optional, Union

from sqlalchemy import Table
from sqlalchemy.dialects import postgresql, sqlite


def upsert(
    dialect_name: str,
    table: Table,
    values: Union[Dict[str, Any], List[Dict[str, Any]]],
    conflict_columns: Iterable[str],
    extra_updates: Optional[Dict[str, Any]] = None,
):
    """Build an upsert that overwrites every non-key column on conflict."""
    if dialect_name == "postgresql":
        insert = postgresql.insert
    elif dialect_name == "sqlite":
        insert = sqlite.insert
    else:
        raise NotImplementedError(f"Upsert is not supported on {dialect_name}")

    conflict_columns = list(conflict_columns)
    stmt = insert(table).values(values)
    sample = values[0] if isinstance(values, list) else values
    updates = {
        name: stmt.excluded[name]
        for name in sample
        if name not in conflict_columns and name != "created_at"
    }
    updates.update(extra_updates or {})

    return stmt.on_conflict_do_update(index_elements=conflict_columns, set_=updates)
