"""Runtime schema sync: add columns and indexes that older tables lack."""

from __future__ import annotations

import logging
from typing import List

from sqlalchemy import inspect, text
from sqlalchemy.engine import Engine
from sqlalchemy.schema import CreateColumn, CreateIndex, MetaData

logger = logging.getLogger(__name__)


def sync_missing_schema_objects(engine: Engine, metadata: MetaData) -> List[str]:
    """Add model columns/indexes missing from existing tables.

    Returns ``table.column`` / ``table.index`` names that were created.
    New NOT NULL columns are added nullable with their scalar default
    backfilled, since existing rows have no value for them.
    """
    inspector = inspect(engine)
    existing_tables = set(inspector.get_table_names())
    preparer = engine.dialect.identifier_preparer
    added: List[str] = []

    with engine.begin() as conn:
        for table in metadata.sorted_tables:
            if table.name not in existing_tables:
                continue

            existing_columns = {col["name"] for col in inspector.get_columns(table.name)}
            table_sql = preparer.format_table(table)

            for column in table.columns:
                if column.name in existing_columns:
                    continue
                column_copy = column._copy()
                column_copy.nullable = True
                column_sql = str(CreateColumn(column_copy).compile(dialect=engine.dialect)).strip()
                conn.execute(text(f"ALTER TABLE {table_sql} ADD COLUMN {column_sql}"))
                default = column.default.arg if column.default is not None and column.default.is_scalar else None
                if default is not None:
                    # onupdate columns may not exist yet, so no table.update() here.
                    column_name = preparer.quote(column.name)
                    conn.execute(
                        text(f"UPDATE {table_sql} SET {column_name} = :value WHERE {column_name} IS NULL"),
                        {"value": default},
                    )
                added.append(f"{table.name}.{column.name}")

            existing_index_names = {idx["name"] for idx in inspector.get_indexes(table.name) if idx.get("name")}
            for index in table.indexes:
                if not index.name or index.name in existing_index_names:
                    continue
                conn.execute(CreateIndex(index))
                added.append(f"{table.name}.{index.name}")

    for name in added:
        logger.info("[schema] added %s", name)
    return added
