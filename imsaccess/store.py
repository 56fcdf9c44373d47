"""
Durable key-value tables on a SQL database.

Each :class:`SQLKeyValueStore` owns one table with a string primary key and
a JSON attributes column. Several stores may share one engine.
"""

from typing import Any

from sqlalchemy import (
    JSON,
    Column,
    MetaData,
    String,
    Table,
    create_engine,
    delete,
    insert,
    select,
    update,
)
from sqlalchemy.dialects.postgresql import insert as pg_insert
from sqlalchemy.dialects.sqlite import insert as sqlite_insert
from sqlalchemy.engine import Engine
from sqlalchemy.exc import SQLAlchemyError

from imsaccess.exceptions import StoreError
from imsaccess.logging import get_logger

logger = get_logger("store")

# Standardized naming convention for constraints.
NAMING_CONVENTION = {
    "pk": "pk_%(table_name)s",
}


def make_engine(database_url: str, echo: bool = False) -> Engine:
    """Create an engine for ``database_url``."""
    return create_engine(database_url, echo=echo, pool_pre_ping=True)


class SQLKeyValueStore:
    """
    A key-value table stored in SQL.

    Every statement runs in its own transaction, so a read issued after a
    write has returned always sees that write.
    """

    def __init__(self, engine: Engine, table_name: str, create: bool = True) -> None:
        """
        Initialize the store.

        Args:
            engine: SQLAlchemy engine
            table_name: Name of the backing table
            create: Create the table if it does not exist
        """
        self.engine = engine
        self.metadata = MetaData(naming_convention=NAMING_CONVENTION)
        self.table = Table(
            table_name,
            self.metadata,
            Column("key", String(512), primary_key=True),
            Column("attributes", JSON, nullable=False),
        )

        if create:
            try:
                self.metadata.create_all(engine)
            except SQLAlchemyError as e:
                raise StoreError("STORE_INIT_FAILED", f"Cannot create table '{table_name}': {e}") from e

    def _upsert(self, key: str, attributes: dict[str, Any]) -> Any:
        dialect = self.engine.dialect.name
        if dialect == "postgresql":
            stmt = pg_insert(self.table).values(key=key, attributes=attributes)
        elif dialect == "sqlite":
            stmt = sqlite_insert(self.table).values(key=key, attributes=attributes)
        else:
            return None
        return stmt.on_conflict_do_update(
            index_elements=[self.table.c["key"]],
            set_={"attributes": stmt.excluded["attributes"]},
        )

    def put_item(self, key: str, attributes: dict[str, Any]) -> None:
        attributes = dict(attributes)
        upsert = self._upsert(key, attributes)
        try:
            with self.engine.begin() as conn:
                if upsert is not None:
                    conn.execute(upsert)
                    return

                # Dialects without ON CONFLICT: update in place, insert when absent.
                result = conn.execute(
                    update(self.table)
                    .where(self.table.c["key"] == key)
                    .values(attributes=attributes)
                )
                if result.rowcount == 0:
                    conn.execute(insert(self.table).values(key=key, attributes=attributes))
        except SQLAlchemyError as e:
            logger.error("Write to %s failed: %s", self.table.name, e)
            raise StoreError("STORE_WRITE_FAILED", str(e)) from e

    def get_item(self, key: str, consistent_read: bool = False) -> dict[str, Any] | None:
        # Single-node SQL reads are always consistent; the flag needs no handling.
        try:
            with self.engine.connect() as conn:
                row = conn.execute(
                    select(self.table.c["attributes"]).where(self.table.c["key"] == key)
                ).first()
        except SQLAlchemyError as e:
            logger.error("Read from %s failed: %s", self.table.name, e)
            raise StoreError("STORE_READ_FAILED", str(e)) from e

        if row is None:
            return None
        return dict(row[0])

    def delete_item(self, key: str) -> None:
        try:
            with self.engine.begin() as conn:
                conn.execute(delete(self.table).where(self.table.c["key"] == key))
        except SQLAlchemyError as e:
            logger.error("Delete from %s failed: %s", self.table.name, e)
            raise StoreError("STORE_WRITE_FAILED", str(e)) from e
