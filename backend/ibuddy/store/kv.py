"""
Key-value store over the kv_items table.

Operations mirror a partition/sort-key document store: get by key, query a partition
(optionally by sort-key prefix), query a secondary index, scan with a filter, put,
update with set/remove, delete, and an all-or-nothing transact_write. Items are plain
dicts with the persisted (camelCase) attribute names. Transient database errors are
retried with exponential backoff.
"""
import logging
from dataclasses import dataclass, field
from typing import Callable, Iterable

from sqlalchemy import select, delete as sa_delete
from sqlalchemy.orm import Session, sessionmaker

from ibuddy.models.record import Record
from ibuddy.services.retry import call_with_retry, is_transient_db_error

logger = logging.getLogger(__name__)

USERS = "users"
PASSWORDS = "passwords"
MENTEES = "mentees"
ASSETS = "assets"
FAQS = "faqs"

# Secondary indexes: table -> index name -> indexed attribute
TABLE_INDEXES: dict[str, dict[str, str]] = {
    USERS: {},
    PASSWORDS: {},
    MENTEES: {
        "menteesByBuddyId": "buddyId",
        "menteesBySearchableEmail": "searchableEmail",
    },
    ASSETS: {
        "assetsByOwnerId": "ownerId",
        "assetsBySearchableName": "searchableName",
    },
    FAQS: {},
}


@dataclass(frozen=True)
class Put:
    table: str
    pk: str
    item: dict = field(hash=False)
    sk: str = ""


@dataclass(frozen=True)
class Delete:
    table: str
    pk: str
    sk: str = ""


class KeyValueStore:
    """Store bound to a session factory (ibuddy.database.SessionLocal by default)."""

    def __init__(self, session_factory: sessionmaker, indexes: dict[str, dict[str, str]] | None = None):
        self._session_factory = session_factory
        self._indexes = TABLE_INDEXES if indexes is None else indexes

    # ------------------------------------------------------------------
    # Internal helpers
    def _run(self, fn: Callable[[Session], object]):
        def _attempt():
            db = self._session_factory()
            try:
                result = fn(db)
                db.commit()
                return result
            except Exception:
                db.rollback()
                raise
            finally:
                db.close()

        return call_with_retry(_attempt, is_retryable=is_transient_db_error)

    def _check_table(self, table: str) -> None:
        if table not in self._indexes:
            raise KeyError(f"Unknown table: {table}")

    def _index_attribute(self, table: str, index_name: str) -> str:
        self._check_table(table)
        try:
            return self._indexes[table][index_name]
        except KeyError:
            raise KeyError(f"Unknown index {index_name} on table {table}") from None

    @staticmethod
    def _find(db: Session, table: str, pk: str, sk: str) -> Record | None:
        return db.get(Record, (table, pk, sk))

    # ------------------------------------------------------------------
    # Reads
    def get(self, table: str, pk: str, sk: str = "") -> dict | None:
        """Return the item or None."""
        self._check_table(table)

        def _get(db: Session):
            rec = self._find(db, table, pk, sk)
            return dict(rec.data) if rec else None

        return self._run(_get)

    def query(self, table: str, pk: str, sk_prefix: str | None = None) -> list[dict]:
        """All items in partition `pk`, optionally only those whose sort key starts with `sk_prefix`."""
        self._check_table(table)

        def _query(db: Session):
            stmt = select(Record).where(Record.table_name == table, Record.pk == pk)
            if sk_prefix:
                stmt = stmt.where(Record.sk.startswith(sk_prefix, autoescape=True))
            return [dict(r.data) for r in db.scalars(stmt.order_by(Record.sk))]

        return self._run(_query)

    def query_index(self, table: str, index_name: str, value: str) -> list[dict]:
        """Items whose indexed attribute equals `value`."""
        attribute = self._index_attribute(table, index_name)

        def _query(db: Session):
            stmt = select(Record).where(
                Record.table_name == table,
                Record.data[attribute].as_string() == value,
            )
            return [dict(r.data) for r in db.scalars(stmt.order_by(Record.pk, Record.sk))]

        return self._run(_query)

    def scan(
        self,
        table: str,
        predicate: Callable[[dict], bool] | None = None,
        sk_prefix: str | None = None,
    ) -> list[dict]:
        """Every item of `table` (optionally only sort keys starting with `sk_prefix`),
        filtered by `predicate` when given. Full table read."""
        self._check_table(table)

        def _scan(db: Session):
            stmt = select(Record).where(Record.table_name == table)
            if sk_prefix:
                stmt = stmt.where(Record.sk.startswith(sk_prefix, autoescape=True))
            stmt = stmt.order_by(Record.pk, Record.sk)
            items = [dict(r.data) for r in db.scalars(stmt)]
            return [i for i in items if predicate(i)] if predicate else items

        return self._run(_scan)

    # ------------------------------------------------------------------
    # Writes
    def put(self, table: str, pk: str, item: dict, sk: str = "") -> None:
        """Create or replace the item at (pk, sk)."""
        self.transact_write([Put(table, pk, item, sk)])

    def update(
        self,
        table: str,
        pk: str,
        sk: str = "",
        *,
        set_values: dict | None = None,
        remove: Iterable[str] = (),
    ) -> dict | None:
        """Set and remove attributes of an existing item; other attributes are kept.
        Returns the updated item, or None if the item does not exist."""
        self._check_table(table)
        set_values = dict(set_values or {})
        remove = tuple(remove)

        def _update(db: Session):
            rec = self._find(db, table, pk, sk)
            if rec is None:
                return None
            data = dict(rec.data)
            data.update(set_values)
            for attr in remove:
                data.pop(attr, None)
            rec.data = data
            return dict(data)

        return self._run(_update)

    def delete(self, table: str, pk: str, sk: str = "") -> None:
        """Delete the item; deleting a missing item is a no-op."""
        self.transact_write([Delete(table, pk, sk)])

    def transact_write(self, operations: Iterable[Put | Delete]) -> None:
        """Apply every put/delete in one database transaction: all of them or none."""
        operations = list(operations)
        for op in operations:
            self._check_table(op.table)

        def _write(db: Session):
            for op in operations:
                if isinstance(op, Put):
                    rec = self._find(db, op.table, op.pk, op.sk)
                    if rec is None:
                        db.add(Record(table_name=op.table, pk=op.pk, sk=op.sk, data=dict(op.item)))
                    else:
                        rec.data = dict(op.item)
                else:
                    db.execute(
                        sa_delete(Record).where(
                            Record.table_name == op.table,
                            Record.pk == op.pk,
                            Record.sk == op.sk,
                        )
                    )
                # keep later operations in the same batch consistent with earlier ones
                db.flush()

        self._run(_write)
        logger.debug("transact_write: %s operation(s)", len(operations))

    def truncate(self) -> None:
        """Remove every item of every table (tests, local resets)."""
        self._run(lambda db: db.execute(sa_delete(Record)))


_default_store: KeyValueStore | None = None


def get_store() -> KeyValueStore:
    """Dependency: process-wide store bound to ibuddy.database.SessionLocal."""
    global _default_store
    if _default_store is None:
        from ibuddy.database import SessionLocal
        _default_store = KeyValueStore(SessionLocal)
    return _default_store
