# agencydesk/store/repository.py
"""
Table-driven CRUD over MySQL.

Rows come back as dicts keyed by snake_case column name, which is also the
attribute name on the agencydesk.schemas records.
"""
from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Callable, Dict, List, Mapping, Optional, Tuple

import pymysql

from agencydesk.errors import ConflictError
from agencydesk.store.db import get_conn

logger = logging.getLogger(__name__)

ER_DUP_ENTRY = 1062
# MySQL has no bare OFFSET; this is the documented "all remaining rows" limit.
_NO_LIMIT = 18446744073709551615


@dataclass(frozen=True)
class TableSpec:
    table: str
    columns: Tuple[str, ...]              # writable columns (id excluded)
    timestamps: Tuple[str, ...] = ("created_at",)

    @property
    def selectable(self) -> Tuple[str, ...]:
        return ("id", *self.columns, *self.timestamps)


TABLES: Dict[str, TableSpec] = {
    "agents": TableSpec(
        "agents",
        (
            "first_name", "last_name", "email", "phone",
            "license_number", "license_expiration",
            "commission_percentage", "override_percentage", "upline_agent_id",
            "bank_name", "bank_account_type", "bank_account_number",
            "bank_routing_number", "bank_payment_method", "notes",
        ),
        ("created_at", "updated_at"),
    ),
    "policies": TableSpec(
        "policies",
        (
            "policy_number", "carrier", "policy_type", "face_amount",
            "premium_amount", "premium_frequency", "issue_date", "expiry_date",
            "status", "client_id", "lead_id", "agent_id",
        ),
        ("created_at", "updated_at"),
    ),
    "commissions": TableSpec(
        "commissions",
        (
            "name", "policy_number", "client_id", "broker_id", "amount",
            "status", "type", "policy_start_date", "policy_end_date",
            "payment_date", "carrier", "policy_type", "notes",
        ),
    ),
    "clients": TableSpec("clients", ("name", "email", "phone", "status", "agent_id", "lead_id")),
    "leads": TableSpec("leads", ("first_name", "last_name", "email", "phone", "status", "agent_id")),
    "users": TableSpec("users", ("username", "full_name", "email", "role"), ()),
    "updates": TableSpec("updates", ("title", "message", "type", "date", "link", "link_text"), ()),
}

# Deleting an agent clears these references instead of deleting the rows.
AGENT_REFERENCES: Tuple[Tuple[str, str], ...] = (
    ("leads", "agent_id"),
    ("clients", "agent_id"),
    ("policies", "agent_id"),
    ("agents", "upline_agent_id"),
)


def table_spec(entity: str) -> TableSpec:
    try:
        return TABLES[entity]
    except KeyError:
        raise ValueError(f"Unknown entity type: {entity}") from None


def _cols(names) -> str:
    return ",".join(f"`{c}`" for c in names)


def _conflict(entity: str, e: pymysql.err.IntegrityError) -> ConflictError:
    return ConflictError(f"{entity} collides with an existing record: {e.args[1] if len(e.args) > 1 else e}")


class RecordRepository:
    def __init__(self, conn_factory: Callable[[], Any] = get_conn):
        self._conn_factory = conn_factory

    def ping(self) -> None:
        conn = self._conn_factory()
        try:
            with conn.cursor() as cur:
                cur.execute("SELECT 1")
                cur.fetchone()
        finally:
            conn.close()

    def list(
        self,
        entity: str,
        filters: Optional[Mapping[str, Any]] = None,
        limit: Optional[int] = None,
        offset: int = 0,
    ) -> List[Dict[str, Any]]:
        """Every matching row in id order; limit/offset select a page."""
        spec = table_spec(entity)
        sql = f"SELECT {_cols(spec.selectable)} FROM `{spec.table}` WHERE 1=1"
        params: List[Any] = []
        for col, val in (filters or {}).items():
            if col not in spec.selectable:
                raise ValueError(f"Cannot filter {entity} by {col}")
            if val is None:
                sql += f" AND `{col}` IS NULL"
            else:
                sql += f" AND `{col}`=%s"; params.append(val)
        sql += " ORDER BY `id` ASC"
        if limit is not None or offset:
            sql += " LIMIT %s OFFSET %s"
            params.extend([_NO_LIMIT if limit is None else limit, offset])

        conn = self._conn_factory()
        try:
            with conn.cursor() as cur:
                cur.execute(sql, tuple(params))
                return list(cur.fetchall() or [])
        finally:
            conn.close()

    def get(self, entity: str, record_id: int) -> Optional[Dict[str, Any]]:
        spec = table_spec(entity)
        conn = self._conn_factory()
        try:
            with conn.cursor() as cur:
                cur.execute(
                    f"SELECT {_cols(spec.selectable)} FROM `{spec.table}` WHERE `id`=%s",
                    (record_id,),
                )
                return cur.fetchone()
        finally:
            conn.close()

    def create(self, entity: str, values: Mapping[str, Any]) -> Dict[str, Any]:
        spec = table_spec(entity)
        cols = [c for c in spec.columns if c in values]
        names = cols + list(spec.timestamps)
        placeholders = ["%s"] * len(cols) + ["NOW()"] * len(spec.timestamps)
        sql = f"INSERT INTO `{spec.table}` ({_cols(names)}) VALUES ({','.join(placeholders)})"

        conn = self._conn_factory()
        try:
            with conn.cursor() as cur:
                cur.execute(sql, tuple(values[c] for c in cols))
                new_id = cur.lastrowid
            conn.commit()
        except pymysql.err.IntegrityError as e:
            if e.args and e.args[0] == ER_DUP_ENTRY:
                raise _conflict(entity, e) from e
            raise
        finally:
            conn.close()
        logger.info("Created %s #%s", entity, new_id)
        return self.get(entity, new_id) or {"id": new_id, **values}

    def update(self, entity: str, record_id: int, values: Mapping[str, Any]) -> Optional[Dict[str, Any]]:
        """Partial update; returns the merged row, or None when the id does not exist."""
        spec = table_spec(entity)
        if self.get(entity, record_id) is None:
            return None
        sets: List[str] = []
        vals: List[Any] = []
        for col in spec.columns:
            if col in values:
                sets.append(f"`{col}`=%s")
                vals.append(values[col])
        if not sets:
            return self.get(entity, record_id)
        if "updated_at" in spec.timestamps:
            sets.append("`updated_at`=NOW()")
        vals.append(record_id)

        conn = self._conn_factory()
        try:
            with conn.cursor() as cur:
                cur.execute(f"UPDATE `{spec.table}` SET {', '.join(sets)} WHERE `id`=%s", tuple(vals))
            conn.commit()
        except pymysql.err.IntegrityError as e:
            if e.args and e.args[0] == ER_DUP_ENTRY:
                raise _conflict(entity, e) from e
            raise
        finally:
            conn.close()
        return self.get(entity, record_id)

    def delete(self, entity: str, record_id: int) -> bool:
        """Returns False when nothing was deleted."""
        spec = table_spec(entity)
        conn = self._conn_factory()
        try:
            with conn.cursor() as cur:
                if entity == "agents":
                    for table, col in AGENT_REFERENCES:
                        cur.execute(
                            f"UPDATE `{table}` SET `{col}`=NULL WHERE `{col}`=%s",
                            (record_id,),
                        )
                cur.execute(f"DELETE FROM `{spec.table}` WHERE `id`=%s", (record_id,))
                deleted = cur.rowcount > 0
            conn.commit()
        finally:
            conn.close()
        if deleted:
            logger.info("Deleted %s #%s", entity, record_id)
        return deleted


def get_repository() -> RecordRepository:
    """FastAPI dependency; tests override it with an in-memory store."""
    return RecordRepository()
