# tests/conftest.py
from __future__ import annotations

import copy
import itertools
from datetime import datetime
from typing import Any, Dict, List, Mapping, Optional

import pytest
from starlette.testclient import TestClient

from agencydesk.client import connect
from agencydesk.client.notifications import CollectingSink
from agencydesk.client.store_client import RecordStoreClient
from agencydesk.main import app
from agencydesk.store.repository import AGENT_REFERENCES, RecordRepository, get_repository, table_spec


class InMemoryRepository(RecordRepository):
    """Same contract as RecordRepository, backed by dicts instead of MySQL."""

    def __init__(self) -> None:
        super().__init__(conn_factory=lambda: None)
        self.tables: Dict[str, Dict[int, Dict[str, Any]]] = {}
        self._ids = itertools.count(1)

    def _table(self, entity: str) -> Dict[int, Dict[str, Any]]:
        table_spec(entity)
        return self.tables.setdefault(entity, {})

    def ping(self) -> None:
        return None

    def list(self, entity: str, filters: Optional[Mapping[str, Any]] = None,
             limit: Optional[int] = None, offset: int = 0) -> List[Dict[str, Any]]:
        spec = table_spec(entity)
        rows = []
        for rid in sorted(self._table(entity)):
            row = self._table(entity)[rid]
            ok = True
            for col, val in (filters or {}).items():
                if col not in spec.selectable:
                    raise ValueError(f"Cannot filter {entity} by {col}")
                if row.get(col) != val:
                    ok = False
                    break
            if ok:
                rows.append(copy.deepcopy(row))
        return rows[offset:] if limit is None else rows[offset:offset + limit]

    def get(self, entity: str, record_id: int) -> Optional[Dict[str, Any]]:
        row = self._table(entity).get(record_id)
        return copy.deepcopy(row) if row is not None else None

    def create(self, entity: str, values: Mapping[str, Any]) -> Dict[str, Any]:
        spec = table_spec(entity)
        new_id = next(self._ids)
        row: Dict[str, Any] = {"id": new_id}
        row.update({c: values[c] for c in spec.columns if c in values})
        for ts in spec.timestamps:
            row[ts] = datetime(2025, 1, 1, 12, 0, 0)
        self._table(entity)[new_id] = row
        return copy.deepcopy(row)

    def update(self, entity: str, record_id: int, values: Mapping[str, Any]) -> Optional[Dict[str, Any]]:
        spec = table_spec(entity)
        row = self._table(entity).get(record_id)
        if row is None:
            return None
        row.update({c: values[c] for c in spec.columns if c in values})
        return copy.deepcopy(row)

    def delete(self, entity: str, record_id: int) -> bool:
        table = self._table(entity)
        if record_id not in table:
            return False
        if entity == "agents":
            for ref_entity, col in AGENT_REFERENCES:
                for row in self._table(ref_entity).values():
                    if row.get(col) == record_id:
                        row[col] = None
        del table[record_id]
        return True


@pytest.fixture
def repo() -> InMemoryRepository:
    return InMemoryRepository()


@pytest.fixture
def client(repo):
    app.dependency_overrides[get_repository] = lambda: repo
    with TestClient(app) as c:
        yield c
    app.dependency_overrides.pop(get_repository, None)


@pytest.fixture
def store(client) -> RecordStoreClient:
    return RecordStoreClient(http=client)


@pytest.fixture
def sink() -> CollectingSink:
    return CollectingSink()


@pytest.fixture
def desk(client, sink):
    return connect(http=client, notifier=sink)


@pytest.fixture
def make_agent(repo):
    def _make(first: str = "Ann", last: str = "Lee", **extra: Any) -> Dict[str, Any]:
        return repo.create("agents", {"first_name": first, "last_name": last, **extra})
    return _make


@pytest.fixture
def make_commission(repo):
    def _make(amount: str = "100.00", **extra: Any) -> Dict[str, Any]:
        values = {
            "policy_number": "P-1",
            "client_id": 1,
            "broker_id": 1,
            "amount": amount,
            "status": "pending",
            "type": "initial",
            "policy_start_date": "2025-01-06",
            "policy_type": "Term Life",
        }
        values.update(extra)
        return repo.create("commissions", values)
    return _make
