# tests/test_store_client.py
from __future__ import annotations

from http import HTTPStatus

import httpx
import pytest

from agencydesk.client.store_client import DELETE, DeleteResult, RecordStoreClient
from agencydesk.errors import ConflictError, NotFoundError, TransportError, ValidationError
from agencydesk.schemas import Agent, CommissionStats, Policy

pytestmark = pytest.mark.unit


def _mock_client(handler) -> RecordStoreClient:
    http = httpx.Client(base_url="http://records.test", transport=httpx.MockTransport(handler))
    return RecordStoreClient(http=http)


def test_create_get_and_list_agents_round_trip(store):
    created = store.create("agents", {"firstName": "Ann", "lastName": "Lee", "licenseNumber": "L-1"})
    assert isinstance(created, Agent)
    assert created.id > 0
    assert created.commission_percentage == "70.00"

    fetched = store.get("agents", created.id)
    assert fetched.full_name == "Ann Lee"
    assert [a.id for a in store.list("agents")] == [created.id]


def test_update_is_a_partial_merge(store, make_agent):
    row = make_agent(email="ann@example.com")
    updated = store.update("agents", row["id"], {"phone": "555-0100"})
    assert updated.phone == "555-0100"
    assert updated.email == "ann@example.com"


def test_get_missing_raises_not_found(store):
    with pytest.raises(NotFoundError):
        store.get("agents", 404)


def test_update_missing_raises_not_found(store):
    with pytest.raises(NotFoundError):
        store.update("agents", 404, {"phone": "1"})


def test_create_invalid_raises_validation_error_with_fields(store, repo):
    with pytest.raises(ValidationError) as ei:
        store.create("agents", {"firstName": "", "lastName": "Smith"})
    assert "firstName" in ei.value.fields
    assert repo.list("agents") == []


def test_delete_is_idempotent(store, make_agent):
    events = []
    store.add_mutation_listener(events.append)
    row = make_agent()

    first = store.delete("agents", row["id"])
    second = store.delete("agents", row["id"])
    missing = store.delete("agents", 9999)

    assert first == DeleteResult("agents", row["id"], True)
    assert second.existed is False
    assert missing == DeleteResult("agents", 9999, False)
    assert [e.kind for e in events] == [DELETE, DELETE, DELETE]


def test_list_by_agent(store, repo, make_agent):
    agent = make_agent()
    repo.create("policies", {"policy_number": "A1", "carrier": "Acme", "policy_type": "Term Life",
                             "status": "active", "agent_id": agent["id"]})
    repo.create("policies", {"policy_number": "A2", "carrier": "Acme", "policy_type": "Term Life",
                             "status": "active"})
    policies = store.list_by("policies", "agent", agent["id"])
    assert [p.policy_number for p in policies] == ["A1"]
    assert all(isinstance(p, Policy) for p in policies)
    assert store.list_by("policies", "agent", 0) == []


def test_duplicate_policy_raises_conflict(store):
    payload = {
        "policyNumber": "TL-1", "carrier": "Acme", "policyType": "Term Life",
        "faceAmount": "1000", "premiumAmount": "10", "premiumFrequency": "monthly",
        "issueDate": "2025-01-01", "status": "active",
    }
    store.create("policies", payload)
    with pytest.raises(ConflictError):
        store.create("policies", payload)


def test_commission_stats_and_weekly(store, make_commission):
    make_commission("$100.00", status="pending", broker_id=5, payment_date="2025-01-07")
    make_commission("$200.00", status="paid", broker_id=5, payment_date="2025-01-14")
    stats = store.commission_stats()
    assert isinstance(stats, CommissionStats)
    assert stats.pending_amount == "$100.00"
    assert stats.paid_amount == "$200.00"
    assert stats.total_commissions == 2

    weeks = store.weekly_commissions_by_agent(5)
    assert [(w.week_start, w.amount) for w in weeks] == [("2025-01-13", "200.00"), ("2025-01-06", "100.00")]


def test_mutation_listener_sees_created_id(store):
    events = []
    store.add_mutation_listener(events.append)
    created = store.create("clients", {"name": "Jo Client"})
    assert events[0].entity == "clients"
    assert events[0].record_id == created.id


# ----- transport behaviour -----

def test_connection_error_becomes_transport_error():
    def handler(request):
        raise httpx.ConnectError("connection refused", request=request)

    store = _mock_client(handler)
    with pytest.raises(TransportError) as ei:
        store.list("agents")
    assert "connection refused" in ei.value.message


def test_server_error_becomes_transport_error_with_status():
    store = _mock_client(lambda request: httpx.Response(HTTPStatus.BAD_GATEWAY, json={"detail": "upstream"}))
    with pytest.raises(TransportError) as ei:
        store.get("agents", 1)
    assert ei.value.status_code == HTTPStatus.BAD_GATEWAY


def test_non_json_body_becomes_transport_error():
    store = _mock_client(lambda request: httpx.Response(200, text="<html>oops</html>"))
    with pytest.raises(TransportError):
        store.list("agents")


def test_null_list_body_is_empty_list():
    store = _mock_client(lambda request: httpx.Response(200, json=None))
    assert store.list("leads") == []


def test_fastapi_style_422_fields_are_extracted():
    body = {"detail": [{"loc": ["body", "lastName"], "msg": "field required"}]}
    store = _mock_client(lambda request: httpx.Response(422, json=body))
    with pytest.raises(ValidationError) as ei:
        store.create("agents", {"firstName": "A"})
    assert ei.value.fields == {"lastName": "field required"}


def test_update_uses_patch():
    seen = []

    def handler(request):
        seen.append((request.method, request.url.path))
        return httpx.Response(200, json={"id": 3, "firstName": "A", "lastName": "B"})

    store = _mock_client(handler)
    store.update("agents", 3, {"firstName": "A"})
    assert seen == [("PATCH", "/api/agents/3")]
