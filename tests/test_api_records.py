# tests/test_api_records.py
from __future__ import annotations

from http import HTTPStatus

import pytest

pytestmark = pytest.mark.unit

POLICY = {
    "policyNumber": "WL-77",
    "carrier": "Acme Life",
    "policyType": "Whole Life",
    "faceAmount": "100000",
    "premiumAmount": "120.00",
    "premiumFrequency": "semi-annual",
    "issueDate": "2025-02-01",
    "status": "pending",
}


def test_policy_crud(client):
    r = client.post("/api/policies", json=POLICY)
    assert r.status_code == HTTPStatus.CREATED
    pid = r.json()["id"]

    r = client.patch(f"/api/policies/{pid}", json={"status": "active"})
    assert r.status_code == HTTPStatus.OK
    assert r.json()["status"] == "active"
    assert r.json()["premiumFrequency"] == "semi-annual"

    assert client.delete(f"/api/policies/{pid}").status_code == HTTPStatus.NO_CONTENT
    assert client.get(f"/api/policies/{pid}").status_code == HTTPStatus.NOT_FOUND


def test_policy_number_unique_per_carrier(client):
    assert client.post("/api/policies", json=POLICY).status_code == HTTPStatus.CREATED
    assert client.post("/api/policies", json=POLICY).status_code == HTTPStatus.CONFLICT
    other = {**POLICY, "carrier": "Other Mutual"}
    r = client.post("/api/policies", json=other)
    assert r.status_code == HTTPStatus.CREATED

    r = client.patch(f"/api/policies/{r.json()['id']}", json={"carrier": "Acme Life"})
    assert r.status_code == HTTPStatus.CONFLICT


def test_policies_by_agent_zero_is_empty(client):
    r = client.get("/api/policies/by-agent/0")
    assert r.status_code == HTTPStatus.OK
    assert r.json() == []


def test_commission_defaults_and_detail(client):
    r = client.post("/api/commissions", json={
        "policyNumber": "P-9", "clientId": "4", "brokerId": 2, "amount": "75",
        "policyStartDate": "2025-03-03", "policyType": "Term Life",
    })
    assert r.status_code == HTTPStatus.CREATED
    body = r.json()
    assert body["clientId"] == 4
    assert body["status"] == "pending"
    assert body["type"] == "initial"
    assert client.get(f"/api/commissions/{body['id']}").json()["amount"] == "75"


def test_commission_stats_reports_unparsable(client, make_commission):
    make_commission("abc")
    make_commission("10", status="paid")
    stats = client.get("/api/commissions/stats").json()
    assert stats["totalCommissions"] == 2
    assert stats["paidAmount"] == "$10.00"
    assert len(stats["unparsableIds"]) == 1


def test_leads_and_clients_by_agent(client, repo, make_agent):
    agent = make_agent()
    repo.create("leads", {"first_name": "Lee", "last_name": "Dee", "agent_id": agent["id"]})
    repo.create("clients", {"name": "Cal", "agent_id": agent["id"]})
    repo.create("clients", {"name": "Other"})

    assert [lead["firstName"] for lead in client.get(f"/api/leads/by-agent/{agent['id']}").json()] == ["Lee"]
    assert [c["name"] for c in client.get(f"/api/clients/by-agent/{agent['id']}").json()] == ["Cal"]


def test_updates_crud_and_validation(client):
    r = client.post("/api/updates", json={"title": "Webinar", "message": "Join us", "type": "training",
                                          "linkText": "Register"})
    assert r.status_code == HTTPStatus.CREATED
    assert r.json()["linkText"] == "Register"

    r = client.post("/api/updates", json={"title": "x", "message": "y", "type": "gossip"})
    assert r.status_code == HTTPStatus.UNPROCESSABLE_ENTITY
    assert "type" in r.json()["fields"]


def test_users_are_read_only(client, repo):
    user = repo.create("users", {"username": "broker1", "full_name": "Bo Broker", "role": "broker"})
    assert client.get(f"/api/users/{user['id']}").json()["fullName"] == "Bo Broker"
    assert client.post("/api/users", json={"username": "x"}).status_code == HTTPStatus.METHOD_NOT_ALLOWED
    assert client.delete(f"/api/users/{user['id']}").status_code == HTTPStatus.METHOD_NOT_ALLOWED


def test_health_endpoints(client):
    assert client.get("/healthz").json()["status"] == "ok"
    r = client.get("/readyz")
    assert r.status_code == HTTPStatus.OK
    assert r.json()["db"] == "ok"


def test_readyz_reports_db_failure(client, repo, monkeypatch):
    def _down():
        raise ConnectionError("db unreachable")

    monkeypatch.setattr(repo, "ping", _down)
    r = client.get("/readyz")
    assert r.status_code == HTTPStatus.SERVICE_UNAVAILABLE


def test_list_routes_page_with_limit_and_offset(client, make_commission):
    for amount in range(1, 8):
        make_commission(str(amount))

    assert len(client.get("/api/commissions").json()) == 7
    page = client.get("/api/commissions", params={"limit": 3, "offset": 3}).json()
    assert [c["amount"] for c in page] == ["4", "5", "6"]
    assert client.get("/api/commissions", params={"limit": 0}).status_code == HTTPStatus.UNPROCESSABLE_ENTITY


def test_invalid_duplicate_policy_is_a_validation_error(client):
    assert client.post("/api/policies", json=POLICY).status_code == HTTPStatus.CREATED
    r = client.post("/api/policies", json={**POLICY, "premiumFrequency": "weekly"})
    assert r.status_code == HTTPStatus.UNPROCESSABLE_ENTITY
    assert "premiumFrequency" in r.json()["fields"]


def test_lead_edit_updates_linked_client(client, repo, make_agent):
    agent = make_agent()
    lead = repo.create("leads", {"first_name": "Lee", "last_name": "Dee", "email": "lee@old.test"})
    linked = repo.create("clients", {"name": "Lee Dee", "email": "lee@old.test", "lead_id": lead["id"]})
    other = repo.create("clients", {"name": "Unrelated"})

    r = client.patch(f"/api/leads/{lead['id']}", json={
        "lastName": "Day", "email": "lee@new.test", "agentId": agent["id"],
    })
    assert r.status_code == HTTPStatus.OK

    synced = client.get(f"/api/clients/{linked['id']}").json()
    assert synced["name"] == "Lee Day"
    assert synced["email"] == "lee@new.test"
    assert synced["agentId"] == agent["id"]
    assert synced["leadId"] == lead["id"]
    assert repo.get("clients", other["id"])["name"] == "Unrelated"


def test_lead_without_client_edits_cleanly(client, repo):
    lead = repo.create("leads", {"first_name": "Solo", "last_name": "Lead"})
    r = client.patch(f"/api/leads/{lead['id']}", json={"phone": "555-0100"})
    assert r.status_code == HTTPStatus.OK
    assert repo.list("clients") == []


def test_policy_from_lead_is_linked_to_its_client(client, repo):
    lead = repo.create("leads", {"first_name": "Lee", "last_name": "Dee"})
    linked = repo.create("clients", {"name": "Lee Dee", "lead_id": lead["id"]})

    r = client.post("/api/policies", json={**POLICY, "leadId": lead["id"]})
    assert r.status_code == HTTPStatus.CREATED
    assert r.json()["clientId"] == linked["id"]
    assert [p["policyNumber"] for p in client.get(f"/api/policies/by-client/{linked['id']}").json()] == ["WL-77"]


def test_explicit_policy_client_is_kept(client, repo):
    lead = repo.create("leads", {"first_name": "Lee", "last_name": "Dee"})
    repo.create("clients", {"name": "Lee Dee", "lead_id": lead["id"]})
    chosen = repo.create("clients", {"name": "Chosen"})

    r = client.post("/api/policies", json={**POLICY, "leadId": lead["id"], "clientId": chosen["id"]})
    assert r.json()["clientId"] == chosen["id"]
