# agencydesk/api/policies.py
from __future__ import annotations

from typing import Any, Dict, List, Optional

from fastapi import APIRouter, Body, Request, Response

from agencydesk.api.deps import (
    Page,
    Repo,
    create_record,
    delete_record,
    fetch_or_404,
    query_filters,
    to_wire,
    to_wire_list,
    update_record,
)
from agencydesk.errors import ConflictError
from agencydesk.services.client_sync import associate_policy_with_client
from agencydesk.services.validation import validate_payload
from agencydesk.store.repository import RecordRepository

router = APIRouter(
    prefix="/policies",
    tags=["Policies"],
)


def _ensure_unique(repo: RecordRepository, carrier: Any, policy_number: Any,
                   exclude_id: Optional[int] = None) -> None:
    """A policy number may appear only once per carrier."""
    if not carrier or not policy_number:
        return
    for row in repo.list("policies", {"carrier": carrier, "policy_number": policy_number}):
        if row.get("id") != exclude_id:
            raise ConflictError(f"Policy {policy_number} already exists for carrier {carrier}")


@router.get("")
def list_policies(request: Request, repo: Repo, page: Page) -> List[Dict[str, Any]]:
    filters = query_filters("policies", request.query_params)
    return to_wire_list("policies", repo.list("policies", filters, limit=page.limit, offset=page.offset))


@router.get("/by-agent/{agent_id}")
def policies_by_agent(agent_id: int, repo: Repo) -> List[Dict[str, Any]]:
    # 0 means "no agent selected yet"
    if agent_id <= 0:
        return []
    return to_wire_list("policies", repo.list("policies", {"agent_id": agent_id}))


@router.get("/by-client/{client_id}")
def policies_by_client(client_id: int, repo: Repo) -> List[Dict[str, Any]]:
    if client_id <= 0:
        return []
    return to_wire_list("policies", repo.list("policies", {"client_id": client_id}))


@router.get("/{policy_id}")
def get_policy(policy_id: int, repo: Repo) -> Dict[str, Any]:
    return to_wire("policies", fetch_or_404(repo, "policies", policy_id))


@router.post("", status_code=201)
def create_policy(repo: Repo, payload: Dict[str, Any] = Body(...)) -> Dict[str, Any]:
    validate_payload("policies", payload)
    _ensure_unique(repo, payload.get("carrier"), payload.get("policyNumber"))
    record = create_record(repo, "policies", payload)
    linked = associate_policy_with_client(repo, record["id"])
    return to_wire("policies", linked) if linked else record


@router.patch("/{policy_id}")
def update_policy(policy_id: int, repo: Repo, payload: Dict[str, Any] = Body(...)) -> Dict[str, Any]:
    current = fetch_or_404(repo, "policies", policy_id)
    validate_payload("policies", payload, partial=True)
    if "carrier" in payload or "policyNumber" in payload:
        _ensure_unique(
            repo,
            payload.get("carrier", current.get("carrier")),
            payload.get("policyNumber", current.get("policy_number")),
            exclude_id=policy_id,
        )
    record = update_record(repo, "policies", policy_id, payload)
    linked = associate_policy_with_client(repo, policy_id)
    return to_wire("policies", linked) if linked else record


@router.delete("/{policy_id}", status_code=204)
def delete_policy(policy_id: int, repo: Repo) -> Response:
    delete_record(repo, "policies", policy_id)
    return Response(status_code=204)
