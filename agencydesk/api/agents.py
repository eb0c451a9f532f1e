# agencydesk/api/agents.py
from __future__ import annotations

import logging
from datetime import date
from typing import Any, Dict, List, Optional

from fastapi import APIRouter, Body, Request, Response

from agencydesk import config
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
from agencydesk.errors import ValidationError
from agencydesk.schemas import PAYMENT_METHOD, Agent
from agencydesk.services.money import parse_amount_detailed
from agencydesk.store.repository import RecordRepository

logger = logging.getLogger(__name__)

router = APIRouter(
    prefix="/agents",
    tags=["Agents"],
)

PLACEHOLDER_NOTES = "Created with simplified process. Update with complete details."
PLACEHOLDER_PHONE = "000-000-0000"

BANKING_FIELDS = ("bankName", "bankAccountType", "bankAccountNumber", "bankRoutingNumber")


def _check_upline(repo: RecordRepository, agent_id: Optional[int], upline_id: Any) -> None:
    """The upline must exist, must not be the agent itself and must not lead back to it."""
    if upline_id in (None, ""):
        return
    try:
        upline_id = int(upline_id)
    except (TypeError, ValueError):
        raise ValidationError.from_fields({"uplineAgentId": "uplineAgentId must be an integer"}) from None
    if agent_id is not None and upline_id == agent_id:
        raise ValidationError.from_fields({"uplineAgentId": "an agent cannot be its own upline"})
    seen = set()
    current: Optional[int] = upline_id
    while current is not None:
        if current in seen:
            break
        seen.add(current)
        row = repo.get("agents", current)
        if row is None:
            if current == upline_id:
                raise ValidationError.from_fields({"uplineAgentId": f"agent {upline_id} does not exist"})
            break
        if agent_id is not None and row.get("upline_agent_id") == agent_id:
            raise ValidationError.from_fields({"uplineAgentId": "upline chain would form a cycle"})
        current = row.get("upline_agent_id")


def _is_simplified(payload: Dict[str, Any]) -> bool:
    return bool(payload.get("firstName")) and bool(payload.get("lastName")) and not payload.get("licenseNumber")


@router.get("")
def list_agents(request: Request, repo: Repo, page: Page) -> List[Dict[str, Any]]:
    filters = query_filters("agents", request.query_params)
    return to_wire_list("agents", repo.list("agents", filters, limit=page.limit, offset=page.offset))


@router.get("/missing-banking-info")
def agents_missing_banking_info(repo: Repo) -> List[Dict[str, Any]]:
    out: List[Dict[str, Any]] = []
    for row in repo.list("agents"):
        agent = Agent.model_validate(row)
        if agent.has_banking_info:
            continue
        out.append({
            "id": agent.id,
            "fullName": agent.full_name or "Unknown",
            "email": agent.email or "",
            "bankInfoExists": False,
        })
    return out


@router.get("/upline/{upline_id}")
def agents_by_upline(upline_id: int, repo: Repo) -> List[Dict[str, Any]]:
    return to_wire_list("agents", repo.list("agents", {"upline_agent_id": upline_id}))


@router.get("/{agent_id}")
def get_agent(agent_id: int, repo: Repo) -> Dict[str, Any]:
    return to_wire("agents", fetch_or_404(repo, "agents", agent_id))


@router.post("", status_code=201)
def create_agent(repo: Repo, payload: Dict[str, Any] = Body(...)) -> Dict[str, Any]:
    _check_upline(repo, None, payload.get("uplineAgentId"))
    defaults: Dict[str, Any] = {
        "commission_percentage": config.DEFAULT_COMMISSION_PERCENTAGE,
        "bank_payment_method": PAYMENT_METHOD,
    }
    if _is_simplified(payload):
        logger.info("Simplified agent creation for %s %s", payload.get("firstName"), payload.get("lastName"))
        today = date.today()
        try:
            expires = today.replace(year=today.year + 1)
        except ValueError:  # Feb 29
            expires = today.replace(year=today.year + 1, day=28)
        defaults.update({
            "phone": PLACEHOLDER_PHONE,
            "license_expiration": expires.isoformat(),
            "notes": PLACEHOLDER_NOTES,
        })
    created = create_record(repo, "agents", payload, defaults)
    if _is_simplified(payload):
        row = repo.update("agents", created["id"], {"license_number": f"TEMP-{created['id']}"})
        if row is not None:
            created = to_wire("agents", row)
    return created


@router.patch("/{agent_id}")
def update_agent(agent_id: int, repo: Repo, payload: Dict[str, Any] = Body(...)) -> Dict[str, Any]:
    fetch_or_404(repo, "agents", agent_id)
    if "uplineAgentId" in payload:
        _check_upline(repo, agent_id, payload.get("uplineAgentId"))
    if "bankPaymentMethod" in payload:
        payload = {**payload, "bankPaymentMethod": PAYMENT_METHOD}
    return update_record(repo, "agents", agent_id, payload)


@router.patch("/{agent_id}/commission")
def update_agent_commission(agent_id: int, repo: Repo, payload: Dict[str, Any] = Body(...)) -> Dict[str, Any]:
    raw = payload.get("commissionPercentage")
    parsed = parse_amount_detailed(raw)
    if raw in (None, "") or not parsed.ok:
        raise ValidationError.from_fields({"commissionPercentage": "Invalid commission percentage"})
    if parsed.value < 0 or parsed.value > 100:
        raise ValidationError.from_fields(
            {"commissionPercentage": "Commission must be between 0 and 100 percent"}
        )
    return update_record(repo, "agents", agent_id, {"commissionPercentage": str(raw)})


@router.patch("/{agent_id}/banking-info")
def update_agent_banking_info(agent_id: int, repo: Repo, payload: Dict[str, Any] = Body(...)) -> Dict[str, Any]:
    fetch_or_404(repo, "agents", agent_id)
    update = {k: payload[k] for k in BANKING_FIELDS if k in payload}
    if not update:
        raise ValidationError("No banking information fields provided", {f: "missing" for f in BANKING_FIELDS})
    # Payment method is always direct deposit, whatever was sent.
    update["bankPaymentMethod"] = PAYMENT_METHOD
    return update_record(repo, "agents", agent_id, update)


@router.delete("/{agent_id}", status_code=204)
def delete_agent(agent_id: int, repo: Repo) -> Response:
    delete_record(repo, "agents", agent_id)
    return Response(status_code=204)
