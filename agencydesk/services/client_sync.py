# agencydesk/services/client_sync.py
"""
Keeps client records in step with the leads they were converted from.

- A lead edit carries its name, contact details and agent over to the client
  linked to that lead (clients.lead_id).
- A policy written without a client but with a lead gets the lead's client.
"""
from __future__ import annotations

import logging
from typing import Any, Dict, Mapping, Optional

from agencydesk.store.repository import RecordRepository

logger = logging.getLogger(__name__)

# lead wire field -> client column
LEAD_TO_CLIENT = {
    "email": "email",
    "phone": "phone",
    "agentId": "agent_id",
}


def client_for_lead(repo: RecordRepository, lead_id: Optional[int]) -> Optional[Dict[str, Any]]:
    if not lead_id:
        return None
    rows = repo.list("clients", {"lead_id": lead_id}, limit=1)
    return rows[0] if rows else None


def sync_lead_to_client(repo: RecordRepository, lead_id: int,
                        changes: Mapping[str, Any]) -> Optional[Dict[str, Any]]:
    """Apply a lead edit to its client. Returns the updated client row, or None if the lead has none."""
    client = client_for_lead(repo, lead_id)
    if client is None:
        return None
    lead = repo.get("leads", lead_id)
    if lead is None:
        return None

    values: Dict[str, Any] = {}
    full_name = f"{lead.get('first_name') or ''} {lead.get('last_name') or ''}".strip()
    if full_name and full_name != client.get("name"):
        values["name"] = full_name
    for field, column in LEAD_TO_CLIENT.items():
        if field in changes:
            values[column] = lead.get(column)
    if not values:
        return client

    logger.info("Syncing client #%s from lead #%s (%s)", client["id"], lead_id, ", ".join(sorted(values)))
    return repo.update("clients", client["id"], values)


def associate_policy_with_client(repo: RecordRepository, policy_id: int) -> Optional[Dict[str, Any]]:
    """
    Fill in client_id from the policy's lead.

    Returns the updated policy row, or None when nothing changed (the policy
    already has a client, has no lead, or its lead has no client yet).
    """
    policy = repo.get("policies", policy_id)
    if policy is None or policy.get("client_id"):
        return None
    client = client_for_lead(repo, policy.get("lead_id"))
    if client is None:
        return None
    logger.info("Associated policy #%s with client #%s via lead #%s",
                policy_id, client["id"], policy["lead_id"])
    return repo.update("policies", policy_id, {"client_id": client["id"]})
