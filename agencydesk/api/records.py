# agencydesk/api/records.py
"""CRUD routers for clients, leads, updates and users. Lead edits flow on to the linked client."""
from __future__ import annotations

from typing import Any, Callable, Dict, List, Mapping, Optional

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
from agencydesk.services.client_sync import sync_lead_to_client
from agencydesk.store.repository import RecordRepository

# (repo, record_id, payload) run after a successful PATCH
AfterUpdate = Callable[[RecordRepository, int, Mapping[str, Any]], Any]


def _add_reads(router: APIRouter, entity: str) -> None:
    @router.get("", name=f"list_{entity}")
    def list_records(request: Request, repo: Repo, page: Page) -> List[Dict[str, Any]]:
        filters = query_filters(entity, request.query_params)
        return to_wire_list(entity, repo.list(entity, filters, limit=page.limit, offset=page.offset))


def _add_by_agent(router: APIRouter, entity: str) -> None:
    @router.get("/by-agent/{agent_id}", name=f"{entity}_by_agent")
    def by_agent(agent_id: int, repo: Repo) -> List[Dict[str, Any]]:
        if agent_id <= 0:
            return []
        return to_wire_list(entity, repo.list(entity, {"agent_id": agent_id}))


def _add_detail(router: APIRouter, entity: str) -> None:
    @router.get("/{record_id}", name=f"get_{entity}")
    def get_record(record_id: int, repo: Repo) -> Dict[str, Any]:
        return to_wire(entity, fetch_or_404(repo, entity, record_id))


def _add_writes(router: APIRouter, entity: str, after_update: Optional[AfterUpdate] = None) -> None:
    @router.post("", status_code=201, name=f"create_{entity}")
    def create(repo: Repo, payload: Dict[str, Any] = Body(...)) -> Dict[str, Any]:
        return create_record(repo, entity, payload)

    @router.patch("/{record_id}", name=f"update_{entity}")
    def update(record_id: int, repo: Repo, payload: Dict[str, Any] = Body(...)) -> Dict[str, Any]:
        record = update_record(repo, entity, record_id, payload)
        if after_update is not None:
            after_update(repo, record_id, payload)
        return record

    @router.delete("/{record_id}", status_code=204, name=f"delete_{entity}")
    def delete(record_id: int, repo: Repo) -> Response:
        delete_record(repo, entity, record_id)
        return Response(status_code=204)


clients_router = APIRouter(prefix="/clients", tags=["Clients"])
_add_reads(clients_router, "clients")
_add_by_agent(clients_router, "clients")
_add_detail(clients_router, "clients")
_add_writes(clients_router, "clients")

leads_router = APIRouter(prefix="/leads", tags=["Leads"])
_add_reads(leads_router, "leads")
_add_by_agent(leads_router, "leads")
_add_detail(leads_router, "leads")
_add_writes(leads_router, "leads", after_update=sync_lead_to_client)

updates_router = APIRouter(prefix="/updates", tags=["Updates"])
_add_reads(updates_router, "updates")
_add_detail(updates_router, "updates")
_add_writes(updates_router, "updates")

# Broker directory is read-only
users_router = APIRouter(prefix="/users", tags=["Users"])
_add_reads(users_router, "users")
_add_detail(users_router, "users")

routers = (clients_router, leads_router, updates_router, users_router)
