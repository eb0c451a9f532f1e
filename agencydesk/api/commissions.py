# agencydesk/api/commissions.py
from __future__ import annotations

import logging
from typing import Any, Dict, List

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
from agencydesk.schemas import Commission, CommissionStatus, CommissionType
from agencydesk.services.aggregator import compute_stats, weekly_totals

logger = logging.getLogger(__name__)

router = APIRouter(
    prefix="/commissions",
    tags=["Commissions"],
)


def _commissions(repo, filters=None) -> List[Commission]:
    return [Commission.model_validate(r) for r in repo.list("commissions", filters)]


@router.get("")
def list_commissions(request: Request, repo: Repo, page: Page) -> List[Dict[str, Any]]:
    filters = query_filters("commissions", request.query_params)
    return to_wire_list("commissions", repo.list("commissions", filters, limit=page.limit, offset=page.offset))


@router.get("/stats")
def commission_stats(repo: Repo) -> Dict[str, Any]:
    stats = compute_stats(_commissions(repo))
    if stats.unparsable_ids:
        logger.warning("Commission stats counted %d unparsable amounts as zero", len(stats.unparsable_ids))
    return stats.to_wire()


@router.get("/weekly/by-agent/{agent_id}")
def weekly_commissions_by_agent(agent_id: int, repo: Repo) -> List[Dict[str, Any]]:
    weeks = weekly_totals(_commissions(repo, {"broker_id": agent_id}), broker_id=agent_id)
    return [w.to_wire() for w in weeks]


@router.get("/{commission_id}")
def get_commission(commission_id: int, repo: Repo) -> Dict[str, Any]:
    return to_wire("commissions", fetch_or_404(repo, "commissions", commission_id))


@router.post("", status_code=201)
def create_commission(repo: Repo, payload: Dict[str, Any] = Body(...)) -> Dict[str, Any]:
    defaults = {"status": CommissionStatus.PENDING.value, "type": CommissionType.INITIAL.value}
    return create_record(repo, "commissions", payload, defaults)


@router.patch("/{commission_id}")
def update_commission(commission_id: int, repo: Repo, payload: Dict[str, Any] = Body(...)) -> Dict[str, Any]:
    return update_record(repo, "commissions", commission_id, payload)


@router.delete("/{commission_id}", status_code=204)
def delete_commission(commission_id: int, repo: Repo) -> Response:
    delete_record(repo, "commissions", commission_id)
    return Response(status_code=204)
