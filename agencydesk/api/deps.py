# agencydesk/api/deps.py
"""Shared plumbing for the record routers: repository dependency and wire <-> row mapping."""
from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Dict, List, Mapping, Optional, Annotated

from fastapi import Depends, Query
from pydantic.alias_generators import to_snake

from agencydesk.errors import NotFoundError, ValidationError
from agencydesk.schemas import RECORD_TYPES
from agencydesk.services.validation import validate_payload
from agencydesk.store.repository import RecordRepository, get_repository, table_spec

MAX_PAGE_SIZE = 5000


@dataclass(frozen=True)
class PageParams:
    limit: Optional[int]      # None: every remaining row
    offset: int


def page_params(
    limit: Optional[int] = Query(None, ge=1, le=MAX_PAGE_SIZE),
    offset: int = Query(0, ge=0),
) -> PageParams:
    return PageParams(limit, offset)


# ----- Annotated aliases -----
Repo = Annotated[RecordRepository, Depends(get_repository)]
Page = Annotated[PageParams, Depends(page_params)]

LABELS = {
    "agents": "Agent",
    "policies": "Policy",
    "commissions": "Commission",
    "clients": "Client",
    "leads": "Lead",
    "users": "User",
    "updates": "Update",
}


def _coerce(column: str, value: Any) -> Any:
    if column.endswith("_id") and value not in (None, ""):
        try:
            return int(value)
        except (TypeError, ValueError):
            raise ValidationError.from_fields({column: f"{column} must be an integer"}) from None
    if value == "" and column.endswith("_id"):
        return None
    return value


def to_columns(entity: str, payload: Mapping[str, Any]) -> Dict[str, Any]:
    """camelCase wire payload -> writable snake_case columns. Unknown keys are dropped."""
    spec = table_spec(entity)
    out: Dict[str, Any] = {}
    for key, value in payload.items():
        col = to_snake(key)
        if col in spec.columns:
            out[col] = _coerce(col, value)
    return out


def query_filters(entity: str, params: Mapping[str, str]) -> Dict[str, Any]:
    """Query string -> column filters; keys that are not columns are ignored."""
    spec = table_spec(entity)
    out: Dict[str, Any] = {}
    for key, value in params.items():
        col = to_snake(key)
        if col in spec.selectable:
            out[col] = _coerce(col, value)
    return out


def to_wire(entity: str, row: Mapping[str, Any]) -> Dict[str, Any]:
    return RECORD_TYPES[entity].model_validate(dict(row)).to_wire()


def to_wire_list(entity: str, rows: List[Mapping[str, Any]]) -> List[Dict[str, Any]]:
    return [to_wire(entity, r) for r in rows]


def fetch_or_404(repo: RecordRepository, entity: str, record_id: int) -> Dict[str, Any]:
    row = repo.get(entity, record_id)
    if row is None:
        raise NotFoundError(LABELS.get(entity, entity), record_id)
    return row


def create_record(repo: RecordRepository, entity: str, payload: Mapping[str, Any],
                  defaults: Mapping[str, Any] | None = None) -> Dict[str, Any]:
    validate_payload(entity, payload)
    values = dict(defaults or {})
    values.update(to_columns(entity, payload))
    return to_wire(entity, repo.create(entity, values))


def update_record(repo: RecordRepository, entity: str, record_id: int,
                  payload: Mapping[str, Any]) -> Dict[str, Any]:
    validate_payload(entity, payload, partial=True)
    row = repo.update(entity, record_id, to_columns(entity, payload))
    if row is None:
        raise NotFoundError(LABELS.get(entity, entity), record_id)
    return to_wire(entity, row)


def delete_record(repo: RecordRepository, entity: str, record_id: int) -> None:
    if not repo.delete(entity, record_id):
        raise NotFoundError(LABELS.get(entity, entity), record_id)
