# agencydesk/client/store_client.py
"""
HTTP client for the record service.

One uniform contract per entity type (list/get/create/update/delete), typed
deserialization into agencydesk.schemas records, and HTTP failures mapped onto
the agencydesk.errors taxonomy. Updates are always PATCH (partial merge).
"""
from __future__ import annotations

import logging
from typing import Any, Callable, Dict, List, NamedTuple, Optional

import httpx
from pydantic import ValidationError as SchemaError

from agencydesk import config
from agencydesk.errors import ConflictError, NotFoundError, TransportError, ValidationError
from agencydesk.schemas import RECORD_TYPES, CommissionStats, Record, WeeklyCommission

logger = logging.getLogger(__name__)

API_PREFIX = "/api"

ENTITY_PATHS: Dict[str, str] = {
    "agents": f"{API_PREFIX}/agents",
    "policies": f"{API_PREFIX}/policies",
    "commissions": f"{API_PREFIX}/commissions",
    "clients": f"{API_PREFIX}/clients",
    "leads": f"{API_PREFIX}/leads",
    "users": f"{API_PREFIX}/users",
    "updates": f"{API_PREFIX}/updates",
}

CREATE = "create"
UPDATE = "update"
DELETE = "delete"


class MutationEvent(NamedTuple):
    entity: str
    kind: str                 # create | update | delete
    record_id: Optional[int]


class DeleteResult(NamedTuple):
    entity: str
    record_id: int
    existed: bool             # False when the record was already gone


MutationListener = Callable[[MutationEvent], None]


def _entity_path(entity: str) -> str:
    try:
        return ENTITY_PATHS[entity]
    except KeyError:
        raise ValueError(f"Unknown entity type: {entity}") from None


def _error_fields(body: Any) -> Dict[str, str]:
    """Field errors from either our {'fields': {...}} shape or FastAPI's detail list."""
    if not isinstance(body, dict):
        return {}
    fields = body.get("fields")
    if isinstance(fields, dict):
        return {str(k): str(v) for k, v in fields.items()}
    out: Dict[str, str] = {}
    detail = body.get("detail")
    if isinstance(detail, list):
        for item in detail:
            loc = item.get("loc") or []
            name = str(loc[-1]) if loc else "body"
            out[name] = str(item.get("msg", "invalid"))
    return out


def _error_message(resp: httpx.Response) -> str:
    try:
        body = resp.json()
    except ValueError:
        return resp.text or resp.reason_phrase
    if isinstance(body, dict):
        detail = body.get("detail") or body.get("message")
        if isinstance(detail, str):
            return detail
    return resp.text or resp.reason_phrase


class RecordStoreClient:
    def __init__(
        self,
        http: Optional[httpx.Client] = None,
        base_url: Optional[str] = None,
        timeout: Optional[float] = None,
        page_size: Optional[int] = None,
    ):
        self._owns_http = http is None
        self._http = http or httpx.Client(
            base_url=base_url or config.API_BASE_URL,
            timeout=timeout if timeout is not None else config.HTTP_TIMEOUT_SEC,
            headers={"Accept": "application/json"},
        )
        self._listeners: List[MutationListener] = []
        self._page_size = max(1, page_size or config.LIST_PAGE_SIZE)

    # ----- lifecycle -----

    def close(self) -> None:
        if self._owns_http:
            self._http.close()

    def __enter__(self) -> "RecordStoreClient":
        return self

    def __exit__(self, *exc) -> None:
        self.close()

    # ----- mutation signalling -----

    def add_mutation_listener(self, listener: MutationListener) -> None:
        self._listeners.append(listener)

    def _emit(self, event: MutationEvent) -> None:
        for listener in list(self._listeners):
            listener(event)

    # ----- transport -----

    def _send(self, method: str, path: str, **kwargs) -> httpx.Response:
        try:
            resp = self._http.request(method, path, **kwargs)
        except httpx.HTTPError as e:
            logger.error("%s %s failed: %s", method, path, e)
            raise TransportError(f"{method} {path} failed: {e}") from e
        logger.debug("%s %s -> %s", method, path, resp.status_code)
        return resp

    def _check(self, resp: httpx.Response, entity: str, record_id: Any = None) -> None:
        status = resp.status_code
        if status < 400:
            return
        if status == 404:
            raise NotFoundError(entity, record_id)
        if status in (400, 422):
            try:
                body = resp.json()
            except ValueError:
                body = None
            fields = _error_fields(body)
            raise ValidationError(_error_message(resp), fields)
        if status == 409:
            raise ConflictError(_error_message(resp))
        raise TransportError(f"{status}: {_error_message(resp)}", status_code=status)

    @staticmethod
    def _json(resp: httpx.Response) -> Any:
        if resp.status_code == 204 or not resp.content:
            return None
        try:
            return resp.json()
        except ValueError as e:
            raise TransportError(f"Malformed response body: {e}", status_code=resp.status_code) from e

    def _as_record(self, entity: str, data: Any) -> Record:
        model = RECORD_TYPES[entity]
        try:
            return model.model_validate(data)
        except SchemaError as e:
            raise TransportError(f"Malformed {entity} record: {e}") from e

    def _as_records(self, entity: str, data: Any) -> List[Record]:
        if data is None:
            return []
        if not isinstance(data, list):
            raise TransportError(f"Expected a list of {entity}, got {type(data).__name__}")
        return [self._as_record(entity, item) for item in data]

    # ----- reads -----

    def list(self, entity: str, filter: Optional[Dict[str, Any]] = None) -> List[Record]:
        """Every matching record. Pages through the collection until a short page comes back."""
        params = {k: v for k, v in (filter or {}).items() if v is not None}
        records: List[Record] = []
        offset = 0
        while True:
            page_params = {**params, "limit": self._page_size, "offset": offset}
            resp = self._send("GET", _entity_path(entity), params=page_params)
            self._check(resp, entity)
            page = self._as_records(entity, self._json(resp))
            records.extend(page)
            if len(page) < self._page_size:
                return records
            offset += len(page)

    def list_by(self, entity: str, owner: str, owner_id: int) -> List[Record]:
        """Filtered view keyed by a foreign id, e.g. list_by('policies', 'agent', 7)."""
        resp = self._send("GET", f"{_entity_path(entity)}/by-{owner}/{owner_id}")
        self._check(resp, entity)
        return self._as_records(entity, self._json(resp))

    def get(self, entity: str, record_id: int) -> Record:
        resp = self._send("GET", f"{_entity_path(entity)}/{record_id}")
        self._check(resp, entity, record_id)
        return self._as_record(entity, self._json(resp))

    def commission_stats(self) -> CommissionStats:
        resp = self._send("GET", f"{ENTITY_PATHS['commissions']}/stats")
        self._check(resp, "commissions")
        try:
            return CommissionStats.model_validate(self._json(resp) or {})
        except SchemaError as e:
            raise TransportError(f"Malformed commission stats: {e}") from e

    def weekly_commissions_by_agent(self, agent_id: int) -> List[WeeklyCommission]:
        resp = self._send("GET", f"{ENTITY_PATHS['commissions']}/weekly/by-agent/{agent_id}")
        self._check(resp, "commissions")
        data = self._json(resp) or []
        try:
            return [WeeklyCommission.model_validate(item) for item in data]
        except SchemaError as e:
            raise TransportError(f"Malformed weekly commissions: {e}") from e

    # ----- writes -----

    def create(self, entity: str, payload: Dict[str, Any]) -> Record:
        resp = self._send("POST", _entity_path(entity), json=payload)
        self._check(resp, entity)
        record = self._as_record(entity, self._json(resp))
        self._emit(MutationEvent(entity, CREATE, getattr(record, "id", None)))
        return record

    def update(self, entity: str, record_id: int, partial: Dict[str, Any]) -> Record:
        resp = self._send("PATCH", f"{_entity_path(entity)}/{record_id}", json=partial)
        self._check(resp, entity, record_id)
        record = self._as_record(entity, self._json(resp))
        self._emit(MutationEvent(entity, UPDATE, record_id))
        return record

    def delete(self, entity: str, record_id: int) -> DeleteResult:
        """Idempotent: a record that is already gone counts as deleted."""
        resp = self._send("DELETE", f"{_entity_path(entity)}/{record_id}")
        existed = True
        try:
            self._check(resp, entity, record_id)
        except NotFoundError:
            logger.info("Delete of %s %s: already absent", entity, record_id)
            existed = False
        self._emit(MutationEvent(entity, DELETE, record_id))
        return DeleteResult(entity, record_id, existed)
