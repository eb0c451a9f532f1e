# agencydesk/client/coordinator.py
"""
Mutation coordinator.

Runs create/update/delete against the record store, one logical operation at a
time per (entity, id, kind), and keeps the query cache honest: whenever the
store reports a successful mutation, every cache entry that depends on the
mutated entity is marked stale.
"""
from __future__ import annotations

import logging
import threading
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, Optional, Tuple

from agencydesk.client.cache import QueryCache
from agencydesk.client.notifications import ERROR, SUCCESS, LoggingSink, Notification, NotificationSink
from agencydesk.client.store_client import (
    CREATE,
    DELETE,
    UPDATE,
    DeleteResult,
    MutationEvent,
    RecordStoreClient,
)
from agencydesk.errors import AgencyDeskError, DuplicateSubmissionError, ValidationError
from agencydesk.services.validation import validate_payload

logger = logging.getLogger(__name__)

OperationKey = Tuple[str, Optional[int], str]

# Entity -> cache prefixes that hold it, derive from it, or reference it.
DEPENDENTS: Dict[str, Tuple[str, ...]] = {
    "agents": ("agents", "policies", "leads", "clients"),
    "policies": ("policies",),
    "commissions": ("commissions",),
    "clients": ("clients", "policies"),
    "leads": ("leads", "clients"),
    "users": ("users", "agents"),
    "updates": ("updates",),
}

LABELS = {
    "agents": "Agent",
    "policies": "Policy",
    "commissions": "Commission",
    "clients": "Client",
    "leads": "Lead",
    "users": "User",
    "updates": "Update",
}

PAST = {CREATE: "created", UPDATE: "updated", DELETE: "deleted"}


class MutationState(str, Enum):
    IDLE = "idle"
    SUBMITTING = "submitting"
    SUCCEEDED = "succeeded"
    FAILED = "failed"


@dataclass
class MutationResult:
    entity: str
    kind: str
    record_id: Optional[int]
    state: MutationState
    record: Any = None
    error: Optional[AgencyDeskError] = None
    fields: Dict[str, str] = field(default_factory=dict)

    @property
    def ok(self) -> bool:
        return self.state is MutationState.SUCCEEDED

    @property
    def message(self) -> str:
        return self.error.message if self.error else ""


class MutationCoordinator:
    def __init__(
        self,
        store: RecordStoreClient,
        cache: QueryCache,
        notifier: Optional[NotificationSink] = None,
    ):
        self.store = store
        self.cache = cache
        self.notifier = notifier or LoggingSink()
        self._inflight: Dict[OperationKey, MutationState] = {}
        self._lock = threading.Lock()
        store.add_mutation_listener(self._on_mutation)

    # ----- state -----

    def state(self, entity: str, record_id: Optional[int], kind: str) -> MutationState:
        with self._lock:
            return self._inflight.get((entity, record_id, kind), MutationState.IDLE)

    def _claim(self, key: OperationKey) -> None:
        entity, record_id, kind = key
        with self._lock:
            if self._inflight.get(key) is MutationState.SUBMITTING:
                target = entity if record_id is None else f"{entity} {record_id}"
                raise DuplicateSubmissionError(f"{kind} of {target} is already in progress")
            self._inflight[key] = MutationState.SUBMITTING

    def _release(self, key: OperationKey) -> None:
        with self._lock:
            self._inflight.pop(key, None)

    # ----- invalidation -----

    def _on_mutation(self, event: MutationEvent) -> None:
        self.invalidate_for(event.entity)

    def invalidate_for(self, entity: str) -> None:
        for prefix in DEPENDENTS.get(entity, (entity,)):
            self.cache.invalidate(prefix)

    # ----- operations -----

    def create(self, entity: str, payload: Dict[str, Any]) -> MutationResult:
        return self._run(entity, None, CREATE, payload)

    def update(self, entity: str, record_id: int, partial: Dict[str, Any]) -> MutationResult:
        return self._run(entity, record_id, UPDATE, partial)

    def delete(self, entity: str, record_id: int) -> MutationResult:
        return self._run(entity, record_id, DELETE, None)

    def create_agent_quick(self, first_name: str, last_name: str) -> MutationResult:
        """Quick-add: only the names; everything else is completed later."""
        return self.create("agents", {"firstName": first_name, "lastName": last_name})

    def _run(self, entity: str, record_id: Optional[int], kind: str,
             payload: Optional[Dict[str, Any]]) -> MutationResult:
        key: OperationKey = (entity, record_id, kind)
        label = LABELS.get(entity, entity)
        try:
            self._claim(key)
        except DuplicateSubmissionError as e:
            return self._failed(entity, kind, record_id, label, e)

        try:
            if payload is not None:
                # No trust boundary with the form layer: re-check before any request.
                validate_payload(entity, payload, partial=(kind == UPDATE))
            if kind == CREATE:
                record = self.store.create(entity, payload or {})
                record_id = getattr(record, "id", None)
            elif kind == UPDATE:
                record = self.store.update(entity, record_id, payload or {})
            else:
                record = self.store.delete(entity, record_id)
        except AgencyDeskError as e:
            return self._failed(entity, kind, record_id, label, e)
        finally:
            self._release(key)

        self.notifier.notify(Notification(SUCCESS, "Success", f"{label} {PAST[kind]} successfully"))
        return MutationResult(entity, kind, record_id, MutationState.SUCCEEDED, record=record)

    def _failed(self, entity: str, kind: str, record_id: Optional[int], label: str,
                error: AgencyDeskError) -> MutationResult:
        logger.warning("%s %s %s failed: %s", kind, entity, record_id, error.message)
        fields = error.fields if isinstance(error, ValidationError) else {}
        self.notifier.notify(Notification(ERROR, "Error", f"Failed to {kind} {label.lower()}: {error.message}"))
        return MutationResult(entity, kind, record_id, MutationState.FAILED, error=error, fields=fields)


def deleted_existing(result: MutationResult) -> bool:
    """True when a successful delete actually removed something."""
    return result.ok and isinstance(result.record, DeleteResult) and result.record.existed
