"""Client-side domain core: record store client, query cache and mutation coordinator."""
from __future__ import annotations

from typing import NamedTuple, Optional

import httpx

from agencydesk.client.cache import QueryCache
from agencydesk.client.coordinator import MutationCoordinator, MutationResult, MutationState
from agencydesk.client.notifications import NotificationSink
from agencydesk.client.reads import CachedReads
from agencydesk.client.store_client import DeleteResult, MutationEvent, RecordStoreClient

__all__ = [
    "AgencyDesk",
    "connect",
    "CachedReads",
    "DeleteResult",
    "MutationCoordinator",
    "MutationEvent",
    "MutationResult",
    "MutationState",
    "QueryCache",
    "RecordStoreClient",
]


class AgencyDesk(NamedTuple):
    store: RecordStoreClient
    cache: QueryCache
    reads: CachedReads
    mutations: MutationCoordinator


def connect(
    http: Optional[httpx.Client] = None,
    base_url: Optional[str] = None,
    notifier: Optional[NotificationSink] = None,
    page_size: Optional[int] = None,
) -> AgencyDesk:
    """Wire a store client, a shared cache, the read facade and the coordinator together."""
    store = RecordStoreClient(http=http, base_url=base_url, page_size=page_size)
    cache = QueryCache()
    return AgencyDesk(
        store=store,
        cache=cache,
        reads=CachedReads(store, cache),
        mutations=MutationCoordinator(store, cache, notifier),
    )
