# agencydesk/client/reads.py
from __future__ import annotations

from datetime import datetime
from typing import Any, Dict, List, Optional

from agencydesk.client.cache import QueryCache, cache_key, filter_part
from agencydesk.client.store_client import RecordStoreClient
from agencydesk.schemas import Commission, CommissionStats, Record, WeeklyCommission
from agencydesk.services.aggregator import CommissionSplit, compute_stats, split_amount
from agencydesk.services.money import parse_amount


class CachedReads:
    """Read side: every query goes through the shared QueryCache."""

    def __init__(self, store: RecordStoreClient, cache: QueryCache):
        self.store = store
        self.cache = cache

    def list(self, entity: str, filter: Optional[Dict[str, Any]] = None) -> List[Record]:
        key = cache_key(entity, "list", filter_part(filter))
        return self.cache.read(key, lambda: self.store.list(entity, filter))

    def list_by(self, entity: str, owner: str, owner_id: int) -> List[Record]:
        key = cache_key(entity, f"by-{owner}", owner_id)
        return self.cache.read(key, lambda: self.store.list_by(entity, owner, owner_id))

    def get(self, entity: str, record_id: int) -> Record:
        key = cache_key(entity, "detail", record_id)
        return self.cache.read(key, lambda: self.store.get(entity, record_id))

    def commission_stats(self) -> CommissionStats:
        return self.cache.read(cache_key("commissions", "stats"), self.store.commission_stats)

    def weekly_commissions_by_agent(self, agent_id: int) -> List[WeeklyCommission]:
        key = cache_key("commissions", "weekly", agent_id)
        return self.cache.read(key, lambda: self.store.weekly_commissions_by_agent(agent_id))

    # ----- derived locally from the freshest commission list -----

    def local_commission_stats(self, now: Optional[datetime] = None) -> CommissionStats:
        commissions: List[Commission] = self.list("commissions")  # type: ignore[assignment]
        return compute_stats(commissions, now)

    def weekly_split(self, agent_id: int, agent_rate: Optional[float] = None) -> Optional[CommissionSplit]:
        """Agent/company split of the most recent week for an agent, or None without data."""
        weeks = self.weekly_commissions_by_agent(agent_id)
        if not weeks:
            return None
        return split_amount(parse_amount(weeks[0].amount), agent_rate)
