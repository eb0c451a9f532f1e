# agencydesk/services/aggregator.py
"""
Commission aggregation.

Pure functions: every figure is recomputed from the commission records given,
never stored. Amounts that do not parse are counted as zero and reported as
AggregationWarning (logged, and listed in CommissionStats.unparsable_ids).
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from datetime import datetime
from decimal import Decimal, ROUND_HALF_UP
from typing import Dict, Iterable, List, Optional, Sequence, Tuple

from agencydesk import config
from agencydesk.errors import AggregationWarning
from agencydesk.schemas import Commission, CommissionStats, CommissionStatus, WeeklyCommission
from agencydesk.services.dates import (
    month_range,
    normalize_now,
    parse_instant,
    quarter_range,
    week_start,
    year_to_date_range,
)
from agencydesk.services.money import ZERO, format_currency, format_decimal, parse_amount_detailed

logger = logging.getLogger(__name__)

ONE_DECIMAL = Decimal("0.1")
HUNDRED = Decimal("100")


@dataclass(frozen=True)
class TypeShare:
    name: str
    amount: Decimal
    percentage: Decimal

    @property
    def formatted(self) -> str:
        return format_currency(self.amount)


@dataclass(frozen=True)
class CommissionSplit:
    total: Decimal
    agent_rate: Decimal
    agent_share: Decimal
    company_share: Decimal

    def formatted(self) -> Dict[str, str]:
        return {
            "total": format_currency(self.total),
            "agentShare": format_currency(self.agent_share),
            "companyShare": format_currency(self.company_share),
        }


@dataclass
class AmountLedger:
    """Parsed amounts for a commission set, with the warnings raised on the way."""
    amounts: List[Tuple[Commission, Decimal]] = field(default_factory=list)
    warnings: List[AggregationWarning] = field(default_factory=list)

    @property
    def total(self) -> Decimal:
        return sum((amt for _, amt in self.amounts), ZERO)

    def sum_where(self, predicate) -> Decimal:
        return sum((amt for c, amt in self.amounts if predicate(c)), ZERO)


def commission_amount(c: Commission, warnings: Optional[List[AggregationWarning]] = None) -> Decimal:
    parsed = parse_amount_detailed(c.amount)
    reason = None
    if not parsed.ok:
        reason = "unparsable"
    elif parsed.value < 0:
        reason = "negative"
    if reason is None:
        return parsed.value
    warning = AggregationWarning(record_id=c.id, raw_amount=c.amount, reason=reason)
    logger.warning("Commission %s amount %r counted as 0 (%s)", c.id, c.amount, reason)
    if warnings is not None:
        warnings.append(warning)
    return ZERO


def build_ledger(commissions: Iterable[Commission]) -> AmountLedger:
    ledger = AmountLedger()
    for c in commissions:
        ledger.amounts.append((c, commission_amount(c, ledger.warnings)))
    return ledger


def relevant_date(c: Commission) -> Optional[datetime]:
    """paymentDate when present, else policyStartDate."""
    return parse_instant(c.payment_date) or parse_instant(c.policy_start_date)


def _in_range(c: Commission, start: datetime, end: datetime) -> bool:
    d = relevant_date(c)
    return d is not None and start <= d <= end


def _percent(part: Decimal, whole: Decimal) -> Decimal:
    if whole == 0:
        return Decimal("0.0")
    return (part / whole * HUNDRED).quantize(ONE_DECIMAL, rounding=ROUND_HALF_UP)


def breakdown_by(commissions: Sequence[Commission], key: str = "type") -> List[TypeShare]:
    """
    Group by `type` or `policy_type` and express each group's share of the total.
    Percentages are rounded to one decimal; a zero total gives 0.0 everywhere.
    Groups come back in first-seen order.
    """
    return _group(build_ledger(commissions), key)


def _group(ledger: AmountLedger, key: str) -> List[TypeShare]:
    if key not in ("type", "policy_type"):
        raise ValueError(f"Unsupported breakdown key: {key}")
    groups: Dict[str, Decimal] = {}
    for c, amt in ledger.amounts:
        name = getattr(c, key) or "unknown"
        groups[name] = groups.get(name, ZERO) + amt
    total = ledger.total
    return [TypeShare(name=n, amount=a, percentage=_percent(a, total)) for n, a in groups.items()]


def _to_rate(agent_rate: Optional[float]) -> Decimal:
    rate = Decimal(str(config.AGENT_COMMISSION_RATE if agent_rate is None else agent_rate))
    if not (0 <= rate <= 1):
        raise ValueError(f"agent_rate must be within [0, 1], got {agent_rate}")
    return rate


def split_amount(total: Decimal, agent_rate: Optional[float] = None) -> CommissionSplit:
    """Agent share is total x rate; the company keeps the rest, so the shares always add up."""
    rate = _to_rate(agent_rate)
    total = Decimal(total)
    agent_share = total * rate
    return CommissionSplit(
        total=total,
        agent_rate=rate,
        agent_share=agent_share,
        company_share=total - agent_share,
    )


def split_commissions(commissions: Sequence[Commission], agent_rate: Optional[float] = None) -> CommissionSplit:
    return split_amount(build_ledger(commissions).total, agent_rate)


def _projected_quarter(ledger: AmountLedger, now: datetime) -> Decimal:
    q_start, q_end = quarter_range(now.year, now.month)
    qtd = ledger.sum_where(lambda c: _in_range(c, q_start, now))
    days_total = (q_end.date() - q_start.date()).days + 1
    days_elapsed = (now.date() - q_start.date()).days + 1
    return qtd * Decimal(days_total) / Decimal(days_elapsed)


def compute_stats(commissions: Sequence[Commission], now: Optional[datetime] = None) -> CommissionStats:
    """
    Summary figures for a commission set.

    `now` anchors "this month", year-to-date and the quarter projection.
    """
    now = normalize_now(now)
    ledger = build_ledger(commissions)

    m_start, m_end = month_range(now.year, now.month)
    y_start, y_end = year_to_date_range(now)

    by_type: Dict[str, str] = {
        share.name: share.formatted for share in _group(ledger, "type")
    }

    return CommissionStats(
        total_commissions=len(commissions),
        pending_amount=format_currency(ledger.sum_where(lambda c: c.status == CommissionStatus.PENDING.value)),
        paid_amount=format_currency(ledger.sum_where(lambda c: c.status == CommissionStatus.PAID.value)),
        this_month_amount=format_currency(ledger.sum_where(lambda c: _in_range(c, m_start, m_end))),
        commissions_by_type=by_type,
        ytd_amount=format_currency(ledger.sum_where(lambda c: _in_range(c, y_start, y_end))),
        projected_quarter_amount=format_currency(_projected_quarter(ledger, now)),
        unparsable_ids=[w.record_id for w in ledger.warnings],
    )


def weekly_totals(commissions: Sequence[Commission], broker_id: Optional[int] = None) -> List[WeeklyCommission]:
    """Weekly buckets (Monday start) over relevant dates, newest week first."""
    buckets: Dict[str, Tuple[Decimal, int]] = {}
    for c in commissions:
        if broker_id is not None and c.broker_id != broker_id:
            continue
        ws = week_start(relevant_date(c))
        if ws is None:
            continue
        key = ws.isoformat()
        amt, count = buckets.get(key, (ZERO, 0))
        buckets[key] = (amt + commission_amount(c), count + 1)
    return [
        WeeklyCommission(week_start=k, amount=format_decimal(amt), count=count)
        for k, (amt, count) in sorted(buckets.items(), reverse=True)
    ]
