# agencydesk/schemas.py
"""
Typed records exchanged with the record service.

Attributes are snake_case; the wire format is camelCase (alias generator).
Money and percentages stay decimal strings exactly as stored.
"""

from __future__ import annotations

from datetime import datetime
from enum import Enum
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel


class Record(BaseModel):
    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        extra="ignore",
    )

    def to_wire(self) -> Dict[str, Any]:
        return self.model_dump(by_alias=True, mode="json")


# ----- Enumerations (kept as str for lenient reads) -----

class CommissionStatus(str, Enum):
    PENDING = "pending"
    PAID = "paid"
    CANCELLED = "cancelled"


class CommissionType(str, Enum):
    INITIAL = "initial"
    RENEWAL = "renewal"
    OVERRIDE = "override"
    BONUS = "bonus"


class PolicyStatus(str, Enum):
    ACTIVE = "active"
    PENDING = "pending"
    LAPSED = "lapsed"
    CANCELLED = "cancelled"
    EXPIRED = "expired"


class PremiumFrequency(str, Enum):
    MONTHLY = "monthly"
    QUARTERLY = "quarterly"
    SEMI_ANNUAL = "semi-annual"
    ANNUAL = "annual"


class UpdateType(str, Enum):
    ANNOUNCEMENT = "announcement"
    SYSTEM = "system"
    TRAINING = "training"
    MARKETING = "marketing"
    RESOURCES = "resources"


BANK_ACCOUNT_TYPES = ("checking", "savings")
PAYMENT_METHOD = "direct_deposit"

POLICY_TYPES = (
    "Term Life",
    "Whole Life",
    "Universal Life",
    "Variable Life",
    "Index Universal Life",
    "Final Expense",
    "Disability Income",
    "Long-Term Care",
    "Group Life",
    "Health",
    "Annuity",
)


# ----- Entities -----

class BankingInfo(Record):
    bank_name: Optional[str] = None
    bank_account_type: Optional[str] = None
    bank_account_number: Optional[str] = None
    bank_routing_number: Optional[str] = None
    bank_payment_method: str = PAYMENT_METHOD


class Agent(Record):
    id: int
    first_name: str = ""
    last_name: str = ""
    email: Optional[str] = None
    phone: Optional[str] = None
    license_number: Optional[str] = None
    license_expiration: Optional[str] = None
    commission_percentage: Optional[str] = None
    override_percentage: Optional[str] = None
    upline_agent_id: Optional[int] = None
    bank_name: Optional[str] = None
    bank_account_type: Optional[str] = None
    bank_account_number: Optional[str] = None
    bank_routing_number: Optional[str] = None
    bank_payment_method: Optional[str] = PAYMENT_METHOD
    notes: Optional[str] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    @property
    def full_name(self) -> str:
        return f"{self.first_name} {self.last_name}".strip()

    @property
    def banking_info(self) -> BankingInfo:
        return BankingInfo(
            bank_name=self.bank_name,
            bank_account_type=self.bank_account_type,
            bank_account_number=self.bank_account_number,
            bank_routing_number=self.bank_routing_number,
        )

    @property
    def has_banking_info(self) -> bool:
        return all((self.bank_name, self.bank_account_type,
                    self.bank_account_number, self.bank_routing_number))


class Policy(Record):
    id: int
    policy_number: str = ""
    carrier: str = ""
    policy_type: str = ""
    face_amount: Optional[str] = None
    premium_amount: Optional[str] = None
    premium_frequency: Optional[str] = None
    issue_date: Optional[str] = None
    expiry_date: Optional[str] = None
    status: str = PolicyStatus.PENDING.value
    client_id: Optional[int] = None
    lead_id: Optional[int] = None
    agent_id: Optional[int] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None


class Commission(Record):
    id: Optional[int] = None
    name: Optional[str] = None
    policy_number: Optional[str] = None
    client_id: Optional[int] = None
    broker_id: Optional[int] = None
    amount: Optional[str] = None
    status: str = CommissionStatus.PENDING.value
    type: str = CommissionType.INITIAL.value
    policy_start_date: Optional[str] = None
    policy_end_date: Optional[str] = None
    payment_date: Optional[str] = None
    carrier: Optional[str] = None
    policy_type: Optional[str] = None
    notes: Optional[str] = None
    created_at: Optional[datetime] = None


class Client(Record):
    id: int
    name: str = ""
    email: Optional[str] = None
    phone: Optional[str] = None
    status: Optional[str] = None
    agent_id: Optional[int] = None
    lead_id: Optional[int] = None
    created_at: Optional[datetime] = None


class Lead(Record):
    id: int
    first_name: str = ""
    last_name: str = ""
    email: Optional[str] = None
    phone: Optional[str] = None
    status: Optional[str] = None
    agent_id: Optional[int] = None
    created_at: Optional[datetime] = None


class User(Record):
    id: int
    username: str = ""
    full_name: Optional[str] = None
    email: Optional[str] = None
    role: Optional[str] = None


class Update(Record):
    id: int
    title: str = ""
    message: str = ""
    type: str = UpdateType.ANNOUNCEMENT.value
    date: Optional[str] = None
    link: Optional[str] = None
    link_text: Optional[str] = None


# ----- Derived (never persisted) -----

class CommissionStats(Record):
    total_commissions: int = 0
    pending_amount: str = "$0.00"
    paid_amount: str = "$0.00"
    this_month_amount: str = "$0.00"
    commissions_by_type: Dict[str, str] = {}
    ytd_amount: str = "$0.00"
    projected_quarter_amount: str = "$0.00"
    unparsable_ids: List[Optional[int]] = []


class WeeklyCommission(Record):
    week_start: str
    amount: str
    count: int = 0


RECORD_TYPES: Dict[str, type] = {
    "agents": Agent,
    "policies": Policy,
    "commissions": Commission,
    "clients": Client,
    "leads": Lead,
    "users": User,
    "updates": Update,
}
