# agencydesk/services/validation.py
"""
Field rules for every writable entity, kept as data so that the form layer,
the mutation coordinator and the record service all check the same thing.
"""
from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Dict, Mapping, Optional, Tuple

from agencydesk.errors import ValidationError
from agencydesk.schemas import (
    BANK_ACCOUNT_TYPES,
    CommissionStatus,
    CommissionType,
    PolicyStatus,
    PremiumFrequency,
    UpdateType,
)
from agencydesk.services.dates import is_valid_date
from agencydesk.services.money import is_valid_amount, parse_amount_detailed

TEXT = "text"
AMOUNT = "amount"
PERCENTAGE = "percentage"
INTEGER = "integer"
DATE = "date"
CHOICE = "choice"


@dataclass(frozen=True)
class FieldRule:
    name: str                     # wire (camelCase) field name
    required: bool = False
    kind: str = TEXT
    min_length: int = 0
    choices: Tuple[str, ...] = ()
    nullable: bool = True

    def check(self, value: Any) -> Optional[str]:
        """Return a human-readable problem, or None if the value is acceptable."""
        if value is None or (isinstance(value, str) and not value.strip()):
            if self.required:
                return f"{self.name} is required"
            if value is None and not self.nullable:
                return f"{self.name} cannot be null"
            return None

        if self.kind == TEXT:
            if not isinstance(value, str):
                return f"{self.name} must be text"
            if len(value.strip()) < self.min_length:
                return f"{self.name} must be at least {self.min_length} characters"
        elif self.kind == AMOUNT:
            if not is_valid_amount(value):
                return f"{self.name} must be a non-negative amount"
        elif self.kind == PERCENTAGE:
            parsed = parse_amount_detailed(value)
            if not parsed.ok or not (0 <= parsed.value <= 100):
                return f"{self.name} must be between 0 and 100"
        elif self.kind == INTEGER:
            if isinstance(value, bool):
                return f"{self.name} must be an integer"
            try:
                int(str(value))
            except ValueError:
                return f"{self.name} must be an integer"
        elif self.kind == DATE:
            if not is_valid_date(value):
                return f"{self.name} must be a valid date"
        elif self.kind == CHOICE:
            if str(value) not in self.choices:
                return f"{self.name} must be one of: {', '.join(self.choices)}"
        return None


def _values(enum_cls) -> Tuple[str, ...]:
    return tuple(e.value for e in enum_cls)


RULES: Dict[str, Tuple[FieldRule, ...]] = {
    "agents": (
        FieldRule("firstName", required=True, min_length=1),
        FieldRule("lastName", required=True, min_length=1),
        FieldRule("email"),
        FieldRule("phone"),
        FieldRule("licenseNumber"),
        FieldRule("licenseExpiration", kind=DATE),
        FieldRule("commissionPercentage", kind=PERCENTAGE),
        FieldRule("overridePercentage", kind=PERCENTAGE),
        FieldRule("uplineAgentId", kind=INTEGER),
        FieldRule("bankAccountType", kind=CHOICE, choices=BANK_ACCOUNT_TYPES),
    ),
    "policies": (
        FieldRule("policyNumber", required=True, min_length=1),
        FieldRule("carrier", required=True, min_length=1),
        FieldRule("policyType", required=True, min_length=1),
        FieldRule("faceAmount", required=True, kind=AMOUNT),
        FieldRule("premiumAmount", required=True, kind=AMOUNT),
        FieldRule("premiumFrequency", required=True, kind=CHOICE, choices=_values(PremiumFrequency)),
        FieldRule("issueDate", required=True, kind=DATE),
        FieldRule("expiryDate", kind=DATE),
        FieldRule("status", required=True, kind=CHOICE, choices=_values(PolicyStatus)),
        FieldRule("clientId", kind=INTEGER),
        FieldRule("leadId", kind=INTEGER),
        FieldRule("agentId", kind=INTEGER),
    ),
    "commissions": (
        FieldRule("policyNumber", required=True, min_length=1),
        FieldRule("clientId", required=True, kind=INTEGER),
        FieldRule("brokerId", required=True, kind=INTEGER),
        FieldRule("amount", required=True, kind=AMOUNT),
        FieldRule("status", kind=CHOICE, choices=_values(CommissionStatus), nullable=False),
        FieldRule("type", kind=CHOICE, choices=_values(CommissionType), nullable=False),
        FieldRule("policyStartDate", required=True, kind=DATE),
        FieldRule("policyEndDate", kind=DATE),
        FieldRule("paymentDate", kind=DATE),
        FieldRule("policyType", required=True, min_length=1),
    ),
    "clients": (
        FieldRule("name", required=True, min_length=1),
        FieldRule("agentId", kind=INTEGER),
        FieldRule("leadId", kind=INTEGER),
    ),
    "leads": (
        FieldRule("firstName", required=True, min_length=1),
        FieldRule("lastName", required=True, min_length=1),
        FieldRule("agentId", kind=INTEGER),
    ),
    "updates": (
        FieldRule("title", required=True, min_length=1),
        FieldRule("message", required=True, min_length=1),
        FieldRule("type", required=True, kind=CHOICE, choices=_values(UpdateType)),
        FieldRule("date", kind=DATE),
    ),
}


def validate_payload(entity: str, payload: Mapping[str, Any], partial: bool = False) -> None:
    """
    Check payload against RULES[entity].

    Absent optional fields are left to their defaults. partial=True (PATCH):
    absent required fields are fine too, but a present required field must
    still be non-empty.

    Raises ValidationError listing every failing field.
    """
    rules = RULES.get(entity, ())
    problems: Dict[str, str] = {}
    for rule in rules:
        if rule.name not in payload and (partial or not rule.required):
            continue
        problem = rule.check(payload.get(rule.name))
        if problem:
            problems[rule.name] = problem
    if problems:
        raise ValidationError.from_fields(problems)


def required_fields(entity: str) -> Tuple[str, ...]:
    return tuple(r.name for r in RULES.get(entity, ()) if r.required)
