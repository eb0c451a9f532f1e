# tests/test_validation.py
from __future__ import annotations

import pytest

from agencydesk.errors import ValidationError
from agencydesk.services.validation import RULES, required_fields, validate_payload

pytestmark = pytest.mark.unit

GOOD_POLICY = {
    "policyNumber": "TL-1001",
    "carrier": "Acme Life",
    "policyType": "Term Life",
    "faceAmount": "250000",
    "premiumAmount": "$45.10",
    "premiumFrequency": "monthly",
    "issueDate": "2025-01-05",
    "status": "active",
}


def test_every_writable_entity_has_rules():
    assert set(RULES) == {"agents", "policies", "commissions", "clients", "leads", "updates"}


def test_agent_requires_both_names():
    with pytest.raises(ValidationError) as ei:
        validate_payload("agents", {"firstName": "", "lastName": "Smith"})
    assert set(ei.value.fields) == {"firstName"}
    assert "firstName" in ei.value.message


def test_agent_reports_every_failing_field():
    with pytest.raises(ValidationError) as ei:
        validate_payload("agents", {"firstName": "  ", "commissionPercentage": "150"})
    assert set(ei.value.fields) == {"firstName", "lastName", "commissionPercentage"}


def test_valid_policy_passes():
    validate_payload("policies", GOOD_POLICY)


@pytest.mark.parametrize(
    "field,value",
    [
        ("premiumFrequency", "weekly"),
        ("issueDate", "yesterday"),
        ("faceAmount", "-10"),
        ("status", "sold"),
        ("agentId", "seven"),
    ],
)
def test_policy_field_rules(field, value):
    with pytest.raises(ValidationError) as ei:
        validate_payload("policies", {**GOOD_POLICY, field: value})
    assert field in ei.value.fields


def test_partial_update_only_checks_present_fields():
    validate_payload("agents", {"phone": "555-0100"}, partial=True)
    with pytest.raises(ValidationError):
        validate_payload("agents", {"lastName": ""}, partial=True)


def test_commission_status_cannot_be_nulled():
    with pytest.raises(ValidationError) as ei:
        validate_payload("commissions", {"status": None}, partial=True)
    assert "status" in ei.value.fields


def test_required_fields_lists_wire_names():
    assert required_fields("agents") == ("firstName", "lastName")
    assert "policyStartDate" in required_fields("commissions")
    assert required_fields("users") == ()


def test_commission_create_needs_only_required_fields():
    validate_payload("commissions", {
        "policyNumber": "P-1", "clientId": 3, "brokerId": 2, "amount": "50",
        "policyStartDate": "2025-01-06", "policyType": "Term Life",
    })


def test_full_create_still_reports_absent_required_fields():
    with pytest.raises(ValidationError) as ei:
        validate_payload("commissions", {"policyNumber": "P-1", "status": "paid"})
    assert "amount" in ei.value.fields
    assert "status" not in ei.value.fields
