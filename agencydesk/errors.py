# agencydesk/errors.py
from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Dict, Optional

__all__ = [
    "AgencyDeskError",
    "ValidationError",
    "NotFoundError",
    "ConflictError",
    "TransportError",
    "DuplicateSubmissionError",
    "AggregationWarning",
]


class AgencyDeskError(Exception):
    """Base class for every error raised by the record store and its clients."""

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class ValidationError(AgencyDeskError):
    """A required field is missing or malformed. `fields` maps wire field -> reason."""

    def __init__(self, message: str, fields: Optional[Dict[str, str]] = None):
        super().__init__(message)
        self.fields: Dict[str, str] = dict(fields or {})

    @classmethod
    def from_fields(cls, fields: Dict[str, str]) -> "ValidationError":
        names = ", ".join(sorted(fields))
        return cls(f"Invalid or missing fields: {names}", fields)


class NotFoundError(AgencyDeskError):
    def __init__(self, entity: str, record_id: Any = None):
        if record_id is None:
            super().__init__(f"{entity} not found")
        else:
            super().__init__(f"{entity} {record_id} not found")
        self.entity = entity
        self.record_id = record_id


class ConflictError(AgencyDeskError):
    """The write collides with an existing record (e.g. duplicate policy number)."""


class TransportError(AgencyDeskError):
    """Network/server failure unrelated to business rules. Never retried automatically."""

    def __init__(self, message: str, status_code: Optional[int] = None):
        super().__init__(message)
        self.status_code = status_code


class DuplicateSubmissionError(AgencyDeskError):
    """The same logical mutation is already in flight."""


@dataclass(frozen=True)
class AggregationWarning:
    """Non-fatal: a commission amount was counted as zero."""
    record_id: Optional[int]
    raw_amount: Any
    reason: str
