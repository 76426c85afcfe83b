"""
Typed lead records built from leads API payloads.

Instances are only created by leads.services.validation, so anything holding
one can rely on its fields being well-formed.
"""
from dataclasses import dataclass
from datetime import datetime
from typing import Optional


@dataclass(frozen=True)
class IntakeRecord:
    id: str
    service_name: str
    applicant_name: str
    applicant_email: str
    applicant_country: str
    destination_country: str
    description: str
    urgency_level: str
    submitted_at: datetime
    applicant_phone: Optional[str] = None
    reference_number: Optional[str] = None
    converted_case_id: Optional[str] = None


@dataclass(frozen=True)
class AssignmentRecord:
    id: str
    intake: IntakeRecord
    attempt_number: int
    status: str
    expires_at: datetime
    declined_reason: Optional[str] = None
    assigned_at: Optional[datetime] = None
    responded_at: Optional[datetime] = None
