"""
Validation service for leads API payloads.

Payloads are checked here and turned into IntakeRecord / AssignmentRecord
objects before anything else looks at them. Expects input that has already
been through leads.services.normalization (snake_case keys).
"""
import logging
import re
from datetime import datetime, timezone as dt_timezone
from typing import List, Optional

from django.utils.dateparse import parse_datetime

from leads.services.records import AssignmentRecord, IntakeRecord

logger = logging.getLogger(__name__)

ASSIGNMENT_STATUSES = ('pending', 'accepted', 'declined')
URGENCY_LEVELS = ('standard', 'soon', 'urgent', 'emergency')


class InvalidPayloadError(ValueError):
    """Raised when a leads API payload cannot be turned into a record."""

    def __init__(self, field: str, message: str):
        self.field = field
        super().__init__(f"{field}: {message}")


def get_nested_value(data: dict, path: str, default=None):
    """
    Get a value from a nested dictionary using dot notation.

    Args:
        data: The dictionary to search
        path: Dot-separated path (e.g., 'intake.service.name')
        default: Default value if path not found

    Returns:
        The value at the path or default
    """
    keys = path.split('.')
    value = data
    for key in keys:
        if isinstance(value, dict) and key in value:
            value = value[key]
        else:
            return default
    return value


def parse_timestamp(value, field: str) -> datetime:
    """
    Parse an API timestamp into an aware UTC datetime.

    Accepts ISO 8601 strings (with 'Z' or an offset; naive values are taken
    as UTC) and epoch seconds.
    """
    if isinstance(value, datetime):
        parsed = value
    elif isinstance(value, (int, float)) and not isinstance(value, bool):
        parsed = datetime.fromtimestamp(value, tz=dt_timezone.utc)
    elif isinstance(value, str):
        try:
            parsed = parse_datetime(value)
        except ValueError:
            parsed = None
        if parsed is None:
            raise InvalidPayloadError(field, f"not a timestamp: {value!r}")
    else:
        raise InvalidPayloadError(field, "missing or not a timestamp")

    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=dt_timezone.utc)
    return parsed.astimezone(dt_timezone.utc)


def _require_text(data: dict, field: str) -> str:
    value = data.get(field)
    if value is None or not isinstance(value, (str, int)) or isinstance(value, bool):
        raise InvalidPayloadError(field, "missing required field")
    return str(value)


def _optional_text(data: dict, field: str) -> Optional[str]:
    value = data.get(field)
    if value is None:
        return None
    return str(value)


def validate_intake(data: dict) -> IntakeRecord:
    """
    Build an IntakeRecord from a normalized intake payload.

    The service name may arrive flat ('service_name') or nested
    ('service.name').

    Raises:
        InvalidPayloadError: On missing fields or an unknown urgency level
    """
    if not isinstance(data, dict):
        raise InvalidPayloadError('intake', "must be an object")

    service_name = data.get('service_name') or get_nested_value(data, 'service.name')
    if not service_name:
        raise InvalidPayloadError('intake.service_name', "missing required field")

    urgency_level = data.get('urgency_level') or 'standard'
    # Intake submissions default to 'normal', shown as standard
    if urgency_level == 'normal':
        urgency_level = 'standard'
    if urgency_level not in URGENCY_LEVELS:
        raise InvalidPayloadError('intake.urgency_level', f"unknown level {urgency_level!r}")

    return IntakeRecord(
        id=_require_text(data, 'id'),
        service_name=str(service_name),
        applicant_name=_require_text(data, 'applicant_name'),
        applicant_email=_require_text(data, 'applicant_email'),
        applicant_phone=_optional_text(data, 'applicant_phone'),
        applicant_country=_require_text(data, 'applicant_country'),
        destination_country=_require_text(data, 'destination_country'),
        description=data.get('description') or '',
        urgency_level=urgency_level,
        submitted_at=parse_timestamp(data.get('submitted_at'), 'intake.submitted_at'),
        reference_number=_optional_text(data, 'reference_number'),
        converted_case_id=_optional_text(data, 'converted_case_id'),
    )


def validate_assignment(data: dict) -> AssignmentRecord:
    """
    Build an AssignmentRecord from a normalized assignment payload.

    Rules:
    1. status must be one of pending, accepted, declined ('expired' is
       derived from expires_at, never accepted as a stored value)
    2. attempt_number must be a positive integer
    3. expires_at must be a timestamp
    4. declined_reason may only be present on a declined assignment

    Raises:
        InvalidPayloadError: If any rule fails
    """
    if not isinstance(data, dict):
        raise InvalidPayloadError('assignment', "must be an object")

    status = data.get('status')
    if status not in ASSIGNMENT_STATUSES:
        raise InvalidPayloadError('status', f"unknown status {status!r}")

    attempt_number = data.get('attempt_number')
    if isinstance(attempt_number, str) and re.fullmatch(r'\d+', attempt_number):
        attempt_number = int(attempt_number)
    if not isinstance(attempt_number, int) or isinstance(attempt_number, bool) or attempt_number < 1:
        raise InvalidPayloadError('attempt_number', f"must be a positive integer, got {attempt_number!r}")

    declined_reason = _optional_text(data, 'declined_reason')
    if declined_reason is not None and status != 'declined':
        raise InvalidPayloadError('declined_reason', f"present on a {status} assignment")

    assigned_at = data.get('assigned_at')
    responded_at = data.get('responded_at')

    return AssignmentRecord(
        id=_require_text(data, 'id'),
        intake=validate_intake(data.get('intake')),
        attempt_number=attempt_number,
        status=status,
        expires_at=parse_timestamp(data.get('expires_at'), 'expires_at'),
        declined_reason=declined_reason,
        assigned_at=parse_timestamp(assigned_at, 'assigned_at') if assigned_at is not None else None,
        responded_at=parse_timestamp(responded_at, 'responded_at') if responded_at is not None else None,
    )


def validate_lead_list(payload: dict) -> List[AssignmentRecord]:
    """
    Extract the assignments from a normalized "my leads" response.

    Malformed assignments are dropped (and logged) while the well-formed ones
    are still returned, so one bad row does not blank the whole list.

    Raises:
        InvalidPayloadError: If the response has no assignments list at all
    """
    assignments = get_nested_value(payload, 'data.assignments')
    if assignments is None:
        assignments = payload.get('assignments') if isinstance(payload, dict) else None
    if not isinstance(assignments, list):
        raise InvalidPayloadError('data.assignments', "missing or not a list")

    records = []
    skipped = []
    for item in assignments:
        try:
            records.append(validate_assignment(item))
        except InvalidPayloadError as e:
            item_id = item.get('id') if isinstance(item, dict) else None
            skipped.append(item_id)
            logger.warning(f"Skipping malformed assignment {item_id}: {e}")

    if skipped:
        logger.info(f"Skipped {len(skipped)} malformed assignments: {skipped}")

    logger.debug(f"Validated {len(records)} assignments")
    return records
