"""
Unit tests for validation service.
"""
import pytest
from datetime import datetime, timezone

from leads.services.normalization import normalize
from leads.services.validation import (
    InvalidPayloadError,
    get_nested_value,
    parse_timestamp,
    validate_assignment,
    validate_intake,
    validate_lead_list,
)


class TestGetNestedValue:

    def test_nested_path(self):
        assert get_nested_value({'a': {'b': {'c': 1}}}, 'a.b.c') == 1

    def test_missing_path_returns_default(self):
        assert get_nested_value({'a': {}}, 'a.b', default='x') == 'x'
        assert get_nested_value({'a': 'flat'}, 'a.b') is None


class TestParseTimestamp:
    """Tests for parse_timestamp."""

    def test_iso_with_z(self):
        parsed = parse_timestamp('2026-10-21T08:00:00Z', 'expires_at')
        assert parsed == datetime(2026, 10, 21, 8, 0, 0, tzinfo=timezone.utc)

    def test_iso_with_offset_converted_to_utc(self):
        parsed = parse_timestamp('2026-10-21T10:00:00+02:00', 'expires_at')
        assert parsed == datetime(2026, 10, 21, 8, 0, 0, tzinfo=timezone.utc)

    def test_naive_taken_as_utc(self):
        parsed = parse_timestamp('2026-10-21T08:00:00', 'expires_at')
        assert parsed.tzinfo is not None
        assert parsed == datetime(2026, 10, 21, 8, 0, 0, tzinfo=timezone.utc)

    def test_epoch_seconds(self):
        parsed = parse_timestamp(0, 'expires_at')
        assert parsed == datetime(1970, 1, 1, tzinfo=timezone.utc)

    def test_garbage_rejected(self):
        with pytest.raises(InvalidPayloadError) as exc_info:
            parse_timestamp('next tuesday', 'expires_at')
        assert exc_info.value.field == 'expires_at'

    def test_missing_rejected(self):
        with pytest.raises(InvalidPayloadError):
            parse_timestamp(None, 'expires_at')


class TestValidateAssignment:
    """Tests for validate_assignment."""

    def test_valid_pending_assignment(self, assignment_payload):
        record = validate_assignment(normalize(assignment_payload()))

        assert record.id == '12'
        assert record.status == 'pending'
        assert record.attempt_number == 1
        assert record.expires_at == datetime(2026, 10, 21, 8, 0, 0, tzinfo=timezone.utc)
        assert record.declined_reason is None
        assert record.responded_at is None
        assert record.intake.id == '7'
        assert record.intake.service_name == 'Skilled Worker Visa'
        assert record.intake.urgency_level == 'soon'
        assert record.intake.converted_case_id is None

    def test_declined_with_reason(self, assignment_payload):
        payload = assignment_payload(
            status='declined',
            declinedReason='at capacity',
            respondedAt='2026-10-19T09:00:00Z',
        )
        record = validate_assignment(normalize(payload))
        assert record.declined_reason == 'at capacity'
        assert record.responded_at == datetime(2026, 10, 19, 9, 0, 0, tzinfo=timezone.utc)

    def test_declined_without_reason_allowed(self, assignment_payload):
        record = validate_assignment(normalize(assignment_payload(status='declined')))
        assert record.declined_reason is None

    def test_reason_on_pending_rejected(self, assignment_payload):
        with pytest.raises(InvalidPayloadError) as exc_info:
            validate_assignment(normalize(assignment_payload(declinedReason='nope')))
        assert exc_info.value.field == 'declined_reason'

    def test_stored_expired_status_rejected(self, assignment_payload):
        with pytest.raises(InvalidPayloadError) as exc_info:
            validate_assignment(normalize(assignment_payload(status='expired')))
        assert exc_info.value.field == 'status'

    def test_attempt_number_must_be_positive(self, assignment_payload):
        with pytest.raises(InvalidPayloadError):
            validate_assignment(normalize(assignment_payload(attemptNumber=0)))
        with pytest.raises(InvalidPayloadError):
            validate_assignment(normalize(assignment_payload(attemptNumber='two')))

    def test_attempt_number_digit_string_accepted(self, assignment_payload):
        record = validate_assignment(normalize(assignment_payload(attemptNumber='3')))
        assert record.attempt_number == 3

    def test_missing_expiry_rejected(self, assignment_payload):
        with pytest.raises(InvalidPayloadError):
            validate_assignment(normalize(assignment_payload(expiresAt=None)))

    def test_missing_intake_rejected(self, assignment_payload):
        with pytest.raises(InvalidPayloadError):
            validate_assignment(normalize(assignment_payload(intake=None)))


class TestValidateIntake:
    """Tests for validate_intake."""

    def test_flat_service_name(self, assignment_payload):
        intake = normalize(assignment_payload())['intake']
        del intake['service']
        intake['service_name'] = 'Study Permit'
        assert validate_intake(intake).service_name == 'Study Permit'

    def test_missing_service_rejected(self, assignment_payload):
        intake = normalize(assignment_payload())['intake']
        del intake['service']
        with pytest.raises(InvalidPayloadError):
            validate_intake(intake)

    def test_normal_urgency_shown_as_standard(self, assignment_payload):
        intake = normalize(assignment_payload())['intake']
        intake['urgency_level'] = 'normal'
        assert validate_intake(intake).urgency_level == 'standard'

    def test_unknown_urgency_rejected(self, assignment_payload):
        intake = normalize(assignment_payload())['intake']
        intake['urgency_level'] = 'whenever'
        with pytest.raises(InvalidPayloadError):
            validate_intake(intake)

    def test_missing_applicant_name_rejected(self, assignment_payload):
        intake = normalize(assignment_payload())['intake']
        intake['applicant_name'] = None
        with pytest.raises(InvalidPayloadError) as exc_info:
            validate_intake(intake)
        assert exc_info.value.field == 'applicant_name'


class TestValidateLeadList:
    """Tests for validate_lead_list."""

    def test_wrapped_response(self, assignment_payload):
        body = normalize({
            'success': True,
            'data': {'assignments': [assignment_payload(id=1), assignment_payload(id=2)]},
        })
        records = validate_lead_list(body)
        assert [r.id for r in records] == ['1', '2']

    def test_bare_assignments_list(self, assignment_payload):
        records = validate_lead_list(normalize({'assignments': [assignment_payload()]}))
        assert len(records) == 1

    def test_malformed_rows_skipped(self, assignment_payload):
        body = normalize({'data': {'assignments': [
            assignment_payload(id=1),
            assignment_payload(id=2, status='archived'),
            assignment_payload(id=3, expiresAt='soon'),
        ]}})
        records = validate_lead_list(body)
        assert [r.id for r in records] == ['1']

    def test_empty_list(self):
        assert validate_lead_list({'data': {'assignments': []}}) == []

    def test_missing_list_rejected(self):
        with pytest.raises(InvalidPayloadError):
            validate_lead_list({'data': {}})
