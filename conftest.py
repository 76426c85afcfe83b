import itertools
import os
import sys
from datetime import timedelta

import pytest

# Add the project root to the path
sys.path.insert(0, os.path.dirname(os.path.abspath(__file__)))

os.environ.setdefault('DJANGO_SETTINGS_MODULE', 'lead_portal.settings')
os.environ.setdefault('USE_SQLITE_FOR_TESTS', 'true')

_references = itertools.count(1)


@pytest.fixture
def professional(django_user_model):
    """Return the professional the leads are offered to."""
    return django_user_model.objects.create_user(
        username='amara',
        email='amara@example.com',
        password='secret-pass',
        first_name='Amara',
        last_name='Okafor',
    )


@pytest.fixture
def other_professional(django_user_model):
    return django_user_model.objects.create_user(username='tomas', password='secret-pass')


@pytest.fixture
def service():
    from leads.models import Service
    return Service.objects.create(name='Skilled Worker Visa', slug='skilled-worker-visa', case_type='visa')


@pytest.fixture
def make_intake(service):
    """Return a factory creating intakes for the default service."""
    from leads.models import Intake

    def _make(**overrides):
        fields = {
            'service': service,
            'reference_number': f"INT-2026-{next(_references):06d}",
            'applicant_name': 'Jane Mary Doe',
            'applicant_email': 'jane.doe@example.com',
            'applicant_phone': '+27821234567',
            'applicant_country': 'ZA',
            'destination_country': 'CA',
            'description': 'Needs help with a skilled worker visa application.',
            'urgency_level': Intake.Urgency.SOON,
        }
        fields.update(overrides)
        return Intake.objects.create(**fields)

    return _make


@pytest.fixture
def make_assignment(make_intake, professional):
    """Return a factory creating a pending, unexpired offer for ``professional``."""
    from django.utils import timezone
    from leads.models import Assignment, Intake

    def _make(intake=None, **overrides):
        if intake is None:
            intake = make_intake(status=Intake.Status.ASSIGNED)
        fields = {
            'intake': intake,
            'professional': professional,
            'attempt_number': intake.assignments.count() + 1,
            'status': Assignment.Status.PENDING,
            'expires_at': timezone.now() + timedelta(hours=48),
        }
        fields.update(overrides)
        return Assignment.objects.create(**fields)

    return _make


@pytest.fixture
def api_client(professional):
    """Return an APIClient authenticated as ``professional``."""
    from rest_framework.test import APIClient
    client = APIClient()
    client.force_authenticate(user=professional)
    return client


@pytest.fixture
def assignment_payload():
    """Return a factory for camelCase assignment payloads as the leads API sends them."""

    def _make(**overrides):
        payload = {
            'id': 12,
            'intakeId': 7,
            'professionalId': 3,
            'status': 'pending',
            'attemptNumber': 1,
            'assignedAt': '2026-10-19T08:00:00Z',
            'respondedAt': None,
            'declinedReason': None,
            'expiresAt': '2026-10-21T08:00:00Z',
            'intake': {
                'id': 7,
                'referenceNumber': 'INT-2026-000007',
                'serviceId': 2,
                'service': {'id': 2, 'name': 'Skilled Worker Visa', 'slug': 'skilled-worker-visa', 'caseType': 'visa'},
                'status': 'assigned',
                'applicantName': 'Jane D.',
                'applicantEmail': 'J***@Example.com',
                'applicantPhone': '+2***67',
                'applicantCountry': 'ZA',
                'destinationCountry': 'CA',
                'urgencyLevel': 'soon',
                'description': '  Needs help with a skilled worker visa application.  ',
                'submittedAt': '2026-10-19T07:55:00Z',
                'convertedCaseId': None,
            },
        }
        payload.update(overrides)
        return payload

    return _make
