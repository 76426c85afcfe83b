"""
Accept/decline handling for lead assignments on the backend.

Both responses are single-shot: once an assignment has left pending, or its
intake has been converted through a sibling assignment, any further response
is rejected with AssignmentConflict.
"""
import logging
import random
from typing import Optional

from django.conf import settings
from django.db import transaction
from django.utils import timezone

from leads.models import Assignment, Case, Intake

logger = logging.getLogger(__name__)

URGENCY_PRIORITY = {
    Intake.Urgency.EMERGENCY: Case.Priority.URGENT,
    Intake.Urgency.URGENT: Case.Priority.HIGH,
    Intake.Urgency.SOON: Case.Priority.NORMAL,
    Intake.Urgency.STANDARD: Case.Priority.LOW,
}

REFERENCE_ATTEMPTS = 10


class AssignmentNotFound(Exception):
    """Raised when the assignment does not exist or belongs to another professional."""
    pass


class AssignmentConflict(Exception):
    """Raised when the assignment can no longer be responded to."""
    pass


def generate_reference(prefix: str, model) -> str:
    """
    Generate a unique reference like 'IMM-2026-847392' for ``model``.

    Raises:
        RuntimeError: If no free reference is found after several attempts
    """
    year = timezone.now().year
    for _ in range(REFERENCE_ATTEMPTS):
        reference = f"{prefix}-{year}-{random.randint(100000, 999999)}"
        if not model.objects.filter(reference_number=reference).exists():
            return reference
    raise RuntimeError(f"Failed to generate unique {prefix} reference after {REFERENCE_ATTEMPTS} attempts")


def _lock_pending_assignment(assignment_id, professional) -> Assignment:
    """
    Load and lock an assignment and its intake for a response.

    Must be called inside a transaction.
    """
    try:
        assignment = (
            Assignment.objects.select_for_update()
            .get(id=assignment_id, professional=professional)
        )
    except (Assignment.DoesNotExist, ValueError):
        raise AssignmentNotFound(f"Assignment {assignment_id} not found") from None

    intake = Intake.objects.select_for_update().select_related('service').get(pk=assignment.intake_id)
    assignment.intake = intake

    if assignment.status != Assignment.Status.PENDING:
        raise AssignmentConflict(f"Assignment is not pending (status: {assignment.status})")
    if timezone.now() >= assignment.expires_at:
        raise AssignmentConflict("Assignment expired")
    if intake.converted_case_id is not None:
        raise AssignmentConflict("Intake already accepted by another professional")
    return assignment


def convert_intake_to_case(intake: Intake, professional) -> Case:
    """
    Open a case for ``professional`` from an intake and link it back.

    Must be called inside a transaction holding the intake lock.
    """
    case = Case.objects.create(
        reference_number=generate_reference('IMM', Case),
        professional=professional,
        title=f"{intake.service.name} - {intake.applicant_name}",
        case_type=intake.service.case_type,
        origin_country=intake.applicant_country,
        destination_country=intake.destination_country,
        priority=URGENCY_PRIORITY.get(intake.urgency_level, Case.Priority.NORMAL),
        notes=intake.description,
        status=Case.Status.OPEN,
    )

    intake.converted_case = case
    intake.status = Intake.Status.CONVERTED
    intake.save(update_fields=['converted_case', 'status'])

    logger.info(f"Intake {intake.id} converted to case {case.reference_number}")
    return case


def accept_assignment(assignment_id, professional) -> Case:
    """
    Accept a pending, unexpired assignment and create its case.

    Args:
        assignment_id: Assignment being accepted
        professional: User responding (must own the assignment)

    Returns:
        The newly created Case

    Raises:
        AssignmentNotFound: Unknown id or not offered to this professional
        AssignmentConflict: Already responded to, expired, or intake taken
    """
    from leads.tasks import send_professional_contact_email

    with transaction.atomic():
        assignment = _lock_pending_assignment(assignment_id, professional)
        case = convert_intake_to_case(assignment.intake, professional)

        assignment.status = Assignment.Status.ACCEPTED
        assignment.responded_at = timezone.now()
        assignment.save(update_fields=['status', 'responded_at'])

        case_id = case.id
        transaction.on_commit(lambda: send_professional_contact_email.delay(case_id))

    logger.info(
        f"Assignment {assignment.id} ACCEPTED by professional {professional.pk}, "
        f"case {case.id} created"
    )
    return case


def decline_assignment(assignment_id, professional, reason: Optional[str] = None) -> Assignment:
    """
    Decline a pending, unexpired assignment and hand the intake on.

    A blank reason is stored as DEFAULT_DECLINE_REASON so every declined
    assignment carries one. Reassignment runs after the transaction commits.

    Raises:
        AssignmentNotFound: Unknown id or not offered to this professional
        AssignmentConflict: Already responded to, expired, or intake taken
    """
    from leads.tasks import reassign_intake_task

    reason = (reason or '').strip() or settings.DEFAULT_DECLINE_REASON

    with transaction.atomic():
        assignment = _lock_pending_assignment(assignment_id, professional)

        assignment.status = Assignment.Status.DECLINED
        assignment.declined_reason = reason
        assignment.responded_at = timezone.now()
        assignment.save(update_fields=['status', 'declined_reason', 'responded_at'])

        intake_id = assignment.intake_id
        transaction.on_commit(lambda: reassign_intake_task.delay(intake_id))

    logger.info(f"Assignment {assignment.id} DECLINED by professional {professional.pk}: {reason}")
    return assignment
