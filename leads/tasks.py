"""
Celery tasks for async lead routing and notification emails.
"""
import logging
from celery import shared_task
from django.db.models import Max
from django.utils import timezone

from leads.models import Assignment, Case, Intake
from leads.services import notifications
from leads.services.routing import assign_intake, reassign_intake

logger = logging.getLogger(__name__)


@shared_task
def offer_intake(intake_id: int):
    """
    Offer a newly submitted intake to its best matching professional.

    Returns:
        Id of the created assignment, or None
    """
    logger.info(f"Routing intake {intake_id}")
    assignment = assign_intake(intake_id)
    return assignment.id if assignment else None


@shared_task
def reassign_intake_task(intake_id: int):
    """
    Offer an intake to the next professional after a decline or an expired offer.

    Returns:
        Id of the created assignment, or None
    """
    logger.info(f"Reassigning intake {intake_id}")
    assignment = reassign_intake(intake_id)
    return assignment.id if assignment else None


@shared_task
def sweep_expired_offers():
    """
    Hand intakes whose latest offer ran out to the next professional.

    The expired assignment keeps its stored pending status; expiry is read
    from expires_at, never written.

    Returns:
        Number of intakes reassigned
    """
    now = timezone.now()
    latest_attempts = (
        Assignment.objects
        .filter(intake__status=Intake.Status.ASSIGNED)
        .values('intake_id')
        .order_by()
        .annotate(latest=Max('attempt_number'))
    )

    reassigned = 0
    for row in latest_attempts:
        is_expired = Assignment.objects.filter(
            intake_id=row['intake_id'],
            attempt_number=row['latest'],
            status=Assignment.Status.PENDING,
            expires_at__lte=now,
        ).exists()
        if not is_expired:
            continue

        logger.info(f"Offer {row['latest']} for intake {row['intake_id']} expired, reassigning")
        try:
            reassign_intake(row['intake_id'])
            reassigned += 1
        except Exception as e:
            logger.error(f"Reassignment of intake {row['intake_id']} failed: {e}", exc_info=True)

    logger.info(f"Expiry sweep reassigned {reassigned} intakes")
    return reassigned


def _send_notification(label: str, send, obj) -> bool:
    try:
        return send(obj)
    except Exception as e:
        logger.error(f"{label} email failed: {e}", exc_info=True)
        return False


@shared_task
def send_applicant_confirmation_email(intake_id: int):
    """
    Confirm a submitted intake to its applicant.

    Returns:
        True if the email was sent
    """
    try:
        intake = Intake.objects.select_related('service').get(id=intake_id)
    except Intake.DoesNotExist:
        logger.error(f"Intake {intake_id} not found for confirmation email")
        return False
    return _send_notification('Confirmation', notifications.send_applicant_confirmation, intake)


@shared_task
def send_lead_notification_email(assignment_id: int):
    """
    Notify a professional of a newly offered lead. Failures are logged, never raised.

    Returns:
        True if the email was sent
    """
    try:
        assignment = (
            Assignment.objects
            .select_related('professional', 'intake', 'intake__service')
            .get(id=assignment_id)
        )
    except Assignment.DoesNotExist:
        logger.error(f"Assignment {assignment_id} not found for lead notification")
        return False
    return _send_notification('Lead notification', notifications.send_lead_notification, assignment)


@shared_task
def send_professional_contact_email(case_id: int):
    """
    Send the applicant the contact details of the professional who accepted.

    Returns:
        True if the email was sent
    """
    try:
        case = Case.objects.select_related('professional', 'intake', 'intake__service').get(id=case_id)
    except Case.DoesNotExist:
        logger.error(f"Case {case_id} not found for professional contact email")
        return False
    return _send_notification('Professional contact', notifications.send_professional_contact, case)
