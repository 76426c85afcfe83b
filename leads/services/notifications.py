"""
Notification emails sent as leads move through their lifecycle.

Each sender returns False instead of raising when there is nobody to write
to; delivery errors propagate to the calling task.
"""
import logging

from django.conf import settings
from django.core.mail import send_mail

from leads.models import Assignment, Case, Intake

logger = logging.getLogger(__name__)

DESCRIPTION_PREVIEW_LENGTH = 200


def _display_name(user) -> str:
    return user.get_full_name() or user.email.split('@')[0] or user.username


def status_url(intake: Intake) -> str:
    return f"{settings.FRONTEND_URL}/intake-status?ref={intake.reference_number}"


def send_applicant_confirmation(intake: Intake) -> bool:
    """Tell the applicant their intake was received and how to track it."""
    message = (
        f"Hello {intake.applicant_name},\n\n"
        f"We received your request for {intake.service.name}. "
        f"Your reference number is {intake.reference_number}.\n\n"
        f"We are matching you with a specialist. Track progress at:\n"
        f"{status_url(intake)}\n"
    )
    send_mail(
        f"We received your request ({intake.reference_number})",
        message,
        settings.DEFAULT_FROM_EMAIL,
        [intake.applicant_email],
    )
    logger.info(f"Confirmation email sent for intake {intake.reference_number}")
    return True


def send_lead_notification(assignment: Assignment) -> bool:
    """
    Tell a professional a new lead has been offered to them.

    Only the service, corridor, urgency and a description preview are
    included; applicant contact details stay hidden until acceptance.
    """
    professional = assignment.professional
    if not professional.email:
        logger.warning(f"Professional {professional.pk} has no email, lead {assignment.id} not notified")
        return False

    intake = assignment.intake
    expires = assignment.expires_at.strftime('%Y-%m-%d %H:%M %Z')
    message = (
        f"Hello {_display_name(professional)},\n\n"
        f"A new {intake.service.name} lead is waiting for you.\n\n"
        f"Corridor: {intake.applicant_country} -> {intake.destination_country}\n"
        f"Urgency: {intake.get_urgency_level_display()}\n"
        f"Summary: {intake.description[:DESCRIPTION_PREVIEW_LENGTH]}\n\n"
        f"Respond before {expires}:\n"
        f"{settings.FRONTEND_URL}{settings.LEAD_LIST_PATH}\n"
    )
    send_mail(
        f"New lead: {intake.service.name}",
        message,
        settings.DEFAULT_FROM_EMAIL,
        [professional.email],
    )
    logger.info(f"Lead notification sent for assignment {assignment.id}")
    return True


def send_professional_contact(case: Case) -> bool:
    """Introduce the accepting professional to the applicant."""
    try:
        intake = case.intake
    except Intake.DoesNotExist:
        logger.warning(f"Case {case.reference_number} has no intake, applicant not notified")
        return False

    professional = case.professional
    message = (
        f"Hello {intake.applicant_name},\n\n"
        f"{_display_name(professional)} has accepted your {intake.service.name} request "
        f"and will be in touch.\n\n"
        f"Email: {professional.email}\n"
        f"Case reference: {case.reference_number}\n"
    )
    send_mail(
        f"Your specialist for {intake.service.name}",
        message,
        settings.DEFAULT_FROM_EMAIL,
        [intake.applicant_email],
    )
    logger.info(f"Professional contact email sent for case {case.reference_number}")
    return True
