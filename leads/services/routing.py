"""
Routing of intakes to professionals.

An intake is offered to one professional at a time. Each offer is a pending
Assignment with a deadline; when it is declined or runs out, the intake is
offered to the next best match until LEAD_MAX_ATTEMPTS offers have been made.
"""
import logging
from dataclasses import dataclass
from datetime import timedelta
from typing import Iterable, List, Optional

from django.conf import settings
from django.db import transaction
from django.db.models import Q
from django.utils import timezone

from leads.models import Assignment, Intake, ProfessionalSpecialization

logger = logging.getLogger(__name__)

BASE_SCORE = 100
CORRIDOR_BONUS = 30
SUCCESS_RATE_BONUS = 20
SUCCESS_RATE_THRESHOLD = 80
LOAD_PENALTY = 5


@dataclass
class Match:
    professional: object
    specialization: ProfessionalSpecialization
    score: int
    active_assignments: int


def active_assignment_count(professional, now=None) -> int:
    """Accepted leads plus pending offers that have not expired yet."""
    now = now or timezone.now()
    return Assignment.objects.filter(professional=professional).filter(
        Q(status=Assignment.Status.ACCEPTED)
        | Q(status=Assignment.Status.PENDING, expires_at__gt=now)
    ).count()


def _corridor_allows(corridors: list, country: str) -> bool:
    return not corridors or country in corridors


def score_match(specialization: ProfessionalSpecialization, active_assignments: int) -> int:
    score = BASE_SCORE
    if specialization.origin_corridors:
        score += CORRIDOR_BONUS
    if specialization.destination_corridors:
        score += CORRIDOR_BONUS
    if specialization.success_rate is not None and specialization.success_rate >= SUCCESS_RATE_THRESHOLD:
        score += SUCCESS_RATE_BONUS
    score -= active_assignments * LOAD_PENALTY
    return score


def find_matching_professionals(intake: Intake, exclude: Iterable = ()) -> List[Match]:
    """
    Rank professionals who can take this intake.

    Business Rules:
    1. Specialization covers the intake's service and is accepting leads
    2. Professional account is active
    3. Origin/destination corridors include the intake's countries
       (an empty corridor list matches any country)
    4. Professional is below their max_concurrent_leads
    5. Professional is not in ``exclude`` (ids of those already offered it)

    Returns:
        Best matches first, at most LEAD_MAX_MATCHES
    """
    now = timezone.now()
    specializations = (
        ProfessionalSpecialization.objects
        .filter(service_id=intake.service_id, is_accepting_leads=True, professional__is_active=True)
        .exclude(professional_id__in=list(exclude))
        .select_related('professional')
    )

    matches = []
    for specialization in specializations:
        if not _corridor_allows(specialization.origin_corridors, intake.applicant_country):
            continue
        if not _corridor_allows(specialization.destination_corridors, intake.destination_country):
            continue

        active = active_assignment_count(specialization.professional, now)
        if active >= specialization.max_concurrent_leads:
            logger.debug(
                f"Routing skip: professional {specialization.professional_id} at capacity "
                f"({active}/{specialization.max_concurrent_leads})"
            )
            continue

        matches.append(Match(
            professional=specialization.professional,
            specialization=specialization,
            score=score_match(specialization, active),
            active_assignments=active,
        ))

    matches.sort(key=lambda m: m.score, reverse=True)
    return matches[:settings.LEAD_MAX_MATCHES]


def assign_intake(intake_id: int) -> Optional[Assignment]:
    """
    Offer an intake awaiting assignment to its best untried match.
    The professional is emailed once the offer is committed.

    Returns:
        The new pending Assignment, or None if the intake is not awaiting
        assignment or nobody is left to offer it to
    """
    from leads.tasks import send_lead_notification_email

    with transaction.atomic():
        try:
            intake = Intake.objects.select_for_update().get(id=intake_id)
        except Intake.DoesNotExist:
            logger.error(f"Intake {intake_id} not found for assignment")
            return None

        if intake.status != Intake.Status.PENDING_ASSIGNMENT:
            logger.info(f"Intake {intake_id} not awaiting assignment (status: {intake.status})")
            return None

        tried = set(intake.assignments.values_list('professional_id', flat=True))
        attempt_number = intake.assignments.count() + 1

        candidates = find_matching_professionals(intake, exclude=tried)
        if not candidates:
            intake.status = Intake.Status.NO_MATCH_FOUND
            intake.save(update_fields=['status'])
            logger.warning(f"No matching professionals for intake {intake_id}")
            return None

        winner = candidates[0]
        assignment = Assignment.objects.create(
            intake=intake,
            professional=winner.professional,
            attempt_number=attempt_number,
            status=Assignment.Status.PENDING,
            expires_at=timezone.now() + timedelta(hours=settings.LEAD_OFFER_TTL_HOURS),
        )

        intake.status = Intake.Status.ASSIGNED
        intake.save(update_fields=['status'])

        assignment_id = assignment.id
        transaction.on_commit(lambda: send_lead_notification_email.delay(assignment_id))

    logger.info(
        f"Intake {intake_id} offered to professional {winner.professional.pk} "
        f"(attempt {attempt_number}, score {winner.score})"
    )
    return assignment


def reassign_intake(intake_id: int) -> Optional[Assignment]:
    """
    Offer an intake to the next professional after a decline or expiry.

    Once LEAD_MAX_ATTEMPTS offers have been made the intake is marked
    declined_all. Converted intakes are left alone.
    """
    with transaction.atomic():
        try:
            intake = Intake.objects.select_for_update().get(id=intake_id)
        except Intake.DoesNotExist:
            logger.error(f"Intake {intake_id} not found for reassignment")
            return None

        if intake.converted_case_id is not None or intake.status != Intake.Status.ASSIGNED:
            logger.info(f"Intake {intake_id} not reassignable (status: {intake.status})")
            return None

        if intake.assignments.count() >= settings.LEAD_MAX_ATTEMPTS:
            intake.status = Intake.Status.DECLINED_ALL
            intake.save(update_fields=['status'])
            logger.warning(f"All {settings.LEAD_MAX_ATTEMPTS} offers used for intake {intake_id}")
            return None

        intake.status = Intake.Status.PENDING_ASSIGNMENT
        intake.save(update_fields=['status'])

    return assign_intake(intake_id)
