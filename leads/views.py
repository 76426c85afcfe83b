"""
API views for Lead Offer Portal.
"""
import logging
import math
import uuid
from django.db import transaction
from django.utils import timezone
from django.utils.decorators import method_decorator
from django.views.decorators.csrf import csrf_exempt
from rest_framework.exceptions import ParseError
from rest_framework.permissions import AllowAny
from rest_framework.views import APIView
from rest_framework.response import Response
from rest_framework import status

from leads.models import Assignment, Intake, Service
from leads.serializers import (
    AssignmentSerializer,
    CaseSerializer,
    IntakeStatusSerializer,
    IntakeSubmitSerializer,
    RespondSerializer,
)
from leads.services.conversion import (
    AssignmentConflict,
    AssignmentNotFound,
    accept_assignment,
    decline_assignment,
    generate_reference,
)
from leads.tasks import offer_intake, send_applicant_confirmation_email

logger = logging.getLogger(__name__)

DEFAULT_PAGE_SIZE = 20
MAX_PAGE_SIZE = 100
# 'expired' is derived from expires_at, everything else is a stored status
STATUS_FILTERS = ('all', 'pending', 'accepted', 'declined', 'expired')


def _positive_int(value, default: int, maximum: int = None) -> int:
    try:
        number = int(value)
    except (TypeError, ValueError):
        return default
    if number < 1:
        return default
    if maximum is not None:
        number = min(number, maximum)
    return number


class MyLeadsView(APIView):
    """
    Leads offered to the authenticated professional.

    GET /api/intake/my-leads?status=&page=&limit=
    - Newest offers first, each with its intake embedded
    - Applicant contact details stay masked until the lead is accepted
    """

    def get(self, request):
        correlation_id = str(uuid.uuid4())

        status_filter = request.query_params.get('status') or 'all'
        if status_filter not in STATUS_FILTERS:
            return Response(
                {
                    'success': False,
                    'error': f"Unknown status filter: {status_filter}",
                    'correlation_id': correlation_id
                },
                status=status.HTTP_400_BAD_REQUEST
            )

        page = _positive_int(request.query_params.get('page'), 1)
        limit = _positive_int(request.query_params.get('limit'), DEFAULT_PAGE_SIZE, MAX_PAGE_SIZE)

        queryset = (
            Assignment.objects
            .filter(professional=request.user)
            .select_related('intake', 'intake__service')
            .order_by('-assigned_at', '-id')
        )
        if status_filter == 'expired':
            queryset = queryset.filter(status=Assignment.Status.PENDING, expires_at__lte=timezone.now())
        elif status_filter != 'all':
            queryset = queryset.filter(status=status_filter)

        total = queryset.count()
        offset = (page - 1) * limit
        assignments = queryset[offset:offset + limit]

        logger.debug(
            f"Listing leads for professional {request.user.pk}: "
            f"status={status_filter} page={page} total={total}, "
            f"correlation_id={correlation_id}"
        )

        return Response(
            {
                'success': True,
                'data': {
                    'assignments': AssignmentSerializer(assignments, many=True).data,
                    'pagination': {
                        'page': page,
                        'limit': limit,
                        'total': total,
                        'pages': math.ceil(total / limit),
                    },
                },
                'message': 'Leads retrieved successfully',
            },
            status=status.HTTP_200_OK
        )


class RespondToLeadView(APIView):
    """
    Accept or decline a lead.

    POST /api/intake/respond
    - {"assignmentId": 1, "action": "accept"} creates a case
    - {"assignmentId": 1, "action": "decline", "declinedReason": "..."}
      hands the intake to the next professional
    """

    def post(self, request):
        """
        Handle a professional's response.

        Returns:
            200 OK: Response recorded
            400 Bad Request: Malformed body
            404 Not Found: No such assignment for this professional
            409 Conflict: Assignment already responded to, expired, or taken
            500 Internal Server Error: Unexpected error
        """
        correlation_id = str(uuid.uuid4())

        try:
            serializer = RespondSerializer(data=request.data)
            if not serializer.is_valid():
                logger.warning(
                    f"Invalid respond payload: {serializer.errors}, "
                    f"correlation_id={correlation_id}"
                )
                return Response(
                    {
                        'success': False,
                        'error': 'Assignment ID and a valid action are required',
                        'errors': serializer.errors,
                        'correlation_id': correlation_id
                    },
                    status=status.HTTP_400_BAD_REQUEST
                )

            assignment_id = serializer.validated_data['assignmentId']
            action = serializer.validated_data['action']

            if action == 'accept':
                case = accept_assignment(assignment_id, request.user)
                return Response(
                    {
                        'success': True,
                        'data': {'case': CaseSerializer(case).data},
                        'message': 'Lead accepted. Case created.',
                        'correlation_id': correlation_id
                    },
                    status=status.HTTP_200_OK
                )

            decline_assignment(
                assignment_id,
                request.user,
                serializer.validated_data.get('declinedReason')
            )
            return Response(
                {
                    'success': True,
                    'message': 'Lead declined. Finding next specialist.',
                    'correlation_id': correlation_id
                },
                status=status.HTTP_200_OK
            )

        except ParseError as e:
            logger.warning(
                f"Malformed JSON payload: {e}, "
                f"correlation_id={correlation_id}"
            )
            return Response(
                {
                    'success': False,
                    'error': 'Malformed JSON',
                    'correlation_id': correlation_id
                },
                status=status.HTTP_400_BAD_REQUEST
            )
        except AssignmentNotFound as e:
            logger.info(f"{e}, correlation_id={correlation_id}")
            return Response(
                {
                    'success': False,
                    'error': 'Assignment not found',
                    'correlation_id': correlation_id
                },
                status=status.HTTP_404_NOT_FOUND
            )
        except AssignmentConflict as e:
            logger.info(f"Stale response rejected: {e}, correlation_id={correlation_id}")
            return Response(
                {
                    'success': False,
                    'error': str(e),
                    'correlation_id': correlation_id
                },
                status=status.HTTP_409_CONFLICT
            )
        except Exception as e:
            logger.error(
                f"Error responding to lead: {e}, "
                f"correlation_id={correlation_id}",
                exc_info=True
            )
            return Response(
                {
                    'success': False,
                    'error': 'Internal server error',
                    'correlation_id': correlation_id
                },
                status=status.HTTP_500_INTERNAL_SERVER_ERROR
            )


@method_decorator(csrf_exempt, name='dispatch')
class SubmitIntakeView(APIView):
    """
    Public intake submission.

    POST /api/intake/submit
    - Validates the request and stores it as pending_assignment
    - Routing and the applicant's confirmation email run after commit
    - Returns 201 with the reference number the applicant tracks it by
    """

    authentication_classes = []
    permission_classes = [AllowAny]

    def post(self, request):
        """
        Handle an applicant's submission.

        Returns:
            201 Created: Intake stored and queued for routing
            400 Bad Request: Malformed JSON or failed validation
            404 Not Found: Unknown or inactive service
            500 Internal Server Error: Unexpected error
        """
        correlation_id = str(uuid.uuid4())

        try:
            serializer = IntakeSubmitSerializer(data=request.data)
            if not serializer.is_valid():
                logger.warning(
                    f"Invalid intake submission: {serializer.errors}, "
                    f"correlation_id={correlation_id}"
                )
                return Response(
                    {
                        'success': False,
                        'error': 'Validation failed',
                        'errors': serializer.errors,
                        'correlation_id': correlation_id
                    },
                    status=status.HTTP_400_BAD_REQUEST
                )
            data = serializer.validated_data

            service = Service.objects.filter(id=data['serviceId'], is_active=True).first()
            if service is None:
                logger.info(
                    f"Intake for unknown or inactive service {data['serviceId']}, "
                    f"correlation_id={correlation_id}"
                )
                return Response(
                    {
                        'success': False,
                        'error': 'Service not found or inactive',
                        'correlation_id': correlation_id
                    },
                    status=status.HTTP_404_NOT_FOUND
                )

            with transaction.atomic():
                intake = Intake.objects.create(
                    service=service,
                    reference_number=generate_reference('INT', Intake),
                    status=Intake.Status.PENDING_ASSIGNMENT,
                    applicant_name=data['applicantName'],
                    applicant_email=data['applicantEmail'],
                    applicant_phone=data.get('applicantPhone'),
                    applicant_country=data['applicantCountry'],
                    destination_country=data['destinationCountry'],
                    description=data['description'],
                    urgency_level=data['urgencyLevel'],
                )
                intake_id = intake.id
                transaction.on_commit(lambda: offer_intake.delay(intake_id))
                transaction.on_commit(lambda: send_applicant_confirmation_email.delay(intake_id))

            logger.info(
                f"Intake {intake.reference_number} submitted and queued for routing, "
                f"correlation_id={correlation_id}"
            )

            return Response(
                {
                    'success': True,
                    'data': {
                        'referenceNumber': intake.reference_number,
                        'status': intake.status,
                    },
                    'message': 'Intake submitted successfully',
                    'correlation_id': correlation_id
                },
                status=status.HTTP_201_CREATED
            )

        except ParseError as e:
            logger.warning(
                f"Malformed JSON payload: {e}, "
                f"correlation_id={correlation_id}"
            )
            return Response(
                {
                    'success': False,
                    'error': 'Malformed JSON',
                    'correlation_id': correlation_id
                },
                status=status.HTTP_400_BAD_REQUEST
            )
        except Exception as e:
            logger.error(
                f"Error submitting intake: {e}, "
                f"correlation_id={correlation_id}",
                exc_info=True
            )
            return Response(
                {
                    'success': False,
                    'error': 'Internal server error',
                    'correlation_id': correlation_id
                },
                status=status.HTTP_500_INTERNAL_SERVER_ERROR
            )


class IntakeStatusView(APIView):
    """
    Public intake tracking.

    GET /api/intake/status/<reference>?email=
    - The email must match the applicant's; a mismatch reads as not found
    """

    authentication_classes = []
    permission_classes = [AllowAny]

    def get(self, request, reference):
        correlation_id = str(uuid.uuid4())

        email = (request.query_params.get('email') or '').strip()
        if not email:
            return Response(
                {
                    'success': False,
                    'error': 'Reference number and email are required',
                    'correlation_id': correlation_id
                },
                status=status.HTTP_400_BAD_REQUEST
            )

        intake = (
            Intake.objects
            .select_related('service', 'converted_case')
            .filter(reference_number=reference)
            .first()
        )
        if intake is None or intake.applicant_email.lower() != email.lower():
            logger.info(f"Status lookup for {reference} not matched, correlation_id={correlation_id}")
            return Response(
                {
                    'success': False,
                    'error': 'Reference not found',
                    'correlation_id': correlation_id
                },
                status=status.HTTP_404_NOT_FOUND
            )

        return Response(
            {
                'success': True,
                'data': IntakeStatusSerializer(intake).data,
                'message': 'Status retrieved successfully',
                'correlation_id': correlation_id
            },
            status=status.HTTP_200_OK
        )
