"""
Serializers for the leads API.

Field names on the wire are camelCase.
"""
from rest_framework import serializers

from leads.models import Assignment, Case, Intake, Service
from leads.services.privacy import mask_email, mask_phone, privacy_name


class ServiceSerializer(serializers.ModelSerializer):
    caseType = serializers.CharField(source='case_type')

    class Meta:
        model = Service
        fields = ['id', 'name', 'slug', 'caseType']


class IntakeSerializer(serializers.ModelSerializer):
    """
    Intake as shown to a professional.

    Applicant contact details are masked unless the serializer context has
    ``reveal_contact`` set (the professional accepted the lead).
    """

    referenceNumber = serializers.CharField(source='reference_number')
    serviceId = serializers.IntegerField(source='service_id')
    service = ServiceSerializer()
    serviceName = serializers.CharField(source='service.name')
    applicantName = serializers.CharField(source='applicant_name')
    applicantEmail = serializers.CharField(source='applicant_email')
    applicantPhone = serializers.CharField(source='applicant_phone', allow_null=True)
    applicantCountry = serializers.CharField(source='applicant_country')
    destinationCountry = serializers.CharField(source='destination_country')
    urgencyLevel = serializers.CharField(source='urgency_level')
    submittedAt = serializers.DateTimeField(source='submitted_at')
    convertedCaseId = serializers.IntegerField(source='converted_case_id', allow_null=True)

    class Meta:
        model = Intake
        fields = [
            'id', 'referenceNumber', 'serviceId', 'service', 'serviceName', 'status',
            'applicantName', 'applicantEmail', 'applicantPhone',
            'applicantCountry', 'destinationCountry', 'urgencyLevel',
            'description', 'submittedAt', 'convertedCaseId',
        ]

    def to_representation(self, instance):
        data = super().to_representation(instance)
        if not self.context.get('reveal_contact'):
            data['applicantName'] = privacy_name(data['applicantName'])
            data['applicantEmail'] = mask_email(data['applicantEmail'])
            if data['applicantPhone']:
                data['applicantPhone'] = mask_phone(data['applicantPhone'])
        return data


class AssignmentSerializer(serializers.ModelSerializer):
    intakeId = serializers.IntegerField(source='intake_id')
    professionalId = serializers.IntegerField(source='professional_id')
    attemptNumber = serializers.IntegerField(source='attempt_number')
    assignedAt = serializers.DateTimeField(source='assigned_at')
    respondedAt = serializers.DateTimeField(source='responded_at', allow_null=True)
    declinedReason = serializers.CharField(source='declined_reason', allow_null=True)
    expiresAt = serializers.DateTimeField(source='expires_at')
    intake = serializers.SerializerMethodField()

    class Meta:
        model = Assignment
        fields = [
            'id', 'intakeId', 'intake', 'professionalId', 'status',
            'attemptNumber', 'assignedAt', 'respondedAt', 'declinedReason',
            'expiresAt',
        ]

    def get_intake(self, obj):
        reveal = obj.status == Assignment.Status.ACCEPTED
        return IntakeSerializer(obj.intake, context={'reveal_contact': reveal}).data


class CaseSerializer(serializers.ModelSerializer):
    referenceNumber = serializers.CharField(source='reference_number')
    caseType = serializers.CharField(source='case_type')
    originCountry = serializers.CharField(source='origin_country')
    destinationCountry = serializers.CharField(source='destination_country')
    createdAt = serializers.DateTimeField(source='created_at')

    class Meta:
        model = Case
        fields = [
            'id', 'referenceNumber', 'title', 'caseType', 'originCountry',
            'destinationCountry', 'priority', 'status', 'createdAt',
        ]


class RespondSerializer(serializers.Serializer):
    """Body of POST /api/intake/respond."""

    assignmentId = serializers.IntegerField(min_value=1)
    action = serializers.ChoiceField(choices=['accept', 'decline'])
    declinedReason = serializers.CharField(
        required=False,
        allow_blank=True,
        allow_null=True,
        max_length=500
    )


class IntakeSubmitSerializer(serializers.Serializer):
    """Body of POST /api/intake/submit (public)."""

    serviceId = serializers.IntegerField(min_value=1)
    applicantName = serializers.CharField(min_length=2, max_length=200)
    applicantEmail = serializers.EmailField()
    applicantPhone = serializers.CharField(
        required=False,
        allow_blank=True,
        allow_null=True,
        max_length=50
    )
    applicantCountry = serializers.CharField(max_length=100)
    destinationCountry = serializers.CharField(max_length=100)
    description = serializers.CharField(min_length=20)
    urgencyLevel = serializers.ChoiceField(
        choices=Intake.Urgency.values + ['normal'],
        required=False,
        default=Intake.Urgency.STANDARD
    )

    def validate_applicantEmail(self, value):
        return value.lower()

    def validate_applicantPhone(self, value):
        return value or None

    def validate_urgencyLevel(self, value):
        # Submission forms send 'normal' for the standard tier
        if value == 'normal':
            return Intake.Urgency.STANDARD
        return value


class IntakeStatusSerializer(serializers.ModelSerializer):
    """Intake progress as shown to the applicant who submitted it."""

    referenceNumber = serializers.CharField(source='reference_number')
    serviceName = serializers.CharField(source='service.name')
    submittedAt = serializers.DateTimeField(source='submitted_at')

    class Meta:
        model = Intake
        fields = ['status', 'referenceNumber', 'serviceName', 'submittedAt']

    def to_representation(self, instance):
        data = super().to_representation(instance)
        if instance.status == Intake.Status.CONVERTED and instance.converted_case is not None:
            data['caseReference'] = instance.converted_case.reference_number
        if instance.status == Intake.Status.ASSIGNED:
            offer = (
                instance.assignments
                .filter(status=Assignment.Status.PENDING)
                .order_by('-assigned_at', '-id')
                .first()
            )
            if offer is not None:
                data['expiresAt'] = serializers.DateTimeField().to_representation(offer.expires_at)
        return data
