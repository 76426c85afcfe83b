"""
Data models for Lead Offer Portal.
"""
from django.conf import settings
from django.db import models


class Service(models.Model):
    """A service an applicant can request help with (e.g. a visa category)."""

    name = models.CharField(max_length=200)
    slug = models.SlugField(max_length=200, unique=True)
    case_type = models.CharField(max_length=100)
    is_active = models.BooleanField(default=True)

    class Meta:
        ordering = ['name']

    def __str__(self):
        return self.name


class Case(models.Model):
    """
    Case opened for a professional once they accept a lead.
    """

    class Priority(models.TextChoices):
        LOW = 'low', 'Low'
        NORMAL = 'normal', 'Normal'
        HIGH = 'high', 'High'
        URGENT = 'urgent', 'Urgent'

    class Status(models.TextChoices):
        OPEN = 'open', 'Open'
        CLOSED = 'closed', 'Closed'

    reference_number = models.CharField(max_length=32, unique=True)
    professional = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.PROTECT,
        related_name='cases'
    )
    title = models.CharField(max_length=300)
    case_type = models.CharField(max_length=100)
    origin_country = models.CharField(max_length=100)
    destination_country = models.CharField(max_length=100)
    priority = models.CharField(
        max_length=10,
        choices=Priority.choices,
        default=Priority.NORMAL
    )
    notes = models.TextField(blank=True)
    status = models.CharField(
        max_length=10,
        choices=Status.choices,
        default=Status.OPEN,
        db_index=True
    )
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        ordering = ['-created_at']

    def __str__(self):
        return f"Case {self.reference_number}"


class Intake(models.Model):
    """
    An applicant's service request.

    Offered to professionals one at a time through Assignments. Read-only from
    the professional's side; the backend sets converted_case when an
    assignment is accepted.
    """

    class Status(models.TextChoices):
        PENDING_ASSIGNMENT = 'pending_assignment', 'Pending Assignment'
        ASSIGNED = 'assigned', 'Assigned'
        CONVERTED = 'converted', 'Converted'
        NO_MATCH_FOUND = 'no_match_found', 'No Match Found'
        DECLINED_ALL = 'declined_all', 'Declined By All'

    class Urgency(models.TextChoices):
        STANDARD = 'standard', 'Standard'
        SOON = 'soon', 'Soon'
        URGENT = 'urgent', 'Urgent'
        EMERGENCY = 'emergency', 'Emergency'

    service = models.ForeignKey(Service, on_delete=models.PROTECT, related_name='intakes')
    reference_number = models.CharField(max_length=32, unique=True)
    status = models.CharField(
        max_length=20,
        choices=Status.choices,
        default=Status.PENDING_ASSIGNMENT,
        db_index=True
    )
    applicant_name = models.CharField(max_length=200)
    applicant_email = models.EmailField()
    applicant_phone = models.CharField(max_length=50, null=True, blank=True)
    applicant_country = models.CharField(max_length=100)
    destination_country = models.CharField(max_length=100)
    description = models.TextField()
    urgency_level = models.CharField(
        max_length=10,
        choices=Urgency.choices,
        default=Urgency.STANDARD
    )
    submitted_at = models.DateTimeField(auto_now_add=True, db_index=True)
    converted_case = models.OneToOneField(
        Case,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name='intake'
    )

    class Meta:
        ordering = ['-submitted_at']

    def __str__(self):
        return f"Intake {self.reference_number} - {self.status}"


class Assignment(models.Model):
    """
    One time-boxed offer of an Intake to one professional (a "lead").

    The stored status is only ever pending, accepted or declined. A pending
    assignment whose expires_at has passed is expired by derivation; nothing
    writes an expired status.
    """

    class Status(models.TextChoices):
        PENDING = 'pending', 'Pending'
        ACCEPTED = 'accepted', 'Accepted'
        DECLINED = 'declined', 'Declined'

    intake = models.ForeignKey(
        Intake,
        on_delete=models.PROTECT,
        related_name='assignments'
    )
    professional = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.PROTECT,
        related_name='lead_assignments'
    )
    attempt_number = models.PositiveIntegerField()
    status = models.CharField(
        max_length=10,
        choices=Status.choices,
        default=Status.PENDING,
        db_index=True
    )
    assigned_at = models.DateTimeField(auto_now_add=True, db_index=True)
    responded_at = models.DateTimeField(null=True, blank=True)
    expires_at = models.DateTimeField(db_index=True)
    declined_reason = models.CharField(max_length=500, null=True, blank=True)

    class Meta:
        ordering = ['-assigned_at']
        indexes = [
            models.Index(fields=['professional', 'status'], name='leads_assig_profess_7c1e2a_idx'),
            models.Index(fields=['status', 'expires_at'], name='leads_assig_status_3f9b4d_idx'),
        ]
        constraints = [
            models.UniqueConstraint(
                fields=['intake', 'attempt_number'],
                name='unique_attempt_per_intake'
            ),
        ]

    def __str__(self):
        return f"Assignment {self.id} (attempt {self.attempt_number}) - {self.status}"


class ProfessionalSpecialization(models.Model):
    """
    Which services a professional takes leads for, and on which corridors.

    Empty corridor lists match any country.
    """

    professional = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.CASCADE,
        related_name='specializations'
    )
    service = models.ForeignKey(Service, on_delete=models.CASCADE, related_name='specializations')
    origin_corridors = models.JSONField(default=list, blank=True)
    destination_corridors = models.JSONField(default=list, blank=True)
    max_concurrent_leads = models.PositiveIntegerField(default=5)
    is_accepting_leads = models.BooleanField(default=True)
    success_rate = models.FloatField(null=True, blank=True)

    class Meta:
        constraints = [
            models.UniqueConstraint(
                fields=['professional', 'service'],
                name='unique_specialization_per_service'
            ),
        ]

    def __str__(self):
        return f"{self.professional} - {self.service}"
