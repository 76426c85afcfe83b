"""
Django admin configuration for leads app.
"""
from django.contrib import admin
from leads.models import Assignment, Case, Intake, ProfessionalSpecialization, Service


class AssignmentInline(admin.TabularInline):
    """Inline display of offers made for an intake."""
    model = Assignment
    extra = 0
    readonly_fields = ('professional', 'attempt_number', 'status', 'assigned_at', 'expires_at',
                       'responded_at', 'declined_reason')
    can_delete = False

    def has_add_permission(self, request, obj=None):
        """Offers are only created by routing."""
        return False


@admin.register(Service)
class ServiceAdmin(admin.ModelAdmin):
    list_display = ('name', 'slug', 'case_type', 'is_active')
    list_filter = ('is_active',)
    search_fields = ('name', 'slug')


@admin.register(Intake)
class IntakeAdmin(admin.ModelAdmin):
    """Admin interface for Intake model."""

    list_display = ('id', 'reference_number', 'service', 'applicant_name', 'status', 'submitted_at')
    list_filter = ('status', 'urgency_level', 'service')
    search_fields = ('reference_number', 'applicant_name', 'applicant_email')
    readonly_fields = ('submitted_at', 'converted_case')

    fieldsets = (
        ('Status', {
            'fields': ('reference_number', 'service', 'status', 'urgency_level', 'converted_case')
        }),
        ('Applicant', {
            'fields': ('applicant_name', 'applicant_email', 'applicant_phone',
                       'applicant_country', 'destination_country')
        }),
        ('Details', {
            'fields': ('description', 'submitted_at'),
            'classes': ('collapse',)
        }),
    )

    inlines = [AssignmentInline]


@admin.register(Assignment)
class AssignmentAdmin(admin.ModelAdmin):
    """Admin interface for Assignment model."""

    list_display = ('id', 'intake', 'professional', 'attempt_number', 'status', 'expires_at')
    list_filter = ('status', 'assigned_at')
    search_fields = ('intake__reference_number', 'professional__username')
    readonly_fields = ('intake', 'professional', 'attempt_number', 'status', 'assigned_at',
                       'expires_at', 'responded_at', 'declined_reason')

    def has_add_permission(self, request):
        """Offers are only created by routing."""
        return False

    def has_delete_permission(self, request, obj=None):
        """Disable assignment deletion through admin."""
        return False


@admin.register(Case)
class CaseAdmin(admin.ModelAdmin):
    list_display = ('reference_number', 'title', 'professional', 'priority', 'status', 'created_at')
    list_filter = ('status', 'priority')
    search_fields = ('reference_number', 'title')
    readonly_fields = ('reference_number', 'created_at')

    def has_delete_permission(self, request, obj=None):
        """Deleting a case would orphan its converted intake."""
        return False


@admin.register(ProfessionalSpecialization)
class ProfessionalSpecializationAdmin(admin.ModelAdmin):
    list_display = ('professional', 'service', 'max_concurrent_leads', 'is_accepting_leads', 'success_rate')
    list_filter = ('is_accepting_leads', 'service')
    search_fields = ('professional__username',)
