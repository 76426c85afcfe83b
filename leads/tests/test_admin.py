"""
Unit tests for the admin permission hooks.
"""
import pytest

from django.contrib import admin
from django.test import RequestFactory

from leads.admin import AssignmentAdmin, AssignmentInline, CaseAdmin
from leads.models import Assignment, Case, Intake


@pytest.fixture
def admin_request(django_user_model):
    request = RequestFactory().get('/admin/')
    request.user = django_user_model.objects.create_superuser(
        username='admin', email='admin@example.com', password='admin-pass'
    )
    return request


@pytest.mark.django_db
class TestAdminPermissions:
    """Assignments and cases are managed only by the lead workflow."""

    def test_assignment_inline_cannot_add(self, admin_request, make_intake):
        inline = AssignmentInline(Intake, admin.site)
        assert inline.has_add_permission(admin_request, make_intake()) is False

    def test_assignment_admin_cannot_add_or_delete(self, admin_request):
        model_admin = AssignmentAdmin(Assignment, admin.site)
        assert model_admin.has_add_permission(admin_request) is False
        assert model_admin.has_delete_permission(admin_request) is False

    def test_case_cannot_be_deleted(self, admin_request):
        model_admin = CaseAdmin(Case, admin.site)
        assert model_admin.has_delete_permission(admin_request) is False
        assert model_admin.has_change_permission(admin_request) is True
