"""
URL configuration for leads app.
"""
from django.urls import path
from leads.views import IntakeStatusView, MyLeadsView, RespondToLeadView, SubmitIntakeView

urlpatterns = [
    path('submit', SubmitIntakeView.as_view(), name='submit-intake'),
    path('status/<str:reference>', IntakeStatusView.as_view(), name='intake-status'),
    path('my-leads', MyLeadsView.as_view(), name='my-leads'),
    path('respond', RespondToLeadView.as_view(), name='respond-to-lead'),
]
