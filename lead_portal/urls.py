"""
URL configuration for lead_portal project.
"""
from django.contrib import admin
from django.urls import path, include

urlpatterns = [
    path('admin/', admin.site.urls),
    path('api/intake/', include('leads.urls')),
]
