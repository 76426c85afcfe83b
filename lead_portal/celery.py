"""
Celery configuration for Lead Offer Portal.
"""
import os
from celery import Celery

os.environ.setdefault('DJANGO_SETTINGS_MODULE', 'lead_portal.settings')

app = Celery('lead_portal')
app.config_from_object('django.conf:settings', namespace='CELERY')
app.autodiscover_tasks()
