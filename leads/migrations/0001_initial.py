# Generated migration for Service, Case, Intake, Assignment and ProfessionalSpecialization models

from django.conf import settings
from django.db import migrations, models
import django.db.models.deletion


class Migration(migrations.Migration):

    initial = True

    dependencies = [
        migrations.swappable_dependency(settings.AUTH_USER_MODEL),
    ]

    operations = [
        migrations.CreateModel(
            name='Service',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('name', models.CharField(max_length=200)),
                ('slug', models.SlugField(max_length=200, unique=True)),
                ('case_type', models.CharField(max_length=100)),
                ('is_active', models.BooleanField(default=True)),
            ],
            options={
                'ordering': ['name'],
            },
        ),
        migrations.CreateModel(
            name='Case',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('reference_number', models.CharField(max_length=32, unique=True)),
                ('title', models.CharField(max_length=300)),
                ('case_type', models.CharField(max_length=100)),
                ('origin_country', models.CharField(max_length=100)),
                ('destination_country', models.CharField(max_length=100)),
                ('priority', models.CharField(choices=[('low', 'Low'), ('normal', 'Normal'), ('high', 'High'), ('urgent', 'Urgent')], default='normal', max_length=10)),
                ('notes', models.TextField(blank=True)),
                ('status', models.CharField(choices=[('open', 'Open'), ('closed', 'Closed')], db_index=True, default='open', max_length=10)),
                ('created_at', models.DateTimeField(auto_now_add=True)),
                ('professional', models.ForeignKey(on_delete=django.db.models.deletion.PROTECT, related_name='cases', to=settings.AUTH_USER_MODEL)),
            ],
            options={
                'ordering': ['-created_at'],
            },
        ),
        migrations.CreateModel(
            name='Intake',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('reference_number', models.CharField(max_length=32, unique=True)),
                ('status', models.CharField(choices=[('pending_assignment', 'Pending Assignment'), ('assigned', 'Assigned'), ('converted', 'Converted'), ('no_match_found', 'No Match Found'), ('declined_all', 'Declined By All')], db_index=True, default='pending_assignment', max_length=20)),
                ('applicant_name', models.CharField(max_length=200)),
                ('applicant_email', models.EmailField(max_length=254)),
                ('applicant_phone', models.CharField(blank=True, max_length=50, null=True)),
                ('applicant_country', models.CharField(max_length=100)),
                ('destination_country', models.CharField(max_length=100)),
                ('description', models.TextField()),
                ('urgency_level', models.CharField(choices=[('standard', 'Standard'), ('soon', 'Soon'), ('urgent', 'Urgent'), ('emergency', 'Emergency')], default='standard', max_length=10)),
                ('submitted_at', models.DateTimeField(auto_now_add=True, db_index=True)),
                ('converted_case', models.OneToOneField(blank=True, null=True, on_delete=django.db.models.deletion.SET_NULL, related_name='intake', to='leads.case')),
                ('service', models.ForeignKey(on_delete=django.db.models.deletion.PROTECT, related_name='intakes', to='leads.service')),
            ],
            options={
                'ordering': ['-submitted_at'],
            },
        ),
        migrations.CreateModel(
            name='Assignment',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('attempt_number', models.PositiveIntegerField()),
                ('status', models.CharField(choices=[('pending', 'Pending'), ('accepted', 'Accepted'), ('declined', 'Declined')], db_index=True, default='pending', max_length=10)),
                ('assigned_at', models.DateTimeField(auto_now_add=True, db_index=True)),
                ('responded_at', models.DateTimeField(blank=True, null=True)),
                ('expires_at', models.DateTimeField(db_index=True)),
                ('declined_reason', models.CharField(blank=True, max_length=500, null=True)),
                ('intake', models.ForeignKey(on_delete=django.db.models.deletion.PROTECT, related_name='assignments', to='leads.intake')),
                ('professional', models.ForeignKey(on_delete=django.db.models.deletion.PROTECT, related_name='lead_assignments', to=settings.AUTH_USER_MODEL)),
            ],
            options={
                'ordering': ['-assigned_at'],
            },
        ),
        migrations.CreateModel(
            name='ProfessionalSpecialization',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('origin_corridors', models.JSONField(blank=True, default=list)),
                ('destination_corridors', models.JSONField(blank=True, default=list)),
                ('max_concurrent_leads', models.PositiveIntegerField(default=5)),
                ('is_accepting_leads', models.BooleanField(default=True)),
                ('success_rate', models.FloatField(blank=True, null=True)),
                ('professional', models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name='specializations', to=settings.AUTH_USER_MODEL)),
                ('service', models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name='specializations', to='leads.service')),
            ],
        ),
        migrations.AddIndex(
            model_name='assignment',
            index=models.Index(fields=['professional', 'status'], name='leads_assig_profess_7c1e2a_idx'),
        ),
        migrations.AddIndex(
            model_name='assignment',
            index=models.Index(fields=['status', 'expires_at'], name='leads_assig_status_3f9b4d_idx'),
        ),
        migrations.AddConstraint(
            model_name='assignment',
            constraint=models.UniqueConstraint(fields=('intake', 'attempt_number'), name='unique_attempt_per_intake'),
        ),
        migrations.AddConstraint(
            model_name='professionalspecialization',
            constraint=models.UniqueConstraint(fields=('professional', 'service'), name='unique_specialization_per_service'),
        ),
    ]
