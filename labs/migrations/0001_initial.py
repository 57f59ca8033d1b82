# labs/migrations/0001_initial.py
"""
Initial migration for LabWatch models.

This file is part of LabWatch.
Copyright (C) 2025 LabWatch Contributors

This program is free software: you can redistribute it and/or modify
it under the terms of the GNU General Public License as published by
the Free Software Foundation, either version 3 of the License, or
(at your option) any later version.
"""

from django.conf import settings
from django.db import migrations, models
import django.db.models.deletion
import labs.models
import uuid


class Migration(migrations.Migration):

    initial = True

    dependencies = [
        migrations.swappable_dependency(settings.AUTH_USER_MODEL),
    ]

    operations = [
        migrations.CreateModel(
            name='Laboratory',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('name', models.CharField(max_length=200)),
                ('building', models.CharField(max_length=200)),
                ('room_number', models.CharField(max_length=50)),
                ('capacity', models.PositiveIntegerField()),
                ('status', models.CharField(choices=[('active', 'Active'), ('maintenance', 'Under Maintenance'), ('closed', 'Closed')], default='active', max_length=20)),
                ('description', models.TextField(blank=True, null=True)),
                ('created_at', models.DateTimeField(auto_now_add=True)),
                ('updated_at', models.DateTimeField(auto_now=True)),
            ],
            options={
                'verbose_name_plural': 'laboratories',
                'db_table': 'labs_laboratory',
                'ordering': ['-created_at'],
            },
        ),
        migrations.CreateModel(
            name='UserProfile',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('role', models.CharField(choices=[('admin', 'Administrator'), ('faculty', 'Faculty'), ('custodian', 'Custodian')], default='faculty', max_length=20)),
                ('full_name', models.CharField(blank=True, max_length=200)),
                ('department', models.CharField(blank=True, max_length=200, null=True)),
                ('biometric_id', models.CharField(blank=True, help_text='Identifier reported by the fingerprint scanner', max_length=100, null=True, unique=True)),
                ('created_at', models.DateTimeField(auto_now_add=True)),
                ('updated_at', models.DateTimeField(auto_now=True)),
                ('user', models.OneToOneField(on_delete=django.db.models.deletion.CASCADE, to=settings.AUTH_USER_MODEL)),
            ],
            options={
                'db_table': 'labs_userprofile',
            },
        ),
        migrations.CreateModel(
            name='Equipment',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('equipment_type', models.CharField(choices=[('keyboard', 'Keyboard'), ('mouse', 'Mouse'), ('monitor', 'Monitor'), ('cpu', 'CPU'), ('other', 'Other')], max_length=20)),
                ('serial_number', models.CharField(blank=True, max_length=100, null=True)),
                ('brand', models.CharField(blank=True, max_length=100, null=True)),
                ('model', models.CharField(blank=True, max_length=100, null=True)),
                ('status', models.CharField(choices=[('present', 'Present'), ('missing', 'Missing'), ('damaged', 'Damaged'), ('maintenance', 'Maintenance')], default='present', max_length=20)),
                ('last_detected', models.DateTimeField(blank=True, null=True)),
                ('position_x', models.FloatField(blank=True, null=True)),
                ('position_y', models.FloatField(blank=True, null=True)),
                ('assigned_station', models.CharField(blank=True, max_length=50, null=True)),
                ('created_at', models.DateTimeField(auto_now_add=True)),
                ('updated_at', models.DateTimeField(auto_now=True)),
                ('laboratory', models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name='equipment', to='labs.laboratory')),
            ],
            options={
                'verbose_name_plural': 'equipment',
                'db_table': 'labs_equipment',
                'ordering': ['-created_at'],
                'indexes': [models.Index(fields=['laboratory', 'status'], name='labs_equipm_laborat_5b1e0c_idx')],
            },
        ),
        migrations.CreateModel(
            name='Schedule',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('day_of_week', models.PositiveSmallIntegerField(blank=True, choices=[(0, 'Sunday'), (1, 'Monday'), (2, 'Tuesday'), (3, 'Wednesday'), (4, 'Thursday'), (5, 'Friday'), (6, 'Saturday')], help_text='0 = Sunday; empty for one-time schedules', null=True)),
                ('start_time', models.CharField(help_text='HH:MM, 24-hour clock', max_length=5)),
                ('end_time', models.CharField(help_text='HH:MM, 24-hour clock', max_length=5)),
                ('course_code', models.CharField(blank=True, max_length=50, null=True)),
                ('section', models.CharField(blank=True, max_length=50, null=True)),
                ('subject', models.CharField(blank=True, max_length=200, null=True)),
                ('is_recurring', models.BooleanField(default=True)),
                ('start_date', models.DateTimeField(blank=True, help_text='Date of a one-time schedule', null=True)),
                ('end_date', models.DateTimeField(blank=True, help_text='Last date of a recurring schedule', null=True)),
                ('created_at', models.DateTimeField(auto_now_add=True)),
                ('updated_at', models.DateTimeField(auto_now=True)),
                ('laboratory', models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name='schedules', to='labs.laboratory')),
                ('user', models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name='lab_schedules', to=settings.AUTH_USER_MODEL)),
            ],
            options={
                'db_table': 'labs_schedule',
                'ordering': ['-created_at'],
                'indexes': [
                    models.Index(fields=['laboratory', 'day_of_week'], name='labs_schedu_laborat_3f2a1d_idx'),
                    models.Index(fields=['user', 'laboratory'], name='labs_schedu_user_id_8c4e7b_idx'),
                ],
            },
        ),
        migrations.CreateModel(
            name='AttendanceLog',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('check_in_time', models.DateTimeField()),
                ('check_out_time', models.DateTimeField(blank=True, null=True)),
                ('verification_method', models.CharField(choices=[('manual', 'Manual'), ('biometric', 'Biometric'), ('qr_code', 'QR Code')], max_length=20)),
                ('biometric_data', models.CharField(blank=True, max_length=100, null=True)),
                ('ip_address', models.CharField(blank=True, max_length=64, null=True)),
                ('notes', models.TextField(blank=True, null=True)),
                ('created_at', models.DateTimeField(auto_now_add=True)),
                ('updated_at', models.DateTimeField(auto_now=True)),
                ('laboratory', models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name='attendance_logs', to='labs.laboratory')),
                ('schedule', models.ForeignKey(blank=True, help_text='Schedule matched when the session was opened', null=True, on_delete=django.db.models.deletion.SET_NULL, related_name='attendance_logs', to='labs.schedule')),
                ('user', models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name='attendance_logs', to=settings.AUTH_USER_MODEL)),
            ],
            options={
                'db_table': 'labs_attendancelog',
                'ordering': ['-check_in_time'],
                'indexes': [
                    models.Index(fields=['user', 'laboratory'], name='labs_attend_user_id_6d9f2a_idx'),
                    models.Index(fields=['check_in_time'], name='labs_attend_check_i_1a7c3e_idx'),
                ],
                'constraints': [
                    models.UniqueConstraint(condition=models.Q(('check_out_time__isnull', True)), fields=('user', 'laboratory'), name='one_open_session_per_user_lab'),
                ],
            },
        ),
        migrations.CreateModel(
            name='Alert',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('alert_type', models.CharField(choices=[('equipment_missing', 'Equipment Missing'), ('unauthorized_access', 'Unauthorized Access'), ('overcapacity', 'Over Capacity'), ('equipment_damaged', 'Equipment Damaged'), ('system_error', 'System Error')], max_length=30)),
                ('severity', models.CharField(choices=[('low', 'Low'), ('medium', 'Medium'), ('high', 'High'), ('critical', 'Critical')], max_length=10)),
                ('title', models.CharField(max_length=200)),
                ('message', models.TextField()),
                ('resolved', models.BooleanField(default=False)),
                ('resolved_at', models.DateTimeField(blank=True, null=True)),
                ('data', models.JSONField(blank=True, default=dict)),
                ('created_at', models.DateTimeField(auto_now_add=True)),
                ('laboratory', models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.CASCADE, related_name='alerts', to='labs.laboratory')),
                ('resolved_by', models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.SET_NULL, related_name='resolved_alerts', to=settings.AUTH_USER_MODEL)),
            ],
            options={
                'db_table': 'labs_alert',
                'ordering': ['-created_at'],
            },
        ),
        migrations.CreateModel(
            name='PasswordResetToken',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('token', models.UUIDField(default=uuid.uuid4, unique=True)),
                ('created_at', models.DateTimeField(auto_now_add=True)),
                ('expires_at', models.DateTimeField(default=labs.models.default_reset_token_expiry)),
                ('is_used', models.BooleanField(default=False)),
                ('user', models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name='password_reset_tokens', to=settings.AUTH_USER_MODEL)),
            ],
            options={
                'db_table': 'labs_passwordresettoken',
            },
        ),
    ]
