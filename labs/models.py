# labs/models.py
"""
Core models for LabWatch.

This file is part of LabWatch.
Copyright (C) 2025 LabWatch Contributors

This program is free software: you can redistribute it and/or modify
it under the terms of the GNU General Public License as published by
the Free Software Foundation, either version 3 of the License, or
(at your option) any later version.
"""

import re
import uuid
from datetime import timedelta

from django.conf import settings
from django.contrib.auth.models import User
from django.core.exceptions import ValidationError
from django.db import models
from django.db.models import Q
from django.utils import timezone

from .utils.timezone_utils import local_day_of_week, local_hhmm

TIME_OF_DAY_PATTERN = re.compile(r'^([01]\d|2[0-3]):[0-5]\d$')


class UserProfile(models.Model):
    """Role, display name and biometric credential for a user."""
    ROLE_ADMIN = 'admin'
    ROLE_FACULTY = 'faculty'
    ROLE_CUSTODIAN = 'custodian'
    ROLE_CHOICES = [
        (ROLE_ADMIN, 'Administrator'),
        (ROLE_FACULTY, 'Faculty'),
        (ROLE_CUSTODIAN, 'Custodian'),
    ]

    user = models.OneToOneField(User, on_delete=models.CASCADE)
    role = models.CharField(max_length=20, choices=ROLE_CHOICES, default=ROLE_FACULTY)
    full_name = models.CharField(max_length=200, blank=True)
    department = models.CharField(max_length=200, blank=True, null=True)
    biometric_id = models.CharField(
        max_length=100,
        unique=True,
        blank=True,
        null=True,
        help_text="Identifier reported by the fingerprint scanner"
    )

    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        db_table = 'labs_userprofile'

    def __str__(self):
        return f"{self.display_name} ({self.role})"

    def save(self, *args, **kwargs):
        # Empty strings would collide on the unique index.
        if not self.biometric_id:
            self.biometric_id = None
        super().save(*args, **kwargs)

    @property
    def display_name(self):
        return self.full_name or self.user.get_full_name() or self.user.username

    @property
    def is_admin(self):
        return self.role == self.ROLE_ADMIN

    @property
    def is_faculty(self):
        return self.role == self.ROLE_FACULTY

    @staticmethod
    def role_for(user):
        """Return the role of a user, treating superusers as admins."""
        if user is None or not user.is_authenticated:
            return None
        if user.is_superuser:
            return UserProfile.ROLE_ADMIN
        try:
            return user.userprofile.role
        except UserProfile.DoesNotExist:
            return None


class Laboratory(models.Model):
    """A room that can be scheduled and monitored."""
    STATUS_CHOICES = [
        ('active', 'Active'),
        ('maintenance', 'Under Maintenance'),
        ('closed', 'Closed'),
    ]

    name = models.CharField(max_length=200)
    building = models.CharField(max_length=200)
    room_number = models.CharField(max_length=50)
    capacity = models.PositiveIntegerField()
    status = models.CharField(max_length=20, choices=STATUS_CHOICES, default='active')
    description = models.TextField(blank=True, null=True)

    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        db_table = 'labs_laboratory'
        ordering = ['-created_at']
        verbose_name_plural = 'laboratories'

    def __str__(self):
        return f"{self.name} ({self.building} {self.room_number})"


class Equipment(models.Model):
    """A piece of hardware assigned to a station in a laboratory."""
    TYPE_CHOICES = [
        ('keyboard', 'Keyboard'),
        ('mouse', 'Mouse'),
        ('monitor', 'Monitor'),
        ('cpu', 'CPU'),
        ('other', 'Other'),
    ]
    STATUS_CHOICES = [
        ('present', 'Present'),
        ('missing', 'Missing'),
        ('damaged', 'Damaged'),
        ('maintenance', 'Maintenance'),
    ]

    laboratory = models.ForeignKey(Laboratory, on_delete=models.CASCADE, related_name='equipment')
    equipment_type = models.CharField(max_length=20, choices=TYPE_CHOICES)
    serial_number = models.CharField(max_length=100, blank=True, null=True)
    brand = models.CharField(max_length=100, blank=True, null=True)
    model = models.CharField(max_length=100, blank=True, null=True)
    status = models.CharField(max_length=20, choices=STATUS_CHOICES, default='present')
    last_detected = models.DateTimeField(null=True, blank=True)
    position_x = models.FloatField(null=True, blank=True)
    position_y = models.FloatField(null=True, blank=True)
    assigned_station = models.CharField(max_length=50, blank=True, null=True)

    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        db_table = 'labs_equipment'
        ordering = ['-created_at']
        verbose_name_plural = 'equipment'
        indexes = [
            models.Index(fields=['laboratory', 'status'], name='labs_equipm_laborat_5b1e0c_idx'),
        ]

    def __str__(self):
        return f"{self.get_equipment_type_display()} {self.serial_number or self.pk} ({self.laboratory.name})"


class ScheduleQuerySet(models.QuerySet):

    def matching(self, user, laboratory_id, moment, window_hours=None):
        """
        Schedules of a user in a laboratory that cover the given moment.

        Recurring rows match on the local day of week. One-time rows match
        when their start date lies within ``window_hours`` either side of the
        moment, which lets a one-time class dated yesterday or tomorrow match
        too as long as the time of day fits. Both kinds then need
        ``start_time <= HH:MM <= end_time``.
        """
        if window_hours is None:
            window_hours = getattr(settings, 'ONE_TIME_SCHEDULE_WINDOW_HOURS', 24)
        window = timedelta(hours=window_hours)
        current_time = local_hhmm(moment)

        recurring = Q(is_recurring=True, day_of_week=local_day_of_week(moment))
        one_time = Q(
            is_recurring=False,
            start_date__gte=moment - window,
            start_date__lte=moment + window,
        )
        return self.filter(
            user=user,
            laboratory_id=laboratory_id,
            start_time__lte=current_time,
            end_time__gte=current_time,
        ).filter(recurring | one_time)

    def upcoming(self, moment):
        """Recurring rows later today and one-time rows starting from now on."""
        return self.filter(
            Q(is_recurring=True, day_of_week=local_day_of_week(moment), start_time__gte=local_hhmm(moment)) |
            Q(is_recurring=False, start_date__gte=moment)
        )


class Schedule(models.Model):
    """A class booking of a laboratory by a faculty member."""
    DAY_CHOICES = [
        (0, 'Sunday'),
        (1, 'Monday'),
        (2, 'Tuesday'),
        (3, 'Wednesday'),
        (4, 'Thursday'),
        (5, 'Friday'),
        (6, 'Saturday'),
    ]

    laboratory = models.ForeignKey(Laboratory, on_delete=models.CASCADE, related_name='schedules')
    user = models.ForeignKey(User, on_delete=models.CASCADE, related_name='lab_schedules')
    day_of_week = models.PositiveSmallIntegerField(
        choices=DAY_CHOICES,
        null=True,
        blank=True,
        help_text="0 = Sunday; empty for one-time schedules"
    )
    start_time = models.CharField(max_length=5, help_text="HH:MM, 24-hour clock")
    end_time = models.CharField(max_length=5, help_text="HH:MM, 24-hour clock")
    course_code = models.CharField(max_length=50, blank=True, null=True)
    section = models.CharField(max_length=50, blank=True, null=True)
    subject = models.CharField(max_length=200, blank=True, null=True)
    is_recurring = models.BooleanField(default=True)
    start_date = models.DateTimeField(null=True, blank=True, help_text="Date of a one-time schedule")
    end_date = models.DateTimeField(null=True, blank=True, help_text="Last date of a recurring schedule")

    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    objects = ScheduleQuerySet.as_manager()

    class Meta:
        db_table = 'labs_schedule'
        ordering = ['-created_at']
        indexes = [
            models.Index(fields=['laboratory', 'day_of_week'], name='labs_schedu_laborat_3f2a1d_idx'),
            models.Index(fields=['user', 'laboratory'], name='labs_schedu_user_id_8c4e7b_idx'),
        ]

    def __str__(self):
        when = self.get_day_of_week_display() if self.is_recurring else (
            self.start_date.date().isoformat() if self.start_date else 'unscheduled'
        )
        return f"{self.course_code or 'Class'} - {self.laboratory.name} ({when} {self.start_time}-{self.end_time})"

    def clean(self):
        """Validate time strings and recurrence fields."""
        super().clean()
        for field in ('start_time', 'end_time'):
            value = getattr(self, field)
            if value and not TIME_OF_DAY_PATTERN.match(value):
                raise ValidationError({field: "Time must be in HH:MM format."})

        if self.start_time and self.end_time and self.start_time >= self.end_time:
            raise ValidationError("End time must be after start time.")

        if self.is_recurring and self.day_of_week is None:
            raise ValidationError("Recurring schedules need a day of week.")
        if not self.is_recurring and self.start_date is None:
            raise ValidationError("One-time schedules need a start date.")

    def save(self, *args, **kwargs):
        self.full_clean()
        super().save(*args, **kwargs)


class AttendanceLogQuerySet(models.QuerySet):

    def open_sessions(self):
        return self.filter(check_out_time__isnull=True)


class AttendanceLog(models.Model):
    """One check-in session of a user in a laboratory."""
    VERIFICATION_METHODS = [
        ('manual', 'Manual'),
        ('biometric', 'Biometric'),
        ('qr_code', 'QR Code'),
    ]

    user = models.ForeignKey(User, on_delete=models.CASCADE, related_name='attendance_logs')
    laboratory = models.ForeignKey(Laboratory, on_delete=models.CASCADE, related_name='attendance_logs')
    schedule = models.ForeignKey(
        Schedule,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name='attendance_logs',
        help_text="Schedule matched when the session was opened"
    )
    check_in_time = models.DateTimeField()
    check_out_time = models.DateTimeField(null=True, blank=True)
    verification_method = models.CharField(max_length=20, choices=VERIFICATION_METHODS)
    biometric_data = models.CharField(max_length=100, blank=True, null=True)
    ip_address = models.CharField(max_length=64, blank=True, null=True)
    notes = models.TextField(blank=True, null=True)

    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    objects = AttendanceLogQuerySet.as_manager()

    class Meta:
        db_table = 'labs_attendancelog'
        ordering = ['-check_in_time']
        constraints = [
            models.UniqueConstraint(
                fields=['user', 'laboratory'],
                condition=Q(check_out_time__isnull=True),
                name='one_open_session_per_user_lab'
            ),
        ]
        indexes = [
            models.Index(fields=['user', 'laboratory'], name='labs_attend_user_id_6d9f2a_idx'),
            models.Index(fields=['check_in_time'], name='labs_attend_check_i_1a7c3e_idx'),
        ]

    def __str__(self):
        return f"{self.user.username} @ {self.laboratory.name} ({self.check_in_time:%Y-%m-%d %H:%M})"

    @property
    def is_open(self):
        return self.check_out_time is None

    @property
    def duration(self):
        if self.check_out_time is None:
            return None
        return self.check_out_time - self.check_in_time


class Alert(models.Model):
    """Operational alerts raised for a laboratory."""
    TYPE_CHOICES = [
        ('equipment_missing', 'Equipment Missing'),
        ('unauthorized_access', 'Unauthorized Access'),
        ('overcapacity', 'Over Capacity'),
        ('equipment_damaged', 'Equipment Damaged'),
        ('system_error', 'System Error'),
    ]
    SEVERITY_CHOICES = [
        ('low', 'Low'),
        ('medium', 'Medium'),
        ('high', 'High'),
        ('critical', 'Critical'),
    ]

    alert_type = models.CharField(max_length=30, choices=TYPE_CHOICES)
    laboratory = models.ForeignKey(
        Laboratory, on_delete=models.CASCADE, null=True, blank=True, related_name='alerts'
    )
    severity = models.CharField(max_length=10, choices=SEVERITY_CHOICES)
    title = models.CharField(max_length=200)
    message = models.TextField()
    resolved = models.BooleanField(default=False)
    resolved_by = models.ForeignKey(
        User, on_delete=models.SET_NULL, null=True, blank=True, related_name='resolved_alerts'
    )
    resolved_at = models.DateTimeField(null=True, blank=True)
    data = models.JSONField(default=dict, blank=True)

    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        db_table = 'labs_alert'
        ordering = ['-created_at']

    def __str__(self):
        return f"[{self.severity}] {self.title}"

    def resolve(self, user):
        self.resolved = True
        self.resolved_by = user
        self.resolved_at = timezone.now()
        self.save(update_fields=['resolved', 'resolved_by', 'resolved_at'])


class PasswordResetTokenQuerySet(models.QuerySet):

    def purge_expired(self, now=None):
        """Delete expired and used tokens. Returns the number removed."""
        now = now or timezone.now()
        deleted, _ = self.filter(Q(expires_at__lte=now) | Q(is_used=True)).delete()
        return deleted


def default_reset_token_expiry():
    hours = getattr(settings, 'PASSWORD_RESET_TOKEN_TTL_HOURS', 1)
    return timezone.now() + timedelta(hours=hours)


class PasswordResetToken(models.Model):
    """Password reset tokens for users."""
    user = models.ForeignKey(User, on_delete=models.CASCADE, related_name='password_reset_tokens')
    token = models.UUIDField(default=uuid.uuid4, unique=True)
    created_at = models.DateTimeField(auto_now_add=True)
    expires_at = models.DateTimeField(default=default_reset_token_expiry)
    is_used = models.BooleanField(default=False)

    objects = PasswordResetTokenQuerySet.as_manager()

    class Meta:
        db_table = 'labs_passwordresettoken'

    def is_expired(self):
        return timezone.now() > self.expires_at

    def __str__(self):
        return f"Password reset token for {self.user.username}"
